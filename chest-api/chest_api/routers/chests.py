import uuid

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from chest_api.core.errors import InvalidInput, ItemNotFound
from chest_api.core.security import CurrentUser
from chest_api.deps import get_db, require_role
from chest_api.models.chest import Chest
from chest_api.schemas.chest import (
    AggregateOut,
    ChestCreateIn,
    ChestDeleteIn,
    ChestDeleteOut,
    ChestEntryOut,
    ChestItemLineOut,
    ChestItemsOut,
    ChestOut,
    ChestPatchIn,
    ChestRefOut,
    ChestRenameIn,
    ChestRenameOut,
    ChestSummaryOut,
    DeletedChestOut,
    MigrationOut,
    MoveIn,
    MoveOut,
)
from chest_api.schemas.item import ItemOut
from chest_api.services import chest_store, ledger
from chest_api.services.identity import parse_item_ref

router = APIRouter(prefix="/chests", tags=["chests"])


def _parse_chest_id(raw: str, label: str = "chest id") -> uuid.UUID:
    raw = (raw or "").strip()
    if not raw or raw in ("null", "undefined"):
        raise InvalidInput(f"Invalid {label}")
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise InvalidInput(f"Invalid {label} (bad format)")


def _chest_out(c: Chest) -> ChestOut:
    return ChestOut(
        id=c.id,
        name=c.name,
        created_at=c.created_at,
        items=[
            ChestEntryOut(itemId=e.catalog_id, itemMongoId=e.item_id, quantity=e.quantity)
            for e in c.entries
        ],
    )


def _line_out(catalog_id, item_id, quantity, item) -> ChestItemLineOut:
    return ChestItemLineOut(
        itemId=catalog_id,
        itemMongoId=item_id,
        quantity=quantity,
        item=ItemOut.from_item(item) if item is not None else None,
    )


@router.get("", response_model=list[ChestSummaryOut])
def list_chests(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    """Chest summaries (entry count and total quantity, no item details)."""
    return [
        ChestSummaryOut(
            id=s.id,
            name=s.name,
            created_at=s.created_at,
            entries=s.entries,
            total_quantity=s.total_quantity,
        )
        for s in chest_store.list_summaries(db)
    ]


@router.post("", response_model=ChestOut, status_code=201)
def create_chest(
    payload: ChestCreateIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    chest = chest_store.create(db, payload.name, actor=user)
    return _chest_out(chest)


# Must stay above /{chest_id}
@router.get("/aggregate", response_model=AggregateOut)
def aggregate_chests(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    """Total quantity per item over every chest."""
    rows = ledger.aggregate(db)
    return AggregateOut(
        totalItems=len(rows),
        items=[_line_out(r.catalog_id, r.item_id, r.quantity, r.item) for r in rows],
    )


@router.get("/{chest_id}", response_model=ChestOut)
def get_chest(
    chest_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    return _chest_out(chest_store.get(db, _parse_chest_id(chest_id)))


@router.patch("/{chest_id}", response_model=ChestOut)
def update_chest(
    chest_id: str,
    payload: ChestPatchIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    """Legacy rename (body: {name})."""
    chest = chest_store.rename(db, _parse_chest_id(chest_id), payload.name, actor=user)
    return _chest_out(chest)


@router.patch("/{chest_id}/rename", response_model=ChestRenameOut)
def rename_chest(
    chest_id: str,
    payload: ChestRenameIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    chest = chest_store.rename(db, _parse_chest_id(chest_id), payload.newName, actor=user)
    return ChestRenameOut(chest=_chest_out(chest))


@router.get("/{chest_id}/items", response_model=ChestItemsOut)
def get_chest_items(
    chest_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    """Chest entries joined with catalog details (item=null if gone from the catalog)."""
    chest, lines = chest_store.get_items(db, _parse_chest_id(chest_id))
    return ChestItemsOut(
        chestId=chest.id,
        name=chest.name,
        items=[_line_out(l.catalog_id, l.item_id, l.quantity, l.item) for l in lines],
    )


@router.post("/{chest_id}/move", response_model=MoveOut)
def move_item(
    chest_id: str,
    payload: MoveIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    """Deposit (inc > 0) or withdraw (inc < 0) an item."""
    cid = _parse_chest_id(chest_id)
    ref = parse_item_ref(payload.itemId, payload.itemMongoId, payload.name)
    try:
        result = ledger.move(db, cid, ref, payload.inc, actor=user)
    except ItemNotFound as e:
        # Unknown item is a bad request body here, not a missing resource
        raise InvalidInput(e.detail) from e

    return MoveOut(oldQuantity=result.old_quantity, newQuantity=result.new_quantity)


@router.delete("/{chest_id}", response_model=ChestDeleteOut)
def delete_chest(
    chest_id: str,
    payload: ChestDeleteIn | None = Body(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role),
):
    """
    Delete a chest.
    - empty chest: deleted directly
    - non-empty: requires migrateTo (entries merged into that chest) or confirmed=true
    """
    payload = payload or ChestDeleteIn()
    cid = _parse_chest_id(chest_id)
    migrate_to = (
        _parse_chest_id(payload.migrateTo, "destination chest id")
        if payload.migrateTo else None
    )

    result = ledger.delete_chest(db, cid, migrate_to=migrate_to, confirmed=payload.confirmed, actor=user)

    migration = None
    if result.migrated_to is not None:
        migration = MigrationOut(
            itemCount=result.moved_quantity,
            targetChest=ChestRefOut(id=result.migrated_to, name=result.target_name),
            leftoverSource=result.leftover_source,
        )

    return ChestDeleteOut(
        deleted=DeletedChestOut(id=result.chest_id, name=result.name, itemCount=result.item_count),
        migratedTo=result.migrated_to,
        migration=migration,
    )
