"""
Inventory ledger operations
- move: deposit / withdraw on one chest
- delete_chest: delete, optionally migrating the entries into another chest
- aggregate: total quantity per item across all chests

Invariants kept on every chest:
- quantity is never negative and zero rows are removed
- at most one entry per canonical item key
Every read-modify-write runs under the chest lock (core/locks.py) with the
chest row loaded FOR UPDATE, and the entry list is committed as a whole.
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chest_api.core.errors import (
    ChestNotFound,
    InsufficientQuantity,
    InvalidDelta,
    InvalidInput,
    InternalError,
    RequiresDecision,
)
from chest_api.core.db import INT_MAX
from chest_api.core.locks import chest_locks
from chest_api.models.chest import Chest
from chest_api.models.chest_entry import ChestEntry
from chest_api.models.item import Item
from chest_api.services import chest_store
from chest_api.services.activity_logger import activity_logger
from chest_api.services.identity import (
    CanonicalItemRef,
    ItemRef,
    entry_key,
    find_entry,
    parse_integer,
    resolve,
)

logger = logging.getLogger(__name__)


@dataclass
class MoveResult:
    chest: Chest
    item: Item
    key: CanonicalItemRef
    old_quantity: int
    new_quantity: int


@dataclass
class DeleteResult:
    chest_id: uuid.UUID
    name: str
    item_count: int
    migrated_to: Optional[uuid.UUID] = None
    target_name: Optional[str] = None
    moved_quantity: int = 0
    leftover_source: bool = False


@dataclass
class AggregateRow:
    catalog_id: Optional[int]
    item_id: Optional[uuid.UUID]
    quantity: int
    item: Optional[Item] = field(default=None)


def parse_delta(value) -> int:
    """Accepts ints and integral floats/strings; zero is rejected."""
    delta = parse_integer(value)
    if delta is None or delta == 0:
        raise InvalidDelta()
    if abs(delta) > INT_MAX:
        raise InvalidDelta("inc out of range")
    return delta


def _drop_empty(chest: Chest) -> None:
    for entry in [e for e in chest.entries if e.quantity == 0]:
        chest.entries.remove(entry)


# ═══════════════════════════════════════════════════════════
# MOVE (DEPOSIT / WITHDRAW)
# ═══════════════════════════════════════════════════════════

def move(db: Session, chest_id: uuid.UUID, ref: ItemRef, delta, actor=None) -> MoveResult:
    delta = parse_delta(delta)
    item, key = resolve(db, ref)

    with chest_locks.hold(chest_id):
        try:
            chest = chest_store.load_for_update(db, chest_id)
        except ChestNotFound:
            chest_locks.discard(chest_id)
            raise
        entry = find_entry(chest.entries, key)

        old_qty = entry.quantity if entry else 0
        new_qty = old_qty + delta
        if new_qty < 0:
            db.rollback()
            raise InsufficientQuantity()
        if new_qty > INT_MAX:
            db.rollback()
            raise InvalidDelta("Resulting quantity out of range")

        if entry is None:
            chest.entries.append(key.new_entry(new_qty))
        else:
            entry.quantity = new_qty
        _drop_empty(chest)

        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

    logger.info(f"[Ledger] {chest.name}: {item.name} {old_qty} -> {new_qty} ({delta:+d})")
    activity_logger.quantity_changed(
        db, actor, chest_id, chest.name, str(key), item.name, old_qty, new_qty
    )
    return MoveResult(chest=chest, item=item, key=key, old_quantity=old_qty, new_quantity=new_qty)


# ═══════════════════════════════════════════════════════════
# DELETE (WITH OPTIONAL MIGRATION)
# ═══════════════════════════════════════════════════════════

def _merge_into(target: Chest, source_entries: list[ChestEntry]) -> int:
    moved = 0
    for src in source_entries:
        existing = find_entry(target.entries, entry_key(src))
        if existing is not None:
            if existing.quantity + src.quantity > INT_MAX:
                raise InvalidInput(f"Quantity of item {entry_key(src)} would overflow in the destination chest")
            existing.quantity += src.quantity
        else:
            target.entries.append(
                ChestEntry(catalog_id=src.catalog_id, item_id=src.item_id, quantity=src.quantity)
            )
        moved += src.quantity
    return moved


def _lock_rows(db: Session, chest_ids: list[uuid.UUID]) -> dict[uuid.UUID, Optional[Chest]]:
    """Row-lock several chests in the same order as ``chest_locks.hold``."""
    return {cid: chest_store.find_for_update(db, cid) for cid in sorted(set(chest_ids), key=str)}


def _remove_source(db: Session, chest_id: uuid.UUID) -> bool:
    """
    Clear then delete the source chest after its stock is safe in the target.
    Failures are logged, not raised: the stock already lives in the target.
    """
    try:
        source = chest_store.load_for_update(db, chest_id)
        source.entries.clear()
        db.commit()
    except ChestNotFound:
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[Ledger] Could not clear source chest {chest_id} after migration: {e}")
        return False

    try:
        db.delete(source)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[Ledger] Could not delete source chest {chest_id} after migration: {e}")
        return False
    return True


def delete_chest(
    db: Session,
    chest_id: uuid.UUID,
    migrate_to: Optional[uuid.UUID] = None,
    confirmed: bool = False,
    actor=None,
) -> DeleteResult:
    if migrate_to is not None and migrate_to == chest_id:
        raise InvalidInput("Cannot migrate a chest into itself")

    lock_ids = [chest_id] + ([migrate_to] if migrate_to is not None else [])
    with chest_locks.hold(*lock_ids):
        rows = _lock_rows(db, lock_ids)
        source = rows[chest_id]
        target = rows.get(migrate_to) if migrate_to is not None else None
        if source is None:
            db.rollback()
            chest_locks.discard(chest_id)
            raise ChestNotFound()
        name = source.name
        entry_count = len(source.entries)

        if entry_count and migrate_to is None and not confirmed:
            candidates = [
                {"_id": str(c.id), "name": c.name} for c in chest_store.other_chests(db, chest_id)
            ]
            db.rollback()
            raise RequiresDecision(
                requiresMigration=True,
                itemCount=entry_count,
                availableChests=candidates,
            )

        result = DeleteResult(chest_id=chest_id, name=name, item_count=entry_count)

        if migrate_to is not None and entry_count:
            if target is None:
                db.rollback()
                raise ChestNotFound("Destination chest not found")
            source_entries = list(source.entries)
            try:
                result.moved_quantity = _merge_into(target, source_entries)
            except InvalidInput:
                db.rollback()
                raise
            result.migrated_to = target.id
            result.target_name = target.name
            result.item_count = result.moved_quantity or entry_count

            # Target first: once this commit succeeds the stock cannot be lost
            try:
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"[Ledger] Migration {chest_id} -> {migrate_to} failed: {e}")
                raise InternalError("Error while migrating items")

            result.leftover_source = not _remove_source(db, chest_id)
        else:
            if target is not None:
                result.migrated_to = target.id
                result.target_name = target.name
            try:
                db.delete(source)
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                raise

    if not result.leftover_source:
        chest_locks.discard(chest_id)

    if result.migrated_to is not None and result.moved_quantity:
        details = (
            f'Deleted chest "{name}", migrated {result.moved_quantity} items '
            f'to "{result.target_name}"'
        )
    else:
        details = f'Deleted chest "{name}"'
    logger.info(f"[Ledger] {details}")
    activity_logger.chest_deleted(db, actor, chest_id, name, details)
    return result


# ═══════════════════════════════════════════════════════════
# AGGREGATE
# ═══════════════════════════════════════════════════════════

def aggregate(db: Session) -> list[AggregateRow]:
    """
    Total quantity per item over every chest.

    Catalog ids and database ids are two separate key namespaces: an item
    referenced both ways in different chests yields two rows.
    """
    total = func.sum(ChestEntry.quantity)
    rows = (
        db.query(ChestEntry.catalog_id, ChestEntry.item_id, total)
        .group_by(ChestEntry.catalog_id, ChestEntry.item_id)
        .having(total > 0)
        .all()
    )

    by_num, by_obj = chest_store.load_items(
        db, [r[0] for r in rows], [r[1] for r in rows]
    )

    result = []
    for catalog_id, item_id, qty in rows:
        if catalog_id is not None:
            result.append(AggregateRow(catalog_id=catalog_id, item_id=None, quantity=int(qty), item=by_num.get(catalog_id)))
        else:
            result.append(AggregateRow(catalog_id=None, item_id=item_id, quantity=int(qty), item=by_obj.get(item_id)))

    result.sort(key=lambda r: (-r.quantity, str(r.catalog_id if r.catalog_id is not None else r.item_id)))
    return result
