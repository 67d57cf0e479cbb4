"""
Chest store: creation, rename, lookups and summaries.

Quantity mutations live in services/ledger.py.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chest_api.core.errors import ChestNotFound, DuplicateName, InvalidName
from chest_api.models.chest import CHEST_NAME_MAX_LENGTH, Chest
from chest_api.models.chest_entry import ChestEntry
from chest_api.models.item import Item
from chest_api.services.activity_logger import activity_logger

logger = logging.getLogger(__name__)


@dataclass
class ChestSummary:
    id: uuid.UUID
    name: str
    created_at: datetime
    entries: int
    total_quantity: int


@dataclass
class ChestLine:
    catalog_id: Optional[int]
    item_id: Optional[uuid.UUID]
    quantity: int
    item: Optional[Item]


def clean_name(raw) -> str:
    name = (raw or "").strip() if isinstance(raw, str) else ""
    if not name:
        raise InvalidName("name required")
    if len(name) > CHEST_NAME_MAX_LENGTH:
        raise InvalidName(f"name cannot exceed {CHEST_NAME_MAX_LENGTH} characters")
    return name


def find_by_name(db: Session, name: str, exclude_id: uuid.UUID | None = None) -> Optional[Chest]:
    """Case-insensitive lookup on the trimmed name."""
    q = db.query(Chest).filter(func.lower(Chest.name) == name.strip().lower())
    if exclude_id is not None:
        q = q.filter(Chest.id != exclude_id)
    return q.first()


def get(db: Session, chest_id: uuid.UUID) -> Chest:
    chest = db.query(Chest).filter(Chest.id == chest_id).first()
    if not chest:
        raise ChestNotFound()
    return chest


def find_for_update(db: Session, chest_id: uuid.UUID) -> Optional[Chest]:
    """
    Load a chest with its row locked (``FOR UPDATE``), or None.

    Must be called inside ``chest_locks.hold(chest_id)``; the entry list is
    reloaded so the caller sees the last committed state. Callers locking
    several rows go through them in ``str`` order, like ``chest_locks.hold``.
    """
    chest = (
        db.query(Chest)
        .filter(Chest.id == chest_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if chest is not None:
        db.expire(chest, ["entries"])
    return chest


def load_for_update(db: Session, chest_id: uuid.UUID, missing: str | None = None) -> Chest:
    chest = find_for_update(db, chest_id)
    if not chest:
        raise ChestNotFound(missing)
    return chest


def create(db: Session, raw_name, actor=None) -> Chest:
    name = clean_name(raw_name)
    if find_by_name(db, name):
        raise DuplicateName()

    chest = Chest(name=name)
    db.add(chest)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateName()
    db.refresh(chest)

    logger.info(f"[Chests] Created chest '{name}' ({chest.id})")
    activity_logger.chest_created(db, actor, chest.id, name)
    return chest


def rename(db: Session, chest_id: uuid.UUID, raw_name, actor=None) -> Chest:
    name = clean_name(raw_name)
    chest = get(db, chest_id)
    if find_by_name(db, name, exclude_id=chest.id):
        raise DuplicateName()

    old_name = chest.name
    chest.name = name
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateName()
    db.refresh(chest)

    logger.info(f"[Chests] Renamed chest {chest.id}: '{old_name}' -> '{name}'")
    activity_logger.chest_renamed(db, actor, chest.id, old_name, name)
    return chest


def list_summaries(db: Session) -> list[ChestSummary]:
    rows = (
        db.query(
            Chest.id,
            Chest.name,
            Chest.created_at,
            func.count(ChestEntry.id),
            func.coalesce(func.sum(ChestEntry.quantity), 0),
        )
        .outerjoin(ChestEntry, ChestEntry.chest_id == Chest.id)
        .group_by(Chest.id, Chest.name, Chest.created_at)
        .order_by(Chest.created_at, Chest.name)
        .all()
    )
    return [
        ChestSummary(id=cid, name=name, created_at=created_at, entries=int(count), total_quantity=int(total))
        for (cid, name, created_at, count, total) in rows
    ]


def other_chests(db: Session, chest_id: uuid.UUID) -> list[Chest]:
    return db.query(Chest).filter(Chest.id != chest_id).order_by(Chest.name).all()


def load_items(db: Session, catalog_ids, item_ids) -> tuple[dict[int, Item], dict[uuid.UUID, Item]]:
    """Catalog lookup maps for a set of entry references."""
    catalog_ids = set(i for i in catalog_ids if i is not None)
    item_ids = set(i for i in item_ids if i is not None)
    by_num: dict[int, Item] = {}
    by_obj: dict[uuid.UUID, Item] = {}
    if catalog_ids:
        for it in db.query(Item).filter(Item.catalog_id.in_(catalog_ids)).all():
            by_num[it.catalog_id] = it
    if item_ids:
        for it in db.query(Item).filter(Item.id.in_(item_ids)).all():
            by_obj[it.id] = it
    return by_num, by_obj


def get_items(db: Session, chest_id: uuid.UUID) -> tuple[Chest, list[ChestLine]]:
    chest = get(db, chest_id)
    by_num, by_obj = load_items(
        db,
        [e.catalog_id for e in chest.entries],
        [e.item_id for e in chest.entries],
    )
    lines = [
        ChestLine(
            catalog_id=e.catalog_id,
            item_id=e.item_id,
            quantity=e.quantity,
            item=by_num.get(e.catalog_id) if e.catalog_id is not None else by_obj.get(e.item_id),
        )
        for e in chest.entries
    ]
    return chest, lines
