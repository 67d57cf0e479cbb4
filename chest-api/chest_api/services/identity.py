"""
Item identity resolution.

A caller names an item one of three ways (numeric catalog id, database id or
exact name). The reference is resolved once, at the boundary, into a
canonical key: the catalog id when the item has one, else its database id.
Chest entries are matched on that key only.
"""
import re
import uuid
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from chest_api.core.db import INT_MAX
from chest_api.core.errors import InvalidReference, ItemNotFound
from chest_api.models.chest_entry import ChestEntry
from chest_api.models.item import Item


# ═══════════════════════════════════════════════════════════
# CALLER REFERENCES
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CatalogRef:
    catalog_id: int


@dataclass(frozen=True)
class DatabaseRef:
    item_id: uuid.UUID


@dataclass(frozen=True)
class NameRef:
    name: str


ItemRef = Union[CatalogRef, DatabaseRef, NameRef]


# ═══════════════════════════════════════════════════════════
# CANONICAL KEYS
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CatalogKey:
    catalog_id: int

    def new_entry(self, quantity: int) -> ChestEntry:
        return ChestEntry(catalog_id=self.catalog_id, quantity=quantity)

    def __str__(self) -> str:
        return str(self.catalog_id)


@dataclass(frozen=True)
class DatabaseKey:
    item_id: uuid.UUID

    def new_entry(self, quantity: int) -> ChestEntry:
        return ChestEntry(item_id=self.item_id, quantity=quantity)

    def __str__(self) -> str:
        return str(self.item_id)


CanonicalItemRef = Union[CatalogKey, DatabaseKey]


_INTEGER_RE = re.compile(r"^[+-]?\d+$")


def parse_integer(value) -> Optional[int]:
    """
    int, integral float, or integer text ("12", "-3", "4.0") -> int.
    Digit strings go through int() so large values keep every digit.
    Anything else (bool, 1.5, "abc", inf) -> None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        if _INTEGER_RE.match(text):
            return int(text)
        number = float(text)
    except ValueError:
        return None
    return int(number) if number.is_integer() else None


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_item_ref(item_id=None, item_mongo_id=None, name=None) -> ItemRef:
    """
    Build an ItemRef from the raw move body fields.

    When several are sent the numeric id wins, then the database id, then the
    name. Sending none of them is an InvalidReference.
    """
    if not _is_blank(item_id):
        number = parse_integer(item_id)
        if number is None:
            raise InvalidReference("itemId invalid")
        if abs(number) > INT_MAX:
            raise InvalidReference("itemId out of range")
        return CatalogRef(number)

    if not _is_blank(item_mongo_id):
        try:
            return DatabaseRef(uuid.UUID(str(item_mongo_id).strip()))
        except ValueError:
            raise InvalidReference("itemMongoId invalid")

    if not _is_blank(name):
        return NameRef(str(name).strip())

    raise InvalidReference()


def find_item(db: Session, ref: ItemRef) -> Optional[Item]:
    if isinstance(ref, CatalogRef):
        return db.query(Item).filter(Item.catalog_id == ref.catalog_id).first()
    if isinstance(ref, DatabaseRef):
        return db.query(Item).filter(Item.id == ref.item_id).first()
    return find_item_by_name(db, ref.name)


def find_item_by_name(db: Session, name: str) -> Optional[Item]:
    """Exact, case-insensitive match on the full name."""
    name = name.strip()
    if not name:
        return None
    return db.query(Item).filter(func.lower(Item.name) == name.lower()).first()


def canonical_key(item: Item) -> CanonicalItemRef:
    if item.catalog_id is not None:
        return CatalogKey(item.catalog_id)
    return DatabaseKey(item.id)


def resolve(db: Session, ref: ItemRef) -> tuple[Item, CanonicalItemRef]:
    item = find_item(db, ref)
    if item is None:
        raise ItemNotFound()
    return item, canonical_key(item)


def entry_key(entry: ChestEntry) -> CanonicalItemRef:
    if entry.catalog_id is not None:
        return CatalogKey(entry.catalog_id)
    return DatabaseKey(entry.item_id)


def matches(entry: ChestEntry, key: CanonicalItemRef) -> bool:
    return entry_key(entry) == key


def find_entry(entries: Iterable[ChestEntry], key: CanonicalItemRef) -> Optional[ChestEntry]:
    for entry in entries:
        if matches(entry, key):
            return entry
    return None
