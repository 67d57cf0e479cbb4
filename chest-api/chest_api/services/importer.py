"""
Bulk item import from the scraped JSON catalog ({"items": [...]}).

Upsert key: catalog id ("id") when present, else the name (case-insensitive).
Field names in the source file are the French ones of the wiki export.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import func
from sqlalchemy.orm import Session

from chest_api.core.errors import InvalidInput, NotFound
from chest_api.models.item import Item
from chest_api.services.catalog import normalize_tier

logger = logging.getLogger(__name__)

# source field -> Item attribute
FIELD_MAP = {
    "nom": "name",
    "categorie": "category",
    "sous_categorie": "sub_category",
    "unique": "is_unique",
    "description": "description",
    "statistiques": "stats",
    "sources": "sources",
    "image_url": "image_url",
    "image_local": "image_local",
    "tier_icon_url": "tier_icon_url",
    "tier_icon_local": "tier_icon_local",
    "url_fiche": "sheet_url",
    "quantite": "quantity",
}


@dataclass
class ImportResult:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0


def _catalog_id(raw) -> int | None:
    if raw is None or raw == "" or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _apply(item: Item, data: dict) -> None:
    for src, attr in FIELD_MAP.items():
        if src in data:
            value = data[src]
            if attr in ("stats", "sources") and value is None:
                value = []
            if attr == "is_unique":
                value = bool(value)
            if attr == "quantity":
                value = int(value or 0)
            setattr(item, attr, value)
    if "tier" in data:
        item.tier = normalize_tier(data["tier"])


def import_items(db: Session, items: list[dict]) -> ImportResult:
    result = ImportResult()
    for data in items:
        if not isinstance(data, dict):
            result.skipped += 1
            continue
        catalog_id = _catalog_id(data.get("id"))
        name = (data.get("nom") or "").strip()
        if catalog_id is None and not name:
            result.skipped += 1
            continue

        if catalog_id is not None:
            item = db.query(Item).filter(Item.catalog_id == catalog_id).first()
        else:
            item = db.query(Item).filter(func.lower(Item.name) == name.lower()).first()

        if item is None:
            item = Item(catalog_id=catalog_id, name=name)
            db.add(item)
            result.inserted += 1
        else:
            result.updated += 1
        _apply(item, data)
        db.flush()

    db.commit()
    logger.info(f"[Import] {result.inserted} inserted, {result.updated} updated, {result.skipped} skipped")
    return result


def import_items_file(db: Session, path: str | Path) -> ImportResult:
    path = Path(path)
    if not path.exists():
        raise NotFound("File not found")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise InvalidInput(f"Invalid JSON file: {e}")
    items = data.get("items") if isinstance(data, dict) else None
    return import_items(db, items if isinstance(items, list) else [])
