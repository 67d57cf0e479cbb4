"""
Item catalog queries: filters, sort, pagination and name suggestions.
"""
import logging

from sqlalchemy import case, func
from sqlalchemy.orm import Query, Session

from chest_api.core.db import INT_MAX
from chest_api.core.errors import InvalidInput
from chest_api.models.item import Item
from chest_api.services.activity_logger import activity_logger

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100

# Wire (French) and model field names accepted by sort=field:dir
SORT_FIELDS = {
    "name": Item.name,
    "nom": Item.name,
    "catalog_id": Item.catalog_id,
    "id": Item.catalog_id,
    "category": Item.category,
    "categorie": Item.category,
    "sub_category": Item.sub_category,
    "sous_categorie": Item.sub_category,
    "tier": Item.tier,
    "quantity": Item.quantity,
    "quantite": Item.quantity,
}


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def clamp_page(page) -> int:
    try:
        page = int(page)
    except (TypeError, ValueError):
        return 1
    return max(1, page)


def clamp_limit(limit) -> int:
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return min(MAX_LIMIT, max(1, limit))


def normalize_tier(tier) -> str | None:
    """'3', 3, 3.0 -> '3'; symbolic tiers are kept as-is (trimmed)."""
    if tier is None:
        return None
    text = str(tier).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return text
    return str(int(number)) if number.is_integer() else text


def apply_filters(
    query: Query,
    q: str | None = None,
    categorie: str | None = None,
    sous_categorie: str | None = None,
    tier: str | None = None,
) -> Query:
    q = (q or "").strip()
    categorie = (categorie or "").strip()
    sous_categorie = (sous_categorie or "").strip()
    tier = normalize_tier(tier)

    if q:
        query = query.filter(Item.name.ilike(f"%{escape_like(q)}%", escape="\\"))
    if categorie:
        query = query.filter(func.lower(Item.category) == categorie.lower())
    if sous_categorie:
        query = query.filter(func.lower(Item.sub_category) == sous_categorie.lower())
    if tier:
        query = query.filter(func.lower(Item.tier) == tier.lower())
    return query


def parse_sort(sort: str | None):
    """sort=field:dir (ex: nom:asc, quantite:desc). Unknown fields fall back to name."""
    column, direction = Item.name, "asc"
    sort = (sort or "").strip()
    if sort:
        field_name, _, direction = sort.partition(":")
        column = SORT_FIELDS.get(field_name.strip().lower(), Item.name)
    order = column.desc() if direction.strip().lower() == "desc" else column.asc()
    return [order, Item.id.asc()]


def list_items(
    db: Session,
    q=None, categorie=None, sous_categorie=None, tier=None,
    page=1, limit=DEFAULT_LIMIT, sort=None,
) -> tuple[list[Item], int, int, int]:
    page = clamp_page(page)
    limit = clamp_limit(limit)
    query = apply_filters(db.query(Item), q, categorie, sous_categorie, tier)

    total = query.count()
    rows = query.order_by(*parse_sort(sort)).offset((page - 1) * limit).limit(limit).all()
    return rows, total, page, limit


def export_items(db: Session, q=None, categorie=None, sous_categorie=None, tier=None) -> list[Item]:
    query = apply_filters(db.query(Item), q, categorie, sous_categorie, tier)
    return query.order_by(Item.name.asc()).all()


def suggest(db: Session, q: str, limit: int = 10) -> list[Item]:
    """
    Names containing q, ranked:
    3 = name starts with q, 2 = a word starts with q, 1 = contains q
    """
    q = (q or "").strip()
    if not q:
        return []
    pattern = escape_like(q.lower())
    lowered = func.lower(Item.name)
    score = case(
        (lowered.like(f"{pattern}%", escape="\\"), 3),
        (lowered.like(f"% {pattern}%", escape="\\"), 2),
        else_=1,
    )
    return (
        db.query(Item)
        .filter(lowered.like(f"%{pattern}%", escape="\\"))
        .order_by(score.desc(), Item.name.asc())
        .limit(limit)
        .all()
    )


def update_quantity(
    db: Session, catalog_id: int, set_value: int | None = None, inc: int | None = None, actor=None,
) -> Item | None:
    """Legacy catalog-level counter: set first, then increment."""
    item = db.query(Item).filter(Item.catalog_id == catalog_id).with_for_update().first()
    if not item:
        return None
    old_qty = item.quantity or 0
    if set_value is not None:
        item.quantity = set_value
    if inc is not None:
        item.quantity = (item.quantity or 0) + inc
    if abs(item.quantity or 0) > INT_MAX:
        db.rollback()
        raise InvalidInput("quantity out of range")
    db.commit()
    db.refresh(item)

    logger.info(f"[Catalog] {item.name}: quantity {old_qty} -> {item.quantity}")
    activity_logger.item_quantity_updated(db, actor, catalog_id, item.name, old_qty, item.quantity)
    return item
