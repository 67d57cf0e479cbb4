import csv
import io

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from chest_api.core.security import CurrentUser
from chest_api.deps import get_current_user, get_db
from chest_api.schemas.item import ItemOut, ItemPageOut, ItemSuggestionOut, QuantityPatchIn
from chest_api.services import catalog
from chest_api.services.identity import find_item_by_name

router = APIRouter(prefix="/items", tags=["items"])


@router.get("", response_model=ItemPageOut)
def list_items(
    q: str | None = Query(None, description="Name contains (case-insensitive)"),
    categorie: str | None = Query(None),
    sous_categorie: str | None = Query(None),
    tier: str | None = Query(None, description="Numeric or symbolic tier"),
    page: str | None = Query(None),
    limit: str | None = Query(None),
    sort: str | None = Query(None, description="field:dir (ex: nom:asc, quantite:desc)"),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """List/paginate/filter the catalog. page >= 1, limit clamped to [1, 100]."""
    rows, total, page_n, limit_n = catalog.list_items(
        db,
        q=q, categorie=categorie, sous_categorie=sous_categorie, tier=tier,
        page=page if page is not None else 1,
        limit=limit if limit is not None else catalog.DEFAULT_LIMIT,
        sort=sort,
    )
    return ItemPageOut(
        items=[ItemOut.from_item(it) for it in rows],
        total=total,
        page=page_n,
        limit=limit_n,
    )


@router.get("/suggest", response_model=list[ItemSuggestionOut])
def suggest_items(
    q: str | None = Query(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return [ItemSuggestionOut.from_item(it) for it in catalog.suggest(db, q or "", limit=10)]


@router.get("/search", response_model=list[ItemOut])
def search_items(
    q: str | None = Query(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Same ranking as /suggest, larger page and full projection (used by the bot)."""
    return [ItemOut.from_item(it) for it in catalog.suggest(db, q or "", limit=25)]


@router.get("/exact/{name}", response_model=ItemOut)
def get_item_exact(
    name: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    if not name.strip():
        raise HTTPException(status_code=400, detail="Name required")
    item = find_item_by_name(db, name)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return ItemOut.from_item(item)


@router.get("/export.csv")
def export_items_csv(
    q: str | None = Query(None),
    categorie: str | None = Query(None),
    sous_categorie: str | None = Query(None),
    tier: str | None = Query(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    rows = catalog.export_items(db, q=q, categorie=categorie, sous_categorie=sous_categorie, tier=tier)

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["id", "nom", "categorie", "sous_categorie", "quantite"])
    for it in rows:
        writer.writerow([
            it.catalog_id if it.catalog_id is not None else "",
            it.name or "",
            it.category or "",
            it.sub_category or "",
            it.quantity or 0,
        ])

    return Response(
        content=buf.getvalue(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="items_quantites.csv"'},
    )


@router.patch("/{catalog_id}/quantite", response_model=ItemOut)
def update_item_quantity(
    catalog_id: int,
    payload: QuantityPatchIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Set and/or increment the catalog-level quantity counter."""
    if payload.set is None and payload.inc is None:
        raise HTTPException(status_code=400, detail="set or inc required")

    item = catalog.update_quantity(db, catalog_id, set_value=payload.set, inc=payload.inc, actor=user)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return ItemOut.from_item(item)
