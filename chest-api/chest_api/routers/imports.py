from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from chest_api.core.config import settings
from chest_api.core.security import CurrentUser
from chest_api.deps import get_current_user, get_db
from chest_api.schemas.item import ImportIn, ImportOut
from chest_api.services.importer import import_items_file

router = APIRouter(prefix="/import", tags=["import"])


@router.post("", response_model=ImportOut)
def import_items(
    payload: ImportIn | None = Body(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Upsert the catalog from a JSON export ({"items": [...]})."""
    path = (payload.path if payload else None) or settings.ITEMS_IMPORT_PATH
    result = import_items_file(db, path)
    return ImportOut(inserted=result.inserted, updated=result.updated, skipped=result.skipped)
