"""
Item schemas - wire names follow the catalog export (nom, categorie, ...)
"""
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from chest_api.models.item import Item


class ItemOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    db_id: UUID = Field(alias="_id")
    id: Optional[int] = None
    nom: str
    categorie: Optional[str] = None
    sous_categorie: Optional[str] = None
    tier: Optional[str] = None
    unique: bool = False
    description: Optional[str] = None
    statistiques: list[Any] = []
    sources: list[Any] = []
    image_url: Optional[str] = None
    image_local: Optional[str] = None
    tier_icon_url: Optional[str] = None
    tier_icon_local: Optional[str] = None
    url_fiche: Optional[str] = None
    quantite: int = 0

    @classmethod
    def from_item(cls, it: Item) -> "ItemOut":
        return cls(
            db_id=it.id,
            id=it.catalog_id,
            nom=it.name,
            categorie=it.category,
            sous_categorie=it.sub_category,
            tier=it.tier,
            unique=it.is_unique,
            description=it.description,
            statistiques=it.stats or [],
            sources=it.sources or [],
            image_url=it.image_url,
            image_local=it.image_local,
            tier_icon_url=it.tier_icon_url,
            tier_icon_local=it.tier_icon_local,
            url_fiche=it.sheet_url,
            quantite=it.quantity or 0,
        )


class ItemSuggestionOut(BaseModel):
    """Projection réduite pour l'autocomplétion"""
    model_config = ConfigDict(populate_by_name=True)

    db_id: UUID = Field(alias="_id")
    id: Optional[int] = None
    nom: str
    categorie: Optional[str] = None
    sous_categorie: Optional[str] = None
    image_url: Optional[str] = None
    image_local: Optional[str] = None
    url_fiche: Optional[str] = None

    @classmethod
    def from_item(cls, it: Item) -> "ItemSuggestionOut":
        return cls(
            db_id=it.id,
            id=it.catalog_id,
            nom=it.name,
            categorie=it.category,
            sous_categorie=it.sub_category,
            image_url=it.image_url,
            image_local=it.image_local,
            url_fiche=it.sheet_url,
        )


class ItemPageOut(BaseModel):
    items: list[ItemOut]
    total: int
    page: int
    limit: int


class QuantityPatchIn(BaseModel):
    set: Optional[int] = None
    inc: Optional[int] = None


class ImportIn(BaseModel):
    path: Optional[str] = None


class ImportOut(BaseModel):
    inserted: int
    updated: int
    skipped: int = 0
