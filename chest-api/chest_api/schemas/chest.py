"""
Chest schemas - wire format keeps the historical camelCase keys (_id, itemId, itemMongoId)
"""
from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from chest_api.schemas.item import ItemOut


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ═══════════════════════════════════════════════════════════
# INPUT
# ═══════════════════════════════════════════════════════════

class ChestCreateIn(BaseModel):
    name: Optional[str] = None


class ChestRenameIn(BaseModel):
    newName: Optional[str] = None


class ChestPatchIn(BaseModel):
    name: Optional[str] = None


class MoveIn(BaseModel):
    """Exactly one of itemId / itemMongoId / name; inc > 0 deposit, < 0 withdraw"""
    itemId: Optional[Union[int, float, str]] = None
    itemMongoId: Optional[str] = None
    name: Optional[str] = None
    inc: Optional[Union[int, float, str]] = None


class ChestDeleteIn(BaseModel):
    migrateTo: Optional[str] = None
    confirmed: bool = False


# ═══════════════════════════════════════════════════════════
# OUTPUT
# ═══════════════════════════════════════════════════════════

class ChestEntryOut(WireModel):
    itemId: Optional[int] = None
    itemMongoId: Optional[UUID] = None
    quantity: int


class ChestOut(WireModel):
    id: UUID = Field(alias="_id")
    name: str
    created_at: datetime = Field(alias="createdAt")
    items: list[ChestEntryOut] = []


class ChestSummaryOut(WireModel):
    id: UUID = Field(alias="_id")
    name: str
    created_at: datetime = Field(alias="createdAt")
    entries: int
    total_quantity: int = Field(alias="totalQuantity")


class ChestRenameOut(BaseModel):
    ok: bool = True
    chest: ChestOut


class ChestItemLineOut(WireModel):
    itemId: Optional[int] = None
    itemMongoId: Optional[UUID] = None
    quantity: int
    item: Optional[ItemOut] = None


class ChestItemsOut(BaseModel):
    chestId: UUID
    name: str
    items: list[ChestItemLineOut]


class MoveOut(BaseModel):
    ok: bool = True
    oldQuantity: int
    newQuantity: int


class AggregateOut(BaseModel):
    totalItems: int
    items: list[ChestItemLineOut]


class DeletedChestOut(WireModel):
    id: UUID = Field(alias="_id")
    name: str
    itemCount: int


class ChestRefOut(WireModel):
    id: UUID = Field(alias="_id")
    name: str


class MigrationOut(BaseModel):
    itemCount: int
    targetChest: Optional[ChestRefOut] = None
    leftoverSource: bool = False


class ChestDeleteOut(BaseModel):
    ok: bool = True
    deleted: DeletedChestOut
    migratedTo: Optional[UUID] = None
    migration: Optional[MigrationOut] = None
