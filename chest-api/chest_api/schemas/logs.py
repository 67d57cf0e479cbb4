from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ActivityLogOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(alias="_id")
    userId: str
    username: str
    action: str
    chestId: Optional[str] = None
    chestName: Optional[str] = None
    itemId: Optional[str] = None
    itemName: Optional[str] = None
    oldQuantity: Optional[int] = None
    newQuantity: Optional[int] = None
    details: Optional[str] = None
    createdAt: datetime


class PaginationOut(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    hasNext: bool
    hasPrev: bool


class ActivityLogPageOut(BaseModel):
    logs: list[ActivityLogOut]
    pagination: PaginationOut


class ActionCountOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: str = Field(alias="_id")
    count: int


class LogStatsOut(BaseModel):
    totalLogs: int
    uniqueUsers: int
    uniqueChests: int
    recentActivity: int
    actionBreakdown: list[ActionCountOut]


class LogUserOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="_id")
    username: str
    lastActivity: datetime
