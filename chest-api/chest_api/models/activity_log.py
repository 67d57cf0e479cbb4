import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from chest_api.core.db import Base
from chest_api.models.chest import utcnow

# Action groups used by the logs filters (actionType=chest|item|auth)
CHEST_ACTIONS = ("CREATE_CHEST", "DELETE_CHEST", "RENAME_CHEST")
ITEM_ACTIONS = ("ADD_ITEM", "REMOVE_ITEM", "UPDATE_ITEM_QUANTITY")
AUTH_ACTIONS = ("LOGIN", "LOGOUT")


class ActivityLog(Base):
    """Append-only audit trail, written after the business commit."""
    __tablename__ = "activity_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    action: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    chest_id: Mapped[str | None] = mapped_column(String(64), index=True)
    chest_name: Mapped[str | None] = mapped_column(String(100))
    item_id: Mapped[str | None] = mapped_column(String(64), index=True)
    item_name: Mapped[str | None] = mapped_column(String(200))
    old_quantity: Mapped[int | None] = mapped_column(Integer)
    new_quantity: Mapped[int | None] = mapped_column(Integer)
    details: Mapped[str | None] = mapped_column(Text)
    ip_address: Mapped[str | None] = mapped_column(String(64))
    user_agent: Mapped[str | None] = mapped_column(String(300))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True
    )
