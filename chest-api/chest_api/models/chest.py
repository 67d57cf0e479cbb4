import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chest_api.core.db import Base

if TYPE_CHECKING:
    from .chest_entry import ChestEntry


CHEST_NAME_MAX_LENGTH = 50


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Chest(Base):
    """
    Named inventory container.

    The entry list is the unit of persistence: it is always mutated under the
    chest lock and committed as a whole (see services/ledger.py).
    """
    __tablename__ = "chests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(CHEST_NAME_MAX_LENGTH), unique=True, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    entries: Mapped[List["ChestEntry"]] = relationship(
        "ChestEntry",
        back_populates="chest",
        cascade="all, delete-orphan",
        order_by="ChestEntry.id",
    )
