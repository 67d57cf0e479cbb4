import uuid

from sqlalchemy import Boolean, Integer, String, Text, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from chest_api.core.db import Base


class Item(Base):
    """
    Game items catalog (filled by the bulk import).

    Two identities:
    - id: database identity, always present
    - catalog_id: numeric in-game id, optional but unique when present
    The ledger prefers catalog_id when an item has one.
    """
    __tablename__ = "items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    catalog_id: Mapped[int | None] = mapped_column(Integer, unique=True, nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)

    category: Mapped[str | None] = mapped_column(String(100), index=True)
    sub_category: Mapped[str | None] = mapped_column(String(100))
    tier: Mapped[str | None] = mapped_column(String(30), comment="numeric tiers stored as text (e.g. '3')")
    is_unique: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    stats: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    sources: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    image_url: Mapped[str | None] = mapped_column(String(500))
    image_local: Mapped[str | None] = mapped_column(String(500))
    tier_icon_url: Mapped[str | None] = mapped_column(String(500))
    tier_icon_local: Mapped[str | None] = mapped_column(String(500))
    sheet_url: Mapped[str | None] = mapped_column(String(500))

    # Legacy catalog-level stock counter (PATCH /items/{id}/quantite)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
