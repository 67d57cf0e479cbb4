import uuid

from sqlalchemy import CheckConstraint, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chest_api.core.db import Base


class ChestEntry(Base):
    """
    One (item, quantity) line in a chest.

    Exactly one of catalog_id / item_id references the item. The reference is
    checked against the catalog when the entry is created, never afterwards,
    so item_id carries no foreign key.
    """
    __tablename__ = "chest_entries"
    __table_args__ = (
        UniqueConstraint("chest_id", "catalog_id", name="chest_entries_chest_id_catalog_id_key"),
        UniqueConstraint("chest_id", "item_id", name="chest_entries_chest_id_item_id_key"),
        CheckConstraint("quantity >= 0", name="chest_entries_quantity_check"),
        CheckConstraint(
            "(catalog_id IS NULL) <> (item_id IS NULL)",
            name="chest_entries_single_ref_check",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    chest_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("chests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    catalog_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    item_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    chest = relationship("Chest", back_populates="entries")
