"""Dining table model."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pos_terminal.db.base import Base

TABLE_STATUSES: tuple[str, ...] = ("available", "reserved", "occupied")


class DiningTable(Base):
    """Physical table; occupancy is a back-reference to the holding order."""

    __tablename__ = "dining_tables"

    id: Mapped[int] = mapped_column(primary_key=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    label: Mapped[str | None] = mapped_column(String(64), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="available")
    current_order_id: Mapped[int | None] = mapped_column(ForeignKey("orders.id", use_alter=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def name(self) -> str:
        return self.label or f"Table {self.number}"
