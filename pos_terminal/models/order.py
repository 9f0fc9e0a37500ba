"""Order, order line and selected add-on models."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_terminal.db.base import Base

MONEY = Numeric(12, 3)


class OrderType(str, enum.Enum):
    """How the order is fulfilled."""

    DELIVERY = "delivery"
    PICKUP = "pickup"
    DINE_IN = "dine_in"


class OrderStatus(str, enum.Enum):
    """Lifecycle state of an order; only ``open`` orders accept mutations."""

    OPEN = "open"
    COMPLETED = "completed"
    CLOSED = "closed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.CLOSED, OrderStatus.CANCELLED}
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    """One tab on a terminal, from empty cart to settled order."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    number: Mapped[str] = mapped_column(String(48), nullable=False)
    terminal_id: Mapped[int] = mapped_column(ForeignKey("terminals.id"), nullable=False, index=True)
    order_type: Mapped[OrderType] = mapped_column(
        Enum(OrderType, name="order_type", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OrderType.PICKUP,
    )
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OrderStatus.OPEN,
        index=True,
    )
    tab_position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    subtotal: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.000"))
    discount_total: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.000"))
    delivery_fee: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.000"))
    grand_total: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.000"))

    promo_id: Mapped[int | None] = mapped_column(ForeignKey("promos.id"), nullable=True)
    promocode: Mapped[str | None] = mapped_column(String(64), nullable=True)

    table_id: Mapped[int | None] = mapped_column(ForeignKey("dining_tables.id"), nullable=True)
    table_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    covers: Mapped[int | None] = mapped_column(Integer, nullable=True)

    city_id: Mapped[int | None] = mapped_column(ForeignKey("cities.id"), nullable=True)
    void_delivery_fee: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    customer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_mobile: Mapped[str | None] = mapped_column(String(32), nullable=True)
    customer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    customer_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_method_slug: Mapped[str | None] = mapped_column(String(64), nullable=True)

    payment_link_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_link_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    payment_link_verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("pos_users.id"), nullable=True)
    completed_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("pos_users.id"), nullable=True)
    printed_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("pos_users.id"), nullable=True)

    opened_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
    last_accessed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    printed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    lines: Mapped[list["OrderLine"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
    )
    promo: Mapped["Promo | None"] = relationship("Promo")

    __table_args__ = (
        Index("uq_orders_number", "number", unique=True),
        Index("ix_orders_terminal_status", "terminal_id", "status"),
    )

    @property
    def is_open(self) -> bool:
        return self.status == OrderStatus.OPEN


class OrderLine(Base):
    """Priced snapshot of a catalog item on an order."""

    __tablename__ = "order_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("catalog_items.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    base_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    addons_unit_total: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.000"))
    unit_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    line_total: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    addon_signature: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    item_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    order: Mapped[Order] = relationship(back_populates="lines")
    addons: Mapped[list["OrderLineAddon"]] = relationship(
        back_populates="line",
        cascade="all, delete-orphan",
        order_by="OrderLineAddon.id",
    )


class OrderLineAddon(Base):
    """Add-on chosen when the line was created; never edited afterwards."""

    __tablename__ = "order_line_addons"

    id: Mapped[int] = mapped_column(primary_key=True)
    line_id: Mapped[int] = mapped_column(ForeignKey("order_lines.id"), nullable=False, index=True)
    addon_id: Mapped[int] = mapped_column(ForeignKey("addons.id"), nullable=False)
    group_id: Mapped[int] = mapped_column(ForeignKey("addon_groups.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    line: Mapped[OrderLine] = relationship(back_populates="addons")
