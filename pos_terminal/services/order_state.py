"""Order loading, pricing recompute and snapshot helpers shared by the engine."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from pos_terminal.models import City, Order, OrderLine
from pos_terminal.schemas.order import OrderLineRead, OrderRead, OrderSnapshot
from pos_terminal.services import pricing
from pos_terminal.services.errors import ConflictError, NotFoundError
from pos_terminal.services.promo_rules import is_promo_available, promo_terms
from pos_terminal.utils.time import utcnow


def get_order(db: Session, order_id: int) -> Order:
    """Return the order or raise ``NotFoundError``."""
    order: Order | None = db.get(Order, order_id)
    if order is None:
        raise NotFoundError("order not found", order_id=order_id)
    return order


def get_open_order(db: Session, order_id: int) -> Order:
    """Return an order that still accepts mutations."""
    order = db.scalar(select(Order).where(Order.id == order_id).with_for_update())
    if order is None:
        raise NotFoundError("order not found", order_id=order_id)
    if not order.is_open or order.is_locked:
        raise ConflictError("order is not open", order_id=order_id, status=order.status.value)
    return order


def get_line(db: Session, line_id: int) -> OrderLine:
    line: OrderLine | None = db.get(OrderLine, line_id)
    if line is None:
        raise NotFoundError("order line not found", line_id=line_id)
    return line


def resolve_delivery_fee(db: Session, order: Order) -> Decimal:
    """Return the city fee for the order, or zero when voided or unknown."""
    if order.void_delivery_fee or order.city_id is None:
        return pricing.ZERO
    city: City | None = db.get(City, order.city_id)
    if city is None:
        return pricing.ZERO
    return pricing.money(city.delivery_fee)


def recompute_order(db: Session, order: Order, *, now: datetime | None = None) -> pricing.Totals:
    """Recompute and store order totals from its persisted lines.

    The attached promo is re-resolved each time: once it leaves its window or
    is deactivated it stays attached but no longer discounts.
    """
    db.flush()
    lines: list[OrderLine] = list(db.scalars(select(OrderLine).where(OrderLine.order_id == order.id)).all())

    terms = None
    if order.promo is not None and is_promo_available(order.promo, now or utcnow()):
        terms = promo_terms(order.promo)

    totals = pricing.compute(order.order_type, lines, terms, resolve_delivery_fee(db, order))
    order.subtotal = totals.subtotal
    order.discount_total = totals.discount_total
    order.delivery_fee = totals.delivery_fee
    order.grand_total = totals.grand_total
    return totals


def build_snapshot(db: Session, order_id: int) -> OrderSnapshot:
    """Re-read the order and its lines from the database."""
    db.expire_all()
    order: Order | None = db.scalar(
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.lines).selectinload(OrderLine.addons))
    )
    if order is None:
        raise NotFoundError("order not found", order_id=order_id)
    return OrderSnapshot(
        order=OrderRead.model_validate(order),
        lines=[OrderLineRead.model_validate(line) for line in order.lines if line.qty > 0],
    )


def count_lines(db: Session, order_id: int) -> int:
    return len(db.scalars(select(OrderLine.id).where(OrderLine.order_id == order_id, OrderLine.qty > 0)).all())
