"""Applying and removing promo codes on open orders."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pos_terminal.models import OrderLine, Promo
from pos_terminal.schemas.order import OrderSnapshot
from pos_terminal.services import pricing
from pos_terminal.services.audit_service import log_action
from pos_terminal.services.errors import ValidationError
from pos_terminal.services.order_state import build_snapshot, get_open_order, recompute_order
from pos_terminal.services.promo_rules import is_promo_available, normalize_code
from pos_terminal.utils.time import utcnow

logger = logging.getLogger(__name__)

INVALID_PROMO_MESSAGE: str = "invalid or expired promo code"


def find_promo(db: Session, code: str) -> Promo | None:
    """Look a promo up by code, ignoring case and surrounding spaces."""
    normalized = normalize_code(code)
    if not normalized:
        return None
    return db.scalar(select(Promo).where(func.upper(func.trim(Promo.code)) == normalized).limit(1))


def apply_promo(
    db: Session,
    *,
    order_id: int,
    code: str,
    user_id: int | None = None,
    now: datetime | None = None,
) -> OrderSnapshot:
    """Attach a promo to an order after checking availability and minimum total."""
    current_time = now or utcnow()
    order = get_open_order(db, order_id)
    promo = find_promo(db, code)
    if promo is None or not is_promo_available(promo, current_time):
        logger.info("Rejected promo %r for order %s", code, order_id)
        raise ValidationError(INVALID_PROMO_MESSAGE, code=normalize_code(code))

    lines = db.scalars(select(OrderLine).where(OrderLine.order_id == order.id)).all()
    subtotal = pricing.compute(order.order_type, lines).subtotal
    if subtotal < pricing.money(promo.min_total):
        raise ValidationError(
            INVALID_PROMO_MESSAGE,
            code=promo.code,
            min_total=str(pricing.money(promo.min_total)),
            subtotal=str(subtotal),
        )

    order.promo = promo
    order.promocode = promo.code
    recompute_order(db, order, now=current_time)
    log_action(db, action="orders:applyPromo", order_id=order.id, user_id=user_id, meta={"code": promo.code})
    db.commit()
    return build_snapshot(db, order.id)


def remove_promo(db: Session, *, order_id: int, user_id: int | None = None) -> OrderSnapshot:
    """Detach the promo and recompute; a no-op when none is attached."""
    order = get_open_order(db, order_id)
    if order.promo_id is None:
        return build_snapshot(db, order.id)

    code = order.promocode
    order.promo = None
    order.promocode = None
    recompute_order(db, order)
    log_action(db, action="orders:removePromo", order_id=order.id, user_id=user_id, meta={"code": code})
    db.commit()
    return build_snapshot(db, order.id)
