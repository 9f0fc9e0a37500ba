"""Order pricing: subtotal, promo discount, delivery fee and grand total.

All amounts are ``Decimal`` values quantized to three places, matching the
three-decimal currency the terminals trade in.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from pos_terminal.core.config import settings
from pos_terminal.models.order import OrderType

ZERO: Decimal = Decimal("0.000")


def money(value: Decimal | int | str | None) -> Decimal:
    """Quantize a value to the currency's three decimal places."""
    if value is None:
        return ZERO
    return Decimal(value).quantize(settings.money_quantum, rounding=ROUND_HALF_UP)


class PricedLine(Protocol):
    unit_price: Decimal
    qty: int


@dataclass(frozen=True)
class PromoTerms:
    """The parts of a promo that affect the discount amount."""

    type: str
    value: Decimal
    min_total: Decimal = ZERO
    max_discount: Decimal | None = None


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    discount_total: Decimal
    delivery_fee: Decimal
    grand_total: Decimal


def line_total(unit_price: Decimal, qty: int) -> Decimal:
    """Return the rounded total for ``qty`` units; add-ons are already in ``unit_price``."""
    return money(Decimal(unit_price) * qty)


def addons_unit_total(addons: Iterable[tuple[Decimal, int]]) -> Decimal:
    """Sum ``price * qty`` of the add-ons charged on every unit of a line."""
    total = Decimal("0")
    for price, qty in addons:
        total += Decimal(price) * qty
    return money(total)


def compute_discount(subtotal: Decimal, promo: PromoTerms | None) -> Decimal:
    """Return the promo discount for a subtotal.

    Below ``min_total`` the promo yields nothing. ``max_discount`` caps the
    amount when positive, and the discount never exceeds the subtotal.
    """
    if promo is None:
        return ZERO
    if subtotal < money(promo.min_total):
        return ZERO

    if promo.type == "percent":
        discount = subtotal * Decimal(promo.value) / Decimal(100)
    else:
        discount = Decimal(promo.value)

    if promo.max_discount is not None and promo.max_discount > 0:
        discount = min(discount, Decimal(promo.max_discount))

    discount = max(Decimal("0"), min(discount, subtotal))
    return money(discount)


def compute(
    order_type: OrderType,
    lines: Iterable[PricedLine],
    promo: PromoTerms | None = None,
    delivery_fee: Decimal | None = None,
) -> Totals:
    """Derive order totals from its lines.

    ``grand_total = max(0, subtotal - discount) + fee``, where the fee only
    counts for delivery orders.
    """
    subtotal = ZERO
    for line in lines:
        if line.qty <= 0:
            continue
        subtotal += line_total(line.unit_price, line.qty)
    subtotal = money(subtotal)

    discount_total = compute_discount(subtotal, promo)
    fee = money(delivery_fee) if order_type == OrderType.DELIVERY else ZERO
    grand_total = money(max(ZERO, subtotal - discount_total) + fee)
    return Totals(subtotal=subtotal, discount_total=discount_total, delivery_fee=fee, grand_total=grand_total)
