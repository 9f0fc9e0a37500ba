"""Promo availability rules shared by pricing recompute and the promo engine."""

from __future__ import annotations

from datetime import datetime

from pos_terminal.models import Promo
from pos_terminal.services.pricing import PromoTerms, money
from pos_terminal.utils.time import as_utc


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def is_promo_available(promo: Promo, now: datetime) -> bool:
    """Return True when the promo is active and ``now`` is inside its window.

    A missing bound leaves that side of the window open.
    """
    if not promo.active:
        return False
    current = as_utc(now)
    start_at = as_utc(promo.start_at)
    end_at = as_utc(promo.end_at)
    if start_at is not None and current < start_at:
        return False
    if end_at is not None and current > end_at:
        return False
    return True


def promo_terms(promo: Promo) -> PromoTerms:
    return PromoTerms(
        type=promo.type,
        value=money(promo.value),
        min_total=money(promo.min_total),
        max_discount=money(promo.max_discount) if promo.max_discount is not None else None,
    )
