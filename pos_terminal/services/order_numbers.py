"""Human-readable order number allocation."""

from __future__ import annotations

import logging
import secrets
import string
import time

from sqlalchemy import select
from sqlalchemy.orm import Session

from pos_terminal.models import Order
from pos_terminal.services.settings_service import get_order_number_prefix, get_order_number_style
from pos_terminal.utils.time import utcnow

logger = logging.getLogger(__name__)

BASE36_ALPHABET: str = string.digits + string.ascii_uppercase
MAX_ALLOCATION_ATTEMPTS: int = 6


def _rand_base36(length: int) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def device_suffix(device_id: str | None) -> str:
    """Return the last four characters of the device id, upper-cased."""
    return (device_id or "LOCAL")[-4:].upper()


def build_candidate(*, prefix: str, style: str, device_id: str | None) -> str:
    """Build one candidate number; it may still collide with an existing order.

    ``short`` gives ``POS-QHHC3NTK`` (device + random), ``mini`` gives
    ``POS-20251109QHAB`` (date + two device chars + two random chars).
    """
    dev = device_suffix(device_id)
    if style == "mini":
        ymd = utcnow().strftime("%Y%m%d")
        return f"{prefix}-{ymd}{dev[:2]}{_rand_base36(2)}"
    return f"{prefix}-{dev}{_rand_base36(4)}"


def allocate_order_number(db: Session, *, device_id: str | None) -> str:
    """Allocate a number not used by any stored order."""
    prefix = get_order_number_prefix(db)
    style = get_order_number_style(db)
    for _ in range(MAX_ALLOCATION_ATTEMPTS):
        candidate = build_candidate(prefix=prefix, style=style, device_id=device_id)
        exists = db.scalar(select(Order.id).where(Order.number == candidate).limit(1))
        if exists is None:
            return candidate

    fallback = f"{prefix}-{int(time.time() * 1000)}-{secrets.randbelow(10**6):06d}-{device_suffix(device_id)}"
    logger.warning("Order number space exhausted for style=%s; using fallback %s", style, fallback)
    return fallback
