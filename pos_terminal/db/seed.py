"""Database seeding helpers."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from pos_terminal.core.config import settings
from pos_terminal.core.security import get_password_hash
from pos_terminal.models import PaymentMethod, PosUser, Terminal

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHODS: tuple[tuple[str, str, bool, int], ...] = (
    ("cash", "Cash", False, 1),
    ("card", "Card", False, 2),
    ("payment-link", "Payment link", True, 3),
)


def ensure_terminal(session: Session) -> Terminal:
    """Ensure the configured device is registered as a paired terminal."""
    terminal = session.scalar(select(Terminal).where(Terminal.device_id == settings.terminal_device_id).limit(1))
    if terminal is None:
        terminal = Terminal(device_id=settings.terminal_device_id, name="POS", is_paired=True)
        session.add(terminal)
        session.commit()
        logger.info("[BOOTSTRAP] registered terminal %s", settings.terminal_device_id)
    return terminal


def ensure_payment_methods(session: Session) -> None:
    """Insert the default tender types when the table is empty."""
    if session.scalar(select(PaymentMethod.id).limit(1)) is not None:
        return
    for slug, name, requires_link, legacy_code in DEFAULT_PAYMENT_METHODS:
        session.add(PaymentMethod(slug=slug, name=name, requires_payment_link=requires_link, legacy_code=legacy_code))
    session.commit()


def ensure_admin_operator(session: Session) -> None:
    """Ensure a default operator exists in development only."""
    if settings.app_env != "dev" or not settings.admin_pass:
        return

    existing = session.scalar(select(PosUser).where(PosUser.username == settings.admin_user).limit(1))
    if existing is not None:
        return

    try:
        hashed_password = get_password_hash(settings.admin_pass)
    except ValueError as exc:
        logger.warning("Skipping operator seed: %s", exc)
        return

    session.add(PosUser(name="Administrator", username=settings.admin_user, password_hash=hashed_password, role="admin"))
    session.commit()


def ensure_seed_data(session: Session) -> None:
    ensure_terminal(session)
    ensure_payment_methods(session)
    ensure_admin_operator(session)


