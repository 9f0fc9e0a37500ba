"""Operator login and terminal session resolution."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from pos_terminal.core.security import create_access_token, decode_token, verify_password
from pos_terminal.models import PosUser, Terminal
from pos_terminal.services.context import TerminalContext
from pos_terminal.services.errors import AuthenticationError
from pos_terminal.services.settings_service import is_pos_locked
from pos_terminal.utils.time import utcnow

logger = logging.getLogger(__name__)


def get_operator_by_username(db: Session, username: str) -> PosUser | None:
    return db.scalar(select(PosUser).where(PosUser.username == username.strip()).limit(1))


def get_paired_terminal(db: Session, device_id: str) -> Terminal:
    terminal = db.scalar(select(Terminal).where(Terminal.device_id == device_id).limit(1))
    if terminal is None or not terminal.is_paired:
        raise AuthenticationError("terminal is not paired", device_id=device_id)
    return terminal


def login_operator(db: Session, *, username: str, password: str, device_id: str) -> str:
    """Check credentials and terminal pairing; return a session token."""
    operator = get_operator_by_username(db, username)
    if operator is None or not operator.is_active or not verify_password(password, operator.password_hash):
        logger.info("[AUTH] rejected login for %s on %s", username, device_id)
        raise AuthenticationError("incorrect username or password")
    terminal = get_paired_terminal(db, device_id)
    if is_pos_locked(db):
        raise AuthenticationError("terminal is locked")

    operator.last_login_at = utcnow()
    db.commit()
    logger.info("[AUTH] operator %s logged in on %s", operator.id, terminal.device_id)
    return create_access_token(operator.id, terminal.device_id)


def get_operator(db: Session, operator_id: int) -> PosUser:
    operator: PosUser | None = db.get(PosUser, operator_id)
    if operator is None or not operator.is_active:
        raise AuthenticationError("operator is not active", user_id=operator_id)
    return operator


def resolve_terminal_context(db: Session, token: str | None) -> TerminalContext:
    """Turn a bearer token into the context every engine operation runs in."""
    if not token:
        raise AuthenticationError("not authenticated")
    payload = decode_token(token)
    try:
        operator_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise AuthenticationError("invalid session token") from exc

    operator = get_operator(db, operator_id)
    terminal = get_paired_terminal(db, str(payload["dev"]))
    if is_pos_locked(db):
        raise AuthenticationError("terminal is locked", device_id=terminal.device_id)
    return TerminalContext(terminal_id=terminal.id, device_id=terminal.device_id, user_id=operator.id)
