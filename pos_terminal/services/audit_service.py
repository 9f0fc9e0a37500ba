"""Action log helpers."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from pos_terminal.models import PosActionLog


def log_action(
    db: Session,
    *,
    action: str,
    order_id: int | None = None,
    user_id: int | None = None,
    meta: dict[str, Any] | None = None,
) -> None:
    """Queue an action log row; it is committed together with the mutation."""
    db.add(
        PosActionLog(
            order_id=order_id,
            action=action,
            meta_json=meta,
            performed_by_user_id=user_id,
        )
    )
