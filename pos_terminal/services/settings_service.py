"""Terminal settings helpers backed by the app_settings table."""

from sqlalchemy.orm import Session

from pos_terminal.core.config import settings
from pos_terminal.models.app_setting import AppSetting

POS_LOCKED_KEY: str = "pos.locked"
ORDER_NUMBER_STYLE_KEY: str = "orders.number_style"
ORDER_NUMBER_PREFIX_KEY: str = "orders.number_prefix"

ORDER_NUMBER_STYLES: tuple[str, ...] = ("short", "mini")


def get_setting(db: Session, key: str) -> str | None:
    setting: AppSetting | None = db.get(AppSetting, key)
    return setting.value if setting is not None else None


def save_setting(db: Session, *, key: str, value: str, user_id: int | None = None) -> None:
    """Insert or update one setting row and commit."""
    setting: AppSetting | None = db.get(AppSetting, key)
    if setting is None:
        db.add(AppSetting(key=key, value=value, updated_by_user_id=user_id))
    else:
        setting.value = value
        setting.updated_by_user_id = user_id
    db.commit()


def is_pos_locked(db: Session) -> bool:
    """Return True when the kill switch blocks all terminal operations."""
    setting: AppSetting | None = db.get(AppSetting, POS_LOCKED_KEY)
    return setting is not None and setting.is_enabled


def get_order_number_style(db: Session) -> str:
    raw = (get_setting(db, ORDER_NUMBER_STYLE_KEY) or settings.order_number_style).strip().lower()
    return raw if raw in ORDER_NUMBER_STYLES else "short"


def get_order_number_prefix(db: Session) -> str:
    raw = (get_setting(db, ORDER_NUMBER_PREFIX_KEY) or settings.order_number_prefix).strip()
    return raw or "POS"
