"""Runtime POS settings stored as key/value rows."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from pos_terminal.db.base import Base

TRUE_VALUES: frozenset[str] = frozenset({"1", "true", "yes", "on"})


class AppSetting(Base):
    """Operator-tunable setting such as the ``pos.locked`` kill switch."""

    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)
    updated_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("pos_users.id"), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def is_enabled(self) -> bool:
        return self.value.strip().lower() in TRUE_VALUES
