"""Action log model for order mutations."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from pos_terminal.db.base import Base


class PosActionLog(Base):
    """Append-only trail of engine operations performed on orders."""

    __tablename__ = "pos_action_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    meta_json: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    performed_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("pos_users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
