"""Terminal (paired device) and operator ORM models."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from pos_terminal.db.base import Base


class Terminal(Base):
    """Paired POS device; holds the focused tab for its session."""

    __tablename__ = "terminals"

    id: Mapped[int] = mapped_column(primary_key=True)
    device_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, default="POS")
    is_paired: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    current_order_id: Mapped[int | None] = mapped_column(ForeignKey("orders.id", use_alter=True), nullable=True)
    paired_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class PosUser(Base):
    """Operator account allowed to log in on terminals."""

    __tablename__ = "pos_users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="cashier")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
