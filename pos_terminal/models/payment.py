"""Payment method model."""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pos_terminal.db.base import Base


class PaymentMethod(Base):
    """Tender type offered at checkout."""

    __tablename__ = "payment_methods"

    id: Mapped[int] = mapped_column(primary_key=True)
    slug: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    requires_payment_link: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    legacy_code: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
