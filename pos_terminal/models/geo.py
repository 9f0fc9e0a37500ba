"""Geography models used to resolve delivery addresses and fees."""

from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_terminal.db.base import Base


class State(Base):
    __tablename__ = "states"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)

    cities: Mapped[list["City"]] = relationship(back_populates="state")


class City(Base):
    """City with its delivery fee and informational minimum order."""

    __tablename__ = "cities"

    id: Mapped[int] = mapped_column(primary_key=True)
    state_id: Mapped[int] = mapped_column(ForeignKey("states.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    delivery_fee: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=Decimal("0.000"))
    min_order: Mapped[Decimal | None] = mapped_column(Numeric(12, 3), nullable=True)

    state: Mapped[State] = relationship(back_populates="cities")
    blocks: Mapped[list["Block"]] = relationship(back_populates="city")


class Block(Base):
    __tablename__ = "blocks"

    id: Mapped[int] = mapped_column(primary_key=True)
    city_id: Mapped[int] = mapped_column(ForeignKey("cities.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)

    city: Mapped[City] = relationship(back_populates="blocks")
