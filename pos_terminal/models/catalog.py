"""Catalog item and add-on ORM models."""

from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_terminal.db.base import Base


class CatalogItem(Base):
    """Sellable item as synced from the catalog service."""

    __tablename__ = "catalog_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_outofstock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    addon_groups: Mapped[list["AddonGroup"]] = relationship(
        back_populates="item",
        order_by="AddonGroup.position",
    )


class AddonGroup(Base):
    """Named set of modifiers with required/max-select rules."""

    __tablename__ = "addon_groups"

    id: Mapped[int] = mapped_column(primary_key=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("catalog_items.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # NULL or 0 means unbounded.
    max_select: Mapped[int | None] = mapped_column(Integer, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    item: Mapped[CatalogItem] = relationship(back_populates="addon_groups")
    addons: Mapped[list["Addon"]] = relationship(back_populates="group", order_by="Addon.id")


class Addon(Base):
    """Single modifier with its price surcharge."""

    __tablename__ = "addons"

    id: Mapped[int] = mapped_column(primary_key=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("addon_groups.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=Decimal("0.000"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    group: Mapped[AddonGroup] = relationship(back_populates="addons")
