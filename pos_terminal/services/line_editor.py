"""Order line mutations: add, change quantity, remove."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from pos_terminal.models import Addon, CatalogItem, OrderLine, OrderLineAddon
from pos_terminal.schemas.order import OrderSnapshot
from pos_terminal.services import pricing
from pos_terminal.services.addon_validator import GroupRule, SelectedAddon, validate_selection
from pos_terminal.services.audit_service import log_action
from pos_terminal.services.errors import NotFoundError, ValidationError
from pos_terminal.services.order_registry import retire_other_empty_tabs
from pos_terminal.services.order_state import build_snapshot, count_lines, get_line, get_open_order, recompute_order

logger = logging.getLogger(__name__)


def addon_signature(selection: Sequence[SelectedAddon]) -> str:
    """Stable key of a selection, used to merge identical lines."""
    return ",".join(f"{entry.addon_id}x{entry.qty}" for entry in sorted(selection, key=lambda e: e.addon_id))


def _resolve_addons(db: Session, selection: Sequence[SelectedAddon]) -> list[tuple[Addon, int]]:
    resolved: list[tuple[Addon, int]] = []
    for entry in selection:
        addon: Addon | None = db.get(Addon, entry.addon_id)
        if addon is None or addon.group_id != entry.group_id:
            raise ValidationError("add-on does not belong to this item", addon_id=entry.addon_id, group_id=entry.group_id)
        if not addon.is_active:
            raise ValidationError(f'add-on "{addon.name}" is not available', addon_id=addon.id)
        resolved.append((addon, entry.qty))
    return resolved


def add_line(
    db: Session,
    *,
    order_id: int,
    item_id: int,
    qty: int = 1,
    addons: Sequence[SelectedAddon] = (),
    item_notes: str | None = None,
    user_id: int | None = None,
) -> OrderSnapshot:
    """Add an item to an order, merging into an identical existing line.

    The item's add-on groups are checked before anything is written; the unit
    price (base plus add-on surcharges) is locked on the new line.
    """
    if qty < 1:
        raise ValidationError("quantity must be at least 1", qty=qty)

    order = get_open_order(db, order_id)
    item: CatalogItem | None = db.get(CatalogItem, item_id)
    if item is None:
        raise NotFoundError("catalog item not found", item_id=item_id)
    if not item.is_active or item.is_outofstock:
        raise ValidationError(f'item "{item.name}" is not available', item_id=item_id)

    rules = [
        GroupRule(id=group.id, name=group.name, is_required=group.is_required, max_select=group.max_select)
        for group in item.addon_groups
    ]
    selection = validate_selection(rules, addons)
    resolved = _resolve_addons(db, selection)
    signature = addon_signature(selection)
    item_notes = (item_notes or "").strip() or None

    existing: OrderLine | None = None
    if item_notes is None:
        existing = db.scalar(
            select(OrderLine)
            .where(
                OrderLine.order_id == order.id,
                OrderLine.item_id == item.id,
                OrderLine.addon_signature == signature,
                OrderLine.item_notes.is_(None),
                OrderLine.qty > 0,
            )
            .limit(1)
        )
    if existing is not None:
        existing.qty += qty
        existing.line_total = pricing.line_total(existing.unit_price, existing.qty)
        line = existing
    else:
        base_price = pricing.money(item.price)
        surcharge = pricing.addons_unit_total((addon.price, addon_qty) for addon, addon_qty in resolved)
        unit_price = pricing.money(base_price + surcharge)
        line = OrderLine(
            order_id=order.id,
            item_id=item.id,
            name=item.name,
            base_price=base_price,
            addons_unit_total=surcharge,
            unit_price=unit_price,
            qty=qty,
            line_total=pricing.line_total(unit_price, qty),
            addon_signature=signature,
            item_notes=item_notes,
            addons=[
                OrderLineAddon(
                    addon_id=addon.id,
                    group_id=addon.group_id,
                    name=addon.name,
                    price=pricing.money(addon.price),
                    qty=addon_qty,
                )
                for addon, addon_qty in resolved
            ],
        )
        db.add(line)

    recompute_order(db, order)
    log_action(
        db,
        action="orders:addLine",
        order_id=order.id,
        user_id=user_id,
        meta={"item_id": item.id, "qty": qty, "addons": signature or None, "merged": line is existing},
    )
    db.commit()
    return build_snapshot(db, order.id)


def set_line_qty(db: Session, *, line_id: int, qty: int, user_id: int | None = None) -> OrderSnapshot:
    """Set an absolute quantity; zero removes the line."""
    if qty < 0:
        raise ValidationError("quantity cannot be negative", qty=qty)
    if qty == 0:
        return remove_line(db, line_id=line_id, user_id=user_id)

    line = get_line(db, line_id)
    order = get_open_order(db, line.order_id)
    previous_qty = line.qty
    line.qty = qty
    line.line_total = pricing.line_total(line.unit_price, qty)
    recompute_order(db, order)
    log_action(
        db,
        action="orders:setLineQty",
        order_id=order.id,
        user_id=user_id,
        meta={"line_id": line.id, "from": previous_qty, "to": qty},
    )
    db.commit()
    return build_snapshot(db, order.id)


def remove_line(db: Session, *, line_id: int, user_id: int | None = None) -> OrderSnapshot:
    """Delete a line; an order left without items becomes the terminal's only empty tab."""
    line = get_line(db, line_id)
    order = get_open_order(db, line.order_id)
    item_id, removed_qty = line.item_id, line.qty
    db.delete(line)
    recompute_order(db, order)
    retired: list[int] = []
    if count_lines(db, order.id) == 0:
        retired = retire_other_empty_tabs(db, order, user_id=user_id)
    log_action(
        db,
        action="orders:removeLine",
        order_id=order.id,
        user_id=user_id,
        meta={"line_id": line_id, "item_id": item_id, "qty": removed_qty, "retired_order_ids": retired or None},
    )
    db.commit()
    logger.info("Line %s removed from order %s", line_id, order.id)
    return build_snapshot(db, order.id)
