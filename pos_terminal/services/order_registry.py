"""Open orders (tabs) of one terminal session and which of them is current."""

from __future__ import annotations

import logging

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from pos_terminal.models import City, Order, OrderLine, OrderStatus, OrderType, Terminal
from pos_terminal.schemas.order import OrderRead, OrderSnapshot
from pos_terminal.services.audit_service import log_action
from pos_terminal.services.context import TerminalContext
from pos_terminal.services.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from pos_terminal.services.order_numbers import allocate_order_number
from pos_terminal.services.order_state import build_snapshot, get_open_order, recompute_order
from pos_terminal.services.table_service import free_table_for_order
from pos_terminal.utils.time import utcnow

logger = logging.getLogger(__name__)


def _empty_open_orders_query(terminal_id: int):
    has_lines = exists().where(OrderLine.order_id == Order.id, OrderLine.qty > 0)
    return (
        select(Order)
        .where(Order.terminal_id == terminal_id, Order.status == OrderStatus.OPEN, ~has_lines)
        .order_by(Order.tab_position.asc(), Order.id.asc())
    )


def cancel_order(db: Session, order: Order, *, user_id: int | None = None, reason: str | None = None) -> None:
    """Cancel an open order, free its table and drop the terminal focus on it. Does not commit."""
    free_table_for_order(db, order)
    order.status = OrderStatus.CANCELLED
    order.closed_at = utcnow()
    terminal: Terminal | None = db.get(Terminal, order.terminal_id)
    if terminal is not None and terminal.current_order_id == order.id:
        terminal.current_order_id = None
    log_action(db, action="orders:close", order_id=order.id, user_id=user_id, meta={"reason": reason} if reason else None)


def retire_other_empty_tabs(db: Session, order: Order, *, user_id: int | None = None) -> list[int]:
    """Keep at most one empty open tab per terminal once ``order`` has no items.

    ``order`` is the tab the operator just emptied and stays open; any other
    empty open tab of the same terminal is cancelled. Does not commit.
    """
    db.flush()
    others = db.scalars(_empty_open_orders_query(order.terminal_id).where(Order.id != order.id)).all()
    for other in others:
        cancel_order(db, other, user_id=user_id, reason="duplicate_empty_tab")
        logger.info("Empty tab %s cancelled; order %s is the terminal's empty tab", other.id, order.id)
    return [other.id for other in others]


class OrderRegistry:
    """Owns the terminal's open tabs and the focused ("current") one.

    The focus is stored on the terminal row so every request sees the same
    current order; views are always rebuilt from freshly read rows.
    """

    def __init__(self, db: Session, ctx: TerminalContext) -> None:
        self.db = db
        self.ctx = ctx

    def _terminal(self) -> Terminal:
        terminal: Terminal | None = self.db.get(Terminal, self.ctx.terminal_id)
        if terminal is None or not terminal.is_paired:
            raise AuthenticationError("terminal is not paired", device_id=self.ctx.device_id)
        return terminal

    def _active_query(self):
        return (
            select(Order)
            .where(Order.terminal_id == self.ctx.terminal_id, Order.status == OrderStatus.OPEN)
            .order_by(Order.tab_position.asc(), Order.id.asc())
        )

    def find_empty_open_order(self) -> Order | None:
        return self.db.scalar(_empty_open_orders_query(self.ctx.terminal_id).limit(1))

    def start_order(self, default_type: OrderType = OrderType.PICKUP) -> OrderSnapshot:
        """Open a new empty tab and focus it.

        Refused while the terminal already has an open tab without items; the
        conflict names that tab so the caller can offer to reuse it.
        """
        terminal = self._terminal()
        empty = self.find_empty_open_order()
        if empty is not None:
            raise ConflictError("open order with no items", order_id=empty.id, number=empty.number)

        max_position = self.db.scalar(
            select(func.max(Order.tab_position)).where(
                Order.terminal_id == terminal.id, Order.status == OrderStatus.OPEN
            )
        )
        order = Order(
            number=allocate_order_number(self.db, device_id=terminal.device_id),
            terminal_id=terminal.id,
            order_type=default_type,
            status=OrderStatus.OPEN,
            tab_position=(max_position + 1) if max_position is not None else 0,
            created_by_user_id=self.ctx.user_id,
        )
        self.db.add(order)
        self.db.flush()
        terminal.current_order_id = order.id
        log_action(
            self.db,
            action="orders:start",
            order_id=order.id,
            user_id=self.ctx.user_id,
            meta={"order_type": default_type.value, "number": order.number},
        )
        self.db.commit()
        logger.info("Order %s (%s) started on terminal %s", order.id, order.number, terminal.device_id)
        return build_snapshot(self.db, order.id)

    def select_order(self, order_id: int) -> OrderSnapshot:
        """Focus an open tab and return its authoritative snapshot."""
        terminal = self._terminal()
        order: Order | None = self.db.get(Order, order_id)
        if order is None or order.terminal_id != terminal.id or not order.is_open:
            raise NotFoundError("order not found", order_id=order_id)
        order.last_accessed_at = utcnow()
        terminal.current_order_id = order.id
        self.db.commit()
        return build_snapshot(self.db, order.id)

    def list_active_orders(self) -> list[OrderRead]:
        self.db.expire_all()
        return [OrderRead.model_validate(order) for order in self.db.scalars(self._active_query()).all()]

    def refresh_current(self) -> OrderSnapshot | None:
        """Re-read the focused tab, falling back to the first open one.

        Returns ``None`` and clears the focus when the terminal has no open tabs.
        """
        self.db.expire_all()
        terminal = self._terminal()
        current: Order | None = None
        if terminal.current_order_id is not None:
            current = self.db.get(Order, terminal.current_order_id)
        if current is None or not current.is_open or current.terminal_id != terminal.id:
            current = self.db.scalar(self._active_query().limit(1))
            terminal.current_order_id = current.id if current is not None else None
            self.db.commit()
        if current is None:
            return None
        return build_snapshot(self.db, current.id)

    def set_order_type(self, order_id: int, order_type: OrderType) -> OrderSnapshot:
        """Change how an open order is fulfilled.

        Leaving dine-in detaches and frees the table.
        """
        order = get_open_order(self.db, order_id)
        previous = order.order_type
        if previous == order_type:
            return build_snapshot(self.db, order.id)

        freed_table_id = order.table_id
        if previous == OrderType.DINE_IN and order.table_id is not None:
            free_table_for_order(self.db, order)
        order.order_type = order_type
        recompute_order(self.db, order)
        log_action(
            self.db,
            action="orders:setType",
            order_id=order.id,
            user_id=self.ctx.user_id,
            meta={"from": previous.value, "to": order_type.value, "freed_table_id": freed_table_id},
        )
        self.db.commit()
        return build_snapshot(self.db, order.id)

    def set_delivery_context(
        self,
        order_id: int,
        *,
        city_id: int | None = None,
        void_delivery_fee: bool | None = None,
    ) -> OrderSnapshot:
        """Record the delivery city and the operator's void-fee flag."""
        order = get_open_order(self.db, order_id)
        if city_id is not None:
            if self.db.get(City, city_id) is None:
                raise ValidationError("unknown city", city_id=city_id)
            order.city_id = city_id
        if void_delivery_fee is not None:
            order.void_delivery_fee = void_delivery_fee
        recompute_order(self.db, order)
        log_action(
            self.db,
            action="orders:setDeliveryContext",
            order_id=order.id,
            user_id=self.ctx.user_id,
            meta={"city_id": order.city_id, "void_delivery_fee": order.void_delivery_fee},
        )
        self.db.commit()
        return build_snapshot(self.db, order.id)

    def close_order(self, order_id: int) -> None:
        """Cancel an open tab, freeing its table and dropping the focus on it."""
        order: Order | None = self.db.get(Order, order_id)
        if order is None:
            raise NotFoundError("order not found", order_id=order_id)
        if not order.is_open:
            raise ConflictError("order is not open", order_id=order_id, status=order.status.value)

        cancel_order(self.db, order, user_id=self.ctx.user_id)
        self.db.commit()
        logger.info("Order %s cancelled", order.id)
