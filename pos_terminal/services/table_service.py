"""Table occupancy: binding and unbinding physical tables to dine-in orders.

The conditional UPDATE in ``assign_table`` is the only statement that flips a
table to ``occupied``; when it matches no row the assignment is refused.
"""

from __future__ import annotations

import logging

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from pos_terminal.models import DiningTable, Order, OrderStatus, OrderType
from pos_terminal.schemas.order import OrderSnapshot
from pos_terminal.schemas.table import TableInfo
from pos_terminal.services.audit_service import log_action
from pos_terminal.services.errors import ConflictError, NotFoundError, ValidationError
from pos_terminal.services.order_state import build_snapshot, count_lines, get_open_order, get_order
from pos_terminal.utils.time import utcnow

logger = logging.getLogger(__name__)


def list_tables(db: Session) -> list[TableInfo]:
    tables = db.scalars(select(DiningTable).order_by(DiningTable.number.asc(), DiningTable.id.asc())).all()
    return [TableInfo.model_validate(table) for table in tables]


def free_table_for_order(db: Session, order: Order) -> bool:
    """Detach the order's table and mark it available; return True if a table was freed."""
    freed = False
    if order.table_id is not None:
        result = db.execute(
            update(DiningTable)
            .where(DiningTable.id == order.table_id, DiningTable.current_order_id == order.id)
            .values(status="available", current_order_id=None)
            .execution_options(synchronize_session=False)
        )
        freed = result.rowcount > 0
    order.table_id = None
    order.table_name = None
    order.covers = None
    return freed


def assign_table(
    db: Session,
    *,
    order_id: int,
    table_id: int,
    covers: int,
    user_id: int | None = None,
) -> OrderSnapshot:
    """Bind a table to a dine-in order.

    Re-assigning the table the order already holds only updates covers.
    Moving to another table frees the previous one.
    """
    if covers < 1:
        raise ValidationError("covers must be at least 1", covers=covers)

    order = get_open_order(db, order_id)
    if order.order_type != OrderType.DINE_IN:
        raise ValidationError("table assignment requires a dine-in order", order_type=order.order_type.value)

    table: DiningTable | None = db.get(DiningTable, table_id)
    if table is None:
        raise NotFoundError("table not found", table_id=table_id)

    result = db.execute(
        update(DiningTable)
        .where(
            DiningTable.id == table_id,
            or_(DiningTable.status == "available", DiningTable.current_order_id == order.id),
        )
        .values(status="occupied", current_order_id=order.id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.refresh(table)
        raise ConflictError(
            "table already occupied",
            table_id=table_id,
            status=table.status,
            current_order_id=table.current_order_id,
        )

    previous_table_id = order.table_id
    if previous_table_id is not None and previous_table_id != table_id:
        db.execute(
            update(DiningTable)
            .where(DiningTable.id == previous_table_id, DiningTable.current_order_id == order.id)
            .values(status="available", current_order_id=None)
            .execution_options(synchronize_session=False)
        )

    order.table_id = table.id
    order.table_name = table.name
    order.covers = covers
    log_action(
        db,
        action="orders:setTable",
        order_id=order.id,
        user_id=user_id,
        meta={"table_id": table.id, "table_name": table.name, "covers": covers, "previous_table_id": previous_table_id},
    )
    db.commit()
    logger.info("Table %s assigned to order %s (covers=%s)", table.id, order.id, covers)
    return build_snapshot(db, order.id)


def clear_table(db: Session, *, order_id: int, user_id: int | None = None) -> OrderSnapshot:
    """Detach the table from an order that has no items yet."""
    order = get_open_order(db, order_id)
    if order.table_id is None:
        return build_snapshot(db, order.id)
    if count_lines(db, order.id) > 0:
        raise ConflictError("table can only be cleared from an order without items", order_id=order.id)

    table_id = order.table_id
    free_table_for_order(db, order)
    log_action(db, action="orders:clearTable", order_id=order.id, user_id=user_id, meta={"table_id": table_id})
    db.commit()
    return build_snapshot(db, order.id)


def release_table(db: Session, *, order_id: int, user_id: int | None = None) -> OrderSnapshot:
    """Free the order's table as part of settlement and leave the order closed.

    An open order may only be released while it has no items; anything else
    must be checked out first.
    """
    order = get_order(db, order_id)
    if order.is_open and count_lines(db, order.id) > 0:
        raise ConflictError("order must be checked out before its table is released", order_id=order.id)

    table_id = order.table_id
    freed = free_table_for_order(db, order)
    if order.is_open:
        order.status = OrderStatus.CLOSED
        order.closed_at = utcnow()
    log_action(
        db,
        action="orders:releaseTable",
        order_id=order.id,
        user_id=user_id,
        meta={"table_id": table_id, "freed": freed},
    )
    db.commit()
    return build_snapshot(db, order.id)
