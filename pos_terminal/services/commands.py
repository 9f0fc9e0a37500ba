"""Typed command surface of the order engine.

Every named operation is a pydantic model discriminated by ``op``. ``dispatch``
is the operation boundary: engine errors become a failed ``OperationResult``
after the session is rolled back, except ``AuthenticationError`` which is
re-raised for the session root to handle.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from pos_terminal.models import Order, OrderLine, OrderType
from pos_terminal.schemas.checkout import CheckoutForm
from pos_terminal.schemas.order import AddonSelectionPayload
from pos_terminal.services import line_editor, promo_engine, table_service
from pos_terminal.services.addon_validator import SelectedAddon
from pos_terminal.services.checkout_service import CheckoutCoordinator, set_payment_link_status
from pos_terminal.services.context import TerminalContext
from pos_terminal.services.errors import AuthenticationError, EngineError, NotFoundError
from pos_terminal.services.order_registry import OrderRegistry
from pos_terminal.services.order_state import build_snapshot
from pos_terminal.services.payment_links import PaymentLinkService
from pos_terminal.services.printing import ReceiptPrinter

logger = logging.getLogger(__name__)


class Operation(str, enum.Enum):
    START_ORDER = "start_order"
    GET_ORDER = "get_order"
    SELECT_ORDER = "select_order"
    LIST_ACTIVE_ORDERS = "list_active_orders"
    REFRESH_CURRENT = "refresh_current"
    SET_ORDER_TYPE = "set_order_type"
    SET_DELIVERY_CONTEXT = "set_delivery_context"
    ADD_LINE = "add_line"
    SET_LINE_QTY = "set_line_qty"
    REMOVE_LINE = "remove_line"
    APPLY_PROMO = "apply_promo"
    REMOVE_PROMO = "remove_promo"
    LIST_TABLES = "list_tables"
    ASSIGN_TABLE = "assign_table"
    CLEAR_TABLE = "clear_table"
    RELEASE_TABLE = "release_table"
    COMPLETE_ORDER = "complete_order"
    SET_PAYMENT_LINK_STATUS = "set_payment_link_status"
    CLOSE_ORDER = "close_order"


class _Command(BaseModel):
    model_config = ConfigDict(extra="forbid")


class StartOrder(_Command):
    op: Literal["start_order"] = "start_order"
    order_type: OrderType = OrderType.PICKUP


class GetOrder(_Command):
    op: Literal["get_order"] = "get_order"
    order_id: int


class SelectOrder(_Command):
    op: Literal["select_order"] = "select_order"
    order_id: int


class ListActiveOrders(_Command):
    op: Literal["list_active_orders"] = "list_active_orders"


class RefreshCurrent(_Command):
    op: Literal["refresh_current"] = "refresh_current"


class SetOrderType(_Command):
    op: Literal["set_order_type"] = "set_order_type"
    order_id: int
    order_type: OrderType


class SetDeliveryContext(_Command):
    op: Literal["set_delivery_context"] = "set_delivery_context"
    order_id: int
    city_id: int | None = None
    void_delivery_fee: bool | None = None


class AddLine(_Command):
    op: Literal["add_line"] = "add_line"
    order_id: int
    item_id: int
    qty: int = 1
    addons: list[AddonSelectionPayload] = []
    item_notes: str | None = None


class SetLineQty(_Command):
    op: Literal["set_line_qty"] = "set_line_qty"
    line_id: int
    qty: int


class RemoveLine(_Command):
    op: Literal["remove_line"] = "remove_line"
    line_id: int


class ApplyPromo(_Command):
    op: Literal["apply_promo"] = "apply_promo"
    order_id: int
    code: str


class RemovePromo(_Command):
    op: Literal["remove_promo"] = "remove_promo"
    order_id: int


class ListTables(_Command):
    op: Literal["list_tables"] = "list_tables"


class AssignTable(_Command):
    op: Literal["assign_table"] = "assign_table"
    order_id: int
    table_id: int
    covers: int = 1


class ClearTable(_Command):
    op: Literal["clear_table"] = "clear_table"
    order_id: int


class ReleaseTable(_Command):
    op: Literal["release_table"] = "release_table"
    order_id: int


class CompleteOrder(_Command):
    op: Literal["complete_order"] = "complete_order"
    order_id: int
    form: CheckoutForm


class SetPaymentLinkStatus(_Command):
    op: Literal["set_payment_link_status"] = "set_payment_link_status"
    order_id: int
    status: str


class CloseOrder(_Command):
    op: Literal["close_order"] = "close_order"
    order_id: int


Command = Annotated[
    Union[
        StartOrder,
        GetOrder,
        SelectOrder,
        ListActiveOrders,
        RefreshCurrent,
        SetOrderType,
        SetDeliveryContext,
        AddLine,
        SetLineQty,
        RemoveLine,
        ApplyPromo,
        RemovePromo,
        ListTables,
        AssignTable,
        ClearTable,
        ReleaseTable,
        CompleteOrder,
        SetPaymentLinkStatus,
        CloseOrder,
    ],
    Field(discriminator="op"),
]


class CommandEnvelope(BaseModel):
    """Wire wrapper so any command can be posted to a single endpoint."""

    command: Command


class OperationError(BaseModel):
    kind: str
    message: str
    details: dict[str, Any] = {}


class OperationResult(BaseModel):
    ok: bool
    op: Operation
    data: Any = None
    error: OperationError | None = None

    @property
    def status_code(self) -> int:
        if self.ok:
            return 200
        return _STATUS_BY_KIND.get(self.error.kind if self.error else "", 500)


_STATUS_BY_KIND: dict[str, int] = {
    cls.kind: cls.status_code for cls in EngineError.__subclasses__()
}


@dataclass
class EngineServices:
    """External collaborators injected into checkout."""

    payment_links: PaymentLinkService | None = None
    printer: ReceiptPrinter | None = None


def _scoped_order(db: Session, ctx: TerminalContext, order_id: int) -> Order:
    order: Order | None = db.get(Order, order_id)
    if order is None or order.terminal_id != ctx.terminal_id:
        raise NotFoundError("order not found", order_id=order_id)
    return order


def _scoped_line(db: Session, ctx: TerminalContext, line_id: int) -> OrderLine:
    line: OrderLine | None = db.get(OrderLine, line_id)
    if line is None:
        raise NotFoundError("order line not found", line_id=line_id)
    _scoped_order(db, ctx, line.order_id)
    return line


def _selection(payloads: list[AddonSelectionPayload]) -> list[SelectedAddon]:
    return [SelectedAddon(addon_id=p.addon_id, group_id=p.group_id, qty=p.qty) for p in payloads]


def _start_order(db, ctx, command: StartOrder, services):
    return OrderRegistry(db, ctx).start_order(command.order_type)


def _get_order(db, ctx, command: GetOrder, services):
    _scoped_order(db, ctx, command.order_id)
    return build_snapshot(db, command.order_id)


def _select_order(db, ctx, command: SelectOrder, services):
    return OrderRegistry(db, ctx).select_order(command.order_id)


def _list_active_orders(db, ctx, command: ListActiveOrders, services):
    return OrderRegistry(db, ctx).list_active_orders()


def _refresh_current(db, ctx, command: RefreshCurrent, services):
    return OrderRegistry(db, ctx).refresh_current()


def _set_order_type(db, ctx, command: SetOrderType, services):
    _scoped_order(db, ctx, command.order_id)
    return OrderRegistry(db, ctx).set_order_type(command.order_id, command.order_type)


def _set_delivery_context(db, ctx, command: SetDeliveryContext, services):
    _scoped_order(db, ctx, command.order_id)
    return OrderRegistry(db, ctx).set_delivery_context(
        command.order_id, city_id=command.city_id, void_delivery_fee=command.void_delivery_fee
    )


def _add_line(db, ctx, command: AddLine, services):
    _scoped_order(db, ctx, command.order_id)
    return line_editor.add_line(
        db,
        order_id=command.order_id,
        item_id=command.item_id,
        qty=command.qty,
        addons=_selection(command.addons),
        item_notes=command.item_notes,
        user_id=ctx.user_id,
    )


def _set_line_qty(db, ctx, command: SetLineQty, services):
    _scoped_line(db, ctx, command.line_id)
    return line_editor.set_line_qty(db, line_id=command.line_id, qty=command.qty, user_id=ctx.user_id)


def _remove_line(db, ctx, command: RemoveLine, services):
    _scoped_line(db, ctx, command.line_id)
    return line_editor.remove_line(db, line_id=command.line_id, user_id=ctx.user_id)


def _apply_promo(db, ctx, command: ApplyPromo, services):
    _scoped_order(db, ctx, command.order_id)
    return promo_engine.apply_promo(db, order_id=command.order_id, code=command.code, user_id=ctx.user_id)


def _remove_promo(db, ctx, command: RemovePromo, services):
    _scoped_order(db, ctx, command.order_id)
    return promo_engine.remove_promo(db, order_id=command.order_id, user_id=ctx.user_id)


def _list_tables(db, ctx, command: ListTables, services):
    return table_service.list_tables(db)


def _assign_table(db, ctx, command: AssignTable, services):
    _scoped_order(db, ctx, command.order_id)
    return table_service.assign_table(
        db, order_id=command.order_id, table_id=command.table_id, covers=command.covers, user_id=ctx.user_id
    )


def _clear_table(db, ctx, command: ClearTable, services):
    _scoped_order(db, ctx, command.order_id)
    return table_service.clear_table(db, order_id=command.order_id, user_id=ctx.user_id)


def _release_table(db, ctx, command: ReleaseTable, services):
    _scoped_order(db, ctx, command.order_id)
    return table_service.release_table(db, order_id=command.order_id, user_id=ctx.user_id)


def _complete_order(db, ctx, command: CompleteOrder, services: EngineServices):
    _scoped_order(db, ctx, command.order_id)
    coordinator = CheckoutCoordinator(db, payment_links=services.payment_links, printer=services.printer)
    return coordinator.complete(order_id=command.order_id, form=command.form, user_id=ctx.user_id)


def _set_payment_link_status(db, ctx, command: SetPaymentLinkStatus, services):
    _scoped_order(db, ctx, command.order_id)
    return set_payment_link_status(db, order_id=command.order_id, status=command.status, user_id=ctx.user_id)


def _close_order(db, ctx, command: CloseOrder, services):
    _scoped_order(db, ctx, command.order_id)
    OrderRegistry(db, ctx).close_order(command.order_id)
    return None


Handler = Callable[[Session, TerminalContext, Any, EngineServices], Any]

HANDLERS: dict[Operation, Handler] = {
    Operation.START_ORDER: _start_order,
    Operation.GET_ORDER: _get_order,
    Operation.SELECT_ORDER: _select_order,
    Operation.LIST_ACTIVE_ORDERS: _list_active_orders,
    Operation.REFRESH_CURRENT: _refresh_current,
    Operation.SET_ORDER_TYPE: _set_order_type,
    Operation.SET_DELIVERY_CONTEXT: _set_delivery_context,
    Operation.ADD_LINE: _add_line,
    Operation.SET_LINE_QTY: _set_line_qty,
    Operation.REMOVE_LINE: _remove_line,
    Operation.APPLY_PROMO: _apply_promo,
    Operation.REMOVE_PROMO: _remove_promo,
    Operation.LIST_TABLES: _list_tables,
    Operation.ASSIGN_TABLE: _assign_table,
    Operation.CLEAR_TABLE: _clear_table,
    Operation.RELEASE_TABLE: _release_table,
    Operation.COMPLETE_ORDER: _complete_order,
    Operation.SET_PAYMENT_LINK_STATUS: _set_payment_link_status,
    Operation.CLOSE_ORDER: _close_order,
}

_missing = set(Operation) - set(HANDLERS)
if _missing:
    raise RuntimeError(f"operations without a handler: {sorted(op.value for op in _missing)}")


def dispatch(
    db: Session,
    ctx: TerminalContext,
    command: BaseModel,
    services: EngineServices | None = None,
) -> OperationResult:
    """Run one command and return its typed outcome."""
    op = Operation(command.op)
    handler = HANDLERS[op]
    try:
        data = handler(db, ctx, command, services or EngineServices())
    except AuthenticationError:
        db.rollback()
        raise
    except EngineError as exc:
        db.rollback()
        logger.info("Operation %s failed (%s): %s", op.value, exc.kind, exc.message)
        return OperationResult(
            ok=False,
            op=op,
            error=OperationError(kind=exc.kind, message=exc.message, details=exc.details),
        )
    return OperationResult(ok=True, op=op, data=data)
