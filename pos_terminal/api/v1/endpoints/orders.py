"""Order endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pos_terminal.api.deps import get_engine_services, get_terminal_context
from pos_terminal.api.responses import operation_response
from pos_terminal.db.session import get_db
from pos_terminal.schemas.checkout import CheckoutForm
from pos_terminal.schemas.order import (
    AddLineRequest,
    ApplyPromoRequest,
    DeliveryContextRequest,
    PaymentLinkStatusRequest,
    SetOrderTypeRequest,
    StartOrderRequest,
)
from pos_terminal.schemas.table import AssignTableRequest
from pos_terminal.services import commands
from pos_terminal.services.context import TerminalContext

router: APIRouter = APIRouter()


@router.post("")
def start_order(
    payload: StartOrderRequest,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.StartOrder(order_type=payload.order_type)))


@router.get("")
def list_active_orders(ctx: TerminalContext = Depends(get_terminal_context), db: Session = Depends(get_db)) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.ListActiveOrders()))


@router.get("/current")
def refresh_current(ctx: TerminalContext = Depends(get_terminal_context), db: Session = Depends(get_db)) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.RefreshCurrent()))


@router.get("/{order_id}")
def get_order(
    order_id: int,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.GetOrder(order_id=order_id)))


@router.post("/{order_id}/select")
def select_order(
    order_id: int,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.SelectOrder(order_id=order_id)))


@router.put("/{order_id}/type")
def set_order_type(
    order_id: int,
    payload: SetOrderTypeRequest,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    command = commands.SetOrderType(order_id=order_id, order_type=payload.order_type)
    return operation_response(commands.dispatch(db, ctx, command))


@router.put("/{order_id}/delivery")
def set_delivery_context(
    order_id: int,
    payload: DeliveryContextRequest,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    command = commands.SetDeliveryContext(
        order_id=order_id,
        city_id=payload.city_id,
        void_delivery_fee=payload.void_delivery_fee,
    )
    return operation_response(commands.dispatch(db, ctx, command))


@router.post("/{order_id}/lines")
def add_line(
    order_id: int,
    payload: AddLineRequest,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    command = commands.AddLine(
        order_id=order_id,
        item_id=payload.item_id,
        qty=payload.qty,
        addons=payload.addons,
        item_notes=payload.item_notes,
    )
    return operation_response(commands.dispatch(db, ctx, command))


@router.post("/{order_id}/promo")
def apply_promo(
    order_id: int,
    payload: ApplyPromoRequest,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.ApplyPromo(order_id=order_id, code=payload.code)))


@router.delete("/{order_id}/promo")
def remove_promo(
    order_id: int,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.RemovePromo(order_id=order_id)))


@router.put("/{order_id}/table")
def assign_table(
    order_id: int,
    payload: AssignTableRequest,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    command = commands.AssignTable(order_id=order_id, table_id=payload.table_id, covers=payload.covers)
    return operation_response(commands.dispatch(db, ctx, command))


@router.delete("/{order_id}/table")
def clear_table(
    order_id: int,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.ClearTable(order_id=order_id)))


@router.post("/{order_id}/table/release")
def release_table(
    order_id: int,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.ReleaseTable(order_id=order_id)))


@router.post("/{order_id}/complete")
def complete_order(
    order_id: int,
    form: CheckoutForm,
    ctx: TerminalContext = Depends(get_terminal_context),
    services: commands.EngineServices = Depends(get_engine_services),
    db: Session = Depends(get_db),
) -> JSONResponse:
    command = commands.CompleteOrder(order_id=order_id, form=form)
    return operation_response(commands.dispatch(db, ctx, command, services))


@router.put("/{order_id}/payment-link/status")
def set_payment_link_status(
    order_id: int,
    payload: PaymentLinkStatusRequest,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    command = commands.SetPaymentLinkStatus(order_id=order_id, status=payload.status)
    return operation_response(commands.dispatch(db, ctx, command))


@router.post("/{order_id}/close")
def close_order(
    order_id: int,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.CloseOrder(order_id=order_id)))
