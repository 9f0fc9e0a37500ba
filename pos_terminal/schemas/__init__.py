"""Schema exports."""

from pos_terminal.schemas.auth import LoginRequest, OperatorResponse, TokenResponse
from pos_terminal.schemas.checkout import CheckoutForm, CheckoutResult
from pos_terminal.schemas.order import (
    AddLineRequest,
    AddonSelectionPayload,
    ApplyPromoRequest,
    DeliveryContextRequest,
    OrderLineAddonRead,
    OrderLineRead,
    OrderRead,
    OrderSnapshot,
    PaymentLinkStatusRequest,
    SetLineQtyRequest,
    SetOrderTypeRequest,
    StartOrderRequest,
)
from pos_terminal.schemas.table import AssignTableRequest, TableInfo

__all__ = [
    "LoginRequest",
    "OperatorResponse",
    "TokenResponse",
    "CheckoutForm",
    "CheckoutResult",
    "AddLineRequest",
    "AddonSelectionPayload",
    "ApplyPromoRequest",
    "DeliveryContextRequest",
    "OrderLineAddonRead",
    "OrderLineRead",
    "OrderRead",
    "OrderSnapshot",
    "PaymentLinkStatusRequest",
    "SetLineQtyRequest",
    "SetOrderTypeRequest",
    "StartOrderRequest",
    "AssignTableRequest",
    "TableInfo",
]
