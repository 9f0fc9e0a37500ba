"""Order API schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from pos_terminal.models.order import OrderStatus, OrderType


class AddonSelectionPayload(BaseModel):
    """One chosen add-on for a new line."""

    addon_id: int
    group_id: int
    qty: int = Field(default=1, ge=0)


class OrderLineAddonRead(BaseModel):
    addon_id: int
    group_id: int
    name: str
    price: Decimal
    qty: int

    model_config = ConfigDict(from_attributes=True)


class OrderLineRead(BaseModel):
    """Serialized order line with its locked prices."""

    id: int
    order_id: int
    item_id: int
    name: str
    base_price: Decimal
    addons_unit_total: Decimal
    unit_price: Decimal
    qty: int
    line_total: Decimal
    item_notes: str | None = None
    addons: list[OrderLineAddonRead] = []

    model_config = ConfigDict(from_attributes=True)


class OrderRead(BaseModel):
    """Serialized order header with its totals."""

    id: int
    number: str
    order_type: OrderType
    status: OrderStatus
    tab_position: int
    subtotal: Decimal
    discount_total: Decimal
    delivery_fee: Decimal
    grand_total: Decimal
    promocode: str | None = None
    table_id: int | None = None
    table_name: str | None = None
    covers: int | None = None
    city_id: int | None = None
    void_delivery_fee: bool = False
    customer_name: str | None = None
    customer_mobile: str | None = None
    customer_address: str | None = None
    payment_method_slug: str | None = None
    payment_link_url: str | None = None
    payment_link_status: str | None = None
    is_locked: bool = False
    opened_at: datetime
    completed_at: datetime | None = None
    closed_at: datetime | None = None
    printed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class OrderSnapshot(BaseModel):
    """Authoritative ``{order, lines}`` pair re-read after every mutation."""

    order: OrderRead
    lines: list[OrderLineRead]


class StartOrderRequest(BaseModel):
    order_type: OrderType = OrderType.PICKUP


class SetOrderTypeRequest(BaseModel):
    order_type: OrderType


class DeliveryContextRequest(BaseModel):
    city_id: int | None = None
    void_delivery_fee: bool | None = None


class AddLineRequest(BaseModel):
    item_id: int
    qty: int = Field(default=1, ge=1)
    addons: list[AddonSelectionPayload] = []
    item_notes: str | None = None


class SetLineQtyRequest(BaseModel):
    qty: int


class ApplyPromoRequest(BaseModel):
    code: str


class PaymentLinkStatusRequest(BaseModel):
    status: str
