"""Checkout form and result schemas."""

from pydantic import BaseModel

from pos_terminal.schemas.order import OrderSnapshot


class CheckoutForm(BaseModel):
    """Operator-entered data needed to finalize an order."""

    full_name: str | None = None
    mobile: str | None = None
    email: str | None = None
    note: str | None = None
    state_id: int | None = None
    city_id: int | None = None
    block_id: int | None = None
    street: str | None = None
    building: str | None = None
    floor: str | None = None
    address: str | None = None
    payment_method_slug: str | None = None


class CheckoutResult(BaseModel):
    """Finalized order plus the outcome of its secondary side effects."""

    snapshot: OrderSnapshot
    payment_link: str | None = None
    printed: bool = False
    table_released: bool = False
    warnings: list[dict] = []
    notices: list[str] = []
