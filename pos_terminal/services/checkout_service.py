"""Checkout: validate the form, finalize the order, then link, print and release."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from pos_terminal.core.config import settings
from pos_terminal.models import Block, City, Order, OrderStatus, OrderType, PaymentMethod, State, Terminal
from pos_terminal.schemas.checkout import CheckoutForm, CheckoutResult
from pos_terminal.schemas.order import OrderSnapshot
from pos_terminal.services import pricing
from pos_terminal.services.audit_service import log_action
from pos_terminal.services.errors import ExternalServiceError, ValidationError
from pos_terminal.services.order_state import build_snapshot, count_lines, get_open_order, get_order, recompute_order
from pos_terminal.services.payment_links import PaymentLinkRequest, PaymentLinkService
from pos_terminal.services.printing import ReceiptPrinter
from pos_terminal.services.table_service import release_table
from pos_terminal.utils.time import utcnow

logger = logging.getLogger(__name__)

PAID_LINK_STATUSES: frozenset[str] = frozenset({"paid", "captured", "success"})


@dataclass(frozen=True)
class DeliveryTarget:
    state: State
    city: City
    block: Block
    address: str


def _clean(value: str | None) -> str:
    return (value or "").strip()


def compose_address(block: Block | None, form: CheckoutForm) -> str:
    """Join block, street, building, floor and free text into one address line."""
    parts = [
        f"Block {block.name}" if block is not None else "",
        _clean(form.street),
        f"Building {_clean(form.building)}" if _clean(form.building) else "",
        f"Floor {_clean(form.floor)}" if _clean(form.floor) else "",
        _clean(form.address),
    ]
    return ", ".join(part for part in parts if part)


def resolve_payment_method(db: Session, slug: str | None) -> PaymentMethod:
    if not _clean(slug):
        raise ValidationError("payment method is required", missing=["payment_method_slug"])
    method = db.scalar(select(PaymentMethod).where(PaymentMethod.slug == _clean(slug)).limit(1))
    if method is None or not method.is_active:
        raise ValidationError("payment method is not available", payment_method_slug=slug)
    return method


def resolve_delivery_target(db: Session, form: CheckoutForm) -> DeliveryTarget:
    """Check that state, city and block exist and belong together."""
    missing = [name for name in ("state_id", "city_id", "block_id") if getattr(form, name) is None]
    if missing:
        raise ValidationError("delivery address is incomplete", missing=missing)

    state: State | None = db.get(State, form.state_id)
    city: City | None = db.get(City, form.city_id)
    block: Block | None = db.get(Block, form.block_id)
    if state is None or city is None or block is None:
        raise ValidationError("delivery address references an unknown area", state_id=form.state_id, city_id=form.city_id, block_id=form.block_id)
    if city.state_id != state.id or block.city_id != city.id:
        raise ValidationError("delivery area does not match", state_id=state.id, city_id=city.id, block_id=block.id)

    address = compose_address(block, form)
    if not address:
        raise ValidationError("delivery address is required", missing=["address"])
    return DeliveryTarget(state=state, city=city, block=block, address=address)


class CheckoutCoordinator:
    """Finalizes orders and runs the non-fatal side effects that follow.

    Payment links and printing run after the order is committed; their
    failures are reported in ``warnings`` and never undo the checkout.
    """

    def __init__(
        self,
        db: Session,
        *,
        payment_links: PaymentLinkService | None = None,
        printer: ReceiptPrinter | None = None,
    ) -> None:
        self.db = db
        self.payment_links = payment_links
        self.printer = printer

    def complete(self, *, order_id: int, form: CheckoutForm, user_id: int | None = None) -> CheckoutResult:
        db = self.db
        order = get_open_order(db, order_id)
        if count_lines(db, order.id) == 0:
            raise ValidationError("order has no items", order_id=order.id)

        method = resolve_payment_method(db, form.payment_method_slug)
        target: DeliveryTarget | None = None
        if order.order_type == OrderType.DELIVERY:
            target = resolve_delivery_target(db, form)

        order.customer_name = _clean(form.full_name) or None
        order.customer_mobile = _clean(form.mobile) or None
        order.customer_email = _clean(form.email) or None
        order.customer_note = _clean(form.note) or None
        order.payment_method_slug = method.slug
        if target is not None:
            order.city_id = target.city.id
            order.customer_address = target.address

        recompute_order(db, order)
        order.status = OrderStatus.COMPLETED
        order.completed_at = utcnow()
        order.completed_by_user_id = user_id
        order.is_locked = True
        terminal: Terminal | None = db.get(Terminal, order.terminal_id)
        if terminal is not None and terminal.current_order_id == order.id:
            terminal.current_order_id = None
        log_action(
            db,
            action="orders:complete",
            order_id=order.id,
            user_id=user_id,
            meta={"payment_method": method.slug, "grand_total": str(order.grand_total)},
        )
        db.commit()
        logger.info("[CHECKOUT] order %s completed (%s)", order.id, method.slug)

        result = CheckoutResult(snapshot=build_snapshot(db, order.id))
        if target is not None and target.city.min_order is not None:
            minimum = pricing.money(target.city.min_order)
            if result.snapshot.order.subtotal < minimum:
                result.notices.append(f"subtotal is below the minimum order of {minimum} for {target.city.name}")

        if method.requires_payment_link:
            self._create_payment_link(order, result)
        self._print(order, result, user_id)

        if order.order_type == OrderType.DINE_IN:
            release_table(db, order_id=order.id, user_id=user_id)
            result.table_released = True

        result.snapshot = build_snapshot(db, order.id)
        return result

    def _create_payment_link(self, order: Order, result: CheckoutResult) -> None:
        snapshot = result.snapshot.order
        try:
            if self.payment_links is None:
                raise ExternalServiceError("payment link service is not configured", order_id=order.id)
            url = self.payment_links.create_link(
                PaymentLinkRequest(
                    external_order_id=str(order.id),
                    order_number=snapshot.number,
                    amount=snapshot.grand_total,
                    currency=settings.currency,
                    customer={
                        "name": snapshot.customer_name,
                        "mobile": snapshot.customer_mobile,
                        "email": order.customer_email,
                    },
                )
            )
        except ExternalServiceError as exc:
            logger.warning("[CHECKOUT] payment link failed for order %s: %s", order.id, exc.message)
            result.warnings.append(exc.as_dict())
            return

        order.payment_link_url = url
        order.payment_link_status = "pending"
        log_action(self.db, action="orders:paymentLink:set", order_id=order.id, meta={"url": url})
        self.db.commit()
        result.payment_link = url

    def _print(self, order: Order, result: CheckoutResult, user_id: int | None) -> None:
        try:
            if self.printer is None:
                raise ExternalServiceError("print service is not configured", order_id=order.id)
            self.printer.print_receipt(result.snapshot)
        except ExternalServiceError as exc:
            logger.warning("[PRINT] order %s not printed: %s", order.id, exc.message)
            result.warnings.append(exc.as_dict())
            return

        order.printed_at = utcnow()
        order.printed_by_user_id = user_id
        log_action(self.db, action="orders:markPrinted", order_id=order.id, user_id=user_id)
        self.db.commit()
        result.printed = True


def set_payment_link_status(db: Session, *, order_id: int, status: str, user_id: int | None = None) -> OrderSnapshot:
    """Record the latest payment-link status reported for an order."""
    order = get_order(db, order_id)
    if order.payment_link_url is None:
        raise ValidationError("order has no payment link", order_id=order_id)

    normalized = _clean(status).lower()
    if not normalized:
        raise ValidationError("payment link status is required")
    order.payment_link_status = normalized
    order.payment_link_verified_at = utcnow() if normalized in PAID_LINK_STATUSES else None
    log_action(db, action="orders:paymentLink:status", order_id=order.id, user_id=user_id, meta={"status": normalized})
    db.commit()
    return build_snapshot(db, order.id)
