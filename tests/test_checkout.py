"""Checkout coordination tests."""

import json
from decimal import Decimal
from pathlib import Path

import httpx
import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from pos_terminal.db.base import Base
from pos_terminal.db.session import build_engine
from pos_terminal.db.seed import ensure_payment_methods
from pos_terminal.models import Block, CatalogItem, City, DiningTable, Order, OrderStatus, OrderType, State, Terminal
from pos_terminal.schemas.checkout import CheckoutForm
from pos_terminal.schemas.order import OrderSnapshot
from pos_terminal.services import line_editor, table_service
from pos_terminal.services.checkout_service import CheckoutCoordinator, compose_address, set_payment_link_status
from pos_terminal.services.context import TerminalContext
from pos_terminal.services.errors import ConflictError, ExternalServiceError, ValidationError
from pos_terminal.services.order_registry import OrderRegistry
from pos_terminal.services.payment_links import PaymentLinkClient, PaymentLinkRequest


class FakePaymentLinks:
    def __init__(self, url: str | None = "https://pay.example/abc", fail: bool = False) -> None:
        self.url = url
        self.fail = fail
        self.requests: list[PaymentLinkRequest] = []

    def create_link(self, request: PaymentLinkRequest) -> str:
        self.requests.append(request)
        if self.fail:
            raise ExternalServiceError("payment link could not be created", order_id=request.external_order_id)
        return self.url


class FakePrinter:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.printed: list[OrderSnapshot] = []

    def print_receipt(self, snapshot: OrderSnapshot) -> None:
        if self.fail:
            raise ExternalServiceError("print request failed", order_id=snapshot.order.id)
        self.printed.append(snapshot)


def _build_test_engine(db_file: Path) -> Engine:
    return build_engine(f"sqlite:///{db_file}")


def _prepare(tmp_path: Path) -> tuple[Session, OrderRegistry, dict[str, int]]:
    engine = _build_test_engine(tmp_path / "checkout.db")
    Base.metadata.create_all(bind=engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    ensure_payment_methods(db)

    terminal = Terminal(device_id="CHK-0001", is_paired=True)
    item = CatalogItem(name="Shawarma", price=Decimal("1.750"))
    state = State(name="Capital")
    table = DiningTable(number=7, capacity=4)
    db.add_all([terminal, item, state, table])
    db.flush()
    city = City(state_id=state.id, name="Sharq", delivery_fee=Decimal("0.500"), min_order=Decimal("5.000"))
    other_city = City(state_id=state.id, name="Salmiya", delivery_fee=Decimal("0.750"))
    db.add_all([city, other_city])
    db.flush()
    block = Block(city_id=city.id, name="2")
    db.add(block)
    db.commit()

    registry = OrderRegistry(db, TerminalContext(terminal_id=terminal.id, device_id=terminal.device_id))
    return db, registry, {
        "item": item.id,
        "state": state.id,
        "city": city.id,
        "other_city": other_city.id,
        "block": block.id,
        "table": table.id,
    }


def _order_with_item(db: Session, registry: OrderRegistry, item_id: int, order_type: OrderType) -> int:
    order_id = registry.start_order(order_type).order.id
    line_editor.add_line(db, order_id=order_id, item_id=item_id, qty=2)
    return order_id


def _delivery_form(ids: dict[str, int], **overrides) -> CheckoutForm:
    values = {
        "full_name": "Sara",
        "mobile": "55512345",
        "state_id": ids["state"],
        "city_id": ids["city"],
        "block_id": ids["block"],
        "street": "12",
        "building": "4",
        "payment_method_slug": "cash",
    }
    values.update(overrides)
    return CheckoutForm(**values)


def test_pickup_checkout_completes_and_prints(tmp_path: Path) -> None:
    db, registry, ids = _prepare(tmp_path)
    order_id = _order_with_item(db, registry, ids["item"], OrderType.PICKUP)
    printer = FakePrinter()

    result = CheckoutCoordinator(db, printer=printer).complete(
        order_id=order_id, form=CheckoutForm(full_name=" Ali ", payment_method_slug="card"), user_id=None
    )

    assert result.snapshot.order.status == OrderStatus.COMPLETED
    assert result.snapshot.order.is_locked is True
    assert result.snapshot.order.customer_name == "Ali"
    assert result.snapshot.order.payment_method_slug == "card"
    assert result.snapshot.order.printed_at is not None
    assert result.printed is True
    assert result.warnings == []
    assert [snapshot.order.id for snapshot in printer.printed] == [order_id]


def test_payment_method_is_required(tmp_path: Path) -> None:
    db, registry, ids = _prepare(tmp_path)
    order_id = _order_with_item(db, registry, ids["item"], OrderType.PICKUP)

    with pytest.raises(ValidationError) as exc_info:
        CheckoutCoordinator(db).complete(order_id=order_id, form=CheckoutForm())
    assert exc_info.value.details["missing"] == ["payment_method_slug"]

    with pytest.raises(ValidationError):
        CheckoutCoordinator(db).complete(order_id=order_id, form=CheckoutForm(payment_method_slug="cheque"))
    db.rollback()
    assert db.get(Order, order_id).status == OrderStatus.OPEN


def test_empty_order_cannot_be_checked_out(tmp_path: Path) -> None:
    db, registry, _ = _prepare(tmp_path)
    order_id = registry.start_order().order.id

    with pytest.raises(ValidationError, match="no items"):
        CheckoutCoordinator(db).complete(order_id=order_id, form=CheckoutForm(payment_method_slug="cash"))


def test_delivery_requires_address_references(tmp_path: Path) -> None:
    db, registry, ids = _prepare(tmp_path)
    order_id = _order_with_item(db, registry, ids["item"], OrderType.DELIVERY)

    with pytest.raises(ValidationError) as exc_info:
        CheckoutCoordinator(db).complete(order_id=order_id, form=_delivery_form(ids, block_id=None))
    assert exc_info.value.details["missing"] == ["block_id"]

    with pytest.raises(ValidationError, match="does not match"):
        CheckoutCoordinator(db).complete(order_id=order_id, form=_delivery_form(ids, city_id=ids["other_city"]))


def test_delivery_checkout_records_city_fee_and_address(tmp_path: Path) -> None:
    db, registry, ids = _prepare(tmp_path)
    order_id = _order_with_item(db, registry, ids["item"], OrderType.DELIVERY)

    result = CheckoutCoordinator(db, printer=FakePrinter()).complete(order_id=order_id, form=_delivery_form(ids))

    order = result.snapshot.order
    assert order.city_id == ids["city"]
    assert order.customer_address == "Block 2, 12, Building 4"
    assert order.subtotal == Decimal("3.500")
    assert order.delivery_fee == Decimal("0.500")
    assert order.grand_total == Decimal("4.000")
    assert result.notices and "5.000" in result.notices[0]


def test_payment_link_is_stored_as_pending(tmp_path: Path) -> None:
    db, registry, ids = _prepare(tmp_path)
    order_id = _order_with_item(db, registry, ids["item"], OrderType.PICKUP)
    links = FakePaymentLinks()

    result = CheckoutCoordinator(db, payment_links=links, printer=FakePrinter()).complete(
        order_id=order_id, form=CheckoutForm(payment_method_slug="payment-link", mobile="555")
    )

    assert result.payment_link == "https://pay.example/abc"
    assert result.snapshot.order.payment_link_url == "https://pay.example/abc"
    assert result.snapshot.order.payment_link_status == "pending"
    assert links.requests[0].amount == Decimal("3.500")
    assert links.requests[0].order_number == result.snapshot.order.number


def test_side_effect_failures_do_not_undo_checkout(tmp_path: Path) -> None:
    db, registry, ids = _prepare(tmp_path)
    order_id = _order_with_item(db, registry, ids["item"], OrderType.PICKUP)

    result = CheckoutCoordinator(db, payment_links=FakePaymentLinks(fail=True), printer=FakePrinter(fail=True)).complete(
        order_id=order_id, form=CheckoutForm(payment_method_slug="payment-link")
    )

    assert result.snapshot.order.status == OrderStatus.COMPLETED
    assert result.payment_link is None
    assert result.printed is False
    assert [warning["kind"] for warning in result.warnings] == ["external_service", "external_service"]
    assert db.get(Order, order_id).status == OrderStatus.COMPLETED


def test_unconfigured_collaborators_become_warnings(tmp_path: Path) -> None:
    db, registry, ids = _prepare(tmp_path)
    order_id = _order_with_item(db, registry, ids["item"], OrderType.PICKUP)

    result = CheckoutCoordinator(db).complete(order_id=order_id, form=CheckoutForm(payment_method_slug="payment-link"))

    assert result.snapshot.order.status == OrderStatus.COMPLETED
    assert len(result.warnings) == 2


def test_dine_in_checkout_prints_then_releases_table(tmp_path: Path) -> None:
    db, registry, ids = _prepare(tmp_path)
    order_id = _order_with_item(db, registry, ids["item"], OrderType.DINE_IN)
    table_service.assign_table(db, order_id=order_id, table_id=ids["table"], covers=2)
    printer = FakePrinter()

    result = CheckoutCoordinator(db, printer=printer).complete(
        order_id=order_id, form=CheckoutForm(payment_method_slug="cash")
    )

    assert printer.printed[0].order.table_id == ids["table"]
    assert result.table_released is True
    assert result.snapshot.order.status == OrderStatus.COMPLETED
    assert result.snapshot.order.table_id is None
    table = db.get(DiningTable, ids["table"])
    assert table.status == "available"
    assert table.current_order_id is None


def test_completed_order_rejects_further_checkout(tmp_path: Path) -> None:
    db, registry, ids = _prepare(tmp_path)
    order_id = _order_with_item(db, registry, ids["item"], OrderType.PICKUP)
    CheckoutCoordinator(db).complete(order_id=order_id, form=CheckoutForm(payment_method_slug="cash"))

    with pytest.raises(ConflictError):
        CheckoutCoordinator(db).complete(order_id=order_id, form=CheckoutForm(payment_method_slug="cash"))


def test_checkout_drops_terminal_focus(tmp_path: Path) -> None:
    db, registry, ids = _prepare(tmp_path)
    order_id = _order_with_item(db, registry, ids["item"], OrderType.PICKUP)
    assert db.get(Terminal, registry.ctx.terminal_id).current_order_id == order_id

    CheckoutCoordinator(db).complete(order_id=order_id, form=CheckoutForm(payment_method_slug="cash"))

    assert db.get(Terminal, registry.ctx.terminal_id).current_order_id is None
    assert registry.refresh_current() is None


def test_payment_link_status_updates(tmp_path: Path) -> None:
    db, registry, ids = _prepare(tmp_path)
    order_id = _order_with_item(db, registry, ids["item"], OrderType.PICKUP)
    CheckoutCoordinator(db, payment_links=FakePaymentLinks()).complete(
        order_id=order_id, form=CheckoutForm(payment_method_slug="payment-link")
    )

    snapshot = set_payment_link_status(db, order_id=order_id, status="PAID")

    assert snapshot.order.payment_link_status == "paid"
    assert db.get(Order, order_id).payment_link_verified_at is not None

    set_payment_link_status(db, order_id=order_id, status="failed")
    assert db.get(Order, order_id).payment_link_verified_at is None


def test_payment_link_client_posts_to_backend() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["device"] = request.headers["X-Pos-Device"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"url": "https://pay.example/xyz"})

    client = PaymentLinkClient(
        "https://backend.example/",
        device_token="tok",
        device_id="CHK-0001",
        transport=httpx.MockTransport(handler),
    )
    url = client.create_link(PaymentLinkRequest(external_order_id="5", order_number="POS-1", amount=Decimal("3.500")))

    assert url == "https://pay.example/xyz"
    assert seen["url"] == "https://backend.example/api/pos/payments/link"
    assert seen["auth"] == "Bearer tok"
    assert seen["device"] == "CHK-0001"
    assert seen["body"]["amount"] == "3.500"
    assert seen["body"]["currency"] == "KWD"


def test_payment_link_client_errors_are_external() -> None:
    client = PaymentLinkClient(
        "https://backend.example",
        device_token="tok",
        device_id="CHK-0001",
        transport=httpx.MockTransport(lambda request: httpx.Response(502)),
    )

    with pytest.raises(ExternalServiceError):
        client.create_link(PaymentLinkRequest(external_order_id="5", order_number="POS-1", amount=Decimal("1")))


def test_compose_address_skips_blank_parts() -> None:
    form = CheckoutForm(street=" ", building="9", floor="", address="near the mosque")

    assert compose_address(None, form) == "Building 9, near the mosque"
