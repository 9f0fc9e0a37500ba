"""Promo code application tests."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from pos_terminal.db.base import Base
from pos_terminal.db.session import build_engine
from pos_terminal.models import CatalogItem, Order, Promo, Terminal
from pos_terminal.services import line_editor, promo_engine
from pos_terminal.services.context import TerminalContext
from pos_terminal.services.errors import ValidationError
from pos_terminal.services.order_registry import OrderRegistry
from pos_terminal.services.order_state import recompute_order


def _build_test_engine(db_file: Path) -> Engine:
    return build_engine(f"sqlite:///{db_file}")


def _prepare(tmp_path: Path) -> tuple[Session, int, dict[str, int]]:
    """Open an order worth 6.250 (2 x 2.500 + 1 x 1.250)."""
    engine = _build_test_engine(tmp_path / "promo.db")
    Base.metadata.create_all(bind=engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()

    now = datetime.now(timezone.utc)
    terminal = Terminal(device_id="PROMO-01", is_paired=True)
    burger = CatalogItem(name="Burger", price=Decimal("2.500"))
    fries = CatalogItem(name="Fries", price=Decimal("1.250"))
    db.add_all(
        [
            terminal,
            burger,
            fries,
            Promo(code="SAVE10", type="percent", value=Decimal("10"), min_total=Decimal("5.000")),
            Promo(code="BIG", type="amount", value=Decimal("2"), min_total=Decimal("50.000")),
            Promo(
                code="OLD",
                type="amount",
                value=Decimal("1"),
                start_at=now - timedelta(days=10),
                end_at=now - timedelta(days=1),
            ),
            Promo(code="OFF", type="percent", value=Decimal("5"), active=False),
        ]
    )
    db.commit()

    ctx = TerminalContext(terminal_id=terminal.id, device_id=terminal.device_id)
    order_id = OrderRegistry(db, ctx).start_order().order.id
    burger_line = line_editor.add_line(db, order_id=order_id, item_id=burger.id, qty=2).lines[0].id
    line_editor.add_line(db, order_id=order_id, item_id=fries.id, qty=1)
    return db, order_id, {"burger_line": burger_line}


def test_apply_promo_case_insensitive(tmp_path: Path) -> None:
    db, order_id, _ = _prepare(tmp_path)

    snapshot = promo_engine.apply_promo(db, order_id=order_id, code="  save10 ")

    assert snapshot.order.promocode == "SAVE10"
    assert snapshot.order.discount_total == Decimal("0.625")
    assert snapshot.order.grand_total == Decimal("5.625")


@pytest.mark.parametrize("code", ["NOPE", "OLD", "OFF", "BIG", ""])
def test_invalid_codes_leave_order_unchanged(tmp_path: Path, code: str) -> None:
    db, order_id, _ = _prepare(tmp_path)

    with pytest.raises(ValidationError, match="invalid or expired promo code"):
        promo_engine.apply_promo(db, order_id=order_id, code=code)

    db.rollback()
    order = db.get(Order, order_id)
    assert order.promo_id is None
    assert order.discount_total == Decimal("0.000")


def test_apply_then_remove_restores_totals(tmp_path: Path) -> None:
    db, order_id, _ = _prepare(tmp_path)
    before = db.get(Order, order_id).grand_total

    promo_engine.apply_promo(db, order_id=order_id, code="SAVE10")
    snapshot = promo_engine.remove_promo(db, order_id=order_id)

    assert snapshot.order.promocode is None
    assert snapshot.order.discount_total == Decimal("0.000")
    assert snapshot.order.grand_total == before


def test_remove_without_promo_is_noop(tmp_path: Path) -> None:
    db, order_id, _ = _prepare(tmp_path)

    snapshot = promo_engine.remove_promo(db, order_id=order_id)

    assert snapshot.order.grand_total == Decimal("6.250")


def test_discount_drops_when_subtotal_falls_below_minimum(tmp_path: Path) -> None:
    db, order_id, ids = _prepare(tmp_path)
    promo_engine.apply_promo(db, order_id=order_id, code="SAVE10")

    snapshot = line_editor.set_line_qty(db, line_id=ids["burger_line"], qty=1)

    assert snapshot.order.subtotal == Decimal("3.750")
    assert snapshot.order.promocode == "SAVE10"
    assert snapshot.order.discount_total == Decimal("0.000")


def test_expired_promo_stops_discounting_on_recompute(tmp_path: Path) -> None:
    db, order_id, _ = _prepare(tmp_path)
    promo_engine.apply_promo(db, order_id=order_id, code="SAVE10")
    order = db.get(Order, order_id)
    order.promo.end_at = datetime.now(timezone.utc) - timedelta(minutes=1)

    totals = recompute_order(db, order)

    assert totals.discount_total == Decimal("0.000")
    assert totals.grand_total == Decimal("6.250")
