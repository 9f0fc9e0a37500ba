"""Typed command dispatcher tests."""

from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import TypeAdapter
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from pos_terminal.db.base import Base
from pos_terminal.db.session import build_engine
from pos_terminal.models import CatalogItem, DiningTable, Order, OrderType, Terminal
from pos_terminal.services import commands
from pos_terminal.services.context import TerminalContext
from pos_terminal.services.errors import AuthenticationError


def _build_test_engine(db_file: Path) -> Engine:
    return build_engine(f"sqlite:///{db_file}")


def _prepare(tmp_path: Path) -> tuple[Session, TerminalContext, dict[str, int]]:
    engine = _build_test_engine(tmp_path / "commands.db")
    Base.metadata.create_all(bind=engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    terminal = Terminal(device_id="CMD-0001", is_paired=True)
    other = Terminal(device_id="CMD-0002", is_paired=True)
    item = CatalogItem(name="Coffee", price=Decimal("1.100"))
    table = DiningTable(number=1, capacity=2)
    db.add_all([terminal, other, item, table])
    db.commit()
    ctx = TerminalContext(terminal_id=terminal.id, device_id=terminal.device_id)
    return db, ctx, {"item": item.id, "table": table.id, "other_terminal": other.id}


def test_every_operation_has_a_handler() -> None:
    assert set(commands.HANDLERS) == set(commands.Operation)


def test_command_union_parses_by_op() -> None:
    adapter = TypeAdapter(commands.Command)

    command = adapter.validate_python({"op": "add_line", "order_id": 1, "item_id": 2, "qty": 3})

    assert isinstance(command, commands.AddLine)
    assert command.qty == 3


def test_successful_flow_returns_snapshots(tmp_path: Path) -> None:
    db, ctx, ids = _prepare(tmp_path)

    started = commands.dispatch(db, ctx, commands.StartOrder(order_type=OrderType.DINE_IN))
    order_id = started.data.order.id
    added = commands.dispatch(db, ctx, commands.AddLine(order_id=order_id, item_id=ids["item"], qty=2))
    seated = commands.dispatch(db, ctx, commands.AssignTable(order_id=order_id, table_id=ids["table"], covers=2))

    assert started.ok and added.ok and seated.ok
    assert added.data.order.grand_total == Decimal("2.200")
    assert seated.data.order.table_id == ids["table"]
    dumped = added.model_dump(mode="json")
    assert dumped["op"] == "add_line"
    assert dumped["data"]["order"]["grand_total"] == "2.200"


def test_engine_errors_become_typed_failures(tmp_path: Path) -> None:
    db, ctx, _ = _prepare(tmp_path)
    commands.dispatch(db, ctx, commands.StartOrder())

    conflict = commands.dispatch(db, ctx, commands.StartOrder())
    missing = commands.dispatch(db, ctx, commands.GetOrder(order_id=999))
    invalid = commands.dispatch(db, ctx, commands.ApplyPromo(order_id=1, code="NOPE"))

    assert conflict.ok is False
    assert conflict.error.kind == "conflict"
    assert conflict.status_code == 409
    assert missing.error.kind == "not_found"
    assert missing.status_code == 404
    assert invalid.error.kind == "validation"
    assert invalid.error.message == "invalid or expired promo code"
    assert invalid.status_code == 422


def test_orders_of_other_terminals_are_not_visible(tmp_path: Path) -> None:
    db, ctx, ids = _prepare(tmp_path)
    order_id = commands.dispatch(db, ctx, commands.StartOrder()).data.order.id
    other_ctx = TerminalContext(terminal_id=ids["other_terminal"], device_id="CMD-0002")

    result = commands.dispatch(db, other_ctx, commands.CloseOrder(order_id=order_id))

    assert result.error.kind == "not_found"
    assert db.get(Order, order_id).is_open


def test_failed_operation_leaves_no_partial_state(tmp_path: Path) -> None:
    db, ctx, ids = _prepare(tmp_path)
    order_id = commands.dispatch(db, ctx, commands.StartOrder(order_type=OrderType.DINE_IN)).data.order.id

    result = commands.dispatch(db, ctx, commands.AssignTable(order_id=order_id, table_id=ids["table"], covers=0))

    assert result.error.kind == "validation"
    assert db.get(DiningTable, ids["table"]).status == "available"


def test_close_order_returns_no_data(tmp_path: Path) -> None:
    db, ctx, _ = _prepare(tmp_path)
    order_id = commands.dispatch(db, ctx, commands.StartOrder()).data.order.id

    result = commands.dispatch(db, ctx, commands.CloseOrder(order_id=order_id))
    current = commands.dispatch(db, ctx, commands.RefreshCurrent())

    assert result.ok and result.data is None
    assert current.ok and current.data is None


def test_authentication_errors_propagate(tmp_path: Path) -> None:
    db, ctx, _ = _prepare(tmp_path)
    db.get(Terminal, ctx.terminal_id).is_paired = False
    db.commit()

    with pytest.raises(AuthenticationError):
        commands.dispatch(db, ctx, commands.StartOrder())
