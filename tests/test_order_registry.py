"""Open-tab registry tests."""

from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from pos_terminal.db.base import Base
from pos_terminal.db.session import build_engine
from pos_terminal.models import CatalogItem, Order, OrderStatus, OrderType, PosActionLog, Terminal
from pos_terminal.services import line_editor
from pos_terminal.services.context import TerminalContext
from pos_terminal.services.errors import AuthenticationError, ConflictError, NotFoundError
from pos_terminal.services.order_registry import OrderRegistry


def _build_test_engine(db_file: Path) -> Engine:
    return build_engine(f"sqlite:///{db_file}")


def _prepare(tmp_path: Path) -> tuple[Session, TerminalContext, int]:
    engine = _build_test_engine(tmp_path / "registry.db")
    Base.metadata.create_all(bind=engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    terminal = Terminal(device_id="DEV-00AB12", name="Front", is_paired=True)
    item = CatalogItem(name="Tea", price=Decimal("0.500"))
    db.add_all([terminal, item])
    db.commit()
    return db, TerminalContext(terminal_id=terminal.id, device_id=terminal.device_id), item.id


def test_start_order_creates_empty_focused_tab(tmp_path: Path) -> None:
    db, ctx, _ = _prepare(tmp_path)

    snapshot = OrderRegistry(db, ctx).start_order(OrderType.DELIVERY)

    assert snapshot.lines == []
    assert snapshot.order.order_type == OrderType.DELIVERY
    assert snapshot.order.status == OrderStatus.OPEN
    assert snapshot.order.number.startswith("POS-AB12")
    assert db.get(Terminal, ctx.terminal_id).current_order_id == snapshot.order.id
    assert db.scalar(select(PosActionLog.action).where(PosActionLog.order_id == snapshot.order.id)) == "orders:start"


def test_second_empty_tab_is_a_conflict(tmp_path: Path) -> None:
    db, ctx, _ = _prepare(tmp_path)
    registry = OrderRegistry(db, ctx)
    first = registry.start_order()

    with pytest.raises(ConflictError) as exc_info:
        registry.start_order()

    assert exc_info.value.message == "open order with no items"
    assert exc_info.value.details["order_id"] == first.order.id
    assert len(db.scalars(select(Order)).all()) == 1


def test_new_tab_allowed_once_previous_has_items(tmp_path: Path) -> None:
    db, ctx, item_id = _prepare(tmp_path)
    registry = OrderRegistry(db, ctx)
    first = registry.start_order()
    line_editor.add_line(db, order_id=first.order.id, item_id=item_id)

    second = registry.start_order()

    assert second.order.tab_position == first.order.tab_position + 1
    assert [order.id for order in registry.list_active_orders()] == [first.order.id, second.order.id]


def test_select_missing_or_closed_order_is_not_found(tmp_path: Path) -> None:
    db, ctx, _ = _prepare(tmp_path)
    registry = OrderRegistry(db, ctx)
    snapshot = registry.start_order()
    registry.close_order(snapshot.order.id)

    with pytest.raises(NotFoundError):
        registry.select_order(snapshot.order.id)
    with pytest.raises(NotFoundError):
        registry.select_order(9999)


def test_select_order_moves_focus(tmp_path: Path) -> None:
    db, ctx, item_id = _prepare(tmp_path)
    registry = OrderRegistry(db, ctx)
    first = registry.start_order()
    line_editor.add_line(db, order_id=first.order.id, item_id=item_id)
    registry.start_order()

    selected = registry.select_order(first.order.id)

    assert selected.order.id == first.order.id
    assert len(selected.lines) == 1
    assert registry.refresh_current().order.id == first.order.id


def test_refresh_current_falls_back_to_first_open_tab(tmp_path: Path) -> None:
    db, ctx, item_id = _prepare(tmp_path)
    registry = OrderRegistry(db, ctx)
    first = registry.start_order()
    line_editor.add_line(db, order_id=first.order.id, item_id=item_id)
    second = registry.start_order()

    registry.close_order(second.order.id)
    current = registry.refresh_current()

    assert current is not None
    assert current.order.id == first.order.id
    assert db.get(Terminal, ctx.terminal_id).current_order_id == first.order.id

    registry.close_order(first.order.id)
    assert registry.refresh_current() is None
    assert db.get(Terminal, ctx.terminal_id).current_order_id is None


def test_close_order_twice_is_a_conflict(tmp_path: Path) -> None:
    db, ctx, _ = _prepare(tmp_path)
    registry = OrderRegistry(db, ctx)
    snapshot = registry.start_order()
    registry.close_order(snapshot.order.id)

    assert db.get(Order, snapshot.order.id).status == OrderStatus.CANCELLED
    with pytest.raises(ConflictError):
        registry.close_order(snapshot.order.id)


def test_unpaired_terminal_cannot_start_orders(tmp_path: Path) -> None:
    db, ctx, _ = _prepare(tmp_path)
    db.get(Terminal, ctx.terminal_id).is_paired = False
    db.commit()

    with pytest.raises(AuthenticationError):
        OrderRegistry(db, ctx).start_order()


def test_emptying_a_tab_cancels_the_other_empty_tab(tmp_path: Path) -> None:
    db, ctx, item_id = _prepare(tmp_path)
    registry = OrderRegistry(db, ctx)
    first = registry.start_order()
    line_id = line_editor.add_line(db, order_id=first.order.id, item_id=item_id).lines[0].id
    second = registry.start_order()

    snapshot = line_editor.remove_line(db, line_id=line_id)

    assert snapshot.order.status == OrderStatus.OPEN
    assert [order.id for order in registry.list_active_orders()] == [first.order.id]
    assert db.get(Order, second.order.id).status == OrderStatus.CANCELLED
    assert db.get(Terminal, ctx.terminal_id).current_order_id is None
    assert registry.refresh_current().order.id == first.order.id


def test_at_most_one_empty_tab_after_removing_every_line(tmp_path: Path) -> None:
    db, ctx, item_id = _prepare(tmp_path)
    registry = OrderRegistry(db, ctx)
    line_ids = []
    for _ in range(3):
        order_id = registry.start_order().order.id
        line_ids.append(line_editor.add_line(db, order_id=order_id, item_id=item_id).lines[0].id)

    for index, line_id in enumerate(line_ids):
        if index % 2:
            line_editor.set_line_qty(db, line_id=line_id, qty=0)
        else:
            line_editor.remove_line(db, line_id=line_id)

    active = registry.list_active_orders()
    assert len(active) == 1
    assert active[0].subtotal == Decimal("0.000")
    with pytest.raises(ConflictError):
        registry.start_order()
