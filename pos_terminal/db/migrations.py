"""Lightweight schema migrations for SQLite databases."""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

# Columns added after the first terminal builds shipped.
LATE_ORDER_COLUMNS: dict[str, str] = {
    "void_delivery_fee": "BOOLEAN NOT NULL DEFAULT 0",
    "payment_link_url": "TEXT",
    "payment_link_status": "VARCHAR(32)",
    "payment_link_verified_at": "DATETIME",
    "printed_at": "DATETIME",
    "printed_by_user_id": "INTEGER",
    "completed_by_user_id": "INTEGER",
    "customer_email": "VARCHAR(255)",
    "customer_note": "TEXT",
    "last_accessed_at": "DATETIME",
}


def _sqlite_column_names(connection: Connection, table_name: str) -> set[str]:
    """Return column names for a SQLite table using PRAGMA table_info."""
    rows = connection.execute(text(f"PRAGMA table_info({table_name});")).mappings().all()
    return {str(row["name"]) for row in rows}


def _sqlite_index_names(connection: Connection, table_name: str) -> set[str]:
    """Return index names for a SQLite table using PRAGMA index_list."""
    rows = connection.execute(text(f"PRAGMA index_list({table_name});")).mappings().all()
    return {str(row["name"]) for row in rows}


def ensure_sqlite_schema(engine: Engine) -> None:
    """Apply lightweight schema updates for legacy SQLite databases."""
    if engine.dialect.name != "sqlite":
        return

    with engine.begin() as connection:
        table_rows = connection.execute(text("SELECT name FROM sqlite_master WHERE type='table';")).all()
        table_names: set[str] = {str(row[0]) for row in table_rows}
        if "orders" not in table_names:
            return

        order_columns: set[str] = _sqlite_column_names(connection, "orders")
        for column_name, ddl in LATE_ORDER_COLUMNS.items():
            if column_name in order_columns:
                continue
            connection.execute(text(f"ALTER TABLE orders ADD COLUMN {column_name} {ddl}"))
            logger.info("[MIGRATION] added orders.%s", column_name)

        if "last_accessed_at" not in order_columns:
            connection.execute(text("UPDATE orders SET last_accessed_at = opened_at WHERE last_accessed_at IS NULL"))

        if "uq_orders_number" not in _sqlite_index_names(connection, "orders"):
            connection.execute(text("CREATE UNIQUE INDEX IF NOT EXISTS uq_orders_number ON orders (number)"))
