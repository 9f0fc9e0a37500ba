"""pos terminal schema

Revision ID: 0001_pos_terminal
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_pos_terminal"
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(12, 3)


def upgrade() -> None:
    op.create_table(
        "pos_users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=128), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="cashier"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_pos_users_username", "pos_users", ["username"], unique=True)
    op.create_table(
        "app_settings",
        sa.Column("key", sa.String(length=100), primary_key=True),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.Column("updated_by_user_id", sa.Integer(), sa.ForeignKey("pos_users.id"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "terminals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("device_id", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False, server_default="POS"),
        sa.Column("is_paired", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("current_order_id", sa.Integer(), nullable=True),
        sa.Column("paired_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_terminals_device_id", "terminals", ["device_id"], unique=True)
    op.create_table(
        "states",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False),
    )
    op.create_table(
        "cities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("state_id", sa.Integer(), sa.ForeignKey("states.id"), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("delivery_fee", MONEY, nullable=False, server_default="0"),
        sa.Column("min_order", MONEY, nullable=True),
    )
    op.create_index("ix_cities_state_id", "cities", ["state_id"])
    op.create_table(
        "blocks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("city_id", sa.Integer(), sa.ForeignKey("cities.id"), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
    )
    op.create_index("ix_blocks_city_id", "blocks", ["city_id"])
    op.create_table(
        "catalog_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price", MONEY, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("is_outofstock", sa.Boolean(), nullable=False, server_default=sa.text("0")),
    )
    op.create_table(
        "addon_groups",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("catalog_items.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("max_select", sa.Integer(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_addon_groups_item_id", "addon_groups", ["item_id"])
    op.create_table(
        "addons",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("addon_groups.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price", MONEY, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
    )
    op.create_index("ix_addons_group_id", "addons", ["group_id"])
    op.create_table(
        "payment_methods",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.String(length=64), nullable=False, unique=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("requires_payment_link", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("legacy_code", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "promos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=64), nullable=False, unique=True),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("value", MONEY, nullable=False),
        sa.Column("min_total", MONEY, nullable=False, server_default="0"),
        sa.Column("max_discount", MONEY, nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
    )
    op.create_table(
        "dining_tables",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(length=64), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="available"),
        sa.Column("current_order_id", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("number", sa.String(length=48), nullable=False),
        sa.Column("terminal_id", sa.Integer(), sa.ForeignKey("terminals.id"), nullable=False),
        sa.Column("order_type", sa.String(length=8), nullable=False, server_default="pickup"),
        sa.Column("status", sa.String(length=9), nullable=False, server_default="open"),
        sa.Column("tab_position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("subtotal", MONEY, nullable=False, server_default="0"),
        sa.Column("discount_total", MONEY, nullable=False, server_default="0"),
        sa.Column("delivery_fee", MONEY, nullable=False, server_default="0"),
        sa.Column("grand_total", MONEY, nullable=False, server_default="0"),
        sa.Column("promo_id", sa.Integer(), sa.ForeignKey("promos.id"), nullable=True),
        sa.Column("promocode", sa.String(length=64), nullable=True),
        sa.Column("table_id", sa.Integer(), sa.ForeignKey("dining_tables.id"), nullable=True),
        sa.Column("table_name", sa.String(length=64), nullable=True),
        sa.Column("covers", sa.Integer(), nullable=True),
        sa.Column("city_id", sa.Integer(), sa.ForeignKey("cities.id"), nullable=True),
        sa.Column("void_delivery_fee", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("customer_mobile", sa.String(length=32), nullable=True),
        sa.Column("customer_email", sa.String(length=255), nullable=True),
        sa.Column("customer_address", sa.Text(), nullable=True),
        sa.Column("customer_note", sa.Text(), nullable=True),
        sa.Column("payment_method_slug", sa.String(length=64), nullable=True),
        sa.Column("payment_link_url", sa.Text(), nullable=True),
        sa.Column("payment_link_status", sa.String(length=32), nullable=True),
        sa.Column("payment_link_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_locked", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_by_user_id", sa.Integer(), sa.ForeignKey("pos_users.id"), nullable=True),
        sa.Column("completed_by_user_id", sa.Integer(), sa.ForeignKey("pos_users.id"), nullable=True),
        sa.Column("printed_by_user_id", sa.Integer(), sa.ForeignKey("pos_users.id"), nullable=True),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("printed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("uq_orders_number", "orders", ["number"], unique=True)
    op.create_index("ix_orders_terminal_id", "orders", ["terminal_id"])
    op.create_index("ix_orders_status", "orders", ["status"])
    op.create_index("ix_orders_terminal_status", "orders", ["terminal_id", "status"])
    op.create_table(
        "order_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("catalog_items.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("base_price", MONEY, nullable=False),
        sa.Column("addons_unit_total", MONEY, nullable=False, server_default="0"),
        sa.Column("unit_price", MONEY, nullable=False),
        sa.Column("qty", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("line_total", MONEY, nullable=False),
        sa.Column("addon_signature", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("item_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_order_lines_order_id", "order_lines", ["order_id"])
    op.create_table(
        "order_line_addons",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("line_id", sa.Integer(), sa.ForeignKey("order_lines.id"), nullable=False),
        sa.Column("addon_id", sa.Integer(), sa.ForeignKey("addons.id"), nullable=False),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("addon_groups.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price", MONEY, nullable=False),
        sa.Column("qty", sa.Integer(), nullable=False, server_default="1"),
    )
    op.create_index("ix_order_line_addons_line_id", "order_line_addons", ["line_id"])
    op.create_table(
        "pos_action_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("meta_json", sa.JSON(), nullable=True),
        sa.Column("performed_by_user_id", sa.Integer(), sa.ForeignKey("pos_users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_pos_action_log_order_id", "pos_action_log", ["order_id"])

    with op.batch_alter_table("terminals") as batch_op:
        batch_op.create_foreign_key("fk_terminals_current_order", "orders", ["current_order_id"], ["id"])
    with op.batch_alter_table("dining_tables") as batch_op:
        batch_op.create_foreign_key("fk_dining_tables_current_order", "orders", ["current_order_id"], ["id"])


def downgrade() -> None:
    with op.batch_alter_table("dining_tables") as batch_op:
        batch_op.drop_constraint("fk_dining_tables_current_order", type_="foreignkey")
    with op.batch_alter_table("terminals") as batch_op:
        batch_op.drop_constraint("fk_terminals_current_order", type_="foreignkey")
    op.drop_index("ix_pos_action_log_order_id", table_name="pos_action_log")
    op.drop_table("pos_action_log")
    op.drop_index("ix_order_line_addons_line_id", table_name="order_line_addons")
    op.drop_table("order_line_addons")
    op.drop_index("ix_order_lines_order_id", table_name="order_lines")
    op.drop_table("order_lines")
    op.drop_index("ix_orders_terminal_status", table_name="orders")
    op.drop_index("ix_orders_status", table_name="orders")
    op.drop_index("ix_orders_terminal_id", table_name="orders")
    op.drop_index("uq_orders_number", table_name="orders")
    op.drop_table("orders")
    op.drop_table("dining_tables")
    op.drop_table("promos")
    op.drop_table("payment_methods")
    op.drop_index("ix_addons_group_id", table_name="addons")
    op.drop_table("addons")
    op.drop_index("ix_addon_groups_item_id", table_name="addon_groups")
    op.drop_table("addon_groups")
    op.drop_table("catalog_items")
    op.drop_index("ix_blocks_city_id", table_name="blocks")
    op.drop_table("blocks")
    op.drop_index("ix_cities_state_id", table_name="cities")
    op.drop_table("cities")
    op.drop_table("states")
    op.drop_index("ix_terminals_device_id", table_name="terminals")
    op.drop_table("terminals")
    op.drop_table("app_settings")
    op.drop_index("ix_pos_users_username", table_name="pos_users")
    op.drop_table("pos_users")
