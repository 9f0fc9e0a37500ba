"""Receipt rendering for finalized orders."""

from __future__ import annotations

from decimal import Decimal
from io import BytesIO
from typing import Any

from pos_terminal.core.config import settings
from pos_terminal.models.order import OrderType
from pos_terminal.schemas.order import OrderSnapshot
from pos_terminal.utils.pdf_fonts import register_receipt_font

ORDER_TYPE_LABELS: dict[OrderType, str] = {
    OrderType.DELIVERY: "Delivery",
    OrderType.PICKUP: "Pickup",
    OrderType.DINE_IN: "Dine-in",
}

RECEIPT_WIDTH_MM: int = 80


def _reportlab():
    from reportlab.lib import colors
    from reportlab.lib.units import mm
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    return {
        "colors": colors,
        "mm": mm,
        "ParagraphStyle": ParagraphStyle,
        "getSampleStyleSheet": getSampleStyleSheet,
        "Paragraph": Paragraph,
        "SimpleDocTemplate": SimpleDocTemplate,
        "Spacer": Spacer,
        "Table": Table,
        "TableStyle": TableStyle,
    }


def format_amount(value: Decimal | int | str) -> str:
    return f"{Decimal(value):.3f} {settings.currency}"


def receipt_header(snapshot: OrderSnapshot) -> list[str]:
    order = snapshot.order
    header = [f"Order {order.number}", ORDER_TYPE_LABELS.get(order.order_type, order.order_type.value)]
    if order.order_type == OrderType.DINE_IN and order.table_name:
        header.append(f"Table: {order.table_name} ({order.covers or 0} covers)")
    if order.customer_name:
        header.append(f"Customer: {order.customer_name} {order.customer_mobile or ''}".strip())
    if order.order_type == OrderType.DELIVERY and order.customer_address:
        header.append(f"Address: {order.customer_address}")
    return header


def receipt_rows(snapshot: OrderSnapshot) -> list[list[str]]:
    """Return ``[label, amount]`` rows for lines, add-ons and totals."""
    rows: list[list[str]] = []
    for line in snapshot.lines:
        rows.append([f"{line.qty} x {line.name}", format_amount(line.line_total)])
        for addon in line.addons:
            rows.append([f"   + {addon.name} x{addon.qty}", format_amount(addon.price * addon.qty)])
    order = snapshot.order
    rows.append(["Subtotal", format_amount(order.subtotal)])
    if order.discount_total > 0:
        label = f"Discount ({order.promocode})" if order.promocode else "Discount"
        rows.append([label, "-" + format_amount(order.discount_total)])
    if order.order_type == OrderType.DELIVERY:
        rows.append(["Delivery", format_amount(order.delivery_fee)])
    rows.append(["Total", format_amount(order.grand_total)])
    return rows


def render_receipt_pdf(snapshot: OrderSnapshot, meta: dict[str, Any] | None = None) -> bytes:
    """Render a roll-width receipt PDF and return its bytes."""
    rl = _reportlab()
    font_name = register_receipt_font()
    styles = rl["getSampleStyleSheet"]()
    title = rl["ParagraphStyle"]("ReceiptTitle", parent=styles["Heading3"], fontName=font_name)
    normal = rl["ParagraphStyle"]("ReceiptNormal", parent=styles["Normal"], fontName=font_name, fontSize=8)

    story: list[Any] = []
    if meta and meta.get("branch_name"):
        story.append(rl["Paragraph"](str(meta["branch_name"]), title))
    for text in receipt_header(snapshot):
        story.append(rl["Paragraph"](text, normal))
    story.append(rl["Spacer"](1, 6))

    width = RECEIPT_WIDTH_MM * rl["mm"]
    table = rl["Table"](receipt_rows(snapshot), colWidths=[width * 0.6, width * 0.3])
    table.setStyle(
        rl["TableStyle"](
            [
                ("FONTNAME", (0, 0), (-1, -1), font_name),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("LINEABOVE", (0, -1), (-1, -1), 0.5, rl["colors"].black),
            ]
        )
    )
    story.append(table)

    buffer = BytesIO()
    doc = rl["SimpleDocTemplate"](
        buffer,
        pagesize=(width, 297 * rl["mm"]),
        leftMargin=4 * rl["mm"],
        rightMargin=4 * rl["mm"],
        topMargin=4 * rl["mm"],
        bottomMargin=4 * rl["mm"],
    )
    doc.build(story)
    return buffer.getvalue()
