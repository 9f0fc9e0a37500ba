"""Print bridge client: sends rendered receipts to the terminal's print service."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from pos_terminal.core.config import settings
from pos_terminal.schemas.order import OrderSnapshot
from pos_terminal.services.errors import ExternalServiceError
from pos_terminal.services.receipts import render_receipt_pdf

logger = logging.getLogger(__name__)


class ReceiptPrinter(Protocol):
    def print_receipt(self, snapshot: OrderSnapshot) -> None: ...


class HttpReceiptPrinter:
    """Posts the receipt PDF to ``{base_url}/print``."""

    def __init__(self, base_url: str, *, timeout: float = 15.0, transport: httpx.BaseTransport | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def print_receipt(self, snapshot: OrderSnapshot) -> None:
        try:
            document = render_receipt_pdf(snapshot)
        except Exception as exc:
            logger.exception("[PRINT] receipt rendering failed for order %s", snapshot.order.id)
            raise ExternalServiceError("receipt could not be rendered", order_id=snapshot.order.id) from exc

        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    "/print",
                    content=document,
                    headers={"Content-Type": "application/pdf", "X-Order-Number": snapshot.order.number},
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("[PRINT] print request failed for order %s: %s", snapshot.order.id, exc)
            raise ExternalServiceError("print request failed", order_id=snapshot.order.id) from exc


def build_default_printer() -> HttpReceiptPrinter | None:
    if not settings.print_service_url:
        return None
    return HttpReceiptPrinter(settings.print_service_url, timeout=settings.http_timeout_seconds)
