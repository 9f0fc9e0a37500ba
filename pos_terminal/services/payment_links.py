"""Client for the backend payment-link endpoint."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Protocol

import httpx

from pos_terminal.core.config import settings
from pos_terminal.services.errors import ExternalServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentLinkRequest:
    external_order_id: str
    order_number: str
    amount: Decimal
    currency: str = "KWD"
    customer: dict[str, str | None] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["amount"] = str(self.amount)
        return payload


class PaymentLinkService(Protocol):
    def create_link(self, request: PaymentLinkRequest) -> str: ...


class PaymentLinkClient:
    """Creates hosted payment links through ``/api/pos/payments/link``."""

    def __init__(
        self,
        base_url: str,
        *,
        device_token: str,
        device_id: str,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/api/pos"
        self.device_token = device_token
        self.device_id = device_id
        self.timeout = timeout
        self.transport = transport

    def create_link(self, request: PaymentLinkRequest) -> str:
        headers = {"Authorization": f"Bearer {self.device_token}", "X-Pos-Device": self.device_id}
        try:
            with httpx.Client(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = client.post("/payments/link", json=request.to_payload())
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("[PAYMENT] link request failed for order %s: %s", request.external_order_id, exc)
            raise ExternalServiceError("payment link could not be created", order_id=request.external_order_id) from exc

        url = data.get("url") if isinstance(data, dict) else None
        if not url:
            raise ExternalServiceError("payment link response has no url", order_id=request.external_order_id)
        return str(url)


def build_default_payment_link_client(device_id: str) -> PaymentLinkClient | None:
    """Return a client from settings, or None when the backend is not configured."""
    if not settings.server_base_url or not settings.server_device_token:
        return None
    return PaymentLinkClient(
        settings.server_base_url,
        device_token=settings.server_device_token,
        device_id=device_id,
        timeout=settings.http_timeout_seconds,
    )
