# -*- coding: utf-8 -*-
"""
Клиент PayPal Orders API v2.

Режим (sandbox/live) и ключи берутся из настроек.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import httpx

from alpha_factory.config import settings

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Alpha Factory Invoice Payment"


class PayPalError(Exception):
    """Не удалось связаться с PayPal или получить токен доступа."""


@dataclass
class PayPalResponse:
    ok: bool
    status_code: int
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class CaptureInfo:
    """Первый capture первого purchase unit."""
    status: Optional[str]
    transaction_id: Optional[str] = None
    amount: Optional[dict[str, Any]] = None
    reference_id: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.status == "COMPLETED"


def format_amount(amount: float | Decimal) -> str:
    """Сумма с двумя знаками после запятой, как требует PayPal."""
    return str(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def extract_capture(capture_data: dict[str, Any]) -> CaptureInfo:
    units = capture_data.get("purchase_units") or []
    if not units:
        return CaptureInfo(status=None)
    unit = units[0] or {}
    captures = (unit.get("payments") or {}).get("captures") or []
    if not captures:
        return CaptureInfo(status=None, reference_id=unit.get("reference_id"))
    capture = captures[0] or {}
    return CaptureInfo(
        status=capture.get("status"),
        transaction_id=capture.get("id"),
        amount=capture.get("amount"),
        reference_id=unit.get("reference_id"),
    )


def find_approval_url(order: dict[str, Any]) -> Optional[str]:
    for link in order.get("links") or []:
        if link.get("rel") == "approve":
            return link.get("href")
    return None


class PayPalClient:
    """
    Тонкая обёртка над REST API PayPal.

    Токен доступа запрашивается на каждый вызов, как делает
    серверная интеграция PayPal по умолчанию.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.client_id = settings.PAYPAL_CLIENT_ID if client_id is None else client_id
        self.client_secret = settings.PAYPAL_CLIENT_SECRET if client_secret is None else client_secret
        self.base_url = base_url or settings.paypal_base_url
        self.timeout = timeout

    async def _request(self, method: str, path: str, json: Optional[dict[str, Any]] = None) -> PayPalResponse:
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout) as client:
                token = await self._get_access_token(client)
                response = await client.request(
                    method,
                    path,
                    json=json,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            raise PayPalError(f"PayPal request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {"raw": response.text}

        if response.is_error:
            logger.error(f"PayPal API {method} {path} -> {response.status_code}: {data}")
        return PayPalResponse(ok=not response.is_error, status_code=response.status_code, data=data)

    async def _get_access_token(self, client: httpx.AsyncClient) -> str:
        response = await client.post(
            "/v1/oauth2/token",
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
        )
        if response.is_error:
            raise PayPalError(f"PayPal auth failed: {response.status_code}")
        token = response.json().get("access_token")
        if not token:
            raise PayPalError("PayPal auth response has no access_token")
        return token

    async def create_order(
        self,
        amount: float | Decimal,
        currency: str = "USD",
        description: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> PayPalResponse:
        """Создаёт заказ с intent=CAPTURE и ссылками возврата на сайт."""
        payload = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": reference_id or f"invoice_{int(time.time() * 1000)}",
                    "description": description or DEFAULT_DESCRIPTION,
                    "amount": {
                        "currency_code": currency,
                        "value": format_amount(amount),
                    },
                }
            ],
            "application_context": {
                "return_url": f"{settings.BASE_URL}/paypal/success",
                "cancel_url": f"{settings.BASE_URL}/paypal/cancel",
                "brand_name": "Alpha Factory",
                "locale": "en-US",
                "landing_page": "BILLING",
                "shipping_preference": "NO_SHIPPING",
                "user_action": "PAY_NOW",
            },
        }
        return await self._request("POST", "/v2/checkout/orders", json=payload)

    async def get_order(self, order_id: str) -> PayPalResponse:
        return await self._request("GET", f"/v2/checkout/orders/{order_id}")

    async def capture_order(self, order_id: str) -> PayPalResponse:
        return await self._request("POST", f"/v2/checkout/orders/{order_id}/capture")


def get_paypal_client() -> PayPalClient:
    """Dependency для FastAPI (переопределяется в тестах)."""
    return PayPalClient()
