"""Dapp Portal payment API adapter.

Holds the client credentials that must never reach the browser.
"""

import logging
from typing import Any

import httpx

from payrelay.config import settings
from payrelay.core.exceptions import GatewayError
from payrelay.gateways.base import GatewayType, PaymentGateway

logger = logging.getLogger(__name__)


class DappPortalGateway(PaymentGateway):
    """Dapp Portal payment API implementation."""

    def __init__(
        self,
        base_url: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.payment_api_base).rstrip("/")
        self.client_id = client_id if client_id is not None else settings.client_id
        self.client_secret = client_secret if client_secret is not None else settings.client_secret
        self.timeout = timeout if timeout is not None else settings.payment_api_timeout
        self._transport = transport

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.DAPP_PORTAL

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.client_id:
            headers["X-Client-Id"] = self.client_id
        if self.client_secret:
            headers["X-Client-Secret"] = self.client_secret
        return headers

    async def _post(self, path: str, body: dict[str, Any], operation: str) -> dict[str, Any]:
        """POST JSON to the payment API and return the parsed response.

        Raises:
            GatewayError: On transport failure, non-2xx status or a non-JSON body
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(path, json=body, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"Payment API unreachable during {operation}: {e}")
            raise GatewayError(body=str(e), operation=operation) from e

        if not response.is_success:
            logger.error(
                f"Payment API rejected {operation}: {response.status_code} {response.text}"
            )
            raise GatewayError(
                status_code=response.status_code,
                body=response.text,
                operation=operation,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GatewayError(body=response.text, operation=operation) from e
        if not isinstance(data, dict):
            raise GatewayError(body=response.text, operation=operation)
        return data

    async def create_payment(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a payment via ``POST /payment/create``."""
        return await self._post("/payment/create", payload, "create payment")

    async def finalize_payment(self, payment_id: str) -> dict[str, Any]:
        """Finalize a payment via ``POST /payment/finalize``."""
        return await self._post("/payment/finalize", {"id": payment_id}, "finalize payment")
