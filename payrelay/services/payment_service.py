"""Payment creation service.

Builds the payment API request from a client order, creates the payment
upstream and records it in the ledger.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from payrelay.config import settings
from payrelay.core.exceptions import GatewayError, ValidationError
from payrelay.gateways.base import PaymentGateway
from payrelay.schemas.payment import PaymentCreate
from payrelay.services.ledger import PaymentRecord
from payrelay.services.lifecycle_service import PaymentLifecycleService
from payrelay.utils.pricing import format_price

logger = logging.getLogger(__name__)

DEFAULT_ITEM_IMAGE_URL = "https://placehold.co/150"

_LOCAL_HOSTS = ("localhost", "127.0.0.1")


def is_public_server_url(server_url: str) -> bool:
    """False when callbacks to ``server_url`` would target the local machine."""
    return not any(host in server_url for host in _LOCAL_HOSTS)


def build_callback_url(server_url: str, api_prefix: str) -> str:
    return f"{server_url.rstrip('/')}{api_prefix}/payment/callback"


class PaymentService:
    """Service for creating payments through the payment API."""

    def __init__(
        self,
        gateway: PaymentGateway,
        lifecycle: PaymentLifecycleService,
        server_url: str | None = None,
        api_prefix: str | None = None,
    ):
        self.gateway = gateway
        self.lifecycle = lifecycle
        self.server_url = (server_url or settings.server_url).rstrip("/")
        self.api_prefix = api_prefix if api_prefix is not None else settings.api_prefix

    def build_callback_url(self) -> str:
        return build_callback_url(self.server_url, self.api_prefix)

    def ensure_public_server_url(self) -> None:
        """The payment API cannot deliver callbacks to a local address.

        Raises:
            ValidationError: If the server URL points at this machine
        """
        if not is_public_server_url(self.server_url):
            logger.error(
                f"SERVER_URL {self.server_url} is not publicly accessible; "
                "expose the server (e.g. with ngrok) and set SERVER_URL to its HTTPS URL"
            )
            raise ValidationError(
                {
                    "error": "Invalid SERVER_URL: must be publicly accessible",
                    "message": "Cannot use localhost for callback URLs. Use ngrok or similar service.",
                    "solution": "Set SERVER_URL environment variable to a public URL (e.g., ngrok HTTPS URL)",
                }
            )

    def build_payload(self, request: PaymentCreate) -> dict[str, Any]:
        """Translate a client order into the payment API's create request."""
        currency = request.currency_code
        pg_type = request.pg_type

        items = []
        for item in request.items:
            item_currency = item.currency_code or currency
            items.append(
                {
                    "itemIdentifier": item.item_identifier,
                    "name": item.name,
                    "imageUrl": item.image_url or DEFAULT_ITEM_IMAGE_URL,
                    "price": format_price(item.price, item_currency, pg_type),
                    "currencyCode": item_currency,
                }
            )

        return {
            "buyerDappPortalAddress": request.buyer_dapp_portal_address,
            "pgType": pg_type,
            "currencyCode": currency,
            "price": format_price(request.price, currency, pg_type),
            "paymentStatusChangeCallbackUrl": self.build_callback_url(),
            # Only set for limited-stock items; the payment API rejects unused lock URLs
            "lockUrl": None,
            "unlockUrl": None,
            "items": items,
            "testMode": request.test_mode,
        }

    async def create_payment(self, request: PaymentCreate) -> dict[str, Any]:
        """Create a payment upstream and record it as PENDING.

        Returns:
            The payment API's response, unmodified

        Raises:
            ValidationError: If callbacks could not reach this server
            GatewayError: If the payment API call fails
        """
        self.ensure_public_server_url()
        payload = self.build_payload(request)
        logger.info(f"Creating payment with data: {payload}")

        result = await self.gateway.create_payment(payload)

        payment_id = result.get("id")
        if not payment_id:
            logger.error(f"Payment API response has no payment ID: {result}")
            raise GatewayError(body=str(result), operation="create payment")

        logger.info(f"Payment created successfully: {result}")
        self.lifecycle.record_created(
            PaymentRecord(
                id=str(payment_id),
                created_at=datetime.now(UTC),
                upstream=result,
            )
        )
        return result
