"""API dependencies for services and callback verification."""

import hmac
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header

from payrelay.config import settings
from payrelay.core.exceptions import AuthenticationError
from payrelay.gateways.base import PaymentGateway
from payrelay.gateways.dapp_portal import DappPortalGateway
from payrelay.services.ledger import PaymentLedger
from payrelay.services.lifecycle_service import PaymentLifecycleService
from payrelay.services.payment_service import PaymentService


@lru_cache
def get_ledger() -> PaymentLedger:
    """Process-wide payment ledger."""
    return PaymentLedger()


@lru_cache
def get_gateway() -> PaymentGateway:
    return DappPortalGateway()


def get_lifecycle_service(
    ledger: Annotated[PaymentLedger, Depends(get_ledger)],
    gateway: Annotated[PaymentGateway, Depends(get_gateway)],
) -> PaymentLifecycleService:
    return PaymentLifecycleService(ledger, gateway)


def get_payment_service(
    gateway: Annotated[PaymentGateway, Depends(get_gateway)],
    lifecycle: Annotated[PaymentLifecycleService, Depends(get_lifecycle_service)],
) -> PaymentService:
    return PaymentService(gateway, lifecycle)


async def verify_callback_secret(
    x_callback_secret: Annotated[str | None, Header()] = None,
) -> None:
    """Check the shared secret on payment API callbacks, when one is configured.

    Raises:
        AuthenticationError: If a secret is configured and the header does not match
    """
    expected = settings.callback_secret
    if not expected:
        return
    if not x_callback_secret or not hmac.compare_digest(
        x_callback_secret.encode(), expected.encode()
    ):
        raise AuthenticationError("Invalid callback secret")
