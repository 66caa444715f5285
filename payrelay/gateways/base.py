"""Base payment gateway interface.

Gateway adapters only talk to the payment API. Payment state lives in the
lifecycle service, never in adapters.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class GatewayType(str, Enum):
    """Supported payment APIs."""

    DAPP_PORTAL = "dapp_portal"


class PaymentGateway(ABC):
    """Abstract base class for payment gateways."""

    @property
    @abstractmethod
    def gateway_type(self) -> GatewayType:
        """Return the gateway type."""
        pass

    @abstractmethod
    async def create_payment(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a payment.

        Args:
            payload: Request body in the payment API's format

        Returns:
            Parsed response body, containing at least ``id``

        Raises:
            GatewayError: On any non-success response
        """
        pass

    @abstractmethod
    async def finalize_payment(self, payment_id: str) -> dict[str, Any]:
        """Finalize a confirmed payment.

        Args:
            payment_id: Payment ID assigned by the payment API

        Returns:
            Parsed response body

        Raises:
            GatewayError: On any non-success response
        """
        pass
