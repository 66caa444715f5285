import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from payrelay.api.deps import get_gateway, get_ledger, get_payment_service
from payrelay.core.exceptions import GatewayError
from payrelay.domain.payment_state import PaymentStatus
from payrelay.gateways.base import GatewayType, PaymentGateway
from payrelay.main import app
from payrelay.services.ledger import PaymentLedger, PaymentRecord
from payrelay.services.lifecycle_service import PaymentLifecycleService
from payrelay.services.payment_service import PaymentService

PUBLIC_SERVER_URL = "https://relay.example.com"


class StubGateway(PaymentGateway):
    """Gateway double recording every call.

    Set ``create_error`` / ``finalize_error`` to make the next calls fail.
    """

    def __init__(self):
        self.create_calls: list[dict] = []
        self.finalize_calls: list[str] = []
        self.create_response: dict = {"id": "P1", "status": "CREATED"}
        self.create_error: GatewayError | None = None
        self.finalize_error: GatewayError | None = None

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.DAPP_PORTAL

    async def create_payment(self, payload: dict) -> dict:
        self.create_calls.append(payload)
        if self.create_error:
            raise self.create_error
        return dict(self.create_response)

    async def finalize_payment(self, payment_id: str) -> dict:
        self.finalize_calls.append(payment_id)
        if self.finalize_error:
            raise self.finalize_error
        return {"id": payment_id, "status": "FINALIZED"}


class BlockingGateway(StubGateway):
    """Gateway whose finalize call waits until ``release`` is set."""

    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()

    async def finalize_payment(self, payment_id: str) -> dict:
        self.finalize_calls.append(payment_id)
        await self.release.wait()
        if self.finalize_error:
            raise self.finalize_error
        return {"id": payment_id, "status": "FINALIZED"}


def make_record(payment_id: str = "P1", status: PaymentStatus = PaymentStatus.PENDING) -> PaymentRecord:
    """Record created a minute ago, so later updates get a later timestamp."""
    return PaymentRecord(
        id=payment_id,
        status=status,
        created_at=datetime.now(UTC) - timedelta(minutes=1),
        upstream={"id": payment_id, "pgType": "CRYPTO"},
    )


def gateway_failure(body: str = "upstream unavailable", status_code: int = 500) -> GatewayError:
    return GatewayError(status_code=status_code, body=body, operation="finalize payment")


@pytest.fixture
def ledger():
    return PaymentLedger()


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def lifecycle(ledger, gateway):
    return PaymentLifecycleService(ledger, gateway)


@pytest.fixture
def payment_service(gateway, lifecycle):
    return PaymentService(gateway, lifecycle, server_url=PUBLIC_SERVER_URL, api_prefix="/api")


@pytest.fixture
def client(ledger, gateway, payment_service):
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    yield TestClient(app)
    app.dependency_overrides.clear()
