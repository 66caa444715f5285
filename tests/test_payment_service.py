import pytest

from payrelay.core.exceptions import GatewayError, ValidationError
from payrelay.domain.payment_state import PaymentStatus
from payrelay.schemas.payment import PaymentCreate
from payrelay.services.payment_service import (
    PaymentService,
    build_callback_url,
    is_public_server_url,
)


def make_request(**overrides) -> PaymentCreate:
    data = {
        "buyerDappPortalAddress": "0xbuyer",
        "pgType": "CRYPTO",
        "currencyCode": "KAIA",
        "price": 1.0,
        "testMode": True,
        "items": [
            {
                "itemIdentifier": "ITEM_001",
                "name": "Sample Digital Product",
                "price": 1.0,
            }
        ],
    }
    data.update(overrides)
    return PaymentCreate.model_validate(data)


@pytest.mark.parametrize(
    "url,public",
    [
        ("http://localhost:3001", False),
        ("http://127.0.0.1:3001", False),
        ("https://abc123.ngrok.io", True),
    ],
)
def test_is_public_server_url(url, public):
    assert is_public_server_url(url) is public


def test_build_callback_url():
    assert build_callback_url("https://relay.example.com/", "/api") == (
        "https://relay.example.com/api/payment/callback"
    )


def test_build_payload(payment_service):
    payload = payment_service.build_payload(make_request())

    assert payload == {
        "buyerDappPortalAddress": "0xbuyer",
        "pgType": "CRYPTO",
        "currencyCode": "KAIA",
        "price": "1",
        "paymentStatusChangeCallbackUrl": "https://relay.example.com/api/payment/callback",
        "lockUrl": None,
        "unlockUrl": None,
        "items": [
            {
                "itemIdentifier": "ITEM_001",
                "name": "Sample Digital Product",
                "imageUrl": "https://placehold.co/150",
                "price": "1",
                "currencyCode": "KAIA",
            }
        ],
        "testMode": True,
    }


def test_build_payload_stripe_item_currency(payment_service):
    request = make_request(
        pgType="STRIPE",
        currencyCode="USD",
        price="12.5",
        items=[
            {
                "itemIdentifier": "ITEM_002",
                "name": "Poster",
                "imageUrl": "https://example.com/poster.png",
                "price": "1500",
                "currencyCode": "JPY",
            }
        ],
    )

    payload = payment_service.build_payload(request)

    assert payload["price"] == "1250"
    assert payload["items"][0]["price"] == "1500"
    assert payload["items"][0]["currencyCode"] == "JPY"
    assert payload["items"][0]["imageUrl"] == "https://example.com/poster.png"


@pytest.mark.asyncio
async def test_create_payment_records_pending(payment_service, gateway, ledger):
    gateway.create_response = {"id": "P1", "status": "CREATED", "price": "1"}

    result = await payment_service.create_payment(make_request())

    assert result == {"id": "P1", "status": "CREATED", "price": "1"}
    assert len(gateway.create_calls) == 1
    record = ledger.get("P1")
    assert record.status == PaymentStatus.PENDING
    assert record.upstream == result


@pytest.mark.asyncio
async def test_create_payment_refuses_local_server_url(gateway, lifecycle, ledger):
    service = PaymentService(gateway, lifecycle, server_url="http://localhost:3001")

    with pytest.raises(ValidationError) as exc_info:
        await service.create_payment(make_request())

    assert exc_info.value.status_code == 400
    assert gateway.create_calls == []
    assert len(ledger) == 0


@pytest.mark.asyncio
async def test_create_payment_passes_gateway_error_through(payment_service, gateway, ledger):
    gateway.create_error = GatewayError(status_code=400, body='{"code":"INVALID_PRICE"}', operation="create payment")

    with pytest.raises(GatewayError) as exc_info:
        await payment_service.create_payment(make_request())

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == {"error": "Failed to create payment", "details": '{"code":"INVALID_PRICE"}'}
    assert len(ledger) == 0


@pytest.mark.asyncio
async def test_create_payment_requires_payment_id(payment_service, gateway, ledger):
    gateway.create_response = {"status": "CREATED"}

    with pytest.raises(GatewayError) as exc_info:
        await payment_service.create_payment(make_request())

    assert exc_info.value.status_code == 502
    assert len(ledger) == 0
