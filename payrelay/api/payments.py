"""Payment endpoints used by the client."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from payrelay.api.deps import get_lifecycle_service, get_payment_service
from payrelay.core.exceptions import GatewayError, InvalidPaymentState
from payrelay.schemas.payment import PaymentCreate, PaymentFinalizeRequest
from payrelay.services.lifecycle_service import PaymentLifecycleService
from payrelay.services.payment_service import PaymentService

router = APIRouter()


@router.post("/create")
async def create_payment(
    payment_data: PaymentCreate,
    payment_service: Annotated[PaymentService, Depends(get_payment_service)],
) -> dict[str, Any]:
    """Create a payment with the payment API and start tracking it."""
    return await payment_service.create_payment(payment_data)


@router.post("/finalize")
async def finalize_payment(
    finalize_data: PaymentFinalizeRequest,
    lifecycle: Annotated[PaymentLifecycleService, Depends(get_lifecycle_service)],
) -> dict[str, Any]:
    """Finalize a CONFIRMED payment whose automatic finalize did not happen."""
    try:
        return await lifecycle.finalize_manually(finalize_data.payment_id)
    except GatewayError as e:
        if e.is_invalid_payment_status:
            raise InvalidPaymentState(
                "Cannot finalize: payment is not in CONFIRMED status yet. "
                "Wait for the status callback."
            ) from e
        raise


@router.get("/{payment_id}")
async def get_payment_status(
    payment_id: str,
    lifecycle: Annotated[PaymentLifecycleService, Depends(get_lifecycle_service)],
) -> dict[str, Any]:
    """Get the tracked payment record."""
    return lifecycle.query_status(payment_id).to_dict()
