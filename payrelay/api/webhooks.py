"""Callback endpoints called by the payment API."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from payrelay.api.deps import get_lifecycle_service, verify_callback_secret
from payrelay.schemas.payment import CallbackAck, ItemLockRequest, PaymentStatusCallback
from payrelay.services.lifecycle_service import PaymentLifecycleService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/callback",
    response_model=CallbackAck,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(verify_callback_secret)],
)
async def payment_status_callback(
    callback: PaymentStatusCallback,
    lifecycle: Annotated[PaymentLifecycleService, Depends(get_lifecycle_service)],
) -> CallbackAck:
    """Handle a payment status change.

    Always acknowledged so the payment API does not keep redelivering,
    whether or not the change was applied.
    """
    logger.info(f"Payment status callback received: {callback.model_dump(by_alias=True)}")

    if not callback.payment_id:
        logger.warning("Status callback without paymentId; ignoring")
        return CallbackAck()

    outcome = await lifecycle.apply_status_change(callback.payment_id, callback.status)
    logger.debug(f"Status callback for payment {callback.payment_id}: {outcome.value}")
    return CallbackAck()


@router.post("/lock", response_model=CallbackAck, status_code=status.HTTP_200_OK)
async def lock_items(lock_data: ItemLockRequest) -> CallbackAck:
    """Called before payment starts when items have limited stock."""
    logger.info(f"Lock callback received for payment {lock_data.id}: {lock_data.items}")
    return CallbackAck()


@router.post("/unlock", response_model=CallbackAck, status_code=status.HTTP_200_OK)
async def unlock_items(unlock_data: ItemLockRequest) -> CallbackAck:
    """Called when a payment with locked items fails or is canceled."""
    logger.info(f"Unlock callback received for payment {unlock_data.id}: {unlock_data.items}")
    return CallbackAck()
