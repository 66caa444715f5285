"""Pydantic schemas for API validation."""

from payrelay.schemas.payment import (
    CallbackAck,
    ItemLockRequest,
    PaymentCreate,
    PaymentFinalizeRequest,
    PaymentItem,
    PaymentStatusCallback,
)

__all__ = [
    "CallbackAck",
    "ItemLockRequest",
    "PaymentCreate",
    "PaymentFinalizeRequest",
    "PaymentItem",
    "PaymentStatusCallback",
]
