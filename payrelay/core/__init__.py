"""Core exceptions and middleware."""

from payrelay.core.exceptions import (
    AppException,
    AuthenticationError,
    DuplicatePaymentError,
    GatewayError,
    InvalidPaymentState,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "DuplicatePaymentError",
    "GatewayError",
    "InvalidPaymentState",
    "NotFoundError",
    "ValidationError",
]
