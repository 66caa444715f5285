"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: Any = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Request validation error exception."""

    def __init__(self, detail: Any = "Validation failed") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        self.identifier = identifier
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicatePaymentError(AppException):
    """A payment with the same ID is already recorded."""

    def __init__(self, payment_id: str) -> None:
        self.payment_id = payment_id
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Payment with ID '{payment_id}' already exists",
        )


class InvalidPaymentState(AppException):
    """Operation is not allowed for the current payment status."""

    def __init__(
        self,
        detail: str = "This operation is not allowed for the current payment status",
        current_status: str | None = None,
    ) -> None:
        self.current_status = current_status
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class GatewayError(AppException):
    """Upstream payment API call failed.

    The upstream status code and body are kept verbatim so callers can pass
    them straight through.
    """

    def __init__(
        self,
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        body: str = "",
        operation: str = "call payment API",
    ) -> None:
        self.body = body
        self.operation = operation
        # Upstream 2xx/3xx with an unusable body is still a gateway failure
        if status_code < 400:
            status_code = status.HTTP_502_BAD_GATEWAY
        super().__init__(
            status_code=status_code,
            detail={"error": f"Failed to {operation}", "details": body},
        )

    @property
    def is_invalid_payment_status(self) -> bool:
        """Upstream rejected the call because of the payment's status."""
        return "invalid payment status" in self.body.lower()
