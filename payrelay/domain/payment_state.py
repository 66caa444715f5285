"""Payment state machine.

States: PENDING → STARTED → CONFIRMED → FINALIZED, with CANCELED reachable
from any non-terminal state.
"""

from enum import Enum

from payrelay.core.exceptions import InvalidPaymentState


class PaymentStatus(str, Enum):
    """Lifecycle states reported by the payment API."""

    PENDING = "PENDING"
    STARTED = "STARTED"
    CONFIRMED = "CONFIRMED"
    FINALIZED = "FINALIZED"
    CANCELED = "CANCELED"


PAYMENT_TRANSITIONS: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.PENDING: {PaymentStatus.STARTED, PaymentStatus.CANCELED},
    PaymentStatus.STARTED: {PaymentStatus.CONFIRMED, PaymentStatus.CANCELED},
    PaymentStatus.CONFIRMED: {PaymentStatus.FINALIZED, PaymentStatus.CANCELED},
    PaymentStatus.FINALIZED: set(),  # Terminal state
    PaymentStatus.CANCELED: set(),  # Terminal state
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in PAYMENT_TRANSITIONS.items() if not targets
)


def parse_status(value: str | PaymentStatus | None) -> PaymentStatus | None:
    """Map an inbound status string to a known status, or None."""
    if isinstance(value, PaymentStatus):
        return value
    if not value:
        return None
    try:
        return PaymentStatus(value.strip().upper())
    except ValueError:
        return None


def can_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    return target in PAYMENT_TRANSITIONS.get(current, set())


def assert_payment_transition(current: PaymentStatus, target: PaymentStatus) -> None:
    """Validate payment state transition.

    Args:
        current: Current payment status
        target: Target payment status

    Raises:
        InvalidPaymentState: If transition is not allowed
    """
    if not can_transition(current, target):
        raise InvalidPaymentState(
            f"Invalid payment transition: {current.value} → {target.value}",
            current_status=current.value,
        )
