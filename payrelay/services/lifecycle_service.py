"""Payment lifecycle service.

Applies status-change notifications to the ledger and finalizes payments
once they are confirmed. Notifications may arrive late, twice or not at all,
so every transition is re-checked against the latest record when it commits
and rejected transitions are silent no-ops for the caller.
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Any

from payrelay.core.exceptions import GatewayError, InvalidPaymentState, NotFoundError
from payrelay.domain.payment_state import (
    TERMINAL_STATUSES,
    PaymentStatus,
    assert_payment_transition,
    can_transition,
    parse_status,
)
from payrelay.gateways.base import PaymentGateway
from payrelay.services.ledger import PaymentLedger, PaymentRecord

logger = logging.getLogger(__name__)


class TransitionOutcome(str, Enum):
    """What a status-change notification did. Never surfaced as an error."""

    APPLIED = "applied"
    REJECTED = "rejected"
    UNKNOWN_PAYMENT = "unknown_payment"
    UNKNOWN_STATUS = "unknown_status"
    FINALIZE_RETRIED = "finalize_retried"


class PaymentLifecycleService:
    """Service owning every status change of a recorded payment."""

    def __init__(self, ledger: PaymentLedger, gateway: PaymentGateway):
        self.ledger = ledger
        self.gateway = gateway

    def record_created(self, record: PaymentRecord) -> PaymentRecord:
        """Record a payment the payment API has just created.

        Raises:
            DuplicatePaymentError: If the ID is already recorded
        """
        record = replace(
            record,
            status=PaymentStatus.PENDING,
            updated_at=record.created_at,
            finalized_at=None,
        )
        self.ledger.insert(record)
        logger.info(f"Payment {record.id} recorded as {record.status.value}")
        return record

    def query_status(self, payment_id: str) -> PaymentRecord:
        """Return the current record without side effects.

        Raises:
            NotFoundError: If the ID is unknown
        """
        return self.ledger.get(payment_id)

    def _transition(
        self, payment_id: str, target: PaymentStatus
    ) -> tuple[PaymentRecord, bool]:
        """Move a record to ``target`` if the transition table allows it."""
        applied = False

        def mutate(record: PaymentRecord) -> PaymentRecord:
            nonlocal applied
            if not can_transition(record.status, target):
                return record
            applied = True
            return record.with_status(target)

        record = self.ledger.update(payment_id, mutate)
        return record, applied

    def _commit_finalized(self, payment_id: str) -> PaymentRecord:
        record, applied = self._transition(payment_id, PaymentStatus.FINALIZED)
        if applied:
            logger.info(f"Payment {payment_id} finalized at {record.finalized_at.isoformat()}")
        else:
            # Another finalize or a cancellation committed first
            logger.warning(
                f"Payment {payment_id} finalized upstream but is {record.status.value} locally; "
                "keeping local status"
            )
        return record

    async def apply_status_change(
        self, payment_id: str, status: str | PaymentStatus | None
    ) -> TransitionOutcome:
        """Apply a status-change notification.

        Never raises for unknown IDs, unknown statuses or disallowed
        transitions. A transition onto CONFIRMED finalizes the payment
        through the gateway; a gateway failure is logged and leaves the
        payment CONFIRMED. A later CONFIRMED notification for that
        payment retries the finalize.
        """
        target = parse_status(status)
        if target is None:
            logger.warning(f"Ignoring unrecognised status {status!r} for payment {payment_id}")
            return TransitionOutcome.UNKNOWN_STATUS

        try:
            record, applied = self._transition(payment_id, target)
        except NotFoundError:
            logger.warning(
                f"Status {target.value} received for unknown payment {payment_id}; discarding"
            )
            return TransitionOutcome.UNKNOWN_PAYMENT

        if not applied:
            if record.status == target == PaymentStatus.CONFIRMED:
                # Redelivery of CONFIRMED after a failed automatic finalize
                await self._auto_finalize(payment_id)
                return TransitionOutcome.FINALIZE_RETRIED
            if record.status in TERMINAL_STATUSES:
                logger.info(
                    f"Ignoring {target.value} for payment {payment_id}: "
                    f"already {record.status.value}"
                )
            else:
                logger.warning(
                    f"Rejected transition for payment {payment_id}: "
                    f"{record.status.value} → {target.value}"
                )
            return TransitionOutcome.REJECTED

        logger.info(f"Payment {payment_id} status updated to {target.value}")

        if target == PaymentStatus.CONFIRMED:
            await self._auto_finalize(payment_id)

        return TransitionOutcome.APPLIED

    async def _auto_finalize(self, payment_id: str) -> None:
        logger.info(f"Payment {payment_id} confirmed, finalizing automatically")
        try:
            result = await self.gateway.finalize_payment(payment_id)
        except GatewayError as e:
            logger.error(
                f"Automatic finalize failed for payment {payment_id} "
                f"({e.status_code}): {e.body}"
            )
            return

        logger.info(f"Payment API finalized payment {payment_id}: {result}")
        self._commit_finalized(payment_id)

    async def finalize_manually(self, payment_id: str) -> dict[str, Any]:
        """Finalize a CONFIRMED payment on an operator's request.

        Returns:
            The payment API's finalize response

        Raises:
            NotFoundError: If the ID is unknown
            InvalidPaymentState: If the payment is not CONFIRMED, or was
                canceled while the payment API call was in flight
            GatewayError: If the payment API call fails; the record is unchanged
        """
        record = self.ledger.get(payment_id)
        assert_payment_transition(record.status, PaymentStatus.FINALIZED)

        logger.info(f"Finalizing payment {payment_id} manually")
        try:
            result = await self.gateway.finalize_payment(payment_id)
        except GatewayError as e:
            logger.error(
                f"Manual finalize failed for payment {payment_id} ({e.status_code}): {e.body}"
            )
            raise

        record = self._commit_finalized(payment_id)
        if record.status != PaymentStatus.FINALIZED:
            raise InvalidPaymentState(
                f"Payment {payment_id} was finalized by the payment API but is "
                f"{record.status.value} locally",
                current_status=record.status.value,
            )
        return result
