"""In-memory payment ledger.

Process-local record of every payment this relay created. Records are
immutable; the only write path is ``PaymentLedger.update``. A production
deployment would put a transactional store behind the same interface.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from payrelay.core.exceptions import DuplicatePaymentError, NotFoundError
from payrelay.domain.payment_state import PaymentStatus


@dataclass(frozen=True)
class PaymentRecord:
    """A payment as known to this relay."""

    id: str
    status: PaymentStatus = PaymentStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = None
    finalized_at: datetime | None = None
    # Creation response from the payment API, stored verbatim
    upstream: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.updated_at is None:
            object.__setattr__(self, "updated_at", self.created_at)

    def with_status(self, status: PaymentStatus, at: datetime | None = None) -> "PaymentRecord":
        """Return a copy moved to ``status``; stamps ``finalized_at`` on FINALIZED."""
        now = at or datetime.now(UTC)
        # Clock skew must never put updated_at before created_at
        now = max(now, self.created_at)
        changes: dict[str, Any] = {"status": status, "updated_at": now}
        if status == PaymentStatus.FINALIZED:
            changes["finalized_at"] = now
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Wire representation returned to clients."""
        data = dict(self.upstream)
        data.update(
            {
                "id": self.id,
                "status": self.status.value,
                "createdAt": self.created_at.isoformat(),
                "updatedAt": self.updated_at.isoformat(),
            }
        )
        if self.finalized_at is not None:
            data["finalizedAt"] = self.finalized_at.isoformat()
        return data


Mutation = Callable[[PaymentRecord], PaymentRecord]


class PaymentLedger:
    """Keyed store of payment records with atomic per-record updates."""

    def __init__(self) -> None:
        self._records: dict[str, PaymentRecord] = {}
        self._lock = threading.Lock()

    def __contains__(self, payment_id: object) -> bool:
        return payment_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def insert(self, record: PaymentRecord) -> PaymentRecord:
        """Add a new record.

        Raises:
            DuplicatePaymentError: If a record with the same ID exists
        """
        with self._lock:
            if record.id in self._records:
                raise DuplicatePaymentError(record.id)
            self._records[record.id] = record
        return record

    def get(self, payment_id: str) -> PaymentRecord:
        """Return the current record.

        Raises:
            NotFoundError: If the ID is unknown
        """
        record = self._records.get(payment_id)
        if record is None:
            raise NotFoundError("Payment", payment_id)
        return record

    def update(self, payment_id: str, mutation: Mutation) -> PaymentRecord:
        """Apply ``mutation`` to the stored record and store its result.

        The read, the mutation and the write happen under one lock, so the
        mutation sees the latest committed record. Returning the record
        unchanged leaves the ledger untouched.

        Raises:
            NotFoundError: If the ID is unknown
        """
        with self._lock:
            current = self._records.get(payment_id)
            if current is None:
                raise NotFoundError("Payment", payment_id)
            updated = mutation(current)
            if updated is not current:
                if updated.id != payment_id:
                    raise ValueError("Ledger mutations may not change the payment ID")
                self._records[payment_id] = updated
            return updated
