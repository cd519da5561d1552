"""Payment storage interface with in-memory and SQL implementations.

Both implementations reject statuses outside `PaymentStatus` with
`InvalidPaymentStatus` rather than coercing them to PENDING.
"""

import threading
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import select

from cardpay.services.gateway.schemas import CustomerData, PaymentMethod
from cardpay.services.payments.entities import Payment, PaymentStatus
from cardpay.services.payments.models import PaymentRow


class PaymentStore(Protocol):
    """Capabilities the payment orchestrator needs from persistence."""

    async def save(self, payment: Payment) -> Payment: ...

    async def find_by_id(self, payment_id: str) -> Payment | None: ...

    async def find_by_reference(self, reference: str) -> Payment | None: ...

    async def update_status(self, payment_id: str, status: str) -> Payment | None: ...


class InMemoryPaymentStore:
    """Dict-backed store; a lock keeps each operation atomic per record."""

    def __init__(self) -> None:
        self._rows: dict[str, Payment] = {}
        self._lock = threading.Lock()

    async def save(self, payment: Payment) -> Payment:
        with self._lock:
            self._rows[payment.id] = payment
        return payment

    async def find_by_id(self, payment_id: str) -> Payment | None:
        with self._lock:
            return self._rows.get(payment_id)

    async def find_by_reference(self, reference: str) -> Payment | None:
        with self._lock:
            return next((p for p in self._rows.values() if p.reference == reference), None)

    async def update_status(self, payment_id: str, status: str) -> Payment | None:
        with self._lock:
            current = self._rows.get(payment_id)
            if current is None:
                return None
            updated = current.with_status(status)
            self._rows[payment_id] = updated
            return updated


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_entity(row: PaymentRow) -> Payment:
    return Payment(
        id=row.id,
        amount=row.amount,
        currency=row.currency,
        reference=row.reference,
        status=PaymentStatus.parse(row.status),
        customer_email=row.customer_email,
        customer_data=CustomerData(**row.customer_data),
        payment_method=PaymentMethod(**row.payment_method),
        acceptance_token=row.acceptance_token,
        signature=row.signature,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


class SqlPaymentStore:
    """SQLAlchemy-backed store; each call runs in its own DB transaction."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    async def save(self, payment: Payment) -> Payment:
        with self.session_factory() as db:
            db.add(
                PaymentRow(
                    id=payment.id,
                    amount=payment.amount,
                    currency=payment.currency,
                    reference=payment.reference,
                    status=payment.status.value,
                    customer_email=payment.customer_email,
                    customer_data=payment.customer_data.model_dump(),
                    payment_method=payment.payment_method.model_dump(),
                    acceptance_token=payment.acceptance_token,
                    signature=payment.signature,
                    created_at=payment.created_at,
                    updated_at=payment.updated_at,
                )
            )
            db.commit()
        return payment

    async def find_by_id(self, payment_id: str) -> Payment | None:
        with self.session_factory() as db:
            row = db.get(PaymentRow, payment_id)
            return _to_entity(row) if row else None

    async def find_by_reference(self, reference: str) -> Payment | None:
        with self.session_factory() as db:
            row = db.execute(
                select(PaymentRow).where(PaymentRow.reference == reference).order_by(PaymentRow.created_at).limit(1)
            ).scalar_one_or_none()
            return _to_entity(row) if row else None

    async def update_status(self, payment_id: str, status: str) -> Payment | None:
        with self.session_factory() as db:
            row = db.get(PaymentRow, payment_id, with_for_update=True)
            if not row:
                return None
            row.status = PaymentStatus.parse(status).value
            row.updated_at = datetime.now(timezone.utc)
            db.commit()
            return _to_entity(row)
