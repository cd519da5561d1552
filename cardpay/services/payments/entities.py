"""Local payment record.

A `Payment` is immutable: a status change produces a new record via
`with_status`, so callers holding an earlier instance never see it change.
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from cardpay.common.errors import InvalidPaymentStatus
from cardpay.services.gateway.schemas import CustomerData, PaymentMethod


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"
    ERROR = "ERROR"

    @classmethod
    def parse(cls, value: "str | PaymentStatus") -> "PaymentStatus":
        """Strict lookup; unknown values are rejected instead of defaulting."""

        try:
            return cls(value)
        except ValueError as exc:
            raise InvalidPaymentStatus(str(value)) from exc


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Payment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    amount: int
    currency: str
    reference: str
    status: PaymentStatus = PaymentStatus.PENDING
    customer_email: str
    customer_data: CustomerData
    payment_method: PaymentMethod
    acceptance_token: str
    signature: str
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        amount: int,
        currency: str,
        reference: str,
        customer_email: str,
        customer_data: CustomerData,
        payment_method: PaymentMethod,
        acceptance_token: str,
        signature: str,
    ) -> "Payment":
        """New PENDING payment with matching creation/update timestamps."""

        now = _utcnow()
        return cls(
            amount=amount,
            currency=currency,
            reference=reference,
            customer_email=customer_email,
            customer_data=customer_data,
            payment_method=payment_method,
            acceptance_token=acceptance_token,
            signature=signature,
            created_at=now,
            updated_at=now,
        )

    def with_status(self, status: "str | PaymentStatus") -> "Payment":
        """Copy of this payment with a new status and a refreshed `updated_at`."""

        return self.model_copy(update={"status": PaymentStatus.parse(status), "updated_at": _utcnow()})
