"""Local transaction record and its status vocabulary."""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class TransactionStatus:
    """Statuses written by the orchestrator itself.

    Any other value reported by the gateway (APPROVED, DECLINED, VOIDED,
    ERROR, ...) is stored verbatim.
    """

    PENDING = "PENDING"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Transaction(BaseModel):
    """Anchor record of one card transaction orchestration run."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    status: str = TransactionStatus.PENDING
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def create(cls) -> "Transaction":
        now = _utcnow()
        return cls(created_at=now, updated_at=now)

    def with_status(self, status: str) -> "Transaction":
        return self.model_copy(update={"status": status, "updated_at": _utcnow()})
