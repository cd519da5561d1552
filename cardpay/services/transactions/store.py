"""Transaction storage interface with in-memory and SQL implementations."""

import threading
from datetime import datetime, timezone
from typing import Protocol

from cardpay.services.transactions.entities import Transaction
from cardpay.services.transactions.models import TransactionRow


class TransactionStore(Protocol):
    """Capabilities the transaction orchestrator needs from persistence."""

    async def save(self, transaction: Transaction) -> Transaction: ...

    async def find_by_id(self, transaction_id: str) -> Transaction | None: ...

    async def update_status(self, transaction_id: str, status: str) -> Transaction | None: ...


class InMemoryTransactionStore:
    """Dict-backed store; a lock keeps each operation atomic per record."""

    def __init__(self) -> None:
        self._rows: dict[str, Transaction] = {}
        self._lock = threading.Lock()

    async def save(self, transaction: Transaction) -> Transaction:
        with self._lock:
            self._rows[transaction.id] = transaction
        return transaction

    async def find_by_id(self, transaction_id: str) -> Transaction | None:
        with self._lock:
            return self._rows.get(transaction_id)

    async def update_status(self, transaction_id: str, status: str) -> Transaction | None:
        with self._lock:
            current = self._rows.get(transaction_id)
            if current is None:
                return None
            updated = current.with_status(status)
            self._rows[transaction_id] = updated
            return updated


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_entity(row: TransactionRow) -> Transaction:
    return Transaction(
        id=row.id,
        status=row.status,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


class SqlTransactionStore:
    """SQLAlchemy-backed store; each call runs in its own DB transaction."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    async def save(self, transaction: Transaction) -> Transaction:
        with self.session_factory() as db:
            db.add(
                TransactionRow(
                    id=transaction.id,
                    status=transaction.status,
                    created_at=transaction.created_at,
                    updated_at=transaction.updated_at,
                )
            )
            db.commit()
        return transaction

    async def find_by_id(self, transaction_id: str) -> Transaction | None:
        with self.session_factory() as db:
            row = db.get(TransactionRow, transaction_id)
            return _to_entity(row) if row else None

    async def update_status(self, transaction_id: str, status: str) -> Transaction | None:
        with self.session_factory() as db:
            row = db.get(TransactionRow, transaction_id, with_for_update=True)
            if not row:
                return None
            row.status = status
            row.updated_at = datetime.now(timezone.utc)
            db.commit()
            return _to_entity(row)
