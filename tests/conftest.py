"""Shared fixtures: a scripted gateway double, stores and request payloads."""

import pytest
from sqlalchemy.pool import StaticPool

from cardpay.common.db import Base, make_engine, make_session_factory
from cardpay.common.errors import GatewayError
from cardpay.common.signing import generate_transaction_signature
from cardpay.services.gateway.schemas import CustomerData, ExternalTransaction, PaymentMethod
from cardpay.services.payments.models import PaymentRow  # noqa: F401  (registers table)
from cardpay.services.payments.schemas import CreatePaymentRequest
from cardpay.services.payments.store import InMemoryPaymentStore, SqlPaymentStore
from cardpay.services.transactions.models import TransactionRow  # noqa: F401  (registers table)
from cardpay.services.transactions.schemas import CreateTransactionRequest
from cardpay.services.transactions.store import InMemoryTransactionStore, SqlTransactionStore

INTEGRITY_SECRET = "test_integrity_secret"


class FakeGateway:
    """Scripted stand-in for `GatewayClient`.

    `statuses` is replayed by `get_transaction_status`; the last value repeats
    once the script runs out. `fail_on` names the operation that raises.
    """

    def __init__(
        self,
        statuses=("APPROVED",),
        external=None,
        fail_on: str | None = None,
    ) -> None:
        self.statuses = list(statuses)
        self.external = external or ExternalTransaction(id="ext_1", status="PENDING")
        self.fail_on = fail_on
        self.calls: list[str] = []
        self.status_calls = 0
        self.card_request = None
        self.transaction_request = None

    def _step(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_on == name:
            raise GatewayError(name, "gateway exploded", status_code=500)

    async def get_acceptance_token(self) -> str:
        self._step("get_acceptance_token")
        return "tok_a"

    async def create_card_token(self, card) -> str:
        self._step("create_card_token")
        self.card_request = card
        return "tok_c"

    async def generate_signature(self, reference: str, amount_in_cents: int, currency: str) -> str:
        self._step("generate_signature")
        return generate_transaction_signature(reference, amount_in_cents, currency, INTEGRITY_SECRET)

    async def create_transaction(self, req) -> ExternalTransaction:
        self._step("create_transaction")
        self.transaction_request = req
        return self.external

    async def get_transaction_status(self, transaction_id: str) -> str:
        self._step("get_transaction_status")
        idx = min(self.status_calls, len(self.statuses) - 1)
        self.status_calls += 1
        return self.statuses[idx]


class RecordingTransactionStore(InMemoryTransactionStore):
    """In-memory store that remembers which ids were saved."""

    def __init__(self) -> None:
        super().__init__()
        self.saved_ids: list[str] = []

    async def save(self, transaction):
        saved = await super().save(transaction)
        self.saved_ids.append(saved.id)
        return saved


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def transaction_store(request, session_factory):
    if request.param == "memory":
        return InMemoryTransactionStore()
    return SqlTransactionStore(session_factory)


@pytest.fixture(params=["memory", "sql"])
def payment_store(request, session_factory):
    if request.param == "memory":
        return InMemoryPaymentStore()
    return SqlPaymentStore(session_factory)


@pytest.fixture
def transaction_request() -> CreateTransactionRequest:
    return CreateTransactionRequest(
        card_number="4111111111111111",
        cvc="123",
        exp_month="12",
        exp_year="2025",
        card_holder_name="Juan Pérez",
        document_number="12345678",
        document_type="CC",
        amount_in_cents=10000,
        customer_email="test@example.com",
        installments=1,
    )


@pytest.fixture
def customer_data() -> CustomerData:
    return CustomerData(full_name="Juan Pérez", legal_id="12345678", legal_id_type="CC")


@pytest.fixture
def payment_method() -> PaymentMethod:
    return PaymentMethod(type="CARD", token="tok_c", installments=3)


@pytest.fixture
def payment_request(customer_data, payment_method) -> CreatePaymentRequest:
    return CreatePaymentRequest(
        amount_in_cents=25000,
        currency="COP",
        reference="REF-ORDER-42",
        customer_email="buyer@example.com",
        customer_data=customer_data,
        payment_method=payment_method,
    )
