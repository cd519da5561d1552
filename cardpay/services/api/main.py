"""HTTP surface for card transactions, pre-tokenized payments and gateway pass-through calls.

Collaborators are built once per process from settings and handed to the
routes through FastAPI dependencies, so tests can swap them with
`app.dependency_overrides`.
"""

from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from cardpay.common.config import settings
from cardpay.common.db import Base, SessionLocal, engine
from cardpay.common.errors import ErrorKind, GatewayError, OrchestrationError
from cardpay.common.logging import configure_logging, logger, trace_id_ctx
from cardpay.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from cardpay.common.startup import check_gateway_config, log_startup_config
from cardpay.common.tracing import instrument_app, setup_tracing
from cardpay.services.gateway.client import GatewayClient
from cardpay.services.gateway.schemas import (
    CardTokenRequest,
    ExternalTransaction,
    GatewayConfig,
    TransactionRequest,
)
from cardpay.services.payments.entities import Payment
from cardpay.services.payments.schemas import (
    AcceptanceTokenResponse,
    CardTokenResponse,
    CreatePaymentRequest,
    PaymentRecordResponse,
    PaymentResult,
    TransactionStatusResponse,
)
from cardpay.services.payments.service import PaymentOrchestrator
from cardpay.services.payments.store import PaymentStore, SqlPaymentStore
from cardpay.services.transactions.schemas import (
    CreateTransactionRequest,
    TransactionRecordResponse,
    TransactionResult,
)
from cardpay.services.transactions.service import TransactionOrchestrator
from cardpay.services.transactions.store import SqlTransactionStore, TransactionStore

configure_logging()
setup_tracing(settings.service_name, settings.otel_exporter_otlp_endpoint)
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "DATABASE_URL",
        "PAYMENT_API_URL",
        "PAYMENT_PUBLIC_KEY",
        "PAYMENT_INTEGRITY_SECRET",
        "TRANSACTION_POLL_MAX_ATTEMPTS",
        "TRANSACTION_POLL_INTERVAL_SECONDS",
    ],
)

gateway = GatewayClient(GatewayConfig.from_settings(settings))
transaction_store = SqlTransactionStore(SessionLocal)
payment_store = SqlPaymentStore(SessionLocal)
transaction_orchestrator = TransactionOrchestrator(
    transaction_store,
    gateway,
    integrity_secret=settings.payment_integrity_secret,
    max_attempts=settings.transaction_poll_max_attempts,
    poll_interval_seconds=settings.transaction_poll_interval_seconds,
    service_name=settings.service_name,
)
payment_orchestrator = PaymentOrchestrator(payment_store, gateway, service_name=settings.service_name)


def get_gateway() -> GatewayClient:
    return gateway


def get_transaction_store() -> TransactionStore:
    return transaction_store


def get_payment_store() -> PaymentStore:
    return payment_store


def get_transaction_orchestrator() -> TransactionOrchestrator:
    return transaction_orchestrator


def get_payment_orchestrator() -> PaymentOrchestrator:
    return payment_orchestrator


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Validate gateway config and create tables when running without migrations."""

    check_gateway_config(settings)
    if settings.auto_create_tables:
        Base.metadata.create_all(engine)
    yield


app = FastAPI(title="CardPay", lifespan=lifespan)
instrument_app(app)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Record request count and latency for every HTTP call."""

    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


@app.exception_handler(OrchestrationError)
async def orchestration_error_handler(_: Request, exc: OrchestrationError):
    status_code = 502 if exc.kind == ErrorKind.GATEWAY_FLOW else 500
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "kind": exc.kind.value})


@app.exception_handler(GatewayError)
async def gateway_error_handler(_: Request, exc: GatewayError):
    logger.error("gateway pass-through failed operation=%s error=%s", exc.operation, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


def _bind_trace(x_trace_id: str | None) -> None:
    trace_id_ctx.set(x_trace_id or str(uuid4()))


@app.post("/transactions", response_model=TransactionResult)
async def create_transaction(
    req: CreateTransactionRequest,
    x_trace_id: str | None = Header(default=None),
    orchestrator: TransactionOrchestrator = Depends(get_transaction_orchestrator),
):
    """Tokenize the card, charge it and wait for the gateway's final status."""

    _bind_trace(x_trace_id)
    return await orchestrator.execute(req)


@app.get("/transactions/{transaction_id}", response_model=TransactionRecordResponse)
async def get_transaction(transaction_id: str, store: TransactionStore = Depends(get_transaction_store)):
    transaction = await store.find_by_id(transaction_id)
    if not transaction:
        raise HTTPException(status_code=404, detail="transaction not found")
    return TransactionRecordResponse(**transaction.model_dump())


@app.post("/payments/process", response_model=PaymentResult)
async def process_payment(
    req: CreatePaymentRequest,
    x_trace_id: str | None = Header(default=None),
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
):
    """Charge a card that was already tokenized by the client."""

    _bind_trace(x_trace_id)
    return await orchestrator.execute(req)


@app.get("/payments/acceptance-token", response_model=AcceptanceTokenResponse)
async def get_acceptance_token(client: GatewayClient = Depends(get_gateway)):
    return AcceptanceTokenResponse(acceptance_token=await client.get_acceptance_token())


@app.post("/payments/card-token", response_model=CardTokenResponse)
async def create_card_token(card: CardTokenRequest, client: GatewayClient = Depends(get_gateway)):
    return CardTokenResponse(token=await client.create_card_token(card))


@app.post("/payments/transaction", response_model=ExternalTransaction)
async def create_gateway_transaction(req: TransactionRequest, client: GatewayClient = Depends(get_gateway)):
    """Create a gateway transaction directly, without local bookkeeping."""

    return await client.create_transaction(req)


@app.get("/payments/transaction/{transaction_id}/status", response_model=TransactionStatusResponse)
async def get_gateway_transaction_status(transaction_id: str, client: GatewayClient = Depends(get_gateway)):
    return TransactionStatusResponse(status=await client.get_transaction_status(transaction_id))


def _payment_record(payment: Payment) -> PaymentRecordResponse:
    return PaymentRecordResponse(
        id=payment.id,
        status=payment.status.value,
        amount=payment.amount,
        currency=payment.currency,
        reference=payment.reference,
        customer_email=payment.customer_email,
        customer_data=payment.customer_data,
        installments=payment.payment_method.installments,
        created_at=payment.created_at,
        updated_at=payment.updated_at,
    )


@app.get("/payments/reference/{reference}", response_model=PaymentRecordResponse)
async def get_payment_by_reference(reference: str, store: PaymentStore = Depends(get_payment_store)):
    payment = await store.find_by_reference(reference)
    if not payment:
        raise HTTPException(status_code=404, detail="payment not found")
    return _payment_record(payment)


@app.get("/payments/{payment_id}", response_model=PaymentRecordResponse)
async def get_payment(payment_id: str, store: PaymentStore = Depends(get_payment_store)):
    payment = await store.find_by_id(payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="payment not found")
    return _payment_record(payment)


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}
