"""Card transaction orchestration.

Turns a raw card-and-amount request into a settled (or conclusively
timed-out / failed) local transaction: acceptance token, card tokenization,
integrity signature, remote transaction creation and bounded status polling.
The local record is saved PENDING before the first gateway call and always
leaves the run in a terminal status.
"""

import asyncio
from collections.abc import Awaitable, Callable
from time import perf_counter

from cardpay.common.errors import ErrorKind, OrchestrationError, TransactionCreationError
from cardpay.common.logging import logger, reference_ctx, transaction_id_ctx
from cardpay.common.metrics import (
    orchestration_latency_seconds,
    transaction_outcomes_total,
    transaction_poll_attempts,
    transaction_requests_total,
)
from cardpay.common.signing import generate_transaction_reference, generate_transaction_signature
from cardpay.common.tracing import get_tracer
from cardpay.services.gateway.client import GatewayClient
from cardpay.services.gateway.schemas import (
    CardTokenRequest,
    CustomerData,
    ExternalTransaction,
    PaymentMethod,
    TransactionRequest,
)
from cardpay.services.transactions.entities import Transaction, TransactionStatus
from cardpay.services.transactions.schemas import CreateTransactionRequest, TransactionResult
from cardpay.services.transactions.store import TransactionStore

tracer = get_tracer(__name__)

CURRENCY = "COP"
PAYMENT_METHOD_TYPE = "CARD"
DEFAULT_MAX_POLL_ATTEMPTS = 10
DEFAULT_POLL_INTERVAL_SECONDS = 1.0

MESSAGE_PROCESSED = "Transaction processed successfully"
MESSAGE_UNDETERMINED = "Transaction processed but the final status could not be determined"


class TransactionOrchestrator:
    """Drives the card transaction flow against the gateway and local store."""

    def __init__(
        self,
        store: TransactionStore,
        gateway: GatewayClient,
        integrity_secret: str,
        max_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        service_name: str = "cardpay",
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store
        self.gateway = gateway
        self.integrity_secret = integrity_secret
        self.max_attempts = max_attempts
        self.poll_interval_seconds = poll_interval_seconds
        self._sleep = sleep
        self.service_name = service_name

    async def execute(self, req: CreateTransactionRequest) -> TransactionResult:
        """Run the whole flow; every failure surfaces as `TransactionCreationError`."""

        transaction_requests_total.labels(service=self.service_name).inc()
        start = perf_counter()
        try:
            return await self._run(req)
        except Exception as exc:
            logger.error("transaction creation failed error=%s", exc)
            raise TransactionCreationError.wrap(exc) from exc
        finally:
            orchestration_latency_seconds.labels(service=self.service_name, flow="transaction").observe(
                max(0.0, perf_counter() - start)
            )

    async def _run(self, req: CreateTransactionRequest) -> TransactionResult:
        reference = generate_transaction_reference()
        reference_ctx.set(reference)
        saved = await self.store.save(Transaction.create())
        transaction_id_ctx.set(saved.id)
        logger.info("transaction created status=%s", saved.status)

        try:
            external, final_status, attempts = await self._payment_flow(req, reference)
            updated = await self.store.update_status(saved.id, final_status)
        except Exception as exc:
            await self._mark_failed(saved.id, exc)
            raise OrchestrationError(ErrorKind.GATEWAY_FLOW, f"payment flow failed: {exc}") from exc

        transaction_outcomes_total.labels(service=self.service_name, status=final_status).inc()
        transaction_poll_attempts.labels(service=self.service_name).observe(attempts)
        logger.info(
            "transaction finished status=%s external_id=%s attempts=%s",
            final_status,
            external.id,
            attempts,
        )
        return TransactionResult(
            transaction_id=updated.id if updated else saved.id,
            status=final_status,
            external_transaction_id=external.id,
            reference=reference,
            amount=req.amount_in_cents,
            currency=CURRENCY,
            message=MESSAGE_UNDETERMINED if final_status == TransactionStatus.TIMEOUT else MESSAGE_PROCESSED,
            attempts=attempts,
        )

    async def _payment_flow(
        self, req: CreateTransactionRequest, reference: str
    ) -> tuple[ExternalTransaction, str, int]:
        """Gateway steps, in order; each one needs the previous step's output."""

        with tracer.start_as_current_span("gateway.get_acceptance_token"):
            acceptance_token = await self.gateway.get_acceptance_token()

        with tracer.start_as_current_span("gateway.create_card_token"):
            card_token = await self.gateway.create_card_token(
                CardTokenRequest(
                    number=req.card_number,
                    cvc=req.cvc,
                    exp_month=req.exp_month,
                    exp_year=req.exp_year,
                    card_holder=req.card_holder_name,
                )
            )

        signature = generate_transaction_signature(
            reference,
            req.amount_in_cents,
            CURRENCY,
            self.integrity_secret,
        )

        with tracer.start_as_current_span("gateway.create_transaction"):
            external = await self.gateway.create_transaction(
                TransactionRequest(
                    acceptance_token=acceptance_token,
                    amount_in_cents=req.amount_in_cents,
                    currency=CURRENCY,
                    signature=signature,
                    customer_email=req.customer_email,
                    payment_method=PaymentMethod(
                        type=PAYMENT_METHOD_TYPE,
                        token=card_token,
                        installments=req.installments,
                    ),
                    reference=reference,
                    customer_data=CustomerData(
                        full_name=req.card_holder_name,
                        legal_id=req.document_number,
                        legal_id_type=req.document_type,
                    ),
                )
            )

        with tracer.start_as_current_span("gateway.poll_transaction_status"):
            final_status, attempts = await self._poll_status(external.id)
        return external, final_status, attempts

    async def _poll_status(self, external_id: str) -> tuple[str, int]:
        """Poll until the remote status leaves PENDING or the attempt cap is hit."""

        status = TransactionStatus.PENDING
        attempts = 0
        while status == TransactionStatus.PENDING and attempts < self.max_attempts:
            if attempts > 0:
                await self._sleep(self.poll_interval_seconds)
            status = await self.gateway.get_transaction_status(external_id)
            attempts += 1
            logger.debug("status poll external_id=%s attempt=%s status=%s", external_id, attempts, status)

        if status == TransactionStatus.PENDING:
            logger.warning(
                "status polling exhausted external_id=%s attempts=%s",
                external_id,
                attempts,
            )
            status = TransactionStatus.TIMEOUT
        return status, attempts

    async def _mark_failed(self, transaction_id: str, cause: Exception) -> None:
        """Best-effort FAILED write; the original flow error is what surfaces."""

        logger.warning("payment flow failed, marking transaction FAILED error=%s", cause)
        try:
            await self.store.update_status(transaction_id, TransactionStatus.FAILED)
        except Exception:
            logger.exception("could not persist FAILED status transaction_id=%s", transaction_id)
            return
        transaction_outcomes_total.labels(service=self.service_name, status=TransactionStatus.FAILED).inc()
