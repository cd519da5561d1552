"""Pre-tokenized payment processing.

Single pass over the gateway (acceptance token, signature, transaction
creation, one status lookup) followed by local persistence. There is no
polling and no rollback: a failure before the save persists nothing, a
failure after it leaves the record in its last written status.
"""

from time import perf_counter

from cardpay.common.errors import PaymentProcessingError
from cardpay.common.logging import logger, reference_ctx
from cardpay.common.metrics import orchestration_latency_seconds, payment_outcomes_total, payment_requests_total
from cardpay.common.tracing import get_tracer
from cardpay.services.gateway.client import GatewayClient
from cardpay.services.gateway.schemas import ExternalTransaction, TransactionRequest
from cardpay.services.payments.entities import Payment
from cardpay.services.payments.schemas import CreatePaymentRequest, PaymentResult
from cardpay.services.payments.store import PaymentStore

tracer = get_tracer(__name__)


class PaymentOrchestrator:
    """Processes a payment whose card was tokenized out of band."""

    def __init__(self, store: PaymentStore, gateway: GatewayClient, service_name: str = "cardpay") -> None:
        self.store = store
        self.gateway = gateway
        self.service_name = service_name

    async def execute(self, req: CreatePaymentRequest) -> PaymentResult:
        payment_requests_total.labels(service=self.service_name).inc()
        reference_ctx.set(req.reference)
        start = perf_counter()
        try:
            return await self._run(req)
        except Exception as exc:
            logger.error("payment processing failed error=%s", exc)
            raise PaymentProcessingError.wrap(exc) from exc
        finally:
            orchestration_latency_seconds.labels(service=self.service_name, flow="payment").observe(
                max(0.0, perf_counter() - start)
            )

    async def _run(self, req: CreatePaymentRequest) -> PaymentResult:
        with tracer.start_as_current_span("gateway.get_acceptance_token"):
            acceptance_token = await self.gateway.get_acceptance_token()

        signature = await self.gateway.generate_signature(req.reference, req.amount_in_cents, req.currency)

        with tracer.start_as_current_span("gateway.create_transaction"):
            external: ExternalTransaction = await self.gateway.create_transaction(
                TransactionRequest(
                    acceptance_token=acceptance_token,
                    amount_in_cents=req.amount_in_cents,
                    currency=req.currency,
                    signature=signature,
                    customer_email=req.customer_email,
                    payment_method=req.payment_method,
                    reference=req.reference,
                    customer_data=req.customer_data,
                )
            )

        with tracer.start_as_current_span("gateway.get_transaction_status"):
            status = await self.gateway.get_transaction_status(external.id)

        saved = await self.store.save(
            Payment.create(
                amount=req.amount_in_cents,
                currency=req.currency,
                reference=req.reference,
                customer_email=req.customer_email,
                customer_data=req.customer_data,
                payment_method=req.payment_method,
                acceptance_token=acceptance_token,
                signature=signature,
            )
        )
        updated = await self.store.update_status(saved.id, status)

        payment_outcomes_total.labels(service=self.service_name, status=status).inc()
        logger.info("payment processed payment_id=%s external_id=%s status=%s", saved.id, external.id, status)
        return PaymentResult(
            payment_id=updated.id if updated else saved.id,
            status=status,
            reference=req.reference,
            amount=req.amount_in_cents,
            currency=req.currency,
        )
