"""HTTP client for the external card-payment gateway.

Every call opens a short-lived `httpx.AsyncClient`, records latency/outcome
metrics and converts transport errors, non-2xx responses and unexpected
payload shapes into `GatewayError`.
"""

from time import perf_counter
from typing import Any

import httpx

from cardpay.common.errors import GatewayError
from cardpay.common.logging import logger
from cardpay.common.metrics import gateway_latency_seconds, gateway_requests_total
from cardpay.common.signing import generate_transaction_signature
from cardpay.services.gateway.schemas import (
    CardTokenRequest,
    ExternalTransaction,
    GatewayConfig,
    TransactionRequest,
)


class GatewayClient:
    """Async wrapper around the gateway REST API."""

    def __init__(self, config: GatewayConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config
        self._transport = transport

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.public_key}"}

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Send one request and return the `data` object of the response body."""

        start = perf_counter()
        outcome = "error"
        try:
            async with httpx.AsyncClient(
                base_url=self.config.api_url,
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            ) as client:
                resp = await client.request(method, path, json=json, headers=headers)
            if resp.status_code >= 400:
                raise GatewayError(
                    operation,
                    f"{resp.status_code} {resp.reason_phrase}",
                    status_code=resp.status_code,
                )
            try:
                body = resp.json()
            except ValueError as exc:
                raise GatewayError(operation, "response body is not JSON", resp.status_code) from exc
            data = body.get("data") if isinstance(body, dict) else None
            if not isinstance(data, dict):
                raise GatewayError(operation, "response has no data object", resp.status_code)
            outcome = "ok"
            return data
        except httpx.HTTPError as exc:
            raise GatewayError(operation, str(exc) or exc.__class__.__name__) from exc
        finally:
            gateway_requests_total.labels(operation=operation, outcome=outcome).inc()
            gateway_latency_seconds.labels(operation=operation).observe(max(0.0, perf_counter() - start))

    @staticmethod
    def _field(operation: str, data: dict[str, Any], *path: str) -> str:
        value: Any = data
        for key in path:
            if not isinstance(value, dict) or key not in value:
                raise GatewayError(operation, f"response missing data.{'.'.join(path)}")
            value = value[key]
        if not isinstance(value, str) or not value:
            raise GatewayError(operation, f"response has invalid data.{'.'.join(path)}")
        return value

    async def get_acceptance_token(self) -> str:
        """Fetch the merchant's presigned acceptance token."""

        data = await self._request(
            "get_acceptance_token",
            "GET",
            f"/merchants/{self.config.public_key}",
        )
        return self._field("get_acceptance_token", data, "presigned_acceptance", "acceptance_token")

    async def create_card_token(self, card: CardTokenRequest) -> str:
        """Tokenize raw card data and return the opaque card token."""

        data = await self._request(
            "create_card_token",
            "POST",
            "/tokens/cards",
            json=card.model_dump(),
            headers=self._auth_headers(),
        )
        return self._field("create_card_token", data, "id")

    async def generate_signature(self, reference: str, amount_in_cents: int, currency: str) -> str:
        """Integrity signature using the configured secret."""

        try:
            return generate_transaction_signature(
                reference,
                amount_in_cents,
                currency,
                self.config.integrity_secret,
            )
        except Exception as exc:
            raise GatewayError("generate_signature", str(exc)) from exc

    async def create_transaction(self, req: TransactionRequest) -> ExternalTransaction:
        """Create the remote transaction; its initial status is usually PENDING."""

        data = await self._request(
            "create_transaction",
            "POST",
            "/transactions",
            json=req.model_dump(),
            headers=self._auth_headers(),
        )
        transaction = ExternalTransaction(
            id=self._field("create_transaction", data, "id"),
            status=self._field("create_transaction", data, "status"),
        )
        logger.info(
            "gateway transaction created external_id=%s status=%s",
            transaction.id,
            transaction.status,
        )
        return transaction

    async def get_transaction_status(self, transaction_id: str) -> str:
        """Current status of a remote transaction."""

        data = await self._request(
            "get_transaction_status",
            "GET",
            f"/transactions/{transaction_id}",
            headers=self._auth_headers(),
        )
        return self._field("get_transaction_status", data, "status")
