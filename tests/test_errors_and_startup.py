"""Error wrapping kinds and startup config checks."""

from cardpay.common.config import CommonSettings
from cardpay.common.errors import (
    ErrorKind,
    GatewayError,
    OrchestrationError,
    PaymentProcessingError,
    TransactionCreationError,
)
from cardpay.common.startup import _safe_env, missing_gateway_settings


def test_transaction_wrap_keeps_inner_kind_and_message():
    inner = OrchestrationError(ErrorKind.GATEWAY_FLOW, "payment flow failed: boom")

    wrapped = TransactionCreationError.wrap(inner)

    assert wrapped.kind == ErrorKind.GATEWAY_FLOW
    assert str(wrapped) == "error creating transaction: payment flow failed: boom"


def test_transaction_wrap_of_plain_error_is_preflight():
    assert TransactionCreationError.wrap(RuntimeError("disk full")).kind == ErrorKind.PREFLIGHT


def test_payment_wrap_classifies_gateway_vs_persistence():
    assert PaymentProcessingError.wrap(GatewayError("create_transaction", "503")).kind == ErrorKind.GATEWAY_FLOW
    assert PaymentProcessingError.wrap(RuntimeError("db")).kind == ErrorKind.PERSISTENCE


def test_root_cause_walks_the_chain():
    gateway_error = GatewayError("get_acceptance_token", "timeout")
    try:
        try:
            raise OrchestrationError(ErrorKind.GATEWAY_FLOW, "payment flow failed") from gateway_error
        except OrchestrationError as exc:
            raise TransactionCreationError.wrap(exc) from exc
    except TransactionCreationError as outer:
        assert outer.root_cause is gateway_error


def test_missing_gateway_settings_lists_empty_values():
    config = CommonSettings(payment_api_url="https://gateway.test", payment_public_key="", payment_integrity_secret="")

    assert missing_gateway_settings(config) == ["PAYMENT_PUBLIC_KEY", "PAYMENT_INTEGRITY_SECRET"]


def test_safe_env_redacts_secrets(monkeypatch):
    monkeypatch.setenv("PAYMENT_INTEGRITY_SECRET", "shh")
    monkeypatch.setenv("PAYMENT_API_URL", "https://gateway.test")
    monkeypatch.delenv("PAYMENT_PUBLIC_KEY", raising=False)

    assert _safe_env("PAYMENT_INTEGRITY_SECRET") == "<redacted>"
    assert _safe_env("PAYMENT_API_URL") == "https://gateway.test"
    assert _safe_env("PAYMENT_PUBLIC_KEY") == "<unset>"
