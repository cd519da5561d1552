"""Error types raised by the gateway client, stores and orchestrators.

Orchestration errors carry a `kind` describing where the flow broke and chain
the underlying exception through `__cause__` (`raise ... from exc`), so the
original gateway or storage message is always recoverable from the final
error.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Stage of an orchestration run that produced an error."""

    PREFLIGHT = "PREFLIGHT"  # reference generation / initial save
    GATEWAY_FLOW = "GATEWAY_FLOW"  # any external gateway step
    PERSISTENCE = "PERSISTENCE"  # local save/update after gateway steps
    # Never raised: an exhausted poll budget is reported as status TIMEOUT.
    TIMEOUT = "TIMEOUT"


class GatewayError(Exception):
    """Failure of one external payment gateway call."""

    def __init__(self, operation: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.status_code = status_code


class OrchestrationError(Exception):
    """Failure of an orchestration run, tagged with the stage that broke."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def root_cause(self) -> BaseException:
        """Innermost exception of the `__cause__` chain."""

        exc: BaseException = self
        while exc.__cause__ is not None:
            exc = exc.__cause__
        return exc


class TransactionCreationError(OrchestrationError):
    """Raised by the card transaction flow."""

    prefix = "error creating transaction"

    @classmethod
    def wrap(cls, exc: Exception) -> "TransactionCreationError":
        kind = exc.kind if isinstance(exc, OrchestrationError) else ErrorKind.PREFLIGHT
        return cls(kind, f"{cls.prefix}: {exc}")


class PaymentProcessingError(OrchestrationError):
    """Raised by the pre-tokenized payment flow."""

    prefix = "error processing payment"

    @classmethod
    def wrap(cls, exc: Exception) -> "PaymentProcessingError":
        kind = ErrorKind.GATEWAY_FLOW if isinstance(exc, GatewayError) else ErrorKind.PERSISTENCE
        return cls(kind, f"{cls.prefix}: {exc}")


class InvalidPaymentStatus(ValueError):
    """Status value outside the payment status vocabulary."""

    def __init__(self, status: str) -> None:
        super().__init__(f"unknown payment status: {status!r}")
        self.status = status
