"""Integrity signature and transaction reference helpers."""

import hashlib
import secrets
import string
import time

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_transaction_reference() -> str:
    """Return a unique reference shaped `REF-<base36 ms timestamp>-<random>`."""

    timestamp = _to_base36(time.time_ns() // 1_000_000)
    random_part = "".join(secrets.choice(_BASE36) for _ in range(8))
    return f"REF-{timestamp}-{random_part}".upper()


def generate_transaction_signature(
    reference: str,
    amount_in_cents: int,
    currency: str,
    integrity_secret: str,
) -> str:
    """SHA-256 hex digest of `<reference><amount><currency><secret>`.

    This is the integrity signature the gateway recomputes to detect tampering
    with the amount or reference of a transaction.
    """

    payload = f"{reference}{amount_in_cents}{currency}{integrity_secret}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
