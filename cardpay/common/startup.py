"""Startup-time helpers for safe config logging."""

import os

from cardpay.common.config import CommonSettings
from cardpay.common.logging import logger


REQUIRED_GATEWAY_SETTINGS = {
    "PAYMENT_PUBLIC_KEY": "payment_public_key",
    "PAYMENT_INTEGRITY_SECRET": "payment_integrity_secret",
    "PAYMENT_API_URL": "payment_api_url",
}


def _safe_env(name: str) -> str:
    """Return env value with simple redaction for secret-like variable names."""

    value = os.getenv(name)
    if value is None:
        return "<unset>"
    if any(secret in name for secret in ["KEY", "SECRET", "PASSWORD", "TOKEN"]):
        return "<redacted>"
    return value


def log_startup_config(service_name: str, keys: list[str]) -> None:
    """Log selected startup config keys for quick troubleshooting."""

    config = {"service": service_name}
    for key in keys:
        config[key] = _safe_env(key)
    logger.info("startup_config=%s", config)


def missing_gateway_settings(config: CommonSettings) -> list[str]:
    """Return env names of gateway settings that are empty."""

    return [env_name for env_name, field in REQUIRED_GATEWAY_SETTINGS.items() if not getattr(config, field)]


def check_gateway_config(config: CommonSettings) -> bool:
    """Warn (without aborting startup) when gateway credentials are incomplete."""

    missing = missing_gateway_settings(config)
    if missing:
        logger.error("gateway config incomplete missing=%s", ", ".join(missing))
        return False
    logger.info("gateway config validated")
    return True
