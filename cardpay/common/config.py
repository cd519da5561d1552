"""Central environment-driven settings for the CardPay service.

The process loads this once at startup. Gateway credentials and polling
behavior are controlled by environment variables (see `.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "cardpay"
    log_level: str = "INFO"
    database_url: str = "sqlite:///./cardpay.db"
    auto_create_tables: bool = True
    payment_api_url: str = ""
    payment_public_key: str = ""
    payment_integrity_secret: str = ""
    payment_timeout_seconds: float = 30.0
    transaction_poll_max_attempts: int = 10
    transaction_poll_interval_seconds: float = 1.0
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()
