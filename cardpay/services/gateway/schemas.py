"""Request/response shapes exchanged with the external payment gateway."""

from pydantic import BaseModel, ConfigDict, Field

from cardpay.common.config import CommonSettings


class GatewayConfig(BaseModel):
    """Connection settings handed explicitly to `GatewayClient`."""

    model_config = ConfigDict(frozen=True)

    api_url: str
    public_key: str
    integrity_secret: str
    timeout_seconds: float = 30.0

    @classmethod
    def from_settings(cls, config: CommonSettings) -> "GatewayConfig":
        return cls(
            api_url=config.payment_api_url.rstrip("/"),
            public_key=config.payment_public_key,
            integrity_secret=config.payment_integrity_secret,
            timeout_seconds=config.payment_timeout_seconds,
        )


class CustomerData(BaseModel):
    """Identity of the paying customer as the gateway expects it."""

    model_config = ConfigDict(frozen=True)

    full_name: str = Field(min_length=1)
    legal_id: str = Field(min_length=1)
    legal_id_type: str = Field(min_length=1)


class PaymentMethod(BaseModel):
    """Tokenized payment method attached to a gateway transaction."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(min_length=1)
    token: str = Field(min_length=1)
    installments: int = Field(ge=1)


class CardTokenRequest(BaseModel):
    """Raw card data sent once to the gateway tokenization endpoint."""

    number: str = Field(min_length=1)
    cvc: str = Field(min_length=1)
    exp_month: str = Field(min_length=1)
    exp_year: str = Field(min_length=1)
    card_holder: str = Field(min_length=1)


class TransactionRequest(BaseModel):
    """Payload of a gateway transaction creation call."""

    acceptance_token: str
    amount_in_cents: int = Field(gt=0)
    currency: str = Field(min_length=3, max_length=3)
    signature: str
    customer_email: str
    payment_method: PaymentMethod
    reference: str
    customer_data: CustomerData


class ExternalTransaction(BaseModel):
    """Gateway-side transaction identity and its reported status."""

    id: str
    status: str
