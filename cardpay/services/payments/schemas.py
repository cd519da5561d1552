"""API request/response schemas for payment endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from cardpay.services.gateway.schemas import CustomerData, PaymentMethod
from cardpay.services.transactions.schemas import EMAIL_PATTERN


class CreatePaymentRequest(BaseModel):
    """Pre-tokenized payment accepted by `POST /payments/process`."""

    amount_in_cents: int = Field(gt=0)
    currency: str = Field(min_length=3, max_length=3)
    reference: str = Field(min_length=1)
    customer_email: str = Field(pattern=EMAIL_PATTERN)
    customer_data: CustomerData
    payment_method: PaymentMethod


class PaymentResult(BaseModel):
    payment_id: str
    status: str
    reference: str
    amount: int
    currency: str


class PaymentRecordResponse(BaseModel):
    """Stored payment as returned by the read endpoints (no card token)."""

    id: str
    status: str
    amount: int
    currency: str
    reference: str
    customer_email: str
    customer_data: CustomerData
    installments: int
    created_at: datetime
    updated_at: datetime


class AcceptanceTokenResponse(BaseModel):
    acceptance_token: str


class CardTokenResponse(BaseModel):
    token: str


class TransactionStatusResponse(BaseModel):
    status: str
