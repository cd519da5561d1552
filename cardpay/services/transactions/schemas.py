"""API request/response schemas for card transaction endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CreateTransactionRequest(BaseModel):
    """Raw card-and-amount payload accepted by `POST /transactions`."""

    card_number: str = Field(min_length=1)
    cvc: str = Field(min_length=1)
    exp_month: str = Field(min_length=1)
    exp_year: str = Field(min_length=1)
    card_holder_name: str = Field(min_length=1)
    document_number: str = Field(min_length=1)
    document_type: str = Field(min_length=1)
    # 100 cents is the smallest chargeable amount.
    amount_in_cents: int = Field(ge=100)
    customer_email: str = Field(pattern=EMAIL_PATTERN)
    installments: int = Field(ge=1, le=48)


class TransactionResult(BaseModel):
    """Outcome of one orchestration run."""

    transaction_id: str
    status: str
    external_transaction_id: str
    reference: str
    amount: int
    currency: str
    message: str
    attempts: int


class TransactionRecordResponse(BaseModel):
    """Stored transaction as returned by `GET /transactions/{id}`."""

    id: str
    status: str
    created_at: datetime
    updated_at: datetime
