"""Payment persistence model."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cardpay.common.db import Base


class PaymentRow(Base):
    """One processed pre-tokenized payment and its last known status."""

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    amount: Mapped[int] = mapped_column(Integer)
    currency: Mapped[str] = mapped_column(String(3))
    reference: Mapped[str] = mapped_column(String, index=True)
    status: Mapped[str] = mapped_column(String, index=True)
    customer_email: Mapped[str] = mapped_column(String)
    customer_data: Mapped[dict] = mapped_column(JSON)
    payment_method: Mapped[dict] = mapped_column(JSON)
    acceptance_token: Mapped[str] = mapped_column(String)
    signature: Mapped[str] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
