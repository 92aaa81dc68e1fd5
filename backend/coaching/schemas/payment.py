from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from coaching.models.transaction import PaymentMethod


class QuoteResponse(BaseModel):
    course_id: str
    price: float  # list price, USD
    amount: int
    currency: str


class CheckoutRequest(BaseModel):
    course_id: str
    amount: float = Field(ge=0)
    currency: str = "INR"
    payment_method: PaymentMethod
    upi_id: Optional[str] = None


class CheckoutResponse(BaseModel):
    success: bool
    message: str = "Payment Recorded"
    transaction_ref: str
    enrolled_course_ids: list[str]


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    course_id: str
    amount: float
    currency: str
    payment_method: PaymentMethod
    upi_id: Optional[str] = None
    destination_account: str
    transaction_ref: str
    status: str
    owner_account_credited: bool
    created_at: Optional[datetime] = None
