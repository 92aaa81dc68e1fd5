import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Float, String
from sqlalchemy.sql import func

from coaching.core.database import Base


class PaymentMethod(str, enum.Enum):
    CARD = "CARD"
    UPI = "UPI"


class Transaction(Base):
    """Simulated payment record. Append-only: rows are never updated or deleted."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    course_id = Column(String(36), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(8), nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=False)
    upi_id = Column(String(255), nullable=True)  # payer, UPI only
    destination_account = Column(String(255), nullable=False)  # owner's UPI
    transaction_ref = Column(String(64), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="SUCCESS")
    owner_account_credited = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
