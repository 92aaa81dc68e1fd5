"""
Simulated checkout.

No gateway is contacted: a successful "charge" is an append-only
transaction row crediting the owner's UPI account.
"""

import logging
import time
import uuid
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session

from coaching.core.config import settings
from coaching.core.errors import PaymentFailed
from coaching.models.course import Course
from coaching.models.transaction import PaymentMethod, Transaction

logger = logging.getLogger(__name__)


def quote_inr(price_usd) -> int:
    """Checkout amount in whole rupees for a USD list price."""
    amount = Decimal(str(price_usd or 0)) * Decimal(str(settings.INR_PER_USD))
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _transaction_ref() -> str:
    return f"txn_{int(time.time() * 1000)}"


class PaymentCollaborator:
    def __init__(self, db: Session):
        self.db = db

    def quote(self, course: Course) -> int:
        return quote_inr(course.price)

    def charge(
        self,
        user_id: str,
        course_id: str,
        amount,
        currency: str,
        method: PaymentMethod,
        upi_id: Optional[str] = None,
        commit: bool = True,
    ) -> Transaction:
        """
        Record a successful payment. With commit=False the row is only
        flushed, so the caller can commit it together with the enrollment.
        """
        if Decimal(str(amount)) < 0:
            raise PaymentFailed("Amount must not be negative")
        if method == PaymentMethod.UPI and (not upi_id or "@" not in upi_id):
            raise PaymentFailed("Invalid UPI ID format")

        txn = Transaction(
            id=str(uuid.uuid4()),
            user_id=user_id,
            course_id=course_id,
            amount=amount,
            currency=currency,
            payment_method=method,
            upi_id=upi_id if method == PaymentMethod.UPI else None,
            destination_account=settings.OWNER_UPI_ID,
            transaction_ref=_transaction_ref(),
            status="SUCCESS",
            owner_account_credited=True,
        )
        self.db.add(txn)
        if commit:
            self.db.commit()
            self.db.refresh(txn)
        else:
            self.db.flush()
        logger.info(
            "Payment recorded %s: user=%s course=%s %s %s via %s",
            txn.transaction_ref, user_id, course_id, amount, currency, method.value,
        )
        return txn
