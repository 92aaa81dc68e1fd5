import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from coaching.core.auth import Capability, require_capability
from coaching.core.config import settings
from coaching.core.deps import get_db, get_identity_store
from coaching.core.errors import CoachingError, to_http_exception
from coaching.models.course import Course
from coaching.models.transaction import Transaction
from coaching.models.user import User
from coaching.schemas.payment import (
    CheckoutRequest,
    CheckoutResponse,
    QuoteResponse,
    TransactionResponse,
)
from coaching.services.enrollment import EnrollmentRecorder
from coaching.services.identity_store import IdentityStore
from coaching.services.payments import PaymentCollaborator

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_course(db: Session, course_id: str) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


@router.get("/quote/{course_id}", response_model=QuoteResponse)
def quote(course_id: str, db: Session = Depends(get_db)):
    """Checkout amount for a course, converted from its USD list price."""
    course = _get_course(db, course_id)
    return QuoteResponse(
        course_id=course.id,
        price=float(course.price or 0),
        amount=PaymentCollaborator(db).quote(course),
        currency=settings.CHECKOUT_CURRENCY,
    )


@router.post("/checkout", response_model=CheckoutResponse)
def checkout(
    body: CheckoutRequest,
    db: Session = Depends(get_db),
    store: IdentityStore = Depends(get_identity_store),
    user: User = Depends(require_capability(Capability.ENROLL)),
):
    """
    Record a simulated payment and enroll the caller in the course, in one commit.
    The amount is taken as settled; it is not checked against the course price.
    """
    course = _get_course(db, body.course_id)
    try:
        txn = PaymentCollaborator(db).charge(
            user_id=user.id,
            course_id=course.id,
            amount=body.amount,
            currency=body.currency,
            method=body.payment_method,
            upi_id=body.upi_id,
            commit=False,
        )
        enrolled = EnrollmentRecorder(store).confirm(user.id, course.id)
        # A repeat enrollment writes nothing itself, so the payment still needs committing
        db.commit()
    except CoachingError as e:
        db.rollback()
        logger.warning("Checkout failed for user %s course %s: %s", user.id, course.id, e.message)
        raise to_http_exception(e)
    return CheckoutResponse(
        success=True,
        transaction_ref=txn.transaction_ref,
        enrolled_course_ids=enrolled,
    )


@router.get("/transactions", response_model=list[TransactionResponse])
def list_transactions(
    db: Session = Depends(get_db),
    admin: User = Depends(require_capability(Capability.VIEW_TRANSACTIONS)),
):
    """All recorded payments, newest first."""
    return db.query(Transaction).order_by(Transaction.created_at.desc()).all()
