from datetime import timedelta
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from coaching.core.config import settings
from coaching.core.database import SessionLocal
from coaching.services.email import EmailNotifier
from coaching.services.identity_store import IdentityStore
from coaching.services.otp import OtpLedger
from coaching.services.verification import VerificationFlow

# Single authoritative ledger for the process; codes do not survive a restart
_otp_ledger = OtpLedger(ttl=timedelta(minutes=settings.OTP_EXPIRE_MINUTES))


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_otp_ledger() -> OtpLedger:
    return _otp_ledger


def get_notifier() -> EmailNotifier:
    return EmailNotifier()


def get_identity_store(db: Session = Depends(get_db)) -> IdentityStore:
    return IdentityStore(db)


def get_verification_flow(
    ledger: OtpLedger = Depends(get_otp_ledger),
    store: IdentityStore = Depends(get_identity_store),
    notifier: EmailNotifier = Depends(get_notifier),
) -> VerificationFlow:
    return VerificationFlow(ledger, store, notifier)
