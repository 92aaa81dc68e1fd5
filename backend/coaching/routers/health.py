from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coaching.core.deps import get_db, get_otp_ledger
from coaching.services.otp import OtpLedger

router = APIRouter()


@router.get("")
def health_check(db: Session = Depends(get_db), ledger: OtpLedger = Depends(get_otp_ledger)):
    """Health check; includes DB connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        db_ok = False
    return {
        "status": "ok",
        "database": "connected" if db_ok else "disconnected",
        "pending_otps": len(ledger),
    }
