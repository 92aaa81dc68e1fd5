"""Domain errors raised by services and translated to HTTP responses by the routers."""

from typing import Optional

from fastapi import HTTPException


class CoachingError(Exception):
    """Base class for expected failures surfaced to the caller."""

    message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class DuplicateIdentity(CoachingError):
    """Email or phone already belongs to another identity."""

    _messages = {
        "email": "Email already in use",
        "phone": "Phone number already in use",
    }

    def __init__(self, field: str):
        super().__init__(self._messages.get(field, f"{field} already in use"))
        self.field = field


class InvalidCredentials(CoachingError):
    message = "Invalid credentials"


class OtpInvalidOrExpired(CoachingError):
    # Wrong and expired codes share one message so callers cannot probe the ledger
    message = "Invalid or Expired OTP"


class MissingIdentifier(CoachingError):
    message = "Email or phone is required"


class UserNotRegistered(CoachingError):
    message = "User not registered"


class UpdateNotFound(CoachingError):
    message = "Not found"


class CollaboratorUnavailable(CoachingError):
    message = "Service unavailable"


class PaymentFailed(CoachingError):
    message = "Payment processing failed"


_STATUS_CODES = {
    DuplicateIdentity: 400,
    InvalidCredentials: 401,
    OtpInvalidOrExpired: 400,
    MissingIdentifier: 400,
    UserNotRegistered: 404,
    UpdateNotFound: 404,
    CollaboratorUnavailable: 503,
    PaymentFailed: 402,
}


def http_status_for(exc: CoachingError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_CODES:
            return _STATUS_CODES[cls]
    return 400


def to_http_exception(exc: CoachingError) -> HTTPException:
    """HTTPException for a domain error; duplicates also name the conflicting field."""
    if isinstance(exc, DuplicateIdentity):
        detail = {"message": exc.message, "field": exc.field}
    else:
        detail = exc.message
    return HTTPException(status_code=http_status_for(exc), detail=detail)
