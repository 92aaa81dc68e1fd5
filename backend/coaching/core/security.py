from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from coaching.core.config import settings

ALGORITHM = "HS256"

# Claim value marking a token that proves an OTP was just verified
OTP_VERIFIED_PURPOSE = "otp_verified"


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[dict] = None,
) -> str:
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": subject, "exp": expire}
    if extra_claims:
        to_encode.update(extra_claims)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def create_verification_ticket(identifier: str, channel: str) -> str:
    """Short-lived token issued after a successful OTP check for `identifier`."""
    return create_access_token(
        subject=identifier,
        expires_delta=timedelta(minutes=settings.OTP_EXPIRE_MINUTES),
        extra_claims={"purpose": OTP_VERIFIED_PURPOSE, "channel": channel},
    )


def read_verification_ticket(token: str, channel: str) -> Optional[str]:
    """Return the verified identifier, or None if the ticket is invalid, expired or for another channel."""
    payload = decode_access_token(token)
    if not payload or payload.get("purpose") != OTP_VERIFIED_PURPOSE:
        return None
    if payload.get("channel") != channel:
        return None
    return payload.get("sub")
