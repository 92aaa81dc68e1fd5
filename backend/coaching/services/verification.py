"""OTP-gated registration and login flows."""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from coaching.core.errors import (
    CollaboratorUnavailable,
    InvalidCredentials,
    MissingIdentifier,
    OtpInvalidOrExpired,
    UserNotRegistered,
)
from coaching.core.security import create_verification_ticket, read_verification_ticket
from coaching.models.user import User, UserRole
from coaching.services.identity_store import IdentityStore
from coaching.services.otp import OtpLedger, generate_code
from coaching.services.phone import normalize_phone, phone_lookup_candidates

logger = logging.getLogger(__name__)

CHANNEL_EMAIL = "email"
CHANNEL_PHONE = "phone"

OTP_EMAIL_SUBJECT = "Zero Classes Verification Code"


class NotificationSender(Protocol):
    def send(self, destination: str, subject: str, body: str) -> bool:
        ...


@dataclass
class Registration:
    name: str
    email: str
    phone: str
    password: str
    role: UserRole = UserRole.STUDENT


def canonical_email(email: str) -> str:
    return (email or "").strip().lower()


def canonical_identifier(identifier: str, channel: str) -> str:
    if channel == CHANNEL_PHONE:
        return normalize_phone((identifier or "").strip())
    return canonical_email(identifier)


class VerificationFlow:
    def __init__(self, ledger: OtpLedger, store: IdentityStore, notifier: NotificationSender):
        self.ledger = ledger
        self.store = store
        self.notifier = notifier

    def send_code(self, identifier: str, channel: str) -> str:
        """
        Issue a code for `identifier` and deliver it out of band.

        Once delivered, the new code replaces any earlier one for the same
        identifier; a failed delivery leaves the earlier code live.
        Phone codes go to the operator console; there is no SMS gateway.
        Returns the identifier the code is keyed under.
        """
        key = canonical_identifier(identifier, channel)
        if not key:
            raise MissingIdentifier()
        code = generate_code()
        if channel == CHANNEL_EMAIL:
            sent = self.notifier.send(key, OTP_EMAIL_SUBJECT, f"Your OTP is: {code}")
            if not sent:
                raise CollaboratorUnavailable("Failed to send Email OTP")
            logger.info("OTP sent to email %s", key)
        else:
            logger.warning("[SMS SIMULATION] OTP for %s: %s", key, code)
        self.ledger.issue(key, code)
        return key

    def _consume(self, identifier: str, code: str, channel: str) -> str:
        key = canonical_identifier(identifier, channel)
        if not key or not self.ledger.verify(key, code):
            logger.info("OTP check failed for %s", key)
            raise OtpInvalidOrExpired()
        return key

    def verify_code(self, identifier: str, code: str, channel: str) -> str:
        """Consume the code and return a verification ticket for the identifier."""
        key = self._consume(identifier, code, channel)
        return create_verification_ticket(key, channel)

    def register(self, data: Registration, ticket: Optional[str]) -> User:
        """Create the identity, provided `ticket` proves the phone was just verified."""
        phone = normalize_phone(data.phone)
        verified = read_verification_ticket(ticket, CHANNEL_PHONE) if ticket else None
        if not phone or verified != phone:
            raise OtpInvalidOrExpired("Please verify Phone OTP first")
        return self.store.create(
            name=data.name,
            email=canonical_email(data.email),
            phone=phone,
            password=data.password,
            role=data.role,
        )

    def find_by_phone(self, phone: str) -> Optional[User]:
        for candidate in phone_lookup_candidates(phone):
            user = self.store.find_by_phone(candidate)
            if user:
                return user
        return None

    def login_with_phone(self, phone: str, code: str) -> User:
        self._consume(phone, code, CHANNEL_PHONE)
        user = self.find_by_phone(phone)
        if not user:
            raise UserNotRegistered()
        return user

    def login(self, identifier: str, password: str) -> User:
        identifier = (identifier or "").strip()
        if "@" in identifier:
            identifier = canonical_email(identifier)
        user = self.store.find_by_email_or_phone(identifier)
        if not user and "@" not in identifier:
            user = self.find_by_phone(identifier)
        if not user or user.password != password:
            raise InvalidCredentials()
        return user

    def reset_password(self, email: str, code: str, new_password: str) -> User:
        key = self._consume(email, code, CHANNEL_EMAIL)
        user = self.store.find_by_email(key)
        if not user:
            raise UserNotRegistered()
        logger.info("Password reset for user %s", user.id)
        return self.store.set_password(user.id, new_password)
