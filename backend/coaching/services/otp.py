"""In-memory one-time code ledger for email and phone verification."""

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

OTP_DIGITS = 6


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_code() -> str:
    return f"{secrets.randbelow(10 ** OTP_DIGITS):0{OTP_DIGITS}d}"


@dataclass(frozen=True)
class OtpEntry:
    identifier: str
    code: str
    issued_at: datetime


class OtpLedger:
    """
    Keyed store of live one-time codes, at most one per identifier.

    Expiry is checked lazily against the injected clock, so no timer or
    background task is needed. Every read-modify-write happens under one
    lock: of several concurrent verifies for the same code, one succeeds.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(minutes=5),
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, OtpEntry] = {}
        self._lock = threading.Lock()

    def _expired(self, entry: OtpEntry, now: datetime) -> bool:
        return entry.issued_at + self.ttl <= now

    def issue(self, identifier: str, code: Optional[str] = None) -> str:
        """Store `code` (a fresh one if omitted) for `identifier`, replacing any live one, and return it."""
        code = code or generate_code()
        with self._lock:
            now = self._clock()
            self._purge_locked(now)
            self._entries[identifier] = OtpEntry(identifier=identifier, code=code, issued_at=now)
        return code

    def verify(self, identifier: str, candidate: str) -> bool:
        """True iff `candidate` matches the live code; a match consumes it."""
        with self._lock:
            entry = self._entries.get(identifier)
            if entry is None:
                return False
            if self._expired(entry, self._clock()):
                del self._entries[identifier]
                return False
            if entry.code != candidate:
                return False
            del self._entries[identifier]
        return True

    def purge_expired(self) -> int:
        with self._lock:
            return self._purge_locked(self._clock())

    def _purge_locked(self, now: datetime) -> int:
        stale = [k for k, e in self._entries.items() if self._expired(e, now)]
        for k in stale:
            del self._entries[k]
        if stale:
            logger.debug("Purged %s expired OTP entries", len(stale))
        return len(stale)

    def __contains__(self, identifier: str) -> bool:
        with self._lock:
            entry = self._entries.get(identifier)
            return entry is not None and not self._expired(entry, self._clock())

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for e in self._entries.values() if not self._expired(e, now))
