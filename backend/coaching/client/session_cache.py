"""
Client-side projection of the signed-in user and the catalog.

The cache owns no source of truth: it can be dropped and rebuilt from the
API at any time. State moves UNINITIALIZED -> SYNCED, then SYNCED -> STALE
on every local mutation until a re-fetch confirms it. If the API cannot be
reached at initialization the cache goes OFFLINE for good, serving
placeholder data and simulating payments locally.
"""

import enum
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from coaching.client.api import ApiClient, ApiError
from coaching.client.token_store import TokenStore
from coaching.core.errors import CollaboratorUnavailable, InvalidCredentials, OtpInvalidOrExpired

logger = logging.getLogger(__name__)


class CacheState(str, enum.Enum):
    UNINITIALIZED = "UNINITIALIZED"
    SYNCED = "SYNCED"
    STALE = "STALE"
    OFFLINE = "OFFLINE"


def placeholder_courses() -> list[dict]:
    return [
        {
            "id": "1",
            "title": "Introduction to React",
            "description": "Learn basics.",
            "date": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
            "meet_link": "#",
            "instructor_name": "Dr. Smith",
            "price": 49.99,
            "duration": "4 weeks",
            "status": "ACTIVE",
        }
    ]


class SessionCache:
    def __init__(self, api: ApiClient, token_store: TokenStore):
        self.api = api
        self.token_store = token_store
        self.state = CacheState.UNINITIALIZED
        self.user: Optional[dict] = None
        self.access_token: Optional[str] = None
        self.courses: list[dict] = []
        self.materials: list[dict] = []
        self._verification_token: Optional[str] = None

    @property
    def is_offline(self) -> bool:
        return self.state == CacheState.OFFLINE

    def initialize(self) -> CacheState:
        """Load catalog and restore the persisted session. Never raises for an unreachable API."""
        try:
            self._fetch()
        except CollaboratorUnavailable:
            logger.warning("Backend offline. Demo mode.")
            self.state = CacheState.OFFLINE
            self.courses = placeholder_courses()
            self.materials = []
            saved = self.token_store.load()
            if saved:
                self.user = saved["user"]
                self.access_token = saved.get("access_token")
            return self.state
        self.state = CacheState.SYNCED
        return self.state

    def _fetch(self) -> None:
        # Session first: join links and materials depend on who is asking
        saved = self.token_store.load() if self.access_token is None else None
        if saved and saved.get("access_token"):
            self.access_token = saved["access_token"]
        if self.access_token:
            try:
                self.user = self.api.me(self.access_token)
            except InvalidCredentials:
                logger.info("Persisted session expired, signing out")
                self._clear_session()
            else:
                self.token_store.save(self.user, self.access_token)
        self.courses = self.api.list_courses(self.access_token)
        self.materials = self.api.list_materials(self.access_token)

    def synchronize(self) -> CacheState:
        """Re-fetch everything; confirms pending mutations. No-op when offline."""
        if self.state == CacheState.OFFLINE:
            return self.state
        self._fetch()
        self.state = CacheState.SYNCED
        return self.state

    def invalidate(self) -> None:
        """Drop the projection; the next initialize() rebuilds it."""
        self.state = CacheState.UNINITIALIZED
        self.user = None
        self.access_token = None
        self.courses = []
        self.materials = []

    def _mark_stale(self) -> None:
        if self.state != CacheState.OFFLINE:
            self.state = CacheState.STALE

    def _resync_if_online(self) -> None:
        if self.state in (CacheState.SYNCED, CacheState.STALE):
            self.synchronize()

    # Access

    def is_enrolled(self, course_id: str) -> bool:
        return bool(self.user) and course_id in (self.user.get("enrolled_course_ids") or [])

    @property
    def has_any_enrollment(self) -> bool:
        return bool(self.user and self.user.get("enrolled_course_ids"))

    def join_link(self, course_id: str) -> Optional[str]:
        """Meet link for an enrolled course, else None."""
        if not self.is_enrolled(course_id):
            return None
        for course in self.courses:
            if course["id"] == course_id:
                return course.get("meet_link")
        return None

    def visible_materials(self) -> list[dict]:
        """Materials the signed-in student may open; empty until the first enrollment."""
        if not self.has_any_enrollment:
            return []
        return list(self.materials)

    # Session

    def _set_session(self, auth: dict) -> dict:
        self.user = auth["user"]
        self.access_token = auth["access_token"]
        self.token_store.save(self.user, self.access_token)
        self._resync_if_online()
        return self.user

    def _clear_session(self) -> None:
        self.user = None
        self.access_token = None
        self.token_store.clear()

    def send_otp(self, identifier: str, channel: str) -> None:
        self.api.send_otp(identifier, channel)

    def verify_otp(self, identifier: str, otp: str, channel: str) -> bool:
        """True if the code was accepted. A verified phone is remembered for register()."""
        try:
            result = self.api.verify_otp(identifier, otp, channel)
        except (OtpInvalidOrExpired, ApiError) as e:
            logger.info("OTP rejected for %s: %s", identifier, e)
            return False
        if channel == "phone":
            self._verification_token = result.get("verification_token")
        return bool(result.get("success"))

    def register(self, name: str, email: str, phone: str, password: str, role: str = "STUDENT") -> dict:
        auth = self.api.register(
            {
                "name": name,
                "email": email,
                "phone": phone,
                "password": password,
                "role": role,
                "verification_token": self._verification_token,
            }
        )
        self._verification_token = None
        return self._set_session(auth)

    def login(self, identifier: str, password: str) -> dict:
        return self._set_session(self.api.login(identifier, password))

    def login_with_phone(self, phone: str, otp: str) -> dict:
        # Sent as typed: the API tries the canonical form, then the raw one for older accounts
        return self._set_session(self.api.login_via_phone(phone, otp))

    def logout(self) -> None:
        self._clear_session()
        self._resync_if_online()

    # Mutations

    def process_payment(
        self,
        course_id: str,
        payment_method: str,
        upi_id: Optional[str] = None,
        amount: Optional[float] = None,
        currency: str = "INR",
    ) -> list[str]:
        """
        Pay for a course and return the updated enrollment set.

        Errors propagate; the cached enrollment set only changes after the
        API confirms the payment.
        """
        if self.user is None:
            raise InvalidCredentials("Login required")
        if self.is_offline:
            enrolled = self._with_enrollment(course_id)
            logger.info("Offline mode: simulated payment for course %s", course_id)
            return enrolled

        self._mark_stale()
        if amount is None:
            amount = self.api.quote(course_id)["amount"]
        result = self.api.checkout(
            self.access_token,
            {
                "course_id": course_id,
                "amount": amount,
                "currency": currency,
                "payment_method": payment_method,
                "upi_id": upi_id,
            },
        )
        self.user = {**self.user, "enrolled_course_ids": list(result["enrolled_course_ids"])}
        self.token_store.save(self.user, self.access_token)
        self.synchronize()
        return self.user["enrolled_course_ids"]

    def _with_enrollment(self, course_id: str) -> list[str]:
        enrolled = list(self.user.get("enrolled_course_ids") or [])
        if course_id not in enrolled:
            enrolled.append(course_id)
        self.user = {**self.user, "enrolled_course_ids": enrolled}
        self.token_store.save(self.user, self.access_token)
        return enrolled

    def add_course(self, data: dict) -> dict:
        self._mark_stale()
        course = self.api.create_course(self.access_token, data)
        self.synchronize()
        return course

    def update_course(self, course_id: str, data: dict) -> dict:
        self._mark_stale()
        course = self.api.update_course(self.access_token, course_id, data)
        self.synchronize()
        return course

    def add_material(self, data: dict) -> dict:
        self._mark_stale()
        material = self.api.create_material(self.access_token, data)
        self.synchronize()
        return material
