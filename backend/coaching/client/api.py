"""HTTP client for the Zero Classes API, mapping error responses back to domain errors."""

import logging
from typing import Any, Optional

import httpx

from coaching.core.errors import (
    CoachingError,
    CollaboratorUnavailable,
    DuplicateIdentity,
    InvalidCredentials,
    OtpInvalidOrExpired,
    PaymentFailed,
    UpdateNotFound,
    UserNotRegistered,
)

logger = logging.getLogger(__name__)


class ApiError(CoachingError):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


def _detail(response: httpx.Response) -> Any:
    try:
        return response.json().get("detail")
    except ValueError:
        return response.text


def error_from_response(response: httpx.Response) -> CoachingError:
    detail = _detail(response)
    if isinstance(detail, dict) and detail.get("field"):
        return DuplicateIdentity(detail["field"])
    message = detail if isinstance(detail, str) else f"HTTP {response.status_code}"
    code = response.status_code
    if code == 401:
        return InvalidCredentials(message)
    if code == 400 and message == OtpInvalidOrExpired.message:
        return OtpInvalidOrExpired(message)
    if code == 400 and message.startswith("Please verify"):
        return OtpInvalidOrExpired(message)
    if code == 402:
        return PaymentFailed(message)
    if code == 404 and message == UserNotRegistered.message:
        return UserNotRegistered(message)
    if code == 404:
        return UpdateNotFound(message)
    if code == 503:
        return CollaboratorUnavailable(message)
    return ApiError(code, message)


class ApiClient:
    def __init__(self, http: httpx.Client, prefix: str = "/api"):
        self.http = http
        self.prefix = prefix.rstrip("/")

    def _request(self, method: str, path: str, token: Optional[str] = None, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = self.http.request(method, f"{self.prefix}{path}", headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise CollaboratorUnavailable(f"Backend unreachable: {e}") from e
        if response.is_error:
            raise error_from_response(response)
        return response.json()

    # Catalog

    def list_courses(self, token: Optional[str] = None) -> list[dict]:
        return self._request("GET", "/courses", token=token)

    def list_materials(self, token: Optional[str] = None) -> list[dict]:
        return self._request("GET", "/materials", token=token)

    def create_course(self, token: str, data: dict) -> dict:
        return self._request("POST", "/courses", token=token, json=data)

    def update_course(self, token: str, course_id: str, data: dict) -> dict:
        return self._request("PUT", f"/courses/{course_id}", token=token, json=data)

    def create_material(self, token: str, data: dict) -> dict:
        return self._request("POST", "/materials", token=token, json=data)

    # Auth

    def send_otp(self, identifier: str, channel: str) -> dict:
        return self._request("POST", "/auth/send-otp", json={"identifier": identifier, "type": channel})

    def verify_otp(self, identifier: str, otp: str, channel: str) -> dict:
        return self._request(
            "POST", "/auth/verify-otp", json={"identifier": identifier, "otp": otp, "type": channel}
        )

    def register(self, data: dict) -> dict:
        return self._request("POST", "/auth/register", json=data)

    def login(self, identifier: str, password: str) -> dict:
        return self._request("POST", "/auth/login", json={"identifier": identifier, "password": password})

    def login_via_phone(self, phone: str, otp: str) -> dict:
        return self._request("POST", "/auth/login-via-phone", json={"phone": phone, "otp": otp})

    def me(self, token: str) -> dict:
        return self._request("GET", "/auth/me", token=token)

    # Payments

    def quote(self, course_id: str) -> dict:
        return self._request("GET", f"/payments/quote/{course_id}")

    def checkout(self, token: str, data: dict) -> dict:
        return self._request("POST", "/payments/checkout", token=token, json=data)
