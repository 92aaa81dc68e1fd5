from fastapi import APIRouter, Depends, HTTPException, status

from coaching.core.auth import get_current_user
from coaching.core.deps import get_verification_flow
from coaching.core.errors import CoachingError, to_http_exception
from coaching.core.security import create_access_token
from coaching.models.user import User, UserRole
from coaching.schemas.auth import (
    AuthResponse,
    LoginRequest,
    PhoneLoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SendOtpRequest,
    SendOtpResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from coaching.schemas.user import UserResponse
from coaching.services.verification import CHANNEL_EMAIL, Registration, VerificationFlow

router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    token = create_access_token(subject=user.id, extra_claims={"role": user.role.value})
    return AuthResponse(user=UserResponse.model_validate(user), access_token=token)


@router.post("/send-otp", response_model=SendOtpResponse)
def send_otp(body: SendOtpRequest, flow: VerificationFlow = Depends(get_verification_flow)):
    """Issue a 6-digit code for an email or phone. Any earlier code for it stops working."""
    try:
        flow.send_code(body.identifier, body.type)
    except CoachingError as e:
        raise to_http_exception(e)
    if body.type == CHANNEL_EMAIL:
        return SendOtpResponse(message="OTP sent to email")
    return SendOtpResponse(message="OTP sent to phone (Check Server Console)")


@router.post("/verify-otp", response_model=VerifyOtpResponse)
def verify_otp(body: VerifyOtpRequest, flow: VerificationFlow = Depends(get_verification_flow)):
    """Consume a code. Returns a verification token usable once for registration."""
    try:
        ticket = flow.verify_code(body.identifier, body.otp, body.type)
    except CoachingError as e:
        raise to_http_exception(e)
    return VerifyOtpResponse(success=True, verification_token=ticket)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, flow: VerificationFlow = Depends(get_verification_flow)):
    """Register after verifying the phone number via /verify-otp."""
    if body.role == UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Admin accounts cannot be self-registered")
    data = Registration(
        name=body.name,
        email=body.email,
        phone=body.phone,
        password=body.password,
        role=body.role,
    )
    try:
        user = flow.register(data, body.verification_token)
    except CoachingError as e:
        raise to_http_exception(e)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, flow: VerificationFlow = Depends(get_verification_flow)):
    """Password login with email or phone."""
    try:
        user = flow.login(body.identifier, body.password)
    except CoachingError as e:
        raise to_http_exception(e)
    return _auth_response(user)


@router.post("/login-via-phone", response_model=AuthResponse)
def login_via_phone(body: PhoneLoginRequest, flow: VerificationFlow = Depends(get_verification_flow)):
    """Login with a phone OTP. 400 for a bad code, 404 if the phone has no account."""
    try:
        user = flow.login_with_phone(body.phone, body.otp)
    except CoachingError as e:
        raise to_http_exception(e)
    return _auth_response(user)


@router.post("/reset-password")
def reset_password(body: ResetPasswordRequest, flow: VerificationFlow = Depends(get_verification_flow)):
    """Set a new password after verifying an email OTP."""
    try:
        flow.reset_password(body.email, body.otp, body.new_password)
    except CoachingError as e:
        raise to_http_exception(e)
    return {"ok": True, "message": "Password updated"}


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    """Current user (requires valid Bearer token)."""
    return user
