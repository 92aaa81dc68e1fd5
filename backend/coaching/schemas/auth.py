from typing import Literal, Optional

from pydantic import BaseModel, EmailStr

from coaching.models.user import UserRole
from coaching.schemas.user import UserResponse

OtpChannel = Literal["email", "phone"]


class SendOtpRequest(BaseModel):
    identifier: str
    type: OtpChannel


class SendOtpResponse(BaseModel):
    message: str


class VerifyOtpRequest(BaseModel):
    identifier: str
    otp: str
    type: OtpChannel = "email"


class VerifyOtpResponse(BaseModel):
    success: bool
    message: str = "Verified"
    # Present to /auth/register as proof the phone was verified
    verification_token: Optional[str] = None


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    phone: str
    password: str
    role: UserRole = UserRole.STUDENT
    verification_token: Optional[str] = None


class LoginRequest(BaseModel):
    identifier: str  # email or phone
    password: str


class PhoneLoginRequest(BaseModel):
    phone: str
    otp: str


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str
    new_password: str


class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
