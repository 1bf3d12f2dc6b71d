"""Auth API schemas (request bodies and response data)."""

from pydantic import EmailStr, Field

from school_auth.domain.enums import OtpPurpose
from school_auth.domain.rules import (
    PASSWORD_MIN_LENGTH,
    PHONE_PATTERN,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
)
from school_auth.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """Request body for platform registration."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LENGTH, max_length=USERNAME_MAX_LENGTH
    )
    phone: str = Field(..., pattern=PHONE_PATTERN, description="10-15 digits")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LENGTH,
        description=f"Password (min {PASSWORD_MIN_LENGTH} characters)",
    )
    email: EmailStr | None = None


class ResendOtpRequest(CamelModel):
    username: str = Field(..., min_length=1)
    purpose: OtpPurpose


class VerifyOtpRequest(CamelModel):
    username: str = Field(..., min_length=1)
    otp: str = Field(..., pattern=r"^\d{4,12}$")


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class ForgotPasswordRequest(CamelModel):
    username: str = Field(..., min_length=1)


class ResetPasswordRequest(CamelModel):
    reset_token: str = Field(..., min_length=1)
    new_password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LENGTH,
        description=f"New password (min {PASSWORD_MIN_LENGTH} characters)",
    )


class RegistrationData(CamelModel):
    """Registration accepted; phone verification pending."""

    user_id: str
    masked_phone: str
    message: str = "Registration successful. Verify the OTP sent to your phone."


class OtpSentData(CamelModel):
    masked_phone: str
    message: str = "OTP sent"


class SessionUserData(CamelModel):
    id: str
    username: str
    role_id: str
    role_name: str


class LoginData(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: SessionUserData


class RefreshData(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    token_rotated: bool = True


class ResetTokenData(CamelModel):
    reset_token: str
