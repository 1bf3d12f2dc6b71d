"""User API schemas."""

from datetime import datetime

from pydantic import EmailStr, Field

from school_auth.domain.rules import (
    PASSWORD_MIN_LENGTH,
    PHONE_PATTERN,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
)
from school_auth.schemas.common import CamelModel


class UserProfile(CamelModel):
    """Current user projection. role_name and permissions come from the access token."""

    id: str
    username: str
    phone: str
    email: str | None = None
    school_id: str | None = None
    role_id: str
    role_name: str
    permissions: list[str]
    is_active: bool
    is_phone_verified: bool
    is_email_verified: bool
    last_login_at: datetime | None = None
    created_at: datetime | None = None


class AssignSchoolRequest(CamelModel):
    school_id: str = Field(..., min_length=1)


class AssignedUser(CamelModel):
    id: str
    username: str
    school_id: str | None


class ProvisionAccountRequest(CamelModel):
    """Request body for creating a student or teacher account in the context school."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LENGTH, max_length=USERNAME_MAX_LENGTH
    )
    phone: str = Field(..., pattern=PHONE_PATTERN, description="10-15 digits")
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    email: EmailStr | None = None


class ProvisionedUser(CamelModel):
    id: str
    username: str
    school_id: str | None
    role_id: str
    is_phone_verified: bool
