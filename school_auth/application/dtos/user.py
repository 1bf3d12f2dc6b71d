"""DTOs for user use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class UserResult:
    """User read-model. password_hash is carried for credential checks only
    and is never serialized (excluded from repr and from API projections)."""

    id: str
    username: str
    phone: str
    email: str | None
    school_id: str | None
    role_id: str
    is_active: bool
    is_phone_verified: bool
    is_email_verified: bool
    password_hash: str = field(repr=False)
    password_changed_at: datetime | None = None
    phone_verified_at: datetime | None = None
    last_login_at: datetime | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class UserCreate:
    """Fields for a new user row (password already hashed).

    phone_verified_at is set for accounts created already verified (school
    provisioning); self-registered accounts start unverified.
    """

    username: str
    phone: str
    password_hash: str = field(repr=False)
    role_id: str
    email: str | None = None
    school_id: str | None = None
    phone_verified_at: datetime | None = None
