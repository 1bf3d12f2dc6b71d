"""DTOs for refresh token and OTP rows (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime

from school_auth.domain.enums import DeviceType, OtpPurpose


@dataclass(frozen=True)
class RefreshTokenResult:
    """Persisted refresh session."""

    id: str
    token: str
    user_id: str
    expires_at: datetime
    ip_address: str | None
    user_agent: str | None
    device_type: DeviceType
    is_revoked: bool
    last_used_at: datetime | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class RefreshTokenCreate:
    token: str
    user_id: str
    expires_at: datetime
    ip_address: str | None
    user_agent: str | None
    device_type: DeviceType
    last_used_at: datetime


@dataclass(frozen=True)
class OtpResult:
    """Persisted one-time code."""

    id: str
    user_id: str
    code: str
    purpose: OtpPurpose
    school_id: str | None
    expires_at: datetime
    is_used: bool
