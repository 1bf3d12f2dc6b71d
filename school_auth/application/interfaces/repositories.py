"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from school_auth.application.dtos.role import RoleResult
    from school_auth.application.dtos.token import (
        OtpResult,
        RefreshTokenCreate,
        RefreshTokenResult,
    )
    from school_auth.application.dtos.user import UserCreate, UserResult
    from school_auth.domain.enums import OtpPurpose


# User repository interface
class IUserRepository(Protocol):
    """Protocol for user repository (DIP)."""

    async def get_by_id(self, user_id: str) -> UserResult | None:
        """Return user by ID."""

    async def get_by_username(self, username: str) -> UserResult | None:
        """Return user by (globally unique) username."""

    async def get_by_username_and_school(
        self, username: str, school_id: str
    ) -> UserResult | None:
        """Return user by username only if it belongs to school_id."""

    async def get_by_phone(self, phone: str) -> UserResult | None:
        """Return user by (globally unique) phone number."""

    async def create_user(self, data: UserCreate) -> UserResult:
        """Insert a new user (unverified unless phone_verified_at is set). Raises UserAlreadyExistsException on duplicate username or phone."""

    async def mark_phone_verified(self, user_id: str, verified_at: datetime) -> None:
        """Set is_phone_verified and phone_verified_at."""

    async def update_password(
        self, user_id: str, password_hash: str, changed_at: datetime
    ) -> None:
        """Replace the password hash and stamp password_changed_at."""

    async def record_login(self, user_id: str, logged_in_at: datetime) -> None:
        """Stamp last_login_at."""

    async def assign_school(self, user_id: str, school_id: str) -> UserResult | None:
        """Set the user's school; return the updated user or None if not found."""


# Role repository interface
class IRoleRepository(Protocol):
    """Protocol for role repository (DIP)."""

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        """Return role by ID."""

    async def get_by_name(self, name: str, school_id: str | None = None) -> RoleResult | None:
        """Return role by name within a school (None = platform role)."""


# Refresh token repository interface
class IRefreshTokenRepository(Protocol):
    """Protocol for refresh session storage (DIP)."""

    async def create(self, data: RefreshTokenCreate) -> RefreshTokenResult:
        """Persist a new refresh session."""

    async def get_by_token(self, token: str) -> RefreshTokenResult | None:
        """Return the session row for a literal refresh token string."""

    async def rotate(
        self,
        old_token: str,
        user_id: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        """Swap old_token for new_token in one conditional update.

        Succeeds only if the row still holds old_token for user_id, is not
        revoked and has not expired. Returns False when no row matched, so
        two concurrent rotations of the same token cannot both succeed.
        """

    async def delete_by_token(self, token: str, user_id: str | None = None) -> bool:
        """Delete the row holding token (scoped to user_id when given). Returns True if a row was deleted."""

    async def delete_expired_or_revoked(self, user_id: str, now: datetime) -> int:
        """Delete the user's expired or revoked rows. Returns rows deleted."""

    async def delete_all_for_user(self, user_id: str) -> int:
        """Delete every session of the user. Returns rows deleted."""


# OTP repository interface
class IOtpRepository(Protocol):
    """Protocol for one-time code storage (DIP)."""

    async def create(
        self,
        user_id: str,
        code: str,
        purpose: OtpPurpose,
        school_id: str | None,
        expires_at: datetime,
    ) -> OtpResult:
        """Persist a new unused code."""

    async def consume(
        self,
        user_id: str,
        code: str,
        purpose: OtpPurpose,
        school_id: str | None,
        now: datetime,
    ) -> bool:
        """Mark a matching unused, unexpired code as used in one conditional update.

        school_id None matches only platform-scoped codes. Returns True if a
        code was consumed.
        """

    async def invalidate_active(
        self, user_id: str, purpose: OtpPurpose, school_id: str | None
    ) -> int:
        """Mark the user's unused codes for purpose and scope as used. Returns rows updated."""


# Unit of work interface
class IUnitOfWork(Protocol):
    """Protocol for committing or discarding the current transaction."""

    async def commit(self) -> None:
        """Commit pending changes."""

    async def rollback(self) -> None:
        """Discard pending changes."""
