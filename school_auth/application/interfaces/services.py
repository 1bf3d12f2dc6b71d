"""Service interfaces (ports) for the application layer.

Protocols define contracts for collaborators injected into use cases (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from datetime import datetime, timedelta

    from school_auth.domain.enums import OtpPurpose


# Password hashing
class IPasswordHasher(Protocol):
    """Protocol for one-way password hashing (sync; callers offload to a thread)."""

    def hash_password(self, password: str) -> str:
        """Return a salted hash of password."""

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Return True if plain_password matches hashed_password."""


class TokenExpiredError(ValueError):
    """Raised by token verifiers when the signature is valid but the token expired."""


# Token codec
class ITokenCodec(Protocol):
    """Protocol for signing and verifying session and reset tokens."""

    refresh_ttl: timedelta

    def create_access_token(self, claims: dict[str, Any]) -> str:
        """Sign session claims as a short-lived access token."""

    def create_refresh_token(self, claims: dict[str, Any]) -> str:
        """Sign session claims as a long-lived refresh token."""

    def verify_access_token(self, token: str) -> dict[str, Any]:
        """Return claims of a valid access token. Raises ValueError otherwise."""

    def verify_refresh_token(self, token: str) -> dict[str, Any]:
        """Return claims of a valid refresh token. Raises ValueError otherwise."""

    def create_reset_token(
        self, user_id: str, password_changed_at: datetime | None = None
    ) -> str:
        """Sign a short-lived password reset capability for user_id, pinned to password_changed_at."""

    def verify_reset_token(self, token: str) -> dict[str, Any]:
        """Return claims of a reset token with valid signature and expiry. Raises ValueError otherwise."""


# OTP delivery
class IOtpSender(Protocol):
    """Protocol for delivering one-time codes to an account (phone or email)."""

    async def send_otp(
        self, phone: str, code: str, purpose: OtpPurpose, *, email: str | None = None
    ) -> None:
        """Deliver code. Raises OtpDeliveryException on failure."""
