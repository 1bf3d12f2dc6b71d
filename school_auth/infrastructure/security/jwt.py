"""JWT token creation and verification (access, refresh and reset tokens).

Two independent signing keys: access tokens and reset tokens use the access
secret, refresh tokens use the refresh secret. Every token carries a `type`
claim so an access token cannot be presented as a reset token (or the other
way round) even though both share a key, and a random `jti` so two tokens
minted for the same claims within the same second still differ.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Any, cast

from jose import ExpiredSignatureError, JWTError, jwt

from school_auth.application.interfaces.services import TokenExpiredError
from school_auth.core.config import Settings, get_settings
from school_auth.domain.enums import TokenType
from school_auth.shared.utils.datetime import to_epoch_micros, utc_now


class TokenCodec:
    """Sign and verify compact, expiring, tamper-evident tokens.

    Session claims (access and refresh) are `{id, roleId, roleName,
    permissions}`. Reset claims are `{userId, type: "reset-password", pwdChangedAt}`.
    Verification failures raise ValueError; callers map that to 401.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        *,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        reset_ttl: timedelta = timedelta(minutes=10),
    ) -> None:
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh signing secrets are required")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.reset_ttl = reset_ttl

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> TokenCodec:
        """Build a codec from application settings."""
        settings = settings or get_settings()
        return cls(
            settings.jwt_access_secret.get_secret_value(),
            settings.jwt_refresh_secret.get_secret_value(),
            algorithm=settings.jwt_algorithm,
            access_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
            reset_ttl=timedelta(minutes=settings.reset_token_expire_minutes),
        )

    def sign(self, claims: dict[str, Any], secret: str, ttl: timedelta) -> str:
        """Encode claims with iat, exp and a random jti; return the JWT string."""
        now = utc_now()
        to_encode = claims.copy()
        to_encode["iat"] = now
        to_encode["exp"] = now + ttl
        to_encode.setdefault("jti", uuid.uuid4().hex)
        encoded = jwt.encode(to_encode, secret, algorithm=self._algorithm)
        return cast(str, encoded)

    def verify(self, token: str, secret: str) -> dict[str, Any]:
        """Decode and verify a JWT. Returns the payload.

        Raises:
            TokenExpiredError: If the signature is valid but the token expired.
            ValueError: If the token is malformed or tampered with.
        """
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={"require_exp": True},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except JWTError as e:
            raise ValueError(f"Invalid token: {e!s}") from e
        if not isinstance(payload, dict):
            raise ValueError("Invalid token: payload is not an object")
        return payload

    # Session tokens

    def create_access_token(self, claims: dict[str, Any]) -> str:
        """Sign session claims with the access key (short expiry)."""
        return self.sign(
            {**claims, "type": TokenType.ACCESS.value},
            self._access_secret,
            self.access_ttl,
        )

    def create_refresh_token(self, claims: dict[str, Any]) -> str:
        """Sign session claims with the refresh key (long expiry)."""
        return self.sign(
            {**claims, "type": TokenType.REFRESH.value},
            self._refresh_secret,
            self.refresh_ttl,
        )

    def verify_access_token(self, token: str) -> dict[str, Any]:
        """Verify an access token; reject other token kinds and payloads without id."""
        payload = self.verify(token, self._access_secret)
        if payload.get("type") != TokenType.ACCESS.value:
            raise ValueError("Invalid token: not an access token")
        if not payload.get("id"):
            raise ValueError("Token missing required claim: id")
        return payload

    def verify_refresh_token(self, token: str) -> dict[str, Any]:
        """Verify a refresh token against the refresh key."""
        payload = self.verify(token, self._refresh_secret)
        if payload.get("type") != TokenType.REFRESH.value:
            raise ValueError("Invalid token: not a refresh token")
        if not payload.get("id"):
            raise ValueError("Token missing required claim: id")
        return payload

    # Reset tokens

    def create_reset_token(
        self, user_id: str, password_changed_at: datetime | None = None
    ) -> str:
        """Sign a single-purpose password-reset capability with the access key.

        pwdChangedAt pins the token to the current password so it stops
        working once the password has been changed.
        """
        return self.sign(
            {
                "userId": user_id,
                "type": TokenType.RESET_PASSWORD.value,
                "pwdChangedAt": to_epoch_micros(password_changed_at),
            },
            self._access_secret,
            self.reset_ttl,
        )

    def verify_reset_token(self, token: str) -> dict[str, Any]:
        """Verify signature and expiry of a reset token (type is checked by the caller)."""
        return self.verify(token, self._access_secret)
