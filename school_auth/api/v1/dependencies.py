"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the request context, the authenticated
principal and the session lifecycle service. Use cases are built from
infrastructure implementations here; routes depend only on these
dependencies, not on infrastructure directly.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from school_auth.application.dtos.session import ClientInfo, CurrentUser, RequestContext
from school_auth.application.interfaces.services import (
    IOtpSender,
    IPasswordHasher,
    ITokenCodec,
)
from school_auth.application.services.authorization_service import (
    require_permission as check_permission,
)
from school_auth.application.services.otp_service import OtpService
from school_auth.application.services.session_service import SessionService
from school_auth.core.config import Settings, get_settings
from school_auth.domain.enums import ContextType
from school_auth.domain.exceptions import AuthenticationException, InvalidContextException
from school_auth.infrastructure.external.otp import create_otp_sender
from school_auth.infrastructure.persistence.database import get_db_transactional
from school_auth.infrastructure.persistence.repositories import (
    OtpRepository,
    RefreshTokenRepository,
    RoleRepository,
    SqlAlchemyUnitOfWork,
    UserRepository,
)
from school_auth.infrastructure.security import BcryptPasswordHasher, TokenCodec

_http_bearer = HTTPBearer(auto_error=False)


def get_token_codec(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ITokenCodec:
    """JWT codec with the configured access/refresh keys (composition root)."""
    return TokenCodec.from_settings(settings)


def get_password_hasher(
    settings: Annotated[Settings, Depends(get_settings)],
) -> IPasswordHasher:
    """Bcrypt hasher with the configured cost factor (composition root)."""
    return BcryptPasswordHasher(settings.bcrypt_rounds)


def get_otp_sender(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> IOtpSender:
    """OTP delivery channel from settings, using the shared HTTP client."""
    http_client = getattr(request.app.state, "http_client", None)
    return create_otp_sender(settings, http_client=http_client)


async def get_session_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    settings: Annotated[Settings, Depends(get_settings)],
    token_codec: Annotated[ITokenCodec, Depends(get_token_codec)],
    password_hasher: Annotated[IPasswordHasher, Depends(get_password_hasher)],
    otp_sender: Annotated[IOtpSender, Depends(get_otp_sender)],
) -> SessionService:
    """Session lifecycle service over one transactional session (composition root)."""
    uow = SqlAlchemyUnitOfWork(db)
    otp_service = OtpService(
        OtpRepository(db),
        otp_sender,
        uow,
        code_length=settings.otp_length,
        ttl=timedelta(minutes=settings.otp_expire_minutes),
        delivery_timeout=settings.otp_delivery_timeout_seconds,
    )
    return SessionService(
        user_repo=UserRepository(db),
        role_repo=RoleRepository(db),
        refresh_token_repo=RefreshTokenRepository(db),
        otp_service=otp_service,
        token_codec=token_codec,
        password_hasher=password_hasher,
        uow=uow,
        default_role_name=settings.default_role_name,
        revoke_sessions_on_password_reset=settings.revoke_sessions_on_password_reset,
    )


def get_request_context(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> RequestContext:
    """Build the tenancy context from gateway headers.

    Raises InvalidContextException (400) when the context header is missing
    or unknown, or when school context has no school id.
    """
    raw = (request.headers.get(settings.context_header_name) or "").strip().lower()
    if not raw:
        raise InvalidContextException(f"Missing {settings.context_header_name} header")
    try:
        context = ContextType(raw)
    except ValueError:
        raise InvalidContextException(
            f"{settings.context_header_name} must be one of {ContextType.values()}"
        ) from None
    if context == ContextType.PLATFORM:
        return RequestContext.platform()
    school_id = (request.headers.get(settings.school_id_header_name) or "").strip()
    if not school_id:
        raise InvalidContextException(
            f"School context requires the {settings.school_id_header_name} header"
        )
    subdomain = (request.headers.get(settings.school_subdomain_header_name) or "").strip()
    return RequestContext.school(school_id, subdomain or None)


def get_client_info(request: Request) -> ClientInfo:
    """Client ip (first X-Forwarded-For hop, else peer address) and user agent."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip() or None
    else:
        ip = request.client.host if request.client else None
    return ClientInfo(ip_address=ip, user_agent=request.headers.get("user-agent"))


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    token_codec: Annotated[ITokenCodec, Depends(get_token_codec)],
) -> CurrentUser:
    """Return the principal from a valid access token; raise 401 otherwise.

    Permissions are the snapshot embedded at mint time; no store lookup.
    """
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        payload = token_codec.verify_access_token(credentials.credentials)
    except ValueError:
        raise AuthenticationException("Invalid or expired access token") from None
    return CurrentUser(
        id=payload["id"],
        role_id=payload.get("roleId", ""),
        role_name=payload.get("roleName", ""),
        permissions=tuple(payload.get("permissions") or ()),
    )


def require_permission(permission: str):
    """Dependency factory: require a valid access token carrying permission."""

    async def _require(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        check_permission(permission, current_user.permissions)
        return current_user

    return _require
