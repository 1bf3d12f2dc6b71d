"""Application DTOs (no ORM dependency)."""

from school_auth.application.dtos.role import RoleResult
from school_auth.application.dtos.session import (
    ClientInfo,
    CurrentUser,
    LoginResult,
    OtpDispatchResult,
    RefreshResult,
    RegistrationResult,
    RequestContext,
    SessionUser,
)
from school_auth.application.dtos.token import (
    OtpResult,
    RefreshTokenCreate,
    RefreshTokenResult,
)
from school_auth.application.dtos.user import UserCreate, UserResult

__all__ = [
    "ClientInfo",
    "CurrentUser",
    "LoginResult",
    "OtpDispatchResult",
    "OtpResult",
    "RefreshResult",
    "RefreshTokenCreate",
    "RefreshTokenResult",
    "RegistrationResult",
    "RequestContext",
    "RoleResult",
    "SessionUser",
    "UserCreate",
    "UserResult",
]
