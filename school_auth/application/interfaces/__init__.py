"""Application ports (Protocols implemented by infrastructure)."""

from school_auth.application.interfaces.repositories import (
    IOtpRepository,
    IRefreshTokenRepository,
    IRoleRepository,
    IUnitOfWork,
    IUserRepository,
)
from school_auth.application.interfaces.services import (
    IOtpSender,
    IPasswordHasher,
    ITokenCodec,
    TokenExpiredError,
)

__all__ = [
    "IOtpRepository",
    "IOtpSender",
    "IPasswordHasher",
    "IRefreshTokenRepository",
    "IRoleRepository",
    "ITokenCodec",
    "IUnitOfWork",
    "IUserRepository",
    "TokenExpiredError",
]
