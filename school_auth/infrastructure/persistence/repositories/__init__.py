"""SQLAlchemy repositories implementing the application ports."""

from school_auth.infrastructure.persistence.repositories.otp_repo import OtpRepository
from school_auth.infrastructure.persistence.repositories.refresh_token_repo import (
    RefreshTokenRepository,
)
from school_auth.infrastructure.persistence.repositories.role_repo import RoleRepository
from school_auth.infrastructure.persistence.repositories.unit_of_work import (
    SqlAlchemyUnitOfWork,
)
from school_auth.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "OtpRepository",
    "RefreshTokenRepository",
    "RoleRepository",
    "SqlAlchemyUnitOfWork",
    "UserRepository",
]
