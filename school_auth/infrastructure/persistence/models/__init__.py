"""ORM models. Importing this package registers every table on Base.metadata."""

from school_auth.infrastructure.persistence.models.otp import Otp
from school_auth.infrastructure.persistence.models.refresh_token import RefreshToken
from school_auth.infrastructure.persistence.models.role import Role
from school_auth.infrastructure.persistence.models.user import User

__all__ = ["Otp", "RefreshToken", "Role", "User"]
