"""Security: JWT codec and password hashing."""

from school_auth.infrastructure.security.jwt import TokenCodec, TokenExpiredError
from school_auth.infrastructure.security.password import (
    BcryptPasswordHasher,
    get_password_hash,
    verify_password,
)

__all__ = [
    "BcryptPasswordHasher",
    "TokenCodec",
    "TokenExpiredError",
    "get_password_hash",
    "verify_password",
]
