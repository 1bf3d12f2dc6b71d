"""Password hashing (bcrypt over a SHA-256 pre-hash).

Bcrypt truncates inputs at 72 bytes; the SHA-256 pre-hash gives a fixed-length
input so long passwords are not silently truncated. Hashing is deliberately
slow: async callers run these functions through asyncio.to_thread.
"""

import base64
import hashlib

import bcrypt

DEFAULT_ROUNDS = 12


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def get_password_hash(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a salted bcrypt hash of password."""
    hashed = bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if plain_password matches hashed_password; False on malformed hashes."""
    try:
        return bool(
            bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8"))
        )
    except (ValueError, TypeError):
        return False


class BcryptPasswordHasher:
    """Password hasher bound to a bcrypt cost factor (injected into services)."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        return get_password_hash(password, self.rounds)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return verify_password(plain_password, hashed_password)
