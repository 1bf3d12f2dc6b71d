"""ID and value generators (CUID primary keys, numeric one-time codes)."""

import secrets

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_otp(length: int = 6) -> str:
    """Return a zero-padded numeric code of the given length from a CSPRNG."""
    if length < 1:
        raise ValueError("length must be positive")
    return str(secrets.randbelow(10**length)).zfill(length)
