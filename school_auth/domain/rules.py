"""Input rules for account fields, shared by request schemas and services."""

import re

from school_auth.domain.exceptions import ValidationException

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6
PHONE_PATTERN = r"^\d{10,15}$"

_PHONE_RE = re.compile(PHONE_PATTERN)


def validate_username(username: str) -> None:
    if not username or not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationException(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters",
            field="username",
        )


def validate_phone(phone: str) -> None:
    if not phone or not _PHONE_RE.fullmatch(phone):
        raise ValidationException("Phone must be 10-15 digits", field="phone")


def validate_password(password: str, field: str = "password") -> None:
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationException(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters", field=field
        )
