"""Domain enumerations for the school auth service.

Enums represent fixed sets of domain values (request context, OTP purpose,
client device type).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ContextType(_ValuesMixin, str, Enum):
    """Tenant scope of a request: the whole platform or one school."""

    PLATFORM = "platform"
    SCHOOL = "school"


class OtpPurpose(_ValuesMixin, str, Enum):
    """What a one-time code was issued for. Codes only verify for their own purpose."""

    REGISTRATION = "registration"
    PASSWORD_RESET = "password_reset"


class DeviceType(_ValuesMixin, str, Enum):
    """Client device class derived from the User-Agent (best effort)."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"
    UNKNOWN = "unknown"


class TokenType(_ValuesMixin, str, Enum):
    """Discriminator carried in the `type` claim of signed tokens."""

    ACCESS = "access"
    REFRESH = "refresh"
    RESET_PASSWORD = "reset-password"


class SchoolRole(_ValuesMixin, str, Enum):
    """School-scoped role names that provisioned accounts are created under."""

    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
