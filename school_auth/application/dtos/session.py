"""DTOs for session lifecycle use cases (request context and results)."""

from dataclasses import dataclass, field

from school_auth.domain.enums import ContextType


@dataclass(frozen=True)
class RequestContext:
    """Tenancy context supplied per request by the upstream gateway.

    school_id is None in platform context. subdomain is informational and
    only used for the username@subdomain lookup fallback.
    """

    context: ContextType
    school_id: str | None = None
    subdomain: str | None = None

    @property
    def is_platform(self) -> bool:
        return self.context == ContextType.PLATFORM

    @property
    def is_school(self) -> bool:
        return self.context == ContextType.SCHOOL

    @classmethod
    def platform(cls) -> "RequestContext":
        return cls(context=ContextType.PLATFORM)

    @classmethod
    def school(cls, school_id: str, subdomain: str | None = None) -> "RequestContext":
        return cls(context=ContextType.SCHOOL, school_id=school_id, subdomain=subdomain)


@dataclass(frozen=True)
class ClientInfo:
    """Client metadata recorded on refresh sessions."""

    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class SessionUser:
    id: str
    username: str
    role_id: str
    role_name: str


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    refresh_token: str = field(repr=False)
    user: SessionUser


@dataclass(frozen=True)
class RefreshResult:
    access_token: str
    refresh_token: str = field(repr=False)
    token_rotated: bool = True


@dataclass(frozen=True)
class RegistrationResult:
    """Registration accepted; the account stays unverified until the OTP is confirmed."""

    user_id: str
    masked_phone: str


@dataclass(frozen=True)
class OtpDispatchResult:
    """An OTP was issued and handed to the delivery channel."""

    masked_phone: str


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated principal resolved from a verified access token.

    role_name and permissions are the snapshot taken when the token was
    minted, not the live role.
    """

    id: str
    role_id: str
    role_name: str
    permissions: tuple[str, ...]
