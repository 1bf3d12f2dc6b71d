"""Domain layer: enums, permission identifiers, input rules, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from school_auth.domain.enums import (
    ContextType,
    DeviceType,
    OtpPurpose,
    SchoolRole,
    TokenType,
)
from school_auth.domain.exceptions import (
    AlreadyVerifiedException,
    AuthenticationException,
    AuthorizationException,
    DataIntegrityException,
    InvalidContextException,
    InvalidOrExpiredOtpException,
    OtpDeliveryException,
    ResourceNotFoundException,
    SchoolAuthException,
    ServiceUnavailableException,
    SqlNotConfiguredException,
    UserAlreadyExistsException,
    ValidationException,
)
from school_auth.domain.permissions import Permissions

__all__ = [
    # Enums
    "ContextType",
    "DeviceType",
    "OtpPurpose",
    "SchoolRole",
    "TokenType",
    # Exceptions
    "AlreadyVerifiedException",
    "AuthenticationException",
    "AuthorizationException",
    "DataIntegrityException",
    "InvalidContextException",
    "InvalidOrExpiredOtpException",
    "OtpDeliveryException",
    "ResourceNotFoundException",
    "SchoolAuthException",
    "ServiceUnavailableException",
    "SqlNotConfiguredException",
    "UserAlreadyExistsException",
    "ValidationException",
    # Permissions
    "Permissions",
]
