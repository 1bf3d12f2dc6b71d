"""Domain exceptions for the school auth service.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class SchoolAuthException(Exception):
    """Base exception for all school auth errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the error part of the response envelope."""
        error: dict[str, Any] = {"message": self.message, "code": self.error_code}
        if self.details:
            error["details"] = self.details
        return error


class ValidationException(SchoolAuthException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidContextException(SchoolAuthException):
    """Raised when the request context (platform/school) does not allow the operation."""

    def __init__(self, message: str = "Invalid request context") -> None:
        super().__init__(message, "INVALID_CONTEXT")


class AuthenticationException(SchoolAuthException):
    """Raised when authentication fails (e.g. invalid credentials or token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        """Initialize with optional message.

        Args:
            message: Description of the authentication failure.
        """
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(SchoolAuthException):
    """Raised when the caller is not allowed to perform the operation.

    Covers missing permissions, inactive or unverified accounts and tenant
    (school) mismatches.
    """

    def __init__(
        self,
        message: str = "Permission denied",
        permission: str | None = None,
    ) -> None:
        """Initialize with message and optional missing permission.

        Args:
            message: Human-readable message.
            permission: Optional permission string the caller lacks.
        """
        details = {"permission": permission} if permission else {}
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(SchoolAuthException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str | None = None) -> None:
        """Initialize with resource type and optional id.

        Args:
            resource_type: Type of resource (e.g. 'user', 'role').
            resource_id: The ID that was not found; omitted from the message when None.
        """
        message = f"{resource_type.capitalize()} not found"
        details: dict[str, Any] = {"resource_type": resource_type}
        if resource_id is not None:
            details["resource_id"] = resource_id
        super().__init__(message, "RESOURCE_NOT_FOUND", details)


class UserAlreadyExistsException(SchoolAuthException):
    """Raised when registering a username or phone that is already taken."""

    def __init__(self, message: str = "User already exists") -> None:
        super().__init__(message, "USER_ALREADY_EXISTS", {})


class AlreadyVerifiedException(SchoolAuthException):
    """Raised when registration verification is requested for a verified account."""

    def __init__(self) -> None:
        super().__init__("User already verified", "ALREADY_VERIFIED", {})


class InvalidOrExpiredOtpException(SchoolAuthException):
    """Raised when an OTP does not verify.

    Wrong code, expired code and already-used code all map to this one
    error so callers cannot tell them apart.
    """

    def __init__(self) -> None:
        super().__init__("Invalid or expired OTP", "INVALID_OR_EXPIRED_OTP", {})


class DataIntegrityException(SchoolAuthException):
    """Raised when stored data violates an invariant (e.g. user without a resolvable role)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "DATA_INTEGRITY_ERROR", details)


class ServiceUnavailableException(SchoolAuthException):
    """Raised when a downstream dependency is unavailable."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(message, "SERVICE_UNAVAILABLE")


class OtpDeliveryException(ServiceUnavailableException):
    """Raised when an OTP was stored but could not be delivered (client should resend)."""

    def __init__(self, reason: str | None = None) -> None:
        super().__init__("Failed to deliver OTP; please request a new code")
        if reason:
            self.details = {"reason": reason}


class SqlNotConfiguredException(ServiceUnavailableException):
    """Raised when an operation requires the database but DATABASE_URL is not configured."""

    def __init__(self) -> None:
        super().__init__("This operation requires a SQL database that is not configured.")
