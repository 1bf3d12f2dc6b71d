"""Permission evaluation against the permission snapshot carried in access tokens."""

from __future__ import annotations

from collections.abc import Iterable

from school_auth.domain.exceptions import AuthorizationException


def has_permission(required: str, permissions: Iterable[str] | None) -> bool:
    """Return True if required is one of permissions.

    Exact string match only: no wildcard and no hierarchy. An empty or missing
    permission set grants nothing.
    """
    if not required or not permissions:
        return False
    return required in set(permissions)


def require_permission(required: str, permissions: Iterable[str] | None) -> None:
    """Raise AuthorizationException if required is not granted."""
    if not has_permission(required, permissions):
        raise AuthorizationException(permission=required)
