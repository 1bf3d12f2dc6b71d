"""DTOs for role use cases (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RoleResult:
    """Role read-model. school_id is None for platform roles."""

    id: str
    name: str
    description: str | None
    permissions: tuple[str, ...]
    school_id: str | None
