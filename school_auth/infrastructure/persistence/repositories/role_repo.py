"""Role repository (read-only from the session lifecycle; create is for seeding)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_auth.application.dtos.role import RoleResult
from school_auth.infrastructure.persistence.models.role import Role
from school_auth.infrastructure.persistence.repositories.base import BaseRepository


def _role_to_result(r: Role) -> RoleResult:
    return RoleResult(
        id=r.id,
        name=r.name,
        description=r.description,
        permissions=tuple(r.permissions or ()),
        school_id=r.school_id,
    )


class RoleRepository(BaseRepository[Role]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Role)

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        role = await self._get(role_id)
        return _role_to_result(role) if role else None

    async def get_by_name(self, name: str, school_id: str | None = None) -> RoleResult | None:
        scope = Role.school_id.is_(None) if school_id is None else Role.school_id == school_id
        result = await self.db.execute(select(Role).where(Role.name == name, scope))
        role = result.scalar_one_or_none()
        return _role_to_result(role) if role else None

    async def create_role(
        self,
        name: str,
        permissions: list[str],
        *,
        description: str | None = None,
        school_id: str | None = None,
    ) -> RoleResult:
        role = Role(
            name=name,
            description=description,
            permissions=sorted(set(permissions)),
            school_id=school_id,
        )
        return _role_to_result(await self._add(role))

    async def set_permissions(self, role_id: str, permissions: list[str]) -> RoleResult | None:
        """Replace a role's permission list. Takes effect for users on next login/refresh."""
        role = await self._get(role_id)
        if role is None:
            return None
        role.permissions = sorted(set(permissions))
        await self.db.flush()
        return _role_to_result(role)
