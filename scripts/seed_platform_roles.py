"""Seed the platform roles (and optionally a verified platform admin) for local development.

Usage:
    python -m scripts.seed_platform_roles [<admin_username> <admin_phone> <admin_password>]

Creates the platform-scoped DEFAULT role (assigned at registration, no
platform login) and PLATFORM_ADMIN. Existing roles keep their id; their
permission list is replaced with the one defined here.
"""

import asyncio
import sys

from school_auth.application.dtos.user import UserCreate
from school_auth.core.config import get_settings
from school_auth.domain.exceptions import SqlNotConfiguredException, UserAlreadyExistsException
from school_auth.domain.permissions import Permissions
from school_auth.infrastructure.persistence.database import get_session_factory
from school_auth.infrastructure.persistence.repositories import RoleRepository, UserRepository
from school_auth.infrastructure.security.password import get_password_hash
from school_auth.shared.utils.datetime import utc_now

PLATFORM_ADMIN_ROLE = "PLATFORM_ADMIN"

PLATFORM_ROLES: dict[str, tuple[str, list[str]]] = {
    PLATFORM_ADMIN_ROLE: (
        "Platform administrator",
        [
            Permissions.PLATFORM_LOGIN,
            Permissions.PLATFORM_SCHOOL_ASSIGN,
            Permissions.SCHOOL_CREATE,
            Permissions.SCHOOL_SEED_ROLES,
        ],
    ),
}


async def main() -> None:
    args = sys.argv[1:]
    if args and len(args) != 3:
        print(
            "Usage: python -m scripts.seed_platform_roles "
            "[<admin_username> <admin_phone> <admin_password>]",
            file=sys.stderr,
        )
        sys.exit(1)

    settings = get_settings()
    roles = {settings.default_role_name: ("Default role for self-registered accounts", [])}
    roles.update(PLATFORM_ROLES)

    try:
        session_factory = get_session_factory()
    except SqlNotConfiguredException:
        print("DATABASE_URL is not configured", file=sys.stderr)
        sys.exit(1)

    async with session_factory() as session:
        async with session.begin():
            role_repo = RoleRepository(session)
            for name, (description, permissions) in roles.items():
                existing = await role_repo.get_by_name(name)
                if existing is not None:
                    if set(existing.permissions) != set(permissions):
                        await role_repo.set_permissions(existing.id, permissions)
                        print(f"Updated permissions of role {name}")
                    else:
                        print(f"Role exists: {name}")
                    continue
                role = await role_repo.create_role(
                    name, permissions, description=description
                )
                print(f"Created role {role.name} ({role.id})")

            if args:
                username, phone, password = args
                admin_role = await role_repo.get_by_name(PLATFORM_ADMIN_ROLE)
                assert admin_role is not None
                user_repo = UserRepository(session)
                password_hash = await asyncio.to_thread(
                    get_password_hash, password, settings.bcrypt_rounds
                )
                try:
                    user = await user_repo.create_user(
                        UserCreate(
                            username=username,
                            phone=phone,
                            password_hash=password_hash,
                            role_id=admin_role.id,
                        )
                    )
                except UserAlreadyExistsException:
                    print(f"User already exists: {username}", file=sys.stderr)
                    sys.exit(1)
                await user_repo.mark_phone_verified(user.id, utc_now())
                print(f"Created platform admin {user.username} ({user.id})")


if __name__ == "__main__":
    asyncio.run(main())
