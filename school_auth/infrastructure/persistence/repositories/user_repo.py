"""User repository. Interface methods return application DTOs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_auth.application.dtos.user import UserCreate, UserResult
from school_auth.domain.exceptions import (
    ResourceNotFoundException,
    UserAlreadyExistsException,
)
from school_auth.infrastructure.persistence.models.user import User
from school_auth.infrastructure.persistence.repositories.base import BaseRepository
from school_auth.shared.utils.datetime import ensure_utc


def _user_to_result(u: User) -> UserResult:
    """Map ORM User to application UserResult."""
    return UserResult(
        id=u.id,
        username=u.username,
        phone=u.phone,
        email=u.email,
        school_id=u.school_id,
        role_id=u.role_id,
        is_active=u.is_active,
        is_phone_verified=u.is_phone_verified,
        is_email_verified=u.is_email_verified,
        password_hash=u.password_hash,
        password_changed_at=ensure_utc(u.password_changed_at),
        phone_verified_at=ensure_utc(u.phone_verified_at),
        last_login_at=ensure_utc(u.last_login_at),
        created_at=ensure_utc(u.created_at),
    )


class UserRepository(BaseRepository[User]):
    """User repository: lookups by username/school, creation and account updates."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_by_id(self, user_id: str) -> UserResult | None:
        user = await self._get(user_id)
        return _user_to_result(user) if user else None

    async def get_by_username(self, username: str) -> UserResult | None:
        result = await self.db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        return _user_to_result(user) if user else None

    async def get_by_username_and_school(
        self, username: str, school_id: str
    ) -> UserResult | None:
        result = await self.db.execute(
            select(User).where(User.username == username, User.school_id == school_id)
        )
        user = result.scalar_one_or_none()
        return _user_to_result(user) if user else None

    async def get_by_phone(self, phone: str) -> UserResult | None:
        result = await self.db.execute(select(User).where(User.phone == phone))
        user = result.scalar_one_or_none()
        return _user_to_result(user) if user else None

    async def create_user(self, data: UserCreate) -> UserResult:
        """Create user; raise UserAlreadyExistsException on unique constraint violation."""
        user = User(
            username=data.username,
            phone=data.phone,
            email=data.email,
            password_hash=data.password_hash,
            role_id=data.role_id,
            school_id=data.school_id,
            is_active=True,
            is_phone_verified=data.phone_verified_at is not None,
            phone_verified_at=data.phone_verified_at,
            is_email_verified=False,
        )
        try:
            created = await self._add(user)
        except IntegrityError as e:
            raise UserAlreadyExistsException() from e
        return _user_to_result(created)

    async def mark_phone_verified(self, user_id: str, verified_at: datetime) -> None:
        user = await self._require(user_id)
        user.is_phone_verified = True
        user.phone_verified_at = verified_at
        await self.db.flush()

    async def update_password(
        self, user_id: str, password_hash: str, changed_at: datetime
    ) -> None:
        user = await self._require(user_id)
        user.password_hash = password_hash
        user.password_changed_at = changed_at
        await self.db.flush()

    async def record_login(self, user_id: str, logged_in_at: datetime) -> None:
        user = await self._require(user_id)
        user.last_login_at = logged_in_at
        await self.db.flush()

    async def assign_school(self, user_id: str, school_id: str) -> UserResult | None:
        user = await self._get(user_id)
        if user is None:
            return None
        user.school_id = school_id
        await self.db.flush()
        await self.db.refresh(user)
        return _user_to_result(user)

    async def _require(self, user_id: str) -> User:
        user = await self._get(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        return user
