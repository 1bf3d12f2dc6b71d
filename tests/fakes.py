"""In-memory implementations of the repository and service ports for tests.

The fakes follow the same conditional-update semantics as the SQL
repositories (rotate, consume) so service tests exercise the real rules
without a database.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime

from school_auth.application.dtos.role import RoleResult
from school_auth.application.dtos.token import (
    OtpResult,
    RefreshTokenCreate,
    RefreshTokenResult,
)
from school_auth.application.dtos.user import UserCreate, UserResult
from school_auth.domain.enums import OtpPurpose
from school_auth.domain.exceptions import (
    OtpDeliveryException,
    ResourceNotFoundException,
    UserAlreadyExistsException,
)
from school_auth.shared.utils.datetime import utc_now
from school_auth.shared.utils.generators import generate_cuid


class FakeUnitOfWork:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class FakeUserRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_by_id(self, user_id: str) -> UserResult | None:
        return self._store.users.get(user_id)

    async def get_by_username(self, username: str) -> UserResult | None:
        return next(
            (u for u in self._store.users.values() if u.username == username), None
        )

    async def get_by_username_and_school(
        self, username: str, school_id: str
    ) -> UserResult | None:
        user = await self.get_by_username(username)
        if user is None or user.school_id != school_id:
            return None
        return user

    async def get_by_phone(self, phone: str) -> UserResult | None:
        return next((u for u in self._store.users.values() if u.phone == phone), None)

    async def create_user(self, data: UserCreate) -> UserResult:
        for u in self._store.users.values():
            if u.username == data.username or u.phone == data.phone:
                raise UserAlreadyExistsException()
        user = UserResult(
            id=generate_cuid(),
            username=data.username,
            phone=data.phone,
            email=data.email,
            school_id=data.school_id,
            role_id=data.role_id,
            is_active=True,
            is_phone_verified=data.phone_verified_at is not None,
            is_email_verified=False,
            password_hash=data.password_hash,
            phone_verified_at=data.phone_verified_at,
            created_at=utc_now(),
        )
        self._store.users[user.id] = user
        return user

    def _require(self, user_id: str) -> UserResult:
        user = self._store.users.get(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        return user

    async def mark_phone_verified(self, user_id: str, verified_at: datetime) -> None:
        user = self._require(user_id)
        self._store.users[user_id] = replace(
            user, is_phone_verified=True, phone_verified_at=verified_at
        )

    async def update_password(
        self, user_id: str, password_hash: str, changed_at: datetime
    ) -> None:
        user = self._require(user_id)
        self._store.users[user_id] = replace(
            user, password_hash=password_hash, password_changed_at=changed_at
        )

    async def record_login(self, user_id: str, logged_in_at: datetime) -> None:
        user = self._require(user_id)
        self._store.users[user_id] = replace(user, last_login_at=logged_in_at)

    async def assign_school(self, user_id: str, school_id: str) -> UserResult | None:
        user = self._store.users.get(user_id)
        if user is None:
            return None
        updated = replace(user, school_id=school_id)
        self._store.users[user_id] = updated
        return updated


class FakeRoleRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        return self._store.roles.get(role_id)

    async def get_by_name(self, name: str, school_id: str | None = None) -> RoleResult | None:
        return next(
            (
                r
                for r in self._store.roles.values()
                if r.name == name and r.school_id == school_id
            ),
            None,
        )


class FakeRefreshTokenRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def create(self, data: RefreshTokenCreate) -> RefreshTokenResult:
        row = RefreshTokenResult(
            id=generate_cuid(),
            token=data.token,
            user_id=data.user_id,
            expires_at=data.expires_at,
            ip_address=data.ip_address,
            user_agent=data.user_agent,
            device_type=data.device_type,
            is_revoked=False,
            last_used_at=data.last_used_at,
            created_at=utc_now(),
        )
        self._store.refresh_tokens[row.id] = row
        return row

    async def get_by_token(self, token: str) -> RefreshTokenResult | None:
        return next(
            (r for r in self._store.refresh_tokens.values() if r.token == token), None
        )

    async def rotate(
        self,
        old_token: str,
        user_id: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        row = await self.get_by_token(old_token)
        if (
            row is None
            or row.user_id != user_id
            or row.is_revoked
            or row.expires_at <= now
        ):
            return False
        self._store.refresh_tokens[row.id] = replace(
            row, token=new_token, expires_at=new_expires_at, last_used_at=now
        )
        return True

    async def delete_by_token(self, token: str, user_id: str | None = None) -> bool:
        row = await self.get_by_token(token)
        if row is None or (user_id is not None and row.user_id != user_id):
            return False
        del self._store.refresh_tokens[row.id]
        return True

    async def delete_expired_or_revoked(self, user_id: str, now: datetime) -> int:
        stale = [
            r.id
            for r in self._store.refresh_tokens.values()
            if r.user_id == user_id and (r.is_revoked or r.expires_at < now)
        ]
        for row_id in stale:
            del self._store.refresh_tokens[row_id]
        return len(stale)

    async def delete_all_for_user(self, user_id: str) -> int:
        rows = [r.id for r in self._store.refresh_tokens.values() if r.user_id == user_id]
        for row_id in rows:
            del self._store.refresh_tokens[row_id]
        return len(rows)


class FakeOtpRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def create(
        self,
        user_id: str,
        code: str,
        purpose: OtpPurpose,
        school_id: str | None,
        expires_at: datetime,
    ) -> OtpResult:
        otp = OtpResult(
            id=generate_cuid(),
            user_id=user_id,
            code=code,
            purpose=purpose,
            school_id=school_id,
            expires_at=expires_at,
            is_used=False,
        )
        self._store.otps.append(otp)
        return otp

    def _matching(self, user_id: str, purpose: OtpPurpose, school_id: str | None):
        for i, otp in enumerate(self._store.otps):
            if (
                otp.user_id == user_id
                and otp.purpose == purpose
                and otp.school_id == school_id
                and not otp.is_used
            ):
                yield i, otp

    async def consume(
        self,
        user_id: str,
        code: str,
        purpose: OtpPurpose,
        school_id: str | None,
        now: datetime,
    ) -> bool:
        consumed = False
        for i, otp in list(self._matching(user_id, purpose, school_id)):
            if otp.code == code and otp.expires_at > now:
                self._store.otps[i] = replace(otp, is_used=True)
                consumed = True
        return consumed

    async def invalidate_active(
        self, user_id: str, purpose: OtpPurpose, school_id: str | None
    ) -> int:
        matched = list(self._matching(user_id, purpose, school_id))
        for i, otp in matched:
            self._store.otps[i] = replace(otp, is_used=True)
        return len(matched)


class InMemoryStore:
    """Tables plus the fake repositories and unit of work that share them."""

    def __init__(self) -> None:
        self.users: dict[str, UserResult] = {}
        self.roles: dict[str, RoleResult] = {}
        self.refresh_tokens: dict[str, RefreshTokenResult] = {}
        self.otps: list[OtpResult] = []
        self.user_repo = FakeUserRepository(self)
        self.role_repo = FakeRoleRepository(self)
        self.refresh_token_repo = FakeRefreshTokenRepository(self)
        self.otp_repo = FakeOtpRepository(self)
        self.uow = FakeUnitOfWork()

    def add_role(
        self,
        name: str,
        permissions: list[str],
        *,
        school_id: str | None = None,
        role_id: str | None = None,
    ) -> RoleResult:
        role = RoleResult(
            id=role_id or generate_cuid(),
            name=name,
            description=None,
            permissions=tuple(permissions),
            school_id=school_id,
        )
        self.roles[role.id] = role
        return role

    def add_user(
        self,
        username: str,
        password_hash: str,
        *,
        role_id: str = "role-default",
        phone: str = "9876543210",
        email: str | None = None,
        school_id: str | None = None,
        is_active: bool = True,
        is_phone_verified: bool = True,
    ) -> UserResult:
        user = UserResult(
            id=generate_cuid(),
            username=username,
            phone=phone,
            email=email,
            school_id=school_id,
            role_id=role_id,
            is_active=is_active,
            is_phone_verified=is_phone_verified,
            is_email_verified=False,
            password_hash=password_hash,
            created_at=utc_now(),
        )
        self.users[user.id] = user
        return user

    def otps_for(self, user_id: str, purpose: OtpPurpose | None = None) -> list[OtpResult]:
        return [
            o
            for o in self.otps
            if o.user_id == user_id and (purpose is None or o.purpose == purpose)
        ]

    def sessions_for(self, user_id: str) -> list[RefreshTokenResult]:
        return [r for r in self.refresh_tokens.values() if r.user_id == user_id]


@dataclass
class SentOtp:
    phone: str
    code: str
    purpose: OtpPurpose
    email: str | None = None


@dataclass
class RecordingOtpSender:
    """Collects delivered codes; can be told to fail or stall."""

    sent: list[SentOtp] = field(default_factory=list)
    fail: bool = False
    delay: float = 0.0

    async def send_otp(
        self, phone: str, code: str, purpose: OtpPurpose, *, email: str | None = None
    ) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise OtpDeliveryException("gateway rejected the message")
        self.sent.append(SentOtp(phone=phone, code=code, purpose=purpose, email=email))

    @property
    def last_code(self) -> str:
        return self.sent[-1].code
