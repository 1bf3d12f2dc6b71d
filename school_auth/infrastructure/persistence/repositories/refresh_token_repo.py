"""Refresh token repository: session rows keyed by the literal token string."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from school_auth.application.dtos.token import RefreshTokenCreate, RefreshTokenResult
from school_auth.domain.enums import DeviceType
from school_auth.infrastructure.persistence.models.refresh_token import RefreshToken
from school_auth.infrastructure.persistence.repositories.base import BaseRepository
from school_auth.shared.utils.datetime import ensure_utc


def _device_type(value: str | None) -> DeviceType:
    try:
        return DeviceType(value)
    except ValueError:
        return DeviceType.UNKNOWN


def _token_to_result(t: RefreshToken) -> RefreshTokenResult:
    return RefreshTokenResult(
        id=t.id,
        token=t.token,
        user_id=t.user_id,
        expires_at=ensure_utc(t.expires_at),
        ip_address=t.ip_address,
        user_agent=t.user_agent,
        device_type=_device_type(t.device_type),
        is_revoked=t.is_revoked,
        last_used_at=ensure_utc(t.last_used_at),
        created_at=ensure_utc(t.created_at),
    )


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, RefreshToken)

    async def create(self, data: RefreshTokenCreate) -> RefreshTokenResult:
        row = RefreshToken(
            token=data.token,
            user_id=data.user_id,
            expires_at=data.expires_at,
            ip_address=data.ip_address,
            user_agent=data.user_agent,
            device_type=data.device_type.value,
            is_revoked=False,
            last_used_at=data.last_used_at,
        )
        return _token_to_result(await self._add(row))

    async def get_by_token(self, token: str) -> RefreshTokenResult | None:
        result = await self.db.execute(
            select(RefreshToken)
            .where(RefreshToken.token == token)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _token_to_result(row) if row else None

    async def rotate(
        self,
        old_token: str,
        user_id: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.token == old_token,
                RefreshToken.user_id == user_id,
                RefreshToken.expires_at > now,
                RefreshToken.is_revoked.is_(False),
            )
            .values(token=new_token, expires_at=new_expires_at, last_used_at=now)
        )
        return await self._execute_dml(stmt) == 1

    async def delete_by_token(self, token: str, user_id: str | None = None) -> bool:
        stmt = delete(RefreshToken).where(RefreshToken.token == token)
        if user_id is not None:
            stmt = stmt.where(RefreshToken.user_id == user_id)
        return await self._execute_dml(stmt) > 0

    async def delete_expired_or_revoked(self, user_id: str, now: datetime) -> int:
        stmt = delete(RefreshToken).where(
            RefreshToken.user_id == user_id,
            or_(RefreshToken.expires_at < now, RefreshToken.is_revoked.is_(True)),
        )
        return await self._execute_dml(stmt)

    async def delete_all_for_user(self, user_id: str) -> int:
        return await self._execute_dml(
            delete(RefreshToken).where(RefreshToken.user_id == user_id)
        )
