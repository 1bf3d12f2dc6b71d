"""OTP repository: issue, consume (single conditional update) and invalidate codes."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from school_auth.application.dtos.token import OtpResult
from school_auth.domain.enums import OtpPurpose
from school_auth.infrastructure.persistence.models.otp import Otp
from school_auth.infrastructure.persistence.repositories.base import BaseRepository
from school_auth.shared.utils.datetime import ensure_utc


def _otp_to_result(o: Otp) -> OtpResult:
    return OtpResult(
        id=o.id,
        user_id=o.user_id,
        code=o.code,
        purpose=OtpPurpose(o.purpose),
        school_id=o.school_id,
        expires_at=ensure_utc(o.expires_at),
        is_used=o.is_used,
    )


def _scope(school_id: str | None):
    """Platform codes (NULL school) never match a school request and vice versa."""
    return Otp.school_id.is_(None) if school_id is None else Otp.school_id == school_id


class OtpRepository(BaseRepository[Otp]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Otp)

    async def create(
        self,
        user_id: str,
        code: str,
        purpose: OtpPurpose,
        school_id: str | None,
        expires_at: datetime,
    ) -> OtpResult:
        row = Otp(
            user_id=user_id,
            code=code,
            purpose=purpose.value,
            school_id=school_id,
            expires_at=expires_at,
            is_used=False,
        )
        return _otp_to_result(await self._add(row))

    async def consume(
        self,
        user_id: str,
        code: str,
        purpose: OtpPurpose,
        school_id: str | None,
        now: datetime,
    ) -> bool:
        stmt = (
            update(Otp)
            .where(
                Otp.user_id == user_id,
                Otp.code == code,
                Otp.purpose == purpose.value,
                _scope(school_id),
                Otp.is_used.is_(False),
                Otp.expires_at > now,
            )
            .values(is_used=True)
        )
        return await self._execute_dml(stmt) > 0

    async def invalidate_active(
        self, user_id: str, purpose: OtpPurpose, school_id: str | None
    ) -> int:
        stmt = (
            update(Otp)
            .where(
                Otp.user_id == user_id,
                Otp.purpose == purpose.value,
                _scope(school_id),
                Otp.is_used.is_(False),
            )
            .values(is_used=True)
        )
        return await self._execute_dml(stmt)
