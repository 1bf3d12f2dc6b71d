"""Refresh token ORM model: one row per open session, updated in place on rotation."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from school_auth.infrastructure.persistence.database import Base
from school_auth.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class RefreshToken(CuidMixin, CreatedAtMixin, Base):
    """Persisted refresh session. token is the literal signed string (unique lookup key)."""

    __tablename__ = "refresh_token"

    token: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    device_type: Mapped[str] = mapped_column(String(20), nullable=False, default="unknown")
    is_revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (Index("ix_refresh_token_user_expires", "user_id", "expires_at"),)
