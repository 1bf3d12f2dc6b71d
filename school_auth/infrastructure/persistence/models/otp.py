"""OTP ORM model: short-lived one-time codes scoped by user, purpose and school."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from school_auth.infrastructure.persistence.database import Base
from school_auth.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class Otp(CuidMixin, CreatedAtMixin, Base):
    """One-time code. school_id NULL means platform scope."""

    __tablename__ = "otp"

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False
    )
    code: Mapped[str] = mapped_column(String(12), nullable=False)
    purpose: Mapped[str] = mapped_column(String(32), nullable=False)
    school_id: Mapped[str | None] = mapped_column(String, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_used: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    __table_args__ = (Index("ix_otp_user_purpose", "user_id", "purpose"),)
