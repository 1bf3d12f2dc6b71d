"""Role ORM model: named permission bundle owned by a school or the platform."""

from sqlalchemy import JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from school_auth.infrastructure.persistence.database import Base
from school_auth.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Role(CuidMixin, TimestampMixin, Base):
    """Role model. Unique (school_id, name); school_id NULL means platform-wide."""

    __tablename__ = "role"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    school_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)

    __table_args__ = (UniqueConstraint("school_id", "name", name="uq_role_school_name"),)
