"""Base repository: primary-key lookup, insert, and conditional DML helpers."""

from typing import Any, Generic, TypeVar, cast

from sqlalchemy import select
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Delete, Update

from school_auth.infrastructure.persistence.database import Base


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository over one ORM model.

    Subclasses expose application DTOs from their public methods; the ORM
    instances returned here stay inside the infrastructure layer.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def _add(self, obj: ModelType) -> ModelType:
        """Persist a new record and reload server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _execute_dml(self, stmt: Update | Delete) -> int:
        """Run a bulk UPDATE/DELETE and return the affected row count.

        Identity-map objects are not synchronized; reads that may follow use
        populate_existing.
        """
        result = await self.db.execute(
            stmt.execution_options(synchronize_session=False)
        )
        return cast("CursorResult[Any]", result).rowcount
