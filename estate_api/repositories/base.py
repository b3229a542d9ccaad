"""
Generic async repository shared by the entity repositories.

Writes go through ``transaction()``, which commits when the block
finishes and rolls back if it raises.
"""

from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from estate_api.database import Base
from typing import TypeVar, Generic, Optional, Dict, Any, Type, AsyncIterator
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)

# Managed by the database layer, never written from request data
PROTECTED_COLUMNS = frozenset({"id", "created_at", "updated_at"})


class BaseRepository(Generic[ModelType]):

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    @asynccontextmanager
    async def transaction(self, action: str) -> AsyncIterator[AsyncSession]:
        """Commit the work done inside the block, or roll it back and re-raise."""
        try:
            yield self.db
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"{self.model.__name__}: {action} failed, rolled back: {e}")
            raise

    def assign_columns(self, db_obj: ModelType, values: Dict[str, Any]) -> None:
        """
        Copy mapped column values onto ``db_obj``.

        Unknown keys are ignored and explicit None values are written,
        so callers pass only the fields they mean to change.
        """
        columns = self.model.__table__.columns.keys()
        for field, value in values.items():
            if field in columns and field not in PROTECTED_COLUMNS:
                setattr(db_obj, field, value)

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """Insert a row and return it reloaded with its relationships."""
        db_obj = self.model(**obj_in)
        async with self.transaction("create"):
            self.db.add(db_obj)

        logger.debug(f"Created {self.model.__name__} {db_obj.id}")
        return await self.get_by_id(db_obj.id)

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        """
        Get a record by its ID.

        The identity map is bypassed so that rows changed by bulk
        statements are read back fresh.
        """
        result = await self.db.execute(
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update(self, id: uuid.UUID, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """Overwrite the given columns; None if the record does not exist."""
        db_obj = await self.get_by_id(id)
        if db_obj is None:
            return None

        async with self.transaction(f"update {id}"):
            self.assign_columns(db_obj, obj_in)

        logger.debug(f"Updated {self.model.__name__} {id}: {sorted(obj_in)}")
        return await self.get_by_id(id)

    async def delete(self, id: uuid.UUID) -> bool:
        """True if a row was removed."""
        async with self.transaction(f"delete {id}"):
            result = await self.db.execute(delete(self.model).where(self.model.id == id))

        logger.debug(f"Delete {self.model.__name__} {id}: {result.rowcount} row(s)")
        return result.rowcount > 0
