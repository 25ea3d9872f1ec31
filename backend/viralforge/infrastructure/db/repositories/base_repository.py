"""
Base Repository for ViralForge AI

Generic async repository with the CRUD operations the concrete repositories
share. Repositories never commit: the request (or job) that owns the session
decides when its unit of work ends.
"""

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel


ModelType = TypeVar("ModelType", bound=SQLModel)


def dialect_insert(session: AsyncSession):
    """
    Return the INSERT construct supporting ON CONFLICT for the session's
    backend (Postgres in production, SQLite in tests).
    """
    if session.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


class BaseRepository(Generic[ModelType]):
    """
    Generic async repository.

    Args:
        model: The SQLModel table class to operate on
        session: Async database session
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self._model = model
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        """Get a single record by its primary key, or None."""
        return await self._session.get(self._model, id)

    async def get_all(self, skip: int = 0, limit: int = 100) -> List[ModelType]:
        stmt = select(self._model).offset(skip).limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def exists(self, id: Any) -> bool:
        return await self.get_by_id(id) is not None

    async def create(self, db_obj: ModelType) -> ModelType:
        """
        Persist a new record.

        Args:
            db_obj: Unsaved model instance

        Returns:
            The instance, refreshed with database defaults
        """
        self._session.add(db_obj)
        await self._session.flush()
        await self._session.refresh(db_obj)
        return db_obj

    async def create_many(self, db_objects: List[ModelType]) -> List[ModelType]:
        self._session.add_all(db_objects)
        await self._session.flush()
        for obj in db_objects:
            await self._session.refresh(obj)
        return db_objects

    async def update_fields(self, id: Any, **values: Any) -> Optional[ModelType]:
        """
        Update columns on an existing record.

        Returns:
            Updated model instance or None if not found
        """
        db_obj = await self.get_by_id(id)
        if db_obj is None:
            return None

        for field, value in values.items():
            setattr(db_obj, field, value)

        self._session.add(db_obj)
        await self._session.flush()
        await self._session.refresh(db_obj)
        return db_obj

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self._model)
        result = await self._session.execute(stmt)
        return result.scalar_one()
