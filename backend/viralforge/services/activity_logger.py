"""
Activity Logger

Writes to the activity feed without ever failing the caller: the insert
runs in a savepoint and errors are logged and swallowed.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from viralforge.infrastructure.db.models.activity_log import ActivityLog
from viralforge.infrastructure.db.repositories.activity_repository import ActivityRepository


logger = logging.getLogger(__name__)


class ActivityLogger:

    def __init__(self, session: AsyncSession):
        self._session = session
        self._repository = ActivityRepository(session)

    async def log(
        self,
        user_id: UUID,
        action: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[Any] = None,
        metadata: Optional[Dict[str, Any]] = None,
        locale: Optional[str] = None,
    ) -> bool:
        """Record one activity entry. Returns False when it could not be stored."""
        entry = ActivityLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            meta=metadata,
            locale=locale,
        )
        try:
            async with self._session.begin_nested():
                await self._repository.create(entry)
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Activity '{action}' not logged for user {user_id}: {e}")
            return False
