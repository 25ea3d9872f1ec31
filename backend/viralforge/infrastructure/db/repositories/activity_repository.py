"""
Activity Log Repository
"""

from datetime import datetime
from typing import Dict, List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from viralforge.infrastructure.db.models.activity_log import ActivityLog
from viralforge.infrastructure.db.repositories.base_repository import BaseRepository


class ActivityRepository(BaseRepository[ActivityLog]):
    """Repository for the user activity feed."""

    def __init__(self, session: AsyncSession):
        super().__init__(ActivityLog, session)

    async def get_since(self, user_id: UUID, since: datetime, limit: int = 200) -> List[ActivityLog]:
        stmt = (
            select(ActivityLog)
            .where(ActivityLog.user_id == user_id, ActivityLog.created_at >= since)
            .order_by(ActivityLog.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_action_since(self, user_id: UUID, since: datetime) -> Dict[str, int]:
        """Activity counts grouped by action for a user."""
        stmt = (
            select(ActivityLog.action, func.count(ActivityLog.id).label("count"))
            .where(ActivityLog.user_id == user_id, ActivityLog.created_at >= since)
            .group_by(ActivityLog.action)
        )
        result = await self._session.execute(stmt)
        return {row.action: row.count for row in result.all()}
