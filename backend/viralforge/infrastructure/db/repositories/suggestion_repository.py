"""
Daily Suggestion and Weekly Insight Repositories
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from viralforge.domain.calendar import CalendarDay
from viralforge.infrastructure.db.models.daily_suggestion import DailySuggestion
from viralforge.infrastructure.db.models.weekly_insight import WeeklyInsight
from viralforge.infrastructure.db.repositories.base_repository import BaseRepository


class SuggestionRepository(BaseRepository[DailySuggestion]):
    """Repository for generated daily suggestions."""

    def __init__(self, session: AsyncSession):
        super().__init__(DailySuggestion, session)

    async def list_for_day(self, user_id: UUID, day: CalendarDay) -> List[DailySuggestion]:
        stmt = (
            select(DailySuggestion)
            .where(
                DailySuggestion.user_id == user_id,
                DailySuggestion.suggestion_date == day.value,
            )
            .order_by(DailySuggestion.created_at)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_day(self, user_id: UUID, day: CalendarDay) -> int:
        stmt = select(func.count(DailySuggestion.id)).where(
            DailySuggestion.user_id == user_id,
            DailySuggestion.suggestion_date == day.value,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def mark_used(
        self,
        suggestion: DailySuggestion,
        used_at: datetime,
        generation_id: Optional[str] = None,
    ) -> DailySuggestion:
        suggestion.is_used = True
        suggestion.used_at = used_at
        if generation_id:
            suggestion.generation_id = generation_id
        self._session.add(suggestion)
        await self._session.flush()
        await self._session.refresh(suggestion)
        return suggestion


class WeeklyInsightRepository(BaseRepository[WeeklyInsight]):
    """Repository for weekly PRO insights."""

    def __init__(self, session: AsyncSession):
        super().__init__(WeeklyInsight, session)

    async def get_for_week(self, user_id: UUID, week_start: CalendarDay) -> Optional[WeeklyInsight]:
        stmt = select(WeeklyInsight).where(
            WeeklyInsight.user_id == user_id,
            WeeklyInsight.week_start == week_start.value,
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()
