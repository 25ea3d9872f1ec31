"""
Weekly Insight and Persona Jobs

Both jobs only consider profiles with PRO access (paid or comped). Weekly
insights need a minimum amount of activity in the last seven days; persona
recalculation is delegated to database functions.
"""

import logging
from datetime import datetime, time, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from viralforge.domain.calendar import CalendarDay
from viralforge.infrastructure.ai.content_service import ContentService
from viralforge.infrastructure.db.models.profile import Profile
from viralforge.infrastructure.db.models.weekly_insight import WeeklyInsight
from viralforge.infrastructure.db.repositories.activity_repository import ActivityRepository
from viralforge.infrastructure.db.repositories.profile_repository import ProfileRepository
from viralforge.infrastructure.db.repositories.suggestion_repository import WeeklyInsightRepository
from viralforge.infrastructure.supabase.rpc_service import SupabaseRPCService
from viralforge.services.batch import BatchResult, ItemOutcome, run_batch
from viralforge.services.plan_resolver import PlanResolver


logger = logging.getLogger(__name__)

MIN_WEEKLY_ACTIVITY = 3
INSIGHT_WINDOW_DAYS = 7


def week_start_for(day: CalendarDay) -> CalendarDay:
    """Monday of the ISO week containing `day`."""
    return day.shift(-day.value.weekday())


class InsightService:

    def __init__(
        self,
        session: AsyncSession,
        content_service: Optional[ContentService] = None,
        rpc_service: Optional[SupabaseRPCService] = None,
        resolver: Optional[PlanResolver] = None,
    ):
        self._session = session
        self._content = content_service
        self._rpc = rpc_service
        self._resolver = resolver or PlanResolver()
        self._profiles = ProfileRepository(session)
        self._activity = ActivityRepository(session)
        self._insights = WeeklyInsightRepository(session)

    async def run_weekly_insights(self) -> BatchResult:
        today = self._resolver.today()
        week_start = week_start_for(today)
        since = datetime.combine(
            today.shift(-INSIGHT_WINDOW_DAYS).value, time.min, tzinfo=timezone.utc
        )
        profiles = await self._profiles.list_with_pro_access(today)

        async def handle(profile: Profile) -> ItemOutcome:
            if await self._insights.get_for_week(profile.id, week_start) is not None:
                return ItemOutcome.SKIPPED

            counts = await self._activity.count_by_action_since(profile.id, since)
            activity_count = sum(counts.values())
            if activity_count < MIN_WEEKLY_ACTIVITY:
                return ItemOutcome.SKIPPED

            insight = await self._content.summarize_week(counts, locale=profile.locale)
            await self._insights.create(
                WeeklyInsight(
                    user_id=profile.id,
                    week_start=week_start.value,
                    summary=insight.summary,
                    highlights=insight.highlights,
                    recommendations=insight.recommendations,
                    activity_count=activity_count,
                    stats=counts,
                )
            )
            return ItemOutcome.SUCCESS

        return await run_batch(self._session, profiles, handle, "weekly-insights")

    async def run_persona_recalculation(self) -> BatchResult:
        profiles = await self._profiles.list_with_pro_access(self._resolver.today())

        async def handle(profile: Profile) -> ItemOutcome:
            await self._rpc.update_persona_from_events(profile.id)
            return ItemOutcome.SUCCESS

        result = await run_batch(self._session, profiles, handle, "persona-recalculate")
        await self._rpc.normalize_persona_weights()
        return result
