"""
Daily Suggestion Service

Generates content ideas per user per UTC day, either for everyone from the
cron job or on demand for one user, and tracks which ideas were used.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from viralforge.domain.calendar import CalendarDay
from viralforge.infrastructure.ai.content_service import ContentService
from viralforge.infrastructure.db.models.base import utc_now
from viralforge.infrastructure.db.models.daily_suggestion import DailySuggestion
from viralforge.infrastructure.db.models.profile import Profile
from viralforge.infrastructure.db.repositories.profile_repository import ProfileRepository
from viralforge.infrastructure.db.repositories.suggestion_repository import SuggestionRepository
from viralforge.infrastructure.exceptions import ForbiddenError, NotFoundError
from viralforge.services.batch import BatchResult, ItemOutcome, run_batch
from viralforge.services.plan_resolver import PlanResolver


logger = logging.getLogger(__name__)


class DailySuggestionService:

    def __init__(
        self,
        session: AsyncSession,
        content_service: ContentService,
        resolver: Optional[PlanResolver] = None,
    ):
        self._session = session
        self._content = content_service
        self._resolver = resolver or PlanResolver()
        self._profiles = ProfileRepository(session)
        self._suggestions = SuggestionRepository(session)

    def today(self) -> CalendarDay:
        return self._resolver.today()

    async def list_today(self, user_id: UUID) -> List[DailySuggestion]:
        return await self._suggestions.list_for_day(user_id, self._resolver.today())

    async def generate_for_profile(
        self,
        profile: Profile,
        day: Optional[CalendarDay] = None,
        niche: Optional[str] = None,
        locale: Optional[str] = None,
    ) -> List[DailySuggestion]:
        """
        Generate and store the plan's daily number of ideas.

        Returns an empty list when the model produced nothing.
        """
        day = day or self._resolver.today()
        locale = locale or profile.locale
        count = self._resolver.resolve_profile(profile, day).suggestions_per_day

        ideas = await self._content.generate_daily_suggestions(
            count,
            locale=locale,
            niche=niche or profile.niche,
        )
        rows = [
            DailySuggestion(
                user_id=profile.id,
                suggestion_date=day.value,
                title=idea.title,
                hook=idea.hook,
                description=idea.description,
                locale=locale,
            )
            for idea in ideas
        ]
        if not rows:
            return []
        return await self._suggestions.create_many(rows)

    async def run_daily_job(self) -> BatchResult:
        """Generate today's ideas for every enabled profile that has none yet."""
        today = self._resolver.today()
        profiles = await self._profiles.list_active()

        async def handle(profile: Profile) -> ItemOutcome:
            if await self._suggestions.count_for_day(profile.id, today) > 0:
                return ItemOutcome.SKIPPED
            created = await self.generate_for_profile(profile, today)
            return ItemOutcome.SUCCESS if created else ItemOutcome.SKIPPED

        return await run_batch(self._session, profiles, handle, "daily-suggestions")

    async def use_suggestion(
        self,
        user_id: UUID,
        suggestion_id: UUID,
        generation_id: Optional[str] = None,
    ) -> DailySuggestion:
        """
        Mark a suggestion as used.

        Raises:
            NotFoundError: no such suggestion
            ForbiddenError: it belongs to another user
        """
        suggestion = await self._suggestions.get_by_id(suggestion_id)
        if suggestion is None:
            raise NotFoundError("Suggestion not found", resource="daily_suggestion")
        if suggestion.user_id != user_id:
            raise ForbiddenError("Suggestion belongs to another user")
        if suggestion.is_used:
            return suggestion
        return await self._suggestions.mark_used(suggestion, utc_now(), generation_id)
