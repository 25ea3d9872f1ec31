"""
Usage Counter

Per-user, per-day, per-feature counters. A new UTC day is a new key, so
counters reset without any scheduled job. Monthly limits read the sum of
the month's daily rows.
"""

from typing import Dict, Optional
from uuid import UUID

from viralforge.domain.calendar import CalendarDay
from viralforge.domain.plans import LimitKey, UsageWindow, usage_window
from viralforge.infrastructure.db.repositories.usage_repository import UsageRepository


def window_start(feature: LimitKey, day: CalendarDay) -> CalendarDay:
    """First day whose usage counts against `feature`'s limit on `day`."""
    if usage_window(feature) is UsageWindow.MONTH:
        return day.month_start()
    return day


class UsageCounter:

    def __init__(self, repository: UsageRepository):
        self._repository = repository

    async def get_usage(
        self,
        user_id: UUID,
        feature: LimitKey,
        day: Optional[CalendarDay] = None,
    ) -> int:
        """Usage within the feature's window ending on `day`; 0 when nothing is recorded."""
        day = day or CalendarDay.today()
        start = window_start(feature, day)
        if start == day:
            return await self._repository.get_count(user_id, feature, day)
        return await self._repository.get_total(user_id, feature, start, day)

    async def increment(
        self,
        user_id: UUID,
        feature: LimitKey,
        day: Optional[CalendarDay] = None,
        amount: int = 1,
    ) -> int:
        """Atomically add `amount` (>= 1) to the day's row and return its new count."""
        if amount < 1:
            raise ValueError("amount must be a positive integer")
        return await self._repository.increment(
            user_id, feature, day or CalendarDay.today(), amount
        )

    async def reset(self, user_id: UUID, day: Optional[CalendarDay] = None) -> int:
        """Delete the user's counters for `day`. Safe to repeat."""
        return await self._repository.delete_day(user_id, day or CalendarDay.today())

    async def get_day_usage(
        self,
        user_id: UUID,
        day: Optional[CalendarDay] = None,
    ) -> Dict[str, int]:
        return await self._repository.get_day_usage(user_id, day or CalendarDay.today())
