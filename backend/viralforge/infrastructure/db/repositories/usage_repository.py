"""
Daily Usage Repository

Counter rows keyed by (user_id, usage_date, feature). Increments are one
INSERT ... ON CONFLICT DO UPDATE ... RETURNING statement, so concurrent
requests never lose an update.
"""

from typing import Dict
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from viralforge.domain.calendar import CalendarDay
from viralforge.domain.plans import LimitKey
from viralforge.infrastructure.db.models.base import utc_now
from viralforge.infrastructure.db.models.usage_daily import (
    USAGE_CONFLICT_COLUMNS,
    UsageDaily,
)
from viralforge.infrastructure.db.repositories.base_repository import dialect_insert


usage_table = UsageDaily.__table__


class UsageRepository:
    """Repository for the per-day usage counters."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_count(self, user_id: UUID, feature: LimitKey, day: CalendarDay) -> int:
        """Today's count for one feature; 0 when no row exists yet."""
        stmt = select(usage_table.c["count"]).where(
            usage_table.c.user_id == user_id,
            usage_table.c.usage_date == day.value,
            usage_table.c.feature == LimitKey(feature).value,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() or 0

    async def get_total(
        self,
        user_id: UUID,
        feature: LimitKey,
        start: CalendarDay,
        end: CalendarDay,
    ) -> int:
        """Sum of one feature's counters from `start` through `end`, inclusive."""
        stmt = select(func.coalesce(func.sum(usage_table.c["count"]), 0)).where(
            usage_table.c.user_id == user_id,
            usage_table.c.feature == LimitKey(feature).value,
            usage_table.c.usage_date >= start.value,
            usage_table.c.usage_date <= end.value,
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def increment(
        self,
        user_id: UUID,
        feature: LimitKey,
        day: CalendarDay,
        amount: int = 1,
    ) -> int:
        """
        Atomically add `amount` to the counter, creating the row on first use.

        Returns:
            The counter value after the increment
        """
        now = utc_now()
        insert = dialect_insert(self._session)
        stmt = insert(usage_table).values(
            user_id=user_id,
            usage_date=day.value,
            feature=LimitKey(feature).value,
            count=amount,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=USAGE_CONFLICT_COLUMNS,
            set_={
                "count": usage_table.c["count"] + stmt.excluded["count"],
                "updated_at": now,
            },
        ).returning(usage_table.c["count"])

        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def delete_day(self, user_id: UUID, day: CalendarDay) -> int:
        """Remove every counter the user has for `day`. Returns rows deleted."""
        stmt = delete(usage_table).where(
            usage_table.c.user_id == user_id,
            usage_table.c.usage_date == day.value,
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    async def get_day_usage(self, user_id: UUID, day: CalendarDay) -> Dict[str, int]:
        """All counters for a day, keyed by feature name."""
        stmt = select(usage_table.c.feature, usage_table.c["count"]).where(
            usage_table.c.user_id == user_id,
            usage_table.c.usage_date == day.value,
        )
        result = await self._session.execute(stmt)
        return {row[0]: row[1] for row in result.all()}
