"""
Profile Repository

Profile reads for the plan resolver and cron jobs, admin updates, and the
atomic analysis-credit decrement.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value
from sqlalchemy.orm.util import identity_key

from viralforge.domain.calendar import CalendarDay
from viralforge.domain.plans import PlanId
from viralforge.infrastructure.db.models.base import utc_now
from viralforge.infrastructure.db.models.profile import Profile
from viralforge.infrastructure.db.repositories.base_repository import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Repository for user profiles."""

    def __init__(self, session: AsyncSession):
        super().__init__(Profile, session)

    async def get_by_stripe_customer_id(self, customer_id: str) -> Optional[Profile]:
        stmt = select(Profile).where(Profile.stripe_customer_id == customer_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def consume_analysis_credit(self, user_id: UUID) -> Optional[int]:
        """
        Spend one analysis credit in a single conditional UPDATE.

        Returns:
            The new balance, or None when the balance was already zero (or
            the profile does not exist). The balance never goes negative.
        """
        stmt = (
            update(Profile)
            .where(
                Profile.id == user_id,
                Profile.analysis_credit_balance > 0,
            )
            .values(
                analysis_credit_balance=Profile.analysis_credit_balance - 1,
                updated_at=utc_now(),
            )
            .returning(Profile.analysis_credit_balance)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return self._sync_credit_balance(user_id, result.scalar_one_or_none())

    async def refund_analysis_credit(self, user_id: UUID) -> Optional[int]:
        """Give back one credit spent on work that failed. Returns the new balance."""
        stmt = (
            update(Profile)
            .where(Profile.id == user_id)
            .values(
                analysis_credit_balance=Profile.analysis_credit_balance + 1,
                updated_at=utc_now(),
            )
            .returning(Profile.analysis_credit_balance)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return self._sync_credit_balance(user_id, result.scalar_one_or_none())

    def _sync_credit_balance(self, user_id: UUID, balance: Optional[int]) -> Optional[int]:
        """Copy the returned balance onto an already loaded Profile so later reads agree."""
        if balance is not None:
            loaded = self._session.identity_map.get(identity_key(Profile, user_id))
            if loaded is not None:
                set_committed_value(loaded, "analysis_credit_balance", balance)
        return balance

    async def list_active(self) -> List[Profile]:
        """Every profile that is not disabled, oldest first."""
        stmt = (
            select(Profile)
            .where(Profile.is_disabled.is_(False))
            .order_by(Profile.created_at)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_with_pro_access(self, day: CalendarDay) -> List[Profile]:
        """Enabled profiles that are PRO or comped through `day`."""
        stmt = (
            select(Profile)
            .where(
                Profile.is_disabled.is_(False),
                or_(
                    Profile.plan == PlanId.PRO.value,
                    Profile.comped_until >= day.value,
                ),
            )
            .order_by(Profile.created_at)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
