"""
Quota Gate

Combines the plan resolver and the usage counter into the allow/block
decision every metered route makes before doing paid work:

    check = await gate.require(user_id, LimitKey.AB_TESTS, locale)
    ... paid work ...
    check = await gate.record_usage(user_id, check)

Counting happens after the work succeeds, so failed generations are never
charged. Video analysis may fall back to the purchasable credit balance
once the daily allowance is exhausted; a credit-authorized use is paid for
by the credit and does not advance the daily counter.
"""

import logging
from typing import Dict, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from viralforge.domain.calendar import CalendarDay
from viralforge.domain.plans import (
    CREDIT_ELIGIBLE_FEATURES,
    LimitKey,
    UsageStatus,
    UsageWindow,
    calculate_usage_status,
    limit_message,
    usage_window,
)
from viralforge.domain.quota import FeatureCheck, UsageSummary
from viralforge.infrastructure.db.models.profile import Profile
from viralforge.infrastructure.db.repositories.profile_repository import ProfileRepository
from viralforge.infrastructure.db.repositories.usage_repository import UsageRepository
from viralforge.infrastructure.exceptions import LimitReachedError
from viralforge.services.activity_logger import ActivityLogger
from viralforge.services.plan_resolver import PlanResolver
from viralforge.services.usage_counter import UsageCounter


logger = logging.getLogger(__name__)

# Lifecycle events recorded when a counter crosses into these states
LIFECYCLE_ACTIONS = {
    UsageStatus.CRITICAL: "limit_approaching",
    UsageStatus.BLOCKED: "limit_reached",
}


class QuotaGate:
    """
    Entitlement checks bound to one database session.

    Args:
        session: Request (or job) session
        resolver: Plan resolver; its clock defines "today"
        record_lifecycle: Log activity entries when limits are approached/reached
    """

    def __init__(
        self,
        session: AsyncSession,
        resolver: Optional[PlanResolver] = None,
        record_lifecycle: bool = True,
    ):
        self._session = session
        self._profiles = ProfileRepository(session)
        self._counter = UsageCounter(UsageRepository(session))
        self._resolver = resolver or PlanResolver()
        self._activity = ActivityLogger(session) if record_lifecycle else None

    @property
    def counter(self) -> UsageCounter:
        return self._counter

    async def _load_profile(self, user_id: UUID) -> Optional[Profile]:
        return await self._profiles.get_by_id(user_id)

    def _check_for(self, profile: Profile, feature: LimitKey, used: int, today: CalendarDay) -> FeatureCheck:
        limit = self._resolver.resolve_profile(profile, today).limit_for(feature)
        if limit is None:
            return FeatureCheck.unlimited_for(feature, used)
        return FeatureCheck.from_usage(feature, used, limit)

    async def _evaluate(self, user_id: UUID, feature: LimitKey) -> Tuple[Optional[Profile], FeatureCheck]:
        profile = await self._load_profile(user_id)
        if profile is None or profile.is_disabled:
            return profile, FeatureCheck.blocked_for(feature)

        today = self._resolver.today()
        entitlements = self._resolver.resolve_profile(profile, today)
        if entitlements.limit_for(feature) is None:
            return profile, FeatureCheck.unlimited_for(feature)

        used = await self._counter.get_usage(user_id, feature, today)
        return profile, self._check_for(profile, feature, used, today)

    async def can_use_feature(self, user_id: UUID, feature: LimitKey) -> FeatureCheck:
        """
        Current allow/block decision for one feature.

        Missing profiles and disabled accounts are blocked with limit 0.
        Unlimited plans skip the counter read.
        """
        _, check = await self._evaluate(user_id, feature)
        return check

    async def authorize(self, user_id: UUID, feature: LimitKey) -> FeatureCheck:
        """
        `can_use_feature`, plus the analysis-credit fallback.

        When a credit-eligible feature is blocked by its daily limit and the
        user holds credits, one credit is spent by a conditional atomic
        decrement. The returned check keeps the daily picture and is marked
        allowed with `used_credit`.
        """
        profile, check = await self._evaluate(user_id, feature)
        if check.allowed or feature not in CREDIT_ELIGIBLE_FEATURES:
            return check
        if profile is None or profile.is_disabled:
            return check

        new_balance = await self._profiles.consume_analysis_credit(user_id)
        if new_balance is None:
            return check

        logger.info(f"User {user_id} spent an analysis credit for {feature.value} ({new_balance} left)")
        return check.with_credit()

    async def require(self, user_id: UUID, feature: LimitKey, locale: str = "tr") -> FeatureCheck:
        """
        Authorize or raise.

        Raises:
            LimitReachedError: the feature is blocked for this user
        """
        check = await self.authorize(user_id, feature)
        if not check.allowed:
            raise LimitReachedError(
                limit_message(feature, locale),
                used=check.used,
                limit=check.limit,
                remaining=check.remaining,
            )
        return check

    async def increment_usage_and_check(
        self,
        user_id: UUID,
        feature: LimitKey,
        amount: int = 1,
    ) -> Optional[FeatureCheck]:
        """
        Count a completed use and return the updated check.

        The increment runs in a savepoint. A failure is logged and returns
        None; it never fails the request that already did the work.
        """
        today = self._resolver.today()
        try:
            async with self._session.begin_nested():
                new_count = await self._counter.increment(user_id, feature, today, amount)
                if usage_window(feature) is not UsageWindow.DAY:
                    new_count = await self._counter.get_usage(user_id, feature, today)
        except SQLAlchemyError as e:
            logger.error(f"Usage increment failed for user {user_id} ({feature.value}): {e}")
            return None

        profile = await self._load_profile(user_id)
        if profile is None:
            return FeatureCheck.blocked_for(feature, used=new_count)
        check = self._check_for(profile, feature, new_count, today)

        if self._activity is not None and check.limit is not None:
            previous = calculate_usage_status(new_count - amount, check.limit)
            action = LIFECYCLE_ACTIONS.get(check.status)
            if action and check.status != previous:
                await self._activity.log(
                    user_id,
                    action,
                    entity_type="quota",
                    entity_id=feature.value,
                    metadata={"used": check.used, "limit": check.limit},
                )
        return check

    async def record_usage(self, user_id: UUID, check: FeatureCheck) -> FeatureCheck:
        """
        Settle an authorized use after the paid work succeeded.

        Credit-paid uses are already settled. If counting fails, the
        pre-work check is returned unchanged.
        """
        if check.used_credit:
            return check
        updated = await self.increment_usage_and_check(user_id, check.feature)
        return updated or check

    async def release(self, user_id: UUID, check: FeatureCheck) -> None:
        """Undo a credit authorization whose paid work failed."""
        if not check.used_credit:
            return
        try:
            async with self._session.begin_nested():
                await self._profiles.refund_analysis_credit(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Credit refund failed for user {user_id}: {e}")

    async def usage_summary(self, user_id: UUID) -> Optional[UsageSummary]:
        """Per-feature checks for the account page; None for unknown users."""
        profile = await self._load_profile(user_id)
        if profile is None:
            return None

        today = self._resolver.today()
        entitlements = self._resolver.resolve_profile(profile, today)
        day_usage = await self._counter.get_day_usage(user_id, today)

        features: Dict[LimitKey, FeatureCheck] = {}
        for feature in LimitKey:
            if usage_window(feature) is UsageWindow.DAY:
                used = day_usage.get(feature.value, 0)
            else:
                used = await self._counter.get_usage(user_id, feature, today)
            if profile.is_disabled:
                features[feature] = FeatureCheck.blocked_for(feature, used=used)
            else:
                features[feature] = self._check_for(profile, feature, used, today)

        return UsageSummary(
            day=today.isoformat(),
            plan=entitlements.plan,
            effective_plan=entitlements.effective_plan,
            is_comped=entitlements.is_comped,
            is_disabled=profile.is_disabled,
            analysis_credit_balance=profile.analysis_credit_balance,
            features=features,
        )
