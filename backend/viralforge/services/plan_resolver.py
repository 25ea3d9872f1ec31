"""
Plan Resolver

Maps a profile's stored plan and comp date to effective limits and feature
flags. Comp access is inclusive of its last day and compared as UTC calendar
days. Resolution never raises: unknown plans and unreadable comp dates fall
back to FREE.
"""

import logging
from datetime import date
from typing import Callable, Optional, Union

from viralforge.domain.calendar import CalendarDay
from viralforge.domain.plans import (
    PLAN_CONFIG,
    Entitlements,
    LimitKey,
    PlanId,
    parse_plan,
)


logger = logging.getLogger(__name__)

CompedUntil = Union[CalendarDay, date, str, None]


class PlanResolver:
    """
    Resolve entitlements for a plan at a point in time.

    Args:
        clock: Returns the current UTC calendar day (injectable for tests)
    """

    def __init__(self, clock: Callable[[], CalendarDay] = CalendarDay.today):
        self._clock = clock

    def today(self) -> CalendarDay:
        return self._clock()

    def _comp_day(self, comped_until: CompedUntil) -> Optional[CalendarDay]:
        try:
            return CalendarDay.coerce(comped_until)
        except ValueError:
            logger.warning(f"Ignoring unreadable comped_until value: {comped_until!r}")
            return None

    def is_comped(self, comped_until: CompedUntil, today: Optional[CalendarDay] = None) -> bool:
        comp_day = self._comp_day(comped_until)
        if comp_day is None:
            return False
        return comp_day >= (today or self.today())

    def has_pro_access(
        self,
        plan: Optional[str],
        comped_until: CompedUntil = None,
        today: Optional[CalendarDay] = None,
    ) -> bool:
        return parse_plan(plan) == PlanId.PRO or self.is_comped(comped_until, today)

    def resolve(
        self,
        plan: Optional[str],
        comped_until: CompedUntil = None,
        today: Optional[CalendarDay] = None,
    ) -> Entitlements:
        stored_plan = parse_plan(plan)
        is_comped = self.is_comped(comped_until, today)
        effective_plan = PlanId.PRO if stored_plan == PlanId.PRO or is_comped else PlanId.FREE
        config = PLAN_CONFIG[effective_plan]

        return Entitlements(
            plan=stored_plan,
            effective_plan=effective_plan,
            is_comped=is_comped,
            limits=dict(config["limits"]),
            features=dict(config["features"]),
            suggestions_per_day=config["suggestions_per_day"],
        )

    def resolve_profile(self, profile, today: Optional[CalendarDay] = None) -> Entitlements:
        """Entitlements for a Profile row (or anything with plan/comped_until)."""
        return self.resolve(profile.plan, profile.comped_until, today)

    def limit_for(
        self,
        plan: Optional[str],
        comped_until: CompedUntil,
        feature: LimitKey,
    ) -> Optional[int]:
        """Daily limit for one feature; None means unlimited."""
        return self.resolve(plan, comped_until).limit_for(feature)
