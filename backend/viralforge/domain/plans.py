"""
Plan Domain Models

Enums, limit tables and usage-status rules for the entitlement bounded
context. The plan table is the single source of truth for limits shown in
the UI and enforced by the quota gate.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel


class PlanId(str, Enum):
    """Subscription plans stored on the profile."""
    FREE = "FREE"
    PRO = "PRO"


class LimitKey(str, Enum):
    """Metered features with a usage counter."""
    VIDEO_ANALYSIS = "video_analysis"
    AB_TESTS = "ab_tests"
    CAPTION_GENERATIONS = "caption_generations"
    DAILY_SUGGESTIONS = "daily_suggestions"
    MONTHLY_HOOKS = "monthly_hooks"
    CONTENT_PLANS = "content_plans"


class UsageWindow(str, Enum):
    """Span of days whose counters add up against a limit."""
    DAY = "day"
    MONTH = "month"


class FeatureFlag(str, Enum):
    """Boolean capabilities unlocked by a plan."""
    PERSONA_LEARNING = "persona_learning"
    PERFORMANCE_OPTIMIZATION = "performance_optimization"
    PRIORITY_SUPPORT = "priority_support"
    WEEKLY_INSIGHTS = "weekly_insights"


class UsageStatus(str, Enum):
    """Quota state reported to clients."""
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    BLOCKED = "blocked"


# =============================================================================
# Plan Configuration (Business Logic)
# =============================================================================

# None means unlimited
PLAN_CONFIG = {
    PlanId.FREE: {
        "name": {"tr": "Ücretsiz", "en": "Free"},
        "limits": {
            LimitKey.VIDEO_ANALYSIS: 1,
            LimitKey.AB_TESTS: 3,
            LimitKey.CAPTION_GENERATIONS: 3,
            LimitKey.DAILY_SUGGESTIONS: 1,
            LimitKey.MONTHLY_HOOKS: 10,
            LimitKey.CONTENT_PLANS: 5,
        },
        "features": {
            FeatureFlag.PERSONA_LEARNING: False,
            FeatureFlag.PERFORMANCE_OPTIMIZATION: False,
            FeatureFlag.PRIORITY_SUPPORT: False,
            FeatureFlag.WEEKLY_INSIGHTS: False,
        },
        "suggestions_per_day": 1,
    },
    PlanId.PRO: {
        "name": {"tr": "PRO", "en": "PRO"},
        "limits": {key: None for key in LimitKey},
        "features": {flag: True for flag in FeatureFlag},
        "suggestions_per_day": 3,
    },
}

# Limits not listed here are daily
LIMIT_WINDOWS: Dict[LimitKey, UsageWindow] = {
    LimitKey.MONTHLY_HOOKS: UsageWindow.MONTH,
}

# Features that can fall back to the purchasable analysis credit balance
CREDIT_ELIGIBLE_FEATURES = frozenset({LimitKey.VIDEO_ANALYSIS})

# Status thresholds, as a fraction of the limit still remaining
WARNING_REMAINING_FRACTION = 0.3
CRITICAL_REMAINING_FRACTION = 0.2

LIMIT_MESSAGES: Dict[LimitKey, Dict[str, str]] = {
    LimitKey.VIDEO_ANALYSIS: {
        "tr": "Günlük analiz limitine ulaştınız. Sınırsız analiz için PRO'ya geçin.",
        "en": "Daily analysis limit reached. Upgrade to PRO for unlimited analyses.",
    },
    LimitKey.AB_TESTS: {
        "tr": "A/B test limitine ulaştınız. Daha fazlası için PRO'ya geçin.",
        "en": "You have reached your A/B test limit. Upgrade to PRO for more.",
    },
    LimitKey.CAPTION_GENERATIONS: {
        "tr": "Caption üretim limitine ulaştınız. Planınızı yükseltin.",
        "en": "Caption generation limit reached. Upgrade your plan.",
    },
    LimitKey.DAILY_SUGGESTIONS: {
        "tr": "Bugünkü öneri limitine ulaştınız.",
        "en": "You have used today's suggestion allowance.",
    },
    LimitKey.MONTHLY_HOOKS: {
        "tr": "Aylık hook üretim limitine ulaştınız. Daha fazlası için PRO'ya geçin.",
        "en": "You have reached your monthly hook generation limit.",
    },
    LimitKey.CONTENT_PLANS: {
        "tr": "İçerik planı limitine ulaştınız. Planınızı yükseltin.",
        "en": "You have reached your content plan limit. Upgrade your plan.",
    },
}


def parse_plan(raw: Optional[str]) -> PlanId:
    """Map a stored plan value to a PlanId. Unknown values fall back to FREE."""
    if raw is None:
        return PlanId.FREE
    try:
        return PlanId(str(raw).upper())
    except ValueError:
        return PlanId.FREE


def calculate_usage_status(used: int, limit: int) -> UsageStatus:
    """Status for a limited feature given today's usage."""
    remaining = limit - used
    if limit <= 0 or remaining <= 0:
        return UsageStatus.BLOCKED
    fraction = remaining / limit
    if fraction <= CRITICAL_REMAINING_FRACTION:
        return UsageStatus.CRITICAL
    if fraction <= WARNING_REMAINING_FRACTION:
        return UsageStatus.WARNING
    return UsageStatus.OK


def usage_window(feature: LimitKey) -> UsageWindow:
    return LIMIT_WINDOWS.get(LimitKey(feature), UsageWindow.DAY)


def limit_message(feature: LimitKey, locale: str = "tr") -> str:
    messages = LIMIT_MESSAGES.get(feature, LIMIT_MESSAGES[LimitKey.AB_TESTS])
    return messages.get(locale, messages["en"])


# =============================================================================
# Domain Entities
# =============================================================================

class Entitlements(BaseModel):
    """Resolved limits and flags for a user at a point in time."""
    plan: PlanId
    effective_plan: PlanId
    is_comped: bool = False
    limits: Dict[LimitKey, Optional[int]]
    features: Dict[FeatureFlag, bool]
    suggestions_per_day: int

    @property
    def is_pro(self) -> bool:
        return self.effective_plan == PlanId.PRO

    def limit_for(self, feature: LimitKey) -> Optional[int]:
        """Limit for a feature within its usage window; None is unlimited, unknown features get 0."""
        if feature in self.limits:
            return self.limits[feature]
        return None if self.is_pro else 0

    def has_feature(self, flag: FeatureFlag) -> bool:
        return self.features.get(flag, False)
