"""
Unit tests for the plan table, usage status rules and quota DTOs.
"""

import pytest

from viralforge.domain.plans import (
    PLAN_CONFIG,
    FeatureFlag,
    LimitKey,
    PlanId,
    UsageStatus,
    UsageWindow,
    calculate_usage_status,
    limit_message,
    parse_plan,
    usage_window,
)
from viralforge.domain.quota import FeatureCheck


class TestPlanConfig:

    def test_free_limits(self):
        limits = PLAN_CONFIG[PlanId.FREE]["limits"]
        assert limits[LimitKey.VIDEO_ANALYSIS] == 1
        assert limits[LimitKey.AB_TESTS] == 3
        assert limits[LimitKey.CAPTION_GENERATIONS] == 3
        assert limits[LimitKey.DAILY_SUGGESTIONS] == 1
        assert limits[LimitKey.MONTHLY_HOOKS] == 10
        assert limits[LimitKey.CONTENT_PLANS] == 5

    def test_only_hooks_count_by_month(self):
        assert usage_window(LimitKey.MONTHLY_HOOKS) is UsageWindow.MONTH
        assert [key for key in LimitKey if usage_window(key) is UsageWindow.DAY] == [
            key for key in LimitKey if key is not LimitKey.MONTHLY_HOOKS
        ]

    def test_pro_is_unlimited_everywhere(self):
        limits = PLAN_CONFIG[PlanId.PRO]["limits"]
        assert set(limits) == set(LimitKey)
        assert all(limit is None for limit in limits.values())

    def test_pro_unlocks_every_feature_flag(self):
        assert all(PLAN_CONFIG[PlanId.PRO]["features"][flag] for flag in FeatureFlag)
        assert not any(PLAN_CONFIG[PlanId.FREE]["features"].values())


class TestParsePlan:

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("PRO", PlanId.PRO),
            ("pro", PlanId.PRO),
            ("FREE", PlanId.FREE),
            (None, PlanId.FREE),
            ("ENTERPRISE", PlanId.FREE),
            ("", PlanId.FREE),
        ],
    )
    def test_parse_plan(self, raw, expected):
        assert parse_plan(raw) == expected


class TestCalculateUsageStatus:
    """Status is derived from the fraction of the limit still remaining."""

    @pytest.mark.parametrize(
        "used,limit,expected",
        [
            (0, 10, UsageStatus.OK),
            (6, 10, UsageStatus.OK),
            (7, 10, UsageStatus.WARNING),     # 30% left
            (8, 10, UsageStatus.CRITICAL),    # 20% left
            (9, 10, UsageStatus.CRITICAL),
            (10, 10, UsageStatus.BLOCKED),
            (12, 10, UsageStatus.BLOCKED),
            (0, 1, UsageStatus.OK),
            (1, 1, UsageStatus.BLOCKED),
            (0, 3, UsageStatus.OK),
            (2, 3, UsageStatus.OK),           # 33% left
            (3, 3, UsageStatus.BLOCKED),
            (0, 0, UsageStatus.BLOCKED),
            (0, -1, UsageStatus.BLOCKED),
        ],
    )
    def test_thresholds(self, used, limit, expected):
        assert calculate_usage_status(used, limit) == expected


class TestLimitMessage:

    def test_localized(self):
        assert "PRO" in limit_message(LimitKey.AB_TESTS, "en")
        assert limit_message(LimitKey.AB_TESTS, "tr") != limit_message(LimitKey.AB_TESTS, "en")

    def test_every_limit_has_both_locales(self):
        for key in LimitKey:
            assert limit_message(key, "en") != limit_message(key, "tr")

    def test_unknown_locale_falls_back_to_english(self):
        assert limit_message(LimitKey.VIDEO_ANALYSIS, "de") == limit_message(LimitKey.VIDEO_ANALYSIS, "en")


class TestFeatureCheck:

    def test_from_usage(self):
        check = FeatureCheck.from_usage(LimitKey.AB_TESTS, used=2, limit=3)
        assert check.allowed is True
        assert check.remaining == 1
        assert check.status == UsageStatus.OK

    def test_remaining_never_negative(self):
        check = FeatureCheck.from_usage(LimitKey.AB_TESTS, used=5, limit=3)
        assert check.allowed is False
        assert check.remaining == 0
        assert check.status == UsageStatus.BLOCKED

    def test_unlimited(self):
        check = FeatureCheck.unlimited_for(LimitKey.CAPTION_GENERATIONS, used=40)
        assert check.allowed is True
        assert check.unlimited is True
        assert check.usage_payload() == {"limit": None, "remaining": None}

    def test_blocked_for_missing_profile(self):
        check = FeatureCheck.blocked_for(LimitKey.VIDEO_ANALYSIS)
        assert check.allowed is False
        assert check.unlimited is False
        assert (check.limit, check.remaining) == (0, 0)

    def test_with_credit_keeps_daily_picture(self):
        blocked = FeatureCheck.from_usage(LimitKey.VIDEO_ANALYSIS, used=1, limit=1)
        paid = blocked.with_credit()

        assert paid.allowed is True
        assert paid.used_credit is True
        assert paid.status == UsageStatus.BLOCKED
        assert paid.usage_payload() == {"limit": 1, "remaining": 0}
        assert blocked.used_credit is False
