"""
Integration tests for the cron endpoints and the batch jobs behind them.

Each job processes users one at a time; one user's failure is counted and
does not stop the batch.
"""

from datetime import date

import pytest

from viralforge.domain.calendar import CalendarDay
from viralforge.domain.content import SuggestionIdea
from viralforge.domain.plans import PlanId
from viralforge.infrastructure.db.models import ActivityLog, DailySuggestion, WeeklyInsight
from viralforge.infrastructure.exceptions import AIServiceError, UpstreamError
from viralforge.services.insights import week_start_for


CRON_HEADERS = {"Authorization": "Bearer test-cron-secret"}


def batch(total=0, success=0, failed=0, skipped=0) -> dict:
    return {"total": total, "success": success, "failed": failed, "skipped": skipped}


class TestCronAuth:

    @pytest.mark.parametrize(
        "path",
        ["/api/cron/daily-suggestions", "/api/cron/weekly-insights", "/api/cron/persona-recalculate"],
    )
    def test_missing_secret(self, client, path):
        assert client.post(path).status_code == 401
        assert client.get(path).status_code == 401

    def test_wrong_secret(self, client):
        resp = client.post(
            "/api/cron/daily-suggestions",
            headers={"Authorization": "Bearer guessed-secret"},
        )
        assert resp.status_code == 401

    def test_get_is_accepted(self, client):
        resp = client.get("/api/cron/daily-suggestions", headers=CRON_HEADERS)
        assert resp.status_code == 200
        assert resp.json() == batch()


class TestDailySuggestionJob:

    @pytest.fixture
    def ideas_by_niche(self, mock_content_service):
        async def generate(count, locale="tr", niche=None):
            if niche == "broken":
                raise AIServiceError("Gemini unavailable")
            if niche == "empty":
                return []
            return [SuggestionIdea(title=f"Idea {i}", hook=f"Hook {i}") for i in range(count)]

        mock_content_service.generate_daily_suggestions.side_effect = generate
        return mock_content_service

    def test_aggregate_counts(self, client, make_profile, insert_rows, fetch, today, ideas_by_niche):
        fresh = make_profile(niche="fitness")
        pro = make_profile(niche="cooking", plan=PlanId.PRO.value)
        make_profile(niche="broken")
        make_profile(niche="empty")
        make_profile(niche="fitness", is_disabled=True)
        already_done = make_profile(niche="fitness")
        insert_rows(
            DailySuggestion(
                user_id=already_done,
                suggestion_date=today.value,
                title="Existing",
                hook="Existing hook",
            )
        )

        resp = client.post("/api/cron/daily-suggestions", headers=CRON_HEADERS)

        assert resp.status_code == 200
        assert resp.json() == batch(total=5, success=2, failed=1, skipped=2)
        assert len(fetch(DailySuggestion, user_id=fresh)) == 1
        assert len(fetch(DailySuggestion, user_id=pro)) == 3
        assert len(fetch(DailySuggestion, user_id=already_done)) == 1

    def test_second_run_skips_everyone(self, client, make_profile, ideas_by_niche):
        make_profile(niche="fitness")
        make_profile(niche="travel")

        client.post("/api/cron/daily-suggestions", headers=CRON_HEADERS)
        resp = client.post("/api/cron/daily-suggestions", headers=CRON_HEADERS)

        assert resp.json() == batch(total=2, skipped=2)


class TestWeeklyInsightJob:

    @pytest.fixture
    def activity(self, insert_rows):
        def _log(user_id, count):
            insert_rows(*[ActivityLog(user_id=user_id, action="abtest_created") for _ in range(count)])
        return _log

    def test_only_active_pro_users(self, client, make_profile, activity, fetch, today, mock_content_service):
        busy_pro = make_profile(plan=PlanId.PRO.value)
        comped = make_profile(comped_until=today.value)
        quiet_pro = make_profile(plan=PlanId.PRO.value)
        free = make_profile()
        activity(busy_pro, 4)
        activity(comped, 3)
        activity(quiet_pro, 2)
        activity(free, 10)

        resp = client.post("/api/cron/weekly-insights", headers=CRON_HEADERS)

        assert resp.json() == batch(total=3, success=2, skipped=1)
        insight = fetch(WeeklyInsight, user_id=busy_pro)[0]
        assert insight.week_start == week_start_for(today).value
        assert insight.activity_count == 4
        assert insight.stats == {"abtest_created": 4}
        assert fetch(WeeklyInsight, user_id=free) == []
        mock_content_service.summarize_week.assert_any_await({"abtest_created": 4}, locale="tr")

    def test_one_insight_per_week(self, client, make_profile, activity):
        user_id = make_profile(plan=PlanId.PRO.value)
        activity(user_id, 5)

        client.post("/api/cron/weekly-insights", headers=CRON_HEADERS)
        resp = client.post("/api/cron/weekly-insights", headers=CRON_HEADERS)

        assert resp.json() == batch(total=1, skipped=1)

    def test_model_failure_is_isolated(self, client, make_profile, activity, fetch, mock_content_service):
        first = make_profile(plan=PlanId.PRO.value, locale="en")
        second = make_profile(plan=PlanId.PRO.value, locale="tr")
        activity(first, 3)
        activity(second, 3)

        async def summarize(counts, locale="tr"):
            if locale == "en":
                raise AIServiceError("Gemini unavailable")
            return mock_content_service.summarize_week.return_value

        mock_content_service.summarize_week.side_effect = summarize

        resp = client.post("/api/cron/weekly-insights", headers=CRON_HEADERS)

        assert resp.json() == batch(total=2, success=1, failed=1)
        assert fetch(WeeklyInsight, user_id=first) == []
        assert len(fetch(WeeklyInsight, user_id=second)) == 1


class TestPersonaJob:

    def test_failures_are_counted(self, client, make_profile, mock_rpc_service):
        healthy = make_profile(plan=PlanId.PRO.value)
        broken = make_profile(plan=PlanId.PRO.value)
        make_profile()

        async def update(user_id):
            if user_id == broken:
                raise UpstreamError("RPC update_persona_from_events failed")

        mock_rpc_service.update_persona_from_events.side_effect = update

        resp = client.get("/api/cron/persona-recalculate", headers=CRON_HEADERS)

        assert resp.json() == batch(total=2, success=1, failed=1)
        awaited = {call.args[0] for call in mock_rpc_service.update_persona_from_events.await_args_list}
        assert awaited == {healthy, broken}
        mock_rpc_service.normalize_persona_weights.assert_awaited_once()


def test_week_start_is_monday():
    sunday = CalendarDay(date(2025, 6, 15))
    assert week_start_for(sunday).isoformat() == "2025-06-09"
    assert week_start_for(sunday.shift(1)).isoformat() == "2025-06-16"
