"""
Daily Suggestion Routes

Reading today's ideas is free; on-demand generation is metered by the
`daily_suggestions` quota.
"""

from fastapi import APIRouter

from viralforge.api.dependencies import (
    ActivityLoggerDep,
    CurrentUser,
    DailySuggestionServiceDep,
    ProfileRepoDep,
    QuotaGateDep,
)
from viralforge.domain.content import GenerateSuggestionsRequest, UseSuggestionRequest
from viralforge.domain.plans import LimitKey
from viralforge.infrastructure.exceptions import NotFoundError, UpstreamError


router = APIRouter(prefix="/daily-suggestions", tags=["Daily Suggestions"])


@router.get("")
async def list_daily_suggestions(user: CurrentUser, service: DailySuggestionServiceDep):
    suggestions = await service.list_today(user.id)
    return {
        "date": service.today().isoformat(),
        "suggestions": [s.model_dump(mode="json") for s in suggestions],
    }


@router.post("/generate")
async def generate_daily_suggestions(
    body: GenerateSuggestionsRequest,
    user: CurrentUser,
    gate: QuotaGateDep,
    profiles: ProfileRepoDep,
    service: DailySuggestionServiceDep,
    activity: ActivityLoggerDep,
):
    check = await gate.require(user.id, LimitKey.DAILY_SUGGESTIONS, body.locale)

    profile = await profiles.get_by_id(user.id)
    if profile is None:
        raise NotFoundError("Profile not found", resource="profile")

    created = await service.generate_for_profile(profile, niche=body.niche, locale=body.locale)
    if not created:
        raise UpstreamError("No suggestions were generated")

    usage = await gate.record_usage(user.id, check)
    await activity.log(
        user.id,
        "suggestions_generated",
        entity_type="daily_suggestion",
        metadata={"count": len(created)},
        locale=body.locale,
    )

    return {
        "success": True,
        "status": check.status.value,
        "suggestions": [s.model_dump(mode="json") for s in created],
        "usage": usage.usage_payload(),
    }


@router.post("/use")
async def use_daily_suggestion(
    body: UseSuggestionRequest,
    user: CurrentUser,
    service: DailySuggestionServiceDep,
    activity: ActivityLoggerDep,
):
    """Mark one of the caller's suggestions as used."""
    suggestion = await service.use_suggestion(user.id, body.suggestion_id, body.generation_id)
    await activity.log(
        user.id,
        "suggestion_used",
        entity_type="daily_suggestion",
        entity_id=suggestion.id,
        locale=body.locale,
    )
    return {"success": True, "suggestion": suggestion.model_dump(mode="json")}
