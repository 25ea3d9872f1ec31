"""
Caption Routes

Metered by the `caption_generations` daily quota.
"""

from fastapi import APIRouter

from viralforge.api.dependencies import (
    ActivityLoggerDep,
    ContentServiceDep,
    CurrentUser,
    QuotaGateDep,
)
from viralforge.domain.content import CaptionRequest
from viralforge.domain.plans import LimitKey


router = APIRouter(prefix="/captions", tags=["Captions"])


@router.post("/generate")
async def generate_caption(
    body: CaptionRequest,
    user: CurrentUser,
    gate: QuotaGateDep,
    content: ContentServiceDep,
    activity: ActivityLoggerDep,
):
    """Generate a caption (or only hashtags) for a hook."""
    check = await gate.require(user.id, LimitKey.CAPTION_GENERATIONS, body.locale)

    if body.hashtags_only:
        hashtags = await content.generate_hashtags(body.hook, body.platform, body.locale, body.niche)
        payload = {"hashtags": hashtags}
    else:
        result = await content.generate_caption(
            body.hook,
            body.platform,
            locale=body.locale,
            tone=body.tone,
            niche=body.niche,
            include_story_version=body.include_story_version,
        )
        payload = result.model_dump(exclude_none=True)

    usage = await gate.record_usage(user.id, check)
    await activity.log(
        user.id,
        "caption_generated",
        entity_type="caption",
        metadata={"platform": body.platform, "hashtags_only": body.hashtags_only},
        locale=body.locale,
    )

    return {
        "success": True,
        "status": check.status.value,
        "result": payload,
        "usage": usage.usage_payload(),
    }
