"""
Hook Routes

Metered by the `monthly_hooks` quota, which counts the whole calendar month.
One generation is one use, however many hooks it returns.
"""

from fastapi import APIRouter

from viralforge.api.dependencies import (
    ActivityLoggerDep,
    ContentServiceDep,
    CurrentUser,
    QuotaGateDep,
)
from viralforge.domain.content import HooksRequest
from viralforge.domain.plans import LimitKey


router = APIRouter(prefix="/hooks", tags=["Hooks"])


@router.post("/generate")
async def generate_hooks(
    body: HooksRequest,
    user: CurrentUser,
    gate: QuotaGateDep,
    content: ContentServiceDep,
    activity: ActivityLoggerDep,
):
    check = await gate.require(user.id, LimitKey.MONTHLY_HOOKS, body.locale)

    niche = body.category_slug or body.niche
    hooks = await content.generate_hooks(
        body.platform,
        locale=body.locale,
        niche=niche,
        tone=body.tone,
        goal=body.goal,
    )

    usage = await gate.record_usage(user.id, check)
    await activity.log(
        user.id,
        "hook_generated",
        entity_type="hooks",
        metadata={"platform": body.platform, "count": len(hooks), "niche": niche},
        locale=body.locale,
    )

    return {
        "success": True,
        "status": check.status.value,
        "hooks": hooks,
        "usage": usage.usage_payload(),
    }
