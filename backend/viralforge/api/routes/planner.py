"""
Content Planner Routes

Metered by the `content_plans` daily quota.
"""

from fastapi import APIRouter

from viralforge.api.dependencies import (
    ActivityLoggerDep,
    ContentServiceDep,
    CurrentUser,
    QuotaGateDep,
)
from viralforge.domain.content import ContentPlanRequest
from viralforge.domain.plans import LimitKey


router = APIRouter(prefix="/planner", tags=["Planner"])


@router.post("/generate")
async def generate_plan(
    body: ContentPlanRequest,
    user: CurrentUser,
    gate: QuotaGateDep,
    content: ContentServiceDep,
    activity: ActivityLoggerDep,
):
    """Draft a 7-day posting plan."""
    check = await gate.require(user.id, LimitKey.CONTENT_PLANS, body.locale)

    plan = await content.generate_content_plan(
        body.platform,
        locale=body.locale,
        niche=body.niche,
        goal=body.goal,
        audience=body.audience,
        tone=body.tone,
        frequency=body.frequency,
    )

    usage = await gate.record_usage(user.id, check)
    await activity.log(
        user.id,
        "planner_created",
        entity_type="content_plan",
        metadata={"platform": body.platform, "items": len(plan.items)},
        locale=body.locale,
    )

    return {
        "success": True,
        "status": check.status.value,
        "plan": plan.model_dump(exclude_none=True),
        "usage": usage.usage_payload(),
    }
