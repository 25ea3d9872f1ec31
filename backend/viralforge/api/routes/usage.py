"""
Usage Routes

Quota picture for the account page and upgrade prompts.
"""

from fastapi import APIRouter

from viralforge.api.dependencies import CurrentUser, QuotaGateDep
from viralforge.domain.quota import UsageSummary
from viralforge.infrastructure.exceptions import NotFoundError


router = APIRouter(tags=["Usage"])


@router.get("/usage", response_model=UsageSummary)
async def get_usage(user: CurrentUser, gate: QuotaGateDep):
    summary = await gate.usage_summary(user.id)
    if summary is None:
        raise NotFoundError("Profile not found", resource="profile")
    return summary
