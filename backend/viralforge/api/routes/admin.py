"""
Admin Routes

Super-admin console: inspect a user, change plan/comp/kill switch, reset a
day's quota and clear the category cache. Every route requires a session
whose email is in SUPERADMIN_EMAILS (401 without a session, 403 otherwise).
"""

import logging
from datetime import date
from typing import Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from viralforge.api.dependencies import (
    AdminUser,
    PlanResolverDep,
    ProfileRepoDep,
    UsageRepoDep,
    require_admin,
)
from viralforge.domain.calendar import CalendarDay
from viralforge.domain.plans import PlanId
from viralforge.infrastructure.db.models.profile import Profile, ProfileRead
from viralforge.infrastructure.db.repositories.profile_repository import ProfileRepository
from viralforge.infrastructure.exceptions import NotFoundError, ValidationError
from viralforge.services.plan_resolver import PlanResolver
from viralforge.services.usage_counter import UsageCounter


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


class PlanUpdate(BaseModel):
    plan: PlanId


class CompUpdate(BaseModel):
    comped_until: Optional[Union[date, str]] = None


class DisableUpdate(BaseModel):
    is_disabled: bool


class ResetQuotaRequest(BaseModel):
    date: Optional[str] = None


def parse_day(raw: Union[date, str, None], field: str) -> Optional[CalendarDay]:
    """Parse a client date, mapping bad input to a 400."""
    try:
        return CalendarDay.coerce(raw)
    except ValueError as e:
        raise ValidationError(str(e), {"field": field})


async def load_profile(profiles: ProfileRepository, user_id: UUID) -> Profile:
    profile = await profiles.get_by_id(user_id)
    if profile is None:
        raise NotFoundError("User not found", resource="profile")
    return profile


def admin_view(profile: Profile, resolver: PlanResolver) -> dict:
    entitlements = resolver.resolve_profile(profile)
    return {
        **ProfileRead.model_validate(profile).model_dump(mode="json"),
        "effective_plan": entitlements.effective_plan.value,
        "is_comped": entitlements.is_comped,
    }


@router.get("/users/{user_id}")
async def get_user(
    user_id: UUID,
    profiles: ProfileRepoDep,
    usage: UsageRepoDep,
    resolver: PlanResolverDep,
):
    """Profile plus today's usage counters."""
    profile = await load_profile(profiles, user_id)
    today = resolver.today()
    return {
        "profile": admin_view(profile, resolver),
        "usage": {
            "date": today.isoformat(),
            "counters": await UsageCounter(usage).get_day_usage(user_id, today),
        },
    }


@router.post("/users/{user_id}/plan")
async def set_plan(
    user_id: UUID,
    body: PlanUpdate,
    admin: AdminUser,
    profiles: ProfileRepoDep,
    resolver: PlanResolverDep,
):
    await load_profile(profiles, user_id)
    profile = await profiles.update_fields(user_id, plan=body.plan.value)
    logger.info(f"Admin {admin.email} set plan {body.plan.value} for {user_id}")
    return {"success": True, "profile": admin_view(profile, resolver)}


@router.post("/users/{user_id}/comped")
async def set_comped(
    user_id: UUID,
    body: CompUpdate,
    admin: AdminUser,
    profiles: ProfileRepoDep,
    resolver: PlanResolverDep,
):
    """Grant PRO through `comped_until` (inclusive), or clear it with null."""
    comp_day = parse_day(body.comped_until, "comped_until")
    await load_profile(profiles, user_id)
    profile = await profiles.update_fields(
        user_id,
        comped_until=comp_day.value if comp_day else None,
    )
    logger.info(f"Admin {admin.email} set comped_until={comp_day} for {user_id}")
    return {"success": True, "profile": admin_view(profile, resolver)}


@router.post("/users/{user_id}/disable")
async def set_disabled(
    user_id: UUID,
    body: DisableUpdate,
    admin: AdminUser,
    profiles: ProfileRepoDep,
    resolver: PlanResolverDep,
):
    await load_profile(profiles, user_id)
    profile = await profiles.update_fields(user_id, is_disabled=body.is_disabled)
    logger.info(f"Admin {admin.email} set is_disabled={body.is_disabled} for {user_id}")
    return {"success": True, "profile": admin_view(profile, resolver)}


@router.post("/users/{user_id}/reset-quota")
async def reset_quota(
    user_id: UUID,
    admin: AdminUser,
    profiles: ProfileRepoDep,
    usage: UsageRepoDep,
    resolver: PlanResolverDep,
    body: Optional[ResetQuotaRequest] = None,
):
    """Delete the user's counters for one day (default: today, UTC)."""
    raw_date = body.date if body else None
    day = parse_day(raw_date, "date") if raw_date is not None else resolver.today()

    await load_profile(profiles, user_id)
    deleted = await UsageCounter(usage).reset(user_id, day)
    logger.info(f"Admin {admin.email} reset quota for {user_id} on {day} ({deleted} counters)")
    return {"success": True, "user_id": str(user_id), "date": day.isoformat(), "deleted": deleted}


@router.post("/categories/invalidate")
async def invalidate_categories(request: Request, admin: AdminUser):
    request.app.state.category_cache.invalidate()
    logger.info(f"Admin {admin.email} cleared the category cache")
    return {"success": True}
