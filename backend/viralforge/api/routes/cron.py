"""
Cron Routes

Scheduled jobs, authenticated with `Authorization: Bearer <CRON_SECRET>`.
GET is accepted alongside POST because hosted schedulers issue GETs. Each
job processes users sequentially and returns only aggregate counts.
"""

from fastapi import APIRouter, Depends

from viralforge.api.dependencies import (
    DailySuggestionServiceDep,
    InsightServiceDep,
    verify_cron_secret,
)
from viralforge.services.batch import BatchResult


router = APIRouter(
    prefix="/cron",
    tags=["Cron"],
    dependencies=[Depends(verify_cron_secret)],
)


@router.api_route("/daily-suggestions", methods=["GET", "POST"], response_model=BatchResult)
async def run_daily_suggestions(service: DailySuggestionServiceDep):
    return await service.run_daily_job()


@router.api_route("/weekly-insights", methods=["GET", "POST"], response_model=BatchResult)
async def run_weekly_insights(service: InsightServiceDep):
    return await service.run_weekly_insights()


@router.api_route("/persona-recalculate", methods=["GET", "POST"], response_model=BatchResult)
async def run_persona_recalculation(service: InsightServiceDep):
    return await service.run_persona_recalculation()
