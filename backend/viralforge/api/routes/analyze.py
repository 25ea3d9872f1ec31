"""
Video Analysis Routes

Metered by the `video_analysis` daily quota with the analysis-credit
fallback. The analysis row moves `processing -> done | failed`. A failed
analysis is not counted against the daily quota and a credit spent on it is
given back; the failed status is kept, so the response is returned rather
than raised.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from viralforge.api.dependencies import (
    ActivityLoggerDep,
    AnalysisRepoDep,
    ContentServiceDep,
    CurrentUser,
    QuotaGateDep,
)
from viralforge.domain.content import AnalyzeRequest
from viralforge.domain.plans import LimitKey
from viralforge.infrastructure.db.models.video_analysis import AnalysisStatus
from viralforge.infrastructure.exceptions import NotFoundError, UpstreamError


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analysis"])


@router.post("/analyze")
async def analyze_video(
    body: AnalyzeRequest,
    user: CurrentUser,
    gate: QuotaGateDep,
    analyses: AnalysisRepoDep,
    content: ContentServiceDep,
    activity: ActivityLoggerDep,
):
    analysis = await analyses.get_owned(body.analysis_id, user.id)
    if analysis is None:
        raise NotFoundError("Analysis not found", resource="video_analysis")

    check = await gate.require(user.id, LimitKey.VIDEO_ANALYSIS, body.locale)

    platform = body.platform or analysis.platform
    await analyses.set_status(
        analysis.id,
        AnalysisStatus.PROCESSING,
        platform=platform,
        category_slug=body.category_slug or analysis.category_slug,
        used_credit=check.used_credit,
    )

    try:
        result = await content.analyze_video(
            platform,
            locale=body.locale,
            description=analysis.description,
            transcript=analysis.transcript,
            category_slug=body.category_slug or analysis.category_slug,
        )
    except UpstreamError as e:
        logger.error(f"Analysis {analysis.id} failed: {e.message}")
        await analyses.set_status(analysis.id, AnalysisStatus.FAILED, error_message=e.message)
        await gate.release(user.id, check)
        return JSONResponse(
            status_code=e.status_code,
            content={**e.to_dict(), "id": str(analysis.id), "status": AnalysisStatus.FAILED.value},
        )

    await analyses.set_status(
        analysis.id,
        AnalysisStatus.DONE,
        engagement_score=result.engagement_score,
        result=result.model_dump(),
    )
    usage = await gate.record_usage(user.id, check)
    await activity.log(
        user.id,
        "video_analyzed",
        entity_type="video_analysis",
        entity_id=analysis.id,
        metadata={"engagement_score": result.engagement_score, "used_credit": check.used_credit},
        locale=body.locale,
    )

    return {
        "success": True,
        "id": str(analysis.id),
        "status": AnalysisStatus.DONE.value,
        "used_credit": check.used_credit,
        "result": result.model_dump(),
        "usage": usage.usage_payload(),
    }
