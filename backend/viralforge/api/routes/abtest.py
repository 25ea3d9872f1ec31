"""
A/B Test Routes

Metered by the `ab_tests` daily quota. The prediction is charged only after
it succeeds; a model failure returns 502 and leaves the counter untouched.
"""

import logging

from fastapi import APIRouter

from viralforge.api.dependencies import (
    ABTestRepoDep,
    ActivityLoggerDep,
    ContentServiceDep,
    CurrentUser,
    QuotaGateDep,
    RPCServiceDep,
)
from viralforge.domain.content import ABTestRequest
from viralforge.domain.plans import LimitKey
from viralforge.infrastructure.db.models.ab_test import ABTest


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/abtest", tags=["A/B Tests"])


@router.post("")
async def create_ab_test(
    body: ABTestRequest,
    user: CurrentUser,
    gate: QuotaGateDep,
    tests: ABTestRepoDep,
    content: ContentServiceDep,
    activity: ActivityLoggerDep,
    rpc: RPCServiceDep,
):
    """Predict the stronger of two hooks, captions or covers."""
    check = await gate.require(user.id, LimitKey.AB_TESTS, body.locale)

    test = await tests.create(
        ABTest(
            user_id=user.id,
            test_type=body.type,
            option_a=body.option_a,
            option_b=body.option_b,
            locale=body.locale,
        )
    )

    result = await content.predict_ab_test(body.option_a, body.option_b, body.type, body.locale)
    await tests.save_result(test.id, result.winner, result.confidence, result.model_dump())

    usage = await gate.record_usage(user.id, check)

    await activity.log(
        user.id,
        "abtest_created",
        entity_type="ab_test",
        entity_id=test.id,
        metadata={"type": body.type, "winner": result.winner},
        locale=body.locale,
    )
    await rpc.complete_onboarding_step(user.id, "complete_first_abtest")

    return {
        "success": True,
        "id": str(test.id),
        "status": check.status.value,
        "result": result.model_dump(),
        "usage": usage.usage_payload(),
    }
