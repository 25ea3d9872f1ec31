"""
Rewards Shop Routes

XP spending runs entirely inside the `spend_xp_and_redeem` database function.
"""

from fastapi import APIRouter

from viralforge.api.dependencies import ActivityLoggerDep, CurrentUser, RPCServiceDep
from viralforge.domain.content import RedeemRequest, RedeemResult
from viralforge.infrastructure.exceptions import ValidationError


router = APIRouter(prefix="/shop", tags=["Shop"])


@router.post("/redeem", response_model=RedeemResult)
async def redeem_item(
    body: RedeemRequest,
    user: CurrentUser,
    rpc: RPCServiceDep,
    activity: ActivityLoggerDep,
):
    result = await rpc.spend_xp_and_redeem(user.id, body.item_id)
    if not result.success:
        raise ValidationError(result.error_message or "Redemption failed")

    await activity.log(
        user.id,
        "reward_redeemed",
        entity_type="shop_item",
        entity_id=body.item_id,
        metadata={
            "new_xp_balance": result.new_xp_balance,
            "new_analysis_credits": result.new_analysis_credits,
            "new_premium_hooks_until": result.new_premium_hooks_until,
        },
    )
    return result
