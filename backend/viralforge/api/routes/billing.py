"""
Billing Routes

Starts Stripe Checkout for the PRO plan. The plan itself changes only when
the webhook confirms payment.
"""

import logging

from fastapi import APIRouter

from viralforge.api.dependencies import CurrentUser, ProfileRepoDep, StripeServiceDep
from viralforge.config.settings import get_settings
from viralforge.infrastructure.exceptions import NotFoundError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])


@router.post("/checkout")
async def create_checkout(
    user: CurrentUser,
    profiles: ProfileRepoDep,
    stripe_service: StripeServiceDep,
):
    profile = await profiles.get_by_id(user.id)
    if profile is None:
        raise NotFoundError("Profile not found", resource="profile")

    customer = await stripe_service.get_or_create_customer(
        str(user.id),
        profile.email or user.email,
        existing_customer_id=profile.stripe_customer_id,
    )
    if customer.id != profile.stripe_customer_id:
        await profiles.update_fields(user.id, stripe_customer_id=customer.id)

    frontend_url = get_settings().frontend_url
    session = await stripe_service.create_checkout_session(
        customer_id=customer.id,
        user_id=str(user.id),
        success_url=f"{frontend_url}/billing/success",
        cancel_url=f"{frontend_url}/pricing",
    )
    return {"url": session.url, "session_id": session.id}
