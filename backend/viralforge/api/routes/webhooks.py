"""
Stripe Webhook Handler

Keeps the profile's plan in sync with the Stripe subscription. Processing is
idempotent through the `processed_webhook_events` table, so Stripe retries
and duplicate deliveries are acknowledged without being applied twice.

Handled events:
- checkout.session.completed: plan PRO, store the customer id
- customer.subscription.updated: mirror the status; active/trialing is PRO,
  canceled/unpaid/incomplete_expired is FREE, anything else keeps the plan
- customer.subscription.deleted: back to FREE
- invoice.payment_failed: mark past_due
"""

import logging
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Request

from viralforge.api.dependencies import (
    ProfileRepoDep,
    StripeServiceDep,
    WebhookEventRepoDep,
)
from viralforge.domain.plans import PlanId
from viralforge.infrastructure.db.dependencies import SessionDep
from viralforge.infrastructure.db.repositories.profile_repository import ProfileRepository
from viralforge.infrastructure.exceptions import InternalError, ValidationError
from viralforge.infrastructure.payments.stripe_service import WebhookSignatureError


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhooks"])

# past_due and incomplete keep the current plan while Stripe retries payment
PRO_SUBSCRIPTION_STATUSES = frozenset({"active", "trialing"})
ENDED_SUBSCRIPTION_STATUSES = frozenset({"canceled", "unpaid", "incomplete_expired"})


@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    session: SessionDep,
    stripe_service: StripeServiceDep,
    events: WebhookEventRepoDep,
    profiles: ProfileRepoDep,
):
    """
    Verify, deduplicate and apply a Stripe event.

    Returns 200 once the event is handled or known. A handler failure rolls
    back its savepoint and answers 500 so Stripe redelivers the event.
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    if not signature:
        raise ValidationError("Missing Stripe signature")

    try:
        event = stripe_service.verify_webhook_signature(payload, signature)
    except WebhookSignatureError as e:
        logger.error(f"Webhook signature verification failed: {e}")
        raise ValidationError("Invalid signature")

    event_id = event.get("id")
    event_type = event.get("type")

    if await events.is_processed(event_id):
        logger.info(f"Event {event_id} already processed, skipping")
        return {"status": "already_processed"}

    logger.info(f"Processing webhook event: {event_type} ({event_id})")
    handler = EVENT_HANDLERS.get(event_type)

    try:
        async with session.begin_nested():
            if handler is None:
                logger.debug(f"Unhandled event type: {event_type}")
            else:
                await handler(event["data"]["object"], profiles)
            await events.mark_processed(event_id, event_type)
    except Exception as e:
        logger.error(f"Error processing webhook {event_type}: {e}")
        raise InternalError("Webhook processing failed", {"event_id": event_id}, e)

    return {"status": "success"}


# =============================================================================
# Event Handlers
# =============================================================================

async def handle_checkout_completed(obj: Dict[str, Any], profiles: ProfileRepository) -> None:
    metadata = obj.get("metadata") or {}
    raw_user_id = metadata.get("user_id") or obj.get("client_reference_id")
    if not raw_user_id:
        logger.error("Checkout completed without user_id in metadata")
        return

    profile = await profiles.update_fields(
        UUID(str(raw_user_id)),
        plan=PlanId.PRO.value,
        stripe_customer_id=obj.get("customer"),
        subscription_status="active",
    )
    if profile is None:
        logger.error(f"Checkout completed for unknown user {raw_user_id}")
        return
    logger.info(f"User {raw_user_id} upgraded to PRO")


async def _update_by_customer(
    obj: Dict[str, Any],
    profiles: ProfileRepository,
    **values: Any,
) -> None:
    customer_id = obj.get("customer")
    profile = await profiles.get_by_stripe_customer_id(customer_id) if customer_id else None
    if profile is None:
        logger.warning(f"No profile for Stripe customer {customer_id}")
        return
    await profiles.update_fields(profile.id, **values)
    logger.info(f"Profile {profile.id} updated from Stripe: {values}")


async def handle_subscription_updated(obj: Dict[str, Any], profiles: ProfileRepository) -> None:
    status = obj.get("status")
    values: Dict[str, Any] = {"subscription_status": status}
    if status in PRO_SUBSCRIPTION_STATUSES:
        values["plan"] = PlanId.PRO.value
    elif status in ENDED_SUBSCRIPTION_STATUSES:
        values["plan"] = PlanId.FREE.value
    await _update_by_customer(obj, profiles, **values)


async def handle_subscription_deleted(obj: Dict[str, Any], profiles: ProfileRepository) -> None:
    await _update_by_customer(
        obj,
        profiles,
        plan=PlanId.FREE.value,
        subscription_status="canceled",
    )


async def handle_invoice_payment_failed(obj: Dict[str, Any], profiles: ProfileRepository) -> None:
    await _update_by_customer(obj, profiles, subscription_status="past_due")


EVENT_HANDLERS = {
    "checkout.session.completed": handle_checkout_completed,
    "customer.subscription.updated": handle_subscription_updated,
    "customer.subscription.deleted": handle_subscription_deleted,
    "invoice.payment_failed": handle_invoice_payment_failed,
}
