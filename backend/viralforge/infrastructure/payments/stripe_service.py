"""
Stripe Payment Service

Hosted Checkout for the PRO subscription and webhook signature
verification. Plan changes themselves happen in the webhook route.
"""

import logging
from typing import Optional

import stripe
from stripe import StripeError

from viralforge.config.settings import get_settings
from viralforge.infrastructure.exceptions import ConfigurationError, UpstreamError


logger = logging.getLogger(__name__)


class StripeServiceError(UpstreamError):
    """Raised when a Stripe API call fails."""


class WebhookSignatureError(Exception):
    """Raised when a webhook payload or signature does not verify."""


class StripeService:
    """Stateless wrapper over the Stripe SDK."""

    def __init__(self):
        settings = get_settings()
        self._api_key = settings.stripe_secret_key
        self._webhook_secret = settings.stripe_webhook_secret
        self._pro_price_id = settings.stripe_pro_price_id

        if self._api_key:
            stripe.api_key = self._api_key

    # =========================================================================
    # Customer Management
    # =========================================================================

    async def get_or_create_customer(
        self,
        user_id: str,
        email: Optional[str],
        existing_customer_id: Optional[str] = None,
    ) -> stripe.Customer:
        """Reuse the stored customer unless Stripe reports it deleted."""
        if existing_customer_id:
            try:
                customer = stripe.Customer.retrieve(existing_customer_id)
                if not customer.get("deleted"):
                    return customer
            except StripeError:
                logger.warning(f"Customer {existing_customer_id} not found, creating new")

        try:
            customer = stripe.Customer.create(
                email=email,
                metadata={"user_id": user_id, "source": "viralforge"},
            )
            logger.info(f"Created Stripe customer {customer.id} for user {user_id}")
            return customer
        except StripeError as e:
            logger.error(f"Failed to create Stripe customer: {e}")
            raise StripeServiceError(f"Failed to create customer: {e.user_message}", original_error=e)

    # =========================================================================
    # Checkout Session
    # =========================================================================

    async def create_checkout_session(
        self,
        customer_id: str,
        user_id: str,
        success_url: str,
        cancel_url: str,
    ) -> stripe.checkout.Session:
        """
        Create a hosted Checkout Session for the PRO subscription.

        The user id travels in the session metadata so the
        `checkout.session.completed` webhook can find the profile.
        """
        if not self._pro_price_id:
            raise ConfigurationError(
                "No Stripe price configured for PRO",
                missing_keys=["STRIPE_PRO_PRICE_ID"],
            )

        try:
            session = stripe.checkout.Session.create(
                customer=customer_id,
                line_items=[{"price": self._pro_price_id, "quantity": 1}],
                mode="subscription",
                success_url=f"{success_url}?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=cancel_url,
                allow_promotion_codes=True,
                client_reference_id=user_id,
                metadata={"user_id": user_id, "plan": "PRO"},
                subscription_data={"metadata": {"user_id": user_id}},
            )
            logger.info(f"Created checkout session {session.id} for user {user_id}")
            return session
        except StripeError as e:
            logger.error(f"Failed to create checkout session: {e}")
            raise StripeServiceError(f"Failed to create checkout: {e.user_message}", original_error=e)

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    def verify_webhook_signature(self, payload: bytes, signature: str) -> stripe.Event:
        """
        Verify the Stripe-Signature header and construct the event.

        Raises:
            ConfigurationError: no webhook secret configured
            WebhookSignatureError: payload or signature invalid
        """
        if not self._webhook_secret:
            raise ConfigurationError(
                "Stripe webhook secret is not configured",
                missing_keys=["STRIPE_WEBHOOK_SECRET"],
            )
        try:
            return stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except ValueError as e:
            raise WebhookSignatureError(f"Invalid payload: {e}")
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError(f"Invalid signature: {e}")


_stripe_service_instance: Optional[StripeService] = None


def get_stripe_service() -> StripeService:
    """Get or create Stripe service singleton."""
    global _stripe_service_instance
    if _stripe_service_instance is None:
        _stripe_service_instance = StripeService()
    return _stripe_service_instance
