"""
Integration Tests for Webhooks and Billing (Stripe)

Verifies:
- Signature verification failure (400)
- Successful event processing updates the profile plan
- Idempotency (prevent double processing)
- Checkout session creation
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from viralforge.infrastructure.db.models import ProcessedWebhookEvent, Profile
from viralforge.infrastructure.payments.stripe_service import WebhookSignatureError


SIGNED = {"stripe-signature": "t=1,v1=test"}


def stripe_event(event_id, event_type, obj):
    return {"id": event_id, "type": event_type, "data": {"object": obj}}


class TestStripeWebhooks:

    def test_webhook_missing_signature(self, client):
        """Webhook without signature header should fail 400."""
        response = client.post("/api/webhooks/stripe", json={"id": "evt_123"})
        assert response.status_code == 400
        assert response.json()["message"] == "Missing Stripe signature"

    def test_webhook_invalid_signature(self, client, mock_stripe_service):
        mock_stripe_service.verify_webhook_signature.side_effect = WebhookSignatureError("Bad sig")

        response = client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid signature"

    def test_checkout_completed_upgrades_to_pro(self, client, make_profile, fetch, mock_stripe_service):
        user_id = make_profile()
        mock_stripe_service.verify_webhook_signature.return_value = stripe_event(
            "evt_checkout_ok",
            "checkout.session.completed",
            {"id": "cs_123", "customer": "cus_test", "metadata": {"user_id": str(user_id)}},
        )

        response = client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED)

        assert response.status_code == 200
        assert response.json() == {"status": "success"}
        profile = fetch(Profile, id=user_id)[0]
        assert profile.plan == "PRO"
        assert profile.stripe_customer_id == "cus_test"
        assert profile.subscription_status == "active"
        assert len(fetch(ProcessedWebhookEvent, event_id="evt_checkout_ok")) == 1

    def test_duplicate_delivery_is_ignored(self, client, make_profile, fetch, mock_stripe_service):
        user_id = make_profile(stripe_customer_id="cus_dup", plan="PRO")
        mock_stripe_service.verify_webhook_signature.return_value = stripe_event(
            "evt_cancel",
            "customer.subscription.deleted",
            {"customer": "cus_dup"},
        )

        first = client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED)
        assert first.json() == {"status": "success"}
        assert fetch(Profile, id=user_id)[0].plan == "FREE"

        second = client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED)
        assert second.json() == {"status": "already_processed"}
        assert len(fetch(ProcessedWebhookEvent, event_id="evt_cancel")) == 1

    def test_subscription_status_mirrored(self, client, make_profile, fetch, mock_stripe_service):
        user_id = make_profile(stripe_customer_id="cus_status", plan="PRO")
        mock_stripe_service.verify_webhook_signature.return_value = stripe_event(
            "evt_failed_payment",
            "invoice.payment_failed",
            {"customer": "cus_status"},
        )

        client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED)

        profile = fetch(Profile, id=user_id)[0]
        assert profile.subscription_status == "past_due"
        assert profile.plan == "PRO"

    @pytest.mark.parametrize("status", ["canceled", "unpaid", "incomplete_expired"])
    def test_ended_subscription_downgrades(self, client, make_profile, fetch, mock_stripe_service, status):
        user_id = make_profile(stripe_customer_id=f"cus_{status}", plan="PRO")
        mock_stripe_service.verify_webhook_signature.return_value = stripe_event(
            f"evt_{status}",
            "customer.subscription.updated",
            {"customer": f"cus_{status}", "status": status},
        )

        response = client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED)

        assert response.json() == {"status": "success"}
        profile = fetch(Profile, id=user_id)[0]
        assert profile.plan == "FREE"
        assert profile.subscription_status == status

    @pytest.mark.parametrize("status", ["active", "trialing"])
    def test_live_subscription_restores_pro(self, client, make_profile, fetch, mock_stripe_service, status):
        user_id = make_profile(stripe_customer_id=f"cus_{status}", subscription_status="unpaid")
        mock_stripe_service.verify_webhook_signature.return_value = stripe_event(
            f"evt_{status}",
            "customer.subscription.updated",
            {"customer": f"cus_{status}", "status": status},
        )

        client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED)

        profile = fetch(Profile, id=user_id)[0]
        assert profile.plan == "PRO"
        assert profile.subscription_status == status

    def test_past_due_keeps_plan(self, client, make_profile, fetch, mock_stripe_service):
        user_id = make_profile(stripe_customer_id="cus_late", plan="PRO")
        mock_stripe_service.verify_webhook_signature.return_value = stripe_event(
            "evt_late",
            "customer.subscription.updated",
            {"customer": "cus_late", "status": "past_due"},
        )

        client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED)

        profile = fetch(Profile, id=user_id)[0]
        assert profile.plan == "PRO"
        assert profile.subscription_status == "past_due"

    def test_unhandled_event_is_acknowledged(self, client, fetch, mock_stripe_service):
        mock_stripe_service.verify_webhook_signature.return_value = stripe_event(
            "evt_other", "customer.created", {"id": "cus_new"}
        )

        response = client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED)

        assert response.json() == {"status": "success"}
        assert len(fetch(ProcessedWebhookEvent, event_id="evt_other")) == 1

    def test_handler_error_is_not_marked_processed(self, client, fetch, mock_stripe_service):
        mock_stripe_service.verify_webhook_signature.return_value = stripe_event(
            "evt_bad_user",
            "checkout.session.completed",
            {"customer": "cus_x", "metadata": {"user_id": "not-a-uuid"}},
        )

        response = client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED)

        assert response.status_code == 500
        assert response.json()["error"] == "internal_error"
        assert response.json()["message"] == "Webhook processing failed"
        assert fetch(ProcessedWebhookEvent, event_id="evt_bad_user") == []

    def test_failed_event_is_applied_on_redelivery(self, client, make_profile, fetch, mock_stripe_service):
        user_id = make_profile()
        bad = stripe_event(
            "evt_retry",
            "checkout.session.completed",
            {"customer": "cus_retry", "metadata": {"user_id": "not-a-uuid"}},
        )
        mock_stripe_service.verify_webhook_signature.return_value = bad
        assert client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED).status_code == 500

        bad["data"]["object"]["metadata"]["user_id"] = str(user_id)
        retried = client.post("/api/webhooks/stripe", content=b"{}", headers=SIGNED)

        assert retried.json() == {"status": "success"}
        assert fetch(Profile, id=user_id)[0].plan == "PRO"


class TestCheckout:

    @pytest.fixture
    def stripe_calls(self, mock_stripe_service):
        mock_stripe_service.get_or_create_customer = AsyncMock(return_value=SimpleNamespace(id="cus_new"))
        mock_stripe_service.create_checkout_session = AsyncMock(
            return_value=SimpleNamespace(id="cs_test", url="https://checkout.stripe.test/cs_test")
        )
        return mock_stripe_service

    def test_checkout_stores_customer(self, client, auth, make_profile, fetch, stripe_calls):
        user_id = make_profile(email="buyer@viralforge.test")
        auth.login(user_id, "buyer@viralforge.test")

        response = client.post("/api/billing/checkout")

        assert response.status_code == 200
        assert response.json() == {
            "url": "https://checkout.stripe.test/cs_test",
            "session_id": "cs_test",
        }
        assert fetch(Profile, id=user_id)[0].stripe_customer_id == "cus_new"
        kwargs = stripe_calls.create_checkout_session.await_args.kwargs
        assert kwargs["customer_id"] == "cus_new"
        assert kwargs["user_id"] == str(user_id)

    def test_checkout_requires_session(self, client, stripe_calls):
        assert client.post("/api/billing/checkout").status_code == 401
