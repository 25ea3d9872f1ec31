"""
Unit tests for the Supabase RPC and Stripe service wrappers.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
import stripe

from viralforge.infrastructure.exceptions import ConfigurationError, UpstreamError
from viralforge.infrastructure.payments.stripe_service import StripeService, WebhookSignatureError
from viralforge.infrastructure.supabase.rpc_service import SupabaseRPCService


@pytest.fixture
def supabase_client():
    client = MagicMock()
    client.rpc.return_value.execute.return_value = SimpleNamespace(data=None)
    return client


@pytest.fixture
def rpc(supabase_client):
    return SupabaseRPCService(client=supabase_client)


class TestSupabaseRPCService:

    async def test_redeem_reads_first_row(self, rpc, supabase_client):
        user_id = uuid4()
        supabase_client.rpc.return_value.execute.return_value = SimpleNamespace(
            data=[{"success": True, "new_xp_balance": 40, "new_analysis_credits": 3}]
        )

        result = await rpc.spend_xp_and_redeem(user_id, "analysis_credit_pack")

        assert result.success is True
        assert result.new_analysis_credits == 3
        supabase_client.rpc.assert_called_once_with(
            "spend_xp_and_redeem",
            {"p_user_id": str(user_id), "p_item_id": "analysis_credit_pack"},
        )

    async def test_redeem_without_rows(self, rpc):
        with pytest.raises(UpstreamError):
            await rpc.spend_xp_and_redeem(uuid4(), "analysis_credit_pack")

    async def test_call_failure_is_upstream_error(self, rpc, supabase_client):
        supabase_client.rpc.return_value.execute.side_effect = RuntimeError("connection refused")

        with pytest.raises(UpstreamError) as exc_info:
            await rpc.update_persona_from_events(uuid4())

        assert exc_info.value.details == {"rpc": "update_persona_from_events"}

    async def test_onboarding_step_is_fire_and_forget(self, rpc, supabase_client):
        assert await rpc.complete_onboarding_step(uuid4(), "complete_first_abtest") is True

        supabase_client.rpc.return_value.execute.side_effect = RuntimeError("duplicate key")
        assert await rpc.complete_onboarding_step(uuid4(), "complete_first_abtest") is False

    async def test_normalize_weights_failure_is_reported(self, rpc, supabase_client):
        supabase_client.rpc.return_value.execute.side_effect = RuntimeError("timeout")
        assert await rpc.normalize_persona_weights() is False


class TestStripeWebhookVerification:

    @pytest.fixture
    def service(self):
        service = StripeService()
        service._webhook_secret = "whsec_test"
        return service

    def test_requires_configured_secret(self, service):
        service._webhook_secret = None
        with pytest.raises(ConfigurationError):
            service.verify_webhook_signature(b"{}", "t=1,v1=sig")

    def test_bad_payload(self, service):
        with patch.object(stripe.Webhook, "construct_event", side_effect=ValueError("not json")):
            with pytest.raises(WebhookSignatureError, match="Invalid payload"):
                service.verify_webhook_signature(b"not json", "t=1,v1=sig")

    def test_bad_signature(self, service):
        error = stripe.SignatureVerificationError("No signatures found", "t=1,v1=sig")
        with patch.object(stripe.Webhook, "construct_event", side_effect=error):
            with pytest.raises(WebhookSignatureError, match="Invalid signature"):
                service.verify_webhook_signature(b"{}", "t=1,v1=sig")

    def test_valid_event(self, service):
        event = {"id": "evt_1", "type": "checkout.session.completed"}
        with patch.object(stripe.Webhook, "construct_event", return_value=event) as construct:
            assert service.verify_webhook_signature(b"{}", "t=1,v1=sig") == event
        construct.assert_called_once_with(b"{}", "t=1,v1=sig", "whsec_test")

    async def test_checkout_requires_price(self, service):
        service._pro_price_id = None
        with pytest.raises(ConfigurationError):
            await service.create_checkout_session("cus_1", "user-1", "https://a", "https://b")
