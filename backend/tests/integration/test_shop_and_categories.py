"""
Integration tests for the rewards shop and the cached category list.
"""

import pytest

from viralforge.domain.content import RedeemResult
from viralforge.infrastructure.db.models import ActivityLog, Category
from viralforge.infrastructure.exceptions import UpstreamError


ADMIN_EMAIL = "admin@viralforge.test"


class TestShop:

    @pytest.fixture
    def creator(self, make_profile, auth):
        user_id = make_profile(xp_balance=500)
        auth.login(user_id)
        return user_id

    def test_redeem(self, client, creator, fetch, mock_rpc_service):
        resp = client.post("/api/shop/redeem", json={"item_id": "analysis_credit_pack"})

        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert resp.json()["new_analysis_credits"] == 2
        mock_rpc_service.spend_xp_and_redeem.assert_awaited_once_with(creator, "analysis_credit_pack")
        assert [entry.action for entry in fetch(ActivityLog, user_id=creator)] == ["reward_redeemed"]

    def test_failed_redemption_is_400(self, client, creator, fetch, mock_rpc_service):
        mock_rpc_service.spend_xp_and_redeem.return_value = RedeemResult(
            success=False,
            error_message="Not enough XP",
        )

        resp = client.post("/api/shop/redeem", json={"item_id": "premium_hooks_7d"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "validation_error", "message": "Not enough XP"}
        assert fetch(ActivityLog, user_id=creator) == []

    def test_rpc_failure_is_502(self, client, creator, mock_rpc_service):
        mock_rpc_service.spend_xp_and_redeem.side_effect = UpstreamError("RPC spend_xp_and_redeem failed")

        resp = client.post("/api/shop/redeem", json={"item_id": "premium_hooks_7d"})

        assert resp.status_code == 502

    def test_missing_item_is_400(self, client, creator):
        assert client.post("/api/shop/redeem", json={}).status_code == 400


class TestCategories:

    @pytest.fixture
    def seeded(self, insert_rows):
        insert_rows(
            Category(slug="fitness", group="creator", name_tr="Fitness", name_en="Fitness", sort_order=2),
            Category(slug="comedy", group="creator", name_tr="Komedi", name_en="Comedy", sort_order=1),
            Category(slug="restaurant", group="business", name_tr="Restoran", name_en="Restaurant"),
            Category(slug="retired", group="creator", name_tr="Eski", name_en="Old", is_active=False),
        )

    def test_list_in_display_order(self, client, seeded):
        resp = client.get("/api/categories")

        assert resp.status_code == 200
        slugs = [item["slug"] for item in resp.json()["categories"]]
        assert slugs == ["restaurant", "comedy", "fitness"]

    def test_group_filter(self, client, seeded):
        resp = client.get("/api/categories", params={"group": "creator"})
        assert [item["slug"] for item in resp.json()["categories"]] == ["comedy", "fitness"]

    def test_unknown_group_is_400(self, client, seeded):
        assert client.get("/api/categories", params={"group": "agency"}).status_code == 400

    def test_cached_until_invalidated(self, client, auth, make_profile, seeded, insert_rows):
        assert len(client.get("/api/categories").json()["categories"]) == 3

        insert_rows(Category(slug="travel", group="creator", name_tr="Seyahat", name_en="Travel"))
        assert len(client.get("/api/categories").json()["categories"]) == 3

        admin_id = make_profile(email=ADMIN_EMAIL)
        auth.login(admin_id, ADMIN_EMAIL)
        assert client.post("/api/admin/categories/invalidate").status_code == 200

        assert len(client.get("/api/categories").json()["categories"]) == 4

    def test_invalidate_requires_admin(self, client, auth, make_profile):
        auth.login(make_profile())
        assert client.post("/api/admin/categories/invalidate").status_code == 403
