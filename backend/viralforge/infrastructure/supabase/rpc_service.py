"""
Supabase RPC Service

Calls the Postgres functions that own their own transactions (XP spend,
onboarding, persona learning). Their bodies live in the database; this
service only invokes them with the service-role client. supabase-py is
synchronous, so calls run in a worker thread.
"""

import asyncio
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from viralforge.config.settings import settings
from viralforge.domain.content import RedeemResult
from viralforge.infrastructure.exceptions import UpstreamError


logger = logging.getLogger(__name__)


class SupabaseRPCService:
    """Service-role RPC client."""

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            options = ClientOptions(postgrest_client_timeout=30)
            self._client = create_client(
                settings.supabase_url,
                settings.supabase_service_role_key,
                options,
            )
            logger.info("Supabase RPC client initialized")
        return self._client

    async def call(self, function: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Invoke a database function and return its data.

        Raises:
            UpstreamError: the RPC failed
        """
        try:
            response = await asyncio.to_thread(
                lambda: self.client.rpc(function, params or {}).execute()
            )
        except Exception as e:
            logger.error(f"RPC {function} failed: {e}")
            raise UpstreamError(f"RPC {function} failed", {"rpc": function}, e)
        return response.data

    async def spend_xp_and_redeem(self, user_id: UUID, item_id: str) -> RedeemResult:
        data = await self.call(
            "spend_xp_and_redeem",
            {"p_user_id": str(user_id), "p_item_id": item_id},
        )
        # The function returns a single-row table
        row = data[0] if isinstance(data, list) and data else data
        if not row:
            raise UpstreamError("No result from redemption", {"rpc": "spend_xp_and_redeem"})
        return RedeemResult.model_validate(row)

    async def complete_onboarding_step(self, user_id: UUID, step_key: str) -> bool:
        """Fire-and-forget: an already-completed step is not an error."""
        try:
            await self.call(
                "complete_onboarding_step",
                {"p_user_id": str(user_id), "p_step_key": step_key},
            )
            return True
        except UpstreamError as e:
            logger.warning(f"Onboarding step {step_key} not recorded for {user_id}: {e.message}")
            return False

    async def update_persona_from_events(self, user_id: UUID) -> None:
        await self.call("update_persona_from_events", {"p_user_id": str(user_id)})

    async def normalize_persona_weights(self) -> bool:
        """Fire-and-forget weight decay after a persona batch."""
        try:
            await self.call("normalize_persona_weights")
            return True
        except UpstreamError as e:
            logger.error(f"Persona weight normalization failed: {e.message}")
            return False


_rpc_service_instance: Optional[SupabaseRPCService] = None


def get_rpc_service() -> SupabaseRPCService:
    """Get or create the RPC service singleton."""
    global _rpc_service_instance
    if _rpc_service_instance is None:
        _rpc_service_instance = SupabaseRPCService()
    return _rpc_service_instance
