"""
Webhook Event Repository

Idempotency ledger for Stripe webhook deliveries.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from viralforge.infrastructure.db.models.base import utc_now
from viralforge.infrastructure.db.models.processed_webhook_event import ProcessedWebhookEvent
from viralforge.infrastructure.db.repositories.base_repository import dialect_insert


class WebhookEventRepository:

    def __init__(self, session: AsyncSession):
        self._session = session

    async def is_processed(self, event_id: str) -> bool:
        stmt = select(ProcessedWebhookEvent.event_id).where(
            ProcessedWebhookEvent.event_id == event_id
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def mark_processed(self, event_id: str, event_type: str) -> None:
        """Record the event; a concurrent duplicate delivery is a no-op."""
        insert = dialect_insert(self._session)
        stmt = insert(ProcessedWebhookEvent.__table__).values(
            event_id=event_id,
            event_type=event_type,
            processed_at=utc_now(),
        ).on_conflict_do_nothing(index_elements=["event_id"])
        await self._session.execute(stmt)
