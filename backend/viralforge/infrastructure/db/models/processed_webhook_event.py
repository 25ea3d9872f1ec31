"""
Processed Webhook Event Model

Stripe event ids already handled; the primary key makes replays no-ops.
"""

from datetime import datetime

from sqlmodel import Field, SQLModel

from viralforge.infrastructure.db.models.base import utc_now


class ProcessedWebhookEvent(SQLModel, table=True):
    __tablename__ = "processed_webhook_events"

    event_id: str = Field(primary_key=True, max_length=255)
    event_type: str = Field(max_length=100)
    processed_at: datetime = Field(default_factory=utc_now, nullable=False)
