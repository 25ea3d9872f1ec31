"""
Daily Suggestion Model

Content ideas generated per user per UTC day, by the cron job or on demand.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field

from viralforge.infrastructure.db.models.base import TimestampMixin, UUIDMixin


class DailySuggestion(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "daily_suggestions"

    user_id: UUID = Field(foreign_key="profiles.id", index=True, nullable=False)
    suggestion_date: date = Field(nullable=False, index=True)
    title: str = Field(max_length=200)
    hook: str
    description: Optional[str] = None
    locale: str = Field(default="tr", max_length=5)
    is_used: bool = Field(default=False)
    used_at: Optional[datetime] = None
    generation_id: Optional[str] = Field(default=None, max_length=100)
