"""
Activity Log Model

Append-only feed of user actions. Feeds the weekly insight job and the
persona recalculation.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import JSON, Column
from sqlmodel import Field

from viralforge.infrastructure.db.models.base import UUIDMixin, utc_now


class ActivityLog(UUIDMixin, table=True):
    __tablename__ = "activity_logs"

    user_id: UUID = Field(foreign_key="profiles.id", index=True, nullable=False)
    action: str = Field(max_length=50, index=True)
    entity_type: Optional[str] = Field(default=None, max_length=50)
    entity_id: Optional[str] = Field(default=None, max_length=100)
    # `metadata` is reserved on declarative classes
    meta: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column("metadata", JSON),
    )
    locale: Optional[str] = Field(default=None, max_length=5)
    created_at: datetime = Field(default_factory=utc_now, nullable=False, index=True)
