"""
Weekly Insight Model
"""

from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import JSON, Column
from sqlmodel import Field

from viralforge.infrastructure.db.models.base import TimestampMixin, UUIDMixin


class WeeklyInsight(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "weekly_insights"

    user_id: UUID = Field(foreign_key="profiles.id", index=True, nullable=False)
    week_start: date = Field(nullable=False)
    summary: str
    highlights: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    recommendations: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    activity_count: int = Field(default=0)
    stats: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
