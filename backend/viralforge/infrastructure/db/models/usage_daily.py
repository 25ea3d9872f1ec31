"""
Daily Usage Counter Model

One row per (user, UTC day, metered feature). The unique constraint is the
conflict target of the atomic increment upsert.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from viralforge.infrastructure.db.models.base import TimestampMixin


class UsageDaily(TimestampMixin, table=True):
    __tablename__ = "usage_daily"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "usage_date", "feature",
            name="uq_usage_daily_user_date_feature",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="profiles.id", index=True, nullable=False)
    usage_date: date = Field(nullable=False)
    feature: str = Field(max_length=40, nullable=False)
    count: int = Field(default=0, ge=0, nullable=False)


USAGE_CONFLICT_COLUMNS = ["user_id", "usage_date", "feature"]
