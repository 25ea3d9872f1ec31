"""
Video Analysis Model

Rows are created by the upload flow (status `pending`); the analyze endpoint
moves them through `processing` to `done` or `failed`.
"""

from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import JSON, Column
from sqlmodel import Field

from viralforge.infrastructure.db.models.base import TimestampMixin, UUIDMixin


class AnalysisStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


class VideoAnalysis(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "video_analyses"

    user_id: UUID = Field(foreign_key="profiles.id", index=True, nullable=False)
    status: str = Field(default=AnalysisStatus.PENDING.value, max_length=20)
    platform: str = Field(default="tiktok", max_length=20)
    category_slug: Optional[str] = Field(default=None, max_length=100)
    video_url: Optional[str] = None
    transcript: Optional[str] = None
    description: Optional[str] = None
    engagement_score: Optional[int] = Field(default=None, ge=0, le=100)
    result: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    error_message: Optional[str] = None
    used_credit: bool = Field(default=False)
