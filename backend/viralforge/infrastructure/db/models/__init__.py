"""
SQLModel ORM Models for ViralForge AI

Import models here to register them with SQLModel.metadata (Alembic and the
test fixtures create tables from it).
"""

from viralforge.infrastructure.db.models.base import TimestampMixin, UUIDMixin
from viralforge.infrastructure.db.models.profile import Profile, ProfileRead
from viralforge.infrastructure.db.models.usage_daily import UsageDaily
from viralforge.infrastructure.db.models.ab_test import ABTest
from viralforge.infrastructure.db.models.video_analysis import AnalysisStatus, VideoAnalysis
from viralforge.infrastructure.db.models.activity_log import ActivityLog
from viralforge.infrastructure.db.models.daily_suggestion import DailySuggestion
from viralforge.infrastructure.db.models.weekly_insight import WeeklyInsight
from viralforge.infrastructure.db.models.category import Category, CategoryRead
from viralforge.infrastructure.db.models.processed_webhook_event import ProcessedWebhookEvent


__all__ = [
    "TimestampMixin",
    "UUIDMixin",
    "Profile",
    "ProfileRead",
    "UsageDaily",
    "ABTest",
    "AnalysisStatus",
    "VideoAnalysis",
    "ActivityLog",
    "DailySuggestion",
    "WeeklyInsight",
    "Category",
    "CategoryRead",
    "ProcessedWebhookEvent",
]
