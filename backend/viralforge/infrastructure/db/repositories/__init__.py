"""
Repository Layer for ViralForge AI

Exports all repository classes for dependency injection.
"""

from viralforge.infrastructure.db.repositories.base_repository import (
    BaseRepository,
    dialect_insert,
)
from viralforge.infrastructure.db.repositories.profile_repository import ProfileRepository
from viralforge.infrastructure.db.repositories.usage_repository import UsageRepository
from viralforge.infrastructure.db.repositories.content_repository import (
    ABTestRepository,
    AnalysisRepository,
)
from viralforge.infrastructure.db.repositories.activity_repository import ActivityRepository
from viralforge.infrastructure.db.repositories.suggestion_repository import (
    SuggestionRepository,
    WeeklyInsightRepository,
)
from viralforge.infrastructure.db.repositories.category_repository import CategoryRepository
from viralforge.infrastructure.db.repositories.webhook_event_repository import (
    WebhookEventRepository,
)


__all__ = [
    "BaseRepository",
    "dialect_insert",
    "ProfileRepository",
    "UsageRepository",
    "ABTestRepository",
    "AnalysisRepository",
    "ActivityRepository",
    "SuggestionRepository",
    "WeeklyInsightRepository",
    "CategoryRepository",
    "WebhookEventRepository",
]
