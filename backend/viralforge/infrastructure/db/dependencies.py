"""
Dependency Injection Providers for the database layer

FastAPI dependencies for the request session and the repositories built on
it. Every provider shares the request's session, so one request is one unit
of work.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from viralforge.infrastructure.db.database import get_session
from viralforge.infrastructure.db.repositories import (
    ABTestRepository,
    ActivityRepository,
    AnalysisRepository,
    CategoryRepository,
    ProfileRepository,
    SuggestionRepository,
    UsageRepository,
    WebhookEventRepository,
)


SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_profile_repository(session: SessionDep) -> ProfileRepository:
    return ProfileRepository(session)


def get_usage_repository(session: SessionDep) -> UsageRepository:
    return UsageRepository(session)


def get_ab_test_repository(session: SessionDep) -> ABTestRepository:
    return ABTestRepository(session)


def get_analysis_repository(session: SessionDep) -> AnalysisRepository:
    return AnalysisRepository(session)


def get_activity_repository(session: SessionDep) -> ActivityRepository:
    return ActivityRepository(session)


def get_suggestion_repository(session: SessionDep) -> SuggestionRepository:
    return SuggestionRepository(session)


def get_category_repository(session: SessionDep) -> CategoryRepository:
    return CategoryRepository(session)


def get_webhook_event_repository(session: SessionDep) -> WebhookEventRepository:
    return WebhookEventRepository(session)


ProfileRepoDep = Annotated[ProfileRepository, Depends(get_profile_repository)]
UsageRepoDep = Annotated[UsageRepository, Depends(get_usage_repository)]
ABTestRepoDep = Annotated[ABTestRepository, Depends(get_ab_test_repository)]
AnalysisRepoDep = Annotated[AnalysisRepository, Depends(get_analysis_repository)]
ActivityRepoDep = Annotated[ActivityRepository, Depends(get_activity_repository)]
SuggestionRepoDep = Annotated[SuggestionRepository, Depends(get_suggestion_repository)]
CategoryRepoDep = Annotated[CategoryRepository, Depends(get_category_repository)]
WebhookEventRepoDep = Annotated[WebhookEventRepository, Depends(get_webhook_event_repository)]
