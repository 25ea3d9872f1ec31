"""
Test configuration and fixtures for ViralForge AI.

Provides shared fixtures for unit and integration tests. Integration tests
run against a throwaway SQLite file (aiosqlite) with the same SQLModel
metadata used in production; external services are replaced with mocks
through FastAPI dependency overrides.
"""

import os

# Settings are read at import time, so the environment has to be ready first
os.environ.setdefault("SUPABASE_URL", "https://testproject.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-at-least-32-bytes-of-entropy")
os.environ.setdefault("SUPERADMIN_EMAILS", "admin@viralforge.test, Ops@ViralForge.test")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("ENVIRONMENT", "testing")

from typing import Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import Session, SQLModel, select

from viralforge.api.dependencies import (
    AuthenticatedUser,
    get_current_user,
    get_plan_resolver,
)
from viralforge.domain.calendar import CalendarDay
from viralforge.domain.content import (
    ABTestResult,
    CaptionResult,
    ContentPlanItem,
    ContentPlanResult,
    RedeemResult,
    SuggestionIdea,
    VideoAnalysisResult,
    WeeklyInsightResult,
)
from viralforge.infrastructure.ai.content_service import get_content_service
from viralforge.infrastructure.db import models  # noqa: F401  (registers tables)
from viralforge.infrastructure.db.database import get_session
from viralforge.infrastructure.db.models import Profile
from viralforge.infrastructure.exceptions import UnauthorizedError
from viralforge.infrastructure.payments.stripe_service import get_stripe_service
from viralforge.infrastructure.supabase.rpc_service import get_rpc_service
from viralforge.services.plan_resolver import PlanResolver


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "viralforge-test.db"


@pytest.fixture
def sync_engine(db_path):
    """Synchronous engine used to create the schema and seed rows."""
    engine = create_engine(f"sqlite:///{db_path}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def engine(db_path, sync_engine):
    """
    Async engine on the same SQLite file.

    pysqlite's own transaction handling is disabled and every transaction
    starts with BEGIN IMMEDIATE, so SAVEPOINTs work and concurrent writers
    queue on the database lock instead of failing.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def make_profile(sync_engine):
    """Insert a profile and return its id."""
    def _make(**overrides) -> UUID:
        user_id = overrides.pop("id", None) or uuid4()
        overrides.setdefault("email", f"{user_id.hex[:8]}@creator.test")
        with Session(sync_engine) as session:
            session.add(Profile(id=user_id, **overrides))
            session.commit()
        return user_id
    return _make


@pytest.fixture
def fetch(sync_engine):
    """Read rows back through a fresh synchronous session."""
    def _fetch(model, **filters):
        with Session(sync_engine) as session:
            stmt = select(model)
            for field, value in filters.items():
                stmt = stmt.where(getattr(model, field) == value)
            return list(session.exec(stmt).all())
    return _fetch


@pytest.fixture
def insert_rows(sync_engine):
    def _insert(*rows):
        with Session(sync_engine, expire_on_commit=False) as session:
            session.add_all(rows)
            session.commit()
    return _insert


# =============================================================================
# Clock Fixtures
# =============================================================================

@pytest.fixture
def today() -> CalendarDay:
    return CalendarDay.today()


@pytest.fixture
def resolver(today) -> PlanResolver:
    """Plan resolver pinned to a single day for the whole test."""
    return PlanResolver(clock=lambda: today)


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_content_service():
    """Mock for ContentService with successful default responses."""
    mock = MagicMock()
    mock.predict_ab_test = AsyncMock(
        return_value=ABTestResult(
            winner="A",
            confidence=72,
            reasoning="Option A opens with a question.",
            suggestions=["Shorten option B"],
        )
    )
    mock.generate_caption = AsyncMock(
        return_value=CaptionResult(
            caption="Three edits that doubled my watch time",
            hashtags=["#editing", "#reels"],
            cta="Save this for later",
        )
    )
    mock.generate_hashtags = AsyncMock(return_value=["#fyp", "#editing"])
    mock.generate_hooks = AsyncMock(
        return_value=["Nobody talks about this editing trick", "I tried posting daily for 30 days"]
    )
    mock.generate_content_plan = AsyncMock(
        return_value=ContentPlanResult(
            items=[
                ContentPlanItem(day_index=1, title="Morning routine", hook="5am changed everything"),
                ContentPlanItem(day_index=3, title="Gear tour", hook="Everything I film with"),
            ]
        )
    )
    mock.analyze_video = AsyncMock(
        return_value=VideoAnalysisResult(
            engagement_score=64,
            summary="Strong hook, slow middle section.",
            issues=["Cut the intro by two seconds"],
        )
    )
    mock.generate_daily_suggestions = AsyncMock(
        return_value=[
            SuggestionIdea(title="Before/after edit", hook="You won't believe this cut"),
        ]
    )
    mock.summarize_week = AsyncMock(
        return_value=WeeklyInsightResult(
            summary="A consistent week.",
            highlights=["3 A/B tests"],
            recommendations=["Post before 9am"],
        )
    )
    return mock


@pytest.fixture
def mock_rpc_service():
    """Mock for SupabaseRPCService."""
    mock = MagicMock()
    mock.spend_xp_and_redeem = AsyncMock(
        return_value=RedeemResult(success=True, new_xp_balance=150, new_analysis_credits=2)
    )
    mock.complete_onboarding_step = AsyncMock(return_value=True)
    mock.update_persona_from_events = AsyncMock(return_value=None)
    mock.normalize_persona_weights = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def mock_stripe_service():
    """Mock for StripeService."""
    return MagicMock()


# =============================================================================
# Authentication
# =============================================================================

class FakeAuth:
    """Stands in for get_current_user; tests choose who is signed in."""

    def __init__(self):
        self.user: Optional[AuthenticatedUser] = None

    def __call__(self) -> AuthenticatedUser:
        if self.user is None:
            raise UnauthorizedError("Missing authorization token")
        return self.user

    def login(self, user_id: UUID, email: Optional[str] = None) -> AuthenticatedUser:
        self.user = AuthenticatedUser(id=user_id, email=email)
        return self.user

    def logout(self) -> None:
        self.user = None


@pytest.fixture
def auth() -> FakeAuth:
    return FakeAuth()


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app(
    session_factory,
    resolver,
    auth,
    mock_content_service,
    mock_rpc_service,
    mock_stripe_service,
):
    """FastAPI application wired to the test database and mocks."""
    from viralforge.main import app

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user] = auth
    app.dependency_overrides[get_plan_resolver] = lambda: resolver
    app.dependency_overrides[get_content_service] = lambda: mock_content_service
    app.dependency_overrides[get_rpc_service] = lambda: mock_rpc_service
    app.dependency_overrides[get_stripe_service] = lambda: mock_stripe_service
    app.state.category_cache.invalidate()

    yield app

    app.dependency_overrides.clear()
    app.state.category_cache.invalidate()


@pytest.fixture
def client(app):
    """Get synchronous test client (no lifespan, so no real database)."""
    return TestClient(app)
