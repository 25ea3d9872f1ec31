"""
Database Configuration for ViralForge AI

Async SQLAlchemy engine and session management. The engine is built lazily
from Settings so importing this module never opens a connection.
"""

import re
from typing import AsyncGenerator, Optional
from urllib.parse import quote_plus

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from viralforge.config.settings import settings
from viralforge.infrastructure.exceptions import ConfigurationError


class DatabaseManager:
    """
    Manages async database connections and sessions.

    Singleton so the whole process shares one connection pool.
    """

    _instance: Optional["DatabaseManager"] = None
    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def engine(self) -> AsyncEngine:
        """Get or create async engine with connection pooling."""
        if self._engine is None:
            self._initialize_engine()
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create session factory."""
        if self._session_factory is None:
            self._initialize_engine()
        return self._session_factory

    def _initialize_engine(self) -> None:
        database_url = self._resolve_database_url()

        engine_kwargs = {"echo": settings.database_echo}
        # SQLite (local runs) does not take queue pool sizing
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
                pool_timeout=settings.database_pool_timeout,
                pool_pre_ping=True,
            )

        self._engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    def _resolve_database_url(self) -> str:
        """
        Get the async connection URL.

        Uses DATABASE_URL when provided, otherwise derives the direct Supabase
        Postgres URL from SUPABASE_URL + SUPABASE_PASSWORD.
        """
        if settings.database_url:
            database_url = settings.database_url
            if database_url.startswith("postgresql://"):
                database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
            elif database_url.startswith("postgres://"):
                database_url = database_url.replace("postgres://", "postgresql+asyncpg://", 1)
            return database_url

        if not settings.supabase_password:
            raise ConfigurationError(
                "Either DATABASE_URL or (SUPABASE_URL + SUPABASE_PASSWORD) is required",
                missing_keys=["DATABASE_URL", "SUPABASE_PASSWORD"],
            )

        match = re.match(r"https?://([^.]+)\.supabase\.co", settings.supabase_url)
        if not match:
            raise ConfigurationError(f"Invalid SUPABASE_URL format: {settings.supabase_url}")

        project_ref = match.group(1)
        password = quote_plus(settings.supabase_password)
        return (
            f"postgresql+asyncpg://postgres:{password}"
            f"@db.{project_ref}.supabase.co:5432/postgres"
        )

    async def close(self) -> None:
        """Close engine and dispose of connection pool."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """Get or create the database manager instance."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency injection for async database sessions.

    The request's work is committed when the handler returns and rolled back
    if it raises.
    """
    db = get_db_manager()
    async with db.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Verify the connection pool works (called on app startup)."""
    db = get_db_manager()
    async with db.session_factory() as session:
        await session.execute(text("SELECT 1"))


async def close_db() -> None:
    """Close database connection pool (called on app shutdown)."""
    db = get_db_manager()
    await db.close()
