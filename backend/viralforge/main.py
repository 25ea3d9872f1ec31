"""
ViralForge AI - FastAPI Application

Main entry point for the backend API: metered content features, usage,
rewards, billing, admin console and cron jobs.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from viralforge.api.errors import register_exception_handlers
from viralforge.config.settings import settings
from viralforge.infrastructure.cache import TTLCache

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(f"ViralForge AI Backend starting in {settings.environment} mode...")

    if settings.database_url or settings.supabase_password:
        try:
            from viralforge.infrastructure.db.database import init_db
            await init_db()
            logger.info("Database connection pool initialized")
        except Exception as e:
            logger.warning(f"Database initialization skipped: {e}")

    yield

    from viralforge.infrastructure.db.database import close_db
    await close_db()
    logger.info("ViralForge AI Backend shutting down...")


app = FastAPI(
    title="ViralForge AI",
    description="AI toolkit for short-form video creators",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# App-owned cache for the category picker
app.state.category_cache = TTLCache(settings.category_cache_ttl_seconds)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "viralforge-ai"}


@app.get("/")
async def root():
    return {
        "message": "ViralForge AI API",
        "version": "1.0.0",
        "docs": "/docs",
    }


# ============================================================================
# Import and register routers
# ============================================================================

from viralforge.api.routes import (  # noqa: E402
    abtest,
    admin,
    analyze,
    billing,
    captions,
    categories,
    cron,
    daily_suggestions,
    hooks,
    planner,
    shop,
    usage,
    webhooks,
)

app.include_router(abtest.router, prefix="/api")
app.include_router(captions.router, prefix="/api")
app.include_router(hooks.router, prefix="/api")
app.include_router(planner.router, prefix="/api")
app.include_router(analyze.router, prefix="/api")
app.include_router(usage.router, prefix="/api")
app.include_router(daily_suggestions.router, prefix="/api")
app.include_router(shop.router, prefix="/api")
app.include_router(categories.router, prefix="/api")
app.include_router(admin.router, prefix="/api")
app.include_router(cron.router, prefix="/api")
app.include_router(billing.router, prefix="/api")
app.include_router(webhooks.router, prefix="/api")
