"""
API Routes for ViralForge AI
"""

from viralforge.api.routes import (
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


__all__ = [
    "abtest",
    "admin",
    "analyze",
    "billing",
    "captions",
    "categories",
    "cron",
    "daily_suggestions",
    "hooks",
    "planner",
    "shop",
    "usage",
    "webhooks",
]
