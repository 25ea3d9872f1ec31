"""
Category Routes

Served from the application's TTL cache; admins can clear it through
`POST /api/admin/categories/invalidate`.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Query, Request

from viralforge.api.dependencies import CategoryRepoDep
from viralforge.infrastructure.db.models.category import CategoryRead


router = APIRouter(tags=["Categories"])


@router.get("/categories")
async def list_categories(
    request: Request,
    categories: CategoryRepoDep,
    group: Optional[Literal["creator", "business"]] = Query(default=None),
):
    cache = request.app.state.category_cache

    async def load():
        rows = await categories.list_active(group)
        return [CategoryRead.model_validate(row).model_dump() for row in rows]

    items = await cache.get_or_load(group or "all", load)
    return {"categories": items}
