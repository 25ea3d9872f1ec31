"""
Category Repository
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from viralforge.infrastructure.db.models.category import Category
from viralforge.infrastructure.db.repositories.base_repository import BaseRepository


class CategoryRepository(BaseRepository[Category]):

    def __init__(self, session: AsyncSession):
        super().__init__(Category, session)

    async def list_active(self, group: Optional[str] = None) -> List[Category]:
        """Active categories in display order, optionally for one group."""
        stmt = select(Category).where(Category.is_active.is_(True))
        if group:
            stmt = stmt.where(Category.group == group)
        stmt = stmt.order_by(Category.sort_order, Category.slug)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
