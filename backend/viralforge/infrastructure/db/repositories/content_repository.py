"""
Content Repositories

Persistence for A/B tests and video analyses. Both follow the same flow:
the row is stored first, then filled in once the model call completes.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from viralforge.infrastructure.db.models.ab_test import ABTest
from viralforge.infrastructure.db.models.video_analysis import AnalysisStatus, VideoAnalysis
from viralforge.infrastructure.db.repositories.base_repository import BaseRepository


class ABTestRepository(BaseRepository[ABTest]):
    """Repository for A/B test predictions."""

    def __init__(self, session: AsyncSession):
        super().__init__(ABTest, session)

    async def save_result(
        self,
        test_id: UUID,
        winner: str,
        confidence: int,
        result: Dict[str, Any],
    ) -> Optional[ABTest]:
        return await self.update_fields(
            test_id,
            winner=winner,
            confidence=confidence,
            result=result,
        )


class AnalysisRepository(BaseRepository[VideoAnalysis]):
    """Repository for video analyses."""

    def __init__(self, session: AsyncSession):
        super().__init__(VideoAnalysis, session)

    async def get_owned(self, analysis_id: UUID, user_id: UUID) -> Optional[VideoAnalysis]:
        """The analysis, only when it belongs to `user_id`."""
        stmt = select(VideoAnalysis).where(
            VideoAnalysis.id == analysis_id,
            VideoAnalysis.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def set_status(
        self,
        analysis_id: UUID,
        status: AnalysisStatus,
        **values: Any,
    ) -> Optional[VideoAnalysis]:
        return await self.update_fields(analysis_id, status=status.value, **values)
