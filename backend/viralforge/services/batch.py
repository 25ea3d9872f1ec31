"""
Sequential batch runner for cron jobs

Users are processed one at a time. Each user's work runs in its own
savepoint so a failure is isolated: it is logged, counted, and the job moves
on. Jobs report only aggregate counts.
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession


logger = logging.getLogger(__name__)

ItemType = TypeVar("ItemType")


class ItemOutcome(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"


class BatchResult(BaseModel):
    total: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0


async def run_batch(
    session: AsyncSession,
    items: Iterable[ItemType],
    handler: Callable[[ItemType], Awaitable[ItemOutcome]],
    job_name: str,
    describe: Callable[[ItemType], Any] = lambda item: getattr(item, "id", item),
) -> BatchResult:
    """
    Run `handler` for every item, isolating failures per item.

    Args:
        session: Session the handlers write through
        items: Work items (usually profiles)
        handler: Returns SUCCESS or SKIPPED; any exception counts as failed
        job_name: Used in log lines
        describe: Item label for logs
    """
    result = BatchResult()
    for item in items:
        result.total += 1
        try:
            async with session.begin_nested():
                outcome = await handler(item)
        except Exception:
            result.failed += 1
            logger.exception(f"{job_name}: failed for {describe(item)}")
            continue

        if outcome == ItemOutcome.SKIPPED:
            result.skipped += 1
        else:
            result.success += 1

    logger.info(
        f"{job_name} finished: total={result.total} success={result.success} "
        f"failed={result.failed} skipped={result.skipped}"
    )
    return result
