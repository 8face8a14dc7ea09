"""
Recycle bin retention sweeper

Purges notes that have sat in the recycle bin longer than the retention
period. `sweep_expired` does a single pass and can be called directly;
`RecycleBinSweeper` runs it once at startup and then on a fixed interval.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scribo.features.notes.repository import NoteRepository
from scribo.utils.datetime_helper import utcnow

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 30
DEFAULT_INTERVAL_SECONDS = 24 * 60 * 60


def retention_cutoff(now: datetime, retention_days: int) -> datetime:
    """Notes deleted at or before this instant are expired"""
    return now - timedelta(days=retention_days)


async def sweep_expired(
    db: AsyncSession,
    retention_days: int = DEFAULT_RETENTION_DAYS,
    now: Optional[datetime] = None,
) -> int:
    """
    Permanently delete expired recycle-bin notes across all owners.

    Args:
        db: Database session
        retention_days: Days a note stays recoverable after soft delete
        now: Reference time, defaults to the current UTC time

    Returns:
        int: Number of notes purged
    """
    cutoff = retention_cutoff(now or utcnow(), retention_days)
    deleted = await NoteRepository(db).purge_deleted_before(cutoff)

    if deleted > 0:
        logger.info(f"Recycle bin cleanup: permanently deleted {deleted} expired notes")
    else:
        logger.debug("Recycle bin cleanup: nothing to purge")
    return deleted


class RecycleBinSweeper:
    """Background task that runs `sweep_expired` now and then every interval"""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        retention_days: int = DEFAULT_RETENTION_DAYS,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.session_factory = session_factory
        self.retention_days = retention_days
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Optional[int]:
        """
        One sweep in its own session.

        Errors are logged and swallowed so the schedule keeps going.

        Returns:
            Purged note count, or None if the run failed
        """
        try:
            async with self.session_factory() as db:
                return await sweep_expired(db, self.retention_days, now=self.clock())
        except Exception as e:
            logger.error(f"Recycle bin cleanup failed: {e}", exc_info=True)
            return None

    async def run_forever(self) -> None:
        while True:
            await self.run_once()
            await self.sleep(self.interval_seconds)

    def start(self) -> asyncio.Task:
        """Schedule the sweep loop on the running event loop"""
        if self.running:
            return self._task
        self._task = asyncio.create_task(self.run_forever(), name="recycle-bin-sweeper")
        logger.info(
            f"Recycle bin cleanup scheduled every {self.interval_seconds / 3600:g}h "
            f"(retention {self.retention_days} days)"
        )
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Recycle bin cleanup stopped")
