"""
Lock Sweeper - background expiry of abandoned record locks

Acquire, status and the edit gate already retire an expired lock on the
record they touch. The sweeper catches the rest: locks nobody looks at
again would otherwise sit in the table (and in "my locks" listings) until
someone opens the record.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.core.logging_config import logger
from app.services.record_lock_service import RecordLockService, record_lock_service


class LockSweeper:
    """Periodically runs RecordLockService.reap_expired in its own session"""

    def __init__(
        self,
        lock_service: Optional[RecordLockService] = None,
        interval_seconds: Optional[int] = None,
        session_factory: Optional[Callable[[], AsyncSession]] = None,
    ):
        self.lock_service = lock_service or record_lock_service
        self.interval = timedelta(
            seconds=interval_seconds if interval_seconds is not None else settings.LOCK_SWEEP_INTERVAL_SECONDS
        )
        self.session_factory = session_factory or AsyncSessionLocal

        self.running = False
        self._task: Optional[asyncio.Task] = None

        self.stats = {
            "runs": 0,
            "failed_runs": 0,
            "total_reaped": 0,
            "last_run": None,
            "last_error": None,
        }

    async def start(self):
        """Start the background sweep loop"""
        if self.running:
            logger.warning("[LockSweeper] Already running")
            return

        self.running = True
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info(f"[LockSweeper] Started - Interval: {self.interval}")

    async def stop(self):
        """Stop the sweep loop"""
        self.running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("[LockSweeper] Stopped")

    async def _sweep_loop(self):
        while self.running:
            try:
                await self.run_once()
            except Exception as e:
                # A failed cycle is retried on the next tick
                logger.error(f"[LockSweeper] Error in sweep loop: {e}", exc_info=True)

            await asyncio.sleep(self.interval.total_seconds())

    async def run_once(self) -> int:
        """
        Run a single sweep.

        Returns:
            Number of locks retired
        """
        self.stats["runs"] += 1
        self.stats["last_run"] = datetime.utcnow().isoformat()

        try:
            async with self.session_factory() as db:
                result = await self.lock_service.reap_expired(db)
        except Exception as e:
            self.stats["failed_runs"] += 1
            self.stats["last_error"] = str(e)
            raise

        self.stats["total_reaped"] += result.reaped
        self.stats["last_error"] = None
        if result.reaped:
            logger.info(f"[LockSweeper] Retired {result.reaped} expired lock(s)")
        return result.reaped

    def get_stats(self) -> Dict:
        return {
            **self.stats,
            "running": self.running,
            "interval_seconds": self.interval.total_seconds(),
        }


# Singleton instance
lock_sweeper = LockSweeper()
