import asyncio
import logging
from typing import Dict, Optional, Set

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from feedhub.schemas import BulkFeedRefreshResult
from feedhub.services.feed_service import RssFeedService

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "refresh_feeds"


class FeedRefreshScheduler:
    """
    Periodically refreshes every source that is due.

    The scheduler is either Running or Stopped. Each instance owns its own
    APScheduler, so several can coexist (e.g. one per test). Must be started
    from inside a running event loop.
    """

    def __init__(self, feed_service: RssFeedService, scheduler: Optional[AsyncIOScheduler] = None):
        self.feed_service = feed_service
        self.scheduler = scheduler or AsyncIOScheduler()
        self.is_running = False
        self.check_interval_minutes: Optional[int] = None
        # Strong references to fire-and-forget cycles
        self._background_tasks: Set[asyncio.Task] = set()

    def start(self, check_interval_minutes: int = 5) -> None:
        """Start refreshing: one cycle right away, then every N minutes"""
        if self.is_running:
            logger.warning("Feed refresh scheduler is already running")
            return

        self.is_running = True
        self.check_interval_minutes = check_interval_minutes
        logger.info(f"Starting feed refresh scheduler with {check_interval_minutes} minute interval")

        # Run immediately on start without blocking the caller
        task = asyncio.create_task(self._run_scheduled_cycle())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

        self.scheduler.add_job(
            self._run_scheduled_cycle,
            'interval',
            minutes=check_interval_minutes,
            id=REFRESH_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        if not self.scheduler.running:
            self.scheduler.start()

    def stop(self) -> None:
        """Stop future cycles; a cycle already in progress runs to completion"""
        if not self.is_running:
            logger.warning("Feed refresh scheduler is not running")
            return

        if self.scheduler.get_job(REFRESH_JOB_ID):
            self.scheduler.remove_job(REFRESH_JOB_ID)

        self.is_running = False
        self.check_interval_minutes = None
        logger.info("Feed refresh scheduler stopped")

    def shutdown(self) -> None:
        """Stop and release the underlying APScheduler (process exit)"""
        if self.is_running:
            self.stop()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    async def run_refresh_cycle(self) -> BulkFeedRefreshResult:
        """
        Refresh all due sources once.

        No threshold override is passed, so each source's own refresh rate
        decides whether it is due. Errors from the bulk refresh propagate.
        """
        logger.info("Starting feed refresh cycle")

        try:
            result = await self.feed_service.refresh_all_feeds()
        except Exception as e:
            logger.error(f"Error in feed refresh cycle: {e}")
            raise

        logger.info(
            f"Feed refresh cycle completed: {result.successful_sources} sources refreshed successfully, "
            f"{len(result.failed_sources)} failures, {result.new_items_count} new items"
        )

        if result.failed_sources:
            failures = ", ".join(f"{failed.id} ({failed.error})" for failed in result.failed_sources)
            logger.warning(f"Some sources failed to refresh: {failures}")

        return result

    def get_status(self) -> Dict[str, bool]:
        return {"isRunning": self.is_running}

    async def _run_scheduled_cycle(self) -> None:
        # A timer-driven cycle must never take the scheduler down
        try:
            await self.run_refresh_cycle()
        except Exception as e:
            logger.error(f"Scheduled feed refresh cycle failed: {e}")
