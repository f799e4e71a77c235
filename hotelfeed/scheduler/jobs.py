"""HOTELFEED — Scheduler Jobs.

APScheduler interval job that asks the active feed session whether anything
is newer than its watermark, and refreshes the feed only when it is.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from hotelfeed.config import settings
from hotelfeed.core.logging import get_logger
from hotelfeed.feed.session import FeedSession

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


async def poll_feed_job(session: FeedSession):
    """One tick: staleness check, and a merge only on a positive answer."""
    refreshed = await session.poll()
    if refreshed:
        logger.info("Activity feed refreshed by poll")


def start_scheduler(session: FeedSession):
    """Configure and start the scheduler."""
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        poll_feed_job,
        "interval",
        seconds=settings.poll_interval_seconds,
        args=[session],
        id="feed_poll",
        replace_existing=True,
        # Overlapping ticks are dropped rather than queued
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"Scheduler started. Polling every {settings.poll_interval_seconds}s")


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
