"""Background task scheduler for polling the report feed."""

import logging
from datetime import UTC, datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from defrost.services.feed_source import ReportFeedSource

logger = logging.getLogger(__name__)


async def refresh_report_feed_job(feed_source: ReportFeedSource) -> None:
    """Background job to publish the latest report snapshot."""
    try:
        count = await feed_source.refresh()
        logger.debug(f"Feed refresh complete: {count} reports")
    except Exception as e:
        logger.error(f"Feed refresh failed: {e}", exc_info=True)


def setup_scheduler(
    feed_source: ReportFeedSource, interval_seconds: int
) -> AsyncIOScheduler:
    """Set up and start the feed polling scheduler."""
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        refresh_report_feed_job,
        trigger=IntervalTrigger(seconds=interval_seconds),
        args=[feed_source],
        next_run_time=datetime.now(UTC),
        id="refresh_report_feed",
        name="Refresh report feed snapshot",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started")

    return scheduler


def shutdown_scheduler(scheduler: AsyncIOScheduler | None) -> None:
    """Shut down the scheduler gracefully."""
    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")
