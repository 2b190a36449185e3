"""Analytics Bot — Scheduler Jobs.

APScheduler job that checks for due weekly reports every minute. Only used
when the service runs as a long-lived process; serverless deployments hit
POST /scheduled-reports from an external scheduler instead.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.config import Settings
from app.reporting.dispatcher import ScheduledDispatcher
from app.core.logging import get_logger

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


async def scheduled_reports_job(dispatcher: ScheduledDispatcher):
    """Send every report due this minute."""
    try:
        sent = await dispatcher.run()
        if sent:
            logger.info(f"Scheduled reports complete. Channels attempted: {sent}")
    except Exception as e:
        logger.error(f"Scheduled reports failed: {e}")


def start_scheduler(settings: Settings, dispatcher: ScheduledDispatcher):
    """Configure and start the scheduler."""
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        scheduled_reports_job,
        "cron",
        minute="*",
        args=[dispatcher],
        id="scheduled_reports",
        replace_existing=True,
        misfire_grace_time=30,
        max_instances=1,
    )
    scheduler.start()
    logger.info("Scheduler started. Checking for due reports every minute")


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
