"""
Background scheduler for maintenance jobs.

Uses APScheduler to run the trash purge on a fixed interval. The purge itself
does not depend on the scheduler: anything else (a cron, an admin call) may
trigger it.
"""

import logging
from datetime import timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from notesapp.config import get_settings
from notesapp.background.trash_cleanup import purge_expired_trash

logger = logging.getLogger(__name__)

TRASH_PURGE_JOB = "purge_expired_trash_task"

# Singleton scheduler instance
scheduler = AsyncIOScheduler(timezone=timezone.utc)


def run_trash_purge():
    """Callback for the APScheduler purge job. Failures are logged, the job keeps its schedule."""
    try:
        purge_expired_trash()
    except Exception as e:
        logger.error(f"Trash purge failed: {e}", exc_info=True)


def init_scheduler():
    """Register jobs and start the scheduler.

    Called during FastAPI lifespan startup.
    """
    settings = get_settings()
    scheduler.add_job(
        func=run_trash_purge,
        trigger=IntervalTrigger(hours=settings.TRASH_PURGE_INTERVAL_HOURS),
        id=TRASH_PURGE_JOB,
        replace_existing=True,
    )
    scheduler.start()

    for job in scheduler.get_jobs():
        logger.info(f"Scheduler job {job.id}: next run at {job.next_run_time}")


def shutdown_scheduler():
    """Gracefully shutdown the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down.")
