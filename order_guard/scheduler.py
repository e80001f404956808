"""
Scheduled tasks for the order-blocking service.

The only job lifts blocks whose auto_unblock_date has passed. Blocks never
lift by themselves; this sweep is the explicit trigger.
"""

import logging
from datetime import datetime
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_EXECUTED, EVENT_JOB_ERROR

from order_guard.core.config import get_settings
from order_guard.database import async_session
from order_guard.services.order_blocking import OrderBlockingService

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


async def release_expired_blocks_task():
    """Task to lift expired order blocks"""
    try:
        async with async_session() as db:
            released = await OrderBlockingService(db).release_expired_blocks()
        if released:
            logger.info("Auto-unblock sweep released %s block(s)", len(released))
    except Exception:
        logger.exception("Error in auto-unblock sweep")


def job_listener(event):
    """Listen to job events for logging"""
    if event.exception:
        logger.error("Job %s crashed: %s", event.job_id, event.exception)
    else:
        logger.debug("Job %s executed successfully at %s", event.job_id, datetime.now())


def create_scheduler() -> AsyncIOScheduler:
    """Create and configure the scheduler"""
    global scheduler

    if scheduler is not None:
        return scheduler

    scheduler = AsyncIOScheduler()
    scheduler.add_listener(job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    minutes = get_settings().AUTO_UNBLOCK_SWEEP_MINUTES
    if minutes > 0:
        scheduler.add_job(
            release_expired_blocks_task,
            IntervalTrigger(minutes=minutes),
            id="release_expired_blocks",
            name="Release Expired Order Blocks",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=300,
        )
        logger.info("Auto-unblock sweep scheduled every %s minute(s)", minutes)
    else:
        logger.info("Auto-unblock sweep is disabled. Set AUTO_UNBLOCK_SWEEP_MINUTES > 0 to enable")

    return scheduler


async def start_scheduler():
    """Start the scheduler"""
    global scheduler

    if scheduler is None:
        scheduler = create_scheduler()

    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started with %s job(s)", len(scheduler.get_jobs()))


async def stop_scheduler():
    """Stop the scheduler gracefully"""
    global scheduler

    if scheduler and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler stopped successfully")
    scheduler = None
