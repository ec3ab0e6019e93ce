"""In-process scheduler for the daily auto-schedule job."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from bayit.core.config import settings
from bayit.core.scheduler_tracker import retry_job_with_backoff
from bayit.services.instance_generator import run_auto_schedule


logger = logging.getLogger(__name__)

AUTO_SCHEDULE_JOB = "auto_schedule"

# Global scheduler instance
scheduler = AsyncIOScheduler()


async def auto_schedule_job() -> None:
    """Generate the rolling window of task instances for every household.

    Runs daily. Households that fail are reported in the run report; only a
    failure to list households makes the job itself fail and retry.
    """
    report = await run_auto_schedule()
    if not report.success:
        logger.warning(
            "Auto-schedule finished with %d errors",
            report.total_errors,
            extra={"start_date": report.start_date.isoformat(), "end_date": report.end_date.isoformat()},
        )


async def run_auto_schedule_with_retry() -> bool:
    """Run the auto-schedule job with retries and failure tracking."""
    return await retry_job_with_backoff(auto_schedule_job, AUTO_SCHEDULE_JOB)


def start_scheduler() -> None:
    """Start the scheduler and register the auto-schedule job.

    This should be called during FastAPI app startup.
    """
    logger.info("Starting scheduler")

    scheduler.add_job(
        run_auto_schedule_with_retry,
        trigger=CronTrigger(hour=settings.auto_schedule_hour, minute=settings.auto_schedule_minute),
        id=AUTO_SCHEDULE_JOB,
        name="Generate Task Instances",
        replace_existing=True,
    )
    logger.info(
        "Scheduled auto-schedule job: daily at %02d:%02d",
        settings.auto_schedule_hour,
        settings.auto_schedule_minute,
    )

    scheduler.start()
    logger.info("Scheduler started successfully")


def stop_scheduler() -> None:
    """Stop the scheduler.

    This should be called during FastAPI app shutdown.
    """
    logger.info("Stopping scheduler")
    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")
