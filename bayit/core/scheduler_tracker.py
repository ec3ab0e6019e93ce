"""Job execution tracking and retries for scheduled jobs."""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from bayit.core.config import Constants
from bayit.models.service_models import DeadLetterEntry, JobStatus


logger = logging.getLogger(__name__)


class JobTracker:
    """Track job execution history and health status in process memory."""

    def __init__(self) -> None:
        self._jobs: dict[str, JobStatus] = {}
        self._dead_letter_queue: deque[DeadLetterEntry] = deque(maxlen=Constants.TRACKER_DEAD_LETTER_QUEUE_MAXLEN)

    def _status(self, job_name: str) -> JobStatus:
        if job_name not in self._jobs:
            self._jobs[job_name] = JobStatus(job_name=job_name)
        return self._jobs[job_name]

    async def record_job_start(self, job_name: str) -> None:
        status = self._status(job_name)
        status.currently_running = True
        status.current_run_started = datetime.now(UTC).isoformat()

    async def record_job_success(self, job_name: str) -> None:
        """Record a successful run and reset the consecutive failure counter."""
        status = self._status(job_name)
        status.last_success = datetime.now(UTC).isoformat()
        status.consecutive_failures = 0
        status.success_count += 1
        status.currently_running = False
        status.current_run_started = None

    async def record_job_failure(self, job_name: str, error: str) -> int:
        """Record a failed run.

        Args:
            job_name: Name of the scheduled job
            error: Error message, truncated before storing

        Returns:
            Number of consecutive failed runs including this one
        """
        status = self._status(job_name)
        status.last_failure = datetime.now(UTC).isoformat()
        status.last_error = error[: Constants.TRACKER_ERROR_MAX_CHARS]
        status.consecutive_failures += 1
        status.failure_count += 1
        status.currently_running = False
        status.current_run_started = None
        return status.consecutive_failures

    async def get_job_status(self, job_name: str) -> JobStatus:
        return self._jobs.get(job_name, JobStatus(job_name=job_name)).model_copy()

    async def add_to_dead_letter_queue(self, job_name: str, error: str, context: str) -> None:
        """Add a persistently failing job to the dead letter queue."""
        entry = DeadLetterEntry(job_name=job_name, error=error, context=context, timestamp=datetime.now(UTC).isoformat())
        self._dead_letter_queue.append(entry)

        logger.error(
            "Job added to dead letter queue",
            extra={
                "job_name": job_name,
                "error": error,
                "context": context,
                "timestamp": entry.timestamp,
            },
        )

    def get_dead_letter_queue(self) -> list[DeadLetterEntry]:
        return list(self._dead_letter_queue)

    def reset(self) -> None:
        """Forget all history."""
        self._jobs.clear()
        self._dead_letter_queue.clear()


# Global job tracker instance
job_tracker = JobTracker()


async def retry_job_with_backoff(
    job_func: Callable[[], Awaitable[object]],
    job_name: str,
    max_retries: int = Constants.JOB_MAX_RETRIES,
    base_delay: float = Constants.JOB_RETRY_BASE_DELAY_SECONDS,
) -> bool:
    """Execute job with retry logic and exponential backoff.

    Args:
        job_func: Async function to execute
        job_name: Name of the job for tracking
        max_retries: Maximum number of attempts
        base_delay: Base delay in seconds for exponential backoff

    Returns:
        True if an attempt succeeded, False once every attempt has failed
    """
    await job_tracker.record_job_start(job_name)

    last_error = None
    for attempt in range(max_retries):
        try:
            logger.info("Executing %s (attempt %d/%d)", job_name, attempt + 1, max_retries)
            await job_func()
        except Exception as e:
            last_error = str(e)
            logger.error("%s failed on attempt %d/%d: %s", job_name, attempt + 1, max_retries, last_error)

            if attempt < max_retries - 1:
                delay = base_delay**attempt
                logger.info("Retrying %s in %.1fs", job_name, delay)
                await asyncio.sleep(delay)
            continue

        await job_tracker.record_job_success(job_name)
        logger.info("%s completed successfully", job_name)
        return True

    error_msg = f"Failed after {max_retries} attempts: {last_error}"
    consecutive_failures = await job_tracker.record_job_failure(job_name, error_msg)
    logger.error(
        "%s failed after all retry attempts",
        job_name,
        extra={"error": error_msg, "consecutive_failures": consecutive_failures},
    )

    if consecutive_failures >= Constants.TRACKER_DEAD_LETTER_THRESHOLD:
        await job_tracker.add_to_dead_letter_queue(
            job_name=job_name,
            error=last_error or "Unknown error",
            context=f"Failed {consecutive_failures} consecutive times",
        )
    return False
