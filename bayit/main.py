"""bayit - household chore scheduling service."""

import logging
import secrets
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header
from fastapi.responses import JSONResponse

from bayit.core.config import constants, settings
from bayit.core.db_client import DatabaseError, init_db
from bayit.core.errors import classify_generation_error
from bayit.core.logging import configure_logfire, instrument_fastapi
from bayit.core.scheduler import AUTO_SCHEDULE_JOB, start_scheduler, stop_scheduler
from bayit.core.scheduler_tracker import job_tracker
from bayit.services.instance_generator import run_auto_schedule


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    configure_logfire()

    await init_db()
    logger.info("Database initialized")

    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="bayit",
    description="Household chore scheduling and statistics",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)


def _is_authorized(authorization: str | None) -> bool:
    try:
        secret = settings.require_credential("cron_secret", "Cron")
    except ValueError:
        logger.warning("Rejected auto-schedule trigger: cron secret not configured")
        return False
    return authorization is not None and secrets.compare_digest(authorization, f"Bearer {secret}")


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=constants.HTTP_OK)


@app.get("/health/scheduler")
async def scheduler_health_check() -> JSONResponse:
    """Scheduler health check endpoint with job statuses."""
    status = await job_tracker.get_job_status(AUTO_SCHEDULE_JOB)
    dlq = job_tracker.get_dead_letter_queue()

    overall_status = "degraded" if status.consecutive_failures > 0 else "healthy"
    if dlq:
        overall_status = "critical"

    return JSONResponse(
        content={
            "status": overall_status,
            "jobs": {AUTO_SCHEDULE_JOB: status.model_dump()},
            "dead_letter_queue_size": len(dlq),
            "dead_letter_queue": [entry.model_dump() for entry in dlq],
        },
        status_code=constants.HTTP_OK if overall_status == "healthy" else constants.HTTP_SERVICE_UNAVAILABLE,
    )


@app.api_route("/api/cron/auto-schedule", methods=["GET", "POST"])
async def trigger_auto_schedule(authorization: str | None = Header(default=None)) -> JSONResponse:
    """Generate the rolling window for every household on demand.

    Requires `Authorization: Bearer <CRON_SECRET>`.
    """
    if not _is_authorized(authorization):
        return JSONResponse(content={"error": "Unauthorized"}, status_code=constants.HTTP_UNAUTHORIZED)

    try:
        report = await run_auto_schedule()
    except DatabaseError as e:
        error = classify_generation_error(e)
        logger.error("Auto-schedule trigger failed", extra={"code": error.code, "error": error.message})
        return JSONResponse(
            content={"success": False, "error": error.model_dump(mode="json")},
            status_code=constants.HTTP_SERVER_ERROR,
        )

    return JSONResponse(
        content={
            "success": report.success,
            "date_range": {"start": report.start_date.isoformat(), "end": report.end_date.isoformat()},
            "totals": {
                "created": report.total_created,
                "skipped": report.total_skipped,
                "errors": report.total_errors,
            },
            "households": [household.model_dump() for household in report.households],
        },
        status_code=constants.HTTP_OK,
    )
