"""Auto-scheduler: expands recurring templates into dated task instances.

Generation is idempotent. Existing instances in the range are indexed by
(template_id, due_date) before anything is inserted, so re-running a range
only fills the gaps. The storage layer additionally enforces a UNIQUE index on
the same pair; an insert rejected by it means a concurrent run already
created the instance and is counted as skipped.

Failure policy:
- templates or existing instances cannot be fetched: the household's run is
  aborted with GenerationFetchError and nothing is created;
- a template with a malformed recurrence, or a single failed insert: recorded
  in ScheduleResult.errors, the remaining templates/dates still proceed.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, timedelta

from pydantic import ValidationError

from bayit.core import db_client
from bayit.core.config import settings
from bayit.core.errors import GenerationFetchError, RecurrenceConfigError
from bayit.core.logging import log_with_household_context, span
from bayit.core.recurrence import iter_due_dates
from bayit.domain.task import InstanceStatus, TaskTemplate
from bayit.models.service_models import AutoScheduleReport, HouseholdRunResult, InstancePlan, ScheduleResult
from bayit.services import household_service


logger = logging.getLogger(__name__)

InstanceKey = tuple[str, str]


def instance_key(template_id: str, due_date: date | str) -> InstanceKey:
    """Index key for the one-instance-per-(template, due date) invariant."""
    due = due_date.isoformat() if isinstance(due_date, date) else due_date[:10]
    return (str(template_id), due)


def plan_instances(
    *,
    household_id: str,
    templates: Sequence[TaskTemplate],
    existing_keys: Iterable[InstanceKey],
    start_date: date,
    end_date: date,
) -> InstancePlan:
    """Work out which instances a range still needs, without touching storage.

    Rows come out ordered by template, then due date. The same inputs always
    produce the same plan.
    """
    existing = set(existing_keys)
    plan = InstancePlan()

    for template in templates:
        if not template.active:
            continue

        try:
            due_dates = list(iter_due_dates(template, start_date, end_date))
        except RecurrenceConfigError as e:
            plan.errors.append(str(e))
            continue

        for due_date in due_dates:
            key = instance_key(template.id, due_date)
            if key in existing:
                plan.skipped += 1
                continue

            existing.add(key)
            plan.to_insert.append(
                {
                    "template_id": template.id,
                    "household_id": household_id,
                    "assigned_to": template.default_assignee,
                    "due_date": due_date.isoformat(),
                    "status": InstanceStatus.PENDING.value,
                }
            )

    return plan


async def _fetch_active_templates(*, household_id: str) -> tuple[list[TaskTemplate], list[str]]:
    """Active templates for a household, plus an error per row that fails validation."""
    try:
        records = await db_client.list_all_records(
            collection="task_templates",
            filter_query=f'household_id = "{household_id}" && active = "true"',
            sort="id",
        )
    except db_client.DatabaseError as e:
        msg = f"Failed to fetch templates: {e}"
        raise GenerationFetchError(msg, household_id=household_id) from e

    templates = []
    errors = []
    for record in records:
        try:
            templates.append(TaskTemplate(**record))
        except ValidationError as e:
            errors.append(f"Template {record.get('id')} is malformed: {e.error_count()} validation error(s)")
    return templates, errors


async def _fetch_existing_keys(*, household_id: str, start_date: date, end_date: date) -> set[InstanceKey]:
    try:
        records = await db_client.list_all_records(
            collection="task_instances",
            filter_query=(
                f'household_id = "{household_id}" '
                f'&& due_date >= "{start_date.isoformat()}" '
                f'&& due_date <= "{end_date.isoformat()}"'
            ),
        )
    except db_client.DatabaseError as e:
        msg = f"Failed to fetch existing instances: {e}"
        raise GenerationFetchError(msg, household_id=household_id) from e

    return {instance_key(record["template_id"], record["due_date"]) for record in records}


async def generate_task_instances(
    *,
    household_id: str,
    start_date: date,
    end_date: date,
    golden_rule_target: int | None = None,
) -> ScheduleResult:
    """Generate task instances for a household over [start_date, end_date].

    Args:
        household_id: Household to generate for
        start_date: First date of the range (inclusive)
        end_date: Last date of the range (inclusive)
        golden_rule_target: Optional 0-100 override reported back on the result
            for fairness reporting; generation itself does not depend on it

    Returns:
        ScheduleResult with created/skipped counts, per-item errors and the new rows

    Raises:
        GenerationFetchError: If the household, its templates, or its existing
            instances cannot be loaded
    """
    with span("instance_generator.generate_task_instances"):
        try:
            household = await household_service.get_household(household_id=household_id)
        except db_client.DatabaseError as e:
            msg = f"Failed to fetch household: {e}"
            raise GenerationFetchError(msg, household_id=household_id) from e

        result = ScheduleResult(
            household_id=household_id,
            golden_rule_target=household_service.resolve_golden_rule_target(household, golden_rule_target),
        )

        templates, template_errors = await _fetch_active_templates(household_id=household_id)
        result.errors.extend(template_errors)
        if not templates:
            log_with_household_context(logger, "info", "No active templates", household_id=household_id)
            return result

        existing_keys = await _fetch_existing_keys(
            household_id=household_id, start_date=start_date, end_date=end_date
        )

        plan = plan_instances(
            household_id=household_id,
            templates=templates,
            existing_keys=existing_keys,
            start_date=start_date,
            end_date=end_date,
        )
        result.skipped = plan.skipped
        result.errors.extend(plan.errors)

        for row in plan.to_insert:
            try:
                record = await db_client.create_record(collection="task_instances", data=row)
            except db_client.DuplicateRecordError:
                result.skipped += 1
                log_with_household_context(
                    logger,
                    "warning",
                    "Instance already created by a concurrent run",
                    household_id=household_id,
                    template_id=row["template_id"],
                    due_date=row["due_date"],
                )
                continue
            except db_client.DatabaseError as e:
                result.errors.append(
                    f"Failed to insert instance for template {row['template_id']} on {row['due_date']}: {e}"
                )
                continue

            result.created += 1
            result.instances.append(record)

        log_with_household_context(
            logger,
            "info",
            "Generated task instances",
            household_id=household_id,
            created=result.created,
            skipped=result.skipped,
            errors=len(result.errors),
        )
        return result


def rolling_window(today: date, window_days: int | None = None) -> tuple[date, date]:
    """Today plus the following days of the configured window, inclusive."""
    days = window_days if window_days is not None else settings.schedule_window_days
    return today, today + timedelta(days=days - 1)


async def run_auto_schedule(*, today: date | None = None) -> AutoScheduleReport:
    """Generate the rolling window for every household, one household at a time.

    A household whose fetch fails is reported with its error and the run moves
    on to the next household. Failing to list households at all propagates so
    the scheduler can retry the whole run.
    """
    start_date, end_date = rolling_window(today or date.today())

    with span("instance_generator.run_auto_schedule"):
        households = await household_service.list_households()
        report = AutoScheduleReport(start_date=start_date, end_date=end_date)

        for household in households:
            try:
                result = await generate_task_instances(
                    household_id=household.id,
                    start_date=start_date,
                    end_date=end_date,
                    golden_rule_target=household.golden_rule_target,
                )
            except GenerationFetchError as e:
                logger.error("Auto-schedule aborted for household %s: %s", household.id, e)
                result = ScheduleResult(household_id=household.id, errors=[str(e)])

            report.households.append(
                HouseholdRunResult(
                    household_id=household.id,
                    household_name=household.name,
                    created=result.created,
                    skipped=result.skipped,
                    errors=result.errors,
                )
            )
            report.total_created += result.created
            report.total_skipped += result.skipped
            report.total_errors += len(result.errors)

        logger.info(
            "Auto-schedule run complete: %d created, %d skipped, %d errors across %d households",
            report.total_created,
            report.total_skipped,
            report.total_errors,
            len(households),
        )
        return report
