"""Recurrence calendar: which dates a task template is due on.

recurrence_day meaning per recurrence type:
- daily: ignored (always due)
- weekly: day of week (0=Sunday .. 6=Saturday)
- biweekly: day of week, and only on even ISO week numbers
- monthly: day of month (1-31)
- quarterly: day of month, and only in January, April, July and October
- yearly: day of year (1-366)

When recurrence_day is missing, the template's creation date is the anchor and
supplies the weekday, day of month, or day of year.
"""

from collections.abc import Iterator
from datetime import date, datetime, timedelta

from croniter import croniter

from bayit.core.errors import RecurrenceConfigError
from bayit.domain.task import RecurrenceType, TaskTemplate


QUARTER_MONTHS = (1, 4, 7, 10)

_DAY_RANGES: dict[RecurrenceType, tuple[int, int]] = {
    RecurrenceType.WEEKLY: (0, 6),
    RecurrenceType.BIWEEKLY: (0, 6),
    RecurrenceType.MONTHLY: (1, 31),
    RecurrenceType.QUARTERLY: (1, 31),
    RecurrenceType.YEARLY: (1, 366),
}


def iso_week_number(day: date) -> int:
    """ISO 8601 week number (1-53, Monday start)."""
    return day.isocalendar()[1]


def day_of_year(day: date) -> int:
    """Day of year (1-365/366)."""
    return day.timetuple().tm_yday


def cron_weekday(day: date) -> int:
    """Day of week in cron numbering (0=Sunday .. 6=Saturday)."""
    return (day.weekday() + 1) % 7


def date_range(start: date, end: date) -> Iterator[date]:
    """Every calendar date in the closed range [start, end]."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def _parse_recurrence_type(template: TaskTemplate) -> RecurrenceType:
    try:
        return RecurrenceType(template.recurrence_type)
    except ValueError as e:
        msg = f"Unrecognized recurrence type '{template.recurrence_type}' on template {template.id}"
        raise RecurrenceConfigError(msg, template_id=template.id) from e


def _anchor_day(template: TaskTemplate, recurrence_type: RecurrenceType) -> int:
    """Derive the recurrence day from the template's creation date."""
    if template.created is None:
        msg = f"Template {template.id} has no recurrence_day and no creation date to anchor a {recurrence_type} cadence"
        raise RecurrenceConfigError(msg, template_id=template.id)

    anchor = template.created.date()
    if recurrence_type in (RecurrenceType.WEEKLY, RecurrenceType.BIWEEKLY):
        return cron_weekday(anchor)
    if recurrence_type in (RecurrenceType.MONTHLY, RecurrenceType.QUARTERLY):
        return anchor.day
    return day_of_year(anchor)


def resolve_recurrence(template: TaskTemplate) -> tuple[RecurrenceType, int | None]:
    """Validate a template's recurrence settings and return (type, effective day).

    Raises:
        RecurrenceConfigError: If the type is unknown or the day is out of range
    """
    recurrence_type = _parse_recurrence_type(template)
    if recurrence_type == RecurrenceType.DAILY:
        return recurrence_type, None

    recurrence_day = template.recurrence_day
    if recurrence_day is None:
        recurrence_day = _anchor_day(template, recurrence_type)

    low, high = _DAY_RANGES[recurrence_type]
    if not low <= recurrence_day <= high:
        msg = (
            f"recurrence_day {recurrence_day} is out of range {low}-{high} "
            f"for {recurrence_type} template {template.id}"
        )
        raise RecurrenceConfigError(msg, template_id=template.id)

    return recurrence_type, recurrence_day


def _cron_expression(recurrence_type: RecurrenceType, recurrence_day: int | None) -> str | None:
    """Cron expression matching the due dates, or None when cron cannot express the cadence."""
    if recurrence_type == RecurrenceType.DAILY:
        return "0 0 * * *"
    if recurrence_type in (RecurrenceType.WEEKLY, RecurrenceType.BIWEEKLY):
        return f"0 0 * * {recurrence_day}"
    if recurrence_type == RecurrenceType.MONTHLY:
        return f"0 0 {recurrence_day} * *"
    if recurrence_type == RecurrenceType.QUARTERLY:
        months = ",".join(str(m) for m in QUARTER_MONTHS)
        return f"0 0 {recurrence_day} {months} *"
    return None


def _matches(recurrence_type: RecurrenceType, recurrence_day: int | None, day: date) -> bool:
    if recurrence_type == RecurrenceType.YEARLY:
        return day_of_year(day) == recurrence_day

    cron_expr = _cron_expression(recurrence_type, recurrence_day)
    if not croniter.match(cron_expr, datetime.combine(day, datetime.min.time())):
        return False
    if recurrence_type == RecurrenceType.BIWEEKLY:
        return iso_week_number(day) % 2 == 0
    return True


def is_due_on(template: TaskTemplate, day: date) -> bool:
    """Return True if the template should have an instance on the given date."""
    recurrence_type, recurrence_day = resolve_recurrence(template)
    return _matches(recurrence_type, recurrence_day, day)


def iter_due_dates(template: TaskTemplate, start: date, end: date) -> Iterator[date]:
    """Ordered due dates for a template within [start, end].

    Validation happens eagerly, so a malformed template raises here rather than
    on first iteration. Empty when start is after end.
    """
    recurrence_type, recurrence_day = resolve_recurrence(template)
    return (day for day in date_range(start, end) if _matches(recurrence_type, recurrence_day, day))
