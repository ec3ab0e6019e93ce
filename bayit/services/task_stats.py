"""Completion statistics: pure rollups over task items and completions.

Every function takes the reference day explicitly so results are
reproducible; nothing here touches storage.
"""

import calendar
from collections.abc import Sequence
from datetime import date, timedelta

from bayit.core.config import Constants
from bayit.core.numbers import percentage
from bayit.core.recurrence import date_range
from bayit.domain.task import Category, Completion, InstanceStatus, TaskItem
from bayit.models.service_models import (
    CalendarDay,
    CalendarMonth,
    CategoryStat,
    DailyCompletionPoint,
    PartnerShare,
    PartnerSplit,
    StatsSummary,
    WeeklyTrendPoint,
)
from bayit.services.load_balancer import get_week_start


def completions_from_instances(tasks: Sequence[TaskItem]) -> list[Completion]:
    """Completion records for every completed task that says who and when."""
    return [
        Completion(
            instance_id=task.id,
            template_id=task.template_id,
            user_id=task.completed_by,
            completed_at=task.completed_at,
            category=task.category,
        )
        for task in tasks
        if task.status == InstanceStatus.COMPLETED and task.completed_by and task.completed_at
    ]


def _count_between(completions: Sequence[Completion], start: date, end: date) -> int:
    return sum(1 for completion in completions if start <= completion.completed_at.date() <= end)


def count_completed_this_week(completions: Sequence[Completion], today: date) -> int:
    """Completions in the 7 days ending today, inclusive."""
    return _count_between(completions, today - timedelta(days=6), today)


def count_completed_this_month(completions: Sequence[Completion], today: date) -> int:
    """Completions from the first of today's month up to today."""
    return _count_between(completions, today.replace(day=1), today)


def count_upcoming_tasks(tasks: Sequence[TaskItem], today: date) -> int:
    """Tasks not yet completed that are due between today and a week from today."""
    limit = today + timedelta(days=Constants.UPCOMING_WINDOW_DAYS)
    return sum(
        1
        for task in tasks
        if task.due_date is not None and task.status != InstanceStatus.COMPLETED and today <= task.due_date <= limit
    )


def compute_completion_rate(tasks: Sequence[TaskItem]) -> int:
    """Completed share of tasks as a rounded percentage (0 for no tasks)."""
    completed = sum(1 for task in tasks if task.status == InstanceStatus.COMPLETED)
    return percentage(completed, len(tasks))


def compute_category_stats(tasks: Sequence[TaskItem]) -> list[CategoryStat]:
    """Per-category totals, largest category first."""
    counts: dict[Category, list[int]] = {}
    for task in tasks:
        total_completed = counts.setdefault(Category(task.category), [0, 0])
        total_completed[0] += 1
        if task.status == InstanceStatus.COMPLETED:
            total_completed[1] += 1

    stats = [CategoryStat(key=key, total=total, completed=completed) for key, (total, completed) in counts.items()]
    return sorted(stats, key=lambda stat: stat.total, reverse=True)


def compute_monthly_data(completions: Sequence[Completion], today: date) -> list[DailyCompletionPoint]:
    """Daily completion counts for the last 30 days including today, oldest first."""
    counts_by_day: dict[date, int] = {}
    for completion in completions:
        day = completion.completed_at.date()
        counts_by_day[day] = counts_by_day.get(day, 0) + 1

    start = today - timedelta(days=Constants.MONTHLY_DATA_DAYS - 1)
    return [
        DailyCompletionPoint(date=day, day=str(day.day), count=counts_by_day.get(day, 0))
        for day in date_range(start, today)
    ]


def compute_weekly_trend(completions: Sequence[Completion], today: date, weeks: int = 4) -> list[WeeklyTrendPoint]:
    """Completions per Sunday-first week for the last `weeks` weeks, oldest first."""
    current_week = get_week_start(today)
    points = []
    for offset in range(weeks - 1, -1, -1):
        week_start = current_week - timedelta(weeks=offset)
        week_end = min(week_start + timedelta(days=6), today)
        points.append(WeeklyTrendPoint(week_start=week_start, count=_count_between(completions, week_start, week_end)))
    return points


def compute_partner_split(
    tasks: Sequence[TaskItem],
    completions: Sequence[Completion],
    member_ids: Sequence[str],
    golden_rule_target: int,
) -> PartnerSplit:
    """How completions divide between members, and whether the household hit its target.

    Members are listed in the given order; anyone else who completed tasks is
    appended after them.
    """
    counts = dict.fromkeys(member_ids, 0)
    for completion in completions:
        counts[completion.user_id] = counts.get(completion.user_id, 0) + 1

    total = sum(counts.values())
    household_rate = compute_completion_rate(tasks)
    return PartnerSplit(
        shares=[
            PartnerShare(user_id=user_id, completed=count, percentage=percentage(count, total))
            for user_id, count in counts.items()
        ],
        total_completed=total,
        golden_rule_target=golden_rule_target,
        household_rate=household_rate,
        golden_rule_met=bool(tasks) and household_rate >= golden_rule_target,
    )


def count_golden_rule_hits(tasks: Sequence[TaskItem], golden_rule_target: int, start: date, end: date) -> int:
    """Days in [start, end] whose due tasks were completed at or above the target rate.

    Days with nothing due do not count.
    """
    hits = 0
    for day in date_range(start, end):
        due = [task for task in tasks if task.due_date == day]
        if due and compute_completion_rate(due) >= golden_rule_target:
            hits += 1
    return hits


def compute_streak(completions: Sequence[Completion], user_id: str, today: date) -> int:
    """Consecutive days with at least one completion by the user.

    The streak counts back from today, or from yesterday if nothing has been
    completed yet today.
    """
    active_days = {completion.completed_at.date() for completion in completions if completion.user_id == user_id}
    day = today if today in active_days else today - timedelta(days=1)

    streak = 0
    while day in active_days and streak < Constants.STREAK_LOOKBACK_DAYS:
        streak += 1
        day -= timedelta(days=1)
    return streak


def build_calendar_month(
    tasks: Sequence[TaskItem],
    year: int,
    month: int,
    today: date | None = None,
) -> CalendarMonth:
    """Sunday-first grid covering a month, each day annotated with due/completed counts.

    Leading and trailing days from adjacent months pad the first and last week
    and are flagged with in_month=False.
    """
    due_counts: dict[date, int] = {}
    completed_counts: dict[date, int] = {}
    for task in tasks:
        if task.due_date is None:
            continue
        due_counts[task.due_date] = due_counts.get(task.due_date, 0) + 1
        if task.status == InstanceStatus.COMPLETED:
            completed_counts[task.due_date] = completed_counts.get(task.due_date, 0) + 1

    first_day = date(year, month, 1)
    last_day = date(year, month, calendar.monthrange(year, month)[1])
    grid_start = get_week_start(first_day)
    grid_end = get_week_start(last_day) + timedelta(days=6)

    weeks: list[list[CalendarDay]] = []
    for day in date_range(grid_start, grid_end):
        if (day - grid_start).days % 7 == 0:
            weeks.append([])
        weeks[-1].append(
            CalendarDay(
                date=day,
                in_month=day.month == month,
                due_count=due_counts.get(day, 0),
                completed_count=completed_counts.get(day, 0),
                is_today=day == today,
            )
        )

    return CalendarMonth(year=year, month=month, weeks=weeks)


def build_stats_summary(
    tasks: Sequence[TaskItem],
    today: date,
    member_ids: Sequence[str],
    golden_rule_target: int,
    completions: Sequence[Completion] | None = None,
) -> StatsSummary:
    """Dashboard rollup. Completions are derived from the tasks when not supplied."""
    if completions is None:
        completions = completions_from_instances(tasks)

    return StatsSummary(
        completed_this_week=count_completed_this_week(completions, today),
        completed_this_month=count_completed_this_month(completions, today),
        upcoming_tasks=count_upcoming_tasks(tasks, today),
        completion_rate=compute_completion_rate(tasks),
        categories=compute_category_stats(tasks),
        weekly_trend=compute_weekly_trend(completions, today),
        partner_split=compute_partner_split(tasks, completions, member_ids, golden_rule_target),
    )
