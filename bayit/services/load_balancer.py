"""Weekly load balancing: per-day workload and heuristic scheduling suggestions.

Minute estimates and zones come from a pluggable TaskClassifier. The default
KeywordClassifier infers both from the task title; TemplateFieldClassifier
prefers the explicit estimated_minutes/zone stored on the template.
"""

import logging
from collections.abc import Sequence
from datetime import date, timedelta
from typing import Protocol

from bayit.core.config import Constants
from bayit.domain.task import Category, TaskItem
from bayit.models.service_models import DayLoad, LoadLevel, Suggestion, SuggestionPriority, SuggestionType


logger = logging.getLogger(__name__)

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

DEFAULT_ZONE = Category.GENERAL.value

# Checked in order; the first category whose keyword appears in the title wins.
CATEGORY_ZONES: dict[Category, tuple[str, ...]] = {
    Category.KITCHEN: ("kitchen", "מטבח"),
    Category.BATHROOM: ("bathroom", "toilet", "אמבטיה"),
    Category.LIVING: ("living room", "סלון"),
    Category.BEDROOM: ("bedroom", "חדר שינה"),
    Category.LAUNDRY: ("laundry", "כביסה"),
    Category.OUTDOOR: ("outdoor", "yard", "balcony", "חיצוני", "חוץ"),
    Category.PETS: ("pets", "litter", "dog", "בעלי חיים", "חיות מחמד"),
    Category.GENERAL: ("general", "כללי"),
}

HEAVY_TASK_KEYWORDS: tuple[str, ...] = (
    "deep clean",
    "ironing",
    "laundry",
    "folding",
    "mopping",
    "mop the floor",
    "עמוק",
    "גיהוץ",
    "כביסה",
    "קיפול",
    "שטיפת רצפות",
)
MEDIUM_TASK_KEYWORDS: tuple[str, ...] = (
    "clean",
    "vacuum",
    "shower",
    "stovetop",
    "bedding",
    "ניקוי",
    "שאיבת אבק",
    "מקלחת",
    "כיריים",
    "החלפת מצעים",
)


class TaskClassifier(Protocol):
    """Estimates how long a task takes and which zone it belongs to."""

    def estimate_minutes(self, task: TaskItem) -> int: ...

    def zone(self, task: TaskItem) -> str: ...


class KeywordClassifier:
    """Title keyword heuristics."""

    def estimate_minutes(self, task: TaskItem) -> int:
        title = task.title.lower()
        if any(keyword in title for keyword in HEAVY_TASK_KEYWORDS):
            return Constants.MINUTES_HEAVY_TASK
        if any(keyword in title for keyword in MEDIUM_TASK_KEYWORDS):
            return Constants.MINUTES_MEDIUM_TASK
        return Constants.MINUTES_LIGHT_TASK

    def zone(self, task: TaskItem) -> str:
        title = task.title.lower()
        for category, keywords in CATEGORY_ZONES.items():
            if any(keyword in title for keyword in keywords):
                return category.value
        return task.zone or DEFAULT_ZONE


class TemplateFieldClassifier:
    """Explicit template fields first, title keywords as the fallback for zone."""

    def __init__(self, fallback: TaskClassifier | None = None) -> None:
        self._fallback = fallback or KeywordClassifier()

    def estimate_minutes(self, task: TaskItem) -> int:
        return task.estimated_minutes

    def zone(self, task: TaskItem) -> str:
        if task.zone:
            return task.zone
        return self._fallback.zone(task)


def get_week_start(day: date) -> date:
    """Sunday on or before the given date."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def get_week_range(start_of_week: date) -> str:
    """Display label like '18-24 October' for a Sunday-first week."""
    end_of_week = start_of_week + timedelta(days=6)
    return f"{start_of_week.day}-{end_of_week.day} {start_of_week.strftime('%B')}"


def _day_name(day: date) -> str:
    return DAY_NAMES[(day.weekday() + 1) % 7]


def _classify_load(total_minutes: int) -> LoadLevel:
    if total_minutes > Constants.LOAD_HEAVY_MINUTES:
        return LoadLevel.HEAVY
    if total_minutes > Constants.LOAD_MODERATE_MINUTES:
        return LoadLevel.MODERATE
    return LoadLevel.LIGHT


def group_tasks_by_zone(
    tasks: Sequence[TaskItem],
    classifier: TaskClassifier | None = None,
) -> dict[str, list[TaskItem]]:
    """Bucket tasks by zone, keeping first-seen zone order and task order."""
    classifier = classifier or KeywordClassifier()
    grouped: dict[str, list[TaskItem]] = {}
    for task in tasks:
        grouped.setdefault(classifier.zone(task), []).append(task)
    return grouped


def analyze_daily_load(
    tasks: Sequence[TaskItem],
    start_of_week: date,
    classifier: TaskClassifier | None = None,
) -> list[DayLoad]:
    """Seven DayLoad entries starting at start_of_week."""
    classifier = classifier or KeywordClassifier()
    daily_loads = []

    for offset in range(7):
        day = start_of_week + timedelta(days=offset)
        day_tasks = [task for task in tasks if task.due_date == day]
        total_minutes = sum(classifier.estimate_minutes(task) for task in day_tasks)

        daily_loads.append(
            DayLoad(
                date=day,
                day_name=_day_name(day),
                tasks=day_tasks,
                total_minutes=total_minutes,
                difficulty=_classify_load(total_minutes),
                is_heavy=total_minutes > Constants.LOAD_HEAVY_MINUTES,
            )
        )

    return daily_loads


def _room_batch_suggestions(daily_loads: list[DayLoad], classifier: TaskClassifier) -> list[Suggestion]:
    suggestions = []
    for day_load in daily_loads:
        for zone, zone_tasks in group_tasks_by_zone(day_load.tasks, classifier).items():
            if len(zone_tasks) >= Constants.ROOM_BATCH_MIN_TASKS:
                suggestions.append(
                    Suggestion(
                        type=SuggestionType.ROOM_BATCH,
                        priority=SuggestionPriority.MEDIUM,
                        title=f"{len(zone_tasks)} {zone} tasks on {day_load.day_name}",
                        description=f"Do all the {zone} tasks in one go to save time!",
                        affected_dates=[day_load.date],
                    )
                )
    return suggestions


def _heavy_day_suggestions(daily_loads: list[DayLoad], heavy_days: list[DayLoad]) -> list[Suggestion]:
    loads_by_date = {day_load.date: day_load for day_load in daily_loads}
    suggestions = []
    for heavy in heavy_days:
        next_day = loads_by_date.get(heavy.date + timedelta(days=1))

        if next_day is not None and next_day.total_minutes < Constants.LOAD_NEXT_DAY_LIGHT_MINUTES:
            suggestions.append(
                Suggestion(
                    type=SuggestionType.HEAVY_DAY,
                    priority=SuggestionPriority.HIGH,
                    title=f"{heavy.day_name} is heavy ({heavy.total_minutes} minutes)",
                    description=(
                        f"Maybe move a task to {next_day.day_name}? "
                        f"It only has {next_day.total_minutes} minutes"
                    ),
                    affected_dates=[heavy.date, next_day.date],
                )
            )
        else:
            suggestions.append(
                Suggestion(
                    type=SuggestionType.HEAVY_DAY,
                    priority=SuggestionPriority.MEDIUM,
                    title=f"{heavy.day_name} is busy",
                    description=f"{heavy.total_minutes} minutes of work - better start early",
                    affected_dates=[heavy.date],
                )
            )
    return suggestions


def _empty_day_suggestions(daily_loads: list[DayLoad], heavy_days: list[DayLoad]) -> list[Suggestion]:
    empty_days = [day_load for day_load in daily_loads if not day_load.tasks]
    if not empty_days or not heavy_days:
        return []

    empty_day = empty_days[0]
    heavy_day = heavy_days[0]
    return [
        Suggestion(
            type=SuggestionType.EMPTY_DAY,
            priority=SuggestionPriority.LOW,
            title=f"{empty_day.day_name} is empty",
            description=f"You could move a task from {heavy_day.day_name} to {empty_day.day_name} to balance the week",
            affected_dates=[empty_day.date, heavy_day.date],
        )
    ]


def _energy_tip_suggestions(daily_loads: list[DayLoad]) -> list[Suggestion]:
    week_start = daily_loads[0:3]  # Sun-Tue
    week_end = daily_loads[4:7]  # Thu-Sat

    threshold = Constants.LOAD_ENERGY_TIP_MINUTES
    start_heavy = any(day_load.total_minutes > threshold for day_load in week_start)
    end_heavy_days = [day_load for day_load in week_end if day_load.total_minutes > threshold]

    if not end_heavy_days or start_heavy:
        return []

    return [
        Suggestion(
            type=SuggestionType.ENERGY_TIP,
            priority=SuggestionPriority.LOW,
            title="Energy tip",
            description="Move heavy tasks to the start of the week while you have more energy",
            affected_dates=[day_load.date for day_load in end_heavy_days],
        )
    ]


def generate_smart_suggestions(
    week_tasks: Sequence[TaskItem],
    start_of_week: date | None = None,
    classifier: TaskClassifier | None = None,
) -> list[Suggestion]:
    """Heuristic suggestions for a week's tasks.

    The four rule families (room batching, heavy days, empty days, energy tip)
    are evaluated independently and emitted in that order.

    Args:
        week_tasks: Tasks due during the week
        start_of_week: Sunday the week starts on (defaults to the current week)
        classifier: Minute/zone classifier (defaults to KeywordClassifier)
    """
    classifier = classifier or KeywordClassifier()
    if start_of_week is None:
        start_of_week = get_week_start(date.today())

    daily_loads = analyze_daily_load(week_tasks, start_of_week, classifier)
    heavy_days = [day_load for day_load in daily_loads if day_load.is_heavy]

    suggestions = [
        *_room_batch_suggestions(daily_loads, classifier),
        *_heavy_day_suggestions(daily_loads, heavy_days),
        *_empty_day_suggestions(daily_loads, heavy_days),
        *_energy_tip_suggestions(daily_loads),
    ]

    logger.debug(
        "Generated smart suggestions",
        extra={"week_start": start_of_week.isoformat(), "count": len(suggestions)},
    )
    return suggestions
