"""Room health scoring.

Health is a 0-100 freshness score derived from the time since a chore was last
completed relative to its recurrence cadence. Degradation is linear: 100 right
after completion, 0 once the cadence's max age has elapsed. Scores are never
stored; they are recomputed on read.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Protocol

from bayit.core.config import Constants
from bayit.core.numbers import round_half_up
from bayit.domain.task import Category, RecurrenceType
from bayit.models.service_models import HealthBand, RoomCondition


MAX_AGE_HOURS: dict[RecurrenceType, int] = {
    RecurrenceType.DAILY: Constants.HEALTH_MAX_HOURS_DAILY,
    RecurrenceType.WEEKLY: Constants.HEALTH_MAX_HOURS_WEEKLY,
    RecurrenceType.BIWEEKLY: Constants.HEALTH_MAX_HOURS_BIWEEKLY,
    RecurrenceType.MONTHLY: Constants.HEALTH_MAX_HOURS_MONTHLY,
    RecurrenceType.QUARTERLY: Constants.HEALTH_MAX_HOURS_QUARTERLY,
    RecurrenceType.YEARLY: Constants.HEALTH_MAX_HOURS_YEARLY,
}

EXCELLENT = HealthBand(color="#22C55E", label="excellent")
GOOD = HealthBand(color="#EAB308", label="good")
NEEDS_ATTENTION = HealthBand(color="#F97316", label="needs attention")
NEGLECTED = HealthBand(color="#EF4444", label="neglected")


class HealthItem(Protocol):
    """Anything carrying a category, a last completion time and a cadence."""

    id: str
    template_id: str | None
    category: str
    completed_at: datetime | None
    recurrence_type: str


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def compute_room_health(
    last_completed_at: datetime | None,
    recurrence_type: RecurrenceType | str,
    now: datetime | None = None,
) -> int:
    """Calculate health score (0-100) based on time since last completion.

    Args:
        last_completed_at: When the chore was last completed, None if never
        recurrence_type: Cadence of the chore
        now: Reference time (defaults to the current UTC time)

    Returns:
        Integer score clamped to [0, 100]; 0 if never completed

    Raises:
        ValueError: If recurrence_type is not a known cadence
    """
    if last_completed_at is None:
        return 0

    max_hours = MAX_AGE_HOURS[RecurrenceType(recurrence_type)]
    current_time = _as_aware(now) if now is not None else datetime.now(UTC)
    elapsed_hours = (current_time - _as_aware(last_completed_at)).total_seconds() / 3600

    score = 100 - (elapsed_hours / max_hours) * 100
    return max(0, min(100, round_half_up(score)))


def compute_category_health(
    items: Iterable[HealthItem],
    category: Category | str,
    now: datetime | None = None,
) -> int:
    """Average health of all items in a category, 0 if none match."""
    matching = [item for item in items if item.category == category]
    if not matching:
        return 0

    total = sum(compute_room_health(item.completed_at, item.recurrence_type, now) for item in matching)
    return round_half_up(total / len(matching))


def health_band(score: int) -> HealthBand:
    """Map a score to its band. Lower bounds are inclusive."""
    if score >= Constants.HEALTH_EXCELLENT_MIN:
        return EXCELLENT
    if score >= Constants.HEALTH_GOOD_MIN:
        return GOOD
    if score >= Constants.HEALTH_ATTENTION_MIN:
        return NEEDS_ATTENTION
    return NEGLECTED


def get_health_color(score: int) -> str:
    """Hex color for a health score."""
    return health_band(score).color


def get_health_label(score: int) -> str:
    """Label for a health score."""
    return health_band(score).label


def latest_per_template(items: Iterable[HealthItem]) -> list[HealthItem]:
    """Keep one item per template: the most recently completed one.

    A template whose instances were never completed keeps one uncompleted item,
    so it still scores 0. Items without a template_id stand alone.
    """
    latest: dict[str, HealthItem] = {}
    for item in items:
        key = item.template_id or f"item:{item.id}"
        current = latest.get(key)
        if current is None or _completed_later(item, current):
            latest[key] = item
    return list(latest.values())


def _completed_later(item: HealthItem, other: HealthItem) -> bool:
    if item.completed_at is None:
        return False
    return other.completed_at is None or _as_aware(item.completed_at) > _as_aware(other.completed_at)


def compute_room_conditions(items: Iterable[HealthItem], now: datetime | None = None) -> list[RoomCondition]:
    """Health of every category present in items, worst first.

    Items may be every instance of a household; each template counts once, by
    its latest completion. Ties keep Category declaration order.
    """
    items = latest_per_template(items)
    present = {Category(item.category) for item in items}
    conditions = []
    for category in Category:
        if category not in present:
            continue
        score = compute_category_health(items, category, now)
        conditions.append(RoomCondition(category=category, score=score, band=health_band(score)))
    return sorted(conditions, key=lambda condition: condition.score)
