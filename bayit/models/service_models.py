"""Pydantic models for service layer return types.

These models provide type safety at service boundaries, converting database
dictionaries and in-memory rollups into typed objects with validation.
"""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, Field

from bayit.domain.reward import Reward
from bayit.domain.task import Category, TaskItem


class ScheduleResult(BaseModel):
    """Outcome of generating instances for one household."""

    household_id: str
    created: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)
    golden_rule_target: int | None = None
    instances: list[dict] = Field(default_factory=list, description="Rows that were persisted")


class InstancePlan(BaseModel):
    """Pure planning output: new rows to insert and bookkeeping."""

    to_insert: list[dict] = Field(default_factory=list)
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)


class HouseholdRunResult(BaseModel):
    """Per-household line in an auto-schedule report."""

    household_id: str
    household_name: str
    created: int
    skipped: int
    errors: list[str]


class AutoScheduleReport(BaseModel):
    """Outcome of generating instances for every household."""

    start_date: date
    end_date: date
    households: list[HouseholdRunResult] = Field(default_factory=list)
    total_created: int = 0
    total_skipped: int = 0
    total_errors: int = 0

    @property
    def success(self) -> bool:
        return self.total_errors == 0


class HealthBand(BaseModel):
    """Color/label band for a health score."""

    color: str
    label: str


class RoomCondition(BaseModel):
    """Aggregated health of one category."""

    category: Category
    score: int
    band: HealthBand


class LoadLevel(StrEnum):
    """Daily workload classification."""

    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class DayLoad(BaseModel):
    """Tasks and estimated minutes for one day of the week."""

    date: date
    day_name: str
    tasks: list[TaskItem]
    total_minutes: int
    difficulty: LoadLevel
    is_heavy: bool


class SuggestionType(StrEnum):
    """Kinds of scheduling suggestion."""

    ROOM_BATCH = "room_batch"
    HEAVY_DAY = "heavy_day"
    EMPTY_DAY = "empty_day"
    ENERGY_TIP = "energy_tip"


class SuggestionPriority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Suggestion(BaseModel):
    """Heuristic load-balancing suggestion."""

    type: SuggestionType
    priority: SuggestionPriority
    title: str
    description: str
    affected_dates: list[date] = Field(default_factory=list)


class CategoryStat(BaseModel):
    """Total and completed task counts for one category."""

    key: Category
    total: int
    completed: int


class DailyCompletionPoint(BaseModel):
    """Completions on a single day."""

    date: date
    day: str
    count: int


class WeeklyTrendPoint(BaseModel):
    """Completions during one Sunday-first week."""

    week_start: date
    count: int


class PartnerShare(BaseModel):
    """One member's share of household completions."""

    user_id: str
    completed: int
    percentage: int


class PartnerSplit(BaseModel):
    """How completions divide between household members."""

    shares: list[PartnerShare]
    total_completed: int
    golden_rule_target: int
    household_rate: int
    golden_rule_met: bool


class CalendarDay(BaseModel):
    """One cell of a calendar month grid."""

    date: date
    in_month: bool
    due_count: int
    completed_count: int
    is_today: bool = False


class CalendarMonth(BaseModel):
    """Sunday-first weeks covering a calendar month."""

    year: int
    month: int
    weeks: list[list[CalendarDay]]


class StatsSummary(BaseModel):
    """Dashboard rollup."""

    completed_this_week: int
    completed_this_month: int
    upcoming_tasks: int
    completion_rate: int
    categories: list[CategoryStat]
    weekly_trend: list[WeeklyTrendPoint]
    partner_split: PartnerSplit


class RewardProgress(BaseModel):
    """How close the household is to one reward."""

    reward: Reward
    current: int
    target: int
    progress: int = Field(..., ge=0, le=100)
    unlocked: bool


class JobStatus(BaseModel):
    """Execution history of one scheduled job."""

    job_name: str
    last_success: str | None = None
    last_failure: str | None = None
    last_error: str | None = None
    consecutive_failures: int = 0
    success_count: int = 0
    failure_count: int = 0
    currently_running: bool = False
    current_run_started: str | None = None


class DeadLetterEntry(BaseModel):
    """Job that kept failing after retries."""

    job_name: str
    error: str
    context: str
    timestamp: str
