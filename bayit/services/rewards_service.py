"""Couple rewards: progress towards shared treats unlocked by completing chores together."""

import logging
from collections.abc import Mapping, Sequence
from datetime import date, timedelta

from bayit.core.config import Constants
from bayit.core.logging import span
from bayit.core.numbers import round_half_up
from bayit.domain.reward import RequirementType, Reward, RewardRequirement
from bayit.domain.task import Category, InstanceStatus, TaskItem
from bayit.models.service_models import RewardProgress
from bayit.services import household_service, task_service
from bayit.services.load_balancer import get_week_start
from bayit.services.task_stats import compute_streak, completions_from_instances, count_golden_rule_hits


logger = logging.getLogger(__name__)

REWARDS: tuple[Reward, ...] = (
    Reward(
        id="movie-night",
        emoji="🎬",
        title="Movie night",
        description="Both partners complete tasks 3 days in a row",
        requirement=RewardRequirement(type=RequirementType.BOTH_DAILY, threshold=3),
    ),
    Reward(
        id="coffee-dessert",
        emoji="☕",
        title="Coffee and dessert",
        description="15 shared tasks this week",
        requirement=RewardRequirement(type=RequirementType.WEEKLY_TASKS, threshold=15),
    ),
    Reward(
        id="dinner-out",
        emoji="🍽️",
        title="Dinner out",
        description="Hit the golden rule 5 times this week",
        requirement=RewardRequirement(type=RequirementType.GOLDEN_RULE, threshold=5),
    ),
    Reward(
        id="ready-meal",
        emoji="🥘",
        title="Ready-made meal",
        description="All kitchen tasks done 7 days in a row",
        requirement=RewardRequirement(
            type=RequirementType.CATEGORY_COMPLETE, threshold=7, category=Category.KITCHEN.value
        ),
    ),
    Reward(
        id="spa-day",
        emoji="💆",
        title="Spa day",
        description="A 14-day combined streak",
        requirement=RewardRequirement(type=RequirementType.COMBINED_STREAK, threshold=14),
    ),
    Reward(
        id="movie-theater",
        emoji="🎥",
        title="Cinema trip",
        description="50 tasks together this month",
        requirement=RewardRequirement(type=RequirementType.TOTAL_TASKS, threshold=50),
    ),
    Reward(
        id="shopping-together",
        emoji="🛍️",
        title="Shopping together",
        description="Each partner completes 10 tasks this week",
        requirement=RewardRequirement(type=RequirementType.WEEKLY_TASKS, threshold=10, per_member=True),
    ),
    Reward(
        id="home-break",
        emoji="🏡",
        title="Break from home",
        description="A 7-day combined streak",
        requirement=RewardRequirement(type=RequirementType.COMBINED_STREAK, threshold=7),
    ),
    Reward(
        id="romantic-weekend",
        emoji="💑",
        title="Romantic weekend",
        description="A 30-day combined streak",
        requirement=RewardRequirement(type=RequirementType.COMBINED_STREAK, threshold=30),
    ),
    Reward(
        id="surprise",
        emoji="🎁",
        title="Surprise!",
        description="100 tasks together in total",
        requirement=RewardRequirement(type=RequirementType.TOTAL_TASKS, threshold=100, all_time=True),
    ),
)


def _completed(tasks: Sequence[TaskItem]) -> list[TaskItem]:
    return [task for task in tasks if task.status == InstanceStatus.COMPLETED and task.completed_at]


def count_completed_in_range(tasks: Sequence[TaskItem], start: date, end: date) -> int:
    """Completed tasks whose completion date falls in [start, end]."""
    return sum(1 for task in _completed(tasks) if start <= task.completed_at.date() <= end)


def count_completed_by_user(tasks: Sequence[TaskItem], start: date, end: date) -> dict[str, int]:
    """Per-user completion counts in [start, end]; tasks without a completer are ignored."""
    counts: dict[str, int] = {}
    for task in _completed(tasks):
        if task.completed_by and start <= task.completed_at.date() <= end:
            counts[task.completed_by] = counts.get(task.completed_by, 0) + 1
    return counts


def count_both_daily_streak(tasks: Sequence[TaskItem], members: Sequence[str], today: date) -> int:
    """Consecutive days, counting back from today, on which every member completed something.

    Needs at least two members; a single-member household never builds this streak.
    """
    if len(members) < 2:
        return 0

    users_by_day: dict[date, set[str]] = {}
    for task in _completed(tasks):
        if task.completed_by:
            users_by_day.setdefault(task.completed_at.date(), set()).add(task.completed_by)

    streak = 0
    for offset in range(Constants.STREAK_LOOKBACK_DAYS):
        users = users_by_day.get(today - timedelta(days=offset), set())
        if not all(member in users for member in members):
            break
        streak += 1
    return streak


def count_category_streak(tasks: Sequence[TaskItem], category: str, today: date) -> int:
    """Consecutive days, counting back from today, on which every due task in the category was completed.

    A day with no tasks due in the category ends the streak.
    """
    streak = 0
    for offset in range(Constants.STREAK_LOOKBACK_DAYS):
        day = today - timedelta(days=offset)
        due = [task for task in tasks if task.category == category and task.due_date == day]
        if not due or any(task.status != InstanceStatus.COMPLETED for task in due):
            break
        streak += 1
    return streak


def _current_value(
    requirement: RewardRequirement,
    *,
    tasks: Sequence[TaskItem],
    combined_streak: int,
    golden_rule_hits: int,
    members: Sequence[str],
    today: date,
) -> int:
    match requirement.type:
        case RequirementType.COMBINED_STREAK:
            return combined_streak
        case RequirementType.WEEKLY_TASKS if requirement.per_member:
            per_user = count_completed_by_user(tasks, get_week_start(today), today)
            counts = [per_user.get(member, 0) for member in members]
            return min(counts) if len(counts) >= 2 else 0
        case RequirementType.WEEKLY_TASKS:
            return count_completed_in_range(tasks, get_week_start(today), today)
        case RequirementType.GOLDEN_RULE:
            return golden_rule_hits
        case RequirementType.CATEGORY_COMPLETE:
            return count_category_streak(tasks, requirement.category or Category.KITCHEN.value, today)
        case RequirementType.TOTAL_TASKS if requirement.all_time:
            return sum(1 for task in tasks if task.status == InstanceStatus.COMPLETED)
        case RequirementType.TOTAL_TASKS:
            return count_completed_in_range(tasks, today.replace(day=1), today)
        case RequirementType.BOTH_DAILY:
            return count_both_daily_streak(tasks, members, today)
        case _:
            # speed_complete is defined but not tracked yet
            return 0


def compute_rewards_progress(
    tasks: Sequence[TaskItem],
    streaks: Mapping[str, int],
    golden_rule_hits: int,
    members: Sequence[str],
    today: date,
    rewards: Sequence[Reward] = REWARDS,
) -> list[RewardProgress]:
    """Progress towards every reward in catalogue order.

    Args:
        tasks: Task items of the household, completed or not
        streaks: Personal completion streak per member user ID
        golden_rule_hits: Days this week the household reached its golden rule target
        members: Household member user IDs
        today: Reference day
        rewards: Catalogue to evaluate

    Returns:
        One RewardProgress per reward; progress is a 0-100 percentage capped at 100
    """
    combined_streak = min(streaks.values()) if streaks else 0

    progress = []
    for reward in rewards:
        target = reward.requirement.threshold
        current = _current_value(
            reward.requirement,
            tasks=tasks,
            combined_streak=combined_streak,
            golden_rule_hits=golden_rule_hits,
            members=members,
            today=today,
        )
        percent = min(round_half_up(current / target * 100), 100) if target > 0 else 0
        progress.append(
            RewardProgress(reward=reward, current=current, target=target, progress=percent, unlocked=current >= target)
        )
    return progress


def get_next_reward(progress: Sequence[RewardProgress]) -> RewardProgress | None:
    """The locked reward closest to unlocking; the earliest one wins ties."""
    locked = [item for item in progress if not item.unlocked]
    if not locked:
        return None
    return max(locked, key=lambda item: item.progress)


def get_unlocked_count(progress: Sequence[RewardProgress]) -> int:
    return sum(1 for item in progress if item.unlocked)


async def get_rewards_progress(*, household_id: str, today: date | None = None) -> list[RewardProgress]:
    """Load a household's tasks and compute its reward progress for today."""
    today = today or date.today()

    with span("rewards_service.get_rewards_progress"):
        household = await household_service.get_household(household_id=household_id)
        members = await household_service.list_member_ids(household_id=household_id)
        tasks = await task_service.list_task_items(household_id=household_id)

        completions = completions_from_instances(tasks)
        streaks = {member: compute_streak(completions, member, today) for member in members}
        hits = count_golden_rule_hits(tasks, household.golden_rule_target, get_week_start(today), today)

        progress = compute_rewards_progress(tasks, streaks, hits, members, today)
        logger.info(
            "Household %s has unlocked %d of %d rewards", household_id, get_unlocked_count(progress), len(progress)
        )
        return progress
