"""Couple reward catalogue models."""

from enum import StrEnum

from pydantic import BaseModel, Field


class RequirementType(StrEnum):
    """What a reward measures."""

    COMBINED_STREAK = "combined_streak"
    WEEKLY_TASKS = "weekly_tasks"
    GOLDEN_RULE = "golden_rule"
    CATEGORY_COMPLETE = "category_complete"
    TOTAL_TASKS = "total_tasks"
    BOTH_DAILY = "both_daily"
    SPEED_COMPLETE = "speed_complete"


class RewardRequirement(BaseModel):
    """Threshold a reward unlocks at."""

    type: RequirementType
    threshold: int = Field(..., ge=0)
    category: str | None = Field(default=None, description="Category for category_complete rewards")
    per_member: bool = Field(default=False, description="Every member must reach the threshold on their own")
    all_time: bool = Field(default=False, description="Count over all history instead of the current month")


class Reward(BaseModel):
    """Shared reward the household works towards."""

    id: str
    emoji: str
    title: str
    description: str
    requirement: RewardRequirement
