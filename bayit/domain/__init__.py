"""Domain models and DTOs."""

from bayit.domain.household import Household, HouseholdMember, MemberRole
from bayit.domain.reward import RequirementType, Reward, RewardRequirement
from bayit.domain.task import (
    Category,
    Completion,
    InstanceStatus,
    RecurrenceType,
    TaskInstance,
    TaskItem,
    TaskTemplate,
)


__all__ = [
    "Category",
    "Completion",
    "Household",
    "HouseholdMember",
    "InstanceStatus",
    "MemberRole",
    "RecurrenceType",
    "RequirementType",
    "Reward",
    "RewardRequirement",
    "TaskInstance",
    "TaskItem",
    "TaskTemplate",
]
