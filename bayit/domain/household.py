"""Household domain models and enums."""

from enum import StrEnum

from pydantic import BaseModel, Field


class MemberRole(StrEnum):
    """Role of a member within a household."""

    OWNER = "owner"
    MEMBER = "member"


class Household(BaseModel):
    """Group of members sharing a task list."""

    id: str = Field(..., description="Unique household ID from database")
    name: str = Field(..., description="Display name")
    golden_rule_target: int = Field(default=80, ge=0, le=100, description="Shared completion-percentage goal")
    emergency_mode: bool = Field(default=False, description="Restrict visible tasks to emergency templates")


class HouseholdMember(BaseModel):
    """Membership of a user in a household."""

    household_id: str
    user_id: str
    role: MemberRole = MemberRole.MEMBER
