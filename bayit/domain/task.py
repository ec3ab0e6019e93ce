"""Task template and instance domain models."""

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class Category(StrEnum):
    """Room or area a chore belongs to."""

    KITCHEN = "kitchen"
    BATHROOM = "bathroom"
    LIVING = "living"
    BEDROOM = "bedroom"
    LAUNDRY = "laundry"
    OUTDOOR = "outdoor"
    PETS = "pets"
    GENERAL = "general"


class RecurrenceType(StrEnum):
    """How often a template produces an instance."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class InstanceStatus(StrEnum):
    """Task instance lifecycle state."""

    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class TaskTemplate(BaseModel):
    """Recurring chore definition."""

    id: str = Field(..., description="Unique template ID from database")
    household_id: str = Field(..., description="Owning household ID")
    title: str = Field(..., description="Chore title (e.g., 'Wipe kitchen counters')")
    description: str = Field(default="", description="Detailed chore description")
    category: Category = Field(default=Category.GENERAL, description="Room/area category")
    zone: str | None = Field(default=None, description="Explicit zone used for batching suggestions")
    estimated_minutes: int = Field(default=10, ge=0, description="Estimated duration in minutes")
    # Kept as a plain string so an unrecognized value reaches the calendar and is reported per template
    recurrence_type: str = Field(..., description="One of the RecurrenceType values")
    recurrence_day: int | None = Field(
        default=None,
        description="Weekday (0=Sunday), day of month, or day of year depending on recurrence_type",
    )
    default_assignee: str | None = Field(default=None, description="User ID assigned to generated instances")
    is_emergency: bool = Field(default=False, description="Part of the reduced emergency-mode task set")
    active: bool = Field(default=True, description="Soft-deactivation flag")
    created: datetime | None = Field(default=None, description="Creation timestamp, the recurrence anchor")


class TaskInstance(BaseModel):
    """One dated occurrence of a template."""

    id: str = Field(..., description="Unique instance ID from database")
    template_id: str = Field(..., description="Template this instance was generated from")
    household_id: str = Field(..., description="Owning household ID")
    assigned_to: str | None = Field(default=None, description="Assigned user ID")
    due_date: date = Field(..., description="Calendar date the instance is due")
    status: InstanceStatus = Field(default=InstanceStatus.PENDING, description="Current state")
    completed_at: datetime | None = Field(default=None, description="Completion timestamp")
    completed_by: str | None = Field(default=None, description="User who completed the instance")
    rating: int | None = Field(default=None, ge=1, le=5, description="Optional 1-5 rating")
    notes: str | None = Field(default=None, description="Optional notes")


class TaskItem(BaseModel):
    """Read-side join of an instance with the template fields the views need."""

    id: str
    template_id: str | None = None
    title: str
    category: Category = Category.GENERAL
    zone: str | None = None
    estimated_minutes: int = 10
    recurrence_type: str = RecurrenceType.DAILY
    due_date: date | None = None
    status: InstanceStatus = InstanceStatus.PENDING
    assigned_to: str | None = None
    completed_at: datetime | None = None
    completed_by: str | None = None
    is_emergency: bool = False

    @classmethod
    def from_instance(cls, instance: TaskInstance, template: TaskTemplate) -> "TaskItem":
        """Build the joined view of an instance and its template."""
        return cls(
            id=instance.id,
            template_id=instance.template_id,
            title=template.title,
            category=template.category,
            zone=template.zone,
            estimated_minutes=template.estimated_minutes,
            recurrence_type=template.recurrence_type,
            due_date=instance.due_date,
            status=instance.status,
            assigned_to=instance.assigned_to,
            completed_at=instance.completed_at,
            completed_by=instance.completed_by,
            is_emergency=template.is_emergency,
        )


class Completion(BaseModel):
    """Historical record of a fulfilled instance."""

    instance_id: str
    template_id: str | None = None
    user_id: str
    completed_at: datetime
    category: Category = Category.GENERAL
