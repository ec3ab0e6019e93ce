"""Task instance lifecycle and the joined task views consumed by the stats services."""

import logging
from datetime import UTC, date, datetime
from typing import Any

from bayit.core import db_client
from bayit.core.logging import span
from bayit.domain.task import InstanceStatus, TaskInstance, TaskItem, TaskTemplate
from bayit.services import household_service


logger = logging.getLogger(__name__)

_ALLOWED_TRANSITIONS: dict[InstanceStatus, set[InstanceStatus]] = {
    InstanceStatus.PENDING: {InstanceStatus.COMPLETED, InstanceStatus.SKIPPED},
    InstanceStatus.COMPLETED: {InstanceStatus.PENDING},
    InstanceStatus.SKIPPED: {InstanceStatus.PENDING},
}


async def _transition(*, instance_id: str, target: InstanceStatus, data: dict[str, Any]) -> TaskInstance:
    instance = TaskInstance(**await db_client.get_record(collection="task_instances", record_id=instance_id))
    if target not in _ALLOWED_TRANSITIONS[instance.status]:
        msg = f"Cannot move instance {instance_id} from {instance.status} to {target}"
        raise ValueError(msg)

    record = await db_client.update_record(
        collection="task_instances",
        record_id=instance_id,
        data={"status": target.value, **data},
    )
    logger.info("Instance %s moved %s -> %s", instance_id, instance.status, target)
    return TaskInstance(**record)


async def complete_instance(
    *,
    instance_id: str,
    user_id: str,
    rating: int | None = None,
    notes: str | None = None,
    completed_at: datetime | None = None,
) -> TaskInstance:
    """Mark a pending instance as completed by a member.

    Raises:
        ValueError: If the instance is not pending or the rating is outside 1-5
        db_client.RecordNotFoundError: If the instance does not exist
    """
    if rating is not None and not 1 <= rating <= 5:
        msg = f"Rating must be between 1 and 5, got {rating}"
        raise ValueError(msg)

    with span("task_service.complete_instance"):
        return await _transition(
            instance_id=instance_id,
            target=InstanceStatus.COMPLETED,
            data={
                "completed_at": (completed_at or datetime.now(UTC)).isoformat(),
                "completed_by": user_id,
                "rating": rating,
                "notes": notes,
            },
        )


async def skip_instance(*, instance_id: str, notes: str | None = None) -> TaskInstance:
    """Mark a pending instance as skipped."""
    with span("task_service.skip_instance"):
        return await _transition(instance_id=instance_id, target=InstanceStatus.SKIPPED, data={"notes": notes})


async def reopen_instance(*, instance_id: str) -> TaskInstance:
    """Undo a completion or skip, returning the instance to pending."""
    with span("task_service.reopen_instance"):
        return await _transition(
            instance_id=instance_id,
            target=InstanceStatus.PENDING,
            data={"completed_at": None, "completed_by": None, "rating": None},
        )


async def list_templates(*, household_id: str) -> list[TaskTemplate]:
    """Every template of a household, active or not."""
    records = await db_client.list_all_records(
        collection="task_templates",
        filter_query=f'household_id = "{household_id}"',
        sort="id",
    )
    return [TaskTemplate(**record) for record in records]


async def list_task_items(
    *,
    household_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[TaskItem]:
    """Instances joined with their templates, ordered by due date.

    Emergency mode hides instances whose template is not emergency-flagged.
    Instances of deactivated templates stay visible as history.
    """
    with span("task_service.list_task_items"):
        household = await household_service.get_household(household_id=household_id)
        templates = {template.id: template for template in await list_templates(household_id=household_id)}
        visible_ids = {
            template.id
            for template in household_service.visible_templates(household, templates.values(), include_inactive=True)
        }

        filters = [f'household_id = "{household_id}"']
        if start_date:
            filters.append(f'due_date >= "{start_date.isoformat()}"')
        if end_date:
            filters.append(f'due_date <= "{end_date.isoformat()}"')

        records = await db_client.list_all_records(
            collection="task_instances",
            filter_query=" && ".join(filters),
            sort="due_date",
        )

        items = []
        for record in records:
            instance = TaskInstance(**record)
            if instance.template_id not in visible_ids:
                continue
            items.append(TaskItem.from_instance(instance, templates[instance.template_id]))

        logger.debug("Listed %d task items for household %s", len(items), household_id)
        return items
