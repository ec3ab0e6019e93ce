"""Household lookups and household-level views over templates."""

import logging
from collections.abc import Iterable

from bayit.core import db_client
from bayit.core.config import settings
from bayit.core.logging import span
from bayit.domain.household import Household, HouseholdMember
from bayit.domain.task import TaskTemplate


logger = logging.getLogger(__name__)


async def get_household(*, household_id: str) -> Household:
    """Get a household by ID.

    Raises:
        db_client.RecordNotFoundError: If the household does not exist
    """
    record = await db_client.get_record(collection="households", record_id=household_id)
    return Household(**record)


async def list_households() -> list[Household]:
    """All households, oldest first."""
    with span("household_service.list_households"):
        records = await db_client.list_all_records(collection="households", sort="id")
        return [Household(**record) for record in records]


async def list_members(*, household_id: str) -> list[HouseholdMember]:
    """Members of the household in join order."""
    records = await db_client.list_all_records(
        collection="household_members",
        filter_query=f'household_id = "{household_id}"',
        sort="id",
    )
    return [HouseholdMember(**record) for record in records]


async def list_member_ids(*, household_id: str) -> list[str]:
    """User IDs of the household's members in join order."""
    return [member.user_id for member in await list_members(household_id=household_id)]


async def set_emergency_mode(*, household_id: str, enabled: bool) -> Household:
    """Turn emergency mode on or off."""
    record = await db_client.update_record(
        collection="households",
        record_id=household_id,
        data={"emergency_mode": enabled},
    )
    logger.info("Emergency mode %s for household %s", "enabled" if enabled else "disabled", household_id)
    return Household(**record)


def visible_templates(
    household: Household,
    templates: Iterable[TaskTemplate],
    *,
    include_inactive: bool = False,
) -> list[TaskTemplate]:
    """Templates the household should see; emergency mode keeps only emergency templates.

    Deactivated templates are dropped unless include_inactive is set, which
    history views use so past instances stay visible.
    """
    candidates = [template for template in templates if include_inactive or template.active]
    if household.emergency_mode:
        return [template for template in candidates if template.is_emergency]
    return candidates


def resolve_golden_rule_target(household: Household | None, override: int | None = None) -> int:
    """Golden rule target: explicit override, then the household's, then the configured default.

    Raises:
        ValueError: If the override is outside 0-100
    """
    if override is not None:
        if not 0 <= override <= 100:
            msg = f"Golden rule target must be between 0 and 100, got {override}"
            raise ValueError(msg)
        return override
    if household is not None:
        return household.golden_rule_target
    return settings.default_golden_rule_target
