"""Pytest configuration and fixtures for unit tests."""

from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches bayit.core.db_client functions to use InMemoryDBClient."""
    monkeypatch.setattr("bayit.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("bayit.core.db_client.get_record", in_memory_db.get_record)
    monkeypatch.setattr("bayit.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("bayit.core.db_client.list_records", in_memory_db.list_records)
    monkeypatch.setattr("bayit.core.db_client.list_all_records", in_memory_db.list_all_records)
    monkeypatch.setattr("bayit.core.db_client.get_first_record", in_memory_db.get_first_record)

    return in_memory_db


@pytest.fixture
def create_household(patched_db) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Factory that stores a household and, optionally, its members."""

    async def _create(
        name: str = "Cohen family",
        golden_rule_target: int = 80,
        emergency_mode: bool = False,
        members: tuple[str, ...] = ("dana", "yossi"),
    ) -> dict[str, Any]:
        household = await patched_db.create_record(
            collection="households",
            data={"name": name, "golden_rule_target": golden_rule_target, "emergency_mode": emergency_mode},
        )
        for index, user_id in enumerate(members):
            await patched_db.create_record(
                collection="household_members",
                data={"household_id": household["id"], "user_id": user_id, "role": "owner" if index == 0 else "member"},
            )
        return household

    return _create


@pytest.fixture
def create_template(patched_db) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Factory that stores a task template for a household."""

    async def _create(household_id: str, **overrides: Any) -> dict[str, Any]:
        data = {
            "household_id": household_id,
            "title": "Wipe counters",
            "category": "kitchen",
            "estimated_minutes": 10,
            "recurrence_type": "daily",
            "recurrence_day": None,
            "default_assignee": None,
            "is_emergency": False,
            "active": True,
            "created": "2026-01-01T08:00:00Z",
        }
        data.update(overrides)
        return await patched_db.create_record(collection="task_templates", data=data)

    return _create

