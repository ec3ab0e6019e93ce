"""Tests for the SQLite client: filter parsing and CRUD against a real database."""

from datetime import date

import pytest

from bayit.core import db_client
from bayit.core.db_client import _parse_sort, parse_filter
from bayit.services import instance_generator


@pytest.mark.unit
class TestParseFilter:
    def test_empty_filter(self):
        assert parse_filter("") == ("", [])

    def test_and_conditions_with_typed_values(self):
        clause, params = parse_filter('household_id = "3" && active = "true" && due_date >= "2026-10-19"')

        assert clause == "household_id = ? AND active = ? AND due_date >= ?"
        assert params == [3, True, "2026-10-19"]

    def test_or_group(self):
        clause, params = parse_filter('household_id = "1" && (status = "pending" || status = "skipped")')

        assert clause == "household_id = ? AND (status = ? OR status = ?)"
        assert params == [1, "pending", "skipped"]

    def test_like_escapes_wildcards(self):
        clause, params = parse_filter('title ~ "50%_off"')

        assert clause == "title LIKE ? ESCAPE '\\'"
        assert params == ["%50\\%\\_off%"]

    @pytest.mark.parametrize("bad", ["household_id", "title = unquoted", "x; DROP TABLE households"])
    def test_invalid_syntax_raises(self, bad):
        with pytest.raises(ValueError, match="Invalid filter syntax"):
            parse_filter(bad)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("sort", "expected"),
    [("", "id ASC"), ("due_date", "due_date ASC"), ("-created", "created DESC"), ("id; --", "id ASC")],
)
def test_parse_sort(sort, expected):
    assert _parse_sort(sort) == expected


@pytest.mark.unit
def test_invalid_collection_name_rejected():
    with pytest.raises(ValueError, match="Invalid collection name"):
        db_client._validate_collection_name("households; DROP")


async def _household(name: str = "Cohen") -> dict:
    return await db_client.create_record(collection="households", data={"name": name})


async def _template(household_id: str, **overrides) -> dict:
    data = {
        "household_id": household_id,
        "title": "Wipe counters",
        "category": "kitchen",
        "recurrence_type": "daily",
        "created": "2026-01-01T08:00:00Z",
    }
    data.update(overrides)
    return await db_client.create_record(collection="task_templates", data=data)


@pytest.mark.unit
class TestSqliteCrud:
    async def test_create_and_get_record(self, sqlite_db):
        household = await _household()

        fetched = await db_client.get_record(collection="households", record_id=household["id"])

        assert fetched["id"] == household["id"]
        assert isinstance(fetched["id"], str)
        assert fetched["name"] == "Cohen"
        assert fetched["golden_rule_target"] == 80
        assert fetched["created"].endswith("Z")

    async def test_missing_record_raises_not_found(self, sqlite_db):
        with pytest.raises(db_client.RecordNotFoundError):
            await db_client.get_record(collection="households", record_id="999")

    async def test_update_record(self, sqlite_db):
        household = await _household()

        updated = await db_client.update_record(
            collection="households", record_id=household["id"], data={"emergency_mode": True}
        )

        assert updated["emergency_mode"] == 1

    async def test_update_missing_record_raises_not_found(self, sqlite_db):
        with pytest.raises(db_client.RecordNotFoundError):
            await db_client.update_record(collection="households", record_id="999", data={"name": "x"})

    async def test_check_constraint_is_a_database_error(self, sqlite_db):
        with pytest.raises(db_client.DatabaseError) as exc_info:
            await db_client.create_record(collection="households", data={"name": "x", "golden_rule_target": 150})

        assert not isinstance(exc_info.value, db_client.DuplicateRecordError)

    async def test_duplicate_instance_raises_duplicate_error(self, sqlite_db):
        household = await _household()
        template = await _template(household["id"])
        row = {"template_id": template["id"], "household_id": household["id"], "due_date": "2026-10-19"}
        await db_client.create_record(collection="task_instances", data=row)

        with pytest.raises(db_client.DuplicateRecordError):
            await db_client.create_record(collection="task_instances", data=row)

    async def test_list_records_filters_sorts_and_pages(self, sqlite_db):
        for name in ("Alpha", "Beta", "Gamma"):
            await _household(name)

        first_page = await db_client.list_records(collection="households", per_page=2, sort="-name")
        second_page = await db_client.list_records(collection="households", page=2, per_page=2, sort="-name")
        matching = await db_client.list_records(collection="households", filter_query='name ~ "amm"')

        assert [r["name"] for r in first_page] == ["Gamma", "Beta"]
        assert [r["name"] for r in second_page] == ["Alpha"]
        assert [r["name"] for r in matching] == ["Gamma"]

    async def test_list_all_records_walks_every_page(self, sqlite_db):
        for i in range(5):
            await _household(f"Household {i}")

        records = await db_client.list_all_records(collection="households", per_page=2)

        assert len(records) == 5

    async def test_get_first_record(self, sqlite_db):
        await _household("Alpha")

        assert (await db_client.get_first_record(collection="households", filter_query='name = "Alpha"'))["name"] == "Alpha"
        assert await db_client.get_first_record(collection="households", filter_query='name = "Nope"') is None

    async def test_bad_filter_surfaces_as_database_error(self, sqlite_db):
        with pytest.raises(db_client.DatabaseError):
            await db_client.list_records(collection="households", filter_query="name")


@pytest.mark.unit
async def test_generation_against_sqlite_is_idempotent(sqlite_db):
    """Generating the same window twice creates each (template, date) once."""
    household = await _household()
    await _template(household["id"])
    await _template(household["id"], title="Mop floor", recurrence_type="weekly", recurrence_day=0)
    await _template(household["id"], title="Paused", active=False)

    first = await instance_generator.generate_task_instances(
        household_id=household["id"], start_date=date(2026, 10, 19), end_date=date(2026, 10, 25)
    )
    second = await instance_generator.generate_task_instances(
        household_id=household["id"], start_date=date(2026, 10, 19), end_date=date(2026, 10, 25)
    )

    assert first.created == 8
    assert first.errors == []
    assert second.created == 0
    assert second.skipped == 8
    stored = await db_client.list_all_records(collection="task_instances")
    assert len(stored) == 8
    assert {r["due_date"] for r in stored if r["template_id"] == "2"} == {"2026-10-25"}
