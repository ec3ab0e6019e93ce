"""SQLite schema management (code-first approach)."""

import logging

from bayit.core import db_client


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    "households",
    "household_members",
    "task_templates",
    "task_instances",
]


_TABLES: dict[str, str] = {
    "households": """
        CREATE TABLE IF NOT EXISTS households (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            golden_rule_target INTEGER NOT NULL DEFAULT 80
                CHECK (golden_rule_target BETWEEN 0 AND 100),
            emergency_mode INTEGER NOT NULL DEFAULT 0,
            created TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
        )
    """,
    "household_members": """
        CREATE TABLE IF NOT EXISTS household_members (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            household_id INTEGER NOT NULL REFERENCES households (id),
            user_id TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'member' CHECK (role IN ('owner', 'member')),
            created TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
        )
    """,
    "task_templates": """
        CREATE TABLE IF NOT EXISTS task_templates (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            household_id INTEGER NOT NULL REFERENCES households (id),
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            category TEXT NOT NULL DEFAULT 'general',
            zone TEXT,
            estimated_minutes INTEGER NOT NULL DEFAULT 10,
            recurrence_type TEXT NOT NULL,
            recurrence_day INTEGER,
            default_assignee TEXT,
            is_emergency INTEGER NOT NULL DEFAULT 0,
            active INTEGER NOT NULL DEFAULT 1,
            created TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
        )
    """,
    "task_instances": """
        CREATE TABLE IF NOT EXISTS task_instances (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            template_id INTEGER NOT NULL REFERENCES task_templates (id),
            household_id INTEGER NOT NULL REFERENCES households (id),
            assigned_to TEXT,
            due_date TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ('pending', 'completed', 'skipped')),
            completed_at TEXT,
            completed_by TEXT,
            rating INTEGER CHECK (rating IS NULL OR rating BETWEEN 1 AND 5),
            notes TEXT,
            created TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
        )
    """,
}

_INDEXES: list[str] = [
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_member_household_user ON household_members (household_id, user_id)",
    "CREATE INDEX IF NOT EXISTS idx_template_household ON task_templates (household_id, active)",
    # Storage-level guard against concurrent generator runs for the same household
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_instance_template_due ON task_instances (template_id, due_date)",
    "CREATE INDEX IF NOT EXISTS idx_instance_household_due ON task_instances (household_id, due_date)",
]


async def init_db(*, db_path: str | None = None) -> None:
    """Create all tables and indexes if they do not exist yet."""
    conn = await db_client.get_connection(db_path=db_path)
    for collection in COLLECTIONS:
        await conn.execute(_TABLES[collection])
    for index_sql in _INDEXES:
        await conn.execute(index_sql)
    await conn.commit()
    logger.info("Schema initialized", extra={"collections": COLLECTIONS})
