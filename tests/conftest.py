"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncIterator
from pathlib import Path

import logfire
import pytest

from bayit.core import db_client
from bayit.core.config import settings


@pytest.fixture(scope="session", autouse=True)
def _quiet_logfire() -> None:
    """Keep spans local during tests."""
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
async def sqlite_db(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> AsyncIterator[str]:
    """Fresh SQLite database with the full schema, removed after the test."""
    db_path = str(tmp_path / "bayit_test.db")
    monkeypatch.setattr(settings, "sqlite_db_path", db_path)

    await db_client.init_db()
    yield db_path
    await db_client.close_connection()
