"""Shared test fixtures for FocusForge tests.

This module provides common fixtures used across all test modules:
- Store isolation (in-memory and temporary SQLite)
- A fixed "today" so streak and daily-XP tests don't depend on the clock
- Standard task data

Usage:
    @pytest.mark.asyncio
    async def test_something(memory_store):
        result = await memory_store.get("focusforge_tasks")
        ...
"""

from datetime import date
from pathlib import Path

import pytest

from focusforge.storage.store import MemoryStore, SQLiteStore


# ─────────────────────────────────────────────────────────────────────────────
# Store Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def memory_store() -> MemoryStore:
    """Fresh in-memory store with no quota."""
    return MemoryStore()


@pytest.fixture
def temp_db(tmp_path: Path) -> Path:
    """Path to a not-yet-created SQLite database inside tmp_path."""
    return tmp_path / "data" / "focusforge.db"


@pytest.fixture
def sqlite_store(temp_db: Path) -> SQLiteStore:
    """SQLite store backed by a temporary database file.

    The file lives under pytest's tmp_path and is cleaned up with it.
    """
    return SQLiteStore(temp_db)


# ─────────────────────────────────────────────────────────────────────────────
# Date Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def today() -> date:
    """A fixed local date used as "today"."""
    return date(2024, 3, 15)


# ─────────────────────────────────────────────────────────────────────────────
# Task Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def sample_task() -> dict:
    """A stored task as the normalizer would produce it.

    Returns:
        dict with task fields
    """
    return {
        "id": "task-1",
        "owner_id": "local-user",
        "title": "File taxes",
        "description": "Complete tax filing for this year",
        "parent_task_id": None,
        "status": "pending",
        "priority": "high",
        "xp_reward": 10,
        "completed_at": None,
        "created_at": "2024-03-01T09:30:00+00:00",
    }

