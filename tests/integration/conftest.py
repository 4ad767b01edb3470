"""
Integration test fixtures for FocusForge.

Provides a ProgressTracker over a real SQLite database so flows exercise
the same serialization and self-healing paths as the CLI.
"""

import pytest

from focusforge.ai.decompose import RuleBasedDecomposer
from focusforge.config import FocusForgeConfig
from focusforge.storage.store import SQLiteStore
from focusforge.tracker import ProgressTracker


def pytest_collection_modifyitems(items):
    for item in items:
        if item.path.parent.name == "integration":
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def tracker(temp_db) -> ProgressTracker:
    """Tracker over a temporary SQLite store, rule-based decomposition."""
    return ProgressTracker(SQLiteStore(temp_db), FocusForgeConfig(), decomposer=RuleBasedDecomposer())


@pytest.fixture
def reopen(temp_db):
    """Build a second tracker on the same database (a new app session)."""

    def _reopen() -> ProgressTracker:
        return ProgressTracker(SQLiteStore(temp_db), decomposer=RuleBasedDecomposer())

    return _reopen
