"""
Backup export/import for all local FocusForge data.

Export format (single JSON document):

    {
      "exported_at": "2024-03-01T09:30:00+00:00",
      "tasks": [...],
      "profile": {...} | null,
      "settings": {...},
      "streaks": {"2024-03-01": 2}
    }

Import replaces (never merges) each of the four records. Every field may
be missing: absent collections become their defaults. Everything is
normalized before the first write, and if any write fails the previous
values are put back, so callers see the import as all-or-nothing.

Usage:
    python -m focusforge.cli export --output backups/
    python -m focusforge.cli import backups/focusforge-backup-2024-03-01.json
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from focusforge.logging_config import get_logger
from focusforge.storage import STORAGE_KEYS
from focusforge.storage.normalizer import (
    create_default_profile,
    normalize_profile,
    normalize_settings,
    normalize_streaks,
    normalize_tasks,
)
from focusforge.storage.records import read_record
from focusforge.storage.store import KeyValueStore

logger = get_logger(__name__)


async def export_data(store: KeyValueStore) -> dict[str, Any]:
    """
    Serialize all four records to a backup document.

    Returns:
        dict with success status and the JSON text under "data"
    """
    payload: dict[str, Any] = {"exported_at": datetime.now(timezone.utc).isoformat()}

    for name in ("tasks", "profile", "settings", "streaks"):
        result = await read_record(store, name)
        if not result["success"]:
            return {"success": False, "error": f"Unable to export local data: {result['error']}"}
        payload[name] = result["data"]

    return {"success": True, "data": json.dumps(payload, indent=2)}


async def export_to_file(store: KeyValueStore, dest_dir: Path) -> dict[str, Any]:
    """Write a dated backup file into dest_dir."""
    exported = await export_data(store)
    if not exported["success"]:
        return exported

    dest_dir.mkdir(parents=True, exist_ok=True)
    date_stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    dest = dest_dir / f"focusforge-backup-{date_stamp}.json"
    dest.write_text(exported["data"], encoding="utf-8")

    logger.info(f"Exported backup -> {dest.name}")
    return {"success": True, "data": {"path": str(dest)}, "message": f"Backup written to {dest}"}


async def _replace_all(store: KeyValueStore, values: dict[str, Any]) -> dict[str, Any]:
    """Write every record, restoring the previous values if any write fails."""
    previous: dict[str, Any] = {}
    for name in values:
        current = await store.get(STORAGE_KEYS[name])
        if not current["success"]:
            return current
        previous[name] = current["data"]

    written = []
    for name, value in values.items():
        key = STORAGE_KEYS[name]
        result = await store.delete(key) if value is None else await store.set(key, value)
        if not result["success"]:
            logger.warning(f"Replace failed at {name}, restoring previous data")
            for done in written:
                old = previous[done]
                if old is None:
                    await store.delete(STORAGE_KEYS[done])
                else:
                    await store.set(STORAGE_KEYS[done], old)
            return result
        written.append(name)

    return {"success": True}


async def import_data(store: KeyValueStore, raw_json: str) -> dict[str, Any]:
    """
    Replace all local data with the contents of a backup document.

    Args:
        store: Destination store
        raw_json: Backup file contents

    Returns:
        dict with success status and a summary of what was imported
    """
    try:
        parsed = json.loads(raw_json)
    except (TypeError, json.JSONDecodeError):
        return {"success": False, "error": "Invalid JSON file."}

    if not isinstance(parsed, dict):
        return {"success": False, "error": "Import failed. File format is invalid."}

    raw_tasks = parsed.get("tasks")
    tasks = normalize_tasks(raw_tasks)
    values = {
        "tasks": tasks,
        "profile": normalize_profile(parsed.get("profile")) or create_default_profile(),
        "settings": normalize_settings(parsed.get("settings")),
        "streaks": normalize_streaks(parsed.get("streaks")),
    }

    result = await _replace_all(store, values)
    if not result["success"]:
        return {"success": False, "error": f"Import failed: {result['error']}"}

    dropped = len(raw_tasks) - len(tasks) if isinstance(raw_tasks, list) else 0
    if dropped:
        logger.info(f"Dropped {dropped} invalid tasks during import")

    return {
        "success": True,
        "data": {
            "tasks": len(tasks),
            "dropped_tasks": dropped,
            "streak_days": len(values["streaks"]),
            "profile": values["profile"],
            "settings": values["settings"],
        },
        "message": "Import complete",
    }


async def reset_all(store: KeyValueStore) -> dict[str, Any]:
    """Delete tasks and streaks; reset profile and settings to defaults."""
    result = await _replace_all(
        store,
        {
            "tasks": None,
            "streaks": None,
            "profile": create_default_profile(),
            "settings": normalize_settings(None),
        },
    )
    if not result["success"]:
        return {"success": False, "error": f"Unable to reset data: {result['error']}"}

    logger.info("All local data reset")
    return {"success": True, "message": "All local data reset"}


__all__ = ["export_data", "export_to_file", "import_data", "reset_all"]
