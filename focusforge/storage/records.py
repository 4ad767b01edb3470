"""
Self-healing access to the four named records.

read_record() normalizes whatever the store holds and, when the repaired
form differs from what was read, writes the repair back immediately so
the store converges on valid data. write_record() normalizes before
writing so nothing invalid is ever persisted by the engine itself.
"""

from typing import Any, Callable, Dict

from focusforge.logging_config import get_logger
from focusforge.storage import STORAGE_KEYS
from focusforge.storage.normalizer import (
    normalize_profile,
    normalize_settings,
    normalize_streaks,
    normalize_tasks,
)
from focusforge.storage.store import KeyValueStore

logger = get_logger(__name__)

NORMALIZERS: Dict[str, Callable[[Any], Any]] = {
    "tasks": normalize_tasks,
    "profile": normalize_profile,
    "settings": normalize_settings,
    "streaks": normalize_streaks,
}

# Value used when the key is absent
EMPTY_VALUES: Dict[str, Callable[[], Any]] = {
    "tasks": list,
    "profile": lambda: None,
    "settings": lambda: normalize_settings(None),
    "streaks": dict,
}


async def read_record(store: KeyValueStore, name: str) -> Dict[str, Any]:
    """
    Read and normalize a record, healing the stored copy if needed.

    Args:
        store: Store to read from
        name: One of tasks, profile, settings, streaks

    Returns:
        dict with success status and the normalized record
    """
    key = STORAGE_KEYS[name]
    result = await store.get(key)
    if not result["success"]:
        return result

    raw = result["data"]
    if raw is None:
        return {"success": True, "data": EMPTY_VALUES[name]()}

    normalized = NORMALIZERS[name](raw)
    if normalized != raw:
        logger.info(f"Repaired stored {name} record")
        if normalized is None:
            heal = await store.delete(key)
        else:
            heal = await store.set(key, normalized)
        if not heal["success"]:
            # The repaired value is still returned; the next read retries the heal
            logger.warning(f"Could not write back repaired {name}: {heal['error']}")

    return {"success": True, "data": normalized}


async def write_record(store: KeyValueStore, name: str, value: Any) -> Dict[str, Any]:
    """Normalize and persist a record. Returns the stored form on success."""
    normalized = NORMALIZERS[name](value)
    key = STORAGE_KEYS[name]

    if normalized is None:
        result = await store.delete(key)
    else:
        result = await store.set(key, normalized)

    if not result["success"]:
        return result

    return {"success": True, "data": normalized}


__all__ = ["EMPTY_VALUES", "NORMALIZERS", "read_record", "write_record"]
