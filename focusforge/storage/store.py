"""
Tool: Key-Value Store
Purpose: Get/set/delete of named JSON blobs behind a swappable interface

The engine only ever touches four keys (see STORAGE_KEYS). Each
operation is a coroutine returning a result dict, so a networked backend
can replace the local ones without changing call sites:

    {"success": True, "data": <value or None>}
    {"success": False, "error": "..."}

A missing key is not an error: get() succeeds with data=None. Backend
failures (quota, serialization, sqlite errors) are converted to error
results at this boundary and never propagate as exceptions.

Backends:
    MemoryStore: in-process, optional byte quota
    SQLiteStore: one `kv` table in a local sqlite database

Usage:
    store = SQLiteStore(Path("data/focusforge.db"))
    await store.set(STORAGE_KEYS["profile"], {"xp": 10})
    result = await store.get(STORAGE_KEYS["profile"])
"""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from focusforge import PROJECT_ROOT
from focusforge.config import StorageConfig
from focusforge.logging_config import get_logger
from focusforge.storage import STORAGE_KEYS

logger = get_logger(__name__)

VALID_KEYS = frozenset(STORAGE_KEYS.values())


class StoreError(Exception):
    """Raised by backends; converted to an error result by KeyValueStore."""


class KeyValueStore:
    """
    Base adapter. Subclasses implement the synchronous _read/_write/_remove
    primitives on serialized text; this class handles key validation,
    JSON encoding and error conversion.
    """

    backend = "base"

    async def get(self, key: str) -> Dict[str, Any]:
        if key not in VALID_KEYS:
            return {"success": False, "error": f"Unknown storage key: {key}"}

        try:
            raw = self._read(key)
        except (StoreError, sqlite3.Error, OSError) as e:
            logger.error(f"Read failed for {key}: {e}")
            return {"success": False, "error": f"Storage read failed for {key}: {e}"}

        if raw is None:
            return {"success": True, "data": None}

        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            # Corrupt blob reads as absent; the next write replaces it
            logger.warning(f"Discarding unparsable value for {key}")
            return {"success": True, "data": None}

        return {"success": True, "data": value}

    async def set(self, key: str, value: Any) -> Dict[str, Any]:
        if key not in VALID_KEYS:
            return {"success": False, "error": f"Unknown storage key: {key}"}

        try:
            payload = json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as e:
            return {"success": False, "error": f"Cannot serialize value for {key}: {e}"}

        try:
            self._write(key, payload)
        except (StoreError, sqlite3.Error, OSError) as e:
            logger.error(f"Write failed for {key}: {e}")
            return {"success": False, "error": f"Storage write failed for {key}: {e}"}

        return {"success": True, "data": value}

    async def delete(self, key: str) -> Dict[str, Any]:
        if key not in VALID_KEYS:
            return {"success": False, "error": f"Unknown storage key: {key}"}

        try:
            self._remove(key)
        except (StoreError, sqlite3.Error, OSError) as e:
            logger.error(f"Delete failed for {key}: {e}")
            return {"success": False, "error": f"Storage delete failed for {key}: {e}"}

        return {"success": True, "data": None}

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, payload: str) -> None:
        raise NotImplementedError

    def _remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """In-process store. Values are kept serialized, like a browser's localStorage."""

    backend = "memory"

    def __init__(self, quota_bytes: Optional[int] = None):
        self._values: Dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def _read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def _write(self, key: str, payload: str) -> None:
        if self.quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._values.items() if k != key)
            if used + len(payload.encode("utf-8")) > self.quota_bytes:
                raise StoreError(f"quota of {self.quota_bytes} bytes exceeded")
        self._values[key] = payload

    def _remove(self, key: str) -> None:
        self._values.pop(key, None)


class SQLiteStore(KeyValueStore):
    """Local sqlite-backed store. One connection per operation."""

    backend = "sqlite"

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    def get_connection(self) -> sqlite3.Connection:
        """Get database connection, creating the table if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row

        conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.commit()
        return conn

    def _read(self, key: str) -> Optional[str]:
        conn = self.get_connection()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row["value"] if row else None

    def _write(self, key: str, payload: str) -> None:
        conn = self.get_connection()
        try:
            conn.execute(
                """
                INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, payload, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def _remove(self, key: str) -> None:
        conn = self.get_connection()
        try:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()


def create_store(config: Optional[StorageConfig] = None, db_path: Optional[Path] = None) -> KeyValueStore:
    """
    Build the configured store backend.

    Args:
        config: Storage section of the config (defaults if None)
        db_path: Overrides config.path for the sqlite backend

    Returns:
        A ready KeyValueStore
    """
    config = config or StorageConfig()

    if config.backend == "memory":
        return MemoryStore(quota_bytes=config.quota_bytes)

    path = Path(db_path) if db_path else Path(config.path)
    if not path.is_absolute():
        path = PROJECT_ROOT / path

    logger.debug(f"Using sqlite store at {path}")
    return SQLiteStore(path)


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "SQLiteStore",
    "StoreError",
    "VALID_KEYS",
    "create_store",
]
