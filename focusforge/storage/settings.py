"""
LocalSettings management.

Settings are pure configuration (theme, accent, daily XP goal, Pomodoro
lengths, ambient sound). They are clamped on every read and write, so an
out-of-range goal or unknown theme never reaches the rest of the engine.
"""

from typing import Any, Dict

from focusforge.storage import DEFAULT_SETTINGS
from focusforge.storage.records import read_record, write_record
from focusforge.storage.store import KeyValueStore


class SettingsManager:
    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get_settings(self) -> Dict[str, Any]:
        return await read_record(self.store, "settings")

    async def set_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Replace all settings. Missing or invalid values fall back to defaults."""
        return await write_record(self.store, "settings", settings)

    async def update_settings(self, **patch: Any) -> Dict[str, Any]:
        """Merge a partial update into the current settings."""
        unknown = set(patch) - set(DEFAULT_SETTINGS)
        if unknown:
            return {"success": False, "error": f"Unknown settings: {sorted(unknown)}"}

        current = await self.get_settings()
        if not current["success"]:
            return current

        return await self.set_settings({**current["data"], **patch})


__all__ = ["SettingsManager"]
