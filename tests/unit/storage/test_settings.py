"""Tests for focusforge/storage/settings.py"""

import pytest

from focusforge.storage.settings import SettingsManager


@pytest.fixture
def settings(memory_store):
    return SettingsManager(memory_store)


class TestSettingsManager:
    @pytest.mark.asyncio
    async def test_defaults_when_nothing_stored(self, settings):
        result = await settings.get_settings()
        assert result["success"] is True
        assert result["data"]["theme"] == "system"
        assert result["data"]["pomodoroWorkMinutes"] == 25

    @pytest.mark.asyncio
    async def test_set_settings_replaces_and_clamps(self, settings):
        result = await settings.set_settings({"theme": "dark", "dailyXpGoal": 20})

        assert result["data"]["theme"] == "dark"
        assert result["data"]["dailyXpGoal"] == 50
        assert result["data"]["accentColor"] == "purple"

    @pytest.mark.asyncio
    async def test_update_settings_merges(self, settings):
        await settings.set_settings({"theme": "dark"})
        result = await settings.update_settings(ambientSound="rain")

        assert result["data"]["theme"] == "dark"
        assert result["data"]["ambientSound"] == "rain"

        stored = await settings.get_settings()
        assert stored["data"] == result["data"]

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_keys(self, settings):
        result = await settings.update_settings(fontSize=14)
        assert result["success"] is False
        assert "fontSize" in result["error"]

    @pytest.mark.asyncio
    async def test_invalid_patch_value_falls_back(self, settings):
        await settings.update_settings(pomodoroBreakMinutes=10)
        result = await settings.update_settings(pomodoroBreakMinutes="ten")
        assert result["data"]["pomodoroBreakMinutes"] == 5
