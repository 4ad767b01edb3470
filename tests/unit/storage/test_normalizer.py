"""Tests for focusforge/storage/normalizer.py

The normalizer is the only thing standing between untrusted stored or
imported data and the engine. Key behaviour:
- Never raises, whatever the input shape
- Numbers clamp, enums fall back, strings truncate
- Bad collection elements are dropped, not fatal
- Idempotent: a second pass changes nothing
"""

import math

import pytest

from focusforge.storage.normalizer import (
    clamp_int,
    clamp_text,
    clamp_timestamp,
    create_default_profile,
    is_date_key,
    is_number,
    normalize_profile,
    normalize_settings,
    normalize_streaks,
    normalize_task,
    normalize_tasks,
)


# ─────────────────────────────────────────────────────────────────────────────
# Field Helper Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestFieldHelpers:
    """Tests for the primitive clamping helpers."""

    @pytest.mark.parametrize("value", [True, False, "5", None, math.nan, math.inf, -math.inf, [1]])
    def test_is_number_rejects_non_numbers(self, value):
        """Booleans, strings, NaN and infinities are not numbers."""
        assert is_number(value) is False

    @pytest.mark.parametrize("value", [0, -3, 2.5, 1e9])
    def test_is_number_accepts_finite_numbers(self, value):
        assert is_number(value) is True

    def test_clamp_int_floors_by_default(self):
        """Counts and XP floor."""
        assert clamp_int(12.9, 0, 100, 0) == 12

    def test_clamp_int_rounds_half_up(self):
        """Settings round, and 0.5 goes up rather than to even."""
        assert clamp_int(24.5, 5, 120, 25, rounding="round") == 25
        assert clamp_int(26.5, 5, 120, 25, rounding="round") == 27

    def test_clamp_int_clamps_to_range(self):
        assert clamp_int(-5, 0, 10, 3) == 0
        assert clamp_int(50, 0, 10, 3) == 10

    def test_clamp_int_uses_fallback_for_bool(self):
        """True would otherwise count as 1."""
        assert clamp_int(True, 0, 10, 7) == 7

    def test_clamp_text_strips_and_truncates(self):
        assert clamp_text("  hello world  ", 5, strip=True) == "hello"

    def test_clamp_text_strip_is_stable(self):
        """Cutting can leave trailing whitespace; it must be stripped too."""
        once = clamp_text("ab   cd", 4, strip=True)
        assert once == "ab"
        assert clamp_text(once, 4, strip=True) == once

    def test_clamp_text_non_string_returns_fallback(self):
        assert clamp_text(42, 10, fallback="") == ""
        assert clamp_text(None, 10) is None

    def test_clamp_timestamp(self):
        assert clamp_timestamp("2024-03-01T09:30:00Z") == "2024-03-01T09:30:00Z"
        assert clamp_timestamp("yesterday") is None
        assert clamp_timestamp(1709285400) is None

    @pytest.mark.parametrize("key,expected", [
        ("2024-03-01", True),
        ("2024-3-1", False),
        ("2024-03-01\n", False),
        ("not-a-date", False),
        ("\u0662\u0660\u0662\u0664-\u0660\u0663-\u0660\u0661", False),
        (20240301, False),
    ])
    def test_is_date_key(self, key, expected):
        assert is_date_key(key) is expected


# ─────────────────────────────────────────────────────────────────────────────
# Task Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestNormalizeTask:
    """Tests for single-task repair."""

    def test_valid_task_unchanged(self, sample_task):
        """A fully valid task comes back equal."""
        assert normalize_task(sample_task) == sample_task

    def test_rejects_non_mapping(self):
        assert normalize_task("File taxes") is None
        assert normalize_task(None) is None

    def test_rejects_blank_title(self, sample_task):
        """A title that is empty after trimming cannot be salvaged."""
        assert normalize_task({**sample_task, "title": "   "}) is None

    def test_trims_and_truncates_title(self, sample_task):
        task = normalize_task({**sample_task, "title": "  " + "x" * 200})
        assert task["title"] == "x" * 160

    def test_invalid_enums_fall_back(self, sample_task):
        task = normalize_task({**sample_task, "status": "done", "priority": 7})
        assert task["status"] == "pending"
        assert task["priority"] == "medium"

    def test_xp_reward_clamped(self, sample_task):
        assert normalize_task({**sample_task, "xp_reward": 5000})["xp_reward"] == 1000
        assert normalize_task({**sample_task, "xp_reward": 0})["xp_reward"] == 1
        assert normalize_task({**sample_task, "xp_reward": "ten"})["xp_reward"] == 10

    def test_accepts_legacy_user_id(self, sample_task):
        raw = {k: v for k, v in sample_task.items() if k != "owner_id"}
        raw["user_id"] = "someone"
        assert normalize_task(raw)["owner_id"] == "someone"

    def test_generates_missing_id(self, sample_task):
        raw = {k: v for k, v in sample_task.items() if k != "id"}
        task = normalize_task(raw)
        assert task["id"]
        assert normalize_task(task) == task

    def test_unparsable_timestamps(self, sample_task):
        task = normalize_task({**sample_task, "completed_at": "soon", "created_at": "long ago"})
        assert task["completed_at"] is None
        assert clamp_timestamp(task["created_at"]) == task["created_at"]


class TestNormalizeTasks:
    """Tests for the task collection."""

    def test_non_list_becomes_empty(self):
        assert normalize_tasks({"id": "task-1"}) == []
        assert normalize_tasks(None) == []

    def test_drops_bad_elements(self, sample_task):
        tasks = normalize_tasks([sample_task, {"title": ""}, "junk", 3])
        assert [t["id"] for t in tasks] == ["task-1"]

    def test_drops_duplicate_ids(self, sample_task):
        """The first occurrence wins."""
        tasks = normalize_tasks([sample_task, {**sample_task, "title": "Duplicate"}])
        assert len(tasks) == 1
        assert tasks[0]["title"] == "File taxes"

    def test_idempotent(self, sample_task):
        raw = [sample_task, {"title": "  Call mum ", "xp_reward": 3.7, "status": "nope"}]
        once = normalize_tasks(raw)
        assert normalize_tasks(once) == once


# ─────────────────────────────────────────────────────────────────────────────
# Profile Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestNormalizeProfile:
    """Tests for profile repair."""

    def test_non_mapping_is_none(self):
        assert normalize_profile([]) is None

    def test_empty_mapping_is_default_profile(self):
        assert normalize_profile({}) == create_default_profile()

    def test_level_recomputed_from_xp(self):
        """A stored level is never trusted."""
        profile = normalize_profile({"xp": 105, "level": 40})
        assert profile["level"] == 2

    def test_negative_and_bad_counters(self):
        profile = normalize_profile({"xp": -20, "daily_xp": "lots", "streak_days": 4.9})
        assert profile["xp"] == 0
        assert profile["daily_xp"] == 0
        assert profile["streak_days"] == 4

    def test_display_name(self):
        assert normalize_profile({"display_name": "   "})["display_name"] is None
        assert normalize_profile({"display_name": " Sam "})["display_name"] == "Sam"
        assert len(normalize_profile({"display_name": "n" * 100})["display_name"]) == 80

    def test_last_active_date_must_be_date_key(self):
        assert normalize_profile({"last_active_date": "2024-03-15"})["last_active_date"] == "2024-03-15"
        assert normalize_profile({"last_active_date": "March 15"})["last_active_date"] is None

    def test_idempotent(self):
        once = normalize_profile({"xp": 999.9, "display_name": 3, "streak_days": -1})
        assert normalize_profile(once) == once


# ─────────────────────────────────────────────────────────────────────────────
# Settings Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestNormalizeSettings:
    """Tests for LocalSettings repair."""

    def test_non_mapping_gives_defaults(self):
        settings = normalize_settings("dark")
        assert settings == {
            "theme": "system",
            "accentColor": "purple",
            "dailyXpGoal": 100,
            "pomodoroWorkMinutes": 25,
            "pomodoroBreakMinutes": 5,
            "pomodoroAutoStartNextSession": False,
            "ambientSound": "none",
        }

    def test_out_of_range_values_clamped(self):
        settings = normalize_settings({"dailyXpGoal": 10_000, "pomodoroWorkMinutes": 1, "pomodoroBreakMinutes": 90})
        assert settings["dailyXpGoal"] == 500
        assert settings["pomodoroWorkMinutes"] == 5
        assert settings["pomodoroBreakMinutes"] == 60

    def test_integer_settings_round(self):
        assert normalize_settings({"dailyXpGoal": 149.5})["dailyXpGoal"] == 150

    def test_unknown_choices_fall_back(self):
        settings = normalize_settings({"theme": "neon", "accentColor": "pink", "ambientSound": "whale"})
        assert settings["theme"] == "system"
        assert settings["accentColor"] == "purple"
        assert settings["ambientSound"] == "none"

    def test_auto_start_must_be_bool(self):
        assert normalize_settings({"pomodoroAutoStartNextSession": 1})["pomodoroAutoStartNextSession"] is False
        assert normalize_settings({"pomodoroAutoStartNextSession": True})["pomodoroAutoStartNextSession"] is True

    @pytest.mark.parametrize("raw", [
        None,
        {"dailyXpGoal": 149.5, "pomodoroWorkMinutes": 1, "theme": "neon"},
        {"pomodoroBreakMinutes": "10", "pomodoroAutoStartNextSession": 1, "extra": True},
        {"theme": "dark", "accentColor": "green", "ambientSound": "rain"},
    ])
    def test_idempotent(self, raw):
        once = normalize_settings(raw)
        assert normalize_settings(once) == once


# ─────────────────────────────────────────────────────────────────────────────
# Streak Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestNormalizeStreaks:
    """Tests for the date->count map."""

    def test_drops_bad_keys_and_zero_counts(self):
        counts = normalize_streaks({
            "2024-03-01": 2,
            "2024-03-02": 0,
            "yesterday": 4,
            "2024-03-03": -1,
            "2024-03-04": "3",
        })
        assert counts == {"2024-03-01": 2}

    def test_counts_floor_and_cap(self):
        counts = normalize_streaks({"2024-03-01": 2.8, "2024-03-02": 10_000})
        assert counts == {"2024-03-01": 2, "2024-03-02": 500}

    def test_non_mapping_is_empty(self):
        assert normalize_streaks(["2024-03-01"]) == {}

    @pytest.mark.parametrize("raw", [
        "not a map",
        {"2024-03-01": 2.8, "2024-03-02": 10_000, "2024-03-03": 0},
        {"yesterday": 1, "2024-03-04": "3", "2024-03-05": True, "2024-03-06": 1},
    ])
    def test_idempotent(self, raw):
        once = normalize_streaks(raw)
        assert normalize_streaks(once) == once
