"""Storage - local persistence for FocusForge records

Components:
    store.py: Async key-value adapters (memory, SQLite) returning result dicts
    normalizer.py: Repairs untrusted records (store contents, imported backups)
    records.py: Self-healing reads and writes of the four named records
    settings.py: LocalSettings read/replace/patch
    backup.py: Export, import and reset of all local data

Every record that crosses the store boundary is treated as untrusted and
passed through the normalizer before use.
"""

import re

# The only keys the engine reads or writes
STORAGE_KEYS = {
    "tasks": "focusforge_tasks",
    "profile": "focusforge_profile",
    "settings": "focusforge_settings",
    "streaks": "focusforge_streaks",
}

DATE_KEY_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

# Settings choices
THEMES = ("system", "light", "dark")
ACCENT_COLORS = ("purple", "blue", "green", "orange")
AMBIENT_SOUNDS = ("none", "rain", "lofi", "forest")

DEFAULT_SETTINGS = {
    "theme": "system",
    "accentColor": "purple",
    "dailyXpGoal": 100,
    "pomodoroWorkMinutes": 25,
    "pomodoroBreakMinutes": 5,
    "pomodoroAutoStartNextSession": False,
    "ambientSound": "none",
}

# (min, max) for integer settings
SETTINGS_RANGES = {
    "dailyXpGoal": (50, 500),
    "pomodoroWorkMinutes": (5, 120),
    "pomodoroBreakMinutes": (1, 60),
}

MAX_DAILY_COUNT = 500

__all__ = [
    "ACCENT_COLORS",
    "AMBIENT_SOUNDS",
    "DATE_KEY_PATTERN",
    "DEFAULT_SETTINGS",
    "MAX_DAILY_COUNT",
    "SETTINGS_RANGES",
    "STORAGE_KEYS",
    "THEMES",
]
