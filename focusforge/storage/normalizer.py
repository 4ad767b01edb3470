"""
Tool: Record Normalizer
Purpose: Validate and repair raw records before the engine uses them

Stored data can be partial, corrupted, hand-edited, or come from an
imported backup written by an older version. Rather than rejecting it,
every field is repaired to a documented fallback:

- Numbers: clamped to their range; non-numbers (including booleans, NaN
  and infinities) become the field default
- Enums: unknown values become the safe default (pending, medium, ...)
- Strings: non-strings become the field fallback; long strings are cut
- Collections: wrong shape becomes empty; bad elements are dropped

None of these functions raise. All of them are idempotent:
normalize(normalize(x)) == normalize(x).
"""

import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from focusforge import LOCAL_PROFILE_ID, LOCAL_USER_ID
from focusforge.gamification import DISPLAY_NAME_MAX_LENGTH, XP_MAX
from focusforge.gamification.engine import level_for_xp
from focusforge.storage import (
    ACCENT_COLORS,
    AMBIENT_SOUNDS,
    DATE_KEY_PATTERN,
    DEFAULT_SETTINGS,
    MAX_DAILY_COUNT,
    SETTINGS_RANGES,
    THEMES,
)
from focusforge.tasks import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    DEFAULT_XP_REWARD,
    DESCRIPTION_MAX_LENGTH,
    TASK_PRIORITIES,
    TASK_STATUSES,
    TITLE_MAX_LENGTH,
    XP_REWARD_MAX,
    XP_REWARD_MIN,
)

# Upper bound for the running counters on the profile
STREAK_DAYS_MAX = 100_000


def generate_id() -> str:
    """Generate a unique record ID."""
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ─────────────────────────────────────────────────────────────────────────────
# Field helpers
# ─────────────────────────────────────────────────────────────────────────────


def is_number(value: Any) -> bool:
    """True for finite ints/floats. bool is excluded even though it subclasses int."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def clamp_int(value: Any, minimum: int, maximum: int, fallback: int, rounding: str = "floor") -> int:
    """Coerce value to an int in [minimum, maximum], or fallback if it isn't a number."""
    if not is_number(value):
        return fallback

    if rounding == "round":
        # half-up, not Python's banker's rounding
        number = math.floor(value + 0.5)
    else:
        number = math.floor(value)

    return max(minimum, min(maximum, int(number)))


def clamp_choice(value: Any, choices: tuple, fallback: str) -> str:
    return value if isinstance(value, str) and value in choices else fallback


def clamp_text(value: Any, max_length: int, fallback: Optional[str] = None, strip: bool = False) -> Optional[str]:
    """Truncate a string to max_length; non-strings become fallback."""
    if not isinstance(value, str):
        return fallback

    if strip:
        # Strip again after cutting so a second pass is a no-op
        return value.strip()[:max_length].rstrip()

    return value[:max_length]


def clamp_id(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def clamp_timestamp(value: Any) -> Optional[str]:
    """Keep ISO-8601 strings that parse; anything else becomes None."""
    if not isinstance(value, str) or not value:
        return None

    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None

    return value


def is_date_key(value: Any) -> bool:
    return isinstance(value, str) and DATE_KEY_PATTERN.fullmatch(value) is not None


# ─────────────────────────────────────────────────────────────────────────────
# Tasks
# ─────────────────────────────────────────────────────────────────────────────


def normalize_task(raw: Any) -> Optional[Dict[str, Any]]:
    """
    Repair a single task record.

    Returns:
        The repaired task, or None when it can't be salvaged (not a mapping,
        or no title left after trimming)
    """
    if not isinstance(raw, dict):
        return None

    title = clamp_text(raw.get("title"), TITLE_MAX_LENGTH, fallback="", strip=True)
    if not title:
        return None

    # Older exports called the owner field user_id
    owner_id = raw.get("owner_id", raw.get("user_id"))

    return {
        "id": clamp_id(raw.get("id")) or generate_id(),
        "owner_id": clamp_id(owner_id) or LOCAL_USER_ID,
        "title": title,
        "description": clamp_text(raw.get("description"), DESCRIPTION_MAX_LENGTH),
        "parent_task_id": clamp_id(raw.get("parent_task_id")),
        "status": clamp_choice(raw.get("status"), TASK_STATUSES, DEFAULT_STATUS),
        "priority": clamp_choice(raw.get("priority"), TASK_PRIORITIES, DEFAULT_PRIORITY),
        "xp_reward": clamp_int(raw.get("xp_reward"), XP_REWARD_MIN, XP_REWARD_MAX, DEFAULT_XP_REWARD),
        "completed_at": clamp_timestamp(raw.get("completed_at")),
        "created_at": clamp_timestamp(raw.get("created_at")) or utc_now_iso(),
    }


def normalize_tasks(raw: Any) -> List[Dict[str, Any]]:
    """Repair a task collection. Unsalvageable tasks and repeated IDs are dropped."""
    if not isinstance(raw, list):
        return []

    tasks = []
    seen_ids = set()
    for item in raw:
        task = normalize_task(item)
        if task is None or task["id"] in seen_ids:
            continue
        seen_ids.add(task["id"])
        tasks.append(task)

    return tasks


# ─────────────────────────────────────────────────────────────────────────────
# Profile
# ─────────────────────────────────────────────────────────────────────────────


def create_default_profile() -> Dict[str, Any]:
    return {
        "id": LOCAL_PROFILE_ID,
        "display_name": None,
        "level": 1,
        "xp": 0,
        "daily_xp": 0,
        "streak_days": 0,
        "last_active_date": None,
    }


def normalize_profile(raw: Any) -> Optional[Dict[str, Any]]:
    """
    Repair the profile record.

    The stored level is ignored and recomputed from XP.

    Returns:
        The repaired profile, or None if raw is not a mapping
    """
    if not isinstance(raw, dict):
        return None

    xp = clamp_int(raw.get("xp"), 0, XP_MAX, 0)
    display_name = clamp_text(raw.get("display_name"), DISPLAY_NAME_MAX_LENGTH, strip=True)
    last_active_date = raw.get("last_active_date")

    return {
        "id": clamp_id(raw.get("id")) or LOCAL_PROFILE_ID,
        "display_name": display_name or None,
        "level": level_for_xp(xp),
        "xp": xp,
        "daily_xp": clamp_int(raw.get("daily_xp"), 0, XP_MAX, 0),
        "streak_days": clamp_int(raw.get("streak_days"), 0, STREAK_DAYS_MAX, 0),
        "last_active_date": last_active_date if is_date_key(last_active_date) else None,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────


def normalize_settings(raw: Any) -> Dict[str, Any]:
    """Repair LocalSettings. Anything that isn't a mapping yields the defaults."""
    if not isinstance(raw, dict):
        raw = {}

    settings = {
        "theme": clamp_choice(raw.get("theme"), THEMES, DEFAULT_SETTINGS["theme"]),
        "accentColor": clamp_choice(raw.get("accentColor"), ACCENT_COLORS, DEFAULT_SETTINGS["accentColor"]),
        "ambientSound": clamp_choice(raw.get("ambientSound"), AMBIENT_SOUNDS, DEFAULT_SETTINGS["ambientSound"]),
    }

    for key, (low, high) in SETTINGS_RANGES.items():
        settings[key] = clamp_int(raw.get(key), low, high, DEFAULT_SETTINGS[key], rounding="round")

    auto_start = raw.get("pomodoroAutoStartNextSession")
    settings["pomodoroAutoStartNextSession"] = (
        auto_start if isinstance(auto_start, bool) else DEFAULT_SETTINGS["pomodoroAutoStartNextSession"]
    )

    return settings


# ─────────────────────────────────────────────────────────────────────────────
# Streaks
# ─────────────────────────────────────────────────────────────────────────────


def normalize_streaks(raw: Any) -> Dict[str, int]:
    """Repair the date->count map. Bad keys and zero counts are dropped."""
    if not isinstance(raw, dict):
        return {}

    counts = {}
    for date_key, count in raw.items():
        if not is_date_key(date_key):
            continue
        normalized_count = clamp_int(count, 0, MAX_DAILY_COUNT, 0)
        if normalized_count == 0:
            continue
        counts[date_key] = normalized_count

    return counts


__all__ = [
    "clamp_choice",
    "clamp_id",
    "clamp_int",
    "clamp_text",
    "clamp_timestamp",
    "create_default_profile",
    "generate_id",
    "is_date_key",
    "is_number",
    "normalize_profile",
    "normalize_settings",
    "normalize_streaks",
    "normalize_task",
    "normalize_tasks",
    "utc_now_iso",
]
