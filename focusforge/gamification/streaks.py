"""
Tool: Streak Ledger
Purpose: Per-day completion counts and the completion streak

The ledger is a map of date-key -> number of tasks completed that day:

    {"2024-03-01": 2, "2024-03-02": 1}

Days with nothing completed are simply absent. Date keys use the LOCAL
calendar date; "today" comparisons must use the same clock or streaks
will slip a day around midnight UTC.

Completion streak policy: count consecutive days ending TODAY. If nothing
has been completed today yet, the completion streak is 0 even if
yesterday was busy. (The forgiving streak is the profile's activity
streak; see profile.py.)
"""

from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from focusforge.logging_config import get_logger
from focusforge.storage.normalizer import is_date_key
from focusforge.storage.records import read_record, write_record
from focusforge.storage.store import KeyValueStore

logger = get_logger(__name__)

DEFAULT_LOOKBACK_DAYS = 365

DateLike = Union[date, str]


# ─────────────────────────────────────────────────────────────────────────────
# Date keys
# ─────────────────────────────────────────────────────────────────────────────


def date_key_from_date(value: date) -> str:
    """Zero-padded YYYY-MM-DD for a calendar date."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def date_key_from_timestamp(timestamp: str) -> Optional[str]:
    """
    Local calendar date of an ISO timestamp.

    Aware timestamps (e.g. "...Z" or "+00:00") are converted to local time
    first; naive ones are taken as already local.

    Returns:
        date key, or None if the timestamp doesn't parse
    """
    try:
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()

    return date_key_from_date(parsed.date())


def today_key() -> str:
    return date_key_from_date(date.today())


def as_date(value: Optional[DateLike]) -> date:
    if value is None:
        return date.today()
    if isinstance(value, str):
        return date.fromisoformat(value)
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Pure streak math
# ─────────────────────────────────────────────────────────────────────────────


def current_streak(counts: Dict[str, int], today: Optional[DateLike] = None, lookback_days: int = DEFAULT_LOOKBACK_DAYS) -> int:
    """Consecutive days with completions, walking back from today inclusive."""
    day = as_date(today)
    streak = 0

    for _ in range(lookback_days):
        if counts.get(date_key_from_date(day), 0) <= 0:
            break
        streak += 1
        day -= timedelta(days=1)

    return streak


def longest_streak(counts: Dict[str, int]) -> int:
    """Longest run of consecutive days with completions anywhere in the ledger."""
    days = sorted(
        date.fromisoformat(key)
        for key, count in counts.items()
        if count > 0 and _is_real_date(key)
    )

    best = 0
    run = 0
    previous = None
    for day in days:
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        best = max(best, run)
        previous = day

    return best


def _is_real_date(key: str) -> bool:
    # Keys pass the pattern but may still be impossible dates (2024-02-31)
    try:
        date.fromisoformat(key)
    except ValueError:
        return False
    return True


def calendar_days(counts: Dict[str, int], today: Optional[DateLike] = None, days: int = 28) -> List[Dict[str, Any]]:
    """
    The last `days` days ending today, oldest first, for a heat-map view.

    intensity: 0 = nothing done, 1 = 1-2 tasks, 2 = 3 or more
    """
    end = as_date(today)
    cells = []

    for offset in range(days - 1, -1, -1):
        day = end - timedelta(days=offset)
        key = date_key_from_date(day)
        count = counts.get(key, 0)
        cells.append({
            "date_key": key,
            "weekday": day.strftime("%a"),
            "completed_count": count,
            "intensity": 2 if count >= 3 else 1 if count >= 1 else 0,
        })

    return cells


# ─────────────────────────────────────────────────────────────────────────────
# Ledger
# ─────────────────────────────────────────────────────────────────────────────


class StreakLedger:
    """
    Persistent date->count map.

    adjust_count is a read-modify-write with no lock of its own; callers
    that can overlap must serialize (ProgressTracker does).
    """

    def __init__(self, store: KeyValueStore, lookback_days: int = DEFAULT_LOOKBACK_DAYS):
        self.store = store
        self.lookback_days = lookback_days

    async def get_counts(self) -> Dict[str, Any]:
        return await read_record(self.store, "streaks")

    async def set_counts(self, counts: Dict[str, int]) -> Dict[str, Any]:
        return await write_record(self.store, "streaks", counts)

    async def adjust_count(self, date_key: str, delta: int) -> Dict[str, Any]:
        """
        Add delta to a day's count, removing the day when it reaches zero.

        Args:
            date_key: YYYY-MM-DD (invalid keys leave the ledger untouched)
            delta: Change to apply; may be negative

        Returns:
            dict with success status and the full updated map
        """
        if not is_date_key(date_key):
            logger.debug(f"Ignoring count adjustment for invalid date key {date_key!r}")
            return await self.get_counts()

        current = await self.get_counts()
        if not current["success"]:
            return current

        counts = dict(current["data"])
        next_count = max(0, counts.get(date_key, 0) + delta)

        if next_count == 0:
            counts.pop(date_key, None)
        else:
            counts[date_key] = next_count

        return await self.set_counts(counts)

    async def get_current_streak(self, today: Optional[DateLike] = None) -> Dict[str, Any]:
        current = await self.get_counts()
        if not current["success"]:
            return current

        counts = current["data"]
        return {
            "success": True,
            "data": {
                "current_streak": current_streak(counts, today, self.lookback_days),
                "longest_streak": longest_streak(counts),
                "today_count": counts.get(date_key_from_date(as_date(today)), 0),
            },
        }


__all__ = [
    "StreakLedger",
    "as_date",
    "calendar_days",
    "current_streak",
    "date_key_from_date",
    "date_key_from_timestamp",
    "longest_streak",
    "today_key",
]
