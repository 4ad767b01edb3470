"""
Tool: Profile Manager
Purpose: Single source of truth for XP, level, daily XP and activity streak

There is exactly one profile per installation. It's created lazily the
first time anything asks for it, and only award_xp() changes its numbers.

Activity streak rules, applied on every award:
    last active today      -> streak unchanged (already credited)
    last active yesterday  -> streak + 1
    anything else          -> streak resets to 1
and last_active_date becomes today.

Negative awards (un-completing a task) use the same path. XP floors at
zero: deducting more than the profile has silently drops the remainder.
"""

from datetime import date, timedelta
from typing import Any, Dict, Optional

from focusforge.gamification import DISPLAY_NAME_MAX_LENGTH
from focusforge.gamification.engine import daily_goal_progress, level_for_xp
from focusforge.gamification.streaks import DateLike, as_date, date_key_from_date
from focusforge.logging_config import get_logger
from focusforge.storage.normalizer import create_default_profile
from focusforge.storage.records import read_record, write_record
from focusforge.storage.store import KeyValueStore

logger = get_logger(__name__)


def next_activity_streak(last_active_date: Optional[str], streak_days: int, today: date) -> int:
    """Activity streak after an award made on `today`."""
    today_key = date_key_from_date(today)
    yesterday_key = date_key_from_date(today - timedelta(days=1))

    if last_active_date == today_key:
        return streak_days
    if last_active_date == yesterday_key:
        return max(1, streak_days + 1)
    return 1


def daily_xp_for(profile: Dict[str, Any], today: Optional[DateLike] = None) -> int:
    """Daily XP only counts for the day it was earned."""
    if profile.get("last_active_date") != date_key_from_date(as_date(today)):
        return 0
    return profile.get("daily_xp", 0)


class ProfileManager:
    """Owns the profile record. No lock of its own; see ProgressTracker."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get_profile(self) -> Dict[str, Any]:
        """Stored profile, or data=None if none exists yet."""
        return await read_record(self.store, "profile")

    async def get_or_create_profile(self) -> Dict[str, Any]:
        """
        Return the stored profile, creating the zero-state default if absent.

        Returns:
            dict with success status and profile data
        """
        current = await self.get_profile()
        if not current["success"]:
            return current

        if current["data"] is not None:
            return current

        logger.info("Creating default profile")
        return await write_record(self.store, "profile", create_default_profile())

    async def award_xp(self, amount: int, today: Optional[DateLike] = None) -> Dict[str, Any]:
        """
        Add (or with a negative amount, remove) XP.

        Level is recomputed from the new XP; the activity streak and daily XP
        are updated for `today` (local date, defaults to now).

        Args:
            amount: XP delta, may be negative
            today: Override for the current date (tests, backfills)

        Returns:
            dict with the new profile snapshot and level_change
        """
        if isinstance(amount, bool) or not isinstance(amount, int):
            return {"success": False, "error": f"Invalid XP amount: {amount!r}"}

        current = await self.get_or_create_profile()
        if not current["success"]:
            return current

        profile = current["data"]
        day = as_date(today)
        today_key = date_key_from_date(day)

        next_xp = max(0, profile["xp"] + amount)
        previous_daily = daily_xp_for(profile, day)

        updated = {
            **profile,
            "xp": next_xp,
            "level": level_for_xp(next_xp),
            "daily_xp": max(0, previous_daily + amount),
            "streak_days": next_activity_streak(profile["last_active_date"], profile["streak_days"], day),
            "last_active_date": today_key,
        }

        result = await write_record(self.store, "profile", updated)
        if not result["success"]:
            return result

        saved = result["data"]
        level_change = saved["level"] - profile["level"]
        if level_change > 0:
            logger.info(f"Level up: {profile['level']} -> {saved['level']}")

        return {
            "success": True,
            "data": saved,
            "level_change": level_change,
            "message": f"{amount:+d} XP",
        }

    async def update_display_name(self, display_name: Optional[str]) -> Dict[str, Any]:
        if display_name is not None and not isinstance(display_name, str):
            return {"success": False, "error": "Display name must be a string"}

        if display_name and len(display_name.strip()) > DISPLAY_NAME_MAX_LENGTH:
            return {"success": False, "error": f"Display name is limited to {DISPLAY_NAME_MAX_LENGTH} characters"}

        current = await self.get_or_create_profile()
        if not current["success"]:
            return current

        return await write_record(self.store, "profile", {**current["data"], "display_name": display_name})

    async def daily_progress(self, goal: int, today: Optional[DateLike] = None) -> Dict[str, Any]:
        """Progress toward today's XP goal."""
        current = await self.get_or_create_profile()
        if not current["success"]:
            return current

        return {"success": True, "data": daily_goal_progress(daily_xp_for(current["data"], today), goal)}


__all__ = ["ProfileManager", "daily_xp_for", "next_activity_streak"]
