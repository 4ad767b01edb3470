"""
Tool: Gamification Engine
Purpose: XP-to-level curve and progress metrics

Pure functions, no state and no I/O. The curve is superlinear so each
level takes a little longer than the last:

    level 2 at 100 XP, level 3 at 282 XP, level 4 at 519 XP, ...

Level is always derived from XP; a stored level is never trusted.
"""

import math
from typing import Any, Dict

from focusforge.storage import DEFAULT_SETTINGS, SETTINGS_RANGES


def xp_threshold_for_level(level: int) -> int:
    """Total XP needed to reach a level."""
    if level <= 1:
        return 0

    return math.floor(100 * math.pow(level - 1, 1.5))


def level_for_xp(xp: int) -> int:
    """Highest level whose threshold is at or below xp."""
    if xp <= 0:
        return 1

    level = 1
    while xp >= xp_threshold_for_level(level + 1):
        level += 1

    return level


def progress_for_xp(xp: int) -> Dict[str, Any]:
    """
    Progress through the current level.

    Returns:
        dict with level, current_level_xp, next_level_xp, progress_percent
        (0-100) and xp_to_next_level
    """
    level = level_for_xp(xp)
    current_level_xp = xp_threshold_for_level(level)
    next_level_xp = xp_threshold_for_level(level + 1)
    level_span = max(1, next_level_xp - current_level_xp)
    progress_percent = ((xp - current_level_xp) / level_span) * 100

    return {
        "level": level,
        "current_level_xp": current_level_xp,
        "next_level_xp": next_level_xp,
        "progress_percent": max(0.0, min(100.0, progress_percent)),
        "xp_to_next_level": max(0, next_level_xp - xp),
    }


def daily_goal_progress(daily_xp: int, goal: int) -> Dict[str, Any]:
    """
    Progress toward the daily XP goal.

    The goal is clamped to the same range the settings allow, so a stale or
    hand-edited goal can't divide by zero or make the bar meaningless.
    """
    low, high = SETTINGS_RANGES["dailyXpGoal"]
    if isinstance(goal, bool) or not isinstance(goal, int):
        goal = DEFAULT_SETTINGS["dailyXpGoal"]
    goal = max(low, min(high, goal))
    daily_xp = max(0, daily_xp)

    return {
        "daily_xp": daily_xp,
        "goal": goal,
        "remaining": max(0, goal - daily_xp),
        "percent": min(100.0, (daily_xp / goal) * 100),
        "reached": daily_xp >= goal,
    }


__all__ = [
    "daily_goal_progress",
    "level_for_xp",
    "progress_for_xp",
    "xp_threshold_for_level",
]
