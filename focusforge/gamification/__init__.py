"""Gamification - XP, levels, daily goals and streaks

Components:
    engine.py: Pure XP/level curve and progress math
    streaks.py: Per-day completion counts and the completion streak
    profile.py: The single profile record (XP, level, daily XP, activity streak)

Two streaks exist:
    activity streak: profile["streak_days"], advanced by any XP award on a
        new consecutive day. This is the streak shown to the user.
    completion streak: derived from the ledger, consecutive days ending today
        with at least one completed task. Shown next to the calendar.
"""

TASK_COMPLETE_XP = 10
POMODORO_COMPLETE_XP = 15

# Profile field limits
XP_MAX = 10_000_000
DISPLAY_NAME_MAX_LENGTH = 80

__all__ = [
    "DISPLAY_NAME_MAX_LENGTH",
    "POMODORO_COMPLETE_XP",
    "TASK_COMPLETE_XP",
    "XP_MAX",
]
