"""Focus - Pomodoro timing helpers

Components:
    pomodoro.py: Duration conversion, mm:ss formatting, work/break cycling
"""

PHASES = ("work", "break")

DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5

__all__ = ["DEFAULT_BREAK_MINUTES", "DEFAULT_WORK_MINUTES", "PHASES"]
