"""AI - task decomposition boundary

Turns one overwhelming task into 3-5 small steps that each fit a single
focus session.

Components:
    models.py: Request and suggestion shapes
    decompose.py: Rule-based and Gemini decomposers, factory, decompose_task()
"""

MIN_SUGGESTIONS = 3
MAX_SUGGESTIONS = 5

SUGGESTION_TITLE_MAX_LENGTH = 80
SUGGESTION_TIPS_MAX_LENGTH = 100
MIN_ESTIMATED_MINUTES = 5
MAX_ESTIMATED_MINUTES = 25
DEFAULT_ESTIMATED_MINUTES = 15

__all__ = [
    "DEFAULT_ESTIMATED_MINUTES",
    "MAX_ESTIMATED_MINUTES",
    "MAX_SUGGESTIONS",
    "MIN_ESTIMATED_MINUTES",
    "MIN_SUGGESTIONS",
    "SUGGESTION_TIPS_MAX_LENGTH",
    "SUGGESTION_TITLE_MAX_LENGTH",
]
