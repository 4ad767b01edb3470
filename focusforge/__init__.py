"""FocusForge - ADHD-friendly task engine with XP, levels and streaks

Philosophy:
    Finishing small things should feel good immediately.
    Every completed task or focus session feeds a visible XP bar and a
    streak, so progress is never invisible.

Components:
    storage/: Key-value persistence, record normalization, settings, backups
    gamification/: XP curve, streak ledger, profile lifecycle
    tasks/: Task CRUD and status transitions
    focus/: Pomodoro timing helpers
    ai/: Task decomposition boundary (rule-based and HTTP decomposers)
    security/: Fixed-window rate limiting
    tracker.py: Orchestration facade tying tasks to XP and streaks

Usage:
    from focusforge.storage.store import MemoryStore
    from focusforge.tracker import ProgressTracker

    tracker = ProgressTracker(MemoryStore())
    created = await tracker.tasks.create_task("Write outline")
    await tracker.set_task_completed(created["data"]["task"]["id"], True)
"""

from pathlib import Path

__version__ = "0.3.0"

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
ARGS_DIR = PROJECT_ROOT / "args"

# Installation-scoped identities (single user, local storage)
LOCAL_USER_ID = "local-user"
LOCAL_PROFILE_ID = "local-profile"

__all__ = [
    "ARGS_DIR",
    "DATA_DIR",
    "LOCAL_PROFILE_ID",
    "LOCAL_USER_ID",
    "PROJECT_ROOT",
    "__version__",
]
