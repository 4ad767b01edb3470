"""
Tool: Progress Tracker
Purpose: Tie task completion and focus sessions to XP and streaks

The managers each do one read-modify-write on their own record. The
tracker composes them for the user-facing actions:

- Completing a task: status -> completed, +1 on the completion day,
  +xp_reward XP
- Un-completing a task: status -> pending, -1 on the ORIGINAL completion
  day, -xp_reward XP
- Finishing a Pomodoro work phase: +15 XP

All mutations go through one asyncio.Lock so two quick UI events can't
interleave their reads and writes (lost updates). This only protects a
single process; sharing a store across processes or devices would need
a revision counter checked at write time.

Usage:
    tracker = ProgressTracker(create_store(config.storage), config)
    await tracker.set_task_completed(task_id, True)
    snapshot = await tracker.dashboard()
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, Optional

from focusforge.ai.decompose import decompose_task
from focusforge.config import FocusForgeConfig
from focusforge.gamification import POMODORO_COMPLETE_XP
from focusforge.gamification.engine import daily_goal_progress, progress_for_xp
from focusforge.gamification.profile import ProfileManager, daily_xp_for
from focusforge.gamification.streaks import (
    DateLike,
    StreakLedger,
    as_date,
    calendar_days,
    current_streak,
    date_key_from_date,
    date_key_from_timestamp,
    longest_streak,
)
from focusforge.logging_config import get_logger
from focusforge.security.ratelimit import FixedWindowRateLimiter
from focusforge.storage.settings import SettingsManager
from focusforge.storage.store import KeyValueStore
from focusforge.tasks.manager import TaskManager

logger = get_logger(__name__)


def _completion_stamp(today: Optional[DateLike]) -> Optional[str]:
    """Local ISO stamp on `today` at the current time of day; None means now."""
    if today is None:
        return None
    moment = datetime.combine(as_date(today), datetime.now().time())
    return moment.astimezone().isoformat()


class ProgressTracker:
    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[FocusForgeConfig] = None,
        decomposer=None,
        limiter: Optional[FixedWindowRateLimiter] = None,
    ):
        self.store = store
        self.config = config or FocusForgeConfig()
        self.tasks = TaskManager(store)
        self.profile = ProfileManager(store)
        self.ledger = StreakLedger(store, lookback_days=self.config.gamification.streak_lookback_days)
        self.settings = SettingsManager(store)
        self.decomposer = decomposer
        self.limiter = limiter
        self._lock = asyncio.Lock()

    async def set_task_completed(self, task_id: str, completed: bool, today: Optional[DateLike] = None) -> Dict[str, Any]:
        """
        Complete or un-complete (back to pending) a task.

        Returns:
            dict with the updated task, and the profile when XP changed
        """
        return await self.set_task_status(task_id, "completed" if completed else "pending", today)

    async def set_task_status(self, task_id: str, status: str, today: Optional[DateLike] = None) -> Dict[str, Any]:
        """
        Move a task to any status, settling XP and the day count when it
        enters or leaves completed.

        The status change, day count and XP award succeed or fail together:
        if the count or the award can't be written, the task and ledger are
        put back as they were.

        Args:
            task_id: Task to move
            status: One of TASK_STATUSES
            today: Override for the current local date; a new completion is
                stamped and counted on this day

        Returns:
            dict with the updated task, and the profile when XP changed
        """
        async with self._lock:
            before = await self.ledger.get_counts()
            if not before["success"]:
                return before

            result = await self.tasks.update_task_status(task_id, status, completed_at=_completion_stamp(today))
            if not result["success"]:
                return result

            task = result["data"]
            completed = status == "completed"
            was_completed = result["previous_status"] == "completed"
            if completed == was_completed:
                # Re-completing, or moving between open statuses, is not scored
                return {"success": True, "data": {"task": task, "profile": None}, "message": result["message"]}

            if completed:
                completed_at = task["completed_at"]
                delta = 1
                xp = task["xp_reward"]
            else:
                completed_at = result["previous_completed_at"]
                delta = -1
                xp = -task["xp_reward"]

            date_key = date_key_from_timestamp(completed_at) if completed_at else None
            if date_key is not None:
                counted = await self.ledger.adjust_count(date_key, delta)
                if not counted["success"]:
                    await self._restore(task_id, result, before["data"])
                    return counted

            awarded = await self.profile.award_xp(xp, today)
            if not awarded["success"]:
                await self._restore(task_id, result, before["data"])
                return awarded

            return {
                "success": True,
                "data": {"task": task, "profile": awarded["data"]},
                "level_change": awarded["level_change"],
                "message": f"{result['message']} ({awarded['message']})",
            }

    async def _restore(self, task_id: str, result: Dict[str, Any], counts: Dict[str, int]) -> None:
        """Put a task's previous status and the ledger back after a failed settlement."""
        logger.warning(f"Rolling back status change for {task_id}")

        reverted = await self.tasks.update_task_status(
            task_id, result["previous_status"], completed_at=result["previous_completed_at"]
        )
        if not reverted["success"]:
            logger.error(f"Could not restore status of {task_id}: {reverted['error']}")

        restored = await self.ledger.set_counts(counts)
        if not restored["success"]:
            logger.error(f"Could not restore completion counts: {restored['error']}")

    async def complete_pomodoro(self, today: Optional[DateLike] = None) -> Dict[str, Any]:
        """Credit a finished Pomodoro work phase."""
        async with self._lock:
            return await self.profile.award_xp(POMODORO_COMPLETE_XP, today)

    async def award_xp(self, amount: int, today: Optional[DateLike] = None) -> Dict[str, Any]:
        async with self._lock:
            return await self.profile.award_xp(amount, today)

    async def delete_task(self, task_id: str) -> Dict[str, Any]:
        """Delete a task. XP and completion counts already earned are kept."""
        async with self._lock:
            return await self.tasks.delete_task(task_id)

    async def suggest_steps(self, task_id: str, client_key: str = "local", create: bool = False) -> Dict[str, Any]:
        """
        Decompose an existing task, optionally saving the steps as subtasks.

        Rate-limited per client when a limiter is configured.
        """
        if self.limiter is not None and self.limiter.is_limited(client_key):
            return {
                "success": False,
                "error": "Too many requests. Please wait a few minutes.",
                "retry_after": self.limiter.retry_after(client_key),
            }

        found = await self.tasks.get_task(task_id)
        if not found["success"]:
            return found

        task = found["data"]
        description = (task["description"] or "")[:1000] or None
        suggested = await decompose_task(task["title"][:120], description, decomposer=self.decomposer)
        if not suggested["success"] or not create:
            return suggested

        async with self._lock:
            created = await self.tasks.create_subtasks(task_id, suggested["data"]["suggestions"])
        if not created["success"]:
            return created

        return {
            "success": True,
            "data": {**suggested["data"], "tasks": created["data"]["tasks"]},
            "message": created["message"],
        }

    async def dashboard(self, today: Optional[DateLike] = None) -> Dict[str, Any]:
        """
        Everything the dashboard shows, in one read-only snapshot.

        Returns:
            dict with profile, level progress, daily goal, streaks and task counts
        """
        day = as_date(today)

        profile_result = await self.profile.get_or_create_profile()
        settings_result = await self.settings.get_settings()
        counts_result = await self.ledger.get_counts()
        tasks_result = await self.tasks.list_tasks()

        for result in (profile_result, settings_result, counts_result, tasks_result):
            if not result["success"]:
                return result

        profile = profile_result["data"]
        counts = counts_result["data"]

        return {
            "success": True,
            "data": {
                "profile": profile,
                "level": progress_for_xp(profile["xp"]),
                "daily_goal": daily_goal_progress(daily_xp_for(profile, day), settings_result["data"]["dailyXpGoal"]),
                "streaks": {
                    "activity_streak": profile["streak_days"],
                    "completion_streak": current_streak(counts, day, self.ledger.lookback_days),
                    "longest_completion_streak": longest_streak(counts),
                    "completed_today": counts.get(date_key_from_date(day), 0),
                    "calendar": calendar_days(counts, day, self.config.gamification.calendar_days),
                },
                "tasks": {
                    "total": tasks_result["data"]["total"],
                    "completed": tasks_result["data"]["completed"],
                },
            },
        }


__all__ = ["ProgressTracker"]
