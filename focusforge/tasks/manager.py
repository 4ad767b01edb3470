"""
Tool: Task Manager
Purpose: CRUD operations and status transitions for tasks

This provides task lifecycle management over the stored task collection:
- Create tasks (newest first) and AI-suggested subtasks
- Track status progression, keeping completed_at in step with status
- Update and delete tasks

Every operation returns a result dict:
    {"success": True, "data": {...}, "message": "..."}
    {"success": False, "error": "..."}

Unknown task IDs and invalid arguments are reported through "error",
never raised. Each call is one read-modify-write of the whole collection
with no locking; see ProgressTracker for serialized access.

Usage:
    manager = TaskManager(store)
    result = await manager.create_task("Reply to landlord", priority="high")
    await manager.update_task_status(result["data"]["task_id"], "completed")
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from focusforge import LOCAL_USER_ID
from focusforge.logging_config import get_logger
from focusforge.storage.normalizer import generate_id, is_number
from focusforge.storage.records import read_record, write_record
from focusforge.storage.store import KeyValueStore
from focusforge.tasks import (
    DEFAULT_PRIORITY,
    DEFAULT_XP_REWARD,
    DESCRIPTION_MAX_LENGTH,
    TASK_PRIORITIES,
    TASK_STATUSES,
    TITLE_MAX_LENGTH,
    XP_REWARD_MAX,
    XP_REWARD_MIN,
)

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("title", "description", "priority", "xp_reward", "parent_task_id")

# Updatable fields that can't be set to None
REQUIRED_FIELDS = ("title", "priority", "xp_reward")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _validate_fields(
    title: Optional[str] = None,
    description: Optional[str] = None,
    priority: Optional[str] = None,
    xp_reward: Optional[int] = None,
) -> Optional[str]:
    """Return an error message for the first invalid field, or None."""
    if title is not None:
        if not isinstance(title, str) or not title.strip():
            return "Title must not be empty"
        if len(title.strip()) > TITLE_MAX_LENGTH:
            return f"Title is limited to {TITLE_MAX_LENGTH} characters"

    if description is not None:
        if not isinstance(description, str):
            return "Description must be a string"
        if len(description) > DESCRIPTION_MAX_LENGTH:
            return f"Description is limited to {DESCRIPTION_MAX_LENGTH} characters"

    if priority is not None and priority not in TASK_PRIORITIES:
        return f"Invalid priority. Must be one of: {TASK_PRIORITIES}"

    if xp_reward is not None:
        if not is_number(xp_reward) or int(xp_reward) != xp_reward:
            return "XP reward must be a whole number"
        if not XP_REWARD_MIN <= xp_reward <= XP_REWARD_MAX:
            return f"XP reward must be between {XP_REWARD_MIN} and {XP_REWARD_MAX}"

    return None


def _find_index(tasks: List[Dict[str, Any]], task_id: str) -> int:
    for index, task in enumerate(tasks):
        if task["id"] == task_id:
            return index
    return -1


def _stored_task(saved: Dict[str, Any], task_id: str) -> Dict[str, Any]:
    """The normalized form of a task as write_record persisted it."""
    stored = saved["data"]
    return stored[_find_index(stored, task_id)]


class TaskManager:
    """Task CRUD over the `tasks` record of a KeyValueStore."""

    def __init__(self, store: KeyValueStore, owner_id: str = LOCAL_USER_ID):
        self.store = store
        self.owner_id = owner_id

    async def _load(self) -> Dict[str, Any]:
        return await read_record(self.store, "tasks")

    async def _save(self, tasks: List[Dict[str, Any]]) -> Dict[str, Any]:
        return await write_record(self.store, "tasks", tasks)

    async def create_task(
        self,
        title: str,
        description: Optional[str] = None,
        parent_task_id: Optional[str] = None,
        priority: str = DEFAULT_PRIORITY,
        xp_reward: int = DEFAULT_XP_REWARD,
    ) -> Dict[str, Any]:
        """
        Create a new pending task.

        Args:
            title: What to do (1-160 characters after trimming)
            description: Optional details
            parent_task_id: Parent task if this is a subtask
            priority: low/medium/high/urgent
            xp_reward: XP granted on completion (1-1000)

        Returns:
            dict with success status and task data
        """
        error = _validate_fields(title=title, description=description, priority=priority, xp_reward=xp_reward)
        if error:
            return {"success": False, "error": error}

        loaded = await self._load()
        if not loaded["success"]:
            return loaded
        tasks = loaded["data"]

        if parent_task_id is not None and _find_index(tasks, parent_task_id) == -1:
            return {"success": False, "error": f"Task not found: {parent_task_id}"}

        task = {
            "id": generate_id(),
            "owner_id": self.owner_id,
            "title": title.strip(),
            "description": description,
            "parent_task_id": parent_task_id,
            "status": "pending",
            "priority": priority,
            "xp_reward": int(xp_reward),
            "completed_at": None,
            "created_at": _now_iso(),
        }

        saved = await self._save([task, *tasks])
        if not saved["success"]:
            return saved

        logger.debug(f"Created task {task['id']}")
        return {
            "success": True,
            "data": {"task_id": task["id"], "task": task},
            "message": f"Task created with ID {task['id']}",
        }

    async def create_subtasks(self, parent_task_id: str, suggestions: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Create one pending subtask per decomposition suggestion.

        All subtasks are written in a single store write.

        Args:
            parent_task_id: Task being broken down
            suggestions: Items with at least a "title"

        Returns:
            dict with the created tasks
        """
        loaded = await self._load()
        if not loaded["success"]:
            return loaded
        tasks = loaded["data"]

        if _find_index(tasks, parent_task_id) == -1:
            return {"success": False, "error": f"Task not found: {parent_task_id}"}

        created = []
        for suggestion in suggestions:
            title = suggestion.get("title") if isinstance(suggestion, dict) else None
            error = _validate_fields(title=title)
            if error:
                return {"success": False, "error": f"Invalid suggestion: {error}"}
            created.append({
                "id": generate_id(),
                "owner_id": self.owner_id,
                "title": title.strip(),
                "description": suggestion.get("tips") or None,
                "parent_task_id": parent_task_id,
                "status": "pending",
                "priority": DEFAULT_PRIORITY,
                "xp_reward": DEFAULT_XP_REWARD,
                "completed_at": None,
                "created_at": _now_iso(),
            })

        saved = await self._save([*created, *tasks])
        if not saved["success"]:
            return saved

        return {
            "success": True,
            "data": {"tasks": created, "total": len(created)},
            "message": f"Added {len(created)} steps",
        }

    async def get_task(self, task_id: str) -> Dict[str, Any]:
        """
        Get task details by ID, including its direct subtasks.

        Returns:
            dict with task data
        """
        loaded = await self._load()
        if not loaded["success"]:
            return loaded
        tasks = loaded["data"]

        index = _find_index(tasks, task_id)
        if index == -1:
            return {"success": False, "error": f"Task not found: {task_id}"}

        task = dict(tasks[index])
        task["subtasks"] = [t for t in tasks if t["parent_task_id"] == task_id]

        return {"success": True, "data": task}

    async def list_tasks(
        self,
        status: Optional[str] = None,
        parent_task_id: Optional[str] = None,
        include_subtasks: bool = True,
    ) -> Dict[str, Any]:
        """
        List tasks, newest first, with optional filters.

        Args:
            status: Filter by status
            parent_task_id: Only subtasks of this task
            include_subtasks: When False, only top-level tasks

        Returns:
            dict with task list and counts
        """
        if status and status not in TASK_STATUSES:
            return {"success": False, "error": f"Invalid status. Must be one of: {TASK_STATUSES}"}

        loaded = await self._load()
        if not loaded["success"]:
            return loaded
        tasks = loaded["data"]

        if status:
            tasks = [t for t in tasks if t["status"] == status]

        if parent_task_id:
            tasks = [t for t in tasks if t["parent_task_id"] == parent_task_id]
        elif not include_subtasks:
            tasks = [t for t in tasks if t["parent_task_id"] is None]

        return {
            "success": True,
            "data": {
                "tasks": tasks,
                "total": len(tasks),
                "completed": sum(1 for t in tasks if t["status"] == "completed"),
            },
        }

    async def update_task(self, task_id: str, **fields: Any) -> Dict[str, Any]:
        """
        Update editable task fields (title, description, priority, xp_reward,
        parent_task_id). Status has its own operation.

        Returns:
            dict with updated task
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            return {"success": False, "error": f"Cannot update fields: {sorted(unknown)}"}

        if not fields:
            return {"success": False, "error": "No fields to update"}

        for name in REQUIRED_FIELDS:
            if name in fields and fields[name] is None:
                return {"success": False, "error": f"{name} cannot be cleared"}

        error = _validate_fields(
            title=fields.get("title"),
            description=fields.get("description"),
            priority=fields.get("priority"),
            xp_reward=fields.get("xp_reward"),
        )
        if error:
            return {"success": False, "error": error}

        loaded = await self._load()
        if not loaded["success"]:
            return loaded
        tasks = list(loaded["data"])

        index = _find_index(tasks, task_id)
        if index == -1:
            return {"success": False, "error": f"Task not found: {task_id}"}

        parent_id = fields.get("parent_task_id")
        if parent_id is not None:
            if parent_id == task_id:
                return {"success": False, "error": "A task cannot be its own parent"}
            if _find_index(tasks, parent_id) == -1:
                return {"success": False, "error": f"Task not found: {parent_id}"}

        if "title" in fields:
            fields["title"] = fields["title"].strip()

        tasks[index] = {**tasks[index], **fields}

        saved = await self._save(tasks)
        if not saved["success"]:
            return saved

        return {"success": True, "data": _stored_task(saved, task_id), "message": f"Task {task_id} updated"}

    async def update_task_status(
        self, task_id: str, status: str, completed_at: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Move a task to a new status.

        completed_at is stamped when the task becomes completed and cleared
        when it leaves completed; re-completing an already completed task
        keeps the original stamp.

        Args:
            task_id: Task to move
            status: One of TASK_STATUSES
            completed_at: ISO stamp to use instead of now when the task
                becomes completed

        Returns:
            dict with updated task and previous_status
        """
        if status not in TASK_STATUSES:
            return {"success": False, "error": f"Invalid status. Must be one of: {TASK_STATUSES}"}

        loaded = await self._load()
        if not loaded["success"]:
            return loaded
        tasks = list(loaded["data"])

        index = _find_index(tasks, task_id)
        if index == -1:
            return {"success": False, "error": f"Task not found: {task_id}"}

        previous = tasks[index]
        if status != "completed":
            completed_at = None
        elif previous["status"] == "completed" and previous["completed_at"]:
            completed_at = previous["completed_at"]
        else:
            completed_at = completed_at or _now_iso()

        tasks[index] = {**previous, "status": status, "completed_at": completed_at}

        saved = await self._save(tasks)
        if not saved["success"]:
            return saved

        return {
            "success": True,
            "data": _stored_task(saved, task_id),
            "previous_status": previous["status"],
            "previous_completed_at": previous["completed_at"],
            "message": f"Task {task_id} is now {status}",
        }

    async def delete_task(self, task_id: str) -> Dict[str, Any]:
        """
        Delete a task. Its subtasks are kept and become top-level tasks.

        Returns:
            dict with success status
        """
        loaded = await self._load()
        if not loaded["success"]:
            return loaded
        tasks = loaded["data"]

        if _find_index(tasks, task_id) == -1:
            return {"success": False, "error": f"Task not found: {task_id}"}

        remaining = [
            {**t, "parent_task_id": None} if t["parent_task_id"] == task_id else t
            for t in tasks
            if t["id"] != task_id
        ]

        saved = await self._save(remaining)
        if not saved["success"]:
            return saved

        return {"success": True, "message": f"Task {task_id} deleted"}


__all__ = ["TaskManager", "UPDATABLE_FIELDS"]
