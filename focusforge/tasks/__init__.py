"""Task Engine - task CRUD and status transitions

A task is the smallest unit that earns XP. Completing one feeds the
profile's XP bar and the day's completion count; un-completing it takes
both back.

Components:
    manager.py: Task CRUD operations over the stored task collection

Usage:
    from focusforge.tasks.manager import TaskManager

    manager = TaskManager(store)
    result = await manager.create_task("Reply to landlord")
    await manager.update_task_status(result["data"]["task_id"], "completed")
"""

# Valid statuses
TASK_STATUSES = ("pending", "in_progress", "completed", "skipped")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")

DEFAULT_STATUS = "pending"
DEFAULT_PRIORITY = "medium"

# Field limits
TITLE_MAX_LENGTH = 160
DESCRIPTION_MAX_LENGTH = 2000
XP_REWARD_MIN = 1
XP_REWARD_MAX = 1000
DEFAULT_XP_REWARD = 10

__all__ = [
    "DEFAULT_PRIORITY",
    "DEFAULT_STATUS",
    "DEFAULT_XP_REWARD",
    "DESCRIPTION_MAX_LENGTH",
    "TASK_PRIORITIES",
    "TASK_STATUSES",
    "TITLE_MAX_LENGTH",
    "XP_REWARD_MAX",
    "XP_REWARD_MIN",
]
