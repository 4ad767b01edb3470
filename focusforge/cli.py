#!/usr/bin/env python3
"""
FocusForge Command Line Interface

Main entry point for the `focusforge` command. Every command prints a
JSON result and exits 1 when it reports failure.

Usage:
    focusforge task add "Write outline" --priority high
    focusforge task list --status pending
    focusforge task done <task_id>
    focusforge task undo <task_id>
    focusforge task split <task_id> --save
    focusforge profile --name "Sam"
    focusforge streak
    focusforge settings set dailyXpGoal=150 theme=dark
    focusforge export --output backups/
    focusforge import backups/focusforge-backup-2024-03-01.json
    focusforge reset --yes
    focusforge decompose "Study for the biology exam"
    focusforge pomodoro --complete
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from focusforge import __version__
from focusforge.ai.decompose import create_decomposer, decompose_task
from focusforge.config import FocusForgeConfig, load_config
from focusforge.focus.pomodoro import PomodoroCycle
from focusforge.gamification.streaks import calendar_days
from focusforge.logging_config import command_context, setup_logging
from focusforge.security.ratelimit import FixedWindowRateLimiter
from focusforge.storage.backup import export_data, export_to_file, import_data, reset_all
from focusforge.storage.store import create_store
from focusforge.tasks import DEFAULT_PRIORITY, DEFAULT_XP_REWARD, TASK_PRIORITIES, TASK_STATUSES
from focusforge.tracker import ProgressTracker


# ─────────────────────────────────────────────────────────────────────────────
# Task commands
# ─────────────────────────────────────────────────────────────────────────────


async def cmd_task(args, tracker: ProgressTracker) -> Dict[str, Any]:
    """Handle task subcommands."""
    if args.task_command == "add":
        return await tracker.tasks.create_task(
            args.title,
            description=args.description,
            parent_task_id=args.parent,
            priority=args.priority,
            xp_reward=args.xp,
        )

    if args.task_command == "list":
        return await tracker.tasks.list_tasks(
            status=args.status,
            parent_task_id=args.parent,
            include_subtasks=not args.top_level,
        )

    if args.task_command == "show":
        return await tracker.tasks.get_task(args.task_id)

    if args.task_command == "done":
        return await tracker.set_task_completed(args.task_id, True)

    if args.task_command == "undo":
        return await tracker.set_task_completed(args.task_id, False)

    if args.task_command == "status":
        return await tracker.set_task_status(args.task_id, args.status)

    if args.task_command == "rm":
        return await tracker.delete_task(args.task_id)

    if args.task_command == "split":
        return await tracker.suggest_steps(args.task_id, create=args.save)

    return {"success": False, "error": f"Unknown task command: {args.task_command}"}


# ─────────────────────────────────────────────────────────────────────────────
# Progress commands
# ─────────────────────────────────────────────────────────────────────────────


async def cmd_profile(args, tracker: ProgressTracker) -> Dict[str, Any]:
    """Show the dashboard snapshot, optionally renaming the profile first."""
    if args.name is not None:
        renamed = await tracker.profile.update_display_name(args.name or None)
        if not renamed["success"]:
            return renamed

    snapshot = await tracker.dashboard()
    if not snapshot["success"]:
        return snapshot

    data = snapshot["data"]
    return {
        "success": True,
        "data": {
            "profile": data["profile"],
            "level": data["level"],
            "daily_goal": data["daily_goal"],
            "tasks": data["tasks"],
        },
    }


async def cmd_streak(args, tracker: ProgressTracker) -> Dict[str, Any]:
    snapshot = await tracker.dashboard()
    if not snapshot["success"]:
        return snapshot

    streaks = dict(snapshot["data"]["streaks"])
    if args.days is not None:
        counts = await tracker.ledger.get_counts()
        if not counts["success"]:
            return counts
        streaks["calendar"] = calendar_days(counts["data"], days=args.days)

    return {"success": True, "data": streaks}


async def cmd_pomodoro(args, tracker: ProgressTracker) -> Dict[str, Any]:
    """Show the configured cycle, or credit a finished work phase."""
    if args.complete:
        return await tracker.complete_pomodoro()

    settings = await tracker.settings.get_settings()
    if not settings["success"]:
        return settings

    cycle = PomodoroCycle.from_settings(settings["data"])
    return {"success": True, "data": cycle.to_dict()}


# ─────────────────────────────────────────────────────────────────────────────
# Settings commands
# ─────────────────────────────────────────────────────────────────────────────


def parse_assignments(pairs: List[str]) -> Dict[str, Any]:
    """
    Parse KEY=VALUE arguments. Values are read as YAML scalars, so
    `150` is an int, `true` a bool and `dark` a string.
    """
    patch: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        patch[key.strip()] = yaml.safe_load(value) if value.strip() else None
    return patch


async def cmd_settings(args, tracker: ProgressTracker) -> Dict[str, Any]:
    if args.settings_command == "set":
        try:
            patch = parse_assignments(args.assignments)
        except (ValueError, yaml.YAMLError) as e:
            return {"success": False, "error": str(e)}
        return await tracker.settings.update_settings(**patch)

    return await tracker.settings.get_settings()


# ─────────────────────────────────────────────────────────────────────────────
# Data commands
# ─────────────────────────────────────────────────────────────────────────────


async def cmd_export(args, tracker: ProgressTracker) -> Dict[str, Any]:
    if args.output:
        return await export_to_file(tracker.store, Path(args.output))
    return await export_data(tracker.store)


async def cmd_import(args, tracker: ProgressTracker) -> Dict[str, Any]:
    path = Path(args.file)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        return {"success": False, "error": f"Cannot read {path}: {e}"}
    return await import_data(tracker.store, raw)


async def cmd_reset(args, tracker: ProgressTracker) -> Dict[str, Any]:
    if not args.yes:
        return {"success": False, "error": "Refusing to reset without --yes"}
    return await reset_all(tracker.store)


async def cmd_decompose(args, tracker: ProgressTracker) -> Dict[str, Any]:
    return await decompose_task(args.title, args.description, decomposer=tracker.decomposer)


# ─────────────────────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────────────────────


def command_name(args) -> str:
    """Full command path, e.g. "task done" or "settings set"."""
    sub = getattr(args, "task_command", None) or getattr(args, "settings_command", None)
    return f"{args.command} {sub}" if sub else args.command


def build_tracker(config: FocusForgeConfig, db_path: Optional[str] = None) -> ProgressTracker:
    store = create_store(config.storage, db_path=Path(db_path) if db_path else None)
    return ProgressTracker(
        store,
        config,
        decomposer=create_decomposer(config.ai),
        limiter=FixedWindowRateLimiter.from_config(config.rate_limit),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="focusforge",
        description="FocusForge - ADHD-friendly tasks with XP, levels and streaks",
    )
    parser.add_argument("--version", "-V", action="version", version=f"focusforge {__version__}")
    parser.add_argument("--db", help="SQLite database path (overrides the config file)")
    parser.add_argument("--config", help="Path to a focusforge.yaml config file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # task
    task_parser = subparsers.add_parser("task", help="Create, list and complete tasks")
    task_subparsers = task_parser.add_subparsers(dest="task_command", help="Task commands")
    task_parser.set_defaults(func=cmd_task)

    task_add = task_subparsers.add_parser("add", help="Create a task")
    task_add.add_argument("title", help="What to do")
    task_add.add_argument("--description", "-d", help="Optional details")
    task_add.add_argument("--priority", "-p", choices=TASK_PRIORITIES, default=DEFAULT_PRIORITY)
    task_add.add_argument("--xp", type=int, default=DEFAULT_XP_REWARD, help="XP reward on completion")
    task_add.add_argument("--parent", help="Parent task ID (creates a subtask)")

    task_list = task_subparsers.add_parser("list", help="List tasks, newest first")
    task_list.add_argument("--status", choices=TASK_STATUSES)
    task_list.add_argument("--parent", help="Only subtasks of this task")
    task_list.add_argument("--top-level", action="store_true", help="Hide subtasks")

    task_show = task_subparsers.add_parser("show", help="Show a task and its subtasks")
    task_show.add_argument("task_id")

    task_done = task_subparsers.add_parser("done", help="Complete a task (+XP)")
    task_done.add_argument("task_id")

    task_undo = task_subparsers.add_parser("undo", help="Un-complete a task (-XP)")
    task_undo.add_argument("task_id")

    task_status = task_subparsers.add_parser("status", help="Set a task's status")
    task_status.add_argument("task_id")
    task_status.add_argument("status", choices=TASK_STATUSES)

    task_rm = task_subparsers.add_parser("rm", help="Delete a task")
    task_rm.add_argument("task_id")

    task_split = task_subparsers.add_parser("split", help="Suggest small steps for a task")
    task_split.add_argument("task_id")
    task_split.add_argument("--save", action="store_true", help="Save the steps as subtasks")

    # profile
    profile_parser = subparsers.add_parser("profile", help="Show XP, level and daily goal")
    profile_parser.add_argument("--name", help="Set the display name (empty string clears it)")
    profile_parser.set_defaults(func=cmd_profile)

    # streak
    streak_parser = subparsers.add_parser("streak", help="Show activity and completion streaks")
    streak_parser.add_argument("--days", type=int, help="Calendar length in days")
    streak_parser.set_defaults(func=cmd_streak)

    # settings
    settings_parser = subparsers.add_parser("settings", help="Show or change settings")
    settings_subparsers = settings_parser.add_subparsers(dest="settings_command", help="Settings commands")
    settings_parser.set_defaults(func=cmd_settings)
    settings_subparsers.add_parser("show", help="Show current settings")
    settings_set = settings_subparsers.add_parser("set", help="Change settings (KEY=VALUE ...)")
    settings_set.add_argument("assignments", nargs="+", metavar="KEY=VALUE")

    # export / import / reset
    export_parser = subparsers.add_parser("export", help="Export all data as JSON")
    export_parser.add_argument("--output", "-o", help="Directory for a dated backup file (stdout if omitted)")
    export_parser.set_defaults(func=cmd_export)

    import_parser = subparsers.add_parser("import", help="Replace all data from a backup file")
    import_parser.add_argument("file")
    import_parser.set_defaults(func=cmd_import)

    reset_parser = subparsers.add_parser("reset", help="Delete all local data")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm the reset")
    reset_parser.set_defaults(func=cmd_reset)

    # decompose
    decompose_parser = subparsers.add_parser("decompose", help="Break a task into small steps")
    decompose_parser.add_argument("title")
    decompose_parser.add_argument("--description", "-d")
    decompose_parser.set_defaults(func=cmd_decompose)

    # pomodoro
    pomodoro_parser = subparsers.add_parser("pomodoro", help="Show the Pomodoro cycle or credit a session")
    pomodoro_parser.add_argument("--complete", action="store_true", help="Credit a finished work phase (+15 XP)")
    pomodoro_parser.set_defaults(func=cmd_pomodoro)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    if args.command == "task" and not args.task_command:
        parser.parse_args(["task", "--help"])

    if args.command == "settings" and not args.settings_command:
        args.settings_command = "show"

    setup_logging()
    config = load_config(Path(args.config)) if args.config else load_config()
    tracker = build_tracker(config, args.db)

    with command_context(command_name(args), backend=tracker.store.backend):
        result = asyncio.run(args.func(args, tracker))

    # Export without --output prints the backup document itself
    if args.command == "export" and not args.output and result["success"]:
        print(result["data"])
    else:
        print(json.dumps(result, indent=2, default=str))

    return 0 if result["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
