"""Tests for focusforge/cli.py

Each test runs main() against its own SQLite file and reads the JSON
printed to stdout.
"""

import json

import pytest

from focusforge.cli import build_parser, command_name, main, parse_assignments


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch):
    """Keep decomposition on the rule-based path."""
    monkeypatch.delenv("GOOGLE_AI_API_KEY", raising=False)


@pytest.fixture
def run(temp_db, capsys):
    """Run the CLI and return (exit_code, parsed_output)."""

    def _run(*argv):
        code = main(["--db", str(temp_db), *argv])
        out = capsys.readouterr().out
        return code, json.loads(out)

    return _run


# ─────────────────────────────────────────────────────────────────────────────
# Parser Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestParser:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["--version"])
        assert exc.value.code == 0
        assert "focusforge" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_rejects_invalid_priority(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["task", "add", "x", "--priority", "critical"])

    def test_parse_assignments(self):
        assert parse_assignments(["dailyXpGoal=150", "theme=dark", "pomodoroAutoStartNextSession=true"]) == {
            "dailyXpGoal": 150,
            "theme": "dark",
            "pomodoroAutoStartNextSession": True,
        }

    def test_parse_assignments_rejects_missing_value(self):
        with pytest.raises(ValueError):
            parse_assignments(["theme"])

    @pytest.mark.parametrize("argv,expected", [
        (["task", "done", "abc"], "task done"),
        (["settings", "set", "theme=dark"], "settings set"),
        (["streak"], "streak"),
    ])
    def test_command_name(self, argv, expected):
        assert command_name(build_parser().parse_args(argv)) == expected


# ─────────────────────────────────────────────────────────────────────────────
# Task Command Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestTaskCommands:
    """Tests for the task subcommands."""

    def test_add_and_list(self, run):
        code, added = run("task", "add", "Write outline", "--priority", "high", "--xp", "20")
        assert code == 0
        assert added["data"]["task"]["priority"] == "high"

        code, listed = run("task", "list")
        assert listed["data"]["total"] == 1
        assert listed["data"]["tasks"][0]["title"] == "Write outline"

    def test_done_and_undo(self, run):
        _, added = run("task", "add", "Write outline")
        task_id = added["data"]["task_id"]

        code, done = run("task", "done", task_id)
        assert code == 0
        assert done["data"]["profile"]["xp"] == 10

        code, undone = run("task", "undo", task_id)
        assert code == 0
        assert undone["data"]["profile"]["xp"] == 0

    def test_status(self, run):
        _, added = run("task", "add", "Write outline")
        code, result = run("task", "status", added["data"]["task_id"], "in_progress")
        assert code == 0
        assert result["data"]["task"]["status"] == "in_progress"

    def test_show_and_rm(self, run):
        _, added = run("task", "add", "Write outline")
        task_id = added["data"]["task_id"]

        code, shown = run("task", "show", task_id)
        assert shown["data"]["id"] == task_id

        code, removed = run("task", "rm", task_id)
        assert code == 0

        code, missing = run("task", "show", task_id)
        assert code == 1
        assert missing["error"] == f"Task not found: {task_id}"

    def test_split_and_save(self, run):
        _, added = run("task", "add", "Study for exam")
        task_id = added["data"]["task_id"]

        code, result = run("task", "split", task_id, "--save")

        assert code == 0
        assert result["data"]["source"] == "rules"
        _, listed = run("task", "list", "--parent", task_id)
        assert listed["data"]["total"] == 3

    def test_invalid_input_exits_1(self, run):
        code, result = run("task", "add", "   ")
        assert code == 1
        assert result["success"] is False


# ─────────────────────────────────────────────────────────────────────────────
# Progress Command Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestProgressCommands:
    def test_profile(self, run):
        code, result = run("profile", "--name", "Sam")
        assert code == 0
        assert result["data"]["profile"]["display_name"] == "Sam"
        assert result["data"]["level"]["level"] == 1

    def test_streak(self, run):
        code, result = run("streak", "--days", "7")
        assert code == 0
        assert len(result["data"]["calendar"]) == 7
        assert result["data"]["activity_streak"] == 0

    def test_pomodoro(self, run):
        code, cycle = run("pomodoro")
        assert cycle["data"]["display"] == "25:00"

        code, credited = run("pomodoro", "--complete")
        assert code == 0
        assert credited["data"]["xp"] == 15

    def test_decompose(self, run):
        code, result = run("decompose", "Write report")
        assert code == 0
        assert len(result["data"]["suggestions"]) == 4


# ─────────────────────────────────────────────────────────────────────────────
# Settings and Data Command Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestSettingsCommands:
    def test_show_defaults(self, run):
        code, result = run("settings", "show")
        assert result["data"]["dailyXpGoal"] == 100

    def test_bare_settings_shows(self, run):
        code, result = run("settings")
        assert code == 0
        assert result["data"]["theme"] == "system"

    def test_set(self, run):
        code, result = run("settings", "set", "dailyXpGoal=150", "theme=dark")
        assert code == 0
        assert result["data"]["dailyXpGoal"] == 150
        assert result["data"]["theme"] == "dark"

    def test_set_unknown_key(self, run):
        code, result = run("settings", "set", "fontSize=12")
        assert code == 1


class TestDataCommands:
    def test_export_to_stdout(self, run):
        run("task", "add", "Write outline")
        code, document = run("export")
        assert code == 0
        assert document["tasks"][0]["title"] == "Write outline"

    def test_export_import_file(self, run, tmp_path):
        run("task", "add", "Write outline")
        code, exported = run("export", "--output", str(tmp_path / "backups"))
        assert code == 0

        run("reset", "--yes")
        code, imported = run("import", exported["data"]["path"])

        assert code == 0
        assert imported["data"]["tasks"] == 1

    def test_import_missing_file(self, run, tmp_path):
        code, result = run("import", str(tmp_path / "nope.json"))
        assert code == 1

    def test_reset_requires_yes(self, run):
        code, result = run("reset")
        assert code == 1
        assert "--yes" in result["error"]
