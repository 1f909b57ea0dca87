import json

import pytest
from click.testing import CliRunner

from supercharged.main import main


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "tasks.json"


def run(data_file, *args, **kwargs):
    runner = CliRunner()
    return runner.invoke(main, ["--data-file", str(data_file), *args], catch_exceptions=False, **kwargs)


class TestCommands:
    def test_add_list_and_stats(self, data_file):
        res = run(data_file, "add", "write", "report", "-i", "5", "-u", "4", "-h", "2")
        assert res.exit_code == 0
        assert 'Task "write report" added.' in res.output
        saved = json.loads(data_file.read_text())
        assert saved[0]["importance"] == 5

        res = run(data_file, "list")
        assert "write report" in res.output

        res = run(data_file, "stats")
        assert "Total pending value: 20" in res.output

    def test_add_rejects_bad_values(self, data_file):
        res = run(data_file, "add", "x", "-h", "0")
        assert res.exit_code != 0
        assert "greater than 0" in res.output
        res = run(data_file, "add", "x", "-i", "7")
        assert res.exit_code == 2

    def test_toggle_and_clear(self, data_file):
        run(data_file, "add", "quick", "win", "-i", "5", "-u", "5")
        res = run(data_file, "toggle", "1")
        assert "completed: +30 points" in res.output
        assert json.loads(data_file.read_text())[0]["isCompleted"] is True
        res = run(data_file, "clear")
        assert "1 completed task cleared." in res.output
        assert json.loads(data_file.read_text()) == []

    def test_toggle_unknown_number(self, data_file):
        res = CliRunner().invoke(main, ["--data-file", str(data_file), "toggle", "3"])
        assert res.exit_code == 2
        assert "no task #3" in res.output

    def test_export_import_roundtrip(self, data_file, tmp_path):
        run(data_file, "add", "alpha", "-i", "2")
        run(data_file, "add", "beta", "-u", "5")
        csv_path = tmp_path / "export.csv"
        assert "exported successfully" in run(data_file, "export", str(csv_path)).output

        other = tmp_path / "other.json"
        res = run(other, "import", str(csv_path), "--yes")
        assert "2 tasks imported successfully!" in res.output
        assert sorted(t["text"] for t in json.loads(other.read_text())) == ["alpha", "beta"]

    def test_export_empty(self, data_file, tmp_path):
        res = CliRunner().invoke(main, ["--data-file", str(data_file), "export", str(tmp_path / "x.csv")])
        assert res.exit_code == 1
        assert "No tasks to export." in res.output

    def test_corrupt_snapshot_notice(self, data_file):
        data_file.write_text("{oops")
        res = CliRunner().invoke(main, ["--data-file", str(data_file), "stats"])
        assert res.exit_code == 0
        assert "Pending tasks: 0" in res.output
        assert not data_file.exists()


class TestInteractiveCommands:
    @pytest.fixture
    def repl(self, data_file):
        from supercharged.board import Board
        from supercharged.cli import CLI
        from supercharged.config import Settings
        from supercharged.storage import Storage
        return CLI(Board(), Storage(data_file), Settings(data_file=data_file, alt_screen=False))

    def test_shorthand_add_done_undo(self, repl):
        repl.handle_command("add water plants")
        assert repl.messages[-1] == 'Task "water plants" added.'
        repl.handle_command("done 1")
        assert repl.board.all_tasks()[0].is_completed
        repl.handle_command("undo 1")
        assert not repl.board.all_tasks()[0].is_completed

    def test_bad_input_messages(self, repl):
        repl.handle_command("rm 5")
        assert repl.messages[-1] == "No task #5 on the board."
        repl.handle_command("done x")
        assert repl.messages[-1] == "Invalid number."
        repl.handle_command("frobnicate")
        assert "Unknown command" in repl.messages[-1]
        repl.handle_command("export")
        assert repl.messages[-1] == "No tasks to export."

    def test_hide_changes_numbering(self, repl):
        repl.handle_command("add a")
        repl.handle_command("done 1")
        repl.handle_command("hide")
        repl.handle_command("rm 1")
        assert repl.messages[-1] == "No task #1 on the board."
        repl.handle_command("show")
        repl.handle_command("rm 1")
        assert repl.board.all_tasks() == []

    def test_import_replaces(self, repl, tmp_path):
        csv_path = tmp_path / "in.csv"
        csv_path.write_text("text,importance\nfirst,5\nbroken\nsecond,2\n")
        repl.handle_command("add will be replaced")
        repl.handle_command(f"import {csv_path}")
        assert sorted(t.text for t in repl.board.all_tasks()) == ["first", "second"]
        assert any("Skipping row 3" in m for m in repl.messages)
        repl.save()
        assert len(json.loads(repl.storage.path.read_text())) == 2
