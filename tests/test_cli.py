"""
Critical CLI tests: exit codes, deletion modes and report output.
These tests guard against deleting the wrong file or deleting without being asked.
"""
import io
import json
import sys
from unittest import mock

import pytest

from dupfinder.cli import CLIApplication, main
from dupfinder.core.models import ExitCode
from dupfinder.services.file_service import FileService


class TestExitCodes:
    def test_duplicates_found(self, tmp_path, scenario_a):
        assert CLIApplication().run([str(tmp_path)]) == ExitCode.DUPLICATES_FOUND

    def test_no_duplicates(self, tmp_path):
        (tmp_path / "one.txt").write_bytes(b"one")
        (tmp_path / "two.txt").write_bytes(b"two")
        assert CLIApplication().run([str(tmp_path)]) == ExitCode.NO_DUPLICATES

    def test_missing_directory(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            CLIApplication().run([str(tmp_path / "missing")])
        assert exc_info.value.code == ExitCode.INPUT_INVALID
        assert "Directory does not exist" in capsys.readouterr().err

    def test_file_instead_of_directory(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_bytes(b"x")
        with pytest.raises(SystemExit) as exc_info:
            CLIApplication().run([str(path)])
        assert exc_info.value.code == ExitCode.INPUT_INVALID

    def test_conflicting_modes_rejected_before_deleting(self, tmp_path, scenario_a):
        with mock.patch.object(FileService, "delete_file") as mock_delete:
            with pytest.raises(SystemExit) as exc_info:
                CLIApplication().run([str(tmp_path), "-i", "-d"])
        assert exc_info.value.code == ExitCode.CONFLICTING_POLICY
        mock_delete.assert_not_called()

    def test_invalid_min_size(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            CLIApplication().run([str(tmp_path), "--min-size", "lots"])
        assert exc_info.value.code == 1
        assert "Invalid size format" in capsys.readouterr().err

    def test_min_size_threshold(self, tmp_path, scenario_a):
        assert CLIApplication().run([str(tmp_path), "-s", "10"]) == ExitCode.NO_DUPLICATES

    def test_main_exits_with_run_code(self, tmp_path, scenario_a):
        with mock.patch.object(sys, "argv", ["dupfinder", str(tmp_path), "-q"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1

    def test_main_handles_ctrl_c(self, tmp_path):
        with mock.patch.object(CLIApplication, "run", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == ExitCode.INTERRUPTED


class TestOutput:
    def test_text_report(self, tmp_path, scenario_a, capsys):
        CLIApplication().run([str(tmp_path)])
        out = capsys.readouterr().out
        assert "Duplicate Files Report" in out
        assert str(scenario_a["b"]) in out

    def test_quiet_suppresses_text_report(self, tmp_path, scenario_a, capsys):
        CLIApplication().run([str(tmp_path), "--quiet"])
        assert capsys.readouterr().out == ""

    def test_json_to_stdout(self, tmp_path, scenario_a, capsys):
        CLIApplication().run([str(tmp_path), "-f", "json", "-a", "sha1", "-q"])
        data = json.loads(capsys.readouterr().out)
        assert data["algorithm"] == "sha1"
        assert data["total_groups"] == 1

    def test_exports(self, tmp_path, scenario_a):
        out_dir = tmp_path.parent / f"{tmp_path.name}_out"
        out_dir.mkdir()
        csv_file = out_dir / "report.csv"
        json_file = out_dir / "report.json"
        CLIApplication().run([str(tmp_path), "-q", "-o", str(csv_file), "-j", str(json_file)])
        assert csv_file.read_text(encoding="utf-8").splitlines()[0] == "group,path,size,digest"
        assert json.loads(json_file.read_text(encoding="utf-8"))["total_files"] == 2

    def test_log_file(self, tmp_path, scenario_a):
        log_file = tmp_path.parent / f"{tmp_path.name}.log"
        CLIApplication().run([str(tmp_path), "-q", "-d", "-l", str(log_file)])
        content = log_file.read_text(encoding="utf-8")
        assert "[INFO] - Starting duplicate file search" in content
        assert f"Deleted: {scenario_a['b']}" in content


class TestDeletionModes:
    def test_report_only_never_deletes(self, tmp_path, scenario_a):
        with mock.patch.object(FileService, "delete_file") as mock_delete:
            CLIApplication().run([str(tmp_path), "-q"])
        mock_delete.assert_not_called()

    def test_auto_delete_keeps_first_copy(self, tmp_path, scenario_a):
        CLIApplication().run([str(tmp_path), "-q", "--auto-delete"])
        assert scenario_a["a"].exists()
        assert not scenario_a["b"].exists()
        assert scenario_a["c"].exists()

    def test_auto_delete_to_trash(self, tmp_path, scenario_a):
        with mock.patch.object(FileService, "move_to_trash") as mock_trash:
            CLIApplication().run([str(tmp_path), "-q", "-d", "--trash"])
        assert [call.args[0] for call in mock_trash.call_args_list] == [str(scenario_a["b"])]

    def test_interactive_selection_is_one_based(self, tmp_path, scenario_a):
        answers = []
        app = CLIApplication(input_func=lambda prompt: answers.append(prompt) or "1")
        app.run([str(tmp_path), "-q", "-i"])
        assert "space-separated numbers" in answers[0]
        assert not scenario_a["a"].exists()
        assert scenario_a["b"].exists()

    def test_interactive_skip(self, tmp_path, scenario_a):
        CLIApplication(input_func=lambda prompt: "s").run([str(tmp_path), "-q", "-i"])
        assert scenario_a["a"].exists() and scenario_a["b"].exists()

    def test_interactive_garbage_ignored(self, tmp_path, scenario_a):
        CLIApplication(input_func=lambda prompt: "x 9 2").run([str(tmp_path), "-q", "-i"])
        assert scenario_a["a"].exists()
        assert not scenario_a["b"].exists()

    def test_interactive_end_of_input_skips(self, tmp_path, scenario_a):
        def closed(prompt):
            raise EOFError

        CLIApplication(input_func=closed).run([str(tmp_path), "-q", "-i"])
        assert scenario_a["b"].exists()

    def test_follow_links_never_deletes_only_copy(self, tmp_path):
        """A directory reached through a symlink must not turn its own files into duplicates."""
        real = tmp_path / "real"
        real.mkdir()
        (real / "a.txt").write_bytes(b"precious")
        try:
            (tmp_path / "alias").symlink_to(real, target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("cannot create symlinks")

        code = CLIApplication().run([str(tmp_path), "-L", "-d", "-q"])
        assert code == ExitCode.NO_DUPLICATES
        assert (real / "a.txt").read_bytes() == b"precious"


class TestInteractiveOutput:
    def test_json_report_stays_valid_with_interactive_prompt(self, tmp_path, scenario_a, capsys):
        CLIApplication(input_func=lambda prompt: "s").run([str(tmp_path), "-f", "json", "-i"])
        captured = capsys.readouterr()
        assert json.loads(captured.out)["total_groups"] == 1
        assert f"[2] {scenario_a['b']}" in captured.err

    def test_default_prompt_reads_stdin_and_writes_stderr(self, tmp_path, scenario_a, capsys, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO("2\n"))
        CLIApplication().run([str(tmp_path), "-f", "json", "-i"])
        captured = capsys.readouterr()
        data = json.loads(captured.out)
        assert data["total_groups"] == 1
        assert "Select files to delete" in captured.err
        assert "Deleted 1 files." in captured.err
        assert not scenario_a["b"].exists()
