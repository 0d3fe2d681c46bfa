"""
Tests for the DeduplicationCommand orchestrator used by the CLI and library callers.
"""
import pytest

from dupfinder.commands import DeduplicationCommand
from dupfinder.core.errors import InputInvalid
from dupfinder.core.models import DeduplicationParams, DispositionPolicy
from dupfinder.services.file_service import FileService
from unittest import mock


class TestExecute:
    def test_scan_and_find(self, tmp_path, test_files):
        result = DeduplicationCommand().execute(DeduplicationParams(root_dir=str(tmp_path)))
        assert len(result.duplicate_set) == 2
        assert str(test_files["unique1"]) in result.unique_paths

    def test_filters_passed_to_scanner(self, tmp_path, test_files):
        params = DeduplicationParams(root_dir=str(tmp_path), exclude_patterns=["subdir"], include_hidden=True)
        result = DeduplicationCommand().execute(params)
        group = next(g for g in result.duplicate_set if g.size == 1024)
        assert str(test_files["hidden"]) in group.paths
        assert str(test_files["sub_dup"]) not in group.paths

    def test_missing_root(self, tmp_path):
        with pytest.raises(InputInvalid):
            DeduplicationCommand().execute(DeduplicationParams(root_dir=str(tmp_path / "nope")))

    def test_progress_callback_receives_stages(self, tmp_path, test_files):
        stages = set()
        DeduplicationCommand().execute(
            DeduplicationParams(root_dir=str(tmp_path), verify=True),
            progress_callback=lambda stage, current, total: stages.add(stage)
        )
        assert {"scanning", "Size grouping", "Content Digest", "Byte Verification"} <= stages


class TestDispose:
    def test_uses_trash_when_requested(self, tmp_path, scenario_a):
        params = DeduplicationParams(
            root_dir=str(tmp_path), policy=DispositionPolicy.AUTOMATIC, use_trash=True
        )
        result = DeduplicationCommand().execute(params)
        with mock.patch.object(FileService, "move_to_trash") as mock_trash:
            report = DeduplicationCommand.dispose(result, params)
        mock_trash.assert_called_once_with(str(scenario_a["b"]))
        assert report.deleted_paths == [str(scenario_a["b"])]

    def test_report_only_keeps_everything(self, tmp_path, scenario_a):
        params = DeduplicationParams(root_dir=str(tmp_path))
        result = DeduplicationCommand().execute(params)
        report = DeduplicationCommand.dispose(result, params)
        assert report.deleted_count == 0
        assert scenario_a["b"].exists()
