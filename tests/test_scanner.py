"""
Tests for directory traversal and its filters.
"""
import os

import pytest

from dupfinder.core.errors import InputInvalid
from dupfinder.core.scanner import FileScannerImpl


class TestFileScanner:
    def test_scans_recursively_in_sorted_order(self, tmp_path, test_files):
        paths = FileScannerImpl(str(tmp_path)).scan()
        expected_root = sorted(
            str(p) for key, p in test_files.items() if p.parent == tmp_path and key != "hidden"
        )
        assert paths == expected_root + [str(test_files["sub_dup"])]

    def test_hidden_files_and_dirs_skipped_by_default(self, tmp_path, test_files):
        hidden_dir = tmp_path / ".cache"
        hidden_dir.mkdir()
        (hidden_dir / "visible_name.txt").write_bytes(b"x")

        paths = FileScannerImpl(str(tmp_path)).scan()
        assert str(test_files["hidden"]) not in paths
        assert str(hidden_dir / "visible_name.txt") not in paths

        paths = FileScannerImpl(str(tmp_path), include_hidden=True).scan()
        assert str(test_files["hidden"]) in paths
        assert str(hidden_dir / "visible_name.txt") in paths

    def test_hidden_root_itself_is_scanned(self, tmp_path):
        root = tmp_path / ".root"
        root.mkdir()
        (root / "file.txt").write_bytes(b"x")
        assert FileScannerImpl(str(root)).scan() == [str(root / "file.txt")]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlinks_skipped_unless_followed(self, tmp_path):
        target = tmp_path / "target.txt"
        target.write_bytes(b"content")
        link = tmp_path / "link.txt"
        try:
            link.symlink_to(target)
        except OSError:
            pytest.skip("cannot create symlinks")

        assert str(link) not in FileScannerImpl(str(tmp_path)).scan()
        assert str(link) in FileScannerImpl(str(tmp_path), follow_links=True).scan()

    def test_exclude_patterns_match_full_path(self, tmp_path, test_files):
        paths = FileScannerImpl(str(tmp_path), exclude_patterns=[r"dup2_", r"subdir/"]).scan()
        assert str(test_files["dup2_a"]) not in paths
        assert str(test_files["sub_dup"]) not in paths
        assert str(test_files["dup1_a"]) in paths

    def test_invalid_exclude_pattern(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid exclude pattern"):
            FileScannerImpl(str(tmp_path), exclude_patterns=["("])

    def test_missing_root_is_input_invalid(self, tmp_path):
        with pytest.raises(InputInvalid):
            FileScannerImpl(str(tmp_path / "missing")).scan()

    def test_file_root_is_input_invalid(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_bytes(b"x")
        with pytest.raises(InputInvalid):
            FileScannerImpl(str(path)).scan()

    def test_stopped_scan_returns_nothing(self, tmp_path, test_files):
        assert FileScannerImpl(str(tmp_path)).scan(stopped_flag=lambda: True) == []

    def test_progress_reported_at_end(self, tmp_path, test_files):
        calls = []
        FileScannerImpl(str(tmp_path)).scan(progress_callback=lambda *args: calls.append(args))
        # Every regular file visited counts, including the hidden one
        assert calls[-1] == ("scanning", 9, None)


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
class TestFollowLinks:
    """A file reachable through several paths must be listed only once."""

    def make_alias(self, link, target):
        try:
            link.symlink_to(target, target_is_directory=target.is_dir())
        except OSError:
            pytest.skip("cannot create symlinks")

    def test_symlinked_directory_listed_once(self, tmp_path):
        real = tmp_path / "real"
        real.mkdir()
        (real / "a.txt").write_bytes(b"precious")
        self.make_alias(tmp_path / "alias", real)

        paths = FileScannerImpl(str(tmp_path), follow_links=True).scan()
        assert paths == [str(tmp_path / "alias" / "a.txt")]

    def test_symlinked_file_listed_once(self, tmp_path):
        target = tmp_path / "b_target.txt"
        target.write_bytes(b"content")
        self.make_alias(tmp_path / "a_link.txt", target)

        paths = FileScannerImpl(str(tmp_path), follow_links=True).scan()
        assert paths == [str(tmp_path / "a_link.txt")]

    def test_link_back_to_root_does_not_loop(self, tmp_path):
        (tmp_path / "file.txt").write_bytes(b"x")
        self.make_alias(tmp_path / "loop", tmp_path)

        paths = FileScannerImpl(str(tmp_path), follow_links=True).scan()
        assert paths == [str(tmp_path / "file.txt")]
