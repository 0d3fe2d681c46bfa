"""
Shared fixtures for duplicate detection tests.
Creates isolated temporary directories with controlled test files.
"""
import pytest
from pathlib import Path
from typing import Dict
import sys

# Add src/ to sys.path so the 'dupfinder' package is importable without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from dupfinder.core.models import Digest, DigestAlgorithm, FileRecord  # noqa: E402


@pytest.fixture
def scenario_a(tmp_path) -> Dict[str, Path]:
    """a.txt and b.txt hold "hello", c.txt holds "world"."""
    files = {
        "a": tmp_path / "a.txt",
        "b": tmp_path / "b.txt",
        "c": tmp_path / "c.txt",
    }
    files["a"].write_bytes(b"hello")
    files["b"].write_bytes(b"hello")
    files["c"].write_bytes(b"world")
    return files


@pytest.fixture
def test_files(tmp_path) -> Dict[str, Path]:
    """
    Creates controlled test files for deduplication scenarios:
    - 3 copies of 1KB of 'A' (one in a subdirectory)
    - 2 copies of 2KB of 'B'
    - 2 unique files (different sizes)
    - 1 empty file
    - 1 hidden copy of the 1KB file (skipped unless hidden files are included)
    """
    files = {}

    content_a = b"A" * 1024
    files["dup1_a"] = tmp_path / "dup1_a.txt"
    files["dup1_b"] = tmp_path / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    content_b = b"B" * 2048
    files["dup2_a"] = tmp_path / "dup2_a.txt"
    files["dup2_b"] = tmp_path / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    files["unique1"] = tmp_path / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = tmp_path / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)

    files["empty"] = tmp_path / "empty.txt"
    files["empty"].write_bytes(b"")

    files["hidden"] = tmp_path / ".hidden.txt"
    files["hidden"].write_bytes(content_a)

    subdir = tmp_path / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)

    return files


class CollidingHasher:
    """
    Test double mapping every file to the same digest.
    Forces digest collisions between files of equal size.
    """
    def __init__(self, algorithm: DigestAlgorithm = DigestAlgorithm.SHA256):
        self.algorithm = algorithm
        self.calls = 0

    def compute_digest(self, file: FileRecord) -> Digest:
        self.calls += 1
        digest = Digest(self.algorithm, b"\x00" * self.algorithm.digest_size)
        file.set_digest(digest)
        return digest

    def compute_front_hash(self, file: FileRecord, front_size: int = 0) -> bytes:
        return b"front"


@pytest.fixture
def colliding_hasher() -> CollidingHasher:
    return CollidingHasher()
