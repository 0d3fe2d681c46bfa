"""
Tests for the digest primitive and HasherImpl.
"""
import hashlib

import pytest
import xxhash

from dupfinder.core.errors import TruncatedRead, UnreadableFile
from dupfinder.core.hasher import HasherImpl, calculate_digest, FRONT_CHUNK_SIZE
from dupfinder.core.models import DigestAlgorithm, FileRecord


class TestCalculateDigest:
    @pytest.mark.parametrize("algorithm", list(DigestAlgorithm))
    def test_matches_hashlib(self, tmp_path, algorithm):
        path = tmp_path / "data.bin"
        content = b"duplicate finder " * 1000
        path.write_bytes(content)
        expected = hashlib.new(algorithm.value, content).digest()
        assert calculate_digest(str(path), algorithm) == expected
        assert len(expected) == algorithm.digest_size

    def test_small_chunks_give_same_result(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(bytes(range(256)) * 50)
        assert calculate_digest(str(path), chunk_size=7) == calculate_digest(str(path))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty"
        path.write_bytes(b"")
        assert calculate_digest(str(path), expected_size=0) == hashlib.sha256(b"").digest()

    def test_missing_file_is_unreadable(self, tmp_path):
        with pytest.raises(UnreadableFile):
            calculate_digest(str(tmp_path / "missing"))

    def test_shrunk_file_is_truncated_read(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"12345")
        with pytest.raises(TruncatedRead) as exc_info:
            calculate_digest(str(path), expected_size=10)
        assert exc_info.value.expected == 10
        assert exc_info.value.actual == 5

    def test_grown_file_is_truncated_read(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"1234567890")
        with pytest.raises(TruncatedRead):
            calculate_digest(str(path), expected_size=5)


class TestHasherImpl:
    def test_digest_is_cached_on_record(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_bytes(b"hello")
        record = FileRecord(path=str(path), size=5)
        hasher = HasherImpl(DigestAlgorithm.MD5)

        digest = hasher.compute_digest(record)
        assert record.digest == digest
        assert digest.algorithm is DigestAlgorithm.MD5

        # Changing the file afterwards does not change the cached digest
        path.write_bytes(b"HELLO")
        assert hasher.compute_digest(record) == digest

    def test_front_hash_reads_only_front_chunk(self, tmp_path):
        head = b"x" * FRONT_CHUNK_SIZE
        first = tmp_path / "first.bin"
        second = tmp_path / "second.bin"
        first.write_bytes(head + b"tail-one")
        second.write_bytes(head + b"tail-two")
        hasher = HasherImpl()

        h1 = hasher.compute_front_hash(FileRecord(str(first), first.stat().st_size))
        h2 = hasher.compute_front_hash(FileRecord(str(second), second.stat().st_size))
        assert h1 == h2 == xxhash.xxh64(head).digest()

    def test_front_hash_of_small_file_covers_whole_file(self, tmp_path):
        path = tmp_path / "small.bin"
        path.write_bytes(b"abc")
        front = HasherImpl().compute_front_hash(FileRecord(str(path), 3))
        assert front == xxhash.xxh64(b"abc").digest()
