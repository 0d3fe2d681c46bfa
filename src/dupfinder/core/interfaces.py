"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/interfaces.py

Defines core interfaces (Protocols) used throughout the duplicate detection engine.

Key Components:
---------------
- HashAlgorithm: Factory for incremental hash objects (hashlib, xxHash).
- Hasher: Computes and caches digests of FileRecords.
- FileScanner: Walks a directory and yields an already-filtered path stream.
- Verifier: Byte-exact comparison of two files.
- DeletionDecider: Interaction boundary of the interactive disposition policy.
- Deduplicator: The pipeline coordinating all stages.
"""

from typing import Protocol, List, Dict, Optional, Callable, Iterable, Tuple, Any
from dupfinder.core.models import (
    Diagnostic,
    Digest,
    FileRecord,
    DuplicateGroup,
    DeduplicationResult,
    DeduplicationParams,
)


# ===== Interfaces =====

class HashAlgorithm(Protocol):
    """
    Creates fresh incremental hash objects (anything with update() and digest()).
    """
    def new(self) -> Any:
        ...


class Hasher(Protocol):
    """Interface for hashing file content."""
    def compute_digest(self, file: FileRecord) -> Digest: ...
    def compute_front_hash(self, file: FileRecord, front_size: int) -> bytes: ...


class FileScanner(Protocol):
    def scan(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[str]:
        """
        Scan files from the configured directory.

        Returns:
            Paths that passed the hidden, symlink and exclude filters, in traversal order.
        """
        ...


class Verifier(Protocol):
    def files_identical(self, reference: str, other: str) -> bool:
        """
        True when both files hold the same bytes.
        Raises UnreadableFile naming the file that could not be read.
        """
        ...


class DeletionDecider(Protocol):
    def __call__(self, group: DuplicateGroup) -> Iterable[int]:
        """Returns 0-based indices of the group members to delete."""
        ...


class FileGrouper(Protocol):
    def group_by_front_hash(
        self, files: List[FileRecord], front_size: int
    ) -> Tuple[Dict[bytes, List[FileRecord]], List[FileRecord], List[Diagnostic]]: ...
    def group_by_digest(
        self, files: List[FileRecord]
    ) -> Tuple[Dict[Digest, List[FileRecord]], List[FileRecord], List[Diagnostic]]: ...


class Deduplicator(Protocol):
    """
    Interface for the main duplicate detection engine.
    """
    def find_duplicates(
        self,
        paths: Iterable[str],
        params: DeduplicationParams,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> DeduplicationResult:
        """
        Run the detection pipeline on an already-filtered path stream.

        Returns:
            DeduplicationResult with the duplicate set, per-file diagnostics,
            the paths found unique and run statistics.
        """
        ...
