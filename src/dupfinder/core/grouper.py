"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Size indexing and key-based grouping of FileRecords.
Per-file hashing errors are collected as diagnostics instead of aborting the grouping.
"""

import logging
import os
from collections import defaultdict
from typing import List, Dict, Tuple, Any, Callable, Iterable, Union

from dupfinder.core.errors import FileError, UnreadableFile
from dupfinder.core.hasher import HasherImpl, FRONT_CHUNK_SIZE
from dupfinder.core.interfaces import FileGrouper, Hasher
from dupfinder.core.models import FileRecord, Digest, Diagnostic

logger = logging.getLogger(__name__)

PathEntry = Union[str, os.PathLike, Tuple[str, int]]


class SizeIndexer:
    """
    First pipeline step: turns a path stream into size buckets.

    Entries are plain paths (stat'ed here) or (path, size) pairs from a caller
    that already knows the size. Paths that cannot be sized are excluded and
    reported as diagnostics.
    """

    def __init__(self, min_size: int = 0):
        if min_size < 0:
            raise ValueError("Minimum size cannot be negative")
        self.min_size = min_size

    def index(self, entries: Iterable[PathEntry]) -> Tuple[Dict[int, List[FileRecord]], List[Diagnostic]]:
        size_map: Dict[int, List[FileRecord]] = defaultdict(list)
        diagnostics: List[Diagnostic] = []

        for ordinal, entry in enumerate(entries):
            if isinstance(entry, tuple):
                path, size = str(entry[0]), entry[1]
            else:
                path = os.fspath(entry)
                try:
                    size = os.stat(path).st_size
                except OSError as e:
                    error = UnreadableFile(path, f"cannot stat: {e.strerror or e}")
                    logger.warning(str(error))
                    diagnostics.append(error.to_diagnostic())
                    continue

            if size < self.min_size:
                logger.debug(f"Skipping {path} (size {size} below minimum {self.min_size})")
                continue

            size_map[size].append(FileRecord(path=path, size=size, ordinal=ordinal))

        return dict(size_map), diagnostics

    @staticmethod
    def drop_singletons(size_map: Dict[int, List[FileRecord]]) -> Tuple[Dict[int, List[FileRecord]], List[FileRecord]]:
        """Splits off buckets with one member. Returns (kept buckets, unique records)."""
        kept = {}
        unique = []
        for size, records in size_map.items():
            if len(records) >= 2:
                kept[size] = records
            else:
                unique.extend(records)
        return kept, unique


class FileGrouperImpl(FileGrouper):
    """
    Groups FileRecords by front-chunk hash or full content digest.
    Uses an injected Hasher instance for flexibility and testability.

    Every grouping call returns (groups with 2+ members, records left alone,
    diagnostics for records that failed). Input order is kept inside each group.
    """

    def __init__(self, hasher: Hasher = None):
        self.hasher = hasher or HasherImpl()

    def group_by_front_hash(self, files: List[FileRecord], front_size: int = FRONT_CHUNK_SIZE):
        """Groups files by the hash of their first front_size bytes."""
        return self._group_by(files, lambda f: self.hasher.compute_front_hash(f, front_size))

    def group_by_digest(self, files: List[FileRecord]):
        """Groups files by full content digest."""
        return self._group_by(files, self.hasher.compute_digest)

    @staticmethod
    def _group_by(
            files: List[FileRecord],
            key_func: Callable[[FileRecord], Any]
    ) -> Tuple[Dict[Any, List[FileRecord]], List[FileRecord], List[Diagnostic]]:
        """
        Helper method to group files by any computed key.
        Args:
            files: List of files to group
            key_func: Function that computes a hashable key from a FileRecord
        Returns:
            (Dict[key, List[FileRecord]] of 2+ members, singletons, diagnostics)
        """
        groups = defaultdict(list)
        diagnostics = []
        for file in files:
            try:
                key = key_func(file)
            except FileError as e:
                logger.warning(str(e))
                diagnostics.append(e.to_diagnostic())
                continue
            groups[key].append(file)

        grouped, singles = FileGrouperImpl.split_groups(groups)
        return grouped, singles, diagnostics

    @staticmethod
    def split_groups(groups: Dict[Any, List[FileRecord]]) -> Tuple[Dict[Any, List[FileRecord]], List[FileRecord]]:
        """Separates real groups from single-member buckets."""
        result = {}
        singles = []
        for key, group in groups.items():
            if len(group) >= 2:  # Avoid groups with less than 2 files
                result[key] = group
            else:
                singles.extend(group)
        return result, singles

    @staticmethod
    def collect_digests(
            files: List[FileRecord],
            digests: List[Union[Digest, FileError]]
    ) -> Tuple[Dict[Digest, List[FileRecord]], List[FileRecord], List[Diagnostic]]:
        """
        Builds digest groups from digests computed elsewhere (e.g. in a worker pool).
        digests[i] belongs to files[i]; a FileError entry marks a failed file.
        """
        groups = defaultdict(list)
        diagnostics = []
        for file, digest in zip(files, digests):
            if isinstance(digest, FileError):
                logger.warning(str(digest))
                diagnostics.append(digest.to_diagnostic())
                continue
            groups[digest].append(file)
        grouped, singles = FileGrouperImpl.split_groups(groups)
        return grouped, singles, diagnostics
