"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/stages.py
Pipeline stages of the duplicate detection engine.

STAGES
------
SizeStageImpl     : path stream -> size buckets (single-member buckets dropped)
FrontHashStage    : optional split of large buckets by an xxHash64 of the first chunk
DigestStage       : split every bucket by full content digest, optionally in a worker pool
VerifyStage       : optional byte-exact check of each digest group against its first member

STAGE CONTRACTS
---------------
Each stage's `process()`:
  • Accepts candidate groups from the previous stage and returns new ones
  • Reports files that turned out to be unique and per-file diagnostics
  • Reports progress via callback (stage name, processed count, total count)
  • Respects cancellation via stopped_flag callback (returns an empty outcome)
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Callable, Iterable, Union

from dupfinder.core.errors import FileError
from dupfinder.core.grouper import FileGrouperImpl, SizeIndexer, PathEntry
from dupfinder.core.hasher import FRONT_CHUNK_SIZE
from dupfinder.core.models import CandidateGroup, Diagnostic, Digest, FileRecord, Stage
from dupfinder.core.verifier import ContentVerifier

logger = logging.getLogger(__name__)


@dataclass
class StageOutcome:
    groups: List[CandidateGroup] = field(default_factory=list)
    unique: List[FileRecord] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


# =============================
# Individual Stages
# =============================
class SizeStageImpl:
    def __init__(self, min_size: int = 0):
        self.indexer = SizeIndexer(min_size)

    def process(
            self,
            paths: Iterable[PathEntry],
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> StageOutcome:
        """
        Group by file size.
        Returns buckets with 2+ files of the same size.
        """
        if stopped_flag and stopped_flag():
            return StageOutcome()

        size_map, diagnostics = self.indexer.index(paths)
        kept, unique = SizeIndexer.drop_singletons(size_map)

        groups = [CandidateGroup(size=size, files=files) for size, files in kept.items()]

        if progress_callback:
            total_files = sum(len(files) for files in size_map.values())
            progress_callback(Stage.SIZE.value, total_files, total_files)

        return StageOutcome(groups=groups, unique=unique, diagnostics=diagnostics)


class FrontHashStage:
    """
    Splits buckets of files larger than the front chunk by a hash of that chunk.
    Files with different first chunks cannot be identical.
    """
    def __init__(self, grouper: FileGrouperImpl, front_size: int = FRONT_CHUNK_SIZE):
        self.grouper = grouper
        self.front_size = front_size

    def process(
            self,
            groups: List[CandidateGroup],
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> StageOutcome:
        if stopped_flag and stopped_flag():
            return StageOutcome()

        outcome = StageOutcome()
        total_files = sum(len(g.files) for g in groups)
        processed_files = 0

        for group in groups:
            if stopped_flag and stopped_flag():
                return StageOutcome()

            if group.size <= self.front_size:
                # The front chunk is the whole file; the digest stage covers it
                outcome.groups.append(group)
            else:
                hash_groups, singles, diagnostics = self.grouper.group_by_front_hash(group.files, self.front_size)
                outcome.groups.extend(
                    CandidateGroup(size=group.size, files=files) for files in hash_groups.values()
                )
                outcome.unique.extend(singles)
                outcome.diagnostics.extend(diagnostics)

            processed_files += len(group.files)
            if progress_callback:
                progress_callback(Stage.FRONT.value, processed_files, total_files)

        return outcome


class DigestStage:
    """
    Partitions each size bucket by full content digest.

    With workers > 1 the files of a bucket are digested in a thread pool.
    Results are collected in submission order, so the groups are the same as in
    a sequential run, and no more than `workers` files are open at once.
    """
    def __init__(self, grouper: FileGrouperImpl, workers: int = 1):
        if workers < 1:
            raise ValueError("Number of workers must be at least 1")
        self.grouper = grouper
        self.workers = workers

    def process(
            self,
            groups: List[CandidateGroup],
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> StageOutcome:
        if stopped_flag and stopped_flag():
            return StageOutcome()

        if self.workers == 1:
            return self._process_groups(groups, None, stopped_flag, progress_callback)

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            return self._process_groups(groups, executor, stopped_flag, progress_callback)

    def _process_groups(
            self,
            groups: List[CandidateGroup],
            executor: Optional[ThreadPoolExecutor],
            stopped_flag: Optional[Callable[[], bool]],
            progress_callback: Optional[Callable[[str, int, object], None]]
    ) -> StageOutcome:
        outcome = StageOutcome()
        total_files = sum(len(g.files) for g in groups)
        processed_files = 0

        for group in groups:
            if stopped_flag and stopped_flag():
                return StageOutcome()

            if executor is None:
                digest_groups, singles, diagnostics = self.grouper.group_by_digest(group.files)
            else:
                digests = list(executor.map(self._safe_digest, group.files))
                digest_groups, singles, diagnostics = FileGrouperImpl.collect_digests(group.files, digests)

            outcome.groups.extend(
                CandidateGroup(size=group.size, files=files, digest=digest)
                for digest, files in digest_groups.items()
            )
            outcome.unique.extend(singles)
            outcome.diagnostics.extend(diagnostics)

            processed_files += len(group.files)
            if progress_callback:
                progress_callback(Stage.DIGEST.value, processed_files, total_files)

        return outcome

    def _safe_digest(self, file: FileRecord) -> Union[Digest, FileError]:
        try:
            return self.grouper.hasher.compute_digest(file)
        except FileError as e:
            return e


class VerifyStage:
    """
    Byte-exact verification of digest groups.
    Groups that fall below two members are dropped.
    """
    def __init__(self, verifier: Optional[ContentVerifier] = None):
        self.verifier = verifier or ContentVerifier()

    def process(
            self,
            groups: List[CandidateGroup],
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> StageOutcome:
        if stopped_flag and stopped_flag():
            return StageOutcome()

        outcome = StageOutcome()
        total_files = sum(len(g.files) for g in groups)
        processed_files = 0

        for group in groups:
            if stopped_flag and stopped_flag():
                return StageOutcome()

            confirmed_groups, unique, diagnostics = self.verifier.verify_group(group.files)
            outcome.groups.extend(
                CandidateGroup(size=group.size, files=files, digest=group.digest) for files in confirmed_groups
            )
            outcome.unique.extend(unique)
            outcome.diagnostics.extend(diagnostics)
            if not confirmed_groups:
                logger.debug(f"Dropping group of size {group.size}: fewer than 2 verified members")

            processed_files += len(group.files)
            if progress_callback:
                progress_callback(Stage.VERIFY.value, processed_files, total_files)

        return outcome
