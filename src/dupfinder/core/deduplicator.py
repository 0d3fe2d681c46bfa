"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/deduplicator.py
Implements the pipeline-based duplicate detection engine:
    size → [front hash] → content digest → [byte verification] → DuplicateSet

Bracketed stages are optional (quick_filter / verify parameters).
Every stage builds its own groups and hands them to the next one.
"""
import time
from typing import List, Optional, Callable, Iterable

from dupfinder.core.grouper import FileGrouperImpl, PathEntry
from dupfinder.core.hasher import HasherImpl
from dupfinder.core.interfaces import Deduplicator, Hasher
from dupfinder.core.models import (
    CandidateGroup, DeduplicationParams, DeduplicationResult, DeduplicationStats,
    DuplicateGroup, DuplicateSet, DigestAlgorithm, FileRecord, Stage
)
from dupfinder.core.stages import SizeStageImpl, FrontHashStage, DigestStage, VerifyStage, StageOutcome
from dupfinder.core.verifier import ContentVerifier


# =============================
# Main Deduplicator Class
# =============================
class DeduplicatorImpl(Deduplicator):
    """
    Multi-stage duplicate detection.
    The hasher and verifier can be injected (e.g. test doubles forcing collisions).
    """
    def __init__(self, hasher: Optional[Hasher] = None, verifier: Optional[ContentVerifier] = None):
        self.hasher = hasher
        self.verifier = verifier

    def find_duplicates(
        self,
        paths: Iterable[PathEntry],
        params: DeduplicationParams,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> DeduplicationResult:
        """
        Main detection pipeline.
        Args:
            paths: Already-filtered path stream (or (path, size) pairs)
            params: Run configuration (min size, algorithm, verify, workers, quick filter)
            stopped_flag: Function that returns True if operation should be stopped.
            progress_callback: Reports progress per stage.
        Returns:
            DeduplicationResult
        """
        stats = DeduplicationStats()
        total_start_time = time.time()
        hasher = self.hasher or HasherImpl(params.algorithm)
        grouper = FileGrouperImpl(hasher)

        unique: List[FileRecord] = []
        diagnostics = []

        def run(stage_name: str, outcome_factory: Callable[[], StageOutcome]) -> List[CandidateGroup]:
            start_time = time.time()
            outcome = outcome_factory()
            unique.extend(outcome.unique)
            diagnostics.extend(outcome.diagnostics)
            stats.update_stage(
                stage_name=stage_name,
                groups_found=len(outcome.groups),
                files_processed=sum(len(g.files) for g in outcome.groups),
                duration=time.time() - start_time
            )
            return outcome.groups

        groups = run(Stage.SIZE.value, lambda: SizeStageImpl(params.min_size_bytes).process(
            paths, stopped_flag=stopped_flag, progress_callback=progress_callback))

        for stage_name, stage in self._build_pipeline(params, grouper):
            current = groups
            groups = run(stage_name, lambda: stage.process(
                current, stopped_flag=stopped_flag, progress_callback=progress_callback))

        duplicate_set = self._assemble(groups, params.algorithm)
        stats.total_time = time.time() - total_start_time

        unique.sort(key=lambda f: f.ordinal)
        return DeduplicationResult(
            duplicate_set=duplicate_set,
            diagnostics=diagnostics,
            unique_paths=[f.path for f in unique],
            stats=stats
        )

    def _build_pipeline(self, params: DeduplicationParams, grouper: FileGrouperImpl):
        """Builds the stage list for the given parameters."""
        pipeline = []
        if params.quick_filter:
            pipeline.append((Stage.FRONT.value, FrontHashStage(grouper)))
        pipeline.append((Stage.DIGEST.value, DigestStage(grouper, workers=params.workers)))
        if params.verify:
            pipeline.append((Stage.VERIFY.value, VerifyStage(self.verifier)))
        return pipeline

    @staticmethod
    def _assemble(groups: List[CandidateGroup], algorithm: DigestAlgorithm) -> DuplicateSet:
        """Turns surviving candidate groups into a DuplicateSet in discovery order."""
        duplicate_groups = [
            DuplicateGroup(size=g.size, digest=g.digest, files=list(g.files))
            for g in groups
            if g.digest is not None and len(g.files) >= 2
        ]
        duplicate_groups.sort(key=lambda g: g.files[0].ordinal)
        return DuplicateSet(algorithm=algorithm, groups=duplicate_groups)
