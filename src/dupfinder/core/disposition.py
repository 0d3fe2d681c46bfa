"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/disposition.py
Decides which members of each duplicate group are deleted, and deletes them.

The first member of a group is the retained copy. What happens to the others
depends on the DispositionPolicy:
    - REPORT_ONLY : nothing is touched, candidates are only listed
    - INTERACTIVE : the injected decider picks the indices to delete
    - AUTOMATIC   : every candidate is deleted

Deletion is fault-isolated per file: a failure is recorded and the engine moves
on to the next file and group.
"""

import logging
import os
from typing import Callable, Iterable, List, Optional

from dupfinder.core.errors import FileError, ContentChanged, SameFileSkipped
from dupfinder.core.hasher import calculate_digest
from dupfinder.core.interfaces import DeletionDecider
from dupfinder.core.models import (
    DispositionPolicy, DispositionReport, DuplicateGroup, DuplicateSet, FileRecord, GroupDisposition
)

logger = logging.getLogger(__name__)


def skip_all(group: DuplicateGroup) -> List[int]:
    """Decider that never deletes anything."""
    return []


class DispositionEngine:
    """
    Args:
        remover: Callable deleting one path; raises DeletionFailed on failure
        decider: Interaction boundary for the interactive policy
        recheck: Re-digest each candidate right before deleting it
    """

    def __init__(
            self,
            remover: Optional[Callable[[str], None]] = None,
            decider: Optional[DeletionDecider] = None,
            recheck: bool = False
    ):
        if remover is None:
            from dupfinder.services.file_service import FileService
            remover = FileService.delete_file
        self.remover = remover
        self.decider = decider or skip_all
        self.recheck = recheck

    def dispose(self, duplicate_set: DuplicateSet, policy: DispositionPolicy) -> DispositionReport:
        report = DispositionReport(policy=policy)

        for group in duplicate_set:
            outcome = GroupDisposition(
                group=group,
                retained=[group.retained.path],
                candidates=[f.path for f in group.candidates]
            )
            report.groups.append(outcome)

            if policy is DispositionPolicy.REPORT_ONLY:
                continue

            selected = self._select(group, policy)
            kept = [f for f in group.files if f not in selected]
            for file in selected:
                self._delete(group, file, kept, outcome, report)

            # Anything not deleted is still on disk
            outcome.retained = [f.path for f in group.files if f.path not in outcome.deleted]

        if report.deleted_count:
            logger.info(f"Deleted {report.deleted_count} files, freed {report.freed_space} bytes")
        return report

    def _select(self, group: DuplicateGroup, policy: DispositionPolicy) -> List[FileRecord]:
        if policy is DispositionPolicy.AUTOMATIC:
            return group.candidates

        selected = self._normalize_selection(group, self.decider(group))
        if len(selected) == len(group.files):
            logger.warning(f"Every copy of a {group.size}-byte group was selected for deletion")
        return [group.files[i] for i in selected]

    @staticmethod
    def _normalize_selection(group: DuplicateGroup, indices: Optional[Iterable[int]]) -> List[int]:
        """Valid, unique indices in ascending order. Out-of-range ones are ignored."""
        selected = set()
        for index in indices or []:
            if 0 <= index < len(group.files):
                selected.add(index)
            else:
                logger.warning(f"Ignoring invalid selection {index + 1} for group of {len(group.files)} files")
        return sorted(selected)

    def _delete(
            self,
            group: DuplicateGroup,
            file: FileRecord,
            kept: List[FileRecord],
            outcome: GroupDisposition,
            report: DispositionReport
    ) -> None:
        try:
            self._check_not_kept(file, kept)
            if self.recheck:
                self._check_unchanged(group, file)
            self.remover(file.path)
        except SameFileSkipped as e:
            logger.warning(f"Not deleting {file.path}: {e.message}")
            report.diagnostics.append(e.to_diagnostic())
            return
        except FileError as e:
            logger.warning(f"Failed to delete {file.path}: {e.message}")
            outcome.failed.append(file.path)
            report.diagnostics.append(e.to_diagnostic())
            return

        logger.info(f"Deleted: {file.path}")
        outcome.deleted.append(file.path)
        report.freed_space += file.size

    @staticmethod
    def _check_not_kept(file: FileRecord, kept: List[FileRecord]) -> None:
        """Raises SameFileSkipped when the path leads to a file that stays on disk."""
        for other in kept:
            try:
                same = os.path.samefile(file.path, other.path)
            except OSError:
                continue
            if same:
                raise SameFileSkipped(file.path, f"same file as retained {other.path}")

    @staticmethod
    def _check_unchanged(group: DuplicateGroup, file: FileRecord) -> None:
        """Raises ContentChanged when the file no longer matches the group digest."""
        try:
            value = calculate_digest(file.path, group.digest.algorithm, expected_size=group.size)
        except FileError as e:
            raise ContentChanged(file.path, f"cannot re-check before deletion ({e.message})") from e
        if value != group.digest.value:
            raise ContentChanged(file.path, "content changed since the scan")
