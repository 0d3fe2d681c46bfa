"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/verifier.py
Byte-exact comparison of files that share a digest.
Turns the "same digest" guarantee into "same bytes".
"""

import logging
from typing import List, Optional, Tuple

from dupfinder.core.errors import UnreadableFile, DigestCollisionRejected
from dupfinder.core.interfaces import Verifier
from dupfinder.core.models import FileRecord, Diagnostic

logger = logging.getLogger(__name__)

COMPARE_CHUNK_SIZE = 256 * 1024


class ContentVerifier(Verifier):
    def __init__(self, chunk_size: int = COMPARE_CHUNK_SIZE):
        self.chunk_size = chunk_size

    def files_identical(self, reference: str, other: str) -> bool:
        try:
            ref_handle = open(reference, 'rb')
        except OSError as e:
            raise UnreadableFile(reference, e.strerror or str(e)) from e

        with ref_handle:
            try:
                other_handle = open(other, 'rb')
            except OSError as e:
                raise UnreadableFile(other, e.strerror or str(e)) from e

            with other_handle:
                while True:
                    ref_chunk = self._read(ref_handle, reference)
                    other_chunk = self._read(other_handle, other)
                    if ref_chunk != other_chunk:
                        return False
                    if not ref_chunk:
                        return True

    def _read(self, handle, path: str) -> bytes:
        try:
            return handle.read(self.chunk_size)
        except OSError as e:
            raise UnreadableFile(path, e.strerror or str(e)) from e

    def verify_group(
            self,
            files: List[FileRecord]
    ) -> Tuple[List[List[FileRecord]], List[FileRecord], List[Diagnostic]]:
        """
        Splits a digest group into byte-identical subgroups.

        Members are compared against the first one. Members that differ are
        compared among themselves in the next round, so two colliding files
        with equal content still end up together. A rejected member left
        without a partner is reported as a digest collision.

        Returns:
            (subgroups of 2+ members in original order, unique members, diagnostics)
        """
        groups: List[List[FileRecord]] = []
        unique: List[FileRecord] = []
        diagnostics: List[Diagnostic] = []
        reference: Optional[FileRecord] = None
        pending = list(files)

        while pending:
            confirmed, rejected, problems = self._split(pending)
            diagnostics.extend(problems)

            if len(confirmed) >= 2:
                groups.append(confirmed)
            elif confirmed and reference is None:
                unique.extend(confirmed)
            elif confirmed:
                collision = DigestCollisionRejected(
                    confirmed[0].path, f"content differs from {reference.path} despite equal digest"
                )
                logger.warning(str(collision))
                diagnostics.append(collision.to_diagnostic())

            if reference is None and confirmed:
                reference = confirmed[0]
            pending = rejected

        return groups, unique, diagnostics

    def _split(self, files: List[FileRecord]) -> Tuple[List[FileRecord], List[FileRecord], List[Diagnostic]]:
        """
        One comparison round against the first member.

        An unreadable member is dropped; if the unreadable one is the reference,
        the next member takes its place and the round starts over.
        Returns (matching the reference, differing, diagnostics).
        """
        diagnostics: List[Diagnostic] = []
        remaining = list(files)

        while remaining:
            reference, others = remaining[0], remaining[1:]
            confirmed = [reference]
            rejected: List[FileRecord] = []
            unreadable = set()
            reference_failed = False

            for file in others:
                try:
                    same = self.files_identical(reference.path, file.path)
                except UnreadableFile as e:
                    logger.warning(str(e))
                    diagnostics.append(e.to_diagnostic())
                    if e.path == reference.path:
                        reference_failed = True
                        break
                    unreadable.add(file.path)
                    continue
                (confirmed if same else rejected).append(file)

            if not reference_failed:
                return confirmed, rejected, diagnostics

            remaining = [f for f in others if f.path not in unreadable]

        return [], [], diagnostics
