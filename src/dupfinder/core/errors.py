"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Exception hierarchy of the duplicate detection engine.

Only InputInvalid and ConflictingPolicy stop a run. Every per-file error is
caught by the stage that raised it and turned into a Diagnostic, so a single
bad file never aborts the scan.
"""

from dupfinder.core.models import Diagnostic, DiagnosticKind


class DuplicateFinderError(Exception):
    """Base class for all engine errors."""


# =============================
# Fatal errors
# =============================

class InputInvalid(DuplicateFinderError):
    """Target path is missing or is not a directory."""


class ConflictingPolicy(DuplicateFinderError):
    """Interactive and automatic deletion were requested together."""


# =============================
# Per-file errors (recovered locally)
# =============================

class FileError(DuplicateFinderError):
    """An error bound to a single file. Converts to a Diagnostic."""
    kind = DiagnosticKind.UNREADABLE_FILE

    def __init__(self, path: str, message: str):
        super().__init__(f"{message}: {path}")
        self.path = path
        self.message = message

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(path=self.path, kind=self.kind, message=self.message)


class UnreadableFile(FileError):
    """File cannot be opened or read (permission, vanished, broken symlink)."""
    kind = DiagnosticKind.UNREADABLE_FILE


class TruncatedRead(UnreadableFile):
    """Bytes read differ from the size recorded at stat time."""
    kind = DiagnosticKind.TRUNCATED_READ

    def __init__(self, path: str, expected: int, actual: int):
        super().__init__(path, f"read {actual} bytes, expected {expected}")
        self.expected = expected
        self.actual = actual


class DigestCollisionRejected(FileError):
    """Same digest as the group's first member but different content."""
    kind = DiagnosticKind.DIGEST_COLLISION


class DeletionFailed(FileError):
    """A duplicate could not be removed."""
    kind = DiagnosticKind.DELETION_FAILED


class ContentChanged(FileError):
    """A candidate no longer matches its group at deletion time."""
    kind = DiagnosticKind.CONTENT_CHANGED


class SameFileSkipped(FileError):
    """A candidate is another path to a file that stays on disk (symlink or hard link)."""
    kind = DiagnosticKind.SAME_FILE
