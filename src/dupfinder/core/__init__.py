"""
Core duplicate detection engine: scanner, hasher, grouper, verifier and pipeline orchestrator.

- FileScannerImpl: recursive traversal with hidden / symlink / exclude filters
- HasherImpl: hashlib content digests plus an xxHash64 front-chunk hash
- FileGrouperImpl + SizeIndexer: size and digest based grouping
- ContentVerifier: byte-exact comparison of digest groups
- DeduplicatorImpl: multi-stage pipeline (size → [front hash] → digest → [verify])
- DispositionEngine: applies the deletion policy to a DuplicateSet

Nothing here touches the terminal; the CLI lives in dupfinder.cli.
"""

from .scanner import FileScannerImpl
from .grouper import FileGrouperImpl, SizeIndexer
from .hasher import HasherImpl, XXHashAlgorithmImpl, HashlibAlgorithmImpl, calculate_digest
from .verifier import ContentVerifier
from .deduplicator import DeduplicatorImpl
from .disposition import DispositionEngine
from .errors import (
    DuplicateFinderError, InputInvalid, ConflictingPolicy, FileError, UnreadableFile,
    TruncatedRead, DigestCollisionRejected, DeletionFailed, ContentChanged, SameFileSkipped
)
from .models import (
    Digest, DigestAlgorithm, Diagnostic, DiagnosticKind, DispositionPolicy, DispositionReport,
    FileRecord, DuplicateGroup, DuplicateSet, DeduplicationParams, DeduplicationResult,
    DeduplicationStats, ExitCode, OutputFormat)

__all__ = [
    "FileScannerImpl",
    "FileGrouperImpl",
    "SizeIndexer",
    "HasherImpl",
    "XXHashAlgorithmImpl",
    "HashlibAlgorithmImpl",
    "calculate_digest",
    "ContentVerifier",
    "DeduplicatorImpl",
    "DispositionEngine",
    "DuplicateFinderError",
    "InputInvalid",
    "ConflictingPolicy",
    "FileError",
    "UnreadableFile",
    "TruncatedRead",
    "DigestCollisionRejected",
    "DeletionFailed",
    "ContentChanged",
    "SameFileSkipped",
    "Digest",
    "DigestAlgorithm",
    "Diagnostic",
    "DiagnosticKind",
    "DispositionPolicy",
    "DispositionReport",
    "FileRecord",
    "DuplicateGroup",
    "DuplicateSet",
    "DeduplicationParams",
    "DeduplicationResult",
    "DeduplicationStats",
    "ExitCode",
    "OutputFormat",
]
