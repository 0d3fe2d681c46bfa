"""
dupfinder finds byte-identical files in a directory tree and reclaims the space they waste.

Core features:
- Size grouping, optional xxHash64 front-chunk prefilter, full content digest (MD5/SHA-1/SHA-256/SHA-512)
- Optional byte-by-byte verification of every duplicate group
- Report-only, interactive or automatic deletion (permanent or to the system trash)
- Text, JSON and CSV reports
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("dupfinder")
except Exception:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from dupfinder.commands import DeduplicationCommand
from dupfinder.core import (
    DeduplicationParams, DeduplicationResult, DigestAlgorithm, DispositionPolicy,
    DuplicateGroup, DuplicateSet, FileRecord, DeduplicatorImpl
)
from dupfinder.utils.convert_utils import ConvertUtils
from dupfinder.services import FileService, ReportService

__all__ = [
    "DeduplicationCommand",
    "DeduplicationParams",
    "DeduplicationResult",
    "DigestAlgorithm",
    "DispositionPolicy",
    "DuplicateGroup",
    "DuplicateSet",
    "FileRecord",
    "DeduplicatorImpl",
    "ConvertUtils",
    "FileService",
    "ReportService",
    "__version__",
]
