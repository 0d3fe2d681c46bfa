"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and domain logic for file scanning and duplicate detection.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Dict, Optional, Union, Callable, Iterator, Any
import logging

logger = logging.getLogger(__name__)


# =============================
# Enums
# =============================

class DigestAlgorithm(Enum):
    """
    Closed set of content digests the engine can group by.
    The value is the hashlib name of the algorithm.
    """
    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"

    @property
    def bits(self) -> int:
        mapping = {
            DigestAlgorithm.MD5: 128,
            DigestAlgorithm.SHA1: 160,
            DigestAlgorithm.SHA256: 256,
            DigestAlgorithm.SHA512: 512,
        }
        return mapping[self]

    @property
    def digest_size(self) -> int:
        """Digest length in bytes."""
        return self.bits // 8

    @property
    def display_name(self) -> str:
        """Human-readable name for report headers."""
        mapping = {
            DigestAlgorithm.MD5: "MD5",
            DigestAlgorithm.SHA1: "SHA-1",
            DigestAlgorithm.SHA256: "SHA-256",
            DigestAlgorithm.SHA512: "SHA-512",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class DispositionPolicy(Enum):
    """
    Rule set deciding which members of a duplicate group are deleted.
    """
    REPORT_ONLY = "report-only"
    INTERACTIVE = "interactive"
    AUTOMATIC = "automatic"

    @property
    def deletes_files(self) -> bool:
        return self is not DispositionPolicy.REPORT_ONLY

    @classmethod
    def from_flags(cls, interactive: bool = False, automatic: bool = False) -> 'DispositionPolicy':
        """Maps the two CLI switches onto a single policy."""
        if interactive and automatic:
            from dupfinder.core.errors import ConflictingPolicy
            raise ConflictingPolicy("Cannot use both interactive and auto-delete modes")
        if interactive:
            return cls.INTERACTIVE
        if automatic:
            return cls.AUTOMATIC
        return cls.REPORT_ONLY

    def __repr__(self) -> str:
        return self.value


class OutputFormat(Enum):
    TEXT = "text"
    JSON = "json"
    CSV = "csv"


class DiagnosticKind(str, Enum):
    UNREADABLE_FILE = "unreadable-file"
    TRUNCATED_READ = "truncated-read"
    DIGEST_COLLISION = "digest-collision"
    DELETION_FAILED = "deletion-failed"
    CONTENT_CHANGED = "content-changed"
    SAME_FILE = "same-file"

    @property
    def excludes_from_scan(self) -> bool:
        """True for kinds raised while grouping (the file never reached a verdict)."""
        return self in (DiagnosticKind.UNREADABLE_FILE, DiagnosticKind.TRUNCATED_READ)


class Stage(str, Enum):
    SIZE = "Size grouping"
    FRONT = "Front-chunk Hash"
    DIGEST = "Content Digest"
    VERIFY = "Byte Verification"


class ExitCode(IntEnum):
    """Process exit codes of the CLI."""
    NO_DUPLICATES = 0
    DUPLICATES_FOUND = 1
    INPUT_INVALID = 2
    CONFLICTING_POLICY = 3
    INTERRUPTED = 130


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class Digest:
    """
    A content digest tagged with the algorithm that produced it.
    Digests of different algorithms never compare equal.
    """
    algorithm: DigestAlgorithm
    value: bytes

    def __post_init__(self):
        if not isinstance(self.value, bytes):
            raise ValueError("Digest value must be bytes")
        if len(self.value) != self.algorithm.digest_size:
            raise ValueError(
                f"{self.algorithm.display_name} digest must be {self.algorithm.digest_size} bytes, "
                f"got {len(self.value)}"
            )

    def hex(self) -> str:
        return self.value.hex()

    @classmethod
    def from_hex(cls, algorithm: DigestAlgorithm, hex_value: str) -> 'Digest':
        return cls(algorithm=algorithm, value=bytes.fromhex(hex_value))

    def __repr__(self):
        return f"<Digest {self.algorithm.value}:{self.hex()[:12]}>"


@dataclass
class Diagnostic:
    """A non-fatal, per-file problem met during a run."""
    path: str
    kind: DiagnosticKind
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "kind": self.kind.value, "message": self.message}


@dataclass
class FileRecord:
    """
    Represents a single file observed during a run.
    The digest is computed lazily and only for files sharing their size with another file.
    """
    path: str
    size: int  # in bytes
    ordinal: int = 0  # position in the input stream
    digest: Optional[Digest] = None

    def __post_init__(self):
        if self.size < 0:
            raise ValueError("File size cannot be negative")

    def set_digest(self, digest: Digest) -> None:
        """Stores the digest. A record's digest never changes once set."""
        if self.digest is not None and self.digest != digest:
            raise ValueError(f"Digest of {self.path} is already set")
        self.digest = digest

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "size": self.size,
            "digest": self.digest.hex() if self.digest else None,
        }

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}>"


@dataclass
class CandidateGroup:
    """
    Files that may still be duplicates while they move through the pipeline.
    digest is set once the content digest stage has run.
    """
    size: int
    files: List[FileRecord]
    digest: Optional[Digest] = None

    def __repr__(self):
        return f"<CandidateGroup size={self.size}, count={len(self.files)}>"


@dataclass
class DuplicateGroup:
    """
    Two or more files with identical content.
    Members keep traversal order; the first one is the retained copy by convention.
    """
    size: int
    digest: Digest
    files: List[FileRecord]

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    @property
    def retained(self) -> FileRecord:
        return self.files[0]

    @property
    def candidates(self) -> List[FileRecord]:
        """Members that may be removed."""
        return self.files[1:]

    @property
    def wasted_space(self) -> int:
        return self.size * max(0, len(self.files) - 1)

    def __repr__(self):
        return f"<DuplicateGroup size={self.size}, count={len(self.files)}>"


@dataclass
class DuplicateSet:
    """
    All duplicate groups found in one run, in discovery order.
    """
    algorithm: DigestAlgorithm
    groups: List[DuplicateGroup] = field(default_factory=list)

    def __iter__(self) -> Iterator[DuplicateGroup]:
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)

    def __bool__(self) -> bool:
        return bool(self.groups)

    @property
    def total_files(self) -> int:
        return sum(len(g.files) for g in self.groups)

    @property
    def wasted_space(self) -> int:
        return sum(g.wasted_space for g in self.groups)

    def membership(self) -> List[frozenset]:
        """Group memberships as path sets, independent of listing order."""
        return [frozenset(g.paths) for g in self.groups]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.algorithm.value,
            "groups": [
                {
                    "id": idx,
                    "digest": group.digest.hex(),
                    "size": group.size,
                    "files": [{"path": f.path, "size": f.size} for f in group.files],
                }
                for idx, group in enumerate(self.groups, 1)
            ],
            "total_groups": len(self.groups),
            "total_files": self.total_files,
            "wasted_space": self.wasted_space,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DuplicateSet':
        algorithm = DigestAlgorithm(data["algorithm"])
        groups = []
        ordinal = 0
        for raw_group in data.get("groups", []):
            digest = Digest.from_hex(algorithm, raw_group["digest"])
            files = []
            for raw_file in raw_group["files"]:
                files.append(FileRecord(
                    path=raw_file["path"],
                    size=raw_file["size"],
                    ordinal=ordinal,
                    digest=digest,
                ))
                ordinal += 1
            groups.append(DuplicateGroup(size=raw_group["size"], digest=digest, files=files))
        return cls(algorithm=algorithm, groups=groups)


class DeduplicationStats:
    """
    Statistics collected during the deduplication process.
    """
    def __init__(self):
        self.total_time: float = 0.0
        self.stage_stats: Dict[str, Dict[str, Union[int, float]]] = {}
        self._listeners: List[Callable[[str, Dict], None]] = []

    def add_listener(self, listener: Callable[[str, Dict], None]):
        """Adds a listener to receive updates when stats are updated."""
        self._listeners.append(listener)

    def update_stage(
            self,
            stage_name: str,
            groups_found: int,
            files_processed: int,
            duration: float
    ) -> None:
        if stage_name not in self.stage_stats:
            self.stage_stats[stage_name] = {
                "groups": 0,
                "files": 0,
                "time": 0.0
            }
        self.stage_stats[stage_name]["groups"] += groups_found
        self.stage_stats[stage_name]["files"] += files_processed
        self.stage_stats[stage_name]["time"] += duration

        for listener in self._listeners:
            try:
                listener(stage_name, self.stage_stats[stage_name])
            except Exception as e:
                logger.warning(f"Error in stats event handler: {e}")

    def print_summary(self) -> str:
        lines = [
            "Deduplication Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            "Stage: GROUPS / FILES / TIME"
        ]

        for stage, data in self.stage_stats.items():
            lines.append(f"{stage}: {data['groups']} / {data['files']} / {data['time']:.3f}s")

        return "\n".join(lines)


@dataclass
class DeduplicationResult:
    """
    Everything a run produces: the duplicate set plus what did not make it in.

    unique_paths holds files that were examined successfully and matched nothing;
    files dropped because of errors are only listed in diagnostics.
    """
    duplicate_set: DuplicateSet
    diagnostics: List[Diagnostic] = field(default_factory=list)
    unique_paths: List[str] = field(default_factory=list)
    stats: DeduplicationStats = field(default_factory=DeduplicationStats)

    @property
    def excluded_paths(self) -> List[str]:
        return [d.path for d in self.diagnostics if d.kind.excludes_from_scan]

    @property
    def has_duplicates(self) -> bool:
        return bool(self.duplicate_set)


@dataclass
class GroupDisposition:
    """What happened to one duplicate group."""
    group: DuplicateGroup
    retained: List[str] = field(default_factory=list)
    candidates: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


@dataclass
class DispositionReport:
    policy: DispositionPolicy
    groups: List[GroupDisposition] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    freed_space: int = 0

    @property
    def deleted_count(self) -> int:
        return sum(len(g.deleted) for g in self.groups)

    @property
    def failed_count(self) -> int:
        return sum(len(g.failed) for g in self.groups)

    @property
    def deleted_paths(self) -> List[str]:
        return [path for g in self.groups for path in g.deleted]


"""
DTO for deduplication parameters with built-in validation.
Interface-agnostic, used by the command layer and the CLI.
"""
from dupfinder.utils.convert_utils import ConvertUtils


@dataclass
class DeduplicationParams:
    """Parameters for a deduplication run with validation."""
    root_dir: str
    min_size_bytes: int = 0
    algorithm: DigestAlgorithm = DigestAlgorithm.SHA256
    verify: bool = False
    policy: DispositionPolicy = DispositionPolicy.REPORT_ONLY
    include_hidden: bool = False
    follow_links: bool = False
    exclude_patterns: List[str] = field(default_factory=list)
    workers: int = 1
    quick_filter: bool = False
    recheck: bool = False
    use_trash: bool = False

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if self.min_size_bytes < 0:
            raise ValueError("Minimum size cannot be negative")

        if self.workers < 1:
            raise ValueError("Number of workers must be at least 1")

        self.exclude_patterns = [p for p in self.exclude_patterns if p]

    @staticmethod
    def from_human_readable(
            root_dir: str,
            min_size_str: str = "0",
            algorithm: Union[str, DigestAlgorithm] = "sha256",
            interactive: bool = False,
            auto_delete: bool = False,
            **options
    ) -> 'DeduplicationParams':
        """
        Factory method to create params from human-readable inputs.
        Raises ConflictingPolicy before anything else when both deletion modes are set.
        """
        policy = DispositionPolicy.from_flags(interactive=interactive, automatic=auto_delete)
        min_size = ConvertUtils.human_to_bytes(min_size_str)

        return DeduplicationParams(
            root_dir=root_dir,
            min_size_bytes=min_size,
            algorithm=algorithm if isinstance(algorithm, DigestAlgorithm) else DigestAlgorithm(algorithm.lower()),
            policy=policy,
            **options
        )
