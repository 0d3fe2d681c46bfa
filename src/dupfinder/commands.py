"""
Unified command orchestrator for duplicate detection.
Used by the CLI and by library callers; contains no terminal I/O.
"""
import logging
from typing import Optional, Callable

from dupfinder.core.deduplicator import DeduplicatorImpl
from dupfinder.core.disposition import DispositionEngine
from dupfinder.core.interfaces import Deduplicator, DeletionDecider
from dupfinder.core.models import DeduplicationParams, DeduplicationResult, DispositionReport
from dupfinder.core.scanner import FileScannerImpl
from dupfinder.services.file_service import FileService

logger = logging.getLogger(__name__)


class DeduplicationCommand:
    """
    Orchestrates the workflow:
    1. Scan the root directory (hidden / symlink / exclude filters)
    2. Run the detection pipeline on the resulting path stream
    3. Apply the disposition policy to the duplicate set

    Usage:
        params = DeduplicationParams(root_dir="~/Downloads", verify=True)
        command = DeduplicationCommand()
        result = command.execute(params, progress_callback=printer)
        report = command.dispose(result, params, decider=ask_operator)
    """

    def __init__(self, deduplicator: Optional[Deduplicator] = None):
        self._deduplicator = deduplicator or DeduplicatorImpl()

    def execute(
            self,
            params: DeduplicationParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> DeduplicationResult:
        """
        Scan and find duplicates.

        Raises:
            InputInvalid: If the root directory is missing or not a directory
            ValueError: If an exclude pattern is not a valid regular expression
        """
        scanner = FileScannerImpl(
            root_dir=params.root_dir,
            include_hidden=params.include_hidden,
            follow_links=params.follow_links,
            exclude_patterns=params.exclude_patterns
        )

        paths = scanner.scan(
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )
        logger.info(f"Scanning directory: {params.root_dir} ({len(paths)} files)")

        result = self._deduplicator.find_duplicates(
            paths,
            params,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )

        logger.info(
            f"Found {len(result.duplicate_set)} duplicate groups, "
            f"{len(result.unique_paths)} unique files, {len(result.diagnostics)} problems"
        )
        return result

    @staticmethod
    def dispose(
            result: DeduplicationResult,
            params: DeduplicationParams,
            decider: Optional[DeletionDecider] = None
    ) -> DispositionReport:
        """Applies params.policy to the duplicate set found by execute()."""
        engine = DispositionEngine(
            remover=FileService.get_remover(params.use_trash),
            decider=decider,
            recheck=params.recheck
        )
        return engine.dispose(result.duplicate_set, params.policy)
