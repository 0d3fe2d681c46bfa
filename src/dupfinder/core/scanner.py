"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Directory traversal feeding the engine an already-filtered path stream.
Features:
- Recursively scans directories in sorted (deterministic) order
- Explicit filter predicates: hidden files, symbolic links, exclude patterns
- Skips system trash directories
"""

import logging
import os
import re
import sys
from pathlib import Path
from typing import List, Optional, Callable, Set, Tuple

from dupfinder.core.errors import InputInvalid
from dupfinder.core.interfaces import FileScanner

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 5000


class FileScannerImpl(FileScanner):
    """
    Walks root_dir and returns the paths of regular files that pass every filter.

    Attributes:
        root_dir: Root directory to scan
        include_hidden: Keep files whose path below root has a component starting with '.'
        follow_links: Descend into symlinked directories and keep symlinked files
        exclude_patterns: Regular expressions searched in the full path
    """

    def __init__(
        self,
        root_dir: str,
        include_hidden: bool = False,
        follow_links: bool = False,
        exclude_patterns: Optional[List[str]] = None
    ):
        self.root_dir = root_dir
        self.include_hidden = include_hidden
        self.follow_links = follow_links
        try:
            self.exclude_patterns = [re.compile(p) for p in (exclude_patterns or [])]
        except re.error as e:
            raise ValueError(f"Invalid exclude pattern: {e}") from e
        self._seen_dirs: Set[Tuple[int, int]] = set()
        self._seen_files: Set[Tuple[int, int]] = set()
        self.predicates: List[Callable[[Path], bool]] = [
            self._hidden_passes,
            self._symlink_passes,
            self._exclude_passes,
        ]

    def validate_root(self) -> Path:
        root_path = Path(self.root_dir)
        if not root_path.exists():
            raise InputInvalid(f"Directory does not exist: {self.root_dir}")
        if not root_path.is_dir():
            raise InputInvalid(f"Not a directory: {self.root_dir}")
        return root_path

    def scan(self,
             stopped_flag: Optional[Callable[[], bool]] = None,
             progress_callback: Optional[Callable[[str, int, object], None]] = None) -> List[str]:
        root_path = self.validate_root()
        logger.debug(f"Scanning directory: {self.root_dir}")

        found_files = []
        processed_files = 0
        # (st_dev, st_ino) of everything reached so far; only tracked when following links
        self._seen_dirs = {self._identity(root_path)} if self.follow_links else set()
        self._seen_files = set()

        for root, dirs, files in os.walk(str(root_path), followlinks=self.follow_links):
            if stopped_flag and stopped_flag():
                logger.debug("Scan interrupted by user")
                return []

            dirs[:] = [d for d in sorted(dirs) if self._prefilter_dirs(Path(root) / d)]

            for filename in sorted(files):
                path = Path(root) / filename
                if self._accepts(path) and self._first_visit(path, self._seen_files):
                    found_files.append(str(path))
                processed_files += 1
                if progress_callback and processed_files % PROGRESS_INTERVAL == 0:
                    progress_callback('scanning', processed_files, None)

        if progress_callback:
            progress_callback('scanning', processed_files, None)

        logger.debug(f"Scan completed. Found {len(found_files)} matching files.")
        return found_files

    def _accepts(self, path: Path) -> bool:
        for predicate in self.predicates:
            if not predicate(path):
                logger.debug(f"Skipping {path} ({predicate.__name__.strip('_')})")
                return False
        try:
            return path.is_file()
        except OSError as e:
            logger.debug(f"Could not check {path}: {e}")
            return False

    def _hidden_passes(self, path: Path) -> bool:
        if self.include_hidden:
            return True
        try:
            parts = path.relative_to(self.root_dir).parts
        except ValueError:
            parts = path.parts
        return not any(part.startswith('.') for part in parts)

    def _symlink_passes(self, path: Path) -> bool:
        if self.follow_links:
            return True
        try:
            return not path.is_symlink()
        except OSError:
            return False

    def _exclude_passes(self, path: Path) -> bool:
        path_str = str(path)
        return not any(pattern.search(path_str) for pattern in self.exclude_patterns)

    @staticmethod
    def _is_system_trash(path: Path) -> bool:
        """
        Check if path belongs to OS trash/recycle bin (cross-platform).
        Returns False on any error.
        """
        try:
            path_str = str(path.resolve(strict=False))

            if sys.platform == "win32":
                if "$Recycle.Bin" in path_str or "\\Recycler\\" in path_str:
                    return True
            elif sys.platform == "darwin":
                if "/.Trash/" in path_str or path_str.endswith("/.Trash"):
                    return True
            else:
                if ".local/share/Trash" in path_str or "/.trash/" in path_str:
                    return True

            return False
        except (OSError, ValueError):
            return False

    def _prefilter_dirs(self, path: Path) -> bool:
        """Pre-filter directories before os.walk enters them."""
        if FileScannerImpl._is_system_trash(path):
            logger.debug(f"Skipping system trash directory: {path}")
            return False
        if not self._hidden_passes(path) or not self._symlink_passes(path):
            logger.debug(f"Skipping directory: {path}")
            return False
        if not self._first_visit(path, self._seen_dirs):
            logger.debug(f"Skipping directory already visited through another path: {path}")
            return False
        return True

    @staticmethod
    def _identity(path: Path) -> Optional[Tuple[int, int]]:
        try:
            st = os.stat(path)
        except OSError:
            return None
        return st.st_dev, st.st_ino

    def _first_visit(self, path: Path, seen: Set[Tuple[int, int]]) -> bool:
        """
        With follow_links, one file or directory can be reached through several paths.
        Only the first path (in traversal order) is kept.
        """
        if not self.follow_links:
            return True
        identity = self._identity(path)
        if identity is None:
            return True
        if identity in seen:
            logger.debug(f"Skipping {path}: already reached through another path")
            return False
        seen.add(identity)
        return True
