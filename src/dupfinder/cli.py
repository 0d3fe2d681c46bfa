#!/usr/bin/env python3
"""
dupfinder CLI: command line interface for duplicate file detection and removal.
Implements the same core engine as the library API but with console-based interaction.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import os
import sys
import time
from typing import Callable, List, Optional, NoReturn

from dupfinder.aliases import (
    ALGORITHM_ALIASES, ALGORITHM_CHOICES, ALGORITHM_HELP_TEXT, FORMAT_ALIASES, FORMAT_CHOICES, EPILOG_TEXT
)
from dupfinder.commands import DeduplicationCommand
from dupfinder.core.errors import ConflictingPolicy, InputInvalid
from dupfinder.core.models import (
    DeduplicationParams, DeduplicationResult, DispositionReport,
    DuplicateGroup, ExitCode, OutputFormat
)
from dupfinder.services.report_service import ReportService
from dupfinder.utils.convert_utils import ConvertUtils

LOG_FORMAT = "%(levelname)-8s | %(name)-25s | %(message)s"
FILE_LOG_FORMAT = "%(asctime)s [%(levelname)s] - %(message)s"
FILE_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("dupfinder")


def read_answer(prompt: str) -> str:
    """Like input(), but the prompt goes to stderr so piped reports stay clean."""
    sys.stderr.write(prompt)
    sys.stderr.flush()
    line = sys.stdin.readline()
    if not line:
        raise EOFError
    return line.rstrip("\n")


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self, input_func: Optional[Callable[[str], str]] = None):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.input_func = input_func or read_answer
        self._log_handlers: List[logging.Handler] = []

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="dupfinder",
            description="dupfinder: find byte-identical files and reclaim wasted space",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "directory",
            help="Directory to scan for duplicates"
        )

        # Filtering options
        parser.add_argument(
            "--min-size", "-s",
            default="1",
            type=str,
            metavar='SIZE',
            help="Minimum file size (e.g., 500, 4K, 1MB). Default: 1"
        )
        parser.add_argument(
            "--exclude", "-e",
            action="append",
            default=[],
            metavar='PATTERN',
            dest="exclude_patterns",
            help="Exclude paths matching this regular expression (can be used multiple times)"
        )
        parser.add_argument(
            "--hidden", "-H",
            action="store_true",
            help="Include hidden files and directories"
        )
        parser.add_argument(
            "--follow-links", "-L",
            action="store_true",
            help="Follow symbolic links"
        )

        # Comparison options
        parser.add_argument(
            "--algorithm", "-a",
            choices=ALGORITHM_CHOICES,
            default="sha256",
            type=str.lower,
            help=ALGORITHM_HELP_TEXT
        )
        parser.add_argument(
            "--verify", "-v",
            action="store_true",
            help="Compare file contents byte by byte after hashing"
        )
        parser.add_argument(
            "--quick",
            action="store_true",
            help="Split large same-size files by a fast hash of their first 64KB before full hashing"
        )
        parser.add_argument(
            "--workers",
            type=int,
            default=1,
            metavar='N',
            help="Hash up to N files in parallel. Default: 1"
        )

        # Output options
        parser.add_argument(
            "--format", "-f",
            choices=FORMAT_CHOICES,
            default="text",
            dest="output_format",
            help="Output format. Default: text"
        )
        parser.add_argument(
            "--output", "-o",
            metavar='FILE',
            dest="csv_file",
            help="Export results to CSV"
        )
        parser.add_argument(
            "--json", "-j",
            metavar='FILE',
            dest="json_file",
            help="Export results to JSON"
        )
        parser.add_argument(
            "--log", "-l",
            metavar='FILE',
            dest="log_file",
            help="Append timestamped log messages to FILE"
        )

        # Actions
        parser.add_argument(
            "--interactive", "-i",
            action="store_true",
            help="Choose the files to delete in every duplicate group"
        )
        parser.add_argument(
            "--auto-delete", "-d",
            action="store_true",
            help="Delete all duplicates automatically, keeping the first file of every group"
        )
        parser.add_argument(
            "--trash",
            action="store_true",
            help="Move deleted files to the system trash instead of removing them"
        )
        parser.add_argument(
            "--recheck",
            action="store_true",
            help="Re-hash every file right before deleting it and skip files that changed"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Show detailed statistics and progress"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if not os.path.exists(args.directory):
            self.error_exit(f"Directory does not exist: {args.directory}", ExitCode.INPUT_INVALID)
        if not os.path.isdir(args.directory):
            self.error_exit(f"Path is not a directory: {args.directory}", ExitCode.INPUT_INVALID)

        if args.interactive and args.auto_delete:
            self.error_exit("Cannot use both interactive and auto-delete modes", ExitCode.CONFLICTING_POLICY)

        if not ConvertUtils.is_valid_size_format(args.min_size):
            self.error_exit(f"Invalid size format: {args.min_size}")

        if args.workers < 1:
            self.error_exit("--workers must be at least 1")

        if args.trash and not (args.interactive or args.auto_delete):
            self.warning("--trash has no effect without --interactive or --auto-delete")

    def create_params(self, args: argparse.Namespace) -> DeduplicationParams:
        """Create DeduplicationParams from CLI arguments."""
        try:
            return DeduplicationParams.from_human_readable(
                root_dir=args.directory,
                min_size_str=args.min_size,
                algorithm=ALGORITHM_ALIASES[args.algorithm],
                interactive=args.interactive,
                auto_delete=args.auto_delete,
                verify=args.verify,
                include_hidden=args.hidden,
                follow_links=args.follow_links,
                exclude_patterns=args.exclude_patterns,
                workers=args.workers,
                quick_filter=args.quick,
                recheck=args.recheck,
                use_trash=args.trash,
            )
        except ConflictingPolicy as e:
            self.error_exit(str(e), ExitCode.CONFLICTING_POLICY)
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def setup_logging(self, log_file: Optional[str] = None) -> None:
        """Console logging (INFO with --verbose, ERROR otherwise) and optional log file."""
        self.teardown_logging()
        logger.setLevel(logging.INFO)

        console = logging.StreamHandler(sys.stderr)
        console.setLevel(logging.INFO if self.verbose else logging.ERROR)
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        self._log_handlers.append(console)

        if log_file:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=FILE_LOG_DATEFMT))
            self._log_handlers.append(file_handler)

        for handler in self._log_handlers:
            logger.addHandler(handler)

    def teardown_logging(self) -> None:
        for handler in self._log_handlers:
            logger.removeHandler(handler)
            handler.close()
        self._log_handlers = []

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(f"\r  [{stage}] {current}/{total} ({percent:.1f}%)")
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
        sys.stderr.flush()

    def run_deduplication(self, params: DeduplicationParams) -> DeduplicationResult:
        """Execute the scan and detection pipeline."""
        command = DeduplicationCommand()
        if self.verbose:
            print(f"Finding duplicates ({params.algorithm.display_name}"
                  f"{', verified' if params.verify else ''})...", file=sys.stderr)

        try:
            result = command.execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None
            )
        except InputInvalid as e:
            self.error_exit(str(e), ExitCode.INPUT_INVALID)
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

        if self.verbose:
            sys.stderr.write("\n")
            print(result.stats.print_summary(), file=sys.stderr)

        return result

    def output_results(self, result: DeduplicationResult, fmt: OutputFormat) -> None:
        """Print the report to stdout. Machine-readable formats are printed even with --quiet."""
        if fmt is OutputFormat.TEXT and self.quiet:
            return
        print(ReportService.render(result, fmt))

    def export_results(self, result: DeduplicationResult, args: argparse.Namespace) -> None:
        exports = [(args.csv_file, OutputFormat.CSV), (args.json_file, OutputFormat.JSON)]
        for path, fmt in exports:
            if not path:
                continue
            try:
                ReportService.export(result, path, fmt)
            except OSError as e:
                self.warning(f"Cannot write {path}: {e}")
                continue
            logger.info(f"Results exported to {fmt.value.upper()}: {path}")

    def prompt_selection(self, group: DuplicateGroup) -> List[int]:
        """
        Asks which members of the group to delete. Returns 0-based indices.
        The listing goes to stderr; stdout only carries the report.
        """
        print(file=sys.stderr)
        print(f"Group | Size: {ConvertUtils.bytes_to_human(group.size)} | Files: {len(group.files)}", file=sys.stderr)
        print("-" * 60, file=sys.stderr)
        for number, file in enumerate(group.files, 1):
            print(f"[{number}] {file.path} ({ConvertUtils.bytes_to_human(file.size)})", file=sys.stderr)

        try:
            selection = self.input_func("Select files to delete (space-separated numbers, 's' to skip): ")
        except EOFError:
            return []

        selection = selection.strip().lower()
        if not selection or selection == "s":
            return []

        indices = []
        for token in selection.replace(",", " ").split():
            try:
                indices.append(int(token) - 1)
            except ValueError:
                self.warning(f"Ignoring invalid selection: {token}")
        return indices

    def output_disposition(self, report: DispositionReport) -> None:
        if self.quiet:
            return

        if report.failed_count:
            print(f"\nPartial success: {report.deleted_count}/{report.deleted_count + report.failed_count} files deleted.",
                  file=sys.stderr)
            for diagnostic in report.diagnostics[:5]:
                print(f"  • {diagnostic.path}: {diagnostic.message}", file=sys.stderr)
            if len(report.diagnostics) > 5:
                print(f"  ...and {len(report.diagnostics) - 5} more files", file=sys.stderr)
        else:
            print(f"\nDeleted {report.deleted_count} files.", file=sys.stderr)
        print(f"Total space saved: {ConvertUtils.bytes_to_human(report.freed_space)}", file=sys.stderr)

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"Warning: {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(int(code))

    def run(self, argv: Optional[List[str]] = None) -> ExitCode:
        """Main entry point. Returns the exit code for the run."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet

        self.validate_args(args)
        params = self.create_params(args)

        self.setup_logging(args.log_file)
        try:
            logger.info(f"Starting duplicate file search in {params.root_dir}")
            result = self.run_deduplication(params)

            self.output_results(result, FORMAT_ALIASES[args.output_format])
            self.export_results(result, args)

            if params.policy.deletes_files and result.has_duplicates:
                report = DeduplicationCommand.dispose(result, params, decider=self.prompt_selection)
                self.output_disposition(report)

            elapsed = time.time() - self.start_time
            logger.info(f"Duplicate file search completed in {elapsed:.2f} seconds")
        finally:
            self.teardown_logging()

        return ExitCode.DUPLICATES_FOUND if result.has_duplicates else ExitCode.NO_DUPLICATES


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        code = app.run()
    except KeyboardInterrupt:
        print("\nOperation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(ExitCode.INTERRUPTED)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(int(code))


if __name__ == "__main__":
    main()
