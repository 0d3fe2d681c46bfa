"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/report_service.py
Renders a DeduplicationResult as plain text, JSON or CSV.

The JSON form carries everything needed to rebuild the DuplicateSet
(see DuplicateSet.from_dict); CSV has one row per file.
"""
import csv
import io
import json
from pathlib import Path
from typing import Dict, Any

from dupfinder.core.models import DeduplicationResult, DuplicateSet, OutputFormat
from dupfinder.utils.convert_utils import ConvertUtils

CSV_HEADER = ["group", "path", "size", "digest"]


class ReportService:

    @staticmethod
    def render(result: DeduplicationResult, fmt: OutputFormat = OutputFormat.TEXT) -> str:
        renderers = {
            OutputFormat.TEXT: ReportService.render_text,
            OutputFormat.JSON: ReportService.render_json,
            OutputFormat.CSV: ReportService.render_csv,
        }
        return renderers[fmt](result)

    @staticmethod
    def render_text(result: DeduplicationResult) -> str:
        duplicate_set = result.duplicate_set
        lines = ["Duplicate Files Report", "=" * 22, ""]

        if not duplicate_set:
            lines.append("No duplicate files found.")
        for idx, group in enumerate(duplicate_set, 1):
            lines.append(
                f"Group {idx} | Size: {ConvertUtils.bytes_to_human(group.size)} | "
                f"Files: {len(group.files)} | {duplicate_set.algorithm.display_name}: {group.digest.hex()}"
            )
            lines.append("-" * 60)
            for pos, file in enumerate(group.files):
                marker = "[KEEP]" if pos == 0 else "[DUP] "
                lines.append(f"   {marker} {file.path}")
            lines.append("")

        lines.extend([
            "Summary",
            "-------",
            f"Total duplicate groups: {len(duplicate_set)}",
            f"Files in groups: {duplicate_set.total_files}",
            f"Total wasted space: {ConvertUtils.bytes_to_human(duplicate_set.wasted_space)}",
            f"Unique files: {len(result.unique_paths)}",
        ])

        if result.diagnostics:
            lines.append(f"Files excluded due to errors: {len(result.excluded_paths)}")
            lines.append("")
            lines.append("Problems:")
            for diagnostic in result.diagnostics:
                lines.append(f"   [{diagnostic.kind.value}] {diagnostic.path}: {diagnostic.message}")

        return "\n".join(lines)

    @staticmethod
    def to_dict(result: DeduplicationResult) -> Dict[str, Any]:
        data = result.duplicate_set.to_dict()
        data["unique_files"] = len(result.unique_paths)
        data["excluded"] = [d.to_dict() for d in result.diagnostics]
        return data

    @staticmethod
    def render_json(result: DeduplicationResult) -> str:
        return json.dumps(ReportService.to_dict(result), indent=2, ensure_ascii=False)

    @staticmethod
    def render_csv(result: DeduplicationResult) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for idx, group in enumerate(result.duplicate_set, 1):
            for file in group.files:
                writer.writerow([idx, file.path, file.size, group.digest.hex()])
        return buffer.getvalue()

    @staticmethod
    def export(result: DeduplicationResult, path: str, fmt: OutputFormat) -> None:
        """Writes the rendered report to a file."""
        Path(path).write_text(ReportService.render(result, fmt), encoding="utf-8")

    @staticmethod
    def load_json(text: str) -> DuplicateSet:
        """Rebuilds the DuplicateSet from render_json() output."""
        return DuplicateSet.from_dict(json.loads(text))
