"""Report sinks: render a run summary as text, JSON, or keep it in memory"""

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Protocol, TextIO, Union

from .types import Distribution, RunSummary

logger = logging.getLogger(__name__)


class ReportSink(Protocol):
    """Anything that accepts a finished run summary"""

    def write(self, summary: RunSummary) -> None:
        ...


def render_distribution(title: str, distribution: Distribution) -> List[str]:
    lines = [f"=== {title.upper()} ==="]
    width = max([len(str(count)) for _, count in distribution.entries] + [len(str(distribution.missing)), 5])
    for value, count in distribution.entries:
        lines.append(f"  {str(count).rjust(width)} | {value}")
    lines.append(f"  {str(distribution.missing).rjust(width)} | (missing)")
    return lines


def render_text(summary: RunSummary, sample_size: int = 10) -> str:
    """Human-readable report for a data-quality review"""
    lines = [
        f"Question bank report: {summary.source_name or '<unnamed source>'}",
        f"  Total rows          : {summary.total_rows}",
        f"  Unique questions    : {summary.unique_count}",
        f"  Duplicates removed  : {summary.duplicate_count}",
        f"    of which empty    : {summary.empty_question_count}",
        f"  Unreadable cells    : {len(summary.coercion_warnings)}",
        "",
    ]

    if summary.columns is not None:
        lines.append("=== COLUMNS ===")
        for field_name, column in summary.columns.to_dict().items():
            if isinstance(column, list):
                column = ", ".join(column) if column else None
            lines.append(f"  {field_name:<14}: {column if column else '(not found)'}")
        lines.append("")

    for name, distribution in summary.distributions.items():
        lines.extend(render_distribution(name, distribution))
        lines.append("")

    if summary.duplicate_groups:
        lines.append("=== DUPLICATE GROUPS ===")
        for group in summary.duplicate_groups[:sample_size]:
            lines.append(
                f"  row {group['kept_row_index']} x{group['copies']}: {group['question_text'][:60]}"
            )
        hidden = len(summary.duplicate_groups) - sample_size
        if hidden > 0:
            lines.append(f"  ... {hidden} more group(s)")
        lines.append("")

    if summary.coercion_warnings:
        lines.append("=== UNREADABLE CELLS ===")
        for warning in summary.coercion_warnings[:sample_size]:
            lines.append(f"  row {warning.row_index}, {warning.column}: {warning.reason}")
        hidden = len(summary.coercion_warnings) - sample_size
        if hidden > 0:
            lines.append(f"  ... {hidden} more")
        lines.append("")

    return "\n".join(lines)


class TextReportSink:
    """Writes the human-readable report to a stream"""

    def __init__(self, stream: Optional[TextIO] = None, sample_size: int = 10):
        self.stream = stream
        self.sample_size = sample_size

    def write(self, summary: RunSummary) -> None:
        stream = self.stream or sys.stdout
        stream.write(render_text(summary, sample_size=self.sample_size))
        stream.write("\n")
        stream.flush()


class JsonReportSink:
    """Writes the structured summary to a JSON file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def write(self, summary: RunSummary) -> None:
        # Render first so a serialization error leaves no partial file
        document = json.dumps(summary.to_dict(), ensure_ascii=False, indent=2)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            f.write(document)
            f.write("\n")
        logger.info(f"Wrote JSON report to {self.path}")


class MemoryReportSink:
    """Keeps written summaries in memory"""

    def __init__(self):
        self.summaries: List[RunSummary] = []

    @property
    def last(self) -> Optional[RunSummary]:
        return self.summaries[-1] if self.summaries else None

    def write(self, summary: RunSummary) -> None:
        self.summaries.append(summary)


class MultiReportSink:
    """Fans one summary out to several sinks, in order"""

    def __init__(self, *sinks: ReportSink):
        self.sinks = list(sinks)

    def write(self, summary: RunSummary) -> None:
        for sink in self.sinks:
            sink.write(summary)
