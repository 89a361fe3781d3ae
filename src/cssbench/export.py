"""Export benchmark documents to Markdown and CSV.

Markdown format: one row per tool, one column per fixture size,
suitable for pasting into a README.

CSV format: one row per size per tool (long format for pandas/R).
"""

from __future__ import annotations

import csv
import io
from typing import Mapping

from cssbench.display import NOT_APPLICABLE, format_duration
from cssbench.stats import ReportDocument


def _tool_order(document: ReportDocument) -> list[str]:
    """Tools in first-seen order across all sizes."""
    seen: dict[str, None] = {}
    for tools in document.values():
        for tool in tools:
            seen.setdefault(tool, None)
    return list(seen)


def export_markdown(
    document: ReportDocument,
    *,
    labels: Mapping[str, str] | None = None,
    title: str = "",
) -> str:
    """Export a document as a Markdown table.

    Tools missing from a size are shown as N/A, like failed ones.
    """
    labels = labels or {}
    sizes = list(document)
    lines: list[str] = []

    if title:
        lines.append(f"## {title}")
        lines.append("")

    lines.append("| Tool | " + " | ".join(s.capitalize() for s in sizes) + " |")
    lines.append("|---|" + "---:|" * len(sizes))

    for tool in _tool_order(document):
        cells = []
        for size in sizes:
            if tool in document[size]:
                cells.append(format_duration(document[size][tool]))
            else:
                cells.append(NOT_APPLICABLE)
        lines.append(f"| {labels.get(tool, tool)} | " + " | ".join(cells) + " |")

    return "\n".join(lines) + "\n"


def export_csv(document: ReportDocument) -> str:
    """Export a document as CSV (long format).

    Columns:
        size, tool, mean_ms  (empty mean_ms when no sample succeeded)
    """
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["size", "tool", "mean_ms"])
    for size, tools in document.items():
        for tool, value in tools.items():
            writer.writerow([size, tool, "" if value is None else f"{value:.6f}"])
    return output.getvalue()
