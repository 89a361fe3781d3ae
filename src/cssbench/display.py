"""Terminal display formatting for benchmark results.

One block per fixture size, one aligned line per tool.  No external
dependencies.
"""

from __future__ import annotations

from typing import Mapping

from cssbench.stats import ReportDocument

NOT_APPLICABLE = "N/A"


def format_duration(ms: float | None) -> str:
    """Format a mean duration in milliseconds.

    Sub-millisecond values keep three decimals, everything else one.
    """
    if ms is None:
        return NOT_APPLICABLE
    if ms < 1:
        return f"{ms:.3f}ms"
    return f"{ms:.1f}ms"


def format_bytes(n: int) -> str:
    """Format a fixture size for a section heading."""
    if n < 1024:
        return f"{n} bytes"
    if n < 1024 * 1024:
        return f"~{n / 1024:.1f}KB"
    return f"~{n / (1024 * 1024):.1f}MB"


def format_header(title: str) -> str:
    return f"=== {title} ==="


def format_report(
    document: ReportDocument,
    *,
    labels: Mapping[str, str] | None = None,
    title: str = "",
    byte_sizes: Mapping[str, int] | None = None,
) -> str:
    """Render a report document as text.

    Args:
        document: size -> tool -> mean milliseconds (or None).
        labels: Display label per tool name; defaults to the name.
        title: Appended to the size in each section heading.
        byte_sizes: Optional fixture size per size class, shown in the
            heading.

    Returns:
        Formatted string for terminal output.
    """
    labels = labels or {}
    names = [labels.get(tool, tool) for tools in document.values() for tool in tools]
    width = max((len(name) + 1 for name in names), default=0)

    blocks: list[str] = []
    for size, tools in document.items():
        heading = f"{size.capitalize()} {title}".strip()
        if byte_sizes and size in byte_sizes:
            heading += f" ({format_bytes(byte_sizes[size])})"
        lines = [heading + ":"]
        for tool, value in tools.items():
            label = labels.get(tool, tool) + ":"
            lines.append(f"  {label:<{width}} {format_duration(value)}")
        blocks.append("\n".join(lines))

    return "\n\n".join(blocks)
