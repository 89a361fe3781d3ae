"""Report persistence and fixture cleanup.

Files produced per suite::

    benchmark-results.json           size -> tool -> mean ms (null = N/A)
    benchmark-results-samples.json   raw samples, only with --save-samples
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Iterable, Mapping

from cssbench.display import format_header, format_report
from cssbench.results import BenchResults
from cssbench.stats import ReportDocument

log = logging.getLogger("cssbench")


def save_report(document: ReportDocument, path: Path) -> None:
    """Write *document* as JSON, replacing any previous run's file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, indent=2) + "\n")
    log.info("Results saved to %s", path)


def load_report(path: Path) -> ReportDocument:
    """Load a document written by :func:`save_report`.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file is not a size -> tool -> value mapping.
    """
    data = json.loads(path.read_text())
    if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
        raise ValueError(f"{path} is not a benchmark results document.")
    for size, tools in data.items():
        for tool, value in tools.items():
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, (int, float))
            ):
                raise ValueError(
                    f"{path}: {size}.{tool} must be a number of milliseconds or null, "
                    f"got {value!r}."
                )
    return data


def save_samples(results: BenchResults, path: Path) -> None:
    """Write every raw sample of a run, failures included."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(results.to_dict(), indent=2) + "\n")
    log.info("Raw samples saved to %s", path)


def emit(
    document: ReportDocument,
    *,
    path: Path,
    title: str = "",
    labels: Mapping[str, str] | None = None,
    byte_sizes: Mapping[str, int] | None = None,
    echo: Callable[[str], None] = print,
) -> str:
    """Print the report for one suite and persist its document.

    Returns:
        The text that was printed.
    """
    text = "\n".join(
        [
            format_header(f"{title} Benchmark Results" if title else "Benchmark Results"),
            "",
            format_report(document, labels=labels, title=title, byte_sizes=byte_sizes),
        ]
    )
    echo(text)
    save_report(document, path)
    return text


def cleanup_fixtures(paths: Iterable[Path]) -> int:
    """Delete fixture files, ignoring those that are already gone.

    Safe to call repeatedly.  Never raises for filesystem errors.

    Returns:
        Number of files actually removed.
    """
    removed = 0
    for path in dict.fromkeys(paths):
        try:
            path.unlink()
            removed += 1
        except FileNotFoundError:
            continue
        except OSError as exc:
            log.warning("Could not remove fixture %s: %s", path, exc)
    log.debug("Removed %d fixture file(s)", removed)
    return removed
