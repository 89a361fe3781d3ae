"""Command-line interface for cssbench.

Subcommands:
    cssbench run      Generate fixtures, time every tool, write results
    cssbench show     Display a saved results document
    cssbench export   Export a saved document to Markdown or CSV
    cssbench tools    List the built-in suites and their tools
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

import click

from cssbench import __version__
from cssbench.logging import setup_logging

log = logging.getLogger("cssbench")


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """cssbench: compare the speed of command-line CSS compilers."""


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@main.command()
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, path_type=Path),
    help="YAML profile defining suites, tools and settings.",
)
@click.option(
    "--suite",
    "suite_names",
    type=str,
    multiple=True,
    help="Suite to run (repeatable, default: all configured).",
)
@click.option(
    "--tool",
    "inline_tools",
    type=str,
    multiple=True,
    help="Extra tool 'name[@kind]:command {input} ...' added to the first suite (repeatable).",
)
@click.option("--iterations", type=int, default=None, help="Measured iterations (default: 10).")
@click.option("--warmup", type=int, default=None, help="Warm-up passes (default: 2).")
@click.option(
    "--timeout-ms",
    type=int,
    default=None,
    help="Per-invocation timeout in milliseconds (default: 30000).",
)
@click.option("--seed", type=int, default=None, help="Seed for generated markup (default: 0).")
@click.option("--unseeded", is_flag=True, default=False, help="Generate markup without a seed.")
@click.option(
    "--reference",
    type=click.Path(path_type=Path),
    default=None,
    help="Reference stylesheet used as the medium fixture (default: test.css).",
)
@click.option(
    "--large-rules",
    type=int,
    default=None,
    help="Number of rules in the large fixture (default: 1000).",
)
@click.option(
    "--work-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory fixtures are written to (default: current directory).",
)
@click.option(
    "--results-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory results documents are written to (default: current directory).",
)
@click.option(
    "--save-samples",
    is_flag=True,
    default=False,
    help="Also write every raw sample next to the results.",
)
@click.option("--quick", is_flag=True, default=False, help="Quick mode: 3 iterations, no warmup.")
@click.option("-v", "--verbose", is_flag=True, help="Show every invocation.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and the report.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None)
def run(  # noqa: PLR0913
    profile_path: Path | None,
    suite_names: tuple[str, ...],
    inline_tools: tuple[str, ...],
    iterations: int | None,
    warmup: int | None,
    timeout_ms: int | None,
    seed: int | None,
    unseeded: bool,
    reference: Path | None,
    large_rules: int | None,
    work_dir: Path | None,
    results_dir: Path | None,
    save_samples: bool,
    quick: bool,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Benchmark the configured tools on small, medium and large fixtures.

    \b
    Examples:
        # Every built-in suite with default settings
        cssbench run

        # Only the compilers, fewer iterations
        cssbench run --suite competitors --iterations 5

        # Add a tool of your own
        cssbench run --suite competitors \\
            --tool "csso:npx --yes csso-cli {input} -o {output}"
    """
    from cssbench.config import (
        add_tool,
        config_from_profile,
        load_profile,
        parse_inline_tool,
        quick_config,
        select_suites,
    )
    from cssbench.fixtures import BaselineAssetError
    from cssbench.runner import BenchRunner

    # -v wins over -q.
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.WARNING
    else:
        console_level = logging.INFO
    setup_logging(console_level, log_file=log_file)

    cli_overrides: dict[str, object] = {
        "iterations": iterations,
        "warmup": warmup,
        "timeout_ms": timeout_ms,
        "seed": seed,
        "reference_stylesheet": reference,
        "large_rule_count": large_rules,
        "work_dir": work_dir,
        "results_dir": results_dir,
    }

    try:
        profile_data = load_profile(profile_path) if profile_path else {}
        config = config_from_profile(profile_data, cli_overrides=cli_overrides)
        if unseeded:
            config.seed = None
        if suite_names:
            select_suites(config, list(suite_names))
        for spec in inline_tools:
            add_tool(config, parse_inline_tool(spec))
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    config.save_samples = save_samples
    if quick:
        config = quick_config(config)
    log.debug("Suites: %s", ", ".join(config.suites) or "(none)")

    runner = BenchRunner(config, echo=click.echo)
    try:
        runner.run()
    except (ValueError, BaselineAssetError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904

    click.echo()
    for suite in config.suites.values():
        click.echo(f"Results saved to {config.results_path(suite)}")


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------


def _labels_for(path: Path) -> tuple[dict[str, str], str]:
    """Display labels and title of the built-in suite that writes *path*."""
    from cssbench.tools import BUILTIN_SUITES

    for suite in BUILTIN_SUITES.values():
        if suite.results_filename == path.name:
            return suite.labels, suite.title
    return {}, ""


@main.command("show")
@click.argument("results_json", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def show(results_json: Path) -> None:
    """Display a saved results document.

    RESULTS_JSON is a file written by ``cssbench run``.
    """
    from cssbench.display import format_report
    from cssbench.report import load_report

    try:
        document = load_report(results_json)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    labels, title = _labels_for(results_json)
    click.echo(format_report(document, labels=labels, title=title))


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------


@main.command("export")
@click.argument("results_json", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["markdown", "csv"]),
    default="markdown",
    help="Export format.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file (default: stdout).",
)
def export(results_json: Path, fmt: str, output: Path | None) -> None:
    """Export a saved results document.

    \b
    Examples:
        cssbench export benchmark-results.json > table.md
        cssbench export benchmark-results.json --format csv -o results.csv
    """
    from cssbench.export import export_csv, export_markdown
    from cssbench.report import load_report

    try:
        document = load_report(results_json)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    if fmt == "csv":
        text = export_csv(document)
    else:
        labels, title = _labels_for(results_json)
        text = export_markdown(document, labels=labels, title=title)

    if output:
        output.write_text(text)
        click.echo(f"Exported to {output}")
    else:
        click.echo(text, nl=False)


# ---------------------------------------------------------------------------
# tools
# ---------------------------------------------------------------------------


@main.command("tools")
def tools_cmd() -> None:
    """List the built-in suites and whether each tool can be found."""
    from cssbench.tools import BUILTIN_SUITES

    for suite in BUILTIN_SUITES.values():
        click.echo(f"{suite.name} ({suite.title}) -> {suite.results_filename}")
        entries = list(suite.tools)
        if suite.build is not None:
            entries.insert(0, suite.build)
        for tool in entries:
            found = shutil.which(tool.executable) is not None
            marker = "" if found else "  [not found]"
            click.echo(f"  {tool.name:15s} reads {tool.input:10s} {tool.executable}{marker}")
