"""Benchmark execution engine.

Orchestrates:
1. Configuration validation
2. Fixture generation and companion builds
3. Warm-up passes (results discarded)
4. Measured iterations with timing capture
5. Aggregation, console report and JSON document per suite
6. Fixture cleanup

Invocations never overlap.  Each tool runs alone on the machine so
that no competitor's measurement carries another one's load.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Sequence

from cssbench.config import BenchConfig, validate_config
from cssbench.fixtures import FixtureSet, materialize
from cssbench.logging import get_logger
from cssbench.report import cleanup_fixtures, emit, save_samples
from cssbench.results import BenchResults, Sample, SampleSet
from cssbench.stats import ReportDocument, build_report
from cssbench.timing import time_command
from cssbench.tools import Suite, ToolInvocation

log = get_logger("runner")

Timer = Callable[..., Sample]


# ---------------------------------------------------------------------------
# Progress callback
# ---------------------------------------------------------------------------


@dataclass
class BenchProgress:
    """Progress info passed to the callback."""

    phase: str  # "warmup" or "measure"
    suite: str
    tool: str
    size: str
    iteration: int  # 1-based
    total_iterations: int
    duration_ms: float | None = None
    status: str = ""


ProgressCallback = Callable[[BenchProgress], None]


def log_progress(progress: BenchProgress) -> None:
    """Default progress callback: one DEBUG line per invocation."""
    marker = "W" if progress.phase == "warmup" else "M"
    line = (
        f"  {progress.suite:12s} {progress.size:7s} {progress.tool:15s} "
        f"{marker}{progress.iteration}/{progress.total_iterations} "
    )
    if progress.duration_ms is not None:
        line += f"{progress.duration_ms:10.3f}ms "
    if progress.status:
        line += f"[{progress.status}]"
    log.debug(line)


# ---------------------------------------------------------------------------
# Measurement loop
# ---------------------------------------------------------------------------


def run_benchmark(
    tools: Sequence[ToolInvocation],
    fixtures: FixtureSet,
    *,
    iterations: int,
    warmup: int,
    timeout_ms: int = 30_000,
    timer: Timer = time_command,
    output: str | Path = os.devnull,
    suite_name: str = "",
    progress: ProgressCallback | None = None,
) -> BenchResults:
    """Time every tool against every fixture size.

    Warm-up passes run each tool once against the smallest size and
    are thrown away.  Measured passes then go size by size; within a
    pass the tools always run in the order given.

    Args:
        tools: Tools to compare, in invocation order.
        fixtures: Materialized fixtures.
        iterations: Measured passes per size.
        warmup: Discarded passes before measurement.
        timeout_ms: Per-invocation deadline.
        timer: Callable ``timer(argv, timeout_ms=...) -> Sample``.
        output: Sink each tool writes its result to.
        suite_name: Used in progress reports only.
        progress: Called after every invocation.

    Returns:
        BenchResults with one SampleSet per (tool, size), possibly empty.
    """
    report = progress or log_progress
    sizes = list(fixtures.sizes)

    if warmup and sizes:
        smallest = fixtures.smallest
        paths = fixtures.paths_for(smallest)
        for i in range(warmup):
            for tool in tools:
                sample = timer(tool.argv(paths, output), timeout_ms=timeout_ms)
                report(
                    BenchProgress(
                        phase="warmup",
                        suite=suite_name,
                        tool=tool.name,
                        size=smallest,
                        iteration=i + 1,
                        total_iterations=warmup,
                        duration_ms=sample.duration_ms,
                        status=sample.status,
                    )
                )

    outcomes: dict[tuple[str, str], list[Sample]] = {
        (tool.name, size): [] for size in sizes for tool in tools
    }

    for size in sizes:
        log.info("Benchmarking %s %s...", size, suite_name or "fixtures")
        paths = fixtures.paths_for(size)
        argvs = [tool.argv(paths, output) for tool in tools]
        for i in range(iterations):
            for tool, argv in zip(tools, argvs):
                sample = timer(argv, timeout_ms=timeout_ms)
                outcomes[(tool.name, size)].append(sample)
                report(
                    BenchProgress(
                        phase="measure",
                        suite=suite_name,
                        tool=tool.name,
                        size=size,
                        iteration=i + 1,
                        total_iterations=iterations,
                        duration_ms=sample.duration_ms,
                        status=sample.status,
                    )
                )

    sample_sets = {
        key: SampleSet.from_outcomes(key[0], key[1], samples) for key, samples in outcomes.items()
    }
    for ss in sample_sets.values():
        if ss.failures and not ss.samples:
            log.warning(
                "%s failed on every %s iteration (%s)",
                ss.tool,
                ss.size,
                ", ".join(sorted({s.status for s in ss.failures})),
            )

    return BenchResults(
        tools=tuple(tool.name for tool in tools),
        sizes=tuple(sizes),
        sample_sets=sample_sets,
        iterations=iterations,
        warmup=warmup,
    )


# ---------------------------------------------------------------------------
# BenchRunner
# ---------------------------------------------------------------------------


class BenchRunner:
    """Executes a full benchmark run according to a BenchConfig.

    Usage::

        config = BenchConfig(...)
        runner = BenchRunner(config)
        documents = runner.run()
    """

    def __init__(
        self,
        config: BenchConfig,
        *,
        timer: Timer = time_command,
        progress_callback: ProgressCallback | None = None,
        echo: Callable[[str], None] = print,
    ) -> None:
        self.config = config
        self.timer = timer
        self.progress: Any = progress_callback or log_progress
        self.echo = echo
        self.results: dict[str, BenchResults] = {}

    def run(self) -> dict[str, ReportDocument]:
        """Execute every configured suite.

        Returns:
            Suite name -> ReportDocument, in suite order.

        Raises:
            ValueError: If configuration is invalid.
            BaselineAssetError: If a fixture every tool needs cannot be
                produced.  Raised before any measurement.
        """
        errors = validate_config(self.config)
        fatal = [e for e in errors if e.severity == "error"]
        for w in (e for e in errors if e.severity == "warning"):
            log.warning("Config warning: %s: %s", w.field, w.message)
        if fatal:
            messages = [f"  {e.field}: {e.message}" for e in fatal]
            raise ValueError("Invalid benchmark configuration:\n" + "\n".join(messages))

        suites = list(self.config.suites.values())
        fixtures = FixtureSet()
        documents: dict[str, ReportDocument] = {}

        log.info("Running benchmarks (this may take a while)...")
        try:
            materialize(suites, self.config, fixtures=fixtures, timer=self.timer)
            log.info(
                "%d iterations, %d warm-up, timeout %d ms",
                self.config.iterations,
                self.config.warmup,
                self.config.timeout_ms,
            )
            for suite in suites:
                documents[suite.name] = self._run_suite(suite, fixtures)
        finally:
            cleanup_fixtures(fixtures.created)

        return documents

    def _run_suite(self, suite: Suite, fixtures: FixtureSet) -> ReportDocument:
        log.info("Suite '%s': %d tools", suite.name, len(suite.tools))
        results = run_benchmark(
            suite.tools,
            _suite_view(suite, fixtures),
            iterations=self.config.iterations,
            warmup=self.config.warmup,
            timeout_ms=self.config.timeout_ms,
            timer=self.timer,
            suite_name=suite.name,
            progress=self.progress,
        )
        self.results[suite.name] = results

        document = build_report(results)
        self.echo("")
        emit(
            document,
            path=self.config.results_path(suite),
            title=suite.title,
            labels=suite.labels,
            byte_sizes=_byte_sizes(suite, fixtures),
            echo=self.echo,
        )
        if self.config.save_samples:
            save_samples(results, self.config.samples_path(suite))
        return document


def _suite_view(suite: Suite, fixtures: FixtureSet) -> FixtureSet:
    """The subset of *fixtures* a suite reads."""
    view = FixtureSet()
    for size in fixtures.sizes:
        for kind in suite.fixture_kinds:
            fixture = fixtures.get(size, kind)
            if fixture is not None:
                view.add(fixture)
    return view


def _byte_sizes(suite: Suite, fixtures: FixtureSet) -> dict[str, int]:
    """Size of the fixture each suite's first tool reads, per size."""
    if not suite.tools:
        return {}
    kind = suite.tools[0].input
    sizes: dict[str, int] = {}
    for size in fixtures.sizes:
        fixture = fixtures.get(size, kind)
        if fixture is not None:
            sizes[size] = fixture.byte_size
    return sizes
