"""Benchmark result data structures.

Hierarchy::

    BenchResults (one suite, one run)
      → sample_sets: dict[(tool, size), SampleSet]
        → samples: tuple[Sample, ...]   successful, iteration order
        → failures: tuple[Sample, ...]  excluded from aggregation

Everything here is frozen.  The runner accumulates outcomes in local
lists and only hands out the finished ``BenchResults``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator


STATUS_OK = "ok"
STATUS_FAIL = "fail"
STATUS_TIMEOUT = "timeout"
STATUS_ERROR = "error"


# ---------------------------------------------------------------------------
# Sample
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Sample:
    """Outcome of one timed invocation of one tool against one fixture.

    ``duration_ms`` is None for every status other than ``"ok"``.
    """

    duration_ms: float | None
    status: str = STATUS_OK  # "ok", "fail", "timeout", "error"
    exit_code: int | None = 0

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK and self.duration_ms is not None

    @classmethod
    def measured(cls, duration_ms: float) -> Sample:
        return cls(duration_ms=max(duration_ms, 0.0))

    @classmethod
    def failed(cls, exit_code: int | None = None) -> Sample:
        return cls(duration_ms=None, status=STATUS_FAIL, exit_code=exit_code)

    @classmethod
    def timed_out(cls) -> Sample:
        return cls(duration_ms=None, status=STATUS_TIMEOUT, exit_code=None)

    @classmethod
    def spawn_error(cls) -> Sample:
        return cls(duration_ms=None, status=STATUS_ERROR, exit_code=None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "duration_ms": (None if self.duration_ms is None else round(self.duration_ms, 6)),
            "status": self.status,
            "exit_code": self.exit_code,
        }


# ---------------------------------------------------------------------------
# SampleSet
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SampleSet:
    """Samples collected for one (tool, fixture size) pair.

    Only successful samples count towards ``len()``; failed outcomes
    are kept in ``failures`` so the report can explain a missing value.
    """

    tool: str
    size: str
    samples: tuple[Sample, ...] = ()
    failures: tuple[Sample, ...] = ()

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.samples)

    @property
    def durations(self) -> list[float]:
        """Durations of the successful samples, in iteration order."""
        return [s.duration_ms for s in self.samples if s.duration_ms is not None]

    @property
    def attempts(self) -> int:
        """Total measured invocations, successful or not."""
        return len(self.samples) + len(self.failures)

    @classmethod
    def from_outcomes(cls, tool: str, size: str, outcomes: list[Sample]) -> SampleSet:
        """Split recorded outcomes into kept samples and failures."""
        return cls(
            tool=tool,
            size=size,
            samples=tuple(s for s in outcomes if s.ok),
            failures=tuple(s for s in outcomes if not s.ok),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "tool": self.tool,
            "size": self.size,
            "samples": [s.to_dict() for s in self.samples],
            "failures": [s.to_dict() for s in self.failures],
        }


# ---------------------------------------------------------------------------
# BenchResults
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BenchResults:
    """All sample sets of one suite, keyed by (tool name, size)."""

    tools: tuple[str, ...]
    sizes: tuple[str, ...]
    sample_sets: dict[tuple[str, str], SampleSet] = field(default_factory=dict)
    iterations: int = 0
    warmup: int = 0

    def get(self, tool: str, size: str) -> SampleSet:
        """Return the sample set for a pair, empty if nothing was recorded."""
        found = self.sample_sets.get((tool, size))
        if found is None:
            return SampleSet(tool=tool, size=size)
        return found

    def for_size(self, size: str) -> list[SampleSet]:
        """Sample sets of one size, in tool order."""
        return [self.get(tool, size) for tool in self.tools]

    @property
    def failure_count(self) -> int:
        return sum(len(ss.failures) for ss in self.sample_sets.values())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict (raw samples included)."""
        return {
            "tools": list(self.tools),
            "sizes": list(self.sizes),
            "iterations": self.iterations,
            "warmup": self.warmup,
            "sample_sets": [self.get(t, s).to_dict() for s in self.sizes for t in self.tools],
        }
