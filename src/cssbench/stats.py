"""Aggregation of benchmark samples.

The only statistic is the arithmetic mean of the successful samples.
A sample set without any successful sample has no representative value
(None), which the report shows as "N/A".
"""

from __future__ import annotations

import math
from typing import Iterable, Union

from cssbench.results import BenchResults, Sample

SampleLike = Union[Sample, float, int, None]

# size -> tool -> mean milliseconds (None = no successful sample)
ReportDocument = dict[str, dict[str, Union[float, None]]]


def _duration(sample: SampleLike) -> float | None:
    if isinstance(sample, Sample):
        return sample.duration_ms if sample.ok else None
    if sample is None:
        return None
    value = float(sample)
    if math.isnan(value):
        return None
    return value


def aggregate(samples: Iterable[SampleLike]) -> float | None:
    """Return the mean of the successful samples, or None if there are none.

    Accepts a ``SampleSet``, or any iterable mixing ``Sample`` objects,
    raw millisecond values and None (failed).
    """
    values = [d for d in (_duration(s) for s in samples) if d is not None]
    if not values:
        return None
    return math.fsum(values) / len(values)


def build_report(results: BenchResults) -> ReportDocument:
    """Reduce every sample set of a run to its mean.

    Sizes and tools keep the order of the run.
    """
    return {
        size: {ss.tool: aggregate(ss) for ss in results.for_size(size)}
        for size in results.sizes
    }
