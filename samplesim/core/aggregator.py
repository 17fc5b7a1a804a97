"""Aggregations over raw and sampled event sets."""

from __future__ import annotations

import math
from typing import Sequence, Union

import numpy as np

from ..models.results import Aggregate, Metric
from .event_generator import Population
from .validator import EmptyAggregateError, validate_sample_rate

EventSet = Union[Population, np.ndarray, Sequence[float]]


def _values(events: EventSet) -> np.ndarray:
    if isinstance(events, Population):
        return events.values
    return np.asarray(events, dtype=float)


def nearest_rank_percentile(values: EventSet, percentile: float = 0.99) -> float:
    """Return the observed value at rank ``ceil(percentile * n)``.

    The rank is clamped into the valid index range; no interpolation between
    neighbouring observations takes place.
    """
    arr = _values(values)
    n = arr.size
    if n == 0:
        raise EmptyAggregateError("Cannot compute a percentile of zero events")
    rank = math.ceil(percentile * n) - 1
    rank = min(max(rank, 0), n - 1)
    # Partitioning places the rank-th smallest value exactly where a full sort would.
    return float(np.partition(arr, rank)[rank])


def aggregate(events: EventSet) -> Aggregate:
    """Compute count, sum, average and nearest-rank P99.

    Raises
    ------
    EmptyAggregateError
        If ``events`` is empty; an average of nothing is not reported as 0 or NaN.
    """
    arr = _values(events)
    count = int(arr.size)
    if count == 0:
        raise EmptyAggregateError("Cannot aggregate zero events (average is undefined)")
    total = float(arr.sum())
    return Aggregate(
        count=count,
        sum=total,
        average=total / count,
        p99=nearest_rank_percentile(arr, 0.99),
    )


def scale_aggregate(sampled: Aggregate, sample_rate: int) -> Aggregate:
    """Scale a sampled aggregate up to a full-population estimate.

    Metrics that scale with the sample rate (count and sum) are multiplied
    by ``sample_rate``; average and P99 are already representative of the
    population and are left untouched.
    """
    sample_rate = validate_sample_rate(sample_rate)
    updates = {
        metric.value: getattr(sampled, metric.value) * sample_rate
        for metric in Metric
        if metric.scales_with_sample_rate
    }
    return sampled.model_copy(update=updates)


__all__ = ["aggregate", "nearest_rank_percentile", "scale_aggregate"]
