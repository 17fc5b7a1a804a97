"""Confidence intervals for metrics estimated from repeated sampled trials.

Two ways of bounding a metric are provided:

* the empirical method takes order statistics of the per-trial estimates;
* the theoretical method uses the Central Limit Theorem for count, sum and
  average, and Beta-distributed order statistics for the P99.

:func:`estimate_interval` prefers the theoretical bounds and falls back to the
empirical ones whenever the theoretical computation fails numerically. The
resulting interval records which method produced it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from ..models.results import ConfidenceInterval, IntervalMethod, Metric
from .distributions import Distribution
from .special_functions import beta_inverse, normal_inverse
from .validator import DomainError, validate_confidence_level, validate_sample_rate

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_LEVEL = 0.95
P99_LEVEL = 0.99

Values = Union[Sequence[float], np.ndarray]


@dataclass(frozen=True)
class EstimationContext:
    """What the theoretical estimators need to know about the trials."""

    distribution: Distribution
    sample_rate: int
    sample_size: Optional[float] = None  # mean sampled events per trial
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL


def _as_array(values: Values) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        raise DomainError("Confidence interval requires at least one trial value")
    return arr


def _sample_std(arr: np.ndarray) -> float:
    if arr.size < 2:
        raise DomainError("Standard error needs at least two trials")
    return float(np.std(arr, ddof=1))


def empirical_interval(
    values: Values,
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
) -> ConfidenceInterval:
    """Percentile-of-trials interval around the empirical mean."""
    confidence_level = validate_confidence_level(confidence_level)
    arr = _as_array(values)
    n = arr.size
    alpha = 1.0 - confidence_level
    lower_index = min(max(math.floor(n * alpha / 2.0), 0), n - 1)
    upper_index = min(max(math.ceil(n * (1.0 - alpha / 2.0)) - 1, 0), n - 1)
    ordered = np.sort(arr)
    return ConfidenceInterval(
        lower=float(ordered[lower_index]),
        upper=float(ordered[upper_index]),
        mean=float(arr.mean()),
        method=IntervalMethod.EMPIRICAL,
    )


def _gaussian_bounds(mean: float, std_error: float, z: float) -> tuple[float, float]:
    return mean - z * std_error, mean + z * std_error


def _count_bounds(arr: np.ndarray, context: EstimationContext, z: float) -> tuple[float, float]:
    lower, upper = _gaussian_bounds(float(arr.mean()), _sample_std(arr), z)
    return max(lower, 0.0), upper


def _sum_bounds(arr: np.ndarray, context: EstimationContext, z: float) -> tuple[float, float]:
    mean = float(arr.mean())
    sample_rate = validate_sample_rate(context.sample_rate)
    # Events per sampled trial inferred from the scaled sum and the family mean.
    draws = mean / sample_rate / context.distribution.mean
    if not draws > 0.0:
        raise DomainError(f"Cannot infer a positive sample size from sum {mean}")
    std_error = sample_rate * math.sqrt(draws * context.distribution.variance)
    return _gaussian_bounds(mean, std_error, z)


def _average_bounds(arr: np.ndarray, context: EstimationContext, z: float) -> tuple[float, float]:
    variance = context.distribution.variance
    empirical_se = _sample_std(arr) if arr.size >= 2 else None

    sample_size = context.sample_size
    if sample_size is None:
        if empirical_se is None:
            raise DomainError("Average interval needs two trials or a known sample size")
        sample_size = variance / (empirical_se**2)
    if not sample_size > 0.0:
        raise DomainError(f"Sample size must be positive, got {sample_size}")
    theoretical_se = math.sqrt(variance / sample_size)

    std_error = theoretical_se if empirical_se is None else max(empirical_se, theoretical_se)
    return _gaussian_bounds(float(arr.mean()), std_error, z)


def _p99_bounds(arr: np.ndarray, context: EstimationContext, z: float) -> tuple[float, float]:
    if context.sample_size is None:
        raise DomainError("P99 interval requires the number of sampled events per trial")
    n = int(round(context.sample_size))
    if n < 1:
        raise DomainError(f"P99 interval requires at least one sampled event, got {n}")
    alpha = 1.0 - context.confidence_level
    # The k-th order statistic sits at a Beta(k, n - k + 1) quantile position.
    k = math.ceil(P99_LEVEL * n)
    shape_a, shape_b = float(k), float(n - k + 1)
    p_lower = beta_inverse(alpha / 2.0, shape_a, shape_b)
    p_upper = beta_inverse(1.0 - alpha / 2.0, shape_a, shape_b)
    lower = max(context.distribution.quantile(p_lower), 0.0)
    upper = max(context.distribution.quantile(p_upper), 0.0)
    return lower, upper


_THEORETICAL_BOUNDS = {
    Metric.COUNT: _count_bounds,
    Metric.SUM: _sum_bounds,
    Metric.AVERAGE: _average_bounds,
    Metric.P99: _p99_bounds,
}


def theoretical_interval(
    metric: Metric,
    values: Values,
    context: EstimationContext,
) -> ConfidenceInterval:
    """Distribution-aware interval; raises on any numerical failure."""
    confidence_level = validate_confidence_level(context.confidence_level)
    arr = _as_array(values)
    z = normal_inverse(1.0 - (1.0 - confidence_level) / 2.0)
    lower, upper = _THEORETICAL_BOUNDS[Metric(metric)](arr, context, z)
    if not (math.isfinite(lower) and math.isfinite(upper)):
        raise DomainError(f"Non-finite {Metric(metric).value} interval ({lower}, {upper})")
    return ConfidenceInterval(
        lower=float(lower),
        upper=float(upper),
        mean=float(arr.mean()),
        method=IntervalMethod.THEORETICAL,
    )


def estimate_interval(
    metric: Metric,
    values: Values,
    context: EstimationContext,
    *,
    method: IntervalMethod = IntervalMethod.THEORETICAL,
) -> ConfidenceInterval:
    """Interval for ``metric`` that always succeeds for non-empty ``values``.

    With ``method=THEORETICAL`` the distribution-aware bounds are attempted
    first; arithmetic or domain failures fall back to the empirical bounds.
    """
    if IntervalMethod(method) is IntervalMethod.THEORETICAL:
        try:
            return theoretical_interval(metric, values, context)
        except (ArithmeticError, ValueError) as exc:
            LOGGER.info(
                "Theoretical %s interval unavailable (%s); using empirical percentiles",
                Metric(metric).value,
                exc,
            )
    return empirical_interval(values, context.confidence_level)


__all__ = [
    "DEFAULT_CONFIDENCE_LEVEL",
    "EstimationContext",
    "empirical_interval",
    "theoretical_interval",
    "estimate_interval",
]
