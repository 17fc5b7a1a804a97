"""Result data models for simulation runs."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from ..core.distributions import Distribution
from ..core.event_generator import Population
from ..core.sampler import SamplingMethod
from ..utils.numbers import relative_error_pct, theoretical_error_pct


class Metric(str, Enum):
    """Aggregate metrics estimated from sampled events."""

    COUNT = "count"
    SUM = "sum"
    AVERAGE = "average"
    P99 = "p99"

    @property
    def scales_with_sample_rate(self) -> bool:
        """Totals are multiplied by the sample rate; averages and percentiles are not."""
        return self in (Metric.COUNT, Metric.SUM)

    def value_of(self, aggregate: "Aggregate") -> float:
        return float(getattr(aggregate, self.value))


class IntervalMethod(str, Enum):
    """How the bounds of a confidence interval were computed."""

    THEORETICAL = "theoretical"
    EMPIRICAL = "empirical"


class Aggregate(BaseModel):
    """Count, sum, average and nearest-rank P99 of an event set."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(..., ge=0, description="Number of events")
    sum: float = Field(..., description="Sum of event values")
    average: float = Field(..., description="Mean event value")
    p99: float = Field(..., description="Nearest-rank 99th percentile")


class ConfidenceInterval(BaseModel):
    """Two-sided interval over a metric estimated from sampled trials."""

    model_config = ConfigDict(frozen=True)

    lower: float
    upper: float
    mean: float = Field(..., description="Empirical mean of the per-trial estimates")
    method: IntervalMethod = IntervalMethod.EMPIRICAL

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper


class TrialResult(BaseModel):
    """Aggregates of one freshly generated population and of its sample."""

    model_config = ConfigDict(frozen=True)

    trial_index: int = Field(..., ge=0)
    true_aggregate: Aggregate
    sampled_aggregate: Aggregate = Field(
        ..., description="Aggregate of the sampled subset, without scaling"
    )
    estimate: Aggregate = Field(
        ..., description="Sampled aggregate with count and sum scaled by the sample rate"
    )


class SimulationRun(BaseModel):
    """Immutable bundle produced by one orchestration call."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    volume: int = Field(..., ge=1)
    sample_rate: int = Field(..., ge=1)
    distribution: Distribution
    num_trials: int = Field(..., ge=1)
    sampling_method: SamplingMethod
    confidence_level: float
    true_aggregate: Aggregate = Field(
        ..., description="Aggregate of the dedicated reference population"
    )
    per_metric: Dict[Metric, ConfidenceInterval]
    per_trial: Dict[Metric, List[Tuple[float, float]]] = Field(
        ..., description="Per-trial (true value, sampled estimate) pairs"
    )
    trials: List[TrialResult] = Field(default_factory=list)
    mean_sample_size: float = Field(..., description="Average sampled events per trial")
    validation: Dict[str, Any] = Field(default_factory=dict)
    reference_population: Optional[Population] = None
    reference_sample: Optional[Population] = None

    @property
    def expected_sampled_events(self) -> int:
        return math.ceil(self.volume / self.sample_rate)

    @property
    def sampling_ratio_pct(self) -> float:
        return 100.0 / self.sample_rate

    @property
    def theoretical_error_pct(self) -> float:
        return theoretical_error_pct(self.volume, self.sample_rate)

    def summary_frame(self) -> pd.DataFrame:
        """Return one row per metric comparing the estimate with the true value."""
        rows = []
        for metric, interval in self.per_metric.items():
            true_value = metric.value_of(self.true_aggregate)
            rows.append(
                {
                    "metric": metric.value,
                    "true_value": true_value,
                    "estimate": interval.mean,
                    "lower": interval.lower,
                    "upper": interval.upper,
                    "relative_error_pct": relative_error_pct(interval.mean, true_value),
                    "method": interval.method.value,
                }
            )
        return pd.DataFrame(rows)

    def trial_frame(self) -> pd.DataFrame:
        """Return per-trial true and sampled values in wide form."""
        payload: Dict[str, List[float]] = {"trial": list(range(1, self.num_trials + 1))}
        for metric, pairs in self.per_trial.items():
            payload[f"true_{metric.value}"] = [pair[0] for pair in pairs]
            payload[f"sampled_{metric.value}"] = [pair[1] for pair in pairs]
        return pd.DataFrame(payload)


__all__ = [
    "Metric",
    "IntervalMethod",
    "Aggregate",
    "ConfidenceInterval",
    "TrialResult",
    "SimulationRun",
]
