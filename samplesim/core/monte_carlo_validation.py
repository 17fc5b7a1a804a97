"""Validation helpers for simulation runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Mapping, Sequence, Tuple

import numpy as np

from ..models.results import ConfidenceInterval, IntervalMethod, Metric
from ..utils.numbers import relative_error_pct, theoretical_error_pct

if TYPE_CHECKING:
    from ..models.results import SimulationRun


@dataclass
class ValidationResult:
    """Basic container for validation outcomes."""

    status: str
    failed_checks: Sequence[str]
    warnings: Sequence[str]

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": self.status,
            "failed_checks": list(self.failed_checks),
            "warnings": list(self.warnings),
        }


def validate_trial_values(
    per_trial: Mapping[Metric, Sequence[Tuple[float, float]]],
) -> ValidationResult:
    """Flag non-finite per-trial values."""
    failed: list[str] = []
    warnings: list[str] = []
    if not per_trial:
        failed.append("no_trial_values")
        return ValidationResult(status="FAIL", failed_checks=failed, warnings=warnings)

    for metric, pairs in per_trial.items():
        stacked = np.asarray(pairs, dtype=float)
        if stacked.size == 0:
            failed.append(f"no_trial_values_{metric.value}")
        elif not np.all(np.isfinite(stacked)):
            failed.append(f"nan_or_inf_{metric.value}")

    status = "PASS" if not failed else "FAIL"
    return ValidationResult(status=status, failed_checks=failed, warnings=warnings)


def validate_intervals(
    per_metric: Mapping[Metric, ConfidenceInterval],
    *,
    true_average: float,
    volume: int,
    sample_rate: int,
    preferred_method: IntervalMethod = IntervalMethod.THEORETICAL,
) -> ValidationResult:
    """Check interval ordering and compare the sampled average with the error bound."""
    failed: list[str] = []
    warnings: list[str] = []

    for metric, interval in per_metric.items():
        if interval.lower > interval.upper:
            failed.append(f"interval_order_{metric.value}")
        elif not interval.contains(interval.mean):
            warnings.append(f"estimate_outside_interval_{metric.value}")
        if interval.method is not preferred_method:
            warnings.append(f"empirical_fallback_{metric.value}")

    average = per_metric.get(Metric.AVERAGE)
    if average is not None and true_average != 0:
        error = abs(relative_error_pct(average.mean, true_average))
        if error > theoretical_error_pct(volume, sample_rate):
            warnings.append("average_error_exceeds_theoretical_bound")

    status = "PASS" if not failed else "FAIL"
    return ValidationResult(status=status, failed_checks=failed, warnings=warnings)


def validate_simulation_run(run: "SimulationRun") -> ValidationResult:
    """Combine trial and interval checks for a finished run."""
    trials = validate_trial_values(run.per_trial)
    intervals = validate_intervals(
        run.per_metric,
        true_average=run.true_aggregate.average,
        volume=run.volume,
        sample_rate=run.sample_rate,
    )
    failed = list(trials.failed_checks) + list(intervals.failed_checks)
    warnings = list(trials.warnings) + list(intervals.warnings)
    status = "PASS" if not failed else "FAIL"
    return ValidationResult(status=status, failed_checks=failed, warnings=warnings)


__all__ = [
    "ValidationResult",
    "validate_trial_values",
    "validate_intervals",
    "validate_simulation_run",
]
