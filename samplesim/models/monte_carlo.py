"""Data models for simulation progress streaming."""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TrialProgressEvent:
    """
    Represents a single completed trial of a simulation run.

    The event is designed for streaming to a presentation layer and therefore
    keeps the payload concise: the trial's true and sampled headline values
    plus the running mean of the sampled averages.
    """

    trial_index: int
    total_trials: int
    true_average: float
    sampled_average: float
    true_p99: float
    sampled_p99: float
    cumulative_mean_average: float
    sampled_events: int
    timestamp: float = field(default_factory=time.time)

    @property
    def fraction_complete(self) -> float:
        return self.trial_index / self.total_trials if self.total_trials else 1.0


__all__ = ["TrialProgressEvent"]
