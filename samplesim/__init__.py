"""Sampling-error simulator for count, sum, average and P99 aggregates."""

from __future__ import annotations

from .core.distributions import Distribution
from .core.event_generator import MAX_EVENTS, Population, generate_events
from .core.monte_carlo import SimulationConfig
from .core.sampler import SamplingMethod
from .core.validator import (
    CapacityExceededError,
    DomainError,
    EmptyAggregateError,
    SimulationBusyError,
    SimulationError,
    ValidationError,
)
from .engine import SimulationEngine, run_simulations
from .models.results import (
    Aggregate,
    ConfidenceInterval,
    IntervalMethod,
    Metric,
    SimulationRun,
    TrialResult,
)

__version__ = "0.1.0"

__all__ = [
    "Aggregate",
    "CapacityExceededError",
    "ConfidenceInterval",
    "Distribution",
    "DomainError",
    "EmptyAggregateError",
    "IntervalMethod",
    "MAX_EVENTS",
    "Metric",
    "Population",
    "SamplingMethod",
    "SimulationBusyError",
    "SimulationConfig",
    "SimulationEngine",
    "SimulationError",
    "SimulationRun",
    "TrialResult",
    "ValidationError",
    "generate_events",
    "run_simulations",
]
