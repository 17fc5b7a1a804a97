"""Error taxonomy and input validation utilities."""

from __future__ import annotations


class SimulationError(Exception):
    """Base class for errors raised by the simulation engine."""


class ValidationError(SimulationError, ValueError):
    """Custom error for invalid simulation parameters."""


class CapacityExceededError(ValidationError):
    """Requested population is larger than the hard event ceiling."""

    def __init__(self, requested: int, maximum: int, *, label: str = "Event count") -> None:
        self.requested = int(requested)
        self.maximum = int(maximum)
        super().__init__(
            f"{label} {self.requested:,} exceeds maximum of {self.maximum:,} events"
        )


class DomainError(SimulationError, ValueError):
    """Input outside the domain of a numerical routine."""


class EmptyAggregateError(SimulationError, ZeroDivisionError):
    """Aggregation was requested over zero events."""


class SimulationBusyError(SimulationError, RuntimeError):
    """A simulation run is already in flight."""


def validate_event_count(count: int, maximum: int, *, label: str = "Event count") -> int:
    """Ensure a population size is a non-negative integer within the ceiling."""
    if isinstance(count, bool) or int(count) != count:
        raise ValidationError(f"{label} must be an integer, got {count!r}")
    count = int(count)
    if count < 0:
        raise ValidationError(f"{label} must be non-negative, got {count}")
    if count > maximum:
        raise CapacityExceededError(count, maximum, label=label)
    return count


def validate_volume(volume: int, maximum: int) -> int:
    """Validate the population size of a simulation run."""
    volume = validate_event_count(volume, maximum, label="Volume")
    if volume < 1:
        raise ValidationError("Volume must be at least 1 event")
    return volume


def validate_sample_rate(sample_rate: int) -> int:
    """Ensure the 1-in-N sample rate is a positive integer."""
    if isinstance(sample_rate, bool) or int(sample_rate) != sample_rate:
        raise ValidationError(f"Sample rate must be an integer, got {sample_rate!r}")
    if sample_rate < 1:
        raise ValidationError(f"Sample rate must be >= 1, got {sample_rate}")
    return int(sample_rate)


def validate_num_trials(num_trials: int) -> int:
    """Ensure the number of repeated trials is a positive integer."""
    if isinstance(num_trials, bool) or int(num_trials) != num_trials:
        raise ValidationError(f"Number of trials must be an integer, got {num_trials!r}")
    if num_trials < 1:
        raise ValidationError(f"Number of trials must be >= 1, got {num_trials}")
    return int(num_trials)


def validate_confidence_level(level: float) -> float:
    """Ensure the confidence level lies strictly between 0 and 1."""
    level = float(level)
    if not 0.0 < level < 1.0:
        raise ValidationError(f"Confidence level must be in (0, 1), got {level}")
    return level


__all__ = [
    "SimulationError",
    "ValidationError",
    "CapacityExceededError",
    "DomainError",
    "EmptyAggregateError",
    "SimulationBusyError",
    "validate_event_count",
    "validate_volume",
    "validate_sample_rate",
    "validate_num_trials",
    "validate_confidence_level",
]
