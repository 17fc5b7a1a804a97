"""Sampling strategies that reduce a population to a subset."""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional, Union

import numpy as np

from .event_generator import Population
from .validator import ValidationError, validate_sample_rate


class SamplingMethod(str, Enum):
    """Supported sampling disciplines."""

    SYSTEMATIC = "systematic"
    BERNOULLI = "bernoulli"

    @classmethod
    def parse(cls, value: Union[str, "SamplingMethod"]) -> "SamplingMethod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            supported = ", ".join(member.value for member in cls)
            raise ValidationError(
                f"Unsupported sampling method {value!r}; choose one of: {supported}"
            ) from None


def systematic_sample(population: Population, sample_rate: int) -> Population:
    """Keep every ``sample_rate``-th event starting at index 0."""
    sample_rate = validate_sample_rate(sample_rate)
    return population.take(slice(0, None, sample_rate))


def bernoulli_sample(
    population: Population,
    sample_rate: int,
    rng: Optional[np.random.Generator] = None,
) -> Population:
    """Keep each event independently with probability ``1 / sample_rate``."""
    sample_rate = validate_sample_rate(sample_rate)
    rng = rng if rng is not None else np.random.default_rng()
    keep = rng.random(len(population)) < 1.0 / sample_rate
    return population.take(np.flatnonzero(keep))


def sample_events(
    population: Population,
    sample_rate: int,
    method: Union[str, SamplingMethod] = SamplingMethod.SYSTEMATIC,
    *,
    rng: Optional[np.random.Generator] = None,
) -> Population:
    """Dispatch to the configured sampling discipline."""
    method = SamplingMethod.parse(method)
    if method is SamplingMethod.SYSTEMATIC:
        return systematic_sample(population, sample_rate)
    return bernoulli_sample(population, sample_rate, rng)


def expected_sample_size(
    population_size: int,
    sample_rate: int,
    method: Union[str, SamplingMethod] = SamplingMethod.SYSTEMATIC,
) -> float:
    """Exact size for systematic sampling, expected size for Bernoulli."""
    sample_rate = validate_sample_rate(sample_rate)
    if SamplingMethod.parse(method) is SamplingMethod.SYSTEMATIC:
        return float(math.ceil(population_size / sample_rate))
    return population_size / sample_rate


__all__ = [
    "SamplingMethod",
    "systematic_sample",
    "bernoulli_sample",
    "sample_events",
    "expected_sample_size",
]
