"""Simulation configuration and random-stream utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from ..models.results import IntervalMethod
from .confidence import DEFAULT_CONFIDENCE_LEVEL
from .sampler import SamplingMethod
from .validator import ValidationError, validate_confidence_level


def trial_count_for_volume(volume: int) -> int:
    """Number of repeated trials to run for a population of ``volume`` events."""
    if volume > 1_000_000:
        return 10  # Fewer trials for very large populations
    if volume > 100_000:
        return 20
    return 50


@dataclass
class SimulationConfig:
    """Configuration bundle for repeated sampling simulations."""

    sampling_method: SamplingMethod = SamplingMethod.SYSTEMATIC
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    interval_method: IntervalMethod = IntervalMethod.THEORETICAL
    random_seed: Optional[int] = None
    max_workers: int = 1
    retain_reference_population: bool = False

    def __post_init__(self) -> None:
        self.sampling_method = SamplingMethod.parse(self.sampling_method)
        self.interval_method = IntervalMethod(self.interval_method)
        self.confidence_level = validate_confidence_level(self.confidence_level)
        if int(self.max_workers) < 1:
            raise ValidationError(f"max_workers must be >= 1, got {self.max_workers}")
        self.max_workers = int(self.max_workers)

    def to_metadata(self) -> Dict[str, object]:
        """Serialise into a plain dictionary."""
        return {
            "sampling_method": self.sampling_method.value,
            "confidence_level": float(self.confidence_level),
            "interval_method": self.interval_method.value,
            "random_seed": self.random_seed,
            "max_workers": int(self.max_workers),
            "retain_reference_population": bool(self.retain_reference_population),
        }

    @classmethod
    def from_metadata(cls, metadata: Dict[str, object]) -> "SimulationConfig":
        """Rehydrate a configuration from a metadata dictionary."""
        seed = metadata.get("random_seed")
        return SimulationConfig(
            sampling_method=SamplingMethod.parse(str(metadata.get("sampling_method", "systematic"))),
            confidence_level=float(metadata.get("confidence_level", DEFAULT_CONFIDENCE_LEVEL)),
            interval_method=IntervalMethod(str(metadata.get("interval_method", "theoretical"))),
            random_seed=int(seed) if seed is not None else None,
            max_workers=int(metadata.get("max_workers", 1)),
            retain_reference_population=bool(metadata.get("retain_reference_population", False)),
        )


def spawn_trial_generators(random_seed: Optional[int], num_trials: int) -> List[np.random.Generator]:
    """Independent generators: index 0 for the reference population, then one per trial."""
    children = np.random.SeedSequence(random_seed).spawn(num_trials + 1)
    return [np.random.default_rng(child) for child in children]


__all__ = ["SimulationConfig", "trial_count_for_volume", "spawn_trial_generators"]
