"""Parametric event-value distributions.

Each supported family is a small frozen dataclass with its shape constants
baked in. :class:`Distribution` is the closed set of families exposed to the
rest of the engine; members delegate to their family object.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

import numpy as np

from .special_functions import normal_inverse
from .validator import DomainError, ValidationError

ArrayOrFloat = Union[float, np.ndarray]


def _open_unit(rng: np.random.Generator, size: int) -> np.ndarray:
    """Uniform deviates on (0, 1] so that logarithms stay finite."""
    return 1.0 - rng.random(size)


def _box_muller(rng: np.random.Generator, size: int) -> np.ndarray:
    u1 = _open_unit(rng, size)
    u2 = rng.random(size)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def _check_probability(p: float) -> float:
    p = float(p)
    if not 0.0 < p < 1.0:
        raise DomainError(f"Quantile requires 0 < p < 1, got {p}")
    return p


def _finish(values: np.ndarray, scalar: bool) -> ArrayOrFloat:
    return float(values) if scalar else values


@dataclass(frozen=True)
class ExponentialFamily:
    scale: float = 100.0
    label: str = "Exponential Distribution (scale=100)"
    plot_range: Tuple[float, float] = (0.0, 500.0)

    def sample_batch(self, rng: np.random.Generator, size: int) -> np.ndarray:
        return -np.log(_open_unit(rng, size)) * self.scale

    def density(self, x: ArrayOrFloat) -> ArrayOrFloat:
        arr = np.asarray(x, dtype=float)
        rate = 1.0 / self.scale
        values = np.where(arr >= 0.0, rate * np.exp(-rate * np.maximum(arr, 0.0)), 0.0)
        return _finish(values, arr.ndim == 0)

    @property
    def mean(self) -> float:
        return self.scale

    @property
    def variance(self) -> float:
        return self.scale**2

    def quantile(self, p: float) -> float:
        p = _check_probability(p)
        return -self.scale * math.log1p(-p)


@dataclass(frozen=True)
class NormalFamily:
    mu: float = 100.0
    sigma: float = 20.0
    label: str = "Normal Distribution (mu=100, sigma=20)"
    plot_range: Tuple[float, float] = (20.0, 180.0)

    def sample_batch(self, rng: np.random.Generator, size: int) -> np.ndarray:
        return self.mu + self.sigma * _box_muller(rng, size)

    def density(self, x: ArrayOrFloat) -> ArrayOrFloat:
        arr = np.asarray(x, dtype=float)
        z = (arr - self.mu) / self.sigma
        values = np.exp(-0.5 * z * z) / (self.sigma * math.sqrt(2.0 * math.pi))
        return _finish(values, arr.ndim == 0)

    @property
    def mean(self) -> float:
        return self.mu

    @property
    def variance(self) -> float:
        return self.sigma**2

    def quantile(self, p: float) -> float:
        return self.mu + self.sigma * normal_inverse(_check_probability(p))


@dataclass(frozen=True)
class UniformFamily:
    low: float = 0.0
    high: float = 200.0
    label: str = "Uniform Distribution (0-200)"
    plot_range: Tuple[float, float] = (0.0, 200.0)

    def sample_batch(self, rng: np.random.Generator, size: int) -> np.ndarray:
        return self.low + rng.random(size) * (self.high - self.low)

    def density(self, x: ArrayOrFloat) -> ArrayOrFloat:
        arr = np.asarray(x, dtype=float)
        width = self.high - self.low
        values = np.where((arr >= self.low) & (arr <= self.high), 1.0 / width, 0.0)
        return _finish(values, arr.ndim == 0)

    @property
    def mean(self) -> float:
        return 0.5 * (self.low + self.high)

    @property
    def variance(self) -> float:
        return (self.high - self.low) ** 2 / 12.0

    def quantile(self, p: float) -> float:
        return self.low + _check_probability(p) * (self.high - self.low)


@dataclass(frozen=True)
class LogNormalFamily:
    mu: float = 4.0
    sigma: float = 1.0
    label: str = "Log-Normal Distribution (mu=4, sigma=1)"
    plot_range: Tuple[float, float] = (1.0, 300.0)

    def sample_batch(self, rng: np.random.Generator, size: int) -> np.ndarray:
        return np.exp(self.mu + self.sigma * _box_muller(rng, size))

    def density(self, x: ArrayOrFloat) -> ArrayOrFloat:
        arr = np.asarray(x, dtype=float)
        positive = arr > 0.0
        safe = np.where(positive, arr, 1.0)
        z = (np.log(safe) - self.mu) / self.sigma
        pdf = np.exp(-0.5 * z * z) / (safe * self.sigma * math.sqrt(2.0 * math.pi))
        values = np.where(positive, pdf, 0.0)
        return _finish(values, arr.ndim == 0)

    @property
    def mean(self) -> float:
        return math.exp(self.mu + 0.5 * self.sigma**2)

    @property
    def variance(self) -> float:
        s2 = self.sigma**2
        return (math.exp(s2) - 1.0) * math.exp(2.0 * self.mu + s2)

    def quantile(self, p: float) -> float:
        return math.exp(self.mu + self.sigma * normal_inverse(_check_probability(p)))


@dataclass(frozen=True)
class BimodalFamily:
    """Equal mixture of two uniform components of equal width."""

    first: Tuple[float, float] = (25.0, 75.0)
    second: Tuple[float, float] = (125.0, 175.0)
    label: str = "Bimodal Distribution"
    plot_range: Tuple[float, float] = (0.0, 200.0)

    @property
    def width(self) -> float:
        return self.first[1] - self.first[0]

    def sample_batch(self, rng: np.random.Generator, size: int) -> np.ndarray:
        pick_first = rng.random(size) < 0.5
        offsets = rng.random(size) * self.width
        return np.where(pick_first, self.first[0], self.second[0]) + offsets

    def density(self, x: ArrayOrFloat) -> ArrayOrFloat:
        arr = np.asarray(x, dtype=float)
        in_first = (arr >= self.first[0]) & (arr <= self.first[1])
        in_second = (arr >= self.second[0]) & (arr <= self.second[1])
        component = 1.0 / self.width
        values = 0.5 * np.where(in_first, component, 0.0) + 0.5 * np.where(in_second, component, 0.0)
        return _finish(values, arr.ndim == 0)

    @property
    def mean(self) -> float:
        return 0.5 * (sum(self.first) / 2.0 + sum(self.second) / 2.0)

    @property
    def variance(self) -> float:
        within = self.width**2 / 12.0
        m1 = sum(self.first) / 2.0
        m2 = sum(self.second) / 2.0
        overall = 0.5 * (m1 + m2)
        between = 0.5 * (m1 - overall) ** 2 + 0.5 * (m2 - overall) ** 2
        return within + between

    def quantile(self, p: float) -> float:
        p = _check_probability(p)
        # Piecewise linear: each half of the probability mass covers one component.
        if p < 0.5:
            return self.first[0] + (p / 0.5) * self.width
        return self.second[0] + ((p - 0.5) / 0.5) * self.width


DistributionFamily = Union[
    ExponentialFamily, NormalFamily, UniformFamily, LogNormalFamily, BimodalFamily
]


class Distribution(str, Enum):
    """Supported event-value distributions."""

    EXPONENTIAL = "exponential"
    NORMAL = "normal"
    UNIFORM = "uniform"
    LOGNORMAL = "lognormal"
    BIMODAL = "bimodal"

    @classmethod
    def parse(cls, value: Union[str, "Distribution"]) -> "Distribution":
        """Resolve a member from an enum value or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            supported = ", ".join(member.value for member in cls)
            raise ValidationError(
                f"Unsupported distribution {value!r}; choose one of: {supported}"
            ) from None

    @property
    def family(self) -> DistributionFamily:
        return _FAMILIES[self]

    @property
    def label(self) -> str:
        return self.family.label

    @property
    def plot_range(self) -> Tuple[float, float]:
        return self.family.plot_range

    @property
    def mean(self) -> float:
        return self.family.mean

    @property
    def variance(self) -> float:
        return self.family.variance

    def sample(self, rng: np.random.Generator) -> float:
        """Draw a single value."""
        return float(self.family.sample_batch(rng, 1)[0])

    def sample_batch(self, rng: np.random.Generator, size: int) -> np.ndarray:
        return self.family.sample_batch(rng, size)

    def density(self, x: ArrayOrFloat) -> ArrayOrFloat:
        return self.family.density(x)

    def quantile(self, p: float) -> float:
        return self.family.quantile(p)


_FAMILIES = {
    Distribution.EXPONENTIAL: ExponentialFamily(),
    Distribution.NORMAL: NormalFamily(),
    Distribution.UNIFORM: UniformFamily(),
    Distribution.LOGNORMAL: LogNormalFamily(),
    Distribution.BIMODAL: BimodalFamily(),
}


__all__ = [
    "Distribution",
    "DistributionFamily",
    "ExponentialFamily",
    "NormalFamily",
    "UniformFamily",
    "LogNormalFamily",
    "BimodalFamily",
]
