"""Numeric helper functions shared across the application."""

from __future__ import annotations

import math
from typing import Optional


def decimalize(value: Optional[float]) -> Optional[float]:
    """Convert percentage-based inputs to decimals while preserving None."""
    if value is None:
        return None
    if value > 1.5:
        return float(value / 100.0)
    return float(value)


def format_number(num: float, decimals: int = 2) -> str:
    """Abbreviate large numbers with K/M suffixes for display."""
    if num > 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num > 1_000:
        return f"{num / 1_000:.1f}K"
    return f"{num:.{decimals}f}"


def relative_error_pct(estimate: float, truth: float) -> float:
    """Signed error of ``estimate`` relative to ``truth`` in percent (NaN if truth is 0)."""
    if truth == 0:
        return math.nan
    return (estimate - truth) / truth * 100.0


def theoretical_error_pct(volume: int, sample_rate: int) -> float:
    """Rule-of-thumb sampling error, ``100 / sqrt(sampled events)`` percent."""
    return 100.0 / math.sqrt(volume / sample_rate)


__all__ = ["decimalize", "format_number", "relative_error_pct", "theoretical_error_pct"]
