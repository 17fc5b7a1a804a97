"""Visualization utilities for sampling simulations."""

from __future__ import annotations

from .simulation_plots import (
    distribution_density_data,
    plot_confidence_intervals,
    plot_distribution_density,
    plot_p99_scatter,
    write_figures_html,
)

__all__ = [
    "distribution_density_data",
    "plot_confidence_intervals",
    "plot_distribution_density",
    "plot_p99_scatter",
    "write_figures_html",
]
