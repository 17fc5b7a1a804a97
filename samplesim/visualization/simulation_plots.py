"""Visualization helpers for sampling simulation results."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from ..core.distributions import Distribution
from ..engine import compute_reference_stats
from ..models.results import Metric, SimulationRun
from .themes import DEFAULT_THEME

Y_AXIS_MODES = ("full", "zoom")


def _apply_theme(fig: go.Figure, theme: dict) -> go.Figure:
    fig.update_layout(**theme["plotly_template"]["layout"])
    return fig


def distribution_density_data(
    distribution: Union[str, Distribution],
    num_points: int = 200,
) -> pd.DataFrame:
    """Evaluate the theoretical density on an even grid over the family's plot range."""
    family = Distribution.parse(distribution)
    min_x, max_x = family.plot_range
    xs = np.linspace(min_x, max_x, num_points + 1)
    return pd.DataFrame({"x": xs, "density": family.density(xs)})


def plot_distribution_density(
    distribution: Union[str, Distribution],
    *,
    average: Optional[float] = None,
    p99: Optional[float] = None,
    theme: Optional[dict] = None,
) -> go.Figure:
    """Density curve with dashed markers at the average and the P99.

    Markers default to simulated reference statistics of the distribution.
    """
    theme = theme or DEFAULT_THEME
    palette = theme["palette"]
    family = Distribution.parse(distribution)
    if average is None or p99 is None:
        simulated_average, simulated_p99 = compute_reference_stats(family)
        average = simulated_average if average is None else average
        p99 = simulated_p99 if p99 is None else p99

    data = distribution_density_data(family)
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=data["x"],
            y=data["density"],
            mode="lines",
            fill="tozeroy",
            fillcolor=palette["density_fill"],
            line=dict(color=palette["density"], width=2),
            name="Probability Density",
            hovertemplate="Value %{x:.1f}<br>Density %{y:.5f}<extra></extra>",
        )
    )
    fig.add_vline(
        x=average,
        line=dict(color=palette["average_marker"], width=2, dash="dash"),
        annotation_text=f"Avg: {average:.1f}",
        annotation_position="top right",
    )
    fig.add_vline(
        x=p99,
        line=dict(color=palette["p99_marker"], width=2, dash="dash"),
        annotation_text=f"P99: {p99:.1f}",
        annotation_position="bottom right",
    )
    fig.update_layout(
        title=family.label,
        xaxis_title="Value",
        yaxis=dict(title="Probability Density", rangemode="tozero"),
        showlegend=False,
        hovermode="x",
    )
    return _apply_theme(fig, theme)


def plot_p99_scatter(
    run: SimulationRun,
    *,
    y_axis_mode: str = "full",
    theme: Optional[dict] = None,
) -> go.Figure:
    """True versus sampled P99 for every trial of ``run``.

    ``y_axis_mode="full"`` anchors the y-axis at zero, ``"zoom"`` fits the data.
    """
    if y_axis_mode not in Y_AXIS_MODES:
        raise ValueError(f"y_axis_mode must be one of {Y_AXIS_MODES}, got {y_axis_mode!r}")
    theme = theme or DEFAULT_THEME
    palette = theme["palette"]
    pairs = run.per_trial[Metric.P99]
    simulations = list(range(1, len(pairs) + 1))

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=simulations,
            y=[true_value for true_value, _ in pairs],
            mode="markers",
            name="True P99",
            marker=dict(color=palette["true_value"], size=8),
        )
    )
    fig.add_trace(
        go.Scatter(
            x=simulations,
            y=[sampled for _, sampled in pairs],
            mode="markers",
            name="Sampled P99",
            marker=dict(color=palette["sampled_value"], size=9, symbol="square"),
        )
    )
    fig.update_layout(
        title="P99 For Each Simulation, Before and After Sampling",
        xaxis=dict(title="Simulation Number", range=[0.5, len(pairs) + 0.5]),
        yaxis=dict(
            title="P99 Value",
            rangemode="tozero" if y_axis_mode == "full" else "normal",
        ),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0),
    )
    return _apply_theme(fig, theme)


def plot_confidence_intervals(
    run: SimulationRun,
    *,
    theme: Optional[dict] = None,
) -> go.Figure:
    """Relative error of each metric estimate, with its interval as error bars."""
    theme = theme or DEFAULT_THEME
    palette = theme["palette"]
    summary = run.summary_frame()
    true_values = summary["true_value"].replace(0.0, np.nan)
    estimate_pct = (summary["estimate"] - true_values) / true_values * 100.0
    lower_pct = (summary["lower"] - true_values) / true_values * 100.0
    upper_pct = (summary["upper"] - true_values) / true_values * 100.0

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=summary["metric"],
            y=estimate_pct,
            mode="markers",
            name="Sampled estimate",
            marker=dict(color=palette["interval"], size=10),
            error_y=dict(
                type="data",
                symmetric=False,
                array=upper_pct - estimate_pct,
                arrayminus=estimate_pct - lower_pct,
                color=palette["interval"],
            ),
            customdata=summary["method"],
            hovertemplate="%{x}: %{y:.2f}%<br>Method %{customdata}<extra></extra>",
        )
    )
    fig.add_hline(y=0.0, line=dict(color=palette["true_value"], width=2, dash="dot"))
    fig.update_layout(
        title=f"{run.confidence_level:.0%} Confidence Intervals Relative to True Values",
        xaxis_title="Metric",
        yaxis_title="Error vs true value (%)",
        showlegend=False,
    )
    return _apply_theme(fig, theme)


def write_figures_html(figures: Iterable[go.Figure], output_path: Union[str, Path]) -> Path:
    """Write several figures into a single standalone HTML page."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    parts = [
        fig.to_html(full_html=False, include_plotlyjs="cdn" if idx == 0 else False)
        for idx, fig in enumerate(figures)
    ]
    output_path.write_text(
        "<html><head><meta charset='utf-8'></head><body>\n"
        + "\n".join(parts)
        + "\n</body></html>",
        encoding="utf-8",
    )
    return output_path


__all__ = [
    "distribution_density_data",
    "plot_distribution_density",
    "plot_p99_scatter",
    "plot_confidence_intervals",
    "write_figures_html",
]
