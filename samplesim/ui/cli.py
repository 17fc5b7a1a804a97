"""Typer-based command line interface for running sampling simulations."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from samplesim.config import LOG_FORMAT, LOG_LEVEL
from samplesim.core.distributions import Distribution
from samplesim.core.event_generator import MAX_EVENTS
from samplesim.core.monte_carlo import SimulationConfig, trial_count_for_volume
from samplesim.core.sampler import SamplingMethod
from samplesim.core.validator import CapacityExceededError, SimulationError
from samplesim.engine import SimulationEngine
from samplesim.models.monte_carlo import TrialProgressEvent
from samplesim.models.results import IntervalMethod, Metric, SimulationRun
from samplesim.utils.numbers import decimalize, format_number

app = typer.Typer(help="Estimate aggregate statistics from sampled events and quantify sampling error")
console = Console()

METRIC_LABELS = {
    Metric.COUNT: "Count",
    Metric.SUM: "Sum",
    Metric.AVERAGE: "Average",
    Metric.P99: "P99",
}


def _configure_logging(level: Optional[str]) -> None:
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)


def _format_pct(value: float) -> str:
    return "n/a" if math.isnan(value) else f"{value:+.1f}%"


def _print_run_summary(run: SimulationRun) -> None:
    console.print("\n[bold]Simulation Summary[/bold]")
    console.print(
        f"Total events: {run.volume:,}  |  Sampled events: {run.expected_sampled_events:,}  |  "
        f"Sampling ratio: {run.sampling_ratio_pct:.1f}%  |  "
        f"Theoretical error: ±{run.theoretical_error_pct:.2f}%"
    )
    console.print(
        f"Distribution: {run.distribution.label}  |  Trials: {run.num_trials}  |  "
        f"Sampling: {run.sampling_method.value}"
    )


def _build_metric_table(run: SimulationRun) -> Table:
    level = f"{run.confidence_level:.0%}"
    table = Table(title="Sampled vs True Aggregates", show_lines=False)
    for column in ["Metric", "True", "Sampled", "Error", f"{level} CI", "Method"]:
        table.add_column(column, justify="left" if column in ("Metric", "Method") else "right")
    for row in run.summary_frame().itertuples(index=False):
        table.add_row(
            METRIC_LABELS[Metric(row.metric)],
            format_number(row.true_value),
            format_number(row.estimate),
            _format_pct(row.relative_error_pct),
            f"[{format_number(row.lower)}, {format_number(row.upper)}]",
            row.method,
        )
    return table


def _print_validation(run: SimulationRun) -> None:
    warnings = run.validation.get("warnings", [])
    failed = run.validation.get("failed_checks", [])
    for check in failed:
        console.print(f"[red]Check failed: {check}[/red]")
    for warning in warnings:
        console.print(f"[yellow]{warning}[/yellow]")


def _export_charts(run: SimulationRun, output: Path, y_axis_mode: str) -> Path:
    # Delayed import keeps plotly off the startup path for plain runs.
    from samplesim.visualization import (
        plot_confidence_intervals,
        plot_distribution_density,
        plot_p99_scatter,
        write_figures_html,
    )

    figures = [
        plot_distribution_density(run.distribution),
        plot_p99_scatter(run, y_axis_mode=y_axis_mode),
        plot_confidence_intervals(run),
    ]
    return write_figures_html(figures, output)


@app.command()
def simulate(
    volume: int = typer.Option(100_000, help=f"Events per population (max {MAX_EVENTS:,})"),
    sample_rate: int = typer.Option(10, "--sample-rate", "-r", help="Keep 1 in N events"),
    distribution: Distribution = typer.Option(Distribution.EXPONENTIAL, help="Event value distribution"),
    trials: Optional[int] = typer.Option(None, help="Number of trials (defaults to a volume-based policy)"),
    sampling: SamplingMethod = typer.Option(SamplingMethod.SYSTEMATIC, help="Sampling discipline"),
    confidence: float = typer.Option(0.95, help="Confidence level (0.95 or 95)"),
    interval_method: IntervalMethod = typer.Option(
        IntervalMethod.THEORETICAL, "--interval-method", help="Preferred interval method"
    ),
    seed: Optional[int] = typer.Option(None, help="Random seed (leave blank for random)"),
    workers: int = typer.Option(1, help="Worker threads for independent trials"),
    html: Optional[Path] = typer.Option(None, help="Write charts to this HTML file"),
    y_axis: str = typer.Option("full", "--y-axis", help="P99 chart y-axis mode: full or zoom"),
    log_level: Optional[str] = typer.Option(None, help="Logging level (default from SAMPLESIM_LOG_LEVEL)"),
) -> None:
    """Run repeated sampling trials and report confidence intervals."""
    _configure_logging(log_level)
    if y_axis not in ("full", "zoom"):
        raise typer.BadParameter("--y-axis must be either 'full' or 'zoom'")
    num_trials = trials if trials is not None else trial_count_for_volume(volume)

    try:
        config = SimulationConfig(
            sampling_method=sampling,
            confidence_level=decimalize(confidence),
            interval_method=interval_method,
            random_seed=seed,
            max_workers=workers,
        )
        engine = SimulationEngine(config)
        with console.status(f"Running {num_trials} simulations...") as status:

            def _on_trial(event: TrialProgressEvent) -> None:
                status.update(f"Simulation {event.trial_index}/{event.total_trials}")

            run = engine.run(
                volume,
                sample_rate,
                distribution,
                num_trials,
                progress_observer=_on_trial,
            )
    except CapacityExceededError as exc:
        console.print(f"[red]Volume too large - maximum {MAX_EVENTS:,} events supported ({exc})[/red]")
        raise typer.Exit(code=2) from exc
    except MemoryError as exc:
        console.print("[red]Insufficient memory - reduce volume or number of trials[/red]")
        raise typer.Exit(code=2) from exc
    except SimulationError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(code=2) from exc

    _print_run_summary(run)
    console.print(_build_metric_table(run))
    _print_validation(run)
    console.print(f"\n[bold green]Completed {run.num_trials} simulations[/bold green]")

    if html is not None:
        path = _export_charts(run, html, y_axis)
        console.print(f"Charts exported to: {path}")


@app.command()
def distributions() -> None:
    """List the supported distributions with their theoretical moments."""
    table = Table(title="Supported Distributions")
    for column in ["Name", "Description", "Mean", "Std Dev", "P99"]:
        table.add_column(column, justify="left" if column in ("Name", "Description") else "right")
    for family in Distribution:
        table.add_row(
            family.value,
            family.label,
            f"{family.mean:.2f}",
            f"{family.variance ** 0.5:.2f}",
            f"{family.quantile(0.99):.2f}",
        )
    console.print(table)


def main() -> None:
    """Entry point for CLI execution."""
    app()


if __name__ == "__main__":
    main()
