"""High-level orchestration of repeated sampling simulations."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Tuple, Union

import numpy as np

from .core.aggregator import aggregate, scale_aggregate
from .core.confidence import EstimationContext, estimate_interval
from .core.distributions import Distribution
from .core.event_generator import MAX_EVENTS, Checkpoint, generate_events
from .core.monte_carlo import SimulationConfig, spawn_trial_generators, trial_count_for_volume
from .core.monte_carlo_validation import validate_intervals, validate_trial_values
from .core.sampler import sample_events
from .core.validator import validate_num_trials, validate_sample_rate, validate_volume
from .models.monte_carlo import TrialProgressEvent
from .models.results import ConfidenceInterval, Metric, SimulationRun, TrialResult

LOGGER = logging.getLogger(__name__)

TRIAL_YIELD_INTERVAL = 10
TRIAL_YIELD_MIN_TRIALS = 20

ProgressObserver = Callable[[TrialProgressEvent], None]


class SimulationEngine:
    """Primary entry point for running repeated sampling simulations.

    The engine holds configuration only; every call to :meth:`run` returns a
    fresh :class:`SimulationRun` owned by the caller.
    """

    def __init__(self, config: Optional[SimulationConfig] = None) -> None:
        self.config = config or SimulationConfig()

    # ----------------------------------------------------------------- Trials
    def _run_trial(
        self,
        trial_index: int,
        rng: np.random.Generator,
        volume: int,
        sample_rate: int,
        distribution: Distribution,
        checkpoint: Optional[Checkpoint] = None,
    ) -> TrialResult:
        population = generate_events(volume, distribution, rng=rng, checkpoint=checkpoint)
        true_aggregate = aggregate(population)
        sampled = sample_events(population, sample_rate, self.config.sampling_method, rng=rng)
        sampled_aggregate = aggregate(sampled)
        return TrialResult(
            trial_index=trial_index,
            true_aggregate=true_aggregate,
            sampled_aggregate=sampled_aggregate,
            estimate=scale_aggregate(sampled_aggregate, sample_rate),
        )

    def _collect_trials(
        self,
        generators: List[np.random.Generator],
        volume: int,
        sample_rate: int,
        distribution: Distribution,
        num_trials: int,
        checkpoint: Optional[Checkpoint],
        progress_observer: Optional[ProgressObserver],
    ) -> List[TrialResult]:
        trials: List[TrialResult] = []
        running_average_total = 0.0

        def record(trial: TrialResult) -> None:
            nonlocal running_average_total
            trials.append(trial)
            running_average_total += trial.estimate.average
            if progress_observer:
                progress_observer(
                    TrialProgressEvent(
                        trial_index=trial.trial_index + 1,
                        total_trials=num_trials,
                        true_average=trial.true_aggregate.average,
                        sampled_average=trial.estimate.average,
                        true_p99=trial.true_aggregate.p99,
                        sampled_p99=trial.estimate.p99,
                        cumulative_mean_average=running_average_total / len(trials),
                        sampled_events=trial.sampled_aggregate.count,
                    )
                )
            index = trial.trial_index
            if (
                checkpoint
                and num_trials > TRIAL_YIELD_MIN_TRIALS
                and index % TRIAL_YIELD_INTERVAL == 0
            ):
                checkpoint(index + 1, num_trials)

        if self.config.max_workers == 1:
            for trial_index in range(num_trials):
                record(
                    self._run_trial(
                        trial_index,
                        generators[trial_index + 1],
                        volume,
                        sample_rate,
                        distribution,
                        checkpoint,
                    )
                )
            return trials

        # Each trial owns its generator, so threading does not change the draws.
        with ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="simulation-trial"
        ) as pool:
            futures = [
                pool.submit(
                    self._run_trial,
                    trial_index,
                    generators[trial_index + 1],
                    volume,
                    sample_rate,
                    distribution,
                )
                for trial_index in range(num_trials)
            ]
            for future in futures:
                record(future.result())
        return trials

    # -------------------------------------------------------------------- Run
    def run(
        self,
        volume: int,
        sample_rate: int,
        distribution: Union[str, Distribution],
        num_trials: Optional[int] = None,
        *,
        checkpoint: Optional[Checkpoint] = None,
        progress_observer: Optional[ProgressObserver] = None,
    ) -> SimulationRun:
        """Generate, sample and aggregate ``num_trials`` populations.

        ``checkpoint`` receives event counts from population generation and
        trial counts from the trial loop. Parallel trials only report the
        latter.

        Raises
        ------
        CapacityExceededError
            If ``volume`` is above the event ceiling.
        ValidationError
            For any other invalid parameter.
        """
        volume = validate_volume(volume, MAX_EVENTS)
        sample_rate = validate_sample_rate(sample_rate)
        family = Distribution.parse(distribution)
        num_trials = (
            trial_count_for_volume(volume)
            if num_trials is None
            else validate_num_trials(num_trials)
        )
        config = self.config

        LOGGER.info(
            "Running %d trials: volume=%s sample_rate=1:%d distribution=%s sampling=%s",
            num_trials,
            f"{volume:,}",
            sample_rate,
            family.value,
            config.sampling_method.value,
        )

        generators = spawn_trial_generators(config.random_seed, num_trials)
        reference = generate_events(volume, family, rng=generators[0], checkpoint=checkpoint)
        true_aggregate = aggregate(reference)
        reference_sample = None
        if config.retain_reference_population:
            reference_sample = sample_events(
                reference, sample_rate, config.sampling_method, rng=generators[0]
            )

        trials = self._collect_trials(
            generators,
            volume,
            sample_rate,
            family,
            num_trials,
            checkpoint,
            progress_observer,
        )

        per_trial: Dict[Metric, List[Tuple[float, float]]] = {
            metric: [
                (metric.value_of(trial.true_aggregate), metric.value_of(trial.estimate))
                for trial in trials
            ]
            for metric in Metric
        }
        mean_sample_size = float(np.mean([trial.sampled_aggregate.count for trial in trials]))
        context = EstimationContext(
            distribution=family,
            sample_rate=sample_rate,
            sample_size=mean_sample_size,
            confidence_level=config.confidence_level,
        )
        per_metric: Dict[Metric, ConfidenceInterval] = {
            metric: estimate_interval(
                metric,
                [estimate for _, estimate in per_trial[metric]],
                context,
                method=config.interval_method,
            )
            for metric in Metric
        }

        trial_check = validate_trial_values(per_trial)
        interval_check = validate_intervals(
            per_metric,
            true_average=true_aggregate.average,
            volume=volume,
            sample_rate=sample_rate,
            preferred_method=config.interval_method,
        )
        failed = list(trial_check.failed_checks) + list(interval_check.failed_checks)
        warnings = list(trial_check.warnings) + list(interval_check.warnings)
        for warning in warnings:
            LOGGER.warning("Simulation diagnostic: %s", warning)
        for check in failed:
            LOGGER.warning("Simulation check failed: %s", check)

        LOGGER.info("Completed %d trials (%.1f sampled events per trial)", num_trials, mean_sample_size)
        return SimulationRun(
            volume=volume,
            sample_rate=sample_rate,
            distribution=family,
            num_trials=num_trials,
            sampling_method=config.sampling_method,
            confidence_level=config.confidence_level,
            true_aggregate=true_aggregate,
            per_metric=per_metric,
            per_trial=per_trial,
            trials=trials,
            mean_sample_size=mean_sample_size,
            validation={
                "status": "PASS" if not failed else "FAIL",
                "failed_checks": failed,
                "warnings": warnings,
            },
            reference_population=reference if config.retain_reference_population else None,
            reference_sample=reference_sample,
        )


def run_simulations(
    volume: int,
    sample_rate: int,
    distribution: Union[str, Distribution],
    num_trials: Optional[int] = None,
    *,
    config: Optional[SimulationConfig] = None,
    checkpoint: Optional[Checkpoint] = None,
    progress_observer: Optional[ProgressObserver] = None,
) -> SimulationRun:
    """Run ``num_trials`` generate/sample/aggregate trials and estimate intervals."""
    return SimulationEngine(config).run(
        volume,
        sample_rate,
        distribution,
        num_trials,
        checkpoint=checkpoint,
        progress_observer=progress_observer,
    )


def compute_reference_stats(
    distribution: Union[str, Distribution],
    num_samples: int = 100_000,
    *,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[float, float]:
    """Simulated average and P99 of ``distribution`` (used for chart markers)."""
    summary = aggregate(generate_events(num_samples, distribution, rng=rng))
    return summary.average, summary.p99


__all__ = [
    "SimulationEngine",
    "run_simulations",
    "compute_reference_stats",
    "ProgressObserver",
]
