import math
import unittest

from samplesim.core.monte_carlo import (
    SimulationConfig,
    spawn_trial_generators,
    trial_count_for_volume,
)
from samplesim.core.monte_carlo_validation import validate_intervals, validate_trial_values
from samplesim.core.sampler import SamplingMethod
from samplesim.core.validator import ValidationError
from samplesim.models.results import ConfidenceInterval, IntervalMethod, Metric


class SimulationConfigTests(unittest.TestCase):
    def test_metadata_round_trip(self) -> None:
        config = SimulationConfig(
            sampling_method="bernoulli",
            confidence_level=0.9,
            interval_method="empirical",
            random_seed=99,
            max_workers=4,
        )
        restored = SimulationConfig.from_metadata(config.to_metadata())
        self.assertEqual(restored, config)
        self.assertIs(restored.sampling_method, SamplingMethod.BERNOULLI)
        self.assertIs(restored.interval_method, IntervalMethod.EMPIRICAL)

    def test_invalid_values(self) -> None:
        with self.assertRaises(ValidationError):
            SimulationConfig(confidence_level=1.5)
        with self.assertRaises(ValidationError):
            SimulationConfig(max_workers=0)
        with self.assertRaises(ValidationError):
            SimulationConfig(sampling_method="cluster")

    def test_trial_count_policy(self) -> None:
        self.assertEqual(trial_count_for_volume(1_000_001), 10)
        self.assertEqual(trial_count_for_volume(1_000_000), 20)
        self.assertEqual(trial_count_for_volume(100_001), 20)
        self.assertEqual(trial_count_for_volume(100_000), 50)

    def test_generators_are_reproducible_and_independent(self) -> None:
        first = spawn_trial_generators(5, 3)
        second = spawn_trial_generators(5, 3)
        self.assertEqual(len(first), 4)
        draws = [gen.random() for gen in first]
        self.assertEqual(draws, [gen.random() for gen in second])
        self.assertEqual(len(set(draws)), 4)


class ValidationTests(unittest.TestCase):
    def test_non_finite_trial_values_fail(self) -> None:
        result = validate_trial_values({Metric.P99: [(1.0, math.nan)], Metric.SUM: [(1.0, 2.0)]})
        self.assertEqual(result.status, "FAIL")
        self.assertEqual(result.failed_checks, ["nan_or_inf_p99"])

    def test_missing_trial_values_fail(self) -> None:
        self.assertEqual(validate_trial_values({}).to_dict()["failed_checks"], ["no_trial_values"])

    def test_interval_checks(self) -> None:
        per_metric = {
            Metric.COUNT: ConfidenceInterval(
                lower=10.0, upper=5.0, mean=7.0, method=IntervalMethod.THEORETICAL
            ),
            Metric.P99: ConfidenceInterval(
                lower=1.0, upper=2.0, mean=3.0, method=IntervalMethod.EMPIRICAL
            ),
            Metric.AVERAGE: ConfidenceInterval(
                lower=90.0, upper=130.0, mean=108.0, method=IntervalMethod.THEORETICAL
            ),
        }
        result = validate_intervals(
            per_metric, true_average=100.0, volume=10_000, sample_rate=100
        )
        self.assertEqual(result.status, "FAIL")
        self.assertEqual(result.failed_checks, ["interval_order_count"])
        self.assertIn("estimate_outside_interval_p99", result.warnings)
        self.assertIn("empirical_fallback_p99", result.warnings)
        # 8% error against a 10% bound is within tolerance.
        self.assertNotIn("average_error_exceeds_theoretical_bound", result.warnings)

    def test_average_error_warning(self) -> None:
        per_metric = {
            Metric.AVERAGE: ConfidenceInterval(
                lower=100.0, upper=130.0, mean=120.0, method=IntervalMethod.THEORETICAL
            ),
        }
        result = validate_intervals(
            per_metric, true_average=100.0, volume=10_000, sample_rate=100
        )
        self.assertEqual(result.status, "PASS")
        self.assertEqual(result.warnings, ["average_error_exceeds_theoretical_bound"])


if __name__ == "__main__":
    unittest.main()
