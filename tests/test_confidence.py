import math
import unittest

from scipy import special

from samplesim.core.confidence import (
    EstimationContext,
    empirical_interval,
    estimate_interval,
    theoretical_interval,
)
from samplesim.core.distributions import Distribution
from samplesim.core.validator import DomainError
from samplesim.models.results import IntervalMethod, Metric

Z_95 = 1.959963985


class EmpiricalIntervalTests(unittest.TestCase):
    def test_single_trial_collapses_to_the_value(self) -> None:
        interval = empirical_interval([12.5])
        self.assertEqual(interval.lower, 12.5)
        self.assertEqual(interval.upper, 12.5)
        self.assertEqual(interval.mean, 12.5)
        self.assertIs(interval.method, IntervalMethod.EMPIRICAL)

    def test_percentile_indices(self) -> None:
        values = list(range(100, 0, -1))
        interval = empirical_interval(values, 0.95)
        self.assertEqual(interval.lower, 3.0)
        self.assertEqual(interval.upper, 98.0)
        self.assertAlmostEqual(interval.mean, 50.5)

    def test_empty_values_raise(self) -> None:
        with self.assertRaises(DomainError):
            empirical_interval([])


class TheoreticalIntervalTests(unittest.TestCase):
    def setUp(self) -> None:
        self.context = EstimationContext(
            distribution=Distribution.UNIFORM,
            sample_rate=10,
            sample_size=1_000.0,
            confidence_level=0.95,
        )

    def test_count_uses_trial_spread(self) -> None:
        interval = theoretical_interval(Metric.COUNT, [95.0, 100.0, 105.0], self.context)
        self.assertAlmostEqual(interval.lower, 100.0 - Z_95 * 5.0, places=5)
        self.assertAlmostEqual(interval.upper, 100.0 + Z_95 * 5.0, places=5)
        self.assertIs(interval.method, IntervalMethod.THEORETICAL)

    def test_constant_count_gives_degenerate_interval(self) -> None:
        interval = theoretical_interval(Metric.COUNT, [10_000.0] * 5, self.context)
        self.assertEqual(interval.lower, 10_000.0)
        self.assertEqual(interval.upper, 10_000.0)

    def test_count_lower_bound_is_floored(self) -> None:
        interval = theoretical_interval(Metric.COUNT, [0.0, 1.0, 0.0, 1.0], self.context)
        self.assertEqual(interval.lower, 0.0)
        self.assertGreater(interval.upper, 0.0)

    def test_sum_uses_distribution_variance(self) -> None:
        interval = theoretical_interval(Metric.SUM, [1_000_000.0], self.context)
        draws = 1_000_000.0 / 10 / 100.0
        std_error = 10 * math.sqrt(draws * 200.0**2 / 12.0)
        self.assertAlmostEqual(interval.lower, 1_000_000.0 - Z_95 * std_error, places=2)
        self.assertAlmostEqual(interval.upper, 1_000_000.0 + Z_95 * std_error, places=2)

    def test_average_uses_larger_standard_error(self) -> None:
        interval = theoretical_interval(Metric.AVERAGE, [100.0, 100.0, 100.0], self.context)
        std_error = math.sqrt((200.0**2 / 12.0) / 1_000.0)
        self.assertAlmostEqual(interval.upper - 100.0, Z_95 * std_error, places=5)
        self.assertAlmostEqual(100.0 - interval.lower, Z_95 * std_error, places=5)

    def test_p99_uses_beta_order_statistic(self) -> None:
        interval = theoretical_interval(Metric.P99, [198.0, 197.9, 198.1], self.context)
        self.assertAlmostEqual(interval.lower, 200.0 * special.betaincinv(990, 11, 0.025), places=4)
        self.assertAlmostEqual(interval.upper, 200.0 * special.betaincinv(990, 11, 0.975), places=4)
        self.assertLessEqual(interval.lower, interval.mean)
        self.assertLessEqual(interval.mean, interval.upper)

    def test_p99_without_sample_size_raises(self) -> None:
        context = EstimationContext(distribution=Distribution.UNIFORM, sample_rate=10)
        with self.assertRaises(DomainError):
            theoretical_interval(Metric.P99, [198.0, 199.0], context)


class EstimateIntervalTests(unittest.TestCase):
    def test_falls_back_to_empirical_and_tags_the_method(self) -> None:
        context = EstimationContext(distribution=Distribution.NORMAL, sample_rate=5)
        interval = estimate_interval(Metric.P99, [140.0, 150.0, 145.0], context)
        self.assertIs(interval.method, IntervalMethod.EMPIRICAL)
        self.assertEqual(interval.lower, 140.0)
        self.assertEqual(interval.upper, 150.0)

    def test_single_trial_count_falls_back(self) -> None:
        context = EstimationContext(
            distribution=Distribution.NORMAL, sample_rate=5, sample_size=20.0
        )
        interval = estimate_interval(Metric.COUNT, [100.0], context)
        self.assertIs(interval.method, IntervalMethod.EMPIRICAL)
        self.assertEqual((interval.lower, interval.upper, interval.mean), (100.0, 100.0, 100.0))

    def test_empirical_method_requested_explicitly(self) -> None:
        context = EstimationContext(
            distribution=Distribution.NORMAL, sample_rate=5, sample_size=20.0
        )
        interval = estimate_interval(
            Metric.AVERAGE, [99.0, 101.0], context, method=IntervalMethod.EMPIRICAL
        )
        self.assertIs(interval.method, IntervalMethod.EMPIRICAL)

    def test_theoretical_used_when_available(self) -> None:
        context = EstimationContext(
            distribution=Distribution.NORMAL, sample_rate=5, sample_size=20.0
        )
        interval = estimate_interval(Metric.AVERAGE, [99.0, 101.0], context)
        self.assertIs(interval.method, IntervalMethod.THEORETICAL)
        self.assertLess(interval.lower, interval.mean)


if __name__ == "__main__":
    unittest.main()
