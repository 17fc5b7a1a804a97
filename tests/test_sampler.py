import math
import unittest

import numpy as np

from samplesim.core.event_generator import Population
from samplesim.core.sampler import (
    SamplingMethod,
    bernoulli_sample,
    expected_sample_size,
    sample_events,
    systematic_sample,
)
from samplesim.core.validator import ValidationError


def _population(size: int) -> Population:
    return Population(np.arange(size, dtype=float) * 10.0)


class SystematicSampleTests(unittest.TestCase):
    def test_keeps_every_kth_event_from_the_first(self) -> None:
        sample = systematic_sample(_population(10), 3)
        self.assertEqual(sample.ids.tolist(), [0, 3, 6, 9])
        self.assertEqual(sample.values.tolist(), [0.0, 30.0, 60.0, 90.0])

    def test_sample_size_is_ceiling(self) -> None:
        for size in (1, 7, 100, 101):
            for rate in (1, 3, 10):
                sample = systematic_sample(_population(size), rate)
                self.assertEqual(len(sample), math.ceil(size / rate))

    def test_rate_one_keeps_everything(self) -> None:
        population = _population(25)
        np.testing.assert_array_equal(systematic_sample(population, 1).values, population.values)

    def test_rejects_non_positive_rate(self) -> None:
        with self.assertRaises(ValidationError):
            systematic_sample(_population(10), 0)


class BernoulliSampleTests(unittest.TestCase):
    def test_size_is_close_to_expectation(self) -> None:
        sample = bernoulli_sample(_population(1_000_000), 10, np.random.default_rng(8))
        self.assertAlmostEqual(len(sample), 100_000, delta=1_000)

    def test_preserves_order_and_ids(self) -> None:
        sample = bernoulli_sample(_population(1_000), 4, np.random.default_rng(3))
        ids = sample.ids
        self.assertTrue(np.all(np.diff(ids) > 0))
        np.testing.assert_array_equal(sample.values, ids * 10.0)

    def test_rate_one_keeps_everything(self) -> None:
        sample = bernoulli_sample(_population(500), 1, np.random.default_rng(0))
        self.assertEqual(len(sample), 500)


class SampleEventsTests(unittest.TestCase):
    def test_dispatches_by_method(self) -> None:
        population = _population(100)
        systematic = sample_events(population, 10, "systematic")
        self.assertEqual(systematic.ids.tolist(), list(range(0, 100, 10)))
        bernoulli = sample_events(
            population, 10, SamplingMethod.BERNOULLI, rng=np.random.default_rng(1)
        )
        self.assertLessEqual(len(bernoulli), 100)

    def test_parse_method(self) -> None:
        self.assertIs(SamplingMethod.parse("BERNOULLI"), SamplingMethod.BERNOULLI)
        with self.assertRaises(ValidationError):
            SamplingMethod.parse("stratified")

    def test_expected_sample_size(self) -> None:
        self.assertEqual(expected_sample_size(101, 10), 11.0)
        self.assertAlmostEqual(expected_sample_size(101, 10, "bernoulli"), 10.1)


if __name__ == "__main__":
    unittest.main()
