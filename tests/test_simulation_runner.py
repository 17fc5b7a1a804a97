import unittest

from samplesim.core.monte_carlo import SimulationConfig
from samplesim.core.validator import SimulationBusyError
from samplesim.runtime.simulation_runner import SimulationRunner


class SimulationRunnerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = SimulationRunner(SimulationConfig(random_seed=12))

    def tearDown(self) -> None:
        self.runner.shutdown(wait=True)

    def test_result_and_progress(self) -> None:
        self.runner.start(2_000, 10, "exponential", 3)
        run = self.runner.result(timeout=60)
        self.assertEqual(run.num_trials, 3)
        self.assertTrue(self.runner.done)
        self.assertFalse(self.runner.running)
        self.assertIsNone(self.runner.exception(timeout=1))
        updates = self.runner.drain_progress()
        self.assertEqual([update.trial_index for update in updates], [1, 2, 3])
        self.assertEqual(self.runner.drain_progress(), [])

    def test_second_start_rejected_while_running(self) -> None:
        self.runner.start(2_000_000, 10, "uniform", 3)
        with self.assertRaises(SimulationBusyError):
            self.runner.start(1_000, 10, "uniform", 1)
        with self.assertRaises(SimulationBusyError):
            self.runner.reset()
        self.runner.result(timeout=300)
        self.runner.reset()
        self.assertFalse(self.runner.done)

    def test_errors_surface_through_result(self) -> None:
        self.runner.start(1_000, 0, "uniform", 1)
        self.assertIsInstance(self.runner.exception(timeout=60), ValueError)

    def test_result_before_start(self) -> None:
        with self.assertRaises(RuntimeError):
            self.runner.result()


if __name__ == "__main__":
    unittest.main()
