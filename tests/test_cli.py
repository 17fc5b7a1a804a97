import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from samplesim.ui.cli import app


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()

    def test_simulate_prints_summary(self) -> None:
        result = self.runner.invoke(
            app,
            [
                "simulate",
                "--volume", "2000",
                "--sample-rate", "10",
                "--trials", "5",
                "--seed", "1",
                "--distribution", "uniform",
            ],
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Simulation Summary", result.output)
        self.assertIn("Completed 5 simulations", result.output)

    def test_simulate_exports_charts(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "charts.html"
            result = self.runner.invoke(
                app,
                [
                    "simulate",
                    "--volume", "1000",
                    "--trials", "3",
                    "--seed", "2",
                    "--html", str(output),
                    "--y-axis", "zoom",
                ],
            )
            self.assertEqual(result.exit_code, 0, result.output)
            self.assertTrue(output.exists())

    def test_volume_above_ceiling(self) -> None:
        result = self.runner.invoke(app, ["simulate", "--volume", "10000001", "--trials", "1"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Volume too large", result.output)

    def test_invalid_sample_rate(self) -> None:
        result = self.runner.invoke(app, ["simulate", "--volume", "100", "--sample-rate", "0"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Sample rate", result.output)

    def test_list_distributions(self) -> None:
        result = self.runner.invoke(app, ["distributions"])
        self.assertEqual(result.exit_code, 0, result.output)
        for name in ("exponential", "normal", "uniform", "lognormal", "bimodal"):
            self.assertIn(name, result.output)


if __name__ == "__main__":
    unittest.main()
