import tempfile
import unittest
from pathlib import Path

from samplesim.core.monte_carlo import SimulationConfig
from samplesim.engine import run_simulations
from samplesim.visualization import (
    distribution_density_data,
    plot_confidence_intervals,
    plot_distribution_density,
    plot_p99_scatter,
    write_figures_html,
)


class DensityChartTests(unittest.TestCase):
    def test_density_grid(self) -> None:
        data = distribution_density_data("exponential")
        self.assertEqual(len(data), 201)
        self.assertEqual(float(data["x"].iloc[0]), 0.0)
        self.assertEqual(float(data["x"].iloc[-1]), 500.0)
        self.assertTrue((data["density"] >= 0.0).all())

    def test_density_figure_with_markers(self) -> None:
        fig = plot_distribution_density("normal", average=100.0, p99=146.5)
        self.assertEqual(len(fig.data), 1)
        self.assertEqual(fig.layout.title.text, "Normal Distribution (mu=100, sigma=20)")
        self.assertEqual(len(fig.layout.shapes), 2)


class RunChartTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.simulation = run_simulations(
            5_000, 10, "uniform", 8, config=SimulationConfig(random_seed=21)
        )

    def test_p99_scatter(self) -> None:
        fig = plot_p99_scatter(self.simulation)
        self.assertEqual(len(fig.data), 2)
        self.assertEqual(len(fig.data[0].x), 8)
        self.assertEqual(fig.layout.yaxis.rangemode, "tozero")
        zoomed = plot_p99_scatter(self.simulation, y_axis_mode="zoom")
        self.assertEqual(zoomed.layout.yaxis.rangemode, "normal")

    def test_p99_scatter_rejects_unknown_mode(self) -> None:
        with self.assertRaises(ValueError):
            plot_p99_scatter(self.simulation, y_axis_mode="log")

    def test_confidence_interval_chart(self) -> None:
        fig = plot_confidence_intervals(self.simulation)
        self.assertEqual(list(fig.data[0].x), ["count", "sum", "average", "p99"])

    def test_write_html(self) -> None:
        figures = [plot_p99_scatter(self.simulation), plot_confidence_intervals(self.simulation)]
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_figures_html(figures, Path(tmpdir) / "charts" / "run.html")
            content = path.read_text(encoding="utf-8")
        self.assertIn("plotly", content)
        self.assertGreaterEqual(content.count("Plotly.newPlot"), 2)


if __name__ == "__main__":
    unittest.main()
