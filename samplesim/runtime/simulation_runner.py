"""Background execution helper for simulation runs."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from queue import Empty, Queue
from typing import Optional, Union

from ..core.distributions import Distribution
from ..core.monte_carlo import SimulationConfig
from ..core.validator import SimulationBusyError
from ..engine import SimulationEngine
from ..models.monte_carlo import TrialProgressEvent
from ..models.results import SimulationRun

LOGGER = logging.getLogger(__name__)


class SimulationRunner:
    """Run one simulation at a time in the background with progress streaming.

    A new run is rejected while the previous one is still executing; runs
    are never interleaved.
    """

    def __init__(self, config: Optional[SimulationConfig] = None) -> None:
        self._engine = SimulationEngine(config)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="simulation-runner")
        self._future: Optional[Future] = None
        self._progress: "Queue[TrialProgressEvent]" = Queue()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ status
    @property
    def running(self) -> bool:
        with self._lock:
            return self._future is not None and not self._future.done()

    @property
    def done(self) -> bool:
        with self._lock:
            return self._future is not None and self._future.done()

    # ------------------------------------------------------------------ control
    def start(
        self,
        volume: int,
        sample_rate: int,
        distribution: Union[str, Distribution],
        num_trials: Optional[int] = None,
    ) -> None:
        """Submit a simulation run; raises ``SimulationBusyError`` if one is in flight."""
        with self._lock:
            if self._future is not None and not self._future.done():
                raise SimulationBusyError("A simulation run is already executing.")
            self._progress.queue.clear()
            LOGGER.debug("Submitting simulation run (volume=%s)", volume)
            self._future = self._executor.submit(
                self._engine.run,
                volume,
                sample_rate,
                distribution,
                num_trials,
                progress_observer=self._progress.put,
            )

    # ------------------------------------------------------------------ progress
    def drain_progress(self) -> list[TrialProgressEvent]:
        updates: list[TrialProgressEvent] = []
        while True:
            try:
                updates.append(self._progress.get_nowait())
            except Empty:
                break
        return updates

    # ------------------------------------------------------------------ results
    def result(self, timeout: Optional[float] = None) -> SimulationRun:
        with self._lock:
            if self._future is None:
                raise RuntimeError("SimulationRunner has not started a run.")
            future = self._future
        return future.result(timeout=timeout)

    def exception(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        with self._lock:
            if self._future is None:
                return None
            future = self._future
        return future.exception(timeout=timeout)

    def reset(self) -> None:
        with self._lock:
            if self._future is not None and not self._future.done():
                raise SimulationBusyError("Cannot reset while a simulation run is executing.")
            self._future = None
            self._progress.queue.clear()

    # ------------------------------------------------------------------- cleanup
    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)


__all__ = ["SimulationRunner"]
