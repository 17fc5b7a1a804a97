"""Synthetic event population generation."""

from __future__ import annotations

import logging
from typing import Callable, Iterator, NamedTuple, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .distributions import Distribution
from .validator import validate_event_count

LOGGER = logging.getLogger(__name__)

MAX_EVENTS = 10_000_000
BATCH_SIZE = 100_000
YIELD_EVERY_BATCHES = 10

# Cooperative yield hook called as checkpoint(completed, total). The pair
# counts the units of whichever loop yields: events while a population is
# generated, trials while the engine iterates over trials. Treat it as a
# chance to interleave work, not as a single monotonic progress measure.
Checkpoint = Callable[[int, int], None]


class Event(NamedTuple):
    id: int
    value: float


class Population:
    """Ordered, immutable collection of events.

    Values live in a read-only float64 array. Ids default to the position of
    each event; subsets produced by :meth:`take` keep the original ids.
    """

    __slots__ = ("values", "event_ids")

    def __init__(self, values: np.ndarray, event_ids: Optional[np.ndarray] = None) -> None:
        values = np.asarray(values, dtype=float)
        values.setflags(write=False)
        if event_ids is not None:
            event_ids = np.asarray(event_ids, dtype=np.int64)
            if event_ids.shape != values.shape:
                raise ValueError("event_ids must align with values")
            event_ids.setflags(write=False)
        self.values = values
        self.event_ids = event_ids

    def __repr__(self) -> str:
        return f"Population(size={len(self)})"

    def __len__(self) -> int:
        return int(self.values.size)

    def __iter__(self) -> Iterator[Event]:
        for event_id, value in zip(self.ids.tolist(), self.values.tolist()):
            yield Event(event_id, value)

    def __getitem__(self, index: int) -> Event:
        return Event(int(self.ids[index]), float(self.values[index]))

    @property
    def ids(self) -> np.ndarray:
        if self.event_ids is None:
            return np.arange(self.values.size, dtype=np.int64)
        return self.event_ids

    def take(self, indices: Union[slice, Sequence[int], np.ndarray]) -> "Population":
        """Return the events at ``indices`` as a new population."""
        return Population(self.values[indices], self.ids[indices])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"id": self.ids, "value": self.values})


def generate_events(
    count: int,
    distribution: Union[str, Distribution],
    *,
    rng: Optional[np.random.Generator] = None,
    checkpoint: Optional[Checkpoint] = None,
) -> Population:
    """Generate ``count`` events whose values follow ``distribution``.

    Values are produced in batches of :data:`BATCH_SIZE`; every
    :data:`YIELD_EVERY_BATCHES` batches the optional ``checkpoint`` is called
    so a host can interleave other work. Values are clamped at zero.

    Raises
    ------
    CapacityExceededError
        If ``count`` exceeds :data:`MAX_EVENTS`.
    """
    count = validate_event_count(count, MAX_EVENTS)
    family = Distribution.parse(distribution)
    rng = rng if rng is not None else np.random.default_rng()

    values = np.empty(count, dtype=float)
    for batch_index, start in enumerate(range(0, count, BATCH_SIZE)):
        end = min(start + BATCH_SIZE, count)
        np.maximum(family.sample_batch(rng, end - start), 0.0, out=values[start:end])
        if checkpoint is not None and batch_index > 0 and batch_index % YIELD_EVERY_BATCHES == 0:
            checkpoint(end, count)

    LOGGER.debug("Generated %s %s events", f"{count:,}", family.value)
    return Population(values)


__all__ = [
    "MAX_EVENTS",
    "BATCH_SIZE",
    "YIELD_EVERY_BATCHES",
    "Checkpoint",
    "Event",
    "Population",
    "generate_events",
]
