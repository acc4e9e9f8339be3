"""Synthetic sample streams for exercising the detector."""
from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence

import numpy as np
import pandas as pd


class ClusteredStream:
    """Emits samples drawn from a Gaussian cluster.

    The generator is seeded so the same stream can be replayed, and known
    anomalies can be appended with :meth:`inject` to check that the detector
    flags them.
    """

    def __init__(
        self,
        center: Sequence[float],
        spread: float | Sequence[float] = 0.1,
        seed: int | None = None,
    ) -> None:
        self.center = np.asarray(center, dtype=float)
        if self.center.ndim != 1 or self.center.size == 0:
            raise ValueError("center must be a non-empty sequence of coordinates")
        self.spread = np.broadcast_to(np.asarray(spread, dtype=float), self.center.shape)
        if (self.spread < 0).any():
            raise ValueError("spread must be non-negative")
        self._rng = np.random.default_rng(seed)

    @property
    def columns(self) -> List[str]:
        return [f"x{dim}" for dim in range(self.center.size)]

    def take(self, n: int) -> pd.DataFrame:
        """Draw the next ``n`` samples of the stream."""

        values = self._rng.normal(self.center, self.spread, size=(n, self.center.size))
        frame = pd.DataFrame(values, columns=self.columns)
        frame["is_injected"] = False
        return frame

    def inject(self, frame: pd.DataFrame, points: Iterable[Sequence[float]]) -> pd.DataFrame:
        """Append ``points`` to ``frame`` as injected anomalies."""

        injected = pd.DataFrame([list(point) for point in points], columns=self.columns, dtype=float)
        injected["is_injected"] = True
        return pd.concat([frame, injected], ignore_index=True)

    def __iter__(self) -> Iterator[np.ndarray]:
        while True:
            yield self._rng.normal(self.center, self.spread)


__all__ = ["ClusteredStream"]
