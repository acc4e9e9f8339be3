"""Utility helpers shared by the detector components."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from .exceptions import InputError


@dataclass(frozen=True)
class Sample:
    """A single observation of the monitored stream."""

    values: Tuple[float, ...]
    timestamp: Optional[datetime] = None
    label: Optional[str] = None

    @classmethod
    def create(cls, values: Iterable[float], label: Optional[str] = None) -> "Sample":
        return cls(
            values=tuple(float(value) for value in values),
            timestamp=datetime.now(timezone.utc),
            label=label,
        )

    @property
    def dimensions(self) -> int:
        return len(self.values)


@dataclass
class DetectionResult:
    """Container for the outcome of scoring one sample."""

    index: int
    score: int
    threshold: int
    is_normal: bool
    reference_created: bool

    @property
    def is_anomaly(self) -> bool:
        return not self.is_normal


def as_vector(sample: Any, n_dimensions: int) -> np.ndarray:
    """Return the coordinates of ``sample`` as a fresh float vector.

    Accepts a :class:`Sample`, a :class:`pandas.Series`, a numpy array or any
    numeric sequence. The input is never modified.
    """

    if isinstance(sample, Sample):
        raw = sample.values
    elif isinstance(sample, pd.Series):
        raw = sample.to_numpy()
    else:
        raw = sample

    try:
        vector = np.array(raw, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InputError(f"Sample coordinates must be numeric: {exc}") from exc

    if vector.ndim != 1 or vector.shape[0] != n_dimensions:
        raise InputError(
            f"Expected a sample with {n_dimensions} coordinates, got shape {vector.shape}"
        )
    if not np.isfinite(vector).all():
        raise InputError("Sample coordinates must be finite")
    return vector


__all__ = ["Sample", "DetectionResult", "as_vector"]
