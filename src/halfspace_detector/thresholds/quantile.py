"""Moving quantile threshold."""
from __future__ import annotations

import math
from collections import deque
from typing import Optional

import numpy as np

from ..config import require_count, require_real
from ..exceptions import ConfigurationError
from .base import Threshold


class MovingQuantile(Threshold):
    """Places the boundary at a low quantile of the most recent accepted scores."""

    def __init__(
        self,
        window_size: int,
        history: int = 500,
        quantile: float = 0.01,
        normals_only: bool = False,
    ) -> None:
        super().__init__(window_size)
        require_count("history", history)
        require_real("quantile", quantile)
        if not 0.0 <= quantile <= 1.0:
            raise ConfigurationError(f"quantile must lie in [0, 1], got {quantile}")
        self.quantile = quantile
        self.normals_only = normals_only
        self._scores: deque[int] = deque(maxlen=history)

    @property
    def history(self) -> int:
        return self._scores.maxlen or 0

    def update_model(self, anomaly_score: int, is_normal: Optional[bool] = None) -> None:
        if self.normals_only:
            if is_normal is None:
                is_normal = self._is_normal(anomaly_score)
            if not is_normal:
                return
        self._scores.append(anomaly_score)
        self.current_threshold = math.floor(
            np.quantile(np.fromiter(self._scores, dtype=float), self.quantile)
        )

    def __repr__(self) -> str:
        return (
            f"MovingQuantile(window_size={self.window_size}, history={self.history}, "
            f"quantile={self.quantile}, normals_only={self.normals_only})"
        )


__all__ = ["MovingQuantile"]
