"""Exponential moving average threshold."""
from __future__ import annotations

import math
from typing import Optional

from ..config import require_real
from ..exceptions import ConfigurationError
from .base import Threshold


class ExponentialMovingAverage(Threshold):
    """Places the boundary at a percentage of the moving average of normal scores.

    With ``normals_only`` set, scores judged anomalous are kept out of the
    average so a burst of anomalies cannot drag the boundary down with it.
    """

    def __init__(
        self,
        window_size: int,
        weight_most_recent: float,
        percentage: float,
        normals_only: bool,
    ) -> None:
        super().__init__(window_size)
        require_real("weight_most_recent", weight_most_recent)
        require_real("percentage", percentage)
        if not 0.0 <= weight_most_recent <= 1.0:
            raise ConfigurationError(
                f"weight_most_recent must lie in [0, 1], got {weight_most_recent}"
            )
        if not (percentage > 0.0 and math.isfinite(percentage)):
            raise ConfigurationError(f"percentage must be positive, got {percentage}")
        self.weight_most_recent = weight_most_recent
        self.percentage = percentage
        self.normals_only = normals_only
        self.weighted_average_normal = 0.0

    def update_model(self, anomaly_score: int, is_normal: Optional[bool] = None) -> None:
        if self.normals_only:
            if is_normal is None:
                is_normal = self._is_normal(anomaly_score)
            if not is_normal:
                return
        weight = self.weight_most_recent
        self.weighted_average_normal = (
            (1.0 - weight) * self.weighted_average_normal + weight * anomaly_score
        )
        self.current_threshold = math.floor(self.percentage * self.weighted_average_normal)

    def __repr__(self) -> str:
        return (
            f"ExponentialMovingAverage(window_size={self.window_size}, "
            f"weight_most_recent={self.weight_most_recent}, percentage={self.percentage}, "
            f"normals_only={self.normals_only})"
        )


__all__ = ["ExponentialMovingAverage"]
