"""Adaptive thresholds deciding whether an ensemble score is normal."""
from __future__ import annotations

from ..config import ExponentialMovingAverageConfig, MovingQuantileConfig, ThresholdConfig
from ..exceptions import ConfigurationError
from .base import Threshold
from .ema import ExponentialMovingAverage
from .quantile import MovingQuantile


def create_threshold(config: ThresholdConfig) -> Threshold:
    """Instantiate the threshold strategy described by ``config``."""

    if isinstance(config, ExponentialMovingAverageConfig):
        return ExponentialMovingAverage(
            window_size=config.window_size,
            weight_most_recent=config.weight_most_recent,
            percentage=config.percentage,
            normals_only=config.normals_only,
        )
    if isinstance(config, MovingQuantileConfig):
        return MovingQuantile(
            window_size=config.window_size,
            history=config.history,
            quantile=config.quantile,
            normals_only=config.normals_only,
        )
    raise ConfigurationError(f"Unsupported threshold configuration: {type(config).__name__}")


__all__ = ["Threshold", "ExponentialMovingAverage", "MovingQuantile", "create_threshold"]
