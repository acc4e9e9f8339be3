"""Streaming anomaly detection with half-space trees and adaptive thresholds."""
from .config import (
    DetectorConfig,
    EnsembleConfig,
    ExponentialMovingAverageConfig,
    MovingQuantileConfig,
)
from .exceptions import ConfigurationError, HalfSpaceError, InputError
from .orchestrator import TreeOrchestrator
from .pipeline import HalfSpaceTreeDetector, create_detector
from .thresholds import ExponentialMovingAverage, MovingQuantile, Threshold, create_threshold
from .tree import HalfSpaceTree, Node
from .utils import DetectionResult, Sample

__all__ = [
    "ConfigurationError",
    "DetectionResult",
    "DetectorConfig",
    "EnsembleConfig",
    "ExponentialMovingAverage",
    "ExponentialMovingAverageConfig",
    "HalfSpaceError",
    "HalfSpaceTree",
    "HalfSpaceTreeDetector",
    "InputError",
    "MovingQuantile",
    "MovingQuantileConfig",
    "Node",
    "Sample",
    "Threshold",
    "TreeOrchestrator",
    "create_detector",
    "create_threshold",
]
