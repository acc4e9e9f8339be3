"""Configuration defaults for the half-space tree detection system."""
from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class EnsembleConfig:
    """Shape of the tree ensemble and its sliding window."""

    n_trees: int = 25
    max_depth: int = 8
    window_size: int = 250
    n_dimensions: int = 1
    min_bounds: Tuple[float, ...] = (0.0,)
    max_bounds: Tuple[float, ...] = (1.0,)
    size_limit: int = 5

    def __post_init__(self) -> None:
        # Callers often pass lists or arrays; store immutable copies.
        object.__setattr__(self, "min_bounds", _as_bounds(self.min_bounds, "min_bounds"))
        object.__setattr__(self, "max_bounds", _as_bounds(self.max_bounds, "max_bounds"))

        require_count("n_trees", self.n_trees)
        require_count("max_depth", self.max_depth, minimum=0)
        require_count("window_size", self.window_size)
        require_count("n_dimensions", self.n_dimensions)
        require_count("size_limit", self.size_limit)
        for name, bounds in (("min_bounds", self.min_bounds), ("max_bounds", self.max_bounds)):
            if len(bounds) != self.n_dimensions:
                raise ConfigurationError(
                    f"{name} has {len(bounds)} entries but n_dimensions is {self.n_dimensions}"
                )
        for dim, (low, high) in enumerate(zip(self.min_bounds, self.max_bounds)):
            if low > high:
                raise ConfigurationError(
                    f"Lower bound {low} exceeds upper bound {high} on dimension {dim}"
                )

    @classmethod
    def from_bounds(
        cls,
        min_bounds: Sequence[float],
        max_bounds: Sequence[float],
        **overrides: int,
    ) -> "EnsembleConfig":
        """Build a configuration whose dimensionality follows the bound arrays."""

        return cls(
            n_dimensions=len(min_bounds),
            min_bounds=tuple(min_bounds),
            max_bounds=tuple(max_bounds),
            **overrides,
        )


@dataclass(frozen=True)
class ExponentialMovingAverageConfig:
    window_size: int = 250
    weight_most_recent: float = 0.1
    percentage: float = 0.5
    normals_only: bool = True

    def __post_init__(self) -> None:
        require_count("window_size", self.window_size)
        require_real("weight_most_recent", self.weight_most_recent)
        require_real("percentage", self.percentage)
        if not 0.0 <= self.weight_most_recent <= 1.0:
            raise ConfigurationError(
                f"weight_most_recent must lie in [0, 1], got {self.weight_most_recent}"
            )
        if not (self.percentage > 0.0 and math.isfinite(self.percentage)):
            raise ConfigurationError(f"percentage must be positive, got {self.percentage}")


@dataclass(frozen=True)
class MovingQuantileConfig:
    window_size: int = 250
    history: int = 500
    quantile: float = 0.01
    normals_only: bool = False

    def __post_init__(self) -> None:
        require_count("window_size", self.window_size)
        require_count("history", self.history)
        require_real("quantile", self.quantile)
        if not 0.0 <= self.quantile <= 1.0:
            raise ConfigurationError(f"quantile must lie in [0, 1], got {self.quantile}")


ThresholdConfig = Union[ExponentialMovingAverageConfig, MovingQuantileConfig]


@dataclass(frozen=True)
class DetectorConfig:
    """Top level configuration bundling the ensemble and its threshold."""

    ensemble: EnsembleConfig = field(default_factory=EnsembleConfig)
    threshold: ThresholdConfig = field(default_factory=ExponentialMovingAverageConfig)
    seed: Optional[int] = None


def require_count(name: str, value: object, minimum: int = 1) -> None:
    """Reject anything that is not an integer of at least ``minimum``."""

    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")


def require_real(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _as_bounds(values: Sequence[float], name: str) -> Tuple[float, ...]:
    try:
        bounds = tuple(float(value) for value in values)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a sequence of numbers") from exc
    if not all(math.isfinite(value) for value in bounds):
        raise ConfigurationError(f"{name} must only contain finite values")
    return bounds


__all__ = [
    "EnsembleConfig",
    "ExponentialMovingAverageConfig",
    "MovingQuantileConfig",
    "ThresholdConfig",
    "DetectorConfig",
    "require_count",
    "require_real",
]
