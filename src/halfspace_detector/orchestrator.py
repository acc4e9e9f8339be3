"""Ensemble of half-space trees scoring a data stream.

Based on the Streaming Half-Space Trees algorithm from "Fast Anomaly Detection
for Streaming Data" by Swee Chuan Tan, Kai Ming Ting and Tony Fei Liu (IJCAI
2011). Each tree profiles the mass of the stream over a sliding window. A
sample that lands in a historically dense region scores high, one that lands
in a sparse or unseen region scores low.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np

from .config import EnsembleConfig
from .tree import HalfSpaceTree
from .utils import as_vector

LOGGER = logging.getLogger(__name__)

RandomSource = Union[np.random.Generator, int, None]


def perturb_bounds(
    min_bounds: Sequence[float],
    max_bounds: Sequence[float],
    rng: np.random.Generator,
) -> Tuple[np.ndarray, np.ndarray]:
    """Return a randomly shifted and widened copy of the stream's domain.

    For every dimension a point ``r`` is drawn in ``[0, 1)`` and the working
    range is centred on ``min + r * distance``. Its half width is twice the
    larger of ``r`` and ``1 - r`` times the original distance, so every tree
    covers the nominal domain and space beyond it.
    """

    new_min = np.array(min_bounds, dtype=float)
    new_max = np.array(max_bounds, dtype=float)
    for dim in range(len(new_min)):
        distance = new_max[dim] - new_min[dim]
        point = rng.random()
        centre = new_min[dim] + point * distance
        if point < 0.5:
            spread = 2.0 * (1.0 - point) * distance
        else:
            spread = 2.0 * point * distance
        new_max[dim] = centre + spread
        new_min[dim] = centre - spread
    return new_min, new_max


class TreeOrchestrator:
    """Creates and manages the half-space trees of one monitored stream."""

    def __init__(
        self,
        n_trees: int,
        max_depth: int,
        window_size: int,
        n_dimensions: int,
        min_bounds: Sequence[float],
        max_bounds: Sequence[float],
        size_limit: int,
        *,
        rng: RandomSource = None,
    ) -> None:
        self.config = EnsembleConfig(
            n_trees=n_trees,
            max_depth=max_depth,
            window_size=window_size,
            n_dimensions=n_dimensions,
            min_bounds=tuple(min_bounds),
            max_bounds=tuple(max_bounds),
            size_limit=size_limit,
        )
        self._rng = np.random.default_rng(rng)
        self.window_counter = 0
        self.trees: List[HalfSpaceTree] = self._create_trees()
        LOGGER.debug(
            "Built %d half-space trees of depth %d over %d dimensions",
            n_trees,
            max_depth,
            n_dimensions,
        )

    @classmethod
    def from_config(cls, config: EnsembleConfig, rng: RandomSource = None) -> "TreeOrchestrator":
        return cls(
            n_trees=config.n_trees,
            max_depth=config.max_depth,
            window_size=config.window_size,
            n_dimensions=config.n_dimensions,
            min_bounds=config.min_bounds,
            max_bounds=config.max_bounds,
            size_limit=config.size_limit,
            rng=rng,
        )

    def _create_trees(self) -> List[HalfSpaceTree]:
        config = self.config
        trees: List[HalfSpaceTree] = []
        for _ in range(config.n_trees):
            lower, upper = perturb_bounds(config.min_bounds, config.max_bounds, self._rng)
            trees.append(
                HalfSpaceTree.build(
                    max_depth=config.max_depth,
                    n_dimensions=config.n_dimensions,
                    lower=lower,
                    upper=upper,
                    size_limit=config.size_limit,
                    rng=self._rng,
                )
            )
        return trees

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def n_trees(self) -> int:
        return self.config.n_trees

    @property
    def window_size(self) -> int:
        return self.config.window_size

    @property
    def n_dimensions(self) -> int:
        return self.config.n_dimensions

    @property
    def min_bounds(self) -> Tuple[float, ...]:
        return self.config.min_bounds

    @property
    def max_bounds(self) -> Tuple[float, ...]:
        return self.config.max_bounds

    def insert_sample(self, sample: Any) -> int:
        """Learn ``sample`` and return its ensemble score (higher is more normal).

        When the sample fills the current window, the reference mass of every
        tree is rolled over before the sample is scored.
        """

        vector = as_vector(sample, self.config.n_dimensions)

        self.window_counter += 1
        if self.window_counter >= self.config.window_size:
            self.update_reference()
            self.window_counter = 0

        return sum(tree.insert_and_score(vector) for tree in self.trees)

    def update_reference(self) -> None:
        """Roll the latest window into the reference mass of every tree."""

        for tree in self.trees:
            tree.update_reference()
        LOGGER.debug("Rolled reference mass over %d trees", len(self.trees))

    def score_trees(self, sample: Any) -> List[int]:
        """Per-tree scores of ``sample`` against the current reference, without learning it."""

        vector = as_vector(sample, self.config.n_dimensions)
        return [tree.score(vector) for tree in self.trees]

    def render(self, tree_index: Optional[int] = None) -> str:
        """Debug rendering of one tree, or of the whole ensemble."""

        if tree_index is not None:
            return self.trees[tree_index].render()
        return "\n\n".join(
            f"Tree Nr. {index}\n{tree.render()}" for index, tree in enumerate(self.trees)
        )

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        config = self.config
        return (
            f"TreeOrchestrator(n_trees={config.n_trees}, max_depth={config.max_depth}, "
            f"window_size={config.window_size}, n_dimensions={config.n_dimensions}, "
            f"size_limit={config.size_limit})"
        )


__all__ = ["TreeOrchestrator", "perturb_bounds"]
