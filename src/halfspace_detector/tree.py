"""Half-space tree stored as an arena of nodes.

Nodes live in flat numpy arrays using implicit heap indexing: the root is
index ``0`` and the children of node ``i`` are ``2 * i + 1`` (left) and
``2 * i + 2`` (right). Parent links are therefore plain integers computed on
demand and the tree never holds references to itself.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

import numpy as np

ROOT = 0
NO_SPLIT = -1


@dataclass(frozen=True)
class Node:
    """Read-only snapshot of a single node of a :class:`HalfSpaceTree`."""

    index: int
    depth: int
    lower: np.ndarray
    upper: np.ndarray
    split_dimension: Optional[int]
    split_value: Optional[float]
    latest_mass: int
    reference_mass: int
    size_limit: int
    parent: Optional[int]
    left: Optional[int]
    right: Optional[int]

    @property
    def is_leaf(self) -> bool:
        return self.left is None

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def __str__(self) -> str:
        if self.is_leaf:
            split = "leaf"
        else:
            split = f"x{self.split_dimension} < {self.split_value:.4g}"
        return f"[{split} | ref={self.reference_mass} latest={self.latest_mass}]"


def depth_of(index: int) -> int:
    """Depth of the node stored at ``index`` (the root has depth zero)."""

    return (index + 1).bit_length() - 1


class HalfSpaceTree:
    """A randomly partitioned binary tree profiling the mass of a stream."""

    def __init__(
        self,
        max_depth: int,
        n_dimensions: int,
        size_limit: int,
        lower: np.ndarray,
        upper: np.ndarray,
        split_dimension: np.ndarray,
        split_value: np.ndarray,
    ) -> None:
        self.max_depth = max_depth
        self.n_dimensions = n_dimensions
        self.size_limit = size_limit
        self.lower = lower
        self.upper = upper
        self.split_dimension = split_dimension
        self.split_value = split_value
        n_nodes = len(split_dimension)
        self.latest_mass = np.zeros(n_nodes, dtype=np.int64)
        self.reference_mass = np.zeros(n_nodes, dtype=np.int64)
        self._first_leaf = 2**max_depth - 1

    @classmethod
    def build(
        cls,
        max_depth: int,
        n_dimensions: int,
        lower: Sequence[float],
        upper: Sequence[float],
        size_limit: int,
        rng: np.random.Generator,
    ) -> "HalfSpaceTree":
        """Randomly partition the box ``[lower, upper]`` down to ``max_depth``.

        Every internal node splits its region on a dimension drawn uniformly
        from ``n_dimensions`` at a value drawn uniformly inside the node's
        bounds on that dimension. The left child keeps the part strictly below
        the split value, the right child the rest.
        """

        n_nodes = 2 ** (max_depth + 1) - 1
        n_internal = 2**max_depth - 1

        lower_bounds = np.empty((n_nodes, n_dimensions), dtype=float)
        upper_bounds = np.empty((n_nodes, n_dimensions), dtype=float)
        lower_bounds[ROOT] = lower
        upper_bounds[ROOT] = upper
        split_dimension = np.full(n_nodes, NO_SPLIT, dtype=np.int64)
        split_value = np.full(n_nodes, np.nan, dtype=float)

        # Parents always precede their children in heap order.
        for index in range(n_internal):
            dim = int(rng.integers(n_dimensions))
            value = float(rng.uniform(lower_bounds[index, dim], upper_bounds[index, dim]))
            split_dimension[index] = dim
            split_value[index] = value

            left, right = 2 * index + 1, 2 * index + 2
            lower_bounds[left] = lower_bounds[index]
            upper_bounds[left] = upper_bounds[index]
            upper_bounds[left, dim] = value
            lower_bounds[right] = lower_bounds[index]
            upper_bounds[right] = upper_bounds[index]
            lower_bounds[right, dim] = value

        return cls(
            max_depth=max_depth,
            n_dimensions=n_dimensions,
            size_limit=size_limit,
            lower=lower_bounds,
            upper=upper_bounds,
            split_dimension=split_dimension,
            split_value=split_value,
        )

    # ------------------------------------------------------------------
    # Streaming protocol
    # ------------------------------------------------------------------
    def insert_and_score(self, vector: np.ndarray) -> int:
        """Count ``vector`` along its path and return this tree's score.

        The score is ``reference_mass * 2 ** depth`` taken at the first node
        of the path that is a leaf or whose reference mass is below
        ``size_limit``. The latest mass of every node down to the leaf is
        incremented regardless of where the score was taken.
        """

        index = ROOT
        depth = 0
        score: Optional[int] = None
        while True:
            self.latest_mass[index] += 1
            is_leaf = index >= self._first_leaf
            if score is None and (is_leaf or self.reference_mass[index] < self.size_limit):
                score = int(self.reference_mass[index]) << depth
            if is_leaf:
                return score
            index = self._child_for(index, vector)
            depth += 1

    def score(self, vector: np.ndarray) -> int:
        """Score ``vector`` against the reference mass without counting it."""

        index = ROOT
        depth = 0
        while True:
            reference = int(self.reference_mass[index])
            if index >= self._first_leaf or reference < self.size_limit:
                return reference << depth
            index = self._child_for(index, vector)
            depth += 1

    def update_reference(self) -> None:
        """Freeze the latest window into the reference mass and restart counting."""

        if (self.latest_mass < 0).any():
            raise RuntimeError("Negative mass count found while rolling the reference window")
        self.reference_mass[:] = self.latest_mass
        self.latest_mass[:] = 0

    def _child_for(self, index: int, vector: np.ndarray) -> int:
        if vector[self.split_dimension[index]] < self.split_value[index]:
            return 2 * index + 1
        return 2 * index + 2

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------
    @property
    def n_nodes(self) -> int:
        return len(self.split_dimension)

    def is_leaf(self, index: int) -> bool:
        return index >= self._first_leaf

    def node(self, index: int) -> Node:
        if not 0 <= index < self.n_nodes:
            raise IndexError(f"Node index {index} outside tree of {self.n_nodes} nodes")
        leaf = self.is_leaf(index)
        return Node(
            index=index,
            depth=depth_of(index),
            lower=self.lower[index].copy(),
            upper=self.upper[index].copy(),
            split_dimension=None if leaf else int(self.split_dimension[index]),
            split_value=None if leaf else float(self.split_value[index]),
            latest_mass=int(self.latest_mass[index]),
            reference_mass=int(self.reference_mass[index]),
            size_limit=self.size_limit,
            parent=None if index == ROOT else (index - 1) // 2,
            left=None if leaf else 2 * index + 1,
            right=None if leaf else 2 * index + 2,
        )

    def nodes(self) -> Iterator[Node]:
        """Iterate over every node in pre-order (root, left subtree, right subtree)."""

        stack = [ROOT]
        while stack:
            index = stack.pop()
            yield self.node(index)
            if not self.is_leaf(index):
                stack.extend((2 * index + 2, 2 * index + 1))

    def leaves(self) -> List[Node]:
        return [self.node(index) for index in range(self._first_leaf, self.n_nodes)]

    def render(self, indent: str = "    ") -> str:
        """Debug dump of the tree, one node per line indented by depth."""

        return "\n".join(f"{indent * node.depth}{node}" for node in self.nodes())


__all__ = ["HalfSpaceTree", "Node", "depth_of"]
