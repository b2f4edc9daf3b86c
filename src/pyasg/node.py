"""Grid nodes and the multi-linear hat basis.

A node is identified by one ``(level, index)`` pair per dimension. Along a
single dimension, level ``l`` holds the points ``i / 2**l`` for odd ``i``,
and the hat function attached to ``(l, i)`` is

.. math::

    \\phi_{l,i}(x) = \\max(0, 1 - |2^l x - i|)

which is 1 at its own point and vanishes outside ``[(i-1)/2^l, (i+1)/2^l]``.
The d-dimensional basis function is the tensor product of the 1-D hats.

References
----------
- Garcke (2013), "Sparse Grids in a Nutshell", in Sparse Grids and
  Applications, LNCSE 88:57-80.
- Bungartz & Griebel (2004), "Sparse grids", Acta Numerica 13:147-269.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Node:
    """A sparse-grid node: per-dimension hierarchical levels and indices.

    Nodes are immutable and compare/hash structurally, so they can be used
    as dictionary keys. Construction only checks the shape of the data;
    use :meth:`is_valid` to check that the multi-index belongs to the
    hierarchy.

    Parameters
    ----------
    levels : sequence of int
        Hierarchical level per dimension (1 is the coarsest).
    indices : sequence of int
        Index per dimension; valid indices are odd and lie in
        ``[1, 2**level - 1]``.

    Examples
    --------
    >>> root = Node((1, 1), (1, 1))
    >>> root.depth
    1
    >>> Node((2, 1), (3, 1)).x.tolist()
    [0.75, 0.5]
    """

    levels: Tuple[int, ...]
    indices: Tuple[int, ...]
    depth: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        levels = tuple(self.levels)
        indices = tuple(self.indices)
        if len(levels) == 0 or len(levels) != len(indices):
            raise ValueError(
                f"levels and indices must have the same non-zero length, "
                f"got {len(levels)} and {len(indices)}"
            )
        for value in levels + indices:
            if not isinstance(value, (int, np.integer)) or isinstance(value, bool):
                raise TypeError(
                    f"levels and indices must be integers, got {type(value).__name__}"
                )
            if value < 0:
                raise ValueError(
                    f"levels and indices must be non-negative, got {value}"
                )
        object.__setattr__(self, "levels", tuple(int(v) for v in levels))
        object.__setattr__(self, "indices", tuple(int(v) for v in indices))
        object.__setattr__(self, "depth", sum(self.levels) - len(self.levels) + 1)

    @classmethod
    def root(cls, num_dimensions: int) -> "Node":
        """Return the depth-1 node at the centre of ``[0, 1]^d``."""
        return cls((1,) * num_dimensions, (1,) * num_dimensions)

    @property
    def num_dimensions(self) -> int:
        return len(self.levels)

    @property
    def x(self) -> np.ndarray:
        """Collocation point of the node in ``[0, 1]^d``."""
        return np.array(
            [i / 2.0 ** l for l, i in zip(self.levels, self.indices)]
        )

    def is_valid(self) -> bool:
        """Return True if every ``(level, index)`` pair is in the hierarchy."""
        for l, i in zip(self.levels, self.indices):
            if l < 1 or i % 2 == 0 or i > 2 ** l - 1:
                return False
        return True

    def parents(self) -> List["Node"]:
        """Return the direct parents, one per dimension with level > 1.

        Each parent coarsens a single dimension by one level, so its depth
        is exactly ``self.depth - 1``. The root has no parents.
        """
        out = []
        for j, (l, i) in enumerate(zip(self.levels, self.indices)):
            if l <= 1:
                continue
            p = (i - 1) // 2
            if p % 2 == 0:
                p = (i + 1) // 2
            levels = self.levels[:j] + (l - 1,) + self.levels[j + 1:]
            indices = self.indices[:j] + (p,) + self.indices[j + 1:]
            out.append(Node(levels, indices))
        return out

    def __str__(self) -> str:
        pairs = ", ".join(f"({l},{i})" for l, i in zip(self.levels, self.indices))
        return f"Node[{pairs}]"


def phi_unsafe(x: Sequence[float], node: Node) -> float:
    """Evaluate the tensor-product hat function of *node* at *x*.

    No checks are made on *x*: it must have ``node.num_dimensions``
    entries in ``[0, 1]``. This is the inner loop of every evaluation.

    Parameters
    ----------
    x : sequence of float
        Point in the unit hypercube.
    node : Node
        Node whose basis function is evaluated.

    Returns
    -------
    float
        Basis function value in ``[0, 1]``.
    """
    res = 1.0
    for xj, l, i in zip(x, node.levels, node.indices):
        v = 1.0 - abs(xj * 2.0 ** l - i)
        if v <= 0.0:
            return 0.0
        res *= v
    return res


def phi(x: Sequence[float], node: Node) -> float:
    """Checked version of :func:`phi_unsafe`.

    Raises
    ------
    ValueError
        If ``len(x)`` differs from the node dimension or *x* lies outside
        ``[0, 1]^d``.
    """
    x = np.asarray(x, dtype=float)
    if x.ndim != 1 or x.shape[0] != node.num_dimensions:
        raise ValueError(
            f"length of x ({x.size}) is not equal to the node dimension "
            f"({node.num_dimensions})"
        )
    if np.any(x < 0.0) or np.any(x > 1.0):
        raise ValueError(f"x must lie in [0, 1]^{node.num_dimensions}, got {x.tolist()}")
    return phi_unsafe(x.tolist(), node)


def _level_combinations(num_dimensions: int, total: int) -> Iterator[Tuple[int, ...]]:
    """Yield all level tuples (each >= 1) of length *num_dimensions* summing to *total*."""
    if num_dimensions == 1:
        if total >= 1:
            yield (total,)
        return
    for first in range(1, total - num_dimensions + 2):
        for rest in _level_combinations(num_dimensions - 1, total - first):
            yield (first,) + rest


def iter_regular_nodes(num_dimensions: int, max_depth: int) -> Iterator[Node]:
    """Yield every node of the regular sparse grid up to *max_depth*.

    Nodes come out in non-decreasing depth order, so inserting them into a
    grid in this order always inserts parents before children.

    Parameters
    ----------
    num_dimensions : int
        Number of dimensions (>= 1).
    max_depth : int
        Deepest depth to include (>= 1).

    Examples
    --------
    >>> sum(1 for _ in iter_regular_nodes(2, 3))
    17
    """
    if num_dimensions < 1:
        raise ValueError(f"num_dimensions must be >= 1, got {num_dimensions}")
    if max_depth < 1:
        raise ValueError(f"max_depth must be >= 1, got {max_depth}")
    for depth in range(1, max_depth + 1):
        for levels in _level_combinations(num_dimensions, depth + num_dimensions - 1):
            odd = [range(1, 2 ** l, 2) for l in levels]
            for indices in itertools.product(*odd):
                yield Node(levels, indices)
