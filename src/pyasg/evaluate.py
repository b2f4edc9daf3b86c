"""Evaluation of the multi-linear sparse-grid interpolant.

Every evaluation is a full scan over the grid in insertion order,

.. math::

    \\hat f(x) = \\sum_{k \\in \\text{grid}} \\alpha_k \\phi_k(x)

optionally filtered by node depth and by validity. The cost is ``O(N)``
in the number of nodes; no spatial index is kept, since the basis
functions have compact support but query points are arbitrary.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from pyasg._checks import _as_point
from pyasg.grid import SparseGrid
from pyasg.node import Node, phi_unsafe
from pyasg.normalizer import Normalizer


def evaluate(
    grid: SparseGrid,
    x,
    normalizer: Normalizer | None = None,
    *,
    until_depth: int = 0,
    valid_only: bool = False,
) -> float:
    """Evaluate the sparse-grid interpolant at a point.

    Parameters
    ----------
    grid : SparseGrid
        The grid to evaluate.
    x : sequence of float or Node
        Point in ``[0, 1]^d`` (or in the normalizer's box if *normalizer*
        is given). A :class:`Node` evaluates at its own collocation point.
        For ``d == 1`` a scalar such as ``0.5`` is also accepted.
    normalizer : Normalizer, optional
        If given, *x* is first mapped into ``[0, 1]^d``.
    until_depth : int, optional
        Only nodes with ``depth <= until_depth`` contribute. Any value
        below 1 (the default) means no depth restriction.
    valid_only : bool, optional
        Only nodes with a valid value and a valid multi-index contribute.

    Returns
    -------
    float
        Interpolated value.

    Raises
    ------
    ValueError
        If the length of *x* differs from the grid dimension.
    TypeError
        If a Node is passed together with a normalizer.
    RuntimeError
        If another thread is currently updating the grid. Updates from
        other threads are likewise rejected while this scan runs.

    Notes
    -----
    The point is not range-checked; values outside ``[0, 1]^d`` give
    meaningless results. Nodes without a computed value carry NaN, so an
    unfiltered evaluation of a grid with pending nodes returns NaN.
    """
    if isinstance(x, Node):
        if normalizer is not None:
            raise TypeError(
                "A Node is already located in [0, 1]^d; do not pass a normalizer."
            )
        x = x.x
    elif normalizer is not None:
        x = normalizer.normalize(x)
    # check length once here, then use phi_unsafe() in the loop
    x = _as_point(x, grid.num_dimensions).tolist()

    restrict_depth = until_depth >= 1
    fx = 0.0
    with grid._read_phase():
        for node, nval in grid.node_values.items():
            if restrict_depth and node.depth > until_depth:
                continue
            if valid_only and not (nval.is_valid and node.is_valid()):
                continue
            fx += nval.alpha * phi_unsafe(x, node)
    return fx


def evaluate_batch(
    grid: SparseGrid,
    points,
    normalizer: Normalizer | None = None,
    *,
    until_depth: int = 0,
    valid_only: bool = False,
) -> np.ndarray:
    """Evaluate the interpolant at multiple points.

    Parameters
    ----------
    grid : SparseGrid
        The grid to evaluate.
    points : array-like
        Points of shape (N, d).
    normalizer, until_depth, valid_only
        As in :func:`evaluate`.

    Returns
    -------
    ndarray
        Results of shape (N,).
    """
    points = np.asarray(points, dtype=float)
    if points.ndim != 2:
        raise ValueError(f"points must have shape (N, d), got {points.shape}")
    N = points.shape[0]
    results = np.empty(N)
    for i in range(N):
        results[i] = evaluate(grid, points[i], normalizer,
                              until_depth=until_depth, valid_only=valid_only)
    return results


def _ancestor_value(grid: SparseGrid, node: Node, x: Sequence[float]) -> float:
    """Valid-only interpolant of the nodes strictly shallower than *node*.

    A depth-1 node has no shallower nodes, so the result is 0.
    """
    if node.depth <= 1:
        return 0.0
    return evaluate(grid, x, until_depth=node.depth - 1, valid_only=True)
