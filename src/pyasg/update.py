"""Hierarchical surplus computation and re-fitting.

Residual fitting sets the surplus of a node to its sampled value minus the
valid-only interpolant formed by strictly shallower nodes. :func:`update`
fills in the nodes that have no valid value; :func:`update_all` re-fits
every node against a new target while keeping the node set unchanged.
"""

from __future__ import annotations

import warnings
from collections.abc import Mapping
from typing import Callable, List

from pyasg._checks import _validate_function
from pyasg.evaluate import _ancestor_value, evaluate
from pyasg.grid import NodeValue, SparseGrid
from pyasg.node import Node


def _pending_nodes(grid: SparseGrid) -> List[Node]:
    """Nodes without a valid value, shallowest first (stable in insertion order)."""
    pending = [node for node, nval in grid.items() if not nval.is_valid]
    return sorted(pending, key=lambda node: node.depth)


def update(grid: SparseGrid, f2fit: Callable | None = None) -> None:
    """Fit every node of *grid* whose value is not valid.

    Typically called after nodes were added with
    :meth:`SparseGrid.add_node` or after :meth:`SparseGrid.invalidate`.
    Pending nodes are fitted shallowest first, so a pending parent is
    always fitted before a pending child.

    Parameters
    ----------
    grid : SparseGrid
        The grid to update in place.
    f2fit : callable, optional
        Target function ``f2fit(x) -> float`` with ``x`` an ndarray of
        length ``d`` in ``[0, 1]^d``. If omitted, the current interpolant
        itself is used as the target: the node value is the valid-only
        evaluation of the whole grid at the node and the surplus is that
        value minus the ancestors-only evaluation.

    Raises
    ------
    TypeError
        If *f2fit* is not callable or does not return a real scalar.

    Notes
    -----
    Prefer passing *f2fit* whenever the true function is available. For a
    well-trained grid, the self-referential fit gives surpluses close to
    zero; it mostly serves to make newly added nodes usable.
    """
    if f2fit is not None:
        _validate_function(f2fit, grid.num_dimensions)

    with grid._write_phase():
        for node in _pending_nodes(grid):
            x = node.x
            if f2fit is None:
                f = evaluate(grid, x, until_depth=0, valid_only=True)
            else:
                f = float(f2fit(x))
            alpha = f - _ancestor_value(grid, node, x)
            grid.node_values[node] = NodeValue.valid(f, alpha)


def update_all(grid: SparseGrid, target, print_level: str = "iter") -> None:
    """Re-fit every node of *grid* against a new target.

    The node set is unchanged; only values and surpluses are overwritten.
    Nodes are processed depth by depth, from depth 2 to the grid depth,
    because the ancestors-only evaluation at depth ``k`` must see the
    already re-fitted values of all depths below ``k``. Depth-1 nodes are
    kept as they are.

    Parameters
    ----------
    grid : SparseGrid
        The grid to re-fit in place. Must not be empty.
    target : callable or mapping
        Either a function ``f(x) -> float`` (``x`` an ndarray in
        ``[0, 1]^d``) or a mapping from :class:`Node` to the new sampled
        value. A mapping must contain every node of the grid; extra keys
        are ignored.
    print_level : str, optional
        ``"iter"`` (default) prints one line per depth and a final
        message, ``"final"`` prints only the final message, any other
        value prints nothing.

    Raises
    ------
    ValueError
        If the grid is empty.
    TypeError
        If *target* is neither callable nor a mapping, or the callable does
        not return a real scalar.
    KeyError
        If a mapping lacks one of the grid's nodes. Depths already
        processed keep their new values.

    Warns
    -----
    UserWarning
        If the grid is not self-contained.
    """
    if callable(target):
        _validate_function(target, grid.num_dimensions)

        def sample(node: Node) -> float:
            return float(target(node.x))
    elif isinstance(target, Mapping):
        def sample(node: Node) -> float:
            return float(target[node])
    else:
        raise TypeError(
            f"target must be a callable or a mapping from Node to float, "
            f"got {type(target).__name__}"
        )

    if len(grid) == 0:
        raise ValueError("empty grid. Consider train() instead.")

    with grid._write_phase():
        maxdepth = grid.max_node_depth()
        grid.depth = maxdepth

        grid.selfcontained = grid.is_selfcontained()
        if not grid.selfcontained:
            warnings.warn(
                "The grid is not self-contained; the re-fitted interpolant "
                "is not guaranteed to match the target at every node.",
                UserWarning,
                stacklevel=2,
            )

        for lnow in range(2, maxdepth + 1):
            if print_level == "iter":
                print(f"updating depth = {lnow}...")
            for node in grid.nodes_at_depth(lnow):
                x = node.x
                f = sample(node)
                alpha = f - evaluate(grid, x, until_depth=lnow - 1, valid_only=True)
                grid.node_values[node] = NodeValue.valid(f, alpha)

    if print_level in ("iter", "final"):
        print("The entire sparse grid is updated.")
