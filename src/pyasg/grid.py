"""Sparse-grid container: an insertion-ordered map from nodes to nodal values.

The container stores, for every node, the sampled value ``f`` and the
hierarchical surplus ``alpha``. Once a value is valid,

.. math::

    \\alpha = f - \\sum_{\\text{shallower nodes } k} \\alpha_k \\phi_k(x)

so the interpolant telescopes to ``f`` at every node whose ancestors are all
present (a *self-contained* grid).
"""

from __future__ import annotations

import contextlib
import enum
import math
import threading
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from pyasg.node import Node


class NodeStatus(enum.Enum):
    """Lifecycle state of a :class:`NodeValue`."""

    NOT_COMPUTED = "not computed"
    VALID = "valid"
    STALE = "stale"


@dataclass(frozen=True)
class NodeValue:
    """Sampled value and hierarchical surplus of one node.

    Use the :meth:`not_computed` and :meth:`valid` constructors rather than
    building instances by hand. A not-computed value carries NaN for both
    numbers; a stale value keeps the numbers it had when it was invalidated.
    """

    f: float
    alpha: float
    status: NodeStatus = NodeStatus.VALID

    @classmethod
    def not_computed(cls) -> "NodeValue":
        return cls(math.nan, math.nan, NodeStatus.NOT_COMPUTED)

    @classmethod
    def valid(cls, f: float, alpha: float) -> "NodeValue":
        return cls(float(f), float(alpha), NodeStatus.VALID)

    def stale(self) -> "NodeValue":
        """Return a copy of this value marked as stale."""
        return NodeValue(self.f, self.alpha, NodeStatus.STALE)

    @property
    def is_valid(self) -> bool:
        return self.status is NodeStatus.VALID


class SparseGrid:
    """Adaptive or regular sparse grid on the unit hypercube.

    The grid owns an insertion-ordered ``dict`` from :class:`Node` to
    :class:`NodeValue`. Nodes are only ever added; their values are
    overwritten by :func:`pyasg.update` and :func:`pyasg.update_all`.

    Mutations run inside a write phase owned by a single thread. While a
    write phase is open, evaluations from other threads raise
    ``RuntimeError``; the owning thread may keep evaluating, which is how
    the updater computes ancestors-only partial sums. Conversely, a write
    phase cannot open while another thread is in the middle of an
    evaluation.

    ``selfcontained`` is kept up to date as nodes are inserted.

    Parameters
    ----------
    num_dimensions : int
        Dimension ``d`` of the grid.
    rtol : float, optional
        Relative fitting tolerance for the training procedure that
        populates the grid. Stored, not enforced here. Default is 1e-2.

    Examples
    --------
    >>> from pyasg import Node, SparseGrid, update
    >>> grid = SparseGrid(1)
    >>> for node in (Node((1,), (1,)), Node((2,), (1,)), Node((2,), (3,))):
    ...     grid.add_node(node)
    >>> update(grid, lambda x: x[0] ** 2)
    >>> round(grid.evaluate([0.25]), 4)
    0.0625
    """

    def __init__(self, num_dimensions: int, rtol: float = 1e-2):
        if not isinstance(num_dimensions, int) or num_dimensions < 1:
            raise ValueError(f"num_dimensions must be an int >= 1, got {num_dimensions}")
        if rtol <= 0:
            raise ValueError(f"rtol must be positive, got {rtol}")
        self.num_dimensions = num_dimensions
        self.rtol = float(rtol)
        self.node_values: Dict[Node, NodeValue] = {}
        self.depth: int = 0
        self.selfcontained: bool = True
        self._writer: int | None = None
        self._writer_lock = threading.Lock()
        self._readers: Dict[int, int] = {}

    # ------------------------------------------------------------------
    # Access phases
    # ------------------------------------------------------------------

    @contextlib.contextmanager
    def _write_phase(self):
        """Hold exclusive write access for the current thread (reentrant).

        Raises ``RuntimeError`` if another thread is writing or is in the
        middle of an evaluation.
        """
        me = threading.get_ident()
        with self._writer_lock:
            if self._writer is not None and self._writer != me:
                raise RuntimeError(
                    "Grid is already being updated by another thread."
                )
            if any(reader != me for reader in self._readers):
                raise RuntimeError(
                    "Grid is being evaluated by another thread; update after "
                    "the evaluation finishes."
                )
            outer = self._writer
            self._writer = me
        try:
            yield self
        finally:
            with self._writer_lock:
                self._writer = outer

    @contextlib.contextmanager
    def _read_phase(self):
        """Register the current thread as a reader for the duration of a scan.

        The thread owning the write phase reads without registering.
        """
        me = threading.get_ident()
        with self._writer_lock:
            if self._writer == me:
                registered = False
            elif self._writer is not None:
                raise RuntimeError(
                    "Grid is being updated by another thread; evaluate after "
                    "the update finishes."
                )
            else:
                self._readers[me] = self._readers.get(me, 0) + 1
                registered = True
        try:
            yield self
        finally:
            if registered:
                with self._writer_lock:
                    self._readers[me] -= 1
                    if self._readers[me] == 0:
                        del self._readers[me]

    # ------------------------------------------------------------------
    # Mapping interface
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.node_values)

    def __contains__(self, node) -> bool:
        return node in self.node_values

    def __iter__(self) -> Iterator[Node]:
        return iter(self.node_values)

    def __getitem__(self, node: Node) -> NodeValue:
        return self.node_values[node]

    def __setitem__(self, node: Node, value: NodeValue) -> None:
        if not isinstance(value, NodeValue):
            raise TypeError(
                f"grid values must be NodeValue instances, got {type(value).__name__}"
            )
        self._check_node(node)
        with self._write_phase():
            self.node_values[node] = value
            self.depth = max(self.depth, node.depth)
            if self.selfcontained:
                self.selfcontained = all(p in self.node_values for p in node.parents())
            else:
                # the new node may be the missing parent
                self.selfcontained = self.is_selfcontained()

    def items(self):
        return self.node_values.items()

    def _check_node(self, node) -> None:
        if not isinstance(node, Node):
            raise TypeError(f"expected a Node, got {type(node).__name__}")
        if node.num_dimensions != self.num_dimensions:
            raise ValueError(
                f"Dimension mismatch: node has {node.num_dimensions} "
                f"dimensions, grid has {self.num_dimensions}"
            )

    def add_node(self, node: Node) -> None:
        """Insert *node* with a not-computed value.

        Raises
        ------
        ValueError
            If the node is already in the grid or has the wrong dimension.
        """
        self._check_node(node)
        if node in self.node_values:
            raise ValueError(f"{node} is already in the grid")
        self[node] = NodeValue.not_computed()

    def invalidate(self, node: Node) -> None:
        """Mark the value of *node* as stale so the next update refits it."""
        with self._write_phase():
            value = self.node_values[node]
            if value.is_valid:
                self.node_values[node] = value.stale()

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def max_node_depth(self) -> int:
        """Return the maximum depth over the nodes present (0 if empty)."""
        return max((node.depth for node in self.node_values), default=0)

    def nodes_at_depth(self, depth: int) -> List[Node]:
        """Return the nodes of the given depth, in insertion order."""
        return [node for node in self.node_values if node.depth == depth]

    def is_selfcontained(self) -> bool:
        """Return True if every node's parents are also in the grid.

        Parent closure at every node implies that the full ancestor chain
        of every node is present.
        """
        for node in self.node_values:
            for parent in node.parents():
                if parent not in self.node_values:
                    return False
        return True

    def count_valid(self) -> int:
        return sum(1 for value in self.node_values.values() if value.is_valid)

    def copy(self) -> "SparseGrid":
        """Return an independent grid with the same nodes, values and metadata."""
        with self._read_phase():
            obj = SparseGrid(self.num_dimensions, rtol=self.rtol)
            obj.node_values = dict(self.node_values)
            obj.depth = self.depth
            obj.selfcontained = self.selfcontained
        return obj

    # ------------------------------------------------------------------
    # Evaluation and fitting
    # ------------------------------------------------------------------

    def evaluate(self, x, normalizer=None, *, until_depth: int = 0,
                 valid_only: bool = False) -> float:
        """Evaluate the interpolant; see :func:`pyasg.evaluate`."""
        from pyasg.evaluate import evaluate

        return evaluate(self, x, normalizer, until_depth=until_depth,
                        valid_only=valid_only)

    def update(self, f2fit=None) -> None:
        """Fit the nodes without a valid value; see :func:`pyasg.update`."""
        from pyasg.update import update

        update(self, f2fit)

    def update_all(self, target, print_level: str = "iter") -> None:
        """Re-fit every node; see :func:`pyasg.update_all`."""
        from pyasg.update import update_all

        update_all(self, target, print_level=print_level)

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"SparseGrid("
            f"dims={self.num_dimensions}, "
            f"nodes={len(self)}, "
            f"depth={self.depth})"
        )

    def __str__(self) -> str:
        contained = "self-contained" if self.selfcontained else "not self-contained"
        per_depth: List[Tuple[int, int]] = []
        for k in range(1, self.depth + 1):
            per_depth.append((k, len(self.nodes_at_depth(k))))

        max_display = 6
        if len(per_depth) > max_display:
            depth_str = (
                ", ".join(f"{k}: {n}" for k, n in per_depth[:max_display]) + ", ..."
            )
        else:
            depth_str = ", ".join(f"{k}: {n}" for k, n in per_depth)

        lines = [
            f"SparseGrid ({self.num_dimensions}D, {len(self):,} nodes, {contained})",
            f"  Depth:       {self.depth}",
            f"  Per depth:   {depth_str or '-'}",
            f"  Valid nodes: {self.count_valid():,}/{len(self):,}",
            f"  rtol:        {self.rtol:.2e}",
        ]
        return "\n".join(lines)
