"""PyASG: hierarchical sparse-grid interpolation with multi-linear hat functions.

Provides the :class:`SparseGrid` container, which maps grid nodes
(:class:`Node`) to hierarchical surpluses, together with :func:`evaluate`
for point evaluation (optionally restricted by depth or validity),
:func:`update` for fitting newly added nodes, and :func:`update_all` for
re-fitting a whole grid against a new target while keeping its nodes.
:class:`Normalizer` maps an arbitrary hyper-rectangle onto the unit
hypercube the grid lives in.

Example
-------
>>> from pyasg import SparseGrid, iter_regular_nodes, update, evaluate
>>> grid = SparseGrid(2)
>>> for node in iter_regular_nodes(2, 4):
...     grid.add_node(node)
>>> update(grid, lambda x: x[0] * x[1])
>>> round(evaluate(grid, [0.25, 0.75]), 4)
0.1875
"""

from pyasg._version import __version__
from pyasg.evaluate import evaluate, evaluate_batch
from pyasg.grid import NodeStatus, NodeValue, SparseGrid
from pyasg.node import Node, iter_regular_nodes, phi, phi_unsafe
from pyasg.normalizer import Normalizer
from pyasg.update import update, update_all

__all__ = [
    "Node",
    "NodeStatus",
    "NodeValue",
    "Normalizer",
    "SparseGrid",
    "evaluate",
    "evaluate_batch",
    "iter_regular_nodes",
    "phi",
    "phi_unsafe",
    "update",
    "update_all",
    "__version__",
]
