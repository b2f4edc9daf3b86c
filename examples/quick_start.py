"""Quick start example: fit a 2D function on a sparse grid, then re-fit it."""

import math

from pyasg import Normalizer, SparseGrid, evaluate, iter_regular_nodes, update, update_all

nzer = Normalizer([-3.0, 0.0], [3.0, 2.0])


def f(x01):
    """A smooth 2D function sin(x) * exp(-y), given a point in [0, 1]^2."""
    x = nzer.denormalize(x01)
    return math.sin(x[0]) * math.exp(-x[1])


def g(x01):
    """A second target on the same domain: cos(x) * exp(-y)."""
    x = nzer.denormalize(x01)
    return math.cos(x[0]) * math.exp(-x[1])


# Build a regular sparse grid and fit it
grid = SparseGrid(2)
for node in iter_regular_nodes(2, 7):
    grid.add_node(node)
update(grid, f)
print(grid)

# Evaluate at a test point of the original domain
point = [1.0, 0.5]
exact = math.sin(point[0]) * math.exp(-point[1])
approx = evaluate(grid, point, nzer)

print(f"\nExact:  {exact:.10f}")
print(f"Approx: {approx:.10f}")
print(f"Error:  {abs(approx - exact):.2e}")

# Coarser approximation using only the first few depths
coarse = evaluate(grid, point, nzer, until_depth=4)
print(f"Depth <= 4 error: {abs(coarse - exact):.2e}")

# Re-fit the same nodes to a different function
update_all(grid, g, print_level="final")
exact_g = math.cos(point[0]) * math.exp(-point[1])
print(f"Re-fitted error:  {abs(evaluate(grid, point, nzer) - exact_g):.2e}")
