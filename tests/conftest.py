"""Shared test fixtures for PyASG tests."""

import math

import pytest

from pyasg import Node, SparseGrid, iter_regular_nodes, update


# ---------------------------------------------------------------------------
# Test functions
# ---------------------------------------------------------------------------

def square_1d(x):
    """x^2"""
    return x[0] ** 2


def sin_prod_2d(x):
    """sin(pi x) * sin(pi y), zero on the boundary of the unit square."""
    return math.sin(math.pi * x[0]) * math.sin(math.pi * x[1])


def smooth_3d(x):
    """exp(x) + y*z"""
    return math.exp(x[0]) + x[1] * x[2]


def make_grid(num_dimensions, nodes, f2fit=None):
    """Insert *nodes* into a fresh grid, fitting them with *f2fit* if given."""
    grid = SparseGrid(num_dimensions)
    for node in nodes:
        grid.add_node(node)
    if f2fit is not None:
        update(grid, f2fit)
    return grid


def full_tensor_nodes(num_dimensions, max_level):
    """All nodes with every level <= max_level, sorted by depth."""
    nodes = [
        node
        for node in iter_regular_nodes(num_dimensions, num_dimensions * (max_level - 1) + 1)
        if max(node.levels) <= max_level
    ]
    return sorted(nodes, key=lambda node: node.depth)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def grid_example_1d():
    """The three-node 1D grid (0.5; 0.25, 0.75), not yet fitted."""
    return make_grid(1, [Node((1,), (1,)), Node((2,), (1,)), Node((2,), (3,))])


@pytest.fixture
def grid_square_1d():
    """1D regular grid of depth 4 fitted to x^2."""
    return make_grid(1, iter_regular_nodes(1, 4), square_1d)


@pytest.fixture
def grid_sin_2d():
    """2D regular sparse grid of depth 5 fitted to sin(pi x) sin(pi y)."""
    return make_grid(2, iter_regular_nodes(2, 5), sin_prod_2d)


@pytest.fixture
def grid_smooth_3d():
    """3D regular sparse grid of depth 4 fitted to exp(x) + y*z."""
    return make_grid(3, iter_regular_nodes(3, 4), smooth_3d)
