"""Shared argument checks for evaluation and coefficient updates."""

from __future__ import annotations

import numpy as np


def _is_scalar(value) -> bool:
    """Return True if *value* is a real numeric scalar (int, float, or numpy scalar)."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def _as_point(x, num_dimensions: int) -> np.ndarray:
    """Convert *x* to a 1-D float array and check its length against the grid.

    A scalar is accepted as the point of a one-dimensional grid.
    """
    x = np.asarray(x, dtype=float)
    if x.ndim == 0 and num_dimensions == 1:
        x = x.reshape(1)
    if x.ndim != 1:
        raise ValueError(
            f"x must be a 1-D point of length d ({num_dimensions}), "
            f"got shape {x.shape}"
        )
    if x.shape[0] != num_dimensions:
        raise ValueError(
            f"length of x ({x.shape[0]}) is not equal to d ({num_dimensions})"
        )
    return x


def _validate_function(function, num_dimensions: int) -> None:
    """Check that *function* maps a length-d point to a real scalar.

    The function is called once at the centre of the unit hypercube. Any
    exception it raises there propagates unchanged.

    Raises
    ------
    TypeError
        If *function* is not callable or does not return a real scalar.
    """
    if not callable(function):
        raise TypeError(
            f"function to fit must be callable, got {type(function).__name__}"
        )
    value = function(np.full(num_dimensions, 0.5))
    if not _is_scalar(value):
        raise TypeError(
            f"function to fit must return a real scalar for a point of "
            f"length {num_dimensions}, got {type(value).__name__}"
        )
