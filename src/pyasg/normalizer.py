"""Affine map between a hyper-rectangle and the unit hypercube."""

from __future__ import annotations

from typing import Sequence

import numpy as np


class Normalizer:
    """Per-dimension affine map from ``[lb, ub]`` to ``[0, 1]^d`` and back.

    Parameters
    ----------
    lb : sequence of float
        Lower bound of each dimension.
    ub : sequence of float
        Upper bound of each dimension. Must satisfy ``lb < ub`` elementwise.

    Examples
    --------
    >>> nzer = Normalizer([0.0, -1.0], [2.0, 1.0])
    >>> nzer.normalize([1.0, 0.0]).tolist()
    [0.5, 0.5]
    """

    def __init__(self, lb: Sequence[float], ub: Sequence[float]):
        lb = np.asarray(lb, dtype=float)
        ub = np.asarray(ub, dtype=float)
        if lb.ndim != 1 or lb.shape != ub.shape or lb.size == 0:
            raise ValueError(
                f"lb and ub must be non-empty 1-D sequences of the same length, "
                f"got shapes {lb.shape} and {ub.shape}"
            )
        for d in range(lb.size):
            if not lb[d] < ub[d]:
                raise ValueError(
                    f"bounds[{d}]: lb={lb[d]} must be strictly less than ub={ub[d]}"
                )
        self.lb = lb
        self.ub = ub

    @property
    def num_dimensions(self) -> int:
        return int(self.lb.size)

    def _check(self, x) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if x.ndim == 0 and self.num_dimensions == 1:
            x = x.reshape(1)
        if x.ndim != 1 or x.shape[0] != self.num_dimensions:
            raise ValueError(
                f"x of shape {x.shape} does not match the normalizer "
                f"dimension ({self.num_dimensions})"
            )
        return x

    def normalize(self, x: Sequence[float]) -> np.ndarray:
        """Map a point of ``[lb, ub]`` into ``[0, 1]^d``."""
        x = self._check(x)
        return (x - self.lb) / (self.ub - self.lb)

    def denormalize(self, x01: Sequence[float]) -> np.ndarray:
        """Map a point of ``[0, 1]^d`` back into ``[lb, ub]``."""
        x01 = self._check(x01)
        return self.lb + x01 * (self.ub - self.lb)

    def __repr__(self) -> str:
        return f"Normalizer(lb={self.lb.tolist()}, ub={self.ub.tolist()})"
