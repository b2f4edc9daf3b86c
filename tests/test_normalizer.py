"""Tests for Normalizer and normalized evaluation."""

import math

import numpy as np
import pytest

from pyasg import Node, Normalizer, evaluate


class TestNormalizer:
    def test_normalize(self):
        nzer = Normalizer([0.0, -1.0], [2.0, 1.0])
        np.testing.assert_allclose(nzer.normalize([1.0, 0.0]), [0.5, 0.5])
        np.testing.assert_allclose(nzer.normalize([0.0, 1.0]), [0.0, 1.0])

    def test_denormalize_inverts_normalize(self):
        nzer = Normalizer([-3.0, 10.0, 0.1], [5.0, 20.0, 0.2])
        x = np.array([1.2, 17.5, 0.15])
        np.testing.assert_allclose(nzer.denormalize(nzer.normalize(x)), x)

    def test_num_dimensions(self):
        assert Normalizer([0.0], [1.0]).num_dimensions == 1
        assert Normalizer([0, 0, 0], [1, 2, 3]).num_dimensions == 3

    def test_bad_bounds_raise(self):
        with pytest.raises(ValueError, match="strictly less"):
            Normalizer([0.0, 1.0], [1.0, 1.0])

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError, match="same length"):
            Normalizer([0.0, 0.0], [1.0])

    def test_point_length_mismatch_raises(self):
        nzer = Normalizer([0.0, 0.0], [1.0, 1.0])
        with pytest.raises(ValueError, match="normalizer dimension"):
            nzer.normalize([0.5])

    def test_scalar_point_1d(self):
        nzer = Normalizer([-1.0], [3.0])
        assert nzer.normalize(1.0).tolist() == [0.5]
        assert nzer.denormalize(0.25).tolist() == [0.0]

    def test_repr(self):
        assert repr(Normalizer([0.0], [2.0])) == "Normalizer(lb=[0.0], ub=[2.0])"


class TestNormalizedEvaluate:
    def test_matches_manual_normalization(self, grid_sin_2d):
        nzer = Normalizer([-2.0, 0.0], [2.0, 10.0])
        x = [0.7, 3.3]
        expected = evaluate(grid_sin_2d, nzer.normalize(x))
        assert evaluate(grid_sin_2d, x, nzer) == expected

    def test_exact_at_mapped_node(self, grid_sin_2d):
        nzer = Normalizer([-2.0, 0.0], [2.0, 10.0])
        node = Node((2, 3), (1, 5))
        x = nzer.denormalize(node.x)
        exact = math.sin(math.pi * 0.25) * math.sin(math.pi * 0.625)
        assert evaluate(grid_sin_2d, x, nzer) == pytest.approx(exact, abs=1e-12)

    def test_dimension_mismatch_raises(self, grid_sin_2d):
        nzer = Normalizer([0.0, 0.0, 0.0], [1.0, 1.0, 1.0])
        with pytest.raises(ValueError, match="not equal to d"):
            evaluate(grid_sin_2d, [0.5, 0.5, 0.5], nzer)

    def test_node_with_normalizer_raises(self, grid_sin_2d):
        nzer = Normalizer([0.0, 0.0], [1.0, 1.0])
        with pytest.raises(TypeError, match="normalizer"):
            evaluate(grid_sin_2d, Node((1, 1), (1, 1)), nzer)
