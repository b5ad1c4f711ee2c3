import math
import unittest

import numpy

import epmp.num as gnp
from epmp.core import Grid
from epmp.errors import EmptyDataError
from epmp.kernel import ProductMatern


def grid_points_array(grid):
    """All grid points, row-major order, shape (m, d)."""
    axes = [gnp.to_np(a) for a in grid.axes]
    rows = [[]]
    for a in axes:
        rows = [r + [float(v)] for r in rows for v in a]
    return gnp.array(rows)


class TestGridConstruction(unittest.TestCase):
    def test_default_points(self):
        self.assertEqual(Grid.default_points(100, 1), [50])
        self.assertEqual(Grid.default_points(40, 2), [10, 10])
        self.assertEqual(Grid.default_points(10, 3), [2, 2, 2])

    def test_from_inputs_padding(self):
        x = gnp.linspace(0.0, 1.0, 20).reshape(-1, 1)
        grid = Grid.from_inputs([x], 11)
        self.assertEqual(grid.points, (11,))
        self.assertEqual(grid.size, 11)
        self.assertAlmostEqual(grid.spacing[0], 1.0 / 8.0)
        axis = grid.axes[0]
        self.assertAlmostEqual(gnp.to_scalar(axis[0]), -1.0 / 8.0)
        self.assertAlmostEqual(gnp.to_scalar(axis[-1]), 1.0 + 1.0 / 8.0)

    def test_from_inputs_few_points(self):
        x = gnp.array([[0.0, 2.0], [1.0, 4.0]])
        grid = Grid.from_inputs([x], [3, 2])
        self.assertEqual(grid.shape, (3, 2))
        self.assertEqual(grid.size, 6)
        self.assertAlmostEqual(grid.spacing[0], 0.5)
        self.assertAlmostEqual(grid.spacing[1], 2.0)
        self.assertAlmostEqual(grid.starts[0], 0.0)

    def test_from_inputs_callable_and_constant_axis(self):
        x = gnp.array([[0.0, 1.0], [1.0, 1.0], [0.5, 1.0]])
        grid = Grid.from_inputs([x], lambda n, d: [n + 2] * d)
        self.assertEqual(grid.points, (5, 5))
        self.assertAlmostEqual(grid.spacing[1], 1.0)

    def test_from_inputs_numpy_integer(self):
        x = gnp.array([[0.0, 2.0], [1.0, 4.0]])
        grid = Grid.from_inputs([x], numpy.int64(7))
        self.assertEqual(grid.points, (7, 7))

    def test_default_grid_covers_all_parts(self):
        x1 = gnp.array([[0.0], [1.0]])
        x2 = gnp.array([[-3.0], [2.0]])
        grid = Grid.from_inputs([x1, x2])
        self.assertEqual(grid.points, (2,))
        self.assertAlmostEqual(gnp.to_scalar(grid.axes[0][0]), -3.0)
        self.assertAlmostEqual(gnp.to_scalar(grid.axes[0][1]), 2.0)

    def test_empty_inputs(self):
        with self.assertRaises(EmptyDataError):
            Grid.from_inputs([])
        with self.assertRaises(EmptyDataError):
            Grid.from_inputs([gnp.zeros((5, 0))])


class TestInterpolationWeights(unittest.TestCase):
    def test_weights_sum_to_one(self):
        gnp.set_seed(0)
        x = gnp.randn(30, 2)
        grid = Grid.from_inputs([x], [8, 6])
        (W,) = grid.interpolation_weight([x])
        self.assertEqual(W.shape, (30, 48))
        self.assertEqual(W.values.shape[1], 16)
        self.assertTrue(gnp.allclose(gnp.sum(W.values, axis=1), gnp.ones((30,))))
        self.assertTrue(bool(gnp.all(W.indices >= 0)))
        self.assertTrue(bool(gnp.all(W.indices < 48)))

    def test_reproduces_quadratics(self):
        gnp.set_seed(1)
        x = gnp.randn(25, 2)
        grid = Grid.from_inputs([x], [10, 9])
        (W,) = grid.interpolation_weight([x])
        U = grid_points_array(grid)

        def f(z):
            return 1.0 + z[:, 0] - 2.0 * z[:, 1] + 0.5 * z[:, 0] ** 2 + z[:, 0] * z[:, 1]

        self.assertTrue(gnp.allclose(W.matmul(f(U)), f(x), atol=1e-10))

    def test_one_matrix_per_part(self):
        gnp.set_seed(2)
        parts = [gnp.randn(7, 1), gnp.randn(7, 1), gnp.randn(7, 1)]
        grid = Grid.from_inputs(parts, 12)
        ws = grid.interpolation_weight(parts, n_jobs=2)
        self.assertEqual(len(ws), 3)
        for x, W in zip(parts, ws):
            self.assertEqual(W.shape, (7, 12))
            self.assertTrue(gnp.allclose(W.matmul(grid.axes[0]), x[:, 0], atol=1e-10))

    def test_clamped_outside_grid(self):
        x = gnp.linspace(0.0, 1.0, 5).reshape(-1, 1)
        grid = Grid.from_inputs([x], 6)
        (W,) = grid.interpolation_weight([gnp.array([[10.0], [-10.0]])])
        self.assertTrue(bool(gnp.all(W.indices >= 0)))
        self.assertTrue(bool(gnp.all(W.indices < 6)))

    def test_empty_feature(self):
        grid = Grid.from_inputs([gnp.array([[0.0], [1.0]])], 4)
        with self.assertRaises(EmptyDataError):
            grid.interpolation_weight([])
        with self.assertRaises(EmptyDataError):
            grid.interpolation_weight([gnp.zeros((3, 0))])


class TestInducingCovariance(unittest.TestCase):
    def test_kuu_is_kronecker_of_axes(self):
        x = gnp.array([[0.0, 0.0], [1.0, 2.0]])
        grid = Grid.from_inputs([x], [4, 5])
        kernel = ProductMatern(2)
        param = gnp.array([math.log(1.5), 0.3, -0.2])
        Kuu = grid.kuu(kernel, param)
        self.assertEqual(Kuu.sizes, (4, 5))
        U = grid_points_array(grid)
        self.assertTrue(gnp.allclose(Kuu.to_dense(), kernel(U, U, param)))

    def test_kuu_jitter(self):
        x = gnp.array([[0.0], [1.0]])
        grid = Grid.from_inputs([x], 4)
        param = gnp.array([0.0, 0.0])
        K0 = grid.kuu(ProductMatern(1), param).factors[0]
        K1 = grid.kuu(ProductMatern(1), param, jitter=1e-3).factors[0]
        self.assertTrue(gnp.allclose(K1 - K0, 1e-3 * gnp.eye(4)))


if __name__ == "__main__":
    unittest.main()
