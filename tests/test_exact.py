import math
import unittest

import epmp.num as gnp
from epmp.core import BaseEllipticalProcessParams
from epmp.errors import (
    DimensionMismatchError,
    EmptyDataError,
    NotPositiveDefiniteError,
)
from epmp.kernel import Kernel, ProductMatern


class NegativeKernel(Kernel):
    def __call__(self, x, y, param):
        return -gnp.ones((x.shape[0], y.shape[0]))


def make_problem(n=15, sigma=0.1):
    x = gnp.linspace(0.0, 1.0, n).reshape(-1, 1)
    y = x[:, 0] ** 3 - 2.0 * x[:, 0] + 0.5
    theta = gnp.array([0.0, math.log(1.0 / 0.3)])
    base = BaseEllipticalProcessParams(ProductMatern(2), theta, x, sigma)
    Sigma = base.kernel(x, x, theta) + sigma ** 2 * gnp.eye(n)
    return base, y, Sigma


class TestExactEngine(unittest.TestCase):
    def setUp(self):
        self.base, self.y, self.Sigma = make_problem()
        self.params = self.base.exact(self.y)

    def test_mean_and_dimension(self):
        n = self.base.n
        self.assertEqual(self.params.dimension(), n)
        ey = gnp.to_scalar(gnp.mean(self.y))
        self.assertTrue(gnp.allclose(self.params.mean(), ey * gnp.ones((n,))))
        self.assertIs(self.params.base, self.base)

    def test_cholesky_factor(self):
        L = self.params.lsigma
        self.assertTrue(gnp.allclose(gnp.matmul(L, L.T), self.Sigma))

    def test_apply_inverse_roundtrip(self):
        gnp.set_seed(0)
        v = gnp.randn(self.base.n)
        self.assertTrue(gnp.allclose(self.params.apply_inverse(gnp.matmul(self.Sigma, v)), v))
        V = gnp.randn(self.base.n, 3)
        self.assertTrue(gnp.allclose(self.params.apply_inverse(gnp.matmul(self.Sigma, V)), V))

    def test_det_sqrt(self):
        w, _ = gnp.eigh(self.Sigma)
        logdet = gnp.to_scalar(gnp.sum(gnp.log(w)))
        self.assertAlmostEqual(self.params.log_det_sqrt(), 0.5 * logdet, places=8)
        self.assertAlmostEqual(
            math.log(self.params.det_sqrt() ** 2), logdet, places=8
        )

    def test_mahalanobis(self):
        centered = self.y - gnp.mean(self.y)
        expected = gnp.to_scalar(gnp.sum(centered * self.params.apply_inverse(centered)))
        self.assertAlmostEqual(self.params.mahalanobis_squared(), expected, places=8)
        self.assertAlmostEqual(self.params.quadratic_form(self.y), expected, places=8)

    def test_draw_is_deterministic(self):
        gnp.set_seed(3)
        z = gnp.randn(self.params.noise_dimension())
        x1 = self.params.draw(z)
        x2 = self.params.draw(z)
        self.assertTrue(bool(gnp.all(x1 == x2)))
        expected = self.params.mean() + gnp.matmul(self.params.lsigma, z)
        self.assertTrue(gnp.allclose(x1, expected))

    def test_draw_empirical_covariance(self):
        base, y, Sigma = make_problem(n=5, sigma=0.3)
        params = base.exact(y)
        gnp.set_seed(4)
        n_samples = 4000
        Z = gnp.randn(n_samples, 5)
        X = gnp.stack([params.draw(Z[i]) for i in range(n_samples)])
        D = X - gnp.mean(X, axis=0).reshape(1, -1)
        C = gnp.matmul(D.T, D) / (n_samples - 1)
        self.assertTrue(gnp.allclose(C, Sigma, atol=0.15))

    def test_predict(self):
        zpm, zpv = self.params.predict(self.base.x)
        self.assertTrue(gnp.allclose(zpm, self.y, atol=0.05))
        self.assertTrue(bool(gnp.all(zpv >= 0.0)))
        self.assertTrue(bool(gnp.all(zpv < 0.1 ** 2)))
        far_mean, far_var = self.params.predict(gnp.array([[100.0]]))
        self.assertAlmostEqual(gnp.to_scalar(far_var[0]), 1.0, places=6)
        self.assertAlmostEqual(
            gnp.to_scalar(far_mean[0]), gnp.to_scalar(gnp.mean(self.y)), places=6
        )


class TestExactEngineErrors(unittest.TestCase):
    def test_empty_observations(self):
        base, _, _ = make_problem()
        with self.assertRaises(EmptyDataError):
            base.exact(gnp.zeros((0,)))

    def test_dimension_mismatch(self):
        base, y, _ = make_problem()
        with self.assertRaises(DimensionMismatchError):
            base.exact(y[:-1])

    def test_not_positive_definite(self):
        x = gnp.linspace(0.0, 1.0, 4).reshape(-1, 1)
        base = BaseEllipticalProcessParams(NegativeKernel(), [0.0], x, 0.0)
        with self.assertRaises(NotPositiveDefiniteError):
            base.exact(gnp.ones((4,)))

    def test_query_shape_errors(self):
        base, y, _ = make_problem()
        params = base.exact(y)
        with self.assertRaises(DimensionMismatchError):
            params.apply_inverse(gnp.ones((3,)))
        with self.assertRaises(DimensionMismatchError):
            params.draw(gnp.ones((base.n + 1,)))
        with self.assertRaises(DimensionMismatchError):
            params.x_mu(gnp.ones((2,)))

    def test_negative_sigma(self):
        x = gnp.linspace(0.0, 1.0, 4).reshape(-1, 1)
        with self.assertRaises(ValueError):
            BaseEllipticalProcessParams(ProductMatern(1), [0.0, 0.0], x, -1.0)


if __name__ == "__main__":
    unittest.main()
