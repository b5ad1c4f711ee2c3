import unittest
import epmp.num as gnp


class TestBackendHelpers(unittest.TestCase):
    def test_scatter_add_repeated_indices(self):
        indices = gnp.asint(gnp.array([[0, 0], [2, 1]]))
        values = gnp.array([[1.0, 2.0], [3.0, 4.0]])
        V = gnp.array([[1.0], [10.0]])
        out = gnp.scatter_add(indices, values, V, 3)
        expected = gnp.array([[3.0], [40.0], [30.0]])
        self.assertTrue(gnp.allclose(out, expected))

    def test_fft_real(self):
        x = gnp.array([2.0, 1.0, 0.0, 1.0])
        self.assertTrue(gnp.allclose(gnp.fft_real(x), gnp.array([4.0, 2.0, 0.0, 2.0])))

    def test_clip_and_sort(self):
        x = gnp.array([3.0, -1.0, 0.5])
        self.assertTrue(gnp.allclose(gnp.clip(x, 0.0, 1.0), gnp.array([1.0, 0.0, 0.5])))
        self.assertTrue(gnp.allclose(gnp.sort(x), gnp.array([-1.0, 0.5, 3.0])))

    def test_seeded_randn_is_reproducible(self):
        gnp.set_seed(42)
        a = gnp.randn(5)
        gnp.set_seed(42)
        b = gnp.randn(5)
        self.assertEqual(tuple(a.shape), (5,))
        self.assertTrue(bool(gnp.all(a == b)))

    def test_gammaln_table(self):
        gln = gnp.compute_gammaln(2)
        # gammaln(k) = log((k-1)!)
        self.assertAlmostEqual(gnp.to_scalar(gln[4]), gnp.to_scalar(gnp.log(gnp.array(6.0))))
        self.assertEqual(gln.shape[0], 6)

    def test_gammaln_table_grows(self):
        gnp.compute_gammaln(1)
        gln = gnp.compute_gammaln(3)
        self.assertEqual(gln.shape[0], 8)
        # gammaln(7) = log(720)
        self.assertAlmostEqual(gnp.to_scalar(gln[7]), gnp.to_scalar(gnp.log(gnp.array(720.0))))

    def test_cg_matches_dense_solve(self):
        A = gnp.array([[4.0, 1.0, 0.0], [1.0, 3.0, 1.0], [0.0, 1.0, 2.0]])
        b = gnp.array([1.0, 2.0, 3.0])
        x, iterations = gnp.cg(lambda v: gnp.matmul(A, v), b, 50, 1e-12)
        self.assertLessEqual(iterations, 3)
        self.assertTrue(gnp.allclose(gnp.matmul(A, x), b, atol=1e-8))

    def test_pttrf_pttrs(self):
        d, e, info = gnp.pttrf(gnp.array([4.0, 5.0, 4.0]), gnp.array([1.0, -2.0]))
        self.assertEqual(info, 0)
        # d₁ = 5 - 1/4
        self.assertAlmostEqual(gnp.to_scalar(d[1]), 4.75)
        self.assertAlmostEqual(gnp.to_scalar(e[0]), 0.25)
        X, info = gnp.pttrs(d, e, gnp.array([[4.0], [5.0], [4.0]]))
        self.assertEqual(info, 0)
        T = gnp.array([[4.0, 1.0, 0.0], [1.0, 5.0, -2.0], [0.0, -2.0, 4.0]])
        self.assertTrue(gnp.allclose(gnp.matmul(T, X), gnp.array([[4.0], [5.0], [4.0]])))

    def test_pttrf_reports_failing_pivot(self):
        _, _, info = gnp.pttrf(gnp.array([1.0, 1.0]), gnp.array([2.0]))
        self.assertEqual(info, 2)


if __name__ == "__main__":
    unittest.main()
