import unittest
import warnings

import epmp.num as gnp
from epmp.errors import (
    ConvergenceError,
    ConvergenceWarning,
    EmptyDataError,
    NotPositiveDefiniteError,
)
from epmp.linalg import (
    KroneckerMatrices,
    LinearOperator,
    RowSparseMatrix,
    bidiagonal_l,
    cholesky,
    cholesky_solve,
    conjugate_gradient,
    kron_vectors,
    lanczos_tridiag,
    parallel_map,
    ptt_factor,
    ptt_solve,
    toeplitz_circulant_eigvals,
    triangular_det,
    tridiagonal,
)


def make_spd(n, seed=0):
    gnp.set_seed(seed)
    M = gnp.randn(n, n)
    return gnp.matmul(M, M.T) + n * gnp.eye(n)


def dense_kron(A, B):
    p, q = A.shape[0], B.shape[0]
    K = gnp.zeros((p * q, p * q))
    for i in range(p):
        for j in range(p):
            for k in range(q):
                for l in range(q):
                    K[i * q + k, j * q + l] = A[i, j] * B[k, l]
    return K


class TestDense(unittest.TestCase):
    def test_cholesky_roundtrip(self):
        A = make_spd(6)
        C = cholesky(A)
        self.assertTrue(gnp.allclose(gnp.matmul(C, C.T), A))
        b = gnp.randn(6)
        x = cholesky_solve(C, b)
        self.assertTrue(gnp.allclose(gnp.matmul(A, x), b))

    def test_cholesky_not_positive_definite(self):
        A = gnp.array([[1.0, 2.0], [2.0, 1.0]])
        with self.assertRaises(NotPositiveDefiniteError):
            cholesky(A)

    def test_triangular_det(self):
        C = gnp.array([[2.0, 0.0], [5.0, 3.0]])
        self.assertAlmostEqual(gnp.to_scalar(triangular_det(C)), 6.0)

    def test_ptt_factor_and_solve(self):
        alpha = gnp.array([4.0, 5.0, 4.0, 6.0])
        beta = gnp.array([1.0, -2.0, 1.5])
        T = tridiagonal(alpha, beta)
        l, d = ptt_factor(alpha, beta)
        L = bidiagonal_l(l)
        self.assertTrue(gnp.allclose(gnp.matmul(L * d.reshape(1, -1), L.T), T))
        B = gnp.array([[1.0, 0.0], [2.0, 1.0], [0.0, -1.0], [1.0, 3.0]])
        X = ptt_solve(l, d, B)
        self.assertTrue(gnp.allclose(gnp.matmul(T, X), B))
        x = ptt_solve(l, d, B[:, 0])
        self.assertTrue(gnp.allclose(gnp.matmul(T, x), B[:, 0]))

    def test_ptt_factor_indefinite(self):
        with self.assertRaises(NotPositiveDefiniteError):
            ptt_factor(gnp.array([1.0, 1.0]), gnp.array([2.0]))


class TestIterative(unittest.TestCase):
    def test_conjugate_gradient(self):
        A = make_spd(10, seed=1)
        b = gnp.randn(10)
        op = LinearOperator(10, lambda v: gnp.matmul(A, v))
        x, info = conjugate_gradient(op, b, max_iter=100, tol=1e-12)
        self.assertTrue(info.converged)
        self.assertLessEqual(info.iterations, 10)
        self.assertTrue(gnp.allclose(gnp.matmul(A, x), b, atol=1e-8))

    def test_conjugate_gradient_iteration_cap(self):
        A = make_spd(10, seed=2)
        b = gnp.randn(10)
        op = LinearOperator(10, lambda v: gnp.matmul(A, v))
        with self.assertWarns(ConvergenceWarning):
            _, info = conjugate_gradient(op, b, max_iter=1)
        self.assertFalse(info.converged)
        self.assertEqual(info.iterations, 1)
        with self.assertRaises(ConvergenceError):
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                conjugate_gradient(op, b, max_iter=1, strict=True)

    def test_conjugate_gradient_empty(self):
        op = LinearOperator(0, lambda v: v)
        with self.assertRaises(EmptyDataError):
            conjugate_gradient(op, gnp.zeros((0,)))

    def test_conjugate_gradient_zero_rhs(self):
        A = make_spd(4)
        op = LinearOperator(4, lambda v: gnp.matmul(A, v))
        x, info = conjugate_gradient(op, gnp.zeros((4,)))
        self.assertTrue(info.converged)
        self.assertTrue(gnp.allclose(x, gnp.zeros((4,))))

    def test_lanczos_full_rank(self):
        n = 8
        A = make_spd(n, seed=3)
        op = LinearOperator(n, lambda v: gnp.matmul(A, v))
        Q, alpha, beta = lanczos_tridiag(op, n, v0=gnp.randn(n))
        k = alpha.shape[0]
        self.assertEqual(Q.shape[1], k)
        self.assertEqual(beta.shape[0], k - 1)
        self.assertTrue(gnp.allclose(gnp.matmul(Q.T, Q), gnp.eye(k), atol=1e-8))
        T = tridiagonal(alpha, beta)
        self.assertTrue(gnp.allclose(gnp.matmul(Q.T, gnp.matmul(A, Q)), T, atol=1e-6))

    def test_lanczos_invariant_subspace(self):
        # v0 is an eigenvector: the Krylov space has dimension 1
        A = gnp.diag(gnp.array([1.0, 2.0, 3.0]))
        op = LinearOperator(3, lambda v: gnp.matmul(A, v))
        Q, alpha, beta = lanczos_tridiag(op, 3, v0=gnp.array([0.0, 1.0, 0.0]))
        self.assertEqual(alpha.shape[0], 1)
        self.assertAlmostEqual(gnp.to_scalar(alpha[0]), 2.0)


class TestStructured(unittest.TestCase):
    def test_kronecker_matmul(self):
        gnp.set_seed(4)
        A = gnp.randn(2, 2)
        B = gnp.randn(3, 3)
        K = KroneckerMatrices([A, B])
        D = dense_kron(A, B)
        self.assertEqual(K.shape, (6, 6))
        self.assertTrue(gnp.allclose(K.to_dense(), D))
        v = gnp.randn(6)
        self.assertTrue(gnp.allclose(K.matmul(v), gnp.matmul(D, v)))
        V = gnp.randn(6, 2)
        self.assertTrue(gnp.allclose(K.matmul(V), gnp.matmul(D, V)))

    def test_kronecker_cholesky(self):
        K = KroneckerMatrices([make_spd(2, seed=5), make_spd(3, seed=6)])
        L = K.cholesky().to_dense()
        self.assertTrue(gnp.allclose(gnp.matmul(L, L.T), K.to_dense()))

    def test_kron_vectors(self):
        v = kron_vectors([gnp.array([1.0, 2.0]), gnp.array([1.0, 10.0, 100.0])])
        self.assertTrue(gnp.allclose(v, gnp.array([1.0, 10.0, 100.0, 2.0, 20.0, 200.0])))

    def test_row_sparse(self):
        W = RowSparseMatrix(
            gnp.array([[0, 1], [2, 2], [1, 3]]),
            gnp.array([[0.5, 0.5], [1.0, 2.0], [0.25, 0.75]]),
            4,
        )
        D = gnp.array(
            [
                [0.5, 0.5, 0.0, 0.0],
                [0.0, 0.0, 3.0, 0.0],
                [0.0, 0.25, 0.0, 0.75],
            ]
        )
        self.assertEqual(W.shape, (3, 4))
        self.assertTrue(gnp.allclose(W.to_dense(), D))
        U = gnp.array([[1.0, 0.0], [2.0, 1.0], [3.0, 0.0], [4.0, -1.0]])
        self.assertTrue(gnp.allclose(W.matmul(U), gnp.matmul(D, U)))
        self.assertTrue(gnp.allclose(W.matmul(U[:, 0]), gnp.matmul(D, U[:, 0])))
        V = gnp.array([1.0, -1.0, 2.0])
        self.assertTrue(gnp.allclose(W.rmatmul(V), gnp.matmul(D.T, V)))

    def test_toeplitz_circulant_eigvals(self):
        # embedding of (2, 1, 0) is the circulant with first column (2, 1, 0, 1)
        eigs = toeplitz_circulant_eigvals(gnp.array([2.0, 1.0, 0.0]))
        self.assertTrue(gnp.allclose(eigs, gnp.array([4.0, 2.0, 0.0])))

    def test_parallel_map_keeps_order(self):
        out = parallel_map(lambda i: i * i, range(10), n_jobs=2)
        self.assertEqual(out, [i * i for i in range(10)])
        self.assertEqual(parallel_map(lambda i: i + 1, [1, 2], n_jobs=1), [2, 3])


if __name__ == "__main__":
    unittest.main()
