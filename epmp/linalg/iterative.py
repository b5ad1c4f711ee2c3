# epmp/linalg/iterative.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Matrix-free iterative routines: conjugate gradient and Lanczos.

Both routines only see the matrix through a `LinearOperator`, so the
covariance engines can hand them structured operators (Kronecker,
interpolation) without ever forming a dense n x n matrix.
"""
import warnings
from collections import namedtuple

import epmp.num as gnp
from epmp.config import get_config, get_logger
from epmp.errors import ConvergenceError, ConvergenceWarning, EmptyDataError

_logger = get_logger()

CGInfo = namedtuple("CGInfo", ["iterations", "residual", "converged"])


class LinearOperator:
    """Symmetric linear operator given by its action on vectors.

    Parameters
    ----------
    n : int
        Size of the (square) operator.
    matvec : callable
        ``matvec(v) -> A v`` for a 1D array ``v`` of length n.

    Examples
    --------
    >>> A = gnp.array([[2.0, 1.0], [1.0, 3.0]])
    >>> op = LinearOperator(2, lambda v: gnp.matmul(A, v))
    >>> op(gnp.array([1.0, 0.0]))
    """

    def __init__(self, n, matvec):
        self.n = int(n)
        self._matvec = matvec

    @property
    def shape(self):
        return (self.n, self.n)

    def matvec(self, v):
        return self._matvec(v)

    def matmat(self, V):
        """Apply the operator column by column to V, shape (n, k)."""
        return gnp.stack([self._matvec(V[:, j]) for j in range(V.shape[1])], axis=1)

    def __call__(self, v):
        return self.matvec(v)

    def __repr__(self):
        return f"<LinearOperator n={self.n}>"


def _dot(a, b):
    return gnp.to_scalar(gnp.sum(a * b))


def conjugate_gradient(op, b, max_iter=None, tol=None, warn_tol=None, strict=False):
    """Approximately solve A x = b for a symmetric positive definite operator A.

    Parameters
    ----------
    op : LinearOperator
        The operator A.
    b : array_like, shape (n,)
        Right-hand side.
    max_iter : int, optional
        Iteration cap (default: ``config.cg_max_iter``). Capped at n.
    tol : float, optional
        Relative residual ‖r‖/‖b‖ at which iterations stop early
        (default: ``config.cg_tol``).
    warn_tol : float, optional
        Relative residual above which the result is reported as not
        converged (default: ``config.cg_warn_tol``).
    strict : bool, optional
        If True, raise `ConvergenceError` instead of warning.

    Returns
    -------
    x : array_like, shape (n,)
        Best-effort solution after at most `max_iter` iterations.
    info : CGInfo
        (iterations, relative residual, converged flag).
    """
    config = get_config()
    max_iter = config.resolve("cg_max_iter", max_iter)
    tol = config.resolve("cg_tol", tol)
    warn_tol = config.resolve("cg_warn_tol", warn_tol)

    b = gnp.asarray(b)
    n = b.shape[0]
    if n == 0:
        raise EmptyDataError("Conjugate gradient called with an empty right-hand side.")
    max_iter = min(int(max_iter), n)

    x = gnp.zeros((n,))
    b_norm = gnp.to_scalar(gnp.norm(b))
    if b_norm == 0.0:
        return x, CGInfo(0, 0.0, True)

    x, iterations = gnp.cg(op.matvec, b, max_iter, tol)
    residual = gnp.to_scalar(gnp.norm(b - op(x))) / b_norm
    converged = residual <= warn_tol
    _logger.debug(
        "conjugate_gradient: n=%d iterations=%d relative residual=%.3e",
        n, iterations, residual,
    )
    if not converged:
        msg = (
            f"Conjugate gradient stopped after {iterations} iterations "
            f"with relative residual {residual:.3e} (> {warn_tol:.1e})."
        )
        if strict:
            raise ConvergenceError(msg)
        warnings.warn(msg, ConvergenceWarning, stacklevel=2)
    return x, CGInfo(iterations, residual, converged)


def lanczos_tridiag(op, k, v0=None):
    """Bounded-rank Lanczos tridiagonalization of a symmetric operator.

    Builds an orthonormal basis Q of the Krylov space
    span{v0, A v0, ..., A^{k-1} v0} and the tridiagonal T = Qᵀ A Q.
    Full re-orthogonalization is used, so Q stays orthonormal to
    working precision.

    Parameters
    ----------
    op : LinearOperator
        The symmetric operator A, of size n.
    k : int
        Rank cap; the effective rank is min(k, n) or less on breakdown.
    v0 : array_like, shape (n,), optional
        Starting vector (default: constant vector).

    Returns
    -------
    Q : array_like, shape (n, j)
        Orthonormal basis, j <= k.
    alpha : array_like, shape (j,)
        Diagonal of T.
    beta : array_like, shape (j-1,)
        Off-diagonal of T.
    """
    n = op.n
    k = min(int(k), n)
    if k <= 0:
        raise EmptyDataError("Lanczos decomposition requires a positive rank.")

    q = gnp.ones((n,)) if v0 is None else gnp.copy(gnp.asarray(v0))
    q_norm = gnp.to_scalar(gnp.norm(q))
    if q_norm == 0.0:
        q = gnp.ones((n,))
        q_norm = n ** 0.5
    q = q / q_norm

    columns = [q]
    alphas = []
    betas = []
    scale = 0.0
    for j in range(k):
        w = op(columns[j])
        a = _dot(columns[j], w)
        alphas.append(a)
        scale = max(scale, abs(a))
        if j == k - 1:
            break
        Q = gnp.stack(columns, axis=1)
        # two passes of classical Gram-Schmidt against the whole basis
        w = w - gnp.matmul(Q, gnp.matmul(Q.T, w))
        w = w - gnp.matmul(Q, gnp.matmul(Q.T, w))
        b = gnp.to_scalar(gnp.norm(w))
        if b <= 1e3 * gnp.eps * max(scale, 1e-300) * n:
            # invariant subspace found
            break
        betas.append(b)
        columns.append(w / b)

    Q = gnp.stack(columns, axis=1)
    alpha = gnp.array(alphas)
    beta = gnp.array(betas) if betas else gnp.zeros((0,))
    _logger.debug("lanczos_tridiag: n=%d rank=%d", n, len(alphas))
    return Q, alpha, beta
