# epmp/linalg/dense.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Dense linear-algebra utilities shared across epmp.core modules.

This file isolates small, backend-agnostic helpers (built on top of
`epmp.num as gnp`) and translates backend failures into the typed
exceptions of `epmp.errors`.
"""
import epmp.num as gnp
from epmp.errors import (
    LinearAlgebraError,
    NotPositiveDefiniteError,
)


def cholesky(A):
    """Return the lower Cholesky factor C of a symmetric positive definite A.

    Parameters
    ----------
    A : array_like, shape (n, n)

    Returns
    -------
    C : array_like, shape (n, n)
        Lower-triangular, A = C Cᵀ.

    Raises
    ------
    NotPositiveDefiniteError
        If the backend factorization fails or returns non-finite entries.
    """
    try:
        C = gnp.cholesky(A)
    except Exception as exc:
        if gnp._is_linalg_exception(exc):
            raise NotPositiveDefiniteError(
                f"Cholesky factorization failed: {exc}"
            ) from exc
        raise
    if not gnp.all(gnp.isfinite(C)):
        raise NotPositiveDefiniteError(
            "Cholesky factorization not finite, matrix probably not positive definite numerically."
        )
    return C


def cholesky_solve(C, B):
    """Solve (C Cᵀ) X = B given the lower Cholesky factor C.

    Parameters
    ----------
    C : array_like, shape (n, n)
        Lower Cholesky factor.
    B : array_like, shape (n,) or (n, k)

    Returns
    -------
    X : array_like, same shape as B
    """
    try:
        Y = gnp.solve_triangular(C, B, lower=True)
        X = gnp.solve_triangular(C.T, Y, lower=False)
    except Exception as exc:
        if gnp._is_linalg_exception(exc):
            raise LinearAlgebraError(f"Triangular solve failed: {exc}") from exc
        raise
    return X


def triangular_det(C):
    """Determinant of a triangular matrix (product of its diagonal)."""
    return gnp.prod(gnp.diag(C))


def ptt_factor(alpha, beta):
    """LDLᵀ factorization of a symmetric positive definite tridiagonal matrix.

    Parameters
    ----------
    alpha : array_like, shape (k,)
        Diagonal of T.
    beta : array_like, shape (k-1,)
        Off-diagonal of T.

    Returns
    -------
    l : array_like, shape (k-1,)
        Sub-diagonal of the unit lower bidiagonal factor L.
    d : array_like, shape (k,)
        Diagonal of D.

    Notes
    -----
    Delegates to LAPACK ``dpttrf`` on the numpy backend:
    d₀ = α₀, lᵢ = βᵢ / dᵢ, dᵢ₊₁ = αᵢ₊₁ − lᵢ βᵢ.
    """
    d, l, info = gnp.pttrf(alpha, beta)
    if info > 0:
        raise NotPositiveDefiniteError(
            f"Tridiagonal matrix is not positive definite (pivot {info - 1} = {gnp.to_scalar(d[info - 1]):.3e})."
        )
    if info < 0 or not gnp.all(gnp.isfinite(d)):
        raise LinearAlgebraError("Tridiagonal factorization failed.")
    return l, d


def ptt_solve(l, d, B):
    """Solve (L D Lᵀ) X = B for the factors returned by `ptt_factor`.

    Parameters
    ----------
    l : array_like, shape (k-1,)
    d : array_like, shape (k,)
    B : array_like, shape (k,) or (k, p)

    Returns
    -------
    X : array_like, same shape as B
    """
    vec = len(B.shape) == 1
    X, info = gnp.pttrs(d, l, B.reshape(-1, 1) if vec else B)
    if info != 0:
        raise LinearAlgebraError(f"Tridiagonal solve failed (info = {info}).")
    if vec:
        X = X.reshape(-1)
    return X


def tridiagonal(alpha, beta):
    """Dense symmetric tridiagonal matrix from its diagonal and off-diagonal."""
    k = alpha.shape[0]
    T = gnp.diag(alpha)
    if k > 1:
        T = T + gnp.diag(beta, 1) + gnp.diag(beta, -1)
    return T


def bidiagonal_l(l):
    """Dense unit lower bidiagonal matrix L with sub-diagonal l."""
    k = l.shape[0] + 1
    L = gnp.eye(k)
    if k > 1:
        L = L + gnp.diag(l, -1)
    return L
