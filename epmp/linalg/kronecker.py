# epmp/linalg/kronecker.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Kronecker-structured matrices.

A `KroneckerMatrices` object stores the factors A_1, ..., A_d of
A = A_1 ⊗ ... ⊗ A_d and applies A without forming it. Vectors are
indexed in row-major (C) order, the first factor varying slowest.
"""
import epmp.num as gnp
from .dense import cholesky


class KroneckerMatrices:
    """Kronecker product A_1 ⊗ ... ⊗ A_d of square dense factors.

    Parameters
    ----------
    factors : sequence of array_like
        Square matrices A_i of shape (m_i, m_i).
    """

    def __init__(self, factors):
        if len(factors) == 0:
            raise ValueError("KroneckerMatrices needs at least one factor")
        self._factors = tuple(gnp.asarray(f) for f in factors)
        for f in self._factors:
            if len(f.shape) != 2 or f.shape[0] != f.shape[1]:
                raise ValueError("Kronecker factors must be square matrices")

    @property
    def factors(self):
        return self._factors

    @property
    def sizes(self):
        return tuple(int(f.shape[0]) for f in self._factors)

    @property
    def shape(self):
        m = 1
        for s in self.sizes:
            m *= s
        return (m, m)

    def rows(self):
        return self.shape[0]

    def matmul(self, V):
        """Compute A V for V of shape (m,) or (m, k).

        Each factor is applied along its own axis: V is viewed as a
        (k, m_1, rest) array, the factor contracts m_1 and the result is
        rotated to (k, rest, m_1) so that the next factor leads.
        """
        vec = len(V.shape) == 1
        m = self.shape[0]
        if V.shape[0] != m:
            raise ValueError(f"expected {m} rows, got {V.shape[0]}")
        X = V.reshape(m, 1) if vec else V
        k = X.shape[1]
        Y = gnp.transpose(X, 0, 1).reshape(k, m)
        for A, mi in zip(self._factors, self.sizes):
            Y = Y.reshape(k, mi, m // mi)
            Y = gnp.einsum("ij,bjr->bri", A, Y)
            Y = Y.reshape(k, m)
        Y = gnp.transpose(Y, 0, 1)
        return Y.reshape(-1) if vec else Y

    def vec_mul(self, v):
        return self.matmul(v)

    def cholesky(self):
        """Per-factor lower Cholesky factors, as a KroneckerMatrices."""
        return KroneckerMatrices([cholesky(A) for A in self._factors])

    def to_dense(self):
        """Materialize the full matrix (small sizes only)."""
        out = self._factors[0]
        for A in self._factors[1:]:
            out = gnp.einsum("ij,kl->ikjl", out, A).reshape(
                out.shape[0] * A.shape[0], out.shape[1] * A.shape[1]
            )
        return out

    def __repr__(self):
        return f"<KroneckerMatrices sizes={self.sizes}>"


def kron_vectors(vectors):
    """Kronecker product of 1D arrays, first vector varying slowest."""
    out = gnp.asarray(vectors[0]).reshape(-1)
    for v in vectors[1:]:
        out = gnp.outer(out, gnp.asarray(v).reshape(-1)).reshape(-1)
    return out
