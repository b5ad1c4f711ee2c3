# epmp/linalg/sparse.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Row-sparse matrices with a fixed number of non-zeros per row.

Interpolation weights have exactly s = 4^d non-zeros per row, so they
are stored as two dense (n, s) arrays (column indices and values)
instead of a general sparse format; products use gather for W U and
scatter-add for Wᵀ V, which every backend provides.
"""
import epmp.num as gnp


class RowSparseMatrix:
    """Sparse (n, m) matrix W with s stored entries per row.

    Parameters
    ----------
    indices : int array_like, shape (n, s)
        Column index of each stored entry. Repeated indices in a row add up.
    values : array_like, shape (n, s)
        Value of each stored entry.
    n_cols : int
        Number of columns m.
    """

    def __init__(self, indices, values, n_cols):
        self.indices = gnp.asint(indices)
        self.values = gnp.asarray(values)
        if self.indices.shape != self.values.shape or len(self.values.shape) != 2:
            raise ValueError("indices and values must both have shape (n, s)")
        self.n_cols = int(n_cols)

    @property
    def shape(self):
        return (int(self.values.shape[0]), self.n_cols)

    def matmul(self, U):
        """W U for U of shape (m,) or (m, k)."""
        if len(U.shape) == 1:
            return gnp.sum(self.values * U[self.indices], axis=1)
        return gnp.einsum("ns,nsk->nk", self.values, U[self.indices])

    def rmatmul(self, V):
        """Wᵀ V for V of shape (n,) or (n, k)."""
        vec = len(V.shape) == 1
        V2 = V.reshape(-1, 1) if vec else V
        out = gnp.scatter_add(self.indices, self.values, V2, self.n_cols)
        return out.reshape(-1) if vec else out

    def to_dense(self):
        n, m = self.shape
        return gnp.transpose(self.rmatmul(gnp.eye(n)), 0, 1).reshape(n, m)

    def __repr__(self):
        n, m = self.shape
        return f"<RowSparseMatrix shape=({n}, {m}) nnz_per_row={self.values.shape[1]}>"
