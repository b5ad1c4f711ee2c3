# epmp/linalg/__init__.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Linear-algebra primitives used by the covariance engines.

Modules
-------
dense
    Cholesky factor/solve, triangular determinant, tridiagonal LDLᵀ.
iterative
    LinearOperator, conjugate gradient and Lanczos tridiagonalization.
kronecker
    Kronecker-structured matrices applied without densification.
sparse
    Row-sparse interpolation matrices.
toeplitz
    Circulant-embedding eigenvalues of symmetric Toeplitz matrices.
parallel
    Order-preserving thread-parallel map (joblib).
"""

from .dense import (
    cholesky,
    cholesky_solve,
    triangular_det,
    ptt_factor,
    ptt_solve,
    tridiagonal,
    bidiagonal_l,
)
from .iterative import LinearOperator, CGInfo, conjugate_gradient, lanczos_tridiag
from .kronecker import KroneckerMatrices, kron_vectors
from .sparse import RowSparseMatrix
from .toeplitz import circulant_embedding, toeplitz_circulant_eigvals
from .parallel import parallel_map

__all__ = [
    "cholesky",
    "cholesky_solve",
    "triangular_det",
    "ptt_factor",
    "ptt_solve",
    "tridiagonal",
    "bidiagonal_l",
    "LinearOperator",
    "CGInfo",
    "conjugate_gradient",
    "lanczos_tridiag",
    "KroneckerMatrices",
    "kron_vectors",
    "RowSparseMatrix",
    "circulant_embedding",
    "toeplitz_circulant_eigvals",
    "parallel_map",
]
