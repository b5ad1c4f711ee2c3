# epmp/num/numpy_backend.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""NumPy numerical backend for epmp.

This module defines the NumPy implementation of the epmp.num API.
"""

import builtins
from typing import Any, Union
from epmp.config import get_config, init_backend, get_logger

Scalar = Union[int, float]
ArrayLike = Any

_epmp_backend_: str = init_backend()
_config = get_config()
_logger = get_logger()
_logger.info("Using backend: %s", _epmp_backend_)

_LINALG_ERROR_KEYWORDS = (
    "singular",
    "not positive definite",
    "not positive-definite",
    "cholesky",
    "decomposition",
    "factorization",
    "matrix is not invertible",
    "svd did not converge",
    "eigenvalues did not converge",
    "ill-conditioned",
    "linalg",
    "lapack",
    "array must not contain infs or nans",
)


# -----------------------------------------------------
#
#                      NUMPY
#
# -----------------------------------------------------

import numpy
from numpy.typing import NDArray

_np_dtype = numpy.float64
_config.dtype_resolved = _np_dtype

ndarray = NDArray[numpy.floating]
from numpy import (
    where,
    isfinite,
    allclose,
    stack,
    concatenate,
    zeros_like,
    diag,
    floor,
    abs,
    sqrt,
    exp,
    log,
    sum,
    prod,
    mean,
    min,
    max,
    maximum,
    outer,
    einsum,
    matmul,
    all,
)
from numpy.linalg import norm, cholesky, eigh
from numpy import finfo
from scipy.special import gammaln
from scipy.linalg import solve_triangular
from scipy.linalg.lapack import dpttrf, dpttrs
from scipy.sparse.linalg import LinearOperator as _ScipyLinearOperator
from scipy.sparse.linalg import cg as _scipy_cg
from scipy.spatial.distance import cdist

# ..................................................

eps = finfo(_np_dtype).eps
fmax = numpy.finfo(_np_dtype).max

# ..................................................


def _is_linalg_exception(exc: Exception) -> bool:
    if isinstance(exc, numpy.linalg.LinAlgError):
        return True
    msg = str(exc).lower()
    return builtins.any(keyword in msg for keyword in _LINALG_ERROR_KEYWORDS)


# ..................................................


def array(x, dtype=None):
    if dtype is not None:
        return numpy.array(x, dtype=dtype)
    out = numpy.array(x)
    if numpy.issubdtype(out.dtype, numpy.floating) or numpy.issubdtype(
        out.dtype, numpy.integer
    ):
        return out.astype(_np_dtype, copy=False)
    return out


def asarray(x, dtype=None):
    if dtype is not None:
        return numpy.asarray(x, dtype=dtype)
    if isinstance(x, numpy.ndarray):
        if numpy.issubdtype(x.dtype, numpy.floating):
            return x.astype(_np_dtype, copy=False)
        return x
    elif isinstance(x, (int, float)):
        return numpy.array([x], dtype=_np_dtype)
    else:
        out = numpy.asarray(x)
        if numpy.issubdtype(out.dtype, numpy.floating):
            return out.astype(_np_dtype, copy=False)
        return out


def asint(x):
    return numpy.asarray(x).astype(numpy.int64, copy=False)


def copy(x):
    return numpy.array(x, copy=True)


def zeros(shape, dtype=None):
    return numpy.zeros(shape, dtype=_np_dtype if dtype is None else dtype)


def ones(shape, dtype=None):
    return numpy.ones(shape, dtype=_np_dtype if dtype is None else dtype)


def full(shape, fill_value, dtype=None):
    return numpy.full(
        shape, fill_value, dtype=_np_dtype if dtype is None else dtype
    )


def eye(n, m=None, k=0, dtype=None):
    return numpy.eye(n, M=m, k=k, dtype=_np_dtype if dtype is None else dtype)


def arange(start, stop=None, step=1, dtype=None):
    if stop is None:
        start, stop = 0, start
    return numpy.arange(start, stop, step, dtype=dtype)


def linspace(start, stop, num=50, endpoint=True, dtype=None):
    return numpy.linspace(
        start, stop, num=num, endpoint=endpoint,
        dtype=_np_dtype if dtype is None else dtype,
    )


def transpose(x, dim0, dim1):
    """Torch-style transpose: swap two dimensions."""
    return numpy.swapaxes(x, dim0, dim1)


def clip(x, min=None, max=None):
    return numpy.clip(x, min, max)


def sort(x):
    """Ascending sort of a 1D array."""
    return numpy.sort(x)


def to_np(x):
    return x


def to_scalar(x):
    return numpy.asarray(x).item()


def inftobigf(a, bigf=fmax / 1000.0):
    a = where(numpy.isinf(a), numpy.full_like(a, bigf), a)
    return a


# ..................................................


def fft_real(x):
    """Real part of the discrete Fourier transform of a 1D array."""
    return numpy.real(numpy.fft.fft(x))


def scatter_add(indices, values, V, n_rows):
    """Compute the (n_rows, k) array S with S[indices[i, j]] += values[i, j] * V[i].

    Parameters
    ----------
    indices : int array, shape (n, s)
    values : array, shape (n, s)
    V : array, shape (n, k)
    n_rows : int

    Returns
    -------
    array, shape (n_rows, k)
    """
    k = V.shape[1]
    out = numpy.zeros((n_rows, k), dtype=_np_dtype)
    contrib = values[:, :, None] * V[:, None, :]
    numpy.add.at(out, indices.reshape(-1), contrib.reshape(-1, k))
    return out


# ..................................................


def cg(matvec, b, maxiter, rtol):
    """Conjugate gradient (scipy.sparse.linalg.cg) on a matrix-free operator.

    Returns the iterate and the number of iterations performed.
    """
    n = b.shape[0]
    op = _ScipyLinearOperator((n, n), matvec=matvec, dtype=_np_dtype)
    iterations = [0]

    def count(xk):
        iterations[0] += 1

    x, _ = _scipy_cg(op, b, rtol=rtol, atol=0.0, maxiter=maxiter, callback=count)
    return x, iterations[0]


def pttrf(d, e):
    """LDLᵀ of a symmetric tridiagonal matrix (LAPACK dpttrf).

    Returns (d, e, info): diagonal of D, sub-diagonal of L, and info > 0
    when the leading minor of order info is not positive definite.
    """
    d, e, info = dpttrf(d, e)
    return d, e, info


def pttrs(d, e, B):
    """Solve with the factors of `pttrf` (LAPACK dpttrs), B of shape (k, p)."""
    X, info = dpttrs(d, e, B)
    return X, info


# ..................................................


def scaled_distance(loginvrho, x, y):
    invrho = exp(loginvrho)
    xs = invrho * x
    ys = invrho * y
    return cdist(xs, ys)


# ..................................................

# Build one global RNG (or let the user set the seed somewhere):
_np_rng = numpy.random.default_rng(seed=_config.seed)


def set_seed(seed: int) -> None:
    """Set the global NumPy generator seed."""
    global _np_rng
    _np_rng = numpy.random.default_rng(seed=seed)


def randn(*shape: int) -> ArrayLike:
    return _np_rng.normal(loc=0, scale=1, size=shape).astype(_np_dtype, copy=False)
