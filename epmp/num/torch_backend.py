# epmp/num/torch_backend.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""Torch numerical backend for epmp.

This module defines the Torch implementation of the epmp.num API.
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
    "cusolver",
    "array must not contain infs or nans",
)


# -----------------------------------------------------
#
#                      TORCH
#
# -----------------------------------------------------

import torch
import numpy

_torch_dtype = torch.float64
torch.set_default_dtype(_torch_dtype)
_config.dtype_resolved = _torch_dtype

from torch import tensor, is_tensor

ndarray = torch.Tensor

from torch import (
    isfinite,
    allclose,
    zeros_like,
    diag,
    floor,
    abs,
    sqrt,
    exp,
    log,
    maximum,
    outer,
    einsum,
    matmul,
)
from torch.linalg import cholesky
from torch import finfo

# ..................................................

eps = finfo(_torch_dtype).eps
fmax = finfo(_torch_dtype).max

# ..................................................

_torch_linalg_error = (
    (torch.linalg.LinAlgError,) if hasattr(torch.linalg, "LinAlgError") else tuple()
)


def _is_linalg_exception(exc: Exception) -> bool:
    if _torch_linalg_error and isinstance(exc, _torch_linalg_error):
        return True
    msg = str(exc).lower()
    return builtins.any(keyword in msg for keyword in _LINALG_ERROR_KEYWORDS)


# ..................................................


def _resolve_torch_dtype(dtype):
    if dtype is None:
        return None
    if isinstance(dtype, torch.dtype):
        return dtype
    if dtype is float:
        return _torch_dtype
    if dtype is int:
        return torch.long
    if dtype is bool:
        return torch.bool
    s = str(dtype).lower()
    if "float64" in s or "double" in s:
        return torch.float64
    if "int64" in s or "long" in s:
        return torch.int64
    if "bool" in s:
        return torch.bool
    return dtype


def asarray(x, dtype=None):
    dtype = _resolve_torch_dtype(dtype)
    if isinstance(x, torch.Tensor):
        if dtype is not None:
            return x if x.dtype == dtype else x.to(dtype=dtype)
        if x.is_floating_point() and x.dtype != _torch_dtype:
            return x.to(dtype=_torch_dtype)
        return x
    if isinstance(x, numpy.ndarray):
        try:
            x_ = torch.from_numpy(x)
        except (TypeError, ValueError):
            x_ = torch.as_tensor(x)
        if dtype is not None:
            return x_ if x_.dtype == dtype else x_.to(dtype=dtype)
        if x_.is_floating_point() and x_.dtype != _torch_dtype:
            return x_.to(dtype=_torch_dtype)
        return x_
    if isinstance(x, (int, float)):
        if dtype is None and isinstance(x, float):
            dtype = _torch_dtype
        return torch.tensor([x], dtype=dtype)
    x_ = torch.as_tensor(x)
    if dtype is not None:
        return x_ if x_.dtype == dtype else x_.to(dtype=dtype)
    if x_.is_floating_point() and x_.dtype != _torch_dtype:
        x_ = x_.to(dtype=_torch_dtype)
    return x_


def array(x, dtype=None):
    out = asarray(x, dtype=dtype)
    if dtype is None and not out.is_floating_point() and out.dtype != torch.bool:
        out = out.to(dtype=_torch_dtype)
    return out.clone()


def asint(x):
    return asarray(x).to(torch.long)


def copy(x):
    t = asarray(x)
    return t.clone().detach()


def zeros(shape, dtype=None):
    return torch.zeros(shape, dtype=_resolve_torch_dtype(dtype) or _torch_dtype)


def ones(shape, dtype=None):
    return torch.ones(shape, dtype=_resolve_torch_dtype(dtype) or _torch_dtype)


def full(shape, fill_value, dtype=None):
    return torch.full(
        shape if isinstance(shape, tuple) else (shape,),
        fill_value,
        dtype=_resolve_torch_dtype(dtype) or _torch_dtype,
    )


def eye(n, m=None, k=0, dtype=None):
    if k != 0:
        raise NotImplementedError("eye with k != 0 is not supported by the torch backend")
    return torch.eye(n, m if m is not None else n, dtype=_resolve_torch_dtype(dtype) or _torch_dtype)


def arange(start, stop=None, step=1, dtype=None):
    if stop is None:
        start, stop = 0, start
    return torch.arange(start, stop, step, dtype=_resolve_torch_dtype(dtype))


def linspace(start, stop, num=50, endpoint=True, dtype=None):
    dtype = _resolve_torch_dtype(dtype) or _torch_dtype
    if endpoint:
        return torch.linspace(start, stop, num, dtype=dtype)
    return torch.linspace(start, stop, num + 1, dtype=dtype)[:-1]


def stack(tensors, axis=0):
    return torch.stack([asarray(t) for t in tensors], dim=axis)


def concatenate(tensors, axis=0):
    return torch.cat([asarray(t) for t in tensors], dim=axis)


def transpose(x, dim0, dim1):
    """Swap two dimensions."""
    return torch.transpose(x, dim0, dim1)


def axis_to_dim(f):
    def f_(x, axis=None, **kwargs):
        if axis is None:
            return f(x, **kwargs)
        return f(x, dim=axis, **kwargs)

    return f_


sum = axis_to_dim(torch.sum)
prod = axis_to_dim(torch.prod)
mean = axis_to_dim(torch.mean)
all = axis_to_dim(torch.all)


def min(x, axis=None):
    if axis is None:
        return torch.min(x)
    return torch.min(x, dim=axis).values


def max(x, axis=None):
    if axis is None:
        return torch.max(x)
    return torch.max(x, dim=axis).values


def norm(x, axis=None):
    return torch.linalg.norm(x, dim=axis)


def clip(x, min=None, max=None):
    return torch.clamp(x, min=min, max=max)


def sort(x):
    """Ascending sort of a 1D tensor."""
    return torch.sort(x).values


def eigh(A):
    w, V = torch.linalg.eigh(A)
    return w, V


def solve_triangular(A, B, lower=False):
    vec = B.dim() == 1
    if vec:
        B = B.reshape(-1, 1)
    x = torch.linalg.solve_triangular(A, B, upper=not lower, left=True)
    if vec:
        x = x.reshape(-1)
    return x


def to_np(x):
    if is_tensor(x):
        return x.detach().cpu().numpy()
    return x


def to_scalar(x):
    return x.item()


def gammaln(x):
    t = asarray(x)
    if not t.is_floating_point():
        t = t.to(dtype=_torch_dtype)
    return torch.special.gammaln(t)


def inftobigf(a, bigf=fmax / 1000.0):
    a = torch.where(torch.isinf(a), torch.full_like(a, bigf), a)
    return a


# ..................................................


def fft_real(x):
    """Real part of the discrete Fourier transform of a 1D tensor."""
    return torch.real(torch.fft.fft(x))


def scatter_add(indices, values, V, n_rows):
    """Compute the (n_rows, k) tensor S with S[indices[i, j]] += values[i, j] * V[i]."""
    k = V.shape[1]
    out = torch.zeros((n_rows, k), dtype=_torch_dtype)
    contrib = values[:, :, None] * V[:, None, :]
    out.index_add_(0, indices.reshape(-1), contrib.reshape(-1, k))
    return out


# ..................................................


def _dot(a, b):
    return torch.sum(a * b).item()


def cg(matvec, b, maxiter, rtol):
    """Conjugate gradient on a matrix-free operator.

    Returns the iterate and the number of iterations performed.
    """
    x = torch.zeros_like(b)
    b_norm = torch.linalg.norm(b).item()
    r = b.clone()
    p = r.clone()
    rs = _dot(r, r)
    iterations = 0
    for _ in range(maxiter):
        if rs ** 0.5 <= rtol * b_norm:
            break
        Ap = matvec(p)
        pAp = _dot(p, Ap)
        if not pAp > 0.0:
            # loss of positive definiteness, keep the current iterate
            break
        step = rs / pAp
        x = x + step * p
        r = r - step * Ap
        rs_new = _dot(r, r)
        iterations += 1
        p = r + (rs_new / rs) * p
        rs = rs_new
    return x, iterations


def pttrf(d, e):
    """LDLᵀ of a symmetric tridiagonal matrix, same contract as LAPACK ?pttrf.

    Returns (d, e, info): diagonal of D, sub-diagonal of L, and info > 0
    when the leading minor of order info is not positive definite.
    """
    d = d.clone()
    e = e.clone()
    for i in range(d.shape[0]):
        if i > 0:
            li = e[i - 1] / d[i - 1]
            d[i] = d[i] - li * e[i - 1]
            e[i - 1] = li
        if not d[i].item() > 0.0:
            return d, e, i + 1
    return d, e, 0


def pttrs(d, e, B):
    """Solve with the factors of `pttrf`, B of shape (k, p)."""
    X = B.clone()
    k = d.shape[0]
    for i in range(1, k):
        X[i] = X[i] - e[i - 1] * X[i - 1]
    X = X / d.reshape(-1, 1)
    for i in range(k - 2, -1, -1):
        X[i] = X[i] - e[i] * X[i + 1]
    return X, 0


# ..................................................


def cdist(x, y):
    return torch.cdist(x, y, p=2)


def scaled_distance(loginvrho, x, y):
    invrho = exp(loginvrho)
    xs = invrho * x
    ys = invrho * y
    return cdist(xs, ys)


# ..................................................

# Build a global Torch Generator
_torch_gen = torch.Generator()
_torch_gen.manual_seed(_config.seed)


def set_seed(seed):
    """Set the global Torch generator seed."""
    global _torch_gen
    _torch_gen = torch.Generator()
    _torch_gen.manual_seed(seed)


def randn(*shape):
    return torch.randn(shape, generator=_torch_gen, dtype=_torch_dtype)
