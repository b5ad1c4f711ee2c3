# epmp/core/utils.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Small utilities used across `epmp.core` modules.

This file hosts:
- Shape/type validation & conversion helpers for inputs and outputs
- Centering of observations
"""
import epmp.num as gnp
from epmp.errors import DimensionMismatchError, EmptyDataError


def ensure_inputs(x):
    """Convert inputs to a backend array of shape (n, d) or (n, P, d).

    A one-dimensional x is read as n scalar inputs, i.e. (n, 1).
    """
    x_ = gnp.array(x)
    if len(x_.shape) == 1:
        x_ = x_.reshape(-1, 1)
    return x_


def ensure_outputs(y, n):
    """Validate observations y against n inputs.

    Parameters
    ----------
    y : array_like, shape (n,) or (n, 1)
    n : int
        Number of inputs.

    Returns
    -------
    gnp.array, shape (n,)

    Raises
    ------
    EmptyDataError
        If y has no element.
    DimensionMismatchError
        If len(y) != n.
    """
    y_ = gnp.array(y)
    if len(y_.shape) == 2 and y_.shape[1] == 1:
        y_ = y_.reshape(-1)
    if len(y_.shape) != 1:
        raise DimensionMismatchError("y should be a 1D array")
    if y_.shape[0] == 0:
        raise EmptyDataError()
    if y_.shape[0] != n:
        raise DimensionMismatchError(
            f"Dimension mismatch: {y_.shape[0]} observations for {n} inputs."
        )
    return y_


def ey(y):
    """Empirical mean of the observations, as a float."""
    return gnp.to_scalar(gnp.mean(y))


def y_ey(y, ey):
    """Centered observations y - ey."""
    return y - ey


def ensure_rhs(V, n):
    """Validate the right-hand side of Σ⁻¹V; returns (V, was_vector)."""
    V_ = gnp.array(V)
    vec = len(V_.shape) == 1
    if V_.shape[0] != n:
        raise DimensionMismatchError(
            f"Dimension mismatch: expected {n} rows, got {V_.shape[0]}."
        )
    return V_, vec


def ensure_noise(z, n):
    """Validate a vector of standard normal variates of length n."""
    z_ = gnp.array(z).reshape(-1)
    if z_.shape[0] != n:
        raise DimensionMismatchError(
            f"Dimension mismatch: draw expects {n} variates, got {z_.shape[0]}."
        )
    return z_
