# epmp/core/exact.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Exact covariance engine.

Σ = K_XX + σ²I is formed densely and factorized once by Cholesky;
every query then costs O(n²) per right-hand side. Intended for small
to moderate n.
"""
import math

import epmp.num as gnp
from epmp.config import get_logger
from epmp.errors import NaNContaminationError
from epmp.linalg import cholesky, cholesky_solve, triangular_det
from .params import EllipticalProcessParams
from .utils import ensure_inputs, ensure_noise, ensure_outputs, ensure_rhs, ey, y_ey

_logger = get_logger()


class ExactEllipticalProcessParams(EllipticalProcessParams):
    """Elliptical parameters of y with a dense Cholesky factor of Σ.

    Parameters
    ----------
    base : BaseEllipticalProcessParams
        Kernel, hyperparameters, inputs and noise scale.
    y : array_like, shape (n,)
        Observations.

    Raises
    ------
    EmptyDataError
        If y is empty.
    DimensionMismatchError
        If len(y) differs from the number of inputs.
    NotPositiveDefiniteError
        If K_XX + σ²I is not numerically positive definite.

    Attributes
    ----------
    lsigma : gnp.array, shape (n, n)
        Lower Cholesky factor L of K_XX + σ²I.
    sigma_inv_y : gnp.array, shape (n,)
        u = Σ⁻¹ (y - ȳ).
    """

    def __init__(self, base, y):
        y = ensure_outputs(y, base.n)
        n = base.n
        self._base = base
        self._ey = ey(y)
        self._mu = gnp.full((n,), self._ey)

        K = base.kernel(base.x, base.x, base.theta)
        K = K + base.sigma ** 2 * gnp.eye(n)
        self._lsigma = cholesky(K)

        centered = y_ey(y, self._ey)
        self._sigma_inv_y = cholesky_solve(self._lsigma, centered)
        self._mahalanobis_squared = gnp.to_scalar(gnp.sum(centered * self._sigma_inv_y))
        _logger.debug(
            "ExactEllipticalProcessParams: n=%d mahalanobis_squared=%.6e",
            n, self._mahalanobis_squared,
        )

    @property
    def base(self):
        return self._base

    @property
    def lsigma(self):
        return self._lsigma

    @property
    def sigma_inv_y(self):
        return self._sigma_inv_y

    def mean(self):
        return self._mu

    def mahalanobis_squared(self):
        return self._mahalanobis_squared

    def apply_inverse(self, V):
        V, _ = ensure_rhs(V, self.dimension())
        return cholesky_solve(self._lsigma, V)

    def det_sqrt(self):
        det = gnp.to_scalar(triangular_det(self._lsigma))
        if not (math.isfinite(det) and det > 0.0):
            raise NaNContaminationError(
                f"Non-positive or non-finite determinant: {det}. Use log_det_sqrt()."
            )
        return det

    def log_det_sqrt(self):
        value = gnp.to_scalar(gnp.sum(gnp.log(gnp.diag(self._lsigma))))
        if not math.isfinite(value):
            raise NaNContaminationError(f"Non-finite log-determinant: {value}.")
        return value

    def draw(self, z):
        z = ensure_noise(z, self.noise_dimension())
        return self._mu + gnp.matmul(self._lsigma, z)

    def predict(self, xs):
        """Posterior mean and variance of ξ at xs.

        zpm = ȳ + K_{*X} u and zpv = k(x*, x*) - ‖L⁻¹ K_{X*}‖².
        """
        base = self._base
        xs = ensure_inputs(xs)
        Kxs = base.kernel(base.x, xs, base.theta)
        zpm = self._ey + gnp.matmul(Kxs.T, self._sigma_inv_y)
        V = gnp.solve_triangular(self._lsigma, Kxs, lower=True)
        zpv = base.kernel.diag(xs, base.theta) - gnp.sum(V ** 2, axis=0)
        zpv = gnp.maximum(zpv, gnp.zeros_like(zpv))
        return zpm, zpv

    def __repr__(self):
        return f"<ExactEllipticalProcessParams n={self.dimension()}>"
