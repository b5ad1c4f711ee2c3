# epmp/core/params.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Parameterizations of an elliptical random vector.

An elliptical random vector of size n is described by a location
vector μ and a scatter matrix Σ. Distributions of the elliptical
family (normal, Student-t) only need a handful of operations on
(μ, Σ):

- ``mean()``: μ
- ``apply_inverse(V)``: Σ⁻¹ V
- ``det_sqrt()``: √det Σ
- ``dimension()``: n
- ``draw(z)``: μ + S z with S Sᵀ = Σ

`EllipticalParams` states this contract; `ExactEllipticalParams` is
its simplest implementation from a given Cholesky factor. Parameters
obtained by conditioning a process on data implement
`EllipticalProcessParams`, see `epmp.core.exact` and
`epmp.core.kiss_love`.
"""
import abc
import math

import epmp.num as gnp
from epmp.errors import (
    DimensionMismatchError,
    EmptyDataError,
    NaNContaminationError,
)
from epmp.linalg import cholesky_solve, triangular_det
from .utils import ensure_noise, ensure_rhs


class EllipticalParams(abc.ABC):
    """Location and scatter of an elliptical random vector."""

    @abc.abstractmethod
    def mean(self):
        """Location vector μ, shape (n,)."""

    @abc.abstractmethod
    def apply_inverse(self, V):
        """Σ⁻¹ V for V of shape (n,) or (n, k).

        Raises
        ------
        DimensionMismatchError
            If V does not have n rows.
        LinearAlgebraError
            If the solve fails.
        """

    @abc.abstractmethod
    def det_sqrt(self):
        """√det Σ, a positive float.

        Raises
        ------
        NaNContaminationError
            If the value is non-finite or non-positive.
        """

    @abc.abstractmethod
    def dimension(self):
        """Size n of the random vector."""

    @abc.abstractmethod
    def draw(self, z):
        """Sample μ + S z from standard normal variates z.

        z must have length ``noise_dimension()``.
        """

    def noise_dimension(self):
        """Number of standard normal variates consumed by `draw`."""
        return self.dimension()

    def log_det_sqrt(self):
        """log √det Σ."""
        return math.log(self.det_sqrt())

    def x_mu(self, x):
        """Centered vector x - μ.

        Raises
        ------
        DimensionMismatchError
            If len(x) != n.
        """
        x_ = gnp.array(x).reshape(-1)
        n = self.dimension()
        if x_.shape[0] != n:
            raise DimensionMismatchError(
                f"Dimension mismatch: expected a vector of length {n}, got {x_.shape[0]}."
            )
        return x_ - self.mean()

    def quadratic_form(self, x):
        """(x - μ)ᵀ Σ⁻¹ (x - μ)."""
        d = self.x_mu(x)
        return gnp.to_scalar(gnp.sum(d * self.apply_inverse(d)))


class ExactEllipticalParams(EllipticalParams):
    """Elliptical parameters given by μ and a lower Cholesky factor of Σ.

    Parameters
    ----------
    mu : array_like, shape (n,)
        Location vector.
    lsigma : array_like, shape (n, n)
        Lower triangular L with L Lᵀ = Σ.

    Raises
    ------
    EmptyDataError
        If mu is empty.
    DimensionMismatchError
        If lsigma is not (n, n).

    Examples
    --------
    >>> params = ExactEllipticalParams(gnp.zeros(2), gnp.eye(2))
    >>> params.draw(gnp.array([1.0, -1.0]))
    """

    def __init__(self, mu, lsigma):
        mu = gnp.array(mu).reshape(-1)
        lsigma = gnp.array(lsigma)
        n = mu.shape[0]
        if n == 0:
            raise EmptyDataError()
        if tuple(lsigma.shape) != (n, n):
            raise DimensionMismatchError(
                f"Dimension mismatch: lsigma has shape {tuple(lsigma.shape)}, expected ({n}, {n})."
            )
        self._mu = mu
        self._lsigma = lsigma

    @property
    def lsigma(self):
        return self._lsigma

    def mean(self):
        return self._mu

    def dimension(self):
        return int(self._mu.shape[0])

    def apply_inverse(self, V):
        V, _ = ensure_rhs(V, self.dimension())
        return cholesky_solve(self._lsigma, V)

    def det_sqrt(self):
        det = gnp.to_scalar(triangular_det(self._lsigma))
        if not (math.isfinite(det) and det > 0.0):
            raise NaNContaminationError(f"Non-positive or non-finite determinant: {det}.")
        return det

    def log_det_sqrt(self):
        logdiag = gnp.log(gnp.diag(self._lsigma))
        value = gnp.to_scalar(gnp.sum(logdiag))
        if not math.isfinite(value):
            raise NaNContaminationError(f"Non-finite log-determinant: {value}.")
        return value

    def draw(self, z):
        z = ensure_noise(z, self.noise_dimension())
        return self._mu + gnp.matmul(self._lsigma, z)


class EllipticalProcessParams(EllipticalParams):
    """Elliptical parameters of observations of a process at inputs X.

    The observations y = ξ(X) + ε are modelled with location ȳ·1 and
    scatter Σ = K_XX + σ²I, where K_XX is given by a kernel.
    """

    @property
    @abc.abstractmethod
    def base(self):
        """The `BaseEllipticalProcessParams` the object was built from."""

    @abc.abstractmethod
    def mahalanobis_squared(self):
        """(y - ȳ)ᵀ Σ⁻¹ (y - ȳ), computed at construction."""

    @abc.abstractmethod
    def predict(self, xs):
        """Conditional mean and variance of the latent process at xs.

        Returns
        -------
        zpm : gnp.array, shape (ns,)
            Posterior mean.
        zpv : gnp.array, shape (ns,)
            Posterior variance.
        """

    def dimension(self):
        return self.base.n
