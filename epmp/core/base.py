# epmp/core/base.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
import epmp.num as gnp
from epmp.errors import EmptyDataError
from .exact import ExactEllipticalProcessParams
from .kiss_love import KissLoveEllipticalProcessParams
from .utils import ensure_inputs


class BaseEllipticalProcessParams:
    """Kernel, hyperparameters, inputs and noise scale of a process.

    Instances are read-only; conditioning on observations y is done by
    building an engine with `exact` or `kiss_love`.

    Parameters
    ----------
    kernel : epmp.kernel.Kernel
        Covariance function.
    theta : array_like
        Kernel hyperparameters.
    x : array_like, shape (n, d) or (n, P, d)
        Inputs; (n,) is read as (n, 1).
    sigma : float
        Standard deviation of the observation noise (>= 0).

    Examples
    --------
    >>> base = BaseEllipticalProcessParams(ProductMatern(2), [0.0, 0.0], x, 0.1)
    >>> params = base.exact(y)
    >>> params.mahalanobis_squared()
    """

    def __init__(self, kernel, theta, x, sigma):
        x = ensure_inputs(x)
        if x.shape[0] == 0:
            raise EmptyDataError("No input.")
        sigma = float(sigma)
        if not sigma >= 0.0:
            raise ValueError("sigma must be non-negative")
        self._kernel = kernel
        self._theta = gnp.array(theta).reshape(-1)
        self._x = x
        self._sigma = sigma

    @property
    def kernel(self):
        return self._kernel

    @property
    def theta(self):
        return self._theta

    @property
    def x(self):
        return self._x

    @property
    def sigma(self):
        return self._sigma

    @property
    def n(self):
        return int(self._x.shape[0])

    def exact(self, y):
        """Condition on y with the dense engine."""
        return ExactEllipticalProcessParams(self, y)

    def kiss_love(self, y, **options):
        """Condition on y with the grid-interpolation engine.

        Keyword options are those of `KissLoveEllipticalProcessParams`.
        """
        return KissLoveEllipticalProcessParams(self, y, **options)

    def __repr__(self):
        return (
            f"<BaseEllipticalProcessParams kernel={self._kernel!r} "
            f"n={self.n} sigma={self._sigma}>"
        )
