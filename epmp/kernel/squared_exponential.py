# epmp/kernel/squared_exponential.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
import epmp.num as gnp

from .base import SeparableKernel


def squared_exponential_kernel(h):
    """Squared exponential kernel.

    .. math::
        k(h) = \\exp(-h^2 / 2)

    Parameters
    ----------
    h : gnp.array
        Distances between points.

    Returns
    -------
    gnp.array
        Kernel values.
    """
    return gnp.exp(-0.5 * h * h)


class SquaredExponential(SeparableKernel):
    """Anisotropic squared exponential covariance.

    .. math::
        k(x, y) = \\sigma^2 \\exp\\left(-\\frac{1}{2}\\sum_j (x_j - y_j)^2 / \\rho_j^2\\right)
    """

    def axis_covariance(self, u, v, axis, param):
        invrho = self._axis_scale(axis, param)
        h = gnp.abs(u.reshape(-1, 1) - v.reshape(1, -1)) * invrho
        K = squared_exponential_kernel(h)
        if axis == 0:
            K = gnp.exp(param[0]) * K
        return K

    def __call__(self, x, y, param):
        sigma2 = gnp.exp(param[0])
        loginvrho = param[1:]
        if loginvrho.shape[0] == 1 and x.shape[1] > 1:
            loginvrho = loginvrho * gnp.ones((x.shape[1],))
        return sigma2 * squared_exponential_kernel(gnp.scaled_distance(loginvrho, x, y))

    def __repr__(self):
        return "SquaredExponential()"
