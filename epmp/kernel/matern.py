# epmp/kernel/matern.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
from math import sqrt
import epmp.num as gnp

from .base import SeparableKernel


def maternp_kernel(p: int, h):
    """Matérn kernel with half-integer regularity :math:`\\nu = p + 1/2`.

    Using the half-integer simplification (Watson 1922; Abramowitz & Stegun):

    .. math::
        K(h) = \\exp(-2\\sqrt{\\nu}\\,h)\\,
               \\frac{\\Gamma(p+1)}{\\Gamma(2p+1)}
               \\sum_{i=0}^{p} \\frac{(p+i)!}{i!(p-i)!}\\,(4\\sqrt{\\nu}h)^{\\,p-i}

    Parameters
    ----------
    p : int
        Nonnegative integer with :math:`\\nu = p+1/2`.
    h : gnp.array
        Distances.

    Returns
    -------
    gnp.array
        Kernel values.
    """
    gln = gnp.compute_gammaln(p)
    h = gnp.inftobigf(h)
    c = 2.0 * sqrt(p + 0.5)
    twoch = 2.0 * c * h
    polynomial = gnp.ones(h.shape)
    for i in range(p):
        exp_log_combination = gnp.exp(
            gln[p + 1] - gln[2 * p + 1] + gln[p + i + 1] - gln[i + 1] - gln[p - i + 1]
        )
        polynomial = polynomial + exp_log_combination * (twoch ** (p - i))
    return gnp.exp(-c * h) * polynomial


class ProductMatern(SeparableKernel):
    """Tensor-product Matérn covariance, :math:`\\nu = p + 1/2` on every axis.

    .. math::
        k(x, y) = \\sigma^2 \\prod_{j=1}^{d} K_p(|x_j - y_j| / \\rho_j)

    Parameters
    ----------
    p : int
        Half-integer regularity index (p = 0 is the exponential kernel).
    """

    def __init__(self, p: int = 2):
        if p < 0:
            raise ValueError("p must be a nonnegative integer")
        self.p = int(p)

    def axis_covariance(self, u, v, axis, param):
        invrho = self._axis_scale(axis, param)
        h = gnp.abs(u.reshape(-1, 1) - v.reshape(1, -1)) * invrho
        K = maternp_kernel(self.p, h)
        if axis == 0:
            K = gnp.exp(param[0]) * K
        return K

    def __repr__(self):
        return f"ProductMatern(p={self.p})"
