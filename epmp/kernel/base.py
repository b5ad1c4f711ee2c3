# epmp/kernel/base.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Kernel capability consumed by the covariance engines.

A kernel is called as

    K = kernel(x, y, param)

where x is (n x d), y is (m x d) and param is a one-dimensional
hyperparameter array; it returns the (n x m) covariance matrix.
Structured inputs made of several parts are handled by `Convolutional`.
"""
import abc

import epmp.num as gnp


class Kernel(abc.ABC):
    """Abstract covariance function."""

    separable = False

    @abc.abstractmethod
    def __call__(self, x, y, param):
        """Covariance matrix between the rows of x and the rows of y."""

    def diag(self, x, param):
        """Variances k(x_i, x_i), shape (n,)."""
        n = x.shape[0]
        return gnp.stack([self(x[i : i + 1], x[i : i + 1], param)[0, 0] for i in range(n)])

    def parts_len(self, x):
        """Number of parts each input decomposes into."""
        return 1

    def data_len(self, x):
        """Feature dimension of one part."""
        return int(x.shape[-1]) if len(x.shape) > 1 else 1

    def parts(self, x):
        """List of (n, d) arrays, one per part."""
        return [x]


class SeparableKernel(Kernel):
    """Product kernel k(x, y) = ∏_j k_j(x_j, y_j).

    Subclasses implement `axis_covariance`. On a Cartesian grid, the
    covariance of the grid points is the Kronecker product of the
    per-axis matrices.

    The hyperparameter convention is ``param = [log(sigma2), log(1/rho_1),
    ..., log(1/rho_d)]``; the variance sigma2 is carried by axis 0.
    """

    separable = True

    @abc.abstractmethod
    def axis_covariance(self, u, v, axis, param):
        """(len(u), len(v)) covariance factor of coordinate `axis`.

        Parameters
        ----------
        u, v : gnp.array, shape (a,), (b,)
            Coordinates along `axis`.
        axis : int
        param : gnp.array
        """

    def __call__(self, x, y, param):
        d = x.shape[1]
        K = self.axis_covariance(x[:, 0], y[:, 0], 0, param)
        for j in range(1, d):
            K = K * self.axis_covariance(x[:, j], y[:, j], j, param)
        return K

    def diag(self, x, param):
        sigma2 = gnp.exp(param[0])
        return sigma2 * gnp.ones((x.shape[0],))

    @staticmethod
    def _axis_scale(axis, param):
        loginvrho = param[1 + axis] if param.shape[0] > 1 + axis else param[-1]
        return gnp.exp(loginvrho)


class Convolutional(Kernel):
    """Kernel on structured inputs made of P parts.

    Inputs have shape (n, P, d) and

    .. math::
        k(x, y) = \\sum_{p=1}^{P} k_0(x_p, y_p)

    Parameters
    ----------
    kernel : Kernel
        Base kernel acting on (n, d) arrays.
    """

    def __init__(self, kernel):
        self.kernel = kernel
        self.separable = kernel.separable

    def __call__(self, x, y, param):
        K = self.kernel(x[:, 0, :], y[:, 0, :], param)
        for p in range(1, x.shape[1]):
            K = K + self.kernel(x[:, p, :], y[:, p, :], param)
        return K

    def diag(self, x, param):
        # cross-part terms are absent by definition of the sum
        return sum(self.kernel.diag(x[:, p, :], param) for p in range(x.shape[1]))

    def axis_covariance(self, u, v, axis, param):
        return self.kernel.axis_covariance(u, v, axis, param)

    def parts_len(self, x):
        return int(x.shape[1])

    def data_len(self, x):
        return int(x.shape[2])

    def parts(self, x):
        return [x[:, p, :] for p in range(x.shape[1])]


def kernel_matrix(kernel, param, x, y=None):
    """Covariance matrix K_XY (K_XX when y is None)."""
    return kernel(x, x if y is None else y, param)
