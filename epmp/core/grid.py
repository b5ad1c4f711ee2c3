# epmp/core/grid.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Regular inducing grid and cubic interpolation weights.

The grid is the Cartesian product of d regularly spaced axes. Grid
points are numbered in row-major (C) order, the first axis varying
slowest, which matches the ordering of `KroneckerMatrices`.

Interpolation uses Keys' cubic convolution kernel (a = -1/2): each
input gets 4 neighbours per axis, i.e. 4^d stored weights per row.
"""
import numbers

import epmp.num as gnp
from epmp.errors import EmptyDataError
from epmp.linalg import KroneckerMatrices, RowSparseMatrix, parallel_map

# Keys (1981), a = -1/2
_KEYS_A = -0.5


def _keys_near(s):
    """Cubic convolution kernel for 0 <= s <= 1."""
    a = _KEYS_A
    return ((a + 2.0) * s - (a + 3.0)) * s ** 2 + 1.0


def _keys_far(s):
    """Cubic convolution kernel for 1 <= s <= 2."""
    a = _KEYS_A
    return ((a * s - 5.0 * a) * s + 8.0 * a) * s - 4.0 * a


class Grid:
    """Regular Cartesian grid of inducing points.

    Parameters
    ----------
    starts : sequence of float
        First coordinate of each axis.
    spacings : sequence of float
        Step of each axis (positive).
    points : sequence of int
        Number of points of each axis (at least 2).
    """

    def __init__(self, starts, spacings, points):
        if not (len(starts) == len(spacings) == len(points)) or len(points) == 0:
            raise EmptyDataError("A grid needs at least one axis.")
        self._starts = tuple(float(s) for s in starts)
        self._spacing = tuple(float(h) for h in spacings)
        self._points = tuple(int(p) for p in points)
        for p, h in zip(self._points, self._spacing):
            if p < 2:
                raise ValueError("A grid axis needs at least 2 points")
            if not h > 0.0:
                raise ValueError("Grid spacing must be positive")

    @staticmethod
    def default_points(n, d):
        """Points per axis used when none are given: max(n // 2**d, 2)."""
        return [max(n // 2 ** d, 2)] * d

    @classmethod
    def from_inputs(cls, parts, points=None):
        """Grid covering every part of the inputs.

        When an axis has p >= 4 points, the grid extends one step beyond
        the data on each side, so that every input has its 4 cubic
        neighbours inside the grid.

        Parameters
        ----------
        parts : list of gnp.array, shape (n, d)
            Input parts, as returned by `Kernel.parts`.
        points : int, sequence of int or callable, optional
            Points per axis. A callable is called as ``points(n, d)``.
            Default: `default_points`.

        Raises
        ------
        EmptyDataError
            If there is no part, no input or no feature.
        """
        if len(parts) == 0:
            raise EmptyDataError("Inputs have no part.")
        n = int(parts[0].shape[0])
        d = int(parts[0].shape[1]) if len(parts[0].shape) > 1 else 0
        if n == 0 or d == 0:
            raise EmptyDataError("Inputs have no row or no feature.")

        if points is None:
            points = cls.default_points(n, d)
        elif callable(points):
            points = points(n, d)
        if isinstance(points, numbers.Integral):
            points = [points] * d
        points = [max(int(p), 2) for p in points]
        if len(points) != d:
            raise ValueError(f"points has length {len(points)}, expected {d}")

        x = gnp.concatenate(list(parts), axis=0)
        lo = gnp.to_np(gnp.min(x, axis=0))
        hi = gnp.to_np(gnp.max(x, axis=0))

        starts, spacings = [], []
        for j, p in enumerate(points):
            a, b = float(lo[j]), float(hi[j])
            if b <= a:
                h = 1.0
                start = a - h * (p - 1) / 2.0
            elif p >= 4:
                h = (b - a) / (p - 3)
                start = a - h
            else:
                h = (b - a) / (p - 1)
                start = a
            starts.append(start)
            spacings.append(h)
        return cls(starts, spacings, points)

    @property
    def points(self):
        return self._points

    @property
    def spacing(self):
        return self._spacing

    @property
    def starts(self):
        return self._starts

    @property
    def shape(self):
        return self._points

    @property
    def size(self):
        m = 1
        for p in self._points:
            m *= p
        return m

    @property
    def ndim(self):
        return len(self._points)

    @property
    def axes(self):
        """Coordinates of each axis, a list of 1D arrays."""
        return [
            s + h * gnp.arange(p)
            for s, h, p in zip(self._starts, self._spacing, self._points)
        ]

    def _weights(self, x):
        n = x.shape[0]
        offsets = gnp.array([-1.0, 0.0, 1.0, 2.0])
        idx = gnp.zeros((n, 1))
        val = gnp.ones((n, 1))
        for j in range(self.ndim):
            p = self._points[j]
            t = (x[:, j] - self._starts[j]) / self._spacing[j]
            i0 = gnp.floor(t)
            s = t - i0
            w = gnp.stack(
                [_keys_far(1.0 + s), _keys_near(s), _keys_near(1.0 - s), _keys_far(2.0 - s)],
                axis=1,
            )
            i = gnp.clip(i0.reshape(-1, 1) + offsets.reshape(1, -1), 0.0, float(p - 1))
            # C order: the index of the previous axes is multiplied by p
            idx = (idx.reshape(n, -1, 1) * p + i.reshape(n, 1, 4)).reshape(n, -1)
            val = (val.reshape(n, -1, 1) * w.reshape(n, 1, 4)).reshape(n, -1)
        return RowSparseMatrix(gnp.asint(idx), val, self.size)

    def interpolation_weight(self, parts, n_jobs=None):
        """Sparse interpolation matrices W, one per part.

        Parameters
        ----------
        parts : list of gnp.array, shape (n, d)

        Returns
        -------
        list of RowSparseMatrix, shape (n, m)
            Each row holds 4^d weights summing to 1.

        Raises
        ------
        EmptyDataError
            If there is no part or the parts have no feature.
        """
        if len(parts) == 0:
            raise EmptyDataError("Inputs have no part.")
        for x in parts:
            if len(x.shape) != 2 or x.shape[1] == 0:
                raise EmptyDataError("Inputs have no feature.")
            if x.shape[1] != self.ndim:
                raise ValueError(f"inputs have {x.shape[1]} features, grid has {self.ndim} axes")
        return parallel_map(self._weights, parts, n_jobs=n_jobs)

    def kuu(self, kernel, theta, jitter=0.0):
        """Covariance of the grid points, as a Kronecker product.

        A relative jitter ``jitter * max(diag)`` is added to the diagonal
        of each factor.
        """
        factors = []
        for j, u in enumerate(self.axes):
            K = kernel.axis_covariance(u, u, j, theta)
            if jitter > 0.0:
                K = K + jitter * gnp.max(gnp.diag(K)) * gnp.eye(u.shape[0])
            factors.append(K)
        return KroneckerMatrices(factors)

    def __repr__(self):
        return f"<Grid points={self._points} spacing={self._spacing}>"
