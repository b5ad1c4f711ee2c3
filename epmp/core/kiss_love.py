# epmp/core/kiss_love.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Structured covariance engine (KISS-GP interpolation with LOVE caches).

The kernel matrix is approximated through an inducing grid U,

.. math::
    K_{XX} \\approx \\sum_p W_p K_{UU} W_p^T,

where each W_p is a sparse cubic interpolation matrix (one per input
part) and K_UU is a Kronecker product of per-axis matrices. The
covariance Σ = K_XX + σ²I is then only used through its action on
vectors, inside conjugate gradient and Lanczos iterations.

References
----------
.. [1] Wilson, A. G., & Nickisch, H. (2015). Kernel interpolation for
   scalable structured Gaussian processes (KISS-GP). ICML.
.. [2] Pleiss, G., Gardner, J., Weinberger, K., & Wilson, A. G. (2018).
   Constant-time predictive distributions for Gaussian processes
   (LOVE). ICML.
"""
import math
import sys

import epmp.num as gnp
from epmp.config import get_config, get_logger
from epmp.errors import (
    EmptyDataError,
    NaNContaminationError,
    NotPositiveDefiniteError,
)
from epmp.linalg import (
    LinearOperator,
    bidiagonal_l,
    conjugate_gradient,
    kron_vectors,
    lanczos_tridiag,
    parallel_map,
    ptt_factor,
    ptt_solve,
    toeplitz_circulant_eigvals,
    tridiagonal,
)
from .grid import Grid
from .params import EllipticalProcessParams
from .utils import ensure_inputs, ensure_noise, ensure_outputs, ensure_rhs, ey, y_ey

_logger = get_logger()

# fractional part of the golden ratio
_GOLDEN = 0.6180339887498949


def _start_vector(m):
    """Deterministic start vector with no symmetry, entries in [0.5, 1.5)."""
    t = (gnp.arange(m) + 1.0) * _GOLDEN
    return 0.5 + (t - gnp.floor(t))


class KissLoveEllipticalProcessParams(EllipticalProcessParams):
    """Elliptical parameters of y with a grid-interpolated covariance.

    Everything is computed once at construction; queries reuse the
    stored grid, weights and caches.

    Parameters
    ----------
    base : BaseEllipticalProcessParams
        Kernel (must be separable), hyperparameters, inputs, noise scale.
    y : array_like, shape (n,)
        Observations.
    grid_points : int, sequence of int or callable, optional
        Points per grid axis, see `Grid.from_inputs`.
    cg_max_iter : int, optional
        Conjugate gradient iteration cap (default: ``config.cg_max_iter``).
    cg_tol : float, optional
        Conjugate gradient relative tolerance (default: ``config.cg_tol``).
    lanczos_rank : int, optional
        Rank cap of the Lanczos decompositions (default: ``config.lanczos_rank``).
    n_jobs : int, optional
        Threads used for per-part and per-column work (default: ``config.n_jobs``).
    kuu_jitter : float, optional
        Relative jitter on each K_UU factor (default: ``config.kuu_jitter``).
    cg_warn_tol : float, optional
        Relative residual above which a solve is reported as not converged
        (default: ``config.cg_warn_tol``).
    strict : bool, optional
        If True, a solve that does not converge raises `ConvergenceError`
        instead of warning.

    Raises
    ------
    EmptyDataError
        If y is empty or the inputs have no part or no feature.
    DimensionMismatchError
        If len(y) differs from the number of inputs.
    NotPositiveDefiniteError
        If a K_UU factor is not numerically positive definite.
    ConvergenceError
        If `strict` and the mean-cache solve does not converge.
    TypeError
        If the kernel is not separable.

    Attributes
    ----------
    grid : Grid
    wx : list of RowSparseMatrix
        Interpolation matrices W_p, shape (n, m).
    kuu, lkuu : KroneckerMatrices
        K_UU and its per-factor Cholesky factor.
    a : list of gnp.array, shape (m,)
        Mean caches a_p = K_UU W_pᵀ u, with u = Σ⁻¹ (y - ȳ).
    s : list of gnp.array, shape (m, r)
        Variance caches, s_p s_pᵀ ≈ K_UU - R_p (QᵀΣQ)⁻¹ R_pᵀ with
        R_p = K_UU W_pᵀ Q.
    """

    def __init__(
        self,
        base,
        y,
        grid_points=None,
        cg_max_iter=None,
        cg_tol=None,
        lanczos_rank=None,
        n_jobs=None,
        kuu_jitter=None,
        cg_warn_tol=None,
        strict=False,
    ):
        config = get_config()
        y = ensure_outputs(y, base.n)
        kernel = base.kernel
        if not kernel.separable:
            raise TypeError(f"{kernel!r} is not a separable kernel")
        if kernel.parts_len(base.x) == 0 or kernel.data_len(base.x) == 0:
            raise EmptyDataError("Inputs have no part or no feature.")

        self._base = base
        self._cg_max_iter = config.resolve("cg_max_iter", cg_max_iter)
        self._cg_tol = config.resolve("cg_tol", cg_tol)
        self._cg_warn_tol = config.resolve("cg_warn_tol", cg_warn_tol)
        self._strict = strict
        self._n_jobs = config.resolve("n_jobs", n_jobs)
        rank = config.resolve("lanczos_rank", lanczos_rank)
        jitter = config.resolve("kuu_jitter", kuu_jitter)

        n = base.n
        self._ey = ey(y)
        self._mu = gnp.full((n,), self._ey)

        # grid, weights and inducing covariance
        parts = kernel.parts(base.x)
        self._grid = Grid.from_inputs(parts, grid_points)
        self._wx = self._grid.interpolation_weight(parts, n_jobs=self._n_jobs)
        self._kuu = self._grid.kuu(kernel, base.theta, jitter)
        self._lkuu = self._kuu.cholesky()
        m = self._grid.size
        _logger.debug(
            "KissLoveEllipticalProcessParams: n=%d parts=%d grid=%s m=%d",
            n, len(parts), self._grid.points, m,
        )

        self._op = LinearOperator(n, self._sigma_matvec)

        # mean cache
        centered = y_ey(y, self._ey)
        self._sigma_inv_y, self._cg_info = conjugate_gradient(
            self._op,
            centered,
            max_iter=self._cg_max_iter,
            tol=self._cg_tol,
            warn_tol=self._cg_warn_tol,
            strict=self._strict,
        )
        self._a = parallel_map(
            lambda w: self._kuu.matmul(w.rmatmul(self._sigma_inv_y)),
            self._wx,
            n_jobs=self._n_jobs,
        )

        # variance cache
        Q, alpha, beta = lanczos_tridiag(self._op, min(n, rank), v0=centered)
        l, d = ptt_factor(alpha, beta)
        self._s = parallel_map(
            lambda w: self._variance_cache(w, Q, l, d, rank),
            self._wx,
            n_jobs=self._n_jobs,
        )

        self._log_det_sqrt = self._circulant_log_det_sqrt(n, m)
        self._mahalanobis_squared = gnp.to_scalar(gnp.sum(centered * self._sigma_inv_y))

    # ------------------------------------------------------------------
    # operators

    def _sigma_matvec(self, v):
        """Σ v = Σ_p W_p K_UU W_pᵀ v + σ² v."""
        out = self._base.sigma ** 2 * v
        for w in self._wx:
            out = out + w.matmul(self._kuu.matmul(w.rmatmul(v)))
        return out

    def _variance_cache(self, w, Q, l, d, rank):
        R = self._kuu.matmul(w.rmatmul(Q))

        def matvec(v):
            return self._kuu.matmul(v) - gnp.matmul(R, ptt_solve(l, d, gnp.matmul(R.T, v)))

        m = self._grid.size
        Q2, alpha2, beta2 = lanczos_tridiag(
            LinearOperator(m, matvec), min(m, rank), v0=_start_vector(m)
        )
        try:
            l2, d2 = ptt_factor(alpha2, beta2)
            root = bidiagonal_l(l2) * gnp.sqrt(d2).reshape(1, -1)
        except NotPositiveDefiniteError:
            _logger.debug("variance cache: indefinite tridiagonal, using eigh")
            evals, evecs = gnp.eigh(tridiagonal(alpha2, beta2))
            evals = gnp.clip(evals, 0.0, None)
            root = evecs * gnp.sqrt(evals).reshape(1, -1)
        return gnp.matmul(Q2, root)

    def _circulant_log_det_sqrt(self, n, m):
        """log √det Σ from the circulant embedding of the K_UU factors.

        The r = min(n, m) largest eigenvalues λ of K_UU, scaled by n/m,
        approximate the spectrum of K_XX; Σ adds σ² to each of its n
        eigenvalues. Returns nan when the approximation is not positive.
        """
        eigs = parallel_map(
            lambda K: toeplitz_circulant_eigvals(K[0]),
            self._kuu.factors,
            n_jobs=self._n_jobs,
        )
        lam = gnp.sort(kron_vectors(eigs))
        r = min(n, m)
        top = lam[m - r :]
        if not gnp.to_scalar(gnp.all(gnp.isfinite(top))):
            raise NaNContaminationError(
                "Non-finite eigenvalue in the circulant embedding of K_UU."
            )
        sigma2 = self._base.sigma ** 2
        scaled = (n / m) * top + sigma2
        smallest = gnp.to_scalar(gnp.min(scaled))
        if not smallest > 0.0 or (n > r and not sigma2 > 0.0):
            _logger.warning(
                "circulant determinant approximation is not positive "
                "(smallest eigenvalue %.3e), consider a finer grid",
                smallest,
            )
            return math.nan
        logdet = gnp.to_scalar(gnp.sum(gnp.log(scaled)))
        if n > r:
            logdet += (n - r) * math.log(sigma2)
        return 0.5 * logdet

    # ------------------------------------------------------------------
    # contract

    @property
    def base(self):
        return self._base

    @property
    def sigma_inv_y(self):
        return self._sigma_inv_y

    @property
    def grid(self):
        return self._grid

    @property
    def wx(self):
        return self._wx

    @property
    def kuu(self):
        return self._kuu

    @property
    def lkuu(self):
        return self._lkuu

    @property
    def a(self):
        return self._a

    @property
    def s(self):
        return self._s

    @property
    def cg_info(self):
        """`CGInfo` of the mean-cache solve."""
        return self._cg_info

    @property
    def operator(self):
        """Σ as a `LinearOperator`."""
        return self._op

    def mean(self):
        return self._mu

    def mahalanobis_squared(self):
        return self._mahalanobis_squared

    def noise_dimension(self):
        """P·m + n: one m-block per part for the grid, n for the noise."""
        return len(self._wx) * self._grid.size + self.dimension()

    def apply_inverse(self, V):
        """Σ⁻¹ V by conjugate gradient, one solve per column."""
        V, vec = ensure_rhs(V, self.dimension())

        def solve(b):
            x, _ = conjugate_gradient(
                self._op,
                b,
                max_iter=self._cg_max_iter,
                tol=self._cg_tol,
                warn_tol=self._cg_warn_tol,
                strict=self._strict,
            )
            return x

        if vec:
            return solve(V)
        if V.shape[1] == 0:
            return gnp.zeros((V.shape[0], 0))
        columns = parallel_map(
            solve, [V[:, j] for j in range(V.shape[1])], n_jobs=self._n_jobs
        )
        return gnp.stack(columns, axis=1)

    def log_det_sqrt(self):
        if not math.isfinite(self._log_det_sqrt):
            raise NaNContaminationError(
                "Circulant determinant approximation broke down."
            )
        return self._log_det_sqrt

    def det_sqrt(self):
        log_value = self.log_det_sqrt()
        if log_value > math.log(sys.float_info.max):
            raise NaNContaminationError(
                f"Determinant overflows (log √det = {log_value:.6g}). Use log_det_sqrt()."
            )
        value = math.exp(log_value)
        if not (math.isfinite(value) and value > 0.0):
            raise NaNContaminationError(
                f"Non-positive or non-finite determinant: {value}. Use log_det_sqrt()."
            )
        return value

    def draw(self, z):
        """μ + Σ_p W_p L_UU z_p + σ z_noise, with Cov = Σ."""
        z = ensure_noise(z, self.noise_dimension())
        m = self._grid.size
        blocks = [(w, z[p * m : (p + 1) * m]) for p, w in enumerate(self._wx)]
        contributions = parallel_map(
            lambda wz: wz[0].matmul(self._lkuu.matmul(wz[1])),
            blocks,
            n_jobs=self._n_jobs,
        )
        x = self._mu + self._base.sigma * z[len(self._wx) * m :]
        for c in contributions:
            x = x + c
        return x

    def predict(self, xs):
        """Posterior mean and variance of ξ at xs, from the caches.

        zpm = ȳ + Σ_p W*_p a_p and zpv = Σ_p ‖W*_p s_p‖² (row-wise).
        """
        xs = ensure_inputs(xs)
        parts = self._base.kernel.parts(xs)
        ws = self._grid.interpolation_weight(parts, n_jobs=self._n_jobs)
        zpm = gnp.full((xs.shape[0],), self._ey)
        zpv = gnp.zeros((xs.shape[0],))
        for w, a, s in zip(ws, self._a, self._s):
            zpm = zpm + w.matmul(a)
            zpv = zpv + gnp.sum(w.matmul(s) ** 2, axis=1)
        return zpm, zpv

    def __repr__(self):
        return (
            f"<KissLoveEllipticalProcessParams n={self.dimension()} "
            f"grid={self._grid.points}>"
        )
