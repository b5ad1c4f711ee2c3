# epmp/errors.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Exceptions and warnings raised by the covariance engines.

Validation failures derive from ``ValueError`` and numerical breakdowns
from ``ArithmeticError`` so that callers can catch them with the usual
built-in categories as well as with :class:`EllipticalProcessError`.
"""


class EllipticalProcessError(Exception):
    """Base class of all epmp errors."""


class EmptyDataError(EllipticalProcessError, ValueError):
    """Zero observations, or inputs with zero parts or zero features."""

    def __init__(self, message="Data is empty."):
        super().__init__(message)


class DimensionMismatchError(EllipticalProcessError, ValueError):
    """Input and output lengths disagree."""

    def __init__(self, message="Dimension mismatch."):
        super().__init__(message)


class LinearAlgebraError(EllipticalProcessError, ArithmeticError):
    """Failure of an underlying linear-algebra primitive."""


class NotPositiveDefiniteError(LinearAlgebraError):
    """Cholesky (or LDLt) factorization failed."""

    def __init__(self, message="Matrix is not positive definite."):
        super().__init__(message)


class NaNContaminationError(LinearAlgebraError):
    """A determinant or eigenvalue computation produced a non-finite value."""

    def __init__(self, message="NaN contaminated."):
        super().__init__(message)


class ConvergenceError(LinearAlgebraError):
    """Iterative solver hit its iteration cap with a large residual (strict mode)."""


class ConvergenceWarning(RuntimeWarning):
    """Iterative solver hit its iteration cap with a large residual."""
