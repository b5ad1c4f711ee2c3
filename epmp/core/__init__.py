# epmp/core/__init__.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Elliptical parameters and the covariance engines.

Modules
-------
params
    EllipticalParams contract, ExactEllipticalParams,
    EllipticalProcessParams.
base
    BaseEllipticalProcessParams (kernel, θ, X, σ).
exact
    Dense Cholesky engine.
grid
    Inducing grid and cubic interpolation weights.
kiss_love
    Grid-interpolation engine with LOVE caches.
"""

from .params import EllipticalParams, ExactEllipticalParams, EllipticalProcessParams
from .exact import ExactEllipticalProcessParams
from .grid import Grid
from .kiss_love import KissLoveEllipticalProcessParams
from .base import BaseEllipticalProcessParams

__all__ = [
    "EllipticalParams",
    "ExactEllipticalParams",
    "EllipticalProcessParams",
    "ExactEllipticalProcessParams",
    "Grid",
    "KissLoveEllipticalProcessParams",
    "BaseEllipticalProcessParams",
]
