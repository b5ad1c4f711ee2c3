# epmp/kernel/__init__.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Covariance functions consumed by the elliptical process engines.

Modules
-------
base
    Kernel interface, separable (product) kernels and the
    convolutional wrapper for inputs made of several parts.
matern
    Tensor-product Matérn kernels with half-integer regularity.
squared_exponential
    Anisotropic squared exponential kernel.

Public API
-----------
- Interfaces: Kernel, SeparableKernel, Convolutional, kernel_matrix
- Kernels: ProductMatern, SquaredExponential
- Radial profiles: maternp_kernel, squared_exponential_kernel
"""

from .base import Kernel, SeparableKernel, Convolutional, kernel_matrix
from .matern import maternp_kernel, ProductMatern
from .squared_exponential import squared_exponential_kernel, SquaredExponential

__all__ = [
    "Kernel",
    "SeparableKernel",
    "Convolutional",
    "kernel_matrix",
    "maternp_kernel",
    "ProductMatern",
    "squared_exponential_kernel",
    "SquaredExponential",
]
