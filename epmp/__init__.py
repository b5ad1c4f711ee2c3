# epmp/__init__.py

from . import config
from . import num
from . import errors
from . import linalg
from . import kernel
from . import core
from .core import (
    EllipticalParams,
    ExactEllipticalParams,
    EllipticalProcessParams,
    BaseEllipticalProcessParams,
    ExactEllipticalProcessParams,
    KissLoveEllipticalProcessParams,
)
import os

__all__ = [
    "num",
    "kernel",
    "errors",
    "EllipticalParams",
    "ExactEllipticalParams",
    "EllipticalProcessParams",
    "BaseEllipticalProcessParams",
    "ExactEllipticalProcessParams",
    "KissLoveEllipticalProcessParams",
    "__version__",
]

# Read version from VERSION file at project root
_version_file = os.path.join(os.path.dirname(__file__), "..", "VERSION")
try:
    with open(_version_file, "r") as f:
        __version__ = f.read().strip()
except FileNotFoundError:
    __version__ = "0.0.0"
