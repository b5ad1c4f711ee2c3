# epmp/config.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
import os
import logging

# Read version from VERSION file
_version_file = os.path.join(os.path.dirname(__file__), "..", "VERSION")
try:
    with open(os.path.abspath(_version_file), "r") as f:
        __version__ = f.read().strip()
except FileNotFoundError:
    __version__ = "0.0.0"

_BACKENDS = ("numpy", "torch")


def _env_n_jobs(default=-1):
    value = os.environ.get("EPMP_N_JOBS")
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


class _EPMPConfig:
    def __init__(self):
        self.version = __version__
        self.backend = None
        self.dtype = float
        self.seed = 1234
        self.caches = {}
        # engine knobs, overridable per constructor call
        self.cg_max_iter = 100
        self.cg_tol = 1e-10
        self.cg_warn_tol = 1e-4
        self.lanczos_rank = 100
        self.kuu_jitter = 1e-10
        self.n_jobs = _env_n_jobs()
        # logger lives in config
        self.logger = logging.getLogger("epmp")
        if not self.logger.handlers:
            h = logging.StreamHandler()
            h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
            self.logger.addHandler(h)
        self.logger.setLevel(logging.INFO)

    def __str__(self):
        return (
            f"EPMPConfig("
            f"version={self.version}, "
            f"backend={self.backend}, "
            f"dtype={self.dtype}, "
            f"seed={self.seed}, "
            f"cg_max_iter={self.cg_max_iter}, "
            f"lanczos_rank={self.lanczos_rank}, "
            f"n_jobs={self.n_jobs})"
        )

    def __repr__(self):
        return (
            f"<EPMPConfig "
            f"version={self.version!r}, "
            f"backend={self.backend!r}, "
            f"dtype={self.dtype!r}, "
            f"seed={self.seed!r}, "
            f"cg_max_iter={self.cg_max_iter!r}, "
            f"cg_tol={self.cg_tol!r}, "
            f"lanczos_rank={self.lanczos_rank!r}, "
            f"n_jobs={self.n_jobs!r}>"
        )

    def update(self, **kwargs):
        for k, v in kwargs.items():
            if not hasattr(self, k):
                raise AttributeError(f"unknown configuration key '{k}'")
            setattr(self, k, v)
        return self

    def clear_caches(self, name=None):
        if name is None:
            self.caches.clear()
        else:
            self.caches.pop(name, None)

    def resolve(self, name, value=None):
        """Return `value` if given, else the configured default for `name`."""
        return getattr(self, name) if value is None else value


_config = _EPMPConfig()


def get_config():
    return _config


def _detect_backend():
    env = os.environ.get("EPMP_BACKEND")
    if env in _BACKENDS:
        return env
    return "numpy"


def init_backend():
    """Idempotent. Detect and store backend, set env for downstream imports."""
    if _config.backend is None:
        backend = _detect_backend()
        _config.backend = backend
        os.environ["EPMP_BACKEND"] = backend
    return _config.backend


def set_backend(backend: str):
    """Force a backend ('numpy'|'torch') before importing epmp.num."""
    if backend not in _BACKENDS:
        raise ValueError("backend must be 'numpy' or 'torch'")
    _config.backend = backend
    os.environ["EPMP_BACKEND"] = backend


def get_backend():
    """Return current backend; triggers detection if not set."""
    return _config.backend or init_backend()


def get_logger():
    return _config.logger


def set_log_level(level):
    _config.logger.setLevel(level)
