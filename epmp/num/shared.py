# epmp/num/shared.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""Backend-independent helpers for epmp.num."""

from typing import Any, Union

from epmp.config import get_config

Scalar = Union[int, float]
ArrayLike = Any


def get_dtype():
    return get_config().dtype_resolved


def compute_gammaln(up_to_p: int) -> ArrayLike:
    """
    Return gammaln(k) for k = 0, ..., 2*up_to_p + 1 as a 1D backend array.
    Grows and caches a single table in the config caches.
    """
    import epmp.num as gnp

    n = 2 * up_to_p + 2
    cache = get_config().caches.setdefault("gammaln", {})
    table = cache.get("table")

    if table is None:
        table = gnp.asarray(gnp.gammaln(gnp.arange(n)))
        cache["table"] = table
    elif table.shape[0] < n:
        old_n = table.shape[0]
        tail = gnp.asarray(gnp.gammaln(gnp.arange(old_n, n)))
        table = gnp.concatenate((table, tail))
        cache["table"] = table

    return table[:n]
