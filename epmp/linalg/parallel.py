# epmp/linalg/parallel.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
from joblib import Parallel, delayed

from epmp.config import get_config, get_logger

_logger = get_logger()


def parallel_map(fn, items, n_jobs=None):
    """Apply `fn` to every item, possibly on worker threads.

    Work units only read shared immutable inputs, so the threading
    backend is used and results come back in input order.

    Parameters
    ----------
    fn : callable
    items : iterable
    n_jobs : int, optional
        Number of threads (default: ``config.n_jobs``). 1 runs sequentially.

    Returns
    -------
    list
    """
    items = list(items)
    n_jobs = get_config().resolve("n_jobs", n_jobs)
    if n_jobs == 1 or len(items) <= 1:
        return [fn(item) for item in items]
    _logger.debug("parallel_map: %d items on n_jobs=%s", len(items), n_jobs)
    return Parallel(n_jobs=n_jobs, backend="threading")(
        delayed(fn)(item) for item in items
    )
