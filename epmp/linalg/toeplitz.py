# epmp/linalg/toeplitz.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
import epmp.num as gnp


def circulant_embedding(first_row):
    """First column of the circulant embedding of a symmetric Toeplitz matrix.

    For t = (t_0, ..., t_{m-1}) the embedding has size 2m - 2 (m >= 2)
    and first column (t_0, ..., t_{m-1}, t_{m-2}, ..., t_1).
    """
    t = gnp.asarray(first_row).reshape(-1)
    m = t.shape[0]
    if m <= 2:
        return t
    tail = gnp.stack([t[i] for i in range(m - 2, 0, -1)])
    return gnp.concatenate((t, tail))


def toeplitz_circulant_eigvals(first_row):
    """Eigenvalues of the circulant embedding of a symmetric Toeplitz matrix.

    Parameters
    ----------
    first_row : array_like, shape (m,)
        First row of the Toeplitz matrix.

    Returns
    -------
    array_like, shape (m,)
        The first m eigenvalues of the circulant embedding, i.e. the
        real FFT of its first column at frequencies 2πj/(2m-2),
        j = 0, ..., m-1. They approximate the spectrum of the Toeplitz
        matrix.
    """
    c = circulant_embedding(first_row)
    m = gnp.asarray(first_row).reshape(-1).shape[0]
    return gnp.fft_real(c)[:m]
