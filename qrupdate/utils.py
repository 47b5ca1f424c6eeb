# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

from collections.abc import Sequence
from typing import Optional

import numpy as np

# Recommended by Daniel, Gragg, Kaufman & Stewart; used in ARPACK.
ETA: float = 1 / np.sqrt(2)


def machine_eps(dtype) -> float:
    """Machine epsilon of the real precision behind `dtype`."""
    return float(np.finfo(np.dtype(dtype)).eps)


def real_dtype(dtype) -> np.dtype:
    """float32 for complex64, float64 for complex128, unchanged otherwise."""
    return np.finfo(np.dtype(dtype)).dtype


class ColumnView(Sequence):
    """
    Read-only sequence over the columns of a matrix.

    Indexing hands out `Q[:, i]`, a view into `Q`; nothing is copied.
    """

    def __init__(self, Q: np.ndarray):
        if Q.ndim != 2:
            raise ValueError("ColumnView needs a two-dimensional array")
        self._Q = Q

    def __len__(self) -> int:
        return self._Q.shape[1]

    def __getitem__(self, i):
        if isinstance(i, slice):
            return ColumnView(self._Q[:, i])
        return self._Q[:, i]


def orthogonality_error(Q: np.ndarray) -> float:
    """Return ‖QᴴQ - I‖₂, zero for a perfectly orthonormal Q."""
    Q = np.asarray(Q)
    k = Q.shape[1]
    G = Q.conj().T @ Q
    return float(np.linalg.norm(G - np.eye(k, dtype=G.dtype), ord=2))


def hilbert(n: int, m: Optional[int] = None) -> np.ndarray:
    """
    n-by-m block of the Hilbert matrix, H[i, j] = 1 / (i + j + 1).

    Its columns become numerically dependent very quickly, which makes
    it the usual stress test for Gram-Schmidt variants.
    """
    m = n if m is None else m
    i = np.arange(n)[:, None]
    j = np.arange(m)[None, :]
    return 1.0 / (i + j + 1.0)


def random_orthonormal(n, m, dtype=np.float64, seed=None) -> np.ndarray:
    """
    QR trick: the Q factor of a random n-by-m matrix (n ≥ m)

    Returns
    -------
    (n, m) ndarray of `dtype` with orthonormal columns
    """
    if m > n:
        raise ValueError("Cannot build more than n orthonormal columns")
    rng = np.random.default_rng(seed)
    A = rng.standard_normal((n, m))
    if np.issubdtype(np.dtype(dtype), np.complexfloating):
        A = A + 1j * rng.standard_normal((n, m))
    Q, _R = np.linalg.qr(A)
    return np.asarray(Q, dtype=dtype)


def random_vector(n, dtype=np.float64, seed=None) -> np.ndarray:
    """Uniform [0, 1) entries (real and imaginary parts for complex dtypes)."""
    rng = np.random.default_rng(seed)
    v = rng.random(n)
    if np.issubdtype(np.dtype(dtype), np.complexfloating):
        v = v + 1j * rng.random(n)
    return np.asarray(v, dtype=dtype)
