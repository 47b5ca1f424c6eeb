# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Loss-of-orthogonality diagnostics

Feed the columns of a matrix one at a time through
`orthogonalize_and_normalize`, the way GMRES or Arnoldi grow their basis,
and watch ‖QₖᴴQₖ - I‖ as k grows.
"""

import logging
from collections.abc import Mapping
from typing import Tuple

import numpy as np
import pandas as pd

from .methods import DGKS, METHODS, OrthogonalizationMethod
from .orthogonalize import orthogonalize_and_normalize
from .utils import orthogonality_error

logger = logging.getLogger(__name__)


def incremental_basis(
    A: np.ndarray, method: OrthogonalizationMethod
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Grow an orthonormal basis for the columns of A, one column per update.

    Parameters
    ----------
    A : (n, m) ndarray
    method : ClassicalGramSchmidt | ModifiedGramSchmidt | DGKS
        For DGKS only `steps` is taken from the descriptor; its scratch
        vector is reused when it is long enough (length ≥ m), otherwise a
        new one is allocated once for the whole run.

    Returns
    -------
    Q : (n, m) ndarray
        Basis; column j is the normalized update of A[:, j].
    R : (m, m) ndarray
        Upper-triangular coefficients, R[:j, j] = r and R[j, j] = nrm.
    flags : (m,) bool ndarray
        DGKS success flag per column, all True for the other methods.
    """
    if not isinstance(method, METHODS):
        raise TypeError(f"Unknown orthogonalization method {type(method).__name__!r}")
    A = np.asarray(A)
    if A.ndim != 2:
        raise ValueError(f"A must be two-dimensional, got shape {A.shape}")
    if not np.issubdtype(A.dtype, np.inexact):
        A = A.astype(float)
    n, m = A.shape

    Q = np.zeros((n, m), dtype=A.dtype)
    R = np.zeros((m, m), dtype=A.dtype)
    flags = np.ones(m, dtype=bool)

    if isinstance(method, DGKS):
        buf = method.tmp
        if buf.shape[0] < m or buf.dtype != A.dtype:
            buf = np.zeros(m, dtype=A.dtype)

    for j in range(m):
        v = Q[:, j]
        v[:] = A[:, j]
        r = np.zeros(j, dtype=A.dtype)

        if isinstance(method, DGKS):
            nrm, ok = orthogonalize_and_normalize(
                Q[:, :j], v, r, DGKS(buf[:j], method.steps)
            )
        else:
            nrm, ok = orthogonalize_and_normalize(Q[:, :j], v, r, method), True

        R[:j, j] = r
        R[j, j] = nrm
        flags[j] = ok
        if not ok:
            logger.warning(
                "column %d is numerically dependent on the previous %d", j, j
            )

    return Q, R, flags


def orthogonality_history(A: np.ndarray, methods) -> pd.DataFrame:
    """
    Orthogonality error after each incremental update, per method.

    Parameters
    ----------
    A : (n, m) ndarray
    methods : mapping of name -> method descriptor, or a sequence of
        descriptors (named after their class, DGKS with its steps)

    Returns
    -------
    DataFrame indexed by the number of columns k = 1..m, one column per
    method, holding ‖QₖᴴQₖ - I‖₂.
    """
    if not isinstance(methods, Mapping):
        named = {}
        for meth in methods:
            name = _method_name(meth)
            if name in named:
                raise ValueError(f"method {name!r} given twice; pass a mapping of names")
            named[name] = meth
        methods = named

    m = np.shape(A)[1]
    records = {}
    for name, method in methods.items():
        Q, _R, flags = incremental_basis(A, method)
        records[name] = [orthogonality_error(Q[:, :k]) for k in range(1, m + 1)]
        logger.debug("%s: %d of %d columns flagged", name, int((~flags).sum()), m)

    return pd.DataFrame(records, index=pd.RangeIndex(1, m + 1, name="columns"))


def _method_name(method) -> str:
    if isinstance(method, DGKS):
        return f"DGKS({method.steps})"
    return type(method).__name__
