# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Incremental orthogonalization: the update step of a QR factorization

In exact arithmetic every method computes v ← (I - QQᴴ)v and normalizes
it. In finite precision rounding errors build up differently for each of
them, which is the whole reason there are three.
"""

import logging
from collections.abc import Sequence
from typing import Tuple, Union

import numpy as np

from .methods import (
    DGKS,
    ClassicalGramSchmidt,
    ModifiedGramSchmidt,
    OrthogonalizationMethod,
)
from .utils import ETA, ColumnView, real_dtype

logger = logging.getLogger(__name__)


def orthogonalize_and_normalize(
    Q: Union[np.ndarray, Sequence],
    v: np.ndarray,
    r: np.ndarray,
    method: OrthogonalizationMethod,
    *,
    strict: bool = False,
):
    """
    Orthogonalize `v` in-place against the columns of `Q` and store
    r ← Qᴴv.

    Often the literature advocates `ModifiedGramSchmidt` (GMRES for
    instance), but rounding errors can still build up there. Repeated
    Gram-Schmidt is the stable alternative: usually "twice is enough",
    the second application of (I - QQᴴ) removes the rounding errors of
    the first. If v is nearly in the span of Q more passes may be needed.

    Parameters
    ----------
    Q : (n, m) ndarray or sequence of m (n,) ndarrays
        Orthonormal basis. Only `ModifiedGramSchmidt` accepts a sequence.
    v : (n,) ndarray
        Vector to orthogonalize; overwritten with the normalized result.
    r : (m,) ndarray
        Overwritten with the projection coefficients Qᴴv.
    method : ClassicalGramSchmidt | ModifiedGramSchmidt | DGKS
    strict : bool
        Raise ValueError instead of dividing by a zero (or non-finite)
        norm. Off by default: the division then yields non-finite values.

    Returns
    -------
    nrm : float
        Norm of the orthogonal component before normalization.
    success : bool
        DGKS only. False means v did not separate from the span of Q
        within `method.steps` passes, i.e. v is numerically in span(Q).
    """
    _check_target(v, r)

    if isinstance(method, ModifiedGramSchmidt):
        if isinstance(Q, np.ndarray):
            _check_matrix_basis(Q, v, r)
            basis = ColumnView(Q)
        else:
            basis = _check_sequence_basis(Q, v, r)
        return _modified_gram_schmidt(basis, v, r, strict)

    if isinstance(method, ClassicalGramSchmidt):
        _require_matrix(Q, "ClassicalGramSchmidt")
        _check_matrix_basis(Q, v, r)
        return _classical_gram_schmidt(Q, v, r, strict)

    if isinstance(method, DGKS):
        _require_matrix(Q, "DGKS")
        _check_matrix_basis(Q, v, r)
        _check_scratch(Q, v, r, method.tmp)
        return _dgks(Q, v, r, method, strict)

    raise TypeError(
        f"Unknown orthogonalization method {type(method).__name__!r}; "
        "expected ClassicalGramSchmidt, ModifiedGramSchmidt or DGKS"
    )


def _normalize(v: np.ndarray, nrm, strict: bool):
    if strict and (nrm == 0 or not np.isfinite(nrm)):
        raise ValueError(
            f"Cannot normalize: residual norm is {nrm}, "
            "v lies in the span of the basis"
        )
    v /= nrm
    return nrm


def _classical_gram_schmidt(Q, v, r, strict):
    np.matmul(Q.conj().T, v, out=r)
    v -= Q @ r
    return _normalize(v, np.linalg.norm(v), strict)


def _modified_gram_schmidt(basis, v, r, strict):
    # Each coefficient is taken against the already-updated v.
    for i, q in enumerate(basis):
        c = np.vdot(q, v)
        r[i] = c
        v -= c * q
    return _normalize(v, np.linalg.norm(v), strict)


def _dgks(Q, v, r, method: DGKS, strict) -> Tuple[float, bool]:
    tmp = method.tmp
    QH = Q.conj().T
    nrm = np.linalg.norm(v)
    r.fill(0)
    eta = real_dtype(v.dtype).type(ETA)

    for step in range(method.steps):
        np.matmul(QH, v, out=tmp)
        v -= Q @ tmp
        r += tmp
        prevnrm = nrm
        nrm = np.linalg.norm(v)
        logger.debug("DGKS pass %d: ‖v‖ %.3e -> %.3e", step + 1, prevnrm, nrm)

        if nrm > eta * prevnrm:
            return _normalize(v, nrm, strict), True

    logger.debug(
        "DGKS: no separation from span(Q) after %d passes (‖v‖ = %.3e)",
        method.steps,
        nrm,
    )
    return _normalize(v, nrm, strict), False


# ---------------------------------------------------------------------
# Boundary checks. numpy would reject most of these deep inside an
# operation, or worse, broadcast silently; fail early with the argument name.
# ---------------------------------------------------------------------
def _check_target(v, r):
    if not isinstance(v, np.ndarray):
        raise TypeError("v must be a NumPy ndarray")
    if not isinstance(r, np.ndarray):
        raise TypeError("r must be a NumPy ndarray")
    if v.ndim != 1:
        raise ValueError(f"v must be one-dimensional, got shape {v.shape}")
    if r.ndim != 1:
        raise ValueError(f"r must be one-dimensional, got shape {r.shape}")
    if not np.issubdtype(v.dtype, np.inexact):
        raise TypeError(f"v must have a floating or complex dtype, got {v.dtype}")


def _require_matrix(Q, name):
    if not isinstance(Q, np.ndarray):
        raise TypeError(f"{name} needs the basis as a two-dimensional ndarray")


def _check_dtypes(basis_dtype, v, r):
    if not np.can_cast(basis_dtype, v.dtype, casting="same_kind"):
        raise TypeError(f"v of dtype {v.dtype} cannot hold a {basis_dtype} result")
    coeff_dtype = np.result_type(basis_dtype, v.dtype)
    # r must keep the working precision.
    if not np.can_cast(coeff_dtype, r.dtype, casting="safe"):
        raise TypeError(f"r of dtype {r.dtype} cannot hold {coeff_dtype} coefficients")
    if not np.can_cast(r.dtype, v.dtype, casting="same_kind"):
        raise TypeError(f"complex r cannot update a real v of dtype {v.dtype}")


def _check_matrix_basis(Q, v, r):
    if Q.ndim != 2:
        raise ValueError(f"Q must be two-dimensional, got shape {Q.shape}")
    n, m = Q.shape
    if v.shape[0] != n:
        raise ValueError(f"v has length {v.shape[0]}, basis vectors have length {n}")
    if r.shape[0] != m:
        raise ValueError(f"r has length {r.shape[0]}, basis has {m} vectors")
    if not np.issubdtype(Q.dtype, np.number):
        raise TypeError(f"Q must be numeric, got {Q.dtype}")
    _check_dtypes(Q.dtype, v, r)


def _check_sequence_basis(Q, v, r):
    if not isinstance(Q, Sequence) or isinstance(Q, (str, bytes)):
        raise TypeError("Q must be an ndarray or a sequence of ndarrays")
    n = v.shape[0]
    if r.shape[0] != len(Q):
        raise ValueError(f"r has length {r.shape[0]}, basis has {len(Q)} vectors")
    for i, q in enumerate(Q):
        if not isinstance(q, np.ndarray):
            raise TypeError(f"basis vector {i} must be a NumPy ndarray")
        if q.shape != (n,):
            raise ValueError(
                f"basis vector {i} has shape {q.shape}, expected ({n},)"
            )
        if not np.issubdtype(q.dtype, np.number):
            raise TypeError(f"basis vector {i} must be numeric, got {q.dtype}")
        _check_dtypes(q.dtype, v, r)
    return Q


def _check_scratch(Q, v, r, tmp):
    m = Q.shape[1]
    if tmp.shape[0] != m:
        raise ValueError(f"DGKS scratch vector has length {tmp.shape[0]}, expected {m}")
    coeff_dtype = np.result_type(Q.dtype, v.dtype)
    if not (
        np.can_cast(coeff_dtype, tmp.dtype, casting="safe")
        and np.can_cast(tmp.dtype, v.dtype, casting="same_kind")
    ):
        raise TypeError(
            f"DGKS scratch vector of dtype {tmp.dtype} does not match "
            f"{coeff_dtype} coefficients"
        )
    for name, other in (("Q", Q), ("v", v), ("r", r)):
        if np.may_share_memory(tmp, other):
            raise ValueError(f"DGKS scratch vector must not share memory with {name}")
