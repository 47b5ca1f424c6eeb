# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
qrupdate
========

Numerically stable incremental orthogonalization: add one vector to an
orthonormal basis, the building block of incremental QR in Krylov
solvers such as GMRES and Arnoldi.

Public API
~~~~~~~~~~
- Update step
    - `orthogonalize_and_normalize`
- Methods
    - `ClassicalGramSchmidt`, `ModifiedGramSchmidt`, `DGKS`
- Diagnostics
    - `incremental_basis`, `orthogonality_history`, `orthogonality_error`
- Test matrices
    - `hilbert`, `random_orthonormal`, `random_vector`

Example
-------
>>> import numpy as np, qrupdate as qu
>>> Q = qu.random_orthonormal(10, 3, seed=0)
>>> v = np.random.rand(10)
>>> r = np.zeros(3)
>>> nrm, ok = qu.orthogonalize_and_normalize(Q, v, r, qu.DGKS(np.zeros(3)))
>>> ok, np.allclose(Q.T @ v, 0)
(True, True)
"""

from importlib.metadata import version as _pkg_version

from .methods import (
    DGKS,
    ClassicalGramSchmidt,
    ModifiedGramSchmidt,
    OrthogonalizationMethod,
)
from .orthogonalize import orthogonalize_and_normalize
from .stability import incremental_basis, orthogonality_history
from .utils import (
    ColumnView,
    hilbert,
    machine_eps,
    orthogonality_error,
    random_orthonormal,
    random_vector,
)

__all__ = [
    "orthogonalize_and_normalize",
    "ClassicalGramSchmidt",
    "ModifiedGramSchmidt",
    "DGKS",
    "OrthogonalizationMethod",
    "incremental_basis",
    "orthogonality_history",
    "orthogonality_error",
    "ColumnView",
    "hilbert",
    "machine_eps",
    "random_orthonormal",
    "random_vector",
]

# ---------------------------------------------------------------------
# Version string (helps “pip show qrupdate”, Sphinx, etc.)
# ---------------------------------------------------------------------
try:  # installed via pip / build backend
    __version__ = _pkg_version(__name__)
except Exception:  # running from a checkout
    __version__ = "0.0.0.dev0"

# ---------------------------------------------------------------------
# Silent unless the application configures logging.
# ---------------------------------------------------------------------
import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
