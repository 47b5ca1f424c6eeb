# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Orthogonalization method descriptors

Exactly three methods exist; `orthogonalize_and_normalize` dispatches on
the type of the descriptor it is handed.

- `ModifiedGramSchmidt()`: quite stable, vector-by-vector updates
- `ClassicalGramSchmidt()`: very unstable, two matrix-vector products
- `DGKS(tmp, steps)`: stable, repeated classical Gram-Schmidt, roughly
  two or three times the work of `ClassicalGramSchmidt`
"""

from dataclasses import dataclass
from typing import Union

import numpy as np


@dataclass(frozen=True)
class ClassicalGramSchmidt:
    """Unstable but efficient way (matrix-vector products) to orthogonalize."""


@dataclass(frozen=True)
class ModifiedGramSchmidt:
    """Quite stable but less efficient (one basis vector at a time)."""


@dataclass(frozen=True, eq=False)
class DGKS:
    """
    Repeated classical Gram-Schmidt (Daniel, Gragg, Kaufman & Stewart).

    Most stable option, approximately two or three times as expensive as
    `ClassicalGramSchmidt()`. Will use at most `steps` applications of
    (I - Q Qᴴ).

    Parameters
    ----------
    tmp : (m,) ndarray
        Scratch vector that receives Qᴴv on every pass. Owned by the
        caller and reused across calls; must not alias Q, v or r.
    steps : int
        Maximum number of correction passes, at least 1.
    """

    tmp: np.ndarray
    steps: int = 2

    def __post_init__(self):
        if not isinstance(self.tmp, np.ndarray):
            raise TypeError("DGKS scratch vector must be a NumPy ndarray")
        if self.tmp.ndim != 1:
            raise ValueError("DGKS scratch vector must be one-dimensional")
        if isinstance(self.steps, bool) or not isinstance(
            self.steps, (int, np.integer)
        ):
            raise TypeError("DGKS steps must be an integer")
        if self.steps < 1:
            raise ValueError("DGKS needs at least one step")

    @classmethod
    def allocate(cls, m: int, dtype=np.float64, steps: int = 2) -> "DGKS":
        """Build a descriptor with a zeroed scratch vector of length m."""
        return cls(np.zeros(m, dtype=dtype), steps)


OrthogonalizationMethod = Union[ClassicalGramSchmidt, ModifiedGramSchmidt, DGKS]
METHODS = (ClassicalGramSchmidt, ModifiedGramSchmidt, DGKS)
