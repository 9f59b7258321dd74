"""Distance model: the n x n cost matrix and tour-length evaluation."""
from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np

from shotgun_tsp.errors import InvalidMatrixError

logger = logging.getLogger(__name__)

MatrixLike = Union[np.ndarray, Sequence[Sequence[float]]]


def validate_matrix(matrix: MatrixLike) -> np.ndarray:
    """Return ``matrix`` as a float64 array, or raise InvalidMatrixError.

    Rows of unequal length are rejected before the array is built.
    """
    if isinstance(matrix, np.ndarray):
        if matrix.ndim != 2:
            raise InvalidMatrixError(f"Distance matrix must be 2-D, got shape {matrix.shape}")
        rows = matrix.shape[0]
        if rows == 0:
            raise InvalidMatrixError("Distance matrix is empty")
        if matrix.shape[1] != rows:
            raise InvalidMatrixError(f"Distance matrix not square: {matrix.shape}")
    else:
        rows = len(matrix)
        if rows == 0:
            raise InvalidMatrixError("Distance matrix is empty")
        for i, row in enumerate(matrix):
            if len(row) != rows:
                raise InvalidMatrixError(
                    f"Distance matrix not square: row {i} has {len(row)} entries, expected {rows}")
    try:
        dist = np.array(matrix, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidMatrixError(f"Distance matrix has non-numeric entries: {e}") from e
    if not np.all(np.isfinite(dist)):
        raise InvalidMatrixError("Distance matrix has non-finite entries")
    if np.any(dist < 0):
        raise InvalidMatrixError("Distance matrix has negative entries")
    return dist


class DistanceModel:
    """Read-only cost matrix; ``cost[i, j]`` is the cost of going from i to j.

    The matrix may be asymmetric. It is copied and frozen on construction so
    that worker processes and threads can read it without synchronisation.
    """

    def __init__(self, matrix: MatrixLike):
        dist = validate_matrix(matrix)
        dist.flags.writeable = False
        self._dist = dist
        logger.debug("distance model: n=%d symmetric=%s", self.n, self.is_symmetric())

    @property
    def n(self) -> int:
        return self._dist.shape[0]

    @property
    def matrix(self) -> np.ndarray:
        return self._dist

    def is_symmetric(self) -> bool:
        return bool(np.allclose(self._dist, self._dist.T, atol=1e-9))

    def length(self, tour: Union[np.ndarray, Sequence[int]]) -> float:
        """Cyclic tour length, wrap-around edge included.

        For n = 1 the tour ``[0]`` has the single self edge ``cost[0, 0]``.
        """
        t = np.asarray(tour)
        if t.shape != (self.n,):
            raise ValueError(f"Tour must contain {self.n} cities, got {t.shape[0] if t.ndim else 0}")
        return float(self._dist[t, np.roll(t, -1)].sum())

    def __getstate__(self):
        return {'_dist': self._dist}

    def __setstate__(self, state):
        dist = state['_dist']
        dist.flags.writeable = False
        self._dist = dist

    def __repr__(self):
        return f"DistanceModel(n={self.n})"
