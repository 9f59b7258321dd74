"""Reader for the ``.in`` instance format.

Line 1 holds ``numIterations numRestarts seed`` separated by spaces; every
following non-blank line is one comma-separated row of the cost matrix.
"""
from __future__ import annotations

import io
import os
from dataclasses import dataclass
from typing import IO, Iterable, List, Union

import numpy as np

from shotgun_tsp.config import SolverConfig
from shotgun_tsp.errors import InvalidMatrixError, InvalidParameterError, TSPError
from shotgun_tsp.tsp.distance import validate_matrix


@dataclass
class TSPInstance:
    num_iterations: int
    num_restarts: int
    seed: int
    matrix: np.ndarray

    @property
    def n(self) -> int:
        return self.matrix.shape[0]

    def config(self, workers=None) -> SolverConfig:
        return SolverConfig(num_iterations=self.num_iterations, num_restarts=self.num_restarts,
                            seed=self.seed, workers=workers)


def parse_header(line: str):
    """Return ``(num_iterations, num_restarts, seed)`` from the first line."""
    parts = line.split()
    if len(parts) < 3:
        raise InvalidParameterError(
            f"Header must be 'numIterations numRestarts seed', got {line.strip()!r}")
    try:
        num_iterations, num_restarts, seed = (int(p) for p in parts[:3])
    except ValueError as e:
        raise InvalidParameterError(f"Header values must be integers: {line.strip()!r}") from e
    SolverConfig(num_iterations=num_iterations, num_restarts=num_restarts, seed=seed).validate()
    return num_iterations, num_restarts, seed


def parse_csv_row(line: str) -> List[float]:
    row = []
    for cell in line.split(','):
        cell = cell.strip()
        try:
            row.append(float(cell))
        except ValueError as e:
            raise InvalidMatrixError(f"Non-numeric matrix entry {cell!r}") from e
    return row


def parse_csv_matrix(lines: Iterable[str]) -> np.ndarray:
    """Comma-separated rows (blank lines skipped) -> validated square matrix."""
    rows = [parse_csv_row(line) for line in lines if line.strip()]
    return validate_matrix(rows)


def parse_instance(text: str) -> TSPInstance:
    lines = text.splitlines()
    if not lines or not lines[0].strip():
        raise InvalidParameterError("Missing 'numIterations numRestarts seed' header line")
    num_iterations, num_restarts, seed = parse_header(lines[0])
    matrix = parse_csv_matrix(lines[1:])
    return TSPInstance(num_iterations=num_iterations, num_restarts=num_restarts, seed=seed, matrix=matrix)


def read_instance(source: Union[str, os.PathLike, IO[str]]) -> TSPInstance:
    """Read an instance from a path or an open text stream (e.g. stdin)."""
    try:
        if isinstance(source, io.IOBase) or hasattr(source, 'read'):
            text = source.read()
        else:
            with open(source, 'r') as f:
                text = f.read()
    except UnicodeDecodeError as e:
        raise TSPError(f"Instance is not valid text: {e}") from e
    return parse_instance(text)


def format_instance(num_iterations: int, num_restarts: int, seed: int, matrix) -> str:
    """Inverse of :func:`parse_instance`, used to write benchmark inputs."""
    lines = [f"{num_iterations} {num_restarts} {seed}"]
    for row in np.asarray(matrix, dtype=float):
        lines.append(','.join(_format_cost(v) for v in row))
    return '\n'.join(lines) + '\n'


def _format_cost(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)
