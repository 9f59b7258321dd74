"""Distance-matrix readers for AMPL ``.dat`` files and TSPLIB EXPLICIT instances.

Neither format carries solver parameters, so callers supply iterations,
restarts and seed separately.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from shotgun_tsp.errors import InvalidMatrixError, TSPError
from shotgun_tsp.tsp.distance import validate_matrix

logger = logging.getLogger(__name__)

ASYMMETRIC_TYPES = ('ATSP',)


def _read_text(path: str) -> str:
    try:
        with open(path, 'r') as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise TSPError(f"{path} is not a text file: {e}") from e


def parse_tsp_dat(path: str) -> np.ndarray:
    """Parse AMPL .dat with 'set NODES' and a 'param dist :' matrix."""
    content = _read_text(path).splitlines()
    rows: List[List[float]] = []
    in_matrix = False
    header_consumed = False
    for line in content:
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        if line.startswith('param dist'):
            in_matrix = True
            # column header may share the line: 'param dist : 1 2 3 :='
            header_consumed = line.endswith(':=')
            continue
        if not in_matrix:
            continue
        if line.startswith(';'):
            break
        parts = line.split()
        # first line after 'param dist :' is the column header
        if not header_consumed:
            header_consumed = True
            continue
        if not parts[0].isdigit():
            continue
        values = []
        for tok in parts[1:]:
            if tok.startswith('#') or tok == ';':
                break
            try:
                values.append(float(tok))
            except ValueError as e:
                raise InvalidMatrixError(f"Non-numeric entry {tok!r} in {path}") from e
        rows.append(values)
        if parts[-1] == ';':
            break
    if not rows:
        raise InvalidMatrixError(f"No 'param dist' matrix found in {path}")
    return validate_matrix(rows)


def _read_header(lines: List[str]) -> dict:
    header = {}
    for line in lines:
        line = line.strip()
        if line == 'EDGE_WEIGHT_SECTION':
            break
        if ':' in line:
            key, value = line.split(':', 1)
            header[key.strip().upper()] = value.strip()
    return header


def _read_weights(lines: List[str]) -> List[float]:
    weights: List[float] = []
    in_section = False
    for line in lines:
        line = line.strip()
        if line == 'EDGE_WEIGHT_SECTION':
            in_section = True
            continue
        if not in_section:
            continue
        if line == 'EOF' or (line and line[0].isalpha()):
            break
        for tok in line.split():
            try:
                weights.append(float(tok))
            except ValueError as e:
                raise InvalidMatrixError(f"Non-numeric edge weight {tok!r}") from e
    return weights


def fill_explicit(weights: List[float], dimension: int, edge_weight_format: str,
                  symmetric: bool = True) -> np.ndarray:
    """Lay TSPLIB EDGE_WEIGHT_SECTION numbers out as a dimension x dimension matrix."""
    if dimension < 1:
        raise InvalidMatrixError(f"DIMENSION must be >= 1, got {dimension}")
    dist = np.zeros((dimension, dimension))
    if edge_weight_format == 'FULL_MATRIX':
        cells = [(i, j) for i in range(dimension) for j in range(dimension)]
        symmetric = False
    elif edge_weight_format == 'LOWER_DIAG_ROW':
        cells = [(i, j) for i in range(dimension) for j in range(i + 1)]
    elif edge_weight_format == 'UPPER_DIAG_ROW':
        cells = [(i, j) for i in range(dimension) for j in range(i, dimension)]
    elif edge_weight_format == 'UPPER_ROW':
        cells = [(i, j) for i in range(dimension) for j in range(i + 1, dimension)]
    elif edge_weight_format == 'LOWER_ROW':
        cells = [(i, j) for i in range(dimension) for j in range(i)]
    else:
        raise InvalidMatrixError(f"Unsupported EDGE_WEIGHT_FORMAT: {edge_weight_format}")
    if len(weights) != len(cells):
        raise InvalidMatrixError(
            f"EDGE_WEIGHT_SECTION has {len(weights)} values, {edge_weight_format} needs {len(cells)}")
    for (i, j), w in zip(cells, weights):
        dist[i, j] = w
        if symmetric:
            dist[j, i] = w
    return dist


def parse_tsplib(path: str, edge_weight_format: Optional[str] = None) -> np.ndarray:
    """Parse a TSPLIB file whose EDGE_WEIGHT_TYPE is EXPLICIT.

    Triangular formats are mirrored unless TYPE is ATSP.
    """
    lines = _read_text(path).splitlines()
    header = _read_header(lines)
    if 'DIMENSION' not in header:
        raise InvalidMatrixError(f"Could not find DIMENSION in {path}")
    try:
        dimension = int(header['DIMENSION'])
    except ValueError as e:
        raise InvalidMatrixError(f"Bad DIMENSION {header['DIMENSION']!r} in {path}") from e
    if dimension < 1:
        raise InvalidMatrixError(f"DIMENSION must be >= 1, got {dimension} in {path}")
    edge_weight_type = header.get('EDGE_WEIGHT_TYPE', 'EXPLICIT')
    if edge_weight_type != 'EXPLICIT':
        raise InvalidMatrixError(f"Unsupported EDGE_WEIGHT_TYPE: {edge_weight_type}")
    fmt = edge_weight_format or header.get('EDGE_WEIGHT_FORMAT', 'FULL_MATRIX')
    symmetric = header.get('TYPE', 'TSP') not in ASYMMETRIC_TYPES
    dist = fill_explicit(_read_weights(lines), dimension, fmt, symmetric=symmetric)
    logger.debug("read %s: n=%d format=%s", path, dimension, fmt)
    return validate_matrix(dist)
