"""Shotgun hill climbing with 2-opt moves for TSP / ATSP distance matrices."""
from shotgun_tsp.errors import InvalidMatrixError, InvalidParameterError, TSPError, WorkerError
from shotgun_tsp.tsp.distance import DistanceModel
from shotgun_tsp.tsp.shotgun import SolveResult, solve_tsp

__all__ = [
    'DistanceModel',
    'InvalidMatrixError',
    'InvalidParameterError',
    'SolveResult',
    'TSPError',
    'WorkerError',
    'solve_tsp',
]

__version__ = '0.1.0'
