"""Random starts, the 2-opt neighborhood and the hill climber built on it.

Tours keep city 0 at position 0 and the 2-opt move never reverses a segment
starting there, so every tour a climb visits keeps that anchor.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from shotgun_tsp.tsp.distance import DistanceModel


@dataclass
class ClimbResult:
    tour: np.ndarray           # local optimum (or last tour when fuel ran out)
    length: float
    iterations: int = 0        # loop iterations executed
    improvements: int = 0      # accepted 2-opt moves
    converged: bool = False    # True when a full scan found no improving move
    history: List[float] = field(default_factory=list)


def random_tour(n: int, rng: np.random.Generator) -> np.ndarray:
    """City 0 followed by a uniformly random permutation of 1..n-1."""
    if n < 1:
        raise ValueError(f"Need at least 1 city, got {n}")
    tour = np.arange(n, dtype=np.int64)
    rng.shuffle(tour[1:])
    return tour


def two_opt_swap(tour: np.ndarray, i: int, j: int) -> np.ndarray:
    """Copy of ``tour`` with positions i..j (inclusive) reversed.

    Reference form of the move :func:`first_improvement` applies in place;
    handy for checking a tour against its whole 2-opt neighborhood.
    """
    new_tour = tour.copy()
    new_tour[i:j + 1] = new_tour[i:j + 1][::-1].copy()
    return new_tour


def _reverse(tour: np.ndarray, i: int, j: int) -> None:
    tour[i:j + 1] = tour[i:j + 1][::-1].copy()


def first_improvement(model: DistanceModel, tour: np.ndarray,
                      current_length: float) -> Optional[Tuple[int, int, float]]:
    """Apply the first improving 2-opt move to ``tour`` in place.

    Candidates ``(i, j)`` with 1 <= i < j <= n-1 are tried in lexicographic
    order. Each one is reversed in place and measured with the full tour
    length; a rejected candidate is reverted before the next one is tried.
    Returns ``(i, j, new_length)`` for the first strictly shorter tour, or
    None when no candidate improves (the tour is then left as it was).
    """
    n = tour.shape[0]
    for i in range(1, n - 1):
        for j in range(i + 1, n):
            _reverse(tour, i, j)
            new_length = model.length(tour)
            if new_length < current_length:
                return i, j, new_length
            _reverse(tour, i, j)
    return None


def climb_from(model: DistanceModel, tour, num_iterations: int) -> ClimbResult:
    """Hill climb from a given start tour.

    Runs at most ``num_iterations`` first-improvement steps and stops early
    at a local optimum. The start tour is copied, never modified.
    """
    current = np.array(tour, dtype=np.int64)
    current_length = model.length(current)
    result = ClimbResult(tour=current, length=current_length, history=[current_length])

    for _ in range(num_iterations):
        result.iterations += 1
        move = first_improvement(model, current, current_length)
        if move is None:
            result.converged = True
            break
        current_length = move[2]
        result.improvements += 1
        result.history.append(current_length)

    result.length = current_length
    return result


def hill_climb(model: DistanceModel, num_iterations: int, rng: np.random.Generator) -> ClimbResult:
    """One restart: a fresh random tour driven to a 2-opt local optimum."""
    return climb_from(model, random_tour(model.n, rng), num_iterations)
