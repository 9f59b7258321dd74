import numpy as np
import pytest

# Classic 4-city instance; the optimal cycle 0 1 3 2 has length 80.
CLASSIC_4 = [
    [0, 10, 15, 20],
    [10, 0, 35, 25],
    [15, 35, 0, 30],
    [20, 25, 30, 0],
]


@pytest.fixture
def classic_matrix():
    return [row[:] for row in CLASSIC_4]


@pytest.fixture
def asymmetric_matrix():
    rng = np.random.default_rng(1234)
    m = rng.integers(1, 100, size=(9, 9)).astype(float)
    np.fill_diagonal(m, 0.0)
    return m


def random_matrix(n, seed):
    rng = np.random.default_rng(seed)
    m = rng.uniform(1.0, 50.0, size=(n, n))
    np.fill_diagonal(m, 0.0)
    return m


def is_anchored_permutation(tour, n):
    tour = [int(c) for c in tour]
    return len(tour) == n and sorted(tour) == list(range(n)) and tour[0] == 0
