import numpy as np
import pytest

from shotgun_tsp.errors import InvalidMatrixError
from shotgun_tsp.tsp.distance import DistanceModel, validate_matrix

from conftest import random_matrix


def test_length_sums_edges_including_wrap(classic_matrix):
    model = DistanceModel(classic_matrix)
    # 0->1 (10) + 1->3 (25) + 3->2 (30) + 2->0 (15)
    assert model.length([0, 1, 3, 2]) == 80.0


def test_length_matches_definition_on_asymmetric(asymmetric_matrix):
    model = DistanceModel(asymmetric_matrix)
    tour = [0, 4, 2, 8, 1, 7, 3, 6, 5]
    expected = sum(asymmetric_matrix[tour[k], tour[(k + 1) % 9]] for k in range(9))
    assert model.length(tour) == pytest.approx(expected)
    # reversing an asymmetric tour generally changes its length
    assert model.length(tour[::-1]) != pytest.approx(expected)


@pytest.mark.parametrize('shift', [1, 3, 6])
def test_rotation_does_not_change_length(shift):
    m = random_matrix(7, seed=shift)
    model = DistanceModel(m)
    tour = np.array([0, 3, 5, 1, 6, 2, 4])
    assert model.length(np.roll(tour, shift)) == pytest.approx(model.length(tour))


def test_single_city_length_is_self_cost():
    model = DistanceModel([[4.5]])
    assert model.n == 1
    assert model.length([0]) == 4.5


def test_length_rejects_wrong_size(classic_matrix):
    model = DistanceModel(classic_matrix)
    with pytest.raises(ValueError):
        model.length([0, 1, 2])


def test_matrix_is_read_only(classic_matrix):
    model = DistanceModel(classic_matrix)
    classic_matrix[0][1] = 999
    assert model.matrix[0, 1] == 10
    with pytest.raises(ValueError):
        model.matrix[0, 1] = 1.0


@pytest.mark.parametrize('matrix', [
    [],
    [[0, 1], [1]],
    [[0, 1, 2], [1, 0, 2]],
    np.zeros((2, 3)),
    np.zeros(4),
    [[0, -1], [1, 0]],
    [[0, float('nan')], [1, 0]],
    [[0, 'x'], [1, 0]],
])
def test_invalid_matrices_rejected(matrix):
    with pytest.raises(InvalidMatrixError):
        DistanceModel(matrix)


def test_validate_matrix_returns_float_copy():
    out = validate_matrix([[0, 2], [3, 0]])
    assert out.dtype == float
    assert out.tolist() == [[0.0, 2.0], [3.0, 0.0]]


def test_symmetry_check(classic_matrix, asymmetric_matrix):
    assert DistanceModel(classic_matrix).is_symmetric()
    assert not DistanceModel(asymmetric_matrix).is_symmetric()
