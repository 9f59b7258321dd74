import io

import numpy as np
import pytest

from shotgun_tsp.errors import InvalidMatrixError, InvalidParameterError, TSPError
from shotgun_tsp.parsers.dat_parser import fill_explicit, parse_tsp_dat, parse_tsplib
from shotgun_tsp.parsers.instance_parser import (
    format_instance, parse_csv_matrix, parse_header, parse_instance, read_instance)

CLASSIC_IN = """100 50 42
0,10,15,20
10,0,35,25
15,35,0,30
20,25,30,0
"""


def test_parse_instance_header_and_matrix():
    inst = parse_instance(CLASSIC_IN)
    assert (inst.num_iterations, inst.num_restarts, inst.seed) == (100, 50, 42)
    assert inst.n == 4
    assert inst.matrix[1, 3] == 25.0
    cfg = inst.config(workers=2)
    assert (cfg.num_iterations, cfg.num_restarts, cfg.seed, cfg.workers) == (100, 50, 42, 2)


def test_read_instance_from_stream_and_path(tmp_path):
    assert read_instance(io.StringIO(CLASSIC_IN)).n == 4
    path = tmp_path / 'classic.in'
    path.write_text(CLASSIC_IN)
    assert read_instance(str(path)).seed == 42


def test_blank_lines_and_spaces_tolerated():
    inst = parse_instance("5 6 7\n\n 0, 1.5\n2 ,0\n\n")
    assert inst.matrix.tolist() == [[0.0, 1.5], [2.0, 0.0]]


@pytest.mark.parametrize('header', ['', '10 20', 'a b c', '10 -1 3', '-2 1 0'])
def test_bad_header_rejected(header):
    with pytest.raises(InvalidParameterError):
        parse_instance(header + "\n0,1\n1,0\n")


def test_parse_header_ignores_extra_fields():
    assert parse_header('1 2 3 extra') == (1, 2, 3)


@pytest.mark.parametrize('body', ['', '0,1\n1\n', '0,1,2\n1,0,2\n', '0,x\n1,0\n'])
def test_bad_matrix_rejected(body):
    with pytest.raises(InvalidMatrixError):
        parse_instance('1 1 1\n' + body)


def test_format_instance_is_readable_back():
    m = np.array([[0, 2.5], [7, 0]])
    text = format_instance(3, 4, 5, m)
    assert text.splitlines()[0] == '3 4 5'
    assert text.splitlines()[1] == '0,2.5'
    inst = parse_instance(text)
    assert inst.matrix.tolist() == m.tolist()


def test_parse_csv_matrix_single_city():
    assert parse_csv_matrix(['0']).tolist() == [[0.0]]


AMPL_DAT = """set NODES := 1 2 3 ;

param dist :
         1       2       3 :=
   1     0      12      30
   2    14       0       9
   3    31       8       0
;
"""


def test_parse_tsp_dat(tmp_path):
    path = tmp_path / 'tiny.dat'
    path.write_text(AMPL_DAT)
    dist = parse_tsp_dat(str(path))
    assert dist.tolist() == [[0, 12, 30], [14, 0, 9], [31, 8, 0]]


def test_parse_tsp_dat_without_matrix(tmp_path):
    path = tmp_path / 'empty.dat'
    path.write_text("set NODES := 1 2 ;\n")
    with pytest.raises(InvalidMatrixError):
        parse_tsp_dat(str(path))


ATSP_FILE = """NAME: tiny3
TYPE: ATSP
DIMENSION: 3
EDGE_WEIGHT_TYPE: EXPLICIT
EDGE_WEIGHT_FORMAT: FULL_MATRIX
EDGE_WEIGHT_SECTION
 9999 3 5
 4 9999 7
 2 6 9999
EOF
"""

LOWER_DIAG_FILE = """NAME: tri3
TYPE: TSP
DIMENSION: 3
EDGE_WEIGHT_TYPE: EXPLICIT
EDGE_WEIGHT_FORMAT: LOWER_DIAG_ROW
EDGE_WEIGHT_SECTION
0
4 0
5 6 0
EOF
"""


def test_parse_tsplib_full_matrix_keeps_asymmetry(tmp_path):
    path = tmp_path / 'tiny3.atsp'
    path.write_text(ATSP_FILE)
    dist = parse_tsplib(str(path))
    assert dist[0, 1] == 3 and dist[1, 0] == 4
    assert dist[2, 0] == 2


def test_parse_tsplib_lower_diag_mirrors(tmp_path):
    path = tmp_path / 'tri3.tsp'
    path.write_text(LOWER_DIAG_FILE)
    dist = parse_tsplib(str(path))
    assert dist.tolist() == [[0, 4, 5], [4, 0, 6], [5, 6, 0]]


def test_parse_tsplib_rejects_coordinates(tmp_path):
    path = tmp_path / 'coords.tsp'
    path.write_text("NAME: c\nDIMENSION: 2\nEDGE_WEIGHT_TYPE: EUC_2D\nNODE_COORD_SECTION\n1 0 0\n2 1 1\nEOF\n")
    with pytest.raises(InvalidMatrixError):
        parse_tsplib(str(path))


def test_fill_explicit_upper_row_unmirrored_for_atsp():
    dist = fill_explicit([1, 2, 3], 3, 'UPPER_ROW', symmetric=False)
    assert dist.tolist() == [[0, 1, 2], [0, 0, 3], [0, 0, 0]]


def test_fill_explicit_short_section():
    with pytest.raises(InvalidMatrixError):
        fill_explicit([1, 2], 3, 'FULL_MATRIX')


def test_fill_explicit_unknown_format():
    with pytest.raises(InvalidMatrixError):
        fill_explicit([1], 1, 'FUNCTION')


def test_fill_explicit_surplus_weights_rejected():
    with pytest.raises(InvalidMatrixError, match='needs 4'):
        fill_explicit([1, 2, 3, 4, 5], 2, 'FULL_MATRIX')


@pytest.mark.parametrize('dimension', [0, -3])
def test_fill_explicit_rejects_empty_dimension(dimension):
    with pytest.raises(InvalidMatrixError):
        fill_explicit([], dimension, 'UPPER_ROW')


def test_parse_tsplib_negative_dimension(tmp_path):
    path = tmp_path / 'neg.tsp'
    path.write_text(LOWER_DIAG_FILE.replace('DIMENSION: 3', 'DIMENSION: -3'))
    with pytest.raises(InvalidMatrixError, match='DIMENSION'):
        parse_tsplib(str(path))


def test_parse_tsplib_extra_weights(tmp_path):
    path = tmp_path / 'extra.tsp'
    path.write_text(LOWER_DIAG_FILE.replace('5 6 0\n', '5 6 0 7\n'))
    with pytest.raises(InvalidMatrixError, match='has 7 values'):
        parse_tsplib(str(path))


def test_undecodable_instance_is_a_tsp_error(tmp_path):
    path = tmp_path / 'binary.in'
    path.write_bytes(b'\xff\xfe\xfa\x00 10 1\n')
    with pytest.raises(TSPError):
        read_instance(str(path))
