import random

import pytest

from rolemesh.butterfly import butterfly, run, run_optimized, transpose
from rolemesh.channel import connect
from rolemesh.fft import fft8


def _generate(rng, size):
    return [[complex(rng.random(), rng.random()) for _ in range(8)] for _ in range(size)]


def _assert_rows_close(actual, expected):
    assert len(actual) == len(expected)
    for row_a, row_e in zip(actual, expected):
        assert len(row_a) == len(row_e)
        for a, e in zip(row_a, row_e):
            assert a == pytest.approx(e, abs=1e-9)


def test_transpose_rows_and_columns():
    columns = [list(range(8)), list(range(10, 18))]
    rows = transpose(columns)
    assert rows == [[i, 10 + i] for i in range(8)]


def test_transpose_empty_gives_eight_empty_rows():
    assert transpose([]) == [[] for _ in range(8)]


def test_transpose_rejects_short_column():
    with pytest.raises(ValueError):
        transpose([[1, 2, 3]])


@pytest.mark.parametrize("size", [1, 10, 25])
def test_run_matches_reference_transform(size):
    rng = random.Random(size)
    input_columns = _generate(rng, size)
    input_rows = transpose(input_columns)
    expected_rows = transpose([fft8(column) for column in input_columns])
    _assert_rows_close(run(input_rows), expected_rows)


@pytest.mark.parametrize("size", [1, 10, 25])
def test_run_optimized_matches_reference_transform(size):
    rng = random.Random(100 + size)
    input_columns = _generate(rng, size)
    input_rows = transpose(input_columns)
    expected_rows = transpose([fft8(column) for column in input_columns])
    _assert_rows_close(run_optimized(input_rows), expected_rows)


def test_impulse_gives_all_ones():
    rows = transpose([[1, 0, 0, 0, 0, 0, 0, 0]])
    _assert_rows_close(run(rows), [[1] for _ in range(8)])


def test_constant_gives_single_peak():
    rows = transpose([[1] * 8])
    _assert_rows_close(run(rows), [[8]] + [[0] for _ in range(7)])


def test_run_rejects_wrong_row_count():
    with pytest.raises(ValueError):
        run([[1.0]] * 7)


@pytest.mark.asyncio
async def test_butterfly_rejects_bad_index():
    (role,) = connect("R8")
    with pytest.raises(ValueError):
        await butterfly(role, 8, [1.0], False)