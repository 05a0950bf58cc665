import random

import pytest

from rolemesh.fft import (
    fft8,
    format_vector,
    rotate_45,
    rotate_90,
    rotate_135,
    run,
    zip_with,
)


def test_rotate_90_swaps_parts():
    assert rotate_90(complex(1, 2)) == complex(2, -1)


def test_rotate_45_twice_is_rotate_90():
    z = complex(0.3, -1.7)
    assert abs(rotate_45(rotate_45(z)) - rotate_90(z)) < 1e-12


def test_rotate_135_is_rotate_90_after_45():
    z = complex(-2.5, 4.0)
    assert abs(rotate_135(z) - rotate_90(rotate_45(z))) < 1e-12


def test_rotations_keep_magnitude():
    z = complex(3, 4)
    for rotate in (rotate_45, rotate_90, rotate_135):
        assert abs(abs(rotate(z)) - abs(z)) < 1e-12


def test_zip_with_pairs_elements():
    x = [1, 2, 3]
    y = [4, 5, 6]
    assert zip_with(x, y, lambda a, b: (a, b)) == list(zip(x, y))


def test_fft8_of_impulse_is_flat():
    result = list(fft8([1, 0, 0, 0, 0, 0, 0, 0]))
    assert result == pytest.approx([complex(1, 0)] * 8, abs=1e-9)


def test_fft8_of_constant_is_impulse():
    result = list(fft8([1] * 8))
    expected = [complex(8, 0)] + [complex(0, 0)] * 7
    assert result == pytest.approx(expected, abs=1e-9)


def test_fft8_inverse_round_trip():
    rng = random.Random(11)
    x = [complex(rng.random(), rng.random()) for _ in range(8)]
    spectrum = list(fft8(x))
    back = [v.conjugate() / 8 for v in fft8([s.conjugate() for s in spectrum])]
    assert back == pytest.approx(x, abs=1e-9)


def test_fft8_rejects_wrong_length():
    with pytest.raises(ValueError):
        fft8([1, 2, 3])


def test_run_matches_direct_transform_on_example_input():
    values = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0]
    result = list(run(values))
    assert len(result) == 8
    assert result == pytest.approx(list(fft8(values)), abs=1e-9)


def test_run_first_bin_is_sum_of_inputs():
    values = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0]
    result = list(run(values))
    assert result[0] == pytest.approx(complex(36, 0), abs=1e-9)


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_run_matches_direct_transform_on_random_input(seed):
    rng = random.Random(seed)
    values = [complex(rng.uniform(-1, 1), rng.uniform(-1, 1)) for _ in range(8)]
    result = list(run(values))
    assert len(result) == 8
    assert result == pytest.approx(list(fft8(values)), abs=1e-9)


def test_run_rejects_wrong_length():
    with pytest.raises(ValueError):
        run([1.0, 2.0])


def test_format_vector_empty():
    assert format_vector([]) == "[]"


def test_format_vector_lines():
    text = format_vector([complex(1, -2), complex(0.5, 0.25)])
    assert text == "[\n    1.000-2.000i,\n    0.500+0.250i,\n]"