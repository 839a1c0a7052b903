import numpy as np
import pytest

from src_block_matching.disparity import (
    BlockMatchingConfig,
    RowScoreComputer,
    StereoPairMismatchError,
)
from tests.helpers import brute_force_horizontal


def _computer(width, dtype=np.int32, **kwargs):
    geometry = BlockMatchingConfig(region_radius_y=0, **kwargs).geometry_for(width, 1)
    return RowScoreComputer(geometry, dtype), geometry


@pytest.mark.parametrize("radius_x", [0, 1, 3])
@pytest.mark.parametrize("min_disparity, max_disparity", [(0, 4), (2, 7)])
def test_matches_brute_force(rng, radius_x, min_disparity, max_disparity):
    computer, geometry = _computer(32, region_radius_x=radius_x,
                                   min_disparity=min_disparity, max_disparity=max_disparity)
    left = rng.integers(0, 256, 32, dtype=np.uint8)
    right = rng.integers(0, 256, 32, dtype=np.uint8)
    out = np.empty(geometry.score_shape, dtype=np.int32)

    computer.compute(left, right, out)

    np.testing.assert_array_equal(out, brute_force_horizontal(left, right, geometry))


def test_unsigned_differences_do_not_wrap():
    computer, geometry = _computer(6, region_radius_x=0, max_disparity=1)
    left = np.zeros(6, dtype=np.uint8)
    right = np.full(6, 255, dtype=np.uint8)
    out = np.empty(geometry.score_shape, dtype=np.int32)

    computer.compute(left, right, out)

    assert np.all(out == 255)


def test_signed_samples(rng):
    computer, geometry = _computer(20, region_radius_x=2, max_disparity=3)
    left = rng.integers(-32768, 32768, 20, dtype=np.int16)
    right = rng.integers(-32768, 32768, 20, dtype=np.int16)
    out = np.empty(geometry.score_shape, dtype=np.int32)

    computer.compute(left, right, out)

    np.testing.assert_array_equal(out, brute_force_horizontal(left, right, geometry))


def test_float_samples(rng):
    computer, geometry = _computer(16, dtype=np.float64, region_radius_x=1, max_disparity=3)
    left = rng.random(16).astype(np.float32)
    right = rng.random(16).astype(np.float32)
    out = np.empty(geometry.score_shape, dtype=np.float64)

    computer.compute(left, right, out)

    np.testing.assert_allclose(out, brute_force_horizontal(left, right, geometry), rtol=1e-6)


def test_strided_rows(rng):
    computer, geometry = _computer(12, region_radius_x=1, max_disparity=3)
    image = rng.integers(0, 256, size=(4, 24), dtype=np.uint8)
    left, right = image[0, ::2], image[3, 1::2]
    out = np.empty(geometry.score_shape, dtype=np.int32)

    computer.compute(left, right, out)

    np.testing.assert_array_equal(
        out, brute_force_horizontal(left.copy(), right.copy(), geometry))


def test_single_valid_column(rng):
    computer, geometry = _computer(9, region_radius_x=2, max_disparity=4)
    left = rng.integers(0, 256, 9, dtype=np.uint8)
    right = rng.integers(0, 256, 9, dtype=np.uint8)
    out = np.empty(geometry.score_shape, dtype=np.int32)

    computer.compute(left, right, out)

    assert out.shape == (5, 1)
    np.testing.assert_array_equal(out, brute_force_horizontal(left, right, geometry))


def test_row_length_mismatch():
    computer, geometry = _computer(10, max_disparity=2)
    out = np.empty(geometry.score_shape, dtype=np.int32)

    with pytest.raises(StereoPairMismatchError):
        computer.compute(np.zeros(10, np.uint8), np.zeros(11, np.uint8), out)
