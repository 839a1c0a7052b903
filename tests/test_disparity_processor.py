import numpy as np
import pandas as pd
import pytest

from src_block_matching.disparity import (
    INVALID_DISPARITY,
    BlockMatchingConfig,
    DisparityProcessor,
    SadRectEngine,
)
from tests.helpers import block_sad


@pytest.fixture
def processor():
    return DisparityProcessor()


def test_quality_of_mostly_valid_map(processor):
    disparity = np.full((10, 10), 4, dtype=np.int32)
    disparity[0] = INVALID_DISPARITY
    disparity[1, :5] = 2

    metrics = processor.assess_disparity_quality(disparity)

    assert metrics['valid_pixels'] == 90
    assert metrics['validity_ratio'] == pytest.approx(0.9)
    assert metrics['quality_level'] == 'excellent'
    assert metrics['disparity_range']['min'] == 2
    assert metrics['disparity_range']['max'] == 4
    assert metrics['dynamic_range'] == 2


def test_quality_of_empty_map(processor):
    metrics = processor.assess_disparity_quality(np.full((4, 4), INVALID_DISPARITY, np.int32))

    assert metrics['valid_pixels'] == 0
    assert metrics['quality_level'] == 'failed'
    assert metrics['disparity_range'] is None


def test_colormap_blacks_out_invalid_pixels(processor):
    disparity = np.array([[INVALID_DISPARITY, 0, 8], [4, 8, INVALID_DISPARITY]], dtype=np.float32)

    colored = processor.create_disparity_colormap(disparity, 0, 8)

    assert colored.shape == (2, 3, 3)
    assert colored.dtype == np.uint8
    assert np.all(colored[0, 0] == 0)
    assert np.all(colored[1, 2] == 0)
    assert colored[0, 2].any()
    np.testing.assert_array_equal(colored[0, 2], colored[1, 1])


def test_cost_profile_matches_engine(processor, textured_image, rng):
    right = rng.integers(0, 256, size=textured_image.shape, dtype=np.uint8)
    config = BlockMatchingConfig(min_disparity=1, max_disparity=6,
                                 region_radius_x=2, region_radius_y=1)
    disparity = SadRectEngine(config).process(textured_image, right)

    profile = processor.compute_cost_profile(textured_image, right, x=20, y=10, config=config)

    assert isinstance(profile, pd.DataFrame)
    assert list(profile.columns) == ['Disparity', 'RightX', 'Score', 'Best']
    assert profile['Disparity'].tolist() == list(range(1, 7))
    assert profile['RightX'].tolist() == [20 - d for d in range(1, 7)]
    assert profile.loc[2, 'Score'] == block_sad(textured_image, right, 20, 10, 3, 2, 1)
    assert profile['Best'].sum() == 1
    assert profile.loc[profile['Best'], 'Disparity'].item() == disparity[10, 20]


def test_cost_profile_outside_valid_window(processor, textured_image):
    config = BlockMatchingConfig(max_disparity=6, region_radius_x=2, region_radius_y=1)

    with pytest.raises(ValueError):
        processor.compute_cost_profile(textured_image, textured_image, x=7, y=10, config=config)
    with pytest.raises(ValueError):
        processor.compute_cost_profile(textured_image, textured_image, x=20, y=0, config=config)


def test_metadata(processor):
    disparity = np.zeros((3, 4), dtype=np.int32)
    params = BlockMatchingConfig(max_disparity=2).to_dict()

    metadata = processor.create_disparity_metadata(disparity, params)

    assert metadata['disparity_info'] == {'shape': [3, 4], 'dtype': 'int32', 'invalid_value': -1}
    assert metadata['block_matching_parameters']['selection_policy'] == 'WTA'
    assert metadata['quality_metrics']['quality_level'] == 'excellent'
