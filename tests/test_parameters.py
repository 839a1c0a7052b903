import pytest

from src_block_matching.disparity import (
    BlockMatchingConfig,
    DisparityConfigurationError,
    SelectionPolicy,
)


def test_defaults_are_valid():
    config = BlockMatchingConfig()

    assert config.selection_policy is SelectionPolicy.WTA
    assert config.region_width == 5
    assert config.region_height == 5
    assert config.range_disparity == 65


def test_geometry_for_image():
    config = BlockMatchingConfig(min_disparity=2, max_disparity=6,
                                 region_radius_x=2, region_radius_y=1)
    geometry = config.geometry_for(width=20, height=8)

    assert geometry.range_disparity == 5
    assert geometry.column_start == 8
    assert geometry.column_end == 18
    assert geometry.valid_columns == 10
    assert geometry.length_horizontal == 50
    assert geometry.score_shape == (5, 10)
    assert (geometry.row_start, geometry.row_end) == (1, 7)


@pytest.mark.parametrize("kwargs", [
    {'min_disparity': -1, 'max_disparity': 4},
    {'min_disparity': 4, 'max_disparity': 4},
    {'min_disparity': 5, 'max_disparity': 2},
    {'region_radius_x': -1},
    {'region_radius_y': -2},
    {'max_lr_error': -1},
    {'texture_threshold': -0.1},
    {'selection_policy': 'median'},
])
def test_invalid_parameters_rejected(kwargs):
    with pytest.raises(DisparityConfigurationError):
        BlockMatchingConfig(**kwargs)


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        BlockMatchingConfig(max_disparity=0)


def test_image_too_narrow_for_any_column():
    config = BlockMatchingConfig(max_disparity=6, region_radius_x=2)

    # 2 * 2 + 6 = 10 columns leave nothing to match
    with pytest.raises(DisparityConfigurationError):
        config.geometry_for(width=10, height=20)
    assert config.geometry_for(width=11, height=20).valid_columns == 1


def test_image_too_short_for_window():
    config = BlockMatchingConfig(max_disparity=2, region_radius_y=3)

    with pytest.raises(DisparityConfigurationError):
        config.geometry_for(width=30, height=6)


@pytest.mark.parametrize("value", ['wta', 'WTA', 'Subpixel', ' consistency ',
                                   SelectionPolicy.CONSISTENCY])
def test_policy_parsing(value):
    assert isinstance(SelectionPolicy.parse(value), SelectionPolicy)


def test_policy_string_is_normalized():
    config = BlockMatchingConfig(selection_policy='subpixel')

    assert config.selection_policy is SelectionPolicy.SUBPIXEL
    assert config.to_dict()['selection_policy'] == 'SUBPIXEL'
