import numpy as np
import pytest

from src_block_matching.disparity import BlockMatchingConfig
from utils.logger_config import LoggerConfig


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def random_pair(rng):
    """10x10 uint8 pair with values in [0, 255]."""
    left = rng.integers(0, 256, size=(10, 10), dtype=np.uint8)
    right = rng.integers(0, 256, size=(10, 10), dtype=np.uint8)
    return left, right


@pytest.fixture
def textured_image(rng):
    return rng.integers(0, 256, size=(24, 40), dtype=np.uint8)


@pytest.fixture
def small_config():
    return BlockMatchingConfig(min_disparity=0, max_disparity=4,
                               region_radius_x=1, region_radius_y=1)


@pytest.fixture
def clean_logging():
    """Restore the default logging setup after a test reconfigures it."""
    yield
    LoggerConfig.reset()
    LoggerConfig.setup_root_logger()
