import json

import cv2
import numpy as np
import pytest

from src_block_matching.disparity import INVALID_DISPARITY, DisparityFileManager


@pytest.fixture
def manager(tmp_path):
    return DisparityFileManager(tmp_path / 'result')


def test_output_directories(manager, tmp_path):
    paths = manager.setup_output_directories('set_1', 'pair_a')

    expected = tmp_path / 'result' / 'target_pictures_set_disparity' / 'set_1' / 'pair_a'
    assert paths == {'output': expected}
    assert expected.is_dir()


def test_load_stereo_pair(manager, tmp_path, rng):
    folder = tmp_path / 'pair'
    folder.mkdir()
    left = rng.integers(0, 256, size=(8, 12), dtype=np.uint8)
    right = rng.integers(0, 256, size=(8, 12), dtype=np.uint8)
    cv2.imwrite(str(folder / 'left.png'), left)
    np.save(folder / 'right.npy', right)

    loaded_left, loaded_right = manager.load_stereo_pair(folder, 'pair')

    np.testing.assert_array_equal(loaded_left, left)
    np.testing.assert_array_equal(loaded_right, right)


def test_load_stereo_pair_failures(manager, tmp_path):
    folder = tmp_path / 'pair'
    folder.mkdir()
    np.save(folder / 'left.npy', np.zeros((4, 4), np.uint8))

    assert manager.load_stereo_pair(folder, 'pair') == (None, None)

    np.save(folder / 'right.npy', np.zeros((4, 5), np.uint8))
    assert manager.load_stereo_pair(folder, 'pair') == (None, None)


def test_save_disparity_map_formats(manager):
    paths = manager.setup_output_directories('set_1', 'pair_a')
    disparity = np.array([[INVALID_DISPARITY, 1.25], [3.5, 0.0]], dtype=np.float32)

    results = manager.save_disparity_map(disparity, paths, 'pair_a',
                                         save_formats=['npy', 'csv', 'tiff'])

    assert results == {'output_npy': True, 'output_csv': True, 'output_tiff': True}
    folder = paths['output']
    np.testing.assert_array_equal(np.load(folder / 'disparity_pair_a.npy'), disparity)
    np.testing.assert_array_equal(
        np.loadtxt(folder / 'disparity_pair_a.csv', delimiter=','), disparity)
    tiff = cv2.imread(str(folder / 'disparity_pair_a.tiff'), cv2.IMREAD_UNCHANGED)
    assert tiff.dtype == np.uint16
    np.testing.assert_array_equal(tiff, [[0, 20], [56, 0]])


def test_save_unknown_format_is_reported(manager):
    paths = manager.setup_output_directories('set_1', 'pair_a')

    results = manager.save_disparity_map(np.zeros((2, 2)), paths, 'pair_a', save_formats=['bmp'])

    assert results == {'output_bmp': False}
    assert manager.get_processing_statistics()['failed_operations'] == 1


def test_save_visualizations_and_metadata(manager):
    paths = manager.setup_output_directories('set_1', 'pair_a')
    disparity = np.tile(np.arange(10, dtype=np.int32), (6, 1))
    disparity[:, :2] = INVALID_DISPARITY

    assert manager.save_disparity_colormap(np.zeros((6, 10, 3), np.uint8), paths['output'], 'pair_a')
    assert manager.save_disparity_chart(disparity, paths['output'], 'pair_a', 0, 9)
    metadata_results = manager.save_disparity_metadata({'answer': np.int32(42)}, paths, 'pair_a')

    folder = paths['output']
    assert (folder / 'disparity_color_pair_a.png').exists()
    assert (folder / 'disparity_chart_pair_a.jpg').exists()
    assert metadata_results == {'output_metadata': True}
    assert json.loads((folder / 'disparity_metadata_pair_a.json').read_text()) == {'answer': 42}

    stats = manager.get_processing_statistics()
    assert stats['successful_operations'] == 3
    assert stats['success_rate'] == 1.0
