import json
from pathlib import Path

import cv2
import numpy as np
import pytest

import main
from config.config import Config
from src_block_matching import BlockMatchingDisparityCalculator
from tests.helpers import horizontal_ramp


@pytest.fixture
def input_tree(tmp_path):
    """set_1 with a PNG pair, an npy pair and a pair missing its right image."""
    set_folder = tmp_path / 'input' / 'set_1'

    png_pair = set_folder / 'pair_a'
    png_pair.mkdir(parents=True)
    cv2.imwrite(str(png_pair / 'left.png'), horizontal_ramp(16, 40, slope=5))
    cv2.imwrite(str(png_pair / 'right.png'), horizontal_ramp(16, 40, slope=5, offset=3))

    npy_pair = set_folder / 'pair_b'
    npy_pair.mkdir()
    np.save(npy_pair / 'left.npy', horizontal_ramp(16, 40, slope=4).astype(np.uint16) * 100)
    np.save(npy_pair / 'right.npy', horizontal_ramp(16, 40, slope=4, offset=2).astype(np.uint16) * 100)

    broken_pair = set_folder / 'pair_c'
    broken_pair.mkdir()
    np.save(broken_pair / 'left.npy', np.zeros((16, 40), np.uint8))

    return tmp_path / 'input'


def _config_file(tmp_path, input_path, **overrides):
    data = {
        "case_name": "pipeline",
        "input_path": str(input_path),
        "result_root": str(tmp_path / "result"),
        "MAX_DISPARITY": 6,
        "REGION_RADIUS_X": 1,
        "REGION_RADIUS_Y": 1,
        "SELECTION_POLICY": "SUBPIXEL",
        "save_formats": ["npy", "csv", "tiff"],
        "need_chart": "True",
    }
    data.update(overrides)
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_pipeline_processes_every_pair(tmp_path, input_tree):
    config = Config(_config_file(tmp_path, input_tree))
    calculator = BlockMatchingDisparityCalculator(config)

    statistics = calculator.create_disparity()

    assert statistics['processed_pairs'] == 2
    assert statistics['failed_pairs'] == ['set_1/pair_c']

    output = Path(config.save_path_result) / 'target_pictures_set_disparity' / 'set_1'
    for pair_name, shift in (('pair_a', 3), ('pair_b', 2)):
        folder = output / pair_name
        for filename in (f'disparity_{pair_name}.npy', f'disparity_{pair_name}.csv',
                         f'disparity_{pair_name}.tiff', f'disparity_color_{pair_name}.png',
                         f'disparity_chart_{pair_name}.jpg',
                         f'disparity_metadata_{pair_name}.json'):
            assert (folder / filename).exists(), filename

        disparity = np.load(folder / f'disparity_{pair_name}.npy')
        assert disparity.dtype == np.float32
        assert np.all(disparity[1:15, 7:39] == shift)
        assert np.all(disparity[0] == -1)

        metadata = json.loads((folder / f'disparity_metadata_{pair_name}.json').read_text())
        assert metadata['block_matching_parameters']['max_disparity'] == 6
        assert metadata['block_matching_parameters']['selection_policy'] == 'SUBPIXEL'
        assert metadata['pair_info']['pair_name'] == pair_name
        assert metadata['engine']['state'] == 'done'

    assert not (output / 'pair_c').exists()
    assert calculator.engine.accumulator.allocation_count == 1


def test_compute_disparity_returns_independent_copies(tmp_path, input_tree, textured_image):
    config = Config(_config_file(tmp_path, input_tree, SELECTION_POLICY="WTA"))
    calculator = BlockMatchingDisparityCalculator(config)

    first, elapsed_ms = calculator.compute_disparity(textured_image, textured_image)
    second, _ = calculator.compute_disparity(textured_image, np.roll(textured_image, 1, axis=1))

    assert elapsed_ms >= 0
    assert first is not second
    assert np.all(first[1:-1, 7:-1] == 0)


def test_missing_input_folder(tmp_path):
    config = Config(_config_file(tmp_path, tmp_path / 'nowhere'))

    statistics = BlockMatchingDisparityCalculator(config).create_disparity()

    assert statistics == {'processed_pairs': 0, 'failed_pairs': []}


def test_processing_info(tmp_path, input_tree):
    calculator = BlockMatchingDisparityCalculator(Config(_config_file(tmp_path, input_tree)))

    info = calculator.get_processing_info()

    assert info['processing_type'] == 'disparity'
    assert info['processing_ready']
    assert info['configuration']['save_formats'] == ['npy', 'csv', 'tiff']
    assert info['configuration']['need_chart'] is True


def test_main_reports_failed_pairs(tmp_path, input_tree, clean_logging):
    log_file = tmp_path / 'logs' / 'run.log'
    config_path = _config_file(tmp_path, input_tree, need_chart="False")

    exit_code = main.main(['--config', str(config_path), '--log-level', 'DEBUG',
                           '--log-file', str(log_file)])

    assert exit_code == 1
    assert 'pair_c' in log_file.read_text()


def test_main_succeeds_on_clean_input(tmp_path, input_tree, clean_logging):
    for path in (input_tree / 'set_1' / 'pair_c').iterdir():
        path.unlink()
    (input_tree / 'set_1' / 'pair_c').rmdir()

    exit_code = main.main(['--config', str(_config_file(tmp_path, input_tree))])

    assert exit_code == 0
