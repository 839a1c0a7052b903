"""
Batch SAD block matching disparity calculation.

This module provides the coordinator that runs the block matching engine over
every stereo pair found in the configured input folder and saves the
disparity maps together with their quality metrics.
"""

import time
from pathlib import Path
from typing import Dict, Any, Tuple

import numpy as np

from .base import BaseProcessor
from .disparity.sad_engine import SadRectEngine
from .disparity.disparity_processor import DisparityProcessor
from .disparity.file_manager import DisparityFileManager


class BlockMatchingDisparityCalculator(BaseProcessor):
    """
    Main disparity calculation coordinator class.

    One engine instance is shared by all pairs so that its score buffers are
    reused whenever consecutive pairs have compatible sizes.
    """

    def __init__(self, config):
        """
        Initialize disparity calculator with configuration.

        Args:
            config: ``Config`` object with block matching parameters
        """
        super().__init__(config, "disparity")

        self.block_matching_config = self.config.to_block_matching_config()
        self.engine = SadRectEngine(self.block_matching_config)
        self.disparity_processor = DisparityProcessor()
        self.file_manager = DisparityFileManager(self.output_folder)

        self.logger.info(f"DisparityCalculator ready: {self.config.get_block_matching_summary()}")

    def _setup_input_folder(self) -> None:
        self.input_folder = Path(self.config.input_path)

    def _get_processor_specific_config(self) -> Dict[str, Any]:
        return {
            'block_matching': self.config.to_block_matching_config().to_dict(),
            'save_formats': list(self.config.save_formats),
            'need_chart': self.config.is_chart_enabled()
        }

    def _is_processing_ready(self) -> bool:
        return self.file_manager is not None and self.input_folder is not None

    def create_disparity(self) -> Dict[str, Any]:
        """
        Main entry point for processing all image sets.

        Returns:
            Dict[str, Any]: Processing statistics
        """
        return self.process_all_sets()

    def compute_disparity(self, left_image: np.ndarray, right_image: np.ndarray) -> Tuple[np.ndarray, float]:
        """
        Compute a disparity map with the shared engine.

        Args:
            left_image: Left rectified image plane
            right_image: Right rectified image plane

        Returns:
            Tuple[np.ndarray, float]: Disparity map (an independent copy) and
            the computation time in milliseconds
        """
        t0 = time.perf_counter()
        disparity = self.engine.process(left_image, right_image).copy()
        elapsed_ms = (time.perf_counter() - t0) * 1000

        self.logger.info(f"Block matching took {elapsed_ms:.1f} ms for {left_image.shape}")
        return disparity, elapsed_ms

    def _execute_processing_pipeline(self, pair_folder: Path) -> Dict[str, Any]:
        pair_name = pair_folder.name

        left_image, right_image = self.file_manager.load_stereo_pair(pair_folder, pair_name)
        if left_image is None or right_image is None:
            raise ValueError(f"Failed to load stereo images for {pair_name}")

        disparity, elapsed_ms = self.compute_disparity(left_image, right_image)
        quality_metrics = self.disparity_processor.assess_disparity_quality(disparity)

        return {
            'disparity': disparity,
            'quality_metrics': quality_metrics,
            'elapsed_ms': elapsed_ms,
            'image_size': [int(left_image.shape[1]), int(left_image.shape[0])],
            'sample_type': str(left_image.dtype)
        }

    def _save_processing_results(self, processing_results: Dict[str, Any], pair_name: str) -> None:
        set_name = self.current_pair_info['set_name']
        disparity = processing_results['disparity']
        bm_config = self.block_matching_config

        output_paths = self.file_manager.setup_output_directories(set_name, pair_name)

        map_results = self.file_manager.save_disparity_map(
            disparity, output_paths, pair_name, save_formats=self.config.save_formats
        )

        colored = self.disparity_processor.create_disparity_colormap(
            disparity, bm_config.min_disparity, bm_config.max_disparity
        )
        color_success = self.file_manager.save_disparity_colormap(
            colored, output_paths['output'], pair_name
        )

        chart_results = {}
        if self.config.is_chart_enabled():
            chart_results['output_chart'] = self.file_manager.save_disparity_chart(
                disparity, output_paths['output'], pair_name,
                bm_config.min_disparity, bm_config.max_disparity
            )

        metadata = self._create_comprehensive_metadata(processing_results)
        metadata_results = self.file_manager.save_disparity_metadata(
            metadata, output_paths, pair_name
        )

        self.file_manager.log_save_results(pair_name, {
            'disparity_map': map_results,
            'colormap': {'output_colormap': color_success},
            'chart': chart_results,
            'metadata': metadata_results
        })

    def _create_comprehensive_metadata(self, processing_results: Dict[str, Any]) -> Dict[str, Any]:
        metadata = self.disparity_processor.create_disparity_metadata(
            processing_results['disparity'],
            self.block_matching_config.to_dict(),
            processing_results['quality_metrics']
        )

        metadata.update({
            'pair_info': self.current_pair_info,
            'processing_version': 'sad_block_matching_v1.0',
            'image_info': {
                'size': processing_results['image_size'],
                'sample_type': processing_results['sample_type']
            },
            'timing_ms': processing_results['elapsed_ms'],
            'engine': self.engine.get_configuration_info()
        })

        return metadata
