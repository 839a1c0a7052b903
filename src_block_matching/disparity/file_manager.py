"""
File management utilities for disparity processing.

This module handles loading of stereo pairs from pair folders and structured
saving of disparity maps, their visualizations and metadata.
"""

import cv2
import numpy as np
from typing import Dict, Any, List, Optional, Tuple
from pathlib import Path

from utils.file_operations import DataSaver, PathManager
from utils.image import ImageChartGenerator
from utils.image_processing import ImageProcessor

from ..base import BaseFileManager
from .selectors import INVALID_DISPARITY


class DisparityFileManager(BaseFileManager):
    """Manages file operations for disparity processing."""

    def __init__(self, base_output_path: Path):
        super().__init__(base_output_path, "target_pictures_set_disparity")

    def get_folder_name(self) -> str:
        return "target_pictures_set_disparity"

    def load_stereo_pair(
        self,
        pair_folder: Path,
        pair_name: str
    ) -> Tuple[Optional[np.ndarray], Optional[np.ndarray]]:
        """
        Load the rectified ``left.*`` / ``right.*`` planes of a pair folder.

        Args:
            pair_folder: Path to the pair folder
            pair_name: Name of the image pair

        Returns:
            Tuple[np.ndarray, np.ndarray]: (left_image, right_image) or (None, None) if failed
        """
        left_path = PathManager.find_image_file(pair_folder, 'left')
        right_path = PathManager.find_image_file(pair_folder, 'right')

        if left_path is None or right_path is None:
            self.logger.error(f"Stereo images not found for pair {pair_name} in {pair_folder}")
            return None, None

        try:
            left_image, right_image = ImageProcessor.load_stereo_pair(left_path, right_path)
        except (FileNotFoundError, ValueError) as e:
            self.logger.error(f"Failed to load stereo images for {pair_name}: {e}")
            return None, None

        self.logger.info(f"Loaded stereo images for {pair_name}: "
                         f"{left_image.shape}, {left_image.dtype}")
        return left_image, right_image

    def save_disparity_map(
        self,
        disparity: np.ndarray,
        output_paths: Dict[str, Path],
        pair_name: str,
        save_formats: List[str] = ('npy',)
    ) -> Dict[str, bool]:
        """
        Save disparity map in specified formats.

        Args:
            disparity: Disparity map to save
            output_paths: Dictionary of output paths
            pair_name: Name of the image pair
            save_formats: Formats to save ('npy', 'csv', 'tiff')

        Returns:
            Dict[str, bool]: Save results for each format and location
        """
        results = {}

        for format_type in save_formats:
            for location_name, path in output_paths.items():
                if format_type in ('npy', 'csv'):
                    success = DataSaver.save_numpy_array(
                        disparity, path, f'disparity_{pair_name}', format_type
                    )
                elif format_type == 'tiff':
                    success = self._save_tiff(disparity, path, pair_name)
                else:
                    self.logger.error(f"Unsupported disparity format: {format_type}")
                    success = False

                results[f'{location_name}_{format_type}'] = success
                self._record_operation(success)

        self.logger.info(f"Saved disparity map for {pair_name} in formats: {list(save_formats)}")
        return results

    def _save_tiff(self, disparity: np.ndarray, path: Path, pair_name: str) -> bool:
        try:
            tiff_path = path / f'disparity_{pair_name}.tiff'
            # 16-bit fixed point with 4 fractional bits, invalid pixels stored as 0
            disparity_16bit = np.where(
                disparity == INVALID_DISPARITY, 0, np.round(disparity * 16.0)
            ).astype(np.uint16)
            return bool(cv2.imwrite(str(tiff_path), disparity_16bit))
        except (cv2.error, OSError) as e:
            self.logger.error(f"Failed to save TIFF: {e}")
            return False

    def save_disparity_colormap(
        self,
        colored: np.ndarray,
        output_path: Path,
        pair_name: str
    ) -> bool:
        """
        Save a color-mapped disparity image as PNG.

        Args:
            colored: BGR image from ``DisparityProcessor.create_disparity_colormap``
            output_path: Output directory path
            pair_name: Name of the image pair

        Returns:
            bool: True if successful
        """
        filename = f'disparity_color_{pair_name}.png'
        try:
            success = bool(cv2.imwrite(str(Path(output_path) / filename), colored))
        except cv2.error as e:
            self.logger.error(f"Failed to save colored disparity image: {e}")
            success = False

        self._record_operation(success)
        if success:
            self.logger.info(f"Saved colored disparity image: {filename}")
        return success

    def save_disparity_chart(
        self,
        disparity: np.ndarray,
        output_path: Path,
        pair_name: str,
        min_disparity: float,
        max_disparity: float
    ) -> bool:
        """
        Save a matplotlib chart of the disparity map with a colour bar.

        Args:
            disparity: Disparity map
            output_path: Output directory path
            pair_name: Name of the image pair
            min_disparity: Lower end of the colour range
            max_disparity: Upper end of the colour range

        Returns:
            bool: True if successful
        """
        try:
            painter = ImageChartGenerator(
                img=disparity,
                xlabel="pixel",
                ylabel="pixel",
                save_path_result=str(output_path),
                range_max=max_disparity,
                range_min=min_disparity,
                invalid_value=INVALID_DISPARITY
            )
            painter.create_disparity(photo_name=f"disparity_chart_{pair_name}")
            success = True
        except (ValueError, OSError) as e:
            self.logger.error(f"Failed to save disparity chart: {e}")
            success = False

        self._record_operation(success)
        return success

    def save_disparity_metadata(
        self,
        metadata: Dict[str, Any],
        output_paths: Dict[str, Path],
        pair_name: str
    ) -> Dict[str, bool]:
        """Save comprehensive disparity processing metadata."""
        return self.save_metadata(metadata, output_paths, pair_name,
                                  filename_prefix="disparity_metadata")
