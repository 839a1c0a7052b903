"""
Image handling utilities for stereo pairs.

This module loads image planes from disk, reduces colour images to a single
band and checks that two planes can be matched against each other.
"""

import cv2
import numpy as np
from typing import Tuple, Dict, Any, Union
from pathlib import Path

from utils.logger_config import get_logger

logger = get_logger(__name__)


class ImageProcessor:
    """Handles common image operations for stereo matching."""

    @staticmethod
    def load_plane(path: Union[str, Path]) -> np.ndarray:
        """
        Load a single band image plane.

        ``.npy`` files are loaded as stored; other formats go through
        ``cv2.imread`` with their bit depth preserved (8 or 16 bit). Colour
        images are converted to grayscale.

        Args:
            path: Image file path

        Returns:
            np.ndarray: 2-D image plane

        Raises:
            FileNotFoundError: If the file is missing or unreadable
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Image file not found: {path}")

        if path.suffix.lower() == '.npy':
            image = np.load(path)
        else:
            image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
            if image is None:
                raise FileNotFoundError(f"Could not read image: {path}")

        return ImageProcessor.to_grayscale(image)

    @staticmethod
    def load_stereo_pair(
        left_path: Union[str, Path],
        right_path: Union[str, Path]
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Load and validate a left/right pair of image planes."""
        left = ImageProcessor.load_plane(left_path)
        right = ImageProcessor.load_plane(right_path)
        ImageProcessor.validate_image_pair(left, right)
        return left, right

    @staticmethod
    def to_grayscale(image: np.ndarray) -> np.ndarray:
        """
        Reduce an image to one band.

        Args:
            image: 2-D plane, or (H, W, 1|3|4) BGR/BGRA image

        Returns:
            np.ndarray: 2-D plane
        """
        if image.ndim == 2:
            return image
        if image.ndim == 3 and image.shape[2] == 1:
            return image[:, :, 0]
        if image.ndim == 3 and image.shape[2] == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        if image.ndim == 3 and image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        raise ValueError(f"Invalid image dimensions: {image.shape}")

    @staticmethod
    def validate_image_pair(
        left_image: np.ndarray,
        right_image: np.ndarray
    ) -> bool:
        """
        Validate that two images are compatible for stereo processing.

        Args:
            left_image: Left stereo image
            right_image: Right stereo image

        Returns:
            bool: True if images are compatible

        Raises:
            ValueError: If images are incompatible
        """
        if left_image is None or right_image is None:
            raise ValueError("One or both images are None")

        if left_image.shape != right_image.shape:
            raise ValueError(f"Image shapes don't match: "
                             f"left={left_image.shape}, right={right_image.shape}")

        if left_image.ndim != 2:
            raise ValueError(f"Invalid image dimensions: {left_image.shape}")

        if left_image.dtype != right_image.dtype:
            raise ValueError(f"Image dtypes differ: "
                             f"left={left_image.dtype}, right={right_image.dtype}")

        return True

    @staticmethod
    def get_image_info(image: np.ndarray) -> Dict[str, Any]:
        """
        Get basic information about an image plane.

        Args:
            image: Input image

        Returns:
            Dict[str, Any]: Image information
        """
        if image is None:
            return {'valid': False, 'error': 'Image is None'}

        info = {
            'valid': True,
            'shape': list(image.shape),
            'dtype': str(image.dtype),
            'size_mb': image.nbytes / (1024 * 1024),
            'height': int(image.shape[0]),
            'width': int(image.shape[1]) if image.ndim > 1 else 1,
            'min_value': float(np.min(image)),
            'max_value': float(np.max(image)),
            'mean_value': float(np.mean(image)),
        }

        return info
