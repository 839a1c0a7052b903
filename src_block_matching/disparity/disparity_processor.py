"""
Disparity map processing utilities.

This module handles analysis of computed disparity maps: quality assessment,
colour visualization, per-pixel matching cost profiles and metadata.
"""

import cv2
import numpy as np
import pandas as pd
from typing import Dict, Any, Optional

from utils.logger_config import get_logger

from .parameters import BlockMatchingConfig
from .selectors import INVALID_DISPARITY


class DisparityProcessor:
    """Handles post-processing and analysis of disparity maps."""

    def __init__(self):
        self.logger = get_logger(__name__)

    def assess_disparity_quality(self, disparity: np.ndarray) -> Dict[str, Any]:
        """
        Assess the quality of a disparity map.

        Args:
            disparity: Disparity map using ``INVALID_DISPARITY`` for rejected pixels

        Returns:
            Dict[str, Any]: Quality assessment metrics
        """
        valid_mask = disparity != INVALID_DISPARITY
        total_pixels = disparity.size
        valid_pixels = int(np.count_nonzero(valid_mask))

        quality_metrics = {
            'total_pixels': int(total_pixels),
            'valid_pixels': valid_pixels,
            'validity_ratio': float(valid_pixels / total_pixels) if total_pixels else 0.0,
            'coverage_percentage': float(100 * valid_pixels / total_pixels) if total_pixels else 0.0
        }

        if valid_pixels > 0:
            valid_disparity = disparity[valid_mask].astype(np.float64)

            quality_metrics.update({
                'disparity_range': {
                    'min': float(valid_disparity.min()),
                    'max': float(valid_disparity.max()),
                    'mean': float(valid_disparity.mean()),
                    'std': float(valid_disparity.std())
                },
                'dynamic_range': float(valid_disparity.max() - valid_disparity.min())
            })

            if quality_metrics['validity_ratio'] > 0.8:
                quality_level = 'excellent'
            elif quality_metrics['validity_ratio'] > 0.6:
                quality_level = 'good'
            elif quality_metrics['validity_ratio'] > 0.4:
                quality_level = 'fair'
            else:
                quality_level = 'poor'

            quality_metrics['quality_level'] = quality_level
        else:
            quality_metrics.update({
                'disparity_range': None,
                'dynamic_range': 0.0,
                'quality_level': 'failed'
            })

        self.logger.info(f"Disparity quality assessment: "
                         f"{quality_metrics['quality_level']} "
                         f"({quality_metrics['coverage_percentage']:.1f}% coverage)")

        return quality_metrics

    def create_disparity_colormap(
        self,
        disparity: np.ndarray,
        min_disparity: Optional[float] = None,
        max_disparity: Optional[float] = None,
        colormap: int = cv2.COLORMAP_JET
    ) -> np.ndarray:
        """
        Create color-mapped disparity image for visualization.

        Args:
            disparity: Disparity map
            min_disparity: Value mapped to the low end of the colormap
                (defaults to the smallest valid disparity)
            max_disparity: Value mapped to the high end of the colormap
                (defaults to the largest valid disparity)
            colormap: OpenCV colormap type

        Returns:
            np.ndarray: Color-mapped disparity image (BGR), invalid pixels black
        """
        valid_mask = disparity != INVALID_DISPARITY
        disp_norm = np.zeros(disparity.shape, dtype=np.uint8)

        if np.any(valid_mask):
            valid = disparity[valid_mask].astype(np.float32)
            low = float(valid.min()) if min_disparity is None else float(min_disparity)
            high = float(valid.max()) if max_disparity is None else float(max_disparity)
            span = max(high - low, 1e-6)
            scaled = np.clip((valid - low) / span, 0.0, 1.0) * 255.0
            disp_norm[valid_mask] = scaled.astype(np.uint8)

        disp_color = cv2.applyColorMap(disp_norm, colormap)
        disp_color[~valid_mask] = 0

        return disp_color

    def compute_cost_profile(
        self,
        left_image: np.ndarray,
        right_image: np.ndarray,
        x: int,
        y: int,
        config: BlockMatchingConfig
    ) -> pd.DataFrame:
        """
        Compute the SAD matching cost of one pixel for every candidate disparity.

        The block sums are recomputed from scratch, which makes the profile a
        convenient cross-check for the incremental engine.

        Args:
            left_image: Left image plane
            right_image: Right image plane
            x: Column of the pixel in the left image
            y: Row of the pixel in the left image
            config: Block matching parameters

        Returns:
            pd.DataFrame: One row per disparity with columns
            ``Disparity``, ``RightX``, ``Score`` and ``Best``

        Raises:
            ValueError: If the window does not fit inside both images
        """
        geometry = config.geometry_for(left_image.shape[1], left_image.shape[0])
        rx, ry = config.region_radius_x, config.region_radius_y

        if not (geometry.column_start <= x < geometry.column_end
                and geometry.row_start <= y < geometry.row_end):
            raise ValueError(f"Pixel ({x}, {y}) cannot host a full window for every disparity")

        left_block = left_image[y - ry:y + ry + 1, x - rx:x + rx + 1].astype(np.float64)

        search_history = []
        for d in range(config.min_disparity, config.max_disparity + 1):
            right_block = right_image[y - ry:y + ry + 1, x - d - rx:x - d + rx + 1].astype(np.float64)
            search_history.append({
                'Disparity': d,
                'RightX': x - d,
                'Score': float(np.abs(left_block - right_block).sum())
            })

        profile = pd.DataFrame(search_history)
        best_index = int(profile['Score'].idxmin())
        profile['Best'] = profile.index == best_index

        self.logger.debug(f"Cost profile at ({x}, {y}): best disparity "
                          f"{profile.loc[best_index, 'Disparity']} with "
                          f"SAD={profile.loc[best_index, 'Score']:.2f}")
        return profile

    def create_disparity_metadata(
        self,
        disparity: np.ndarray,
        parameters: Dict[str, Any],
        quality_metrics: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Create comprehensive metadata for disparity results.

        Args:
            disparity: Disparity map
            parameters: Block matching parameters used
            quality_metrics: Optional quality assessment results

        Returns:
            Dict[str, Any]: Comprehensive metadata
        """
        return {
            'disparity_info': {
                'shape': list(disparity.shape),
                'dtype': str(disparity.dtype),
                'invalid_value': INVALID_DISPARITY
            },
            'block_matching_parameters': parameters,
            'quality_metrics': quality_metrics or self.assess_disparity_quality(disparity)
        }
