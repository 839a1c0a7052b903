"""
Horizontal SAD scores for one image row.

For every valid column and every candidate disparity the computer sums the
absolute sample differences across a ``region_width`` wide window. Element
differences for the whole row are cached once per row and the window sum is
carried along x by adding the entering difference and subtracting the
leaving one, so a row costs O(width * range_disparity) regardless of the
window width.
"""

import numpy as np

from .errors import StereoPairMismatchError
from .parameters import ScoreGeometry


class RowScoreComputer:
    """Computes the horizontal score row consumed by the vertical accumulator."""

    def __init__(self, geometry: ScoreGeometry, accumulator_dtype):
        """
        Args:
            geometry: Score layout for the current image size
            accumulator_dtype: Wide type used for differences and sums
        """
        self.geometry = geometry
        self.accumulator_dtype = np.dtype(accumulator_dtype)

        # Left-image columns touched by any valid window
        self._left_columns = np.arange(
            geometry.column_start - geometry.radius_x,
            geometry.column_end + geometry.radius_x
        )
        disparities = np.arange(geometry.min_disparity, geometry.max_disparity + 1)
        # Matching right-image column for each (disparity, left column)
        self._right_columns = self._left_columns[np.newaxis, :] - disparities[:, np.newaxis]

        # |left(x) - right(x - d)| for the current row, shape (range, span)
        self.element_score = np.empty(
            (geometry.range_disparity, self._left_columns.size),
            dtype=self.accumulator_dtype
        )

    def compute(self, left_row: np.ndarray, right_row: np.ndarray, out: np.ndarray) -> np.ndarray:
        """
        Fill ``out`` with the horizontal scores of one row.

        Args:
            left_row: One row of the left image (any stride)
            right_row: The same row of the right image
            out: Destination of shape (range_disparity, valid_columns)

        Returns:
            np.ndarray: ``out``, where ``out[k, j]`` is the SAD of the window centred
            on column ``column_start + j`` at disparity ``min_disparity + k``

        Raises:
            StereoPairMismatchError: If a row length differs from the image width
        """
        width = self.geometry.width
        if left_row.shape != (width,) or right_row.shape != (width,):
            raise StereoPairMismatchError(
                f"Row lengths must equal the image width {width}: "
                f"left={left_row.shape}, right={right_row.shape}")

        # Widen before subtracting so unsigned samples cannot wrap
        left = left_row.astype(self.accumulator_dtype, copy=False)
        right = right_row.astype(self.accumulator_dtype, copy=False)

        element = self.element_score
        np.subtract(left[self._left_columns][np.newaxis, :],
                    right[self._right_columns], out=element)
        np.abs(element, out=element)

        region_width = self.geometry.region_width
        np.sum(element[:, :region_width], axis=1, dtype=self.accumulator_dtype, out=out[:, 0])
        if out.shape[1] > 1:
            # entering minus leaving difference, then carried along the row
            np.subtract(element[:, region_width:], element[:, :-region_width], out=out[:, 1:])
            np.cumsum(out, axis=1, dtype=self.accumulator_dtype, out=out)

        return out
