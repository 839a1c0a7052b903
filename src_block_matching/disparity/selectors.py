"""
Per-pixel disparity selection from accumulated block matching scores.

A selector receives, row by row, the vertical score vector of shape
``(range_disparity, valid_columns)`` and writes one disparity per valid
column into the disparity map. Everything outside the valid columns and rows
keeps the ``INVALID_DISPARITY`` sentinel written by ``configure``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import numpy as np

from utils.logger_config import get_logger

from .errors import DisparityConfigurationError
from .parameters import ScoreGeometry, SelectionPolicy

INVALID_DISPARITY = -1


class DisparitySelector(ABC):
    """
    Base class for selection policies.

    Subclasses implement ``_select_row`` and declare ``output_dtype``. The
    optional texture check is shared: a pixel is rejected when the best score
    is not clearly better than the best score away from the winner, i.e.
    ``second - best <= texture_threshold * best``.
    """

    output_dtype = np.dtype(np.int32)
    policy: Optional[SelectionPolicy] = None

    def __init__(self, texture_threshold: float = 0.0):
        if texture_threshold < 0:
            raise DisparityConfigurationError(
                f"texture_threshold must be non-negative, got {texture_threshold}")
        self.texture_threshold = texture_threshold
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

        self.disparity: Optional[np.ndarray] = None
        self.geometry: Optional[ScoreGeometry] = None

    def configure(self, disparity: np.ndarray, geometry: ScoreGeometry) -> None:
        """
        Attach the output map for the next pass and mark every pixel invalid.

        Args:
            disparity: Output map of shape (height, width) and ``output_dtype``
            geometry: Score layout of the current image
        """
        self.disparity = disparity
        self.geometry = geometry
        disparity.fill(INVALID_DISPARITY)

    def options(self) -> Dict[str, Any]:
        """Policy and option values this selector actually applies."""
        return {
            'selection_policy': self.policy.name,
            'texture_threshold': self.texture_threshold,
        }

    def process(self, row: int, scores: np.ndarray) -> None:
        """
        Write the disparities of one output row.

        Args:
            row: Output row index in the disparity map
            scores: Vertical scores, shape (range_disparity, valid_columns)
        """
        if self.disparity is None:
            raise RuntimeError("Selector not configured. Call configure() first.")

        geometry = self.geometry
        best = np.argmin(scores, axis=0)
        values = self._select_row(scores, best)

        if self.texture_threshold > 0:
            values[self._is_ambiguous(scores, best)] = INVALID_DISPARITY

        self.disparity[row, geometry.column_start:geometry.column_end] = values

    @abstractmethod
    def _select_row(self, scores: np.ndarray, best: np.ndarray) -> np.ndarray:
        """
        Turn the winning disparity index of each column into output values.

        Args:
            scores: Vertical scores, shape (range_disparity, valid_columns)
            best: Index of the lowest score per column (first one on ties)

        Returns:
            np.ndarray: One value of ``output_dtype`` per valid column
        """

    def _is_ambiguous(self, scores: np.ndarray, best: np.ndarray) -> np.ndarray:
        columns = np.arange(scores.shape[1])
        best_score = scores[best, columns].astype(np.float64)

        # Neighbours of the winner belong to the same minimum
        indices = np.arange(scores.shape[0])[:, np.newaxis]
        far = np.abs(indices - best[np.newaxis, :]) > 1
        second = np.where(far, scores, np.inf).min(axis=0)

        return (second - best_score) <= self.texture_threshold * best_score


class WinnerTakeAllSelector(DisparitySelector):
    """Lowest score wins; ties go to the disparity closest to ``min_disparity``."""

    policy = SelectionPolicy.WTA

    def _select_row(self, scores: np.ndarray, best: np.ndarray) -> np.ndarray:
        return (best + self.geometry.min_disparity).astype(self.output_dtype)


class SubpixelSelector(DisparitySelector):
    """
    Winner-take-all refined by a parabola through the winner and its neighbours.

    The vertex offset ``(c0 - c2) / (2 * (c0 - 2*c1 + c2))`` is added to the
    integer winner. When the winner sits on either end of the disparity range,
    or the three costs do not form a strictly convex triple, the integer
    winner is kept. Offsets are clipped to [-0.5, 0.5], so every value lies in
    ``[min_disparity - 0.5, max_disparity + 0.5]``.
    """

    output_dtype = np.dtype(np.float32)
    policy = SelectionPolicy.SUBPIXEL

    def _select_row(self, scores: np.ndarray, best: np.ndarray) -> np.ndarray:
        range_disparity = scores.shape[0]
        columns = np.arange(scores.shape[1])

        lower = np.clip(best - 1, 0, range_disparity - 1)
        upper = np.clip(best + 1, 0, range_disparity - 1)
        c0 = scores[lower, columns].astype(np.float64)
        c1 = scores[best, columns].astype(np.float64)
        c2 = scores[upper, columns].astype(np.float64)

        denominator = c0 - 2.0 * c1 + c2
        interior = (best > 0) & (best < range_disparity - 1)
        refine = interior & (denominator > 0)

        offset = np.zeros(scores.shape[1], dtype=np.float64)
        offset[refine] = (c0[refine] - c2[refine]) / (2.0 * denominator[refine])
        np.clip(offset, -0.5, 0.5, out=offset)

        return (best + self.geometry.min_disparity + offset).astype(self.output_dtype)


class ConsistencySelector(DisparitySelector):
    """
    Winner-take-all validated by a right-to-left search on the same scores.

    For a left column ``c`` with winner ``d`` the right column ``c - d`` is
    matched back against every left column that could see it; if that best
    disparity differs from ``d`` by more than ``max_lr_error`` the pixel is
    marked invalid.
    """

    policy = SelectionPolicy.CONSISTENCY

    def __init__(self, max_lr_error: int = 1, texture_threshold: float = 0.0):
        super().__init__(texture_threshold=texture_threshold)
        if max_lr_error < 0:
            raise DisparityConfigurationError(
                f"max_lr_error must be non-negative, got {max_lr_error}")
        self.max_lr_error = max_lr_error
        self._right_scores: Optional[np.ndarray] = None

    def options(self) -> Dict[str, Any]:
        options = super().options()
        options['max_lr_error'] = self.max_lr_error
        return options

    def _select_row(self, scores: np.ndarray, best: np.ndarray) -> np.ndarray:
        range_disparity, valid_columns = scores.shape
        right_best = self._right_to_left(scores)

        # Right column c - d, offset so the leftmost reachable one is 0
        right_index = np.arange(valid_columns) + (range_disparity - 1) - best
        consistent = np.abs(right_best[right_index] - best) <= self.max_lr_error

        values = (best + self.geometry.min_disparity).astype(self.output_dtype)
        values[~consistent] = INVALID_DISPARITY
        return values

    def _right_to_left(self, scores: np.ndarray) -> np.ndarray:
        """Best disparity index for every right column reachable from a valid left column."""
        range_disparity, valid_columns = scores.shape
        shape = (valid_columns + range_disparity - 1, range_disparity)
        if self._right_scores is None or self._right_scores.shape != shape:
            self._right_scores = np.empty(shape, dtype=np.float64)

        right_scores = self._right_scores
        right_scores.fill(np.inf)
        for k in range(range_disparity):
            start = range_disparity - 1 - k
            right_scores[start:start + valid_columns, k] = scores[k]

        return np.argmin(right_scores, axis=1)


_SELECTORS = {
    SelectionPolicy.WTA: WinnerTakeAllSelector,
    SelectionPolicy.SUBPIXEL: SubpixelSelector,
    SelectionPolicy.CONSISTENCY: ConsistencySelector,
}


def create_selector(
    policy,
    max_lr_error: int = 1,
    texture_threshold: float = 0.0
) -> DisparitySelector:
    """
    Build the selector for a selection policy.

    Args:
        policy: ``SelectionPolicy`` member or its name/value
        max_lr_error: Tolerance of the consistency check (CONSISTENCY only)
        texture_threshold: Uniqueness ratio; 0 disables the texture check

    Returns:
        DisparitySelector: A fresh selector instance
    """
    policy = SelectionPolicy.parse(policy)
    selector_class = _SELECTORS[policy]

    if policy is SelectionPolicy.CONSISTENCY:
        return selector_class(max_lr_error=max_lr_error, texture_threshold=texture_threshold)
    return selector_class(texture_threshold=texture_threshold)
