"""
Vertical window accumulation of horizontal score rows.

A ring of ``region_height`` score rows is kept together with their running
sum. Moving the window down one row subtracts the row leaving the window,
recomputes its slot for the entering row and adds it back, so each step costs
O(length_horizontal) no matter how tall the window is.
"""

from typing import Callable, Optional

import numpy as np

from utils.logger_config import get_logger

from .errors import BufferAllocationError
from .parameters import ScoreGeometry

# row_source(row, out) writes the horizontal scores of image row ``row`` into ``out``
RowSource = Callable[[int, np.ndarray], np.ndarray]


class VerticalWindowAccumulator:
    """Ring buffer of horizontal scores plus their vertical sum."""

    def __init__(self):
        self.logger = get_logger(__name__)

        self._ring_storage: Optional[np.ndarray] = None
        self._vertical_storage: Optional[np.ndarray] = None

        self.ring: Optional[np.ndarray] = None
        self.vertical: Optional[np.ndarray] = None
        self.region_height = 0
        self.allocation_count = 0

    @property
    def capacity(self) -> int:
        """Number of score entries one vertical vector can hold without growing."""
        return 0 if self._vertical_storage is None else self._vertical_storage.size

    def reserve(self, geometry: ScoreGeometry, dtype) -> None:
        """
        Make the ring and vertical buffers fit ``geometry``.

        Storage is reused when it is large enough and of the same type;
        otherwise it is reallocated.

        Raises:
            BufferAllocationError: If the buffers cannot be allocated
        """
        dtype = np.dtype(dtype)
        region_height = geometry.region_height
        length = geometry.length_horizontal

        needs_allocation = (
            self._vertical_storage is None
            or self._vertical_storage.dtype != dtype
            or self._vertical_storage.size < length
            or self._ring_storage.size < region_height * length
        )

        if needs_allocation:
            try:
                self._ring_storage = np.empty(region_height * length, dtype=dtype)
                self._vertical_storage = np.empty(length, dtype=dtype)
            except MemoryError as e:
                self._ring_storage = None
                self._vertical_storage = None
                raise BufferAllocationError(
                    f"Cannot allocate score buffers for {region_height}x{length} "
                    f"{dtype} entries") from e
            self.allocation_count += 1
            self.logger.debug(f"Allocated score buffers: ring={region_height}x{length}, dtype={dtype}")
        else:
            self.logger.debug(f"Reusing score buffers (capacity={self.capacity})")

        self.region_height = region_height
        self.ring = self._ring_storage[:region_height * length].reshape(
            (region_height,) + geometry.score_shape)
        self.vertical = self._vertical_storage[:length].reshape(geometry.score_shape)

    def initialize(self, row_source: RowSource) -> np.ndarray:
        """
        Fill the ring with image rows 0..region_height-1 and sum them.

        Returns:
            np.ndarray: Vertical scores for the first output row
        """
        self._check_reserved()
        for row in range(self.region_height):
            row_source(row, self.ring[row])

        np.sum(self.ring, axis=0, dtype=self.vertical.dtype, out=self.vertical)
        return self.vertical

    def advance(self, row: int, row_source: RowSource) -> np.ndarray:
        """
        Slide the window so that its last row is image row ``row``.

        Args:
            row: Absolute index of the entering image row (>= region_height)
            row_source: Producer of horizontal scores for one row

        Returns:
            np.ndarray: Vertical scores for output row ``row - radius_y``
        """
        self._check_reserved()
        scores = self.ring[row % self.region_height]

        self.vertical -= scores
        row_source(row, scores)
        self.vertical += scores

        return self.vertical

    def _check_reserved(self) -> None:
        if self.ring is None:
            raise RuntimeError("Score buffers not reserved. Call reserve() first.")
