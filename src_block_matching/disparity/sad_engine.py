"""
SAD rectangular-window block matching engine.

The engine drives the row loop: it validates the stereo pair, sizes the score
buffers, accumulates the first ``region_height`` rows and then slides the
window down one image row at a time, handing each accumulated score vector to
the disparity selector.
"""

from enum import Enum
from typing import Dict, Any, Optional

import numpy as np

from utils.logger_config import get_logger

from .errors import StereoPairMismatchError, BufferAllocationError
from .parameters import BlockMatchingConfig, ScoreGeometry
from .row_score import RowScoreComputer
from .sample_model import SampleModel, sample_model_for
from .selectors import DisparitySelector, INVALID_DISPARITY, create_selector
from .vertical_accumulator import VerticalWindowAccumulator


class EngineState(Enum):
    UNINITIALIZED = 'uninitialized'
    INITIALIZED = 'initialized'
    STREAMING = 'streaming'
    DONE = 'done'


class SadRectEngine:
    """Dense disparity from a rectified pair by SAD block matching."""

    def __init__(
        self,
        config: BlockMatchingConfig,
        selector: Optional[DisparitySelector] = None
    ):
        """
        Initialize the engine.

        Args:
            config: Block matching parameters
            selector: Selection policy instance; built from
                ``config.selection_policy`` when omitted
        """
        config.validate()
        self.config = config
        self.selector = selector or create_selector(
            config.selection_policy,
            max_lr_error=config.max_lr_error,
            texture_threshold=config.texture_threshold
        )
        self.logger = get_logger(__name__)

        self.accumulator = VerticalWindowAccumulator()
        self.state = EngineState.UNINITIALIZED
        self.disparity: Optional[np.ndarray] = None
        self.geometry: Optional[ScoreGeometry] = None

        self._row_computer: Optional[RowScoreComputer] = None

        self.logger.info(f"SAD engine configured: "
                         f"disparity=[{config.min_disparity}, {config.max_disparity}], "
                         f"region={config.region_width}x{config.region_height}, "
                         f"selector={self.selector.__class__.__name__}")

        if selector is not None:
            self._warn_on_selector_mismatch()

    def _warn_on_selector_mismatch(self) -> None:
        """Log where a caller-supplied selector overrides the configured policy options."""
        applied = self.selector.options()
        configured = {
            'selection_policy': self.config.selection_policy.name,
            'texture_threshold': self.config.texture_threshold,
        }
        if 'max_lr_error' in applied:
            configured['max_lr_error'] = self.config.max_lr_error

        differing = {key: (configured[key], applied[key])
                     for key in configured if configured[key] != applied[key]}
        if differing:
            self.logger.warning(f"Selector overrides configured options "
                                f"(configured, applied): {differing}")

    @property
    def output_dtype(self) -> np.dtype:
        return self.selector.output_dtype

    def process(
        self,
        left: np.ndarray,
        right: np.ndarray,
        output: Optional[np.ndarray] = None
    ) -> np.ndarray:
        """
        Compute the disparity map of a rectified stereo pair.

        Args:
            left: Left image plane (height, width); views are fine
            right: Right image plane, same shape and dtype as ``left``
            output: Optional destination map; when omitted the engine's own
                buffer is reused between calls and returned

        Returns:
            np.ndarray: Disparity map, ``INVALID_DISPARITY`` where no match is reported.
            Without ``output`` this is the engine's own buffer, overwritten by
            the next call; copy it to keep it.

        Raises:
            DisparityConfigurationError: If the image cannot host a single window
            StereoPairMismatchError: If the planes or output buffer do not fit
            BufferAllocationError: If score buffers cannot be allocated
        """
        # A rejected pair must not report the previous image's state
        self.state = EngineState.UNINITIALIZED
        self.geometry = None

        sample = self._validate_stereo_pair(left, right)
        height, width = left.shape

        # Everything that can fail is checked before the first row
        geometry = self.config.geometry_for(width, height)
        accumulator_dtype = sample.accumulator_dtype(geometry.region_width * geometry.region_height)
        disparity = self._prepare_output(output, height, width)
        self.accumulator.reserve(geometry, accumulator_dtype)
        row_computer = self._prepare_row_computer(geometry, accumulator_dtype)

        self.geometry = geometry
        self.selector.configure(disparity, geometry)

        def row_source(row: int, out: np.ndarray) -> np.ndarray:
            return row_computer.compute(left[row], right[row], out)

        self._compute_first_row(row_source)
        self._compute_remaining_rows(row_source, height)
        self.state = EngineState.DONE

        self._log_disparity_summary(disparity)
        return disparity

    def _compute_first_row(self, row_source) -> None:
        """Accumulate the first block of rows and select the top valid output row."""
        vertical = self.accumulator.initialize(row_source)
        self.state = EngineState.INITIALIZED
        self.selector.process(self.geometry.radius_y, vertical)

    def _compute_remaining_rows(self, row_source, height: int) -> None:
        """Slide the window down the image, reusing the previous vertical sums."""
        region_height = self.geometry.region_height
        radius_y = self.geometry.radius_y

        if region_height < height:
            self.state = EngineState.STREAMING
        for row in range(region_height, height):
            vertical = self.accumulator.advance(row, row_source)
            self.selector.process(row - region_height + 1 + radius_y, vertical)

    def _validate_stereo_pair(self, left: np.ndarray, right: np.ndarray) -> SampleModel:
        """
        Validate stereo image pair for compatibility.

        Returns:
            SampleModel: Sample model shared by both planes

        Raises:
            StereoPairMismatchError: If images are incompatible
        """
        if left is None or right is None:
            raise StereoPairMismatchError("Input images cannot be None")

        if left.ndim != 2 or right.ndim != 2:
            raise StereoPairMismatchError(
                f"Expected single band planes, got left={left.shape}, right={right.shape}")

        if left.shape != right.shape:
            raise StereoPairMismatchError(f"Image shapes don't match: "
                                          f"left={left.shape}, right={right.shape}")

        if left.dtype != right.dtype:
            raise StereoPairMismatchError(f"Image dtypes differ: "
                                          f"left={left.dtype}, right={right.dtype}")

        return sample_model_for(left.dtype)

    def _prepare_output(self, output: Optional[np.ndarray], height: int, width: int) -> np.ndarray:
        dtype = self.output_dtype

        if output is not None:
            if output.shape != (height, width) or output.dtype != dtype:
                raise StereoPairMismatchError(
                    f"Output must be {dtype} of shape {(height, width)}, "
                    f"got {output.dtype} of shape {output.shape}")
            return output

        if (self.disparity is None or self.disparity.shape != (height, width)
                or self.disparity.dtype != dtype):
            try:
                self.disparity = np.empty((height, width), dtype=dtype)
            except MemoryError as e:
                raise BufferAllocationError(
                    f"Cannot allocate a {height}x{width} disparity map") from e
            self.logger.debug(f"Allocated disparity map {height}x{width} ({dtype})")

        return self.disparity

    def _prepare_row_computer(self, geometry: ScoreGeometry, accumulator_dtype) -> RowScoreComputer:
        computer = self._row_computer
        if (computer is None or computer.geometry != geometry
                or computer.accumulator_dtype != accumulator_dtype):
            try:
                computer = RowScoreComputer(geometry, accumulator_dtype)
            except MemoryError as e:
                raise BufferAllocationError("Cannot allocate the element score cache") from e
            self._row_computer = computer
        return computer

    def _log_disparity_summary(self, disparity: np.ndarray) -> None:
        valid = disparity[disparity != INVALID_DISPARITY]
        if valid.size > 0:
            self.logger.info(f"Disparity computed: "
                             f"valid_pixels={valid.size}/{disparity.size} "
                             f"({100 * valid.size / disparity.size:.1f}%), "
                             f"range=[{valid.min():.1f}, {valid.max():.1f}]")
        else:
            self.logger.warning("No valid disparity values computed")

    def get_configuration_info(self) -> Dict[str, Any]:
        """
        Get current engine configuration information.

        Returns:
            Dict[str, Any]: Configuration information
        """
        info = {
            'state': self.state.value,
            'parameters': self.config.to_dict(),
            'selector': self.selector.__class__.__name__,
            'selector_options': self.selector.options(),
            'output_dtype': str(self.output_dtype),
            'buffer_capacity': self.accumulator.capacity,
            'buffer_allocations': self.accumulator.allocation_count,
        }
        if self.geometry is not None:
            info['geometry'] = {
                'width': self.geometry.width,
                'height': self.geometry.height,
                'column_range': [self.geometry.column_start, self.geometry.column_end],
                'row_range': [self.geometry.row_start, self.geometry.row_end],
                'length_horizontal': self.geometry.length_horizontal,
            }
        return info
