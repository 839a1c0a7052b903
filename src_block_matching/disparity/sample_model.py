"""
Numeric sample model for image planes.

Each supported pixel type is described once, together with the rule that
picks an accumulator wide enough to sum ``region_width * region_height``
absolute differences without overflow.
"""

from dataclasses import dataclass
from typing import Dict

import numpy as np

from .errors import StereoPairMismatchError

_INT32_MAX = np.iinfo(np.int32).max


@dataclass(frozen=True)
class SampleModel:
    """Bit width, signedness and family of one image sample type."""

    name: str
    dtype: np.dtype
    bits: int
    signed: bool
    is_integer: bool

    @property
    def max_abs_difference(self) -> float:
        """Largest possible |a - b| between two samples (inf for floats)."""
        if not self.is_integer:
            return float('inf')
        return float(2 ** self.bits - 1)

    def accumulator_dtype(self, window_area: int) -> np.dtype:
        """
        Resolve the accumulator type for a matching window.

        Args:
            window_area: Number of samples in one matching window

        Returns:
            np.dtype: int32/int64 for integer samples, float64 for floating ones
        """
        if window_area <= 0:
            raise ValueError(f"window_area must be positive, got {window_area}")

        if not self.is_integer:
            return np.dtype(np.float64)

        if self.max_abs_difference * window_area <= _INT32_MAX:
            return np.dtype(np.int32)
        return np.dtype(np.int64)


SAMPLE_MODELS: Dict[np.dtype, SampleModel] = {
    np.dtype(np.uint8): SampleModel('U8', np.dtype(np.uint8), 8, False, True),
    np.dtype(np.int8): SampleModel('S8', np.dtype(np.int8), 8, True, True),
    np.dtype(np.uint16): SampleModel('U16', np.dtype(np.uint16), 16, False, True),
    np.dtype(np.int16): SampleModel('S16', np.dtype(np.int16), 16, True, True),
    np.dtype(np.float32): SampleModel('F32', np.dtype(np.float32), 32, True, False),
    np.dtype(np.float64): SampleModel('F64', np.dtype(np.float64), 64, True, False),
}


def sample_model_for(dtype) -> SampleModel:
    """
    Look up the sample model of an image dtype.

    Raises:
        StereoPairMismatchError: If the dtype is not a supported sample type
    """
    key = np.dtype(dtype)
    try:
        return SAMPLE_MODELS[key]
    except KeyError:
        supported = ', '.join(str(d) for d in SAMPLE_MODELS)
        raise StereoPairMismatchError(
            f"Unsupported sample type {key}; expected one of: {supported}"
        ) from None
