"""
Disparity calculation module for SAD block matching.

This module contains the block matching kernel (sample model, row scores,
vertical accumulation, selection policies and the engine driving them) and
the post-processing and file handling built around it.
"""

from .errors import DisparityConfigurationError, StereoPairMismatchError, BufferAllocationError
from .sample_model import SampleModel, sample_model_for
from .parameters import BlockMatchingConfig, ScoreGeometry, SelectionPolicy
from .row_score import RowScoreComputer
from .vertical_accumulator import VerticalWindowAccumulator
from .selectors import (
    INVALID_DISPARITY,
    DisparitySelector,
    WinnerTakeAllSelector,
    SubpixelSelector,
    ConsistencySelector,
    create_selector,
)
from .sad_engine import SadRectEngine, EngineState
from .disparity_processor import DisparityProcessor
from .file_manager import DisparityFileManager

__all__ = [
    'DisparityConfigurationError',
    'StereoPairMismatchError',
    'BufferAllocationError',
    'SampleModel',
    'sample_model_for',
    'BlockMatchingConfig',
    'ScoreGeometry',
    'SelectionPolicy',
    'RowScoreComputer',
    'VerticalWindowAccumulator',
    'INVALID_DISPARITY',
    'DisparitySelector',
    'WinnerTakeAllSelector',
    'SubpixelSelector',
    'ConsistencySelector',
    'create_selector',
    'SadRectEngine',
    'EngineState',
    'DisparityProcessor',
    'DisparityFileManager',
]
