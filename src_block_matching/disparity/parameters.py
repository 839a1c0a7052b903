"""
Block matching parameters and the geometry derived from them.

``BlockMatchingConfig`` holds what the user chooses (disparity range, window
radii, selection policy); ``ScoreGeometry`` holds what follows from it once
the image size is known (valid column range, score buffer dimensions).
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any

from utils.logger_config import get_logger

from .errors import DisparityConfigurationError

logger = get_logger(__name__)


class SelectionPolicy(Enum):
    """Closed set of per-pixel disparity selection policies."""

    WTA = 'wta'
    SUBPIXEL = 'subpixel'
    CONSISTENCY = 'consistency'

    @classmethod
    def parse(cls, value) -> 'SelectionPolicy':
        """Accept an enum member, its value or its name (any case)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for policy in cls:
            if text.lower() in (policy.value, policy.name.lower()):
                return policy
        raise DisparityConfigurationError(
            f"Unknown selection policy '{value}', expected one of: "
            f"{[policy.name for policy in cls]}"
        )


@dataclass(frozen=True)
class ScoreGeometry:
    """Image-size dependent layout of the score buffers."""

    width: int
    height: int
    min_disparity: int
    max_disparity: int
    radius_x: int
    radius_y: int

    @property
    def region_width(self) -> int:
        return 2 * self.radius_x + 1

    @property
    def region_height(self) -> int:
        return 2 * self.radius_y + 1

    @property
    def range_disparity(self) -> int:
        return self.max_disparity - self.min_disparity + 1

    @property
    def column_start(self) -> int:
        """First column that hosts a full window for every candidate disparity."""
        return self.radius_x + self.max_disparity

    @property
    def column_end(self) -> int:
        """One past the last valid column."""
        return self.width - self.radius_x

    @property
    def valid_columns(self) -> int:
        return self.column_end - self.column_start

    @property
    def length_horizontal(self) -> int:
        return self.valid_columns * self.range_disparity

    @property
    def score_shape(self):
        """Shape of one row of scores: (range_disparity, valid_columns)."""
        return (self.range_disparity, self.valid_columns)

    @property
    def row_start(self) -> int:
        return self.radius_y

    @property
    def row_end(self) -> int:
        return self.height - self.radius_y


@dataclass(frozen=True)
class BlockMatchingConfig:
    """
    User-facing block matching parameters.

    Attributes:
        min_disparity: Smallest candidate disparity (>= 0)
        max_disparity: Largest candidate disparity, inclusive (> min_disparity)
        region_radius_x: Horizontal half extent of the matching window
        region_radius_y: Vertical half extent of the matching window
        selection_policy: How a disparity is picked from the scores
        max_lr_error: Allowed left/right disagreement for CONSISTENCY
        texture_threshold: Uniqueness ratio; 0 disables the texture check
    """

    min_disparity: int = 0
    max_disparity: int = 64
    region_radius_x: int = 2
    region_radius_y: int = 2
    selection_policy: SelectionPolicy = SelectionPolicy.WTA
    max_lr_error: int = 1
    texture_threshold: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'selection_policy', SelectionPolicy.parse(self.selection_policy))
        self.validate()

    def validate(self) -> None:
        """
        Check the parameters that do not depend on the image size.

        Raises:
            DisparityConfigurationError: If parameters are invalid
        """
        if self.min_disparity < 0:
            raise DisparityConfigurationError(
                f"min_disparity must be non-negative, got {self.min_disparity}")

        if self.max_disparity <= self.min_disparity:
            raise DisparityConfigurationError(
                f"max_disparity must be greater than min_disparity, "
                f"got min={self.min_disparity}, max={self.max_disparity}")

        if self.region_radius_x < 0 or self.region_radius_y < 0:
            raise DisparityConfigurationError(
                f"Region radii must be non-negative, "
                f"got x={self.region_radius_x}, y={self.region_radius_y}")

        if self.max_lr_error < 0:
            raise DisparityConfigurationError(
                f"max_lr_error must be non-negative, got {self.max_lr_error}")

        if self.texture_threshold < 0:
            raise DisparityConfigurationError(
                f"texture_threshold must be non-negative, got {self.texture_threshold}")

        if self.region_width > 21 or self.region_height > 21:
            logger.warning(f"Large matching window ({self.region_width}x{self.region_height}) "
                           f"may blur depth discontinuities")

    @property
    def region_width(self) -> int:
        return 2 * self.region_radius_x + 1

    @property
    def region_height(self) -> int:
        return 2 * self.region_radius_y + 1

    @property
    def range_disparity(self) -> int:
        return self.max_disparity - self.min_disparity + 1

    def geometry_for(self, width: int, height: int) -> ScoreGeometry:
        """
        Derive the score layout for an image size.

        Args:
            width: Image width in pixels
            height: Image height in pixels

        Returns:
            ScoreGeometry: Buffer dimensions and valid column/row ranges

        Raises:
            DisparityConfigurationError: If no pixel can host a full window
        """
        geometry = ScoreGeometry(
            width=width,
            height=height,
            min_disparity=self.min_disparity,
            max_disparity=self.max_disparity,
            radius_x=self.region_radius_x,
            radius_y=self.region_radius_y,
        )

        if geometry.valid_columns <= 0:
            raise DisparityConfigurationError(
                f"No valid columns: width={width} is too small for "
                f"region_radius_x={self.region_radius_x} and "
                f"max_disparity={self.max_disparity} "
                f"(needs width > {2 * self.region_radius_x + self.max_disparity})")

        if height < geometry.region_height:
            raise DisparityConfigurationError(
                f"No valid rows: height={height} is smaller than "
                f"region height {geometry.region_height}")

        return geometry

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['selection_policy'] = self.selection_policy.name
        return data
