"""From-scratch SAD references used to check the incremental kernel."""

import numpy as np


def block_sad(left, right, x, y, d, radius_x, radius_y):
    """SAD of the window centred at (x, y) against the window shifted by d."""
    left_block = left[y - radius_y:y + radius_y + 1, x - radius_x:x + radius_x + 1]
    right_block = right[y - radius_y:y + radius_y + 1, x - d - radius_x:x - d + radius_x + 1]
    return np.abs(left_block.astype(np.float64) - right_block.astype(np.float64)).sum()


def brute_force_vertical(left, right, y, config):
    """Vertical scores of output row ``y``, shape (range_disparity, valid_columns)."""
    height, width = left.shape
    geometry = config.geometry_for(width, height)
    scores = np.zeros(geometry.score_shape, dtype=np.float64)
    for k, d in enumerate(range(config.min_disparity, config.max_disparity + 1)):
        for j, x in enumerate(range(geometry.column_start, geometry.column_end)):
            scores[k, j] = block_sad(left, right, x, y, d,
                                     config.region_radius_x, config.region_radius_y)
    return scores


def brute_force_horizontal(left_row, right_row, geometry):
    """Horizontal scores of one row, shape (range_disparity, valid_columns)."""
    scores = np.zeros(geometry.score_shape, dtype=np.float64)
    rx = geometry.radius_x
    for k, d in enumerate(range(geometry.min_disparity, geometry.max_disparity + 1)):
        for j, x in enumerate(range(geometry.column_start, geometry.column_end)):
            left_window = left_row[x - rx:x + rx + 1].astype(np.float64)
            right_window = right_row[x - d - rx:x - d + rx + 1].astype(np.float64)
            scores[k, j] = np.abs(left_window - right_window).sum()
    return scores


def brute_force_wta(left, right, config):
    """Winner-take-all disparity map computed without any running sums."""
    height, width = left.shape
    geometry = config.geometry_for(width, height)
    disparity = np.full((height, width), -1, dtype=np.int32)
    for y in range(geometry.row_start, geometry.row_end):
        scores = brute_force_vertical(left, right, y, config)
        disparity[y, geometry.column_start:geometry.column_end] = (
            np.argmin(scores, axis=0) + config.min_disparity)
    return disparity


def horizontal_ramp(height, width, slope, offset=0):
    """uint8 image whose value grows linearly along x."""
    row = (np.arange(width) + offset) * slope
    return np.tile(row, (height, 1)).astype(np.uint8)
