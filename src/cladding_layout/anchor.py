"""Grid sizing and the starting point of the element pattern."""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from cladding_layout.contracts import Anchor, ExtendedBounds, Vec2

JITTER_X_FRACTION = 0.7
JITTER_Y_FRACTION = 0.3


def grid_size(
    bounds: ExtendedBounds,
    avg_length: float,
    avg_height: float,
    joint_length: float,
    joint_width: float,
    max_columns: int = 150,
    max_rows: int = 150,
) -> Tuple[int, int]:
    """(columns, rows) needed to cover *bounds*, with two spare of each."""
    columns = math.ceil((bounds.width + joint_length) / (avg_length + joint_length)) + 2
    rows = math.ceil((bounds.height + joint_width) / (avg_height + joint_width)) + 2
    return min(columns, max_columns), min(rows, max_rows)


def pattern_extent(count: int, average: float, joint: float) -> float:
    """Nominal span of *count* average elements separated by joints."""
    return count * average + max(count - 1, 0) * joint


def resolve_anchor(
    bounds: ExtendedBounds,
    total_width: float,
    total_height: float,
    anchor: Anchor = Anchor.CENTER,
) -> Vec2:
    """Lower-left corner of the pattern for the chosen anchor.

    The pattern is flush with the bounds on anchored sides and centered on
    any axis the anchor leaves free.
    """
    anchor = Anchor.parse(anchor)
    if anchor.is_left:
        x = bounds.min_x
    elif anchor.is_right:
        x = bounds.max_x - total_width
    else:
        x = bounds.min_x + (bounds.width - total_width) / 2.0

    if anchor.is_bottom:
        y = bounds.min_y
    elif anchor.is_top:
        y = bounds.max_y - total_height
    else:
        y = bounds.min_y + (bounds.height - total_height) / 2.0
    return (float(x), float(y))


def start_jitter(rng: np.random.Generator, avg_length: float) -> Vec2:
    """Random start offset so randomized layouts don't open on an uncut piece.

    X spans 70% of the average length centered on zero, Y 30% of that.
    """
    span = avg_length * JITTER_X_FRACTION
    dx = (float(rng.random()) - 0.5) * span
    dy = (float(rng.random()) - 0.5) * span * JITTER_Y_FRACTION
    return (dx, dy)
