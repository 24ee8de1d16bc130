"""
Stable 2D coordinate frames for arbitrarily oriented planar regions.

With forced horizontal alignment, walls and floors snap to world axes so
rows stay level across every region of a building. Otherwise the region's
longest edge drives the layout direction.
"""
import logging
from typing import Optional

import numpy as np

from cladding_layout.contracts import Frame, Region

logger = logging.getLogger(__name__)

WORLD_X = np.array([1.0, 0.0, 0.0])
WORLD_Y = np.array([0.0, 1.0, 0.0])
WORLD_Z = np.array([0.0, 0.0, 1.0])

AXIS_SNAP_THRESHOLD = 0.8
_MIN_AXIS_LENGTH = 1e-3


def build_frame(
    region: Region,
    force_horizontal: bool = True,
    offset: Optional[np.ndarray] = None,
) -> Frame:
    """Derive the layout frame for *region*.

    The origin is the center of the region's 3D bounding box projected onto
    the region plane, then shifted by *offset* (the cavity vector).
    """
    n = np.asarray(region.normal, dtype=float)
    n = n / np.linalg.norm(n)

    if force_horizontal:
        x_axis, y_axis, orientation = _horizontal_axes(n)
    else:
        x_axis, y_axis, orientation = _edge_axes(region, n)

    center = region.bbox_center
    # Project onto the plane so local points sit at zero height.
    center = center - float((center - region.boundary[0]) @ n) * n
    origin = center if offset is None else center + np.asarray(offset, dtype=float)

    logger.debug(
        "Frame %s for region %s: x=%s y=%s",
        orientation, region.name, np.round(x_axis, 4), np.round(y_axis, 4),
    )
    return Frame(origin=origin, x_axis=x_axis, y_axis=y_axis, normal=n, orientation=orientation)


def _horizontal_axes(n: np.ndarray):
    a = np.abs(n)
    if a[2] > AXIS_SNAP_THRESHOLD:
        return WORLD_X.copy(), WORLD_Y.copy(), "horizontal"
    if a[1] > AXIS_SNAP_THRESHOLD:
        return WORLD_X.copy(), WORLD_Z.copy(), "front_back_wall"
    if a[0] > AXIS_SNAP_THRESHOLD:
        return WORLD_Y.copy(), WORLD_Z.copy(), "side_wall"

    horizontal = np.array([n[0], n[1], 0.0])
    length = float(np.linalg.norm(horizontal))
    if length < _MIN_AXIS_LENGTH:
        return WORLD_X.copy(), WORLD_Z.copy(), "angled"
    x_axis = np.cross(horizontal / length, WORLD_Z)
    x_axis /= np.linalg.norm(x_axis)
    # World up projected into the plane keeps rows level on sloped faces.
    y_axis = WORLD_Z - float(WORLD_Z @ n) * n
    y_axis /= np.linalg.norm(y_axis)
    return x_axis, y_axis, "angled"


def _edge_axes(region: Region, n: np.ndarray):
    edges = region.edge_vectors()
    lengths = np.linalg.norm(edges, axis=1)
    if len(lengths) and float(lengths.max()) > _MIN_AXIS_LENGTH:
        x_axis = edges[int(np.argmax(lengths))]
        x_axis = x_axis - float(x_axis @ n) * n
    elif abs(float(n @ WORLD_Z)) > 1.0 - 1e-9:
        x_axis = WORLD_X.copy()
    else:
        x_axis = np.cross(n, WORLD_Z)
    x_axis = x_axis / np.linalg.norm(x_axis)
    y_axis = np.cross(n, x_axis)
    y_axis /= np.linalg.norm(y_axis)
    return x_axis, y_axis, "face_oriented"


def rect_to_world(frame: Frame, min_x: float, min_y: float, max_x: float, max_y: float) -> np.ndarray:
    """Four world corners of a frame-local rectangle, counter-clockwise in the frame."""
    corners = np.array([
        [min_x, min_y],
        [max_x, min_y],
        [max_x, max_y],
        [min_x, max_y],
    ])
    return frame.to_world(corners)
