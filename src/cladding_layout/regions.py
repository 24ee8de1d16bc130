"""
Region construction and validation.

A region is an ordered planar polygon in 3D with a unit normal. Regions can
arrive nested inside a transformed group, so a 4x4 source transform is
applied here once and the rest of the pipeline only sees world coordinates.
"""
import logging
from typing import Optional, Sequence

import numpy as np
import trimesh
from shapely.geometry import Polygon
from shapely.validation import make_valid

from cladding_layout.contracts import Region
from cladding_layout.errors import InvalidRegionError

logger = logging.getLogger(__name__)

_MIN_NORMAL_LENGTH = 1e-9


def make_region(
    boundary: Sequence[Sequence[float]],
    normal: Optional[Sequence[float]] = None,
    transform: Optional[Sequence[Sequence[float]]] = None,
    name: str = "",
) -> Region:
    """Build a Region from raw boundary points.

    Args:
        boundary: Ordered polygon vertices, (N, 3). A repeated closing
            vertex is dropped.
        normal: Plane normal. Estimated with Newell's method when omitted.
        transform: Optional 4x4 homogeneous source transform applied to
            both the boundary and the normal.
        name: Label used in reports.

    Raises:
        InvalidRegionError: empty or non-finite input, or no usable normal.
    """
    if boundary is None:
        raise InvalidRegionError("Region boundary is missing")
    points = _as_float_array(boundary, "boundary")
    if points.ndim != 2 or points.shape[1] != 3 or len(points) == 0:
        raise InvalidRegionError(f"Region boundary must be (N, 3), got shape {points.shape}")
    if not np.all(np.isfinite(points)):
        raise InvalidRegionError("Region boundary has non-finite coordinates")
    if len(points) > 1 and np.allclose(points[0], points[-1]):
        points = points[:-1]
    if len(points) < 3:
        raise InvalidRegionError(f"Region boundary needs 3+ points, got {len(points)}")

    if normal is None:
        n = newell_normal(points)
    else:
        n = _as_float_array(normal, "normal")
        if n.shape != (3,) or not np.all(np.isfinite(n)):
            raise InvalidRegionError(f"Region normal must be a finite 3-vector, got {normal!r}")

    if transform is not None:
        matrix = _as_float_array(transform, "source transform")
        if matrix.shape != (4, 4):
            raise InvalidRegionError(f"Source transform must be 4x4, got {matrix.shape}")
        points = trimesh.transformations.transform_points(points, matrix)
        # Normals transform with the inverse transpose of the linear part.
        n = np.linalg.inv(matrix[:3, :3]).T @ n

    length = float(np.linalg.norm(n))
    if length < _MIN_NORMAL_LENGTH:
        raise InvalidRegionError("Region normal has zero length")

    return Region(boundary=points, normal=n / length, name=name)


def _as_float_array(values, label: str) -> np.ndarray:
    try:
        return np.asarray(values, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidRegionError(f"Region {label} is not a numeric array: {exc}") from exc


def newell_normal(points: np.ndarray) -> np.ndarray:
    """Polygon normal by Newell's method (robust for non-convex loops)."""
    current = np.asarray(points, dtype=float)
    following = np.roll(current, -1, axis=0)
    n = np.array([
        np.sum((current[:, 1] - following[:, 1]) * (current[:, 2] + following[:, 2])),
        np.sum((current[:, 2] - following[:, 2]) * (current[:, 0] + following[:, 0])),
        np.sum((current[:, 0] - following[:, 0]) * (current[:, 1] + following[:, 1])),
    ])
    length = float(np.linalg.norm(n))
    if length < _MIN_NORMAL_LENGTH:
        raise InvalidRegionError("Cannot estimate a normal for a collinear boundary")
    return n / length


def region_polygon(region: Region, u_axis: np.ndarray, v_axis: np.ndarray) -> Polygon:
    """Project the region boundary onto (u, v) as a Shapely polygon."""
    coords = [(float(p @ u_axis), float(p @ v_axis)) for p in region.boundary]
    return Polygon(coords)


def validate_region(region: Region, min_area: float = 0.0) -> float:
    """Check that *region* encloses a usable area.

    Returns:
        The polygon area in working units squared.

    Raises:
        InvalidRegionError: zero area (after repairing self-intersections) or
            area below *min_area*.
    """
    u, v = _plane_basis(region.normal)
    poly = region_polygon(region, u, v)
    if not poly.is_empty and not poly.is_valid:
        logger.debug("Region %s boundary is not simple, area from repaired polygon", region.name)
        poly = make_valid(poly)
    if poly.is_empty or poly.area <= 0.0:
        raise InvalidRegionError(f"Region {region.name or '?'} has zero area")
    area = float(poly.area)
    if area < min_area:
        raise InvalidRegionError(
            f"Region {region.name or '?'} area {area:.1f} below minimum {min_area:.1f}"
        )
    return area


def _plane_basis(normal: np.ndarray):
    """Build an orthonormal (u, v) basis perpendicular to normal."""
    n = normal / np.linalg.norm(normal)
    if abs(n[2]) < 0.9:
        ref = np.array([0.0, 0.0, 1.0])
    else:
        ref = np.array([1.0, 0.0, 0.0])
    u = np.cross(n, ref)
    u /= np.linalg.norm(u)
    v = np.cross(n, u)
    v /= np.linalg.norm(v)
    return u, v
