"""Frame-local bounds of a region, grown by the corner extension margin."""
import logging

from cladding_layout.contracts import ExtendedBounds, Frame, Region
from cladding_layout.errors import DegenerateBoundsError

logger = logging.getLogger(__name__)

MIN_BOUNDS_SIZE = 1e-3


def local_bounds(region: Region, frame: Frame) -> ExtendedBounds:
    """Axis-aligned bounds of the region boundary in *frame* coordinates."""
    local = frame.to_local(region.boundary)
    mins = local.min(axis=0)
    maxs = local.max(axis=0)
    return ExtendedBounds(float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))


def extend_bounds(
    region: Region,
    frame: Frame,
    extension: float = 0.0,
    min_size: float = MIN_BOUNDS_SIZE,
) -> ExtendedBounds:
    """Local bounds grown by *extension* on all four sides.

    Raises:
        DegenerateBoundsError: width or height below *min_size*.
    """
    base = local_bounds(region, frame)
    bounds = ExtendedBounds(
        base.min_x - extension,
        base.min_y - extension,
        base.max_x + extension,
        base.max_y + extension,
    )
    if bounds.width < min_size or bounds.height < min_size:
        raise DegenerateBoundsError(
            f"Bounds {bounds.width:.4g} x {bounds.height:.4g} below {min_size:g}"
        )
    logger.debug(
        "Bounds for region %s: %.1f x %.1f (extension %.2f)",
        region.name, bounds.width, bounds.height, extension,
    )
    return bounds


def clip_interval(lo: float, hi: float, bound_lo: float, bound_hi: float):
    """Overlap of [lo, hi] with [bound_lo, bound_hi], or None if not positive."""
    start = max(lo, bound_lo)
    end = min(hi, bound_hi)
    if end - start <= 0.0:
        return None
    return start, end
