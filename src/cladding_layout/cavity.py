"""Corner classification and cavity offset for multi-region layouts.

Two regions meeting at an internal corner both push their layout plane out
along their own normals, so full cavity and full margin on both would make
the layouts overlap near the shared edge. Internal regions therefore get a
reduced offset and a smaller bounds margin.

Corner detection is a heuristic: a region counts as internal when any other
region in the run is nearly perpendicular to it. Spatial proximity is not
checked, so two far-apart perpendicular walls are also classified internal.
"""

from __future__ import annotations

import logging
from typing import Iterable

import numpy as np

from cladding_layout.contracts import CavityResult, CornerType

logger = logging.getLogger(__name__)

PERPENDICULAR_DOT_THRESHOLD = 0.1

CAVITY_FACTORS = {
    CornerType.INTERNAL: 0.7,
    CornerType.EXTERNAL: 1.0,
}

EXTENSION_FACTORS = {
    CornerType.INTERNAL: 0.02,
    CornerType.EXTERNAL: 0.05,
}

_MIN_CAVITY = 1e-3


def count_perpendicular(
    normal: np.ndarray,
    sibling_normals: Iterable[np.ndarray],
    threshold: float = PERPENDICULAR_DOT_THRESHOLD,
) -> int:
    n = np.asarray(normal, dtype=float)
    return sum(
        1 for other in sibling_normals
        if abs(float(n @ np.asarray(other, dtype=float))) < threshold
    )


def classify_corner(
    normal: np.ndarray,
    sibling_normals: Iterable[np.ndarray],
    threshold: float = PERPENDICULAR_DOT_THRESHOLD,
) -> CornerType:
    """INTERNAL iff at least one sibling normal is nearly perpendicular."""
    adjacent = count_perpendicular(normal, sibling_normals, threshold)
    corner_type = CornerType.INTERNAL if adjacent > 0 else CornerType.EXTERNAL
    logger.debug("Corner %s (%d perpendicular siblings)", corner_type.value, adjacent)
    return corner_type


def compute_cavity(
    normal: np.ndarray,
    cavity_distance: float,
    corner_type: CornerType,
    preserve_corners: bool = True,
) -> CavityResult:
    """Offset vector along the outward normal plus the bounds extension.

    The extension only applies to a positive cavity with corner
    preservation enabled; it is zero otherwise.
    """
    n = np.asarray(normal, dtype=float)
    n = n / np.linalg.norm(n)
    magnitude = float(cavity_distance) * CAVITY_FACTORS[corner_type]

    extension = 0.0
    if preserve_corners and cavity_distance > _MIN_CAVITY:
        extension = float(cavity_distance) * EXTENSION_FACTORS[corner_type]

    return CavityResult(
        offset=n * magnitude,
        magnitude=magnitude,
        extension=extension,
        corner_type=corner_type,
    )
