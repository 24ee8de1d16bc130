"""Contracts for the cladding layout pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]


class CornerType(Enum):
    """Relationship of a region to the other regions in the same run."""
    INTERNAL = "internal"
    EXTERNAL = "external"


class PatternStyle(Enum):
    """Row-to-row offset rule."""
    RUNNING_BOND = "running_bond"
    STACK_BOND = "stack_bond"
    HERRINGBONE = "herringbone"  # reserved, laid out as stack bond


class SequenceMode(Enum):
    SEQUENTIAL = "sequential"
    RANDOM = "random"


class Anchor(Enum):
    """Nine named starting positions for grid placement."""
    TOP_LEFT = "top_left"
    TOP = "top"
    TOP_RIGHT = "top_right"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM = "bottom"
    BOTTOM_RIGHT = "bottom_right"

    @classmethod
    def parse(cls, value) -> "Anchor":
        """Resolve an anchor name; unrecognized names fall back to CENTER."""
        if isinstance(value, Anchor):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.CENTER

    @property
    def is_top(self) -> bool:
        return self in (Anchor.TOP_LEFT, Anchor.TOP, Anchor.TOP_RIGHT)

    @property
    def is_bottom(self) -> bool:
        return self in (Anchor.BOTTOM_LEFT, Anchor.BOTTOM, Anchor.BOTTOM_RIGHT)

    @property
    def is_left(self) -> bool:
        return self in (Anchor.TOP_LEFT, Anchor.LEFT, Anchor.BOTTOM_LEFT)

    @property
    def is_right(self) -> bool:
        return self in (Anchor.TOP_RIGHT, Anchor.RIGHT, Anchor.BOTTOM_RIGHT)


@dataclass(frozen=True)
class Region:
    """A planar boundary with a unit normal, the unit of layout processing.

    ``boundary`` is an (N, 3) array of the polygon's vertices in order,
    without a repeated closing point. ``name`` is only used for reporting.
    """

    boundary: np.ndarray
    normal: np.ndarray
    name: str = ""

    @property
    def bbox_center(self) -> np.ndarray:
        """Center of the boundary's axis-aligned 3D bounding box."""
        return (self.boundary.min(axis=0) + self.boundary.max(axis=0)) / 2.0

    def edge_vectors(self) -> np.ndarray:
        """(N, 3) vectors from each vertex to the next, closing the loop."""
        return np.roll(self.boundary, -1, axis=0) - self.boundary


@dataclass(frozen=True)
class Frame:
    """Orthonormal 2D coordinate system attached to a region."""

    origin: np.ndarray
    x_axis: np.ndarray
    y_axis: np.ndarray
    normal: np.ndarray
    orientation: str = "face_oriented"

    def to_local(self, points: np.ndarray) -> np.ndarray:
        """Map (N, 3) world points to (N, 2) frame coordinates."""
        d = np.atleast_2d(np.asarray(points, dtype=float)) - self.origin
        return np.column_stack([d @ self.x_axis, d @ self.y_axis])

    def to_world(self, points_2d: np.ndarray) -> np.ndarray:
        """Map (N, 2) frame coordinates back to (N, 3) world points on the frame plane."""
        p = np.atleast_2d(np.asarray(points_2d, dtype=float))
        return (
            self.origin
            + np.outer(p[:, 0], self.x_axis)
            + np.outer(p[:, 1], self.y_axis)
        )


@dataclass(frozen=True)
class CavityResult:
    """Outward offset of the layout plane plus the corner extension margin."""

    offset: np.ndarray  # (3,) along the region's outward normal
    magnitude: float
    extension: float
    corner_type: CornerType


@dataclass(frozen=True)
class ExtendedBounds:
    """Axis-aligned rectangle in frame-local 2D coordinates."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


@dataclass(frozen=True)
class ElementFootprint:
    """A clipped rectangular element, in 3D and in its region's 2D frame."""

    index: int
    region_index: int
    points_3d: Tuple[Vec3, Vec3, Vec3, Vec3]
    local_rect: Tuple[float, float, float, float]  # (min_x, min_y, max_x, max_y)
    nominal_size: Vec2  # drawn (length, height) before clipping
    normal: Vec3
    trimmed: bool
    row: int = 0
    column: int = 0

    @property
    def width(self) -> float:
        return self.local_rect[2] - self.local_rect[0]

    @property
    def height(self) -> float:
        return self.local_rect[3] - self.local_rect[1]


@dataclass
class LayoutDiagnostic:
    """A recovered problem observed during a layout run."""

    code: str
    severity: str  # "warning" | "info"
    message: str
    region_index: Optional[int] = None
    value: Optional[float] = None


@dataclass
class RegionLayout:
    """Per-region outcome of a layout run."""

    region_index: int
    name: str
    status: str  # "ok" | "skipped" | "failed"
    corner_type: Optional[CornerType] = None
    cavity: Optional[CavityResult] = None
    frame: Optional[Frame] = None
    bounds: Optional[ExtendedBounds] = None
    grid_size: Tuple[int, int] = (0, 0)
    start_point: Optional[Vec2] = None
    footprints: List[ElementFootprint] = field(default_factory=list)
    elements_created: int = 0
    elements_trimmed: int = 0


@dataclass
class LayoutResult:
    """Aggregated outcome of a layout run across all regions."""

    regions: List[RegionLayout] = field(default_factory=list)
    diagnostics: List[LayoutDiagnostic] = field(default_factory=list)
    preview: bool = False

    @property
    def elements_created(self) -> int:
        return sum(r.elements_created for r in self.regions)

    @property
    def elements_trimmed(self) -> int:
        return sum(r.elements_trimmed for r in self.regions)

    @property
    def footprints(self) -> List[ElementFootprint]:
        return [fp for r in self.regions for fp in r.footprints]

    def counts(self) -> Dict[str, int]:
        return {
            "regions": len(self.regions),
            "regions_laid_out": sum(1 for r in self.regions if r.status == "ok"),
            "elements_created": self.elements_created,
            "elements_trimmed": self.elements_trimmed,
            "diagnostics": len(self.diagnostics),
        }


def to_vec3(values: Sequence[float]) -> Vec3:
    return (float(values[0]), float(values[1]), float(values[2]))


def to_vec2(values: Sequence[float]) -> Vec2:
    return (float(values[0]), float(values[1]))
