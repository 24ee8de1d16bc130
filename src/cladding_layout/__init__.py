"""Public API for cladding layout over planar regions."""

from cladding_layout.config import LayoutConfig, LayoutParameters
from cladding_layout.contracts import (
    Anchor,
    CornerType,
    ElementFootprint,
    LayoutResult,
    PatternStyle,
    Region,
    RegionLayout,
)
from cladding_layout.errors import LayoutCommitError, LayoutError
from cladding_layout.pipeline import LayoutSession, generate_layout
from cladding_layout.regions import make_region
from cladding_layout.sinks import ElementSink, RecordingSink, TrimeshSink

__all__ = [
    "Anchor",
    "CornerType",
    "ElementFootprint",
    "ElementSink",
    "LayoutCommitError",
    "LayoutConfig",
    "LayoutError",
    "LayoutParameters",
    "LayoutResult",
    "LayoutSession",
    "PatternStyle",
    "RecordingSink",
    "Region",
    "RegionLayout",
    "TrimeshSink",
    "generate_layout",
    "make_region",
]
