"""Row/column element generation with boundary clipping.

Rows grow away from the anchored edge: top anchors lay rows downward from
the top of the bounds, everything else lays them upward; right anchors lay
columns leftward. The first row and column at the anchor therefore start
with full pieces, and clipping only happens at the far edges.

Iteration is strictly row-major. Bond offsets depend on row parity and
every size comes from a sequencer whose state advances with each draw, so
reordering the loops would change the layout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np

from cladding_layout.anchor import grid_size, pattern_extent, resolve_anchor, start_jitter
from cladding_layout.bounds import clip_interval
from cladding_layout.config import LayoutParameters
from cladding_layout.consolidate import consolidate_row
from cladding_layout.contracts import (
    ElementFootprint,
    ExtendedBounds,
    Frame,
    PatternStyle,
    SequenceMode,
    Vec2,
    to_vec3,
)
from cladding_layout.frame import rect_to_world
from cladding_layout.sequencer import ValueSequencer

logger = logging.getLogger(__name__)

TRIM_EPS = 1e-3

Emit = Callable[[ElementFootprint], bool]


@dataclass(frozen=True)
class GridPlan:
    """Grid dimensions and where the pattern starts."""

    columns: int
    rows: int
    start: Vec2
    total_width: float
    total_height: float
    bond_offset: float


class GridLayoutGenerator:
    """Lays elements over one region's extended bounds.

    Args:
        frame: The region's layout frame.
        bounds: Extended bounds in frame coordinates.
        params: Resolved layout parameters.
        rng: Generator shared by the sequencers and the start jitter.
        region_index: Ordinal stored on every footprint.
    """

    def __init__(
        self,
        frame: Frame,
        bounds: ExtendedBounds,
        params: LayoutParameters,
        rng: np.random.Generator,
        region_index: int = 0,
    ):
        self.frame = frame
        self.bounds = bounds
        self.params = params
        self.rng = rng
        self.region_index = region_index
        self.lengths = ValueSequencer(params.lengths, params.length_mode, rng)
        self.heights = ValueSequencer(params.heights, params.height_mode, rng)
        self.plan = self._plan()

        self.created = 0
        self.trimmed = 0
        self.cap_reached = False

    def _plan(self) -> GridPlan:
        p = self.params
        avg_length = self.lengths.average
        avg_height = self.heights.average
        columns, rows = grid_size(
            self.bounds, avg_length, avg_height, p.joint_length, p.joint_width,
            max_columns=p.max_columns, max_rows=p.max_rows,
        )
        total_width = pattern_extent(columns, avg_length, p.joint_length)
        total_height = pattern_extent(rows, avg_height, p.joint_width)
        x, y = resolve_anchor(self.bounds, total_width, total_height, p.anchor)

        if p.length_mode is SequenceMode.RANDOM and not p.start_with_full_piece:
            dx, dy = start_jitter(self.rng, avg_length)
            x, y = x + dx, y + dy

        bond_offset = 0.0
        if p.pattern_style is PatternStyle.RUNNING_BOND:
            bond_offset = (avg_length + p.joint_length) * 0.5

        return GridPlan(
            columns=columns,
            rows=rows,
            start=(x, y),
            total_width=total_width,
            total_height=total_height,
            bond_offset=bond_offset,
        )

    def run(self, emit: Optional[Emit] = None) -> List[ElementFootprint]:
        """Generate footprints row by row.

        *emit* materializes each footprint and returns False when that
        element could not be created; rejected footprints are neither
        counted nor returned and the loop carries on with the next one.
        """
        p = self.params
        plan = self.plan
        x_dir = -1.0 if p.anchor.is_right else 1.0
        y_dir = -1.0 if p.anchor.is_top else 1.0
        x_origin = plan.start[0] + (plan.total_width if x_dir < 0 else 0.0)
        y = plan.start[1] + (plan.total_height if y_dir < 0 else 0.0)

        accepted: List[ElementFootprint] = []
        for row in range(plan.rows):
            if self._at_cap():
                break
            height = self.heights.next()
            y_span = (y, y + height) if y_dir > 0 else (y - height, y)
            stagger = plan.bond_offset * (row % 2)

            if p.small_piece_removal:
                self._consolidated_row(row, height, y_span, stagger, x_dir, emit, accepted)
            else:
                self._clipped_row(row, height, y_span, x_origin - x_dir * stagger, x_dir,
                                  emit, accepted)
            y += y_dir * (height + p.joint_width)

        logger.debug(
            "Region %d grid %dx%d: %d elements, %d trimmed",
            self.region_index, plan.columns, plan.rows, self.created, self.trimmed,
        )
        return accepted

    # -- rows ---------------------------------------------------------------

    def _clipped_row(self, row, height, y_span, x, x_dir, emit, accepted) -> None:
        b = self.bounds
        y_clip = clip_interval(y_span[0], y_span[1], b.min_y, b.max_y)
        for column in range(self.plan.columns):
            if self._at_cap():
                return
            length = self.lengths.next()
            x_span = (x, x + length) if x_dir > 0 else (x - length, x)
            x += x_dir * (length + self.params.joint_length)
            if y_clip is None:
                continue
            x_clip = clip_interval(x_span[0], x_span[1], b.min_x, b.max_x)
            if x_clip is None:
                continue
            trimmed = (
                x_clip[1] - x_clip[0] < length - TRIM_EPS
                or y_clip[1] - y_clip[0] < height - TRIM_EPS
            )
            self._place(x_clip, y_clip, (length, height), trimmed, row, column, emit, accepted)

    def _consolidated_row(self, row, height, y_span, stagger, x_dir, emit, accepted) -> None:
        b = self.bounds
        y_clip = clip_interval(y_span[0], y_span[1], b.min_y, b.max_y)
        if y_clip is None:
            return
        height_trimmed = y_clip[1] - y_clip[0] < height - TRIM_EPS
        pieces = consolidate_row(
            b.width,
            self.lengths,
            self.params.joint_length,
            self.params.min_piece_size,
            lead_offset=stagger,
            max_pieces=self.plan.columns,
        )
        x = b.min_x if x_dir > 0 else b.max_x
        for column, piece in enumerate(pieces):
            if self._at_cap():
                return
            if x_dir > 0:
                x_span = (x, min(x + piece.width, b.max_x))
            else:
                x_span = (max(x - piece.width, b.min_x), x)
            x += x_dir * (piece.width + self.params.joint_length)
            self._place(
                x_span, y_clip, (piece.nominal, height),
                piece.trimmed or height_trimmed, row, column, emit, accepted,
            )

    # -- helpers ------------------------------------------------------------

    def _at_cap(self) -> bool:
        if self.created >= self.params.max_elements:
            self.cap_reached = True
        return self.cap_reached

    def _place(
        self,
        x_span: Tuple[float, float],
        y_span: Tuple[float, float],
        nominal: Tuple[float, float],
        trimmed: bool,
        row: int,
        column: int,
        emit: Optional[Emit],
        accepted: List[ElementFootprint],
    ) -> None:
        corners = rect_to_world(self.frame, x_span[0], y_span[0], x_span[1], y_span[1])
        footprint = ElementFootprint(
            index=self.created,
            region_index=self.region_index,
            points_3d=tuple(to_vec3(c) for c in corners),
            local_rect=(float(x_span[0]), float(y_span[0]), float(x_span[1]), float(y_span[1])),
            nominal_size=(float(nominal[0]), float(nominal[1])),
            normal=to_vec3(self.frame.normal),
            trimmed=bool(trimmed),
            row=row,
            column=column,
        )
        if emit is not None and not emit(footprint):
            return
        accepted.append(footprint)
        self.created += 1
        if trimmed:
            self.trimmed += 1
