"""Multi-region layout: region -> frame -> bounds -> grid -> sink.

Regions are processed in index order. Each one is independent apart from
corner classification (which looks at every other region's normal) and,
in unsynchronized runs, the shared random generator. Failures are
recovered per element and per region and reported as diagnostics; only a
failed commit aborts the run.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

import numpy as np

from cladding_layout.bounds import extend_bounds
from cladding_layout.cavity import classify_corner, compute_cavity
from cladding_layout.config import LayoutConfig, LayoutParameters
from cladding_layout.contracts import ElementFootprint, LayoutDiagnostic, LayoutResult, Region, RegionLayout
from cladding_layout.errors import (
    DegenerateBoundsError,
    ElementCreationError,
    InvalidRegionError,
    LayoutCommitError,
)
from cladding_layout.frame import build_frame
from cladding_layout.ghosting import GHOST_APPEARANCE, GhostSchedule
from cladding_layout.grid import GridLayoutGenerator
from cladding_layout.regions import make_region, validate_region
from cladding_layout.sequencer import region_generator
from cladding_layout.sinks import ElementSink, RecordingSink

logger = logging.getLogger(__name__)

RegionInput = Union[Region, Mapping[str, Any]]
ConfigInput = Union[LayoutConfig, LayoutParameters, Mapping[str, Any], None]


def resolve_parameters(config: ConfigInput) -> LayoutParameters:
    if isinstance(config, LayoutParameters):
        return config
    if config is None:
        config = LayoutConfig()
    elif not isinstance(config, LayoutConfig):
        config = LayoutConfig.from_options(config)
    return config.resolve()


def generate_layout(
    regions: Sequence[RegionInput],
    config: ConfigInput = None,
    sink: Optional[ElementSink] = None,
    preview: bool = False,
    ghosts: Optional[GhostSchedule] = None,
) -> LayoutResult:
    """Lay out elements over every region.

    Args:
        regions: Region objects, or mappings accepted by ``make_region``.
        config: LayoutConfig, already resolved LayoutParameters, or an option bag.
        sink: Receives each footprint. Without one, footprints are only
            returned in the result.
        preview: Preview runs never commit the sink and never raise for
            region or element failures.
        ghosts: Schedule for ghost-to-solid swaps, used when
            ``realtime_generation`` is enabled.

    Raises:
        LayoutCommitError: a committing run whose sink could not be finalized.
    """
    params = resolve_parameters(config)
    result = LayoutResult(preview=preview, diagnostics=list(params.diagnostics))

    built: List[Optional[Region]] = []
    for index, raw in enumerate(regions):
        try:
            built.append(raw if isinstance(raw, Region) else make_region(**raw))
        except (InvalidRegionError, TypeError) as exc:
            built.append(None)
            _warn(result, "invalid_region", f"Region {index} rejected: {exc}", index)

    normals = [region.normal if region is not None else None for region in built]
    shared_rng = None if params.synchronize else np.random.default_rng(params.random_seed)
    ghosting = ghosts is not None and sink is not None and params.realtime_generation
    placements = [0]

    for index, region in enumerate(built):
        if region is None:
            result.regions.append(RegionLayout(region_index=index, name="", status="skipped"))
            continue
        layout = RegionLayout(region_index=index, name=region.name, status="ok")
        result.regions.append(layout)

        try:
            validate_region(region, params.min_region_area)
            siblings = [n for j, n in enumerate(normals) if j != index and n is not None]
            layout.corner_type = classify_corner(region.normal, siblings)
            layout.cavity = compute_cavity(
                region.normal, params.cavity_distance, layout.corner_type, params.preserve_corners,
            )
            layout.frame = build_frame(region, params.force_horizontal, layout.cavity.offset)
            layout.bounds = extend_bounds(region, layout.frame, layout.cavity.extension)
        except InvalidRegionError as exc:
            layout.status = "skipped"
            _warn(result, "invalid_region", f"Region {index} skipped: {exc}", index)
            continue
        except DegenerateBoundsError as exc:
            layout.status = "skipped"
            _warn(result, "degenerate_bounds", f"Region {index} skipped: {exc}", index)
            continue

        rng = region_generator(index, params.synchronize, params.random_seed, shared_rng)
        generator = GridLayoutGenerator(layout.frame, layout.bounds, params, rng, index)
        layout.grid_size = (generator.plan.columns, generator.plan.rows)
        layout.start_point = generator.plan.start
        logger.debug(
            "Region %d: %s corner, cavity %.2f, frame %s, grid %dx%d from (%.1f, %.1f)",
            index, layout.corner_type.value, layout.cavity.magnitude, layout.frame.orientation,
            layout.grid_size[0], layout.grid_size[1], *layout.start_point,
        )

        emit = None
        if sink is not None:
            emit = _sink_emitter(sink, params, result, index, ghosts if ghosting else None,
                                 placements)
            sink.begin_region(index)
        try:
            layout.footprints = generator.run(emit)
        except Exception as exc:
            if sink is not None:
                sink.rollback_region(index)
            layout.status = "failed"
            layout.footprints = []
            _warn(result, "region_failed", f"Region {index} discarded: {exc}", index)
            continue

        layout.elements_created = generator.created
        layout.elements_trimmed = generator.trimmed
        if generator.cap_reached:
            message = f"Region {index} stopped at the {params.max_elements}-element cap"
            logger.info(message)
            result.diagnostics.append(LayoutDiagnostic(
                code="element_cap_reached", severity="info", message=message,
                region_index=index, value=float(params.max_elements),
            ))

    if sink is not None and not preview:
        _commit(sink, ghosts)

    logger.info(
        "Layout %s: %d/%d regions, %d elements (%d trimmed)",
        "preview" if preview else "run",
        result.counts()["regions_laid_out"], len(result.regions),
        result.elements_created, result.elements_trimmed,
    )
    return result


class LayoutSession:
    """Owns the transient preview and produces committed layouts.

    At most one preview is live: producing a new preview, committing, or
    calling ``clear_preview`` removes the previous preview's elements and
    cancels its pending ghost swaps.
    """

    def __init__(
        self,
        config: ConfigInput = None,
        sink_factory: Callable[[], ElementSink] = RecordingSink,
    ):
        self.params = resolve_parameters(config)
        self.sink_factory = sink_factory
        self.ghosts = GhostSchedule()
        self.preview_ghosts = GhostSchedule()
        self.preview_sink: Optional[ElementSink] = None
        self.preview_result: Optional[LayoutResult] = None

    def preview(self, regions: Sequence[RegionInput]) -> LayoutResult:
        self.clear_preview()
        sink = self.sink_factory()
        result = generate_layout(regions, self.params, sink=sink, preview=True,
                                 ghosts=self.preview_ghosts)
        self.preview_sink = sink
        self.preview_result = result
        return result

    def commit(self, regions: Sequence[RegionInput], sink: Optional[ElementSink] = None) -> LayoutResult:
        self.clear_preview()
        if sink is None:
            sink = self.sink_factory()
        return generate_layout(regions, self.params, sink=sink, preview=False, ghosts=self.ghosts)

    def clear_preview(self) -> None:
        if self.preview_sink is None:
            return
        self.preview_ghosts.cancel()
        self.preview_sink.clear()
        self.preview_sink = None
        self.preview_result = None
        logger.debug("Previous preview removed")

    def advance(self, elapsed: float) -> int:
        """Drain due ghost swaps for both the preview and committed runs."""
        return self.preview_ghosts.advance(elapsed) + self.ghosts.advance(elapsed)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _warn(result: LayoutResult, code: str, message: str, region_index: Optional[int] = None) -> None:
    logger.warning(message)
    result.diagnostics.append(LayoutDiagnostic(
        code=code, severity="warning", message=message, region_index=region_index,
    ))


def _sink_emitter(
    sink: ElementSink,
    params: LayoutParameters,
    result: LayoutResult,
    region_index: int,
    ghosts: Optional[GhostSchedule],
    placements: List[int],
) -> Callable[[ElementFootprint], bool]:
    appearance = GHOST_APPEARANCE if ghosts is not None else params.appearance

    def emit(footprint: ElementFootprint) -> bool:
        try:
            created = sink.add_element(footprint, params.thickness, appearance)
        except ElementCreationError as exc:
            created = False
            reason = str(exc)
        else:
            reason = "sink returned failure"
        if not created:
            _warn(result, "element_creation_failed",
                  f"Region {region_index} element at row {footprint.row}, "
                  f"column {footprint.column} not created: {reason}", region_index)
            return False

        if ghosts is not None:
            key = (footprint.region_index, footprint.index)
            ghosts.schedule(
                params.generation_delay * placements[0],
                lambda: sink.set_appearance(key, params.appearance),
            )
        placements[0] += 1
        return True

    return emit


def _commit(sink: ElementSink, ghosts: Optional[GhostSchedule]) -> None:
    try:
        sink.commit()
    except Exception as exc:
        logger.error("Commit failed, aborting run: %s", exc)
        sink.abort()
        if ghosts is not None:
            ghosts.cancel()
        if isinstance(exc, LayoutCommitError):
            raise
        raise LayoutCommitError(f"Could not finalize layout: {exc}") from exc
