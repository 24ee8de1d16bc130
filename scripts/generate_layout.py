#!/usr/bin/env python3
"""Lay out cladding elements over planar regions read from JSON."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cladding_layout import LayoutCommitError, LayoutConfig, RecordingSink, TrimeshSink, generate_layout
from cladding_layout.export import DXFExportConfig, region_layout_to_svg, result_to_dxf
from cladding_layout.io import load_regions
from cladding_layout.runs import (
    fail_run,
    finalize_run,
    open_run,
    stage_input,
    write_layout_json,
)

logger = logging.getLogger("generate_layout")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a cladding/tiling layout over planar regions"
    )
    parser.add_argument(
        "--regions", required=True, help="Path to regions JSON ({'regions': [...]})"
    )
    parser.add_argument(
        "--config", default=None, help="Path to layout options JSON (optional)"
    )
    parser.add_argument("--name", default="layout", help="Design/run name")
    parser.add_argument("--runs-dir", default="runs", help="Runs output root")
    parser.add_argument(
        "--preview", action="store_true", help="Preview run: nothing is committed"
    )
    parser.add_argument("--dxf", action="store_true", help="Export a DXF of all elements")
    parser.add_argument(
        "--svg", action="store_true", help="Export one SVG plan per laid-out region"
    )
    parser.add_argument(
        "--mesh",
        default=None,
        metavar="FORMAT",
        help="Export extruded elements as a mesh (glb, stl, obj, ...)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logs"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    run = open_run(args.runs_dir, args.name)
    inputs = {"regions": str(stage_input(run, args.regions))}
    config = LayoutConfig()
    if args.config:
        inputs["config"] = str(stage_input(run, args.config))
        config = LayoutConfig.from_json_file(inputs["config"])

    params = config.resolve()
    regions = load_regions(inputs["regions"])
    sink = TrimeshSink() if args.mesh else RecordingSink()

    try:
        result = generate_layout(regions, params, sink=sink, preview=args.preview)
    except LayoutCommitError as exc:
        fail_run(run, exc)
        print(f"Run ID: {run.run_id}")
        print(f"Status: FAILED ({exc})")
        return 1

    layout_path = write_layout_json(run, result)
    if args.dxf:
        dxf_path = run.artifact_path("layout.dxf")
        result_to_dxf(result, str(dxf_path), DXFExportConfig(units=params.working_unit))
        run.artifacts["dxf"] = str(dxf_path)
    if args.svg:
        run.artifacts["svg"] = [
            region_layout_to_svg(
                layout, str(run.artifact_path(f"region_{layout.region_index:03d}.svg"))
            )
            for layout in result.regions
            if layout.status == "ok"
        ]
    if args.mesh:
        if len(sink):
            mesh_path = run.artifact_path(f"elements.{args.mesh.lstrip('.')}")
            run.artifacts["mesh"] = sink.export(mesh_path)
        else:
            logger.warning("No elements created, skipping mesh export")

    status = "preview" if args.preview else "ok"
    metrics = finalize_run(run, result, params, status, inputs=inputs)
    counts = metrics["counts"]

    print(f"Run ID: {run.run_id}")
    print(f"Run dir: {run.run_dir}")
    print(f"Status: {status.upper()}")
    print(f"Regions: {counts['regions_laid_out']}/{counts['regions']} laid out")
    print(f"Elements: {counts['elements_created']} ({counts['elements_trimmed']} trimmed)")
    print(f"Diagnostics: {counts['diagnostics']}")
    print(f"Layout JSON: {layout_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
