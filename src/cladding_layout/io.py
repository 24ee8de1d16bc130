"""JSON input of regions and JSON output of layout results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from cladding_layout.contracts import ElementFootprint, LayoutResult, RegionLayout

_REGION_KEYS = ("boundary", "normal", "transform", "name")


def load_regions(path) -> List[Dict[str, Any]]:
    """Read region records from a JSON document.

    Expected shape::

        {"regions": [{"boundary": [[x, y, z], ...],
                      "normal": [x, y, z],          # optional
                      "transform": [[...] x 4],     # optional 4x4
                      "name": "wall_a"}]}           # optional

    A bare list of region records is accepted too. Records are returned as
    ``make_region`` keyword mappings; geometric validation happens in the
    layout run so that one bad region is reported rather than fatal.

    Raises:
        ValueError: the document is not a region list.
    """
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    records = payload.get("regions") if isinstance(payload, dict) else payload
    if not isinstance(records, list):
        raise ValueError(f"{path}: expected a 'regions' list")

    regions: List[Dict[str, Any]] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(f"{path}: region {index} is not an object")
        region = {key: record[key] for key in _REGION_KEYS if record.get(key) is not None}
        region.setdefault("name", f"region_{index}")
        region.setdefault("boundary", None)
        regions.append(region)
    return regions


def result_to_payload(result: LayoutResult) -> Dict[str, Any]:
    """JSON-serializable form of a layout result."""
    return {
        "preview": result.preview,
        "counts": result.counts(),
        "regions": [_region_payload(layout) for layout in result.regions],
        "diagnostics": [
            {
                "code": d.code,
                "severity": d.severity,
                "message": d.message,
                "region_index": d.region_index,
                "value": d.value,
            }
            for d in result.diagnostics
        ],
    }


def _region_payload(layout: RegionLayout) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "region_index": layout.region_index,
        "name": layout.name,
        "status": layout.status,
        "corner_type": layout.corner_type.value if layout.corner_type else None,
        "elements_created": layout.elements_created,
        "elements_trimmed": layout.elements_trimmed,
        "grid_size": list(layout.grid_size),
        "start_point": list(layout.start_point) if layout.start_point else None,
    }
    if layout.cavity is not None:
        payload["cavity"] = {
            "magnitude": layout.cavity.magnitude,
            "extension": layout.cavity.extension,
            "offset": [round(float(v), 6) for v in layout.cavity.offset],
        }
    if layout.frame is not None:
        payload["frame"] = {
            "orientation": layout.frame.orientation,
            "origin": _rounded(layout.frame.origin),
            "x_axis": _rounded(layout.frame.x_axis),
            "y_axis": _rounded(layout.frame.y_axis),
            "normal": _rounded(layout.frame.normal),
        }
    if layout.bounds is not None:
        payload["bounds"] = [round(v, 6) for v in layout.bounds.as_tuple()]
    payload["footprints"] = [_footprint_payload(fp) for fp in layout.footprints]
    return payload


def _footprint_payload(footprint: ElementFootprint) -> Dict[str, Any]:
    return {
        "index": footprint.index,
        "row": footprint.row,
        "column": footprint.column,
        "trimmed": footprint.trimmed,
        "nominal_size": list(footprint.nominal_size),
        "local_rect": [round(v, 6) for v in footprint.local_rect],
        "points_3d": [_rounded(p) for p in footprint.points_3d],
    }


def _rounded(values) -> List[float]:
    return [round(float(v), 6) for v in values]
