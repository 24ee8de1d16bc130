"""
DXF and SVG export of layout results.

DXF: one 3DFACE per element on two layers
  - ELEMENTS (white, ACI 7): full-size elements
  - TRIMMED (red, ACI 1): elements cut by the region boundary
Format: R2010, units follow the working unit of the geometry.

SVG: a single region's frame-local plan, one rectangle per element.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

import ezdxf
import svgwrite

from cladding_layout.contracts import LayoutResult, RegionLayout

logger = logging.getLogger(__name__)

_DXF_UNITS = {
    "mm": ezdxf.units.MM,
    "cm": ezdxf.units.CM,
    "m": ezdxf.units.M,
    "inches": ezdxf.units.IN,
    "feet": ezdxf.units.FT,
}


@dataclass
class DXFExportConfig:
    """Configuration for DXF export."""
    elements_layer: str = "ELEMENTS"
    trimmed_layer: str = "TRIMMED"
    elements_color: int = 7  # ACI white/black
    trimmed_color: int = 1   # ACI red
    units: str = "mm"


def result_to_dxf(
    result: LayoutResult,
    filepath: str,
    config: Optional[DXFExportConfig] = None,
) -> str:
    """Export every footprint of *result* as a 3DFACE.

    Returns:
        Path to created DXF file.
    """
    if config is None:
        config = DXFExportConfig()

    doc = ezdxf.new("R2010")
    doc.units = _DXF_UNITS.get(config.units, ezdxf.units.MM)
    doc.layers.add(config.elements_layer, color=config.elements_color)
    doc.layers.add(config.trimmed_layer, color=config.trimmed_color)
    msp = doc.modelspace()

    count = 0
    for footprint in result.footprints:
        layer = config.trimmed_layer if footprint.trimmed else config.elements_layer
        msp.add_3dface(list(footprint.points_3d), dxfattribs={"layer": layer})
        count += 1

    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    doc.saveas(filepath)
    logger.info("Exported DXF with %d faces: %s", count, filepath)
    return filepath


def region_layout_to_svg(
    layout: RegionLayout,
    filepath: str,
    margin: float = 20.0,
    scale: float = 0.1,
) -> str:
    """
    Draw one region's extended bounds and element footprints in frame coordinates.

    Args:
        layout: A laid-out region (must have bounds).
        filepath: Output SVG file path
        margin: Margin around the bounds, in SVG units
        scale: Drawing units per working unit

    Returns:
        Path to created SVG file
    """
    if layout.bounds is None:
        raise ValueError(f"Region {layout.region_index} has no bounds to draw")
    bounds = layout.bounds

    canvas_width = bounds.width * scale + 2 * margin
    canvas_height = bounds.height * scale + 2 * margin

    dwg = svgwrite.Drawing(
        filepath,
        size=(f"{canvas_width}mm", f"{canvas_height}mm"),
        viewBox=f"0 0 {canvas_width} {canvas_height}",
    )
    dwg.defs.add(dwg.style("""
        .bounds { stroke: #999999; stroke-width: 0.5; stroke-dasharray: 4 2; fill: none; }
        .element { stroke: #333333; stroke-width: 0.3; fill: #d9c8a9; }
        .trimmed { stroke: #ff0000; stroke-width: 0.3; fill: #f2b8b8; }
        .label { font-size: 8px; font-family: Arial, sans-serif; fill: #333; }
    """))

    # SVG y grows downward, frame y grows upward.
    def to_svg(x: float, y: float):
        return (margin + (x - bounds.min_x) * scale, margin + (bounds.max_y - y) * scale)

    dwg.add(dwg.rect(insert=(margin, margin), size=(bounds.width * scale, bounds.height * scale),
                     class_="bounds"))
    for footprint in layout.footprints:
        min_x, min_y, max_x, max_y = footprint.local_rect
        left, top = to_svg(min_x, max_y)
        dwg.add(dwg.rect(
            insert=(left, top),
            size=((max_x - min_x) * scale, (max_y - min_y) * scale),
            class_="trimmed" if footprint.trimmed else "element",
        ))

    title = layout.name or f"region {layout.region_index}"
    dwg.add(dwg.text(
        f"{title}: {layout.elements_created} elements, {layout.elements_trimmed} trimmed",
        insert=(margin, margin * 0.6),
        class_="label",
    ))

    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    dwg.save()
    logger.info("Exported SVG: %s", filepath)
    return filepath
