"""Element sinks: the "create a filled rectangle" side of the layout.

The orchestrator hands every accepted footprint to a sink. A sink reports
per-element failure by returning False (or raising ElementCreationError),
groups its work per region so a failed region can be rolled back, and
finalizes a committing run with ``commit``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import trimesh

from cladding_layout.contracts import ElementFootprint

logger = logging.getLogger(__name__)

ElementKey = Tuple[int, int]  # (region_index, element index)


@dataclass
class SinkElement:
    footprint: ElementFootprint
    thickness: float
    appearance: str


class ElementSink:
    """Base sink. Subclasses implement ``add_element``."""

    def begin_region(self, region_index: int) -> None:
        pass

    def add_element(self, footprint: ElementFootprint, thickness: float, appearance: str) -> bool:
        raise NotImplementedError

    def set_appearance(self, key: ElementKey, appearance: str) -> None:
        pass

    def rollback_region(self, region_index: int) -> None:
        pass

    def commit(self) -> None:
        pass

    def abort(self) -> None:
        pass

    def clear(self) -> None:
        pass


class RecordingSink(ElementSink):
    """Keeps materialized elements in memory, keyed by region and index."""

    def __init__(self):
        self.elements: Dict[ElementKey, SinkElement] = {}
        self.committed = False
        self.aborted = False

    def add_element(self, footprint: ElementFootprint, thickness: float, appearance: str) -> bool:
        key = (footprint.region_index, footprint.index)
        self.elements[key] = SinkElement(footprint, float(thickness), appearance)
        return True

    def set_appearance(self, key: ElementKey, appearance: str) -> None:
        element = self.elements.get(key)
        if element is not None:
            element.appearance = appearance

    def rollback_region(self, region_index: int) -> None:
        dropped = [key for key in self.elements if key[0] == region_index]
        for key in dropped:
            del self.elements[key]
        logger.debug("Rolled back %d elements of region %d", len(dropped), region_index)

    def commit(self) -> None:
        self.committed = True

    def abort(self) -> None:
        self.aborted = True
        self.elements.clear()

    def clear(self) -> None:
        self.elements.clear()
        self.committed = False

    def appearances(self) -> List[str]:
        return [element.appearance for element in self.elements.values()]

    def __len__(self) -> int:
        return len(self.elements)


class TrimeshSink(RecordingSink):
    """Builds one trimesh solid per element, extruded along the outward normal.

    A zero thickness gives a flat two-triangle face instead of a box.
    """

    def __init__(self):
        super().__init__()
        self.meshes: Dict[ElementKey, trimesh.Trimesh] = {}

    def add_element(self, footprint: ElementFootprint, thickness: float, appearance: str) -> bool:
        mesh = element_mesh(footprint, thickness)
        if mesh is None:
            return False
        super().add_element(footprint, thickness, appearance)
        self.meshes[(footprint.region_index, footprint.index)] = mesh
        return True

    def rollback_region(self, region_index: int) -> None:
        super().rollback_region(region_index)
        for key in [k for k in self.meshes if k[0] == region_index]:
            del self.meshes[key]

    def abort(self) -> None:
        super().abort()
        self.meshes.clear()

    def clear(self) -> None:
        super().clear()
        self.meshes.clear()

    def scene(self) -> trimesh.Scene:
        scene = trimesh.Scene()
        for (region_index, index), mesh in sorted(self.meshes.items()):
            scene.add_geometry(mesh, node_name=f"region{region_index}_element{index}")
        return scene

    def export(self, path, file_type: Optional[str] = None) -> str:
        """Write all elements as a mesh scene (format from suffix or *file_type*)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if not self.meshes:
            raise ValueError("No elements to export")
        combined = trimesh.util.concatenate([self.meshes[k] for k in sorted(self.meshes)])
        combined.export(str(path), file_type=file_type)
        logger.info("Exported %d element meshes: %s", len(self.meshes), path)
        return str(path)


def element_mesh(footprint: ElementFootprint, thickness: float) -> Optional[trimesh.Trimesh]:
    """Mesh for one footprint: a quad, or a box when *thickness* > 0."""
    outer = np.asarray(footprint.points_3d, dtype=float)
    if footprint.width <= 0.0 or footprint.height <= 0.0:
        return None
    quad = np.array([[0, 1, 2], [0, 2, 3]], dtype=int)
    if thickness <= 0.0:
        return trimesh.Trimesh(vertices=outer, faces=quad, process=False)

    # Outer face sits on the layout plane, inner face toward the surface.
    inner = outer - np.asarray(footprint.normal, dtype=float) * float(thickness)
    vertices = np.vstack([outer, inner])
    faces = [quad, quad[:, ::-1] + 4]
    sides = []
    for k in range(4):
        k_next = (k + 1) % 4
        sides.append([k, k + 4, k_next])
        sides.append([k_next, k + 4, k_next + 4])
    faces.append(np.array(sides, dtype=int))
    return trimesh.Trimesh(vertices=vertices, faces=np.vstack(faces), process=False)
