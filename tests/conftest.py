"""
Shared test fixtures for the cladding layout tests.
"""
import json
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cladding_layout.config import LayoutConfig
from cladding_layout.regions import make_region


SQUARE_1000 = [(0, 0, 0), (1000, 0, 0), (1000, 1000, 0), (0, 1000, 0)]


@pytest.fixture
def floor_region():
    """1000 x 1000 mm square on the XY plane, facing up."""
    return make_region(SQUARE_1000, normal=(0, 0, 1), name="floor")


@pytest.fixture
def front_wall():
    """3000 x 2400 mm wall in the XZ plane, facing -Y."""
    return make_region(
        [(0, 0, 0), (3000, 0, 0), (3000, 0, 2400), (0, 0, 2400)],
        normal=(0, -1, 0),
        name="front",
    )


@pytest.fixture
def side_wall():
    """2000 x 2400 mm wall in the YZ plane, facing +X."""
    return make_region(
        [(3000, 0, 0), (3000, 2000, 0), (3000, 2000, 2400), (3000, 0, 2400)],
        normal=(1, 0, 0),
        name="side",
    )


@pytest.fixture
def scenario_config():
    """Sequential 3x3-joint layout anchored top-left with no cavity."""
    return LayoutConfig(
        element_lengths=(800.0, 900.0, 1000.0),
        element_heights=(450.0, 300.0),
        joint_length=3.0,
        joint_width=3.0,
        cavity_distance=0.0,
        start_anchor="top_left",
        start_row_index=0,
        force_horizontal_alignment=True,
        small_piece_removal=False,
    )


@pytest.fixture
def regions_file(tmp_path):
    """JSON regions document with a floor and a wall."""
    payload = {
        "regions": [
            {"name": "floor", "boundary": [list(p) for p in SQUARE_1000], "normal": [0, 0, 1]},
            {
                "name": "wall",
                "boundary": [[0, 0, 0], [2000, 0, 0], [2000, 0, 1500], [0, 0, 1500]],
            },
        ]
    }
    path = tmp_path / "regions.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path
