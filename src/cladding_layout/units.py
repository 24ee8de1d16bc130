"""
Length units for cladding layout configuration.

Configured sizes are human-readable lengths in one of a handful of units;
region geometry lives in a working unit. Everything here is expressed in
millimetres per unit so any pair converts through a single ratio.
"""

from typing import List, Sequence, Tuple, Union

INCH_TO_MM = 25.4

MM_PER_UNIT = {
    "mm": 1.0,
    "cm": 10.0,
    "m": 1000.0,
    "inches": INCH_TO_MM,
    "feet": 12.0 * INCH_TO_MM,
}

UNIT_ALIASES = {
    "millimeter": "mm",
    "millimeters": "mm",
    "centimeter": "cm",
    "centimeters": "cm",
    "meter": "m",
    "meters": "m",
    "in": "inches",
    "inch": "inches",
    '"': "inches",
    "ft": "feet",
    "foot": "feet",
    "'": "feet",
}

# Element size catalog used when a configured list is empty. Imperial values
# are the plugin's rounded stock sizes rather than exact conversions.
DEFAULT_LENGTHS = {
    "mm": (800.0, 900.0, 1000.0, 1100.0, 1200.0),
    "cm": (80.0, 90.0, 100.0, 110.0, 120.0),
    "m": (0.8, 0.9, 1.0, 1.1, 1.2),
    "inches": (32.0, 36.0, 40.0, 44.0, 48.0),
    "feet": (32.0 / 12.0, 3.0, 40.0 / 12.0, 44.0 / 12.0, 4.0),
}

DEFAULT_HEIGHTS = {
    "mm": (450.0, 300.0, 150.0),
    "cm": (45.0, 30.0, 15.0),
    "m": (0.45, 0.3, 0.15),
    "inches": (18.0, 12.0, 6.0),
    "feet": (1.5, 1.0, 0.5),
}


def normalize_unit(name: str) -> str:
    """Canonical unit name, or raise ValueError for anything unknown."""
    key = str(name).strip().lower()
    key = UNIT_ALIASES.get(key, key)
    if key not in MM_PER_UNIT:
        raise ValueError(f"Unknown length unit: {name!r}")
    return key


def unit_ratio(from_unit: str, to_unit: str) -> float:
    """Factor converting a length in *from_unit* to *to_unit*."""
    return MM_PER_UNIT[normalize_unit(from_unit)] / MM_PER_UNIT[normalize_unit(to_unit)]


def mm_to(unit: str, value_mm: float) -> float:
    return value_mm / MM_PER_UNIT[normalize_unit(unit)]


def default_sizes(unit: str) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
    """(lengths, heights) stock catalog for *unit*."""
    key = normalize_unit(unit)
    return DEFAULT_LENGTHS[key], DEFAULT_HEIGHTS[key]


def parse_multi_values(value: Union[str, float, int, Sequence, None]) -> List[float]:
    """Parse a size list from ``"800;900;1000"``, a number, or a sequence.

    Non-positive and unparsable entries are dropped.
    """
    if value is None:
        return []
    if isinstance(value, (int, float)):
        items = [value]
    elif isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return []
        items = cleaned.replace(",", ";").split(";")
    else:
        items = list(value)

    values: List[float] = []
    for item in items:
        try:
            number = float(item)
        except (TypeError, ValueError):
            continue
        if number > 0:
            values.append(number)
    return values
