"""Layout configuration: option parsing and resolution into working units."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from cladding_layout.contracts import Anchor, LayoutDiagnostic, PatternStyle, SequenceMode
from cladding_layout.errors import ConfigurationError
from cladding_layout.units import (
    default_sizes,
    mm_to,
    normalize_unit,
    parse_multi_values,
    unit_ratio,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutConfig:
    """Caller-owned layout options, in configured units unless noted."""

    element_lengths: Tuple[float, ...] = (800.0, 900.0, 1000.0, 1100.0, 1200.0)
    element_heights: Tuple[float, ...] = (450.0, 300.0, 150.0)
    thickness: float = 20.0
    joint_length: float = 3.0
    joint_width: float = 3.0
    pattern_style: str = "running_bond"
    start_anchor: str = "center"
    start_row_index: int = 2
    randomize_lengths: bool = False
    randomize_heights: bool = False
    synchronize_across_regions: bool = True
    random_seed: Optional[int] = None
    cavity_distance: float = 50.0
    preserve_corners: bool = True
    small_piece_removal: bool = True
    min_piece_size_mm: float = 150.0  # always millimetres
    force_horizontal_alignment: bool = True
    start_with_full_piece: bool = False
    units: str = "mm"
    working_unit: str = "mm"
    unit_scale: Optional[float] = None
    max_rows: int = 150
    max_columns: int = 150
    max_elements: int = 2000
    min_region_area_mm2: float = 10000.0  # 100 mm x 100 mm
    realtime_generation: bool = False
    generation_delay: float = 0.01  # seconds per placement index
    appearance: str = "cladding"

    # Messages from lenient option parsing, surfaced as diagnostics by resolve().
    option_warnings: Tuple[str, ...] = field(default=(), compare=False, repr=False)

    @classmethod
    def from_options(cls, options: Mapping[str, Any], strict: bool = False) -> "LayoutConfig":
        """Build a config from a free-form option bag.

        Keys may be snake_case, camelCase, or the legacy plugin names.
        Unknown keys are ignored; missing keys keep their defaults. With
        ``strict`` a value that cannot be interpreted raises
        ConfigurationError, otherwise it is skipped with a warning.
        """
        known = {f.name for f in fields(cls)} - {"option_warnings"}
        values: Dict[str, Any] = {}
        warnings: List[str] = []

        for raw_key, raw_value in options.items():
            key = _canonical_key(str(raw_key))
            if key not in known:
                logger.debug("Ignoring unknown layout option %r", raw_key)
                continue
            try:
                values[key] = _coerce(key, raw_value)
            except (TypeError, ValueError) as exc:
                message = f"Option {raw_key!r}={raw_value!r} ignored: {exc}"
                if strict:
                    raise ConfigurationError(message) from exc
                logger.warning(message)
                warnings.append(message)

        return cls(**values, option_warnings=tuple(warnings))

    @classmethod
    def from_json_file(cls, path, strict: bool = False) -> "LayoutConfig":
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ConfigurationError(f"Layout options in {path} must be a JSON object")
        return cls.from_options(payload, strict=strict)

    def with_options(self, **changes: Any) -> "LayoutConfig":
        return replace(self, **changes)

    def resolve(self) -> "LayoutParameters":
        """Convert to working units, applying fallbacks for unusable values."""
        defaults = type(self)()
        diagnostics = [
            LayoutDiagnostic(code="config_fallback", severity="warning", message=msg)
            for msg in self.option_warnings
        ]

        def fallback(message: str, value: Optional[float] = None) -> None:
            logger.warning(message)
            diagnostics.append(LayoutDiagnostic(
                code="config_fallback", severity="warning", message=message, value=value,
            ))

        units = _resolve_unit(self.units, "units", fallback)
        working_unit = _resolve_unit(self.working_unit, "working_unit", fallback)

        scale = unit_ratio(units, working_unit)
        if self.unit_scale is not None:
            if self.unit_scale > 0:
                scale = float(self.unit_scale)
            else:
                fallback(f"unit_scale {self.unit_scale} must be positive, using {scale:g}",
                         self.unit_scale)

        default_lengths, default_heights = default_sizes(units)
        lengths = [float(v) for v in self.element_lengths if v > 0]
        if not lengths:
            fallback(f"No positive element lengths, using defaults for {units}")
            lengths = list(default_lengths)
        heights = [float(v) for v in self.element_heights if v > 0]
        if not heights:
            fallback(f"No positive element heights, using defaults for {units}")
            heights = list(default_heights)
        heights = rotate_sequence(heights, self.start_row_index)

        thickness = _non_negative(self, defaults, "thickness", fallback)
        joint_length = _non_negative(self, defaults, "joint_length", fallback)
        joint_width = _non_negative(self, defaults, "joint_width", fallback)
        cavity_distance = _non_negative(self, defaults, "cavity_distance", fallback)
        min_piece_mm = _non_negative(self, defaults, "min_piece_size_mm", fallback)
        min_area_mm2 = _non_negative(self, defaults, "min_region_area_mm2", fallback)
        generation_delay = _non_negative(self, defaults, "generation_delay", fallback)

        caps = {}
        for name in ("max_rows", "max_columns", "max_elements"):
            value = getattr(self, name)
            if value < 1:
                fallback(f"{name} must be at least 1, using {getattr(defaults, name)}", value)
                value = getattr(defaults, name)
            caps[name] = int(value)

        try:
            pattern = PatternStyle(str(self.pattern_style).strip().lower())
        except ValueError:
            fallback(f"Unknown pattern style {self.pattern_style!r}, using running_bond")
            pattern = PatternStyle.RUNNING_BOND
        if pattern is PatternStyle.HERRINGBONE:
            fallback("herringbone is reserved and not implemented, laying out as stack_bond")

        anchor = Anchor.parse(self.start_anchor)
        if anchor.value != str(self.start_anchor).strip().lower():
            fallback(f"Unknown start anchor {self.start_anchor!r}, using center")

        # Minimum piece size is entered in mm regardless of the configured unit.
        working_per_mm = mm_to(working_unit, 1.0)
        min_piece = min_piece_mm * working_per_mm if self.small_piece_removal else 0.0
        min_area = min_area_mm2 * working_per_mm ** 2

        return LayoutParameters(
            lengths=tuple(v * scale for v in lengths),
            heights=tuple(v * scale for v in heights),
            thickness=thickness * scale,
            joint_length=joint_length * scale,
            joint_width=joint_width * scale,
            cavity_distance=cavity_distance * scale,
            pattern_style=pattern,
            anchor=anchor,
            length_mode=SequenceMode.RANDOM if self.randomize_lengths else SequenceMode.SEQUENTIAL,
            height_mode=SequenceMode.RANDOM if self.randomize_heights else SequenceMode.SEQUENTIAL,
            synchronize=bool(self.synchronize_across_regions),
            random_seed=self.random_seed,
            preserve_corners=bool(self.preserve_corners),
            small_piece_removal=bool(self.small_piece_removal),
            min_piece_size=min_piece,
            force_horizontal=bool(self.force_horizontal_alignment),
            start_with_full_piece=bool(self.start_with_full_piece),
            max_rows=caps["max_rows"],
            max_columns=caps["max_columns"],
            max_elements=caps["max_elements"],
            min_region_area=min_area,
            realtime_generation=bool(self.realtime_generation),
            generation_delay=generation_delay,
            appearance=str(self.appearance),
            units=units,
            working_unit=working_unit,
            unit_scale=scale,
            diagnostics=diagnostics,
        )


@dataclass(frozen=True)
class LayoutParameters:
    """Resolved configuration; every length is in the working unit."""

    lengths: Tuple[float, ...]
    heights: Tuple[float, ...]
    thickness: float
    joint_length: float
    joint_width: float
    cavity_distance: float
    pattern_style: PatternStyle
    anchor: Anchor
    length_mode: SequenceMode
    height_mode: SequenceMode
    synchronize: bool
    random_seed: Optional[int]
    preserve_corners: bool
    small_piece_removal: bool
    min_piece_size: float
    force_horizontal: bool
    start_with_full_piece: bool
    max_rows: int
    max_columns: int
    max_elements: int
    min_region_area: float
    realtime_generation: bool
    generation_delay: float
    appearance: str
    units: str
    working_unit: str
    unit_scale: float
    diagnostics: List[LayoutDiagnostic] = field(default_factory=list, compare=False)

    @property
    def randomized(self) -> bool:
        return SequenceMode.RANDOM in (self.length_mode, self.height_mode)

    @property
    def average_length(self) -> float:
        return sum(self.lengths) / len(self.lengths)

    @property
    def average_height(self) -> float:
        return sum(self.heights) / len(self.heights)


def rotate_sequence(values: List[float], start_index: int) -> List[float]:
    """Rotate *values* so that ``values[start_index]`` comes first."""
    if len(values) <= 1:
        return list(values)
    start = int(start_index) % len(values)
    return list(values[start:]) + list(values[:start])


# ---------------------------------------------------------------------------
# Option-bag parsing
# ---------------------------------------------------------------------------

# Legacy option names from the plugin dialogs.
_KEY_ALIASES = {
    "length": "element_lengths",
    "lengths": "element_lengths",
    "height": "element_heights",
    "heights": "element_heights",
    "pattern_type": "pattern_style",
    "pattern": "pattern_style",
    "layout_start_direction": "start_anchor",
    "start_direction": "start_anchor",
    "start_row_height_index": "start_row_index",
    "synchronize_patterns": "synchronize_across_regions",
    "enable_small_pieces_removal": "small_piece_removal",
    "min_piece_size": "min_piece_size_mm",
    "force_horizontal_layout": "force_horizontal_alignment",
    "manual_unit": "units",
    "unit": "units",
    "color_name": "appearance",
    "enable_realtime_generation": "realtime_generation",
    "randomization_seed": "random_seed",
    "seed": "random_seed",
}

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")

_TRUE_WORDS = {"true", "yes", "y", "on", "1"}
_FALSE_WORDS = {"false", "no", "n", "off", "0", ""}

_SIZE_FIELDS = {"element_lengths", "element_heights"}
_OPTIONAL_INT_FIELDS = {"random_seed"}
_OPTIONAL_FLOAT_FIELDS = {"unit_scale"}


def _canonical_key(key: str) -> str:
    snake = _CAMEL_RE.sub(r"_\1", key.strip()).lower().replace("-", "_")
    return _KEY_ALIASES.get(snake, snake)


def _coerce(key: str, value: Any) -> Any:
    if key in _SIZE_FIELDS:
        return tuple(parse_multi_values(value))
    if key in _OPTIONAL_INT_FIELDS:
        return None if value in (None, "") else int(value)
    if key in _OPTIONAL_FLOAT_FIELDS:
        return None if value in (None, "", "auto") else float(value)

    default = getattr(LayoutConfig, key)
    if isinstance(default, bool):
        return _coerce_bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return str(value)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _resolve_unit(name: str, label: str, fallback) -> str:
    if str(name).strip().lower() == "auto":
        return "mm"
    try:
        return normalize_unit(name)
    except ValueError:
        fallback(f"Unknown {label} {name!r}, using mm")
        return "mm"


def _non_negative(config: LayoutConfig, defaults: LayoutConfig, name: str, fallback) -> float:
    value = float(getattr(config, name))
    if value < 0:
        default = float(getattr(defaults, name))
        fallback(f"{name} {value:g} is negative, using {default:g}", value)
        return default
    return value

