"""Run folders for layout runs.

Each run gets ``<runs_root>/<UTC stamp>_<slug>/`` holding the staged inputs,
an ``artifacts/`` directory, and ``metrics.json``, ``summary.md`` and
``manifest.json`` describing the layout that was produced. ``latest`` in the
runs root points at the most recent finished run.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from cladding_layout.config import LayoutParameters
from cladding_layout.contracts import LayoutResult
from cladding_layout.io import result_to_payload

logger = logging.getLogger(__name__)


@dataclass
class LayoutRun:
    run_id: str
    run_dir: Path
    runs_root: Path
    name: str
    started: float = field(default_factory=time.perf_counter)
    artifacts: Dict[str, Any] = field(default_factory=dict)

    @property
    def input_dir(self) -> Path:
        return self.run_dir / "input"

    @property
    def artifacts_dir(self) -> Path:
        return self.run_dir / "artifacts"

    @property
    def metrics_path(self) -> Path:
        return self.run_dir / "metrics.json"

    @property
    def summary_path(self) -> Path:
        return self.run_dir / "summary.md"

    @property
    def manifest_path(self) -> Path:
        return self.run_dir / "manifest.json"

    def elapsed(self) -> float:
        return time.perf_counter() - self.started

    def artifact_path(self, filename: str) -> Path:
        return self.artifacts_dir / filename


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.strip().lower())
    return slug.strip("-") or "layout"


def open_run(runs_root: str, name: str) -> LayoutRun:
    """Create a fresh run folder; same-second runs get a numeric suffix."""
    root = Path(runs_root)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    base = f"{stamp}_{slugify(name)}"
    run_dir = root / base
    suffix = 1
    while run_dir.exists():
        suffix += 1
        run_dir = root / f"{base}_{suffix}"

    run = LayoutRun(run_id=run_dir.name, run_dir=run_dir, runs_root=root, name=name)
    run.input_dir.mkdir(parents=True)
    run.artifacts_dir.mkdir()
    logger.debug("Opened run %s", run.run_dir)
    return run


def stage_input(run: LayoutRun, path: str) -> Path:
    """Copy an input file into the run so the run can be replayed."""
    src = Path(path)
    dst = run.input_dir / src.name
    if src.resolve() != dst.resolve():
        shutil.copy2(src, dst)
    return dst


def write_layout_json(run: LayoutRun, result: LayoutResult) -> Path:
    path = run.artifact_path("layout.json")
    _write_json(path, result_to_payload(result))
    run.artifacts["layout_json"] = str(path)
    return path


def layout_metrics(run: LayoutRun, result: LayoutResult, status: str) -> Dict[str, Any]:
    return {
        "run_id": run.run_id,
        "status": status,
        "elapsed_s": round(run.elapsed(), 3),
        "counts": result.counts(),
        "regions": [
            {
                "region_index": layout.region_index,
                "name": layout.name,
                "status": layout.status,
                "corner_type": layout.corner_type.value if layout.corner_type else None,
                "elements_created": layout.elements_created,
                "elements_trimmed": layout.elements_trimmed,
            }
            for layout in result.regions
        ],
    }


def parameters_block(params: LayoutParameters) -> Dict[str, Any]:
    """The resolved options recorded in the manifest, in working units."""
    return {
        "lengths": list(params.lengths),
        "heights": list(params.heights),
        "joint_length": params.joint_length,
        "joint_width": params.joint_width,
        "thickness": params.thickness,
        "cavity_distance": params.cavity_distance,
        "pattern_style": params.pattern_style.value,
        "anchor": params.anchor.value,
        "synchronize": params.synchronize,
        "small_piece_removal": params.small_piece_removal,
        "min_piece_size": params.min_piece_size,
        "working_unit": params.working_unit,
    }


def build_summary(run_id: str, status: str, elapsed_s: float, counts: Dict[str, int]) -> str:
    return "\n".join(
        [
            f"# Run {run_id}",
            "",
            f"- Status: **{status.upper()}**",
            f"- Duration: {elapsed_s:.2f}s",
            f"- Regions laid out: {counts['regions_laid_out']}/{counts['regions']}",
            f"- Elements: {counts['elements_created']} ({counts['elements_trimmed']} trimmed)",
            f"- Diagnostics: {counts['diagnostics']}",
            "",
        ]
    )


def finalize_run(
    run: LayoutRun,
    result: LayoutResult,
    params: LayoutParameters,
    status: str,
    inputs: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Write metrics, summary and manifest, then move ``latest`` to this run.

    Returns:
        The metrics payload.
    """
    metrics = layout_metrics(run, result, status)
    _write_json(run.metrics_path, metrics)
    run.summary_path.write_text(
        build_summary(run.run_id, status, metrics["elapsed_s"], metrics["counts"]),
        encoding="utf-8",
    )
    _write_json(run.manifest_path, {
        "run_id": run.run_id,
        "name": run.name,
        "created_utc": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "status": status,
        "preview": result.preview,
        "inputs": dict(inputs or {}),
        "config": parameters_block(params),
        "artifacts": {
            **run.artifacts,
            "metrics": str(run.metrics_path),
            "summary": str(run.summary_path),
        },
    })
    update_latest_pointer(run)
    logger.info("Run %s finished: %s", run.run_id, status)
    return metrics


def fail_run(run: LayoutRun, error: Exception) -> None:
    """Record a run whose layout could not be committed."""
    _write_json(run.metrics_path, {
        "run_id": run.run_id,
        "status": "failed",
        "elapsed_s": round(run.elapsed(), 3),
        "error": str(error),
    })
    logger.error("Run %s failed: %s", run.run_id, error)


def update_latest_pointer(run: LayoutRun) -> None:
    latest = run.runs_root / "latest"
    if latest.is_symlink() or latest.is_file():
        latest.unlink()
    elif latest.exists():
        shutil.rmtree(latest)

    try:
        latest.symlink_to(os.path.relpath(run.run_dir, run.runs_root))
    except OSError:
        # No symlinks on this filesystem: leave a pointer file instead.
        latest.mkdir()
        (latest / "latest_run.txt").write_text(run.run_id, encoding="utf-8")


def _write_json(path: Path, payload: Dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
