"""Tests for layout run folders."""
import json

import pytest

from cladding_layout.pipeline import generate_layout
from cladding_layout.runs import (
    fail_run,
    finalize_run,
    open_run,
    slugify,
    stage_input,
    write_layout_json,
)


@pytest.fixture
def wall_result(front_wall, scenario_config):
    return generate_layout([front_wall], scenario_config)


class TestOpenRun:
    """Folder creation."""

    def test_slug_and_folders(self, tmp_path):
        run = open_run(str(tmp_path), "North Facade / L2")
        assert run.run_id.endswith("_north-facade-l2")
        assert run.input_dir.is_dir()
        assert run.artifacts_dir.is_dir()

    def test_same_second_runs_do_not_collide(self, tmp_path):
        first = open_run(str(tmp_path), "wall")
        second = open_run(str(tmp_path), "wall")
        assert first.run_dir != second.run_dir
        assert second.run_dir.is_dir()

    def test_empty_name(self):
        assert slugify("  ##  ") == "layout"

    def test_stage_input(self, tmp_path, regions_file):
        run = open_run(str(tmp_path / "runs"), "x")
        staged = stage_input(run, str(regions_file))
        assert staged.parent == run.input_dir
        assert staged.read_text() == regions_file.read_text()


class TestFinalizeRun:
    """Metrics, summary and manifest for a finished layout."""

    def test_writes_layout_records(self, tmp_path, wall_result, scenario_config):
        run = open_run(str(tmp_path), "wall")
        write_layout_json(run, wall_result)
        metrics = finalize_run(run, wall_result, scenario_config.resolve(), "ok",
                               inputs={"regions": "regions.json"})

        assert metrics["counts"]["elements_created"] == wall_result.elements_created
        assert metrics["regions"][0]["corner_type"] == "external"
        assert json.loads(run.metrics_path.read_text()) == metrics

        manifest = json.loads(run.manifest_path.read_text())
        assert manifest["name"] == "wall"
        assert manifest["inputs"] == {"regions": "regions.json"}
        assert manifest["config"]["lengths"] == [800.0, 900.0, 1000.0]
        assert manifest["config"]["anchor"] == "top_left"
        assert "layout_json" in manifest["artifacts"]

        summary = run.summary_path.read_text()
        assert f"Elements: {wall_result.elements_created}" in summary
        assert (tmp_path / "latest").exists()

    def test_latest_moves_to_newest_run(self, tmp_path, wall_result, scenario_config):
        params = scenario_config.resolve()
        finalize_run(open_run(str(tmp_path), "a"), wall_result, params, "ok")
        newest = open_run(str(tmp_path), "b")
        finalize_run(newest, wall_result, params, "preview")
        latest = tmp_path / "latest"
        if latest.is_symlink():
            assert latest.resolve() == newest.run_dir.resolve()
        else:
            assert (latest / "latest_run.txt").read_text() == newest.run_id

    def test_fail_run(self, tmp_path):
        run = open_run(str(tmp_path), "wall")
        fail_run(run, RuntimeError("transaction lost"))
        metrics = json.loads(run.metrics_path.read_text())
        assert metrics["status"] == "failed"
        assert metrics["error"] == "transaction lost"
        assert not run.manifest_path.exists()
