"""Tests for JSON region input and result payloads."""
import json

import pytest

from cladding_layout.io import load_regions, result_to_payload
from cladding_layout.pipeline import generate_layout


class TestLoadRegions:
    """Region documents."""

    def test_loads_records(self, regions_file):
        regions = load_regions(regions_file)
        assert [r["name"] for r in regions] == ["floor", "wall"]
        assert regions[0]["normal"] == [0, 0, 1]
        assert "normal" not in regions[1]

    def test_bare_list_and_default_names(self, tmp_path):
        path = tmp_path / "regions.json"
        path.write_text(json.dumps([{"boundary": [[0, 0, 0], [1, 0, 0], [1, 1, 0]]}]))
        regions = load_regions(path)
        assert regions[0]["name"] == "region_0"

    def test_rejects_non_list(self, tmp_path):
        path = tmp_path / "regions.json"
        path.write_text(json.dumps({"faces": []}))
        with pytest.raises(ValueError):
            load_regions(path)

    def test_missing_boundary_is_reported_by_layout(self, tmp_path, scenario_config):
        path = tmp_path / "regions.json"
        path.write_text(json.dumps({"regions": [{"name": "ghost"}]}))
        result = generate_layout(load_regions(path), scenario_config)
        assert result.regions[0].status == "skipped"
        assert result.diagnostics[0].code == "invalid_region"

    def test_wall_layout_from_file(self, regions_file, scenario_config):
        result = generate_layout(load_regions(regions_file), scenario_config)
        assert [r.status for r in result.regions] == ["ok", "ok"]
        assert result.regions[1].frame.orientation == "front_back_wall"


class TestResultPayload:
    """Serialized results."""

    def test_payload_is_json_serializable(self, regions_file, scenario_config):
        result = generate_layout(load_regions(regions_file), scenario_config)
        payload = json.loads(json.dumps(result_to_payload(result)))
        assert payload["counts"]["elements_created"] == result.elements_created
        assert payload["preview"] is False
        region = payload["regions"][0]
        assert region["corner_type"] == "internal"
        assert region["frame"]["orientation"] == "horizontal"
        assert len(region["footprints"]) == result.regions[0].elements_created
        first = region["footprints"][0]
        assert first["local_rect"] == pytest.approx([-500.0, 50.0, 300.0, 500.0])
        assert len(first["points_3d"]) == 4

    def test_skipped_region_payload(self, tmp_path, scenario_config):
        path = tmp_path / "regions.json"
        path.write_text(json.dumps({"regions": [{"boundary": [[0, 0, 0], [1, 0, 0]]}]}))
        payload = result_to_payload(generate_layout(load_regions(path), scenario_config))
        region = payload["regions"][0]
        assert region["status"] == "skipped"
        assert region["footprints"] == []
        assert payload["diagnostics"][0]["code"] == "invalid_region"
