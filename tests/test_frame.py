"""Tests for layout frame construction."""
import numpy as np
import pytest

from cladding_layout.frame import build_frame, rect_to_world
from cladding_layout.regions import make_region


def _assert_orthonormal(frame, with_normal=True):
    for axis in (frame.x_axis, frame.y_axis, frame.normal):
        assert np.linalg.norm(axis) == pytest.approx(1.0)
    assert float(frame.x_axis @ frame.y_axis) == pytest.approx(0.0, abs=1e-9)
    if not with_normal:
        return
    assert float(frame.x_axis @ frame.normal) == pytest.approx(0.0, abs=1e-9)
    assert float(frame.y_axis @ frame.normal) == pytest.approx(0.0, abs=1e-9)


class TestForcedHorizontal:
    """Axis snapping for floors and walls."""

    def test_floor_uses_world_xy(self, floor_region):
        frame = build_frame(floor_region)
        assert frame.orientation == "horizontal"
        np.testing.assert_allclose(frame.x_axis, [1, 0, 0])
        np.testing.assert_allclose(frame.y_axis, [0, 1, 0])
        np.testing.assert_allclose(frame.origin, [500, 500, 0])

    def test_front_wall_uses_world_xz(self, front_wall):
        frame = build_frame(front_wall)
        assert frame.orientation == "front_back_wall"
        np.testing.assert_allclose(frame.x_axis, [1, 0, 0])
        np.testing.assert_allclose(frame.y_axis, [0, 0, 1])

    def test_side_wall_uses_world_yz(self, side_wall):
        frame = build_frame(side_wall)
        assert frame.orientation == "side_wall"
        np.testing.assert_allclose(frame.x_axis, [0, 1, 0])
        np.testing.assert_allclose(frame.y_axis, [0, 0, 1])

    def test_angled_face_keeps_rows_level(self):
        region = make_region([(1000, 0, 0), (0, 1000, 0), (0, 0, 1000)])
        frame = build_frame(region)
        assert frame.orientation == "angled"
        _assert_orthonormal(frame)
        assert frame.x_axis[2] == pytest.approx(0.0, abs=1e-12)
        assert frame.y_axis[2] > 0.0
        np.testing.assert_allclose(frame.x_axis, [2 ** -0.5, -(2 ** -0.5), 0], atol=1e-12)


class TestEdgeOriented:
    """Longest-edge frames when forced horizontal alignment is off."""

    def test_longest_edge_drives_x(self):
        region = make_region([(0, 0, 0), (300, 400, 0), (220, 460, 0), (-80, 60, 0)])
        frame = build_frame(region, force_horizontal=False)
        assert frame.orientation == "face_oriented"
        np.testing.assert_allclose(frame.x_axis, [0.6, 0.8, 0], atol=1e-12)
        np.testing.assert_allclose(frame.y_axis, [-0.8, 0.6, 0], atol=1e-12)
        _assert_orthonormal(frame)


class TestOrigin:
    """Origin placement and coordinate mapping."""

    def test_cavity_offset_moves_origin(self, floor_region):
        frame = build_frame(floor_region, offset=np.array([0.0, 0.0, 35.0]))
        np.testing.assert_allclose(frame.origin, [500, 500, 35])

    def test_local_coordinates_of_boundary(self, floor_region):
        frame = build_frame(floor_region)
        local = frame.to_local(floor_region.boundary)
        np.testing.assert_allclose(local.min(axis=0), [-500, -500])
        np.testing.assert_allclose(local.max(axis=0), [500, 500])
        np.testing.assert_allclose(frame.to_world(local), floor_region.boundary, atol=1e-9)

    def test_rect_to_world(self, floor_region):
        frame = build_frame(floor_region)
        corners = rect_to_world(frame, -500, 50, 300, 500)
        np.testing.assert_allclose(corners[0], [0, 550, 0])
        np.testing.assert_allclose(corners[2], [800, 1000, 0])

    @pytest.mark.parametrize(
        "normal",
        [(0, 0, -1), (0.3, 0.2, 0.93), (-0.5, 0.5, 0.1), (0.1, -0.9, 0.2)],
    )
    def test_axes_are_orthonormal(self, normal):
        n = np.asarray(normal, dtype=float)
        n /= np.linalg.norm(n)
        # Any planar triangle with that normal.
        u = np.cross(n, [0.0, 0.0, 1.0] if abs(n[2]) < 0.9 else [1.0, 0.0, 0.0])
        u /= np.linalg.norm(u)
        v = np.cross(n, u)
        region = make_region([np.zeros(3), 1000 * u, 1000 * v], normal=n)
        # Snapped world axes are only guaranteed orthogonal to each other.
        _assert_orthonormal(build_frame(region, force_horizontal=True), with_normal=False)
        _assert_orthonormal(build_frame(region, force_horizontal=False))
