"""Tests for corner classification and cavity offsets."""
import numpy as np
import pytest

from cladding_layout.cavity import classify_corner, compute_cavity, count_perpendicular
from cladding_layout.contracts import CornerType

UP = np.array([0.0, 0.0, 1.0])


class TestClassifyCorner:
    """Perpendicular-sibling heuristic."""

    def test_no_siblings_is_external(self):
        assert classify_corner(UP, []) is CornerType.EXTERNAL

    def test_parallel_sibling_is_external(self):
        assert classify_corner(UP, [np.array([0.0, 0.0, -1.0])]) is CornerType.EXTERNAL

    def test_perpendicular_sibling_is_internal(self):
        assert classify_corner(UP, [np.array([1.0, 0.0, 0.0])]) is CornerType.INTERNAL

    def test_threshold(self):
        near = np.array([np.sqrt(1 - 0.05 ** 2), 0.0, 0.05])
        far = np.array([np.sqrt(1 - 0.2 ** 2), 0.0, 0.2])
        assert classify_corner(UP, [near]) is CornerType.INTERNAL
        assert classify_corner(UP, [far]) is CornerType.EXTERNAL

    def test_count(self):
        siblings = [np.array([1.0, 0, 0]), np.array([0, 1.0, 0]), UP]
        assert count_perpendicular(UP, siblings) == 2

    def test_distance_is_not_considered(self):
        """Far-apart perpendicular regions still count as a corner."""
        assert classify_corner(UP, [np.array([0.0, -1.0, 0.0])]) is CornerType.INTERNAL


class TestComputeCavity:
    """Cavity and extension factors."""

    def test_internal_factors(self):
        cavity = compute_cavity(UP, 50.0, CornerType.INTERNAL)
        assert cavity.magnitude == pytest.approx(35.0)
        assert cavity.extension == pytest.approx(1.0)
        np.testing.assert_allclose(cavity.offset, [0, 0, 35])

    def test_external_factors(self):
        cavity = compute_cavity(UP, 50.0, CornerType.EXTERNAL)
        assert cavity.magnitude == pytest.approx(50.0)
        assert cavity.extension == pytest.approx(2.5)

    def test_preserve_corners_off(self):
        cavity = compute_cavity(UP, 50.0, CornerType.EXTERNAL, preserve_corners=False)
        assert cavity.magnitude == pytest.approx(50.0)
        assert cavity.extension == 0.0

    def test_zero_cavity_has_no_extension(self):
        cavity = compute_cavity(UP, 0.0, CornerType.EXTERNAL)
        assert cavity.magnitude == 0.0
        assert cavity.extension == 0.0
        np.testing.assert_allclose(cavity.offset, [0, 0, 0])

    def test_offset_follows_unnormalized_normal(self):
        cavity = compute_cavity(np.array([0.0, -4.0, 0.0]), 10.0, CornerType.EXTERNAL)
        np.testing.assert_allclose(cavity.offset, [0, -10, 0])

    def test_internal_corner_scenario(self):
        siblings = [np.array([1.0, 0.0, 0.0]), np.array([0.0, 0.0, 1.0])]
        corner = classify_corner(UP, siblings)
        cavity = compute_cavity(UP, 50.0, corner)
        assert corner is CornerType.INTERNAL
        assert cavity.magnitude == pytest.approx(35.0)
