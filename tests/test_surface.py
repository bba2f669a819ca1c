"""Tests for the parametric sphere sampler."""

import math

import numpy as np
import pytest

from globe.state import Point3
from globe.surface import sample_sphere, sphere_vertices, wireframe_lines


class TestSampleSphere:
    """Tests for sample_sphere()."""

    def test_stride_one_returns_full_grid(self):
        points = sample_sphere(2.0, 24, 1)
        assert len(points) == 25 * 25

    def test_stride_keeps_every_nth_emitted_vertex(self):
        full = sample_sphere(2.0, 12, 1)
        strided = sample_sphere(2.0, 12, 4)
        assert list(strided) == list(full[::4])
        assert len(strided) == math.ceil(len(full) / 4)

    def test_points_lie_on_sphere(self):
        for p in sample_sphere(1.5, 10, 3):
            assert p.length() == pytest.approx(1.5)

    def test_first_row_is_north_pole(self):
        points = sample_sphere(2.0, 8, 1)
        assert all(p.y == 2.0 for p in points[:9])
        assert all(p.y == -2.0 for p in points[-9:])

    def test_pole_duplicates_are_kept(self):
        points = sample_sphere(2.0, 8, 1)
        north = points[:9]
        assert len(north) == 9
        assert all(p == pytest.approx(Point3(0.0, 2.0, 0.0)) for p in north)

    def test_huge_stride_leaves_single_point(self):
        assert len(sample_sphere(2.0, 2, 100)) == 1

    def test_deterministic(self):
        assert sample_sphere(2.0, 24, 3) == sample_sphere(2.0, 24, 3)

    @pytest.mark.parametrize("radius,resolution,stride", [(0.0, 8, 1), (2.0, 1, 1), (2.0, 8, 0)])
    def test_rejects_bad_inputs(self, radius, resolution, stride):
        with pytest.raises(ValueError):
            sample_sphere(radius, resolution, stride)


class TestSphereGeometry:
    """Tests for the raw vertex grid and wireframe lines."""

    def test_vertex_count(self):
        assert len(sphere_vertices(1.0, 6, 4)) == 7 * 5

    def test_wireframe_line_count(self):
        lines = wireframe_lines(2.0, 8)
        assert len(lines) == 7 + 8

    def test_wireframe_lines_on_sphere(self):
        for line in wireframe_lines(2.0, 6, samples=16):
            assert np.allclose(np.linalg.norm(line, axis=1), 2.0)
