"""Tests for the ring layout."""

import math

import numpy as np
import pytest

from globe.rings import generate_rings, ring_centerline, ring_orientation


class TestGenerateRings:
    """Tests for generate_rings()."""

    def test_count_matches_num_stripes(self):
        for n in [0, 1, 5, 8, 20]:
            assert len(generate_rings(n, 0.04, 2.0)) == n

    def test_zero_stripes_is_empty(self):
        assert generate_rings(0, 0.04, 2.0) == ()

    def test_eight_stripes_fan_across_half_turn(self):
        rings = generate_rings(8, 0.04, 2.0)
        expected = [i * math.pi / 8 for i in range(8)]
        assert [r.tilt_angle for r in rings] == pytest.approx(expected)
        assert [r.index for r in rings] == list(range(8))

    def test_tilts_strictly_increasing_within_half_turn(self):
        for n in [2, 3, 7, 20]:
            tilts = [r.tilt_angle for r in generate_rings(n, 0.04, 2.0)]
            assert all(a < b for a, b in zip(tilts, tilts[1:]))
            assert tilts[0] == 0.0
            assert tilts[-1] == pytest.approx(math.pi * (n - 1) / n)

    def test_ring_dimensions(self):
        for ring in generate_rings(4, 0.07, 3.0):
            assert ring.major_radius == 3.0
            assert ring.minor_radius == 0.07
            assert ring.twist_angle == pytest.approx(math.pi / 4)
            assert ring.radial_segments == 16
            assert ring.tubular_segments == 100

    def test_deterministic(self):
        assert generate_rings(8, 0.04, 2.0) == generate_rings(8, 0.04, 2.0)

    @pytest.mark.parametrize("radius,thickness", [(0.0, 0.04), (-1.0, 0.04), (2.0, 0.0)])
    def test_rejects_non_positive_dimensions(self, radius, thickness):
        with pytest.raises(ValueError):
            generate_rings(4, thickness, radius)

    def test_rejects_negative_count(self):
        with pytest.raises(ValueError):
            generate_rings(-1, 0.04, 2.0)


class TestRingGeometry:
    """Tests for ring orientation and centerline sampling."""

    def test_centerline_lies_on_sphere(self):
        for ring in generate_rings(6, 0.04, 2.0):
            pts = ring_centerline(ring)
            assert pts.shape == (ring.tubular_segments + 1, 3)
            assert np.allclose(np.linalg.norm(pts, axis=1), 2.0)

    def test_centerline_is_closed(self):
        ring = generate_rings(3, 0.04, 2.0)[1]
        pts = ring_centerline(ring, samples=32)
        assert np.allclose(pts[0], pts[-1])

    def test_orientation_is_rotation(self):
        ring = generate_rings(5, 0.04, 2.0)[3]
        m = ring_orientation(ring)
        assert np.allclose(m @ m.T, np.eye(3))
        assert np.linalg.det(m) == pytest.approx(1.0)

    def test_first_ring_is_not_on_equator(self):
        # Untilted ring still carries the twist, so it is not the XZ plane
        pts = ring_centerline(generate_rings(4, 0.04, 2.0)[0])
        assert np.ptp(pts[:, 1]) > 1.0
