"""Ring ("stripe") layout around the sphere."""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from globe.projection import euler_xyz
from globe.state import RingSpec
from config import settings

logger = logging.getLogger(__name__)


def generate_rings(
    num_stripes: int,
    ring_thickness: float,
    sphere_radius: float,
    radial_segments: Optional[int] = None,
    tubular_segments: Optional[int] = None,
    twist: Optional[float] = None,
) -> tuple[RingSpec, ...]:
    """
    Lay out ``num_stripes`` rings fanned evenly across a half-turn.

    Ring i is tilted by i·π/num_stripes about X and twisted by a fixed
    angle (π/4 by default) about Z, so no ring sits on the equator plane
    unless the twist is zero. Each ring hugs the sphere: its major radius
    is ``sphere_radius`` and its tube radius is ``ring_thickness``.

    Raises:
        ValueError: negative count or non-positive radius/thickness.
    """
    if num_stripes < 0:
        raise ValueError(f"num_stripes must be >= 0, got {num_stripes}")
    if sphere_radius <= 0:
        raise ValueError(f"sphere_radius must be > 0, got {sphere_radius}")
    if ring_thickness <= 0:
        raise ValueError(f"ring_thickness must be > 0, got {ring_thickness}")

    if num_stripes == 0:
        return ()

    radial_segments = radial_segments or settings.RING_RADIAL_SEGMENTS
    tubular_segments = tubular_segments or settings.RING_TUBULAR_SEGMENTS
    twist = settings.RING_TWIST if twist is None else twist

    rings = tuple(
        RingSpec(
            index=i,
            tilt_angle=(i * math.pi) / num_stripes,
            twist_angle=twist,
            major_radius=sphere_radius,
            minor_radius=ring_thickness,
            radial_segments=radial_segments,
            tubular_segments=tubular_segments,
        )
        for i in range(num_stripes)
    )
    logger.debug("Generated %d rings (radius=%s, tube=%s)", len(rings), sphere_radius, ring_thickness)
    return rings


def ring_orientation(ring: RingSpec) -> np.ndarray:
    """Rotation taking the ring from the XY plane to its placed orientation."""
    return euler_xyz(ring.tilt_angle, 0.0, ring.twist_angle)


def ring_centerline(ring: RingSpec, samples: Optional[int] = None) -> np.ndarray:
    """
    Points along the ring's tube centre, closed (first point repeated).

    Returns:
        Array of shape (samples + 1, 3) in model space.
    """
    samples = samples or ring.tubular_segments
    t = np.linspace(0.0, 2.0 * math.pi, samples + 1)
    flat = np.stack(
        [ring.major_radius * np.cos(t), ring.major_radius * np.sin(t), np.zeros_like(t)],
        axis=1,
    )
    return flat @ ring_orientation(ring).T
