"""
Parametric sphere sampling.

The vertex grid matches the usual UV-sphere construction: for each of
``height_segments + 1`` latitude rows (north pole to south pole) emit
``width_segments + 1`` longitude vertices. Pole rows and the longitude
seam therefore contain coincident vertices; they are kept as-is.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from globe.state import Point3

logger = logging.getLogger(__name__)


def sphere_vertices(radius: float, width_segments: int, height_segments: int) -> list[Point3]:
    """All grid vertices of a UV sphere, in emission order."""
    vertices: list[Point3] = []
    for iy in range(height_segments + 1):
        v = iy / height_segments
        theta = v * math.pi
        sin_theta = math.sin(theta)
        cos_theta = math.cos(theta)
        for ix in range(width_segments + 1):
            u = ix / width_segments
            phi = u * 2.0 * math.pi
            vertices.append(
                Point3(
                    -radius * math.cos(phi) * sin_theta,
                    radius * cos_theta,
                    radius * math.sin(phi) * sin_theta,
                )
            )
    return vertices


def sample_sphere(radius: float, angular_resolution: int, stride: int) -> tuple[Point3, ...]:
    """
    Keep every ``stride``-th vertex of a resolution × resolution sphere grid.

    Stride counts emitted vertices, not vertices per row, so the result
    follows grid traversal order. ``stride=1`` returns every vertex.

    Raises:
        ValueError: non-positive radius, resolution < 2 or stride < 1.
    """
    if radius <= 0:
        raise ValueError(f"radius must be > 0, got {radius}")
    if angular_resolution < 2:
        raise ValueError(f"angular_resolution must be >= 2, got {angular_resolution}")
    if stride < 1:
        raise ValueError(f"stride must be >= 1, got {stride}")

    vertices = sphere_vertices(radius, angular_resolution, angular_resolution)
    sampled = tuple(vertices[::stride])
    logger.debug("Sampled %d of %d sphere vertices (stride=%d)", len(sampled), len(vertices), stride)
    return sampled


def wireframe_lines(radius: float, segments: int, samples: int = 64) -> list[np.ndarray]:
    """
    Latitude and longitude polylines of a wireframe sphere.

    Returns one (k, 3) array per line: ``segments - 1`` parallels (the
    poles are points, not lines) followed by ``segments`` meridians.
    """
    lines: list[np.ndarray] = []
    phi = np.linspace(0.0, 2.0 * math.pi, samples + 1)
    for iy in range(1, segments):
        theta = math.pi * iy / segments
        r = radius * math.sin(theta)
        lines.append(
            np.stack(
                [-r * np.cos(phi), np.full_like(phi, radius * math.cos(theta)), r * np.sin(phi)],
                axis=1,
            )
        )

    theta = np.linspace(0.0, math.pi, samples // 2 + 1)
    for ix in range(segments):
        p = 2.0 * math.pi * ix / segments
        lines.append(
            np.stack(
                [
                    -radius * math.cos(p) * np.sin(theta),
                    radius * np.cos(theta),
                    radius * math.sin(p) * np.sin(theta),
                ],
                axis=1,
            )
        )
    return lines
