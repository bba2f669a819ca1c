"""
Framing camera for reproducible exports.

A sphere of radius r seen by a perspective camera at distance D fits
inside a vertical field of view θ when r / D <= sin(θ / 2). Solving for
D with a margin factor gives the camera distance used for export.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from globe.projection import Camera, Rotation
from globe.state import Point3, SceneBundle
from config import settings


@dataclass(frozen=True)
class Framing:
    distance: float
    look_at: Point3 = Point3(0.0, 0.0, 0.0)
    rotation: Rotation = field(default_factory=Rotation.identity)


@dataclass(frozen=True)
class FrameSpec:
    """Everything the renderer needs for one export frame."""
    camera_distance: float
    field_of_view: float
    resolution: int
    background: str
    bounding_radius: float

    def camera(self) -> Camera:
        return Camera(
            distance=self.camera_distance,
            fov_deg=self.field_of_view,
            width=self.resolution,
            height=self.resolution,
        )


def solve_framing(bounding_radius: float, field_of_view_deg: float, margin_factor: float) -> Framing:
    """
    Camera distance that keeps the bounding sphere fully in view.

    The returned framing always carries the identity rotation: exports do
    not depend on how long the live view has been spinning.

    Raises:
        ValueError: non-positive radius or margin, or FOV outside (0, 180).
    """
    if bounding_radius <= 0:
        raise ValueError(f"bounding_radius must be > 0, got {bounding_radius}")
    if margin_factor <= 0:
        raise ValueError(f"margin_factor must be > 0, got {margin_factor}")
    if not 0 < field_of_view_deg < 180:
        raise ValueError(f"field_of_view_deg must be in (0, 180), got {field_of_view_deg}")

    half_fov = math.radians(field_of_view_deg) / 2.0
    distance = (bounding_radius * margin_factor) / math.sin(half_fov)
    return Framing(distance=distance)


def bounding_radius(bundle: SceneBundle) -> float:
    """Radius of the smallest origin-centred sphere enclosing every primitive."""
    extents = [bundle.sphere_radius]
    if bundle.outer_sphere is not None:
        extents.append(bundle.outer_sphere.radius)
    if bundle.inner_sphere is not None:
        extents.append(bundle.inner_sphere.radius)
    for ring in bundle.rings:
        extents.append(ring.major_radius + ring.minor_radius)
    for node in bundle.nodes:
        extents.append(node.position.length() + node.size)
    return max(extents)


def export_frame(
    bundle: SceneBundle,
    resolution: Optional[int] = None,
    field_of_view: Optional[float] = None,
    margin_factor: Optional[float] = None,
    background: Optional[str] = None,
) -> FrameSpec:
    """Derive the export FrameSpec from the bundle's current extent."""
    radius = bounding_radius(bundle)
    fov = field_of_view or settings.FIELD_OF_VIEW
    framing = solve_framing(radius, fov, margin_factor or settings.EXPORT_MARGIN)
    return FrameSpec(
        camera_distance=framing.distance,
        field_of_view=fov,
        resolution=resolution or settings.EXPORT_RESOLUTION,
        background=background or settings.BACKGROUND_COLOR,
        bounding_radius=radius,
    )
