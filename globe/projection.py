"""
Group rotation and perspective projection.

Rotations use the Euler XYZ convention (R = Rx · Ry · Rz), the same
order the ring tilt/twist and the interactive group spin are expressed in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


def euler_xyz(rx: float, ry: float, rz: float) -> np.ndarray:
    """3×3 rotation matrix for intrinsic X, then Y, then Z angles (radians)."""
    cx, sx = math.cos(rx), math.sin(rx)
    cy, sy = math.cos(ry), math.sin(ry)
    cz, sz = math.cos(rz), math.sin(rz)
    rot_x = np.array([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]])
    rot_y = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
    rot_z = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])
    return rot_x @ rot_y @ rot_z


@dataclass(frozen=True)
class Rotation:
    """Accumulated group rotation in radians."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def identity(cls) -> Rotation:
        return cls()

    @property
    def is_identity(self) -> bool:
        return self.x == 0.0 and self.y == 0.0 and self.z == 0.0

    def advanced(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> Rotation:
        return Rotation(self.x + dx, self.y + dy, self.z + dz)

    def matrix(self) -> np.ndarray:
        return euler_xyz(self.x, self.y, self.z)


@dataclass(frozen=True)
class Camera:
    """
    Perspective camera on the +Z axis looking at the origin.

    ``fov_deg`` is the vertical field of view; the viewport is assumed
    to have square pixels.
    """
    distance: float
    fov_deg: float
    width: int
    height: int

    @property
    def focal_px(self) -> float:
        """Pixels per unit of (coordinate / depth) at the image plane."""
        return (self.height / 2.0) / math.tan(math.radians(self.fov_deg) / 2.0)

    def project(self, points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Project (N, 3) world points to (N, 2) pixel coordinates.

        Returns:
            (screen_xy, depth) where depth is the distance in front of the
            camera along its view axis. Points at or behind the camera get
            depth clamped to a small positive value.
        """
        pts = np.asarray(points, dtype=float).reshape(-1, 3)
        depth = np.maximum(self.distance - pts[:, 2], 1e-6)
        f = self.focal_px
        sx = self.width / 2.0 + f * pts[:, 0] / depth
        sy = self.height / 2.0 - f * pts[:, 1] / depth
        return np.stack([sx, sy], axis=1), depth

    def pixel_size(self, world_size: float, depth: np.ndarray | float) -> np.ndarray:
        """Projected size in pixels of a world-space length at ``depth``."""
        return self.focal_px * world_size / np.asarray(depth, dtype=float)
