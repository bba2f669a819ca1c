"""
Per-node size and colour, derived from how close each node is to a pole.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from globe.state import Point3, SceneParams, SurfaceNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeStyle:
    """Inputs to the attribute mapping, lifted out of SceneParams."""
    size_base: float = 0.05
    polar_size_variation: bool = False
    polar_size_multiplier: float = 3.0
    polar_coloring: bool = True
    equator_color: str = "#FFFFFF"
    pole_color: str = "#808080"

    @classmethod
    def from_params(cls, params: SceneParams) -> NodeStyle:
        return cls(
            size_base=params.node_size,
            polar_size_variation=params.polar_size_variation,
            polar_size_multiplier=params.polar_size_multiplier,
            polar_coloring=params.polar_coloring,
            equator_color=params.equator_color,
            pole_color=params.pole_color,
        )


def polar_distance(point: Point3, radius: float) -> float:
    """|y| / radius clamped to [0, 1]; 0 on the equator, 1 at a pole."""
    return min(max(abs(point.y) / radius, 0.0), 1.0)


def node_size(d: float, style: NodeStyle) -> float:
    if not style.polar_size_variation:
        return style.size_base
    return style.size_base * (1.0 + (style.polar_size_multiplier - 1.0) * d)


def node_color(d: float, style: NodeStyle) -> str:
    if not style.polar_coloring:
        return style.equator_color
    return mix_hex(style.equator_color, style.pole_color, d)


def resolve_attributes(
    points: Iterable[Point3],
    radius: float,
    style: NodeStyle,
) -> tuple[SurfaceNode, ...]:
    """
    Attach size and colour to every sampled point.

    Each node depends only on its own position, so the map has no
    ordering constraints beyond preserving input order.
    """
    if radius <= 0:
        raise ValueError(f"radius must be > 0, got {radius}")

    nodes = []
    for point in points:
        d = polar_distance(point, radius)
        nodes.append(SurfaceNode(
            position=point,
            normalized_polar_distance=d,
            size=node_size(d, style),
            color=node_color(d, style),
        ))
    logger.debug("Resolved attributes for %d nodes", len(nodes))
    return tuple(nodes)


def mix_hex(a_hex: str, b_hex: str, t: float) -> str:
    """Linear RGB interpolation: t=0 gives a, t=1 gives b."""
    t = min(max(t, 0.0), 1.0)
    a = hex_to_rgb(a_hex)
    b = hex_to_rgb(b_hex)
    mixed = tuple(int(round(x + (y - x) * t)) for x, y in zip(a, b))
    return rgb_to_hex(mixed)


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' to (R, G, B) tuple."""
    h = hex_color.lstrip("#")
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))


def rgb_to_hex(rgb: tuple[int, ...]) -> str:
    return f"#{rgb[0]:02X}{rgb[1]:02X}{rgb[2]:02X}"
