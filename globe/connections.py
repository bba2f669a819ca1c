"""
Connection graph between surface nodes.

Peer connections join node pairs that line up horizontally (same
height) or vertically (same meridian column). Radial connections drop
each node straight toward the centre, stopping at the inner sphere.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from globe.state import CONNECTION_TYPES, ConnectionSegment, SurfaceNode
from config import settings

logger = logging.getLogger(__name__)


def connection_tolerance(wireframe_segments: Optional[int] = None) -> float:
    """
    Alignment tolerance for the peer predicate.

    Fixed at settings.CONNECTION_TOLERANCE unless
    SCALE_TOLERANCE_WITH_RESOLUTION is on, in which case it shrinks as the
    sampling grid gets finer (relative to REFERENCE_SEGMENTS).
    """
    base = settings.CONNECTION_TOLERANCE
    if not settings.SCALE_TOLERANCE_WITH_RESOLUTION or not wireframe_segments:
        return base
    return base * settings.REFERENCE_SEGMENTS / wireframe_segments


def _horizontally_aligned(a: SurfaceNode, b: SurfaceNode, tolerance: float) -> bool:
    return abs(a.position.y - b.position.y) < tolerance


def _vertically_aligned(a: SurfaceNode, b: SurfaceNode, tolerance: float) -> bool:
    dx = a.position.x - b.position.x
    dz = a.position.z - b.position.z
    return math.sqrt(dx * dx + dz * dz) < tolerance


_PREDICATES = {
    "horizontal": _horizontally_aligned,
    "vertical": _vertically_aligned,
}


def build_peer_connections(
    nodes: Sequence[SurfaceNode],
    mode: str,
    sphere_radius: float,
    tolerance: Optional[float] = None,
    width: float = 0.01,
    color: Optional[str] = None,
    opacity: float = 1.0,
) -> tuple[ConnectionSegment, ...]:
    """
    Connect every aligned node pair closer than ``sphere_radius``.

    The distance cut keeps near-antipodal pairs (which can share a height
    or column while sitting on opposite sides) from cutting through the
    interior. Pairs are visited once each, in (i, j) order with i < j.
    O(n²) in the node count, which is bounded by the sampling density.

    Raises:
        ValueError: unknown ``mode``.
    """
    if mode not in CONNECTION_TYPES:
        raise ValueError(f"unknown connection mode {mode!r}; expected one of {CONNECTION_TYPES}")
    if mode == "none" or len(nodes) < 2:
        return ()

    tolerance = settings.CONNECTION_TOLERANCE if tolerance is None else tolerance
    color = color or settings.CONNECTION_COLOR
    aligned = _PREDICATES[mode]

    segments = []
    for i in range(len(nodes)):
        a = nodes[i]
        for j in range(i + 1, len(nodes)):
            b = nodes[j]
            if not aligned(a, b, tolerance):
                continue
            if a.position.distance_to(b.position) >= sphere_radius:
                continue
            segments.append(ConnectionSegment(
                start=a.position,
                end=b.position,
                color=color,
                opacity=opacity,
                width=width,
                kind="peer",
            ))

    logger.debug(
        "Built %d %s connections among %d nodes (tolerance=%s)",
        len(segments), mode, len(nodes), tolerance,
    )
    return tuple(segments)


def build_radial_connections(
    nodes: Sequence[SurfaceNode],
    inner_radius: float,
    color: str = "#FFFFFF",
    opacity: float = 0.3,
    width: float = 0.0,
) -> tuple[ConnectionSegment, ...]:
    """One segment per node, from the node to where its centre ray meets the inner sphere."""
    if inner_radius <= 0:
        raise ValueError(f"inner_radius must be > 0, got {inner_radius}")

    return tuple(
        ConnectionSegment(
            start=node.position,
            end=node.position.normalized().scaled(inner_radius),
            color=color,
            opacity=opacity,
            width=width,
            kind="radial",
        )
        for node in nodes
    )
