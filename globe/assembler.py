"""
Scene assembler — SceneParams in, SceneBundle out.

Pure composition of the ring layout, surface sampler, attribute
resolver and connection builder. Each visibility flag gates its own
primitive group; the only coupling is that radial connections also
require the inner sphere to be shown.
"""

from __future__ import annotations

import logging
from typing import Optional

from globe.connections import build_peer_connections, build_radial_connections, connection_tolerance
from globe.nodes import NodeStyle, resolve_attributes
from globe.rings import generate_rings
from globe.state import SceneBundle, SceneParams, SphereDescriptor
from globe.surface import sample_sphere
from config import settings

logger = logging.getLogger(__name__)


def assemble_scene(params: SceneParams, sphere_radius: Optional[float] = None) -> SceneBundle:
    """
    Run one generation pass.

    Deterministic: identical params give an equal bundle, down to the
    last float.
    """
    radius = settings.SPHERE_RADIUS if sphere_radius is None else sphere_radius

    # ── Rings ────────────────────────────────────────────────────────
    rings = generate_rings(params.num_stripes, params.ring_thickness, radius)

    # ── Spheres ──────────────────────────────────────────────────────
    outer_sphere = None
    if params.show_wireframe:
        outer_sphere = SphereDescriptor(
            radius=radius,
            segments=params.wireframe_segments,
            wireframe=True,
        )

    inner_sphere = None
    inner_radius = radius * params.inner_sphere_ratio
    if params.show_inner_sphere:
        inner_sphere = SphereDescriptor(
            radius=inner_radius,
            segments=params.wireframe_segments,
            wireframe=params.inner_sphere_wireframe,
        )

    # ── Nodes and connections ────────────────────────────────────────
    # Connections hang off the sampled nodes, so the sample is taken
    # whenever anything downstream needs it, even with nodes hidden.
    needs_samples = (
        params.show_nodes
        or params.connection_type != "none"
        or params.radial_connections_enabled
    )
    nodes = ()
    if needs_samples:
        points = sample_sphere(radius, params.wireframe_segments, params.node_interval)
        nodes = resolve_attributes(points, radius, NodeStyle.from_params(params))

    peer_connections = build_peer_connections(
        nodes,
        params.connection_type,
        radius,
        tolerance=connection_tolerance(params.wireframe_segments),
        width=params.connection_thickness,
    )

    radial_connections = ()
    if params.radial_connections_enabled:
        radial_connections = build_radial_connections(
            nodes,
            inner_radius,
            color=params.inner_sphere_connection_color,
            opacity=params.inner_sphere_connection_opacity,
        )

    bundle = SceneBundle(
        params=params,
        sphere_radius=radius,
        rings=rings,
        outer_sphere=outer_sphere,
        inner_sphere=inner_sphere,
        nodes=nodes if params.show_nodes else (),
        node_shape=params.node_shape,
        peer_connections=peer_connections,
        radial_connections=radial_connections,
    )
    logger.debug(
        "Assembled scene: %d rings, %d nodes, %d peer / %d radial connections",
        len(bundle.rings), len(bundle.nodes),
        len(bundle.peer_connections), len(bundle.radial_connections),
    )
    return bundle
