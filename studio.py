"""
Studio — the host-side driver around the globe generator.

Holds the current params and bundle, regenerates on every params
change, advances the live group rotation, and hands bundles to the
renderer for preview redraws and framed exports.

Workflow:
1. Host edits a parameter → update_params() builds a new SceneParams
2. The bundle is regenerated from scratch (no sharing across generations)
3. tick() advances the group rotation while rotation is enabled
4. render_preview() / export() draw the current bundle
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from PIL import Image

from globe.assembler import assemble_scene
from globe.projection import Rotation
from globe.renderer import ExportResult, OutputSurface, export_scene, render_preview
from globe.state import SceneBundle, SceneParams

logger = logging.getLogger("globe.studio")

# Secondary axis spins at half the primary rate
_X_RATE_RATIO = 0.5


@dataclass
class StudioState:
    """Mutable state of the host loop. Params and bundles are replaced, never edited."""
    params: SceneParams = field(default_factory=SceneParams)
    bundle: Optional[SceneBundle] = None
    rotation: Rotation = field(default_factory=Rotation.identity)
    latest_image: Optional[Image.Image] = None
    latest_export: Optional[ExportResult] = None


class GlobeStudio:
    """
    Connects params, generator and renderer.

    Can be driven programmatically or by any UI that produces params.
    """

    def __init__(
        self,
        params: Optional[SceneParams] = None,
        surface: Optional[OutputSurface] = None,
    ):
        self.surface = surface or OutputSurface()
        self.state = StudioState(params=params or SceneParams())
        self.regenerate()

    # ── Params ───────────────────────────────────────────────────────

    def set_params(self, params: SceneParams) -> SceneBundle:
        """Swap in a new params value and regenerate."""
        self.state.params = params
        return self.regenerate()

    def update_params(self, **changes: Any) -> SceneBundle:
        """Apply field changes (snake_case or camelCase) as a new params value."""
        return self.set_params(self.state.params.replace(**changes))

    def regenerate(self) -> SceneBundle:
        self.state.bundle = assemble_scene(self.state.params)
        logger.debug("Regenerated bundle for %s", self.state.params)
        return self.state.bundle

    # ── Rotation ─────────────────────────────────────────────────────

    def tick(self, delta: float) -> Rotation:
        """Advance the group rotation by ``delta`` seconds."""
        params = self.state.params
        if params.is_rotating and delta > 0:
            speed = params.rotation_speed
            self.state.rotation = self.state.rotation.advanced(
                dx=delta * speed * _X_RATE_RATIO,
                dy=delta * speed,
            )
        return self.state.rotation

    def reset_rotation(self) -> None:
        self.state.rotation = Rotation.identity()

    # ── Rendering ────────────────────────────────────────────────────

    def render_preview(self) -> Image.Image:
        image = render_preview(self.state.bundle, self.surface, self.state.rotation)
        self.state.latest_image = image
        return image

    def export(
        self,
        out_dir: str | Path | None = None,
        timestamp: Optional[datetime] = None,
    ) -> ExportResult:
        """
        Export a framed still of the current bundle.

        The export is drawn with the identity transform; the live
        rotation is left as it was.
        """
        result = export_scene(self.state.bundle, self.surface, out_dir=out_dir, timestamp=timestamp)
        self.state.latest_export = result
        logger.info("Exported %s", result.path)
        return result
