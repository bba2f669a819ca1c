"""Globe Generator — parametric sphere scene → framed still image."""

from globe.state import SceneParams, SceneBundle, Point3
from globe.assembler import assemble_scene
from globe.framing import solve_framing, export_frame
from globe.renderer import OutputSurface, render_preview, export_scene, ExportError

__all__ = [
    "SceneParams",
    "SceneBundle",
    "Point3",
    "assemble_scene",
    "solve_framing",
    "export_frame",
    "OutputSurface",
    "render_preview",
    "export_scene",
    "ExportError",
]
