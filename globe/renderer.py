"""
Playwright headless renderer — SceneBundle → SVG → PNG.

Primitives are projected in Python and emitted back-to-front into a
Jinja2 SVG template, which headless Chromium rasterizes via a screenshot.
Exports additionally take exclusive hold of the output surface, switch
it to the export resolution, and always switch it back.
"""

from __future__ import annotations

import asyncio
import io
import logging
import math
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import numpy as np
from jinja2 import Environment, FileSystemLoader
from PIL import Image

from globe.framing import FrameSpec, export_frame
from globe.projection import Camera, Rotation
from globe.rings import ring_centerline
from globe.state import ConnectionSegment, SceneBundle
from globe.surface import wireframe_lines
from config import settings

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"
_jinja_env = Environment(loader=FileSystemLoader(str(_TEMPLATE_DIR)))

# Samples per emitted polyline piece; short pieces keep depth sorting honest
_CHUNK = 8
_MIN_STROKE_PX = 1.0


class RenderError(RuntimeError):
    """The output surface or the browser could not produce an image."""


class ExportError(RenderError):
    """An export could not be completed; the surface has been restored."""


# ── Output surface ───────────────────────────────────────────────────


class OutputSurface:
    """
    The shared canvas every render draws into.

    Renders hold the surface exclusively for their whole duration, so an
    export's resize → render → capture → restore sequence is never
    interleaved with an interactive redraw.
    """

    def __init__(self, width: Optional[int] = None, height: Optional[int] = None):
        self.width = width or settings.PREVIEW_WIDTH
        self.height = height or settings.PREVIEW_HEIGHT
        self._lock = threading.Lock()

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def exclusive(
        self,
        size: Optional[tuple[int, int]] = None,
        timeout: Optional[float] = None,
    ) -> Iterator[tuple[int, int]]:
        """
        Hold the surface, optionally resized, for the duration of the block.

        The original size is restored on every exit path, including
        exceptions raised inside the block.

        Raises:
            RenderError: the surface could not be acquired within ``timeout``.
        """
        timeout = settings.SURFACE_LOCK_TIMEOUT if timeout is None else timeout
        if not self._lock.acquire(timeout=timeout):
            raise RenderError(f"output surface busy for more than {timeout}s")

        original = (self.width, self.height)
        try:
            if size is not None:
                self.width, self.height = size
                logger.debug("Surface resized %s -> %s", original, size)
            yield (self.width, self.height)
        finally:
            self.width, self.height = original
            self._lock.release()


# ── Draw list ────────────────────────────────────────────────────────


@dataclass
class DrawItem:
    """One SVG element, already in pixel space."""
    kind: str  # "polyline" | "line" | "circle" | "rect" | "polygon"
    depth: float
    color: str
    opacity: float = 1.0
    stroke_width: float = _MIN_STROKE_PX
    points: str = ""
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    cx: float = 0.0
    cy: float = 0.0
    r: float = 0.0


def _fmt_points(screen: np.ndarray) -> str:
    return " ".join(f"{x:.2f},{y:.2f}" for x, y in screen)


def _polyline_items(
    points: np.ndarray,
    camera: Camera,
    color: str,
    world_width: float = 0.0,
    opacity: float = 1.0,
) -> list[DrawItem]:
    """Split a model-space polyline into depth-sortable pieces."""
    screen, depth = camera.project(points)
    items = []
    for start in range(0, len(points) - 1, _CHUNK):
        stop = min(start + _CHUNK + 1, len(points))
        mean_depth = float(depth[start:stop].mean())
        width = _MIN_STROKE_PX
        if world_width > 0:
            width = max(float(camera.pixel_size(world_width, mean_depth)), _MIN_STROKE_PX)
        items.append(DrawItem(
            kind="polyline",
            depth=mean_depth,
            color=color,
            opacity=opacity,
            stroke_width=width,
            points=_fmt_points(screen[start:stop]),
        ))
    return items


def _segment_items(
    segments: tuple[ConnectionSegment, ...],
    rot: np.ndarray,
    camera: Camera,
) -> list[DrawItem]:
    if not segments:
        return []
    starts = np.array([s.start for s in segments]) @ rot.T
    ends = np.array([s.end for s in segments]) @ rot.T
    s_xy, s_depth = camera.project(starts)
    e_xy, e_depth = camera.project(ends)

    items = []
    for k, seg in enumerate(segments):
        depth = float((s_depth[k] + e_depth[k]) / 2.0)
        width = _MIN_STROKE_PX
        if seg.width > 0:
            width = max(float(camera.pixel_size(seg.width, depth)), _MIN_STROKE_PX)
        items.append(DrawItem(
            kind="line",
            depth=depth,
            color=seg.color,
            opacity=seg.opacity,
            stroke_width=width,
            x1=float(s_xy[k, 0]), y1=float(s_xy[k, 1]),
            x2=float(e_xy[k, 0]), y2=float(e_xy[k, 1]),
        ))
    return items


def _node_items(bundle: SceneBundle, rot: np.ndarray, camera: Camera) -> list[DrawItem]:
    """Node glyphs: sphere → circle, box → square, tetrahedron → triangle."""
    if not bundle.nodes:
        return []
    world = np.array([n.position for n in bundle.nodes]) @ rot.T
    xy, depth = camera.project(world)

    items = []
    for k, node in enumerate(bundle.nodes):
        cx, cy = float(xy[k, 0]), float(xy[k, 1])
        r = max(float(camera.pixel_size(node.size, depth[k])), 0.5)
        item = DrawItem(kind="circle", depth=float(depth[k]), color=node.color, cx=cx, cy=cy, r=r)
        if bundle.node_shape == "box":
            item.kind = "rect"
        elif bundle.node_shape == "tetrahedron":
            item.kind = "polygon"
            item.points = _fmt_points(np.array([
                (cx + r * math.cos(a), cy - r * math.sin(a))
                for a in (math.pi / 2, math.pi / 2 + 2 * math.pi / 3, math.pi / 2 + 4 * math.pi / 3)
            ]))
        items.append(item)
    return items


def build_draw_list(
    bundle: SceneBundle,
    camera: Camera,
    rotation: Optional[Rotation] = None,
) -> list[DrawItem]:
    """Project every visible primitive and sort far-to-near."""
    rot = (rotation or Rotation.identity()).matrix()
    items: list[DrawItem] = []

    if bundle.outer_sphere is not None:
        for line in wireframe_lines(bundle.outer_sphere.radius, bundle.outer_sphere.segments):
            items.extend(_polyline_items(line @ rot.T, camera, bundle.outer_sphere.color))

    inner = bundle.inner_sphere
    if inner is not None:
        if inner.wireframe:
            for line in wireframe_lines(inner.radius, inner.segments):
                items.extend(_polyline_items(line @ rot.T, camera, inner.color))
        else:
            # Apparent radius of a sphere centred on the view axis
            d = camera.distance
            r_px = camera.focal_px * inner.radius / math.sqrt(max(d * d - inner.radius ** 2, 1e-9))
            items.append(DrawItem(
                kind="circle",
                depth=d,
                color=inner.color,
                cx=camera.width / 2.0,
                cy=camera.height / 2.0,
                r=r_px,
            ))

    for ring in bundle.rings:
        items.extend(_polyline_items(
            ring_centerline(ring) @ rot.T,
            camera,
            settings.RING_COLOR,
            world_width=2.0 * ring.minor_radius,
        ))

    items.extend(_segment_items(bundle.radial_connections, rot, camera))
    items.extend(_segment_items(bundle.peer_connections, rot, camera))
    items.extend(_node_items(bundle, rot, camera))

    items.sort(key=lambda item: item.depth, reverse=True)
    return items


# ── Rendering ────────────────────────────────────────────────────────


def _build_html(
    bundle: SceneBundle,
    camera: Camera,
    rotation: Optional[Rotation] = None,
    background: Optional[str] = None,
) -> str:
    """Render the Jinja2 template with the projected draw list."""
    template = _jinja_env.get_template("globe_scene.html")
    return template.render(
        width=camera.width,
        height=camera.height,
        background=background or settings.BACKGROUND_COLOR,
        items=build_draw_list(bundle, camera, rotation),
    )


async def _render_async(html: str, width: int, height: int) -> Image.Image:
    """Use Playwright to screenshot rendered HTML."""
    from playwright.async_api import Error as PlaywrightError
    from playwright.async_api import async_playwright

    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True)
            try:
                page = await browser.new_page(viewport={"width": width, "height": height})
                await page.set_content(html, wait_until="load", timeout=settings.RENDER_TIMEOUT_MS)
                screenshot_bytes = await page.screenshot(type="png", timeout=settings.RENDER_TIMEOUT_MS)
            finally:
                await browser.close()
    except PlaywrightError as exc:
        raise RenderError(f"browser render failed: {exc}") from exc

    return Image.open(io.BytesIO(screenshot_bytes)).convert("RGB")


async def render_scene_async(
    bundle: SceneBundle,
    camera: Camera,
    rotation: Optional[Rotation] = None,
    background: Optional[str] = None,
) -> Image.Image:
    """
    Render a SceneBundle to a PIL Image (async version).

    Pipeline: SceneBundle → draw list → Jinja2 SVG → Playwright screenshot → PIL.Image
    """
    html = _build_html(bundle, camera, rotation, background)
    return await _render_async(html, camera.width, camera.height)


def render_scene(
    bundle: SceneBundle,
    camera: Camera,
    rotation: Optional[Rotation] = None,
    background: Optional[str] = None,
) -> Image.Image:
    """
    Render a SceneBundle to a PIL Image (sync wrapper).

    Handles the asyncio event loop for callers that aren't async.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    coro = render_scene_async(bundle, camera, rotation, background)
    if loop and loop.is_running():
        # Already inside an event loop: run ours on a worker thread
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor() as pool:
            future = pool.submit(asyncio.run, coro)
            return future.result()
    else:
        return asyncio.run(coro)


def render_preview(
    bundle: SceneBundle,
    surface: OutputSurface,
    rotation: Optional[Rotation] = None,
) -> Image.Image:
    """Interactive redraw at the surface's current size and the live rotation."""
    with surface.exclusive() as (width, height):
        camera = Camera(
            distance=settings.PREVIEW_CAMERA_DISTANCE,
            fov_deg=settings.FIELD_OF_VIEW,
            width=width,
            height=height,
        )
        return render_scene(bundle, camera, rotation)


# ── Export ───────────────────────────────────────────────────────────


@dataclass
class ExportResult:
    path: Path
    image: Image.Image
    frame: FrameSpec


def export_filename(timestamp: Optional[datetime] = None) -> str:
    """Deterministic name for an export captured at ``timestamp``."""
    timestamp = timestamp or datetime.now()
    return f"{settings.EXPORT_FILENAME_PREFIX}-{timestamp:%Y%m%d-%H%M%S-%f}.png"


def export_scene(
    bundle: SceneBundle,
    surface: OutputSurface,
    out_dir: str | Path | None = None,
    timestamp: Optional[datetime] = None,
) -> ExportResult:
    """
    Render a framed, square still of the bundle and write it as PNG.

    Uses the identity group transform and a camera distance solved from
    the bundle's bounding radius, so the image does not depend on the
    live view. The surface is back at its original size before this
    returns or raises.

    Raises:
        ExportError: surface unavailable, browser failure, or write failure.
    """
    frame = export_frame(bundle)
    out_dir = Path(out_dir) if out_dir is not None else settings.EXPORTS_DIR
    path = out_dir / export_filename(timestamp)

    logger.info(
        "Exporting %dx%d frame to %s (camera distance %.3f)",
        frame.resolution, frame.resolution, path, frame.camera_distance,
    )
    try:
        with surface.exclusive(size=(frame.resolution, frame.resolution)) as (width, height):
            camera = Camera(
                distance=frame.camera_distance,
                fov_deg=frame.field_of_view,
                width=width,
                height=height,
            )
            image = render_scene(bundle, camera, Rotation.identity(), frame.background)
            path.parent.mkdir(parents=True, exist_ok=True)
            image.save(str(path), format="PNG")
    except (RenderError, OSError, ValueError) as exc:
        logger.exception("Export to %s failed", path)
        raise ExportError(f"export to {path} failed: {exc}") from exc

    return ExportResult(path=path, image=image, frame=frame)
