"""Tests for the renderer — draw list, surface discipline and export (no browser)."""

from datetime import datetime
from unittest.mock import patch

import numpy as np
import pytest
from PIL import Image

from globe.assembler import assemble_scene
from globe.projection import Camera, Rotation
from globe.renderer import (
    ExportError,
    OutputSurface,
    RenderError,
    _build_html,
    build_draw_list,
    export_filename,
    export_scene,
    render_preview,
)
from globe.state import SceneParams


def _camera(size=400):
    return Camera(distance=5.0, fov_deg=45.0, width=size, height=size)


def _fake_render(calls):
    """Stand-in for the Playwright step that records the viewport size."""
    async def fake(html, width, height):
        calls.append((width, height, html))
        return Image.new("RGB", (width, height), "black")
    return fake


class TestProjection:
    """Tests for Camera and Rotation."""

    def test_origin_projects_to_centre(self):
        xy, depth = _camera(400).project(np.array([[0.0, 0.0, 0.0]]))
        assert xy[0] == pytest.approx([200.0, 200.0])
        assert depth[0] == pytest.approx(5.0)

    def test_up_is_up_on_screen(self):
        xy, _ = _camera(400).project(np.array([[0.0, 1.0, 0.0]]))
        assert xy[0, 1] < 200.0

    def test_rotation_identity(self):
        assert np.allclose(Rotation.identity().matrix(), np.eye(3))
        assert Rotation.identity().is_identity
        assert not Rotation(y=0.1).is_identity


class TestDrawList:
    """Tests for build_draw_list()."""

    def test_sorted_far_to_near(self):
        bundle = assemble_scene(SceneParams(show_nodes=True, show_wireframe=True, node_interval=5))
        depths = [item.depth for item in build_draw_list(bundle, _camera())]
        assert depths == sorted(depths, reverse=True)

    def test_rings_only(self):
        bundle = assemble_scene(SceneParams(num_stripes=2))
        items = build_draw_list(bundle, _camera())
        assert items
        assert {item.kind for item in items} == {"polyline"}

    def test_ring_stroke_is_at_least_one_pixel(self):
        bundle = assemble_scene(SceneParams(num_stripes=1, ring_thickness=0.01))
        assert all(item.stroke_width >= 1.0 for item in build_draw_list(bundle, _camera(100)))

    def test_ring_color_comes_from_settings(self, monkeypatch):
        from config import settings
        monkeypatch.setattr(settings, "RING_COLOR", "#FF8800")
        bundle = assemble_scene(SceneParams(num_stripes=2))
        assert {item.color for item in build_draw_list(bundle, _camera())} == {"#FF8800"}

    @pytest.mark.parametrize("shape,kind", [
        ("sphere", "circle"),
        ("box", "rect"),
        ("tetrahedron", "polygon"),
    ])
    def test_node_glyphs(self, shape, kind):
        bundle = assemble_scene(SceneParams(
            num_stripes=0, show_nodes=True, node_shape=shape, node_interval=6
        ))
        items = build_draw_list(bundle, _camera())
        assert len(items) == len(bundle.nodes)
        assert {item.kind for item in items} == {kind}

    def test_connections_become_lines(self):
        bundle = assemble_scene(SceneParams(
            num_stripes=0,
            show_inner_sphere=True,
            inner_sphere_wireframe=False,
            connect_to_inner_sphere=True,
            node_interval=7,
        ))
        items = build_draw_list(bundle, _camera())
        lines = [item for item in items if item.kind == "line"]
        assert len(lines) == len(bundle.radial_connections)
        assert all(item.opacity == 0.3 for item in lines)
        # Solid inner sphere is a single disc
        assert len([item for item in items if item.kind == "circle"]) == 1

    def test_rotation_changes_projection(self):
        bundle = assemble_scene(SceneParams(num_stripes=3))
        still = build_draw_list(bundle, _camera())
        turned = build_draw_list(bundle, _camera(), Rotation(x=0.3, y=0.7))
        assert [i.points for i in still] != [i.points for i in turned]

    def test_html_contains_svg(self):
        bundle = assemble_scene(SceneParams(num_stripes=2, show_nodes=True, node_interval=9))
        html = _build_html(bundle, _camera(300), background="#101010")
        assert '<svg' in html
        assert 'width="300"' in html
        assert "#101010" in html
        assert "<polyline" in html
        assert "<circle" in html


class TestOutputSurface:
    """Tests for the exclusive surface acquisition."""

    def test_resize_and_restore(self):
        surface = OutputSurface(800, 600)
        with surface.exclusive(size=(2048, 2048)) as size:
            assert size == (2048, 2048)
            assert surface.size == (2048, 2048)
            assert surface.busy
        assert surface.size == (800, 600)
        assert not surface.busy

    def test_restored_when_block_raises(self):
        surface = OutputSurface(800, 600)
        with pytest.raises(KeyError):
            with surface.exclusive(size=(2048, 2048)):
                raise KeyError("boom")
        assert surface.size == (800, 600)
        assert not surface.busy

    def test_busy_surface_times_out(self):
        surface = OutputSurface(800, 600)
        with surface.exclusive():
            with pytest.raises(RenderError):
                with surface.exclusive(timeout=0.01):
                    pass
        assert not surface.busy


class TestExport:
    """Tests for export_scene() with the browser step stubbed out."""

    def test_filename_from_timestamp(self):
        assert export_filename(datetime(2026, 10, 18, 12, 0, 5)) == "globe-20261018-120005-000000.png"

    def test_exports_in_same_second_get_distinct_names(self):
        first = export_filename(datetime(2026, 10, 18, 12, 0, 5, 1000))
        second = export_filename(datetime(2026, 10, 18, 12, 0, 5, 2000))
        assert first != second
        assert first == "globe-20261018-120005-001000.png"

    def test_export_writes_png_at_export_resolution(self, tmp_path):
        calls = []
        surface = OutputSurface(800, 800)
        bundle = assemble_scene(SceneParams())

        with patch("globe.renderer._render_async", new=_fake_render(calls)):
            result = export_scene(bundle, surface, out_dir=tmp_path, timestamp=datetime(2026, 1, 2, 3, 4, 5))

        assert calls[0][:2] == (2048, 2048)
        assert result.path == tmp_path / "globe-20260102-030405-000000.png"
        assert result.path.exists()
        assert Image.open(result.path).size == (2048, 2048)
        assert result.frame.resolution == 2048
        assert surface.size == (800, 800)
        assert not surface.busy

    def test_render_failure_restores_surface(self, tmp_path):
        async def failing(html, width, height):
            raise RenderError("chromium crashed")

        surface = OutputSurface(640, 480)
        bundle = assemble_scene(SceneParams())
        with patch("globe.renderer._render_async", new=failing):
            with pytest.raises(ExportError):
                export_scene(bundle, surface, out_dir=tmp_path)

        assert surface.size == (640, 480)
        assert not surface.busy
        assert list(tmp_path.iterdir()) == []

    def test_busy_surface_fails_export(self, tmp_path):
        surface = OutputSurface(640, 480)
        bundle = assemble_scene(SceneParams())
        with patch("config.settings.SURFACE_LOCK_TIMEOUT", 0.01):
            with surface.exclusive():
                with pytest.raises(ExportError):
                    export_scene(bundle, surface, out_dir=tmp_path)

    def test_preview_uses_current_surface_size(self):
        calls = []
        surface = OutputSurface(320, 240)
        bundle = assemble_scene(SceneParams())
        with patch("globe.renderer._render_async", new=_fake_render(calls)):
            image = render_preview(bundle, surface, Rotation(y=0.5))
        assert image.size == (320, 240)
        assert calls[0][:2] == (320, 240)
