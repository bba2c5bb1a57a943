"""
Unit tests for PNG export of chart and legend composites
"""

import os

import pytest

from sheetviz.constants import CHART_COLUMN_3D, CHART_PIE_3D
from sheetviz.data_model import ChartData
from sheetviz.errors import RenderTargetUnavailable
from sheetviz.export import (
    build_composite_scene,
    composite_size,
    copy_to_clipboard,
    export_all_charts,
    export_chart_png,
    png_size,
    render_chart_png,
    sanitize_filename,
    write_bytes_atomic,
)
from sheetviz.view_state import ChartViewState


class TestComposite:
    """Test cases for the chart + legend composite"""

    def test_composite_size(self):
        """Legend height depends only on width and category count"""
        assert composite_size(3) == (700, 700)
        assert composite_size(20) == (700, 500 + 7 * 30 + 80)
        assert composite_size(20, width=900, height=600) == (900, 600 + 5 * 30 + 80)

    def test_composite_scene(self, three_slices):
        scene = build_composite_scene(CHART_PIE_3D, three_slices)
        assert (scene.width, scene.height) == composite_size(3)
        assert scene.background == '#ffffff'
        assert len(list(scene.with_role('swatch'))) == 3

    def test_unknown_kind(self, three_slices):
        with pytest.raises(ValueError):
            build_composite_scene("donut", three_slices)


class TestRenderPng:
    """Test cases for render_chart_png"""

    def test_pixel_size(self, three_slices):
        png = render_chart_png(CHART_PIE_3D, three_slices)
        assert png_size(png) == composite_size(3)

    def test_pixel_size_without_legend(self, three_slices):
        png = render_chart_png(CHART_COLUMN_3D, three_slices, include_legend=False)
        assert png_size(png) == (700, 500)

    def test_custom_size(self):
        data = ChartData(labels=[f"c{i}" for i in range(20)], values=range(1, 21))
        png = render_chart_png(CHART_COLUMN_3D, data, width=900, height=600)
        assert png_size(png) == composite_size(20, 900, 600)

    def test_deterministic(self, three_slices):
        """Same data and view give byte-identical images"""
        view = ChartViewState(rotation=0.7, zoom=1.4, tilt=0.5)
        first = render_chart_png(CHART_PIE_3D, three_slices, view, title="Share")
        second = render_chart_png(CHART_PIE_3D, three_slices, view, title="Share")
        assert first == second

    def test_view_changes_image(self, three_slices):
        plain = render_chart_png(CHART_PIE_3D, three_slices)
        rotated = render_chart_png(CHART_PIE_3D, three_slices, ChartViewState(rotation=1.0))
        assert plain != rotated

    def test_png_size_rejects_other_bytes(self):
        assert png_size(b"GIF89a") is None


class TestWriteFiles:
    """Test cases for writing exports to disk"""

    def test_export_chart_png(self, three_slices, tmp_path):
        path = tmp_path / "chart.png"
        result = export_chart_png(CHART_PIE_3D, three_slices, ChartViewState(), str(path))
        assert result == str(path)
        assert png_size(path.read_bytes()) == composite_size(3)
        assert os.listdir(tmp_path) == ["chart.png"]

    def test_missing_directory(self, three_slices, tmp_path):
        """An unwritable destination raises and leaves nothing behind"""
        target = tmp_path / "missing" / "chart.png"
        with pytest.raises(RenderTargetUnavailable):
            export_chart_png(CHART_PIE_3D, three_slices, ChartViewState(), str(target))
        assert not target.exists()
        assert os.listdir(tmp_path) == []

    def test_atomic_replace(self, tmp_path):
        path = tmp_path / "out.bin"
        path.write_bytes(b"old")
        write_bytes_atomic(b"new", str(path))
        assert path.read_bytes() == b"new"
        assert os.listdir(tmp_path) == ["out.bin"]

    def test_export_all(self, three_slices, tmp_path):
        out_dir = tmp_path / "charts"
        paths = export_all_charts({
            "Share / Region": {'chart_kind': CHART_PIE_3D, 'data': three_slices},
            "columns": {'chart_kind': CHART_COLUMN_3D, 'data': three_slices,
                        'view': ChartViewState(zoom=1.5), 'title': "Totals"},
        }, str(out_dir))
        names = [os.path.basename(p) for p in paths]
        assert names == ["Share___Region.png", "columns.png"]
        assert all(os.path.isfile(p) for p in paths)

    def test_sanitize_filename(self):
        assert sanitize_filename("a b/c") == "a_b_c"
        assert sanitize_filename("///") == "___"
        assert sanitize_filename("   ") == "chart"


class TestClipboard:
    """Test cases for clipboard copy without a running Qt application"""

    def test_no_application(self, three_slices):
        assert copy_to_clipboard(render_chart_png(CHART_PIE_3D, three_slices)) is False
