"""
Export utilities for SheetViz.

Renders a chart scene and its legend scene stacked into one composite,
always in the light palette, and encodes it as PNG with deterministic
pixel dimensions::

    width  = chart width
    height = chart height + legend_height(n, export_items_per_row(width))

The PNG is encoded in memory first and only then written to disk via a
temporary file and ``os.replace``, so a failed export never leaves a
partial file behind.  Also handles clipboard copy and batch export.
"""

import io
import logging
import os
import tempfile
from typing import Dict, List, Optional, Tuple

import matplotlib as mpl
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from .chart_column3d import build_column_scene
from .chart_legend import build_legend_scene, export_items_per_row, legend_entries, legend_height
from .chart_pie3d import build_pie_scene
from .constants import (
    CHART_COLUMN_3D,
    CHART_PIE_3D,
    EXPORT_DPI,
    PIE_CANVAS_HEIGHT,
    PIE_CANVAS_WIDTH,
    PLOT_STYLE_EXPORT,
)
from .data_model import ChartData
from .errors import RenderTargetUnavailable
from .scene import Scene, draw_scene, stack_scenes
from .view_state import ChartViewState

log = logging.getLogger(__name__)

SCENE_BUILDERS = {
    CHART_PIE_3D: build_pie_scene,
    CHART_COLUMN_3D: build_column_scene,
}


def build_chart_scene(
    chart_kind: str,
    data: ChartData,
    view: ChartViewState = ChartViewState(),
    *,
    width: int = PIE_CANVAS_WIDTH,
    height: int = PIE_CANVAS_HEIGHT,
    title: str = "",
    for_export: bool = False,
) -> Scene:
    """Dispatch to the scene builder for *chart_kind*."""
    try:
        builder = SCENE_BUILDERS[chart_kind]
    except KeyError:
        raise ValueError(f"Unknown chart kind: {chart_kind!r}") from None
    return builder(data, view, width=width, height=height, title=title,
                   for_export=for_export)


def composite_size(n_categories: int, width: int = PIE_CANVAS_WIDTH,
                   height: int = PIE_CANVAS_HEIGHT) -> Tuple[int, int]:
    """Pixel size of an exported chart + legend image."""
    return width, height + legend_height(n_categories, export_items_per_row(width))


def build_composite_scene(
    chart_kind: str,
    data: ChartData,
    view: ChartViewState = ChartViewState(),
    *,
    width: int = PIE_CANVAS_WIDTH,
    height: int = PIE_CANVAS_HEIGHT,
    title: str = "",
    include_legend: bool = True,
) -> Scene:
    """Chart scene with the legend stacked underneath, light palette."""
    chart = build_chart_scene(chart_kind, data, view, width=width,
                              height=height, title=title, for_export=True)
    if not include_legend:
        return chart
    legend = build_legend_scene(legend_entries(data), width, for_export=True)
    return stack_scenes(chart, legend)


def scene_to_png(scene: Scene, dpi: int = EXPORT_DPI) -> bytes:
    """Rasterise *scene* to PNG bytes at exactly ``width x height`` pixels.

    Raises
    ------
    RenderTargetUnavailable
        If the raster backend cannot produce an image.
    """
    fig = Figure()
    FigureCanvasAgg(fig)
    buf = io.BytesIO()
    try:
        with mpl.rc_context(PLOT_STYLE_EXPORT):
            draw_scene(fig, scene, dpi=dpi)
            fig.savefig(
                buf, format='png', dpi=dpi,
                facecolor=scene.background, edgecolor='none',
                metadata={'Software': None},
            )
    except (RuntimeError, ValueError, OSError, MemoryError) as exc:
        raise RenderTargetUnavailable(f"Could not rasterise chart: {exc}") from exc
    return buf.getvalue()


def render_chart_png(
    chart_kind: str,
    data: ChartData,
    view: ChartViewState = ChartViewState(),
    *,
    title: str = "",
    width: int = PIE_CANVAS_WIDTH,
    height: int = PIE_CANVAS_HEIGHT,
    include_legend: bool = True,
    dpi: int = EXPORT_DPI,
) -> bytes:
    """Render the export composite for ``(data, view)`` as PNG bytes.

    The same inputs always produce byte-identical output.
    """
    scene = build_composite_scene(chart_kind, data, view, width=width,
                                  height=height, title=title,
                                  include_legend=include_legend)
    return scene_to_png(scene, dpi=dpi)


def write_bytes_atomic(payload: bytes, filepath: str) -> str:
    """Write *payload* to *filepath* through a temp file in the same directory.

    Raises
    ------
    RenderTargetUnavailable
        If the directory is missing or not writable.  No file is left
        behind at *filepath* or in the directory.
    """
    directory = os.path.dirname(os.path.abspath(filepath))
    if not os.path.isdir(directory):
        raise RenderTargetUnavailable(f"Export directory does not exist: {directory}")
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix='.sheetviz-', suffix='.tmp',
                                        dir=directory)
        with os.fdopen(fd, 'wb') as fh:
            fh.write(payload)
        os.replace(tmp_path, filepath)
        tmp_path = None
    except OSError as exc:
        raise RenderTargetUnavailable(f"Could not write {filepath}: {exc}") from exc
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
    return filepath


def export_chart_png(
    chart_kind: str,
    data: ChartData,
    view: ChartViewState,
    filepath: str,
    *,
    title: str = "",
    width: int = PIE_CANVAS_WIDTH,
    height: int = PIE_CANVAS_HEIGHT,
    include_legend: bool = True,
) -> str:
    """Export the chart + legend composite as a PNG file.

    Parameters
    ----------
    chart_kind : str
        ``"3d-pie"`` or ``"3d-column"``.
    data : ChartData
    view : ChartViewState
    filepath : str
        Output file path (should end with ``.png``).
    title : str
    width, height : int
        Chart area size in pixels; the legend adds to the height.
    include_legend : bool

    Returns
    -------
    str
        *filepath*.
    """
    png = render_chart_png(chart_kind, data, view, title=title, width=width,
                           height=height, include_legend=include_legend)
    write_bytes_atomic(png, filepath)
    log.info("Exported %s chart (%d categories) to %s",
             chart_kind, len(data), filepath)
    return filepath


def copy_to_clipboard(png: bytes) -> bool:
    """Copy PNG bytes to the system clipboard as an image.

    Returns ``True`` on success, ``False`` if no Qt clipboard is available.
    """
    try:
        from PySide6.QtGui import QImage
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return False

    if QApplication.instance() is None:
        return False
    img = QImage()
    if not img.loadFromData(png, 'PNG'):
        log.warning("Clipboard copy failed: PNG could not be decoded")
        return False
    clipboard = QApplication.clipboard()
    if clipboard is None:
        return False
    clipboard.setImage(img)
    return True


def sanitize_filename(name: str) -> str:
    safe = "".join(
        c if c.isalnum() or c in '-_ ' else '_'
        for c in name
    ).strip().replace(' ', '_')
    return safe or "chart"


def export_all_charts(
    charts: Dict[str, dict],
    output_dir: str,
    *,
    include_legend: bool = True,
) -> List[str]:
    """Export several charts as PNGs into *output_dir*.

    Parameters
    ----------
    charts : dict
        ``{filename_stem: job}`` where *job* has ``chart_kind`` and
        ``data`` and optionally ``view``, ``title``, ``width`` and
        ``height``.
    output_dir : str
        Created if missing.

    Returns
    -------
    list of str
        Paths of exported files, in *charts* order.
    """
    os.makedirs(output_dir, exist_ok=True)
    paths = []
    for name, job in charts.items():
        filepath = os.path.join(output_dir, f"{sanitize_filename(name)}.png")
        export_chart_png(
            job['chart_kind'], job['data'],
            job.get('view') or ChartViewState(),
            filepath,
            title=job.get('title', ""),
            width=job.get('width', PIE_CANVAS_WIDTH),
            height=job.get('height', PIE_CANVAS_HEIGHT),
            include_legend=include_legend,
        )
        paths.append(filepath)
    return paths


def png_size(png: bytes) -> Optional[Tuple[int, int]]:
    """``(width, height)`` read from a PNG header, or ``None`` if not a PNG."""
    if len(png) < 24 or png[:8] != b'\x89PNG\r\n\x1a\n':
        return None
    return (int.from_bytes(png[16:20], 'big'), int.from_bytes(png[20:24], 'big'))
