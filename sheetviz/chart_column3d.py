"""
Pseudo-3D column chart for SheetViz.

Each category becomes an isometric prism built from three flat faces
(front, top, side) shaded at three lightness levels of the category
hue.  The receding edge leaves each bar at a constant 30° angle; its
rise follows the view tilt and its horizontal run follows
``cos(rotation)``, so rotating past a quarter turn mirrors the side
face to the left.

Heights are min-max normalised: the smallest value sits on the
baseline and the largest fills the plot height (times zoom).  When all
values are equal every column is flat.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple

from matplotlib.figure import Figure

from .colors import RGB, color_with_lightness, to_hex
from .constants import (
    COLUMN_CANVAS_HEIGHT,
    COLUMN_CANVAS_WIDTH,
    COLUMN_CATEGORY_LABEL_CHARS,
    COLUMN_DEPTH_FRACTION,
    COLUMN_FACE_LIGHTNESS,
    COLUMN_ISO_ANGLE,
    COLUMN_LABEL_MIN_HEIGHT,
    COLUMN_LABEL_MIN_WIDTH,
    COLUMN_MARGIN_BOTTOM,
    COLUMN_MARGIN_LEFT,
    COLUMN_MARGIN_RIGHT,
    COLUMN_MARGIN_TOP,
    COLUMN_MAX_DEPTH,
    COLUMN_MAX_WIDTH,
    COLUMN_MIN_WIDTH,
    COLUMN_WIDTH_FRACTION,
    DEFAULT_TILT,
    SCENE_DARK,
    SCENE_LIGHT,
    thinned_label_indices,
)
from .data_model import ChartData
from .scene import Line, Polygon, Scene, Text, draw_scene
from .view_state import ChartViewState

log = logging.getLogger(__name__)

NO_DATA_TEXT = "No data to display"


@dataclass(frozen=True)
class ColumnLayout:
    """Horizontal and vertical placement shared by all prisms."""
    plot_left: float
    plot_width: float
    baseline: float
    plot_height: float
    slot: float
    bar_width: float
    depth: float
    offset_x: float
    offset_y: float


@dataclass(frozen=True)
class ColumnPrism:
    """Screen geometry of one category's prism.

    ``x0``/``x1`` bound the front face horizontally, ``top`` is the
    front face's upper edge and ``height`` its pixel height.
    """
    index: int
    label: str
    value: float
    x0: float
    x1: float
    top: float
    height: float
    face_colors: Tuple[RGB, RGB, RGB]

    @property
    def center_x(self) -> float:
        return (self.x0 + self.x1) / 2


def format_value(value: float) -> str:
    """``1,234`` for whole numbers, ``1,234.50`` otherwise."""
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


def _short_label(text: str) -> str:
    if len(text) <= COLUMN_CATEGORY_LABEL_CHARS:
        return text
    return text[:COLUMN_CATEGORY_LABEL_CHARS - 1] + "…"


def column_layout(n: int, width: float, height: float,
                  view: ChartViewState) -> ColumnLayout:
    """Fit *n* columns into a *width* x *height* canvas.

    Per-column width shrinks with the category count but stays within
    ``[COLUMN_MIN_WIDTH, COLUMN_MAX_WIDTH]`` and never exceeds its slot.
    """
    if n < 1:
        raise ValueError(f"column_layout requires n >= 1, got {n}")
    iso_rise = math.sin(COLUMN_ISO_ANGLE) * (view.tilt / DEFAULT_TILT)
    iso_run = math.cos(COLUMN_ISO_ANGLE) * math.cos(view.rotation)

    # Room for the receding faces on whichever side they fall
    reserve_x = COLUMN_MAX_DEPTH * math.cos(COLUMN_ISO_ANGLE)
    plot_width = max(1.0, width - COLUMN_MARGIN_LEFT - COLUMN_MARGIN_RIGHT - reserve_x)
    plot_left = COLUMN_MARGIN_LEFT + (reserve_x if iso_run < 0 else 0.0)

    slot = plot_width / n
    bar_width = max(COLUMN_MIN_WIDTH, min(COLUMN_MAX_WIDTH, slot * COLUMN_WIDTH_FRACTION))
    bar_width = min(bar_width, slot)
    depth = min(COLUMN_MAX_DEPTH, bar_width * COLUMN_DEPTH_FRACTION)

    offset_y = depth * iso_rise
    baseline = height - COLUMN_MARGIN_BOTTOM
    plot_top = COLUMN_MARGIN_TOP + COLUMN_MAX_DEPTH * iso_rise
    return ColumnLayout(
        plot_left=plot_left,
        plot_width=plot_width,
        baseline=baseline,
        plot_height=max(0.0, baseline - plot_top),
        slot=slot,
        bar_width=bar_width,
        depth=depth,
        offset_x=depth * iso_run,
        offset_y=offset_y,
    )


def compute_prisms(data: ChartData, layout: ColumnLayout,
                   view: ChartViewState) -> List[ColumnPrism]:
    """Place one prism per category, in input order."""
    n = len(data)
    lo, hi = min(data.values), max(data.values)
    span = hi - lo
    prisms: List[ColumnPrism] = []
    for i, (label, value) in enumerate(zip(data.labels, data.values)):
        # Guard: max == min → flat baseline
        frac = (value - lo) / span if span > 0 else 0.0
        height = frac * layout.plot_height * view.zoom
        x0 = layout.plot_left + i * layout.slot + (layout.slot - layout.bar_width) / 2
        faces = tuple(
            color_with_lightness(i, n, COLUMN_FACE_LIGHTNESS[face])
            for face in ('front', 'top', 'side')
        )
        prisms.append(ColumnPrism(
            index=i, label=label, value=value,
            x0=x0, x1=x0 + layout.bar_width,
            top=layout.baseline - height, height=height,
            face_colors=faces,
        ))
    return prisms


def _prism_faces(p: ColumnPrism, layout: ColumnLayout) -> List[Polygon]:
    dx, dy = layout.offset_x, layout.offset_y
    base = layout.baseline
    front_rgb, top_rgb, side_rgb = p.face_colors
    edge_x = p.x1 if dx >= 0 else p.x0

    front = Polygon(
        ((p.x0, p.top), (p.x1, p.top), (p.x1, base), (p.x0, base)),
        fill=to_hex(front_rgb), role='front', index=p.index,
    )
    side = Polygon(
        ((edge_x, p.top), (edge_x + dx, p.top - dy),
         (edge_x + dx, base - dy), (edge_x, base)),
        fill=to_hex(side_rgb), role='side', index=p.index,
    )
    top = Polygon(
        ((p.x0, p.top), (p.x1, p.top),
         (p.x1 + dx, p.top - dy), (p.x0 + dx, p.top - dy)),
        fill=to_hex(top_rgb), role='top', index=p.index,
    )
    return [side, top, front]


def build_column_scene(
    data: ChartData,
    view: ChartViewState = ChartViewState(),
    *,
    width: int = COLUMN_CANVAS_WIDTH,
    height: int = COLUMN_CANVAS_HEIGHT,
    title: str = "",
    for_export: bool = False,
) -> Scene:
    """Describe the pseudo-3D column chart for *data* at *view*.

    Parameters
    ----------
    data : ChartData
        Any finite values, one per category.
    view : ChartViewState
        ``zoom`` scales bar heights, ``tilt`` the isometric rise and
        ``rotation`` the side-face direction.
    width, height : int
        Canvas size in pixels.
    title : str
    for_export : bool
        If ``True``, use the light palette.
    """
    pal = SCENE_LIGHT if for_export else SCENE_DARK
    shapes = []
    n = len(data)

    if n == 0:
        shapes.append(Text(width / 2, height / 2, NO_DATA_TEXT, 14,
                           pal['text_dim'], role='notice'))
    else:
        layout = column_layout(n, width, height, view)
        prisms = compute_prisms(data, layout, view)

        # ── Axis ──────────────────────────────────────────────────────
        right = layout.plot_left + layout.plot_width
        shapes.append(Line(((layout.plot_left, layout.baseline),
                            (right, layout.baseline)),
                           pal['axis'], 1.0, role='axis'))
        lo, hi = min(data.values), max(data.values)
        tick_x = layout.plot_left - 6
        shapes.append(Text(tick_x, layout.baseline, format_value(lo), 10,
                           pal['text_dim'], ha='right', role='axis-label'))
        if hi > lo:
            shapes.append(Text(tick_x, layout.baseline - layout.plot_height * view.zoom,
                               format_value(hi), 10, pal['text_dim'],
                               ha='right', role='axis-label'))

        # ── Prisms: the face-covered neighbour is painted last ────────
        order = prisms if layout.offset_x >= 0 else list(reversed(prisms))
        for p in order:
            shapes.extend(_prism_faces(p, layout))

        # ── Value labels (only where the text fits) ───────────────────
        for p in prisms:
            if layout.bar_width < COLUMN_LABEL_MIN_WIDTH or p.height < COLUMN_LABEL_MIN_HEIGHT:
                continue
            shapes.append(Text(
                p.center_x + layout.offset_x / 2, p.top - layout.offset_y - 4,
                format_value(p.value), 10, pal['text'],
                weight='bold', va='bottom', role='label', index=p.index,
            ))

        # ── Category labels, thinned when crowded ─────────────────────
        cat_px = max(8.0, min(11.0, layout.slot / 4))
        for i in sorted(thinned_label_indices(n)):
            p = prisms[i]
            shapes.append(Text(
                p.center_x, layout.baseline + 8, _short_label(p.label), cat_px,
                pal['text'], va='top', role='category', index=p.index,
            ))

        log.debug(
            "Column scene: %d columns, bar width %.1f, depth %.1f, offset (%.1f, %.1f)",
            n, layout.bar_width, layout.depth, layout.offset_x, layout.offset_y,
        )

    if title:
        shapes.append(Text(width / 2, max(25.0, height * 0.06), title,
                           max(14.0, min(18.0, width / 30.0)), pal['text'],
                           weight='bold', role='title'))

    return Scene(width=width, height=height, background=pal['background'],
                 shapes=tuple(shapes))


def render_column3d(
    fig: Figure,
    data: ChartData,
    view: ChartViewState = ChartViewState(),
    *,
    title: str = "",
    for_export: bool = False,
) -> Scene:
    """Render the pseudo-3D column chart on *fig* at its current pixel size."""
    w_in, h_in = fig.get_size_inches()
    dpi = fig.get_dpi()
    scene = build_column_scene(
        data, view,
        width=int(round(w_in * dpi)), height=int(round(h_in * dpi)),
        title=title, for_export=for_export,
    )
    draw_scene(fig, scene, resize=False)
    return scene
