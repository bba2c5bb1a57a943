"""
Pseudo-3D pie chart for SheetViz.

Draws an ellipse extruded downward by ``depth`` to fake a cylinder,
using only flat polygons:

1. one curved outer wall per slice in its shadow colour (back walls
   first so front walls overlap them),
2. one flat top wedge per slice in its base colour, stroked with the
   slice border colour,
3. a percentage label on every slice wide enough to hold one,
4. an optional title.

Slices start at 12 o'clock (``-π/2``) plus the view rotation and run
clockwise on screen in input order, with no gaps and no reordering.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from matplotlib.figure import Figure

from .colors import RGB, color_for, contrast_text, shadow_color, to_hex
from .constants import (
    PIE_ASPECT,
    PIE_BASE_DEPTH,
    PIE_BASE_RADIUS_X,
    PIE_CANVAS_HEIGHT,
    PIE_CANVAS_WIDTH,
    PIE_CENTER_Y_OFFSET,
    PIE_LABEL_ANGLE_BUDGET,
    PIE_LABEL_ANGLE_MAX,
    PIE_LABEL_ANGLE_MIN,
    PIE_LABEL_RADIUS_FRACTION,
    PIE_MAX_DEPTH,
    PIE_MAX_RADIUS_X_FRACTION,
    PIE_MAX_RADIUS_Y_FRACTION,
    PIE_MIN_DRAWN_SWEEP,
    PIE_REFERENCE_SIZE,
    SCENE_DARK,
    SCENE_LIGHT,
)
from .data_model import ChartData
from .scene import Polygon, Scene, Text, draw_scene
from .view_state import ChartViewState

log = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi
START_ANGLE = -math.pi / 2
NO_DATA_TEXT = "No data to display"


@dataclass(frozen=True)
class PieGeometry:
    """Centre, radii and extrusion depth of the pie ellipse, in pixels."""
    cx: float
    cy: float
    radius_x: float
    radius_y: float
    depth: float
    tilt: float

    def point(self, angle: float, lift: float = 0.0) -> Tuple[float, float]:
        """Screen point on the rim at *angle*, pushed down by *lift*."""
        return (
            self.cx + self.radius_x * math.cos(angle),
            self.cy + self.radius_y * math.sin(angle) * self.tilt + lift,
        )


@dataclass(frozen=True)
class PieSlice:
    """Layout of one category.

    Parameters
    ----------
    index : int
        Category position in the input.
    label : str
    value : float
    percentage : float
        ``value / total * 100`` (unrounded).
    start_angle : float
        Radians, screen convention (y down).
    sweep : float
        Angular extent in radians.
    color, shadow : tuple of float
        Top and wall colours (RGB in ``[0, 1]``).
    labeled : bool
        Whether an inline percentage label is drawn.
    """
    index: int
    label: str
    value: float
    percentage: float
    start_angle: float
    sweep: float
    color: RGB
    shadow: RGB
    labeled: bool

    @property
    def mid_angle(self) -> float:
        return self.start_angle + self.sweep / 2

    @property
    def drawn(self) -> bool:
        return self.sweep > PIE_MIN_DRAWN_SWEEP


def pie_geometry(width: float, height: float, view: ChartViewState) -> PieGeometry:
    """Size the ellipse for a *width* x *height* canvas at the view's zoom."""
    scale = min(width, height) / PIE_REFERENCE_SIZE
    radius_x = min(PIE_BASE_RADIUS_X * scale * view.zoom,
                   width * PIE_MAX_RADIUS_X_FRACTION)
    radius_y = min(radius_x * PIE_ASPECT, height * PIE_MAX_RADIUS_Y_FRACTION)
    depth = min(PIE_BASE_DEPTH * scale * view.zoom, PIE_MAX_DEPTH)
    return PieGeometry(
        cx=width / 2,
        cy=height / 2 - PIE_CENTER_Y_OFFSET,
        radius_x=radius_x,
        radius_y=radius_y,
        depth=depth,
        tilt=view.tilt,
    )


def label_threshold(n_categories: int) -> float:
    """Minimum sweep (radians) for an inline label.

    Shrinks as the category count grows: few large slices need a wide
    slice before a label looks placed, many small ones need every label
    that can fit.
    """
    if n_categories < 1:
        return PIE_LABEL_ANGLE_MAX
    return max(PIE_LABEL_ANGLE_MIN,
               min(PIE_LABEL_ANGLE_MAX, PIE_LABEL_ANGLE_BUDGET / n_categories))


def enforce_min_sweep(sweeps: Sequence[float], min_sweep: float) -> List[float]:
    """Widen tiny slices to *min_sweep*, taking the deficit from the largest.

    The total stays ``2π``.  Zero-value slices are left at zero.
    """
    out = list(sweeps)
    deficit = 0.0
    for i, s in enumerate(out):
        if 0 < s < min_sweep:
            deficit += min_sweep - s
            out[i] = min_sweep
    if deficit > 0:
        largest = max(range(len(out)), key=lambda i: (out[i], -i))
        out[largest] -= deficit
    return out


def compute_slices(data: ChartData, view: ChartViewState, *,
                   min_slice_angle: Optional[float] = None) -> List[PieSlice]:
    """Lay out one ``PieSlice`` per category.

    Raises
    ------
    ValueError
        If any value is negative.
    """
    n = len(data)
    for label, v in zip(data.labels, data.values):
        if v < 0:
            raise ValueError(f"Pie values must be non-negative; {label!r} is {v}")
    total = data.total
    # Guard: nothing to divide by
    if n == 0 or total <= 0:
        return []

    sweeps = [TWO_PI * v / total for v in data.values]
    if min_slice_angle:
        sweeps = enforce_min_sweep(sweeps, min_slice_angle)
    threshold = label_threshold(n)

    slices: List[PieSlice] = []
    angle = START_ANGLE + view.rotation
    for i, (label, value, sweep) in enumerate(zip(data.labels, data.values, sweeps)):
        slices.append(PieSlice(
            index=i,
            label=label,
            value=value,
            percentage=value / total * 100.0,
            start_angle=angle,
            sweep=sweep,
            color=color_for(i, n),
            shadow=shadow_color(i, n),
            labeled=sweep > threshold,
        ))
        angle += sweep
    return slices


def _wall_polygon(geo: PieGeometry, s: PieSlice) -> Polygon:
    steps = max(8, min(15, int(math.floor(s.sweep * 25))))
    angles = [s.start_angle + s.sweep * k / steps for k in range(steps + 1)]
    upper = [geo.point(a) for a in angles]
    lower = [geo.point(a, geo.depth) for a in reversed(angles)]
    return Polygon(tuple(upper + lower), fill=to_hex(s.shadow),
                   role='wall', index=s.index)


def _top_polygon(geo: PieGeometry, s: PieSlice, border: str) -> Polygon:
    steps = max(8, min(20, int(math.floor(s.sweep / (math.pi / 30)))))
    rim = [geo.point(s.start_angle + s.sweep * k / steps) for k in range(steps + 1)]
    return Polygon(((geo.cx, geo.cy),) + tuple(rim), fill=to_hex(s.color),
                   edge=border, linewidth=1.5, role='top', index=s.index)


def build_pie_scene(
    data: ChartData,
    view: ChartViewState = ChartViewState(),
    *,
    width: int = PIE_CANVAS_WIDTH,
    height: int = PIE_CANVAS_HEIGHT,
    title: str = "",
    for_export: bool = False,
    min_slice_angle: Optional[float] = None,
) -> Scene:
    """Describe the pseudo-3D pie for *data* at *view* as a ``Scene``.

    Parameters
    ----------
    data : ChartData
        Non-negative values, one per category.
    view : ChartViewState
    width, height : int
        Canvas size in pixels.
    title : str
        Drawn centred above the pie when non-empty.
    for_export : bool
        If ``True``, use the light palette.
    min_slice_angle : float, optional
        Widen slices narrower than this (radians) so they stay visible.
        Off by default; sweeps then match the data exactly.
    """
    pal = SCENE_LIGHT if for_export else SCENE_DARK
    slices = compute_slices(data, view, min_slice_angle=min_slice_angle)
    shapes = []

    if not slices:
        shapes.append(Text(width / 2, height / 2, NO_DATA_TEXT, 14,
                           pal['text_dim'], role='notice'))
    else:
        geo = pie_geometry(width, height, view)
        drawn = [s for s in slices if s.drawn]

        # ── Walls: back (smaller screen y) first ──────────────────────
        for s in sorted(drawn, key=lambda s: (math.sin(s.mid_angle), s.index)):
            shapes.append(_wall_polygon(geo, s))

        # ── Tops ──────────────────────────────────────────────────────
        for s in drawn:
            shapes.append(_top_polygon(geo, s, pal['slice_border']))

        # ── Labels ────────────────────────────────────────────────────
        font_px = max(9.0, min(12.0, 140.0 / len(slices)))
        for s in slices:
            if not s.labeled:
                continue
            x = geo.cx + geo.radius_x * PIE_LABEL_RADIUS_FRACTION * math.cos(s.mid_angle)
            y = geo.cy + (geo.radius_y * PIE_LABEL_RADIUS_FRACTION
                          * math.sin(s.mid_angle) * geo.tilt)
            shapes.append(Text(x, y, f"{s.percentage:.1f}%", font_px,
                               contrast_text(s.color), weight='bold',
                               role='label', index=s.index))

        log.debug(
            "Pie scene: %d slices (%d drawn, %d labelled), rx=%.1f ry=%.1f depth=%.1f",
            len(slices), len(drawn), sum(s.labeled for s in slices),
            geo.radius_x, geo.radius_y, geo.depth,
        )

    if title:
        shapes.append(Text(width / 2, max(25.0, height * 0.06), title,
                           max(14.0, min(18.0, width / 30.0)), pal['text'],
                           weight='bold', role='title'))

    return Scene(width=width, height=height, background=pal['background'],
                 shapes=tuple(shapes))


def render_pie3d(
    fig: Figure,
    data: ChartData,
    view: ChartViewState = ChartViewState(),
    *,
    title: str = "",
    for_export: bool = False,
) -> Scene:
    """Render the pseudo-3D pie on *fig* at the figure's current pixel size.

    Parameters
    ----------
    fig : matplotlib.figure.Figure
        Figure to draw on (will be cleared).
    data : ChartData
    view : ChartViewState
    title : str
    for_export : bool
        If ``True``, use the light palette.

    Returns
    -------
    Scene
        The geometry that was drawn.
    """
    w_in, h_in = fig.get_size_inches()
    dpi = fig.get_dpi()
    scene = build_pie_scene(
        data, view,
        width=int(round(w_in * dpi)), height=int(round(h_in * dpi)),
        title=title, for_export=for_export,
    )
    draw_scene(fig, scene, resize=False)
    return scene