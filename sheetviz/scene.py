"""
Geometry description and matplotlib interpreter for SheetViz charts.

Chart builders (``chart_pie3d``, ``chart_column3d``, ``chart_legend``)
are pure functions that return a ``Scene``: a canvas size, a background
colour and an ordered list of flat shapes in *pixel* coordinates with
the origin at the top-left and y growing downward.  Shapes are painted
in list order (later shapes on top), so depth ordering is decided by the
builder, not the drawing backend.

``draw_scene`` is the only place that touches matplotlib; it maps each
shape onto a patch, line or text artist on a single full-figure axes.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union

from matplotlib.figure import Figure
from matplotlib.patches import Polygon as MplPolygon

Point = Tuple[float, float]


@dataclass(frozen=True)
class Polygon:
    """Filled closed path.

    ``role`` names what the shape depicts (``"wall"``, ``"top"``,
    ``"front"``, ``"side"``, ``"swatch"``...) and ``index`` the category
    it belongs to (``-1`` for decorations).
    """
    points: Tuple[Point, ...]
    fill: str
    edge: Optional[str] = None
    linewidth: float = 0.0
    role: str = ""
    index: int = -1


@dataclass(frozen=True)
class Line:
    points: Tuple[Point, ...]
    color: str
    linewidth: float = 1.0
    role: str = ""


@dataclass(frozen=True)
class Text:
    """Text anchored at ``(x, y)``; ``size_px`` is the font size in pixels."""
    x: float
    y: float
    text: str
    size_px: float
    color: str
    weight: str = 'normal'
    ha: str = 'center'
    va: str = 'center'
    role: str = ""
    index: int = -1


Shape = Union[Polygon, Line, Text]


@dataclass(frozen=True)
class Scene:
    width: int
    height: int
    background: str
    shapes: Tuple[Shape, ...] = field(default_factory=tuple)

    def with_role(self, role: str) -> Iterator[Shape]:
        return (s for s in self.shapes if s.role == role)

    def texts(self) -> Iterator[Text]:
        return (s for s in self.shapes if isinstance(s, Text))


def _shift(shape: Shape, dy: float) -> Shape:
    if isinstance(shape, Text):
        return Text(shape.x, shape.y + dy, shape.text, shape.size_px,
                    shape.color, shape.weight, shape.ha, shape.va,
                    shape.role, shape.index)
    moved = tuple((x, y + dy) for x, y in shape.points)
    if isinstance(shape, Polygon):
        return Polygon(moved, shape.fill, shape.edge, shape.linewidth,
                       shape.role, shape.index)
    return Line(moved, shape.color, shape.linewidth, shape.role)


def stack_scenes(top: Scene, bottom: Scene,
                 background: Optional[str] = None) -> Scene:
    """Stack *bottom* directly under *top* in one taller scene.

    The composite is as wide as the wider input and exactly
    ``top.height + bottom.height`` tall.
    """
    bg = background or top.background
    shifted = tuple(_shift(s, top.height) for s in bottom.shapes)
    return Scene(
        width=max(top.width, bottom.width),
        height=top.height + bottom.height,
        background=bg,
        shapes=tuple(top.shapes) + shifted,
    )


# ── matplotlib interpreter ───────────────────────────────────────────────

def prepare_figure(fig: Figure, width: int, height: int, dpi: float,
                   *, resize: bool = True):
    """Clear *fig* and return a pixel-space axes covering all of it.

    With ``resize=True`` the figure is set to exactly
    ``width x height`` pixels at *dpi*.
    """
    fig.clf()
    if resize:
        fig.set_dpi(dpi)
        # Half-pixel pad: Agg truncates the float canvas size to int
        fig.set_size_inches((width + 0.5) / dpi, (height + 0.5) / dpi)
    ax = fig.add_axes([0.0, 0.0, 1.0, 1.0])
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_axis_off()
    return ax


def draw_scene(fig: Figure, scene: Scene, *, dpi: Optional[float] = None,
               resize: bool = True) -> None:
    """Paint *scene* on *fig*.

    Parameters
    ----------
    fig : matplotlib.figure.Figure
        Figure to draw on (will be cleared).
    scene : Scene
    dpi : float, optional
        Pixel density used to convert pixel sizes to points.  Defaults
        to the figure's own dpi.
    resize : bool
        If ``True`` the figure is resized to the scene's pixel size;
        GUI canvases pass ``False`` and build the scene at the canvas
        size instead.
    """
    dpi = dpi or fig.get_dpi()
    px_to_pt = 72.0 / dpi
    ax = prepare_figure(fig, scene.width, scene.height, dpi, resize=resize)
    fig.set_facecolor(scene.background)

    for z, shape in enumerate(scene.shapes, start=1):
        if isinstance(shape, Polygon):
            ax.add_patch(MplPolygon(
                shape.points, closed=True,
                facecolor=shape.fill,
                edgecolor=shape.edge or 'none',
                linewidth=shape.linewidth * px_to_pt,
                joinstyle='round',
                antialiased=True,
                zorder=z,
            ))
        elif isinstance(shape, Line):
            xs = [p[0] for p in shape.points]
            ys = [p[1] for p in shape.points]
            ax.plot(xs, ys, color=shape.color,
                    linewidth=shape.linewidth * px_to_pt, zorder=z)
        else:
            ax.text(
                shape.x, shape.y, shape.text,
                fontsize=shape.size_px * px_to_pt,
                color=shape.color,
                fontweight=shape.weight,
                ha=shape.ha, va=shape.va,
                zorder=z,
                clip_on=False,
            )
