"""
Legend layout for SheetViz charts.

Builds one ``LegendEntry`` per category from the same colour function
the renderers use, and lays the entries out as a grid of swatches with
``label: percentage%`` text ellipsized to the cell width.

Two grid policies exist:

- the on-screen legend picks its column count from the category count
  (``legend_grid_columns``), using the wider option on wide canvases;
- the export composite fits 2-4 items per row to the chart width and
  grows in height with a fixed formula, so exported image size depends
  only on ``(width, height, category count)``.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .colors import RGB, color_for, to_hex
from .constants import (
    GLYPH_WIDTH_RATIO,
    LEGEND_FIRST_ROW_OFFSET,
    LEGEND_FONT_PX,
    LEGEND_GRID_FALLBACK,
    LEGEND_GRID_STEPS,
    LEGEND_ITEM_MIN_WIDTH,
    LEGEND_MAX_ITEMS_PER_ROW,
    LEGEND_MIN_HEIGHT,
    LEGEND_MIN_ITEMS_PER_ROW,
    LEGEND_PADDING,
    LEGEND_ROW_HEIGHT,
    LEGEND_SIDE_MARGIN,
    LEGEND_SUMMARY_FONT_PX,
    LEGEND_SUMMARY_THRESHOLD,
    LEGEND_SWATCH_SIZE,
    LEGEND_TITLE_FONT_PX,
    LEGEND_TITLE_OFFSET,
    LEGEND_WIDE_BREAKPOINT,
    SCENE_DARK,
    SCENE_LIGHT,
)
from .data_model import ChartData
from .scene import Polygon, Scene, Text
from .table_parser import round_half_up


@dataclass(frozen=True)
class LegendEntry:
    """One legend row.

    ``percentage`` is pre-formatted with one decimal (``"12.5"``) so the
    legend and the pie labels agree on rounding.
    """
    index: int
    label: str
    value: float
    percentage: str
    color: RGB

    @property
    def text(self) -> str:
        return f"{self.label}: {self.percentage}%"

    def fitted_text(self, max_width_px: float, font_px: float = LEGEND_FONT_PX) -> str:
        """``label: pct%`` with only the label ellipsized to fit."""
        suffix = f": {self.percentage}%"
        label_px = max_width_px - len(suffix) * font_px * GLYPH_WIDTH_RATIO
        return ellipsize(self.label, label_px, font_px) + suffix


def format_percentage(value: float, total: float) -> str:
    # Guard: zero total → every share is 0
    if total <= 0:
        return "0.0"
    return f"{round_half_up(value / total * 100, 1):.1f}"


def format_total(total: float) -> str:
    """Thousands-separated total with at most three decimals."""
    if float(total).is_integer():
        return f"{total:,.0f}"
    return f"{total:,.3f}".rstrip('0').rstrip('.')


def legend_entries(data: ChartData) -> List[LegendEntry]:
    """One entry per category, coloured exactly like the chart."""
    n = len(data)
    total = data.total
    return [
        LegendEntry(
            index=i,
            label=label,
            value=value,
            percentage=format_percentage(value, total),
            color=color_for(i, n),
        )
        for i, (label, value) in enumerate(zip(data.labels, data.values))
    ]


def legend_grid_columns(count: int) -> Tuple[int, int]:
    """``(narrow, wide)`` column counts for an on-screen legend of *count* items."""
    for limit, narrow, wide in LEGEND_GRID_STEPS:
        if count <= limit:
            return narrow, wide
    return LEGEND_GRID_FALLBACK


def columns_for_width(count: int, width: float) -> int:
    narrow, wide = legend_grid_columns(count)
    return wide if width >= LEGEND_WIDE_BREAKPOINT else narrow


def export_items_per_row(chart_width: float) -> int:
    """Items per legend row in an exported composite (2 to 4)."""
    fit = int(math.floor(chart_width / LEGEND_ITEM_MIN_WIDTH))
    return min(LEGEND_MAX_ITEMS_PER_ROW, max(LEGEND_MIN_ITEMS_PER_ROW, fit))


def legend_height(count: int, items_per_row: int) -> int:
    """``max(minHeight, ceil(count / items_per_row) * rowHeight + padding)``."""
    if items_per_row < 1:
        raise ValueError(f"items_per_row must be >= 1, got {items_per_row}")
    rows = math.ceil(count / items_per_row)
    return max(LEGEND_MIN_HEIGHT, rows * LEGEND_ROW_HEIGHT + LEGEND_PADDING)


def ellipsize(text: str, max_width_px: float, font_px: float = LEGEND_FONT_PX) -> str:
    """Trim *text* with a trailing ``…`` so it fits *max_width_px*.

    Width is estimated from an average glyph advance, which keeps the
    result independent of installed fonts.
    """
    max_chars = int(max_width_px // (font_px * GLYPH_WIDTH_RATIO))
    if len(text) <= max_chars:
        return text
    if max_chars <= 1:
        return "…"
    return text[:max_chars - 1] + "…"


def summary_line(entries: Sequence[LegendEntry]) -> Optional[str]:
    """``"<n> categories • Total: <sum>"`` when there are more than eight."""
    if len(entries) <= LEGEND_SUMMARY_THRESHOLD:
        return None
    total = math.fsum(e.value for e in entries)
    return f"{len(entries)} categories • Total: {format_total(total)}"


def build_legend_scene(
    entries: Sequence[LegendEntry],
    width: int,
    *,
    columns: Optional[int] = None,
    for_export: bool = False,
) -> Scene:
    """Lay *entries* out as a swatch grid *width* pixels wide.

    Parameters
    ----------
    entries : sequence of LegendEntry
    width : int
        Legend width in pixels.
    columns : int, optional
        Items per row.  Defaults to the export rule for *width*.
    for_export : bool
        If ``True``, use the light palette.

    Returns
    -------
    Scene
        Height is ``legend_height(len(entries), columns)``.
    """
    pal = SCENE_LIGHT if for_export else SCENE_DARK
    per_row = columns or export_items_per_row(width)
    height = legend_height(len(entries), per_row)
    item_width = (width - 2 * LEGEND_SIDE_MARGIN) / per_row
    half = LEGEND_SWATCH_SIZE / 2

    shapes = [Text(
        LEGEND_SIDE_MARGIN, LEGEND_TITLE_OFFSET,
        f"Legend ({len(entries)} items)", LEGEND_TITLE_FONT_PX, pal['text'],
        weight='bold', ha='left', role='legend-title',
    )]

    for pos, entry in enumerate(entries):
        row, col = divmod(pos, per_row)
        x = LEGEND_SIDE_MARGIN + col * item_width
        y = LEGEND_TITLE_OFFSET + LEGEND_FIRST_ROW_OFFSET + row * LEGEND_ROW_HEIGHT
        shapes.append(Polygon(
            ((x, y - half), (x + LEGEND_SWATCH_SIZE, y - half),
             (x + LEGEND_SWATCH_SIZE, y + half), (x, y + half)),
            fill=to_hex(entry.color), edge=pal['swatch_edge'], linewidth=1.0,
            role='swatch', index=entry.index,
        ))
        shapes.append(Text(
            x + LEGEND_SWATCH_SIZE + 6, y,
            entry.fitted_text(item_width - LEGEND_SWATCH_SIZE - 8),
            LEGEND_FONT_PX, pal['text'], ha='left', role='legend-item',
            index=entry.index,
        ))

    summary = summary_line(entries)
    if summary:
        rows = math.ceil(len(entries) / per_row)
        shapes.append(Text(
            width / 2,
            LEGEND_TITLE_OFFSET + LEGEND_FIRST_ROW_OFFSET + 10 + rows * LEGEND_ROW_HEIGHT,
            summary, LEGEND_SUMMARY_FONT_PX, pal['text_dim'], role='summary',
        ))

    return Scene(width=width, height=height, background=pal['background'],
                 shapes=tuple(shapes))
