"""
Deterministic category colours for SheetViz.

Every chart, legend and export colours category *i* of *n* with the
same pure function, so a given dataset always renders identically and
legend swatches always match their slices or columns.

Hue is spaced evenly around the wheel (``i * 360 / n``); saturation
cycles over three steps and lightness over two, which keeps adjacent
categories distinguishable when many hues are close together.
"""

import colorsys
from typing import Tuple

from matplotlib.colors import to_hex as _mpl_to_hex

from .constants import (
    COLOR_BASE_LIGHTNESS,
    COLOR_BASE_SATURATION,
    COLOR_LIGHTNESS_STEP,
    COLOR_SATURATION_STEP,
    LABEL_DARK_TEXT,
    LABEL_LIGHT_TEXT,
    SHADOW_LIGHTNESS,
)

RGB = Tuple[float, float, float]


def hsl_for(index: int, total: int) -> Tuple[float, float, float]:
    """Return ``(hue°, saturation%, lightness%)`` for category *index*.

    Raises ``ValueError`` if *total* < 1 or *index* is out of range.
    """
    if total < 1:
        raise ValueError(f"total must be >= 1, got {total}")
    if not 0 <= index < total:
        raise ValueError(f"index {index} out of range for {total} categories")
    hue = index * 360.0 / total
    saturation = COLOR_BASE_SATURATION - (index % 3) * COLOR_SATURATION_STEP
    lightness = COLOR_BASE_LIGHTNESS + (index % 2) * COLOR_LIGHTNESS_STEP
    return hue, saturation, lightness


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> RGB:
    """Convert CSS-style HSL (degrees, percent, percent) to RGB floats."""
    r, g, b = colorsys.hls_to_rgb(
        (hue % 360.0) / 360.0, lightness / 100.0, saturation / 100.0,
    )
    return (r, g, b)


def color_for(index: int, total: int) -> RGB:
    """Base colour of category *index* of *total*, as RGB in ``[0, 1]``."""
    return hsl_to_rgb(*hsl_for(index, total))


def color_with_lightness(index: int, total: int, lightness: float) -> RGB:
    """Category hue and saturation at an explicit lightness."""
    hue, saturation, _ = hsl_for(index, total)
    return hsl_to_rgb(hue, saturation, lightness)


def shadow_color(index: int, total: int) -> RGB:
    """Darker shade used for extruded walls."""
    return color_with_lightness(index, total, SHADOW_LIGHTNESS)


def to_hex(rgb: RGB) -> str:
    return _mpl_to_hex(rgb)


def contrast_text(rgb: RGB) -> str:
    """Dark or light text colour for legibility on *rgb* (YIQ rule)."""
    r, g, b = (c * 255 for c in rgb)
    yiq = (r * 299 + g * 587 + b * 114) / 1000
    return LABEL_DARK_TEXT if yiq >= 128 else LABEL_LIGHT_TEXT
