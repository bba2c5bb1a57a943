"""
Constants for SheetViz.

Centralises row caps, view-state bounds, canvas geometry, legend
layout numbers, the colour formula, GUI palettes and matplotlib style
dicts.
"""

import math

# ── Row caps (callers choose one; the core never reads more) ────────────
PREVIEW_ROW_CAP = 50
FULL_ANALYSIS_ROW_CAP = 1000

# ── Type inference / quality thresholds ─────────────────────────────────
TYPE_SAMPLE_SIZE = 100
TYPE_MATCH_RATIO = 0.8
OUTLIER_MIN_VALUES = 4
OUTLIER_IQR_FACTOR = 1.5
COMPLETENESS_WARN_BELOW = 90.0
UNIQUENESS_INFO_BELOW = 50.0
OUTLIER_ALERT_ABOVE = 5.0

INFERRED_NUMERIC = "numeric"
INFERRED_DATE = "date"
INFERRED_TEXT = "text"
INFERRED_EMPTY = "empty"

# ── Correlation classification ──────────────────────────────────────────
STRENGTH_STRONG = "strong"
STRENGTH_MODERATE = "moderate"
STRENGTH_WEAK = "weak"
STRENGTH_VERY_WEAK = "very-weak"

# (lower bound on |r|, label), checked top to bottom
STRENGTH_THRESHOLDS = (
    (0.7, STRENGTH_STRONG),
    (0.3, STRENGTH_MODERATE),
    (0.1, STRENGTH_WEAK),
)
SIGNIFICANCE_T_CRITICAL = 2.0

DEFAULT_MAX_SELECTED_COLUMNS = 5

# ── Chart kinds ─────────────────────────────────────────────────────────
CHART_PIE_3D = "3d-pie"
CHART_COLUMN_3D = "3d-column"
CHART_KINDS = (CHART_PIE_3D, CHART_COLUMN_3D)

# ── View state ──────────────────────────────────────────────────────────
DEFAULT_ROTATION = 0.0
DEFAULT_ZOOM = 1.0
DEFAULT_TILT = 0.6

ROTATION_STEP = math.pi / 6        # toolbar buttons
FINE_ROTATION_STEP = math.pi / 18  # arrow keys
ZOOM_STEP = 0.1
PIE_ZOOM_MIN = 0.5
PIE_ZOOM_MAX = 2.0
COLUMN_ZOOM_FLOOR = 0.1            # zoom must stay positive
TILT_MIN = 0.2
TILT_MAX = 1.0
TILT_STEP = 0.1

# ── Colour formula: hue evenly spaced, S/L cycle in small steps ─────────
COLOR_BASE_SATURATION = 75
COLOR_SATURATION_STEP = 5          # S = 75 - (i % 3) * 5
COLOR_BASE_LIGHTNESS = 65
COLOR_LIGHTNESS_STEP = 8           # L = 65 + (i % 2) * 8
SHADOW_LIGHTNESS = 40
COLUMN_FACE_LIGHTNESS = {
    'top': 75,
    'front': 58,
    'side': 42,
}

# ── Pseudo-3D pie geometry (canvas pixels) ──────────────────────────────
PIE_CANVAS_WIDTH = 700
PIE_CANVAS_HEIGHT = 500
PIE_REFERENCE_SIZE = 450.0
PIE_CENTER_Y_OFFSET = 30
PIE_BASE_RADIUS_X = 130.0
PIE_ASPECT = 85.0 / 130.0
PIE_MAX_RADIUS_X_FRACTION = 0.35
PIE_MAX_RADIUS_Y_FRACTION = 0.30
PIE_BASE_DEPTH = 30.0
PIE_MAX_DEPTH = 35.0
PIE_MIN_DRAWN_SWEEP = 0.005
PIE_LABEL_RADIUS_FRACTION = 0.75
# Inline label threshold in radians: PIE_LABEL_ANGLE_BUDGET / n, clamped
PIE_LABEL_ANGLE_BUDGET = 0.75
PIE_LABEL_ANGLE_MIN = 0.04
PIE_LABEL_ANGLE_MAX = 0.25

# ── Pseudo-3D column geometry (canvas pixels) ───────────────────────────
COLUMN_CANVAS_WIDTH = 700
COLUMN_CANVAS_HEIGHT = 500
COLUMN_MARGIN_LEFT = 50
COLUMN_MARGIN_RIGHT = 40
COLUMN_MARGIN_TOP = 70
COLUMN_MARGIN_BOTTOM = 80
COLUMN_WIDTH_FRACTION = 0.6
COLUMN_MIN_WIDTH = 6.0
COLUMN_MAX_WIDTH = 60.0
COLUMN_DEPTH_FRACTION = 0.5
COLUMN_MAX_DEPTH = 22.0
COLUMN_ISO_ANGLE = math.pi / 6
COLUMN_LABEL_MIN_WIDTH = 18.0
COLUMN_LABEL_MIN_HEIGHT = 14.0
COLUMN_CATEGORY_LABEL_CHARS = 12

# ── Legend layout (canvas pixels) ───────────────────────────────────────
LEGEND_SUMMARY_THRESHOLD = 8
LEGEND_MIN_HEIGHT = 200
LEGEND_ROW_HEIGHT = 30
LEGEND_PADDING = 80
LEGEND_ITEM_MIN_WIDTH = 200
LEGEND_MIN_ITEMS_PER_ROW = 2
LEGEND_MAX_ITEMS_PER_ROW = 4
LEGEND_SIDE_MARGIN = 20
LEGEND_TITLE_OFFSET = 20
LEGEND_FIRST_ROW_OFFSET = 30
LEGEND_SWATCH_SIZE = 12
LEGEND_FONT_PX = 11
LEGEND_TITLE_FONT_PX = 14
LEGEND_SUMMARY_FONT_PX = 10
# Approximate glyph advance as a fraction of font size (for ellipsizing)
GLYPH_WIDTH_RATIO = 0.6
# Grid columns by category count: (max count, narrow cols, wide cols)
LEGEND_GRID_STEPS = (
    (4, 1, 2),
    (8, 2, 3),
    (12, 2, 4),
    (20, 3, 4),
)
LEGEND_GRID_FALLBACK = (3, 4)
LEGEND_WIDE_BREAKPOINT = 768

# ── Font family fallback chain ──────────────────────────────────────────
FONT_FAMILIES = [
    "Segoe UI", "DejaVu Sans", "Liberation Sans", "Noto Sans",
    "Ubuntu", "Helvetica", "Arial", "sans-serif",
]

# ── Dark Catppuccin-inspired GUI colour palette ──────────────────────────
DARK_COLORS = {
    'bg':           '#1e1e2e',
    'bg_alt':       '#252536',
    'surface0':     '#313244',
    'bg_widget':    '#2a2a3c',
    'bg_input':     '#333348',
    'fg':           '#cdd6f4',
    'fg_dim':       '#9399b2',
    'fg_bright':    '#ffffff',
    'accent':       '#89b4fa',
    'accent_hover': '#74c7ec',
    'green':        '#a6e3a1',
    'yellow':       '#f9e2af',
    'red':          '#f38ba8',
    'orange':       '#fab387',
    'border':       '#45475a',
    'overlay0':     '#6c7086',
    'selection':    '#45475a',
    'link':         '#89dceb',
}

# ── Scene palettes (dark = GUI preview, light = export) ─────────────────
SCENE_DARK = {
    'background':   '#1f2937',
    'text':         '#f3f4f6',
    'text_dim':     '#9ca3af',
    'slice_border': '#4b5563',
    'swatch_edge':  '#4b5563',
    'axis':         '#6b7280',
}
SCENE_LIGHT = {
    'background':   '#ffffff',
    'text':         '#1f2937',
    'text_dim':     '#6b7280',
    'slice_border': '#ffffff',
    'swatch_edge':  '#d1d5db',
    'axis':         '#9ca3af',
}

# Contrast text on slices (YIQ rule)
LABEL_DARK_TEXT = '#1f2937'
LABEL_LIGHT_TEXT = '#f9fafb'

# ── Export settings ──────────────────────────────────────────────────────
EXPORT_DPI = 100

# ── matplotlib rcParams (GUI preview uses system fonts) ────────────────
PLOT_STYLE_DARK = {
    'figure.facecolor':  SCENE_DARK['background'],
    'text.color':        SCENE_DARK['text'],
    'font.family':       'sans-serif',
    'font.sans-serif':   FONT_FAMILIES,
}

# Export pins matplotlib's bundled font so PNGs match across machines
PLOT_STYLE_EXPORT = {
    'figure.facecolor':  SCENE_LIGHT['background'],
    'text.color':        SCENE_LIGHT['text'],
    'font.family':       'DejaVu Sans',
    'text.hinting':      'default',
}


# ── Category label thinning (x-axis) ────────────────────────────────────
def thinned_label_indices(n: int) -> set:
    """Return which of *n* category positions get an axis label.

    All labels up to 6 categories, every 2nd up to 14, then every
    ``n // 5``-th (at least 3).  First and last are always kept.

    Examples
    --------
    >>> sorted(thinned_label_indices(4))
    [0, 1, 2, 3]
    >>> sorted(thinned_label_indices(9))
    [0, 2, 4, 6, 8]
    """
    if n < 0:
        raise ValueError(f"thinned_label_indices requires n >= 0, got {n}")
    if n <= 6:
        return set(range(n))
    if n <= 14:
        shown = set(range(0, n, 2))
    else:
        step = max(3, n // 5)
        shown = set(range(0, n, step))
    shown.add(n - 1)
    return shown
