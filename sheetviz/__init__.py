"""
SheetViz v1.0.0

Spreadsheet analytics and pseudo-3D chart rendering.

Computes data-quality, descriptive and correlation statistics over
uploaded tabular data, and renders extruded-ellipse pie charts and
isometric column charts with plain 2D drawing primitives.  Charts can
be rotated, zoomed and tilted, and exported as a single PNG with the
legend composited underneath.
"""

APP_NAME = "SheetViz"
APP_VERSION = "1.0.0"
APP_DATE = "2026-10-19"
__version__ = APP_VERSION
