"""
Theme and stylesheet for the SheetViz desktop viewer.

Builds the dark Qt stylesheet from ``DARK_COLORS`` and applies
matplotlib rcParams for the on-screen preview.  Exports never depend on
the GUI theme: they use the light scene palette and
``PLOT_STYLE_EXPORT`` explicitly.
"""

from typing import Dict, List, Tuple

from .constants import DARK_COLORS

# (selector, {property: colour key or literal})
_RULES: List[Tuple[str, Dict[str, str]]] = [
    ("QMainWindow, QWidget", {
        'background-color': 'bg', 'color': 'fg', 'font-size': '13px',
    }),
    ("QTabWidget::pane", {
        'border': '1px solid {border}', 'background-color': 'bg',
    }),
    ("QTabBar::tab", {
        'background-color': 'bg_alt', 'color': 'fg_dim',
        'padding': '8px 18px', 'border': '1px solid {border}',
        'border-bottom': 'none', 'border-top-left-radius': '4px',
        'border-top-right-radius': '4px',
    }),
    ("QTabBar::tab:selected", {
        'background-color': 'bg_widget', 'color': 'accent',
        'border-bottom': '2px solid {accent}',
    }),
    ("QGroupBox", {
        'border': '1px solid {border}', 'border-radius': '6px',
        'margin-top': '12px', 'padding-top': '16px',
        'font-weight': 'bold', 'color': 'accent',
    }),
    ("QGroupBox::title", {
        'subcontrol-origin': 'margin', 'left': '12px', 'padding': '0 6px',
    }),
    ("QPushButton", {
        'background-color': 'bg_widget', 'color': 'fg',
        'border': '1px solid {border}', 'border-radius': '4px',
        'padding': '5px 12px', 'min-height': '22px',
    }),
    ("QPushButton:hover", {
        'background-color': 'selection', 'border-color': 'accent',
    }),
    ("QPushButton:pressed", {
        'background-color': 'accent', 'color': 'bg',
    }),
    ("QPushButton:disabled", {
        'color': 'overlay0', 'background-color': 'bg',
    }),
    ("QLineEdit, QSpinBox, QComboBox", {
        'background-color': 'bg_input', 'color': 'fg',
        'border': '1px solid {border}', 'border-radius': '4px',
        'padding': '3px 8px', 'min-height': '22px',
    }),
    ("QLineEdit:focus, QSpinBox:focus, QComboBox:focus", {
        'border-color': 'accent',
    }),
    ("QComboBox QAbstractItemView", {
        'background-color': 'bg_widget', 'color': 'fg',
        'selection-background-color': 'selection',
    }),
    ("QSlider::groove:horizontal", {
        'background-color': 'surface0', 'height': '6px', 'border-radius': '3px',
    }),
    ("QSlider::handle:horizontal", {
        'background-color': 'accent', 'width': '14px',
        'margin': '-5px 0', 'border-radius': '7px',
    }),
    ("QTableWidget", {
        'background-color': 'bg_widget', 'alternate-background-color': 'bg_alt',
        'color': 'fg', 'gridline-color': 'border',
        'border': '1px solid {border}',
    }),
    ("QHeaderView::section", {
        'background-color': 'bg_alt', 'color': 'fg',
        'padding': '4px 8px', 'border': '1px solid {border}',
        'font-weight': 'bold',
    }),
    ("QTextEdit, QPlainTextEdit", {
        'background-color': 'bg_input', 'color': 'fg',
        'border': '1px solid {border}', 'border-radius': '4px',
    }),
    ("QStatusBar", {
        'background-color': 'bg_alt', 'color': 'fg_dim',
        'border-top': '1px solid {border}',
    }),
    ("QToolTip", {
        'background-color': 'bg_widget', 'color': 'fg',
        'border': '1px solid {accent}', 'padding': '6px',
    }),
    ("QCheckBox", {
        'color': 'fg', 'spacing': '8px',
    }),
    ("QSplitter::handle", {
        'background-color': 'border',
    }),
    ("QLabel", {
        'color': 'fg',
    }),
]


def _resolve(value: str, colors: Dict[str, str]) -> str:
    """A bare palette key becomes its colour; ``{key}`` placeholders are filled."""
    if value in colors:
        return colors[value]
    return value.format(**colors)


def get_dark_stylesheet(colors: Dict[str, str] = DARK_COLORS) -> str:
    """Generate the dark-mode Qt stylesheet."""
    blocks = []
    for selector, props in _RULES:
        body = "\n".join(
            f"    {prop}: {_resolve(value, colors)};" for prop, value in props.items()
        )
        blocks.append(f"{selector} {{\n{body}\n}}")
    return "\n".join(blocks) + "\n"


def apply_plot_style(style_dict: dict) -> None:
    """Apply a style dictionary to matplotlib rcParams.

    Parameters
    ----------
    style_dict : dict
        ``PLOT_STYLE_DARK`` for the preview.
    """
    import matplotlib as mpl
    for key, value in style_dict.items():
        mpl.rcParams[key] = value
