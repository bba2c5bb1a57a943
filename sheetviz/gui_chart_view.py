"""
Chart and analysis tabs (right side) for the SheetViz desktop viewer.

The chart tab hosts the interactive pseudo-3D chart and its legend on
two matplotlib canvases.  Every rotate, zoom or tilt control is
translated into a view action and fed through ``reduce_view_state``;
the chart is then rebuilt from ``(data, view)``.  The analysis tab shows
the data quality, summary statistics and correlation report.
"""

import logging
import os
from typing import Optional

from PySide6.QtWidgets import (
    QTabWidget, QWidget, QVBoxLayout, QHBoxLayout, QSplitter,
    QPushButton, QFileDialog, QMessageBox, QLabel, QSlider,
    QTableWidget, QTableWidgetItem, QHeaderView, QTextEdit,
)
from PySide6.QtCore import Qt

import matplotlib
matplotlib.use('QtAgg')
from matplotlib.figure import Figure
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas

from .analysis import AnalysisResult, export_analysis_json, run_analysis
from .chart_column3d import render_column3d
from .chart_config import ChartSavePayload, load_chart_config, save_chart_config
from .chart_legend import build_legend_scene, columns_for_width, legend_entries
from .chart_pie3d import render_pie3d
from .constants import (
    CHART_COLUMN_3D, CHART_PIE_3D, DARK_COLORS, FINE_ROTATION_STEP,
    PLOT_STYLE_DARK, ROTATION_STEP, SCENE_DARK, TILT_MAX, TILT_MIN,
    TILT_STEP, ZOOM_STEP,
)
from .data_model import ChartData, Table
from .errors import SheetVizError
from .export import copy_to_clipboard, export_chart_png, render_chart_png
from .scene import draw_scene
from .table_parser import chart_data_from_table
from .theme import apply_plot_style
from .view_state import (
    ChartViewState, Reset, Rotate, SetTilt, StepTilt, Zoom, reduce_view_state,
)

log = logging.getLogger(__name__)

_RENDERERS = {
    CHART_PIE_3D: render_pie3d,
    CHART_COLUMN_3D: render_column3d,
}

# Slider works in integer hundredths of the tilt ratio
_TILT_SCALE = 100


def _small_button(text: str, tooltip: str = "") -> QPushButton:
    btn = QPushButton(text)
    btn.setFixedHeight(28)
    btn.setStyleSheet("font-size: 11px; padding: 2px 8px;")
    if tooltip:
        btn.setToolTip(tooltip)
    return btn


class _ChartTab(QWidget):
    """Interactive chart canvas, legend canvas and view controls."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._data = None
        self._kind = CHART_PIE_3D
        self._title = ""
        self._include_legend = True
        self._view = ChartViewState()

        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(4)

        # ── View controls ────────────────────────────────────────────
        controls = QHBoxLayout()
        controls.setSpacing(4)

        self._btn_rot_left = _small_button("⟲ Rotate", "Rotate left (Left arrow)")
        self._btn_rot_right = _small_button("Rotate ⟳", "Rotate right (Right arrow)")
        self._btn_zoom_in = _small_button("Zoom +", "Zoom in (+)")
        self._btn_zoom_out = _small_button("Zoom −", "Zoom out (−)")
        self._btn_reset = _small_button("Reset View")

        self._sld_tilt = QSlider(Qt.Orientation.Horizontal)
        self._sld_tilt.setRange(int(TILT_MIN * _TILT_SCALE), int(TILT_MAX * _TILT_SCALE))
        self._sld_tilt.setSingleStep(int(TILT_STEP * _TILT_SCALE))
        self._sld_tilt.setValue(int(round(self._view.tilt * _TILT_SCALE)))
        self._sld_tilt.setFixedWidth(120)
        self._sld_tilt.setToolTip("Tilt (T steps it up)")

        for w in (self._btn_rot_left, self._btn_rot_right,
                  self._btn_zoom_in, self._btn_zoom_out):
            controls.addWidget(w)
        controls.addWidget(QLabel("Tilt:"))
        controls.addWidget(self._sld_tilt)
        controls.addWidget(self._btn_reset)
        controls.addStretch()

        self._btn_copy = _small_button("Copy to Clipboard")
        self._btn_export = _small_button("Export PNG...")
        self._btn_save = _small_button("Save Chart...")
        self._btn_load = _small_button("Open Chart...")
        for w in (self._btn_copy, self._btn_export, self._btn_save, self._btn_load):
            controls.addWidget(w)

        layout.addLayout(controls)

        # ── Canvases ─────────────────────────────────────────────────
        self._fig = Figure(figsize=(7, 5))
        self._fig.set_facecolor(SCENE_DARK['background'])
        self._canvas = FigureCanvas(self._fig)
        self._canvas.mpl_connect('resize_event', lambda *_: self.redraw())

        self._legend_fig = Figure(figsize=(7, 2))
        self._legend_fig.set_facecolor(SCENE_DARK['background'])
        self._legend_canvas = FigureCanvas(self._legend_fig)
        self._legend_canvas.mpl_connect('resize_event', lambda *_: self._redraw_legend())

        layout.addWidget(self._canvas, 1)
        layout.addWidget(self._legend_canvas)

        self._connect_signals()
        self._set_enabled(False)

    def _connect_signals(self):
        self._btn_rot_left.clicked.connect(lambda *_: self.dispatch(Rotate(-ROTATION_STEP)))
        self._btn_rot_right.clicked.connect(lambda *_: self.dispatch(Rotate(ROTATION_STEP)))
        self._btn_zoom_in.clicked.connect(lambda *_: self.dispatch(Zoom(ZOOM_STEP)))
        self._btn_zoom_out.clicked.connect(lambda *_: self.dispatch(Zoom(-ZOOM_STEP)))
        self._btn_reset.clicked.connect(lambda *_: self.dispatch(Reset()))
        self._sld_tilt.valueChanged.connect(
            lambda value: self.dispatch(SetTilt(value / _TILT_SCALE))
        )
        self._btn_copy.clicked.connect(lambda *_: self._on_copy())
        self._btn_export.clicked.connect(lambda *_: self._on_export())
        self._btn_save.clicked.connect(lambda *_: self._on_save())
        self._btn_load.clicked.connect(lambda *_: self._on_load())

    def _set_enabled(self, enabled: bool):
        for w in (self._btn_rot_left, self._btn_rot_right, self._btn_zoom_in,
                  self._btn_zoom_out, self._btn_reset, self._sld_tilt,
                  self._btn_copy, self._btn_export, self._btn_save):
            w.setEnabled(enabled)

    # ── State ────────────────────────────────────────────────────────

    @property
    def view(self) -> ChartViewState:
        return self._view

    def set_chart(self, data: ChartData, chart_kind: str, title: str = "",
                  include_legend: bool = True,
                  view: Optional[ChartViewState] = None) -> None:
        """Bind new chart data; the current view carries over unless given."""
        self._data = data
        self._kind = chart_kind
        self._title = title
        self._include_legend = include_legend
        base = view if view is not None else self._view
        # Zoom(0) re-applies the zoom bounds of the new chart kind
        self._view = reduce_view_state(base, Zoom(0.0), chart_kind)
        self._sync_slider()
        self._set_enabled(True)
        self.redraw()

    def dispatch(self, action) -> None:
        """Apply a view action and redraw."""
        if self._data is None:
            return
        self._view = reduce_view_state(self._view, action, self._kind)
        log.debug("View %s -> %s", type(action).__name__, self._view)
        self._sync_slider()
        self.redraw()

    def _sync_slider(self):
        self._sld_tilt.blockSignals(True)
        self._sld_tilt.setValue(int(round(self._view.tilt * _TILT_SCALE)))
        self._sld_tilt.blockSignals(False)

    def keyPressEvent(self, event):
        key = event.key()
        if key == Qt.Key.Key_Left:
            self.dispatch(Rotate(-FINE_ROTATION_STEP))
        elif key == Qt.Key.Key_Right:
            self.dispatch(Rotate(FINE_ROTATION_STEP))
        elif key in (Qt.Key.Key_Plus, Qt.Key.Key_Equal):
            self.dispatch(Zoom(ZOOM_STEP))
        elif key in (Qt.Key.Key_Minus, Qt.Key.Key_Underscore):
            self.dispatch(Zoom(-ZOOM_STEP))
        elif key == Qt.Key.Key_T:
            self.dispatch(StepTilt(TILT_STEP))
        else:
            super().keyPressEvent(event)

    # ── Drawing ──────────────────────────────────────────────────────

    def redraw(self):
        if self._data is None:
            return
        _RENDERERS[self._kind](self._fig, self._data, self._view, title=self._title)
        self._canvas.draw_idle()
        self._redraw_legend()

    def _redraw_legend(self):
        if self._data is None:
            return
        width = max(1, self._legend_canvas.width())
        entries = legend_entries(self._data)
        scene = build_legend_scene(
            entries, width, columns=columns_for_width(len(entries), width),
        )
        self._legend_canvas.setFixedHeight(scene.height)
        draw_scene(self._legend_fig, scene, resize=False)
        self._legend_canvas.draw_idle()

    # ── Export / persistence ─────────────────────────────────────────

    def _status(self, text: str):
        self.window().statusBar().showMessage(text, 3000)

    def _on_copy(self):
        try:
            png = render_chart_png(self._kind, self._data, self._view,
                                   title=self._title,
                                   include_legend=self._include_legend)
        except SheetVizError as exc:
            log.warning("Clipboard render failed: %s", exc)
            png = None
        if png is not None and copy_to_clipboard(png):
            self._status("Chart copied to clipboard")
        else:
            QMessageBox.warning(self, "Copy Failed",
                                "Could not copy chart to clipboard.")

    def _on_export(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Chart as PNG",
            "", "PNG Files (*.png);;All Files (*)",
        )
        if not path:
            return
        if not path.lower().endswith('.png'):
            path += '.png'
        try:
            export_chart_png(self._kind, self._data, self._view, path,
                             title=self._title,
                             include_legend=self._include_legend)
        except SheetVizError as exc:
            log.warning("Export to %s failed: %s", path, exc)
            QMessageBox.critical(self, "Export Error", f"Failed to export: {exc}")
            return
        self._status(f"Exported to {os.path.basename(path)}")

    def _on_save(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Save Chart Configuration",
            "", "Chart JSON (*.json);;All Files (*)",
        )
        if not path:
            return
        if not path.lower().endswith('.json'):
            path += '.json'
        payload = ChartSavePayload.from_chart(self._kind, self._data,
                                              self._view, self._title)
        try:
            save_chart_config(payload, path)
        except SheetVizError as exc:
            log.warning("Saving chart to %s failed: %s", path, exc)
            QMessageBox.critical(self, "Save Error", f"Failed to save: {exc}")
            return
        self._status(f"Saved {os.path.basename(path)}")

    def _on_load(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Chart Configuration",
            "", "Chart JSON (*.json);;All Files (*)",
        )
        if not path:
            return
        try:
            payload = load_chart_config(path)
            if payload.chart_type not in _RENDERERS:
                raise ValueError(f"Unsupported chart type: {payload.chart_type!r}")
        except (ValueError, OSError) as exc:
            log.warning("Could not open chart %s: %s", path, exc)
            QMessageBox.critical(self, "Open Error", str(exc))
            return
        self.set_chart(payload.data, payload.chart_type, payload.title,
                       self._include_legend, view=payload.view)
        self._status(f"Opened {os.path.basename(path)}")


class _AnalysisTab(QWidget):
    """Data quality, summary statistics and correlation report."""

    _STAT_ROWS = [
        ('Count', 'count'), ('Mean', 'mean'), ('Median', 'median'),
        ('Mode', 'mode'), ('Min', 'min'), ('Max', 'max'), ('Range', 'range'),
        ('Variance', 'variance'), ('Std. Dev.', 'standard_deviation'),
        ('Skewness', 'skewness'), ('Kurtosis', 'kurtosis'),
        ('Q1', 'q1'), ('Q3', 'q3'),
    ]

    def __init__(self, parent=None):
        super().__init__(parent)
        self._result = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(4)

        top = QHBoxLayout()
        self._lbl_notice = QLabel("")
        self._lbl_notice.setStyleSheet(f"color: {DARK_COLORS['yellow']};")
        top.addWidget(self._lbl_notice, 1)
        self._btn_export = _small_button("Export Report JSON...")
        self._btn_export.setEnabled(False)
        self._btn_export.clicked.connect(lambda *_: self._on_export())
        top.addWidget(self._btn_export)
        layout.addLayout(top)

        splitter = QSplitter(Qt.Orientation.Vertical)

        self._tbl_quality = self._make_table(
            ["Column", "Type", "Completeness %", "Uniqueness %", "Outliers"]
        )
        self._txt_recs = QTextEdit()
        self._txt_recs.setReadOnly(True)
        self._tbl_stats = self._make_table([])
        self._tbl_corr = self._make_table(
            ["Column A", "Column B", "r", "Strength", "Significant", "n",
             "Interpretation"]
        )

        for title, widget in (
            ("Data Quality", self._tbl_quality),
            ("Recommendations", self._txt_recs),
            ("Summary Statistics", self._tbl_stats),
            ("Correlations", self._tbl_corr),
        ):
            box = QWidget()
            box_layout = QVBoxLayout(box)
            box_layout.setContentsMargins(0, 0, 0, 0)
            lbl = QLabel(title)
            lbl.setStyleSheet(f"color: {DARK_COLORS['accent']}; font-weight: bold;")
            box_layout.addWidget(lbl)
            box_layout.addWidget(widget)
            splitter.addWidget(box)

        layout.addWidget(splitter, 1)

    @staticmethod
    def _make_table(headers) -> QTableWidget:
        tbl = QTableWidget(0, len(headers))
        tbl.setHorizontalHeaderLabels(headers)
        tbl.setAlternatingRowColors(True)
        tbl.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        tbl.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        return tbl

    @staticmethod
    def _fill(tbl: QTableWidget, rows):
        tbl.setRowCount(len(rows))
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                tbl.setItem(r, c, QTableWidgetItem(str(value)))

    def show_result(self, result: AnalysisResult) -> None:
        self._result = result
        self._btn_export.setEnabled(True)
        self._lbl_notice.setText(result.notice or "")

        quality = result.quality
        self._fill(self._tbl_quality, [
            (p.name, p.inferred_type, f"{p.completeness:.2f}",
             f"{p.uniqueness:.2f}",
             f"{p.outlier_count} ({p.outlier_percentage:.2f}%)")
            for p in quality.per_column
        ])

        self._txt_recs.setPlainText("\n\n".join(
            f"[{rec.kind.upper()}] {rec.message}\n    → {rec.action}"
            for rec in quality.recommendations
        ) or "No issues found.")

        columns = list(result.summary)
        self._tbl_stats.clear()
        self._tbl_stats.setColumnCount(len(columns) + 1)
        self._tbl_stats.setHorizontalHeaderLabels(["Statistic"] + columns)
        self._fill(self._tbl_stats, [
            [label] + [f"{getattr(result.summary[c], attr):.4g}" for c in columns]
            for label, attr in self._STAT_ROWS
        ])

        self._fill(self._tbl_corr, [
            (c.column_a, c.column_b, f"{c.coefficient:.3f}", c.strength,
             "yes" if c.significant else "no", c.sample_size, c.interpretation)
            for c in result.correlations
        ])

    def _on_export(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Analysis Report",
            "", "JSON Files (*.json);;All Files (*)",
        )
        if not path:
            return
        try:
            export_analysis_json(self._result, path)
        except (OSError, ValueError) as exc:
            log.warning("Report export to %s failed: %s", path, exc)
            QMessageBox.critical(self, "Export Error", f"Failed to export: {exc}")


class ChartViewWidget(QTabWidget):
    """Tabbed container: interactive chart and analysis report."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._chart_tab = _ChartTab()
        self._analysis_tab = _AnalysisTab()
        self.addTab(self._chart_tab, "Chart")
        self.addTab(self._analysis_tab, "Analysis")

        apply_plot_style(PLOT_STYLE_DARK)

    @property
    def chart_tab(self) -> _ChartTab:
        return self._chart_tab

    def update_views(self, table: Table, config: dict) -> None:
        """Rebind the chart and rerun the analysis.

        Parameters
        ----------
        table : Table
        config : dict
            From ``ConfigPanel.get_config()``.
        """
        data = chart_data_from_table(table, config['label_column'],
                                     config['value_column'])
        self._chart_tab.set_chart(
            data, config.get('chart_kind', CHART_PIE_3D),
            title=config.get('title', ""),
            include_legend=config.get('show_legend', True),
        )
        self._analysis_tab.show_result(
            run_analysis(table, row_cap=config['row_cap'])
        )
