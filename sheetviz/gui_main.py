"""
Main window for the SheetViz desktop viewer.

Hosts the ConfigPanel (left) and ChartViewWidget (right) in a
horizontal splitter, with a menu bar and status bar.
"""

import logging
import os

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QSplitter, QScrollArea,
    QFileDialog, QMessageBox,
)
from PySide6.QtGui import QAction
from PySide6.QtCore import Qt

from . import APP_NAME, APP_VERSION
from .constants import CHART_COLUMN_3D, CHART_PIE_3D
from .errors import SheetVizError
from .export import export_all_charts
from .gui_config_panel import ConfigPanel
from .gui_chart_view import ChartViewWidget
from .table_parser import chart_data_from_table

log = logging.getLogger(__name__)


class SheetVizMainWindow(QMainWindow):
    """Main window for the SheetViz desktop viewer."""

    def __init__(self):
        super().__init__()
        self._table = None

        self.setWindowTitle(f"{APP_NAME} v{APP_VERSION}")
        self.setMinimumSize(1200, 800)

        self._setup_ui()
        self._setup_menu()
        self._connect_signals()

        self.statusBar().showMessage("Ready: open a CSV file to begin")

    # ── UI setup ─────────────────────────────────────────────────────

    def _setup_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(4, 4, 4, 4)

        splitter = QSplitter(Qt.Orientation.Horizontal)

        self._config_panel = ConfigPanel()
        scroll = QScrollArea()
        scroll.setWidget(self._config_panel)
        scroll.setWidgetResizable(True)
        scroll.setMinimumWidth(300)
        scroll.setMaximumWidth(440)

        self._chart_view = ChartViewWidget()

        splitter.addWidget(scroll)
        splitter.addWidget(self._chart_view)
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)
        splitter.setSizes([340, 860])

        main_layout.addWidget(splitter)

    def _setup_menu(self):
        menubar = self.menuBar()

        # ── File menu ────────────────────────────────────────────────
        file_menu = menubar.addMenu("File")

        act_open = QAction("Open CSV...", self)
        act_open.setShortcut("Ctrl+O")
        act_open.triggered.connect(lambda *_: self._config_panel.browse_csv())
        file_menu.addAction(act_open)

        act_example = QAction("Load Example Data", self)
        act_example.triggered.connect(lambda *_: self._config_panel.load_example())
        file_menu.addAction(act_example)

        file_menu.addSeparator()

        act_export_both = QAction("Export Pie and Column Charts...", self)
        act_export_both.triggered.connect(lambda *_: self._export_both())
        file_menu.addAction(act_export_both)

        file_menu.addSeparator()

        act_exit = QAction("Exit", self)
        act_exit.triggered.connect(self.close)
        file_menu.addAction(act_exit)

        # ── Help menu ────────────────────────────────────────────────
        help_menu = menubar.addMenu("Help")

        act_keys = QAction("Keyboard Shortcuts", self)
        act_keys.triggered.connect(lambda *_: self._show_keys())
        help_menu.addAction(act_keys)

        act_about = QAction("About", self)
        act_about.triggered.connect(lambda *_: self._show_about())
        help_menu.addAction(act_about)

    def _connect_signals(self):
        self._config_panel.table_loaded.connect(self._on_table_loaded)
        self._config_panel.generate_button.clicked.connect(
            lambda *_: self._on_generate()
        )
        self._config_panel.config_changed.connect(self._on_config_changed)

    # ── Slots ────────────────────────────────────────────────────────

    def _on_table_loaded(self, table):
        self._table = table
        self.statusBar().showMessage(
            f"Loaded: {table.n_rows} rows, {len(table.columns)} columns"
        )
        self._on_generate()

    def _on_generate(self):
        """Slot: Generate button clicked."""
        table = self._config_panel.get_table()
        if table is None:
            QMessageBox.warning(
                self, "No Data", "Please open a CSV file first.",
            )
            return

        config = self._config_panel.get_config()
        self.statusBar().showMessage("Building chart and analysis...")
        try:
            self._chart_view.update_views(table, config)
        except (SheetVizError, KeyError, ValueError) as exc:
            log.warning("Chart generation failed: %s", exc)
            QMessageBox.critical(
                self, "Chart Generation Error",
                f"An error occurred while building the chart:\n\n{exc}",
            )
            self.statusBar().showMessage("Chart generation failed")
            return
        self.statusBar().showMessage("Chart and analysis updated", 5000)

    def _on_config_changed(self):
        """Re-render on option changes once data is loaded."""
        if self._table is None:
            return
        try:
            self._chart_view.update_views(self._table,
                                          self._config_panel.get_config())
        except (SheetVizError, KeyError, ValueError) as exc:
            # Combos can briefly hold stale column names while reloading
            log.warning("Re-render after option change failed: %s", exc)

    def _export_both(self):
        """Export the current binding as both a pie and a column PNG."""
        table = self._config_panel.get_table()
        if table is None:
            QMessageBox.warning(self, "No Data", "Please open a CSV file first.")
            return

        folder = QFileDialog.getExistingDirectory(self, "Select Output Folder")
        if not folder:
            return

        config = self._config_panel.get_config()
        view = self._chart_view.chart_tab.view
        try:
            data = chart_data_from_table(table, config['label_column'],
                                         config['value_column'])
            stem = f"{data.label_column}_by_{data.value_column}"
            paths = export_all_charts(
                {
                    f"{stem}_pie": {'chart_kind': CHART_PIE_3D, 'data': data,
                                    'view': view, 'title': config['title']},
                    f"{stem}_column": {'chart_kind': CHART_COLUMN_3D, 'data': data,
                                       'view': view, 'title': config['title']},
                },
                folder,
                include_legend=config['show_legend'],
            )
        except (SheetVizError, KeyError, ValueError) as exc:
            log.warning("Batch export to %s failed: %s", folder, exc)
            QMessageBox.critical(self, "Export Error",
                                 f"Failed to export charts:\n\n{exc}")
            return

        self.statusBar().showMessage(
            f"Exported {len(paths)} charts to {os.path.basename(folder)}", 5000,
        )

    def _show_keys(self):
        QMessageBox.information(
            self, "Keyboard Shortcuts",
            "With the chart focused:\n\n"
            "  Left / Right   rotate\n"
            "  + / -          zoom\n"
            "  T              tilt up one step\n",
        )

    def _show_about(self):
        QMessageBox.about(
            self,
            f"About {APP_NAME}",
            f"<h3>{APP_NAME} v{APP_VERSION}</h3>"
            f"<p>Tabular data quality, descriptive statistics and "
            f"correlation analysis with pseudo-3D pie and column charts.</p>",
        )
