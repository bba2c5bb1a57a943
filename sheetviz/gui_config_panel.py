"""
Configuration panel (left side) for the SheetViz desktop viewer.

Table source, label/value column binding, chart kind, title, row cap
and the Generate button.
"""

import logging
import os
import warnings

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox,
    QLabel, QPushButton, QLineEdit, QComboBox, QCheckBox,
    QSpinBox, QFileDialog, QMessageBox,
)
from PySide6.QtCore import Signal

from .constants import (
    CHART_COLUMN_3D, CHART_PIE_3D, DARK_COLORS,
    FULL_ANALYSIS_ROW_CAP, PREVIEW_ROW_CAP,
)
from .data_model import Table
from .data_quality import assess, numeric_columns
from .errors import SheetVizError
from .table_parser import load_csv_table

log = logging.getLogger(__name__)

_CHART_KIND_LABELS = [
    (CHART_PIE_3D, "3D Pie"),
    (CHART_COLUMN_3D, "3D Column"),
]


class ConfigPanel(QWidget):
    """Left-side panel: table source and chart binding options."""

    # Signals
    config_changed = Signal()
    table_loaded = Signal(object)  # emits Table

    def __init__(self, parent=None):
        super().__init__(parent)
        self._path = ''
        self._table = None
        self._setup_ui()
        self._connect_signals()

    # ── UI setup ─────────────────────────────────────────────────────

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(8)

        # ── Table source ─────────────────────────────────────────────
        grp_source = QGroupBox("Table")
        src_layout = QVBoxLayout(grp_source)
        src_layout.setSpacing(4)

        row = QHBoxLayout()
        row.setSpacing(4)
        self._edt_path = QLineEdit()
        self._edt_path.setReadOnly(True)
        self._edt_path.setPlaceholderText("No file selected")
        self._btn_browse = QPushButton("Open CSV...")
        row.addWidget(self._edt_path, 1)
        row.addWidget(self._btn_browse)
        src_layout.addLayout(row)

        cap_row = QFormLayout()
        self._spn_row_cap = QSpinBox()
        self._spn_row_cap.setRange(PREVIEW_ROW_CAP, FULL_ANALYSIS_ROW_CAP)
        self._spn_row_cap.setSingleStep(PREVIEW_ROW_CAP)
        self._spn_row_cap.setValue(FULL_ANALYSIS_ROW_CAP)
        self._spn_row_cap.setToolTip(
            f"Rows read from the file: {PREVIEW_ROW_CAP} for a preview, "
            f"up to {FULL_ANALYSIS_ROW_CAP} for full analysis"
        )
        cap_row.addRow("Row cap:", self._spn_row_cap)
        src_layout.addLayout(cap_row)

        self._lbl_status = QLabel("")
        self._lbl_status.setWordWrap(True)
        self._set_status("", 'fg_dim')
        src_layout.addWidget(self._lbl_status)

        layout.addWidget(grp_source)

        # ── Chart binding ────────────────────────────────────────────
        grp_chart = QGroupBox("Chart")
        chart_layout = QFormLayout(grp_chart)
        chart_layout.setSpacing(4)

        self._cmb_kind = QComboBox()
        for kind, label in _CHART_KIND_LABELS:
            self._cmb_kind.addItem(label, kind)
        chart_layout.addRow("Type:", self._cmb_kind)

        self._cmb_label = QComboBox()
        self._cmb_label.addItem("(load data first)")
        self._cmb_label.setEnabled(False)
        chart_layout.addRow("Labels:", self._cmb_label)

        self._cmb_value = QComboBox()
        self._cmb_value.addItem("(load data first)")
        self._cmb_value.setEnabled(False)
        chart_layout.addRow("Values:", self._cmb_value)

        self._edt_title = QLineEdit()
        self._edt_title.setPlaceholderText("Chart title (optional)")
        chart_layout.addRow("Title:", self._edt_title)

        self._chk_legend = QCheckBox("Include legend in exports")
        self._chk_legend.setChecked(True)
        chart_layout.addRow(self._chk_legend)

        layout.addWidget(grp_chart)

        # ── Actions ──────────────────────────────────────────────────
        c = DARK_COLORS
        self._btn_generate = QPushButton("Generate Chart && Analysis")
        self._btn_generate.setStyleSheet(
            f"QPushButton {{ background-color: {c['accent']}; "
            f"color: {c['bg']}; font-weight: bold; padding: 10px; }}"
            f"QPushButton:hover {{ background-color: {c['accent_hover']}; }}"
            f"QPushButton:disabled {{ background-color: {c['bg']}; "
            f"color: {c['fg_dim']}; }}"
        )
        self._btn_generate.setEnabled(False)
        layout.addWidget(self._btn_generate)

        self._btn_example = QPushButton("Load Example Data")
        layout.addWidget(self._btn_example)

        layout.addStretch()

    # ── Signal connections ───────────────────────────────────────────

    def _connect_signals(self):
        self._btn_browse.clicked.connect(lambda *_: self.browse_csv())
        self._btn_example.clicked.connect(lambda *_: self.load_example())
        self._spn_row_cap.editingFinished.connect(self._on_row_cap_changed)

        # config_changed carries no arguments
        for signal in (
            self._cmb_kind.currentIndexChanged,
            self._cmb_label.currentIndexChanged,
            self._cmb_value.currentIndexChanged,
            self._edt_title.editingFinished,
            self._chk_legend.toggled,
        ):
            signal.connect(lambda *_: self.config_changed.emit())

    # ── Slot implementations ─────────────────────────────────────────

    def _set_status(self, text: str, color_key: str):
        self._lbl_status.setText(text)
        self._lbl_status.setStyleSheet(
            f"color: {DARK_COLORS[color_key]}; font-size: 11px;"
        )

    def browse_csv(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Table",
            "", "Delimited Text (*.csv *.tsv *.txt);;All Files (*)",
        )
        if path:
            self.load_path(path)

    def load_example(self):
        """Generate and load the example sales table."""
        from .example_data import generate_example_csv
        import tempfile

        example_dir = os.path.join(tempfile.gettempdir(), 'sheetviz_example')
        self.load_path(generate_example_csv(example_dir))

    def _on_row_cap_changed(self):
        if self._path:
            self.load_path(self._path)

    def load_path(self, path: str):
        """Load *path* with the current row cap and refresh the column combos."""
        self._path = path
        self._edt_path.setText(os.path.basename(path))
        self._edt_path.setToolTip(path)

        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter('always')
                table = load_csv_table(path, row_cap=self._spn_row_cap.value())
        except (SheetVizError, ValueError, OSError) as exc:
            log.warning("Could not load %s: %s", path, exc)
            self._table = None
            self._btn_generate.setEnabled(False)
            self._set_status(f"Error: {exc}", 'red')
            QMessageBox.critical(self, "Data Load Error", str(exc))
            return

        self._table = table
        self._populate_columns(table)

        notes = [str(w.message) for w in caught]
        status = f"Loaded: {table.n_rows} rows, {len(table.columns)} columns"
        if notes:
            self._set_status(status + "\n" + "\n".join(notes), 'yellow')
        else:
            self._set_status(status, 'green')

        self._btn_generate.setEnabled(True)
        self.table_loaded.emit(table)

    def _populate_columns(self, table: Table):
        """Fill the label/value combos, keeping previous choices when valid."""
        numeric = numeric_columns(assess(table))
        text_like = [c for c in table.columns if c not in numeric]

        for combo, preferred in (
            (self._cmb_label, text_like or list(table.columns)),
            (self._cmb_value, numeric or list(table.columns)),
        ):
            prev = combo.currentText()
            combo.blockSignals(True)
            combo.clear()
            combo.addItems(list(table.columns))
            idx = combo.findText(prev)
            if idx < 0:
                idx = combo.findText(preferred[0]) if preferred else 0
            combo.setCurrentIndex(max(idx, 0))
            combo.blockSignals(False)
            combo.setEnabled(bool(table.columns))

    # ── Public API ───────────────────────────────────────────────────

    def get_config(self) -> dict:
        """Return current configuration as a dict for the chart view."""
        return {
            'label_column': self._cmb_label.currentText(),
            'value_column': self._cmb_value.currentText(),
            'chart_kind': self._cmb_kind.currentData() or CHART_PIE_3D,
            'title': self._edt_title.text().strip(),
            'row_cap': self._spn_row_cap.value(),
            'show_legend': self._chk_legend.isChecked(),
        }

    def get_table(self) -> Table:
        """Return the currently loaded table, or ``None``."""
        return self._table

    @property
    def generate_button(self) -> QPushButton:
        return self._btn_generate
