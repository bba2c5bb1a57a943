"""
Unit tests for legend entries, grid policies and legend scenes
"""

import pytest

from sheetviz.chart_legend import (
    build_legend_scene,
    columns_for_width,
    ellipsize,
    export_items_per_row,
    format_percentage,
    format_total,
    legend_entries,
    legend_grid_columns,
    legend_height,
    summary_line,
)
from sheetviz.colors import color_for, to_hex
from sheetviz.data_model import ChartData


class TestLegendEntries:
    """Test cases for legend_entries"""

    def test_one_entry_per_category(self, three_slices):
        entries = legend_entries(three_slices)
        assert [e.label for e in entries] == ['A', 'B', 'C']
        assert [e.percentage for e in entries] == ['10.0', '10.0', '80.0']
        assert [e.color for e in entries] == [color_for(i, 3) for i in range(3)]
        assert entries[2].text == "C: 80.0%"

    def test_percentages_sum_to_hundred(self):
        data = ChartData(labels=['a', 'b', 'c'], values=[1, 1, 1])
        total = sum(float(e.percentage) for e in legend_entries(data))
        assert total == pytest.approx(100.0, abs=0.15)

    def test_zero_total(self):
        assert format_percentage(0, 0) == "0.0"
        entries = legend_entries(ChartData(['a'], [0]))
        assert entries[0].percentage == "0.0"

    def test_rounding(self):
        assert format_percentage(1, 3) == "33.3"
        assert format_percentage(2, 3) == "66.7"
        assert format_percentage(1, 8) == "12.5"


class TestGridPolicies:
    """Test cases for legend column counts and heights"""

    def test_grid_columns(self):
        assert legend_grid_columns(4) == (1, 2)
        assert legend_grid_columns(8) == (2, 3)
        assert legend_grid_columns(12) == (2, 4)
        assert legend_grid_columns(20) == (3, 4)
        assert legend_grid_columns(50) == (3, 4)

    def test_columns_for_width(self):
        assert columns_for_width(8, 1024) == 3
        assert columns_for_width(8, 500) == 2

    def test_export_items_per_row(self):
        assert export_items_per_row(300) == 2
        assert export_items_per_row(700) == 3
        assert export_items_per_row(2000) == 4

    def test_legend_height(self):
        assert legend_height(3, 3) == 200
        assert legend_height(20, 3) == 7 * 30 + 80
        assert legend_height(0, 2) == 200

    def test_legend_height_invalid(self):
        with pytest.raises(ValueError):
            legend_height(3, 0)


class TestText:
    """Test cases for ellipsizing and summaries"""

    def test_ellipsize(self):
        assert ellipsize("abcdefghij", 30, 10) == "abcd…"
        assert ellipsize("abc", 30, 10) == "abc"
        assert ellipsize("abcdef", 5, 10) == "…"

    def test_fitted_text_keeps_percentage(self):
        entry = legend_entries(ChartData(['A rather long label'], [1]))[0]
        fitted = entry.fitted_text(120, 10)
        assert fitted.endswith(": 100.0%")
        assert "…" in fitted

    def test_summary_line(self):
        data = ChartData(labels=[str(i) for i in range(9)], values=range(1, 10))
        assert summary_line(legend_entries(data)) == "9 categories • Total: 45"
        assert summary_line(legend_entries(ChartData(['a'], [1]))) is None

    def test_format_total(self):
        assert format_total(1234567) == "1,234,567"
        assert format_total(12.5) == "12.5"


class TestLegendScene:
    """Test cases for build_legend_scene"""

    def test_scene_layout(self, three_slices):
        entries = legend_entries(three_slices)
        scene = build_legend_scene(entries, 700)
        assert scene.height == legend_height(3, export_items_per_row(700))
        assert [t.text for t in scene.with_role('legend-title')] == ["Legend (3 items)"]
        swatches = list(scene.with_role('swatch'))
        assert [s.fill for s in swatches] == [to_hex(e.color) for e in entries]
        items = [t.text for t in scene.with_role('legend-item')]
        assert items == ["A: 10.0%", "B: 10.0%", "C: 80.0%"]

    def test_rows_wrap(self):
        data = ChartData(labels=list("abcdefg"), values=[1] * 7)
        scene = build_legend_scene(legend_entries(data), 700, columns=3)
        ys = sorted({round(t.y, 3) for t in scene.with_role('legend-item')})
        assert len(ys) == 3

    def test_summary_for_many_categories(self):
        data = ChartData(labels=[f"c{i}" for i in range(10)], values=[1] * 10)
        scene = build_legend_scene(legend_entries(data), 700)
        assert [t.text for t in scene.with_role('summary')] == ["10 categories • Total: 10"]
