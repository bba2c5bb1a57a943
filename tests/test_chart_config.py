"""
Unit tests for the chart-save payload and saved-chart rendering
"""

import json

import pytest

from sheetviz.chart_config import (
    ChartSavePayload,
    load_chart_config,
    render_saved_chart,
    save_chart_config,
)
from sheetviz.constants import CHART_COLUMN_3D, CHART_PIE_3D
from sheetviz.data_model import ChartData
from sheetviz.export import render_chart_png
from sheetviz.view_state import ChartViewState


@pytest.fixture
def payload():
    data = ChartData(labels=['North', 'South', 'East'], values=[120.5, 80, 42.25],
                     label_column='Region', value_column='Sales')
    view = ChartViewState(rotation=0.35, zoom=1.2, tilt=0.8)
    return ChartSavePayload.from_chart(CHART_PIE_3D, data, view, title="Sales by Region")


class TestPayloadShape:
    """Test cases for the serialised payload"""

    def test_to_dict(self, payload):
        d = payload.to_dict()
        assert d['title'] == "Sales by Region"
        assert d['chartType'] == CHART_PIE_3D
        assert d['data'] == {'labels': ['North', 'South', 'East'],
                             'values': [120.5, 80.0, 42.25]}
        assert d['configuration'] == {
            'xAxis': 'Region',
            'yAxis': 'Sales',
            'zAxis': None,
            'interactiveSettings': {'rotation': 0.35, 'zoom': 1.2, 'tiltAngle': 0.8},
        }

    def test_json_round_trip(self, payload):
        assert ChartSavePayload.from_json(payload.to_json()) == payload

    def test_settings_default_when_missing(self):
        loaded = ChartSavePayload.from_dict({
            'chartType': CHART_COLUMN_3D,
            'data': {'labels': ['a'], 'values': [1]},
        })
        assert loaded.view == ChartViewState()
        assert loaded.title == ""


class TestPayloadValidation:
    """Test cases for rejected payloads"""

    @pytest.mark.parametrize("doc, field", [
        ({'data': {'labels': [], 'values': []}}, 'chartType'),
        ({'chartType': CHART_PIE_3D}, "'data'"),
        ({'chartType': CHART_PIE_3D, 'data': {'values': []}}, 'data.labels'),
        ({'chartType': CHART_PIE_3D, 'data': {'labels': ['a'], 'values': []}}, 'differ in length'),
        ({'chartType': CHART_PIE_3D, 'data': {'labels': ['a'], 'values': ['x']}}, 'data.values[0]'),
        ({'chartType': CHART_PIE_3D, 'data': {'labels': ['a'], 'values': [1]},
          'configuration': {'interactiveSettings': []}}, 'interactiveSettings'),
    ])
    def test_error_names_field(self, doc, field):
        with pytest.raises(ValueError) as info:
            ChartSavePayload.from_dict(doc)
        assert field in str(info.value)

    def test_not_json(self):
        with pytest.raises(ValueError):
            ChartSavePayload.from_json("{not json")

    def test_not_an_object(self):
        with pytest.raises(ValueError):
            ChartSavePayload.from_json("[1, 2, 3]")

    def test_bad_zoom(self):
        with pytest.raises(ValueError):
            ChartSavePayload.from_dict({
                'chartType': CHART_PIE_3D,
                'data': {'labels': ['a'], 'values': [1]},
                'configuration': {'interactiveSettings': {'zoom': 0}},
            })

    def test_unknown_chart_type(self):
        with pytest.raises(ValueError) as info:
            ChartSavePayload.from_dict({
                'chartType': 'donut',
                'data': {'labels': ['a'], 'values': [1]},
            })
        assert 'chartType' in str(info.value)

    @pytest.mark.parametrize("zoom, expected", [(5.0, 2.0), (0.1, 0.5), (1.234, 1.234)])
    def test_pie_zoom_kept_in_range(self, zoom, expected):
        loaded = ChartSavePayload.from_dict({
            'chartType': CHART_PIE_3D,
            'data': {'labels': ['a'], 'values': [1]},
            'configuration': {'interactiveSettings': {'zoom': zoom}},
        })
        assert loaded.view.zoom == expected

    def test_column_zoom_has_no_ceiling(self):
        loaded = ChartSavePayload.from_dict({
            'chartType': CHART_COLUMN_3D,
            'data': {'labels': ['a'], 'values': [1]},
            'configuration': {'interactiveSettings': {'zoom': 5.0}},
        })
        assert loaded.view.zoom == 5.0


class TestPersistence:
    """Test cases for saving, loading and re-rendering"""

    def test_save_and_load(self, payload, tmp_path):
        path = tmp_path / "chart.json"
        save_chart_config(payload, str(path))
        assert json.loads(path.read_text(encoding='utf-8')) == payload.to_dict()
        assert load_chart_config(str(path)) == payload

    def test_reload_renders_identically(self, payload, tmp_path):
        """A saved and reloaded chart produces the same PNG bytes"""
        path = tmp_path / "chart.json"
        save_chart_config(payload, str(path))
        reloaded = load_chart_config(str(path))
        expected = render_chart_png(CHART_PIE_3D, payload.data, payload.view,
                                    title=payload.title)
        assert render_saved_chart(reloaded) == expected
