"""
Chart-save payload for SheetViz.

The payload handed to (and read back from) chart persistence::

    {
      "title": "Sales by Region",
      "chartType": "3d-pie",
      "data": {"labels": [...], "values": [...]},
      "configuration": {
        "xAxis": "Region",
        "yAxis": "Sales",
        "zAxis": null,
        "interactiveSettings": {"rotation": 0.0, "zoom": 1.0, "tiltAngle": 0.6}
      }
    }

Saving and reloading a payload reproduces the identical rendered chart:
floats survive JSON unchanged and rendering is a pure function of
``(data, view)``.
"""

import json
import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from .constants import CHART_KINDS, PIE_CANVAS_HEIGHT, PIE_CANVAS_WIDTH
from .data_model import ChartData
from .export import render_chart_png, write_bytes_atomic
from .view_state import ChartViewState, limit_zoom

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartSavePayload:
    """A saved chart: data, axes and interactive view settings."""
    title: str
    chart_type: str
    data: ChartData
    x_axis: str = ""
    y_axis: str = ""
    z_axis: Optional[str] = None
    view: ChartViewState = field(default_factory=ChartViewState)

    @classmethod
    def from_chart(cls, chart_type: str, data: ChartData,
                   view: ChartViewState, title: str = "") -> "ChartSavePayload":
        """Payload for a chart bound with ``chart_data_from_table``."""
        return cls(
            title=title,
            chart_type=chart_type,
            data=data,
            x_axis=data.label_column,
            y_axis=data.value_column,
            view=view,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            'title': self.title,
            'chartType': self.chart_type,
            'data': {
                'labels': list(self.data.labels),
                'values': list(self.data.values),
            },
            'configuration': {
                'xAxis': self.x_axis,
                'yAxis': self.y_axis,
                'zAxis': self.z_axis,
                'interactiveSettings': self.view.to_dict(),
            },
        }

    @classmethod
    def from_dict(cls, d) -> "ChartSavePayload":
        """Validate and load a payload dict.

        Raises
        ------
        ValueError
            Naming the first missing or malformed field.
        """
        if not isinstance(d, dict):
            raise ValueError("Chart payload must be a JSON object")
        chart_type = d.get('chartType')
        if not isinstance(chart_type, str) or not chart_type:
            raise ValueError("Chart payload field 'chartType' must be a non-empty string")
        if chart_type not in CHART_KINDS:
            raise ValueError(
                f"Chart payload field 'chartType' must be one of "
                f"{', '.join(CHART_KINDS)}, got {chart_type!r}"
            )
        title = d.get('title', "")
        if not isinstance(title, str):
            raise ValueError("Chart payload field 'title' must be a string")

        data = d.get('data')
        if not isinstance(data, dict):
            raise ValueError("Chart payload field 'data' must be an object")
        labels = data.get('labels')
        values = data.get('values')
        if not isinstance(labels, list):
            raise ValueError("Chart payload field 'data.labels' must be a list")
        if not isinstance(values, list):
            raise ValueError("Chart payload field 'data.values' must be a list")
        if len(labels) != len(values):
            raise ValueError(
                f"Chart payload 'data.labels' ({len(labels)}) and "
                f"'data.values' ({len(values)}) differ in length"
            )
        for i, v in enumerate(values):
            if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
                raise ValueError(f"Chart payload 'data.values[{i}]' is not a finite number: {v!r}")

        config = d.get('configuration', {})
        if not isinstance(config, dict):
            raise ValueError("Chart payload field 'configuration' must be an object")
        x_axis = config.get('xAxis') or ""
        y_axis = config.get('yAxis') or ""
        settings = config.get('interactiveSettings', {})
        if not isinstance(settings, dict):
            raise ValueError(
                "Chart payload field 'configuration.interactiveSettings' must be an object"
            )

        view = ChartViewState.from_dict(settings)
        # Guard: pie zoom outside [0.5, 2.0] is pulled back into range
        view = replace(view, zoom=limit_zoom(view.zoom, chart_type))

        return cls(
            title=title,
            chart_type=chart_type,
            data=ChartData(labels=labels, values=values,
                           label_column=str(x_axis), value_column=str(y_axis)),
            x_axis=str(x_axis),
            y_axis=str(y_axis),
            z_axis=config.get('zAxis'),
            view=view,
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, allow_nan=False)

    @classmethod
    def from_json(cls, text: str) -> "ChartSavePayload":
        try:
            d = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Chart payload is not valid JSON: {exc}") from exc
        return cls.from_dict(d)


def save_chart_config(payload: ChartSavePayload, filepath: str) -> str:
    """Write *payload* as JSON and return *filepath*."""
    write_bytes_atomic((payload.to_json() + '\n').encode('utf-8'), filepath)
    log.info("Saved chart configuration to %s", filepath)
    return filepath


def load_chart_config(filepath: str) -> ChartSavePayload:
    with open(filepath, 'r', encoding='utf-8') as fh:
        return ChartSavePayload.from_json(fh.read())


def render_saved_chart(
    payload: ChartSavePayload,
    *,
    width: int = PIE_CANVAS_WIDTH,
    height: int = PIE_CANVAS_HEIGHT,
    include_legend: bool = True,
) -> bytes:
    """PNG of the chart described by *payload*."""
    return render_chart_png(
        payload.chart_type, payload.data, payload.view,
        title=payload.title, width=width, height=height,
        include_legend=include_legend,
    )
