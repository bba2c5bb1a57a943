"""
Chart view-state for SheetViz.

Rotation, zoom and tilt of one chart instance, held as an immutable
value and changed only through named actions::

    state = ChartViewState()
    state = reduce_view_state(state, Rotate(ROTATION_STEP), CHART_PIE_3D)
    state = reduce_view_state(state, Zoom(+ZOOM_STEP), CHART_PIE_3D)
    state = reduce_view_state(state, Reset(), CHART_PIE_3D)

Renderers are pure functions of ``(data, state)``; the reducer never
touches chart data.  Pie zoom is clamped to ``[0.5, 2.0]``; column zoom
is only kept positive.  Tilt is always clamped to ``[0.2, 1.0]``.
"""

import math
from dataclasses import dataclass, replace
from typing import Dict, Union

from .constants import (
    CHART_KINDS,
    CHART_PIE_3D,
    COLUMN_ZOOM_FLOOR,
    DEFAULT_ROTATION,
    DEFAULT_TILT,
    DEFAULT_ZOOM,
    PIE_ZOOM_MAX,
    PIE_ZOOM_MIN,
    TILT_MAX,
    TILT_MIN,
)


@dataclass(frozen=True)
class ChartViewState:
    """User-adjustable rendering parameters.

    Parameters
    ----------
    rotation : float
        Radians added to every slice start angle (pie) or used to turn
        the isometric side face (column).
    zoom : float
        Scale factor on radii and depth (pie) or bar height (column).
    tilt : float
        Vertical squash of the pie ellipse / isometric rise of columns.
    """
    rotation: float = DEFAULT_ROTATION
    zoom: float = DEFAULT_ZOOM
    tilt: float = DEFAULT_TILT

    def to_dict(self) -> Dict[str, float]:
        return {
            'rotation': self.rotation,
            'zoom': self.zoom,
            'tiltAngle': self.tilt,
        }

    @classmethod
    def from_dict(cls, d) -> "ChartViewState":
        """Build from ``{rotation, zoom, tiltAngle}``; missing keys default."""
        try:
            rotation = float(d.get('rotation', DEFAULT_ROTATION))
            zoom = float(d.get('zoom', DEFAULT_ZOOM))
            tilt = float(d.get('tiltAngle', DEFAULT_TILT))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid interactive settings {d!r}: {exc}") from exc
        for name, value in (('rotation', rotation), ('zoom', zoom),
                            ('tiltAngle', tilt)):
            if not math.isfinite(value):
                raise ValueError(f"interactiveSettings.{name} must be finite")
        if zoom <= 0:
            raise ValueError("interactiveSettings.zoom must be positive")
        return cls(rotation=rotation, zoom=zoom, tilt=clamp_tilt(tilt))


# ── Actions ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Rotate:
    delta: float


@dataclass(frozen=True)
class Zoom:
    delta: float


@dataclass(frozen=True)
class SetTilt:
    tilt: float


@dataclass(frozen=True)
class StepTilt:
    delta: float


@dataclass(frozen=True)
class Reset:
    pass


ViewAction = Union[Rotate, Zoom, SetTilt, StepTilt, Reset]


# ── Reducer ──────────────────────────────────────────────────────────────

def clamp_tilt(tilt: float) -> float:
    return max(TILT_MIN, min(TILT_MAX, tilt))


def limit_zoom(zoom: float, chart_kind: str) -> float:
    """Bound *zoom* to the range allowed for *chart_kind*, unrounded."""
    if chart_kind == CHART_PIE_3D:
        return max(PIE_ZOOM_MIN, min(PIE_ZOOM_MAX, zoom))
    return max(COLUMN_ZOOM_FLOOR, zoom)


def clamp_zoom(zoom: float, chart_kind: str) -> float:
    # Rounded so repeated ±0.1 steps land on exact tenths
    return limit_zoom(round(zoom, 2), chart_kind)


def reduce_view_state(state: ChartViewState, action: ViewAction,
                      chart_kind: str = CHART_PIE_3D) -> ChartViewState:
    """Apply *action* to *state* and return the new state.

    Raises
    ------
    ValueError
        For an unknown chart kind.
    TypeError
        For an unknown action type.
    """
    if chart_kind not in CHART_KINDS:
        raise ValueError(f"Unknown chart kind: {chart_kind!r}")
    if isinstance(action, Rotate):
        return replace(state, rotation=state.rotation + action.delta)
    if isinstance(action, Zoom):
        return replace(state, zoom=clamp_zoom(state.zoom + action.delta, chart_kind))
    if isinstance(action, SetTilt):
        return replace(state, tilt=clamp_tilt(action.tilt))
    if isinstance(action, StepTilt):
        return replace(state, tilt=clamp_tilt(round(state.tilt + action.delta, 2)))
    if isinstance(action, Reset):
        return ChartViewState()
    raise TypeError(f"Unknown view action: {action!r}")
