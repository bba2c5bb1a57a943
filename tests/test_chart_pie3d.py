"""
Unit tests for pseudo-3D pie layout and scene building
"""

import math

import pytest
from matplotlib.figure import Figure

from sheetviz.chart_legend import legend_entries
from sheetviz.chart_pie3d import (
    NO_DATA_TEXT,
    START_ANGLE,
    TWO_PI,
    build_pie_scene,
    compute_slices,
    enforce_min_sweep,
    label_threshold,
    pie_geometry,
    render_pie3d,
)
from sheetviz.colors import to_hex
from sheetviz.constants import SCENE_DARK, SCENE_LIGHT
from sheetviz.data_model import ChartData
from sheetviz.scene import Polygon
from sheetviz.view_state import ChartViewState


class TestSliceLayout:
    """Test cases for compute_slices"""

    def test_three_slices(self, three_slices):
        """Sweeps follow value shares, starting at 12 o'clock in input order"""
        slices = compute_slices(three_slices, ChartViewState())
        assert [s.sweep for s in slices] == pytest.approx(
            [0.2 * math.pi, 0.2 * math.pi, 1.6 * math.pi])
        assert slices[0].start_angle == pytest.approx(START_ANGLE)
        assert slices[1].start_angle == pytest.approx(START_ANGLE + 0.2 * math.pi)
        assert slices[2].start_angle == pytest.approx(START_ANGLE + 0.4 * math.pi)
        assert [s.label for s in slices] == ['A', 'B', 'C']

    def test_contiguous_full_circle(self):
        data = ChartData(labels=list("abcdef"), values=[3, 1, 4, 1, 5, 9])
        slices = compute_slices(data, ChartViewState())
        assert math.fsum(s.sweep for s in slices) == pytest.approx(TWO_PI)
        for prev, cur in zip(slices, slices[1:]):
            assert cur.start_angle == pytest.approx(prev.start_angle + prev.sweep)
        assert math.fsum(s.percentage for s in slices) == pytest.approx(100.0)

    def test_rotation_shifts_start(self, three_slices):
        slices = compute_slices(three_slices, ChartViewState(rotation=0.5))
        assert slices[0].start_angle == pytest.approx(START_ANGLE + 0.5)

    def test_equal_values_keep_input_order(self):
        data = ChartData(labels=['x', 'y', 'z'], values=[1, 1, 1])
        slices = compute_slices(data, ChartViewState())
        assert [s.label for s in slices] == ['x', 'y', 'z']

    def test_zero_total(self):
        assert compute_slices(ChartData(['a', 'b'], [0, 0]), ChartViewState()) == []
        assert compute_slices(ChartData([], []), ChartViewState()) == []

    def test_negative_value_rejected(self):
        with pytest.raises(ValueError):
            compute_slices(ChartData(['a', 'b'], [5, -1]), ChartViewState())

    def test_zero_slice_not_drawn(self):
        slices = compute_slices(ChartData(['a', 'b'], [0, 5]), ChartViewState())
        assert slices[0].sweep == 0.0
        assert not slices[0].drawn
        assert slices[1].drawn

    def test_colors_match_legend(self, three_slices):
        slices = compute_slices(three_slices, ChartViewState())
        entries = legend_entries(three_slices)
        assert [s.color for s in slices] == [e.color for e in entries]


class TestLabelThreshold:
    """Test cases for inline label thresholds"""

    def test_fewer_categories_larger_threshold(self):
        assert label_threshold(2) >= label_threshold(5) >= label_threshold(30)

    def test_bounds(self):
        assert label_threshold(1) == 0.25
        assert label_threshold(100) == 0.04

    def test_labels_only_on_wide_slices(self):
        data = ChartData(labels=['big', 'tiny'], values=[99, 1])
        slices = compute_slices(data, ChartViewState())
        assert [s.labeled for s in slices] == [True, False]


class TestMinSweep:
    """Test cases for the optional minimum slice angle"""

    def test_total_preserved(self):
        sweeps = [TWO_PI * 0.001, TWO_PI * 0.999]
        out = enforce_min_sweep(sweeps, 0.04)
        assert out[0] == 0.04
        assert math.fsum(out) == pytest.approx(TWO_PI)

    def test_zero_left_alone(self):
        assert enforce_min_sweep([0.0, TWO_PI], 0.04) == [0.0, TWO_PI]

    def test_opt_in(self):
        data = ChartData(labels=['a', 'b'], values=[1, 999])
        exact = compute_slices(data, ChartViewState())
        widened = compute_slices(data, ChartViewState(), min_slice_angle=0.04)
        assert exact[0].sweep == pytest.approx(TWO_PI / 1000)
        assert widened[0].sweep == 0.04


class TestGeometry:
    """Test cases for pie sizing"""

    def test_zoom_scales_radius(self):
        small = pie_geometry(700, 500, ChartViewState(zoom=1.0))
        large = pie_geometry(700, 500, ChartViewState(zoom=1.5))
        assert large.radius_x > small.radius_x
        assert large.depth >= small.depth

    def test_radius_capped(self):
        geo = pie_geometry(700, 500, ChartViewState(zoom=2.0))
        assert geo.radius_x <= 700 * 0.35
        assert geo.radius_y <= 500 * 0.30
        assert geo.depth <= 35

    def test_tilt_squashes_vertically(self):
        flat = pie_geometry(700, 500, ChartViewState(tilt=0.2))
        steep = pie_geometry(700, 500, ChartViewState(tilt=1.0))
        angle = math.pi / 2
        assert flat.point(angle)[1] - flat.cy < steep.point(angle)[1] - steep.cy


class TestPieScene:
    """Test cases for build_pie_scene"""

    def test_shapes(self, three_slices):
        scene = build_pie_scene(three_slices, title="Share")
        walls = list(scene.with_role('wall'))
        tops = list(scene.with_role('top'))
        labels = list(scene.with_role('label'))
        assert len(walls) == 3 and len(tops) == 3
        assert [t.text for t in labels] == ['10.0%', '10.0%', '80.0%']
        assert [t.text for t in scene.with_role('title')] == ['Share']

    def test_walls_before_tops(self, three_slices):
        scene = build_pie_scene(three_slices)
        roles = [s.role for s in scene.shapes if isinstance(s, Polygon)]
        assert roles == ['wall'] * 3 + ['top'] * 3

    def test_back_walls_first(self, three_slices):
        """Walls further up the screen are painted before nearer ones"""
        scene = build_pie_scene(three_slices)
        assert [w.index for w in scene.with_role('wall')] == [0, 1, 2]

    def test_top_colors(self, three_slices):
        scene = build_pie_scene(three_slices)
        fills = [t.fill for t in scene.with_role('top')]
        assert fills == [to_hex(e.color) for e in legend_entries(three_slices)]

    def test_empty_data_notice(self):
        scene = build_pie_scene(ChartData(['a'], [0]))
        assert [t.text for t in scene.with_role('notice')] == [NO_DATA_TEXT]
        assert not list(scene.with_role('wall'))

    def test_palettes(self, three_slices):
        assert build_pie_scene(three_slices).background == SCENE_DARK['background']
        exported = build_pie_scene(three_slices, for_export=True)
        assert exported.background == SCENE_LIGHT['background']

    def test_deterministic(self, three_slices):
        view = ChartViewState(rotation=1.1, zoom=1.3, tilt=0.4)
        assert build_pie_scene(three_slices, view) == build_pie_scene(three_slices, view)

    def test_render_on_figure(self, three_slices):
        fig = Figure(figsize=(7, 5), dpi=100)
        scene = render_pie3d(fig, three_slices)
        assert (scene.width, scene.height) == (700, 500)
        assert len(fig.axes) == 1
        assert len(fig.axes[0].patches) == 6
