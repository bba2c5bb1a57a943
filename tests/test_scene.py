"""
Unit tests for scene primitives and the matplotlib interpreter
"""

from matplotlib.figure import Figure

from sheetviz.scene import Line, Polygon, Scene, Text, draw_scene, stack_scenes


class TestStackScenes:
    """Test cases for stack_scenes"""

    def setup_method(self):
        self.top = Scene(100, 50, '#ffffff', (
            Polygon(((0, 0), (10, 0), (10, 10)), '#ff0000', role='top'),
        ))
        self.bottom = Scene(80, 30, '#000000', (
            Text(5, 5, "hi", 10, '#000000', role='legend-item'),
            Line(((0, 0), (10, 10)), '#00ff00'),
        ))

    def test_size(self):
        stacked = stack_scenes(self.top, self.bottom)
        assert (stacked.width, stacked.height) == (100, 80)
        assert stacked.background == '#ffffff'

    def test_bottom_shapes_shifted(self):
        stacked = stack_scenes(self.top, self.bottom)
        text = next(stacked.with_role('legend-item'))
        assert (text.x, text.y) == (5, 55)
        line = stacked.shapes[-1]
        assert line.points == ((0, 50), (10, 60))
        assert stacked.shapes[0] == self.top.shapes[0]


class TestDrawScene:
    """Test cases for draw_scene"""

    def test_figure_sized_to_scene(self):
        fig = Figure()
        scene = Scene(320, 240, '#ffffff', (
            Polygon(((0, 0), (100, 0), (100, 100)), '#ff0000'),
            Text(10, 10, "label", 12, '#000000'),
        ))
        draw_scene(fig, scene, dpi=100)
        w, h = fig.get_size_inches() * 100
        assert int(w) == 320 and int(h) == 240
        ax = fig.axes[0]
        assert len(ax.patches) == 1
        assert [t.get_text() for t in ax.texts] == ["label"]
        assert ax.get_ylim() == (240, 0)

    def test_paint_order(self):
        fig = Figure()
        scene = Scene(50, 50, '#ffffff', (
            Polygon(((0, 0), (1, 0), (1, 1)), '#111111'),
            Polygon(((0, 0), (1, 0), (1, 1)), '#222222'),
        ))
        draw_scene(fig, scene, dpi=100)
        first, second = fig.axes[0].patches
        assert first.get_zorder() < second.get_zorder()

    def test_redraw_clears(self):
        fig = Figure()
        scene = Scene(50, 50, '#ffffff', (Text(1, 1, "x", 10, '#000000'),))
        draw_scene(fig, scene, dpi=100)
        draw_scene(fig, scene, dpi=100)
        assert len(fig.axes) == 1
