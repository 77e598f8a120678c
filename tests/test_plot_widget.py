"""Tests for the canvas, controls and main window.

Covers drag placement with the distance threshold, clamping to the canvas,
line and residual rendering state, control panel signals and enablement, and
an end-to-end run through LinearRegressionWindow.
"""

import pytest

from pylinefitqt import FitConfig, LearningRates, Line, Point, PointVisit
from pylinefitqt.plot_widget import FitControlWidget, FitPlotWidget
from pylinefitqt.window import LinearRegressionWindow


@pytest.fixture
def plot(qtbot):
    widget = FitPlotWidget()
    qtbot.addWidget(widget)
    return widget


@pytest.fixture
def placed(plot):
    """List collecting every (x, y) the canvas emits."""
    points = []
    plot.pointAdded.connect(lambda x, y: points.append((x, y)))
    return points


class TestPointPlacement:
    """Tests for drag placement on the canvas."""

    def test_first_point_always_placed(self, plot, placed):
        assert plot.view_box.drag_to(10.0, 10.0)
        assert placed == [(10.0, 10.0)]

    def test_drag_respects_distance_threshold(self, plot, placed):
        """Points closer than 15 units to the last one are skipped."""
        plot.view_box.drag_to(10.0, 10.0)

        assert not plot.view_box.drag_to(15.0, 15.0)
        assert plot.view_box.drag_to(30.0, 10.0)
        assert not plot.view_box.drag_to(40.0, 10.0)
        assert plot.view_box.drag_to(45.0, 10.0)

        assert placed == [(10.0, 10.0), (30.0, 10.0), (45.0, 10.0)]

    def test_custom_threshold(self, qtbot):
        widget = FitPlotWidget(FitConfig(point_distance_threshold=0.0))
        qtbot.addWidget(widget)
        placed = []
        widget.pointAdded.connect(lambda x, y: placed.append((x, y)))

        widget.view_box.drag_to(5.0, 5.0)
        widget.view_box.drag_to(5.0, 5.0)

        assert len(placed) == 2

    def test_points_clamped_to_canvas(self, plot, placed):
        plot.view_box.drag_to(500.0, -20.0)
        assert placed == [(400.0, 0.0)]

    def test_clear_forgets_last_point(self, plot, placed):
        plot.view_box.drag_to(10.0, 10.0)
        plot.clear()

        assert plot.view_box.drag_to(12.0, 12.0)
        assert not plot.view_box.dragging


class TestRendering:
    """Tests for line, point and residual state."""

    def test_set_points(self, plot):
        plot.set_points([Point(1, 2), Point(3, 4)])
        assert plot.points == (Point(1, 2), Point(3, 4))

        plot.set_points([])
        assert plot.points == ()

    def test_residual_follows_visit(self, plot):
        plot.show_point_visit(PointVisit(10.0, 50.0, 0, 1, Line(2.0, 5.0)))
        assert plot.residual == (10.0, 25.0, 50.0)

    def test_residual_tracks_new_line(self, plot):
        """Redrawing the line moves the predicted end of the residual."""
        plot.show_point_visit(PointVisit(10.0, 50.0, 0, 1, Line(2.0, 5.0)))
        plot.set_line(Line(1.0, 0.0))

        assert plot.line == Line(1.0, 0.0)
        assert plot.residual == (10.0, 10.0, 50.0)

    def test_non_finite_line_does_not_raise(self, plot):
        plot.set_line(Line(float("inf"), float("nan")))
        assert plot.line.slope == float("inf")

    def test_clear(self, plot):
        plot.set_points([Point(1, 2)])
        plot.set_line(Line(3.0, 4.0))
        plot.show_point_visit(PointVisit(1.0, 2.0, 0, 1, Line(3.0, 4.0)))

        plot.clear()

        assert plot.points == ()
        assert plot.residual is None
        assert plot.line == Line()


class TestFitControlWidget:
    """Tests for FitControlWidget."""

    def test_default_rates(self, qtbot):
        controls = FitControlWidget()
        qtbot.addWidget(controls)

        rates = controls.rates()
        assert rates.rate_slope == pytest.approx(0.000011)
        assert rates.rate_intercept == pytest.approx(0.25)

    def test_start_emits_rates(self, qtbot):
        controls = FitControlWidget()
        qtbot.addWidget(controls)
        controls.rate_intercept_spin.setValue(0.5)

        with qtbot.waitSignal(controls.startRequested, timeout=1000) as blocker:
            controls.start_btn.click()

        assert isinstance(blocker.args[0], LearningRates)
        assert blocker.args[0].rate_intercept == pytest.approx(0.5)

    def test_clear_emits(self, qtbot):
        controls = FitControlWidget()
        qtbot.addWidget(controls)

        with qtbot.waitSignal(controls.clearRequested, timeout=1000):
            controls.clear_btn.click()

    def test_set_running_disables_actions(self, qtbot):
        controls = FitControlWidget()
        qtbot.addWidget(controls)

        controls.set_running(True)
        assert not controls.start_btn.isEnabled()
        assert not controls.clear_btn.isEnabled()

        controls.set_running(False)
        assert controls.start_btn.isEnabled()
        assert controls.clear_btn.isEnabled()


class TestLinearRegressionWindow:
    """End-to-end tests for the main window."""

    @pytest.fixture
    def window(self, qtbot):
        config = FitConfig(point_pause_ms=0, iteration_pause_ms=0, hard_iteration_cap=1)
        win = LinearRegressionWindow(config)
        qtbot.addWidget(win)
        return win

    def test_placed_points_reach_driver(self, window):
        window.plot.view_box.drag_to(10.0, 20.0)
        window.plot.view_box.drag_to(100.0, 120.0)

        assert window.driver.points == (Point(10.0, 20.0), Point(100.0, 120.0))
        assert window.plot.points == window.driver.points

    def test_start_without_points_reports(self, window):
        window.controls.start_btn.click()

        assert "Cannot start" in window.controls.status()
        assert not window.driver.is_running
        assert window.controls.start_btn.isEnabled()

    def test_full_run(self, qtbot, window):
        window.plot.view_box.drag_to(0.0, 0.0)
        window.plot.view_box.drag_to(100.0, 100.0)

        with qtbot.waitSignal(window.animator.runFinished, timeout=5000):
            window.controls.start_btn.click()
            assert not window.controls.start_btn.isEnabled()

        assert window.controls.start_btn.isEnabled()
        assert "iterations" in window.controls.status()
        assert window.plot.line == window.driver.line

    def test_clear(self, window):
        window.plot.view_box.drag_to(10.0, 20.0)
        window.controls.clear_btn.click()

        assert window.driver.points == ()
        assert window.plot.points == ()
        assert window.driver.line == Line()
