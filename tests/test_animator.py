"""Tests for FitAnimator in animator.py.

Drives real runs through the Qt event loop with zero pauses and checks the
signal sequence, the final summary, cancellation and error propagation.
"""

import pytest

from pylinefitqt import FitConfig, InvalidStateError, Line, Point, RunState
from pylinefitqt.animator import FitAnimator


@pytest.fixture
def animator(qtbot, driver_factory, diagonal_points):
    driver = driver_factory(
        diagonal_points,
        FitConfig(point_pause_ms=0, iteration_pause_ms=0, hard_iteration_cap=2),
    )
    return FitAnimator(driver)


class TestFitAnimator:
    """Tests for FitAnimator."""

    def test_emits_protocol_in_order(self, qtbot, animator):
        """Visits and updates arrive in sweep order, then the summary."""
        events = []
        animator.pointVisited.connect(lambda v: events.append(("visit", v.index)))
        animator.lineUpdated.connect(lambda u: events.append(("update", u.iteration)))

        with qtbot.waitSignal(animator.runFinished, timeout=5000) as blocker:
            animator.start()

        expected = []
        for iteration in (1, 2, 3):
            expected += [("visit", 0), ("visit", 1), ("visit", 2), ("update", iteration)]
        assert events == expected

        summary = blocker.args[0]
        assert summary.iterations == 3
        assert summary.line == Line(1.0, 0.0)
        assert not animator.is_running
        assert animator.driver.state is RunState.IDLE

    def test_run_started_signal(self, qtbot, animator):
        with qtbot.waitSignal(animator.runStarted, timeout=1000):
            animator.start()
        assert animator.is_running
        assert animator.driver.is_running

    def test_cancel_from_slot(self, qtbot, animator):
        """Cancelling on the first update stops after one iteration."""
        updates = []

        def on_update(update):
            updates.append(update)
            animator.cancel()

        animator.lineUpdated.connect(on_update)

        with qtbot.waitSignal(animator.runCancelled, timeout=5000):
            animator.start()

        qtbot.wait(20)
        assert len(updates) == 1
        assert animator.driver.iteration == 1
        assert animator.driver.state is RunState.IDLE
        assert not animator.is_running

    def test_cancel_when_idle_is_noop(self, qtbot, animator):
        with qtbot.assertNotEmitted(animator.runCancelled):
            animator.cancel()

    def test_start_without_points_raises(self, qtbot, driver_factory):
        animator = FitAnimator(driver_factory())

        with pytest.raises(InvalidStateError):
            animator.start()
        assert not animator.is_running

    def test_start_while_running_raises(self, qtbot, animator):
        animator.start()

        with pytest.raises(InvalidStateError):
            animator.start()

        animator.cancel()

    def test_start_with_explicit_points(self, qtbot, animator):
        with qtbot.waitSignal(animator.runFinished, timeout=5000):
            animator.start(points=[Point(0, 0), Point(4, 4)])

        assert animator.driver.points == (Point(0, 0), Point(4, 4))
