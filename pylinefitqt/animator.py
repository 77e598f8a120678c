"""Qt-side pacing for descent runs.

``FitAnimator`` steps a ``DescentRun`` from a single-shot ``QTimer`` so the
GUI thread never blocks. After every snapshot it waits for the pause the
configuration assigns to that snapshot before pulling the next one.

Typical usage:

    animator = FitAnimator(driver)
    animator.pointVisited.connect(plot.show_residual)
    animator.lineUpdated.connect(plot.show_line_update)
    animator.runFinished.connect(on_finished)
    animator.start()
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from PySide6 import QtCore
from PySide6.QtCore import Signal

from .descent import DescentDriver, DescentRun
from .models import LearningRates, LineUpdate, Point, PointVisit

logger = logging.getLogger(__name__)


class FitAnimator(QtCore.QObject):
    """Drives a descent run on the Qt event loop.

    Signals:
        runStarted: Emitted once the run has begun.
        pointVisited(object): Emitted with each ``PointVisit``.
        lineUpdated(object): Emitted with each ``LineUpdate``.
        runFinished(object): Emitted with the ``RunSummary`` when the run
            stops on its own.
        runCancelled: Emitted when ``cancel`` stops an active run.
    """

    runStarted = Signal()
    pointVisited = Signal(object)
    lineUpdated = Signal(object)
    runFinished = Signal(object)
    runCancelled = Signal()

    def __init__(
        self, driver: DescentDriver, parent: Optional[QtCore.QObject] = None
    ) -> None:
        super().__init__(parent)
        self._driver = driver
        self._run: Optional[DescentRun] = None

        self._timer = QtCore.QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._advance)

    @property
    def driver(self) -> DescentDriver:
        return self._driver

    @property
    def is_running(self) -> bool:
        return self._run is not None

    def start(
        self,
        points: Optional[Sequence[Point]] = None,
        rates: Optional[LearningRates] = None,
    ) -> DescentRun:
        """Start a run and schedule its first step.

        Raises:
            InvalidStateError: Propagated from ``DescentDriver.start_fit``.
        """
        run = self._driver.start_fit(points=points, rates=rates)
        self._run = run
        self.runStarted.emit()
        self._timer.start(0)
        return run

    def cancel(self) -> None:
        """Stop the active run, if any, at its current suspension point."""
        if self._run is None:
            return
        self._timer.stop()
        run, self._run = self._run, None
        run.cancel()
        self.runCancelled.emit()

    def _advance(self) -> None:
        run = self._run
        if run is None:
            return

        try:
            snapshot = next(run)
        except StopIteration:
            self._run = None
            self.runFinished.emit(run.summary)
            return

        if isinstance(snapshot, PointVisit):
            self.pointVisited.emit(snapshot)
        elif isinstance(snapshot, LineUpdate):
            self.lineUpdated.emit(snapshot)

        # A slot connected above may have cancelled the run.
        if self._run is run:
            self._timer.start(run.config.pause_for(snapshot))
