"""Main window wiring the canvas, the controls and the descent animator."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtWidgets import QHBoxLayout, QMainWindow, QWidget

from .animator import FitAnimator
from .descent import DescentDriver
from .models import FitConfig, InvalidStateError, LearningRates, LineUpdate, RunSummary
from .plot_widget import FitControlWidget, FitPlotWidget

logger = logging.getLogger(__name__)


class LinearRegressionWindow(QMainWindow):
    """Place points on the canvas, then watch gradient descent fit a line."""

    def __init__(
        self, config: Optional[FitConfig] = None, parent: Optional[QWidget] = None
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Linear Regression")

        config = config or FitConfig()
        self.driver = DescentDriver(config)
        self.animator = FitAnimator(self.driver, self)

        self.plot = FitPlotWidget(config)
        self.controls = FitControlWidget(config)
        self.controls.setMaximumWidth(260)

        container = QWidget()
        layout = QHBoxLayout(container)
        layout.addWidget(self.plot, 1)
        layout.addWidget(self.controls)
        self.setCentralWidget(container)

        self.plot.pointAdded.connect(self._on_point_added)
        self.controls.startRequested.connect(self._on_start_requested)
        self.controls.clearRequested.connect(self._on_clear_requested)

        self.animator.pointVisited.connect(self.plot.show_point_visit)
        self.animator.lineUpdated.connect(self._on_line_updated)
        self.animator.runFinished.connect(self._on_run_finished)
        self.animator.runCancelled.connect(self._on_run_cancelled)

        self.plot.set_line(self.driver.line)

    def _on_point_added(self, x: float, y: float) -> None:
        self.driver.add_point(x, y)
        self.plot.set_points(self.driver.points)

    def _on_start_requested(self, rates: LearningRates) -> None:
        try:
            self.animator.start(rates=rates)
        except InvalidStateError as e:
            logger.info("Start rejected: %s", e)
            self.controls.set_status(f"Cannot start: {e}.")
            return
        self.controls.set_running(True)
        self.controls.set_status("Fitting...")

    def _on_clear_requested(self) -> None:
        try:
            self.driver.reset_fit()
        except InvalidStateError as e:
            self.controls.set_status(f"Cannot clear: {e}.")
            return
        self.plot.clear()
        self.controls.set_status("Click or drag on the canvas to add points.")

    def _on_line_updated(self, update: LineUpdate) -> None:
        self.plot.set_line(update.line)
        self.controls.set_status(
            f"Iteration {update.iteration}: "
            f"y = {update.slope:.4f} x + {update.intercept:.2f}"
        )

    def _on_run_finished(self, summary: RunSummary) -> None:
        self.controls.set_running(False)
        outcome = "Converged" if summary.converged else "Stopped at iteration cap"
        text = (
            f"{outcome} after {summary.iterations} iterations: "
            f"y = {summary.line.slope:.4f} x + {summary.line.intercept:.2f}"
        )
        if summary.degenerate_iterations:
            text += (
                f"\n{summary.degenerate_iterations} iteration(s) had a zero "
                "previous slope or intercept; relative change was undefined."
            )
        self.controls.set_status(text)

    def _on_run_cancelled(self) -> None:
        self.controls.set_running(False)
        self.controls.set_status(f"Cancelled after {self.driver.iteration} iterations.")

    def closeEvent(self, event) -> None:
        self.animator.cancel()
        super().closeEvent(event)
