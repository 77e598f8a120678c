"""Interactive canvas and controls for the line fit.

This module provides a PyQtGraph-based canvas where the user places points
with the mouse, and which renders the snapshots a descent run produces.

Key features:
  - Click to place a point, drag to lay down a trail of points
  - Fixed square canvas in user coordinates (origin bottom-left)
  - Current fit line drawn across the full canvas width
  - Residual segment for the point currently being visited

Typical usage:

    plot = FitPlotWidget()
    plot.pointAdded.connect(lambda x, y: driver.add_point(x, y))

    animator.pointVisited.connect(plot.show_point_visit)
    animator.lineUpdated.connect(lambda u: plot.set_line(u.line))

Google-style docstrings + PEP8.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np
from PySide6 import QtCore
from PySide6.QtCore import Signal
import pyqtgraph as pg
from PySide6.QtWidgets import (
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from .models import FitConfig, LearningRates, Line, Point, PointVisit
from .utils import clamp, far_enough


class PlacementViewBox(pg.ViewBox):
    """ViewBox that turns left-button presses and drags into point requests.

    Panning and zooming are disabled; the view stays fixed on the canvas.

    Signals:
        placeRequested(float, float): View coordinates of a requested point.
    """

    placeRequested = Signal(float, float)

    def __init__(self, *args, distance_threshold: float = 15.0, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.setMouseEnabled(x=False, y=False)
        self.setMenuEnabled(False)
        self.distance_threshold = distance_threshold
        self.placement_enabled = True
        self._dragging = False
        self._last_placed: Optional[Tuple[float, float]] = None

    @property
    def dragging(self) -> bool:
        return self._dragging

    def mousePressEvent(self, ev):
        if ev.button() == QtCore.Qt.LeftButton and self.placement_enabled:
            pos = self.mapSceneToView(ev.scenePos())
            self._place(pos.x(), pos.y())
            self._dragging = True
            ev.accept()
        else:
            super().mousePressEvent(ev)

    def mouseMoveEvent(self, ev):
        if self._dragging:
            pos = self.mapSceneToView(ev.scenePos())
            self.drag_to(pos.x(), pos.y())
            ev.accept()
        else:
            super().mouseMoveEvent(ev)

    def mouseReleaseEvent(self, ev):
        if self._dragging:
            self._dragging = False
            ev.accept()
        else:
            super().mouseReleaseEvent(ev)

    def drag_to(self, x: float, y: float) -> bool:
        """Place a point at (x, y) if it is far enough from the last one.

        Returns:
            True if a point was placed.
        """
        if not far_enough(self._last_placed, (x, y), self.distance_threshold):
            return False
        self._place(x, y)
        return True

    def forget_last(self) -> None:
        """Forget the last placed point (after the canvas is cleared)."""
        self._last_placed = None
        self._dragging = False

    def _place(self, x: float, y: float) -> None:
        self._last_placed = (x, y)
        self.placeRequested.emit(float(x), float(y))


class FitPlotWidget(QWidget):
    """Canvas that collects points and renders the evolving fit.

    Attributes:
        pointAdded: Signal emitted with (x, y) for every placed point.
    """

    pointAdded = Signal(float, float)

    def __init__(
        self, config: Optional[FitConfig] = None, parent: Optional[QWidget] = None
    ) -> None:
        """Initialize the canvas.

        Args:
            config: Canvas size and drag threshold come from here.
            parent: Parent widget.
        """
        super().__init__(parent)
        self._config = config or FitConfig()
        self._points: Tuple[Point, ...] = ()
        self._line = Line()
        self._residual: Optional[Tuple[float, float, float]] = None  # (x, y_pred, y_actual)

        self._build_ui()

    def _build_ui(self) -> None:
        """Build the user interface."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.view_box = PlacementViewBox(
            distance_threshold=self._config.point_distance_threshold
        )
        self.view_box.placeRequested.connect(self._on_place_requested)

        self.plot_widget = pg.PlotWidget(viewBox=self.view_box)
        self.plot_widget.setBackground('w')
        self.plot_widget.showGrid(x=True, y=True, alpha=0.2)
        self.plot_widget.setMinimumSize(400, 400)
        layout.addWidget(self.plot_widget)

        self.plot_item = self.plot_widget.getPlotItem()
        self.plot_item.hideButtons()

        size = self._config.canvas_size
        self.view_box.setRange(xRange=(0, size), yRange=(0, size), padding=0)
        self.view_box.disableAutoRange()

        self._scatter_item = pg.ScatterPlotItem(
            pen=None, brush=pg.mkBrush('g'), symbol='o', size=10
        )
        self._line_item = pg.PlotDataItem(pen=pg.mkPen(color='b', width=2))
        self._residual_item = pg.PlotDataItem(pen=pg.mkPen(color='r', width=2))

        self.plot_item.addItem(self._scatter_item)
        self.plot_item.addItem(self._line_item)
        self.plot_item.addItem(self._residual_item)

        self._redraw_line()

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._points

    @property
    def line(self) -> Line:
        return self._line

    @property
    def residual(self) -> Optional[Tuple[float, float, float]]:
        """(x, y_predicted, y_actual) of the residual being shown, if any."""
        return self._residual

    def _on_place_requested(self, x: float, y: float) -> None:
        size = self._config.canvas_size
        self.pointAdded.emit(clamp(x, 0.0, size), clamp(y, 0.0, size))

    def set_points(self, points: Sequence[Point]) -> None:
        """Replace the drawn points."""
        self._points = tuple(points)
        if self._points:
            xs = np.array([p.x for p in self._points], dtype=float)
            ys = np.array([p.y for p in self._points], dtype=float)
            self._scatter_item.setData(x=xs, y=ys)
        else:
            self._scatter_item.clear()

    def set_line(self, line: Line) -> None:
        """Draw ``line`` and refresh the residual against it."""
        self._line = line
        self._redraw_line()
        if self._residual is not None:
            x, _, y_actual = self._residual
            self._set_residual(x, line.predict(x), y_actual)

    def show_point_visit(self, visit: PointVisit) -> None:
        """Draw the residual segment for a visited point."""
        self._set_residual(visit.x, visit.y_predicted, visit.y_actual)

    def clear_residual(self) -> None:
        self._residual = None
        self._residual_item.clear()

    def clear(self) -> None:
        """Remove all points and the residual, and reset the line."""
        self.set_points(())
        self.clear_residual()
        self.set_line(Line())
        self.view_box.forget_last()

    def _set_residual(self, x: float, y_predicted: float, y_actual: float) -> None:
        self._residual = (x, y_predicted, y_actual)
        if not (np.isfinite(y_predicted) and np.isfinite(y_actual)):
            self._residual_item.clear()
            return
        self._residual_item.setData(x=[x, x], y=[y_predicted, y_actual])

    def _redraw_line(self) -> None:
        size = self._config.canvas_size
        xs = np.array([0.0, size])
        with np.errstate(over="ignore", invalid="ignore"):
            ys = self._line.slope * xs + self._line.intercept
        if not np.all(np.isfinite(ys)):
            # Diverged fit; nothing sensible to draw.
            self._line_item.clear()
            return
        self._line_item.setData(x=xs, y=ys)


class FitControlWidget(QWidget):
    """Control panel for the fit.

    Provides UI controls for:
    - Learning rates
    - Start / Clear actions
    - Run status
    """

    startRequested = Signal(object)  # LearningRates
    clearRequested = Signal()

    def __init__(
        self, config: Optional[FitConfig] = None, parent: Optional[QWidget] = None
    ) -> None:
        """Initialize the control widget.

        Args:
            config: Initial learning rates come from here.
            parent: Parent widget
        """
        super().__init__(parent)
        self._config = config or FitConfig()

        self._build_ui()

    def _build_ui(self) -> None:
        """Build the user interface."""
        layout = QVBoxLayout(self)

        rates_group = QGroupBox("Learning Rates")
        rates_layout = QFormLayout(rates_group)

        self.rate_slope_spin = QDoubleSpinBox()
        self.rate_slope_spin.setDecimals(8)
        self.rate_slope_spin.setRange(0.0, 1.0)
        self.rate_slope_spin.setSingleStep(0.000001)
        self.rate_slope_spin.setValue(self._config.rate_slope)

        self.rate_intercept_spin = QDoubleSpinBox()
        self.rate_intercept_spin.setDecimals(4)
        self.rate_intercept_spin.setRange(0.0, 10.0)
        self.rate_intercept_spin.setSingleStep(0.01)
        self.rate_intercept_spin.setValue(self._config.rate_intercept)

        rates_layout.addRow("Slope:", self.rate_slope_spin)
        rates_layout.addRow("Intercept:", self.rate_intercept_spin)
        layout.addWidget(rates_group)

        buttons = QHBoxLayout()
        self.start_btn = QPushButton("Start")
        self.start_btn.clicked.connect(self._on_start)
        buttons.addWidget(self.start_btn)

        self.clear_btn = QPushButton("Clear")
        self.clear_btn.clicked.connect(self._on_clear)
        buttons.addWidget(self.clear_btn)
        layout.addLayout(buttons)

        self.status_label = QLabel("Click or drag on the canvas to add points.")
        self.status_label.setWordWrap(True)
        self.status_label.setStyleSheet(
            "padding: 10px; background-color: #f0f0f0; "
            "border-radius: 3px; font-size: 9pt;"
        )
        layout.addWidget(self.status_label)

        layout.addStretch()

    def rates(self) -> LearningRates:
        """Learning rates currently entered in the spin boxes."""
        return LearningRates(
            rate_slope=self.rate_slope_spin.value(),
            rate_intercept=self.rate_intercept_spin.value(),
        )

    def set_running(self, running: bool) -> None:
        """Enable or disable the controls for a run in progress."""
        self.start_btn.setEnabled(not running)
        self.clear_btn.setEnabled(not running)
        self.rate_slope_spin.setEnabled(not running)
        self.rate_intercept_spin.setEnabled(not running)

    def set_status(self, text: str) -> None:
        self.status_label.setText(text)

    def status(self) -> str:
        return self.status_label.text()

    def _on_start(self) -> None:
        """Handle start button click."""
        self.startRequested.emit(self.rates())

    def _on_clear(self) -> None:
        """Handle clear button click."""
        self.clearRequested.emit()
