"""Data models for the line-fitting session.

Provides frozen dataclasses for points, lines, learning rates, run
configuration, and the snapshots emitted while a fit is running. Nothing in
this module depends on Qt, so the descent core can run headless.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Tuple, Union


class InvalidStateError(RuntimeError):
    """Raised when an operation is not allowed in the current run state.

    Covers starting a fit with no points, starting while a fit is already
    running, and resetting while running.
    """


class RunState(enum.Enum):
    """Lifecycle of a descent session."""

    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class Point:
    """A single data point in user coordinates."""

    x: float
    y: float


@dataclass(frozen=True)
class Line:
    """The line ``y = slope * x + intercept``."""

    slope: float = 1.0
    intercept: float = 0.0

    def predict(self, x: float) -> float:
        """Return the line's y value at ``x``."""
        return self.slope * x + self.intercept


@dataclass(frozen=True)
class LearningRates:
    """Step sizes for the slope and intercept updates."""

    rate_slope: float = 0.000011
    rate_intercept: float = 0.25

    def __post_init__(self) -> None:
        for name in ("rate_slope", "rate_intercept"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")


@dataclass(frozen=True)
class PointVisit:
    """Snapshot emitted when a point is visited during a sweep.

    Attributes:
        x: X coordinate of the visited point.
        y_actual: Observed y of the visited point.
        index: Position of the point in the run's point sequence.
        iteration: One-based iteration the sweep belongs to.
        line: Line the point is being evaluated against.
    """

    x: float
    y_actual: float
    index: int
    iteration: int
    line: Line

    kind = "point-visit"

    @property
    def y_predicted(self) -> float:
        return self.line.predict(self.x)


@dataclass(frozen=True)
class LineUpdate:
    """Snapshot emitted after an iteration has replaced the line.

    Attributes:
        slope: New slope.
        intercept: New intercept.
        iteration: One-based number of the iteration that produced this line.
        grad_slope: Mean slope gradient of the sweep.
        grad_intercept: Mean intercept gradient of the sweep.
        slope_change: ``|new - old| / |old|`` for the slope. ``nan`` or
            ``inf`` when the old slope was zero.
        intercept_change: Same ratio for the intercept.
        degenerate: True when either ratio is not finite.
    """

    slope: float
    intercept: float
    iteration: int
    grad_slope: float
    grad_intercept: float
    slope_change: float
    intercept_change: float
    degenerate: bool = False

    kind = "line-update"

    @property
    def line(self) -> Line:
        return Line(self.slope, self.intercept)


Snapshot = Union[PointVisit, LineUpdate]


@dataclass(frozen=True)
class RunSummary:
    """Terminal outcome of a completed run.

    Attributes:
        iterations: Number of iterations executed.
        line: Final line.
        slope_change: Relative slope change of the last iteration.
        intercept_change: Relative intercept change of the last iteration.
        converged: True when both changes fell below their thresholds.
        degenerate_iterations: Iterations whose relative change was not finite.
    """

    iterations: int
    line: Line
    slope_change: float
    intercept_change: float
    converged: bool
    degenerate_iterations: int = 0

    @property
    def capped(self) -> bool:
        """True when the run ended on the iteration cap."""
        return not self.converged


@dataclass(frozen=True)
class FitConfig:
    """Tunable values for a descent session.

    All values may be changed between runs with ``dataclasses.replace``.
    Changing them while a run is in progress has no effect on that run.
    """

    rate_slope: float = 0.000011
    rate_intercept: float = 0.25
    slope_threshold: float = 0.0001
    intercept_threshold: float = 0.0001
    hard_iteration_cap: int = 100
    point_pause_ms: int = 10
    iteration_pause_ms: int = 50
    point_distance_threshold: float = 15.0
    canvas_size: float = 400.0

    def __post_init__(self) -> None:
        if self.hard_iteration_cap < 0:
            raise ValueError("hard_iteration_cap must be >= 0")
        if self.point_pause_ms < 0 or self.iteration_pause_ms < 0:
            raise ValueError("pause durations must be >= 0")
        if self.point_distance_threshold < 0:
            raise ValueError("point_distance_threshold must be >= 0")
        if self.canvas_size <= 0:
            raise ValueError("canvas_size must be > 0")

    @property
    def rates(self) -> LearningRates:
        return LearningRates(self.rate_slope, self.rate_intercept)

    @property
    def thresholds(self) -> Tuple[float, float]:
        return (self.slope_threshold, self.intercept_threshold)

    def pause_for(self, snapshot: Snapshot) -> int:
        """Return the pacing pause (ms) that follows ``snapshot``."""
        if isinstance(snapshot, PointVisit):
            return self.point_pause_ms
        return self.iteration_pause_ms
