"""Gradient-descent update rule for a straight-line fit.

The loss is the mean squared residual of ``slope * x + intercept - y``. Its
(half) gradient with respect to the two parameters is the mean residual and
the mean of ``residual * x``. Updates are batch: gradients are always
computed against the line as it was before the sweep started.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from .models import InvalidStateError, LearningRates, Line, Point


def compute_gradients(points: Sequence[Point], line: Line) -> Tuple[float, float]:
    """Compute the mean gradients over ``points``.

    Args:
        points: Non-empty sequence of points.
        line: Line to evaluate the residuals against.

    Returns:
        Tuple of (grad_slope, grad_intercept).

    Raises:
        InvalidStateError: If ``points`` is empty.
    """
    if len(points) == 0:
        raise InvalidStateError("cannot compute gradients without points")

    xs = np.fromiter((p.x for p in points), dtype=float, count=len(points))
    ys = np.fromiter((p.y for p in points), dtype=float, count=len(points))
    residuals = line.slope * xs + line.intercept - ys

    return float(np.mean(residuals * xs)), float(np.mean(residuals))


def apply_update(
    line: Line, grad_slope: float, grad_intercept: float, rates: LearningRates
) -> Line:
    """Step ``line`` against the gradient. Does not modify ``line``."""
    return Line(
        slope=line.slope - rates.rate_slope * grad_slope,
        intercept=line.intercept - rates.rate_intercept * grad_intercept,
    )


def relative_change(new: float, old: float) -> float:
    """Return ``|new - old| / |old|`` with IEEE semantics.

    A zero ``old`` gives ``nan`` (when ``new`` is also zero) or ``inf``
    instead of raising.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = np.abs(np.float64(new) - np.float64(old)) / np.abs(np.float64(old))
    return float(ratio)


class FitModel:
    """Point dataset and current line for one fit session."""

    def __init__(self, points: Optional[Sequence[Point]] = None) -> None:
        self._points: List[Point] = list(points or [])
        self._line = Line()

    @property
    def line(self) -> Line:
        return self._line

    @property
    def points(self) -> Tuple[Point, ...]:
        return tuple(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def add_point(self, point: Point) -> None:
        self._points.append(point)

    def set_points(self, points: Sequence[Point]) -> None:
        self._points = list(points)

    def snapshot_points(self) -> Tuple[Point, ...]:
        """Freeze the current points for a run."""
        return tuple(self._points)

    def replace_line(self, line: Line) -> None:
        self._line = line

    def reset_line(self) -> None:
        self._line = Line()

    def clear(self) -> None:
        """Drop all points and restore the initial line."""
        self._points.clear()
        self.reset_line()
