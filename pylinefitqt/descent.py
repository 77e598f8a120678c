"""Descent driver: runs gradient descent as a lazy stream of snapshots.

A run is a generator with exactly two kinds of suspension point, one after
each point visit and one after each line update. Whoever consumes the run
decides how long to pause at each of them (see ``FitConfig.pause_for``). The
Qt animator waits on single-shot timers and ``run_to_completion`` can sleep
or skip the pauses entirely.

Typical usage:

    driver = DescentDriver()
    for x, y in [(0, 1), (1, 3)]:
        driver.add_point(x, y)

    run = driver.start_fit()
    for snapshot in run:
        render(snapshot)

    print(run.summary.converged, driver.line)
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import replace
from typing import Callable, Generator, Iterator, Optional, Sequence, Tuple

from .fit_model import FitModel, apply_update, compute_gradients, relative_change
from .models import (
    FitConfig,
    InvalidStateError,
    LearningRates,
    Line,
    LineUpdate,
    Point,
    PointVisit,
    RunState,
    RunSummary,
    Snapshot,
)

logger = logging.getLogger(__name__)


class DescentRun:
    """One non-restartable pass of the descent loop.

    Iterating yields ``PointVisit`` and ``LineUpdate`` snapshots until a
    stopping condition fires. ``summary`` is set once the loop ends on its
    own and stays ``None`` for a cancelled run.
    """

    def __init__(
        self,
        driver: "DescentDriver",
        points: Tuple[Point, ...],
        rates: LearningRates,
        config: FitConfig,
    ) -> None:
        self._driver = driver
        self._points = points
        self._rates = rates
        self._config = config
        self._steps = self._run()
        self._finished = False
        self._cancelled = False
        self.summary: Optional[RunSummary] = None

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._points

    @property
    def rates(self) -> LearningRates:
        return self._rates

    @property
    def config(self) -> FitConfig:
        return self._config

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __iter__(self) -> Iterator[Snapshot]:
        return self

    def __next__(self) -> Snapshot:
        return next(self._steps)

    def cancel(self) -> None:
        """Stop the run at its current suspension point.

        The session keeps the line and iteration count of the last completed
        iteration. Cancelling a finished run does nothing.
        """
        if self._finished:
            return
        self._steps.close()
        self._cancelled = True
        self._finish(None)
        logger.info("Descent cancelled after %d iteration(s)", self._driver.iteration)

    def _finish(self, summary: Optional[RunSummary]) -> None:
        self._finished = True
        self.summary = summary
        self._driver._end_run(self, summary)

    def _run(self) -> Generator[Snapshot, None, RunSummary]:
        model = self._driver.model
        config = self._config
        points = self._points

        iteration = 0
        slope_change = math.inf
        intercept_change = math.inf
        degenerate_iterations = 0

        while not (
            (slope_change < config.slope_threshold
             and intercept_change < config.intercept_threshold)
            or iteration > config.hard_iteration_cap
        ):
            old_line = model.line
            sweep = iteration + 1

            for index, point in enumerate(points):
                yield PointVisit(point.x, point.y, index, sweep, old_line)

            grad_slope, grad_intercept = compute_gradients(points, old_line)
            new_line = apply_update(old_line, grad_slope, grad_intercept, self._rates)

            slope_change = relative_change(new_line.slope, old_line.slope)
            intercept_change = relative_change(new_line.intercept, old_line.intercept)
            degenerate = not (math.isfinite(slope_change) and math.isfinite(intercept_change))
            if degenerate:
                degenerate_iterations += 1
                if degenerate_iterations == 1:
                    logger.warning(
                        "Relative change is not finite at iteration %d "
                        "(previous line %s); convergence check is unreliable",
                        sweep, old_line,
                    )

            model.replace_line(new_line)
            iteration = sweep
            self._driver._record_iteration(iteration)
            logger.debug(
                "Iteration %d: slope=%g intercept=%g d_slope=%g d_intercept=%g",
                iteration, new_line.slope, new_line.intercept,
                slope_change, intercept_change,
            )

            yield LineUpdate(
                slope=new_line.slope,
                intercept=new_line.intercept,
                iteration=iteration,
                grad_slope=grad_slope,
                grad_intercept=grad_intercept,
                slope_change=slope_change,
                intercept_change=intercept_change,
                degenerate=degenerate,
            )

        summary = RunSummary(
            iterations=iteration,
            line=model.line,
            slope_change=slope_change,
            intercept_change=intercept_change,
            converged=(slope_change < config.slope_threshold
                       and intercept_change < config.intercept_threshold),
            degenerate_iterations=degenerate_iterations,
        )
        self._finish(summary)
        return summary


class DescentDriver:
    """Owns a fit session and hands out descent runs.

    The session holds the point list, the current line and the run state.
    Only one run can be active at a time.
    """

    def __init__(self, config: Optional[FitConfig] = None) -> None:
        self._config = config or FitConfig()
        self._model = FitModel()
        self._state = RunState.IDLE
        self._iteration = 0
        self._current_run: Optional[DescentRun] = None
        self._last_summary: Optional[RunSummary] = None

    @property
    def config(self) -> FitConfig:
        return self._config

    @config.setter
    def config(self, config: FitConfig) -> None:
        self._config = config

    @property
    def model(self) -> FitModel:
        return self._model

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is RunState.RUNNING

    @property
    def line(self) -> Line:
        return self._model.line

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._model.points

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def current_run(self) -> Optional[DescentRun]:
        return self._current_run

    @property
    def last_summary(self) -> Optional[RunSummary]:
        return self._last_summary

    def set_rates(self, rates: LearningRates) -> None:
        """Store ``rates`` as the default for later runs."""
        self._config = replace(
            self._config, rate_slope=rates.rate_slope, rate_intercept=rates.rate_intercept
        )

    def add_point(self, x: float, y: float) -> Point:
        """Append a point to the session.

        Points added while a run is in progress are kept for the next run;
        the running sweep works on the points captured at its start.
        """
        point = Point(float(x), float(y))
        self._model.add_point(point)
        if self.is_running:
            logger.debug("Point %s added during a run; used from the next run", point)
        return point

    def start_fit(
        self,
        points: Optional[Sequence[Point]] = None,
        rates: Optional[LearningRates] = None,
    ) -> DescentRun:
        """Begin a run and return its snapshot stream.

        Args:
            points: Points to fit. Replaces the session's points when given;
                otherwise the session's points are used.
            rates: Learning rates for this run. Defaults to the configured pair.

        Returns:
            The lazy ``DescentRun``. The session is ``RUNNING`` on return.

        Raises:
            InvalidStateError: If a run is active or there are no points.
        """
        if self.is_running:
            raise InvalidStateError("a fit is already running")

        if points is not None:
            candidate = tuple(Point(float(p.x), float(p.y)) for p in points)
        else:
            candidate = self._model.snapshot_points()
        if not candidate:
            raise InvalidStateError("cannot start a fit without points")

        if points is not None:
            self._model.set_points(candidate)

        run = DescentRun(self, candidate, rates or self._config.rates, self._config)
        self._state = RunState.RUNNING
        self._iteration = 0
        self._current_run = run
        logger.info(
            "Descent started: %d point(s), line=%s, rates=%s",
            len(candidate), self._model.line, run.rates,
        )
        return run

    def reset_fit(self) -> None:
        """Clear all points and restore the initial line.

        Raises:
            InvalidStateError: If a run is active.
        """
        if self.is_running:
            raise InvalidStateError("cannot reset while a fit is running")
        self._model.clear()
        self._iteration = 0
        self._last_summary = None

    def _record_iteration(self, iteration: int) -> None:
        self._iteration = iteration

    def _end_run(self, run: DescentRun, summary: Optional[RunSummary]) -> None:
        if run is not self._current_run:
            return
        self._state = RunState.IDLE
        self._current_run = None
        if summary is not None:
            self._last_summary = summary
            logger.info(
                "Descent finished after %d iteration(s): %s (%s)",
                summary.iterations, summary.line,
                "converged" if summary.converged else "iteration cap reached",
            )


def run_to_completion(
    run: DescentRun,
    on_snapshot: Optional[Callable[[Snapshot], None]] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> Optional[RunSummary]:
    """Drain ``run`` outside of an event loop.

    Args:
        run: Run returned by ``DescentDriver.start_fit``.
        on_snapshot: Called with every snapshot, in order.
        sleep: Called with each pacing pause in seconds. Pass ``time.sleep``
            to replay the animation timing; omit to skip the pauses.

    Returns:
        The run's summary, or ``None`` if ``on_snapshot`` cancelled it.

    Raises:
        Whatever ``on_snapshot`` or ``sleep`` raises. The run is cancelled
        first, so the session is Idle again.
    """
    try:
        for snapshot in run:
            if on_snapshot is not None:
                on_snapshot(snapshot)
            if run.cancelled:
                break
            if sleep is not None:
                sleep(run.config.pause_for(snapshot) / 1000.0)
    except BaseException:
        run.cancel()
        raise
    return run.summary


def fit_blocking(
    points: Sequence[Tuple[float, float]],
    config: Optional[FitConfig] = None,
    paced: bool = False,
) -> RunSummary:
    """Fit ``(x, y)`` pairs in one call and return the summary."""
    driver = DescentDriver(config)
    run = driver.start_fit([Point(float(x), float(y)) for x, y in points])
    summary = run_to_completion(run, sleep=time.sleep if paced else None)
    if summary is None:
        raise RuntimeError("descent run ended without a summary")
    return summary
