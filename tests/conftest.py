"""Pytest configuration shared by the test suite.

Qt tests run on the offscreen platform so no display is needed. Core tests
do not import Qt at all.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("PYQTGRAPH_QT_LIB", "PySide6")

import pytest

from pylinefitqt import DescentDriver, FitConfig, Point


@pytest.fixture
def fast_config():
    """Config with the pacing pauses turned off."""
    return FitConfig(point_pause_ms=0, iteration_pause_ms=0)


@pytest.fixture
def diagonal_points():
    """Three points lying exactly on y = x."""
    return [Point(0, 0), Point(1, 1), Point(2, 2)]


@pytest.fixture
def driver_factory(fast_config):
    """Factory fixture: a driver preloaded with points."""
    def _make(points=(), config=None):
        driver = DescentDriver(config or fast_config)
        for p in points:
            driver.add_point(p.x, p.y)
        return driver
    return _make
