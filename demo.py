import argparse
import logging
import sys

import numpy as np

from PySide6.QtWidgets import QApplication

from pylinefitqt import FitConfig, fit_blocking
from pylinefitqt.logging_config import setup_logging
from pylinefitqt.window import LinearRegressionWindow


def noisy_points(n=25, slope=0.8, intercept=60.0, noise=25.0, size=400.0, seed=42):
    """
    Return n (x, y) pairs scattered around y = slope * x + intercept,
    clipped to the square canvas.
    """
    rng = np.random.default_rng(seed)
    xs = rng.uniform(20.0, size - 20.0, n)
    ys = slope * xs + intercept + rng.normal(0.0, noise, n)
    ys = np.clip(ys, 0.0, size)
    return list(zip(xs.tolist(), ys.tolist()))


def main():
    parser = argparse.ArgumentParser(description="Gradient descent line fit demo")
    parser.add_argument("--headless", action="store_true", help="Fit without a window")
    parser.add_argument("-n", type=int, default=25, help="Number of sample points")
    args = parser.parse_args()

    setup_logging(level=logging.INFO)
    config = FitConfig()
    points = noisy_points(args.n, size=config.canvas_size)

    if args.headless:
        summary = fit_blocking(points, config)
        print(
            f"{'converged' if summary.converged else 'capped'} after "
            f"{summary.iterations} iterations: "
            f"y = {summary.line.slope:.4f} x + {summary.line.intercept:.2f}"
        )
        return

    app = QApplication(sys.argv)
    win = LinearRegressionWindow(config)
    for x, y in points:
        win.driver.add_point(x, y)
    win.plot.set_points(win.driver.points)
    win.resize(800, 480)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
