"""Launch the interactive linear regression window."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .logging_config import setup_logging


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pylinefitqt",
        description="Place points with the mouse and watch gradient descent fit a line.",
    )
    parser.add_argument("--debug", action="store_true", help="Log every iteration")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)

    # Qt imports stay here so --help works without a display.
    from PySide6.QtWidgets import QApplication

    from .window import LinearRegressionWindow

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("Linear Regression")

    window = LinearRegressionWindow()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
