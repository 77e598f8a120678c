from __future__ import annotations

from typing import Optional, Tuple

import numpy as np


def clamp(value: float, vmin: float = 0.0, vmax: float = 1.0) -> float:
    """Clamp numeric values to [vmin, vmax]."""
    lo = float(vmin)
    hi = float(vmax)
    if lo > hi:
        lo, hi = hi, lo

    try:
        v = float(value)
    except (TypeError, ValueError):
        return lo

    if not np.isfinite(v):
        return lo

    return float(np.clip(v, lo, hi))


def distance(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Euclidean distance between two (x, y) pairs."""
    return float(np.hypot(b[0] - a[0], b[1] - a[1]))


def far_enough(
    last: Optional[Tuple[float, float]], pos: Tuple[float, float], threshold: float
) -> bool:
    """True when ``pos`` is at least ``threshold`` away from ``last``.

    A missing ``last`` always counts as far enough.
    """
    if last is None:
        return True
    return distance(last, pos) >= threshold
