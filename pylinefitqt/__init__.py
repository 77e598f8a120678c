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
)
from .fit_model import (
    FitModel,
    apply_update,
    compute_gradients,
    relative_change,
)
from .descent import DescentDriver, DescentRun, fit_blocking, run_to_completion

__all__ = [
    "FitConfig",
    "InvalidStateError",
    "LearningRates",
    "Line",
    "LineUpdate",
    "Point",
    "PointVisit",
    "RunState",
    "RunSummary",
    # Fit model
    "FitModel",
    "apply_update",
    "compute_gradients",
    "relative_change",
    # Descent driver
    "DescentDriver",
    "DescentRun",
    "fit_blocking",
    "run_to_completion",
]
