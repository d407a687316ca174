"""
Lazy sequence pipelines and composable reducers.

Core building blocks:
- `Iter` / `AsyncIter`: lazy, restartable pipeline descriptions over
  immediate or suspending producers
- `Folder`: incremental reducer `{init, step, extract, escape}` with input
  and result combinators, fanned out by `combine`
- `folds`: ready-made folders built from the algebra

Example:
    from iterfold import Iter, combine, folds

    Iter.of(1, 2, 3, 4).fold(combine(folds.sum_(), folds.count()))  # (10, 4)
"""

# Core types
from ._types import ABSENT, REQUIRED, SKIP, Absent, Skip

# Errors
from ._errors import (
    EmptySequenceError,
    IterfoldError,
    NotIterableError,
    NotRestartableError,
    NotSuspendableError,
    RedundantWrapError,
)

# Configuration
from ._policy import PatchPolicy

# Producers
from . import producer
from .producer import (
    Done,
    Immediate,
    ImmediateProducer,
    Next,
    Suspending,
    SuspendingProducer,
    adapt,
    adapt_async,
    try_adapt,
    try_adapt_async,
)

# Reducer algebra
from .fold import Folder, combine, combine_with, drive, drive_async, fixed, folds, pipe

# Pipelines
from .pipeline import AsyncIter, Iter

# Monitoring
from .monitor import Log, MonitorEvent, Recorder, log_effect

# Result bridge
from .lift import fold_lazy, fold_result, unsafe

__all__ = (
    # Markers
    "ABSENT",
    "Absent",
    "REQUIRED",
    "SKIP",
    "Skip",
    # Errors
    "EmptySequenceError",
    "IterfoldError",
    "NotIterableError",
    "NotRestartableError",
    "NotSuspendableError",
    "RedundantWrapError",
    # Configuration
    "PatchPolicy",
    # Producers
    "Done",
    "Immediate",
    "ImmediateProducer",
    "Next",
    "Suspending",
    "SuspendingProducer",
    "adapt",
    "adapt_async",
    "producer",
    "try_adapt",
    "try_adapt_async",
    # Reducer algebra
    "Folder",
    "combine",
    "combine_with",
    "drive",
    "drive_async",
    "fixed",
    "folds",
    "pipe",
    # Pipelines
    "AsyncIter",
    "Iter",
    # Monitoring
    "Log",
    "MonitorEvent",
    "Recorder",
    "log_effect",
    # Result bridge
    "fold_lazy",
    "fold_result",
    "unsafe",
)
