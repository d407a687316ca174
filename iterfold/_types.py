"""
Core type definitions for iterfold.

Aliases and markers shared by producers, pipelines and folders.
"""

from __future__ import annotations

import typing
from collections.abc import Callable

# ============================================================================
# Type aliases
# ============================================================================

# Predicate over an element
type Pred[T] = Callable[[T], bool]

# Predicate over an element and its 0-based position in the current stage
type IndexedPred[T] = Callable[[T, int], bool]

# Function over an element and its position
type IndexedFn[T, R] = Callable[[T, int], R]

# Folder state transition: (state, element, index) -> state
type StepFn[A, S] = Callable[[S, A, int], S]

# Folder escape: true once the extracted result can no longer change
type Escape[S] = Callable[[S], bool]

# Monitor callback: (value, index, tag) -> None
type MonitorEffect[T] = Callable[[T, int, str], None]

# Either a value or a zero-arg factory producing it
type OptLazy[T] = T | Callable[[], T]


# ============================================================================
# Markers
# ============================================================================


@typing.final
class _Absent:
    """Position of an exhausted input in a zip_all tuple."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


@typing.final
class _Skip:
    """Returned by a collect function to drop the element."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "SKIP"


@typing.final
class _Required:
    """Default of `otherwise` arguments: no fallback, raise on empty input."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "REQUIRED"


ABSENT: typing.Final = _Absent()
SKIP: typing.Final = _Skip()
REQUIRED: typing.Final = _Required()

type Absent = _Absent
type Skip = _Skip

__all__ = (
    "ABSENT",
    "REQUIRED",
    "SKIP",
    "Absent",
    "Escape",
    "IndexedFn",
    "IndexedPred",
    "MonitorEffect",
    "OptLazy",
    "Pred",
    "Skip",
    "StepFn",
)
