"""
Named folders
=============

Ready-made folders built only from the Folder algebra.

Folders with an `otherwise` argument need at least one element: without
a fallback, extracting over an empty input raises EmptySequenceError.
`otherwise` may be a value or a zero-arg factory.
"""

from __future__ import annotations

import typing
from collections import Counter
from collections.abc import Callable, Hashable

from .._errors import EmptySequenceError
from .._helpers import opt_value
from .._types import REQUIRED, OptLazy, Pred
from .combine import combine, combine_with
from .folder import Folder

_NO_VALUE: typing.Final = object()


def _found_or[E](operation: str, otherwise: OptLazy[E] | object) -> Callable[[typing.Any], E]:
    def extract(state: typing.Any) -> E:
        if state is not _NO_VALUE:
            return state
        if otherwise is REQUIRED:
            raise EmptySequenceError(operation)
        return opt_value(typing.cast(OptLazy[E], otherwise))

    return extract


def _is_found(state: typing.Any) -> bool:
    return state is not _NO_VALUE


# ============================================================================
# Counting and arithmetic
# ============================================================================


def count() -> Folder[typing.Any, int, int]:
    """Amount of elements, taken from the (virtual) index."""
    return Folder.create(0, lambda _, __, index: index + 1)


def sum_() -> Folder[float, float, float]:
    return Folder.create(0, lambda state, elem, _: state + elem)


def product() -> Folder[float, float, float]:
    """Product of all elements; escapes on zero."""
    return Folder.create(1, lambda state, elem, _: state * elem, lambda state: state == 0)


def average() -> Folder[float, tuple[float, int], float]:
    """Arithmetic mean, 0 for an empty input."""
    return Folder.create_state(
        (0.0, 0),
        lambda state, elem, _: (state[0] + elem, state[1] + 1),
        lambda state: state[0] / state[1] if state[1] else 0.0,
    )


def _choose[E](operation: str, better: Callable[[E, E], bool], otherwise: OptLazy[E] | object) -> Folder[E, typing.Any, E]:
    def step(state: typing.Any, elem: E, index: int) -> typing.Any:
        _ = index
        if state is _NO_VALUE or better(elem, state):
            return elem
        return state

    return Folder.create_state(lambda: _NO_VALUE, step, _found_or(operation, otherwise))


def min_[E](otherwise: OptLazy[E] | object = REQUIRED) -> Folder[E, typing.Any, E]:
    return _choose("min", lambda a, b: a < b, otherwise)


def max_[E](otherwise: OptLazy[E] | object = REQUIRED) -> Folder[E, typing.Any, E]:
    return _choose("max", lambda a, b: a > b, otherwise)


def min_by[E](key: Callable[[E], typing.Any], otherwise: OptLazy[E] | object = REQUIRED) -> Folder[E, typing.Any, E]:
    return _choose("min_by", lambda a, b: key(a) < key(b), otherwise)


def max_by[E](key: Callable[[E], typing.Any], otherwise: OptLazy[E] | object = REQUIRED) -> Folder[E, typing.Any, E]:
    return _choose("max_by", lambda a, b: key(a) > key(b), otherwise)


def range_[E]() -> Folder[E, tuple[typing.Any, ...], tuple[E, E]]:
    """(min, max) in one pass."""
    return combine(min_(), max_())


def range_by[E](key: Callable[[E], typing.Any]) -> Folder[E, tuple[typing.Any, ...], tuple[E, E]]:
    """Elements with the smallest and largest key, in one pass."""
    return combine(min_by(key), max_by(key))


# ============================================================================
# Searching
# ============================================================================


def find[E](pred: Pred[E], otherwise: OptLazy[E] | object = REQUIRED) -> Folder[E, typing.Any, E]:
    """First element satisfying pred; escapes once found."""

    def step(state: typing.Any, elem: E, index: int) -> typing.Any:
        _ = index
        if state is not _NO_VALUE or not pred(elem):
            return state
        return elem

    return Folder.create_state(lambda: _NO_VALUE, step, _found_or("find", otherwise), _is_found)


def find_last[E](pred: Pred[E], otherwise: OptLazy[E] | object = REQUIRED) -> Folder[E, typing.Any, E]:
    def step(state: typing.Any, elem: E, index: int) -> typing.Any:
        _ = index
        return elem if pred(elem) else state

    return Folder.create_state(lambda: _NO_VALUE, step, _found_or("find_last", otherwise))


def first[E](otherwise: OptLazy[E] | object = REQUIRED) -> Folder[E, typing.Any, E]:
    """First element; escapes immediately after it."""
    return Folder.create_state(
        lambda: _NO_VALUE,
        lambda state, elem, _: elem if state is _NO_VALUE else state,
        _found_or("first", otherwise),
        _is_found,
    )


def last[E](otherwise: OptLazy[E] | object = REQUIRED) -> Folder[E, typing.Any, E]:
    return Folder.create_state(lambda: _NO_VALUE, lambda _, elem, __: elem, _found_or("last", otherwise))


def reduce[E](op: Callable[[E, E], E], otherwise: OptLazy[E] | object = REQUIRED) -> Folder[E, typing.Any, E]:
    """Combine elements pairwise from the left, seeded with the first one."""

    def step(state: typing.Any, elem: E, index: int) -> typing.Any:
        _ = index
        return elem if state is _NO_VALUE else op(state, elem)

    return Folder.create_state(lambda: _NO_VALUE, step, _found_or("reduce", otherwise))


def elem_at[E](position: int, otherwise: OptLazy[E] | object = REQUIRED) -> Folder[E, typing.Any, E]:
    """Element at the given (virtual) index; escapes once reached."""

    def step(state: typing.Any, elem: E, index: int) -> typing.Any:
        if state is _NO_VALUE and index == position:
            return elem
        return state

    return Folder.create_state(lambda: _NO_VALUE, step, _found_or("elem_at", otherwise), _is_found)


def some[E](pred: Pred[E]) -> Folder[E, bool, bool]:
    return Folder.create(False, lambda state, elem, _: state or pred(elem), lambda state: state)


def every[E](pred: Pred[E]) -> Folder[E, bool, bool]:
    return Folder.create(True, lambda state, elem, _: state and pred(elem), lambda state: not state)


def contains[E](value: E) -> Folder[E, bool, bool]:
    return some(lambda e: e == value)


def contains_any[E](*values: E) -> Folder[E, bool, bool]:
    return some(lambda e: e in values)


def and_() -> Folder[bool, bool, bool]:
    return every(bool)


def or_() -> Folder[bool, bool, bool]:
    return some(bool)


def has_value() -> Folder[typing.Any, bool, bool]:
    return some(lambda _: True)


def no_value() -> Folder[typing.Any, bool, bool]:
    return every(lambda _: False)


# ============================================================================
# Collecting
# ============================================================================
# Collectors grow one container per drive in place; extract hands out a copy.


def _append[E](state: list[E], elem: E, index: int) -> list[E]:
    _ = index
    state.append(elem)
    return state


def to_list[E]() -> Folder[E, list[E], list[E]]:
    return Folder.create_state(list, _append, list)


def to_set[E: Hashable]() -> Folder[E, set[E], set[E]]:
    def step(state: set[E], elem: E, index: int) -> set[E]:
        _ = index
        state.add(elem)
        return state

    return Folder.create_state(set, step, set)


def to_dict[K, V]() -> Folder[tuple[K, V], dict[K, V], dict[K, V]]:
    """Collect (key, value) pairs; later keys win."""

    def step(state: dict[K, V], elem: tuple[K, V], index: int) -> dict[K, V]:
        _ = index
        key, value = elem
        state[key] = value
        return state

    return Folder.create_state(dict, step, dict)


def group_by[E, K](key: Callable[[E], K]) -> Folder[E, dict[K, list[E]], dict[K, list[E]]]:
    def step(state: dict[K, list[E]], elem: E, index: int) -> dict[K, list[E]]:
        _ = index
        state.setdefault(key(elem), []).append(elem)
        return state

    return Folder.create_state(dict, step, lambda state: {k: list(v) for k, v in state.items()})


def histogram[E: Hashable](
    sort_by_frequency: bool = False,
    amount: int | None = None,
) -> Folder[E, Counter[E], dict[E, int]]:
    """
    Occurrence count per element.

    With sort_by_frequency the most frequent come first; amount keeps only
    that many entries.
    """

    def step(state: Counter[E], elem: E, index: int) -> Counter[E]:
        _ = index
        state[elem] += 1
        return state

    def extract(state: Counter[E]) -> dict[E, int]:
        if sort_by_frequency:
            return dict(state.most_common(amount))
        if amount is None:
            return dict(state)
        return dict(list(state.items())[:amount])

    return Folder.create_state(Counter, step, extract)


def partition[E](pred: Pred[E]) -> Folder[E, tuple[list[E], list[E]], tuple[list[E], list[E]]]:
    """(matching, other) in input order."""

    def step(state: tuple[list[E], list[E]], elem: E, index: int) -> tuple[list[E], list[E]]:
        _ = index
        (state[0] if pred(elem) else state[1]).append(elem)
        return state

    return Folder.create_state(lambda: ([], []), step, lambda state: (list(state[0]), list(state[1])))


def split_at[E](position: int) -> Folder[E, tuple[list[E], list[E]], tuple[list[E], list[E]]]:
    """(elements before position, the rest)."""

    def step(state: tuple[list[E], list[E]], elem: E, index: int) -> tuple[list[E], list[E]]:
        (state[0] if index < position else state[1]).append(elem)
        return state

    return Folder.create_state(lambda: ([], []), step, lambda state: (list(state[0]), list(state[1])))


# ============================================================================
# Strings
# ============================================================================


def string_append() -> Folder[typing.Any, str, str]:
    return Folder.create("", lambda state, elem, _: state + str(elem))


def string_prepend() -> Folder[typing.Any, str, str]:
    return Folder.create("", lambda state, elem, _: str(elem) + state)


def join(sep: str = "", start: str = "", end: str = "") -> Folder[typing.Any, list[str], str]:
    """
    Example:
        Iter.of(1, 5, 6).fold(join("|", "<", ">"))  # "<1|5|6>"
    """

    def step(state: list[str], elem: typing.Any, index: int) -> list[str]:
        _ = index
        state.append(str(elem))
        return state

    return Folder.create_state(list, step, lambda parts: start + sep.join(parts) + end)


def mean_by[E](value: Callable[[E], float]) -> Folder[E, tuple[typing.Any, ...], float]:
    """Mean of value(elem), 0 for an empty input."""
    return combine_with(
        lambda total, n: total / n if n else 0.0,
        sum_().map_input(value),
        count(),
    )


__all__ = (
    "and_",
    "average",
    "contains",
    "contains_any",
    "count",
    "elem_at",
    "every",
    "find",
    "find_last",
    "first",
    "group_by",
    "has_value",
    "histogram",
    "join",
    "last",
    "max_",
    "max_by",
    "mean_by",
    "min_",
    "min_by",
    "no_value",
    "or_",
    "partition",
    "product",
    "range_",
    "range_by",
    "reduce",
    "some",
    "split_at",
    "string_append",
    "string_prepend",
    "sum_",
    "to_dict",
    "to_list",
    "to_set",
)
