"""
Combine combinators
===================

Fan-out over one shared pass: every folder sees every element in
lock-step, the joint accumulator is the tuple of individual ones.
"""

from __future__ import annotations

import typing
from collections.abc import Callable
from dataclasses import dataclass

from .._helpers import always_true
from .folder import Folder

type AnyFolder[A] = Folder[A, typing.Any, typing.Any]


def combine_with[A, GR](
    combine_fn: Callable[..., GR],
    folder1: AnyFolder[A],
    folder2: AnyFolder[A],
    /,
    *others: AnyFolder[A],
) -> Folder[A, tuple[typing.Any, ...], GR]:
    """
    Run folders in lock-step; extract applies combine_fn to their results.

    The joint escape holds once every folder escaped on its own. A folder
    that escaped is not stepped any further.

    Example:
        mean = combine_with(lambda s, c: s / c, folds.sum_(), folds.count())
    """
    folders = (folder1, folder2, *others)

    def init() -> tuple[typing.Any, ...]:
        return tuple(f.init() for f in folders)

    def step(states: tuple[typing.Any, ...], elem: A, index: int) -> tuple[typing.Any, ...]:
        return tuple(
            state if f.escaped(state) else f.step(state, elem, index)
            for f, state in zip(folders, states, strict=True)
        )

    def extract(states: tuple[typing.Any, ...]) -> GR:
        return combine_fn(*(f.extract(state) for f, state in zip(folders, states, strict=True)))

    def escape(states: tuple[typing.Any, ...]) -> bool:
        return all(f.escaped(state) for f, state in zip(folders, states, strict=True))

    return Folder(init, step, extract, escape)


def combine[A](
    folder1: AnyFolder[A],
    folder2: AnyFolder[A],
    /,
    *others: AnyFolder[A],
) -> Folder[A, tuple[typing.Any, ...], tuple[typing.Any, ...]]:
    """
    Run folders in lock-step, result is the tuple of their results.

    Example:
        Iter.of(1, 2, 3, 4).fold(combine(folds.sum_(), folds.count()))  # (10, 4)
    """
    return combine_with(lambda *results: results, folder1, folder2, *others)


@dataclass(frozen=True, slots=True)
class Piped:
    first: typing.Any
    second: typing.Any


def pipe[A, R, R2](
    first: Folder[A, typing.Any, R],
    second: Folder[R, typing.Any, R2],
) -> Folder[A, Piped, R2]:
    """
    Feed every element to `first`, then feed first's running result to `second`.

    Escapes as soon as either folder escapes.

    Example:
        # maximum running total
        pipe(folds.sum_(), folds.max_())
    """

    def init() -> Piped:
        return Piped(first.init(), second.init())

    def step(st: Piped, elem: A, index: int) -> Piped:
        s1 = first.step(st.first, elem, index)
        return Piped(s1, second.step(st.second, first.extract(s1), index))

    def escape(st: Piped) -> bool:
        return first.escaped(st.first) or second.escaped(st.second)

    return Folder(init, step, lambda st: second.extract(st.second), escape)


def fixed[R](result: R) -> Folder[typing.Any, None, R]:
    """Folder that ignores its input and escapes immediately."""
    return Folder(lambda: None, lambda s, e, i: s, lambda _: result, always_true)


__all__ = ("Piped", "combine", "combine_with", "fixed", "pipe")
