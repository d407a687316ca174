"""
Result bridge
=============

Run folds into `kungfu` values instead of raising.

- `fold_result(iter, folder)` drives now and returns `Result`
- `fold_lazy(async_iter, folder)` returns a `LazyCoroResult` that drives
  on every call; with a restartable pipeline it can be run again
- `unsafe(interp)` awaits and unwraps, raising on Error
"""

from __future__ import annotations

import typing
from collections.abc import Callable

from kungfu import Error, LazyCoroResult, Ok, Result

from ._helpers import identity
from .fold import Folder
from .pipeline import AsyncIter, Iter


def fold_result[T, R, E](
    source: Iter[T],
    folder: Folder[T, typing.Any, R],
    *,
    on_error: Callable[[Exception], E] = identity,
) -> Result[R, E]:
    """
    Drive source with folder, catching exceptions into Error.

    Example:
        fold_result(Iter.empty(), folds.first())
        # Error(EmptySequenceError('first'))
    """
    try:
        return Ok(source.fold(folder))
    except Exception as exc:
        return Error(on_error(exc))


def fold_lazy[T, R, E](
    source: AsyncIter[T],
    folder: Folder[T, typing.Any, R],
    *,
    on_error: Callable[[Exception], E] = identity,
) -> LazyCoroResult[R, E]:
    """
    Describe an async drive as a LazyCoroResult; nothing runs until called.

    Example:
        total = fold_lazy(AsyncIter.of(1, 2, 3), folds.sum_())
        await total()  # Ok(6)
    """

    async def run() -> Result[R, E]:
        try:
            return Ok(await source.fold(folder))
        except Exception as exc:
            return Error(on_error(exc))

    return LazyCoroResult(run)


async def unsafe[R, E](interp: LazyCoroResult[R, E]) -> R:
    """
    Await and unwrap.

    NOTE: raises if the drive ended in Error.
    """
    result = await interp()
    return result.unwrap()


__all__ = ("fold_lazy", "fold_result", "unsafe")
