"""
Drive loops
===========

The single eager loop that applies a Folder to a sequence, plus the
live-view variant yielding the running result after every element.

Contract:
- escape(init) holds -> return extract(init) without pulling
- otherwise pull one element, step, re-check escape; stop the moment
  it holds, without pulling further
- source exhausted -> extract(final state)

Async drives close the source iterator when they stop early.
"""

from __future__ import annotations

import typing
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator

from .._helpers import aclose
from .folder import Folder


def drive[A, R](folder: Folder[A, typing.Any, R], source: Iterable[A]) -> R:
    state = folder.init()
    if folder.escaped(state):
        return folder.extract(state)

    for index, elem in enumerate(source):
        state = folder.step(state, elem, index)
        if folder.escaped(state):
            break

    return folder.extract(state)


def drive_iter[A, R](folder: Folder[A, typing.Any, R], source: Iterable[A]) -> Iterator[R]:
    """Yield extract(state) after every step; ends after escape."""
    state = folder.init()
    if folder.escaped(state):
        return

    for index, elem in enumerate(source):
        state = folder.step(state, elem, index)
        yield folder.extract(state)
        if folder.escaped(state):
            return


async def drive_async[A, R](folder: Folder[A, typing.Any, R], source: AsyncIterable[A]) -> R:
    state = folder.init()
    if folder.escaped(state):
        return folder.extract(state)

    iterator = aiter(source)
    try:
        index = 0
        async for elem in iterator:
            state = folder.step(state, elem, index)
            index += 1
            if folder.escaped(state):
                break
    finally:
        await aclose(iterator)

    return folder.extract(state)


async def drive_async_iter[A, R](
    folder: Folder[A, typing.Any, R],
    source: AsyncIterable[A],
) -> AsyncIterator[R]:
    state = folder.init()
    if folder.escaped(state):
        return

    iterator = aiter(source)
    try:
        index = 0
        async for elem in iterator:
            state = folder.step(state, elem, index)
            index += 1
            yield folder.extract(state)
            if folder.escaped(state):
                return
    finally:
        await aclose(iterator)


__all__ = ("drive", "drive_async", "drive_async_iter", "drive_iter")
