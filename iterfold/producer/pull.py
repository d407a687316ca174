"""
Canonical producers
===================

A producer answers exactly one request: give me the next element.
The answer is `Next(value)` or `Done()`. Immediate producers answer
synchronously, suspending producers answer from a coroutine.
"""

from __future__ import annotations

import typing
from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass

from .._errors import RedundantWrapError


@dataclass(frozen=True, slots=True)
class Next[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Done:
    pass


type Pulled[T] = Next[T] | Done

_END: typing.Final = object()


class ImmediateProducer[T]:
    """Single-pass synchronous producer over a Python iterator."""

    __slots__ = ("_iterator",)

    def __init__(self, iterator: Iterator[T], /) -> None:
        if isinstance(iterator, (ImmediateProducer, SuspendingProducer)):
            raise RedundantWrapError(iterator)
        self._iterator = iterator

    def pull(self) -> Pulled[T]:
        value = next(self._iterator, _END)
        if value is _END:
            return Done()
        return Next(typing.cast(T, value))

    def __iter__(self) -> ImmediateProducer[T]:
        return self

    def __next__(self) -> T:
        match self.pull():
            case Next(value):
                return value
            case Done():
                raise StopIteration


class SuspendingProducer[T]:
    """Single-pass producer whose pulls suspend until the value is available."""

    __slots__ = ("_iterator",)

    def __init__(self, iterator: AsyncIterator[T], /) -> None:
        if isinstance(iterator, (ImmediateProducer, SuspendingProducer)):
            raise RedundantWrapError(iterator)
        self._iterator = iterator

    async def pull(self) -> Pulled[T]:
        try:
            value = await anext(self._iterator)
        except StopAsyncIteration:
            return Done()
        return Next(value)

    async def aclose(self) -> None:
        """Release the underlying iterator early, if it supports that."""
        close = getattr(self._iterator, "aclose", None)
        if close is not None:
            await close()

    def __aiter__(self) -> SuspendingProducer[T]:
        return self

    async def __anext__(self) -> T:
        match await self.pull():
            case Next(value):
                return value
            case Done():
                raise StopAsyncIteration


__all__ = (
    "Done",
    "ImmediateProducer",
    "Next",
    "Pulled",
    "SuspendingProducer",
)
