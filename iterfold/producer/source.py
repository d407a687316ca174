"""
Producer adapter
================

Sources are probed exactly once, when they are adapted, and end up in a
closed variant: `Immediate` (synchronous pull) or `Suspending` (awaited
pull). A variant holds a factory; producers are only created by `open()`,
which pipelines call when they are driven.

Accepted sources:
- iterables (restartable: each open() calls iter() again)
- iterators and generators (single-pass: wrapped once, exhaust permanently)
- zero-arg factories of either (restartable)
- for `adapt_async` also async iterables / async iterators / factories of them
"""

from __future__ import annotations

import logging
import typing
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable, Iterator
from dataclasses import dataclass

from kungfu import Error, Ok, Result

from .._errors import IterfoldError, NotIterableError, NotSuspendableError, RedundantWrapError
from .pull import ImmediateProducer, SuspendingProducer

logger = logging.getLogger(__name__)


# ============================================================================
# Source variants
# ============================================================================


@dataclass(frozen=True, slots=True)
class Immediate[T]:
    """Synchronous source: `open()` gives a fresh ImmediateProducer."""

    create: Callable[[], Iterator[T]]
    restartable: bool = True

    def open(self) -> ImmediateProducer[T]:
        return ImmediateProducer(self.create())


@dataclass(frozen=True, slots=True)
class Suspending[T]:
    """Suspending source: `open()` gives a fresh SuspendingProducer."""

    create: Callable[[], AsyncIterator[T]]
    restartable: bool = True

    def open(self) -> SuspendingProducer[T]:
        return SuspendingProducer(self.create())


type Source[T] = Immediate[T] | Suspending[T]


# ============================================================================
# Capability probes
# ============================================================================


def _is_canonical(source: object) -> bool:
    return isinstance(source, (ImmediateProducer, SuspendingProducer, Immediate, Suspending))


def _single_pass[T](iterator: T) -> Callable[[], T]:
    logger.debug("Adapting single-pass source %s", type(iterator).__name__)
    return lambda: iterator


async def _lift[T](iterator: Iterator[T]) -> AsyncIterator[T]:
    for value in iterator:
        yield value


def lifted[T](source: Immediate[T]) -> Suspending[T]:
    """Suspending view of an immediate source; keeps its restartability."""
    return Suspending(lambda: _lift(source.create()), source.restartable)


def _open_sync(value: object) -> Iterator[typing.Any]:
    if isinstance(value, Iterable):
        return iter(value)
    raise NotIterableError(value)


def _open_async(value: object) -> AsyncIterator[typing.Any]:
    if isinstance(value, AsyncIterable):
        return aiter(value)
    if isinstance(value, Iterable):
        return _lift(iter(value))
    raise NotSuspendableError(value)


def adapt[T](source: Iterable[T] | Callable[[], Iterable[T]]) -> Immediate[T]:
    """
    Adapt a synchronous source.

    Raises:
        RedundantWrapError: source is already a canonical producer.
        NotIterableError: source is neither iterable nor a factory.

    Example:
        adapt([1, 2, 3]).open().pull()  # Next(value=1)
    """
    if _is_canonical(source):
        raise RedundantWrapError(source)
    if isinstance(source, Iterator):
        return Immediate(_single_pass(typing.cast(Iterator[T], source)), restartable=False)
    if isinstance(source, Iterable):
        iterable = typing.cast(Iterable[T], source)
        return Immediate(lambda: iter(iterable))
    if callable(source):
        factory = source
        return Immediate(lambda: _open_sync(factory()))
    raise NotIterableError(source)


def adapt_async[T](
    source: AsyncIterable[T] | Iterable[T] | Callable[[], AsyncIterable[T] | Iterable[T]],
) -> Suspending[T]:
    """
    Adapt a suspending source. Synchronous sources are lifted.

    Raises:
        RedundantWrapError: source is already a canonical producer.
        NotSuspendableError: source speaks no pull protocol.
    """
    if _is_canonical(source):
        raise RedundantWrapError(source)
    if isinstance(source, AsyncIterator):
        return Suspending(_single_pass(typing.cast(AsyncIterator[T], source)), restartable=False)
    if isinstance(source, AsyncIterable):
        aiterable = typing.cast(AsyncIterable[T], source)
        return Suspending(lambda: aiter(aiterable))
    if isinstance(source, Iterator):
        iterator = typing.cast(Iterator[T], source)
        return Suspending(_single_pass(_lift(iterator)), restartable=False)
    if isinstance(source, Iterable):
        iterable = typing.cast(Iterable[T], source)
        return Suspending(lambda: _lift(iter(iterable)))
    if callable(source):
        factory = source
        return Suspending(lambda: _open_async(factory()))
    raise NotSuspendableError(source)


def try_adapt[T](source: object) -> Result[Immediate[T], IterfoldError]:
    """adapt() returning Error instead of raising."""
    try:
        return Ok(adapt(typing.cast(Iterable[T], source)))
    except IterfoldError as exc:
        return Error(exc)


def try_adapt_async[T](source: object) -> Result[Suspending[T], IterfoldError]:
    """adapt_async() returning Error instead of raising."""
    try:
        return Ok(adapt_async(typing.cast(AsyncIterable[T], source)))
    except IterfoldError as exc:
        return Error(exc)


__all__ = (
    "Immediate",
    "Source",
    "Suspending",
    "adapt",
    "adapt_async",
    "lifted",
    "try_adapt",
    "try_adapt_async",
)
