"""
AsyncIter
=========

Lazy, restartable pipeline over a suspending producer.

Same surface as `Iter`, driven with `await` / `async for`. Stages run
synchronously between pulls, so a pipeline only suspends where its
source does (plus `delay` and `map_async`, which suspend on purpose).
Zipped inputs are pulled concurrently.

Example:
    await AsyncIter.from_iterable(ticks()).take(3).to_list()
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import typing
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Coroutine, Hashable, Iterable
from contextlib import aclosing
from dataclasses import dataclass

from .._errors import NotRestartableError
from .._helpers import aclose, always_true, identity, with_index
from .._policy import PatchPolicy
from .._types import ABSENT, REQUIRED, SKIP, Absent, IndexedFn, IndexedPred, MonitorEffect, OptLazy, Pred, Skip
from ..fold import Folder, drive_async, drive_async_iter, folds
from ..monitor import log_effect
from ..producer import Done, Next, Pulled, Suspending, SuspendingProducer, adapt_async, lifted
from . import stages
from .iter import Iter

type AnyIterable[T] = AsyncIterable[T] | Iterable[T]


async def _resolved[T](value: T | Awaitable[T]) -> T:
    if inspect.isawaitable(value):
        return await value
    return value


async def _pull_all(
    pulls: Iterable[Coroutine[typing.Any, typing.Any, Pulled[typing.Any]]],
) -> list[Pulled[typing.Any]]:
    """
    Await every pull concurrently.

    If one pull fails, the others are cancelled and settled before the
    error propagates, so the producers are idle when they get closed.
    """
    tasks = [asyncio.create_task(pull) for pull in pulls]
    try:
        return await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


@dataclass(frozen=True, slots=True)
class AsyncIter[T]:
    """
    Example:
        await AsyncIter.of(1, 2, 3).map(str).join(",")  # "1,2,3"
    """

    source: Suspending[T]
    is_empty: bool = False

    @property
    def restartable(self) -> bool:
        return self.source.restartable

    def __aiter__(self) -> SuspendingProducer[T]:
        return self.source.open()

    def _then[R](self, make: stages.StageFactory[T, R]) -> AsyncIter[R]:
        if self.is_empty:
            return AsyncIter.empty()
        return AsyncIter(Suspending(lambda: stages.run_async(make, self), self.restartable))

    def _generated[R](self, create: Callable[[], AsyncIterator[R]]) -> AsyncIter[R]:
        return AsyncIter(Suspending(create, self.restartable))

    # ========================================================================
    # Constructors
    # ========================================================================

    @staticmethod
    def empty() -> AsyncIter[typing.Any]:
        return _EMPTY

    @staticmethod
    def of[E](*elems: E) -> AsyncIter[E]:
        if not elems:
            return AsyncIter.empty()
        return AsyncIter(adapt_async(elems))

    @staticmethod
    def from_iterable[E](source: AnyIterable[E]) -> AsyncIter[E]:
        """
        Adapt an async or sync iterable. An `AsyncIter` is returned as is,
        an `Iter` keeps its restartability.
        """
        if isinstance(source, AsyncIter):
            return typing.cast(AsyncIter[E], source)
        if isinstance(source, Iter):
            if source.is_empty:
                return AsyncIter.empty()
            return AsyncIter(lifted(typing.cast(Iter[E], source).source))
        return AsyncIter(adapt_async(source))

    @staticmethod
    def from_factory[E](factory: Callable[[], AnyIterable[E]]) -> AsyncIter[E]:
        return AsyncIter(adapt_async(factory))

    @staticmethod
    def from_lazy[E](create: Callable[[], E | Awaitable[E]]) -> AsyncIter[E]:
        """Single element, created (and awaited if needed) when it is pulled."""

        async def generate() -> AsyncIterator[E]:
            yield await _resolved(create())

        return AsyncIter(Suspending(generate))

    @staticmethod
    def from_awaitable[E](awaitable: Awaitable[E]) -> AsyncIter[E]:
        """
        Single element: the result of awaitable.

        A bare coroutine can be awaited once, so it gives a single-pass
        pipeline; futures and tasks can be driven again.
        """

        async def generate() -> AsyncIterator[E]:
            yield await awaitable

        return AsyncIter(Suspending(generate, not inspect.iscoroutine(awaitable)))

    @staticmethod
    def from_single_callback(consume: Callable[[Callable[..., None]], object]) -> AsyncIter[tuple[typing.Any, ...]]:
        """
        Single element: the arguments of the first call to the callback
        handed to consume. Later calls are ignored.

        Example:
            AsyncIter.from_single_callback(lambda emit: loop.call_soon(emit, "ready"))
            # ("ready",)
        """

        async def generate() -> AsyncIterator[tuple[typing.Any, ...]]:
            future: asyncio.Future[tuple[typing.Any, ...]] = asyncio.get_running_loop().create_future()

            def emit(*values: typing.Any) -> None:
                if not future.done():
                    future.set_result(values)

            consume(emit)
            yield await future

        return AsyncIter(Suspending(generate))

    @staticmethod
    def nats(start: int = 0) -> AsyncIter[int]:
        return Iter.nats(start).to_async()

    @staticmethod
    def range(start: float, stop: float | None = None, step: float = 1) -> AsyncIter[float]:
        return Iter.range(start, stop, step).to_async()

    @staticmethod
    def unfold[S, E](
        init: S,
        next_fn: Callable[[S], tuple[E, S] | None | Awaitable[tuple[E, S] | None]],
    ) -> AsyncIter[E]:
        """
        Like Iter.unfold; next_fn may be a coroutine function.

        Example:
            async def page(cursor): ...  # (items, next_cursor) or None
            AsyncIter.unfold(0, page).flat_map(identity)
        """

        async def generate() -> AsyncIterator[E]:
            state = init
            while (result := await _resolved(next_fn(state))) is not None:
                elem, state = result
                yield elem

        return AsyncIter(Suspending(generate))

    @staticmethod
    def sequence[E](init: E, next_fn: Callable[[E], E | None | Awaitable[E | None]]) -> AsyncIter[E]:
        async def generate() -> AsyncIterator[E]:
            value: E | None = init
            while value is not None:
                yield value
                value = await _resolved(next_fn(value))

        return AsyncIter(Suspending(generate))

    @staticmethod
    def flatten[E](sources: AnyIterable[AnyIterable[E]]) -> AsyncIter[E]:
        return AsyncIter.from_iterable(sources).flat_map(identity)

    # ========================================================================
    # Elementwise
    # ========================================================================

    def map[R](self, fn: Callable[..., R], *, indexed: bool = False) -> AsyncIter[R]:
        call = with_index(fn, indexed)
        return self._then(lambda: stages.Mapping(call))

    def map_async[R](self, fn: Callable[[T], Awaitable[R]]) -> AsyncIter[R]:
        """Await fn(elem) for one element at a time."""
        if self.is_empty:
            return AsyncIter.empty()

        async def generate() -> AsyncIterator[R]:
            async with aclosing(aiter(self)) as elems:
                async for elem in elems:
                    yield await fn(elem)

        return self._generated(generate)

    def filter(self, pred: Pred[T] | IndexedPred[T], *, indexed: bool = False) -> AsyncIter[T]:
        test = with_index(pred, indexed)
        return self._then(lambda: stages.Filtering(test))

    def filter_not(self, pred: Pred[T] | IndexedPred[T], *, indexed: bool = False) -> AsyncIter[T]:
        test = with_index(pred, indexed)
        return self.filter(lambda e, i: not test(e, i), indexed=True)

    def flat_map[R](self, fn: Callable[..., AnyIterable[R]], *, indexed: bool = False) -> AsyncIter[R]:
        """Every element of fn(elem) (or fn(elem, index)), which may be sync or async iterable."""
        if self.is_empty:
            return AsyncIter.empty()
        call = with_index(fn, indexed)

        async def generate() -> AsyncIterator[R]:
            index = 0
            async with aclosing(aiter(self)) as elems:
                async for elem in elems:
                    inner = call(elem, index)
                    index += 1
                    if isinstance(inner, Iterable):
                        for value in inner:
                            yield value
                        continue
                    async with aclosing(aiter(AsyncIter.from_iterable(inner))) as values:
                        async for value in values:
                            yield value

        return self._generated(generate)

    def collect[R](self, fn: Callable[[T], R | Skip]) -> AsyncIter[R]:
        return self._then(lambda: stages.Collecting(fn))

    def zip_with_index(self) -> AsyncIter[tuple[T, int]]:
        return self._then(lambda: stages.Mapping(lambda e, i: (e, i)))

    def indices_where(self, pred: Pred[T]) -> AsyncIter[int]:
        return self.zip_with_index().collect(lambda p: p[1] if pred(p[0]) else SKIP)

    def indices_of(self, elem: T) -> AsyncIter[int]:
        return self.indices_where(lambda e: e == elem)

    def monitor(self, tag: str = "", effect: MonitorEffect[T] = log_effect) -> AsyncIter[T]:
        return self._then(lambda: stages.Monitoring(tag, effect))

    def delay(self, *, seconds: float) -> AsyncIter[T]:
        """Sleep before yielding each element."""
        if seconds <= 0.0 or self.is_empty:
            return self

        async def generate() -> AsyncIterator[T]:
            async with aclosing(aiter(self)) as elems:
                async for elem in elems:
                    await asyncio.sleep(seconds)
                    yield elem

        return self._generated(generate)

    # ========================================================================
    # Prefixes and suffixes
    # ========================================================================

    def take(self, amount: int) -> AsyncIter[T]:
        if amount <= 0:
            return AsyncIter.empty()
        return self._then(lambda: stages.Taking(amount))

    def drop(self, amount: int) -> AsyncIter[T]:
        if amount <= 0:
            return self
        return self._then(lambda: stages.Dropping(amount))

    def take_last(self, amount: int) -> AsyncIter[T]:
        if amount <= 0:
            return AsyncIter.empty()
        return self._then(lambda: stages.TakingLast(amount))

    def drop_last(self, amount: int) -> AsyncIter[T]:
        if amount <= 0:
            return self
        return self._then(lambda: stages.DroppingLast(amount))

    def slice(self, start: int, amount: int) -> AsyncIter[T]:
        return self.drop(start).take(amount)

    def take_while(self, pred: Pred[T] | IndexedPred[T], *, indexed: bool = False) -> AsyncIter[T]:
        test = with_index(pred, indexed)
        return self._then(lambda: stages.TakingWhile(test))

    def drop_while(self, pred: Pred[T] | IndexedPred[T], *, indexed: bool = False) -> AsyncIter[T]:
        test = with_index(pred, indexed)
        return self._then(lambda: stages.DroppingWhile(test))

    def sample(self, nth: int) -> AsyncIter[T]:
        if nth <= 1:
            return self
        return self._then(lambda: stages.Filtering(lambda _, i: i % nth == 0))

    # ========================================================================
    # Windows and buckets
    # ========================================================================

    def sliding(self, size: int, step: int | None = None) -> AsyncIter[list[T]]:
        step = size if step is None else step
        if size <= 0 or step <= 0:
            return AsyncIter.empty()
        return self._then(lambda: stages.Sliding(size, step))

    def split_where(self, pred: Pred[T] | IndexedPred[T], *, indexed: bool = False) -> AsyncIter[list[T]]:
        test = with_index(pred, indexed)
        return self._then(lambda: stages.Splitting(test))

    def split_on(self, elem: T) -> AsyncIter[list[T]]:
        return self.split_where(lambda e: e == elem)

    # ========================================================================
    # Substitution
    # ========================================================================

    def patch_where(
        self,
        pred: Pred[T] | IndexedPred[T],
        remove: int,
        insert: IndexedFn[T, Iterable[T]] | None = None,
        max_applications: int | None = None,
        *,
        indexed: bool = False,
    ) -> AsyncIter[T]:
        policy = PatchPolicy(remove, max_applications)
        if policy.disabled:
            return self
        test = with_index(pred, indexed)
        return self._then(lambda: stages.Patching(test, policy, insert))

    def patch_elem(
        self,
        elem: T,
        remove: int,
        insert: Iterable[T] | None = None,
        max_applications: int | None = None,
    ) -> AsyncIter[T]:
        replacement = None if insert is None else tuple(insert)
        return self.patch_where(
            lambda e: e == elem,
            remove,
            None if replacement is None else (lambda *_: replacement),
            max_applications,
        )

    def patch_at(self, index: int, remove: int, insert: Callable[[], Iterable[T]] | None = None) -> AsyncIter[T]:
        policy = PatchPolicy(remove)
        if self.is_empty:
            if insert is None:
                return self
            return AsyncIter.from_factory(insert)
        return self._generated(
            lambda: stages.run_async(lambda: stages.PatchingAt(index, policy.remove, insert), self)
        )

    def intersperse(self, sep: Iterable[T]) -> AsyncIter[T]:
        separator = tuple(sep)
        if not separator:
            return self
        return self._then(
            lambda: stages.Patching(lambda _, i: i > 0, PatchPolicy(0), lambda *_: separator)
        )

    def mk_group(self, start: Iterable[T] = (), sep: Iterable[T] = (), end: Iterable[T] = ()) -> AsyncIter[T]:
        return self.intersperse(sep).prepend(*start).append(*end)

    # ========================================================================
    # Uniqueness
    # ========================================================================

    def distinct_by(self, key: Callable[..., Hashable], *, indexed: bool = False) -> AsyncIter[T]:
        call = with_index(key, indexed)
        return self._then(lambda: stages.Distinct(call))

    def distinct(self) -> AsyncIter[T]:
        return self.distinct_by(identity)

    def filter_with_previous(self, pred: Callable[[T, T | Absent], bool]) -> AsyncIter[T]:
        return self._then(lambda: stages.WithPrevious(pred))

    def filter_changed(self) -> AsyncIter[T]:
        return self.filter_with_previous(lambda current, previous: previous is ABSENT or current != previous)

    # ========================================================================
    # Composition of sources
    # ========================================================================

    def concat(self, *others: AnyIterable[T]) -> AsyncIter[T]:
        parts = [p for p in (self, *map(AsyncIter.from_iterable, others)) if not p.is_empty]
        if not parts:
            return AsyncIter.empty()
        if len(parts) == 1:
            return parts[0]

        async def generate() -> AsyncIterator[T]:
            for part in parts:
                async with aclosing(aiter(part)) as elems:
                    async for elem in elems:
                        yield elem

        return AsyncIter(Suspending(generate, all(p.restartable for p in parts)))

    def prepend(self, *elems: T) -> AsyncIter[T]:
        return AsyncIter.of(*elems).concat(self)

    def append(self, *elems: T) -> AsyncIter[T]:
        return self.concat(AsyncIter.of(*elems))

    def zip_with[R](self, fn: Callable[..., R], *others: AnyIterable[typing.Any]) -> AsyncIter[R]:
        """fn over one element of every input at a time, pulled concurrently."""
        parts = (self, *map(AsyncIter.from_iterable, others))
        if any(p.is_empty for p in parts):
            return AsyncIter.empty()

        async def generate() -> AsyncIterator[R]:
            producers = [aiter(p) for p in parts]
            try:
                while True:
                    pulled = await _pull_all(p.pull() for p in producers)
                    if any(isinstance(r, Done) for r in pulled):
                        return
                    yield fn(*(typing.cast(Next[typing.Any], r).value for r in pulled))
            finally:
                await asyncio.gather(*(aclose(p) for p in producers))

        return AsyncIter(Suspending(generate, all(p.restartable for p in parts)))

    def zip(self, *others: AnyIterable[typing.Any]) -> AsyncIter[tuple[typing.Any, ...]]:
        return self.zip_with(lambda *values: values, *others)

    def zip_all_with[R](self, fn: Callable[..., R], *others: AnyIterable[typing.Any]) -> AsyncIter[R]:
        parts = (self, *map(AsyncIter.from_iterable, others))
        if all(p.is_empty for p in parts):
            return AsyncIter.empty()

        async def pull(producer: SuspendingProducer[typing.Any] | None) -> Next[typing.Any] | Done:
            if producer is None:
                return Done()
            return await producer.pull()

        async def generate() -> AsyncIterator[R]:
            producers: list[SuspendingProducer[typing.Any] | None] = [aiter(p) for p in parts]
            opened = list(producers)
            try:
                while True:
                    pulled = await _pull_all(pull(p) for p in producers)
                    values: list[typing.Any] = []
                    for i, result in enumerate(pulled):
                        match result:
                            case Next(value):
                                values.append(value)
                            case Done():
                                producers[i] = None
                                values.append(ABSENT)
                    if all(p is None for p in producers):
                        return
                    yield fn(*values)
            finally:
                await asyncio.gather(*(aclose(p) for p in opened))

        return AsyncIter(Suspending(generate, all(p.restartable for p in parts)))

    def zip_all(self, *others: AnyIterable[typing.Any]) -> AsyncIter[tuple[typing.Any, ...]]:
        return self.zip_all_with(lambda *values: values, *others)

    def interleave(self, *others: AnyIterable[T]) -> AsyncIter[T]:
        return self.zip(*others).flat_map(identity)

    def interleave_all(self, *others: AnyIterable[T]) -> AsyncIter[T]:
        return self.zip_all(*others).flat_map(lambda values: [v for v in values if v is not ABSENT])

    def interleave_round(self, *others: AnyIterable[T]) -> AsyncIter[T]:
        """
        Raises:
            NotRestartableError: any input is single-pass.
        """
        parts = (self, *map(AsyncIter.from_iterable, others))
        if any(not p.restartable for p in parts):
            raise NotRestartableError("interleave_round")
        first, *rest = (p.repeat() for p in parts)
        return first.interleave(*rest)

    def repeat(self, times: int | None = None) -> AsyncIter[T]:
        """
        Raises:
            NotRestartableError: the source is single-pass.
        """
        if times is not None and times <= 0:
            return AsyncIter.empty()
        if times == 1 or self.is_empty:
            return self
        if not self.restartable:
            raise NotRestartableError("repeat")

        async def generate() -> AsyncIterator[T]:
            rounds = itertools.count() if times is None else itertools.repeat(None, times)
            for _ in rounds:
                produced = False
                async with aclosing(aiter(self)) as elems:
                    async for elem in elems:
                        produced = True
                        yield elem
                if not produced:
                    return

        return AsyncIter(Suspending(generate))

    # ========================================================================
    # Terminal drives
    # ========================================================================

    async def fold[R](self, folder: Folder[T, typing.Any, R]) -> R:
        return await drive_async(folder, self)

    def fold_iter[R](self, folder: Folder[T, typing.Any, R]) -> AsyncIter[R]:
        if self.is_empty:
            return AsyncIter.empty()
        return self._generated(lambda: drive_async_iter(folder, self))

    async def for_each(self, effect: Callable[[T], typing.Any] | None = None) -> None:
        """Drive to the end; effect may be a coroutine function."""
        async with aclosing(aiter(self)) as elems:
            async for elem in elems:
                if effect is not None:
                    await _resolved(effect(elem))

    async def to_list(self) -> list[T]:
        return await self.fold(folds.to_list())

    async def to_set(self) -> set[T]:
        return await self.fold(folds.to_set())

    async def first(self, otherwise: OptLazy[T] | object = REQUIRED) -> T:
        return await self.fold(folds.first(otherwise))

    async def last(self, otherwise: OptLazy[T] | object = REQUIRED) -> T:
        return await self.fold(folds.last(otherwise))

    async def reduce(self, op: Callable[[T, T], T], otherwise: OptLazy[T] | object = REQUIRED) -> T:
        return await self.fold(folds.reduce(op, otherwise))

    async def join(self, sep: str = "", start: str = "", end: str = "") -> str:
        return await self.fold(folds.join(sep, start, end))

    async def count(self) -> int:
        return await self.fold(folds.count())

    async def some(self, pred: Pred[T] = always_true) -> bool:
        return await self.fold(folds.some(pred))

    async def every(self, pred: Pred[T]) -> bool:
        return await self.fold(folds.every(pred))


async def _nothing() -> AsyncIterator[typing.Any]:
    return
    yield


_EMPTY: typing.Final[AsyncIter[typing.Any]] = AsyncIter(Suspending(_nothing), is_empty=True)


__all__ = ("AnyIterable", "AsyncIter")
