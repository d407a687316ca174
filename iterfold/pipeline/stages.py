"""
Stage machines
==============

One synchronous state machine per stage. A machine is created fresh for
every drive and is fed one element at a time:

- `push(elem)` returns the elements to emit for it (possibly none)
- `finish()` returns trailing elements once the input is exhausted
- `done` turns true when the stage wants no further input

Both drivers (`run` for immediate sources, `run_async` for suspending
ones) feed the same machines, so stages never suspend: suspension only
happens at the producer pull that precedes `push`.
"""

from __future__ import annotations

import itertools
import typing
from collections import deque
from collections.abc import AsyncIterable, AsyncIterator, Callable, Hashable, Iterable, Iterator

from .._errors import NotIterableError
from .._helpers import aclose
from .._policy import PatchPolicy
from .._types import ABSENT, SKIP, IndexedFn, IndexedPred, MonitorEffect

_NONE: typing.Final[tuple[()]] = ()


class Stage[T, R]:
    """Base machine: passes nothing, wants everything."""

    done: bool = False

    def push(self, elem: T) -> Iterable[R]:
        raise NotImplementedError

    def finish(self) -> Iterable[R]:
        return _NONE


type StageFactory[T, R] = Callable[[], Stage[T, R]]


def _checked[T](values: Iterable[T]) -> Iterable[T]:
    if not isinstance(values, Iterable):
        raise NotIterableError(values)
    return values


# ============================================================================
# Elementwise
# ============================================================================


class Mapping[T, R](Stage[T, R]):
    __slots__ = ("fn", "index")

    def __init__(self, fn: IndexedFn[T, R]) -> None:
        self.fn = fn
        self.index = 0

    def push(self, elem: T) -> Iterable[R]:
        index = self.index
        self.index += 1
        return (self.fn(elem, index),)


class Filtering[T](Stage[T, T]):
    __slots__ = ("pred", "index")

    def __init__(self, pred: IndexedPred[T]) -> None:
        self.pred = pred
        self.index = 0

    def push(self, elem: T) -> Iterable[T]:
        index = self.index
        self.index += 1
        return (elem,) if self.pred(elem, index) else _NONE


class Collecting[T, R](Stage[T, R]):
    """Map, dropping results that are SKIP."""

    __slots__ = ("fn",)

    def __init__(self, fn: Callable[[T], R]) -> None:
        self.fn = fn

    def push(self, elem: T) -> Iterable[R]:
        value = self.fn(elem)
        return _NONE if value is SKIP else (value,)


class FlatMapping[T, R](Stage[T, R]):
    """Emit every element of fn(elem) before the next pull."""

    __slots__ = ("fn", "index")

    def __init__(self, fn: IndexedFn[T, Iterable[R]]) -> None:
        self.fn = fn
        self.index = 0

    def push(self, elem: T) -> Iterable[R]:
        index = self.index
        self.index += 1
        return _checked(self.fn(elem, index))


class Monitoring[T](Stage[T, T]):
    __slots__ = ("tag", "effect", "index")

    def __init__(self, tag: str, effect: MonitorEffect[T]) -> None:
        self.tag = tag
        self.effect = effect
        self.index = 0

    def push(self, elem: T) -> Iterable[T]:
        self.effect(elem, self.index, self.tag)
        self.index += 1
        return (elem,)


# ============================================================================
# Prefixes and suffixes
# ============================================================================


class Taking[T](Stage[T, T]):
    __slots__ = ("remain", "done")

    def __init__(self, amount: int) -> None:
        self.remain = amount
        self.done = amount <= 0

    def push(self, elem: T) -> Iterable[T]:
        self.remain -= 1
        self.done = self.remain <= 0
        return (elem,)


class Dropping[T](Stage[T, T]):
    __slots__ = ("remain",)

    def __init__(self, amount: int) -> None:
        self.remain = amount

    def push(self, elem: T) -> Iterable[T]:
        if self.remain > 0:
            self.remain -= 1
            return _NONE
        return (elem,)


class TakingLast[T](Stage[T, T]):
    __slots__ = ("buffer",)

    def __init__(self, amount: int) -> None:
        self.buffer: deque[T] = deque(maxlen=amount)

    def push(self, elem: T) -> Iterable[T]:
        self.buffer.append(elem)
        return _NONE

    def finish(self) -> Iterable[T]:
        return tuple(self.buffer)


class DroppingLast[T](Stage[T, T]):
    __slots__ = ("amount", "buffer")

    def __init__(self, amount: int) -> None:
        self.amount = amount
        self.buffer: deque[T] = deque()

    def push(self, elem: T) -> Iterable[T]:
        self.buffer.append(elem)
        if len(self.buffer) > self.amount:
            return (self.buffer.popleft(),)
        return _NONE


class TakingWhile[T](Stage[T, T]):
    """Stops requesting input at the first rejected element."""

    __slots__ = ("pred", "done", "index")

    def __init__(self, pred: IndexedPred[T]) -> None:
        self.pred = pred
        self.done = False
        self.index = 0

    def push(self, elem: T) -> Iterable[T]:
        index = self.index
        self.index += 1
        if self.pred(elem, index):
            return (elem,)
        self.done = True
        return _NONE


class DroppingWhile[T](Stage[T, T]):
    __slots__ = ("pred", "dropping", "index")

    def __init__(self, pred: IndexedPred[T]) -> None:
        self.pred = pred
        self.dropping = True
        self.index = 0

    def push(self, elem: T) -> Iterable[T]:
        index = self.index
        self.index += 1
        if self.dropping and self.pred(elem, index):
            return _NONE
        self.dropping = False
        return (elem,)


# ============================================================================
# Windows and buckets
# ============================================================================


class Sliding[T](Stage[T, list[T]]):
    """
    Windows of `size` elements, each shifted `step` from the previous.

    The final partial window is emitted only when it holds an element the
    previous window did not, i.e. when len(bucket) > size - step.
    """

    __slots__ = ("size", "step", "bucket", "to_skip")

    def __init__(self, size: int, step: int) -> None:
        self.size = size
        self.step = step
        self.bucket: list[T] = []
        self.to_skip = 0

    def push(self, elem: T) -> Iterable[list[T]]:
        if self.to_skip <= 0:
            self.bucket.append(elem)
        self.to_skip -= 1

        if len(self.bucket) < self.size:
            return _NONE

        window = self.bucket
        self.bucket = window[self.step :]
        self.to_skip = self.step - self.size
        return (window,)

    def finish(self) -> Iterable[list[T]]:
        if self.bucket and len(self.bucket) > self.size - self.step:
            return (self.bucket,)
        return _NONE


class Splitting[T](Stage[T, list[T]]):
    """
    Buckets separated by elements matching pred (separators are dropped).

    A trailing empty bucket is emitted when the input ended right after a
    separator; an empty input emits nothing.
    """

    __slots__ = ("pred", "bucket", "after_split", "index")

    def __init__(self, pred: IndexedPred[T]) -> None:
        self.pred = pred
        self.bucket: list[T] = []
        self.after_split = False
        self.index = 0

    def push(self, elem: T) -> Iterable[list[T]]:
        index = self.index
        self.index += 1
        if self.pred(elem, index):
            bucket, self.bucket = self.bucket, []
            self.after_split = True
            return (bucket,)
        self.bucket.append(elem)
        self.after_split = False
        return _NONE

    def finish(self) -> Iterable[list[T]]:
        if self.after_split or self.bucket:
            return (self.bucket,)
        return _NONE


# ============================================================================
# Substitution
# ============================================================================


class Patching[T](Stage[T, T]):
    """
    At each element where pred holds (while budget remains) emit
    insert(elem, index), then skip `remove` elements counting the trigger.
    """

    __slots__ = ("pred", "policy", "insert", "index", "skip", "applied")

    def __init__(
        self,
        pred: IndexedPred[T],
        policy: PatchPolicy,
        insert: IndexedFn[T, Iterable[T]] | None,
    ) -> None:
        self.pred = pred
        self.policy = policy
        self.insert = insert
        self.index = 0
        self.skip = 0
        self.applied = 0

    def _budget_left(self) -> bool:
        limit = self.policy.max_applications
        return limit is None or self.applied < limit

    def push(self, elem: T) -> Iterable[T]:
        index = self.index
        self.index += 1

        if self.skip > 0:
            self.skip -= 1
            return _NONE

        inserted: Iterable[T] = _NONE
        if self._budget_left() and self.pred(elem, index):
            self.applied += 1
            if self.insert is not None:
                inserted = _checked(self.insert(elem, index))
            self.skip = self.policy.remove

        if self.skip <= 0:
            return itertools.chain(inserted, (elem,))
        self.skip -= 1
        return inserted


class PatchingAt[T](Stage[T, T]):
    """
    Insert at a fixed position, removing `remove` elements from there.

    A negative position inserts before the first element, a position past
    the end appends.
    """

    __slots__ = ("position", "remove", "insert", "index", "skip", "started")

    def __init__(self, position: int, remove: int, insert: Callable[[], Iterable[T]] | None) -> None:
        self.position = position
        self.remove = remove
        self.insert = insert
        self.index = 0
        self.skip = 0
        self.started = False

    def _inserted(self) -> Iterable[T]:
        if self.insert is None:
            return _NONE
        return _checked(self.insert())

    def push(self, elem: T) -> Iterable[T]:
        out: Iterable[T] = _NONE
        if not self.started:
            self.started = True
            if self.position < 0:
                out = self._inserted()
                self.skip = self.remove

        if self.index == self.position:
            out = itertools.chain(out, self._inserted())
            self.skip = self.remove
        self.index += 1

        if self.skip > 0:
            self.skip -= 1
            return out
        return itertools.chain(out, (elem,))

    def finish(self) -> Iterable[T]:
        if self.position >= self.index or (self.position < 0 and not self.started):
            return self._inserted()
        return _NONE


# ============================================================================
# Uniqueness
# ============================================================================


class Distinct[T](Stage[T, T]):
    """
    Drop elements whose key was seen before.

    NOTE: keeps every key for the whole drive.
    """

    __slots__ = ("key", "seen", "index")

    def __init__(self, key: IndexedFn[T, Hashable]) -> None:
        self.key = key
        self.seen: set[Hashable] = set()
        self.index = 0

    def push(self, elem: T) -> Iterable[T]:
        index = self.index
        self.index += 1
        k = self.key(elem, index)
        if k in self.seen:
            return _NONE
        self.seen.add(k)
        return (elem,)


class WithPrevious[T](Stage[T, T]):
    """Keep elements for which pred(current, previous) holds; previous starts as ABSENT."""

    __slots__ = ("pred", "previous")

    def __init__(self, pred: Callable[[T, typing.Any], bool]) -> None:
        self.pred = pred
        self.previous: typing.Any = ABSENT

    def push(self, elem: T) -> Iterable[T]:
        keep = self.pred(elem, self.previous)
        self.previous = elem
        return (elem,) if keep else _NONE


# ============================================================================
# Drivers
# ============================================================================


def run[T, R](make: StageFactory[T, R], source: Iterable[T]) -> Iterator[R]:
    """Drive one stage over an immediate source."""
    stage = make()
    if stage.done:
        return
    for elem in source:
        yield from stage.push(elem)
        if stage.done:
            return
    yield from stage.finish()


async def run_async[T, R](make: StageFactory[T, R], source: AsyncIterable[T]) -> AsyncIterator[R]:
    """Drive one stage over a suspending source; only the pull awaits."""
    stage = make()
    if stage.done:
        return
    iterator = aiter(source)
    try:
        async for elem in iterator:
            for out in stage.push(elem):
                yield out
            if stage.done:
                return
        for out in stage.finish():
            yield out
    finally:
        await aclose(iterator)


__all__ = (
    "Collecting",
    "Distinct",
    "Dropping",
    "DroppingLast",
    "DroppingWhile",
    "Filtering",
    "FlatMapping",
    "Mapping",
    "Monitoring",
    "Patching",
    "PatchingAt",
    "Sliding",
    "Splitting",
    "Stage",
    "StageFactory",
    "Taking",
    "TakingLast",
    "TakingWhile",
    "WithPrevious",
    "run",
    "run_async",
)
