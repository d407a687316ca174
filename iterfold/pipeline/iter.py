"""
Iter
====

Lazy, restartable pipeline over an immediate producer.

An `Iter` is an immutable description: every combinator returns a new
`Iter` and nothing is pulled until a terminal drive (`fold`, `to_list`,
iteration, ...) opens the producer. Driving an `Iter` twice re-runs the
whole description from its source, unless the source was single-pass.

Example:
    Iter.range(0, 10).filter(is_even).map(str).join(",")  # "0,2,4,6,8"
"""

from __future__ import annotations

import builtins
import itertools
import random
import typing
from collections.abc import Callable, Hashable, Iterable, Iterator, Sequence
from dataclasses import dataclass

from .._errors import NotRestartableError
from .._helpers import always_true, identity, with_index
from .._policy import PatchPolicy
from .._types import ABSENT, REQUIRED, SKIP, Absent, IndexedFn, IndexedPred, MonitorEffect, OptLazy, Pred, Skip
from ..fold import Folder, drive, drive_iter, folds
from ..monitor import log_effect
from ..producer import Done, Immediate, ImmediateProducer, Next, adapt
from . import stages

if typing.TYPE_CHECKING:
    from .async_iter import AsyncIter


@dataclass(frozen=True, slots=True)
class Iter[T]:
    """
    Example:
        Iter.of(1, 2, 3, 4).sliding(2).to_list()  # [[1, 2], [3, 4]]
    """

    source: Immediate[T]
    is_empty: bool = False

    @property
    def restartable(self) -> bool:
        return self.source.restartable

    def __iter__(self) -> ImmediateProducer[T]:
        return self.source.open()

    def _then[R](self, make: stages.StageFactory[T, R]) -> Iter[R]:
        if self.is_empty:
            return Iter.empty()
        return Iter(Immediate(lambda: stages.run(make, self), self.restartable))

    # ========================================================================
    # Constructors
    # ========================================================================

    @staticmethod
    def empty() -> Iter[typing.Any]:
        return _EMPTY

    @staticmethod
    def of[E](*elems: E) -> Iter[E]:
        if not elems:
            return Iter.empty()
        return Iter(adapt(elems))

    @staticmethod
    def from_iterable[E](source: Iterable[E]) -> Iter[E]:
        """
        Adapt any iterable. An `Iter` is returned as is.

        Iterators and generators give a single-pass `Iter`.
        """
        if isinstance(source, Iter):
            return typing.cast(Iter[E], source)
        return Iter(adapt(source))

    @staticmethod
    def from_factory[E](factory: Callable[[], Iterable[E]]) -> Iter[E]:
        """Restartable `Iter` calling factory on every drive."""
        return Iter(adapt(factory))

    @staticmethod
    def from_lazy[E](create: Callable[[], E]) -> Iter[E]:
        """Single element, created when it is pulled."""
        return Iter(Immediate(lambda: iter((create(),))))

    @staticmethod
    def random(low: float = 0.0, high: float = 1.0) -> Iter[float]:
        """
        One random float between low and high, drawn anew on every drive.

        Example:
            Iter.random(10, 20).repeat().take(3)  # three independent draws
        """
        return Iter.from_lazy(lambda: random.uniform(low, high))

    @staticmethod
    def random_int(low: int, high: int) -> Iter[int]:
        """One random integer in [low, high], drawn anew on every drive."""
        return Iter.from_lazy(lambda: random.randint(low, high))

    @staticmethod
    def indexed_reversed[E](seq: Sequence[E]) -> Iter[E]:
        """
        Elements of seq from last to first, read by index.

        Example:
            Iter.indexed_reversed("abc").join()  # "cba"
        """
        if not seq:
            return Iter.empty()
        return Iter.from_factory(lambda: (seq[i] for i in builtins.range(len(seq) - 1, -1, -1)))

    @staticmethod
    def indexed_bounce[E](seq: Sequence[E]) -> Iter[E]:
        """
        Elements of seq forward, then back down to the second one.

        Example:
            Iter.indexed_bounce("abc").join()  # "abcb"
        """
        if not seq:
            return Iter.empty()
        return Iter.from_factory(
            lambda: itertools.chain(seq, (seq[i] for i in builtins.range(len(seq) - 2, 0, -1)))
        )

    @staticmethod
    def nats(start: int = 0) -> Iter[int]:
        return Iter(Immediate(lambda: itertools.count(start)))

    @staticmethod
    def range(start: float, stop: float | None = None, step: float = 1) -> Iter[float]:
        """
        Numbers from start, moving by step, up to but excluding stop.

        Without stop the range is infinite. Floats are allowed.

        Example:
            Iter.range(50, 0, -10).to_list()  # [50, 40, 30, 20, 10]
        """
        if step == 0:
            raise ValueError("range step must not be zero")
        if stop is None:
            return Iter(Immediate(lambda: itertools.count(start, step)))
        if (step > 0 and start >= stop) or (step < 0 and start <= stop):
            return Iter.empty()

        def before_stop(value: float) -> bool:
            return value < stop if step > 0 else value > stop

        return Iter(Immediate(lambda: itertools.takewhile(before_stop, itertools.count(start, step))))

    @staticmethod
    def unfold[S, E](init: S, next_fn: Callable[[S], tuple[E, S] | None]) -> Iter[E]:
        """
        Elements produced from a state: next_fn returns (elem, new_state),
        or None to end the sequence.

        Example:
            Iter.unfold(1, lambda s: ("a" * s, s * 2)).take(3).to_list()
            # ["a", "aa", "aaaa"]
        """

        def generate() -> Iterator[E]:
            state = init
            while (result := next_fn(state)) is not None:
                elem, state = result
                yield elem

        return Iter(Immediate(generate))

    @staticmethod
    def sequence[E](init: E, next_fn: Callable[[E], E | None]) -> Iter[E]:
        """init, next_fn(init), ... until next_fn returns None."""

        def generate() -> Iterator[E]:
            value: E | None = init
            while value is not None:
                yield value
                value = next_fn(value)

        return Iter(Immediate(generate))

    @staticmethod
    def flatten[E](sources: Iterable[Iterable[E]]) -> Iter[E]:
        return Iter.from_iterable(sources).flat_map(identity)

    # ========================================================================
    # Elementwise
    # ========================================================================

    def map[R](self, fn: Callable[..., R], *, indexed: bool = False) -> Iter[R]:
        """
        fn(elem) for every element, or fn(elem, index) when indexed.

        Example:
            Iter.of("a", "b").map(lambda e, i: f"{i}:{e}", indexed=True)  # "0:a", "1:b"
        """
        call = with_index(fn, indexed)
        return self._then(lambda: stages.Mapping(call))

    def filter(self, pred: Pred[T] | IndexedPred[T], *, indexed: bool = False) -> Iter[T]:
        test = with_index(pred, indexed)
        return self._then(lambda: stages.Filtering(test))

    def filter_not(self, pred: Pred[T] | IndexedPred[T], *, indexed: bool = False) -> Iter[T]:
        test = with_index(pred, indexed)
        return self.filter(lambda e, i: not test(e, i), indexed=True)

    def flat_map[R](self, fn: Callable[..., Iterable[R]], *, indexed: bool = False) -> Iter[R]:
        """Every element of fn(elem) (or fn(elem, index)), in order."""
        call = with_index(fn, indexed)
        return self._then(lambda: stages.FlatMapping(call))

    def collect[R](self, fn: Callable[[T], R | Skip]) -> Iter[R]:
        """
        Map and filter in one go: results that are SKIP are dropped.

        Example:
            Iter.of(1, 2, 3).collect(lambda x: x * 10 if x != 2 else SKIP)  # 10, 30
        """
        return self._then(lambda: stages.Collecting(fn))

    def zip_with_index(self) -> Iter[tuple[T, int]]:
        return self._then(lambda: stages.Mapping(lambda e, i: (e, i)))

    def indices_where(self, pred: Pred[T]) -> Iter[int]:
        return self.zip_with_index().collect(lambda p: p[1] if pred(p[0]) else SKIP)

    def indices_of(self, elem: T) -> Iter[int]:
        return self.indices_where(lambda e: e == elem)

    def monitor(self, tag: str = "", effect: MonitorEffect[T] = log_effect) -> Iter[T]:
        """Call effect(elem, index, tag) for every element passing by."""
        return self._then(lambda: stages.Monitoring(tag, effect))

    # ========================================================================
    # Prefixes and suffixes
    # ========================================================================

    def take(self, amount: int) -> Iter[T]:
        """At most `amount` elements; no element past them is pulled."""
        if amount <= 0:
            return Iter.empty()
        return self._then(lambda: stages.Taking(amount))

    def drop(self, amount: int) -> Iter[T]:
        if amount <= 0:
            return self
        return self._then(lambda: stages.Dropping(amount))

    def take_last(self, amount: int) -> Iter[T]:
        if amount <= 0:
            return Iter.empty()
        return self._then(lambda: stages.TakingLast(amount))

    def drop_last(self, amount: int) -> Iter[T]:
        if amount <= 0:
            return self
        return self._then(lambda: stages.DroppingLast(amount))

    def slice(self, start: int, amount: int) -> Iter[T]:
        return self.drop(start).take(amount)

    def take_while(self, pred: Pred[T] | IndexedPred[T], *, indexed: bool = False) -> Iter[T]:
        test = with_index(pred, indexed)
        return self._then(lambda: stages.TakingWhile(test))

    def drop_while(self, pred: Pred[T] | IndexedPred[T], *, indexed: bool = False) -> Iter[T]:
        test = with_index(pred, indexed)
        return self._then(lambda: stages.DroppingWhile(test))

    def sample(self, nth: int) -> Iter[T]:
        """Every nth element, starting with the first."""
        if nth <= 1:
            return self
        return self._then(lambda: stages.Filtering(lambda _, i: i % nth == 0))

    # ========================================================================
    # Windows and buckets
    # ========================================================================

    def sliding(self, size: int, step: int | None = None) -> Iter[list[T]]:
        """
        Windows of `size` elements, every `step` (default: size) elements.

        Example:
            Iter.range(0, 8).sliding(3, 1)  # [0,1,2], [1,2,3], ..., [5,6,7]
        """
        step = size if step is None else step
        if size <= 0 or step <= 0:
            return Iter.empty()
        return self._then(lambda: stages.Sliding(size, step))

    def split_where(self, pred: Pred[T] | IndexedPred[T], *, indexed: bool = False) -> Iter[list[T]]:
        """Lists of elements between the elements matching pred."""
        test = with_index(pred, indexed)
        return self._then(lambda: stages.Splitting(test))

    def split_on(self, elem: T) -> Iter[list[T]]:
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
    ) -> Iter[T]:
        """
        At each element matching pred, emit insert(elem, index) and skip
        `remove` elements starting with the match itself. With `indexed`,
        pred is called as pred(elem, index).

        Example:
            Iter.of(0, 1, 5, 2).patch_where(is_even, 1, lambda *_: "XY")
            # "X", "Y", 1, 5, "X", "Y"
        """
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
    ) -> Iter[T]:
        replacement = None if insert is None else tuple(insert)
        return self.patch_where(
            lambda e: e == elem,
            remove,
            None if replacement is None else (lambda *_: replacement),
            max_applications,
        )

    def patch_at(self, index: int, remove: int, insert: Callable[[], Iterable[T]] | None = None) -> Iter[T]:
        """
        Replace `remove` elements at index with insert().

        A negative index inserts before the first element, an index past
        the end appends.
        """
        policy = PatchPolicy(remove)
        if self.is_empty:
            if insert is None:
                return self
            return Iter.from_factory(insert)
        return Iter(
            Immediate(
                lambda: stages.run(lambda: stages.PatchingAt(index, policy.remove, insert), self),
                self.restartable,
            )
        )

    def intersperse(self, sep: Iterable[T]) -> Iter[T]:
        """Emit the elements of sep between every two elements."""
        separator = tuple(sep)
        if not separator:
            return self
        return self._then(
            lambda: stages.Patching(lambda _, i: i > 0, PatchPolicy(0), lambda *_: separator)
        )

    def mk_group(self, start: Iterable[T] = (), sep: Iterable[T] = (), end: Iterable[T] = ()) -> Iter[T]:
        """
        Example:
            Iter.of(1, 2).mk_group("<", ",", ">").join()  # "<1,2>"
        """
        return self.intersperse(sep).prepend(*start).append(*end)

    # ========================================================================
    # Uniqueness
    # ========================================================================

    def distinct_by(self, key: Callable[..., Hashable], *, indexed: bool = False) -> Iter[T]:
        call = with_index(key, indexed)
        return self._then(lambda: stages.Distinct(call))

    def distinct(self) -> Iter[T]:
        return self.distinct_by(identity)

    def filter_with_previous(self, pred: Callable[[T, T | Absent], bool]) -> Iter[T]:
        """Keep elements for which pred(current, previous) holds; previous is ABSENT at first."""
        return self._then(lambda: stages.WithPrevious(pred))

    def filter_changed(self) -> Iter[T]:
        return self.filter_with_previous(lambda current, previous: previous is ABSENT or current != previous)

    # ========================================================================
    # Composition of sources
    # ========================================================================

    def concat(self, *others: Iterable[T]) -> Iter[T]:
        parts = [p for p in (self, *map(Iter.from_iterable, others)) if not p.is_empty]
        if not parts:
            return Iter.empty()
        if len(parts) == 1:
            return parts[0]
        return Iter(
            Immediate(
                lambda: itertools.chain.from_iterable(parts),
                all(p.restartable for p in parts),
            )
        )

    def prepend(self, *elems: T) -> Iter[T]:
        return Iter.of(*elems).concat(self)

    def append(self, *elems: T) -> Iter[T]:
        return self.concat(Iter.of(*elems))

    def zip_with[R](self, fn: Callable[..., R], *others: Iterable[typing.Any]) -> Iter[R]:
        """fn over one element of every input at a time; stops with the shortest."""
        parts = (self, *map(Iter.from_iterable, others))
        if any(p.is_empty for p in parts):
            return Iter.empty()

        def generate() -> Iterator[R]:
            producers = [iter(p) for p in parts]
            while True:
                values = []
                for producer in producers:
                    match producer.pull():
                        case Next(value):
                            values.append(value)
                        case Done():
                            return
                yield fn(*values)

        return Iter(Immediate(generate, all(p.restartable for p in parts)))

    def zip(self, *others: Iterable[typing.Any]) -> Iter[tuple[typing.Any, ...]]:
        """
        Example:
            Iter.of(1, 2, 3).zip("ab").to_list()  # [(1, "a"), (2, "b")]
        """
        return self.zip_with(lambda *values: values, *others)

    def zip_all_with[R](self, fn: Callable[..., R], *others: Iterable[typing.Any]) -> Iter[R]:
        """
        Like zip_with, but runs until every input is exhausted; the
        positions of exhausted inputs get ABSENT.
        """
        parts = (self, *map(Iter.from_iterable, others))
        if all(p.is_empty for p in parts):
            return Iter.empty()

        def generate() -> Iterator[R]:
            producers: list[ImmediateProducer[typing.Any] | None] = [iter(p) for p in parts]
            while True:
                values: list[typing.Any] = []
                for i, producer in enumerate(producers):
                    pulled = Done() if producer is None else producer.pull()
                    match pulled:
                        case Next(value):
                            values.append(value)
                        case Done():
                            producers[i] = None
                            values.append(ABSENT)
                if all(p is None for p in producers):
                    return
                yield fn(*values)

        return Iter(Immediate(generate, all(p.restartable for p in parts)))

    def zip_all(self, *others: Iterable[typing.Any]) -> Iter[tuple[typing.Any, ...]]:
        """
        Example:
            Iter.of(1, 2, 3).zip_all("ab").to_list()
            # [(1, "a"), (2, "b"), (3, ABSENT)]
        """
        return self.zip_all_with(lambda *values: values, *others)

    def interleave(self, *others: Iterable[T]) -> Iter[T]:
        """One element of every input in turn; stops with the shortest."""
        return self.zip(*others).flat_map(identity)

    def interleave_all(self, *others: Iterable[T]) -> Iter[T]:
        """One element of every input in turn; exhausted inputs are skipped."""
        return self.zip_all(*others).flat_map(lambda values: [v for v in values if v is not ABSENT])

    def interleave_round(self, *others: Iterable[T]) -> Iter[T]:
        """
        Interleave forever, restarting exhausted inputs.

        Raises:
            NotRestartableError: any input is single-pass.

        Example:
            Iter.from_iterable("abc").interleave_round("QW").take(10).join()
            # "aQbWcQaWbQ"
        """
        parts = (self, *map(Iter.from_iterable, others))
        if any(not p.restartable for p in parts):
            raise NotRestartableError("interleave_round")
        first, *rest = (p.repeat() for p in parts)
        return first.interleave(*rest)

    def repeat(self, times: int | None = None) -> Iter[T]:
        """
        The whole sequence `times` times, or forever when times is None.

        Raises:
            NotRestartableError: the source is single-pass.
        """
        if times is not None and times <= 0:
            return Iter.empty()
        if times == 1 or self.is_empty:
            return self
        if not self.restartable:
            raise NotRestartableError("repeat")

        def generate() -> Iterator[T]:
            rounds = itertools.count() if times is None else builtins.range(times)
            for _ in rounds:
                produced = False
                for elem in self:
                    produced = True
                    yield elem
                if not produced:
                    return

        return Iter(Immediate(generate))

    # ========================================================================
    # Terminal drives
    # ========================================================================

    def fold[R](self, folder: Folder[T, typing.Any, R]) -> R:
        """
        Example:
            Iter.of(1, 2, 3, 4).fold(combine(folds.sum_(), folds.count()))  # (10, 4)
        """
        return drive(folder, self)

    def fold_iter[R](self, folder: Folder[T, typing.Any, R]) -> Iter[R]:
        """The running result after every element, as a pipeline."""
        if self.is_empty:
            return Iter.empty()
        return Iter(Immediate(lambda: drive_iter(folder, self), self.restartable))

    def for_each(self, effect: Callable[[T], typing.Any] | None = None) -> None:
        """Drive to the end, calling effect on every element."""
        for elem in self:
            if effect is not None:
                effect(elem)

    def to_list(self) -> list[T]:
        return list(self)

    def to_set(self) -> set[T]:
        return set(self)

    def first(self, otherwise: OptLazy[T] | object = REQUIRED) -> T:
        return self.fold(folds.first(otherwise))

    def last(self, otherwise: OptLazy[T] | object = REQUIRED) -> T:
        return self.fold(folds.last(otherwise))

    def reduce(self, op: Callable[[T, T], T], otherwise: OptLazy[T] | object = REQUIRED) -> T:
        """Combine elements pairwise from the left, without a seed."""
        return self.fold(folds.reduce(op, otherwise))

    def join(self, sep: str = "", start: str = "", end: str = "") -> str:
        return self.fold(folds.join(sep, start, end))

    def count(self) -> int:
        return self.fold(folds.count())

    def some(self, pred: Pred[T] = always_true) -> bool:
        return self.fold(folds.some(pred))

    def every(self, pred: Pred[T]) -> bool:
        return self.fold(folds.every(pred))

    def to_async(self) -> AsyncIter[T]:
        from .async_iter import AsyncIter

        return AsyncIter.from_iterable(self)


_EMPTY: typing.Final[Iter[typing.Any]] = Iter(Immediate(lambda: iter(())), is_empty=True)


__all__ = ("Iter",)
