"""
Folder
======

Incremental reducer `{init, step, extract, escape}`.

- `init()` creates a fresh accumulator for one drive
- `step(state, elem, index)` is the only state transition
- `extract(state)` maps an accumulator to the visible result, at any time
- `escape(state)` says the result is final; once true, no further input
  may change what `extract` returns

Every combinator returns a new Folder; receivers are never mutated.
Wrapper accumulators built here are immutable, so results can be
extracted repeatedly mid-drive.
"""

from __future__ import annotations

import copy
import typing
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .._helpers import identity, to_lazy, with_index
from .._policy import PatchPolicy
from .._types import Escape, IndexedFn, IndexedPred, MonitorEffect, OptLazy, Pred, StepFn
from ..monitor import log_effect

_NOTHING: typing.Final = object()


# ============================================================================
# Wrapper accumulators
# ============================================================================


@dataclass(frozen=True, slots=True)
class Filtered[S]:
    """Inner state plus the virtual index of the next accepted element."""

    inner: S
    virtual: int = 0


@dataclass(frozen=True, slots=True)
class Counted[S]:
    """Inner state plus the amount of raw elements seen."""

    inner: S
    count: int = 0


@dataclass(frozen=True, slots=True)
class Bounded[S]:
    inner: S
    done: bool = False


@dataclass(frozen=True, slots=True)
class Dropping[S]:
    inner: S
    dropping: bool = True
    virtual: int = 0


@dataclass(frozen=True, slots=True)
class Seen[S, K]:
    inner: S
    keys: frozenset[K] = frozenset()
    virtual: int = 0


@dataclass(frozen=True, slots=True)
class Previous[S]:
    inner: S
    previous: typing.Any = _NOTHING
    virtual: int = 0


@dataclass(frozen=True, slots=True)
class Buffered[S, A]:
    inner: S
    buffer: tuple[A, ...] = ()
    virtual: int = 0


@dataclass(frozen=True, slots=True)
class Patching[S]:
    inner: S
    to_remove: int = 0
    applied: int = 0
    virtual: int = 0


# ============================================================================
# Folder
# ============================================================================


@dataclass(frozen=True, slots=True)
class Folder[A, S, R]:
    """
    Composable incremental reducer from elements A to result R via state S.

    Example:
        total = Folder.create(0, lambda s, x, _: s + x)
        Iter.of(1, 2, 3).fold(total)  # 6
    """

    init: Callable[[], S]
    step: StepFn[A, S]
    extract: Callable[[S], R]
    escape: Escape[S] | None = None

    # Construction

    @staticmethod
    def create[E, T](
        init: OptLazy[T],
        step: StepFn[E, T],
        escape: Escape[T] | None = None,
    ) -> Folder[E, T, T]:
        """Folder whose state is its result. `init` may be a zero-arg factory."""
        return Folder(to_lazy(init), step, identity, escape)

    @staticmethod
    def create_state[E, St, Res](
        init: OptLazy[St],
        step: StepFn[E, St],
        extract: Callable[[St], Res],
        escape: Escape[St] | None = None,
    ) -> Folder[E, St, Res]:
        """Folder with distinct accumulator and result types."""
        return Folder(to_lazy(init), step, extract, escape)

    def escaped(self, state: S) -> bool:
        return self.escape is not None and self.escape(state)

    def _inner_escape(self) -> Escape[typing.Any] | None:
        # Escape of a wrapper whose accumulator keeps ours in `.inner`
        escape = self.escape
        if escape is None:
            return None
        return lambda st: escape(st.inner)

    def _inner_extract(self) -> Callable[[typing.Any], R]:
        extract = self.extract
        return lambda st: extract(st.inner)

    # Result side

    def map_result[R2](self, f: Callable[[R], R2], /) -> Folder[A, S, R2]:
        """Post-compose extract with f."""
        extract = self.extract
        return Folder(self.init, self.step, lambda s: f(extract(s)), self.escape)

    def monitor_input(
        self,
        tag: str = "",
        effect: MonitorEffect[tuple[A, S]] = log_effect,
    ) -> Folder[A, S, R]:
        """Call effect((elem, previous_state), index, tag) before every step."""
        step = self.step

        def monitored(state: S, elem: A, index: int) -> S:
            effect((elem, state), index, tag)
            return step(state, elem, index)

        return Folder(self.init, monitored, self.extract, self.escape)

    # Input side

    def map_input[B](self, f: Callable[..., A], /, *, indexed: bool = False) -> Folder[B, S, R]:
        """Pre-compose the element argument of step with f (or f(elem, index))."""
        step = self.step
        call = with_index(f, indexed)
        return Folder(self.init, lambda s, e, i: step(s, call(e, i), i), self.extract, self.escape)

    def filter_input(
        self, pred: Pred[A] | IndexedPred[A], /, *, indexed: bool = False
    ) -> Folder[A, Filtered[S], R]:
        """
        Feed only matching elements; the inner folder sees contiguous indices.

        With `indexed`, pred also gets the index of the element in the input.
        """
        return self._filter_indexed(with_index(pred, indexed))

    def _filter_indexed(self, pred: IndexedPred[A]) -> Folder[A, Filtered[S], R]:
        init, step = self.init, self.step

        def next_state(st: Filtered[S], elem: A, index: int) -> Filtered[S]:
            if not pred(elem, index):
                return st
            return Filtered(step(st.inner, elem, st.virtual), st.virtual + 1)

        return Folder(lambda: Filtered(init()), next_state, self._inner_extract(), self._inner_escape())

    def sample_input(self, nth: int) -> Folder[A, typing.Any, R]:
        """Feed every nth element, starting with the first; nth <= 1 feeds everything."""
        if nth <= 1:
            return self
        return self._filter_indexed(lambda _, i: i % nth == 0)

    def take_input(self, amount: int) -> Folder[A, Counted[S], R]:
        """Feed the first `amount` elements, then escape."""
        init, step = self.init, self.step
        inner_escape = self.escape

        def next_state(st: Counted[S], elem: A, index: int) -> Counted[S]:
            _ = index
            if st.count >= amount:
                return st
            return Counted(step(st.inner, elem, st.count), st.count + 1)

        def escape(st: Counted[S]) -> bool:
            return st.count >= amount or (inner_escape is not None and inner_escape(st.inner))

        return Folder(lambda: Counted(init()), next_state, self._inner_extract(), escape)

    def drop_input(self, amount: int) -> Folder[A, Counted[S], R]:
        """Skip the first `amount` elements."""
        init, step = self.init, self.step

        def next_state(st: Counted[S], elem: A, index: int) -> Counted[S]:
            _ = index
            if st.count < amount:
                return Counted(st.inner, st.count + 1)
            return Counted(step(st.inner, elem, st.count - amount), st.count + 1)

        return Folder(lambda: Counted(init()), next_state, self._inner_extract(), self._inner_escape())

    def slice_input(self, start: int, amount: int) -> Folder[A, Counted[Counted[S]], R]:
        """Feed `amount` elements starting at index `start`."""
        return self.take_input(amount).drop_input(start)

    def take_last_input(self, amount: int) -> Folder[A, Buffered[S, A], R]:
        """
        Feed only the last `amount` elements.

        The buffered elements are folded into a fresh accumulator on every
        extract, so the result can be read at any point of the drive.
        """
        init, step, extract = self.init, self.step, self.extract
        escaped = self.escaped

        def next_state(st: Buffered[S, A], elem: A, index: int) -> Buffered[S, A]:
            _ = index
            if amount <= 0:
                return st
            return Buffered(st.inner, (*st.buffer, elem)[-amount:])

        def result(st: Buffered[S, A]) -> R:
            state = init()
            for i, elem in enumerate(st.buffer):
                if escaped(state):
                    break
                state = step(state, elem, i)
            return extract(state)

        return Folder(lambda: Buffered(init()), next_state, result)

    def drop_last_input(self, amount: int) -> Folder[A, Buffered[S, A], R]:
        """Feed all but the last `amount` elements."""
        init, step = self.init, self.step

        def next_state(st: Buffered[S, A], elem: A, index: int) -> Buffered[S, A]:
            _ = index
            buffer = (*st.buffer, elem)
            if len(buffer) <= amount:
                return Buffered(st.inner, buffer, st.virtual)
            head, *rest = buffer
            return Buffered(step(st.inner, head, st.virtual), tuple(rest), st.virtual + 1)

        return Folder(lambda: Buffered(init()), next_state, self._inner_extract(), self._inner_escape())

    def take_while_input(self, pred: Pred[A], /) -> Folder[A, Bounded[S], R]:
        """Feed elements while pred holds; the first rejection ends the input."""
        init, step = self.init, self.step
        inner_escape = self.escape

        def next_state(st: Bounded[S], elem: A, index: int) -> Bounded[S]:
            if st.done:
                return st
            if not pred(elem):
                return Bounded(st.inner, done=True)
            return Bounded(step(st.inner, elem, index))

        def escape(st: Bounded[S]) -> bool:
            return st.done or (inner_escape is not None and inner_escape(st.inner))

        return Folder(lambda: Bounded(init()), next_state, self._inner_extract(), escape)

    def drop_while_input(self, pred: Pred[A], /) -> Folder[A, Dropping[S], R]:
        """Skip elements while pred holds, then feed everything."""
        init, step = self.init, self.step

        def next_state(st: Dropping[S], elem: A, index: int) -> Dropping[S]:
            _ = index
            if st.dropping and pred(elem):
                return st
            return Dropping(step(st.inner, elem, st.virtual), False, st.virtual + 1)

        return Folder(lambda: Dropping(init()), next_state, self._inner_extract(), self._inner_escape())

    def distinct_by_input[K](self, key: Callable[[A], K], /) -> Folder[A, Seen[S, K], R]:
        """
        Feed an element only if its key was not seen before.

        NOTE: the seen-key set grows for the whole drive.
        """
        init, step = self.init, self.step

        def next_state(st: Seen[S, K], elem: A, index: int) -> Seen[S, K]:
            _ = index
            k = key(elem)
            if k in st.keys:
                return st
            return Seen(step(st.inner, elem, st.virtual), st.keys | {k}, st.virtual + 1)

        return Folder(lambda: Seen(init()), next_state, self._inner_extract(), self._inner_escape())

    def distinct_input(self) -> Folder[A, Seen[S, A], R]:
        return self.distinct_by_input(identity)

    def filter_changed_input(self) -> Folder[A, Previous[S], R]:
        """Feed an element only if it differs from its predecessor."""
        init, step = self.init, self.step

        def next_state(st: Previous[S], elem: A, index: int) -> Previous[S]:
            _ = index
            if st.previous is not _NOTHING and st.previous == elem:
                return st
            return Previous(step(st.inner, elem, st.virtual), elem, st.virtual + 1)

        return Folder(lambda: Previous(init()), next_state, self._inner_extract(), self._inner_escape())

    def patch_where_input(
        self,
        pred: Pred[A],
        remove: int,
        insert: IndexedFn[A, Iterable[A]] | None = None,
        max_applications: int | None = None,
    ) -> Folder[A, typing.Any, R]:
        """
        At each element matching pred, skip `remove` elements (the match
        included) and feed insert(elem, virtual_index) in their place.

        Example:
            folds.to_list().patch_where_input(is_even, 1, lambda *_: ["X", "Y"])
            # over [0, 1, 5, 2] -> ["X", "Y", 1, 5, "X", "Y"]
        """
        policy = PatchPolicy(remove, max_applications)
        if policy.disabled:
            return self

        init, step = self.init, self.step

        def next_state(st: Patching[S], elem: A, index: int) -> Patching[S]:
            _ = index
            inner, to_remove, applied, virtual = st.inner, st.to_remove, st.applied, st.virtual

            if to_remove > 0:
                return Patching(inner, to_remove - 1, applied, virtual)

            limit = policy.max_applications
            if (limit is None or applied < limit) and pred(elem):
                to_remove = policy.remove
                applied += 1
                if insert is not None:
                    for inserted in insert(elem, virtual):
                        inner = step(inner, inserted, virtual)
                        virtual += 1

            if to_remove > 0:
                return Patching(inner, to_remove - 1, applied, virtual)
            return Patching(step(inner, elem, virtual), 0, applied, virtual + 1)

        return Folder(lambda: Patching(init()), next_state, self._inner_extract(), self._inner_escape())

    def patch_elem_input(
        self,
        elem: A,
        remove: int,
        insert: Iterable[A] | None = None,
        max_applications: int | None = None,
    ) -> Folder[A, typing.Any, R]:
        return self.patch_where_input(
            lambda e: e == elem,
            remove,
            None if insert is None else (lambda *_: insert),
            max_applications,
        )

    def prepend_input(self, *elems: A) -> Folder[A, S, R]:
        """Fold `elems` into the initial state; later indices are shifted."""
        if not elems:
            return self
        init, step = self.init, self.step
        offset = len(elems)

        def seeded() -> S:
            state = init()
            for i, elem in enumerate(elems):
                state = step(state, elem, i)
            return state

        return Folder(seeded, lambda s, e, i: step(s, e, i + offset), self.extract, self.escape)

    def append_input(self, *elems: A) -> Folder[A, Counted[S], R]:
        """
        Fold `elems` after the real input ends.

        The appended elements are folded on extract, into a copy of the
        accumulator, starting from the index after the last real element.
        The live accumulator is left untouched, so extract can be called
        at any point of the drive.
        """
        init, step, extract = self.init, self.step, self.extract
        escaped = self.escaped

        def next_state(st: Counted[S], elem: A, index: int) -> Counted[S]:
            return Counted(step(st.inner, elem, index), st.count + 1)

        def result(st: Counted[S]) -> R:
            state = copy.deepcopy(st.inner)
            for i, elem in enumerate(elems):
                if escaped(state):
                    break
                state = step(state, elem, st.count + i)
            return extract(state)

        return Folder(lambda: Counted(init()), next_state, result, self._inner_escape())

    # Fan-out

    def combine_with[GR](
        self,
        combine_fn: Callable[..., GR],
        other: Folder[A, typing.Any, typing.Any],
        /,
        *others: Folder[A, typing.Any, typing.Any],
    ) -> Folder[A, tuple[typing.Any, ...], GR]:
        from .combine import combine_with

        return combine_with(combine_fn, self, other, *others)

    def combine(
        self,
        other: Folder[A, typing.Any, typing.Any],
        /,
        *others: Folder[A, typing.Any, typing.Any],
    ) -> Folder[A, tuple[typing.Any, ...], tuple[typing.Any, ...]]:
        from .combine import combine

        return combine(self, other, *others)


__all__ = (
    "Bounded",
    "Buffered",
    "Counted",
    "Dropping",
    "Filtered",
    "Folder",
    "Patching",
    "Previous",
    "Seen",
)
