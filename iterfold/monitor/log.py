"""
Log
===

Immutable sequence of monitor events, a monoid under concatenation:
`Log()` is the identity, `combine` appends another log.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Log[A]:
    """
    Example:
        Log.of("a", "b").combine(Log.of("c"))  # Log(entries=("a", "b", "c"))
    """

    entries: tuple[A, ...] = ()

    @staticmethod
    def of[T](*items: T) -> Log[T]:
        return Log(items)

    def combine(self, other: Log[A], /) -> Log[A]:
        return Log((*self.entries, *other.entries))

    def tell(self, item: A, /) -> Log[A]:
        return Log((*self.entries, item))

    def where(self, pred: Callable[[A], bool], /) -> Log[A]:
        return Log(tuple(e for e in self.entries if pred(e)))

    def __iter__(self) -> Iterator[A]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


__all__ = ("Log",)
