"""Internal helpers for iterfold.

Small functions used across producer, pipeline and fold modules."""

from __future__ import annotations

import typing
from collections.abc import Callable

from ._types import OptLazy


def identity[T](x: T) -> T:
    """Identity function: returns its argument unchanged."""
    return x


def with_index[T, R](fn: Callable[..., R], indexed: bool) -> Callable[[T, int], R]:
    """fn as an (elem, index) callable; unless indexed, the index is dropped."""
    if indexed:
        return fn
    return lambda elem, _: fn(elem)


def always_true(*_: typing.Any) -> bool:
    return True


def to_lazy[T](value: OptLazy[T]) -> Callable[[], T]:
    """
    Turn an optionally lazy value into a zero-arg factory.

    Callables are taken to be factories already. Wrap a function value
    in a lambda to use the function itself as the value.
    """
    if callable(value):
        return typing.cast(Callable[[], T], value)
    return lambda: value


def opt_value[T](value: OptLazy[T]) -> T:
    return to_lazy(value)()


async def aclose(iterator: object) -> None:
    """Close an async iterator early if it supports that."""
    close = getattr(iterator, "aclose", None)
    if close is not None:
        await close()


__all__ = (
    "aclose",
    "always_true",
    "identity",
    "opt_value",
    "to_lazy",
    "with_index",
)
