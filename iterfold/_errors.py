from __future__ import annotations

import typing


class IterfoldError(Exception):
    """Base class for classified pipeline and folder errors."""

    kind: typing.ClassVar[str] = "IterfoldError"


class NotIterableError(IterfoldError, TypeError):
    """Source does not speak the synchronous pull protocol."""

    kind = "NotIterable"
    source: object

    def __init__(self, source: object) -> None:
        self.source = source
        super().__init__(f"Not iterable: {type(source).__name__!r}")


class NotSuspendableError(IterfoldError, TypeError):
    """Source speaks neither the suspending nor the synchronous pull protocol."""

    kind = "NotSuspendable"
    source: object

    def __init__(self, source: object) -> None:
        self.source = source
        super().__init__(f"Not async iterable: {type(source).__name__!r}")


class RedundantWrapError(IterfoldError):
    """A canonical producer was wrapped again."""

    kind = "RedundantWrap"
    producer: object

    def __init__(self, producer: object) -> None:
        self.producer = producer
        super().__init__(f"Already a canonical producer: {type(producer).__name__!r}")


class NotRestartableError(IterfoldError):
    """Operation needs repeated traversal of a single-pass source."""

    kind = "NotRestartable"
    operation: str

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} requires a restartable source")


class EmptySequenceError(IterfoldError, LookupError):
    """Terminal operation needs at least one element."""

    kind = "EmptySequenceUnsupported"
    operation: str

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} of an empty sequence")


__all__ = (
    "EmptySequenceError",
    "IterfoldError",
    "NotIterableError",
    "NotRestartableError",
    "NotSuspendableError",
    "RedundantWrapError",
)
