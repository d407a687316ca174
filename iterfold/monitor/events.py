"""Monitor effects

Side-channel callbacks registered with Iter.monitor / Folder.monitor_input.
They observe elements and never influence control flow."""

from __future__ import annotations

import logging
import typing
from dataclasses import dataclass

from .log import Log

logger = logging.getLogger("iterfold.monitor")


@dataclass(frozen=True, slots=True)
class MonitorEvent:
    """One observed element."""

    tag: str
    index: int
    value: typing.Any


def log_effect(value: typing.Any, index: int, tag: str) -> None:
    """Default effect: one DEBUG record per element."""
    logger.debug("%s[%d]: %r", tag, index, value)


class Recorder:
    """
    Effect that keeps every observed element.

    Example:
        rec = Recorder()
        Iter.nats().monitor("nats", rec).take(2).to_list()
        rec.values()  # [0, 1]
    """

    __slots__ = ("_events",)

    def __init__(self) -> None:
        self._events: list[MonitorEvent] = []

    def __call__(self, value: typing.Any, index: int, tag: str) -> None:
        self._events.append(MonitorEvent(tag=tag, index=index, value=value))

    @property
    def log(self) -> Log[MonitorEvent]:
        """Snapshot of everything recorded so far."""
        return Log(tuple(self._events))

    def values(self, tag: str | None = None) -> list[typing.Any]:
        events = self.log if tag is None else self.log.where(lambda e: e.tag == tag)
        return [e.value for e in events]

    def clear(self) -> None:
        self._events.clear()


__all__ = ("MonitorEvent", "Recorder", "log_effect")
