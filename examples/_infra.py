from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@dataclass(frozen=True, slots=True)
class Reading:
    sensor: str
    value: float


def _default_pages() -> list[list[Reading]]:
    return [
        [Reading("a", 20.5), Reading("b", 19.0)],
        [Reading("a", 21.0), Reading("a", 21.0)],
        [Reading("b", 18.5)],
    ]


@dataclass(slots=True)
class FakeFeed:
    """Paged remote source: every page costs one round trip."""

    pages: list[list[Reading]] = field(default_factory=_default_pages)
    delay_seconds: float = 0.0
    requests: int = 0

    async def fetch_page(self, cursor: int) -> tuple[list[Reading], int] | None:
        await asyncio.sleep(self.delay_seconds)
        self.requests += 1
        if cursor >= len(self.pages):
            return None
        return self.pages[cursor], cursor + 1


def banner(title: str) -> None:  # pragma: no cover (examples only)
    print(f"\n== {title} ==")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:  # pragma: no cover (examples only)
    asyncio.run(main())
