from __future__ import annotations

import random

from _infra import banner, run

from iterfold import Iter

CHARS = " X"
WIDTH = 60
SHIFT = 6
DELAY_SECONDS = 0.04
LINES = 12


async def main() -> None:
    banner("03_scroller: windows over an infinite source")

    await (
        Iter.from_lazy(lambda: random.choice(CHARS))
        .repeat()
        .sliding(WIDTH, SHIFT)
        .map("".join)
        .take(LINES)
        .to_async()
        .delay(seconds=DELAY_SECONDS)
        .for_each(print)
    )


if __name__ == "__main__":
    run(main)
