from __future__ import annotations

from _infra import FakeFeed, Reading, banner, run

from iterfold import AsyncIter, combine, fold_lazy, folds
from kungfu import Error, Ok


async def main() -> None:
    banner("02_paged_feed: suspending source + lazy Result")

    feed = FakeFeed(delay_seconds=0.01)

    readings: AsyncIter[Reading] = (
        AsyncIter.unfold(0, feed.fetch_page)
        .flat_map(lambda page: page)
        .filter_changed()
        .monitor("reading")
    )

    report = fold_lazy(
        readings,
        combine(
            folds.count(),
            folds.average().map_input(lambda r: r.value),
            folds.group_by(lambda r: r.sensor).map_result(lambda groups: sorted(groups)),
        ),
    )

    match await report():
        case Ok((amount, average, sensors)):
            print(f"{amount} readings from {sensors}, average {average:.2f}")
        case Error(err):
            print(f"error: {err!r}")

    # The description is restartable: only the first page is requested here
    requests_before = feed.requests
    first = await readings.first()
    print(f"first: {first}, extra requests: {feed.requests - requests_before}")


if __name__ == "__main__":
    run(main)
