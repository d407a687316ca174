from __future__ import annotations

from _infra import banner, run

from iterfold import Iter, combine_with, folds


async def main() -> None:
    banner("01_quickstart: pipelines + folders")

    print(Iter.of(1, 3, 5).map(lambda v: v * 2).to_list())
    print("min and max:", Iter.of(8, 3, 6, 7).fold(folds.range_()))
    print("average word length:", Iter.of("This", "is", "a", "test").fold(folds.average().map_input(len)))

    # One pass, three answers
    describe = combine_with(
        lambda extremes, avg: f"shortest: {extremes[0]}, longest: {extremes[1]}, average length: {avg}",
        folds.range_by(len),
        folds.average().map_input(len),
    )

    words = Iter.from_iterable("This is a very normal sentence".split())
    print(words.fold(describe))

    # Running result after every word
    words.fold_iter(describe).for_each(print)


if __name__ == "__main__":
    run(main)
