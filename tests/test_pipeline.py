import pytest

from iterfold import (
    ABSENT,
    SKIP,
    EmptySequenceError,
    Iter,
    NotRestartableError,
    Recorder,
    combine,
    folds,
)

from fakes import CountingSource, is_even


# Laziness


def test_building_pulls_nothing() -> None:
    source = CountingSource([1, 2, 3])
    Iter.from_iterable(source).map(lambda x: x * 2).filter(is_even).sliding(2)
    assert source.opens == 0


def test_take_stops_pulling() -> None:
    source = CountingSource(range(100))
    assert Iter.from_iterable(source).take(3).to_list() == [0, 1, 2]
    assert source.pulls == 3


def test_take_zero_never_opens() -> None:
    source = CountingSource([1, 2, 3])
    assert Iter.from_iterable(source).take(0).to_list() == []
    assert source.opens == 0


def test_take_while_pulls_the_rejected_element_only() -> None:
    source = CountingSource([1, 2, 3, 10, 4])
    assert Iter.from_iterable(source).take_while(lambda x: x < 5).to_list() == [1, 2, 3]
    assert source.pulls == 4


def test_infinite_source_with_take() -> None:
    assert Iter.nats().map(lambda x: x * x).take(4).to_list() == [0, 1, 4, 9]


def test_folding_empty_source_extracts_initial_state() -> None:
    source = CountingSource([])
    total = Iter.from_iterable(source).fold(folds.sum_())
    assert total == 0
    assert source.opens == 1
    assert source.pulls == 0


def test_take_then_drop_same_amount_is_empty() -> None:
    source = CountingSource(range(10))
    assert Iter.from_iterable(source).take(3).drop(3).to_list() == []
    assert source.pulls == 3
    assert Iter.from_iterable(CountingSource([])).take(3).drop(3).to_list() == []


# Restartability


def test_restartable_pipeline_drives_twice() -> None:
    source = CountingSource([1, 2, 3])
    doubled = Iter.from_iterable(source).map(lambda x: x * 2)
    assert doubled.to_list() == [2, 4, 6]
    assert doubled.to_list() == [2, 4, 6]
    assert source.opens == 2


def test_single_pass_pipeline_exhausts() -> None:
    it = Iter.from_iterable(iter([1, 2, 3])).map(lambda x: x + 1)
    assert not it.restartable
    assert it.to_list() == [2, 3, 4]
    assert it.to_list() == []


def test_from_iterable_keeps_iter() -> None:
    it = Iter.of(1, 2)
    assert Iter.from_iterable(it) is it


def test_empty_is_tagged() -> None:
    assert Iter.empty().is_empty
    assert Iter.of().is_empty
    assert Iter.empty().map(str).is_empty
    assert not Iter.of(1).is_empty


# Constructors


def test_range() -> None:
    assert Iter.range(0, 5).to_list() == [0, 1, 2, 3, 4]
    assert Iter.range(50, 0, -10).to_list() == [50, 40, 30, 20, 10]
    assert Iter.range(0, None, 3).take(3).to_list() == [0, 3, 6]
    assert Iter.range(5, 1).to_list() == []
    with pytest.raises(ValueError):
        Iter.range(0, 5, 0)


def test_unfold_and_sequence() -> None:
    assert Iter.unfold(1, lambda s: ("a" * s, s * 2)).take(3).to_list() == ["a", "aa", "aaaa"]
    assert Iter.unfold(3, lambda s: (s, s - 1) if s > 0 else None).to_list() == [3, 2, 1]
    assert Iter.sequence(1, lambda v: v * 2 if v < 8 else None).to_list() == [1, 2, 4, 8]


def test_from_lazy_creates_on_pull() -> None:
    calls = []
    it = Iter.from_lazy(lambda: calls.append(1) or "x")
    assert calls == []
    assert it.to_list() == ["x"]
    assert it.to_list() == ["x"]
    assert calls == [1, 1]


def test_flatten() -> None:
    assert Iter.flatten([[1, 2], [], [3]]).to_list() == [1, 2, 3]


def test_random_draws_on_every_drive() -> None:
    draws = Iter.random(10, 20).repeat(50).to_list()
    assert len(draws) == 50
    assert all(10 <= d <= 20 for d in draws)
    dice = Iter.random_int(1, 6).repeat(50).to_set()
    assert dice <= {1, 2, 3, 4, 5, 6}


def test_indexed_reversed_and_bounce() -> None:
    assert Iter.indexed_reversed("abc").join() == "cba"
    assert Iter.indexed_bounce("abc").join() == "abcb"
    assert Iter.indexed_bounce([1]).to_list() == [1]
    assert Iter.indexed_reversed([]).is_empty


# Elementwise


def test_map_filter_collect() -> None:
    assert Iter.of(1, 2, 3, 4).filter(is_even).to_list() == [2, 4]
    assert Iter.of(1, 2, 3, 4).filter_not(is_even).to_list() == [1, 3]
    assert Iter.of(1, 2, 3).collect(lambda x: x * 10 if x != 2 else SKIP).to_list() == [10, 30]


def test_flat_map() -> None:
    assert Iter.of(1, 2, 3).flat_map(lambda e: [e] * e).to_list() == [1, 2, 2, 3, 3, 3]


def test_indices() -> None:
    assert Iter.of("a", "b", "a").zip_with_index().to_list() == [("a", 0), ("b", 1), ("a", 2)]
    assert Iter.of("a", "b", "a").indices_of("a").to_list() == [0, 2]
    assert Iter.of(1, 2, 3, 4).indices_where(is_even).to_list() == [1, 3]


# Prefixes and suffixes


def test_drop_and_slice() -> None:
    assert Iter.range(0, 5).drop(2).to_list() == [2, 3, 4]
    assert Iter.range(0, 10).slice(3, 2).to_list() == [3, 4]
    assert Iter.of(1, 2, 5, 1).drop_while(lambda x: x < 3).to_list() == [5, 1]


def test_take_last_and_drop_last() -> None:
    assert Iter.range(0, 5).take_last(2).to_list() == [3, 4]
    assert Iter.range(0, 5).drop_last(2).to_list() == [0, 1, 2]
    assert Iter.of(1).take_last(3).to_list() == [1]


def test_sample() -> None:
    assert Iter.range(0, 7).sample(2).to_list() == [0, 2, 4, 6]


# Windows and buckets


def test_sliding_non_overlapping() -> None:
    assert Iter.range(0, 8).sliding(3).to_list() == [[0, 1, 2], [3, 4, 5], [6, 7]]


def test_sliding_step_one() -> None:
    assert Iter.range(0, 8).sliding(3, 1).to_list() == [
        [0, 1, 2],
        [1, 2, 3],
        [2, 3, 4],
        [3, 4, 5],
        [4, 5, 6],
        [5, 6, 7],
    ]


def test_sliding_step_larger_than_size() -> None:
    assert Iter.range(0, 8).sliding(2, 3).to_list() == [[0, 1], [3, 4], [6, 7]]


def test_sliding_non_positive_is_empty() -> None:
    assert Iter.of(1, 2).sliding(0).to_list() == []
    assert Iter.of(1, 2).sliding(2, 0).to_list() == []


def test_split_where() -> None:
    assert Iter.of(1, 0, 2, 3, 0).split_where(lambda x: x == 0).to_list() == [[1], [2, 3], []]
    assert Iter.of(0, 1).split_on(0).to_list() == [[], [1]]
    assert Iter.of(1, 2).split_on(0).to_list() == [[1, 2]]
    assert Iter.from_factory(list).split_on(0).to_list() == []


# Substitution


def test_patch_where_replaces_matches() -> None:
    it = Iter.of(0, 1, 5, 2)
    assert it.patch_where(is_even, 1, lambda *_: "XY").to_list() == ["X", "Y", 1, 5, "X", "Y"]


def test_patch_where_remove_zero_keeps_trigger() -> None:
    it = Iter.of(0, 1, 5, 2)
    assert it.patch_where(is_even, 0, lambda *_: "XY").to_list() == ["X", "Y", 0, 1, 5, "X", "Y", 2]


def test_patch_where_removes_following() -> None:
    assert Iter.of(0, 1, 5, 2).patch_where(is_even, 2).to_list() == [5]


def test_patch_where_max_applications() -> None:
    assert Iter.of(0, 1, 5, 2).patch_where(is_even, 1, max_applications=1).to_list() == [1, 5, 2]
    assert Iter.of(0, 1).patch_where(is_even, 1, max_applications=0).to_list() == [0, 1]


def test_patch_where_insert_sees_index() -> None:
    it = Iter.of("a", "b", "c").patch_where(lambda e: e != "a", 1, lambda e, i: [f"{e}{i}"])
    assert it.to_list() == ["a", "b1", "c2"]


def test_patch_where_rejects_negative_remove() -> None:
    with pytest.raises(ValueError):
        Iter.of(1).patch_where(is_even, -1)


def test_patch_elem() -> None:
    assert Iter.of(1, 2, 1).patch_elem(1, 1, ["x"]).to_list() == ["x", 2, "x"]


def test_patch_at() -> None:
    it = Iter.of(1, 2, 3)
    assert it.patch_at(1, 1, lambda: ["X"]).to_list() == [1, "X", 3]
    assert it.patch_at(-1, 0, lambda: ["X"]).to_list() == ["X", 1, 2, 3]
    assert it.patch_at(10, 0, lambda: ["X"]).to_list() == [1, 2, 3, "X"]
    assert it.patch_at(0, 2).to_list() == [3]
    assert Iter.empty().patch_at(0, 0, lambda: ["X"]).to_list() == ["X"]


def test_intersperse_and_mk_group() -> None:
    assert Iter.of(1, 2, 3).intersperse([0]).to_list() == [1, 0, 2, 0, 3]
    assert Iter.of(1, 2).mk_group("<", ",", ">").join() == "<1,2>"
    assert Iter.empty().mk_group("<", ",", ">").join() == "<>"


# Uniqueness


def test_distinct_and_filter_changed() -> None:
    assert Iter.of(1, 2, 1, 3, 2).distinct().to_list() == [1, 2, 3]
    assert Iter.of("a", "bb", "c").distinct_by(len).to_list() == ["a", "bb"]
    assert Iter.of(1, 1, 2, 2, 1).filter_changed().to_list() == [1, 2, 1]


def test_filter_with_previous() -> None:
    rising = Iter.of(1, 3, 2, 4).filter_with_previous(lambda cur, prev: prev is ABSENT or cur > prev)
    assert rising.to_list() == [1, 3, 4]


# Composition of sources


def test_concat_append_prepend() -> None:
    assert Iter.of(2, 4).concat([5, 3]).prepend(0).append(9).to_list() == [0, 2, 4, 5, 3, 9]
    assert not Iter.of(1).concat(iter([2])).restartable


def test_zip_stops_with_shortest() -> None:
    assert Iter.of(1, 2, 3).zip("ab").to_list() == [(1, "a"), (2, "b")]
    assert Iter.nats().zip("ab").to_list() == [(0, "a"), (1, "b")]
    assert Iter.of(1, 2).zip_with(lambda a, b: a + b, [10, 20]).to_list() == [11, 22]


def test_zip_all_fills_absent() -> None:
    assert Iter.of(1, 2, 3).zip_all("ab").to_list() == [(1, "a"), (2, "b"), (3, ABSENT)]


def test_zip_all_does_not_pull_exhausted_inputs() -> None:
    short = CountingSource([1])
    assert Iter.from_iterable(short).zip_all([1, 2, 3]).count() == 3
    assert short.pulls == 1


def test_interleave() -> None:
    assert Iter.of(1, 2, 3).interleave([10, 20]).to_list() == [1, 10, 2, 20]
    assert Iter.of(1, 2, 3).interleave_all([10]).to_list() == [1, 10, 2, 3]


def test_interleave_round() -> None:
    assert Iter.from_iterable("abc").interleave_round("QW").take(10).join() == "aQbWcQaWbQ"


def test_interleave_round_needs_restartable_inputs() -> None:
    with pytest.raises(NotRestartableError) as exc_info:
        Iter.of(1).interleave_round(iter([2]))
    assert exc_info.value.kind == "NotRestartable"


def test_repeat() -> None:
    assert Iter.of(1, 3).repeat(3).to_list() == [1, 3, 1, 3, 1, 3]
    assert Iter.of(1, 3).repeat(0).to_list() == []
    assert Iter.of(1).repeat().take(4).to_list() == [1, 1, 1, 1]


def test_repeat_of_source_without_elements_stops() -> None:
    assert Iter.from_factory(list).repeat().to_list() == []


def test_repeat_needs_restartable_source() -> None:
    with pytest.raises(NotRestartableError):
        Iter.from_iterable(iter([1])).repeat()


# Monitoring


def test_monitor_sees_pulled_elements_only() -> None:
    recorder = Recorder()
    assert Iter.nats().monitor("nats", recorder).take(2).to_list() == [0, 1]
    assert recorder.values() == [0, 1]
    assert [e.index for e in recorder.log] == [0, 1]
    assert recorder.values("other") == []


# Terminal drives


def test_fold_with_combine() -> None:
    assert Iter.of(1, 2, 3, 4).fold(combine(folds.sum_(), folds.count())) == (10, 4)


def test_fold_stops_on_escape() -> None:
    source = CountingSource([1, 2, 3, 4])
    assert Iter.from_iterable(source).fold(folds.find(lambda x: x > 1)) == 2
    assert source.pulls == 2


def test_fold_iter_is_a_running_view() -> None:
    assert Iter.of(1, 2, 3).fold_iter(folds.sum_()).to_list() == [1, 3, 6]
    assert Iter.of(1, 2, 3).fold_iter(folds.first()).to_list() == [1]


def test_first_last_on_empty() -> None:
    with pytest.raises(EmptySequenceError):
        Iter.empty().first()
    with pytest.raises(EmptySequenceError):
        Iter.empty().last()
    assert Iter.empty().first("none") == "none"
    assert Iter.of(1, 2).last() == 2


def test_reduce() -> None:
    assert Iter.of(1, 2, 3).reduce(lambda a, b: a + b) == 6
    assert Iter.empty().reduce(lambda a, b: a + b, 0) == 0
    with pytest.raises(EmptySequenceError):
        Iter.empty().reduce(lambda a, b: a + b)


def test_simple_terminals() -> None:
    assert Iter.range(0, 10).filter(is_even).map(str).join(",") == "0,2,4,6,8"
    assert Iter.of(1, 2, 2).to_set() == {1, 2}
    assert Iter.of(1, 2, 3).count() == 3
    assert Iter.of(1, 2, 3).some(is_even)
    assert not Iter.empty().some()
    assert not Iter.of(1, 2).every(is_even)


def test_for_each() -> None:
    seen = []
    Iter.of(1, 2).for_each(seen.append)
    assert seen == [1, 2]


# Index-aware callbacks


def test_indexed_callbacks_get_stage_positions() -> None:
    letters = Iter.of("a", "b", "c", "d")
    assert letters.map(lambda e, i: f"{i}{e}", indexed=True).to_list() == ["0a", "1b", "2c", "3d"]
    assert letters.filter(lambda _, i: i % 2 == 1, indexed=True).join() == "bd"
    assert letters.filter_not(lambda _, i: i == 0, indexed=True).join() == "bcd"
    assert letters.flat_map(lambda e, i: e * i, indexed=True).join() == "bccddd"
    assert letters.take_while(lambda _, i: i < 2, indexed=True).join() == "ab"
    assert letters.drop_while(lambda _, i: i < 3, indexed=True).join() == "d"
    assert letters.split_where(lambda _, i: i == 1, indexed=True).to_list() == [["a"], ["c", "d"]]
    assert letters.distinct_by(lambda _, i: i // 2, indexed=True).join() == "ac"


def test_indexed_callbacks_count_from_their_own_stage() -> None:
    evens = Iter.range(0, 10).filter(is_even)
    assert evens.map(lambda e, i: (i, e), indexed=True).to_list() == [(0, 0), (1, 2), (2, 4), (3, 6), (4, 8)]


def test_patch_where_indexed_predicate() -> None:
    patched = Iter.of("a", "b", "c").patch_where(lambda _, i: i == 1, 1, lambda *_: ["X"], indexed=True)
    assert patched.join() == "aXc"


def test_plain_callables_still_work_unindexed() -> None:
    assert Iter.of(1, 22).map(str).map(len).to_list() == [1, 2]
    assert Iter.of("a", "bb", "cc").distinct_by(len).to_list() == ["a", "bb"]
