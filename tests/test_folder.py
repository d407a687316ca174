import pytest

from iterfold import Folder, Iter, Recorder, combine, combine_with, fixed, folds, pipe

from fakes import CountingSource, is_even


def drive_counting(items, folder):
    source = CountingSource(items)
    return Iter.from_iterable(source).fold(folder), source.pulls


def test_create_with_value_and_factory_init() -> None:
    total = Folder.create(0, lambda s, x, _: s + x)
    collect = Folder.create(list, lambda s, x, _: [*s, x])
    assert Iter.of(1, 2, 3).fold(total) == 6
    assert Iter.of(1, 2).fold(collect) == [1, 2]
    assert Iter.empty().fold(total) == 0


def test_folder_is_reusable() -> None:
    evens = folds.to_list().filter_input(is_even)
    assert Iter.of(1, 2, 3, 4).fold(evens) == [2, 4]
    assert Iter.of(6, 7).fold(evens) == [6]


def test_map_result_composes() -> None:
    folder = folds.sum_().map_result(lambda x: x * 2).map_result(str)
    assert Iter.of(1, 2, 3).fold(folder) == "12"


def test_map_input() -> None:
    assert Iter.of("a", "bcd").fold(folds.sum_().map_input(len)) == 4


def test_filter_input_gives_contiguous_indices() -> None:
    result, pulls = drive_counting([1, 2, 3, 4, 6], folds.elem_at(1).filter_input(is_even))
    assert result == 4
    assert pulls == 4


def test_sample_input() -> None:
    assert Iter.range(0, 6).fold(folds.to_list().sample_input(2)) == [0, 2, 4]


def test_take_input_escapes() -> None:
    result, pulls = drive_counting(range(100), folds.to_list().take_input(2))
    assert result == [0, 1]
    assert pulls == 2


def test_take_input_zero_pulls_nothing() -> None:
    result, pulls = drive_counting([1, 2], folds.to_list().take_input(0))
    assert result == []
    assert pulls == 0


def test_drop_and_slice_input() -> None:
    assert Iter.range(0, 5).fold(folds.to_list().drop_input(3)) == [3, 4]
    assert Iter.range(0, 5).fold(folds.to_list().slice_input(1, 2)) == [1, 2]


def test_drop_input_shifts_index() -> None:
    assert Iter.of("a", "b", "c").fold(folds.count().drop_input(1)) == 2


def test_take_last_and_drop_last_input() -> None:
    assert Iter.of(1, 2, 3).fold(folds.to_list().take_last_input(2)) == [2, 3]
    assert Iter.of(1, 2, 3).fold(folds.to_list().drop_last_input(1)) == [1, 2]


def test_take_while_input_stops_at_first_rejection() -> None:
    result, pulls = drive_counting([1, 2, 5, 1], folds.to_list().take_while_input(lambda x: x < 3))
    assert result == [1, 2]
    assert pulls == 3


def test_drop_while_input() -> None:
    assert Iter.of(1, 2, 5, 1).fold(folds.to_list().drop_while_input(lambda x: x < 3)) == [5, 1]


def test_distinct_and_filter_changed_input() -> None:
    assert Iter.of(1, 2, 1, 3).fold(folds.to_list().distinct_input()) == [1, 2, 3]
    assert Iter.of("a", "bb", "c").fold(folds.to_list().distinct_by_input(len)) == ["a", "bb"]
    assert Iter.of(1, 1, 2, 1).fold(folds.to_list().filter_changed_input()) == [1, 2, 1]


def test_patch_where_input() -> None:
    folder = folds.to_list().patch_where_input(is_even, 1, lambda *_: ["X", "Y"])
    assert Iter.of(0, 1, 5, 2).fold(folder) == ["X", "Y", 1, 5, "X", "Y"]


def test_patch_where_input_max_applications() -> None:
    folder = folds.to_list().patch_where_input(is_even, 1, max_applications=1)
    assert Iter.of(0, 1, 5, 2).fold(folder) == [1, 5, 2]
    untouched = folds.to_list().patch_where_input(is_even, 1, max_applications=0)
    assert Iter.of(0, 1).fold(untouched) == [0, 1]


def test_patch_elem_input() -> None:
    assert Iter.of(1, 2, 1).fold(folds.to_list().patch_elem_input(1, 1, ["x"])) == ["x", 2, "x"]


def test_prepend_and_append_input() -> None:
    assert Iter.of(1, 2).fold(folds.to_list().prepend_input(0).append_input(9)) == [0, 1, 2, 9]
    assert Iter.empty().fold(folds.to_list().append_input(7, 8)) == [7, 8]


def test_prepend_and_append_input_shift_indices() -> None:
    assert Iter.of(1).fold(folds.count().prepend_input("a", "b")) == 3
    assert Iter.of(1, 2).fold(folds.count().append_input(7)) == 3


def test_monitor_input_sees_element_and_state() -> None:
    recorder = Recorder()
    Iter.of(1, 2).fold(folds.sum_().monitor_input("sum", recorder))
    assert recorder.values("sum") == [(1, 0), (2, 1)]


def test_combine_runs_in_lock_step() -> None:
    assert Iter.of(1, 2, 3, 4).fold(combine(folds.sum_(), folds.count())) == (10, 4)
    assert Iter.of(1, 2, 3, 4).fold(folds.sum_().combine(folds.max_(), folds.min_())) == (10, 4, 1)


def test_combine_escapes_when_all_escaped() -> None:
    folder = combine(folds.first(), folds.find(lambda x: x > 2))
    result, pulls = drive_counting([1, 2, 3, 4, 5], folder)
    assert result == (1, 3)
    assert pulls == 3


def test_combine_with_non_escaping_member_reads_everything() -> None:
    result, pulls = drive_counting([1, 2, 3], combine(folds.first(), folds.count()))
    assert result == (1, 3)
    assert pulls == 3


def test_combine_with_function() -> None:
    mean = combine_with(lambda s, c: s / c, folds.sum_(), folds.count())
    assert Iter.of(1, 2, 3, 4).fold(mean) == 2.5
    assert Iter.of(1, 2).fold(folds.sum_().combine_with(lambda a, b: a - b, folds.count())) == 1


def test_pipe_feeds_running_result() -> None:
    assert Iter.of(1, -5, 3).fold(pipe(folds.sum_(), folds.max_())) == 1


def test_pipe_escapes_with_either() -> None:
    result, pulls = drive_counting([1, 2, 3, 4], pipe(folds.sum_(), folds.find(lambda s: s > 2)))
    assert result == 3
    assert pulls == 2


def test_fixed_never_pulls() -> None:
    result, pulls = drive_counting([1, 2], fixed("x"))
    assert result == "x"
    assert pulls == 0


def test_extract_mid_drive_is_repeatable() -> None:
    folder = folds.sum_().filter_input(is_even)
    state = folder.init()
    state = folder.step(state, 2, 0)
    assert folder.extract(state) == 2
    assert folder.extract(state) == 2
    state = folder.step(state, 3, 1)
    assert folder.extract(state) == 2


def test_negative_patch_remove_rejected() -> None:
    with pytest.raises(ValueError):
        folds.to_list().patch_where_input(is_even, -1)


def test_take_last_input_running_view() -> None:
    running = Iter.of(1, 2, 3).fold_iter(folds.to_list().take_last_input(2)).to_list()
    assert running == [[1], [1, 2], [2, 3]]


def test_append_input_running_view() -> None:
    running = Iter.of(1, 2).fold_iter(folds.to_list().append_input(9)).to_list()
    assert running == [[1, 9], [1, 2, 9]]


def test_extract_leaves_collected_state_untouched() -> None:
    for folder in (folds.to_list().take_last_input(2), folds.to_list().append_input(9)):
        state = folder.init()
        state = folder.step(state, 1, 0)
        first = folder.extract(state)
        assert folder.extract(state) == first
        state = folder.step(state, 2, 1)
        assert folder.extract(state) == folder.extract(state)


def test_sample_input_below_two_feeds_everything() -> None:
    assert Iter.of(1, 2, 3).fold(folds.to_list().sample_input(0)) == [1, 2, 3]
    assert Iter.of(1, 2, 3).fold(folds.to_list().sample_input(1)) == [1, 2, 3]


def test_indexed_filter_and_map_input() -> None:
    odd_positions = folds.to_list().filter_input(lambda _, i: i % 2 == 1, indexed=True)
    assert Iter.of("a", "b", "c", "d").fold(odd_positions) == ["b", "d"]
    tagged = folds.to_list().map_input(lambda e, i: (i, e), indexed=True)
    assert Iter.of("a", "b").fold(tagged) == [(0, "a"), (1, "b")]
