import pytest

from iterfold import EmptySequenceError, Iter, folds

from fakes import CountingSource, is_even


def fold(items, folder):
    return Iter.from_iterable(items).fold(folder)


def test_arithmetic() -> None:
    assert fold([1, 2, 3], folds.count()) == 3
    assert fold([1, 2, 3], folds.sum_()) == 6
    assert fold([2, 3, 4], folds.product()) == 24
    assert fold([1, 2, 3, 4], folds.average()) == 2.5
    assert fold([], folds.average()) == 0.0
    assert fold(["a", "abc"], folds.mean_by(len)) == 2.0


def test_product_escapes_on_zero() -> None:
    source = CountingSource([2, 0, 5])
    assert Iter.from_iterable(source).fold(folds.product()) == 0
    assert source.pulls == 2


def test_extremes() -> None:
    assert fold([3, 1, 2], folds.min_()) == 1
    assert fold([3, 1, 2], folds.max_()) == 3
    assert fold([3, 1, 2], folds.range_()) == (1, 3)
    assert fold(["bb", "a", "ccc"], folds.min_by(len)) == "a"
    assert fold(["bb", "a", "ccc"], folds.max_by(len)) == "ccc"


def test_extremes_on_empty() -> None:
    with pytest.raises(EmptySequenceError) as exc_info:
        fold([], folds.min_())
    assert exc_info.value.operation == "min"
    assert exc_info.value.kind == "EmptySequenceUnsupported"
    assert fold([], folds.max_(0)) == 0
    assert fold([], folds.max_(lambda: -1)) == -1


def test_search() -> None:
    assert fold([1, 2, 3, 4], folds.find(is_even)) == 2
    assert fold([1, 2, 3, 4], folds.find_last(is_even)) == 4
    assert fold([1, 3], folds.find(is_even, None)) is None
    assert fold([5, 6], folds.first()) == 5
    assert fold([5, 6], folds.last()) == 6
    assert fold("abc", folds.elem_at(2)) == "c"
    assert fold("abc", folds.elem_at(5, "?")) == "?"
    with pytest.raises(EmptySequenceError):
        fold("abc", folds.elem_at(5))


def test_first_pulls_one() -> None:
    source = CountingSource([1, 2, 3])
    assert Iter.from_iterable(source).fold(folds.first()) == 1
    assert source.pulls == 1


def test_boolean() -> None:
    assert fold([1, 2], folds.some(is_even))
    assert not fold([1, 3], folds.some(is_even))
    assert fold([2, 4], folds.every(is_even))
    assert fold([], folds.every(is_even))
    assert fold([1, 2], folds.contains(2))
    assert fold([1, 2], folds.contains_any(5, 1))
    assert not fold([True, False], folds.and_())
    assert fold([False, True], folds.or_())
    assert fold([0], folds.has_value())
    assert fold([], folds.no_value())
    assert not fold([0], folds.no_value())


def test_every_stops_at_first_failure() -> None:
    source = CountingSource([1, -1, 2])
    assert not Iter.from_iterable(source).fold(folds.every(lambda x: x > 0))
    assert source.pulls == 2


def test_collecting() -> None:
    assert fold([1, 2, 2], folds.to_list()) == [1, 2, 2]
    assert fold([1, 2, 2], folds.to_set()) == {1, 2}
    assert fold([("a", 1), ("b", 2), ("a", 3)], folds.to_dict()) == {"a": 3, "b": 2}
    assert fold(["a", "bb", "c"], folds.group_by(len)) == {1: ["a", "c"], 2: ["bb"]}
    assert fold([1, 2, 3, 4], folds.partition(is_even)) == ([2, 4], [1, 3])
    assert fold([1, 2, 3], folds.split_at(2)) == ([1, 2], [3])


def test_collectors_are_fresh_per_drive() -> None:
    collect = folds.to_list()
    assert fold([1], collect) == [1]
    assert fold([2], collect) == [2]


def test_histogram() -> None:
    assert fold("abbccc", folds.histogram()) == {"a": 1, "b": 2, "c": 3}
    by_frequency = fold("abbccc", folds.histogram(sort_by_frequency=True))
    assert list(by_frequency) == ["c", "b", "a"]
    assert fold("abbccc", folds.histogram(sort_by_frequency=True, amount=1)) == {"c": 3}


def test_strings() -> None:
    assert fold([1, 2, 3], folds.string_append()) == "123"
    assert fold("abc", folds.string_prepend()) == "cba"
    assert fold([1, 5, 6], folds.join("|", "<", ">")) == "<1|5|6>"
    assert fold([], folds.join(",", "[", "]")) == "[]"


def test_reduce() -> None:
    assert fold([1, 2, 3], folds.reduce(max)) == 3
    assert fold([], folds.reduce(max, 0)) == 0


def test_range_by() -> None:
    assert fold(["This", "is", "a", "test"], folds.range_by(len)) == ("a", "This")
