import pytest

from dawn.dsa import intersect_sorted, merge_sort
from dawn.indices import build_indices, group_by, period_range_ids


@pytest.mark.parametrize("reverse", (False, True))
def test_merge_sort_matches_sorted(reverse):
    data = [5, 3, 9, 1, 3, 7, 0]

    assert merge_sort(data, reverse=reverse) == sorted(data, reverse=reverse)


def test_merge_sort_stable_descending():
    data = [("a", 1), ("b", 2), ("c", 1), ("d", 2)]

    res = merge_sort(data, key=lambda x: x[1], reverse=True)

    assert [x[0] for x in res] == ["b", "d", "a", "c"]


def test_merge_sort_does_not_mutate():
    data = [3, 1, 2]
    merge_sort(data)

    assert data == [3, 1, 2]


def test_intersect_sorted():
    assert intersect_sorted([1, 2, 4, 7], [2, 3, 4, 8]) == [2, 4]
    assert intersect_sorted([], [1]) == []


def test_group_by_keeps_first_seen_order():
    res = group_by(["bb", "a", "cc", "d"], len)

    assert list(res) == [2, 1]
    assert res[2] == ["bb", "cc"]


def test_build_indices(monthly_records):
    idx = build_indices(monthly_records)

    assert idx.by_country["A"] == [0, 2, 4, 6]
    assert idx.by_region["Arid"] == [1, 3, 5]
    assert idx.periods_sorted == [202212, 202301, 202302, 202303]
    assert idx.year_to_ids[2022] == [6]


def test_period_range_ids(monthly_records):
    idx = build_indices(monthly_records)

    assert period_range_ids(idx, (2023, 2), (2023, 3)) == [2, 3, 4, 5]
    assert period_range_ids(idx, None, None) == list(range(7))
    assert period_range_ids(idx, (2030, 1), None) == []
