import pytest

from app.core.pagination import page_bounds, paginate

ITEMS = list(range(1, 21))


def test_first_page():
    page, total = paginate(ITEMS, start_index=1, count=10)
    assert page == list(range(1, 11))
    assert total == 20


def test_last_partial_page_is_clamped():
    page, total = paginate(ITEMS, start_index=15, count=10)
    assert page == [15, 16, 17, 18, 19, 20]
    assert total == 20


def test_start_past_end_returns_empty_page_with_true_total():
    page, total = paginate(ITEMS, start_index=25, count=5)
    assert page == []
    assert total == 20


@pytest.mark.parametrize("start_index", [0, -3])
def test_non_positive_start_index_starts_at_first_item(start_index):
    page, _ = paginate(ITEMS, start_index=start_index, count=3)
    assert page == [1, 2, 3]


def test_zero_count_returns_no_items():
    page, total = paginate(ITEMS, start_index=1, count=0)
    assert page == []
    assert total == 20


def test_exact_fit():
    assert page_bounds(20, 11, 10) == (10, 20)
    assert page_bounds(20, 20, 1) == (19, 20)
    assert page_bounds(0, 1, 10) == (0, 0)
