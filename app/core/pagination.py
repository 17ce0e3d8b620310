"""Offset pagination over a fully materialized, ordered list."""
from __future__ import annotations
from typing import List, Sequence, Tuple, TypeVar

T = TypeVar("T")


def page_bounds(total: int, start_index: int, count: int) -> Tuple[int, int]:
    """Return the half-open slice ``[from, to)`` for a 1-based ``start_index``.

    ``from`` is ``start_index - 1`` (never negative); ``count`` is clamped so
    the window stops at the end of the list. A start past the end gives an
    empty window.
    """
    start = max(start_index - 1, 0)
    if start >= total:
        return total, total
    count = max(count, 0)
    if start + count > total:
        count = total - start
    return start, start + count


def paginate(items: Sequence[T], start_index: int, count: int) -> Tuple[List[T], int]:
    """Slice one page out of ``items``.

    Example:
        >>> page, total = paginate(list(range(1, 21)), start_index=15, count=10)
        >>> page, total
        ([15, 16, 17, 18, 19, 20], 20)

    Returns:
        Tuple of (page items, total number of items)
    """
    total = len(items)
    start, end = page_bounds(total, start_index, count)
    return list(items[start:end]), total
