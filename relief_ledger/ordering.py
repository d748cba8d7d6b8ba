"""
ordering.py - Sort and search routines for supply records

Two sorting strategies keyed on the record's item name:
- PARTITION_EXCHANGE: in-place quicksort, used for per-region ledgers which
  are small and rewritten on every mutation.
- MERGE: stable merge sort, used for the aggregate view which is larger and
  rebuilt from scratch after every mutation.

Item names compare ordinally (code point order, which matches UTF-8 byte
order).

search() is a plain binary search. Its input MUST already be sorted by item;
it never sorts on the caller's behalf and the result on unsorted input is
undefined.
"""

from __future__ import annotations
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

if TYPE_CHECKING:
    from .core import SupplyRecord


class SortStrategy(Enum):
    """Algorithm used to order a sequence of records by item."""
    PARTITION_EXCHANGE = "partition_exchange"
    MERGE = "merge"


# ============================================================================
# PARTITION-EXCHANGE SORT
# ============================================================================

def _partition(arr: List[SupplyRecord], low: int, high: int) -> int:
    # Lomuto scheme, last element as pivot.
    pivot = arr[high].item
    i = low - 1
    for j in range(low, high):
        if arr[j].item < pivot:
            i += 1
            arr[i], arr[j] = arr[j], arr[i]
    arr[i + 1], arr[high] = arr[high], arr[i + 1]
    return i + 1


def _quicksort(arr: List[SupplyRecord], low: int, high: int) -> None:
    # Recurse into the smaller side, loop over the larger: depth stays O(log n).
    while low < high:
        p = _partition(arr, low, high)
        if p - low < high - p:
            _quicksort(arr, low, p - 1)
            low = p + 1
        else:
            _quicksort(arr, p + 1, high)
            high = p - 1


def quicksort(records: List[SupplyRecord]) -> List[SupplyRecord]:
    """
    Sort a list of records by item in place.

    Relative order of records with equal items is undefined.

    Args:
        records: Mutable list to sort

    Returns:
        The same list object, now sorted
    """
    if len(records) > 1:
        _quicksort(records, 0, len(records) - 1)
    return records


# ============================================================================
# MERGE SORT
# ============================================================================

def _merge(left: List[SupplyRecord], right: List[SupplyRecord]) -> List[SupplyRecord]:
    merged: List[SupplyRecord] = []
    i = j = 0
    while i < len(left) and j < len(right):
        # Take from the right only when strictly smaller: keeps ties stable.
        if right[j].item < left[i].item:
            merged.append(right[j])
            j += 1
        else:
            merged.append(left[i])
            i += 1
    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged


def merge_sort(records: Iterable[SupplyRecord]) -> List[SupplyRecord]:
    """
    Return a new list of the records sorted by item.

    Stable: records with equal items keep their original relative order.
    """
    items = list(records)
    if len(items) <= 1:
        return items
    mid = len(items) // 2
    return _merge(merge_sort(items[:mid]), merge_sort(items[mid:]))


# ============================================================================
# STRATEGY DISPATCH
# ============================================================================

def sort_records(
    records: Iterable[SupplyRecord],
    strategy: SortStrategy = SortStrategy.PARTITION_EXCHANGE,
) -> List[SupplyRecord]:
    """
    Sort records by item with the given strategy.

    The input is never modified; a new list is returned.
    """
    if strategy is SortStrategy.PARTITION_EXCHANGE:
        return quicksort(list(records))
    if strategy is SortStrategy.MERGE:
        return merge_sort(records)
    raise ValueError(f"Unknown sort strategy: {strategy!r}")


def sort_region(records: Iterable[SupplyRecord]) -> List[SupplyRecord]:
    """Order a single region's records (partition-exchange)."""
    return sort_records(records, SortStrategy.PARTITION_EXCHANGE)


def sort_aggregate(records: Iterable[SupplyRecord]) -> List[SupplyRecord]:
    """Order the aggregate view's records (stable merge)."""
    return sort_records(records, SortStrategy.MERGE)


def is_sorted(records: Sequence[SupplyRecord]) -> bool:
    """Return True if records are non-decreasing by item."""
    return all(records[k].item <= records[k + 1].item for k in range(len(records) - 1))


# ============================================================================
# SEARCH
# ============================================================================

def search(records: Sequence[SupplyRecord], key: str) -> Optional[int]:
    """
    Binary search for an item name.

    PRECONDITION: records are sorted by item (callers own this; the store and
    the aggregate view keep their sequences sorted on every mutation).

    Args:
        records: Sequence sorted by item
        key: Item name to find

    Returns:
        Index of a record whose item equals key, or None if not present
    """
    left, right = 0, len(records) - 1
    while left <= right:
        mid = left + (right - left) // 2
        item = records[mid].item
        if item == key:
            return mid
        if item < key:
            left = mid + 1
        else:
            right = mid - 1
    return None
