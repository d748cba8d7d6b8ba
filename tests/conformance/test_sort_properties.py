"""
Ordering Conformance Tests

INVARIANT: Every stored region and the aggregate are sorted by item in
ordinal (code point) order, and binary search agrees with a linear scan.

Both sort routines must agree with Python's sorted() on item order for
arbitrary inputs; merge sort must additionally preserve input order on ties.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from relief_ledger import (
    LedgerStore, SupplyRecord, SortStrategy,
    quicksort, merge_sort, sort_records, is_sorted, search, transfer,
)

from .strategies import item_names, raw_records, region_datasets, transfer_requests


records_lists = st.lists(
    st.builds(SupplyRecord, st.just("A"), item_names, st.integers(min_value=0, max_value=1000)),
    max_size=60,
)


class TestSortRoutines:

    @given(records_lists)
    def test_quicksort_matches_sorted(self, records):
        expected = [r.item for r in sorted(records, key=lambda r: r.item)]
        assert [r.item for r in quicksort(list(records))] == expected

    @given(records_lists)
    def test_quicksort_is_a_permutation(self, records):
        result = quicksort(list(records))
        assert sorted(result, key=repr) == sorted(records, key=repr)

    @given(records_lists)
    def test_merge_sort_is_stable(self, records):
        # sorted() is stable, so it is the reference for tie order.
        assert merge_sort(records) == sorted(records, key=lambda r: r.item)

    @given(records_lists, st.sampled_from(list(SortStrategy)))
    def test_every_strategy_sorts(self, records, strategy):
        assert is_sorted(sort_records(records, strategy))


class TestSearch:

    @given(records_lists, item_names)
    def test_search_agrees_with_scan(self, records, key):
        ordered = merge_sort(records)
        index = search(ordered, key)
        present = any(r.item == key for r in ordered)
        if present:
            assert index is not None
            assert ordered[index].item == key
        else:
            assert index is None


class TestStoreOrdering:

    @given(region_datasets())
    def test_loaded_regions_sorted_and_unique(self, regions):
        store = LedgerStore()
        for name, raw in regions.items():
            store.upsert_region(name, raw)
        for name in store.list_region_names():
            records = store.get_region(name)
            items = [r.item for r in records]
            assert is_sorted(records)
            assert len(items) == len(set(items))
        assert is_sorted(store.aggregate.records)

    @given(region_datasets(), transfer_requests())
    @settings(max_examples=50)
    def test_order_holds_after_transfers(self, regions, requests):
        store = LedgerStore()
        for name, raw in regions.items():
            store.upsert_region(name, raw)
        for donor, recipient, item, quantity in requests:
            transfer(store, donor, recipient, item, quantity)
            for name in store.list_region_names():
                assert is_sorted(store.get_region(name))
            assert is_sorted(store.aggregate.records)

    @given(raw_records())
    def test_every_stored_item_is_findable(self, raw):
        store = LedgerStore()
        store.upsert_region("A", raw)
        for item, _ in raw:
            assert store.search_region("A", item) is not None
