"""
test_consolidator.py - Unit tests for the aggregate view

Tests:
- consolidate: per-item sums across regions
- rebuild_aggregate: one record per item, sorted, tagged, idempotent
"""

from relief_ledger import (
    AGGREGATE_REGION, AggregateView,
    consolidate, rebuild_aggregate, is_sorted,
)

from tests.fake_store import FakeStoreView


class TestConsolidate:

    def test_sums_per_item(self):
        view = FakeStoreView({
            "A": [("rice", 100), ("water", 5)],
            "B": [("rice", 20)],
            "C": [("water", 1), ("tents", 2)],
        })
        assert consolidate(view) == {"rice": 120, "water": 6, "tents": 2}

    def test_no_regions(self):
        assert consolidate(FakeStoreView({})) == {}

    def test_duplicate_rows_in_a_view_are_summed(self):
        # A read-only view is not required to be deduplicated.
        view = FakeStoreView({"A": [("rice", 1), ("rice", 2)]})
        assert consolidate(view) == {"rice": 3}


class TestRebuildAggregate:

    def test_one_record_per_item_sorted(self):
        view = FakeStoreView({
            "A": [("water", 5), ("rice", 100)],
            "B": [("biscuits", 3), ("rice", 20)],
        })
        aggregate = rebuild_aggregate(view)
        assert aggregate.items() == ["biscuits", "rice", "water"]
        assert [r.quantity for r in aggregate] == [3, 120, 5]
        assert is_sorted(aggregate.records)

    def test_records_tagged_aggregate(self):
        aggregate = rebuild_aggregate(FakeStoreView({"A": [("rice", 1)]}))
        assert all(r.region == AGGREGATE_REGION for r in aggregate)

    def test_empty_view(self):
        assert rebuild_aggregate(FakeStoreView({})) == AggregateView()

    def test_zero_quantities_kept(self):
        aggregate = rebuild_aggregate(FakeStoreView({"A": [("rice", 0)]}))
        assert aggregate.quantity_of("rice") == 0
        assert aggregate.items() == ["rice"]

    def test_idempotent(self, sample_store):
        first = rebuild_aggregate(sample_store)
        second = rebuild_aggregate(sample_store)
        assert first == second
        assert first.records == second.records

    def test_matches_store_aggregate(self, sample_store):
        assert rebuild_aggregate(sample_store) == sample_store.aggregate

    def test_sample_totals(self, sample_store):
        # rice: 250 + 300 + 280 + 260 + 270 + 290 + 300
        assert sample_store.aggregate.quantity_of("rice") == 1950
        assert len(sample_store.aggregate) == 10
