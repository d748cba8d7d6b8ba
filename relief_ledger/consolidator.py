"""
consolidator.py - Aggregate view across all regions

The aggregate is recomputed from scratch on every call rather than patched
with deltas. Cost is O(total records) per mutation and the view can never lag
behind the last applied mutation.
"""

from __future__ import annotations
from typing import Dict

from .core import AGGREGATE_REGION, AggregateView, StoreView, SupplyRecord
from .ordering import sort_aggregate


def consolidate(view: StoreView) -> Dict[str, int]:
    """
    Sum quantities per item over every region.

    Regions are visited in name order so the accumulation order is fixed;
    the result does not depend on it.
    """
    totals: Dict[str, int] = {}
    for region in sorted(view.list_region_names()):
        for record in view.get_region(region):
            totals[record.item] = totals.get(record.item, 0) + record.quantity
    return totals


def rebuild_aggregate(view: StoreView) -> AggregateView:
    """
    Build the consolidated view: one record per item, merge sorted.

    Idempotent: two calls with no mutation in between return equal views.

    Args:
        view: Read-only access to the region ledgers

    Returns:
        A new AggregateView
    """
    records = [
        SupplyRecord(AGGREGATE_REGION, item, quantity)
        for item, quantity in consolidate(view).items()
    ]
    return AggregateView(tuple(sort_aggregate(records)))
