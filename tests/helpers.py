"""
helpers.py - Shared helpers for relief ledger tests

- A fixed clock for deterministic audit lines
- Store builders and snapshot helpers for all-or-nothing checks
"""

from datetime import datetime
from typing import Dict, List, Tuple

from relief_ledger import LedgerStore


FIXED_TIME = datetime(2025, 1, 15, 9, 30, 0)


def fixed_clock() -> datetime:
    return FIXED_TIME


def snapshot(store: LedgerStore) -> Dict[str, Tuple]:
    """Capture every region's records plus the aggregate for later comparison."""
    state = {name: store.get_region(name) for name in store.list_region_names()}
    state["__aggregate__"] = store.aggregate.records
    return state


def region_dict(store: LedgerStore, name: str) -> Dict[str, int]:
    """Region records as {item: quantity}."""
    return {r.item: r.quantity for r in store.get_region(name)}


def build_store(regions: Dict[str, List[Tuple[str, int]]]) -> LedgerStore:
    store = LedgerStore()
    for name, records in regions.items():
        store.upsert_region(name, records)
    return store
