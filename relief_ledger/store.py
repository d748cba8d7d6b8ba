"""
store.py - Region ledgers and the aggregate they feed

LedgerStore is the only component that mutates inventory state.

Key responsibilities:
    - Implements the StoreView protocol for read-only consumers
    - Keeps every region's records deduplicated by item and sorted by item
    - Rebuilds the aggregate view after every successful mutation
    - Applies transfers all-or-nothing: both regions change or neither does
"""

from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from .core import (
    # Types
    SupplyRecord, AggregateView, RawRecord,
    # Exceptions
    UnknownRegion, InsufficientStock,
    # Helpers
    is_quantity, validate_item_name, validate_ledger_region_name,
)
from .consolidator import rebuild_aggregate
from .ordering import search, sort_region


class LedgerStore:
    """
    Mapping from region name to that region's sorted supply records.

    Sortedness is an invariant of the store, not something readers restore:
    records are sorted once when they change and every read returns the
    stored order. Searching a region therefore never re-sorts.

    Thread Safety:
        Not thread-safe. Each session owns its own store.

    Example:
        store = LedgerStore()
        store.upsert_region("Manila", [("rice", 100), ("water", 50), ("rice", 20)])
        store.get_region("Manila")
        # (SupplyRecord(Manila: rice=120), SupplyRecord(Manila: water=50))
    """

    def __init__(self):
        self._regions: Dict[str, Tuple[SupplyRecord, ...]] = {}
        self._aggregate: AggregateView = AggregateView()

    # ========================================================================
    # StoreView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    def list_region_names(self) -> Set[str]:
        """Return the set of registered region names."""
        return set(self._regions)

    def get_region(self, name: str) -> Tuple[SupplyRecord, ...]:
        """
        Return a region's records, sorted by item.

        Raises:
            UnknownRegion: If the region is not registered
        """
        if name not in self._regions:
            raise UnknownRegion(f"Region {name} not registered")
        return self._regions[name]

    def get_quantity(self, region: str, item: str) -> int:
        """
        Return how much of an item a region holds.

        Returns 0 if the region has no record for the item.

        Raises:
            UnknownRegion: If the region is not registered
        """
        record = self.search_region(region, item)
        return record.quantity if record is not None else 0

    # ========================================================================
    # QUERIES
    # ========================================================================

    def has_region(self, name: str) -> bool:
        return name in self._regions

    def search_region(self, name: str, item: str) -> Optional[SupplyRecord]:
        """Binary search a region's (already sorted) records for an item."""
        records = self.get_region(name)
        index = search(records, item)
        return None if index is None else records[index]

    def records_as_pairs(self, name: str) -> List[RawRecord]:
        """Region records as (item, quantity) pairs in stored order."""
        return [r.as_pair() for r in self.get_region(name)]

    @property
    def aggregate(self) -> AggregateView:
        """Consolidated view as of the last mutation."""
        return self._aggregate

    def total_quantity(self) -> int:
        """Sum of every quantity in every region."""
        return sum(r.quantity for records in self._regions.values() for r in records)

    def __len__(self) -> int:
        return len(self._regions)

    def __contains__(self, name: object) -> bool:
        return name in self._regions

    def __repr__(self) -> str:
        return f"LedgerStore({len(self._regions)} regions, {len(self._aggregate)} items)"

    # ========================================================================
    # MUTATION
    # ========================================================================

    def register_region(self, name: str) -> str:
        """
        Register a region with no records.

        Returns:
            The registered name

        Raises:
            ValueError: If the region is already registered or the name is
                        invalid or reserved
        """
        validate_ledger_region_name(name)
        if name in self._regions:
            raise ValueError(f"Region {name} already registered")
        self._regions[name] = ()
        self._refresh_aggregate()
        return name

    def upsert_region(self, name: str, raw_records: Iterable[RawRecord]) -> Tuple[SupplyRecord, ...]:
        """
        Replace a region's records with a deduplicated, sorted copy of raw_records.

        Duplicate items are merged by summing their quantities. The region is
        registered if it was not already. Loading [("rice", 100), ("rice", 50)]
        stores exactly one record, rice=150.

        Args:
            name: Region name
            raw_records: (item, quantity) pairs, possibly with repeated items

        Returns:
            The region's stored records

        Raises:
            ValueError: If any pair has an invalid item or a negative or
                        non-integer quantity. The store is left unchanged.
        """
        validate_ledger_region_name(name)
        merged = self._merge_duplicates(raw_records)
        records = sort_region(
            SupplyRecord(name, item, quantity) for item, quantity in merged.items()
        )
        self._regions[name] = tuple(records)
        self._refresh_aggregate()
        return self._regions[name]

    def apply_transfer(
        self,
        donor: str,
        recipient: str,
        item: str,
        quantity: int,
        before_commit: Optional[Callable[[], None]] = None,
    ) -> None:
        """
        Move quantity of an item from donor to recipient.

        Stock is re-checked against the donor's current records before anything
        changes. Both regions are re-sorted and the aggregate rebuilt.

        before_commit runs once every check has passed, just before the new
        records are installed. If it raises, the exception propagates and the
        store is left exactly as it was.

        Raises:
            UnknownRegion: If either region is not registered
            ValueError: If donor equals recipient or quantity is not a positive int
            InsufficientStock: If the donor holds less than quantity
        """
        donor_records = self.get_region(donor)
        recipient_records = self.get_region(recipient)
        if donor == recipient:
            raise ValueError("Donor and recipient must be different")
        if not is_quantity(quantity) or quantity <= 0:
            raise ValueError(f"Transfer quantity must be a positive int, got {quantity!r}")

        available = self.get_quantity(donor, item)
        if available < quantity:
            raise InsufficientStock(
                f"{donor} holds {available} of {item}, cannot give {quantity}"
            )

        new_donor = [
            r.with_quantity(r.quantity - quantity) if r.item == item else r
            for r in donor_records
        ]
        if self.search_region(recipient, item) is not None:
            new_recipient = [
                r.with_quantity(r.quantity + quantity) if r.item == item else r
                for r in recipient_records
            ]
        else:
            new_recipient = list(recipient_records)
            new_recipient.append(SupplyRecord(recipient, item, quantity))

        donor_after = tuple(sort_region(new_donor))
        recipient_after = tuple(sort_region(new_recipient))
        if before_commit is not None:
            before_commit()

        # Everything above may raise; nothing below does.
        self._regions[donor] = donor_after
        self._regions[recipient] = recipient_after
        self._refresh_aggregate()

    # ========================================================================
    # INTERNALS
    # ========================================================================

    @staticmethod
    def _merge_duplicates(raw_records: Iterable[RawRecord]) -> Dict[str, int]:
        merged: Dict[str, int] = {}
        for item, quantity in raw_records:
            validate_item_name(item)
            if not is_quantity(quantity):
                raise ValueError(
                    f"Quantity for {item} must be int, got {type(quantity).__name__}"
                )
            if quantity < 0:
                raise ValueError(f"Quantity for {item} cannot be negative, got {quantity}")
            merged[item] = merged.get(item, 0) + quantity
        return merged

    def _refresh_aggregate(self) -> None:
        self._aggregate = rebuild_aggregate(self)
