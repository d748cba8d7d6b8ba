"""
session.py - A working session over the region ledgers

ReliefSession owns a LedgerStore and a PersistenceBridge and keeps the two in
step: every change to the store is written back (region records, region
registry, consolidated view) and every applied transfer is appended to the
allocation log.

Execution order for allocate():
1. Plan: validate recipient and quantity, find eligible donors
2. Execute with the caller's donor choice (store re-checks stock)
3. Append the audit entry (a failing write leaves the store untouched)
4. Install the new records, then save both regions and the consolidated view
"""

from __future__ import annotations
from typing import Dict, Iterator, List, Optional, Tuple

from .core import (
    SupplyRecord, AggregateView, TransferLogEntry,
    ReliefLedgerError, TransferError, parse_audit_line,
)
from .persistence import PersistenceBridge
from .store import LedgerStore
from .transfer import (
    Clock, TransferPlan, TransferResult,
    plan_transfer, execute_transfer,
)


class ReliefSession:
    """
    Single-actor session: load regions, allocate supplies, query inventory.

    Example:
        session = ReliefSession(FlatFilePersistence("data"))
        session.load_region("Manila")
        session.load_region("Pasig")
        plan = session.eligible_donors("Manila", "rice", 30)
        result = session.allocate("Manila", "rice", 30, donor=plan.donor_names()[0])
    """

    def __init__(
        self,
        persistence: PersistenceBridge,
        store: Optional[LedgerStore] = None,
        verbose: bool = True,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            persistence: Where region records and the allocation log live
            store: Existing store to operate on (default: a new empty store)
            verbose: Print a status line for each load and allocation
            clock: Timestamp source for log entries (default: datetime.now)
        """
        self.persistence = persistence
        self.store = store if store is not None else LedgerStore()
        self.verbose = verbose
        self.clock = clock
        self.skipped_regions: Dict[str, Exception] = {}

    # ========================================================================
    # LOADING
    # ========================================================================

    def load_region(self, name: str) -> Tuple[SupplyRecord, ...]:
        """
        Load a region from its backing source, merging duplicate items.

        Replaces the region's records if it was already loaded.

        Raises:
            MissingSourceData: If the region has no backing source
            MalformedRecord: If a stored line cannot be parsed
        """
        raw = self.persistence.load_records(name)
        records = self.store.upsert_region(name, raw)
        self._save_registry()
        self._save_aggregate()
        if self.verbose:
            print(f"✓ Loaded {name}: {len(records)} items")
        return records

    def load_known_regions(self) -> List[str]:
        """
        Load every region listed in the persisted registry.

        A region that cannot be loaded is skipped and recorded in
        skipped_regions with its error. The remaining regions still load.

        Returns:
            Names of the regions loaded
        """
        loaded = []
        self.skipped_regions = {}
        for name in self.persistence.list_known_region_names():
            try:
                self.load_region(name)
            except (ReliefLedgerError, ValueError) as e:
                self.skipped_regions[name] = e
                if self.verbose:
                    print(f"✗ Skipped {name}: {e}")
                continue
            loaded.append(name)
        return loaded

    def register_region(self, name: str) -> str:
        """
        Register a region with no stock and persist it.

        The empty record file is written before the store changes, so a name
        the bridge refuses never reaches the store.

        Raises:
            ValueError: If the region is already registered, or the name is
                        invalid, reserved or clashes with a bridge file
        """
        if name in self.store:
            raise ValueError(f"Region {name} already registered")
        self.persistence.save_records(name, [])
        self.store.register_region(name)
        self._save_registry()
        if self.verbose:
            print(f"✓ Registered {name}")
        return name

    # ========================================================================
    # ALLOCATION
    # ========================================================================

    def eligible_donors(self, recipient: str, item: str, quantity: int) -> TransferPlan:
        """
        Validate a request and list the regions that can supply it.

        Raises:
            UnknownRecipient, InvalidQuantity, NoEligibleDonor
        """
        return plan_transfer(self.store, recipient, item, quantity)

    def allocate(
        self,
        recipient: str,
        item: str,
        quantity: int,
        donor: Optional[str],
        plan: Optional[TransferPlan] = None,
    ) -> TransferResult:
        """
        Move quantity of item from donor to recipient.

        Args:
            recipient: Region receiving the supplies
            item: Item to move
            quantity: Units to move
            donor: Region chosen by the caller from the eligible donors
            plan: A plan from eligible_donors() to execute instead of planning
                  afresh. It must have been made for the same recipient,
                  item and quantity. Its donor snapshot may be stale, in
                  which case the transfer is rejected with InsufficientStock

        Returns:
            TransferResult (APPLIED or REJECTED with the reason)

        Raises:
            ValueError: If plan was made for a different request
            OSError: If the allocation log or a region file cannot be
                     written. When the log write fails nothing has changed.
        """
        if plan is not None and (plan.recipient, plan.item, plan.quantity) != (
            recipient, item, quantity
        ):
            raise ValueError(
                f"Plan is for {plan.quantity} of {plan.item} to {plan.recipient}, "
                f"not {quantity!r} of {item} to {recipient}"
            )
        if plan is None:
            try:
                plan = plan_transfer(self.store, recipient, item, quantity)
            except TransferError as e:
                return self._report(TransferResult.rejected(e))

        result = execute_transfer(
            self.store, plan, donor,
            audit=self.persistence.append_audit_entry,
            clock=self.clock,
        )
        if result.ok:
            for region in (result.entry.donor, result.entry.recipient):
                self.persistence.save_records(region, self.store.records_as_pairs(region))
            self._save_aggregate()
        return self._report(result)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def region(self, name: str) -> Tuple[SupplyRecord, ...]:
        """Sorted records of a region. Raises UnknownRegion."""
        return self.store.get_region(name)

    @property
    def aggregate(self) -> AggregateView:
        return self.store.aggregate

    def region_names(self) -> List[str]:
        return sorted(self.store.list_region_names())

    def search_region(self, name: str, item: str) -> Optional[SupplyRecord]:
        """Binary search one region. Raises UnknownRegion."""
        return self.store.search_region(name, item)

    def search_aggregate(self, item: str) -> Optional[SupplyRecord]:
        """Binary search the consolidated view."""
        return self.store.aggregate.get(item)

    def history(self) -> Iterator[str]:
        """Allocation log lines, oldest first."""
        return self.persistence.read_audit_log()

    def history_entries(self) -> List[TransferLogEntry]:
        """Allocation log parsed into entries."""
        return [parse_audit_line(line) for line in self.history()]

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _save_registry(self) -> None:
        self.persistence.save_region_names(self.store.list_region_names())

    def _save_aggregate(self) -> None:
        self.persistence.save_aggregate(r.as_pair() for r in self.store.aggregate)

    def _report(self, result: TransferResult) -> TransferResult:
        if self.verbose:
            if result.ok:
                e = result.entry
                print(f'✓ Allocated {e.quantity} of "{e.item}" from {e.donor} to {e.recipient}')
            else:
                print(f"✗ REJECTED: {type(result.error).__name__}: {result.error}")
        return result

    def __repr__(self) -> str:
        return f"ReliefSession({self.store!r}, {self.persistence!r})"
