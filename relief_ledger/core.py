"""
Core types for the relief supply ledger.

This module provides the foundational data structures and protocols:
1. Protocols: StoreView for read-only access to region ledgers
2. Immutable data structures: SupplyRecord, AggregateView, TransferLogEntry
3. Exceptions: ReliefLedgerError and domain-specific error types
4. Constants: reserved region names, audit line format

Nothing in this module mutates ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
import re
from typing import (
    Iterator, List, Optional, Protocol, Set, Tuple, runtime_checkable
)

from .ordering import search


# ============================================================================
# CONSTANTS
# ============================================================================

# Region tag carried by records of the consolidated view.
AGGREGATE_REGION = "aggregate"

# Audit line timestamp layout.
AUDIT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Default flat-file names.
DEFAULT_REGISTRY_FILENAME = "registered_cities.txt"
DEFAULT_AGGREGATE_FILENAME = "metro_manila.txt"
DEFAULT_AUDIT_FILENAME = "allocation_log.txt"
DEFAULT_RECORD_EXTENSION = ".txt"

# Raw (item, quantity) pair as read from or written to a backing source.
RawRecord = Tuple[str, int]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ReliefLedgerError(Exception):
    """Base exception for all relief ledger errors."""
    pass


class UnknownRegion(ReliefLedgerError):
    """Raised when a region has not been registered with the store."""
    pass


class MissingSourceData(ReliefLedgerError):
    """Raised when the backing record source for a region does not exist."""
    pass


class MalformedRecord(ReliefLedgerError):
    """Raised when a stored record line is not '<item> <quantity>'."""
    pass


class TransferError(ReliefLedgerError):
    """Base class for reasons a transfer was rejected."""
    pass


class UnknownRecipient(TransferError):
    """The recipient region is not registered."""
    pass


class InvalidQuantity(TransferError):
    """The requested quantity is not a positive integer."""
    pass


class NoEligibleDonor(TransferError):
    """No region other than the recipient holds enough of the item."""
    pass


class InvalidDonorSelection(TransferError):
    """The chosen donor is not among the eligible donors."""
    pass


class InsufficientStock(TransferError):
    """The donor no longer holds enough of the item at execution time."""
    pass


# ============================================================================
# VALIDATION HELPERS
# ============================================================================

_WHITESPACE = re.compile(r"\s")


def is_quantity(value: object) -> bool:
    """Return True for a plain int (bool excluded)."""
    return isinstance(value, int) and not isinstance(value, bool)


def validate_region_name(name: str) -> str:
    """
    Check that a region name can be used as a ledger key and a file stem.

    Raises:
        ValueError: If the name is empty, padded, or spans several lines.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Region name cannot be empty")
    if name != name.strip():
        raise ValueError(f"Region name {name!r} has leading or trailing whitespace")
    if "\n" in name or "\r" in name:
        raise ValueError(f"Region name {name!r} cannot contain line breaks")
    return name


def validate_ledger_region_name(name: str) -> str:
    """
    Check a name that is about to become a stored region.

    Stricter than validate_region_name: AGGREGATE_REGION tags the
    consolidated view and is never a region of its own.

    Raises:
        ValueError: If the name is invalid or reserved.
    """
    validate_region_name(name)
    if name.casefold() == AGGREGATE_REGION.casefold():
        raise ValueError(f"Region name {name!r} is reserved for the consolidated view")
    return name


def validate_item_name(item: str) -> str:
    """Item names are single whitespace-free tokens."""
    if not isinstance(item, str) or not item:
        raise ValueError("Item name cannot be empty")
    if _WHITESPACE.search(item):
        raise ValueError(f"Item name {item!r} cannot contain whitespace")
    return item


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class SupplyRecord:
    """
    Known quantity of one item type in one region.

    In the aggregate view the region is AGGREGATE_REGION and the quantity is
    the sum over every region.

    Attributes:
        region: Owning region name.
        item: Supply item name, a single token (e.g. "canned_goods").
        quantity: Units available, never negative.
    """
    region: str
    item: str
    quantity: int

    def __post_init__(self):
        validate_region_name(self.region)
        validate_item_name(self.item)
        if not is_quantity(self.quantity):
            raise ValueError(
                f"SupplyRecord quantity must be int, got {type(self.quantity).__name__}"
            )
        if self.quantity < 0:
            raise ValueError(f"SupplyRecord quantity cannot be negative, got {self.quantity}")

    def with_quantity(self, quantity: int) -> SupplyRecord:
        """Return a copy holding a different quantity."""
        return SupplyRecord(self.region, self.item, quantity)

    def as_pair(self) -> RawRecord:
        return (self.item, self.quantity)

    def __repr__(self) -> str:
        return f"SupplyRecord({self.region}: {self.item}={self.quantity})"


@dataclass(frozen=True, slots=True)
class AggregateView:
    """
    Consolidated cross-region inventory, one record per item.

    The records are ordered by item name. The view is rebuilt wholesale after
    every mutation and never patched in place, so it has no identity across
    rebuilds; two views compare equal when their records do.
    """
    records: Tuple[SupplyRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[SupplyRecord]:
        return iter(self.records)

    def is_empty(self) -> bool:
        return not self.records

    def items(self) -> List[str]:
        return [r.item for r in self.records]

    def search(self, item: str) -> Optional[int]:
        """Binary search by item name; None when absent."""
        return search(self.records, item)

    def get(self, item: str) -> Optional[SupplyRecord]:
        index = self.search(item)
        return None if index is None else self.records[index]

    def quantity_of(self, item: str) -> int:
        record = self.get(item)
        return record.quantity if record is not None else 0

    def total_quantity(self) -> int:
        return sum(r.quantity for r in self.records)


@dataclass(frozen=True, slots=True)
class TransferLogEntry:
    """
    Immutable audit record of one successful transfer.

    Attributes:
        timestamp: When the transfer was applied.
        donor: Region the quantity was taken from.
        recipient: Region the quantity was given to.
        item: Item moved.
        quantity: Units moved (positive).
    """
    timestamp: datetime
    donor: str
    recipient: str
    item: str
    quantity: int

    def to_line(self) -> str:
        stamp = self.timestamp.strftime(AUDIT_TIMESTAMP_FORMAT)
        return (
            f'{stamp} - Allocated {self.quantity} of "{self.item}" '
            f"from {self.donor} to {self.recipient}"
        )

    def __repr__(self) -> str:
        return (
            f"TransferLogEntry({self.quantity} {self.item}: "
            f"{self.donor}→{self.recipient} @ {self.timestamp})"
        )


_AUDIT_LINE = re.compile(
    r'^(?P<stamp>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}) - Allocated (?P<qty>\d+) '
    r'of "(?P<item>\S+)" from (?P<donor>.+?) to (?P<recipient>.+)$'
)


def parse_audit_line(line: str) -> TransferLogEntry:
    """
    Parse a line written by TransferLogEntry.to_line().

    Region names may contain spaces, so a donor containing " to " cannot be
    told apart from the recipient; the first " to " wins.

    Raises:
        ValueError: If the line does not follow the audit format.
    """
    match = _AUDIT_LINE.match(line.rstrip("\r\n"))
    if match is None:
        raise ValueError(f"Not an allocation audit line: {line!r}")
    return TransferLogEntry(
        timestamp=datetime.strptime(match["stamp"], AUDIT_TIMESTAMP_FORMAT),
        donor=match["donor"],
        recipient=match["recipient"],
        item=match["item"],
        quantity=int(match["qty"]),
    )


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class StoreView(Protocol):
    """
    Read-only interface to the region ledgers.

    The consolidator and the transfer planner only need to enumerate regions
    and read their sorted records. LedgerStore implements this protocol; the
    test suite provides a FakeStoreView.
    """

    def list_region_names(self) -> Set[str]:
        """Return the set of registered region names."""
        ...

    def get_region(self, name: str) -> Tuple[SupplyRecord, ...]:
        """
        Return a region's records ordered by item.

        Raises UnknownRegion if the region is not registered.
        """
        ...

    def get_quantity(self, region: str, item: str) -> int:
        """Return the quantity of an item in a region (0 if absent)."""
        ...
