"""
transfer.py - Inter-region allocation protocol

A transfer moves a fixed quantity of one item from a donor region to a
recipient region. It runs in two phases, mirroring intent vs fact:

1. plan_transfer() validates the request and snapshots the eligible donors.
   Checks, in order:
     - recipient is registered             -> UnknownRecipient
     - quantity is a positive int          -> InvalidQuantity
     - some other region holds >= quantity -> NoEligibleDonor
2. execute_transfer() applies the plan with a donor chosen by the caller.
   Checks, in order:
     - donor is one of the plan's donors   -> InvalidDonorSelection
     - donor still holds >= quantity       -> InsufficientStock
   then appends the audit entry and has the store install both regions.

transfer() runs both phases in one call. Rejections are returned as a
TransferResult carrying the specific error; nothing is mutated or logged
when a transfer is rejected.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .core import (
    StoreView, TransferLogEntry,
    TransferError, UnknownRecipient, InvalidQuantity, NoEligibleDonor,
    InvalidDonorSelection,
    is_quantity,
)
from .store import LedgerStore


# Receives one rendered audit line per applied transfer.
AuditSink = Callable[[str], None]

# Returns the timestamp stamped on a log entry.
Clock = Callable[[], datetime]


class TransferStatus(Enum):
    """
    Outcome of a transfer attempt.

    APPLIED: Both regions were updated and the audit entry appended.
    REJECTED: A precondition failed; no region changed and nothing was logged.
    """
    APPLIED = "applied"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class TransferResult:
    """
    Result of transfer() / execute_transfer().

    Attributes:
        status: APPLIED or REJECTED
        error: The specific TransferError when rejected, else None
        entry: The appended log entry when applied, else None
    """
    status: TransferStatus
    error: Optional[TransferError] = None
    entry: Optional[TransferLogEntry] = None

    @classmethod
    def applied(cls, entry: TransferLogEntry) -> TransferResult:
        return cls(TransferStatus.APPLIED, entry=entry)

    @classmethod
    def rejected(cls, error: TransferError) -> TransferResult:
        return cls(TransferStatus.REJECTED, error=error)

    @property
    def ok(self) -> bool:
        return self.status is TransferStatus.APPLIED

    def raise_for_error(self) -> None:
        """Raise the carried error if the transfer was rejected."""
        if self.error is not None:
            raise self.error

    def __repr__(self) -> str:
        if self.ok:
            return f"TransferResult(APPLIED, {self.entry!r})"
        return f"TransferResult(REJECTED, {type(self.error).__name__}: {self.error})"


@dataclass(frozen=True, slots=True)
class DonorOption:
    """A region able to supply the requested quantity, with its stock at planning time."""
    region: str
    available: int


@dataclass(frozen=True, slots=True)
class TransferPlan:
    """
    A validated transfer request awaiting a donor choice.

    The donor list is a snapshot. Executing the plan re-checks the chosen
    donor's stock, so a plan made before another transfer drained that donor
    is rejected with InsufficientStock rather than overdrawing it.

    Attributes:
        recipient: Region receiving the item
        item: Item requested
        quantity: Units requested
        donors: Eligible donors ordered by region name
    """
    recipient: str
    item: str
    quantity: int
    donors: Tuple[DonorOption, ...]

    def donor_names(self) -> List[str]:
        return [d.region for d in self.donors]

    def is_eligible(self, region: str) -> bool:
        return any(d.region == region for d in self.donors)


# ============================================================================
# PLANNING
# ============================================================================

def find_eligible_donors(
    view: StoreView,
    recipient: str,
    item: str,
    quantity: int,
) -> Tuple[DonorOption, ...]:
    """
    Scan every region except the recipient for one holding >= quantity of item.

    Returns:
        Eligible donors ordered by region name (possibly empty)
    """
    donors = []
    for region in sorted(view.list_region_names()):
        if region == recipient:
            continue
        available = view.get_quantity(region, item)
        if available >= quantity:
            donors.append(DonorOption(region, available))
    return tuple(donors)


def plan_transfer(view: StoreView, recipient: str, item: str, quantity: int) -> TransferPlan:
    """
    Validate a request and list the regions that could satisfy it.

    Raises:
        UnknownRecipient: recipient is not registered
        InvalidQuantity: quantity is not a positive int
        NoEligibleDonor: no other region holds enough of the item
    """
    if recipient not in view.list_region_names():
        raise UnknownRecipient(f"Region {recipient} is not registered")
    if not is_quantity(quantity) or quantity <= 0:
        raise InvalidQuantity(f"Quantity must be a positive integer, got {quantity!r}")

    donors = find_eligible_donors(view, recipient, item, quantity)
    if not donors:
        raise NoEligibleDonor(f'No donor region has {quantity} of "{item}" available')
    return TransferPlan(recipient, item, quantity, donors)


# ============================================================================
# EXECUTION
# ============================================================================

def execute_transfer(
    store: LedgerStore,
    plan: TransferPlan,
    donor: Optional[str],
    audit: Optional[AuditSink] = None,
    clock: Optional[Clock] = None,
) -> TransferResult:
    """
    Apply a plan using the chosen donor.

    Both regions are updated (and re-sorted, and the aggregate rebuilt) by
    LedgerStore.apply_transfer, which re-validates the donor's stock before
    changing anything. The audit entry is appended once the store has
    accepted the transfer and before its new records are installed, so a
    sink that raises leaves both the store and the log unchanged.

    Args:
        store: Store holding both regions
        plan: Output of plan_transfer()
        donor: Region chosen from plan.donors
        audit: Optional sink for the rendered audit line. Exceptions it
               raises propagate to the caller
        clock: Timestamp source for the log entry (default: datetime.now)

    Returns:
        TransferResult with the log entry, or with the rejection reason
    """
    if donor is None or not plan.is_eligible(donor):
        eligible = ", ".join(plan.donor_names())
        return TransferResult.rejected(InvalidDonorSelection(
            f"{donor} is not an eligible donor for {plan.item} (eligible: {eligible})"
        ))

    entry = TransferLogEntry(
        timestamp=(clock or datetime.now)(),
        donor=donor,
        recipient=plan.recipient,
        item=plan.item,
        quantity=plan.quantity,
    )

    def record() -> None:
        if audit is not None:
            audit(format_audit_entry(entry))

    try:
        store.apply_transfer(
            donor, plan.recipient, plan.item, plan.quantity,
            before_commit=record,
        )
    except TransferError as e:
        return TransferResult.rejected(e)
    return TransferResult.applied(entry)


def transfer(
    store: LedgerStore,
    donor: Optional[str],
    recipient: str,
    item: str,
    quantity: int,
    audit: Optional[AuditSink] = None,
    clock: Optional[Clock] = None,
) -> TransferResult:
    """
    Validate and execute a transfer in one call.

    Example:
        store.upsert_region("A", [("rice", 100)])
        store.upsert_region("B", [("rice", 20)])
        result = transfer(store, "A", "B", "rice", 30)
        # result.ok is True; A rice=70, B rice=50, aggregate rice=120
    """
    try:
        plan = plan_transfer(store, recipient, item, quantity)
    except TransferError as e:
        return TransferResult.rejected(e)
    return execute_transfer(store, plan, donor, audit=audit, clock=clock)


def format_audit_entry(entry: TransferLogEntry) -> str:
    """Render '<timestamp> - Allocated <qty> of "<item>" from <donor> to <recipient>'."""
    return entry.to_line()
