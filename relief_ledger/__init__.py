"""
relief_ledger - Relief Supply Ledger

Per-region inventory ledgers for relief supplies, a consolidated cross-region
view, and validated inter-region transfers with an append-only audit log.

Usage:
    from relief_ledger import LedgerStore, transfer

    store = LedgerStore()
    store.upsert_region("A", [("rice", 100)])
    store.upsert_region("B", [("rice", 20)])

    result = transfer(store, "A", "B", "rice", 30)
    assert result.ok
    store.aggregate.quantity_of("rice")   # 120

With persistence:
    from relief_ledger import ReliefSession, FlatFilePersistence

    session = ReliefSession(FlatFilePersistence("data"))
    session.load_region("Manila")
"""

# Core types
from .core import (
    SupplyRecord,
    AggregateView,
    TransferLogEntry,
    StoreView,
    RawRecord,
    parse_audit_line,
    validate_ledger_region_name,
    ReliefLedgerError,
    UnknownRegion,
    MissingSourceData,
    MalformedRecord,
    TransferError,
    UnknownRecipient,
    InvalidQuantity,
    NoEligibleDonor,
    InvalidDonorSelection,
    InsufficientStock,
    AGGREGATE_REGION,
    AUDIT_TIMESTAMP_FORMAT,
)

# Ordering
from .ordering import (
    SortStrategy,
    quicksort,
    merge_sort,
    sort_records,
    sort_region,
    sort_aggregate,
    is_sorted,
    search,
)

# Store and consolidation
from .store import LedgerStore
from .consolidator import consolidate, rebuild_aggregate

# Transfers
from .transfer import (
    TransferStatus,
    TransferResult,
    TransferPlan,
    DonorOption,
    find_eligible_donors,
    plan_transfer,
    execute_transfer,
    transfer,
    format_audit_entry,
)

# Persistence
from .persistence import (
    PersistenceBridge,
    FlatFilePersistence,
    InMemoryPersistence,
    parse_record_line,
    parse_records,
    format_record_line,
    is_quantity_text,
)

# Session
from .session import ReliefSession
from .samples import SAMPLE_REGIONS, initialize_sample_files

__all__ = [
    # Core
    'SupplyRecord', 'AggregateView', 'TransferLogEntry', 'StoreView', 'RawRecord',
    'parse_audit_line', 'validate_ledger_region_name',
    'ReliefLedgerError', 'UnknownRegion', 'MissingSourceData', 'MalformedRecord',
    'TransferError', 'UnknownRecipient', 'InvalidQuantity', 'NoEligibleDonor',
    'InvalidDonorSelection', 'InsufficientStock',
    'AGGREGATE_REGION', 'AUDIT_TIMESTAMP_FORMAT',
    # Ordering
    'SortStrategy', 'quicksort', 'merge_sort', 'sort_records', 'sort_region',
    'sort_aggregate', 'is_sorted', 'search',
    # Store
    'LedgerStore', 'consolidate', 'rebuild_aggregate',
    # Transfers
    'TransferStatus', 'TransferResult', 'TransferPlan', 'DonorOption',
    'find_eligible_donors', 'plan_transfer', 'execute_transfer', 'transfer',
    'format_audit_entry',
    # Persistence
    'PersistenceBridge', 'FlatFilePersistence', 'InMemoryPersistence',
    'parse_record_line', 'parse_records', 'format_record_line', 'is_quantity_text',
    # Session
    'ReliefSession', 'SAMPLE_REGIONS', 'initialize_sample_files',
]

__version__ = '1.0.0'
