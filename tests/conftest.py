"""
conftest.py - Shared pytest fixtures for relief ledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Stores (empty, two-region, sample Metro Manila regions)
- Sessions over in-memory and flat-file persistence
"""

import pytest

from relief_ledger import (
    LedgerStore,
    ReliefSession,
    InMemoryPersistence,
    FlatFilePersistence,
    SAMPLE_REGIONS,
)

from tests.helpers import build_store, fixed_clock


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def empty_store():
    """Fresh store with no regions."""
    return LedgerStore()


@pytest.fixture
def two_region_store():
    """A holds 100 rice, B holds 20 rice."""
    return build_store({"A": [("rice", 100)], "B": [("rice", 20)]})


@pytest.fixture
def sample_store():
    """All seven sample regions loaded."""
    return build_store(SAMPLE_REGIONS)


# =============================================================================
# SESSION FIXTURES
# =============================================================================

@pytest.fixture
def memory_bridge():
    """In-memory persistence seeded with three small regions."""
    return InMemoryPersistence({
        "A": [("rice", 100), ("water", 40)],
        "B": [("rice", 20), ("blankets", 5)],
        "C": [("water", 60), ("rice", 10), ("water", 15)],
    })


@pytest.fixture
def memory_session(memory_bridge):
    """Quiet session over memory_bridge with regions A, B and C loaded."""
    session = ReliefSession(memory_bridge, verbose=False, clock=fixed_clock)
    for name in ("A", "B", "C"):
        session.load_region(name)
    return session


@pytest.fixture
def file_bridge(tmp_path):
    """Flat-file persistence rooted in a temporary directory."""
    return FlatFilePersistence(tmp_path)
