#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Relief Ledger Step by Step

This is a walkthrough of how relief supplies are tracked and moved between
regions. Each step builds on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:   Foundation    - Region files, loading with merge, the aggregate
  4-6:   Allocation    - Eligible donors, a transfer, rejections
  7-8:   Guarantees    - Stale plans, conservation across many transfers
  9:     Restart       - The allocation log and files survive the session

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing

All files are written to a temporary directory that is removed at the end.
"""

from dataclasses import dataclass
from pathlib import Path
import random
import sys
import tempfile

from relief_ledger import (
    # Session and storage
    ReliefSession, FlatFilePersistence,
    # Sample data
    SAMPLE_REGIONS, initialize_sample_files,
    # Transfers
    transfer, TransferStatus,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    # Step 4-5 allocation
    recipient: str = "Mandaluyong"
    item: str = "fuel"
    quantity: int = 120

    # Step 8 random transfers
    random_transfers: int = 500
    random_seed: int = 7
    max_random_quantity: int = 80


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def show(records, indent: str = "    "):
    for r in records:
        print(f"{indent}{r.item:<15} {r.quantity:>6}")


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_region_files(directory: Path) -> FlatFilePersistence:
    """Write the sample region files."""
    step_header(1, "Region Files",
        "See how each region's stock is stored as plain '<item> <quantity>' lines.")

    persistence = FlatFilePersistence(directory)
    created = initialize_sample_files(persistence)
    print(f"    Created {len(created)} region files in {directory}")

    section_header("Manila.txt")
    for line in persistence.region_path("Manila").read_text(encoding="utf-8").splitlines()[:4]:
        print(f"    {line}")
    print("    ...")
    return persistence


def step_02_load_with_merge(persistence: FlatFilePersistence) -> ReliefSession:
    """Load a file that lists the same item twice."""
    step_header(2, "Loading Merges Duplicates",
        "A region holds one record per item, sorted by item name.")

    persistence.save_records("Pateros", [("rice", 100), ("water_bottles", 40), ("rice", 50)])
    print("    Pateros.txt lists rice twice: 100 and 50")

    session = ReliefSession(persistence, verbose=True)
    records = session.load_region("Pateros")
    section_header("Stored records")
    show(records)
    print("\n    rice = 150: duplicates were summed, not kept side by side")
    return session


def step_03_aggregate(session: ReliefSession) -> ReliefSession:
    """Load every sample region and read the consolidated view."""
    step_header(3, "The Consolidated View",
        "The aggregate sums every item across regions and is rebuilt on every change.")

    for name in SAMPLE_REGIONS:
        session.load_region(name)

    section_header("Aggregate (sorted by item)")
    show(session.aggregate)
    print(f"\n    Total units across {len(session.region_names())} regions: "
          f"{session.aggregate.total_quantity()}")

    record = session.search_aggregate("medicine")
    print(f"\n    Binary search for 'medicine': {record.quantity}")
    return session


# ============================================================================
# PHASE 2: ALLOCATION (Steps 4-6)
# ============================================================================

def step_04_eligible_donors(session: ReliefSession):
    """Ask which regions can cover a request."""
    step_header(4, "Finding Donors",
        "Only regions other than the recipient holding the full quantity qualify.")

    plan = session.eligible_donors(CONFIG.recipient, CONFIG.item, CONFIG.quantity)
    print(f"    Request: {CONFIG.quantity} {CONFIG.item} for {CONFIG.recipient}\n")
    for option in plan.donors:
        print(f"    {option.region:<12} has {option.available}")
    return plan


def step_05_allocate(session: ReliefSession, plan) -> ReliefSession:
    """Execute the plan with a chosen donor."""
    step_header(5, "Allocating",
        "Both regions change, the aggregate is rebuilt, one log line is appended.")

    donor = plan.donor_names()[-1]
    before = session.aggregate.quantity_of(CONFIG.item)
    session.allocate(CONFIG.recipient, CONFIG.item, CONFIG.quantity, donor=donor, plan=plan)

    print(f"\n    {donor:<12} now has {session.search_region(donor, CONFIG.item).quantity}")
    print(f"    {CONFIG.recipient:<12} now has "
          f"{session.search_region(CONFIG.recipient, CONFIG.item).quantity}")
    print(f"    Aggregate {CONFIG.item}: {before} -> {session.aggregate.quantity_of(CONFIG.item)}")
    return session


def step_06_rejections(session: ReliefSession) -> ReliefSession:
    """Show each rejection kind."""
    step_header(6, "Rejections",
        "Bad requests are rejected with a specific reason and change nothing.")

    session.allocate("Atlantis", "rice", 10, donor="Manila")
    session.allocate("Manila", "rice", 0, donor="Pasig")
    session.allocate("Manila", "rice", 100_000, donor="Pasig")
    session.allocate("Manila", "rice", 10, donor="Manila")
    return session


# ============================================================================
# PHASE 3: GUARANTEES (Steps 7-8)
# ============================================================================

def step_07_stale_plan(session: ReliefSession) -> ReliefSession:
    """A plan made before another transfer drained the donor."""
    step_header(7, "Stale Plans",
        "Stock is re-checked at execution time, so a donor is never overdrawn.")

    available = session.search_region("Pasig", "first_aid").quantity
    plan = session.eligible_donors("Manila", "first_aid", available)
    print(f"    Plan: {available} first_aid for Manila, donors {plan.donor_names()}")

    section_header("Another transfer drains Pasig first")
    session.allocate("Pasay", "first_aid", available, donor="Pasig")

    section_header("Executing the old plan")
    session.allocate("Manila", "first_aid", available, donor="Pasig", plan=plan)
    return session


def step_08_conservation(session: ReliefSession) -> ReliefSession:
    """Run many random transfers against a copy of the store."""
    step_header(8, "Conservation",
        "Transfers move supplies around; totals per item never change.")

    store = session.store
    totals = {r.item: r.quantity for r in store.aggregate}
    names = session.region_names()
    items = sorted(totals)
    rng = random.Random(CONFIG.random_seed)

    applied = 0
    for _ in range(CONFIG.random_transfers):
        donor, recipient = rng.sample(names, 2)
        result = transfer(
            store, donor, recipient, rng.choice(items),
            rng.randint(1, CONFIG.max_random_quantity),
        )
        if result.status is TransferStatus.APPLIED:
            applied += 1

    unchanged = all(store.aggregate.quantity_of(item) == qty for item, qty in totals.items())
    print(f"    {CONFIG.random_transfers} random transfers, {applied} applied")
    print(f"    Per-item totals unchanged: {'✓' if unchanged else '✗'}")
    print("\n    (These transfers bypassed the session, so nothing was written to disk.)")
    return session


# ============================================================================
# PHASE 4: RESTART (Step 9)
# ============================================================================

def step_09_restart(directory: Path):
    """Open a fresh session over the same directory."""
    step_header(9, "Restart",
        "Region files and the allocation log outlive the session.")

    session = ReliefSession(FlatFilePersistence(directory), verbose=False)
    loaded = session.load_known_regions()
    print(f"    Reloaded {len(loaded)} regions from the registry")

    section_header("Allocation log")
    for entry in session.history_entries():
        print(f"    {entry.timestamp:%H:%M:%S}  {entry.quantity:>4} {entry.item:<12} "
              f"{entry.donor} -> {entry.recipient}")


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       RELIEF LEDGER - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    with tempfile.TemporaryDirectory() as tmp:
        directory = Path(tmp)

        persistence = step_01_region_files(directory)
        wait_for_enter()

        session = step_02_load_with_merge(persistence)
        wait_for_enter()

        session = step_03_aggregate(session)
        wait_for_enter()

        plan = step_04_eligible_donors(session)
        wait_for_enter()

        session = step_05_allocate(session, plan)
        wait_for_enter()

        session = step_06_rejections(session)
        wait_for_enter()

        session = step_07_stale_plan(session)
        wait_for_enter()

        step_08_conservation(session)
        wait_for_enter()

        step_09_restart(directory)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    You've learned:
      - Regions hold one sorted record per item
      - The aggregate is rebuilt after every change
      - Transfers need a registered recipient, a positive quantity and an
        eligible donor chosen by the caller
      - Rejected transfers change nothing and log nothing

    Next steps:
      - Run the menu: python -m relief_ledger data/
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
