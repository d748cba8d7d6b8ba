"""
menu.py - Text menu over a ReliefSession

Run:
    python -m relief_ledger            # data files in the current directory
    python -m relief_ledger data/      # data files in data/

Every failure, including a failed file write, is reported and the menu is
shown again. Only option 7 or end of input leaves the loop.
"""

from __future__ import annotations
import sys
from typing import Callable, List, Optional

from .core import ReliefLedgerError, TransferError, UnknownRegion
from .persistence import FlatFilePersistence, is_quantity_text
from .samples import initialize_sample_files
from .session import ReliefSession


MENU = """
=== Disaster Relief Allocation System ===
1. Add region dataset
2. Show consolidated dataset
3. Allocate resources
4. Show region dataset
5. Search for item
6. Show allocation history
7. Exit"""

EXIT_OPTION = "7"


class _Console:
    """Prompt/print pair so the menu can be driven by tests."""

    def __init__(self, input_fn: Callable[[str], str], output_fn: Callable[[str], None]):
        self.input_fn = input_fn
        self.output_fn = output_fn

    def ask(self, prompt: str) -> str:
        return self.input_fn(prompt).strip()

    def say(self, text: str = "") -> None:
        self.output_fn(text)

    def show_records(self, records) -> None:
        for r in records:
            self.say(f"  {r.item} : {r.quantity}")


def _add_region(session: ReliefSession, console: _Console) -> None:
    name = console.ask("Enter region name to add: ")
    try:
        records = session.load_region(name)
    except (ReliefLedgerError, ValueError, OSError) as e:
        console.say(f"Error: {e}")
        return
    console.say(f'\nRegion "{name}" dataset loaded and sorted:')
    console.show_records(records)


def _show_aggregate(session: ReliefSession, console: _Console) -> None:
    if session.aggregate.is_empty():
        console.say("\nConsolidated dataset is empty. Add some region datasets first.")
        return
    console.say("\nConsolidated dataset:")
    console.show_records(session.aggregate)


def _allocate(session: ReliefSession, console: _Console) -> None:
    recipient = console.ask("Enter your region (recipient): ")
    item = console.ask("Enter the item you need: ")
    text = console.ask("Enter the quantity needed: ")
    if not is_quantity_text(text):
        console.say(f"Error: quantity must be a whole number, got {text!r}")
        return
    quantity = int(text)

    try:
        plan = session.eligible_donors(recipient, item, quantity)
    except TransferError as e:
        console.say(f"Error: {e}")
        return

    console.say(f'\nDonor regions with available "{item}":')
    for option in plan.donors:
        console.say(f"  {option.region} - Available: {option.available}")
    donor = console.ask("Enter the donor region you want to allocate from: ")

    try:
        result = session.allocate(recipient, item, quantity, donor, plan=plan)
    except OSError as e:
        console.say(f"Error: could not record allocation: {e}")
        return
    if result.ok:
        console.say(
            f'Allocation successful! {quantity} of "{item}" allocated '
            f'from "{donor}" to "{recipient}".'
        )
    else:
        console.say(f"Error: {result.error}")


def _show_region(session: ReliefSession, console: _Console) -> None:
    name = console.ask("Enter region name to display its dataset: ")
    try:
        records = session.region(name)
    except UnknownRegion:
        console.say(f'Region "{name}" is not registered in the system.')
        return
    console.say(f'\nDataset for "{name}":')
    console.show_records(records)


def _search(session: ReliefSession, console: _Console) -> None:
    choice = console.ask("Search in (1) specific region or (2) consolidated dataset? ")
    if choice == "1":
        name = console.ask("Enter region name: ")
        if name not in session.store:
            console.say(f'Region "{name}" is not registered in the system.')
            return
        item = console.ask("Enter item name to search: ")
        record = session.search_region(name, item)
        if record is None:
            console.say(f'Item "{item}" not found in "{name}".')
        else:
            console.say(f'Found: "{record.item}" in "{name}" with quantity {record.quantity}')
    elif choice == "2":
        if session.aggregate.is_empty():
            console.say("Consolidated dataset is empty.")
            return
        item = console.ask("Enter item name to search: ")
        record = session.search_aggregate(item)
        if record is None:
            console.say(f'Item "{item}" not found in the consolidated dataset.')
        else:
            console.say(f'Found: "{record.item}" with consolidated quantity {record.quantity}')
    else:
        console.say("Invalid choice.")


def _history(session: ReliefSession, console: _Console) -> None:
    lines = list(session.history())
    if not lines:
        console.say("\nNo allocations recorded yet.")
        return
    console.say("\nAllocation history:")
    for line in lines:
        console.say(f"  {line}")


ACTIONS = {
    "1": _add_region,
    "2": _show_aggregate,
    "3": _allocate,
    "4": _show_region,
    "5": _search,
    "6": _history,
}


def run_menu(
    session: ReliefSession,
    input_fn: Optional[Callable[[str], str]] = None,
    output_fn: Optional[Callable[[str], None]] = None,
) -> None:
    """Show the menu until the user exits or input ends (defaults: input and print)."""
    console = _Console(input_fn or input, output_fn or print)
    while True:
        console.say(MENU)
        try:
            option = console.ask("Enter option: ")
            if option == EXIT_OPTION:
                console.say("Exiting system.")
                return
            action = ACTIONS.get(option)
            if action is None:
                console.say("Invalid option. Please try again.")
                continue
            action(session, console)
        except EOFError:
            console.say("Exiting system.")
            return


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    persistence = FlatFilePersistence(args[0] if args else ".")
    for region in initialize_sample_files(persistence):
        print(f"Created sample file: {persistence.region_path(region)}")
    session = ReliefSession(persistence, verbose=False)
    session.load_known_regions()
    for region, error in session.skipped_regions.items():
        print(f"Skipped region {region}: {error}")
    run_menu(session)
    return 0
