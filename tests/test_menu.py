"""
test_menu.py - Tests for the text menu

The menu is driven with scripted input and captured output.
"""

import pytest

from relief_ledger import (
    ReliefSession, InMemoryPersistence, FlatFilePersistence, SAMPLE_REGIONS,
)
from relief_ledger.menu import run_menu, main

from tests.helpers import fixed_clock


def _script(*answers):
    """input() replacement returning answers in order, then EOF."""
    remaining = list(answers)

    def read(prompt=""):
        if not remaining:
            raise EOFError
        return remaining.pop(0)
    return read


def _run(session, *answers):
    output = []
    run_menu(session, input_fn=_script(*answers), output_fn=output.append)
    return "\n".join(output)


@pytest.fixture
def session(memory_bridge):
    """Session over memory_bridge with A and B loaded; C left unloaded."""
    session = ReliefSession(memory_bridge, verbose=False, clock=fixed_clock)
    session.load_region("A")
    session.load_region("B")
    return session


class TestMenuLoop:

    def test_exit(self, session):
        out = _run(session, "7")
        assert "=== Disaster Relief Allocation System ===" in out
        assert out.endswith("Exiting system.")

    def test_end_of_input_exits(self, session):
        assert _run(session).endswith("Exiting system.")

    def test_invalid_option_reprompts(self, session):
        out = _run(session, "9", "7")
        assert "Invalid option. Please try again." in out
        assert out.count("=== Disaster Relief Allocation System ===") == 2


class TestAddRegion:

    def test_loads_region(self, session):
        out = _run(session, "1", "C", "7")
        assert 'Region "C" dataset loaded and sorted:' in out
        assert "  rice : 10\n  water : 75" in out
        assert "C" in session.store

    def test_missing_region_reported(self, session):
        out = _run(session, "1", "Atlantis", "7")
        assert "Error: No stored records for Atlantis" in out
        assert out.endswith("Exiting system.")

    def test_blank_name_reported(self, session):
        out = _run(session, "1", "   ", "7")
        assert "Error:" in out
        assert session.region_names() == ["A", "B"]

    def test_consolidated_view_name_refused(self, tmp_path):
        bridge = FlatFilePersistence(tmp_path)
        bridge.save_records("A", [("rice", 100)])
        bridge.save_records("B", [("rice", 20)])
        (tmp_path / "aggregate.txt").write_text("rice 120\n", encoding="utf-8")
        session = ReliefSession(bridge, verbose=False)
        session.load_region("A")
        session.load_region("B")

        out = _run(session, "1", "aggregate", "2", "7")
        assert "Error: Region name 'aggregate' is reserved" in out
        assert "  rice : 120" in out
        assert session.region_names() == ["A", "B"]
        assert bridge.list_known_region_names() == ["A", "B"]

    def test_log_file_name_refused(self, tmp_path):
        bridge = FlatFilePersistence(tmp_path)
        bridge.save_records("A", [("rice", 100)])
        bridge.append_audit_entry("earlier allocation")
        session = ReliefSession(bridge, verbose=False)

        out = _run(session, "1", "allocation_log", "7")
        assert "Error: Region name 'allocation_log' collides with allocation_log.txt" in out
        assert list(bridge.read_audit_log()) == ["earlier allocation"]


class TestShowViews:

    def test_consolidated(self, session):
        out = _run(session, "2", "7")
        assert "Consolidated dataset:" in out
        assert "  rice : 120" in out

    def test_consolidated_empty(self, memory_bridge):
        empty = ReliefSession(memory_bridge, verbose=False)
        assert "Consolidated dataset is empty" in _run(empty, "2", "7")

    def test_region(self, session):
        out = _run(session, "4", "B", "7")
        assert 'Dataset for "B":' in out
        assert "  blankets : 5\n  rice : 20" in out

    def test_unknown_region(self, session):
        out = _run(session, "4", "Z", "7")
        assert 'Region "Z" is not registered in the system.' in out


class TestAllocateOption:

    def test_successful_allocation(self, session, memory_bridge):
        out = _run(session, "3", "B", "rice", "30", "A", "7")
        assert "  A - Available: 100" in out
        assert 'Allocation successful! 30 of "rice" allocated from "A" to "B".' in out
        assert session.store.get_quantity("B", "rice") == 50
        assert len(memory_bridge.audit_lines) == 1

    def test_non_numeric_quantity(self, session):
        out = _run(session, "3", "B", "rice", "lots", "7")
        assert "Error: quantity must be a whole number, got 'lots'" in out
        assert session.store.get_quantity("B", "rice") == 20

    @pytest.mark.parametrize("text", ["1_000", "\u0663\u0660", "+30", "30.0"])
    def test_quantity_must_be_plain_digits(self, session, memory_bridge, text):
        out = _run(session, "3", "B", "rice", text, "7")
        assert f"Error: quantity must be a whole number, got {text!r}" in out
        assert "Donor regions" not in out
        assert memory_bridge.audit_lines == []

    def test_failed_log_write_reported(self):
        class FullDiskPersistence(InMemoryPersistence):
            def append_audit_entry(self, text):
                raise OSError("disk full")

        bridge = FullDiskPersistence({"A": [("rice", 100)], "B": [("rice", 20)]})
        session = ReliefSession(bridge, verbose=False)
        session.load_region("A")
        session.load_region("B")

        out = _run(session, "3", "B", "rice", "30", "A", "2", "7")
        assert "Error: could not record allocation: disk full" in out
        assert "Allocation successful!" not in out
        assert "  rice : 120" in out
        assert session.store.get_quantity("A", "rice") == 100
        assert out.endswith("Exiting system.")

    def test_unknown_recipient(self, session):
        out = _run(session, "3", "Z", "rice", "10", "7")
        assert "Error: Region Z is not registered" in out

    def test_no_donor(self, session):
        out = _run(session, "3", "B", "rice", "500", "7")
        assert 'Error: No donor region has 500 of "rice" available' in out

    def test_invalid_donor_choice(self, session, memory_bridge):
        out = _run(session, "3", "B", "rice", "30", "Q", "7")
        assert "Error: Q is not an eligible donor" in out
        assert memory_bridge.audit_lines == []


class TestSearchOption:

    def test_region_hit(self, session):
        out = _run(session, "5", "1", "A", "water", "7")
        assert 'Found: "water" in "A" with quantity 40' in out

    def test_region_miss(self, session):
        out = _run(session, "5", "1", "A", "tents", "7")
        assert 'Item "tents" not found in "A".' in out

    def test_region_unknown(self, session):
        out = _run(session, "5", "1", "Z", "7")
        assert 'Region "Z" is not registered in the system.' in out

    def test_consolidated_hit(self, session):
        out = _run(session, "5", "2", "rice", "7")
        assert 'Found: "rice" with consolidated quantity 120' in out

    def test_consolidated_miss(self, session):
        out = _run(session, "5", "2", "tents", "7")
        assert 'Item "tents" not found in the consolidated dataset.' in out

    def test_invalid_choice(self, session):
        assert "Invalid choice." in _run(session, "5", "3", "7")


class TestHistoryOption:

    def test_empty(self, session):
        assert "No allocations recorded yet." in _run(session, "6", "7")

    def test_lists_lines(self, session):
        out = _run(session, "3", "B", "rice", "30", "A", "6", "7")
        assert "Allocation history:" in out
        assert '  2025-01-15 09:30:00 - Allocated 30 of "rice" from A to B' in out


class TestMain:

    def test_creates_samples_and_exits(self, tmp_path, monkeypatch, capsys):
        answers = iter(["7"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
        assert main([str(tmp_path)]) == 0
        out = capsys.readouterr().out
        assert "Created sample file:" in out
        for region in SAMPLE_REGIONS:
            assert (tmp_path / f"{region}.txt").is_file()

    def test_unreadable_region_skipped(self, tmp_path, monkeypatch, capsys):
        (tmp_path / "registered_cities.txt").write_text("Manila\nPasig\n", encoding="utf-8")
        (tmp_path / "Manila.txt").write_text("rice plenty\n", encoding="utf-8")
        answers = iter(["4", "Pasig", "7"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

        assert main([str(tmp_path)]) == 0
        out = capsys.readouterr().out
        assert "Skipped region Manila:" in out
        assert 'Dataset for "Pasig":' in out
        assert "  rice : 300" in out

    def test_existing_files_kept(self, tmp_path, monkeypatch, capsys):
        (tmp_path / "Manila.txt").write_text("rice 1\n", encoding="utf-8")
        monkeypatch.setattr("builtins.input", lambda prompt="": "7")
        main([str(tmp_path)])
        assert FlatFilePersistence(tmp_path).load_records("Manila") == [("rice", 1)]
