"""
persistence.py - Storage bridge for region records and the allocation log

Provides the persistence interface consumed by the session:

Classes:
- PersistenceBridge: Protocol defining load/save and audit operations
- FlatFilePersistence: One text file per region inside a directory
- InMemoryPersistence: Dictionary-backed storage for tests and demos

Record format (fixed, versionless): one "<item> <quantity>" line per record,
item without whitespace, quantity a non-negative base-10 integer. The region
registry holds one region name per line. The allocation log is append-only,
one line per successful transfer.
"""

from __future__ import annotations
from pathlib import Path
import re
from typing import (
    Dict, Iterable, Iterator, List, Optional, Protocol, Union, runtime_checkable
)

from .core import (
    RawRecord,
    MissingSourceData, MalformedRecord,
    DEFAULT_REGISTRY_FILENAME, DEFAULT_AGGREGATE_FILENAME,
    DEFAULT_AUDIT_FILENAME, DEFAULT_RECORD_EXTENSION,
    validate_ledger_region_name,
)


_QUANTITY = re.compile(r"[0-9]+")

_PATH_SEPARATORS = ("/", "\\")


# ============================================================================
# LINE FORMAT
# ============================================================================

def is_quantity_text(text: str) -> bool:
    """True for a non-negative base-10 integer written in ASCII digits only."""
    return _QUANTITY.fullmatch(text) is not None


def format_record_line(item: str, quantity: int) -> str:
    return f"{item} {quantity}"


def parse_record_line(line: str, source: str = "<records>", line_number: int = 0) -> RawRecord:
    """
    Parse one '<item> <quantity>' line.

    Raises:
        MalformedRecord: If the line does not have exactly two fields or the
                         quantity is not a non-negative base-10 integer
    """
    fields = line.split()
    if len(fields) != 2 or not is_quantity_text(fields[1]):
        raise MalformedRecord(f"{source}:{line_number}: expected '<item> <quantity>', got {line.strip()!r}")
    return fields[0], int(fields[1])


def parse_records(lines: Iterable[str], source: str = "<records>") -> List[RawRecord]:
    """Parse record lines, skipping blank ones. Duplicate items are kept as-is."""
    records = []
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        records.append(parse_record_line(line, source, number))
    return records


def _check_single_line(text: str) -> None:
    if "\n" in text or "\r" in text:
        raise ValueError("Audit entries must be a single line")


# ============================================================================
# PROTOCOL
# ============================================================================

@runtime_checkable
class PersistenceBridge(Protocol):
    """
    Storage interface for region records, the region registry and the audit log.

    Every call either completes or raises; partial writes are not assumed.
    """

    def load_records(self, region: str) -> List[RawRecord]:
        """Return a region's stored (item, quantity) pairs; raise MissingSourceData if absent."""
        ...

    def save_records(self, region: str, records: Iterable[RawRecord]) -> None:
        """Overwrite a region's stored records, preserving the given order."""
        ...

    def has_source(self, region: str) -> bool:
        """Return True if records are stored for the region."""
        ...

    def list_known_region_names(self) -> List[str]:
        """Return the persisted region registry."""
        ...

    def save_region_names(self, names: Iterable[str]) -> None:
        """Overwrite the region registry."""
        ...

    def save_aggregate(self, records: Iterable[RawRecord]) -> None:
        """Overwrite the stored consolidated view."""
        ...

    def append_audit_entry(self, text: str) -> None:
        """Append one line to the audit log. Never truncates."""
        ...

    def read_audit_log(self) -> Iterator[str]:
        """Lazily yield audit lines from the start. Each call starts over."""
        ...


# ============================================================================
# FLAT FILES
# ============================================================================

class FlatFilePersistence:
    """
    Stores each region in '<directory>/<region><extension>'.

    The registry, consolidated view and allocation log live alongside the
    region files under configurable names.
    """

    def __init__(
        self,
        directory: Union[str, Path] = ".",
        registry_filename: str = DEFAULT_REGISTRY_FILENAME,
        aggregate_filename: str = DEFAULT_AGGREGATE_FILENAME,
        audit_filename: str = DEFAULT_AUDIT_FILENAME,
        extension: str = DEFAULT_RECORD_EXTENSION,
        encoding: str = "utf-8",
    ):
        """
        Args:
            directory: Folder holding all files (created on first write)
            registry_filename: File listing registered regions
            aggregate_filename: File receiving the consolidated view
            audit_filename: Append-only allocation log
            extension: Suffix of region record files
            encoding: Text encoding for every file
        """
        self.directory = Path(directory)
        self.registry_path = self.directory / registry_filename
        self.aggregate_path = self.directory / aggregate_filename
        self.audit_path = self.directory / audit_filename
        self.extension = extension
        self.encoding = encoding

    def region_path(self, region: str) -> Path:
        """
        Path of a region's record file.

        Raises:
            ValueError: If the name is invalid or reserved, contains a path
                        separator, or would share a file with the registry,
                        the consolidated view or the allocation log
        """
        validate_ledger_region_name(region)
        if any(sep in region for sep in _PATH_SEPARATORS) or region in (".", ".."):
            raise ValueError(f"Region name {region!r} cannot contain path separators")
        path = self.directory / f"{region}{self.extension}"
        reserved = (self.registry_path, self.aggregate_path, self.audit_path)
        if any(path.name.casefold() == other.name.casefold() for other in reserved):
            raise ValueError(f"Region name {region!r} collides with {path.name}")
        return path

    def has_source(self, region: str) -> bool:
        return self.region_path(region).is_file()

    def load_records(self, region: str) -> List[RawRecord]:
        path = self.region_path(region)
        if not path.is_file():
            raise MissingSourceData(f'File "{path}" not found')
        with path.open("r", encoding=self.encoding) as f:
            return parse_records(f, source=str(path))

    def save_records(self, region: str, records: Iterable[RawRecord]) -> None:
        self._write_lines(self.region_path(region), (format_record_line(i, q) for i, q in records))

    def list_known_region_names(self) -> List[str]:
        if not self.registry_path.is_file():
            return []
        with self.registry_path.open("r", encoding=self.encoding) as f:
            return [line.strip() for line in f if line.strip()]

    def save_region_names(self, names: Iterable[str]) -> None:
        self._write_lines(self.registry_path, sorted(names))

    def save_aggregate(self, records: Iterable[RawRecord]) -> None:
        self._write_lines(self.aggregate_path, (format_record_line(i, q) for i, q in records))

    def append_audit_entry(self, text: str) -> None:
        _check_single_line(text)
        self.directory.mkdir(parents=True, exist_ok=True)
        with self.audit_path.open("a", encoding=self.encoding) as f:
            f.write(text + "\n")

    def read_audit_log(self) -> Iterator[str]:
        if not self.audit_path.is_file():
            return
        with self.audit_path.open("r", encoding=self.encoding) as f:
            for line in f:
                line = line.rstrip("\r\n")
                if line:
                    yield line

    def _write_lines(self, path: Path, lines: Iterable[str]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding=self.encoding) as f:
            for line in lines:
                f.write(line + "\n")

    def __repr__(self):
        return f"FlatFilePersistence({str(self.directory)!r})"


# ============================================================================
# IN MEMORY
# ============================================================================

class InMemoryPersistence:
    """
    Dictionary-backed bridge with the same semantics as FlatFilePersistence.

    Examples:
        bridge = InMemoryPersistence({
            "Manila": [("rice", 280), ("water_bottles", 250)],
            "Pasig": [("rice", 300)],
        })
        bridge.load_records("Manila")
    """

    def __init__(self, sources: Optional[Dict[str, Iterable[RawRecord]]] = None):
        self.sources: Dict[str, List[RawRecord]] = {}
        self.region_names: List[str] = []
        self.aggregate: List[RawRecord] = []
        self.audit_lines: List[str] = []
        for region, records in (sources or {}).items():
            self.save_records(region, records)

    def has_source(self, region: str) -> bool:
        return region in self.sources

    def load_records(self, region: str) -> List[RawRecord]:
        if region not in self.sources:
            raise MissingSourceData(f"No stored records for {region}")
        return list(self.sources[region])

    def save_records(self, region: str, records: Iterable[RawRecord]) -> None:
        validate_ledger_region_name(region)
        self.sources[region] = [(item, quantity) for item, quantity in records]

    def list_known_region_names(self) -> List[str]:
        return list(self.region_names)

    def save_region_names(self, names: Iterable[str]) -> None:
        self.region_names = sorted(names)

    def save_aggregate(self, records: Iterable[RawRecord]) -> None:
        self.aggregate = list(records)

    def append_audit_entry(self, text: str) -> None:
        _check_single_line(text)
        self.audit_lines.append(text)

    def read_audit_log(self) -> Iterator[str]:
        return iter(list(self.audit_lines))

    def __repr__(self):
        return f"InMemoryPersistence({len(self.sources)} regions, {len(self.audit_lines)} audit lines)"
