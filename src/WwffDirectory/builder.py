"""Directory builder: tokenise CSV input and accumulate decoded entries.

The builder drives the stdlib :mod:`csv` tokenizer, applies
:func:`~WwffDirectory.records.decode_entry` to every data row and merges the
results into an ordered, unique-keyed :class:`Directory`.  A bad row is logged
and counted, never fatal; only failures of the underlying byte stream abort a
load (raised as :class:`~WwffDirectory.errors.DirectoryReadError`).

Usage:
    from WwffDirectory.builder import read_path

    build = read_path("wwff_directory.csv")
    print(len(build.directory), build.rows_skipped)
"""

from __future__ import annotations

import csv
import io
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from os import PathLike
from typing import IO, Dict, Iterable, Iterator, Optional, Tuple, Union

from .errors import DirectoryReadError, RowError, RowParseError
from .records import Entry, decode_entry, normalize_reference

__all__ = [
    "CSV_ENCODING",
    "Directory",
    "DirectoryBuild",
    "RowItem",
    "iter_rows",
    "build_directory",
    "read_path",
    "read_reader",
    "read_bytes",
]

LOGGER = logging.getLogger(__name__)

#: ``utf-8-sig`` tolerates a leading byte order mark.
CSV_ENCODING = "utf-8-sig"

RowItem = Tuple[int, Union[Dict[str, str], RowParseError]]


class Directory(Mapping):
    """Immutable mapping of uppercased reference to :class:`Entry`.

    Iteration follows ascending key order regardless of insertion order.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping] = None) -> None:
        source = dict(entries or {})
        self._entries: Dict[str, Entry] = {key: source[key] for key in sorted(source)}

    def __getitem__(self, reference: str) -> Entry:
        return self._entries[reference]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Directory({len(self._entries)} entries)"

    def lookup(self, reference: str) -> Optional[Entry]:
        """Return the entry for ``reference`` in any letter case, or ``None``."""

        return self._entries.get(normalize_reference(reference))


@dataclass(frozen=True)
class DirectoryBuild:
    """Result of one directory load.

    Attributes:
        directory: The decoded entries.
        rows_read: Data rows seen (header excluded, blank lines ignored).
        rows_skipped: Rows rejected by the tokenizer or the record decoder.
        elapsed_ms: Wall-clock duration of the build, advisory only.
    """

    directory: Directory
    rows_read: int
    rows_skipped: int
    elapsed_ms: float


def iter_rows(stream: Iterable[str]) -> Iterator[RowItem]:
    """Yield ``(row_number, row)`` pairs from CSV text.

    The first record is the header. Each following record is yielded as a
    header-keyed dict, or as a :class:`RowParseError` when the tokenizer
    rejects it or its field count differs from the header. Row numbers count
    data rows starting at 1.
    """

    reader = csv.reader(stream)
    header: Optional[list] = None
    row_number = 0
    while True:
        try:
            record = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            if header is None:
                raise DirectoryReadError(f"Unreadable CSV header: {exc}") from exc
            row_number += 1
            yield row_number, RowParseError(
                f"Invalid row {row_number}: {exc}", row_number=row_number
            )
            continue
        if not record:
            continue
        if header is None:
            header = record
            continue
        row_number += 1
        if len(record) != len(header):
            yield row_number, RowParseError(
                f"Invalid row {row_number}: expected {len(header)} fields, found {len(record)}",
                row_number=row_number,
            )
            continue
        yield row_number, dict(zip(header, record))


def build_directory(rows: Iterable[RowItem]) -> DirectoryBuild:
    """Decode ``rows`` into a :class:`DirectoryBuild`.

    Later rows overwrite earlier rows with the same reference. Row failures
    are logged and counted; they never abort the build.
    """

    started = time.perf_counter()
    accumulated: Dict[str, Entry] = {}
    rows_read = 0
    rows_skipped = 0
    for row_number, row in rows:
        rows_read += 1
        error: Optional[RowError] = None
        if isinstance(row, RowParseError):
            error = row
        else:
            try:
                entry = decode_entry(row, row_number)
            except RowError as exc:
                error = exc
        if error is not None:
            rows_skipped += 1
            LOGGER.warning(
                "Skipping invalid row %d: %s",
                row_number,
                error,
                extra={"extra_fields": {"row_number": row_number, "error": str(error)}},
            )
            continue
        accumulated[entry.reference] = entry

    directory = Directory(accumulated)
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    LOGGER.debug(
        "Reading WWFF directory (%d entries) took %.0f ms.",
        len(directory),
        elapsed_ms,
        extra={
            "extra_fields": {
                "entries": len(directory),
                "rows_read": rows_read,
                "rows_skipped": rows_skipped,
                "elapsed_ms": round(elapsed_ms, 3),
            }
        },
    )
    return DirectoryBuild(
        directory=directory,
        rows_read=rows_read,
        rows_skipped=rows_skipped,
        elapsed_ms=elapsed_ms,
    )


def _build_from_text(stream: Iterable[str]) -> DirectoryBuild:
    try:
        return build_directory(iter_rows(stream))
    except OSError as exc:
        raise DirectoryReadError(f"Failed to read WWFF directory: {exc}") from exc


def read_path(path: Union[str, "PathLike[str]"]) -> DirectoryBuild:
    """Load a directory from the CSV file at ``path``.

    Raises:
        DirectoryReadError: If the file cannot be opened or read.
    """

    try:
        handle = open(path, "r", encoding=CSV_ENCODING, errors="replace", newline="")
    except OSError as exc:
        raise DirectoryReadError(f"Cannot open WWFF directory {path}: {exc}") from exc
    with handle:
        return _build_from_text(handle)


def read_reader(reader: IO) -> DirectoryBuild:
    """Load a directory from a binary or text file-like object.

    The reader is consumed but not closed.
    """

    if isinstance(reader, io.TextIOBase):
        return _build_from_text(reader)
    if isinstance(reader, (io.BufferedIOBase, io.RawIOBase)):
        wrapper = io.TextIOWrapper(reader, encoding=CSV_ENCODING, errors="replace", newline="")
        try:
            return _build_from_text(wrapper)
        finally:
            wrapper.detach()
    try:
        data = reader.read()
    except OSError as exc:
        raise DirectoryReadError(f"Failed to read WWFF directory: {exc}") from exc
    if isinstance(data, str):
        return _build_from_text(io.StringIO(data, newline=""))
    return read_bytes(data)


def read_bytes(data: bytes) -> DirectoryBuild:
    """Load a directory from an in-memory CSV payload."""

    text = bytes(data).decode(CSV_ENCODING, errors="replace")
    return _build_from_text(io.StringIO(text, newline=""))
