"""Directory builder tests: skipping, overwriting, ordering and stream sources."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path

import pytest

from WwffDirectory.builder import (
    Directory,
    build_directory,
    iter_rows,
    read_bytes,
    read_path,
    read_reader,
)
from WwffDirectory.errors import DirectoryReadError, RowParseError
from tests.fixtures.directory_rows import HEADER, make_row, render_csv, render_csv_bytes


def test_end_to_end_skip_and_overwrite() -> None:
    payload = render_csv_bytes(
        [
            make_row(reference="ONFF-0010", name="First"),
            make_row(reference="ONFF-0011", status="bogus"),
            make_row(reference="onff-0010", name="Second"),
        ]
    )

    build = read_bytes(payload)

    assert list(build.directory) == ["ONFF-0010"]
    assert build.directory["ONFF-0010"].name == "Second"
    assert build.rows_read == 3
    assert build.rows_skipped == 1


def test_batch_with_only_invalid_status_is_empty() -> None:
    build = read_bytes(render_csv_bytes([make_row(status="unknown")]))

    assert len(build.directory) == 0
    assert build.rows_skipped == 1


def test_too_long_iota_row_is_excluded() -> None:
    build = read_bytes(
        render_csv_bytes(
            [make_row(reference="OHFF-0001"), make_row(reference="OHFF-0002", iota="X" * 20)]
        )
    )

    assert list(build.directory) == ["OHFF-0001"]
    assert build.rows_skipped == 1


def test_directory_iterates_in_key_order() -> None:
    references = ["SPFF-0100", "DLFF-0001", "OHFF-0500", "ONFF-0010"]
    build = read_bytes(render_csv_bytes([make_row(reference=r) for r in references]))

    assert list(build.directory) == sorted(references)
    assert all(key == entry.reference for key, entry in build.directory.items())


def test_row_with_wrong_field_count_is_skipped() -> None:
    text = render_csv([make_row(reference="OHFF-0001")]) + "OHFF-0002,active,short\n"

    build = read_reader(io.StringIO(text))

    assert list(build.directory) == ["OHFF-0001"]
    assert build.rows_skipped == 1


def test_tokenizer_errors_are_row_level() -> None:
    oversized = "x" * (csv.field_size_limit() + 1)
    broken = ",".join(["OHFF-0002", "active", oversized] + [""] * (len(HEADER) - 3))
    text = render_csv([make_row(reference="OHFF-0001")]) + broken + "\n"
    text += render_csv([make_row(reference="OHFF-0003")]).split("\n", 1)[1]

    items = list(iter_rows(io.StringIO(text, newline="")))

    assert [number for number, _ in items] == [1, 2, 3]
    assert isinstance(items[1][1], RowParseError)
    assert sorted(build_directory(items).directory) == ["OHFF-0001", "OHFF-0003"]


def test_blank_lines_are_ignored() -> None:
    text = render_csv([make_row(reference="OHFF-0001")]) + "\n\n"

    build = read_reader(io.StringIO(text))

    assert build.rows_read == 1
    assert build.rows_skipped == 0


def test_empty_input_yields_empty_directory() -> None:
    build = read_bytes(b"")

    assert len(build.directory) == 0
    assert build.rows_read == 0


def test_skipped_rows_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="WwffDirectory.builder"):
        read_bytes(render_csv_bytes([make_row(status="bogus")]))

    assert any("Skipping invalid row 1" in record.getMessage() for record in caplog.records)
    assert caplog.records[0].extra_fields["row_number"] == 1


def test_read_path(tmp_path: Path) -> None:
    path = tmp_path / "wwff_directory.csv"
    path.write_bytes(b"\xef\xbb\xbf" + render_csv_bytes([make_row(reference="ohff-0001")]))

    build = read_path(path)

    assert list(build.directory) == ["OHFF-0001"]


def test_read_path_missing_file_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(DirectoryReadError):
        read_path(tmp_path / "missing.csv")


def test_read_reader_binary_stream_is_left_open() -> None:
    stream = io.BytesIO(render_csv_bytes([make_row(reference="OHFF-0001")]))

    build = read_reader(stream)

    assert "OHFF-0001" in build.directory
    assert not stream.closed


def test_read_reader_propagates_stream_failures() -> None:
    class _BrokenReader:
        def read(self, *args: object) -> bytes:
            raise OSError("disk on fire")

    with pytest.raises(DirectoryReadError, match="disk on fire"):
        read_reader(_BrokenReader())


def test_invalid_utf8_only_affects_its_row() -> None:
    good = render_csv_bytes([make_row(reference="OHFF-0001")])
    bad_row = render_csv_bytes([make_row(reference="OHFF-0002", iota="EU\xff")]).split(b"\n", 1)[1]
    payload = good + bad_row.replace("EU\xff".encode("utf-8"), b"EU\xff")

    build = read_bytes(payload)

    assert list(build.directory) == ["OHFF-0001"]
    assert build.rows_skipped == 1


def test_directory_lookup_is_case_insensitive() -> None:
    directory = read_bytes(render_csv_bytes([make_row(reference="OHFF-0001")])).directory

    assert directory.lookup("ohff-0001") is directory["OHFF-0001"]
    assert directory.lookup("OHFF-9999") is None


def test_directory_sorts_constructor_input() -> None:
    entry = read_bytes(render_csv_bytes([make_row()])).directory["ONFF-0010"]

    directory = Directory({"ZZ": entry, "AA": entry})

    assert list(directory) == ["AA", "ZZ"]
    assert repr(directory) == "Directory(2 entries)"
