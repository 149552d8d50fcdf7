"""Exception hierarchy shared across directory decoding, loading, and fetching.

Loading the WWFF directory spans CSV tokenisation, per-row record decoding,
and conditional HTTP retrieval.  This module groups the failure modes into a
small hierarchy so callers can react to high-level categories (a single bad
row vs. an unreadable stream vs. a failed refresh) while still having access
to the row number or HTTP status that caused the problem.

Row-level errors (:class:`RecordDecodeError`, :class:`RowParseError`) are
caught by the directory builder and counted as skipped rows; they only reach
callers that decode rows directly.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "WwffDirectoryError",
    "RowError",
    "RecordDecodeError",
    "RowParseError",
    "DirectoryReadError",
    "FetchError",
    "DirectoryInitError",
]


class WwffDirectoryError(RuntimeError):
    """Base exception for directory loading and refresh failures."""


class RowError(WwffDirectoryError):
    """Raised when a single CSV row cannot be turned into an entry."""

    def __init__(self, message: str, *, row_number: Optional[int] = None) -> None:
        super().__init__(message)
        self.row_number = row_number


class RecordDecodeError(RowError):
    """Raised when a tokenised row fails the record decode table."""

    def __init__(
        self,
        message: str,
        *,
        row_number: Optional[int] = None,
        header: Optional[str] = None,
        value: Optional[str] = None,
    ) -> None:
        super().__init__(message, row_number=row_number)
        self.header = header
        self.value = value


class RowParseError(RowError):
    """Raised when the CSV tokenizer cannot split a row into header-keyed fields."""


class DirectoryReadError(WwffDirectoryError):
    """Raised when the underlying byte stream cannot be opened or read."""


class FetchError(WwffDirectoryError):
    """Raised when downloading the directory fails at the transport or HTTP level."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DirectoryInitError(WwffDirectoryError):
    """Raised when the initial load cannot produce a directory handle."""
