"""Field decoders for raw WWFF directory cells.

Every decoder receives the raw cell text exactly as the CSV tokenizer
produced it (``None`` when the column is missing from the row) and returns
one of three outcomes:

- a typed value,
- ``None`` when the cell is a recognised absence marker or, for numeric and
  date cells, when the text does not parse,
- a :class:`FieldError` describing why the cell is unusable.

``FieldError`` is returned rather than raised so the record decoder can fold
all field outcomes uniformly and abort the row only on the hard-error
variant.

Usage:
    from WwffDirectory.fields import decode_optional_token, FieldError

    outcome = decode_optional_token("OH-001", max_length=8)
    if isinstance(outcome, FieldError):
        ...
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

__all__ = [
    "ABSENCE_MARKERS",
    "KNOWN_BAD_TOKENS",
    "DATE_FORMAT",
    "FieldError",
    "Status",
    "is_token",
    "decode_required_text",
    "decode_required_token",
    "decode_required_int",
    "decode_optional_text",
    "decode_optional_token",
    "decode_optional_float",
    "decode_optional_date",
    "decode_optional_int",
    "decode_status",
]

#: Cell values published upstream to mean "no value".
ABSENCE_MARKERS = frozenset({"", "-", "n/a"})

#: Mis-encoded regional names that leaked into token columns upstream.
KNOWN_BAD_TOKENS = frozenset({"Región 1"})

DATE_FORMAT = "%Y-%m-%d"

_UNSIGNED_RE = re.compile(r"^\+?[0-9]+$")


@dataclass(frozen=True)
class FieldError:
    """Hard decode failure for a single cell.

    Attributes:
        reason: Human readable description of the failure.
        value: Raw cell text that caused the failure, if any.
    """

    reason: str
    value: Optional[str] = None

    def __str__(self) -> str:
        if self.value is None:
            return self.reason
        return f'{self.reason}: "{self.value}"'


class Status(str, Enum):
    """Lifecycle state of a directory entry."""

    ACTIVE = "active"
    DELETED = "deleted"
    NATIONAL = "national"
    PROPOSED = "proposed"


def is_token(text: str, max_length: int) -> bool:
    """Return ``True`` when ``text`` fits a bounded ASCII token."""

    return len(text) <= max_length and text.isascii() and "\x00" not in text


def _missing() -> FieldError:
    return FieldError("missing required field")


def decode_required_text(raw: Optional[str]) -> Union[str, FieldError]:
    """Return ``raw`` verbatim; only a missing column is an error."""

    if raw is None:
        return _missing()
    return raw


def decode_required_token(raw: Optional[str], max_length: int) -> Union[str, FieldError]:
    """Validate ``raw`` as a token of at most ``max_length`` ASCII characters."""

    if raw is None:
        return _missing()
    if not is_token(raw, max_length):
        return FieldError(f"not an ASCII token of at most {max_length} characters", raw)
    return raw


def _parse_unsigned(
    raw: str, maximum: int
) -> Union[int, FieldError]:
    if not _UNSIGNED_RE.match(raw):
        return FieldError("not an unsigned integer", raw)
    value = int(raw)
    if value > maximum:
        return FieldError(f"integer exceeds {maximum}", raw)
    return value


def decode_required_int(raw: Optional[str], maximum: int) -> Union[int, FieldError]:
    """Parse an unsigned integer no greater than ``maximum``."""

    if raw is None:
        return _missing()
    return _parse_unsigned(raw, maximum)


def decode_optional_text(raw: Optional[str]) -> Optional[str]:
    """Map absence markers to ``None``; return any other text untouched.

    Examples:
        >>> decode_optional_text("n/a") is None
        True
        >>> decode_optional_text(" Foo ")
        ' Foo '
    """

    if raw is None or raw in ABSENCE_MARKERS:
        return None
    return raw


def decode_optional_token(
    raw: Optional[str], max_length: int
) -> Union[str, None, FieldError]:
    """Decode an optional bounded token such as an IOTA or locator code.

    Absence markers and the values in :data:`KNOWN_BAD_TOKENS` decode to
    ``None``. Anything else is stripped of surrounding whitespace and must fit
    ``max_length`` ASCII characters; a non-empty value that does not fit is a
    hard error, never a silent ``None``.

    Args:
        raw: Cell text, or ``None`` when the column is missing.
        max_length: Maximum token length in characters.

    Returns:
        The stripped token, ``None`` when absent, or a :class:`FieldError`.

    Examples:
        >>> decode_optional_token(" EU-001 ", 8)
        'EU-001'
        >>> decode_optional_token("Región 1", 8) is None
        True
    """

    if raw is None or raw in ABSENCE_MARKERS:
        return None
    if raw in KNOWN_BAD_TOKENS:
        return None
    token = raw.strip()
    if not is_token(token, max_length):
        return FieldError(f"not an ASCII token of at most {max_length} characters", raw)
    return token


def decode_optional_float(raw: Optional[str]) -> Optional[float]:
    """Parse a float, returning ``None`` for anything that does not parse."""

    if raw is None or raw != raw.strip() or "_" in raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def decode_optional_date(raw: Optional[str]) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` calendar date, returning ``None`` on failure."""

    if raw is None:
        return None
    try:
        return datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError:
        return None


def decode_optional_int(raw: Optional[str], maximum: int) -> Union[int, None, FieldError]:
    """Parse an optional unsigned integer.

    Absence markers decode to ``None``; other text that is not an unsigned
    integer within ``maximum`` is a hard error.
    """

    if raw is None or raw in ABSENCE_MARKERS:
        return None
    return _parse_unsigned(raw, maximum)


def decode_status(raw: Optional[str]) -> Union[Status, FieldError]:
    """Match ``raw`` case-insensitively against the :class:`Status` labels."""

    if raw is None:
        return _missing()
    try:
        return Status(raw.lower())
    except ValueError:
        return FieldError("unknown WWFF status", raw)
