# === NAVMAP v1 ===
# {
#   "module": "WwffDirectory.records",
#   "purpose": "Decode header-keyed CSV rows into typed WWFF directory entries",
#   "sections": [
#     {"id": "fieldkind", "name": "FieldKind", "anchor": "class-fieldkind", "kind": "class"},
#     {"id": "fieldspec", "name": "FieldSpec", "anchor": "class-fieldspec", "kind": "class"},
#     {"id": "entry-schema", "name": "ENTRY_SCHEMA", "anchor": "const-entry-schema", "kind": "constant"},
#     {"id": "entry", "name": "Entry", "anchor": "class-entry", "kind": "class"},
#     {"id": "decode-entry", "name": "decode_entry", "anchor": "function-decode-entry", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Record decoding for WWFF directory rows.

Responsibilities
----------------
- Declare the upstream CSV schema once, as an ordered decode table mapping
  each published header to an :class:`Entry` attribute and a decoder kind.
- Apply the table to one header-keyed row and build a frozen :class:`Entry`.
- Turn the first hard field failure into a :class:`RecordDecodeError` that
  names the row, the header and the offending cell.

Design Notes
------------
- Header names are case-sensitive and follow the upstream spelling
  (``iaruLocator``, ``IUCNcat``, ``lastMod`` ...).
- This module never decides whether a bad row is skipped; the directory
  builder does.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from . import fields
from .errors import RecordDecodeError
from .fields import FieldError, Status

__all__ = [
    "REFERENCE_MAX_LENGTH",
    "FieldKind",
    "FieldSpec",
    "ENTRY_SCHEMA",
    "Entry",
    "decode_entry",
    "normalize_reference",
]

REFERENCE_MAX_LENGTH = 12


class FieldKind(str, Enum):
    """Decoder variants available to the decode table."""

    REQUIRED_TEXT = "required_text"
    REQUIRED_TOKEN = "required_token"
    REQUIRED_INT = "required_int"
    OPTIONAL_TEXT = "optional_text"
    OPTIONAL_TOKEN = "optional_token"
    OPTIONAL_FLOAT = "optional_float"
    OPTIONAL_DATE = "optional_date"
    OPTIONAL_INT = "optional_int"
    STATUS = "status"


@dataclass(frozen=True)
class FieldSpec:
    """One row of the decode table.

    Attributes:
        header: Column name as published upstream.
        attribute: Name of the :class:`Entry` attribute it populates.
        kind: Decoder applied to the raw cell.
        limit: Maximum token length, or maximum integer value, when the kind
            needs one.
    """

    header: str
    attribute: str
    kind: FieldKind
    limit: Optional[int] = None

    def decode(self, raw: Optional[str]) -> Any:
        """Run the decoder for this column against ``raw``."""

        return _DECODERS[self.kind](raw, self.limit)


_DECODERS: Dict[FieldKind, Callable[[Optional[str], Optional[int]], Any]] = {
    FieldKind.REQUIRED_TEXT: lambda raw, _: fields.decode_required_text(raw),
    FieldKind.REQUIRED_TOKEN: fields.decode_required_token,
    FieldKind.REQUIRED_INT: fields.decode_required_int,
    FieldKind.OPTIONAL_TEXT: lambda raw, _: fields.decode_optional_text(raw),
    FieldKind.OPTIONAL_TOKEN: fields.decode_optional_token,
    FieldKind.OPTIONAL_FLOAT: lambda raw, _: fields.decode_optional_float(raw),
    FieldKind.OPTIONAL_DATE: lambda raw, _: fields.decode_optional_date(raw),
    FieldKind.OPTIONAL_INT: fields.decode_optional_int,
    FieldKind.STATUS: lambda raw, _: fields.decode_status(raw),
}


ENTRY_SCHEMA: Tuple[FieldSpec, ...] = (
    FieldSpec("reference", "reference", FieldKind.REQUIRED_TOKEN, REFERENCE_MAX_LENGTH),
    FieldSpec("status", "status", FieldKind.STATUS),
    FieldSpec("name", "name", FieldKind.REQUIRED_TEXT),
    FieldSpec("program", "program", FieldKind.REQUIRED_TOKEN, 12),
    FieldSpec("dxcc", "dxcc", FieldKind.REQUIRED_TOKEN, 8),
    FieldSpec("state", "state", FieldKind.REQUIRED_TOKEN, 8),
    FieldSpec("county", "county", FieldKind.REQUIRED_TOKEN, 8),
    FieldSpec("continent", "continent", FieldKind.REQUIRED_TOKEN, 2),
    FieldSpec("iota", "iota", FieldKind.OPTIONAL_TOKEN, 8),
    FieldSpec("iaruLocator", "iaru_locator", FieldKind.OPTIONAL_TOKEN, 12),
    FieldSpec("latitude", "latitude", FieldKind.OPTIONAL_FLOAT),
    FieldSpec("longitude", "longitude", FieldKind.OPTIONAL_FLOAT),
    FieldSpec("IUCNcat", "iucn_category", FieldKind.OPTIONAL_TOKEN, 12),
    FieldSpec("validFrom", "valid_from", FieldKind.OPTIONAL_DATE),
    FieldSpec("validTo", "valid_to", FieldKind.OPTIONAL_DATE),
    FieldSpec("notes", "notes", FieldKind.REQUIRED_TEXT),
    FieldSpec("lastMod", "last_modified", FieldKind.REQUIRED_TEXT),
    FieldSpec("changeLog", "changelog", FieldKind.OPTIONAL_TEXT),
    FieldSpec("reviewFlag", "review_flag", FieldKind.REQUIRED_INT, 0xFF),
    FieldSpec("specialFlags", "special_flags", FieldKind.OPTIONAL_TEXT),
    FieldSpec("website", "website", FieldKind.OPTIONAL_TEXT),
    FieldSpec("country", "country", FieldKind.OPTIONAL_TEXT),
    FieldSpec("region", "region", FieldKind.OPTIONAL_TEXT),
    FieldSpec("dxccEnum", "dxcc_enum", FieldKind.OPTIONAL_INT, 0xFFFF),
    FieldSpec("qsoCount", "qso_count", FieldKind.OPTIONAL_INT, 0xFFFFFFFF),
    FieldSpec("lastAct", "last_act", FieldKind.OPTIONAL_DATE),
)


@dataclass(frozen=True)
class Entry:
    """A single WWFF entity listing.

    Attributes:
        reference: Unique WWFF reference, uppercased (for example ``OHFF-0001``).
        status: Lifecycle state of the entity.
        name: Human readable name of the area.
        program: National WWFF programme code.
        dxcc: DXCC entity prefix.
        state: State or province code.
        county: County code.
        continent: Two letter continent code.
        iota: Islands On The Air group, if the area is on one.
        iaru_locator: Maidenhead locator.
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        iucn_category: International Union for Conservation of Nature category.
        valid_from: First day the reference is valid.
        valid_to: Last day the reference is valid.
        notes: Free text notes (may be empty).
        last_modified: Upstream modification stamp, kept as published.
        changelog: Free text change history.
        review_flag: Upstream review flag.
        special_flags: Free text special flags.
        website: Website URL.
        country: Country name.
        region: Region name.
        dxcc_enum: Numeric DXCC entity id.
        qso_count: Number of logged contacts.
        last_act: Date of the last logged activation.
    """

    reference: str
    status: Status
    name: str
    program: str
    dxcc: str
    state: str
    county: str
    continent: str
    iota: Optional[str]
    iaru_locator: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    iucn_category: Optional[str]
    valid_from: Optional[date]
    valid_to: Optional[date]
    notes: str
    last_modified: str
    changelog: Optional[str]
    review_flag: int
    special_flags: Optional[str]
    website: Optional[str]
    country: Optional[str]
    region: Optional[str]
    dxcc_enum: Optional[int]
    qso_count: Optional[int]
    last_act: Optional[date]

    @classmethod
    def from_row(cls, row: Mapping[str, Optional[str]], row_number: Optional[int] = None) -> "Entry":
        """Alias for :func:`decode_entry`."""

        return decode_entry(row, row_number)


def normalize_reference(text: str) -> str:
    """Return the directory key for ``text`` (ASCII uppercase).

    Examples:
        >>> normalize_reference("onff-0010")
        'ONFF-0010'
    """

    return text.upper()


def decode_entry(row: Mapping[str, Optional[str]], row_number: Optional[int] = None) -> Entry:
    """Decode one header-keyed row into an :class:`Entry`.

    Args:
        row: Mapping of upstream header name to raw cell text. Missing
            headers are treated as missing cells.
        row_number: Position of the row in its source, used in error messages.

    Returns:
        The decoded entry with its reference uppercased.

    Raises:
        RecordDecodeError: If a required field is missing or any field
            decoder reports a hard error.
    """

    values: Dict[str, Any] = {}
    for column in ENTRY_SCHEMA:
        raw = row.get(column.header)
        outcome = column.decode(raw)
        if isinstance(outcome, FieldError):
            raise RecordDecodeError(
                _describe(row_number, f"field '{column.header}' {outcome}"),
                row_number=row_number,
                header=column.header,
                value=raw,
            )
        values[column.attribute] = outcome

    if not values["reference"]:
        raise RecordDecodeError(
            _describe(row_number, "field 'reference' is empty"),
            row_number=row_number,
            header="reference",
            value=row.get("reference"),
        )
    values["reference"] = normalize_reference(values["reference"])
    return Entry(**values)


def _describe(row_number: Optional[int], detail: str) -> str:
    if row_number is None:
        return f"Invalid row: {detail}"
    return f"Invalid row {row_number}: {detail}"
