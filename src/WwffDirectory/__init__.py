"""Parser and conditional downloader for the WWFF directory CSV.

The directory is published at <https://wwff.co/wwff-data/wwff_directory.csv>.
Load it from a file, a reader, raw bytes or the network, then look entries up
by reference and refresh it when upstream changes.
"""

from .builder import Directory, DirectoryBuild, read_bytes, read_path, read_reader
from .conditional import CacheValidators
from .directory import DirectoryHandle
from .errors import (
    DirectoryInitError,
    DirectoryReadError,
    FetchError,
    RecordDecodeError,
    RowParseError,
    WwffDirectoryError,
)
from .fetcher import DirectoryFetcher, FetcherState
from .fields import Status
from .records import Entry, decode_entry
from .settings import PACKAGE_VERSION as __version__

__all__ = [
    "__version__",
    "CacheValidators",
    "Directory",
    "DirectoryBuild",
    "DirectoryFetcher",
    "DirectoryHandle",
    "DirectoryInitError",
    "DirectoryReadError",
    "Entry",
    "FetchError",
    "FetcherState",
    "RecordDecodeError",
    "RowParseError",
    "Status",
    "WwffDirectoryError",
    "decode_entry",
    "read_bytes",
    "read_path",
    "read_reader",
]
