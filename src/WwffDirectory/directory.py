"""Long-lived handle serving lookups against the current WWFF directory.

A :class:`DirectoryHandle` owns exactly one :class:`~WwffDirectory.builder.Directory`
and one :class:`~WwffDirectory.fetcher.DirectoryFetcher`.  It is created by an
initial load and afterwards only changes by replacing the whole directory on
a refresh that brought new content.  Readers never block: they observe the
directory that was current when they looked, old or new, never a partial one.

Usage:
    from WwffDirectory import DirectoryHandle

    with DirectoryHandle.from_download() as directory:
        entry = directory.get("ohff-0001")
        ...
        directory.refresh()
"""

from __future__ import annotations

import logging
import threading
from os import PathLike
from typing import IO, Iterator, Optional, Union

from .builder import Directory, DirectoryBuild, read_bytes, read_path, read_reader
from .errors import DirectoryInitError, WwffDirectoryError
from .fetcher import DirectoryFetcher
from .records import Entry, normalize_reference
from .settings import HttpSettings

__all__ = ["DirectoryHandle"]

LOGGER = logging.getLogger(__name__)


class DirectoryHandle:
    """Current directory snapshot plus the fetcher used to refresh it."""

    def __init__(
        self,
        build: DirectoryBuild,
        fetcher: Optional[DirectoryFetcher] = None,
        *,
        settings: Optional[HttpSettings] = None,
    ) -> None:
        self._build = build
        self._fetcher = fetcher
        self._settings = settings
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Initial loads
    # ------------------------------------------------------------------

    @classmethod
    def from_path(
        cls, path: Union[str, "PathLike[str]"], *, fetcher: Optional[DirectoryFetcher] = None
    ) -> "DirectoryHandle":
        """Load the directory from a CSV file on disk."""
        return cls(read_path(path), fetcher)

    @classmethod
    def from_reader(
        cls, reader: IO, *, fetcher: Optional[DirectoryFetcher] = None
    ) -> "DirectoryHandle":
        """Load the directory from a binary or text file-like object."""
        return cls(read_reader(reader), fetcher)

    @classmethod
    def from_bytes(
        cls, data: bytes, *, fetcher: Optional[DirectoryFetcher] = None
    ) -> "DirectoryHandle":
        """Load the directory from an in-memory CSV payload."""
        return cls(read_bytes(data), fetcher)

    @classmethod
    def from_download(
        cls,
        fetcher: Optional[DirectoryFetcher] = None,
        *,
        settings: Optional[HttpSettings] = None,
    ) -> "DirectoryHandle":
        """Download the directory and build a handle around it.

        Raises:
            DirectoryInitError: If the first download fails or yields no
                directory.
        """

        fetcher = fetcher or DirectoryFetcher(settings=settings)
        try:
            build = fetcher.fetch()
        except WwffDirectoryError as exc:
            fetcher.close()
            raise DirectoryInitError(f"Initial WWFF directory download failed: {exc}") from exc
        if build is None:
            fetcher.close()
            raise DirectoryInitError(
                "Initial WWFF directory download returned no content (HTTP 304)"
            )
        return cls(build, fetcher, settings=settings)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    @property
    def fetcher(self) -> DirectoryFetcher:
        """Fetcher used by :meth:`refresh`, created on first use."""
        if self._fetcher is None:
            self._fetcher = DirectoryFetcher(settings=self._settings)
        return self._fetcher

    def refresh(self) -> bool:
        """Replace the directory if upstream published new content.

        Returns:
            ``True`` when the directory was replaced, ``False`` when upstream
            reported no change.

        Raises:
            FetchError: If the download fails; the current directory is kept.
        """

        with self._write_lock:
            build = self.fetcher.fetch()
            if build is None:
                return False
            self._build = build
        LOGGER.info(
            "WWFF directory refreshed",
            extra={
                "extra_fields": {
                    "entries": len(build.directory),
                    "rows_skipped": build.rows_skipped,
                }
            },
        )
        return True

    try_download_update = refresh

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def entries(self) -> Directory:
        """The directory currently served."""
        return self._build.directory

    @property
    def last_build(self) -> DirectoryBuild:
        """Statistics of the build currently served."""
        return self._build

    def get(self, reference: str) -> Optional[Entry]:
        """Return the entry for ``reference`` (any letter case), or ``None``."""
        return self._build.directory.get(normalize_reference(reference))

    lookup = get

    def __getitem__(self, reference: str) -> Entry:
        return self._build.directory[normalize_reference(reference)]

    def __contains__(self, reference: object) -> bool:
        if not isinstance(reference, str):
            return False
        return normalize_reference(reference) in self._build.directory

    def __iter__(self) -> Iterator[str]:
        return iter(self._build.directory)

    def __len__(self) -> int:
        return len(self._build.directory)

    def __repr__(self) -> str:
        return f"DirectoryHandle({len(self)} entries)"

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the fetcher's HTTP client, if one was created."""
        if self._fetcher is not None:
            self._fetcher.close()

    def __enter__(self) -> "DirectoryHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
