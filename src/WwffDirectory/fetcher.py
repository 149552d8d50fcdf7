# === NAVMAP v1 ===
# {
#   "module": "WwffDirectory.fetcher",
#   "purpose": "Cache-validating download of the WWFF directory CSV",
#   "sections": [
#     {"id": "fetcherstate", "name": "FetcherState", "anchor": "class-fetcherstate", "kind": "class"},
#     {"id": "directoryfetcher", "name": "DirectoryFetcher", "anchor": "class-directoryfetcher", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Cache-validating fetcher for the published directory.

The fetcher has two states.  ``UNVALIDATED`` until the first HTTP 200, after
which it is ``VALIDATED`` and holds the ETag / Last-Modified tokens of the
most recent successful download.  Each :meth:`DirectoryFetcher.fetch` sends
the held tokens as conditional headers:

- HTTP 304 returns ``None`` without parsing anything or touching state;
- HTTP 200 parses the body through the directory builder, then replaces the
  held tokens and returns the new :class:`~WwffDirectory.builder.DirectoryBuild`;
- any other status, or a transport failure, raises
  :class:`~WwffDirectory.errors.FetchError` and leaves state unchanged.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

import httpx

from .builder import DirectoryBuild, read_bytes
from .conditional import CacheValidators, ConditionalRequestHelper, NotModified
from .errors import FetchError
from .http import build_http_client
from .settings import HttpSettings, get_settings

__all__ = ["FetcherState", "DirectoryFetcher"]

LOGGER = logging.getLogger(__name__)


class FetcherState(str, Enum):
    """Lifecycle of the fetcher's cache validators."""

    UNVALIDATED = "unvalidated"
    VALIDATED = "validated"


class DirectoryFetcher:
    """Download the directory CSV only when upstream content changed.

    Attributes:
        url: Location of the directory CSV.
        parse_count: Number of response bodies parsed so far.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        *,
        settings: Optional[HttpSettings] = None,
        url: Optional[str] = None,
    ) -> None:
        http_settings = settings or get_settings().http
        self.url = url or http_settings.directory_url
        self._owns_client = client is None
        self._client = client if client is not None else build_http_client(http_settings)
        self._validators: Optional[CacheValidators] = None
        self.parse_count = 0

    @property
    def validators(self) -> Optional[CacheValidators]:
        """Validators from the most recent successful download."""
        return self._validators

    @property
    def state(self) -> FetcherState:
        if self._validators is None:
            return FetcherState.UNVALIDATED
        return FetcherState.VALIDATED

    def fetch(self) -> Optional[DirectoryBuild]:
        """Conditionally download and parse the directory.

        Returns:
            The freshly parsed directory, or ``None`` when the origin answered
            304 Not Modified.

        Raises:
            FetchError: On transport failures or unexpected status codes.
        """

        helper = ConditionalRequestHelper(self._validators)
        headers = helper.build_headers()
        for name, value in headers.items():
            LOGGER.debug("Adding %s header: %s", name, value)

        try:
            response = self._client.get(self.url, headers=headers)
        except httpx.RequestError as exc:
            LOGGER.warning(
                "Directory download failed: %s",
                exc,
                extra={"extra_fields": {"url": self.url, "error": type(exc).__name__}},
            )
            raise FetchError(f"Failed to download {self.url}: {exc}", url=self.url) from exc

        try:
            outcome = helper.interpret_response(response, self.url)
        except FetchError:
            LOGGER.warning(
                "Directory download returned HTTP %d",
                response.status_code,
                extra={"extra_fields": {"url": self.url, "status_code": response.status_code}},
            )
            raise

        if isinstance(outcome, NotModified):
            LOGGER.debug("wwff_directory.csv not modified. Bandwidth saved.")
            return None

        build = read_bytes(response.content)
        self._validators = outcome.validators
        self.parse_count += 1
        LOGGER.info(
            "Downloaded WWFF directory with %d entries (%d rows skipped)",
            len(build.directory),
            build.rows_skipped,
            extra={
                "extra_fields": {
                    "url": self.url,
                    "etag": outcome.validators.etag,
                    "last_modified": outcome.validators.last_modified,
                }
            },
        )
        return build

    def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "DirectoryFetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
