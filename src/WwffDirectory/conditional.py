"""
Conditional Request Metadata

This module centralises helper types for conditional HTTP requests that rely on
ETag and Last-Modified headers. It provides small dataclasses for the cache
validators captured from the directory endpoint alongside a helper that builds
request headers and classifies origin responses. The fetcher uses them to skip
re-downloading and re-parsing the directory when upstream has not changed.

Key Features:
- ``CacheValidators`` holding the opaque ETag / Last-Modified tokens.
- Helper for constructing `If-None-Match`/`If-Modified-Since` headers.
- Classification of responses into not-modified, modified, or failure.

Dependencies:
- `httpx`: Required for the `Response` type used when interpreting outcomes.

Usage:
    from WwffDirectory.conditional import ConditionalRequestHelper

    helper = ConditionalRequestHelper(validators)
    response = client.get(url, headers=helper.build_headers())
    result = helper.interpret_response(response)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Union

import httpx

from .errors import FetchError

__all__ = [
    "CacheValidators",
    "NotModified",
    "Modified",
    "ConditionalRequestHelper",
]


@dataclass(frozen=True)
class CacheValidators:
    """Cache validator tokens captured from a successful response.

    Attributes:
        etag: Entity tag reported by the origin server, if any.
        last_modified: Last-Modified header value supplied by the origin, if any.

    Examples:
        >>> CacheValidators.from_headers({"ETag": '"abc"'})
        CacheValidators(etag='"abc"', last_modified=None)
    """

    etag: Optional[str] = None
    last_modified: Optional[str] = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "CacheValidators":
        """Extract validators from response headers (case-insensitive)."""

        lowered = {key.lower(): value for key, value in headers.items()}
        return cls(etag=lowered.get("etag"), last_modified=lowered.get("last-modified"))


@dataclass(frozen=True)
class NotModified:
    """Represents HTTP 304 Not Modified; the held validators stay current."""

    validators: Optional[CacheValidators]


@dataclass(frozen=True)
class Modified:
    """Represents HTTP 200 carrying a fresh body and its new validators."""

    validators: CacheValidators


class ConditionalRequestHelper:
    """Utility for constructing conditional requests and interpreting responses.

    Attributes:
        prior: Validators observed during the last successful download, or
            ``None`` before the first one.

    Examples:
        >>> helper = ConditionalRequestHelper(CacheValidators(etag="abcd"))
        >>> helper.build_headers()
        {'If-None-Match': 'abcd'}
    """

    def __init__(self, prior: Optional[CacheValidators] = None) -> None:
        self.prior = prior

    def build_headers(self) -> Dict[str, str]:
        """Generate conditional request headers from the prior validators.

        Returns:
            Mapping of conditional header names to values; empty before the
            first successful download.
        """

        headers: Dict[str, str] = {}
        if self.prior is None:
            return headers
        if self.prior.etag:
            headers["If-None-Match"] = self.prior.etag
        if self.prior.last_modified:
            headers["If-Modified-Since"] = self.prior.last_modified
        return headers

    def interpret_response(
        self, response: httpx.Response, url: Optional[str] = None
    ) -> Union[NotModified, Modified]:
        """Classify ``response`` as not modified or modified.

        Args:
            response: HTTP response returned from the conditional request.
            url: Requested URL, reported on failure.

        Returns:
            `NotModified` for HTTP 304, `Modified` for HTTP 200.

        Raises:
            FetchError: For any other status code.
        """

        if response.status_code == 304:
            return NotModified(validators=self.prior)
        if response.status_code == 200:
            return Modified(validators=CacheValidators.from_headers(response.headers))
        raise FetchError(
            f"HTTP response returned status code {response.status_code}",
            url=url,
            status_code=response.status_code,
        )
