"""HTTPX client factory for directory downloads."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .settings import HttpSettings, get_settings

__all__ = ["build_http_client"]

LOGGER = logging.getLogger(__name__)


def build_http_client(
    settings: Optional[HttpSettings] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create an :class:`httpx.Client` configured for the directory endpoint.

    Args:
        settings: HTTP settings; defaults to the process-wide settings.
        transport: Optional transport override (``httpx.MockTransport`` in tests).

    Returns:
        A client carrying the configured user agent, timeouts and redirect
        policy. The caller owns it and must close it.
    """

    http_settings = settings or get_settings().http
    timeout = httpx.Timeout(
        http_settings.timeout_read,
        connect=http_settings.timeout_connect,
    )
    LOGGER.debug(
        "HTTP client initialized",
        extra={
            "extra_fields": {
                "user_agent": http_settings.user_agent,
                "follow_redirects": http_settings.follow_redirects,
            }
        },
    )
    return httpx.Client(
        headers={"User-Agent": http_settings.user_agent},
        timeout=timeout,
        follow_redirects=http_settings.follow_redirects,
        trust_env=http_settings.trust_env,
        transport=transport,
    )
