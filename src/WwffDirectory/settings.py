# === NAVMAP v1 ===
# {
#   "module": "WwffDirectory.settings",
#   "purpose": "Configuration models and environment overrides for directory loading and refresh",
#   "sections": [
#     {"id": "httpsettings", "name": "HttpSettings", "anchor": "class-httpsettings", "kind": "class"},
#     {"id": "wwffsettings", "name": "WwffSettings", "anchor": "class-wwffsettings", "kind": "class"},
#     {"id": "get-settings", "name": "get_settings", "anchor": "function-get-settings", "kind": "function"},
#     {"id": "reset-settings", "name": "reset_settings", "anchor": "function-reset-settings", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Settings for the WWFF directory loader.

Values come from defaults, then from ``WWFF_``-prefixed environment
variables (nested HTTP options use ``__``, for example
``WWFF_HTTP__TIMEOUT_READ=60``).  A process-wide instance is memoised by
:func:`get_settings`; tests call :func:`reset_settings` after patching the
environment.
"""

from __future__ import annotations

import logging
import threading
from importlib import metadata as importlib_metadata
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "PACKAGE_NAME",
    "PACKAGE_VERSION",
    "DEFAULT_DIRECTORY_URL",
    "DEFAULT_USER_AGENT",
    "HttpSettings",
    "WwffSettings",
    "get_settings",
    "reset_settings",
]

PACKAGE_NAME = "WwffDirectory"

try:  # pragma: no cover - metadata may be unavailable during development
    PACKAGE_VERSION = importlib_metadata.version("wwff-directory")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - local source tree
    PACKAGE_VERSION = "0.0.0"

DEFAULT_DIRECTORY_URL = "https://wwff.co/wwff-data/wwff_directory.csv"
DEFAULT_USER_AGENT = f"{PACKAGE_NAME}/{PACKAGE_VERSION}"

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class HttpSettings(BaseModel):
    """HTTP client settings used when downloading the directory."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    directory_url: str = Field(
        default=DEFAULT_DIRECTORY_URL,
        description="Location of the published directory CSV",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header value",
    )
    timeout_connect: float = Field(
        default=10.0,
        gt=0.0,
        le=120.0,
        description="Connect timeout in seconds",
    )
    timeout_read: float = Field(
        default=60.0,
        gt=0.0,
        le=600.0,
        description="Read timeout in seconds",
    )
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")
    trust_env: bool = Field(
        default=True,
        description="Honor HTTP(S)_PROXY and NO_PROXY environment variables",
    )

    @field_validator("directory_url")
    @classmethod
    def require_http_url(cls, v: str) -> str:
        """Reject URLs that httpx cannot fetch."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"directory_url must be an http(s) URL, got '{v}'")
        return v


class WwffSettings(BaseSettings):
    """Top-level settings with ``WWFF_`` environment overrides."""

    model_config = SettingsConfigDict(
        env_prefix="WWFF_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    http: HttpSettings = Field(default_factory=HttpSettings)
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    json_logs: bool = Field(default=False, description="Emit JSON-formatted logs")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Normalize and validate logging level."""
        upper = str(v).upper()
        if upper not in _VALID_LEVELS:
            raise ValueError(f"log_level must be one of {list(_VALID_LEVELS)}, got '{v}'")
        return upper

    def level_int(self) -> int:
        """Convert level string to logging module integer."""
        return getattr(logging, self.log_level)


_SETTINGS_LOCK = threading.Lock()
_SETTINGS: Optional[WwffSettings] = None


def get_settings() -> WwffSettings:
    """Return the memoised process-wide settings."""

    global _SETTINGS  # noqa: PLW0603

    with _SETTINGS_LOCK:
        if _SETTINGS is None:
            _SETTINGS = WwffSettings()
        return _SETTINGS


def reset_settings() -> None:
    """Drop the memoised settings so the next call re-reads the environment."""

    global _SETTINGS  # noqa: PLW0603

    with _SETTINGS_LOCK:
        _SETTINGS = None
