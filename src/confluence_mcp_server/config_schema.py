"""Unified configuration schema for confluence_mcp_server.

Defines Pydantic models for the YAML config file, with dedicated sections
for the Confluence connection, the serving transport, and logging.

Usage:
    from confluence_mcp_server.config_schema import build_config, to_fallbacks

    raw = load_hierarchical_config()
    unified = build_config(raw)
    config = load_config(yaml_fallbacks=to_fallbacks(unified))
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class ConfluenceSettings(BaseModel):
    """Confluence connection settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    url: str | None = Field(default=None, description="Confluence base URL")
    username: str | None = Field(
        default=None, description="Username (omit for Bearer token auth)"
    )
    api_token: str | None = Field(default=None, description="API token")
    testing_space_key: str | None = Field(
        default=None,
        description="Space used by create-page when no spaceKey is given",
    )
    spaces_filter: list[str] | str | None = Field(
        default=None,
        description="Space keys visible through list-spaces (list or comma-separated)",
    )
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    request_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Per-request timeout in seconds (unset means no timeout)",
    )
    read_only: bool = Field(
        default=False, description="Hide create-page and update-page"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {"frozen": True}


class ServerSettings(BaseModel):
    """Serving transport settings."""

    use_http_transport: bool = Field(
        default=False,
        description="Serve streamable HTTP instead of stdio",
    )
    http_host: str | None = Field(default=None, description="HTTP bind host")
    http_port: int = Field(
        default=3002, ge=1, le=65535, description="HTTP bind port"
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unset keeps the transport default (WARNING for stdio, INFO for HTTP).
        file: Optional log file path.
    """

    level: str | None = Field(default=None, description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()`` is always
    valid.
    """

    confluence: ConfluenceSettings = Field(default_factory=ConfluenceSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Missing sections get defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


def to_fallbacks(unified: UnifiedConfig) -> dict[str, Any]:
    """Flatten the ``confluence``, ``server`` and ``logging`` sections into
    the ``yaml_fallbacks`` dict accepted by ``load_config()``.

    ``None`` values are dropped so they never shadow built-in defaults.
    """
    merged = {
        **unified.confluence.model_dump(),
        **unified.server.model_dump(),
        "log_level": unified.logging.level,
        "log_file": unified.logging.file,
    }
    return {k: v for k, v in merged.items() if v is not None}
