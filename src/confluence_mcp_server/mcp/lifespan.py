"""Configuration loading and lifespan management for MCP server startup and shutdown."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv

from ..config import Config, load_config
from ..config_loader import discover_config_files, load_hierarchical_config
from ..config_schema import build_config, to_fallbacks
from ..core.async_utils import run_sync
from ..core.client import ConfluenceClient

logger = logging.getLogger(__name__)


def _stderr_print(msg: str) -> None:
    """Print message to stderr for user feedback (safe in stdio mode)."""
    print(msg, file=sys.stderr, flush=True)


def load_server_config(config_overrides: dict[str, Any] | None = None) -> Config:
    """Load configuration from every source.

    Precedence: CLI args > env vars (.env loaded first) > YAML config > defaults.

    Args:
        config_overrides: Optional dict with values from CLI (url, username,
            api_token, space_key, http, port, insecure, read_only, debug)

    Raises:
        RuntimeError: If configuration is missing or invalid.
    """
    try:
        # .env first, so ${VAR} interpolation in YAML sees its values
        load_dotenv()

        yaml_fallbacks: dict[str, Any] | None = None
        sources = []
        config_files = discover_config_files()
        if config_files:
            unified = build_config(load_hierarchical_config())
            yaml_fallbacks = to_fallbacks(unified)
            sources.append(f"config file: {config_files[0]}")

        overrides = config_overrides or {}
        config = load_config(
            url=overrides.get("url"),
            username=overrides.get("username"),
            api_token=overrides.get("api_token"),
            space_key=overrides.get("space_key"),
            http=overrides.get("http", False),
            port=overrides.get("port"),
            insecure=overrides.get("insecure", False),
            read_only=overrides.get("read_only", False),
            debug=overrides.get("debug", False),
            yaml_fallbacks=yaml_fallbacks,
        )
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        _stderr_print(f"ERROR: Configuration error: {e}")
        _stderr_print("  Ensure CONFLUENCE_URL and CONFLUENCE_API_TOKEN are set.")
        raise RuntimeError(
            f"Configuration error: {e}. Ensure CONFLUENCE_URL and CONFLUENCE_API_TOKEN are set."
        ) from e

    if config_overrides:
        sources.append("CLI arguments")
    sources.append("environment variables")
    source_desc = ", ".join(sources)
    logger.info("Configuration loaded from: %s", source_desc)
    _stderr_print(f"  Configuration loaded from: {source_desc}")
    _stderr_print(f"  Confluence URL: {config.confluence_url}")
    if config.spaces_filter:
        _stderr_print(f"  Spaces filter: {', '.join(config.spaces_filter)}")
    return config


@asynccontextmanager
async def server_lifespan(config: Config) -> AsyncIterator[dict[str, Any]]:
    """
    Manage server startup and shutdown lifecycle.

    On startup:
    - Create ConfluenceClient from the already-loaded config
    - Validate credentials and reachability; fail fast if Confluence is
      unreachable

    On shutdown:
    - Log shutdown message

    Yields:
        Dict with 'client' key containing the initialized ConfluenceClient

    Raises:
        RuntimeError: If the Confluence connection check fails.
    """
    logger.info("MCP server starting...")
    _stderr_print(
        f"Starting Confluence MCP Server with {'HTTP' if config.use_http_transport else 'stdio'} transport"
    )

    logger.info("Validating Confluence connection...")
    _stderr_print("  Validating Confluence connection...")
    try:
        client = ConfluenceClient(config)
        await run_sync(client.validate_connection)
        logger.info("Successfully connected to %s", config.confluence_url)
        _stderr_print(f"  Connected to {config.confluence_url}")
        _stderr_print("Server ready. Waiting for MCP client connection...")
    except Exception as e:
        logger.error("Failed to connect to Confluence: %s", e)
        _stderr_print("ERROR: Confluence connection failed.")
        _stderr_print(f"  {e}")
        _stderr_print("  Check CONFLUENCE_URL, CONFLUENCE_USERNAME, CONFLUENCE_API_TOKEN.")
        raise RuntimeError(
            f"Confluence connection failed: {e}. "
            "Check CONFLUENCE_URL, CONFLUENCE_USERNAME, CONFLUENCE_API_TOKEN."
        ) from e

    yield {"client": client}

    logger.info("MCP server shutting down")
    _stderr_print("Confluence MCP Server shutting down.")
