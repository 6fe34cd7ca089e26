"""Core Confluence client functionality used by the MCP server."""

from .async_utils import run_sync
from .client import ConfluenceClient
from .exceptions import (
    ConfigurationError,
    ConfluenceAPIError,
    ConfluenceError,
    NotFoundError,
)

__all__ = [
    "ConfluenceClient",
    "ConfluenceError",
    "ConfluenceAPIError",
    "NotFoundError",
    "ConfigurationError",
    "run_sync",
]
