"""ToolSpec and ToolRegistry for tool dispatch.

Key concepts:
- ToolSpec: Immutable dataclass linking a Tool definition, an async handler
  with standardized signature (client, args) -> CallToolResult, the
  handler's error domain, and whether the tool writes to Confluence.
- ToolRegistry: Optionally drops write tools at construction time (read-only
  mode), then provides list_tools() and call_tool() dispatch. call_tool() is
  the single place where client exceptions become error content.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import mcp.types as types
import requests

from ...core.client import ConfluenceClient
from ...core.exceptions import ConfigurationError, ConfluenceAPIError
from .errors import build_error_response, translate_api_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Immutable specification for a single MCP tool.

    Attributes:
        tool: The MCP Tool definition (name, description, inputSchema).
        handler: Async handler with signature (client, args) -> CallToolResult.
        domain: Error domain for corrective actions ("space", "page", "search").
        failure_message: Prefix for error messages, e.g. "Failed to get Confluence space".
        writes: True if the tool creates or modifies content.
    """

    tool: types.Tool
    handler: Callable[[ConfluenceClient, dict], Awaitable[types.CallToolResult]]
    domain: str = "page"
    failure_message: str = "Confluence request failed"
    writes: bool = False


class ToolRegistry:
    """Registry of ToolSpecs with optional read-only filtering."""

    def __init__(self, specs: list[ToolSpec], read_only: bool = False):
        self._specs: dict[str, ToolSpec] = {}
        for spec in specs:
            if read_only and spec.writes:
                continue
            self._specs[spec.tool.name] = spec

    def list_tools(self) -> list[types.Tool]:
        """Return list of types.Tool for all registered specs."""
        return [spec.tool for spec in self._specs.values()]

    def tool_count(self) -> int:
        """Return number of registered tools."""
        return len(self._specs)

    async def call_tool(
        self,
        name: str,
        arguments: dict | None,
        client: ConfluenceClient,
    ) -> types.CallToolResult:
        """Dispatch tool call to registered handler.

        Translates Confluence API errors, configuration gaps, validation
        errors and unexpected exceptions into CallToolResult responses with
        corrective actions.

        Raises:
            ValueError: If tool name is not registered (unknown or filtered out).
        """
        spec = self._specs.get(name)
        if spec is None:
            raise ValueError(f"Unknown tool: {name}")
        args = arguments or {}
        try:
            return await spec.handler(client, args)
        except ConfluenceAPIError as e:
            logger.warning("Confluence API error in %s: %s", name, e)
            return translate_api_error(e, spec.domain, spec.failure_message)
        except ConfigurationError as e:
            logger.error("Configuration error in %s: %s", name, e)
            return build_error_response(
                "configuration_error",
                f"{spec.failure_message}: {e}",
                "Pass spaceKey explicitly or set TESTING_SPACE_KEY.",
            )
        except requests.RequestException as e:
            logger.error("Network error in %s: %s", name, e)
            return build_error_response(
                "server_error",
                f"{spec.failure_message}: {e}",
                "Check CONFLUENCE_URL and network connectivity, then retry.",
            )
        except ValueError as e:
            return build_error_response(
                "validation_error",
                f"{spec.failure_message}: {e}",
                "Check parameter values and retry.",
            )
        except Exception as e:
            logger.exception("Unexpected error in tool %s", name)
            return build_error_response(
                "server_error",
                f"{spec.failure_message}: {e}",
                "Check the Confluence instance or retry later.",
            )
