"""CQL search tool handler."""

import logging

import mcp.types as types

from ...core.async_utils import run_sync
from ...core.client import ConfluenceClient
from ...validators import bounded_int, require_string
from .formatting import clean_response
from .registry import ToolSpec

logger = logging.getLogger(__name__)

SEARCH_TOOLS = [
    types.Tool(
        name="search",
        description=(
            "Search Confluence with a CQL query, e.g. "
            'type=page AND space=DOCS AND text ~ "release notes". '
            "Several hits come back as numbered results with pagination metadata."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "cql": {
                    "type": "string",
                    "description": "The CQL query to execute (required)",
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of results to return (default: 10, max: 100)",
                    "default": 10,
                    "minimum": 1,
                    "maximum": 100,
                },
            },
            "required": ["cql"],
        },
    ),
]


async def _handle_search(
    client: ConfluenceClient, args: dict
) -> types.CallToolResult:
    """Handle search."""
    cql = require_string(args, "cql")
    limit = bounded_int(args, "limit", 10, minimum=1, maximum=100)

    logger.info('Searching with query "%s", limit: %s', cql, limit)
    results = await run_sync(client.search, cql, limit)
    return clean_response(results, client.base_url)


SEARCH_SPECS: list[ToolSpec] = [
    ToolSpec(
        tool=SEARCH_TOOLS[0],
        handler=_handle_search,
        domain="search",
        failure_message="Failed to search Confluence",
    ),
]
