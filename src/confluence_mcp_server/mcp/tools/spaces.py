"""Space tool handlers: list-spaces and get-space."""

import logging

import mcp.types as types

from ...core.async_utils import run_sync
from ...core.client import ConfluenceClient
from ...validators import bounded_int, one_of, require_string
from .formatting import clean_response
from .registry import ToolSpec

logger = logging.getLogger(__name__)

SPACE_TYPES = ("global", "personal")
SPACE_STATUSES = ("current", "archived")

# Tool definitions for list_tools()
SPACE_TOOLS = [
    types.Tool(
        name="list-spaces",
        description="List Confluence spaces. If a space allow-list is configured, only those spaces are shown.",
        inputSchema={
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of spaces to return (default: 25, max: 100)",
                    "default": 25,
                    "minimum": 1,
                    "maximum": 100,
                },
                "start": {
                    "type": "integer",
                    "description": "Starting index for pagination (default: 0)",
                    "default": 0,
                    "minimum": 0,
                },
                "type": {
                    "type": "string",
                    "enum": list(SPACE_TYPES),
                    "description": "Type of spaces to return",
                },
                "status": {
                    "type": "string",
                    "enum": list(SPACE_STATUSES),
                    "description": "Status of spaces to return",
                },
            },
            "required": [],
        },
    ),
    types.Tool(
        name="get-space",
        description="Get a Confluence space by its key.",
        inputSchema={
            "type": "object",
            "properties": {
                "spaceKey": {
                    "type": "string",
                    "description": "The key of the space to retrieve",
                },
            },
            "required": ["spaceKey"],
        },
    ),
]


async def _handle_list_spaces(
    client: ConfluenceClient, args: dict
) -> types.CallToolResult:
    """Handle list-spaces."""
    params: dict = {
        "limit": bounded_int(args, "limit", 25, minimum=1, maximum=100),
        "start": bounded_int(args, "start", 0, minimum=0),
    }
    space_type = one_of(args, "type", SPACE_TYPES)
    if space_type:
        params["type"] = space_type
    status = one_of(args, "status", SPACE_STATUSES)
    if status:
        params["status"] = status

    logger.info("Getting spaces with params: %s", params)
    spaces = await run_sync(client.get_spaces, params)
    return clean_response(spaces, client.base_url)


async def _handle_get_space(
    client: ConfluenceClient, args: dict
) -> types.CallToolResult:
    """Handle get-space."""
    space_key = require_string(args, "spaceKey")

    logger.info("Getting space with key: %s", space_key)
    space = await run_sync(client.get_space, space_key)
    return clean_response(space, client.base_url)


SPACE_SPECS: list[ToolSpec] = [
    ToolSpec(
        tool=SPACE_TOOLS[0],
        handler=_handle_list_spaces,
        domain="space",
        failure_message="Failed to get Confluence spaces",
    ),
    ToolSpec(
        tool=SPACE_TOOLS[1],
        handler=_handle_get_space,
        domain="space",
        failure_message="Failed to get Confluence space",
    ),
]
