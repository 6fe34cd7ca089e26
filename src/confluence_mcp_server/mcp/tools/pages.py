"""Page tool handlers for MCP server.

Read tools (get-page, get-page-by-title) render the REST item directly.
Write tools (create-page, update-page) wrap the rendered page in a success
banner and a direct link built from the base URL, space key and page ID.
"""

import logging
from typing import Any

import mcp.types as types

from ...core.async_utils import run_sync
from ...core.client import ConfluenceClient
from ...core.exceptions import ConfigurationError
from ...validators import (
    bounded_int,
    optional_string,
    require_string,
    string_list,
)
from .formatting import clean_response, text_result
from .registry import ToolSpec

logger = logging.getLogger(__name__)

DEFAULT_EXPAND = ["body.storage", "version", "space"]

# Tool definitions for list_tools()
PAGE_TOOLS = [
    types.Tool(
        name="get-page",
        description="Get a Confluence page by ID, with body, version and space expanded by default.",
        inputSchema={
            "type": "object",
            "properties": {
                "pageId": {
                    "type": "string",
                    "description": "The ID of the page to retrieve (pass as string)",
                },
                "expand": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Properties to expand in the response (default: body.storage, version, space)",
                },
            },
            "required": ["pageId"],
        },
    ),
    types.Tool(
        name="get-page-by-title",
        description="Get a Confluence page by exact title within a space.",
        inputSchema={
            "type": "object",
            "properties": {
                "spaceKey": {
                    "type": "string",
                    "description": "The key of the space containing the page",
                },
                "title": {
                    "type": "string",
                    "description": "The exact title of the page to retrieve",
                },
            },
            "required": ["spaceKey", "title"],
        },
    ),
    types.Tool(
        name="create-page",
        description="Create a Confluence page from storage-format (XHTML) content. Not idempotent: calling twice creates two pages.",
        inputSchema={
            "type": "object",
            "properties": {
                "spaceKey": {
                    "type": "string",
                    "description": "The key of the space where the page will be created (defaults to the configured testing space)",
                },
                "title": {
                    "type": "string",
                    "description": "Title of the new page",
                },
                "content": {
                    "type": "string",
                    "description": "Content of the page in Confluence storage format (HTML)",
                },
                "parentId": {
                    "type": "string",
                    "description": "ID of the parent page, if creating a child page",
                },
            },
            "required": ["title", "content"],
        },
    ),
    types.Tool(
        name="update-page",
        description=(
            "Replace the title and content of a Confluence page. "
            "Pass the page's current version; the update is sent as version + 1."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "pageId": {
                    "type": "string",
                    "description": "ID of the page to update",
                },
                "title": {
                    "type": "string",
                    "description": "New title for the page (current title is kept if omitted)",
                },
                "content": {
                    "type": "string",
                    "description": "New content for the page in Confluence storage format (HTML)",
                },
                "version": {
                    "type": "integer",
                    "minimum": 1,
                    "description": "Current version number (if omitted, will be retrieved automatically)",
                },
            },
            "required": ["pageId", "content"],
        },
    ),
]


def page_url(base_url: str, space_key: str, page_id: Any) -> str:
    """Browseable URL of a page."""
    return f"{base_url}/spaces/{space_key}/pages/{page_id}"


def _success_result(
    banner: str, body: str, base_url: str, space_key: str | None, page_id: Any
) -> types.CallToolResult:
    text = f"✅ **{banner}**\n\n{body}"
    if space_key and page_id is not None:
        text += f"\n\n🔗 **Direct Link:** {page_url(base_url, space_key, page_id)}"
    return text_result(text)


def _first_text(result: types.CallToolResult) -> str:
    content = result.content[0]
    return content.text if isinstance(content, types.TextContent) else ""


async def _handle_get_page(
    client: ConfluenceClient, args: dict
) -> types.CallToolResult:
    """Handle get-page."""
    page_id = require_string(args, "pageId")
    expand = string_list(args, "expand", DEFAULT_EXPAND)

    logger.info("Getting page with ID: %s, expand: %s", page_id, ",".join(expand))
    content = await run_sync(client.get_content_by_id, page_id, expand)
    return clean_response(content, client.base_url)


async def _handle_get_page_by_title(
    client: ConfluenceClient, args: dict
) -> types.CallToolResult:
    """Handle get-page-by-title."""
    space_key = require_string(args, "spaceKey")
    title = require_string(args, "title")

    logger.info('Getting page by title "%s" in space %s', title, space_key)
    response = await run_sync(
        client.get_content_by_space_and_title, space_key, title
    )
    return clean_response(response, client.base_url)


async def _handle_create_page(
    client: ConfluenceClient, args: dict
) -> types.CallToolResult:
    """Handle create-page."""
    title = require_string(args, "title")
    content = require_string(args, "content", allow_empty=True)
    parent_id = optional_string(args, "parentId")

    space_key = optional_string(args, "spaceKey") or client.config.testing_space_key
    if not space_key:
        raise ConfigurationError(
            "No space key provided and TESTING_SPACE_KEY not set in environment"
        )

    logger.info('Creating page "%s" in space %s', title, space_key)
    response = await run_sync(
        client.create_page, space_key, title, content, parent_id
    )

    rendered = _first_text(clean_response(response, client.base_url))
    return _success_result(
        "Page created successfully!",
        rendered,
        client.base_url,
        space_key,
        (response or {}).get("id"),
    )


async def _handle_update_page(
    client: ConfluenceClient, args: dict
) -> types.CallToolResult:
    """Handle update-page.

    A missing title is read from the current page. When the version is
    missing too, the same read supplies it, so the page is fetched once.
    """
    page_id = require_string(args, "pageId")
    content = require_string(args, "content", allow_empty=True)
    title = optional_string(args, "title")
    version = bounded_int(args, "version", None, minimum=1)

    if title is None:
        logger.info("No title provided, retrieving current page %s", page_id)
        current = await run_sync(client.get_content_by_id, page_id, ["version"])
        title = current["title"]
        if version is None:
            version = current["version"]["number"]
        logger.info("Using existing title: %s", title)

    logger.info(
        'Updating page %s with title "%s", content length: %d',
        page_id,
        title,
        len(content),
    )
    response = await run_sync(client.update_page, page_id, title, content, version)
    response = response or {}
    logger.info(
        "Page updated successfully, version: %s",
        (response.get("version") or {}).get("number"),
    )

    rendered = _first_text(clean_response(response, client.base_url))
    return _success_result(
        "Page updated successfully!",
        rendered,
        client.base_url,
        (response.get("space") or {}).get("key"),
        response.get("id"),
    )


PAGE_SPECS: list[ToolSpec] = [
    ToolSpec(
        tool=PAGE_TOOLS[0],
        handler=_handle_get_page,
        domain="page",
        failure_message="Failed to get Confluence page",
    ),
    ToolSpec(
        tool=PAGE_TOOLS[1],
        handler=_handle_get_page_by_title,
        domain="page",
        failure_message="Failed to get Confluence page by title",
    ),
    ToolSpec(
        tool=PAGE_TOOLS[2],
        handler=_handle_create_page,
        domain="page",
        failure_message="Error creating page",
        writes=True,
    ),
    ToolSpec(
        tool=PAGE_TOOLS[3],
        handler=_handle_update_page,
        domain="page",
        failure_message="Error updating page",
        writes=True,
    ),
]
