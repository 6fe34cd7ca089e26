"""Error response builders for MCP tool handlers.

Every failure a tool can hit is turned into a ``CallToolResult`` with
``isError=True`` and a corrective action, so agents can recover without a
human and nothing propagates past the tool boundary.
"""

import mcp.types as types

from ...core.exceptions import ConfluenceAPIError, NotFoundError


def build_error_response(
    error_type: str, message: str, corrective_action: str
) -> types.CallToolResult:
    """Build a structured error response with corrective action.

    Args:
        error_type: Error category (not_found, permission_denied, version_conflict,
            configuration_error, validation_error, server_error, unknown_tool)
        message: Human-readable error description
        corrective_action: Specific action the agent can take to resolve the error

    Returns:
        CallToolResult with isError=True

    Examples:
        >>> build_error_response("not_found", "Space DOCS not found", "Use list-spaces to find space keys.")
        CallToolResult(content=[TextContent(...)], isError=True)
    """
    error_text = f"Error ({error_type}): {message}\n\nAction: {corrective_action}"

    return types.CallToolResult(
        content=[types.TextContent(type="text", text=error_text)],
        isError=True,
    )


# ---------------------------------------------------------------------------
# Domain-specific corrective action messages
# ---------------------------------------------------------------------------

_DOMAIN_MESSAGES: dict[str, dict[str, str]] = {
    "space": {
        "not_found": "Use list-spaces to find available space keys.",
        "permission": "Check CONFLUENCE_USERNAME/CONFLUENCE_API_TOKEN and space permissions.",
        "server": "Check the Confluence instance or retry later.",
    },
    "page": {
        "not_found": "Use search or get-page-by-title to find the page ID.",
        "permission": "Check CONFLUENCE_USERNAME/CONFLUENCE_API_TOKEN and page restrictions.",
        "version": "Fetch the current version with get-page, then retry update-page.",
        "server": "Check the Confluence instance or retry later.",
    },
    "search": {
        "not_found": "Check the CQL query and retry.",
        "permission": "Check CONFLUENCE_USERNAME/CONFLUENCE_API_TOKEN.",
        "bad_request": "Fix the CQL syntax (e.g. type=page AND text ~ \"term\") and retry.",
        "server": "Check the Confluence instance or retry later.",
    },
}


def translate_api_error(
    error: ConfluenceAPIError,
    domain: str,
    failure_message: str,
) -> types.CallToolResult:
    """Translate a Confluence REST failure to a structured error response.

    The HTTP status and raw body stay in the message text.

    Args:
        error: The API error raised by the client
        domain: Operation domain ("space", "page", "search")
        failure_message: What the tool was trying to do, e.g.
            "Failed to get Confluence space"

    Returns:
        CallToolResult with isError=True and corrective action
    """
    msgs = _DOMAIN_MESSAGES.get(domain, _DOMAIN_MESSAGES["page"])
    message = f"{failure_message}: {error}"

    match error:
        case NotFoundError():
            return build_error_response("not_found", message, msgs["not_found"])
        case ConfluenceAPIError(status_code=401 | 403):
            return build_error_response(
                "permission_denied", message, msgs["permission"]
            )
        case ConfluenceAPIError(status_code=409):
            return build_error_response(
                "version_conflict",
                message,
                msgs.get("version", msgs["server"]),
            )
        case ConfluenceAPIError(status_code=400) if "bad_request" in msgs:
            return build_error_response(
                "validation_error", message, msgs["bad_request"]
            )
        case _:
            return build_error_response("server_error", message, msgs["server"])
