"""Tests for mcp/tools/errors.py — error response builders.

Covers:
- build_error_response() structure and format
- translate_api_error() status-to-category mapping per domain
"""

import mcp.types as types

from confluence_mcp_server.core.exceptions import ConfluenceAPIError, NotFoundError
from confluence_mcp_server.mcp.tools.errors import (
    build_error_response,
    translate_api_error,
)


def _get_error_text(result: types.CallToolResult) -> str:
    """Extract text from first content item with type narrowing for Pyright."""
    content = result.content[0]
    assert isinstance(content, types.TextContent)
    return content.text


# ---------------------------------------------------------------------------
# build_error_response tests
# ---------------------------------------------------------------------------


class TestBuildErrorResponse:
    """Tests for build_error_response()."""

    def test_is_error_flag(self):
        result = build_error_response("not_found", "Not found", "Try again")
        assert isinstance(result, types.CallToolResult)
        assert result.isError is True

    def test_single_text_content(self):
        result = build_error_response("not_found", "Not found", "Try again")
        assert len(result.content) == 1
        assert result.content[0].type == "text"

    def test_error_format(self):
        """Text format is 'Error ({type}): {message}\\n\\nAction: {action}'."""
        result = build_error_response(
            "validation_error", "limit must be at most 100", "Lower the limit."
        )
        assert _get_error_text(result) == (
            "Error (validation_error): limit must be at most 100\n\n"
            "Action: Lower the limit."
        )


# ---------------------------------------------------------------------------
# translate_api_error tests
# ---------------------------------------------------------------------------


class TestTranslateApiError:
    """Tests for translate_api_error()."""

    def test_not_found_space(self):
        error = NotFoundError(404, '{"message":"No space with key: NOPE"}')
        result = translate_api_error(error, "space", "Failed to get Confluence space")
        text = _get_error_text(result)
        assert result.isError is True
        assert text.startswith("Error (not_found): Failed to get Confluence space: ")
        assert "404" in text
        assert "No space with key: NOPE" in text
        assert "list-spaces" in text

    def test_not_found_page(self):
        result = translate_api_error(
            NotFoundError(404, "gone"), "page", "Failed to get Confluence page"
        )
        text = _get_error_text(result)
        assert "not_found" in text
        assert "get-page-by-title" in text

    def test_unauthorized(self):
        result = translate_api_error(
            ConfluenceAPIError(401, "Unauthorized"), "page", "Error creating page"
        )
        text = _get_error_text(result)
        assert "permission_denied" in text
        assert "CONFLUENCE_API_TOKEN" in text

    def test_forbidden(self):
        result = translate_api_error(
            ConfluenceAPIError(403, "Forbidden"), "search", "Failed to search Confluence"
        )
        assert "permission_denied" in _get_error_text(result)

    def test_version_conflict_page(self):
        result = translate_api_error(
            ConfluenceAPIError(409, "Version must be incremented"),
            "page",
            "Error updating page",
        )
        text = _get_error_text(result)
        assert "version_conflict" in text
        assert "409" in text
        assert "get-page" in text

    def test_version_conflict_outside_page_domain(self):
        result = translate_api_error(
            ConfluenceAPIError(409, "conflict"), "space", "Failed"
        )
        text = _get_error_text(result)
        assert "version_conflict" in text
        assert "retry later" in text

    def test_bad_cql(self):
        result = translate_api_error(
            ConfluenceAPIError(400, "Could not parse cql"),
            "search",
            "Failed to search Confluence",
        )
        text = _get_error_text(result)
        assert "validation_error" in text
        assert "CQL" in text

    def test_bad_request_outside_search_is_server_error(self):
        result = translate_api_error(
            ConfluenceAPIError(400, "bad"), "page", "Error creating page"
        )
        assert "server_error" in _get_error_text(result)

    def test_server_error(self):
        result = translate_api_error(
            ConfluenceAPIError(502, "<html>Bad Gateway</html>"),
            "space",
            "Failed to get Confluence spaces",
        )
        text = _get_error_text(result)
        assert "server_error" in text
        assert "502" in text
        assert "<html>Bad Gateway</html>" in text

    def test_unknown_domain_uses_page_messages(self):
        result = translate_api_error(NotFoundError(404, "x"), "attachment", "Failed")
        assert "get-page-by-title" in _get_error_text(result)
