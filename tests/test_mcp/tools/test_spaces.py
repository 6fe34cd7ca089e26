"""Tests for list-spaces and get-space handlers."""

import pytest

from confluence_mcp_server.core.exceptions import NotFoundError
from confluence_mcp_server.mcp.tools import SPACE_TOOLS
from confluence_mcp_server.mcp.tools.spaces import (
    _handle_get_space,
    _handle_list_spaces,
)


class TestSpaceToolDefinitions:
    def test_names(self):
        assert [t.name for t in SPACE_TOOLS] == ["list-spaces", "get-space"]

    def test_list_spaces_schema(self):
        props = SPACE_TOOLS[0].inputSchema["properties"]
        assert props["limit"]["default"] == 25
        assert props["limit"]["maximum"] == 100
        assert props["start"]["default"] == 0
        assert props["type"]["enum"] == ["global", "personal"]
        assert props["status"]["enum"] == ["current", "archived"]
        assert SPACE_TOOLS[0].inputSchema["required"] == []

    def test_get_space_requires_key(self):
        assert SPACE_TOOLS[1].inputSchema["required"] == ["spaceKey"]


class TestListSpaces:
    async def test_defaults(self, mock_confluence_client):
        mock_confluence_client.get_spaces.return_value = {"results": []}

        result = await _handle_list_spaces(mock_confluence_client, {})

        mock_confluence_client.get_spaces.assert_called_once_with(
            {"limit": 25, "start": 0}
        )
        assert result.content[0].text == "No results found"

    async def test_all_filters(self, mock_confluence_client):
        mock_confluence_client.get_spaces.return_value = {
            "results": [
                {"key": "~jd", "name": "J D", "type": "personal"},
                {"key": "~ab", "name": "A B", "type": "personal"},
            ],
            "start": 10,
            "limit": 5,
            "size": 2,
        }

        result = await _handle_list_spaces(
            mock_confluence_client,
            {"limit": 5, "start": 10, "type": "personal", "status": "archived"},
        )

        mock_confluence_client.get_spaces.assert_called_once_with(
            {"limit": 5, "start": 10, "type": "personal", "status": "archived"}
        )
        assert "## Result 2" in result.content[0].text
        assert result.meta["start"] == 10

    async def test_single_space(self, mock_confluence_client):
        mock_confluence_client.get_spaces.return_value = {
            "results": [{"key": "DOCS", "name": "Docs", "type": "global"}]
        }
        result = await _handle_list_spaces(mock_confluence_client, {})
        assert result.content[0].text.startswith("🏠 **Docs**")

    @pytest.mark.parametrize(
        "args, message",
        [
            ({"limit": 0}, "limit must be at least 1"),
            ({"limit": 101}, "limit must be at most 100"),
            ({"start": -1}, "start must be at least 0"),
            ({"type": "team"}, "type must be one of: global, personal"),
            ({"status": "deleted"}, "status must be one of: current, archived"),
        ],
    )
    async def test_invalid_arguments(self, mock_confluence_client, args, message):
        with pytest.raises(ValueError, match=message):
            await _handle_list_spaces(mock_confluence_client, args)
        mock_confluence_client.get_spaces.assert_not_called()


class TestGetSpace:
    async def test_renders_space(self, mock_confluence_client):
        mock_confluence_client.get_space.return_value = {
            "id": 1,
            "key": "DOCS",
            "name": "Documentation",
            "type": "global",
            "status": "current",
            "_links": {"webui": "/spaces/DOCS"},
        }

        result = await _handle_get_space(mock_confluence_client, {"spaceKey": "DOCS"})

        mock_confluence_client.get_space.assert_called_once_with("DOCS")
        text = result.content[0].text
        assert "Key: DOCS" in text
        assert "URL: https://wiki.example.com/spaces/DOCS" in text

    async def test_missing_key(self, mock_confluence_client):
        with pytest.raises(ValueError, match="spaceKey is required"):
            await _handle_get_space(mock_confluence_client, {})

    async def test_not_found_propagates_to_registry(self, mock_confluence_client):
        mock_confluence_client.get_space.side_effect = NotFoundError(404, "nope")
        with pytest.raises(NotFoundError):
            await _handle_get_space(mock_confluence_client, {"spaceKey": "NOPE"})
