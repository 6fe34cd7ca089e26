"""MCP server exposing Confluence spaces, pages and CQL search as tools."""

__version__ = "1.0.0"
