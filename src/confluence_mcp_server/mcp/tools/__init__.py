"""MCP tool handlers for Confluence operations.

This package contains MCP tool implementations that wrap the core
ConfluenceClient with async handlers, text rendering, and structured error
responses.
"""

from .errors import build_error_response, translate_api_error
from .formatting import clean_response, format_item_as_text
from .pages import PAGE_SPECS, PAGE_TOOLS
from .registry import ToolRegistry, ToolSpec
from .search import SEARCH_SPECS, SEARCH_TOOLS
from .spaces import SPACE_SPECS, SPACE_TOOLS

ALL_SPECS: list[ToolSpec] = SPACE_SPECS + PAGE_SPECS + SEARCH_SPECS

__all__ = [
    "build_error_response",
    "translate_api_error",
    "clean_response",
    "format_item_as_text",
    # Registry
    "ToolSpec",
    "ToolRegistry",
    # Spec lists
    "ALL_SPECS",
    "SPACE_SPECS",
    "PAGE_SPECS",
    "SEARCH_SPECS",
    # Tool lists
    "SPACE_TOOLS",
    "PAGE_TOOLS",
    "SEARCH_TOOLS",
]
