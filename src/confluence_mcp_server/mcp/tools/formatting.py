"""Render Confluence REST payloads as readable text for MCP clients.

Items are classified into a closed set of variants (page, space, generic)
and each variant renders itself. ``clean_response`` wraps the rendering in
a ``CallToolResult`` and handles envelopes with a ``results`` list.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

import mcp.types as types

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 500
GENERIC_VALUE_MAX_LENGTH = 100
SPACE_TYPES = frozenset({"global", "personal"})

# Rendered explicitly by GenericItem, so skipped by the key: value fallback
_GENERIC_SKIP_KEYS = frozenset(
    {"title", "name", "type", "id", "key", "status", "_links"}
)

_TAG_RE = re.compile(r"<[^>]*>")


def storage_to_plain_text(value: str) -> str:
    """Strip storage-format tags and turn ``&nbsp;`` into plain spaces."""
    return _TAG_RE.sub("", value).replace("&nbsp;", " ").strip()


def _web_link(base_url: str, item: dict[str, Any]) -> str | None:
    links = item.get("_links")
    if isinstance(links, dict) and links.get("webui"):
        return f"{base_url}{links['webui']}"
    return None


@dataclass(frozen=True)
class PageItem:
    """A ``type == "page"`` content item."""

    raw: dict[str, Any]

    def render(self, base_url: str) -> str:
        item = self.raw
        lines = [
            f"📄 **{item.get('title')}**",
            f"ID: {item.get('id')}",
            f"Status: {item.get('status')}",
        ]

        space = item.get("space")
        if space:
            lines.append(f"Space: {space.get('name')} ({space.get('key')})")

        version = item.get("version")
        if version:
            lines.append(f"Version: {version.get('number')}")

        storage = (item.get("body") or {}).get("storage")
        if storage:
            plain_text = storage_to_plain_text(storage.get("value") or "")
            if len(plain_text) > PREVIEW_LENGTH:
                lines.append(
                    f"Content Preview: {plain_text[:PREVIEW_LENGTH]}...\n"
                )
                lines.append(f"Full Content:\n{plain_text}")
            else:
                lines.append(f"Content: {plain_text}")

        text = "\n".join(lines) + "\n"
        link = _web_link(base_url, item)
        if link:
            text += f"URL: {link}"
        return text


@dataclass(frozen=True)
class SpaceItem:
    """A space (``type`` is ``global`` or ``personal``)."""

    raw: dict[str, Any]

    def render(self, base_url: str) -> str:
        item = self.raw
        lines = [
            f"🏠 **{item.get('name')}**",
            f"Key: {item.get('key')}",
            f"Type: {item.get('type')}",
            f"Status: {item.get('status') or 'N/A'}",
            f"ID: {item.get('id')}",
        ]

        description = (
            ((item.get("description") or {}).get("plain") or {}).get("value")
        )
        if description:
            lines.append(f"Description: {description}")

        text = "\n".join(lines) + "\n"
        link = _web_link(base_url, item)
        if link:
            text += f"URL: {link}"
        return text


@dataclass(frozen=True)
class GenericItem:
    """Anything else: search hits, attachments, unknown shapes."""

    raw: dict[str, Any]

    def render(self, base_url: str) -> str:
        item = self.raw
        heading = item.get("title") or item.get("name") or "Untitled"
        lines = [f"**{heading}**"]
        for label, key in (
            ("Type", "type"),
            ("ID", "id"),
            ("Key", "key"),
            ("Status", "status"),
        ):
            if item.get(key):
                lines.append(f"{label}: {item[key]}")

        for key, value in item.items():
            if key in _GENERIC_SKIP_KEYS:
                continue
            if isinstance(value, str) and len(value) < GENERIC_VALUE_MAX_LENGTH:
                lines.append(f"{key}: {value}")

        return "\n".join(lines) + "\n"


RenderableItem = PageItem | SpaceItem | GenericItem


def classify_item(item: dict[str, Any]) -> RenderableItem:
    """Pick the rendering variant from the item's ``type`` tag."""
    match item.get("type"):
        case "page":
            return PageItem(item)
        case str() as kind if kind in SPACE_TYPES:
            return SpaceItem(item)
        case _:
            return GenericItem(item)


def format_item_as_text(item: dict[str, Any] | None, base_url: str) -> str:
    """Render one REST item as display text."""
    if not item:
        return "No item data"
    return classify_item(item).render(base_url)


def text_result(text: str, **kwargs: Any) -> types.CallToolResult:
    """Wrap a single text block in a CallToolResult."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)], **kwargs
    )


def clean_response(data: Any, base_url: str) -> types.CallToolResult:
    """Turn a REST payload into a text CallToolResult.

    Envelopes with several ``results`` are rendered as numbered sections and
    carry their pagination fields in the result's ``_meta``.
    """
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Raw data received: %s", json.dumps(data, default=str))

    if not data:
        return text_result("No data found")

    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        return text_result(format_item_as_text(data, base_url))

    if not results:
        return text_result("No results found")

    if len(results) == 1:
        return text_result(format_item_as_text(results[0], base_url))

    sections = [
        f"## Result {index}\n{format_item_as_text(item, base_url)}"
        for index, item in enumerate(results, 1)
    ]
    metadata = {
        "start": data.get("start") or 0,
        "limit": data.get("limit") or 25,
        "size": data.get("size") or len(results),
        "totalSize": data.get("totalSize"),
    }
    return text_result("\n\n".join(sections), _meta=metadata)
