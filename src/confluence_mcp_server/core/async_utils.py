"""Async utilities for bridging blocking HTTP calls to async MCP handlers."""

import asyncio
from typing import Any, Callable, TypeVar

T = TypeVar("T")


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    Used to wrap blocking ``requests`` calls in async MCP tool handlers.

    Example:
        # In MCP tool handler:
        space = await run_sync(client.get_space, "DOCS")
    """
    return await asyncio.to_thread(func, *args, **kwargs)
