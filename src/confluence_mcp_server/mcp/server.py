"""MCP Server for Confluence integration.

This module implements the Model Context Protocol server that lets AI agents
browse spaces, read, search, create and update Confluence pages.

Transports:
    stdio (default, for desktop MCP clients)
    streamable HTTP on port 3002 (USE_HTTP_TRANSPORT=true or --http), served at /mcp
Protocol: JSON-RPC 2.0 over MCP
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import mcp.server.stdio
import mcp.types as types
import uvicorn
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from .. import __version__
from ..config import Config
from ..core.async_utils import run_sync
from ..core.client import ConfluenceClient
from ..logger import setup_logging
from .lifespan import load_server_config, server_lifespan
from .tools import ALL_SPECS, ToolRegistry, build_error_response
from .tools.registry import ToolSpec

logger = logging.getLogger(__name__)

SERVER_NAME = "confluence-mcp"

server = Server(SERVER_NAME)

# Global client instance (initialized in lifespan)
_confluence_client: ConfluenceClient | None = None

# Global registry instance (initialized in main)
_registry: ToolRegistry | None = None


# ---------------------------------------------------------------------------
# Ping tool (always available)
# ---------------------------------------------------------------------------


async def _handle_ping(
    client: ConfluenceClient, args: dict
) -> types.CallToolResult:
    """Handle ping tool -- test Confluence connectivity."""
    try:
        base_url = await run_sync(client.validate_connection)
        return types.CallToolResult(
            content=[
                types.TextContent(
                    type="text",
                    text=f"Confluence MCP server connected successfully to {base_url}",
                )
            ]
        )
    except Exception as e:
        return types.CallToolResult(
            content=[
                types.TextContent(
                    type="text",
                    text=f"Confluence connection failed: {e}. Check CONFLUENCE_URL, CONFLUENCE_USERNAME, CONFLUENCE_API_TOKEN.",
                )
            ],
            isError=True,
        )


PING_SPEC = ToolSpec(
    tool=types.Tool(
        name="ping",
        description="Test Confluence MCP server connectivity",
        inputSchema={
            "type": "object",
            "properties": {},
            "required": [],
        },
    ),
    handler=_handle_ping,
    domain="space",
    failure_message="Ping failed",
)


# ---------------------------------------------------------------------------
# Global accessors
# ---------------------------------------------------------------------------


def get_client() -> ConfluenceClient:
    """Get the global ConfluenceClient instance.

    Raises:
        RuntimeError: If client is not initialized
    """
    if _confluence_client is None:
        raise RuntimeError(
            "ConfluenceClient not initialized. Server lifespan not started."
        )
    return _confluence_client


def set_client(client: ConfluenceClient | None) -> None:
    """Set the global ConfluenceClient instance, or None to clear."""
    global _confluence_client
    _confluence_client = client


def get_registry() -> ToolRegistry:
    """Get the global ToolRegistry instance.

    Raises:
        RuntimeError: If registry is not initialized
    """
    if _registry is None:
        raise RuntimeError("ToolRegistry not initialized.")
    return _registry


def set_registry(registry: ToolRegistry | None) -> None:
    """Set the global ToolRegistry instance, or None to clear."""
    global _registry
    _registry = registry


def build_registry(config: Config) -> ToolRegistry:
    """Build the registry of all tools, dropping write tools in read-only mode."""
    all_specs = [PING_SPEC] + ALL_SPECS
    registry = ToolRegistry(all_specs, read_only=config.read_only)
    logger.info(
        "Registered %d tools (of %d total)",
        registry.tool_count(),
        len(all_specs),
    )
    return registry


# ---------------------------------------------------------------------------
# MCP protocol handlers
# ---------------------------------------------------------------------------


@server.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    """List available Confluence tools."""
    return get_registry().list_tools()


@server.call_tool()
async def handle_call_tool(
    name: str, arguments: dict | None
) -> types.CallToolResult:
    """Handle tool execution via ToolRegistry dispatch.

    Arguments have already been validated against the tool's inputSchema by
    the MCP server before this handler runs.
    """
    client = get_client()
    try:
        return await get_registry().call_tool(name, arguments, client)
    except ValueError as e:
        # Unknown or filtered-out tool name
        return build_error_response(
            "unknown_tool",
            str(e),
            "Use list_tools to see available tools.",
        )


# ---------------------------------------------------------------------------
# Transports
# ---------------------------------------------------------------------------


class StreamableHTTPEndpoint:
    """ASGI endpoint forwarding requests to the streamable HTTP session manager."""

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.session_manager.handle_request(scope, receive, send)


def create_http_app(session_manager: StreamableHTTPSessionManager) -> Starlette:
    """Starlette app serving MCP at ``/mcp`` for the session manager's lifetime."""

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with session_manager.run():
            yield

    return Starlette(
        routes=[Route("/mcp", endpoint=StreamableHTTPEndpoint(session_manager))],
        lifespan=lifespan,
    )


async def serve_stdio() -> None:
    """Serve MCP over stdin/stdout until the client disconnects."""
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        init_options = InitializationOptions(
            server_name=SERVER_NAME,
            server_version=__version__,
            capabilities=server.get_capabilities(
                notification_options=NotificationOptions(),
                experimental_capabilities={},
            ),
        )
        await server.run(read_stream, write_stream, init_options)


async def serve_http(config: Config) -> None:
    """Serve MCP over streamable HTTP until interrupted."""
    session_manager = StreamableHTTPSessionManager(app=server, stateless=True)
    app = create_http_app(session_manager)
    uvicorn_config = uvicorn.Config(
        app,
        host=config.http_host,
        port=config.http_port,
        log_level="debug" if config.debug else "info",
    )
    logger.info(
        "Serving streamable HTTP on http://%s:%d/mcp",
        config.http_host,
        config.http_port,
    )
    print(
        f"  Listening on http://{config.http_host}:{config.http_port}/mcp",
        file=sys.stderr,
    )
    await uvicorn.Server(uvicorn_config).serve()


# ---------------------------------------------------------------------------
# Server lifecycle
# ---------------------------------------------------------------------------


async def main(config_overrides: dict | None = None):
    """Run the MCP server on the configured transport.

    Loads configuration, sets up logging for the transport (file only for
    stdio, never stdout), validates the Confluence connection via the
    lifespan manager, and serves until the client disconnects.

    Args:
        config_overrides: Optional dict with config values to override
            (url, username, api_token, space_key, http, port, insecure,
            read_only, debug, log_file, log_format)
    """
    overrides = config_overrides or {}
    config = load_server_config(config_overrides)

    # Must run before the stdio transport starts so nothing reaches stdout
    setup_logging(
        mode="http" if config.use_http_transport else "stdio",
        debug=config.debug,
        log_file=overrides.get("log_file") or config.log_file,
        debug_format=overrides.get("log_format", "text"),
        level=config.log_level,
    )

    set_registry(build_registry(config))

    async with server_lifespan(config) as ctx:
        set_client(ctx["client"])
        try:
            if config.use_http_transport:
                await serve_http(config)
            else:
                await serve_stdio()
        finally:
            set_client(None)
            set_registry(None)


def run() -> None:
    """Entry point that handles errors gracefully and parses CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Confluence MCP Server - Model Context Protocol server for Atlassian Confluence",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with default config (from .env or .confluence_mcp/config.yml)
  confluence-mcp-server

  # Override connection settings (Bearer token auth when no username)
  confluence-mcp-server --url https://wiki.example.com --token <token>

  # Basic auth (Atlassian Cloud: email + API token)
  confluence-mcp-server --url https://example.atlassian.net/wiki --username me@example.com

  # Serve streamable HTTP on port 3002 instead of stdio
  confluence-mcp-server --http

  # Hide create-page and update-page
  confluence-mcp-server --read-only

Note: In stdio mode all user-facing messages are written to stderr and logs go
to the log file. Do not pipe stdin/stdout manually.
        """,
    )

    parser.add_argument(
        "--url",
        help="Override Confluence base URL (takes precedence over CONFLUENCE_URL env var and config files)",
    )
    parser.add_argument(
        "--username",
        help="Override Confluence username (enables Basic auth; takes precedence over CONFLUENCE_USERNAME)",
    )
    parser.add_argument(
        "--token",
        help="Override API token (visible in process list -- prefer CONFLUENCE_API_TOKEN env var)",
    )
    parser.add_argument(
        "--space-key",
        help="Default space for create-page (takes precedence over TESTING_SPACE_KEY)",
    )
    parser.add_argument(
        "--http",
        action="store_true",
        help="Serve streamable HTTP instead of stdio (same as USE_HTTP_TRANSPORT=true)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="HTTP port (default: 3002)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (use only for development)",
    )
    parser.add_argument(
        "--read-only",
        action="store_true",
        help="Hide create-page and update-page",
    )
    parser.add_argument(
        "--log-file",
        help="Log file path (default: /tmp/confluence-mcp-server.log in stdio mode)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Log record format (default: text)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging, including raw API payloads",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"confluence-mcp-server version {__version__}",
    )

    args = parser.parse_args()

    config_overrides: dict = {}
    if args.url:
        config_overrides["url"] = args.url
    if args.username:
        config_overrides["username"] = args.username
    if args.token:
        config_overrides["api_token"] = args.token
    if args.space_key:
        config_overrides["space_key"] = args.space_key
    if args.http:
        config_overrides["http"] = True
    if args.port is not None:
        config_overrides["port"] = args.port
    if args.insecure:
        config_overrides["insecure"] = True
    if args.read_only:
        config_overrides["read_only"] = True
    if args.debug:
        config_overrides["debug"] = True
    if args.log_file:
        config_overrides["log_file"] = args.log_file
    if args.log_format != "text":
        config_overrides["log_format"] = args.log_format

    if config_overrides:
        override_keys = [k for k in config_overrides if k != "api_token"]
        if override_keys:
            print(
                f"Config overrides from CLI: {', '.join(override_keys)}",
                file=sys.stderr,
            )

    try:
        asyncio.run(main(config_overrides=config_overrides or None))
    except RuntimeError:
        # Error already printed to stderr by lifespan manager
        sys.exit(1)
    except OSError as e:
        print(f"Failed to start Confluence MCP Server: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    run()
