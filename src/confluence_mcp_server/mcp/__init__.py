"""MCP server, lifespan and tool handlers."""
