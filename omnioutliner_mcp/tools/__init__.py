"""Tool groups registered with the MCP server."""
