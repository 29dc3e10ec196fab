"""Infrastructure shared by the MCP server and the health app."""
