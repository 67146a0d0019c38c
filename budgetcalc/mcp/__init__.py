"""Budget Calc MCP server."""
