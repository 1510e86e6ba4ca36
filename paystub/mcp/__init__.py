"""Paystub MCP server (optional extra: pip install paystub[mcp])."""
