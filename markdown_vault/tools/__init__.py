"""MCP tool definitions for markdown vault operations.

This module imports all tool submodules to register them with the MCP server.
Each tool module uses the @mcp.tool() decorator to auto-register its tools.
"""

# Import all tool modules to register their @mcp.tool() decorated functions
from markdown_vault.tools import note_tools
from markdown_vault.tools import backlink_tools

__all__ = [
    "note_tools",
    "backlink_tools",
]
