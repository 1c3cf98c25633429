"""FastMCP server initialization and tool registration."""

import logging
from mcp.server.fastmcp import FastMCP

from markdown_vault.config import CONFIGURATION

# Initialize logger
logging.basicConfig(level=CONFIGURATION.log_level)
logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("markdown_vault")

# Tool modules are imported in __init__.py to register all @mcp.tool() decorators


def run_server():
    """Start the MCP server with stdio transport."""
    logger.info("Starting markdown vault MCP server")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
