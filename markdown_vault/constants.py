"""Module-level constants for the markdown vault note store."""

from pathlib import Path

# Configuration
CONFIG_PATH = Path(__file__).parent.parent / "vaults.yaml"

# Note files
MARKDOWN_EXTENSION = "md"
MARKDOWN_SUFFIX = f".{MARKDOWN_EXTENSION}"
MARKDOWN_GLOB = f"*{MARKDOWN_SUFFIX}"
FRONTMATTER_DELIMITER = "---"

# External search tool
DEFAULT_SEARCH_EXECUTABLE = "rg"
DEFAULT_SEARCH_TIMEOUT_SECONDS = 10.0

# Logging
LOG_LEVEL = "INFO"
