"""Markdown Vault

Backlink- and frontmatter-aware note store for a plaintext markdown vault,
exposed as a library and as MCP tools.
"""

from markdown_vault.config import CONFIGURATION, load_configuration
from markdown_vault.data_models import (
    Backlink,
    BacklinkResult,
    NoteEntry,
    ScanResult,
    SearchSettings,
    VaultConfiguration,
    VaultMetadata,
)
from markdown_vault.errors import (
    InvalidInputError,
    NoteIOError,
    NoteNotFoundError,
    SearchToolUnavailable,
    VaultError,
)
from markdown_vault.core.note_operations import (
    get_note_content,
    get_note_frontmatter,
    get_note_title,
    list_notes,
    update_note_content,
)
from markdown_vault.core.backlink_operations import find_backlinks, get_backlinks
from markdown_vault.server import mcp, run_server

# Import tools to register them with the MCP server
from markdown_vault import tools  # noqa: F401

__version__ = "0.1.0"
__all__ = [
    "CONFIGURATION",
    "load_configuration",
    "Backlink",
    "BacklinkResult",
    "NoteEntry",
    "ScanResult",
    "SearchSettings",
    "VaultConfiguration",
    "VaultMetadata",
    "VaultError",
    "InvalidInputError",
    "NoteNotFoundError",
    "NoteIOError",
    "SearchToolUnavailable",
    "list_notes",
    "get_note_content",
    "get_note_title",
    "get_note_frontmatter",
    "update_note_content",
    "find_backlinks",
    "get_backlinks",
    "mcp",
    "run_server",
]
