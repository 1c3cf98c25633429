"""Backlink MCP tools.

All tools delegate to core operations in markdown_vault.core.backlink_operations.
"""
from __future__ import annotations

from typing import Any

from markdown_vault.server import mcp
from markdown_vault.config import CONFIGURATION
from markdown_vault.models import GetBacklinksInput
from markdown_vault.core.backlink_operations import get_backlinks


@mcp.tool()
async def get_vault_note_backlinks(input: GetBacklinksInput) -> dict[str, Any]:
    """List the notes that link to a note.

    A link is ``[[target]]`` or ``[[target|alias]]`` where ``target`` is the
    note's relative path, the path without ``.md``, the bare filename, or the
    bare filename without ``.md``. The note itself is never listed.

    Args:
        input (GetBacklinksInput): Validated input containing:
            - relative_path (str): Note path inside the vault, with .md
            - vault_root (str, optional): Vault directory (omit to use default vault)

    Returns:
        {
            "relative_path": str,
            "backlinks": [{"title": str, "relative_path": str}]  # sorted by path
        }

    Error Handling:
        - ValidationError: Empty or absolute relative_path
        - Vault directory missing → Error naming the directory
    """
    vault_root = CONFIGURATION.resolve_root(input.vault_root)
    return {
        "relative_path": input.relative_path,
        "backlinks": get_backlinks(input.relative_path, vault_root),
    }
