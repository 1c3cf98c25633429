"""Note MCP tools.

This module provides MCP tool wrappers for note operations:
- List notes with their titles
- Read note content (frontmatter stripped)
- Read note title
- Read note frontmatter
- Update note content while preserving frontmatter

All tools delegate to core operations in markdown_vault.core.note_operations.
"""
from __future__ import annotations

import logging
from typing import Any

from markdown_vault.server import mcp
from markdown_vault.config import CONFIGURATION
from markdown_vault.errors import VaultError
from markdown_vault.models import (
    ListNotesInput,
    GetNoteContentInput,
    GetNoteTitleInput,
    GetNoteFrontmatterInput,
    UpdateNoteContentInput,
)
from markdown_vault.core.note_operations import (
    list_notes,
    get_note_content,
    get_note_title,
    get_note_frontmatter,
    update_note_content,
)

logger = logging.getLogger(__name__)


# ==============================================================================
# READ OPERATIONS
# ==============================================================================

@mcp.tool()
async def list_vault_notes(input: ListNotesInput) -> dict[str, Any]:
    """List every markdown note in the vault with its title.

    Args:
        input (ListNotesInput): Validated input containing:
            - vault_root (str, optional): Vault directory (omit to use default vault)

    Returns:
        {
            "vault_root": str,
            "notes": [{"title": str, "absolute_path": str, "relative_path": str}]
        }

    Error Handling:
        - No vault_root and no default vault configured → Error
        - Missing vault directory → empty ``notes`` list
    """
    vault_root = CONFIGURATION.resolve_root(input.vault_root)
    return {"vault_root": vault_root, "notes": list_notes(vault_root)}


# Body only; the frontmatter block is stripped. Unresolvable notes give "".
@mcp.tool()
async def get_vault_note_content(input: GetNoteContentInput) -> dict[str, Any]:
    """Read a note's markdown body without its frontmatter.

    Args:
        input (GetNoteContentInput): Validated input containing:
            - relative_path (str): Note path inside the vault, with .md
            - vault_root (str, optional): Vault directory (omit to use default vault)

    Returns:
        {"relative_path": str, "content": str}
    """
    vault_root = CONFIGURATION.resolve_root(input.vault_root)
    return {
        "relative_path": input.relative_path,
        "content": get_note_content(input.relative_path, vault_root),
    }


@mcp.tool()
async def get_vault_note_title(input: GetNoteTitleInput) -> dict[str, Any]:
    """Read a note's title: frontmatter ``title`` if set, else the filename.

    Returns:
        {"relative_path": str, "title": str}  # "" when the note cannot be found
    """
    vault_root = CONFIGURATION.resolve_root(input.vault_root)
    return {
        "relative_path": input.relative_path,
        "title": get_note_title(input.relative_path, vault_root),
    }


@mcp.tool()
async def get_vault_note_frontmatter(input: GetNoteFrontmatterInput) -> dict[str, Any]:
    """Read a note's frontmatter as structured data.

    Returns:
        {
            "relative_path": str,
            "frontmatter": dict | None,  # {} for invalid YAML
            "has_frontmatter": bool
        }
    """
    vault_root = CONFIGURATION.resolve_root(input.vault_root)
    metadata = get_note_frontmatter(input.relative_path, vault_root)
    return {
        "relative_path": input.relative_path,
        "frontmatter": metadata,
        "has_frontmatter": metadata is not None,
    }


# ==============================================================================
# WRITE OPERATIONS
# ==============================================================================

@mcp.tool()
async def update_vault_note_content(input: UpdateNoteContentInput) -> dict[str, Any]:
    """Replace a note's body, keeping its frontmatter block byte-for-byte.

    Args:
        input (UpdateNoteContentInput): Validated input containing:
            - absolute_path (str, optional): Absolute note path (wins when it exists)
            - relative_path (str, optional): Note path inside the vault
            - new_body (str): Replacement markdown body
            - vault_root (str, optional): Vault directory (omit to use default vault)

    Returns:
        {"path": str, "status": "updated"} on success, or
        {"status": "error", "error": str} when the note cannot be resolved, read or written.
    """
    try:
        vault_root = input.vault_root
        # An absolute path needs no vault; only fall back to the default when one exists.
        if vault_root is None and CONFIGURATION.default_vault:
            vault_root = CONFIGURATION.resolve_root(None)
        return update_note_content(
            input.absolute_path,
            input.relative_path,
            vault_root,
            input.new_body,
        )
    except VaultError as exc:
        logger.warning("Failed to update note (%s, %s): %s", input.absolute_path, input.relative_path, exc)
        return {"status": "error", "error": f"Failed to update note: {exc}"}
