"""Pydantic input models for backlink discovery."""

from __future__ import annotations

from .base import BaseNoteInput


class GetBacklinksInput(BaseNoteInput):
    """Input model for get_vault_note_backlinks tool.

    Finds every other note that links to ``relative_path`` with ``[[...]]`` or
    ``[[...|alias]]``, under any of its spellings (full path, without ``.md``,
    bare filename, bare filename without ``.md``).

    Examples:
        >>> GetBacklinksInput(relative_path="Projects/Plan.md")
        >>> GetBacklinksInput(relative_path="Inbox.md", vault_root="/home/me/Notes")
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"relative_path": "Projects/Plan.md", "vault_root": None},
                {"relative_path": "Inbox.md", "vault_root": "/home/me/Notes"},
            ]
        }
