"""Pydantic input models for note operations.

This module defines input models for:
- Listing notes
- Reading note content, title and frontmatter
- Updating note content
"""

from __future__ import annotations

from typing import Optional
from pydantic import Field, field_validator, model_validator

from .base import BaseNoteInput, BaseVaultInput, clean_relative_path


class ListNotesInput(BaseVaultInput):
    """Input model for list_vault_notes tool.

    Examples:
        >>> ListNotesInput()
        >>> ListNotesInput(vault_root="/home/me/Notes")
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault_root": None},
                {"vault_root": "/home/me/Notes"},
            ]
        }


class GetNoteContentInput(BaseNoteInput):
    """Input model for get_vault_note_content tool.

    Returns the note body with the frontmatter block removed.
    """


class GetNoteTitleInput(BaseNoteInput):
    """Input model for get_vault_note_title tool."""


class GetNoteFrontmatterInput(BaseNoteInput):
    """Input model for get_vault_note_frontmatter tool."""


class UpdateNoteContentInput(BaseVaultInput):
    """Input model for update_vault_note_content tool.

    The note is addressed by ``absolute_path``, by ``relative_path`` inside the
    vault, or both (an existing absolute path wins).

    Examples:
        >>> UpdateNoteContentInput(relative_path="Inbox.md", new_body="# Inbox")
        >>> UpdateNoteContentInput(absolute_path="/home/me/Notes/Inbox.md", new_body="")
    """

    absolute_path: Optional[str] = Field(
        None,
        description="Absolute filesystem path of the note.",
    )

    relative_path: Optional[str] = Field(
        None,
        description="Note path relative to the vault root, including the .md extension.",
    )

    new_body: str = Field(
        description=(
            "Replacement markdown body. The existing frontmatter block is kept; "
            "can be an empty string."
        )
    )

    @field_validator('absolute_path')
    @classmethod
    def validate_absolute_path(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Absolute path cannot be empty. Omit it to address the note by relative_path.")
        return cleaned

    @field_validator('relative_path')
    @classmethod
    def validate_relative_path(cls, v: Optional[str]) -> Optional[str]:
        return clean_relative_path(v) if v is not None else None

    @model_validator(mode='after')
    def require_note_reference(self) -> "UpdateNoteContentInput":
        """Ensure at least one way of locating the note was supplied."""
        if self.absolute_path is None and self.relative_path is None:
            raise ValueError(
                "Provide absolute_path, relative_path, or both to identify the note to update."
            )
        return self

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "relative_path": "Projects/Plan.md",
                    "new_body": "# Plan\n\n- [ ] Ship it",
                    "vault_root": None
                },
                {
                    "absolute_path": "/home/me/Notes/Inbox.md",
                    "new_body": "",
                }
            ]
        }
