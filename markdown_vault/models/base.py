"""Base Pydantic models for MCP tool input validation.

This module defines base models that provide common validation patterns
for vault and note operations. Other input models inherit from these bases.

Base Models:
- BaseVaultInput: Optional vault root shared by every tool
- BaseNoteInput: Adds the note's vault-relative path
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, field_validator


def clean_relative_path(value: str) -> str:
    """Validate a vault-relative note path.

    Enforces:
    - Non-empty path
    - Relative path only (no leading '/')
    - Forward slashes as folder separators

    Raises:
        ValueError: If the path is empty or absolute
    """
    cleaned = value.strip().replace("\\", "/")

    if not cleaned:
        raise ValueError(
            "Relative path cannot be empty. "
            "Provide the note path inside the vault, e.g. 'Projects/Plan.md'."
        )

    if cleaned.startswith("/"):
        raise ValueError(
            "Relative path must be relative to the vault root. "
            "Do not start with '/'. "
            f"Invalid path: '{cleaned}'"
        )

    return cleaned


class BaseVaultInput(BaseModel):
    """Base model for operations scoped to a vault directory."""

    vault_root: Optional[str] = Field(
        None,
        description=(
            "Vault directory on disk (omit to use the default vault from vaults.yaml). "
            "Examples: '/home/me/Notes', '~/Documents/Vault'."
        ),
    )

    @field_validator('vault_root')
    @classmethod
    def validate_vault_root(cls, v: Optional[str]) -> Optional[str]:
        """Validate the vault directory string.

        Args:
            v: The vault directory to validate

        Returns:
            The stripped vault directory or None

        Raises:
            ValueError: If the vault directory is an empty string
        """
        if v is not None and not v.strip():
            raise ValueError(
                "Vault directory cannot be empty. "
                "Either omit vault_root to use the default vault, "
                "or provide the path of an existing vault directory."
            )

        return v.strip() if v else None


class BaseNoteInput(BaseVaultInput):
    """Base model for operations on a single note.

    All note-related input models should inherit from this class.
    """

    relative_path: str = Field(
        min_length=1,
        description=(
            "Note path relative to the vault root, including the .md extension. "
            "Examples: 'Inbox.md', 'Projects/Plan.md'. "
            "Forward slashes for folders, case-sensitive."
        ),
        examples=["Inbox.md", "Projects/Plan.md"]
    )

    @field_validator('relative_path')
    @classmethod
    def validate_relative_path(cls, v: str) -> str:
        """Validate the note path; see :func:`clean_relative_path`."""
        return clean_relative_path(v)
