"""Pydantic input models for MCP tool validation.

Each model represents the input schema for one tool, with field-level
validation and descriptive error messages. Core operations assume their
arguments have already passed through these models when called from a tool.

Architecture:
- base: Base models (BaseVaultInput, BaseNoteInput) for common validation
- note_models: Input models for note listing, reading and updating
- backlink_models: Input model for backlink discovery

Usage:
    from markdown_vault.models import GetNoteContentInput, GetBacklinksInput
"""

from .base import BaseNoteInput, BaseVaultInput
from .note_models import (
    ListNotesInput,
    GetNoteContentInput,
    GetNoteTitleInput,
    GetNoteFrontmatterInput,
    UpdateNoteContentInput,
)
from .backlink_models import GetBacklinksInput

__all__ = [
    # Base models
    "BaseVaultInput",
    "BaseNoteInput",
    # Note models
    "ListNotesInput",
    "GetNoteContentInput",
    "GetNoteTitleInput",
    "GetNoteFrontmatterInput",
    "UpdateNoteContentInput",
    # Backlink models
    "GetBacklinksInput",
]
