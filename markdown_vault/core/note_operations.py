"""Core business logic for reading and updating notes."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Optional

from markdown_vault.core.frontmatter_operations import (
    parse_frontmatter,
    render_frontmatter,
    split_frontmatter,
)
from markdown_vault.core.path_operations import PathLike, resolve_note_path
from markdown_vault.core.vault_operations import scan_vault
from markdown_vault.data_models import FrontmatterValue, NoteEntry
from markdown_vault.errors import NoteIOError, VaultError

logger = logging.getLogger(__name__)


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def read_note_text(path: Path) -> str:
    """Read a note exactly as stored (UTF-8, line endings untouched).

    Raises:
        OSError: If the file cannot be opened or read.
        UnicodeDecodeError: If the file is not UTF-8 encoded.
    """
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


def _write_note_text(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` via a temporary file in the same directory.

    A symlinked note is written through the link: the file it points to is
    replaced and the link stays in place.
    """
    path = path.resolve()
    tmp = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    tmp_path = Path(tmp.name)
    try:
        with tmp:
            tmp.write(text)
        shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except (OSError, UnicodeEncodeError):
        tmp_path.unlink(missing_ok=True)
        raise


def _load_frontmatter(path: Path) -> Optional[FrontmatterValue]:
    """Return the parsed frontmatter of ``path``, ``None`` when absent or unreadable."""
    try:
        text = read_note_text(path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Could not read note '%s': %s", path, exc)
        return None

    frontmatter_text, _ = split_frontmatter(text)
    if frontmatter_text is None:
        return None
    return parse_frontmatter(frontmatter_text)


# ==============================================================================
# NOTE ACCESSORS
# ==============================================================================


def get_frontmatter(
    absolute_path: Optional[PathLike] = None,
    relative_path: Optional[PathLike] = None,
    vault_root: Optional[PathLike] = None,
) -> Optional[FrontmatterValue]:
    """Return a note's parsed frontmatter.

    Returns:
        The structured frontmatter, ``{}`` when the block is not valid YAML, or
        ``None`` when the note has no frontmatter or cannot be resolved or read.
    """
    try:
        path = resolve_note_path(absolute_path, relative_path, vault_root)
    except VaultError:
        return None
    return _load_frontmatter(path)


def get_title(
    absolute_path: Optional[PathLike] = None,
    relative_path: Optional[PathLike] = None,
    vault_root: Optional[PathLike] = None,
) -> str:
    """Return the frontmatter ``title`` when it is a string, else the filename stem.

    Never raises: an unresolvable note has the empty string as its title.
    """
    try:
        path = resolve_note_path(absolute_path, relative_path, vault_root)
    except VaultError:
        return ""

    metadata = _load_frontmatter(path)
    if isinstance(metadata, dict):
        title = metadata.get("title")
        if isinstance(title, str):
            return title
    return path.stem


def get_content(
    absolute_path: Optional[PathLike] = None,
    relative_path: Optional[PathLike] = None,
    vault_root: Optional[PathLike] = None,
) -> str:
    """Return a note's body with the frontmatter block stripped.

    Never raises: an unresolvable or unreadable note has an empty body.
    """
    try:
        path = resolve_note_path(absolute_path, relative_path, vault_root)
        text = read_note_text(path)
    except (VaultError, OSError, UnicodeDecodeError) as exc:
        logger.debug("No content for note (%s, %s): %s", absolute_path, relative_path, exc)
        return ""

    _, body = split_frontmatter(text)
    return body


def update_note(
    absolute_path: Optional[PathLike] = None,
    relative_path: Optional[PathLike] = None,
    vault_root: Optional[PathLike] = None,
    new_body: str = "",
) -> Path:
    """Replace a note's body while carrying over its frontmatter block unchanged.

    ``new_body`` is written as-is; a ``---`` inside it is never treated as a
    frontmatter delimiter. Notes without frontmatter simply become ``new_body``.

    Args:
        absolute_path: Optional absolute location of the note.
        relative_path: Optional path relative to ``vault_root``.
        vault_root: Vault directory, required with ``relative_path``.
        new_body: Replacement markdown body.

    Returns:
        The path that was written.

    Raises:
        InvalidInputError: If ``relative_path`` is given without ``vault_root``.
        NoteNotFoundError: If the note cannot be resolved.
        NoteIOError: If the note cannot be read or written.
    """
    path = resolve_note_path(absolute_path, relative_path, vault_root)

    try:
        current = read_note_text(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise NoteIOError(f"Failed to read note '{path}': {exc}") from exc

    frontmatter_text, _ = split_frontmatter(current)
    updated = render_frontmatter(frontmatter_text, new_body)

    try:
        _write_note_text(path, updated)
    except (OSError, UnicodeEncodeError) as exc:
        raise NoteIOError(f"Failed to update note '{path}': {exc}") from exc

    logger.info(
        "Updated note '%s' (frontmatter preserved=%s)",
        path,
        frontmatter_text is not None,
    )
    return path


# ==============================================================================
# NOTE OPERATIONS
# ==============================================================================


def list_notes(vault_root: PathLike) -> list[dict[str, str]]:
    """List every note in the vault with its title.

    Args:
        vault_root: Vault directory.

    Returns:
        ``{"title", "absolute_path", "relative_path"}`` entries in scan order; empty
        when the vault does not exist.
    """
    entries: list[dict[str, str]] = []
    for absolute_path, relative_path in scan_vault(vault_root).notes:
        title = get_title(absolute_path, relative_path, vault_root)
        entries.append(NoteEntry(title, absolute_path, relative_path).as_payload())
    return entries


def get_note_content(relative_path: str, vault_root: PathLike) -> str:
    """Return the body of the note at ``relative_path`` (frontmatter stripped)."""
    return get_content(None, relative_path, vault_root)


def get_note_title(relative_path: str, vault_root: PathLike) -> str:
    """Return the title of the note at ``relative_path``."""
    return get_title(None, relative_path, vault_root)


def get_note_frontmatter(relative_path: str, vault_root: PathLike) -> Optional[FrontmatterValue]:
    """Return the parsed frontmatter of the note at ``relative_path``."""
    return get_frontmatter(None, relative_path, vault_root)


def update_note_content(
    absolute_path: Optional[str],
    relative_path: Optional[str],
    vault_root: Optional[PathLike],
    new_body: str,
) -> dict[str, Any]:
    """Replace a note's body, preserving its frontmatter.

    Returns:
        ``{"path": str, "status": "updated"}``.

    Raises:
        VaultError: ``InvalidInputError``, ``NoteNotFoundError`` or ``NoteIOError``
            describing why the update failed.
    """
    path = update_note(absolute_path, relative_path, vault_root, new_body)
    return {"path": str(path), "status": "updated"}
