"""Resolution of note references to filesystem locations."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from markdown_vault.errors import InvalidInputError, NoteNotFoundError

PathLike = Union[str, Path]


def resolve_note_path(
    absolute_path: Optional[PathLike] = None,
    relative_path: Optional[PathLike] = None,
    vault_root: Optional[PathLike] = None,
) -> Path:
    """Resolve a note reference to an existing file.

    An existing ``absolute_path`` always wins. Otherwise ``relative_path`` is
    joined onto ``vault_root``. No ``..`` normalization happens beyond the join.

    Args:
        absolute_path: Optional absolute location of the note.
        relative_path: Optional path of the note relative to ``vault_root``.
        vault_root: Vault directory; required whenever ``relative_path`` is used.

    Returns:
        The :class:`Path` of the note.

    Raises:
        InvalidInputError: If ``relative_path`` is needed but ``vault_root`` is missing.
        NoteNotFoundError: If neither reference points at an existing path.
    """
    if absolute_path:
        candidate = Path(absolute_path)
        if candidate.exists():
            return candidate

    if relative_path:
        if not vault_root:
            raise InvalidInputError("Vault directory must be provided with relative path")
        candidate = Path(vault_root) / relative_path
        if candidate.exists():
            return candidate

    raise NoteNotFoundError("Note file not found or invalid path provided")


def relative_note_path(path: PathLike, vault_root: PathLike) -> Optional[str]:
    """Return ``path`` relative to ``vault_root`` with forward slashes.

    Returns ``None`` when ``path`` does not live under ``vault_root``.
    """
    try:
        return Path(path).relative_to(Path(vault_root)).as_posix()
    except ValueError:
        return None
