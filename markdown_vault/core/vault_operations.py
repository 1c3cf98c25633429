"""Core vault operations: validation and markdown file discovery."""

from __future__ import annotations

import logging
from pathlib import Path

from markdown_vault.constants import MARKDOWN_SUFFIX
from markdown_vault.core.path_operations import PathLike, relative_note_path
from markdown_vault.data_models import ScanResult
from markdown_vault.errors import InvalidInputError

logger = logging.getLogger(__name__)


def ensure_vault_ready(vault_root: PathLike) -> Path:
    """Ensure the vault directory is usable before running an operation.

    Args:
        vault_root: Vault directory supplied by the caller.

    Returns:
        ``vault_root`` as a :class:`Path`.

    Raises:
        InvalidInputError: If ``vault_root`` is empty or does not exist.
    """
    if not vault_root or not str(vault_root).strip():
        raise InvalidInputError("Vault directory is empty")

    root = Path(vault_root)
    if not root.exists():
        raise InvalidInputError(f"Vault directory does not exist: {vault_root}")
    return root


def _canonical_path(path: Path) -> str:
    try:
        return str(path.resolve(strict=True))
    except (OSError, RuntimeError):
        return str(path)


def _collect_markdown_files(base_dir: Path, current_dir: Path, result: ScanResult, ancestors: set[str]) -> None:
    """Append every ``.md`` file below ``current_dir`` to ``result``.

    A directory that cannot be listed is counted in ``result.skipped`` and left
    out; whatever was collected before the failure stays in ``result.notes``.
    A symlink leading back into one of its own ancestors is not followed.
    """
    canonical_dir = _canonical_path(current_dir)
    if canonical_dir in ancestors:
        logger.debug("Skipping directory cycle at '%s'", current_dir)
        return
    ancestors.add(canonical_dir)

    try:
        entries = sorted(current_dir.iterdir(), key=lambda entry: entry.name)
        for path in entries:
            if path.is_dir():
                _collect_markdown_files(base_dir, path, result, ancestors)
            elif path.is_file() and path.suffix == MARKDOWN_SUFFIX:
                relative = relative_note_path(path, base_dir) or path.name
                result.notes.append((_canonical_path(path), relative))
    except OSError as exc:
        result.skipped += 1
        logger.warning("Could not scan directory '%s': %s", current_dir, exc)
    finally:
        ancestors.discard(canonical_dir)


def scan_vault(vault_root: PathLike) -> ScanResult:
    """Recursively find every markdown note under ``vault_root``.

    Only files whose extension is exactly ``md`` are included. Every
    subdirectory is visited, symlinked ones included. Traversal errors never
    propagate; they are counted in :attr:`ScanResult.skipped`.

    Args:
        vault_root: Vault directory.

    Returns:
        A :class:`ScanResult` of ``(absolute_path, relative_path)`` pairs, empty when
        ``vault_root`` is missing or not a directory.
    """
    root = Path(vault_root)
    result = ScanResult()
    if not root.is_dir():
        return result

    _collect_markdown_files(root, root, result, set())
    if result.degraded:
        logger.warning(
            "Vault scan of '%s' is incomplete: %d directories could not be read",
            root,
            result.skipped,
        )
    return result


def get_all_notes(vault_root: PathLike) -> list[tuple[str, str]]:
    """Return ``(absolute_path, relative_path)`` pairs for every note in the vault."""
    return scan_vault(vault_root).notes
