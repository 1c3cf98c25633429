"""Backlink discovery: which notes link to a given note.

Two interchangeable strategies implement :class:`LinkSearchStrategy`:

- :class:`RipgrepSearch` runs ``rg`` once per link variant and only reads the
  files it reports. Fast on large vaults, but needs the binary on ``PATH``.
- :class:`ScanSearch` reads every note and matches in-process. Always
  available, cost grows with notes x patterns x content length.

:func:`find_backlinks` tries them in order. A strategy that raises
:class:`SearchToolUnavailable` hands over to the next one; a strategy that
runs and finds nothing is a valid, empty answer. For a fixed vault snapshot
both strategies return the same backlinks.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Optional, Protocol, Sequence, runtime_checkable

from markdown_vault import config
from markdown_vault.constants import (
    DEFAULT_SEARCH_EXECUTABLE,
    DEFAULT_SEARCH_TIMEOUT_SECONDS,
    MARKDOWN_GLOB,
    MARKDOWN_SUFFIX,
)
from markdown_vault.core.note_operations import get_title
from markdown_vault.core.path_operations import PathLike, relative_note_path
from markdown_vault.core.vault_operations import ensure_vault_ready, scan_vault
from markdown_vault.data_models import Backlink, BacklinkResult, SearchSettings
from markdown_vault.errors import InvalidInputError, SearchToolUnavailable

logger = logging.getLogger(__name__)

# Characters escaped by both Python ``re`` and ripgrep's regex engine.
_REGEX_METACHARACTERS = frozenset("\\.+*?()|[]{}^$#&-~")

# ripgrep exit codes
_RG_MATCHES = 0
_RG_NO_MATCHES = 1


# ==============================================================================
# LINK VARIANTS AND PATTERNS
# ==============================================================================


def escape_link_text(text: str) -> str:
    """Escape ``text`` so both Python and ripgrep match it literally."""
    return "".join(f"\\{char}" if char in _REGEX_METACHARACTERS else char for char in text)


def link_variants(relative_path: str) -> list[str]:
    """Return the spellings under which a note may be linked.

    In order: the relative path, the path without ``.md``, the last path
    segment and the last segment without ``.md``. The last two only apply to
    paths containing ``/``. Empty and repeated variants are dropped.

    Examples:
        >>> link_variants("folder/B.md")
        ['folder/B.md', 'folder/B', 'B.md', 'B']
        >>> link_variants("B.md")
        ['B.md', 'B']
    """
    candidates = [relative_path]
    if relative_path.endswith(MARKDOWN_SUFFIX):
        candidates.append(relative_path[: -len(MARKDOWN_SUFFIX)])
    if "/" in relative_path:
        filename = relative_path.rsplit("/", 1)[-1]
        candidates.append(filename)
        if relative_path.endswith(MARKDOWN_SUFFIX):
            candidates.append(filename[: -len(MARKDOWN_SUFFIX)])

    variants: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants


def link_pattern(variant: str) -> str:
    """ripgrep pattern for ``[[variant]]`` or ``[[variant | alias]]``.

    Whitespace and alias text are matched byte by byte (``(?-u:...)``), the way
    Python bytes patterns match them, so invalid UTF-8 in an alias counts.
    """
    return rf"\[\[{escape_link_text(variant)}(?:(?-u:\s)*\|(?-u:[^\]])*)?\]\]"


def exact_link_pattern(variant: str) -> str:
    """Pattern for ``[[variant]]``."""
    return rf"\[\[{escape_link_text(variant)}\]\]"


def alias_link_pattern(variant: str) -> str:
    """Pattern for ``[[variant|alias]]``, whitespace allowed before the pipe."""
    return rf"\[\[{escape_link_text(variant)}\s*\|[^\]]*\]\]"


def _compile_patterns(variants: Sequence[str]) -> list[re.Pattern[bytes]]:
    """Compile the exact and alias patterns of every variant as bytes patterns."""
    compiled: list[re.Pattern[bytes]] = []
    for variant in variants:
        for pattern in (exact_link_pattern(variant), alias_link_pattern(variant)):
            try:
                compiled.append(re.compile(pattern.encode("utf-8")))
            except re.error:
                continue
    return compiled


def _normalize_relative(relative_path: str) -> str:
    return Path(relative_path).as_posix()


def _deduplicate(backlinks: list[Backlink]) -> list[Backlink]:
    """Sort by relative path and keep the first entry of each path."""
    unique: list[Backlink] = []
    for backlink in sorted(backlinks, key=lambda item: item.relative_path):
        if unique and unique[-1].relative_path == backlink.relative_path:
            continue
        unique.append(backlink)
    return unique


# ==============================================================================
# SEARCH STRATEGIES
# ==============================================================================


@runtime_checkable
class LinkSearchStrategy(Protocol):
    """Finds notes whose text contains a link to one of ``variants``."""

    name: str

    def search(
        self,
        variants: Sequence[str],
        target_relative_path: str,
        vault_root: PathLike,
    ) -> BacklinkResult:
        ...


class RipgrepSearch:
    """Backlink search delegated to ripgrep, one invocation per variant."""

    name = "ripgrep"

    def __init__(
        self,
        executable: str = DEFAULT_SEARCH_EXECUTABLE,
        timeout_seconds: float = DEFAULT_SEARCH_TIMEOUT_SECONDS,
    ) -> None:
        self.executable = executable
        self.timeout_seconds = timeout_seconds

    def _command(self, pattern: str, vault_root: PathLike) -> list[str]:
        return [
            self.executable,
            "--files-with-matches",
            "--null",
            "--no-messages",
            "--no-config",
            "--multiline",
            "--hidden",
            "--no-ignore",
            "--follow",
            "--case-sensitive",
            "--text",
            "--encoding",
            "none",
            "--glob",
            MARKDOWN_GLOB,
            "-e",
            pattern,
            "--",
            str(vault_root),
        ]

    def matching_files(self, pattern: str, vault_root: PathLike) -> list[Path]:
        """Return the files under ``vault_root`` containing ``pattern``.

        Raises:
            SearchToolUnavailable: If ripgrep cannot be started or times out.
        """
        try:
            completed = subprocess.run(
                self._command(pattern, vault_root),
                capture_output=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise SearchToolUnavailable(
                f"{self.executable} did not finish within {self.timeout_seconds}s"
            ) from exc
        except OSError as exc:
            raise SearchToolUnavailable(f"{self.executable} could not be started: {exc}") from exc

        if completed.returncode == _RG_NO_MATCHES:
            return []
        if completed.returncode != _RG_MATCHES:
            # Exit 2 also covers "matched, but some files were unreadable".
            logger.warning(
                "%s exited with code %s for pattern '%s': %s",
                self.executable,
                completed.returncode,
                pattern,
                completed.stderr.decode("utf-8", errors="replace").strip(),
            )

        paths = [Path(os.fsdecode(raw)) for raw in completed.stdout.split(b"\0") if raw.strip()]
        # The glob also matches a file named just ".md", which is not a note.
        return [path for path in paths if path.suffix == MARKDOWN_SUFFIX]

    def search(
        self,
        variants: Sequence[str],
        target_relative_path: str,
        vault_root: PathLike,
    ) -> BacklinkResult:
        target = _normalize_relative(target_relative_path)
        result = BacklinkResult(strategy=self.name)
        backlinks: list[Backlink] = []

        for variant in variants:
            pattern = link_pattern(variant)
            logger.debug("Searching with %s pattern '%s'", self.executable, pattern)

            for file_path in self.matching_files(pattern, vault_root):
                if not file_path.exists():
                    result.skipped += 1
                    continue
                relative = relative_note_path(file_path, vault_root)
                if relative is None:
                    result.skipped += 1
                    continue
                if relative == target:
                    continue
                backlinks.append(Backlink(relative, get_title(file_path, relative, vault_root)))

        result.backlinks = _deduplicate(backlinks)
        return result


class ScanSearch:
    """Backlink search that reads every note in the vault."""

    name = "scan"

    def search(
        self,
        variants: Sequence[str],
        target_relative_path: str,
        vault_root: PathLike,
    ) -> BacklinkResult:
        target = _normalize_relative(target_relative_path)
        patterns = _compile_patterns(variants)
        scan = scan_vault(vault_root)
        result = BacklinkResult(strategy=self.name, skipped=scan.skipped)
        logger.debug("Scanning %d notes with %d patterns", len(scan.notes), len(patterns))

        backlinks: list[Backlink] = []
        for absolute_path, relative_path in scan.notes:
            if relative_path == target:
                continue

            try:
                content = Path(absolute_path).read_bytes()
            except OSError as exc:
                logger.debug("Skipping unreadable note '%s': %s", absolute_path, exc)
                result.skipped += 1
                continue

            if any(pattern.search(content) for pattern in patterns):
                backlinks.append(
                    Backlink(relative_path, get_title(absolute_path, relative_path, vault_root))
                )

        result.backlinks = _deduplicate(backlinks)
        return result


def default_strategies(settings: Optional[SearchSettings] = None) -> list[LinkSearchStrategy]:
    """Strategies in preference order for the given search settings."""
    if settings is None:
        settings = config.CONFIGURATION.search

    strategies: list[LinkSearchStrategy] = []
    if settings.enabled:
        strategies.append(RipgrepSearch(settings.executable, settings.timeout_seconds))
    strategies.append(ScanSearch())
    return strategies


# ==============================================================================
# BACKLINK OPERATIONS
# ==============================================================================


def find_backlinks(
    target_relative_path: str,
    vault_root: PathLike,
    *,
    strategies: Optional[Sequence[LinkSearchStrategy]] = None,
    settings: Optional[SearchSettings] = None,
) -> BacklinkResult:
    """Find every other note that links to ``target_relative_path``.

    Args:
        target_relative_path: Path of the target note relative to ``vault_root``.
        vault_root: Vault directory.
        strategies: Search strategies in preference order. Defaults to ripgrep
            (when enabled) followed by the in-process scan.
        settings: Search tool settings used to build the default strategies;
            the loaded configuration when omitted.

    Returns:
        A :class:`BacklinkResult` sorted by relative path, never containing the
        target itself.
    """
    variants = link_variants(target_relative_path)
    logger.debug("Link variants for '%s': %s", target_relative_path, variants)

    if strategies is None:
        strategies = default_strategies(settings)

    for strategy in strategies:
        try:
            result = strategy.search(variants, target_relative_path, vault_root)
        except SearchToolUnavailable as exc:
            logger.info("Backlink strategy '%s' unavailable, falling back: %s", strategy.name, exc)
            continue

        logger.info(
            "Found %d backlinks to '%s' using %s",
            len(result.backlinks),
            target_relative_path,
            strategy.name,
        )
        return result

    logger.warning("No backlink strategy could run for '%s'", target_relative_path)
    return BacklinkResult()


def get_backlinks(relative_path: str, vault_root: PathLike) -> list[dict[str, str]]:
    """Return ``{"title", "relative_path"}`` for every note linking to ``relative_path``.

    Raises:
        InvalidInputError: If ``relative_path`` or ``vault_root`` is empty, or the
            vault directory does not exist. Nothing is scanned in that case.
    """
    if not relative_path or not relative_path.strip():
        raise InvalidInputError("Relative path is empty")
    ensure_vault_ready(vault_root)

    return find_backlinks(relative_path, vault_root).as_payload()
